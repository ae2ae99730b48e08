"""
Screen exception tests
"""

import sys
from pathlib import Path

import pytest
from aiohttp import web

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from exceptions import (
    ActionNotFoundException, BindingFailureException, ConfigurationException, NotAuthorizedException,
    ScreenException, SlugNotFoundException, create_error_response, handle_exception,
)
from routes.screens import setup_screen_routes


@pytest.mark.parametrize("exception,status,code", [
    (NotAuthorizedException('UserListScreen', ['platform.systems.users']), 403, 'NOT_AUTHORIZED'),
    (ActionNotFoundException('UserListScreen', 'missing'), 404, 'ACTION_NOT_FOUND'),
    (SlugNotFoundException('UserListScreen', 'missing-table'), 404, 'SLUG_NOT_FOUND'),
    (BindingFailureException('UserRepository', 'no registration found'), 500, 'BINDING_FAILURE'),
])
def test_status_and_code(exception, status, code):
    assert exception.status == status
    assert exception.error_code == code

    body = create_error_response(exception)
    assert body['success'] is False
    assert body['error_code'] == code
    assert body['error'] == exception.message


def test_not_found_conditions_are_distinguishable():
    action = ActionNotFoundException('S', 'x')
    slug = SlugNotFoundException('S', 'x')

    assert action.status == slug.status
    assert action.error_code != slug.error_code
    assert action.details['method'] == 'x'
    assert slug.details['slug'] == 'x'


def test_handle_exception_masks_secrets():
    wrapped = handle_exception(RuntimeError("login failed: password=hunter2"), 'Auth', {'api_token': 'abc'})

    assert isinstance(wrapped, ScreenException)
    assert 'hunter2' not in wrapped.message
    assert wrapped.details['api_token'] == '***'
    assert wrapped.details['original_exception_type'] == 'RuntimeError'


def test_handle_exception_keeps_screen_exceptions():
    original = SlugNotFoundException('S', 'x')

    assert handle_exception(original) is original


def test_non_screen_route_is_a_configuration_error():
    with pytest.raises(ConfigurationException) as exc_info:
        setup_screen_routes(web.Application(), {'/broken': object})

    assert exc_info.value.config_key == 'screens./broken'
