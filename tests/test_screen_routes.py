"""
HTTP level screen tests

Runs the application with the example user screens.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import test_utils

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app
from pages import SCREENS, register_services
from pages.users import UserStore
from routes.screens import parse_template


@pytest.fixture
def store():
    return UserStore.demo()


@pytest_asyncio.fixture
async def client(test_config, store):
    app = await create_app(test_config, SCREENS)
    register_services(app['container'], store)

    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        yield client


@pytest.fixture
def headers(auth_service):
    def factory(*permissions):
        token = auth_service.issue_access_token('1', 'admin', permissions)
        return {'Authorization': f'Bearer {token}'}
    return factory


class TestParseTemplate:
    """Route template tests"""

    def test_method_selector_is_appended(self):
        assert parse_template('/users') == ('/users', '/users/{method}', ['method'])

    def test_explicit_selector(self):
        assert parse_template('/users/{user}/{method?}') == (
            '/users/{user}', '/users/{user}/{method}', ['user', 'method']
        )

    def test_selector_must_be_last(self):
        with pytest.raises(ValueError):
            parse_template('/users/{method?}/{user}')


class TestListScreen:
    """User list screen over HTTP"""

    @pytest.mark.asyncio
    async def test_anonymous_is_forbidden(self, client):
        response = await client.get('/dashboard/users')

        assert response.status == 403
        body = await response.json()
        assert body['success'] is False
        assert body['error_code'] == 'NOT_AUTHORIZED'
        assert 'request_id' in body

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get('/dashboard/users', headers={'Authorization': 'Bearer nope'})

        assert response.status == 401

    @pytest.mark.asyncio
    async def test_view(self, client, headers):
        response = await client.get('/dashboard/users', headers=headers('platform.systems.users'))

        assert response.status == 200
        data = (await response.json())['data']
        assert data['screen'] == 'UserListScreen'
        assert [item['name'] for item in data['command_bar']] == ['Remove all guests']
        table = data['layout']['children'][0]['children'][0]
        assert table['slug'] == 'user-list-table'
        assert table['async'] == {'method': 'async_users', 'slug': 'user-list-table'}
        assert [row['name'] for row in table['rows']] == ['Admin', 'Alice', 'Bob']

    @pytest.mark.asyncio
    async def test_extra_segment_redirects(self, client, headers):
        response = await client.get(
            '/dashboard/users/stale', headers=headers('platform.systems.users'), allow_redirects=False
        )

        assert response.status == 302
        assert response.headers['Location'] == '/dashboard/users'

    @pytest.mark.asyncio
    async def test_post_action(self, client, headers, store):
        response = await client.post('/dashboard/users/remove_guests', headers=headers('platform.systems.users'))

        assert response.status == 200
        assert (await response.json())['data'] == {'removed': ['2', '3']}
        assert [user.id for user in store.all()] == ['1']

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ['query', 'missing'])
    async def test_post_unknown_action(self, client, headers, method):
        response = await client.post(f'/dashboard/users/{method}', headers=headers('platform.systems.users'))

        assert response.status == 404
        body = await response.json()
        assert body['error_code'] == 'ACTION_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_async_fragment(self, client, headers):
        response = await client.post(
            '/dashboard/users/async/async_users/user-list-table',
            json={'search': 'ali'},
            headers=headers('platform.systems.users'),
        )

        assert response.status == 200
        fragment = (await response.json())['data']
        assert fragment['partial'] is True
        assert [row['name'] for row in fragment['rows']] == ['Alice']

    @pytest.mark.asyncio
    async def test_async_fragment_requires_access(self, client):
        response = await client.post('/dashboard/users/async/async_users/user-list-table')

        assert response.status == 403

    @pytest.mark.asyncio
    async def test_async_unknown_slug(self, client, headers):
        response = await client.post(
            '/dashboard/users/async/async_users/unknown', headers=headers('platform.systems.users')
        )

        assert response.status == 404
        assert (await response.json())['error_code'] == 'SLUG_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_async_segment_is_reserved_under_screen_base(self, client, headers):
        response = await client.post('/dashboard/users/async/edit/save', headers=headers('platform.systems.users'))

        assert response.status == 404
        body = await response.json()
        assert body['error_code'] == 'ACTION_NOT_FOUND'
        assert body['details']['screen'] == 'UserListScreen'

    @pytest.mark.asyncio
    async def test_async_unknown_method(self, client, headers):
        response = await client.post(
            '/dashboard/users/async/missing/user-list-table', headers=headers('platform.systems.users')
        )

        assert response.status == 404
        assert (await response.json())['error_code'] == 'ACTION_NOT_FOUND'


class TestEditScreen:
    """User edit screen over HTTP"""

    @pytest.mark.asyncio
    async def test_any_listed_permission_opens_the_screen(self, client, headers):
        response = await client.get('/dashboard/users/2/edit', headers=headers('platform.systems.profile'))

        assert response.status == 200
        data = (await response.json())['data']
        assert data['layout']['children'][0]['fields'][0] == {'name': 'name', 'title': 'Name', 'value': 'Alice'}
        dropdown = data['command_bar'][2]
        assert dropdown['list'] == []

    @pytest.mark.asyncio
    async def test_extra_segment_redirects_to_user(self, client, headers):
        response = await client.get(
            '/dashboard/users/2/edit/extra', headers=headers('platform.systems.users'), allow_redirects=False
        )

        assert response.status == 302
        assert response.headers['Location'] == '/dashboard/users/2/edit'

    @pytest.mark.asyncio
    async def test_unknown_user(self, client, headers):
        response = await client.get('/dashboard/users/99/edit', headers=headers('platform.systems.users'))

        assert response.status == 404

    @pytest.mark.asyncio
    async def test_save(self, client, headers, store):
        response = await client.post(
            '/dashboard/users/2/edit/save', json={'name': 'Alicia'}, headers=headers('platform.systems.users')
        )

        assert response.status == 200
        assert (await response.json())['data']['user']['name'] == 'Alicia'
        assert store.find('2').name == 'Alicia'

    @pytest.mark.asyncio
    async def test_remove_redirects_to_list(self, client, headers, store):
        response = await client.post(
            '/dashboard/users/3/edit/remove', headers=headers('platform.systems.users'), allow_redirects=False
        )

        assert response.status == 302
        assert response.headers['Location'] == '/dashboard/users'
        assert store.find('3') is None

    @pytest.mark.asyncio
    async def test_async_fragment_of_user(self, client, headers):
        response = await client.post(
            '/dashboard/users/1/edit/async/async_user/user-details-legend',
            headers=headers('platform.systems.users'),
        )

        assert response.status == 200
        fragment = (await response.json())['data']
        assert fragment['type'] == 'legend'
        assert fragment['fields'][2]['value'] == 'platform.systems.users'
