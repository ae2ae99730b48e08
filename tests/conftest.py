"""
Shared fixtures and test configuration
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from auth_service import Principal, TokenAuthService
from config import ScreenServiceConfig
from container import DIContainer, setup_container
from models import RouteState, ScreenContext


@pytest.fixture
def test_config(monkeypatch) -> ScreenServiceConfig:
    """Configuration for tests"""
    for env_var in ('SCREEN_PORT', 'SCREEN_DEBUG', 'SCREEN_ENABLE_CORS', 'SCREEN_AUTH_ISSUER', 'SCREEN_AUTH_SECRET',
                    'SCREEN_URL_PREFIX', 'SCREEN_ASYNC_SEGMENT', 'SCREEN_FORM_VALIDATE_MESSAGE'):
        monkeypatch.delenv(env_var, raising=False)

    config = ScreenServiceConfig(environment="testing")

    config.set("auth.jwt_secret", "unit-test-secret")
    config.set("service.debug", True)
    config.set("service.enable_cors", False)

    return config


@pytest_asyncio.fixture
async def di_container(test_config: ScreenServiceConfig) -> DIContainer:
    """Application container"""
    return await setup_container(test_config)


@pytest.fixture
def auth_service(test_config: ScreenServiceConfig) -> TokenAuthService:
    return TokenAuthService(test_config)


@pytest.fixture
def admin() -> Principal:
    return Principal('1', 'admin', frozenset({'platform.systems.users', 'platform.index'}))


@pytest.fixture
def guest() -> Principal:
    return Principal('2', 'guest', frozenset())


@pytest.fixture
def make_context():
    """Factory of screen contexts"""

    def factory(method: str = 'GET', parameters: Optional[Dict[str, Any]] = None,
                variables: Optional[List[str]] = None, principal: Any = None,
                container: Optional[DIContainer] = None) -> ScreenContext:
        return ScreenContext(
            method=method,
            route=RouteState(parameters or {}, variables if variables is not None else ['method']),
            container=container or DIContainer(),
            principal=principal,
            url_for=lambda arguments: '/screen/' + '/'.join(str(a) for a in arguments),
        )

    return factory


def pytest_configure(config):
    """Register markers"""
    config.addinivalue_line(
        "markers", "unit: unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: HTTP level tests"
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests by location"""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
