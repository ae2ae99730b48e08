"""
Dependency injection container tests
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from config import ScreenServiceConfig
from container import DIContainer
from exceptions import BindingFailureException


class Engine:
    pass


class Car:
    def __init__(self, engine: Engine, color: str = 'red'):
        self.engine = engine
        self.color = color


class Named:
    def __init__(self, name):
        self.name = name


class Exploding:
    def __init__(self):
        raise ValueError("boom")


@pytest.mark.asyncio
async def test_autowires_constructor_dependencies():
    car = await DIContainer().resolve(Car)

    assert isinstance(car.engine, Engine)
    assert car.color == 'red'


@pytest.mark.asyncio
async def test_registered_instance_wins():
    container = DIContainer()
    engine = Engine()
    container.register_instance(Engine, engine)

    car = await container.resolve(Car)

    assert car.engine is engine


@pytest.mark.asyncio
async def test_singleton_is_shared():
    container = DIContainer()
    container.register_singleton(Engine, Engine)

    assert await container.resolve(Engine) is await container.resolve(Engine)


@pytest.mark.asyncio
async def test_transient_factory_runs_every_time():
    container = DIContainer()
    created = []

    async def factory():
        created.append(1)
        return Engine()

    container.register_transient(Engine, factory)

    first = await container.resolve(Engine)
    second = await container.resolve(Engine)

    assert first is not second
    assert len(created) == 2


@pytest.mark.asyncio
async def test_scope_falls_back_to_parent():
    root = DIContainer()
    engine = Engine()
    root.register_instance(Engine, engine)

    scope = root.create_scope()
    scope.register_instance(str, 'request scoped')

    assert await scope.resolve(Engine) is engine
    assert await scope.resolve(str) == 'request scoped'
    assert not root.has(str)


@pytest.mark.asyncio
async def test_unannotated_argument_fails():
    with pytest.raises(BindingFailureException) as exc_info:
        await DIContainer().resolve(Named)

    assert exc_info.value.parameter == 'name'


@pytest.mark.asyncio
async def test_constructor_error_is_wrapped():
    with pytest.raises(BindingFailureException, match="boom"):
        await DIContainer().resolve(Exploding)


@pytest.mark.asyncio
async def test_setup_container_registers_config(di_container, test_config):
    assert await di_container.resolve(ScreenServiceConfig) is test_config
