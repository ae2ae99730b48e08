"""
Dependency injection container

Constructs the objects bound to screen action parameters and the screens
themselves, autowiring constructor dependencies by annotation. A request
scope is a child container holding request specific instances; lookups fall
back to the parent's registrations.
"""

import asyncio
import inspect
import logging
import typing
from typing import Dict, Type, TypeVar, Callable, Any, Optional

from exceptions import BindingFailureException

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DIContainer:
    """Dependency injection container"""

    def __init__(self, parent: Optional['DIContainer'] = None):
        self._parent = parent
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._interfaces: Dict[Type, Type] = {}

    @staticmethod
    def _key(interface: Type) -> str:
        return f"{interface.__module__}.{interface.__qualname__}"

    def register_singleton(self, interface: Type[T], implementation: Type[T]) -> None:
        """Register a lazily created shared implementation"""
        self._interfaces[interface] = implementation

    def register_transient(self, interface: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory invoked on every resolve"""
        self._factories[self._key(interface)] = factory

    def register_instance(self, interface: Type[T], instance: T) -> None:
        """Register a ready-made instance"""
        self._services[self._key(interface)] = instance

    def create_scope(self) -> 'DIContainer':
        """Child container for one request"""
        return DIContainer(parent=self)

    def _owns(self, interface: Type) -> bool:
        key = self._key(interface)
        return key in self._services or interface in self._interfaces or key in self._factories

    def _owner(self, interface: Type) -> Optional['DIContainer']:
        container = self
        while container is not None:
            if container._owns(interface):
                return container
            container = container._parent
        return None

    def has(self, interface: Type) -> bool:
        return self._owner(interface) is not None

    async def resolve(self, interface: Type[T]) -> T:
        """Resolve an instance of ``interface``

        Registered instances, singletons and factories win; any other
        concrete class is constructed with its dependencies autowired.

        Raises:
            BindingFailureException: the type cannot be constructed
        """
        owner = self._owner(interface)
        if owner is not None:
            return await owner._resolve_registered(interface)

        if inspect.isclass(interface) and not inspect.isabstract(interface):
            return await self._create_instance(interface)

        raise BindingFailureException(
            getattr(interface, '__qualname__', repr(interface)), "no registration found"
        )

    async def _resolve_registered(self, interface: Type[T]) -> T:
        key = self._key(interface)

        if key in self._services:
            return self._services[key]

        if interface in self._interfaces:
            if key in self._singletons:
                return self._singletons[key]

            implementation = self._interfaces[interface]
            instance = await self._create_instance(implementation)
            self._singletons[key] = instance
            return instance

        return await self._call_factory(interface, self._factories[key])

    async def _create_instance(self, cls: Type[T]) -> T:
        """Create an instance, injecting annotated constructor dependencies"""
        try:
            hints = typing.get_type_hints(cls.__init__)
        except Exception:
            hints = {}

        sig = inspect.signature(cls.__init__)
        kwargs = {}

        for param_name, param in sig.parameters.items():
            if param_name == 'self':
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            annotation = hints.get(param_name, param.annotation)
            if inspect.isclass(annotation) and annotation is not inspect.Parameter.empty:
                if param.default is not inspect.Parameter.empty and not self.has(annotation):
                    continue
                kwargs[param_name] = await self.resolve(annotation)
            elif param.default is inspect.Parameter.empty:
                raise BindingFailureException(
                    cls.__qualname__,
                    f"cannot autowire constructor argument '{param_name}'",
                    parameter=param_name
                )

        try:
            return cls(**kwargs)
        except Exception as e:
            logger.error(f"Failed to construct {cls.__qualname__}: {e}")
            raise BindingFailureException(cls.__qualname__, str(e)) from e

    async def _call_factory(self, interface: Type, factory: Callable) -> Any:
        """Invoke a factory"""
        try:
            if asyncio.iscoroutinefunction(factory):
                return await factory()
            return factory()
        except Exception as e:
            logger.error(f"Factory for {interface.__qualname__} failed: {e}")
            raise BindingFailureException(interface.__qualname__, str(e)) from e


class DIServiceRegistry:
    """Registers the services every screen application needs"""

    @staticmethod
    async def register_core_services(container: DIContainer, config, auth_service=None):
        """Register core services"""

        container.register_instance(type(config), config)

        if auth_service is not None:
            container.register_instance(type(auth_service), auth_service)

        logger.info("Core services registered successfully")


async def setup_container(config, auth_service=None) -> DIContainer:
    """Build the application container"""
    container = DIContainer()
    await DIServiceRegistry.register_core_services(container, config, auth_service)
    return container
