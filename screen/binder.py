"""
Parameter binding for screen actions.

Each action carries a static list of ``ParameterDescriptor`` built when the
screen class is defined. At dispatch time the binder turns those descriptors
into positional arguments using the route state and the DI container.
"""

import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from exceptions import BindingFailureException, ConfigurationException, ScreenException
from interfaces import UrlRoutable
from models import RouteState

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, int, float, bool, bytes)
_UNRESOLVED_TYPES = SCALAR_TYPES + (list, tuple, dict, set)
_UNION_TYPES = tuple(t for t in (typing.Union, getattr(types, 'UnionType', None)) if t is not None)


@dataclass(frozen=True)
class ParameterDescriptor:
    """One formal parameter of an action method"""
    name: str
    type: Any = None
    position: int = 0

    @property
    def resolvable(self) -> bool:
        return inspect.isclass(self.type) and not issubclass(self.type, SCALAR_TYPES)


def Param(name: str, type: Any = None) -> ParameterDescriptor:
    """Declare an action parameter; the position is assigned by ``action``"""
    return ParameterDescriptor(name=name, type=type)


class ActionSpec:
    """An invokable screen method and its declared parameters

    Descriptors are built when the screen class is created. An annotation
    naming a class defined later in the module is resolved on first use.
    """

    def __init__(self, name: str, func: Callable,
                 parameters: Optional[Tuple[ParameterDescriptor, ...]] = None):
        self.name = name
        self.func = func
        self._parameters = parameters

    @property
    def parameters(self) -> Tuple[ParameterDescriptor, ...]:
        if self._parameters is None:
            try:
                self._parameters = describe(self.func)
            except NameError as e:
                raise BindingFailureException(
                    self.func.__qualname__, f"unresolvable annotation: {e}"
                ) from e
        return self._parameters

    def __repr__(self) -> str:
        return f"ActionSpec({self.name!r})"


def action(*params: ParameterDescriptor):
    """Declare the parameters of an action explicitly

    Usage::

        @action(Param("user", User), Param("tab"))
        async def save(self, user, tab):
            ...
    """
    def decorator(func):
        func.__screen_parameters__ = tuple(
            ParameterDescriptor(name=p.name, type=p.type, position=i)
            for i, p in enumerate(params)
        )
        return func
    return decorator


def describe(func: Callable) -> Tuple[ParameterDescriptor, ...]:
    """Build the descriptors of a method from its signature

    Raises:
        NameError: an annotation names a class that does not exist yet
    """
    declared = getattr(func, '__screen_parameters__', None)
    if declared is not None:
        return declared

    hints = typing.get_type_hints(func)

    descriptors = []
    for param in inspect.signature(func).parameters.values():
        if param.name == 'self':
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        descriptors.append(ParameterDescriptor(
            name=param.name,
            type=declared_class(hints.get(param.name)),
            position=len(descriptors),
        ))
    return tuple(descriptors)


def declared_class(annotation: Any) -> Any:
    """Class named by an annotation, ``Optional[X]`` and ``X | None`` unwrapped"""
    if typing.get_origin(annotation) in _UNION_TYPES:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            annotation = members[0]
    return annotation if inspect.isclass(annotation) else None


def is_resolved_object(value: Any) -> bool:
    """Whether a route value is already an object rather than raw input"""
    return value is not None and not isinstance(value, _UNRESOLVED_TYPES)


class ParameterBinder:
    """Turns action descriptors into positional arguments"""

    def __init__(self, container):
        self.container = container

    async def resolve_parameters(self, actions: Mapping[str, ActionSpec], action_name: str,
                                 route: RouteState) -> List[Any]:
        """Resolve the arguments of ``action_name``

        Args:
            actions: action registry of the screen
            action_name: action to bind
            route: current route state

        Returns:
            List[Any]: arguments in declaration order, empty when the action
            does not exist
        """
        spec = actions.get(action_name)
        if spec is None:
            return []

        return [await self.bind(descriptor, route) for descriptor in spec.parameters]

    async def bind(self, descriptor: ParameterDescriptor, route: RouteState) -> Any:
        """Bind one parameter"""
        original = route.parameter(descriptor.name)

        if not descriptor.resolvable:
            return original

        if is_resolved_object(original):
            return original

        try:
            instance = await self.container.resolve(descriptor.type)
        except ScreenException:
            raise
        except Exception as e:
            raise BindingFailureException(
                descriptor.type.__qualname__, str(e), parameter=descriptor.name
            ) from e

        if isinstance(instance, UrlRoutable) and route.has_parameter(descriptor.name):
            resolved = instance.resolve_route_binding(original)
            if inspect.isawaitable(resolved):
                resolved = await resolved
            return resolved

        return instance


def build_action_registry(cls, names) -> Dict[str, ActionSpec]:
    """Build the action registry of a screen class"""
    registry = {}
    for name in names:
        func = getattr(cls, name, None)
        if func is None:
            continue
        try:
            parameters = describe(func)
        except NameError as e:
            logger.debug(f"Deferring parameters of {cls.__name__}.{name}: {e}")
            parameters = None
        except Exception as e:
            raise ConfigurationException(f"{cls.__name__}.{name}", f"invalid parameter annotations: {e}") from e
        registry[name] = ActionSpec(name=name, func=func, parameters=parameters)
    return registry
