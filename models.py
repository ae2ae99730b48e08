"""
Screen data models

Request scoped data exchanged between the dispatcher, the parameter binder
and the layout renderer.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence


_MISSING = object()


class Repository(Mapping):
    """Read-only container around the values produced by an action method.

    Keys may be addressed with dot notation, ``repository.get("user.name")``
    walks nested mappings and sequences.
    """

    def __init__(self, items: Optional[Mapping] = None):
        if items is None:
            items = {}
        if not isinstance(items, Mapping):
            raise TypeError(
                f"Screen data must be a mapping, got {type(items).__name__}"
            )
        self._items: Dict[str, Any] = dict(items)

    def __getitem__(self, key: str) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._lookup(key) is not _MISSING

    def __repr__(self) -> str:
        return f"Repository({self._items!r})"

    def _lookup(self, key: str) -> Any:
        if key in self._items:
            return self._items[key]

        value: Any = self._items
        for segment in key.split('.'):
            if isinstance(value, Mapping) and segment in value:
                value = value[segment]
            elif isinstance(value, Sequence) and not isinstance(value, str) and segment.isdigit():
                index = int(segment)
                if index >= len(value):
                    return _MISSING
                value = value[index]
            else:
                return _MISSING
        return value

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def has(self, key: str) -> bool:
        return key in self

    def count(self) -> int:
        return len(self._items)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._items)


class RouteState:
    """Resolved parameters of the current route.

    ``variables`` are the names declared by the route template, in order,
    whether or not the current URL supplied them.
    """

    def __init__(self, parameters: Optional[Dict[str, Any]] = None,
                 variables: Optional[Sequence[str]] = None):
        self._parameters: Dict[str, Any] = dict(parameters or {})
        self.variables: List[str] = list(variables or [])

    def parameter(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def set_parameter(self, name: str, value: Any) -> None:
        self._parameters[name] = value

    def parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    def declared_variable_count(self) -> int:
        return len(self.variables)

    def arguments(self) -> List[Any]:
        """Positional arguments: supplied values of declared variables, in order"""
        return [
            self._parameters[name]
            for name in self.variables
            if self._parameters.get(name) not in (None, '')
        ]


@dataclass
class ScreenContext:
    """Everything a screen needs for one request/response cycle"""
    method: str
    route: RouteState
    container: Any
    principal: Any = None
    url_for: Optional[Callable[[List[Any]], str]] = None
    request: Any = None
    screen: Any = None
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_safe_method(self) -> bool:
        return self.method.upper() in ('GET', 'HEAD')
