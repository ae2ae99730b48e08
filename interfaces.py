"""
Screen service interfaces

Abstract collaborators consumed by the screen dispatch core.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class UrlRoutable(ABC):
    """Object that can be looked up from a raw route value

    A bound parameter whose type implements this interface is replaced by
    the result of ``resolve_route_binding`` when the route carries a value
    under the parameter's name.
    """

    @abstractmethod
    def resolve_route_binding(self, value: Any) -> Any:
        """Resolve the object addressed by a raw route value

        Args:
            value: raw route value, usually an identifier

        Returns:
            Any: resolved object (may be awaitable)
        """
        pass


class IAuthService(ABC):
    """Principal source"""

    @abstractmethod
    async def resolve_access_token(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token

        Args:
            token: access token

        Returns:
            Dict[str, Any]: ``user``, ``claims`` and ``principal`` entries
        """
        pass
