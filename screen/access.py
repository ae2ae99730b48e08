"""Declarative permission gate for screens and layout nodes."""

import logging
from typing import Any, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

PermissionSpec = Union[None, str, Iterable[str]]


def normalize_permission(permission: PermissionSpec) -> List[str]:
    """Turn a permission declaration into an ordered list of tokens

    Args:
        permission: ``None``, a single token or an iterable of tokens

    Returns:
        List[str]: tokens, empty when the declaration is empty
    """
    if permission is None:
        return []
    if isinstance(permission, str):
        return [permission] if permission else []
    return [token for token in permission if token]


def check_access(permission: PermissionSpec, principal: Optional[Any]) -> bool:
    """Evaluate a permission declaration against a principal

    An empty declaration always passes. Otherwise the principal passes when
    it holds ANY of the listed tokens, not all of them. An anonymous
    principal holds nothing. The gate never raises; the caller decides how
    a rejection is reported.

    Args:
        permission: permission declaration
        principal: current principal, ``None`` when anonymous

    Returns:
        bool: whether access is granted
    """
    tokens = normalize_permission(permission)
    if not tokens:
        return True

    if principal is None:
        return False

    for token in tokens:
        try:
            if principal.has_access(token):
                return True
        except Exception as e:
            logger.warning(f"Permission check for {token} failed: {e}")
    return False
