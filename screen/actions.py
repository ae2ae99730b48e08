"""Command bar actions."""

import logging
from typing import Any, Callable, List, Optional, Union

from models import Repository, ScreenContext
from screen.access import PermissionSpec, check_access

logger = logging.getLogger(__name__)

Visibility = Union[bool, Callable[[Repository], bool]]


class Action:
    """Interactive element of the command bar"""

    type = 'action'

    def __init__(self, name: str, icon: Optional[str] = None,
                 can_see: Visibility = True, permission: PermissionSpec = None):
        self.name = name
        self.icon = icon
        self._can_see = can_see
        self.permission = permission

    def is_visible(self, repository: Repository, context: Optional[ScreenContext]) -> bool:
        visible = self._can_see(repository) if callable(self._can_see) else self._can_see
        if not visible:
            return False
        principal = context.principal if context is not None else None
        return check_access(self.permission, principal)

    def attributes(self, repository: Repository, context: Optional[ScreenContext]) -> dict:
        return {}

    def build(self, repository: Repository, context: Optional[ScreenContext] = None) -> Optional[dict]:
        if not self.is_visible(repository, context):
            return None
        payload = {'type': self.type, 'name': self.name, 'icon': self.icon}
        payload.update(self.attributes(repository, context))
        return payload


class Button(Action):
    """Posts to an action method of the current screen"""

    type = 'button'

    def __init__(self, name: str, method: str, confirm: Optional[str] = None, **kwargs):
        super().__init__(name, **kwargs)
        self.method = method
        self.confirm = confirm

    def attributes(self, repository, context):
        return {'method': self.method, 'confirm': self.confirm}


class Link(Action):
    type = 'link'

    def __init__(self, name: str, href: str, **kwargs):
        super().__init__(name, **kwargs)
        self.href = href

    def attributes(self, repository, context):
        return {'href': self.href}


class DropDown(Action):
    type = 'dropdown'

    def __init__(self, name: str, actions: List[Action], **kwargs):
        super().__init__(name, **kwargs)
        self.actions = list(actions)

    def attributes(self, repository, context):
        return {'list': build_actions(self.actions, repository, context)}


def build_actions(actions: List[Action], repository: Repository,
                  context: Optional[ScreenContext] = None) -> List[dict]:
    built = (action.build(repository, context) for action in actions)
    return [item for item in built if item is not None]


class Commander:
    """Builds the command bar declared by ``command_bar()``"""

    def command_bar(self) -> List[Action]:
        raise NotImplementedError

    def build_command_bar(self, repository: Repository,
                          context: Optional[ScreenContext] = None) -> List[dict]:
        return build_actions(self.command_bar(), repository, context)
