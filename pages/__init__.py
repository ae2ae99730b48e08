"""
Example screens

Route templates are relative to ``screen.url_prefix``.
"""

from container import DIContainer
from pages.users import UserEditScreen, UserListScreen, UserStore

SCREENS = {
    '/users': UserListScreen,
    '/users/{user}/edit': UserEditScreen,
}


def register_services(container: DIContainer, store: UserStore = None) -> None:
    """Register the storage the example screens read from"""
    container.register_instance(UserStore, store or UserStore.demo())
