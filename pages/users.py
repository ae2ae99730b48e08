"""User management screens."""

import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from aiohttp import web

from interfaces import UrlRoutable
from screen import Button, DropDown, Legend, Link, Rows, Screen, TD, Table

logger = logging.getLogger(__name__)


@dataclass
class User:
    id: str
    name: str
    email: str
    permissions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return asdict(self)


class UserStore:
    """In-memory user storage"""

    def __init__(self, users: Optional[List[User]] = None):
        self._users: Dict[str, User] = {user.id: user for user in users or []}

    @classmethod
    def demo(cls) -> 'UserStore':
        return cls([
            User('1', 'Admin', 'admin@example.com', ['platform.systems.users']),
            User('2', 'Alice', 'alice@example.com'),
            User('3', 'Bob', 'bob@example.com'),
        ])

    def all(self) -> List[User]:
        return sorted(self._users.values(), key=lambda user: int(user.id) if user.id.isdigit() else 0)

    def find(self, user_id: str) -> Optional[User]:
        return self._users.get(str(user_id))

    def save(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def delete(self, user_id: str) -> bool:
        return self._users.pop(str(user_id), None) is not None


class UserRepository(UrlRoutable):
    """Looks users up by the ``user`` route value"""

    def __init__(self, store: UserStore):
        self.store = store

    def resolve_route_binding(self, value) -> User:
        user = self.store.find(value)
        if user is None:
            raise web.HTTPNotFound(text=f"User {value} not found")
        return user

    def search(self, term: Optional[str] = None) -> List[User]:
        users = self.store.all()
        if not term:
            return users
        term = term.lower()
        return [user for user in users if term in user.name.lower() or term in user.email.lower()]


class UserListTable(Table):
    target = 'users'
    async_method = 'async_users'

    def columns(self) -> List[TD]:
        return [
            TD('id', 'ID'),
            TD('name'),
            TD('email'),
        ]


class UserDetailsLegend(Legend):
    target = 'user'
    async_method = 'async_user'

    def fields(self) -> List[TD]:
        return [
            TD('name'),
            TD('email'),
            TD('permissions', render=lambda user: ', '.join(user.permissions)),
        ]


class UserListScreen(Screen):
    name = 'Users'
    description = 'All registered users'
    permission = 'platform.systems.users'

    def query(self, users: UserRepository) -> Dict:
        return {'users': users.search()}

    def async_users(self, users: UserRepository, search: str = None) -> Dict:
        return {'users': users.search(search)}

    def command_bar(self):
        return [
            Button('Remove all guests', method='remove_guests', confirm='Remove every user without permissions?',
                   can_see=lambda repository: any(not user.permissions for user in repository.get('users', []))),
        ]

    def layout(self):
        return [
            Rows(UserListTable),
        ]

    async def remove_guests(self, users: UserRepository) -> Dict:
        removed = [user.id for user in users.search() if not user.permissions]
        for user_id in removed:
            users.store.delete(user_id)
        logger.info(f"Removed {len(removed)} guest users")
        return {'removed': removed}


class UserEditScreen(Screen):
    name = 'Edit user'
    description = 'Details and access rights'
    permission = ['platform.systems.users', 'platform.systems.profile']

    def query(self, user: UserRepository) -> Dict:
        return {'user': user}

    def async_user(self, user: UserRepository) -> Dict:
        return {'user': user}

    def command_bar(self):
        return [
            Link('Back to users', href='/dashboard/users', icon='arrow-left'),
            Button('Save', method='save', icon='check'),
            DropDown('More', actions=[
                Button('Remove', method='remove', confirm='Remove this user?', icon='trash',
                       permission='platform.systems.users'),
            ]),
        ]

    def layout(self):
        return [
            UserDetailsLegend(),
        ]

    async def save(self, user: UserRepository, request: web.Request) -> Dict:
        data = await request.post() if request.content_type != 'application/json' else await request.json()
        if 'name' in data:
            user.name = str(data['name'])
        if 'email' in data:
            user.email = str(data['email'])
        logger.info(f"User {user.id} saved")
        return {'user': user.to_dict()}

    async def remove(self, user: UserRepository, store: UserStore) -> web.StreamResponse:
        store.delete(user.id)
        logger.info(f"User {user.id} removed")
        raise web.HTTPFound(location='/dashboard/users')
