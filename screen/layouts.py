"""
Layout tree of a screen.

``Screen.layout()`` declares a list whose items are either layout instances
or layout classes. Before every render pass the declaration is normalised
into concrete instances; declared nodes are never mutated.
"""

import copy
import inspect
import logging
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence

from models import Repository, ScreenContext
from screen.access import PermissionSpec, check_access

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    """``UsersTable`` -> ``users-table``"""
    words = re.sub(r'([a-z0-9])([A-Z])', r'\1-\2', name)
    words = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1-\2', words)
    return re.sub(r'[^a-z0-9]+', '-', words.lower()).strip('-')


class Layout:
    """A node of the layout tree"""

    type = 'layout'
    slug: Optional[str] = None
    title: Optional[str] = None
    permission: PermissionSpec = None
    async_method: Optional[str] = None

    def __init__(self, *children, slug: Optional[str] = None, title: Optional[str] = None,
                 permission: PermissionSpec = None, async_method: Optional[str] = None):
        self.children: List[Any] = list(children)
        if slug is not None:
            self.slug = slug
        elif self.slug is None:
            self.slug = slugify(type(self).__name__)
        if title is not None:
            self.title = title
        if permission is not None:
            self.permission = permission
        if async_method is not None:
            self.async_method = async_method

    def asynchronous(self, method: str) -> 'Layout':
        """Copy of this node reloadable through ``method``"""
        clone = copy.copy(self)
        clone.async_method = method
        return clone

    def with_children(self, children: Sequence['Layout']) -> 'Layout':
        clone = copy.copy(self)
        clone.children = list(children)
        return clone

    def can_see(self, context: ScreenContext) -> bool:
        return check_access(self.permission, context.principal)

    def find_by_slug(self, slug: str) -> Optional['Layout']:
        """Depth-first search of this subtree"""
        if self.slug == slug:
            return self
        for child in self.children:
            if isinstance(child, Layout):
                found = child.find_by_slug(slug)
                if found is not None:
                    return found
        return None

    def render_content(self, repository: Repository, context: ScreenContext) -> dict:
        return {}

    def render(self, repository: Repository, context: ScreenContext) -> Optional[dict]:
        """Full render of this node and its children"""
        if not self.can_see(context):
            return None

        payload = {
            'type': self.type,
            'slug': self.slug,
            'title': self.title,
        }
        if self.async_method:
            payload['async'] = {'method': self.async_method, 'slug': self.slug}
        payload.update(self.render_content(repository, context))
        if self.children:
            payload['children'] = [
                rendered for rendered in
                (child.render(repository, context) for child in self.children)
                if rendered is not None
            ]
        return payload

    def render_async(self, repository: Repository, context: ScreenContext) -> Optional[dict]:
        """Render this node alone for a partial update"""
        payload = self.render(repository, context)
        if payload is not None:
            payload['partial'] = True
        return payload


class Blank(Layout):
    type = 'blank'


class Rows(Layout):
    type = 'rows'


class Columns(Layout):
    type = 'columns'


class TD:
    """Table column"""

    def __init__(self, name: str, title: Optional[str] = None,
                 render: Optional[Callable[[Any], Any]] = None):
        self.name = name
        self.title = title or name.replace('_', ' ').title()
        self._render = render

    def value(self, row: Any) -> Any:
        if self._render is not None:
            return self._render(row)
        if isinstance(row, dict):
            return Repository(row).get(self.name)
        return getattr(row, self.name, None)


class Table(Layout):
    """Rows of ``repository[target]`` rendered through ``columns()``"""

    type = 'table'
    target: str = ''

    def __init__(self, *children, target: Optional[str] = None, **kwargs):
        super().__init__(*children, **kwargs)
        if target is not None:
            self.target = target

    def columns(self) -> List[TD]:
        return []

    def render_content(self, repository: Repository, context: ScreenContext) -> dict:
        columns = self.columns()
        rows = repository.get(self.target) or []
        return {
            'columns': [{'name': td.name, 'title': td.title} for td in columns],
            'rows': [
                {td.name: td.value(row) for td in columns}
                for row in rows
            ],
        }


class Legend(Layout):
    """Key/value view of one object"""

    type = 'legend'
    target: str = ''

    def __init__(self, *children, target: Optional[str] = None, **kwargs):
        super().__init__(*children, **kwargs)
        if target is not None:
            self.target = target

    def fields(self) -> List[TD]:
        return []

    def render_content(self, repository: Repository, context: ScreenContext) -> dict:
        item = repository.get(self.target)
        return {
            'fields': [
                {'name': td.name, 'title': td.title, 'value': td.value(item) if item is not None else None}
                for td in self.fields()
            ],
        }


async def resolve_layouts(declared: Iterable[Any], container) -> List[Layout]:
    """Normalise a layout declaration into concrete instances

    Instances are kept, layout classes are built through the container.
    Composite nodes are copied with normalised children.
    """
    resolved = []
    for item in declared:
        if inspect.isclass(item):
            node = await container.resolve(item)
        else:
            node = item
        if not isinstance(node, Layout):
            raise TypeError(f"Layout expected, got {type(node).__name__}")
        if node.children:
            node = node.with_children(await resolve_layouts(node.children, container))
        resolved.append(node)
    return resolved


def find_by_slug(layouts: Iterable[Layout], slug: str) -> Optional[Layout]:
    for layout in layouts:
        found = layout.find_by_slug(slug)
        if found is not None:
            return found
    return None
