"""
Screen base class

A screen is a page definition coordinating data retrieval (``query``),
access control (``permission``), the command bar and the layout tree.
One instance serves exactly one request.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from aiohttp import web

from exceptions import ActionNotFoundException, NotAuthorizedException, SlugNotFoundException
from models import Repository, ScreenContext
from screen.access import check_access, normalize_permission
from screen.actions import Action, Commander
from screen.binder import ActionSpec, ParameterBinder, build_action_registry
from screen.layouts import Blank, find_by_slug, resolve_layouts

logger = logging.getLogger(__name__)

# Route variables reserved by the screen route itself,
# e.g. /dashboard/my-screen/{method?}
COUNT_ROUTE_VARIABLES = 1

QUERY_METHOD = 'query'

DEFAULT_FORM_VALIDATE_MESSAGE = (
    'Please check the entered data, it may be necessary to specify in other languages.'
)


def plan_get_dispatch(arguments: Sequence[Any], declared_variables: int) -> Tuple[bool, List[Any]]:
    """Decide between the full view and a redirect for a safe request

    Args:
        arguments: positional route arguments of the request
        declared_variables: variables declared by the route template

    Returns:
        Tuple[bool, List[Any]]: ``(True, arguments)`` to render the view,
        ``(False, reduced)`` to redirect with the last argument dropped
    """
    expected = declared_variables - COUNT_ROUTE_VARIABLES
    arguments = list(arguments)

    if len(arguments) <= expected:
        return True, arguments

    return False, arguments[:-1]


class Screen(Commander, ABC):
    """Base class of every screen"""

    name: Optional[str] = None
    description: Optional[str] = None
    permission: Any = None

    _actions: Dict[str, ActionSpec] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        names = set(cls.get_available_methods())
        if _is_instance_method(cls, QUERY_METHOD):
            names.add(QUERY_METHOD)
        cls._actions = build_action_registry(cls, sorted(names))

    def __init__(self):
        self.source: Optional[Repository] = None
        self.context: Optional[ScreenContext] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def command_bar(self) -> List[Action]:
        """Command bar actions"""

    @abstractmethod
    def layout(self) -> List[Any]:
        """Layout declaration: layout instances or layout classes"""

    def query(self) -> Mapping:
        return {}

    @classmethod
    def get_available_methods(cls) -> List[str]:
        """Names of the actions that may be invoked by name from outside"""
        base_names = set(dir(Screen))
        return sorted(
            name for name in dir(cls)
            if not name.startswith('_')
            and name not in base_names
            and name != QUERY_METHOD
            and _is_instance_method(cls, name)
        )

    def form_validate_message(self) -> str:
        if self.context is None:
            return DEFAULT_FORM_VALIDATE_MESSAGE
        return self.context.settings.get('form_validate_message') or DEFAULT_FORM_VALIDATE_MESSAGE

    def check_access(self, context: ScreenContext) -> bool:
        return check_access(self.permission, context.principal)

    def authorize(self, context: ScreenContext) -> None:
        if not self.check_access(context):
            self.logger.warning(f"Access denied to {type(self).__name__}")
            raise NotAuthorizedException(type(self).__name__, normalize_permission(self.permission))

    async def handle(self, context: ScreenContext, *arguments) -> Any:
        """Dispatch one request to this screen

        Raises:
            NotAuthorizedException: the access gate rejected the principal
            ActionNotFoundException: the requested action does not exist
            web.HTTPFound: the request carries more arguments than the route
                expects
        """
        context.screen = self
        self.context = context

        self.authorize(context)

        if context.is_safe_method:
            return await self.redirect_on_get_method_call_or_show_view(context, list(arguments))

        method = context.route.parameter('method') or (arguments[-1] if arguments else None)
        if method not in self.get_available_methods():
            self.logger.warning(f"Action {method} not found on {type(self).__name__}")
            raise ActionNotFoundException(type(self).__name__, method)

        return await self.call_method(context, method)

    async def redirect_on_get_method_call_or_show_view(self, context: ScreenContext,
                                                       arguments: List[Any]) -> Any:
        """Render the view, or redirect when a stale link carries extra arguments"""
        show_view, reduced = plan_get_dispatch(arguments, context.route.declared_variable_count())
        if show_view:
            return await self.view(context)

        if context.url_for is None:
            raise RuntimeError("Screen redirect requires a URL builder")

        location = context.url_for(reduced)
        self.logger.info(f"Redirecting {type(self).__name__} to {location}")
        raise web.HTTPFound(location=location)

    async def view(self, context: ScreenContext) -> Dict[str, Any]:
        """Full render: query, command bar and layout tree"""
        query = await self.call_method(context, QUERY_METHOD)
        self.source = Repository(query)
        command_bar = self.build_command_bar(self.source, context)

        return {
            'screen': type(self).__name__,
            'name': self.name,
            'description': self.description,
            'command_bar': command_bar,
            'layout': await self.build(context),
            'form_validate_message': self.form_validate_message(),
        }

    async def build(self, context: ScreenContext) -> Optional[dict]:
        layouts = await resolve_layouts(self.layout(), context.container)
        return Blank(*layouts).render(self.source, context)

    async def async_build(self, context: ScreenContext, method: str, slug: str,
                          body: Optional[Mapping[str, Any]] = None) -> dict:
        """Partial render of the layout node named ``slug``

        Raises:
            NotAuthorizedException: the access gate rejected the principal
            ActionNotFoundException: ``method`` is not a method of this screen
            SlugNotFoundException: no layout node carries ``slug``
            NotAuthorizedException: the matched node is hidden by its permission
        """
        context.screen = self
        self.context = context

        self.authorize(context)

        if method not in self._actions:
            self.logger.warning(f"Async method {method} not found on {type(self).__name__}")
            raise ActionNotFoundException(type(self).__name__, method)

        for key, value in (body or {}).items():
            context.route.set_parameter(key, value)

        query = await self.call_method(context, method)
        source = Repository(query)

        layouts = await resolve_layouts(self.layout(), context.container)
        layout = find_by_slug(layouts, slug)
        if layout is None:
            self.logger.warning(f"Async template {slug} not found on {type(self).__name__}")
            raise SlugNotFoundException(type(self).__name__, slug)

        if not layout.can_see(context):
            self.logger.warning(f"Async template {slug} hidden on {type(self).__name__}")
            raise NotAuthorizedException(type(self).__name__, normalize_permission(layout.permission))

        return layout.render_async(source, context)

    async def call_method(self, context: ScreenContext, method: str) -> Any:
        binder = ParameterBinder(context.container)
        arguments = await binder.resolve_parameters(self._actions, method, context.route)
        result = getattr(self, method)(*arguments)
        if inspect.isawaitable(result):
            result = await result
        return result


def _is_instance_method(cls, name: str) -> bool:
    return inspect.isfunction(inspect.getattr_static(cls, name, None))
