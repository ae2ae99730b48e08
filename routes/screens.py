"""
Screen routes

Every screen is served under a template whose last variable is an optional
action selector, e.g. ``/users/{user}/{method?}``. aiohttp has no optional
segments, so the template is registered once without and once with the
selector, plus a POST route for partial renders.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Type

from aiohttp import web
from aiohttp_cors import CorsConfig

from exceptions import ConfigurationException
from handlers.screen import ScreenHandler
from screen.base import Screen

logger = logging.getLogger(__name__)

METHOD_VARIABLE = 'method'

_VARIABLE_RE = re.compile(r'\{(?P<name>\w+)(?P<optional>\?)?(?P<pattern>:[^{}]*)?\}')


def parse_template(template: str) -> Tuple[str, str, List[str]]:
    """Split a screen route template

    Args:
        template: route template, ``{method?}`` is appended when missing

    Returns:
        Tuple[str, str, List[str]]: path without the optional selector,
        path with it, and the declared variable names in order
    """
    template = '/' + template.strip('/') if template.strip('/') else ''
    variables = [m.group('name') for m in _VARIABLE_RE.finditer(template)]
    if METHOD_VARIABLE not in variables:
        template = f"{template}/{{{METHOD_VARIABLE}?}}"
        variables.append(METHOD_VARIABLE)

    last = list(_VARIABLE_RE.finditer(template))[-1]
    if last.group('name') != METHOD_VARIABLE or not template.endswith(last.group(0)):
        raise ValueError(f"'{{{METHOD_VARIABLE}?}}' must be the last segment of {template}")

    base_path = template[:last.start()].rstrip('/') or '/'
    full_path = template[:last.start()] + f"{{{METHOD_VARIABLE}}}"
    return base_path, full_path, variables


class ScreenRoute:
    """Route registration of one screen

    ``{base}/{async_segment}/...`` is reserved for partial renders. A sibling
    screen whose first variable follows ``{base}`` cannot be reached with
    that variable equal to ``async_segment``: aiohttp matches the longer
    static prefix first, whatever the registration order.
    """

    def __init__(self, template: str, screen_cls: Type[Screen], name: Optional[str] = None,
                 async_segment: str = 'async'):
        self.screen_cls = screen_cls
        self.name = name or screen_cls.__name__
        self.base_path, self.full_path, self.variables = parse_template(template)
        self.async_path = (
            f"{self.base_path.rstrip('/')}/{async_segment}/{{async_method}}/{{async_slug}}"
        )
        self.handler = ScreenHandler(screen_cls, self.variables, self.url_for)

    @property
    def method_route_name(self) -> str:
        return f"{self.name}.method"

    @property
    def async_route_name(self) -> str:
        return f"{self.name}.async"

    def url_for(self, request: web.Request, arguments: List[Any]) -> str:
        """URL of this screen for positional ``arguments``"""
        values = [str(argument) for argument in arguments]
        if len(values) > len(self.variables):
            raise ValueError(f"Too many arguments for {self.name}: {values}")

        parts: Dict[str, str] = dict(zip(self.variables, values))
        if METHOD_VARIABLE in parts:
            resource = request.app.router[self.method_route_name]
        else:
            resource = request.app.router[self.name]
        return str(resource.url_for(**parts))

    def register(self, app: web.Application, cors: CorsConfig = None) -> None:
        routes = []

        resource = app.router.add_resource(self.base_path, name=self.name)
        for method in ('GET', 'HEAD', 'POST'):
            routes.append(resource.add_route(method, self.handler.handle))

        resource = app.router.add_resource(self.full_path, name=self.method_route_name)
        for method in ('GET', 'HEAD', 'POST'):
            routes.append(resource.add_route(method, self.handler.handle))

        resource = app.router.add_resource(self.async_path, name=self.async_route_name)
        routes.append(resource.add_route('POST', self.handler.async_build))

        if cors:
            for route in routes:
                cors.add(route)

        logger.info(f"Screen {self.screen_cls.__name__} registered at {self.base_path}")


def register_screen(app: web.Application, template: str, screen_cls: Type[Screen],
                    name: Optional[str] = None, cors: CorsConfig = None,
                    async_segment: str = 'async') -> ScreenRoute:
    """Register one screen under ``template``"""
    if not (isinstance(screen_cls, type) and issubclass(screen_cls, Screen)):
        raise ConfigurationException(f"screens.{template}", f"{screen_cls!r} is not a Screen subclass")

    route = ScreenRoute(template, screen_cls, name=name, async_segment=async_segment)
    route.register(app, cors)
    return route


def setup_screen_routes(app: web.Application, screens: Dict[str, Type[Screen]],
                        cors: CorsConfig = None, prefix: str = '',
                        async_segment: str = 'async') -> List[ScreenRoute]:
    """Register screens

    Args:
        app: aiohttp application
        screens: route template -> screen class
        cors: CORS config
        prefix: URL prefix of every template
        async_segment: path segment of partial render routes

    Returns:
        List[ScreenRoute]: registered routes
    """
    return [
        register_screen(app, f"{prefix.rstrip('/')}/{template.lstrip('/')}", screen_cls,
                        cors=cors, async_segment=async_segment)
        for template, screen_cls in screens.items()
    ]
