"""Handler bridging aiohttp requests to screens."""

from typing import Any, Callable, List, Type

from aiohttp import web

from auth_service import Principal
from handlers.base import BaseHandler
from models import RouteState, ScreenContext
from screen.base import Screen


class ScreenHandler(BaseHandler):
    """Serves one screen class

    ``variables`` are the route template variables in order, including the
    optional trailing ``method``; ``url_builder`` turns positional arguments
    back into a URL of this screen.
    """

    def __init__(self, screen_cls: Type[Screen], variables: List[str],
                 url_builder: Callable[[web.Request, List[Any]], str]):
        super().__init__()
        self.screen_cls = screen_cls
        self.variables = list(variables)
        self.url_builder = url_builder

    def build_context(self, request: web.Request, route: RouteState) -> ScreenContext:
        config = request.app.get('config')
        settings = {}
        if config is not None:
            settings['form_validate_message'] = config.screen.form_validate_message

        principal = request.get('principal')
        scope = self.get_app_component(request, 'container').create_scope()
        context = ScreenContext(
            method=request.method,
            route=route,
            container=scope,
            principal=principal,
            url_for=lambda arguments: self.url_builder(request, arguments),
            request=request,
            settings=settings,
        )

        scope.register_instance(web.Request, request)
        scope.register_instance(ScreenContext, context)
        if principal is not None:
            scope.register_instance(Principal, principal)
        return context

    async def make_screen(self, request: web.Request, context: ScreenContext) -> Screen:
        screen = await context.container.resolve(self.screen_cls)
        request['screen'] = screen
        return screen

    def to_response(self, result: Any) -> web.StreamResponse:
        if isinstance(result, web.StreamResponse):
            return result
        return self.success_response(result)

    async def handle(self, request: web.Request) -> web.StreamResponse:
        route = RouteState(self.get_path_params(request), self.variables)
        context = self.build_context(request, route)
        screen = await self.make_screen(request, context)

        result = await screen.handle(context, *route.arguments())
        return self.to_response(result)

    async def async_build(self, request: web.Request) -> web.StreamResponse:
        params = self.get_path_params(request)
        method = params.pop('async_method')
        slug = params.pop('async_slug')

        route = RouteState(params, self.variables)
        context = self.build_context(request, route)
        screen = await self.make_screen(request, context)

        body = await self.get_request_data(request)
        fragment = await screen.async_build(context, method, slug, body)
        return self.success_response(fragment)
