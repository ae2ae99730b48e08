"""
Screen service routes
"""

from typing import Dict, List, Type

from aiohttp import web
from aiohttp_cors import CorsConfig

from routes.screens import ScreenRoute, setup_screen_routes
from screen.base import Screen


def setup_routes(app: web.Application, screens: Dict[str, Type[Screen]],
                 cors: CorsConfig = None) -> List[ScreenRoute]:
    """Register all routes

    Args:
        app: aiohttp application
        screens: route template -> screen class
        cors: CORS config
    """
    config = app.get('config')
    prefix = config.screen.url_prefix if config else ''
    async_segment = config.screen.async_segment if config else 'async'

    registered = setup_screen_routes(app, screens, cors, prefix or '', async_segment)
    app['screen_routes'] = registered
    return registered
