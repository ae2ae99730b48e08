"""
Screen service application factory

Creates and configures the aiohttp application serving screens.
"""

import logging
from typing import Dict, Optional, Type

from aiohttp import web
from aiohttp_cors import setup as cors_setup, ResourceOptions

from auth_service import TokenAuthService
from config import ScreenServiceConfig
from container import setup_container
from middleware import setup_middleware
from routes import setup_routes
from screen.base import Screen

logger = logging.getLogger(__name__)


async def create_app(config: ScreenServiceConfig,
                     screens: Optional[Dict[str, Type[Screen]]] = None) -> web.Application:
    """Create the aiohttp application

    Args:
        config: service configuration
        screens: route template -> screen class

    Returns:
        web.Application: configured application
    """
    logger.info("Creating screen service application")

    app = web.Application()

    app['config'] = config

    await init_components(app, config)

    setup_middleware(app)

    cors = None
    if config.service.enable_cors:
        cors = cors_setup(app, defaults={
            "*": ResourceOptions(
                allow_credentials=True,
                expose_headers="*",
                allow_headers="*",
                allow_methods="*"
            )
        })

    setup_routes(app, screens or {}, cors)

    logger.info("Screen service application created successfully")
    return app


async def init_components(app: web.Application, config: ScreenServiceConfig):
    """Initialise shared components

    Args:
        app: aiohttp application
        config: service configuration
    """
    logger.info("Initializing core components")

    try:
        app['auth_service'] = TokenAuthService(config)
        app['container'] = await setup_container(config, app['auth_service'])

        logger.info("Core components initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize components: {e}")
        raise
