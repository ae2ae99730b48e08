"""
Screen service middleware

Request ids, request logging, error handling and security headers.
"""

import time
import uuid
import logging
import traceback
from datetime import datetime
from typing import Callable

from aiohttp import web
from aiohttp.web_middlewares import middleware

from auth_middleware import principal_middleware
from exceptions import ScreenException, create_error_response, handle_exception

logger = logging.getLogger(__name__)


@middleware
async def request_id_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Request id middleware

    Tags every request with a unique id.

    Args:
        request: HTTP request
        handler: request handler

    Returns:
        web.Response: HTTP response
    """
    request_id = str(uuid.uuid4())
    request['request_id'] = request_id

    try:
        response = await handler(request)
        response.headers['X-Request-ID'] = request_id
        return response
    except web.HTTPException as e:
        e.headers['X-Request-ID'] = request_id
        raise


@middleware
async def logging_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Request logging middleware

    Args:
        request: HTTP request
        handler: request handler

    Returns:
        web.Response: HTTP response
    """
    start_time = time.time()
    request_id = request.get('request_id', 'unknown')

    logger.info(
        f"Request started - {request.method} {request.path} - "
        f"Remote: {request.remote} - "
        f"Request-ID: {request_id}"
    )

    try:
        response = await handler(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed - {request.method} {request.path} - "
            f"Status: {response.status} - "
            f"Duration: {duration:.3f}s - "
            f"Request-ID: {request_id}"
        )

        response.headers['X-Response-Time'] = f"{duration:.3f}s"

        return response

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Request failed - {request.method} {request.path} - "
            f"Error: {str(e)} - "
            f"Duration: {duration:.3f}s - "
            f"Request-ID: {request_id}"
        )

        raise


@middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Error handling middleware

    Screen failures become JSON errors carrying their status. HTTP
    exceptions (redirects included) pass through, anything else is a 500.

    Args:
        request: HTTP request
        handler: request handler

    Returns:
        web.Response: HTTP response
    """
    request_id = request.get('request_id', 'unknown')

    try:
        return await handler(request)

    except web.HTTPException:
        raise

    except ScreenException as e:
        logger.warning(
            f"Screen error in {request.path} - "
            f"{e.error_code}: {e.message} - "
            f"Request-ID: {request_id}"
        )
        error_response = create_error_response(e)
        error_response['request_id'] = request_id
        return web.json_response(error_response, status=e.status)

    except Exception as e:
        logger.exception(
            f"Unhandled error in {request.path} - "
            f"Error: {str(e)} - "
            f"Request-ID: {request_id}"
        )

        wrapped = handle_exception(e, component='ScreenHandler')
        error_response = {
            'success': False,
            'error': 'Internal server error',
            'error_code': wrapped.error_code,
            'error_type': type(e).__name__,
            'request_id': request_id,
            'timestamp': datetime.utcnow().isoformat() + 'Z'
        }

        config = request.app.get('config')
        if config and config.service.debug:
            error_response['error_detail'] = wrapped.message
            error_response['traceback'] = traceback.format_exc()

        return web.json_response(error_response, status=500)


@middleware
async def security_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Security headers middleware

    Args:
        request: HTTP request
        handler: request handler

    Returns:
        web.Response: HTTP response
    """
    response = await handler(request)

    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    return response


def setup_middleware(app: web.Application):
    """Install middleware

    Requests traverse the list top to bottom, responses bottom to top.

    Args:
        app: aiohttp application
    """
    app.middlewares.append(request_id_middleware)
    app.middlewares.append(logging_middleware)
    app.middlewares.append(error_handling_middleware)
    app.middlewares.append(security_middleware)
    app.middlewares.append(principal_middleware)

    logger.info("Middleware setup completed")
