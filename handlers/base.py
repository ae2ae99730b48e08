"""
Base handler

Common request/response helpers for screen endpoints.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict

from aiohttp import web


class BaseHandler:
    """Base handler"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def success_response(self, data: Any = None, message: str = "OK") -> web.Response:
        """Success response

        Args:
            data: response payload
            message: response message

        Returns:
            web.Response: JSON response
        """
        response_data = {
            'success': True,
            'data': data,
            'message': message,
            'timestamp': datetime.utcnow().isoformat() + 'Z'
        }

        return web.json_response(response_data)

    async def get_request_data(self, request: web.Request) -> Dict[str, Any]:
        """Read the request body as a dict

        JSON bodies and form bodies are supported, anything else is empty.

        Raises:
            web.HTTPBadRequest: the body cannot be parsed
        """
        try:
            if request.content_type == 'application/json':
                if not request.can_read_body:
                    return {}
                data = await request.json()
                if not isinstance(data, dict):
                    raise web.HTTPBadRequest(text="Request body must be a JSON object")
                return data
            if request.content_type in ('application/x-www-form-urlencoded', 'multipart/form-data'):
                return dict(await request.post())
            return {}
        except web.HTTPException:
            raise
        except json.JSONDecodeError as e:
            self.logger.error(f"JSON decode error: {e}")
            raise web.HTTPBadRequest(text="Invalid JSON format")
        except Exception as e:
            self.logger.error(f"Error reading request data: {e}")
            raise web.HTTPBadRequest(text="Error reading request data")

    def get_path_params(self, request: web.Request) -> Dict[str, str]:
        """Path parameters of the matched route"""
        return dict(request.match_info)

    def get_app_component(self, request: web.Request, component_name: str) -> Any:
        """Fetch an application component

        Raises:
            web.HTTPInternalServerError: the component is not registered
        """
        app = request.app
        if component_name not in app:
            self.logger.error(f"Component '{component_name}' not found in app")
            raise web.HTTPInternalServerError(text=f"Component '{component_name}' not available")

        return app[component_name]
