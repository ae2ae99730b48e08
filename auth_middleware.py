"""Principal resolution middleware for screen endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from aiohttp import web
from aiohttp.web_middlewares import middleware

from auth_service import AuthError


@middleware
async def principal_middleware(request: web.Request, handler: Callable) -> web.Response:
    request["principal"] = None
    request["current_user"] = None

    if request.method.upper() == "OPTIONS":
        return await handler(request)

    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return await handler(request)

    if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
        return web.json_response(
            {
                "success": False,
                "error": "Missing or invalid Authorization header",
                "error_code": "UNAUTHORIZED",
                "timestamp": datetime.utcnow().isoformat() + "Z",
            },
            status=401,
        )

    auth_service = request.app.get("auth_service")
    if auth_service is None:
        return web.json_response(
            {
                "success": False,
                "error": "Auth service not initialized",
                "error_code": "AUTH_SERVICE_MISSING",
                "timestamp": datetime.utcnow().isoformat() + "Z",
            },
            status=500,
        )

    token = auth_header[7:].strip()
    try:
        auth_context = await auth_service.resolve_access_token(token)
    except AuthError as exc:
        return web.json_response(
            {
                "success": False,
                "error": exc.message,
                "error_code": exc.code,
                "timestamp": datetime.utcnow().isoformat() + "Z",
            },
            status=exc.status,
        )

    request["auth_claims"] = auth_context.get("claims")
    request["current_user"] = auth_context.get("user")
    request["principal"] = auth_context.get("principal")
    return await handler(request)
