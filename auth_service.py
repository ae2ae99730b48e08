"""Principal source for screens: signed access tokens carrying permissions."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional

from interfaces import IAuthService


class AuthError(RuntimeError):
    def __init__(self, message: str, status: int = 401, code: str = "AUTH_ERROR"):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


@dataclass(frozen=True)
class Principal:
    """Authenticated user and the permission tokens it holds"""
    user_id: str
    username: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def has_access(self, permission: str) -> bool:
        return permission in self.permissions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "permissions": sorted(self.permissions),
        }


class TokenAuthService(IAuthService):
    """Issues and verifies HS256 access tokens"""

    def __init__(self, config):
        auth_cfg = getattr(config, "auth", None)
        self._issuer = getattr(auth_cfg, "issuer", "screen-service")
        self._secret = getattr(auth_cfg, "jwt_secret", None) or os.getenv("SCREEN_AUTH_SECRET") or secrets.token_urlsafe(48)
        self._access_ttl = int(getattr(auth_cfg, "access_token_ttl_seconds", 900) or 900)

    @staticmethod
    def _utc_now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _b64url_encode(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    @staticmethod
    def _b64url_decode(raw: str) -> bytes:
        padding = "=" * (-len(raw) % 4)
        return base64.urlsafe_b64decode((raw + padding).encode("ascii"))

    def _jwt_encode(self, payload: Dict[str, Any]) -> str:
        header = {"alg": "HS256", "typ": "JWT"}
        header_segment = self._b64url_encode(json.dumps(header, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
        payload_segment = self._b64url_encode(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
        signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
        signature = hmac.new(self._secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
        return f"{header_segment}.{payload_segment}.{self._b64url_encode(signature)}"

    def _jwt_decode(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        parts = token.split(".")
        if len(parts) != 3:
            raise AuthError("Invalid token format", 401, "INVALID_TOKEN")
        header_segment, payload_segment, signature_segment = parts
        signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
        expected_signature = hmac.new(self._secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
        try:
            provided_signature = self._b64url_decode(signature_segment)
            if not hmac.compare_digest(expected_signature, provided_signature):
                raise AuthError("Token signature verification failed", 401, "INVALID_TOKEN")
            payload = json.loads(self._b64url_decode(payload_segment).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as exc:
            raise AuthError(f"Malformed token: {exc}", 401, "INVALID_TOKEN") from exc

        if payload.get("type") != "access":
            raise AuthError("Token type mismatch", 401, "INVALID_TOKEN")
        if payload.get("iss") != self._issuer:
            raise AuthError("Token issuer mismatch", 401, "INVALID_TOKEN")

        if verify_exp:
            exp = int(payload.get("exp") or 0)
            if exp <= int(self._utc_now().timestamp()):
                raise AuthError("Token expired", 401, "TOKEN_EXPIRED")
        return payload

    def issue_access_token(self, user_id: str, username: str, permissions: Iterable[str] = (),
                           ttl_seconds: Optional[int] = None) -> str:
        now = int(self._utc_now().timestamp())
        claims = {
            "iss": self._issuer,
            "sub": user_id,
            "username": username,
            "permissions": sorted(set(permissions)),
            "type": "access",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + (self._access_ttl if ttl_seconds is None else ttl_seconds),
        }
        return self._jwt_encode(claims)

    async def resolve_access_token(self, token: str) -> Dict[str, Any]:
        claims = self._jwt_decode(token)
        principal = Principal(
            user_id=str(claims.get("sub") or ""),
            username=str(claims.get("username") or ""),
            permissions=frozenset(claims.get("permissions") or []),
        )
        return {"claims": claims, "user": principal.to_dict(), "principal": principal}
