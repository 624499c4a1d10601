"""
Access-token helpers.

Tokens are issued elsewhere; this service only verifies them. Claims used:
- `sub`: caller id
- `type`: must be "access"
- `projects` (optional): project ids the caller may address
"""

from __future__ import annotations

import time
from typing import Any, Iterable

import jwt

from core import settings


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return settings.env_str("JWT_SECRET", "dev-change-this-secret-before-deploying")


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return settings.env_int("ACCESS_TOKEN_EXPIRE_MIN", 15)


def now_epoch_s() -> int:
    return int(time.time())


def build_access_token(*, user_id: int, projects: Iterable[int] | None = None) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    if projects is not None:
        payload["projects"] = [int(p) for p in projects]
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise AuthSecurityError("Invalid access token subject.")

    return payload


def can_access_project(claims: dict[str, Any], project_id: int) -> bool:
    """
    Tokens without a `projects` claim are not project-restricted.
    """
    projects = claims.get("projects")
    if projects is None:
        return True
    if not isinstance(projects, list):
        return False
    try:
        return project_id in {int(p) for p in projects}
    except (TypeError, ValueError):
        return False
