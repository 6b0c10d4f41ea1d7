"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Access tokens arrive as "Authorization: Bearer <token>". Verification is
delegated to AuthService.verify_access_token(); any failure surfaces as
UnauthenticatedError, which api/main.py renders as 401.

get_token_payload() is the base guard.
require_role() wraps it and raises HTTP 403 if the token lacks a role.
require_self_or_admin() resolves the account named in the path and lets the
token owner or an admin through.

Layer rule: may import from fastapi (Depends/HTTPException/Request) because
this module is part of the FastAPI dependency injection system. No imports
from api/.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, HTTPException, Request

from auth.models import ROLE_ADMIN
from auth.service import AuthService
from core.errors import UnauthenticatedError


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_bearer_token(request: Request) -> str:
    """Return the bearer token from the Authorization header or raise UnauthenticatedError."""
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:].strip() if auth_header.startswith("Bearer ") else ""
    if not token:
        raise UnauthenticatedError("Authentication required.")
    return token


def get_token_payload(request: Request, token: str = Depends(get_bearer_token)) -> dict[str, Any]:
    """Require a valid access token. Raises UnauthenticatedError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(payload: dict = Depends(get_token_payload)): ...
    """
    return get_auth_service(request).verify_access_token(token)


def require_role(role: str) -> Callable[..., dict[str, Any]]:
    """Build a dependency that requires the access token to carry role."""

    def _guard(payload: dict[str, Any] = Depends(get_token_payload)) -> dict[str, Any]:
        if role not in payload.get("roles", []):
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": f"Role '{role}' required."},
            )
        return payload

    return _guard


def require_self_or_admin(
    account_id: int,
    request: Request,
    payload: dict[str, Any] = Depends(get_token_payload),
) -> dict[str, Any]:
    """Allow the request if the token belongs to account_id or carries the admin role.

    The target account is resolved first, so an unknown or deleted id yields
    NotFoundError for every caller.
    """
    target = get_auth_service(request).get_profile(account_id)
    if ROLE_ADMIN in payload.get("roles", []):
        return payload
    if target.email != payload["email"]:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "You may only access your own account."},
        )
    return payload
