"""
api/routes/v1/auth.py -- Registration, login and token refresh endpoints.

Routes:
  POST /api/v1/auth/register   -- create account; returns a token pair (201)
  POST /api/v1/auth/login      -- password login; returns a token pair
  POST /api/v1/auth/refresh    -- exchange a refresh token for a new pair
  GET  /api/v1/auth/me         -- current account (requires access token)

Security:
  Login returns the same "invalid_credentials" error for unknown email and
  wrong password; AccountService runs bcrypt in both cases.
  Cache-Control: no-store on every response that carries tokens.

Handlers are plain def, not async def: bcrypt and the SQLAlchemy store are
blocking, so FastAPI runs them in its thread pool.

Errors raised by AuthService (core.errors) are rendered by the AuthCoreError
handler in api/main.py; no try/except here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import AccountResponseModel, LoginRequest, RefreshRequest, RegisterRequest, TokenPairResponse
from auth.dependencies import get_auth_service, get_bearer_token
from auth.models import TokenPair
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - POST /api/v1/auth/refresh:  public -- the refresh token is the credential
# - GET  /api/v1/auth/me:       requires access token
router = APIRouter()


def _token_response(auth_service: AuthService, pair: TokenPair, status_code: int = 200) -> JSONResponse:
    body = TokenPairResponse.from_domain(pair, expires_in=auth_service.tokens.access_expire_seconds)
    resp = JSONResponse(status_code=status_code, content=body.model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=TokenPairResponse, status_code=201)
def register(body: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Create an account with the default role and log it in."""
    pair = auth_service.register(body.email, body.password, body.name)
    return _token_response(auth_service, pair, status_code=201)


@router.post("/auth/login", response_model=TokenPairResponse)
def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Authenticate with email and password."""
    pair = auth_service.login(body.email, body.password)
    return _token_response(auth_service, pair)


@router.post("/auth/refresh", response_model=TokenPairResponse)
def refresh(body: RefreshRequest, auth_service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Mint a new token pair from current account state.

    401 if the refresh token is invalid or expired, 400 if it names an
    account that no longer exists.
    """
    pair = auth_service.refresh_token(body.refresh_token)
    return _token_response(auth_service, pair)


@router.get("/auth/me", response_model=AccountResponseModel)
def me(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccountResponseModel:
    """Return the account the bearer token was issued to."""
    return AccountResponseModel.from_domain(auth_service.current_account(token))
