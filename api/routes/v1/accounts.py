"""
api/routes/v1/accounts.py -- Account profile, update and deletion endpoints.

Routes:
  GET    /api/v1/accounts/{account_id}        -- public profile
  PATCH  /api/v1/accounts/{account_id}        -- partial update (name, email, password)
  DELETE /api/v1/accounts/{account_id}        -- soft delete
  PUT    /api/v1/accounts/{account_id}/roles  -- replace roles (admin only)

The first three require an access token belonging to the account itself or
to an admin (require_self_or_admin).

Unknown, deleted and out-of-range ids all answer 400 not_found, matching
the rest of the core's request-validation errors.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.models import AccountResponseModel, AccountUpdate, MessageResponse, RolesUpdate
from auth.dependencies import get_auth_service, require_role, require_self_or_admin
from auth.models import ROLE_ADMIN
from auth.service import AuthService

router = APIRouter()


@router.get("/accounts/{account_id}", response_model=AccountResponseModel)
def get_account(
    account_id: int,
    payload: dict[str, Any] = Depends(require_self_or_admin),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccountResponseModel:
    return AccountResponseModel.from_domain(auth_service.get_profile(account_id))


@router.patch("/accounts/{account_id}", response_model=AccountResponseModel)
def update_account(
    account_id: int,
    body: AccountUpdate,
    payload: dict[str, Any] = Depends(require_self_or_admin),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccountResponseModel:
    """Apply the supplied fields; omitted fields are left untouched."""
    updated = auth_service.update_account(account_id, **body.model_dump(exclude_unset=True))
    return AccountResponseModel.from_domain(updated)


@router.put("/accounts/{account_id}/roles", response_model=AccountResponseModel)
def set_account_roles(
    account_id: int,
    body: RolesUpdate,
    payload: dict[str, Any] = Depends(require_role(ROLE_ADMIN)),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccountResponseModel:
    updated = auth_service.update_account(account_id, roles=body.roles)
    return AccountResponseModel.from_domain(updated)


@router.delete("/accounts/{account_id}", response_model=MessageResponse)
def delete_account(
    account_id: int,
    payload: dict[str, Any] = Depends(require_self_or_admin),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Soft-delete the account. A second delete answers not_found."""
    return MessageResponse(**auth_service.delete_account(account_id))
