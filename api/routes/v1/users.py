"""
api/routes/v1/users.py -- Account CRUD endpoints.

Routes:
  GET    /api/v1/users                  -- list all users
  GET    /api/v1/users/{id}             -- user by id
  GET    /api/v1/users/email/{email}    -- user by email
  PUT    /api/v1/users/{id}             -- overwrite firstName + lastName
  PUT    /api/v1/users/{id}/password    -- set a new password
  DELETE /api/v1/users/{id}             -- delete the account

Every route requires a valid bearer token (get_current_user_id). There is no
role model: any authenticated caller may use any route. Missing users raise
UserNotFound, rendered as 404 by the handler in api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import ApiResponse, PasswordUpdateRequest, UserResponse, UserUpdateRequest, envelope
from auth.accounts import AccountService
from auth.dependencies import get_account_service, get_current_user_id

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("/users", response_model=ApiResponse[list[UserResponse]])
def list_users(accounts: AccountService = Depends(get_account_service)) -> ApiResponse[list[UserResponse]]:
    result = accounts.list_users()
    return ApiResponse[list[UserResponse]](**envelope(result, [UserResponse.from_view(v) for v in result.data]))


@router.get("/users/email/{email}", response_model=ApiResponse[UserResponse])
def get_user_by_email(email: str, accounts: AccountService = Depends(get_account_service)) -> ApiResponse[UserResponse]:
    result = accounts.get_by_email(email)
    return ApiResponse[UserResponse](**envelope(result, UserResponse.from_view(result.data)))


@router.get("/users/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, accounts: AccountService = Depends(get_account_service)) -> ApiResponse[UserResponse]:
    result = accounts.get_by_id(user_id)
    return ApiResponse[UserResponse](**envelope(result, UserResponse.from_view(result.data)))


@router.put("/users/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[UserResponse]:
    """Replace both name fields. Omitted fields are not merged from the old record."""
    result = accounts.update_profile(user_id, body.first_name, body.last_name)
    return ApiResponse[UserResponse](**envelope(result, UserResponse.from_view(result.data)))


@router.put("/users/{user_id}/password", response_model=ApiResponse[None])
def update_user_password(
    user_id: int,
    body: PasswordUpdateRequest,
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[None]:
    result = accounts.update_password(user_id, body.new_password)
    return ApiResponse[None](**envelope(result))


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, accounts: AccountService = Depends(get_account_service)) -> ApiResponse[None]:
    result = accounts.delete_user(user_id)
    return ApiResponse[None](**envelope(result))
