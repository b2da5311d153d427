"""
User CRUD API routes
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from config import settings
from models.user import UserCreate, UserUpdateRequest, UserResponse, UserListResponse, UserListData
from services.users_service import UsersService, get_users_service
from utils.error_handling import set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)

USER_UPDATED_MESSAGE = "user updated successfully"
USER_DELETED_MESSAGE = "user deleted successfully"
USER_MISSING_MESSAGE = "user doesn't exist"
USERS_LISTED_MESSAGE = "Successfully retrieved user details"

_NOT_FOUND_RESPONSES = {404: {"description": "User doesn't exist", "content": {"text/plain": {}}}}


def _user_missing_response() -> PlainTextResponse:
    status_code = 200 if settings.LEGACY_NOT_FOUND_STATUS else 404
    return PlainTextResponse(USER_MISSING_MESSAGE, status_code=status_code)


@router.get(
    "/",
    response_model=UserListResponse,
    summary="Get all user details",
    description="Retrieve all user details from the server."
)
async def list_users(users_service: UsersService = Depends(get_users_service)):
    set_endpoint_context("list_users")
    users = await users_service.find_all()
    return UserListResponse(
        message=USERS_LISTED_MESSAGE,
        data=UserListData(users=[UserResponse(**user) for user in users])
    )


@router.post(
    "/user",
    response_model=UserResponse,
    summary="add new user",
    description="add new user."
)
async def create_user(
    request: UserCreate,
    users_service: UsersService = Depends(get_users_service)
):
    set_endpoint_context("create_user")
    user = await users_service.create(
        name=request.name,
        department=request.department,
        dob=request.dob
    )
    return UserResponse(**user)


@router.put(
    "/user/{user_id}",
    response_class=PlainTextResponse,
    responses=_NOT_FOUND_RESPONSES,
    summary="Update a user",
    description="Update a user."
)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Overwrites name, department and dob of the user with the given id"""
    set_endpoint_context("update_user")
    result = await users_service.update(
        user_id,
        name=request.name,
        department=request.department,
        dob=request.dob
    )

    if result.not_found:
        return _user_missing_response()

    return PlainTextResponse(USER_UPDATED_MESSAGE)


@router.delete(
    "/user/{user_id}",
    response_class=PlainTextResponse,
    responses=_NOT_FOUND_RESPONSES,
    summary="delete a user",
    description="delete a user."
)
async def delete_user(
    user_id: int,
    users_service: UsersService = Depends(get_users_service)
):
    set_endpoint_context("delete_user")
    result = await users_service.delete(user_id)

    if result.not_found:
        return _user_missing_response()

    return PlainTextResponse(USER_DELETED_MESSAGE)
