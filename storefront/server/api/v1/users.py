"""
User and Authentication Endpoints.

This module handles account registration, login/logout (cookie based),
self-service profile management and admin user management.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from storefront.core.database.entities.users import User
from storefront.core.logging_config import get_logger
from storefront.core.models.io.base import MessageResponse
from storefront.core.models.io.users import (
    ProfileUpdate,
    UserAdminUpdate,
    UserDetail,
    UserLogin,
    UserRead,
    UserRegister,
)
from storefront.server.services.deps import AdminUserDep, CurrentUserDep, ReposDep
from storefront.server.services.security import (
    clear_auth_cookie,
    hash_password,
    set_auth_cookie,
    verify_password,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a customer account and sign it in.",
    responses={400: {"description": "Missing fields or email already registered"}},
)
async def register(payload: UserRegister, response: Response, repos: ReposDep) -> UserRead:
    """
    Register a new account.

    The password is stored as a bcrypt hash and the auth cookie is set on the
    response, so the new user is signed in immediately.
    """
    username, email, password = payload.username.strip(), payload.email.strip(), payload.password
    if not username or not email or not password:
        raise HTTPException(status_code=400, detail="Please fill all the inputs.")

    if await repos.users.get_by_email(email):
        raise HTTPException(status_code=400, detail="User already exists")

    user = await repos.users.create(User(username=username, email=email, password=hash_password(password)))
    set_auth_cookie(response, user.id)  # type: ignore[arg-type]
    logger.info(f"Registered user {user.id}")
    return UserRead.model_validate(user)


@router.post(
    "/auth",
    response_model=UserRead,
    summary="Login",
    description="Check credentials and set the auth cookie.",
    responses={401: {"description": "Invalid email or password"}},
)
async def login(payload: UserLogin, response: Response, repos: ReposDep) -> UserRead:
    user = await repos.users.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    set_auth_cookie(response, user.id)  # type: ignore[arg-type]
    return UserRead.model_validate(user)


@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout(response: Response) -> MessageResponse:
    """Clear the auth cookie."""
    clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("", response_model=List[UserDetail], summary="List Users (admin)")
async def list_users(_: AdminUserDep, repos: ReposDep) -> List[UserDetail]:
    return [UserDetail.model_validate(u) for u in await repos.users.list()]


@router.get("/profile", response_model=UserRead, summary="Get Current User Profile")
async def get_profile(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update Current User Profile",
    responses={400: {"description": "Email already in use"}},
)
async def update_profile(payload: ProfileUpdate, user: CurrentUserDep, repos: ReposDep) -> UserRead:
    """
    Update the signed-in user's profile.

    Only the provided fields change. A new password is re-hashed.
    """
    if payload.email is not None:
        owner = await repos.users.get_by_email(payload.email)
        if owner is not None and owner.id != user.id:
            raise HTTPException(status_code=400, detail="Email already in use")
        user.email = payload.email
    if payload.username is not None:
        user.username = payload.username
    if payload.password is not None:
        user.password = hash_password(payload.password)

    user = await repos.users.update(user)
    return UserRead.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get User (admin)",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: int, _: AdminUserDep, repos: ReposDep) -> UserRead:
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserRead,
    summary="Update User (admin)",
    responses={404: {"description": "User not found"}, 400: {"description": "Email already in use"}},
)
async def update_user(user_id: int, payload: UserAdminUpdate, _: AdminUserDep, repos: ReposDep) -> UserRead:
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if payload.email is not None:
        owner = await repos.users.get_by_email(payload.email)
        if owner is not None and owner.id != user.id:
            raise HTTPException(status_code=400, detail="Email already in use")
        user.email = payload.email
    if payload.username is not None:
        user.username = payload.username
    if payload.is_admin is not None:
        user.is_admin = payload.is_admin

    user = await repos.users.update(user)
    return UserRead.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete User (admin)",
    responses={400: {"description": "Admins cannot be deleted"}, 404: {"description": "User not found"}},
)
async def delete_user(user_id: int, _: AdminUserDep, repos: ReposDep) -> MessageResponse:
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.is_admin:
        raise HTTPException(status_code=400, detail="Cannot delete admin user")

    await repos.users.delete(user_id)
    logger.info(f"Deleted user {user_id}")
    return MessageResponse(message="User removed")
