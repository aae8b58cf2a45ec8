"""
API Dependencies.

Provides the database session, the repository bundle, the authenticated
user (and admin), the eSewa client and the order service to API endpoints.
"""

from functools import lru_cache
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database.entities.users import User
from storefront.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from storefront.core.database.session import get_session
from storefront.core.logging_config import get_logger
from storefront.payments.esewa import EsewaClient
from storefront.server.core.config import settings

from .orders import OrderService
from .security import decode_access_token

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_repos(session: SessionDep) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


ReposDep = Annotated[SqlRepoBundle, Depends(get_repos)]


async def get_current_user(
    request: Request,
    repos: ReposDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Resolve the authenticated user.

    An ``Authorization: Bearer`` header wins over the auth cookie.
    """
    token = credentials.credentials if credentials is not None else request.cookies.get(settings.jwt.cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token.")

    try:
        user_id = decode_access_token(token)
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected auth token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed.")

    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed.")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def get_admin_user(user: CurrentUserDep) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized as an admin.")
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]


@lru_cache
def get_esewa_client() -> EsewaClient:
    """Shared eSewa client built from settings."""
    config = settings.esewa
    return EsewaClient(
        payment_url=config.payment_url,
        verify_url=config.verify_url,
        merchant_code=config.merchant_code,
        timeout=config.timeout,
    )


EsewaDep = Annotated[EsewaClient, Depends(get_esewa_client)]


def get_order_service(repos: ReposDep, esewa: EsewaDep) -> OrderService:
    return OrderService(repos, esewa)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
