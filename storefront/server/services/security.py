"""
Password hashing and auth tokens.

Passwords are hashed with bcrypt. Sessions are stateless HS256 JWTs that
carry the user id under ``userId``; they are handed to browsers in an
http-only cookie and accepted from API clients as a Bearer token.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Response

from storefront.server.core.config import JWTConfig, settings


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: int, config: Optional[JWTConfig] = None) -> str:
    """Issue a signed token for ``user_id`` that expires after the configured lifetime."""
    config = config or settings.jwt
    payload = {
        "userId": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(days=config.expires_days),
    }
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_access_token(token: str, config: Optional[JWTConfig] = None) -> int:
    """Return the user id carried by ``token``.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, tampered with, expired,
            or does not carry a user id.
    """
    config = config or settings.jwt
    payload = jwt.decode(token, config.secret, algorithms=[config.algorithm])
    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise jwt.InvalidTokenError("Token does not carry a user id")
    return user_id


def set_auth_cookie(response: Response, user_id: int, config: Optional[JWTConfig] = None) -> str:
    """Issue a token for ``user_id`` and attach it to ``response`` as the auth cookie."""
    config = config or settings.jwt
    token = create_access_token(user_id, config)
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
        max_age=config.expires_days * 24 * 60 * 60,
    )
    return token


def clear_auth_cookie(response: Response, config: Optional[JWTConfig] = None) -> None:
    config = config or settings.jwt
    response.delete_cookie(key=config.cookie_name, httponly=True, secure=config.cookie_secure, samesite="strict")
