from uuid import UUID

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.core.exceptions import UnauthorizedError
from ai_visibility.core.security import decode_token
from ai_visibility.db.postgres import get_db
from ai_visibility.models.user import User


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    authorization: str = Header(..., description="Bearer <token>"),
) -> User:
    if not authorization.startswith("Bearer "):
        raise UnauthorizedError("Invalid authorization header")

    token = authorization[7:]
    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid or expired token")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise UnauthorizedError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_uuid, User.is_active == True))  # noqa: E712
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("User not found or inactive")

    # The account claim must agree with the user's account
    account_claim = payload.get("aid")
    if account_claim and account_claim != str(user.account_id):
        raise UnauthorizedError("Token account mismatch")

    return user


async def get_current_account_id(user: User = Depends(get_current_user)) -> UUID:
    return user.account_id
