"""JWT access tokens for the API.

Token issuance belongs to the external auth service; this module only has to
agree with it on the payload: ``sub`` is the user id, ``aid`` the account id.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from ai_visibility.core.config import settings


def create_access_token(user_id: UUID, account_id: UUID) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "aid": str(account_id),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
