"""JWT helpers"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from house_ledger.config import get_settings

settings = get_settings()


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Tokens are normally minted by the identity service; this is used by
    tooling and tests that share the signing secret.

    Args:
        subject: User ID to place in the ``sub`` claim
        expires_delta: Optional lifetime override

    Returns:
        Encoded JWT
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        JWTError: If the signature or expiry check fails
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
