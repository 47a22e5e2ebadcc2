"""Dependency injection (auth, db, house membership)"""

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.core.exceptions import AuthorizationError
from house_ledger.core.security import verify_token
from house_ledger.database import get_db
from house_ledger.repositories.house_member_repository import \
    HouseMemberRepository
from house_ledger.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher)

# Tokens are issued by the identity service
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> UUID:
    """
    Get the current user's ID from the bearer token.

    Args:
        token: JWT access token

    Returns:
        Current user ID

    Raises:
        HTTPException: If token is invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(token)
        user_id_str = payload.get("sub")

        if user_id_str is None:
            raise credentials_exception

        return UUID(user_id_str)

    except (JWTError, ValueError):
        raise credentials_exception


async def require_house_member(
    db: AsyncSession, house_id: UUID, user_id: UUID
) -> None:
    """
    Ensure the user is an accepted member of the house.

    Raises:
        AuthorizationError: If not a member
    """
    if not await HouseMemberRepository.is_member(db, house_id, user_id):
        raise AuthorizationError("You are not a member of this house")


async def get_house_member_id(
    house_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UUID:
    """Current user ID, checked against the house in the path"""
    await require_house_member(db, house_id, current_user_id)
    return current_user_id


def get_dispatcher() -> NotificationDispatcher:
    """Notification dispatcher dependency"""
    return get_notification_dispatcher()
