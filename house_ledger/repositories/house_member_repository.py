"""House roster data access"""
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from house_ledger.models.house_member import HouseMember, InviteStatus
from house_ledger.schemas.roster import RosterMember


class HouseMemberRepository:
    """Read-only access to house membership"""

    @staticmethod
    async def get_roster(db: AsyncSession, house_id: UUID) -> List[RosterMember]:
        """
        Get accepted members of a house with display metadata.

        Args:
            db: Database session
            house_id: House UUID

        Returns:
            Roster snapshot
        """
        result = await db.execute(
            select(HouseMember)
            .where(
                HouseMember.house_id == house_id,
                HouseMember.invite_status == InviteStatus.ACCEPTED,
            )
            .options(selectinload(HouseMember.profile))
        )
        roster = []
        for member in result.scalars().all():
            profile = member.profile
            roster.append(
                RosterMember(
                    user_id=member.user_id,
                    display_name=profile.display_name if profile else None,
                    avatar_url=profile.avatar_url if profile else None,
                    venmo_handle=profile.venmo_handle if profile else None,
                )
            )
        return roster

    @staticmethod
    async def is_member(db: AsyncSession, house_id: UUID, user_id: UUID) -> bool:
        """
        Check if user is an accepted member of the house.

        Args:
            db: Database session
            house_id: House UUID
            user_id: User UUID

        Returns:
            True if member, False otherwise
        """
        result = await db.execute(
            select(HouseMember.id).where(
                HouseMember.house_id == house_id,
                HouseMember.user_id == user_id,
                HouseMember.invite_status == InviteStatus.ACCEPTED,
            )
        )
        return result.first() is not None
