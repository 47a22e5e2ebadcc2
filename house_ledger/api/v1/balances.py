"""Balance endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.api.deps import get_house_member_id
from house_ledger.database import get_db
from house_ledger.repositories.house_member_repository import \
    HouseMemberRepository
from house_ledger.schemas.balance import BalanceBreakdown, BalanceData
from house_ledger.services.balance_service import BalanceService

router = APIRouter(prefix="/houses/{house_id}/balances", tags=["Balances"])


@router.get("", response_model=BalanceData)
async def get_balances(
    house_id: UUID,
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the current user's balance with every house member.

    Members with debt come first, largest net balance first; settled-up
    members follow alphabetically. A positive `net_balance` means that
    member owes the current user.
    """
    roster = await HouseMemberRepository.get_roster(db, house_id)
    return await BalanceService.get_user_balances(db, house_id, current_user_id, roster)


@router.get("/{user_id}", response_model=BalanceBreakdown)
async def get_balance_breakdown(
    house_id: UUID,
    user_id: UUID,
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get every split between the current user and another member.

    Settled items are listed for history; totals count unsettled items
    only.
    """
    roster = await HouseMemberRepository.get_roster(db, house_id)
    return await BalanceService.get_balance_breakdown(
        db, house_id, current_user_id, user_id, roster
    )
