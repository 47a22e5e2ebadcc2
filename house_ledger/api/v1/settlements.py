"""Settlement endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.api.deps import (get_current_user_id, get_dispatcher,
                                   get_house_member_id, require_house_member)
from house_ledger.database import get_db
from house_ledger.repositories.house_member_repository import \
    HouseMemberRepository
from house_ledger.repositories.split_repository import SplitRepository
from house_ledger.schemas.expense import SplitResponse
from house_ledger.schemas.settlement import (SettlementResult,
                                             SettleWithUserRequest)
from house_ledger.services.expense_service import ExpenseService
from house_ledger.services.notification_service import NotificationDispatcher
from house_ledger.services.settlement_service import SettlementService

router = APIRouter(tags=["Settlements"])


async def _check_split_access(db: AsyncSession, split_id: UUID, user_id: UUID) -> None:
    split = await SplitRepository.get_by_id(db, split_id)
    if split is None:
        # Let the service raise NotFoundError
        return
    expense = await ExpenseService.get_expense(db, split.expense_id)
    await require_house_member(db, expense.house_id, user_id)


@router.post("/splits/{split_id}/settle", response_model=SplitResponse)
async def settle_split(
    split_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark one split as paid, recording the current user as settler."""
    await _check_split_access(db, split_id, current_user_id)
    split = await SettlementService.settle_split(db, split_id, current_user_id)
    return SplitResponse.model_validate(split)


@router.post("/splits/{split_id}/unsettle", response_model=SplitResponse)
async def unsettle_split(
    split_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Undo a mistaken settlement."""
    await _check_split_access(db, split_id, current_user_id)
    split = await SettlementService.unsettle_split(db, split_id)
    return SplitResponse.model_validate(split)


@router.post("/houses/{house_id}/settlements/settle-all", response_model=SettlementResult)
async def settle_all_with_user(
    house_id: UUID,
    request: SettleWithUserRequest,
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark everything the counterparty owes the current user as paid."""
    return await SettlementService.settle_all_with_user(
        db, house_id, current_user_id, request.counterparty_id
    )


@router.post("/houses/{house_id}/settlements/settle-up", response_model=SettlementResult)
async def settle_up(
    house_id: UUID,
    request: SettleWithUserRequest,
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Clear all outstanding amounts with the counterparty in both directions.

    The counterparty is notified in the background.
    """
    roster = await HouseMemberRepository.get_roster(db, house_id)
    initiator_name = next(
        (m.display_name for m in roster if m.user_id == current_user_id), None
    )
    return await SettlementService.settle_up(
        db,
        house_id,
        current_user_id,
        request.counterparty_id,
        dispatcher=dispatcher,
        initiator_name=initiator_name,
    )
