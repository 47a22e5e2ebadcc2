"""Settlement logic"""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.core.exceptions import NotFoundError, ValidationError
from house_ledger.database import write_transaction
from house_ledger.models.expense_split import ExpenseSplit
from house_ledger.repositories.split_repository import SplitRepository
from house_ledger.schemas.settlement import SettlementResult
from house_ledger.services.notification_service import (
    NotificationDispatcher, NotificationRequest)
from house_ledger.utils.decimal_utils import round_decimal, sum_decimals

logger = logging.getLogger(__name__)


class SettlementService:
    """
    The only path that settles or unsettles splits.

    Each operation commits once; a failure rolls back every split it
    touched.
    """

    @staticmethod
    async def _get_split(db: AsyncSession, split_id: UUID) -> ExpenseSplit:
        split = await SplitRepository.get_by_id(db, split_id)
        if not split:
            raise NotFoundError(f"Split {split_id} not found")
        return split

    @staticmethod
    def _settle_all(splits: List[ExpenseSplit], settled_by: UUID) -> SettlementResult:
        gross = round_decimal(sum_decimals(split.amount for split in splits))
        settled_at = datetime.utcnow()
        for split in splits:
            split.mark_settled(settled_by, settled_at)
        return SettlementResult(settled_count=len(splits), net_amount=gross)

    @staticmethod
    async def settle_split(
        db: AsyncSession, split_id: UUID, settled_by: UUID
    ) -> ExpenseSplit:
        """
        Mark one split as settled.

        Settling an already-settled split re-stamps the time and settler.

        Args:
            db: Database session
            split_id: Split ID
            settled_by: User performing the settlement

        Returns:
            The settled split

        Raises:
            NotFoundError: If split not found
            StorageError: If the write fails
        """
        async with write_transaction(db, "settle split"):
            split = await SettlementService._get_split(db, split_id)
            split.mark_settled(settled_by)
            await db.flush()

        logger.info("Split %s settled by %s", split_id, settled_by)
        return split

    @staticmethod
    async def unsettle_split(db: AsyncSession, split_id: UUID) -> ExpenseSplit:
        """
        Return a split to the unsettled state, clearing its audit fields.

        Raises:
            NotFoundError: If split not found
            StorageError: If the write fails
        """
        async with write_transaction(db, "unsettle split"):
            split = await SettlementService._get_split(db, split_id)
            split.mark_unsettled()
            await db.flush()

        logger.info("Split %s unsettled", split_id)
        return split

    @staticmethod
    async def settle_all_with_user(
        db: AsyncSession,
        house_id: UUID,
        initiator_id: UUID,
        counterparty_id: UUID,
    ) -> SettlementResult:
        """
        Settle everything the counterparty owes the initiator.

        Splits the initiator owes the counterparty are left alone.

        Args:
            db: Database session
            house_id: House ID
            initiator_id: Payer marking their debts as collected
            counterparty_id: Debtor

        Returns:
            Count and gross amount of the splits settled

        Raises:
            ValidationError: If initiator and counterparty are the same user
            StorageError: If the write fails (nothing is kept)
        """
        if initiator_id == counterparty_id:
            raise ValidationError("Cannot settle with yourself")

        async with write_transaction(db, "settle all with user"):
            splits = await SplitRepository.get_unsettled_owed_to(
                db, house_id, initiator_id, counterparty_id
            )
            result = SettlementService._settle_all(splits, initiator_id)
            await db.flush()

        logger.info(
            "Settled %d splits (%s) owed by %s to %s in house %s",
            result.settled_count, result.net_amount, counterparty_id, initiator_id, house_id,
        )
        return result

    @staticmethod
    async def settle_up(
        db: AsyncSession,
        house_id: UUID,
        initiator_id: UUID,
        counterparty_id: UUID,
        dispatcher: Optional[NotificationDispatcher] = None,
        initiator_name: Optional[str] = None,
    ) -> SettlementResult:
        """
        Settle all live debt between two users in both directions.

        Every split in either direction is stamped with the initiator as
        settler. Both legs commit together.

        Args:
            db: Database session
            house_id: House ID
            initiator_id: User triggering the settle-up
            counterparty_id: Other user
            dispatcher: Optional dispatcher to notify the counterparty
            initiator_name: Display name used in the notification

        Returns:
            Count and gross amount of the splits settled

        Raises:
            ValidationError: If initiator and counterparty are the same user
            StorageError: If the write fails (nothing is kept)
        """
        if initiator_id == counterparty_id:
            raise ValidationError("Cannot settle up with yourself")

        async with write_transaction(db, "settle up"):
            splits = await SplitRepository.get_unsettled_between(
                db, house_id, initiator_id, counterparty_id
            )
            result = SettlementService._settle_all(splits, initiator_id)
            await db.flush()

        logger.info(
            "Settle-up between %s and %s in house %s: %d splits, %s",
            initiator_id, counterparty_id, house_id, result.settled_count, result.net_amount,
        )

        if dispatcher is not None and result.settled_count > 0:
            SettlementService._notify_settle_up(
                dispatcher, house_id, initiator_id, counterparty_id, result, initiator_name
            )

        return result

    @staticmethod
    def _notify_settle_up(
        dispatcher: NotificationDispatcher,
        house_id: UUID,
        initiator_id: UUID,
        counterparty_id: UUID,
        result: SettlementResult,
        initiator_name: Optional[str],
    ) -> None:
        noun = "expense" if result.settled_count == 1 else "expenses"
        summary = (
            f"{initiator_name or 'A housemate'} settled up with you: "
            f"{result.settled_count} {noun} totaling ${result.net_amount:.2f}"
        )
        request = NotificationRequest(
            recipient=counterparty_id,
            summary=summary,
            data={
                "type": "settle_up",
                "house_id": str(house_id),
                "initiator_id": str(initiator_id),
                "settled_count": result.settled_count,
                "amount": str(result.net_amount),
            },
        )
        try:
            dispatcher.dispatch(request)
        except Exception:
            logger.exception("Could not schedule settle-up notification for %s", counterparty_id)
