"""Expense business logic"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.core.exceptions import (AuthorizationError, NotFoundError,
                                          ValidationError)
from house_ledger.database import storage_errors, write_transaction
from house_ledger.models.expense import Expense, ExpenseCategory
from house_ledger.models.expense_split import ExpenseSplit
from house_ledger.repositories.expense_repository import ExpenseRepository
from house_ledger.repositories.split_repository import SplitRepository
from house_ledger.schemas.expense import (ExpenseCreate, ExpenseUpdate,
                                          SplitInput, SplitMode)
from house_ledger.services.split_strategies import (MemberSplit,
                                                    get_split_strategy)
from house_ledger.utils.decimal_utils import (SPLIT_TOLERANCE, amounts_match,
                                              round_decimal, sum_decimals)

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for expense operations"""

    @staticmethod
    def validate_splits(total_amount: Decimal, splits: List[MemberSplit]) -> None:
        """
        Validate a full split set against the expense amount.

        Args:
            total_amount: Total expense amount
            splits: Every member's share, the payer's included

        Raises:
            ValidationError: If amounts are invalid or don't add up
        """
        if total_amount <= 0:
            raise ValidationError(f"Expense amount must be positive, got {total_amount}")

        seen = set()
        for split in splits:
            if split.amount < 0:
                raise ValidationError(f"Split amount cannot be negative, got {split.amount}")
            if split.user_id in seen:
                raise ValidationError(f"User {split.user_id} appears more than once in splits")
            seen.add(split.user_id)

        splits_total = sum_decimals(split.amount for split in splits)
        if not amounts_match(splits_total, total_amount):
            raise ValidationError(
                "Split amounts must equal the total expense amount",
                details={"splits_total": str(splits_total), "amount": str(total_amount)},
            )

    @staticmethod
    def build_splits(
        total_amount: Decimal,
        split_mode: SplitMode,
        split_inputs: List[SplitInput],
        payer_id: UUID,
    ) -> List[ExpenseSplit]:
        """
        Turn split input into rows to persist.

        The payer's own share counts toward the total but is not stored;
        it is recovered as ``Expense.payer_share``.

        Raises:
            ValidationError: If the split set is invalid
        """
        strategy = get_split_strategy(split_mode)
        calculated = strategy.calculate_splits(total_amount, split_inputs)

        ExpenseService.validate_splits(total_amount, calculated)

        return [
            ExpenseSplit(user_id=split.user_id, amount=split.amount, settled=False)
            for split in calculated
            if split.user_id != payer_id
        ]

    @staticmethod
    async def create_expense(
        db: AsyncSession,
        house_id: UUID,
        payer_id: UUID,
        creator_id: UUID,
        expense_data: ExpenseCreate,
    ) -> Expense:
        """
        Create an expense together with its splits.

        Args:
            db: Database session
            house_id: House the expense belongs to
            payer_id: User who paid
            creator_id: User recording the expense
            expense_data: Expense fields and split set

        Returns:
            Created expense with splits and profiles loaded

        Raises:
            ValidationError: If validation fails (nothing is written)
            StorageError: If the write fails (nothing is kept)
        """
        amount = round_decimal(expense_data.amount)
        splits = ExpenseService.build_splits(
            amount, expense_data.split_mode, expense_data.splits, payer_id
        )

        async with write_transaction(db, "create expense"):
            expense = Expense(
                house_id=house_id,
                title=expense_data.title,
                description=expense_data.description,
                amount=amount,
                category=expense_data.category,
                date=expense_data.date,
                paid_by=payer_id,
                created_by=creator_id,
                receipt_url=expense_data.receipt_url,
            )
            expense.splits = splits

            created_expense = await ExpenseRepository.create(db, expense)
            expense_id = created_expense.id

        logger.info(
            "Created expense %s in house %s: %s paid by %s with %d splits",
            expense_id, house_id, amount, payer_id, len(splits),
        )

        return await ExpenseRepository.get_with_details(db, expense_id)

    @staticmethod
    async def update_expense(
        db: AsyncSession,
        expense_id: UUID,
        expense_data: ExpenseUpdate,
    ) -> Expense:
        """
        Re-issue an expense's fields, optionally replacing its splits.

        Replacing splits discards their settlement state: a debtor whose
        split was settled comes back unsettled. Without new splits, the kept
        ones must still fit inside the new amount.

        Args:
            db: Database session
            expense_id: Expense ID
            expense_data: Full field set, with optional splits

        Returns:
            Updated expense

        Raises:
            NotFoundError: If expense not found
            ValidationError: If validation fails (nothing is written)
            StorageError: If the write fails (nothing is kept)
        """
        expense = await ExpenseService.get_expense(db, expense_id)

        amount = round_decimal(expense_data.amount)
        if amount <= 0:
            raise ValidationError(f"Expense amount must be positive, got {amount}")

        new_splits: Optional[List[ExpenseSplit]] = None
        if expense_data.splits is not None:
            new_splits = ExpenseService.build_splits(
                amount, expense_data.split_mode, expense_data.splits, expense.paid_by
            )
        else:
            # Kept splits must still fit inside the new amount
            owed_total = sum_decimals(split.amount for split in expense.splits)
            if owed_total > amount + SPLIT_TOLERANCE:
                raise ValidationError(
                    "Existing split amounts exceed the new expense amount; resubmit the splits",
                    details={"splits_total": str(owed_total), "amount": str(amount)},
                )

        async with write_transaction(db, "update expense"):
            expense.title = expense_data.title
            expense.description = expense_data.description
            expense.amount = amount
            expense.category = expense_data.category
            expense.date = expense_data.date
            expense.receipt_url = expense_data.receipt_url

            if new_splits is not None:
                await SplitRepository.replace_for_expense(db, expense, new_splits)
            else:
                await db.flush()

        logger.info(
            "Updated expense %s (splits %s)",
            expense_id, "replaced" if new_splits is not None else "kept",
        )

        return await ExpenseRepository.get_with_details(db, expense_id)

    @staticmethod
    async def delete_expense(db: AsyncSession, expense_id: UUID) -> None:
        """
        Delete an expense and its splits.

        Raises:
            NotFoundError: If expense not found
            StorageError: If the delete fails
        """
        expense = await ExpenseService.get_expense(db, expense_id)

        async with write_transaction(db, "delete expense"):
            await ExpenseRepository.delete(db, expense)

        logger.info("Deleted expense %s", expense_id)

    @staticmethod
    @storage_errors("load expense")
    async def get_expense(db: AsyncSession, expense_id: UUID) -> Expense:
        """
        Get an expense with payer, creator and split profiles.

        Raises:
            NotFoundError: If expense not found
        """
        expense = await ExpenseRepository.get_with_details(db, expense_id)

        if not expense:
            raise NotFoundError(f"Expense {expense_id} not found")

        return expense

    @staticmethod
    @storage_errors("list expenses")
    async def list_expenses(
        db: AsyncSession,
        house_id: UUID,
        page: int = 1,
        page_size: int = 50,
        category: Optional[ExpenseCategory] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[List[Expense], int]:
        """
        Get a page of a house's expenses, most recent first.

        Args:
            db: Database session
            house_id: House ID
            page: Page number (1-indexed)
            page_size: Items per page
            category: Optional category filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            Tuple of (expenses list, total count)
        """
        skip = (page - 1) * page_size

        expenses = await ExpenseRepository.get_house_expenses(
            db,
            house_id,
            skip=skip,
            limit=page_size,
            category=category,
            start_date=start_date,
            end_date=end_date,
        )

        total_count = await ExpenseRepository.count_house_expenses(
            db,
            house_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
        )

        return expenses, total_count

    @staticmethod
    def ensure_can_modify(expense: Expense, user_id: UUID) -> None:
        """
        Only the creator or the payer may edit or delete an expense.

        Raises:
            AuthorizationError: If user is neither
        """
        if user_id not in (expense.created_by, expense.paid_by):
            raise AuthorizationError(
                "Only the expense creator or payer can modify it"
            )
