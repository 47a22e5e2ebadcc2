"""Expense split data access"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from house_ledger.models.expense import Expense
from house_ledger.models.expense_split import ExpenseSplit


class SplitRepository:
    """Repository for ExpenseSplit database operations"""

    @staticmethod
    async def get_by_id(db: AsyncSession, split_id: UUID) -> Optional[ExpenseSplit]:
        """
        Get split by ID.

        Args:
            db: Database session
            split_id: Split UUID

        Returns:
            Split if found, None otherwise
        """
        result = await db.execute(
            select(ExpenseSplit)
            .where(ExpenseSplit.id == split_id)
            .options(selectinload(ExpenseSplit.debtor))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_unsettled_owed_to(
        db: AsyncSession, house_id: UUID, payer_id: UUID, debtor_id: UUID
    ) -> List[ExpenseSplit]:
        """
        Get unsettled splits where debtor owes payer, locked for update.

        Args:
            db: Database session
            house_id: House UUID
            payer_id: User who paid the expenses
            debtor_id: User who owes on them

        Returns:
            List of unsettled splits
        """
        result = await db.execute(
            select(ExpenseSplit)
            .join(Expense, ExpenseSplit.expense_id == Expense.id)
            .where(
                Expense.house_id == house_id,
                Expense.paid_by == payer_id,
                ExpenseSplit.user_id == debtor_id,
                ExpenseSplit.settled.is_(False),
            )
            .with_for_update(of=ExpenseSplit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_unsettled_between(
        db: AsyncSession, house_id: UUID, user_a_id: UUID, user_b_id: UUID
    ) -> List[ExpenseSplit]:
        """
        Get unsettled splits in both directions between two users.

        Rows are locked for update where the database supports it so a
        concurrent settle-up of the same pair waits on this one.

        Args:
            db: Database session
            house_id: House UUID
            user_a_id: First user
            user_b_id: Second user

        Returns:
            List of unsettled splits from either leg
        """
        result = await db.execute(
            select(ExpenseSplit)
            .join(Expense, ExpenseSplit.expense_id == Expense.id)
            .where(
                Expense.house_id == house_id,
                ExpenseSplit.settled.is_(False),
                or_(
                    and_(Expense.paid_by == user_a_id, ExpenseSplit.user_id == user_b_id),
                    and_(Expense.paid_by == user_b_id, ExpenseSplit.user_id == user_a_id),
                ),
            )
            .with_for_update(of=ExpenseSplit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def replace_for_expense(
        db: AsyncSession, expense: Expense, new_splits: List[ExpenseSplit]
    ) -> List[ExpenseSplit]:
        """
        Delete every split of an expense and insert a new set.

        The old rows are flushed away first so a debtor can reappear in
        the new set without tripping the per-expense unique constraint.
        Settlement state on the old rows is discarded.

        Args:
            db: Database session
            expense: Expense with its splits loaded
            new_splits: Replacement splits

        Returns:
            The new splits
        """
        expense.splits.clear()
        await db.flush()

        expense.splits.extend(new_splits)
        await db.flush()
        return new_splits
