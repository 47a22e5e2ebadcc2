"""Expense data access"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from house_ledger.models.expense import Expense, ExpenseCategory
from house_ledger.models.expense_split import ExpenseSplit


def _detail_options():
    """Eager loads needed to render an expense with its people"""
    return (
        selectinload(Expense.payer),
        selectinload(Expense.creator),
        selectinload(Expense.splits).selectinload(ExpenseSplit.debtor),
        selectinload(Expense.splits).selectinload(ExpenseSplit.settler),
    )


def _apply_filters(query, house_id, category, start_date, end_date):
    query = query.where(Expense.house_id == house_id)
    if category:
        query = query.where(Expense.category == category)
    if start_date:
        query = query.where(Expense.date >= start_date)
    if end_date:
        query = query.where(Expense.date <= end_date)
    return query


class ExpenseRepository:
    """Repository for Expense database operations"""

    @staticmethod
    async def create(db: AsyncSession, expense: Expense) -> Expense:
        """
        Stage a new expense and flush it to obtain its ID.

        Args:
            db: Database session
            expense: Expense object to create

        Returns:
            Created expense
        """
        db.add(expense)
        await db.flush()
        return expense

    @staticmethod
    async def get_by_id(db: AsyncSession, expense_id: UUID) -> Optional[Expense]:
        """
        Get expense by ID.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense if found, None otherwise
        """
        result = await db.execute(select(Expense).where(Expense.id == expense_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_details(
        db: AsyncSession, expense_id: UUID
    ) -> Optional[Expense]:
        """
        Get expense with splits, payer, creator and settlers eagerly loaded.

        Rows already in the session are refreshed so a read after a write
        reflects the committed split set.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense with details if found, None otherwise
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .options(*_detail_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_house_expenses(
        db: AsyncSession,
        house_id: UUID,
        skip: int = 0,
        limit: Optional[int] = None,
        category: Optional[ExpenseCategory] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Expense]:
        """
        Get expenses of a house, most recent first.

        Args:
            db: Database session
            house_id: House UUID
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)
            category: Optional category filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            List of expenses with splits and profiles loaded
        """
        query = _apply_filters(select(Expense), house_id, category, start_date, end_date)

        query = query.order_by(Expense.date.desc(), Expense.created_at.desc())

        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        query = query.options(*_detail_options()).execution_options(
            populate_existing=True
        )

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def count_house_expenses(
        db: AsyncSession,
        house_id: UUID,
        category: Optional[ExpenseCategory] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """
        Count expenses of a house with filters.

        Returns:
            Total count of expenses
        """
        query = _apply_filters(
            select(func.count(Expense.id)), house_id, category, start_date, end_date
        )
        result = await db.execute(query)
        return result.scalar_one()

    @staticmethod
    async def delete(db: AsyncSession, expense: Expense) -> None:
        """
        Delete an expense; its splits go with it.

        Args:
            db: Database session
            expense: Expense to delete
        """
        await db.delete(expense)
        await db.flush()
