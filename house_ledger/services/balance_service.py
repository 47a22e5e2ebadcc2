"""Balance calculation logic"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.database import storage_errors
from house_ledger.models.expense import Expense
from house_ledger.repositories.expense_repository import ExpenseRepository
from house_ledger.schemas.balance import (BalanceBreakdown, BalanceData,
                                          BalanceSummary, BreakdownItem,
                                          UserBalance)
from house_ledger.schemas.roster import RosterMember
from house_ledger.utils.decimal_utils import round_decimal, sum_decimals

ZERO = Decimal("0")


class BalanceService:
    """
    Net positions between house members.

    Nothing here is cached or written back: every call walks the current
    splits, so a balance can never drift from the ledger. The ``calculate_*``
    methods are pure; the ``get_*`` methods load a house's expenses and
    delegate to them.
    """

    @staticmethod
    def _balance_sort_key(balance: UserBalance):
        """Non-zero nets first by size, then zero nets by name"""
        if balance.net_balance != 0:
            return (0, -abs(balance.net_balance), "", str(balance.user_id))
        return (1, ZERO, (balance.display_name or "").lower(), str(balance.user_id))

    @staticmethod
    def calculate_balances(
        expenses: Iterable[Expense],
        roster: List[RosterMember],
        user_id: UUID,
    ) -> BalanceData:
        """
        Calculate the user's balance against every other member.

        Args:
            expenses: House expenses with their splits loaded
            roster: Current house members
            user_id: Viewing user

        Returns:
            Per-counterparty balances and a house-wide summary
            (``owes`` = counterparty owes the user,
            ``owed`` = the user owes the counterparty)
        """
        owes_me: Dict[UUID, Decimal] = defaultdict(Decimal)
        i_owe: Dict[UUID, Decimal] = defaultdict(Decimal)

        for expense in expenses:
            payer_id = expense.paid_by
            for split in expense.splits:
                if split.settled:
                    continue

                if payer_id == user_id and split.user_id != user_id:
                    owes_me[split.user_id] += Decimal(split.amount)
                elif split.user_id == user_id and payer_id != user_id:
                    i_owe[payer_id] += Decimal(split.amount)

        members = {member.user_id: member for member in roster}

        counterparties = [m for m in members if m != user_id]
        # Former members with live debt still show up
        for other_id in list(owes_me) + list(i_owe):
            if other_id not in members and other_id not in counterparties:
                counterparties.append(other_id)

        balances: List[UserBalance] = []
        for other_id in counterparties:
            member = members.get(other_id)
            owes = owes_me.get(other_id, ZERO)
            owed = i_owe.get(other_id, ZERO)
            balances.append(
                UserBalance(
                    user_id=other_id,
                    display_name=member.display_name if member else None,
                    avatar_url=member.avatar_url if member else None,
                    venmo_handle=member.venmo_handle if member else None,
                    owes=round_decimal(owes),
                    owed=round_decimal(owed),
                    net_balance=round_decimal(owes - owed),
                )
            )

        balances.sort(key=BalanceService._balance_sort_key)

        total_owed_to_me = round_decimal(sum_decimals(b.owes for b in balances))
        total_i_owe = round_decimal(sum_decimals(b.owed for b in balances))

        summary = BalanceSummary(
            total_owed_to_me=total_owed_to_me,
            total_i_owe=total_i_owe,
            net_balance=round_decimal(total_owed_to_me - total_i_owe),
        )

        return BalanceData(balances=balances, summary=summary)

    @staticmethod
    def _breakdown_item(expense: Expense, split, names: Dict[UUID, Optional[str]]) -> BreakdownItem:
        return BreakdownItem(
            expense_id=expense.id,
            split_id=split.id,
            title=expense.title,
            description=expense.description or None,
            category=expense.category,
            date=expense.date,
            split_amount=round_decimal(Decimal(split.amount)),
            total_expense_amount=round_decimal(Decimal(expense.amount)),
            paid_by_id=expense.paid_by,
            paid_by_name=names.get(expense.paid_by),
            receipt_url=expense.receipt_url,
            settled=split.settled,
            settled_at=split.settled_at,
            settled_by_id=split.settled_by,
            settled_by_name=names.get(split.settled_by) if split.settled_by else None,
        )

    @staticmethod
    def _sort_items(items: List[BreakdownItem]) -> None:
        # Unsettled first; newest first within each group
        items.sort(key=lambda item: item.date, reverse=True)
        items.sort(key=lambda item: item.settled)

    @staticmethod
    def calculate_breakdown(
        expenses: Iterable[Expense],
        roster: List[RosterMember],
        user_a_id: UUID,
        user_b_id: UUID,
    ) -> BalanceBreakdown:
        """
        Itemize every split between two users, settled ones included.

        Args:
            expenses: House expenses with their splits loaded
            roster: Current house members, used for names
            user_a_id: Viewing user
            user_b_id: Other user

        Returns:
            Both buckets of items with unsettled-only totals;
            ``net_balance`` is positive when B owes A
        """
        names: Dict[UUID, Optional[str]] = {
            member.user_id: member.display_name for member in roster
        }

        items_a_owes_b: List[BreakdownItem] = []
        items_b_owes_a: List[BreakdownItem] = []

        for expense in expenses:
            if expense.paid_by == user_a_id:
                bucket, debtor_id = items_b_owes_a, user_b_id
            elif expense.paid_by == user_b_id:
                bucket, debtor_id = items_a_owes_b, user_a_id
            else:
                continue

            for split in expense.splits:
                if split.user_id == debtor_id:
                    bucket.append(BalanceService._breakdown_item(expense, split, names))

        BalanceService._sort_items(items_a_owes_b)
        BalanceService._sort_items(items_b_owes_a)

        total_a_owes_b = round_decimal(
            sum_decimals(i.split_amount for i in items_a_owes_b if not i.settled)
        )
        total_b_owes_a = round_decimal(
            sum_decimals(i.split_amount for i in items_b_owes_a if not i.settled)
        )

        other_user = next(
            (member for member in roster if member.user_id == user_b_id),
            RosterMember(user_id=user_b_id),
        )

        return BalanceBreakdown(
            user_id=user_a_id,
            other_user=other_user,
            items_a_owes_b=items_a_owes_b,
            items_b_owes_a=items_b_owes_a,
            total_a_owes_b=total_a_owes_b,
            total_b_owes_a=total_b_owes_a,
            net_balance=round_decimal(total_b_owes_a - total_a_owes_b),
        )

    @staticmethod
    @storage_errors("calculate balances")
    async def get_user_balances(
        db: AsyncSession,
        house_id: UUID,
        user_id: UUID,
        roster: List[RosterMember],
    ) -> BalanceData:
        """
        Get the user's balances within a house.

        Args:
            db: Database session
            house_id: House ID
            user_id: Viewing user
            roster: Current house members

        Returns:
            BalanceData recomputed from the house's splits
        """
        expenses = await ExpenseRepository.get_house_expenses(db, house_id)
        return BalanceService.calculate_balances(expenses, roster, user_id)

    @staticmethod
    @storage_errors("calculate balance breakdown")
    async def get_balance_breakdown(
        db: AsyncSession,
        house_id: UUID,
        user_a_id: UUID,
        user_b_id: UUID,
        roster: List[RosterMember],
    ) -> BalanceBreakdown:
        """
        Get the itemized history behind the balance between two users.

        Args:
            db: Database session
            house_id: House ID
            user_a_id: Viewing user
            user_b_id: Other user
            roster: Current house members

        Returns:
            BalanceBreakdown recomputed from the house's splits
        """
        expenses = await ExpenseRepository.get_house_expenses(db, house_id)
        return BalanceService.calculate_breakdown(expenses, roster, user_a_id, user_b_id)
