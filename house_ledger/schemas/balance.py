"""Balance schemas"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from house_ledger.models.expense import ExpenseCategory
from house_ledger.schemas.roster import RosterMember


class UserBalance(BaseModel):
    """
    Balance between the viewing user and one counterparty.

    ``owes`` is what the counterparty owes the viewer, ``owed`` is what the
    viewer owes the counterparty; a positive ``net_balance`` means the
    counterparty owes the viewer.
    """
    user_id: UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    venmo_handle: Optional[str] = None
    owes: Decimal
    owed: Decimal
    net_balance: Decimal


class BalanceSummary(BaseModel):
    """House-wide totals for the viewing user"""
    total_owed_to_me: Decimal
    total_i_owe: Decimal
    net_balance: Decimal


class BalanceData(BaseModel):
    """Response schema for the balance view"""
    balances: List[UserBalance]
    summary: BalanceSummary


class BreakdownItem(BaseModel):
    """One split behind a pairwise balance"""
    expense_id: UUID
    split_id: UUID
    title: str
    description: Optional[str] = None
    category: ExpenseCategory
    date: date
    split_amount: Decimal
    total_expense_amount: Decimal
    paid_by_id: UUID
    paid_by_name: Optional[str] = None
    receipt_url: Optional[str] = None
    settled: bool
    settled_at: Optional[datetime] = None
    settled_by_id: Optional[UUID] = None
    settled_by_name: Optional[str] = None


class BalanceBreakdown(BaseModel):
    """
    Itemized history between user A and user B.

    Items include settled splits; totals only count unsettled ones.
    """
    user_id: UUID
    other_user: RosterMember
    items_a_owes_b: List[BreakdownItem]
    items_b_owes_a: List[BreakdownItem]
    total_a_owes_b: Decimal
    total_b_owes_a: Decimal
    net_balance: Decimal
