"""Unit tests for expense validation"""

from decimal import Decimal
from uuid import uuid4

import pytest

from house_ledger.core.exceptions import AuthorizationError, ValidationError
from house_ledger.models.expense import Expense
from house_ledger.models.expense_split import ExpenseSplit
from house_ledger.schemas.expense import SplitInput, SplitMode
from house_ledger.services.expense_service import ExpenseService
from house_ledger.services.split_strategies import MemberSplit


class TestValidateSplits:
    """Test split set validation"""

    def test_valid_splits(self):
        """Splits that add up pass"""
        ExpenseService.validate_splits(
            Decimal("90.00"),
            [MemberSplit(user_id=uuid4(), amount=Decimal("45.00")),
             MemberSplit(user_id=uuid4(), amount=Decimal("45.00"))],
        )

    def test_within_tolerance(self):
        """A one-cent rounding gap is accepted"""
        ExpenseService.validate_splits(
            Decimal("100.00"),
            [MemberSplit(user_id=uuid4(), amount=Decimal("33.33")) for _ in range(3)],
        )

    def test_sum_mismatch(self):
        """Splits must add up to the amount"""
        with pytest.raises(ValidationError) as exc_info:
            ExpenseService.validate_splits(
                Decimal("90.00"),
                [MemberSplit(user_id=uuid4(), amount=Decimal("60.00"))],
            )

        assert "must equal" in exc_info.value.message
        assert exc_info.value.details["splits_total"] == "60.00"

    def test_non_positive_amount(self):
        """Zero or negative expense amounts are rejected"""
        with pytest.raises(ValidationError):
            ExpenseService.validate_splits(Decimal("0"), [])

    def test_duplicate_debtor(self):
        """A member can only appear once"""
        user_id = uuid4()
        with pytest.raises(ValidationError):
            ExpenseService.validate_splits(
                Decimal("20.00"),
                [MemberSplit(user_id=user_id, amount=Decimal("10.00")),
                 MemberSplit(user_id=user_id, amount=Decimal("10.00"))],
            )


class TestBuildSplits:
    """Test turning input into rows"""

    def test_payer_share_not_stored(self):
        """The payer's own entry counts toward the total but isn't a row"""
        payer, bob, carol = uuid4(), uuid4(), uuid4()
        inputs = [SplitInput(user_id=u) for u in (payer, bob, carol)]

        rows = ExpenseService.build_splits(Decimal("90.00"), SplitMode.EVEN, inputs, payer)

        assert {r.user_id for r in rows} == {bob, carol}
        assert all(r.amount == Decimal("30.00") for r in rows)
        assert all(r.settled is False for r in rows)

    def test_payer_entry_required_for_total(self):
        """Leaving the payer's share out of the set fails the sum check"""
        payer, bob = uuid4(), uuid4()
        inputs = [SplitInput(user_id=bob, amount=Decimal("30.00"))]

        with pytest.raises(ValidationError):
            ExpenseService.build_splits(Decimal("90.00"), SplitMode.CUSTOM, inputs, payer)

    def test_payer_share_computed(self):
        """payer_share is what the splits leave over"""
        payer, bob = uuid4(), uuid4()
        inputs = [
            SplitInput(user_id=payer, amount=Decimal("15.00")),
            SplitInput(user_id=bob, amount=Decimal("25.00")),
        ]
        rows = ExpenseService.build_splits(Decimal("40.00"), SplitMode.CUSTOM, inputs, payer)

        expense = Expense(amount=Decimal("40.00"), paid_by=payer)
        expense.splits = rows

        assert expense.payer_share == Decimal("15.00")


class TestEnsureCanModify:
    """Test edit permission"""

    def test_creator_and_payer_allowed(self):
        creator, payer = uuid4(), uuid4()
        expense = Expense(created_by=creator, paid_by=payer)

        ExpenseService.ensure_can_modify(expense, creator)
        ExpenseService.ensure_can_modify(expense, payer)

    def test_other_member_rejected(self):
        expense = Expense(created_by=uuid4(), paid_by=uuid4())

        with pytest.raises(AuthorizationError):
            ExpenseService.ensure_can_modify(expense, uuid4())


def test_split_row_toggle():
    """mark_settled / mark_unsettled flip all three audit fields"""
    settler = uuid4()
    split = ExpenseSplit(user_id=uuid4(), amount=Decimal("5.00"), settled=False)

    split.mark_settled(settler)
    assert split.settled is True
    assert split.settled_by == settler
    assert split.settled_at is not None

    split.mark_unsettled()
    assert split.settled is False
    assert split.settled_by is None
    assert split.settled_at is None
