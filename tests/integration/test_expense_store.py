"""Ledger store tests against a real (in-memory) database"""

from datetime import date
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from house_ledger.core.exceptions import NotFoundError, StorageError, ValidationError
from house_ledger.models.expense import Expense, ExpenseCategory
from house_ledger.models.expense_split import ExpenseSplit
from house_ledger.schemas.expense import ExpenseCreate, ExpenseUpdate, SplitInput
from house_ledger.services.expense_service import ExpenseService
from house_ledger.services.settlement_service import SettlementService


def expense_create(amount, splits, title="Groceries", on=date(2026, 1, 10), **kwargs):
    return ExpenseCreate(
        title=title,
        amount=amount,
        category=kwargs.pop("category", ExpenseCategory.GROCERIES),
        date=on,
        splits=[SplitInput(user_id=u, amount=a) for u, a in splits],
        **kwargs,
    )


async def count_rows(db_session, model):
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestCreateExpense:
    """Test creating expenses"""

    @pytest.mark.asyncio
    async def test_create_with_splits(self, db_session, house_id, alice, bob, carol):
        """Expense and splits are written together; payer share stays implicit"""
        data = expense_create(
            "90.00",
            [(alice.id, "30.00"), (bob.id, "30.00"), (carol.id, "30.00")],
        )

        expense = await ExpenseService.create_expense(db_session, house_id, alice.id, alice.id, data)

        assert expense.amount == Decimal("90.00")
        assert expense.paid_by == alice.id
        assert {s.user_id for s in expense.splits} == {bob.id, carol.id}
        assert expense.payer_share == Decimal("30.00")
        assert expense.payer.display_name == "Alice"
        assert all(s.settled is False for s in expense.splits)

    @pytest.mark.asyncio
    async def test_creator_differs_from_payer(self, db_session, house_id, alice, bob):
        """Someone can record an expense another member paid"""
        data = expense_create("20.00", [(alice.id, "20.00")])

        expense = await ExpenseService.create_expense(db_session, house_id, bob.id, alice.id, data)

        assert expense.paid_by == bob.id
        assert expense.created_by == alice.id
        assert expense.creator.display_name == "Alice"

    @pytest.mark.asyncio
    async def test_mismatch_writes_nothing(self, db_session, house_id, alice, bob):
        """A split sum mismatch fails before any write"""
        data = expense_create("90.00", [(alice.id, "30.00"), (bob.id, "30.00")])

        with pytest.raises(ValidationError):
            await ExpenseService.create_expense(db_session, house_id, alice.id, alice.id, data)

        assert await count_rows(db_session, Expense) == 0
        assert await count_rows(db_session, ExpenseSplit) == 0

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back(self, db_session, house_id, alice, bob):
        """A failed commit leaves neither the expense nor its splits"""
        data = expense_create("40.00", [(alice.id, "20.00"), (bob.id, "20.00")])
        failure = OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with patch.object(db_session, "commit", side_effect=failure):
            with pytest.raises(StorageError):
                await ExpenseService.create_expense(db_session, house_id, alice.id, alice.id, data)

        assert await count_rows(db_session, Expense) == 0
        assert await count_rows(db_session, ExpenseSplit) == 0


class TestUpdateExpense:
    """Test editing expenses"""

    @pytest.mark.asyncio
    async def test_fields_only(self, db_session, house_id, alice, bob):
        """Without splits, the split set and its settlement state are kept"""
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("20.00", [(alice.id, "10.00"), (bob.id, "10.00")]),
        )
        split_id = expense.splits[0].id
        await SettlementService.settle_split(db_session, split_id, alice.id)

        updated = await ExpenseService.update_expense(
            db_session,
            expense.id,
            ExpenseUpdate(title="Renamed", amount="20.00", category=ExpenseCategory.SUPPLIES, date=date(2026, 1, 11)),
        )

        assert updated.title == "Renamed"
        assert updated.category == ExpenseCategory.SUPPLIES
        assert updated.splits[0].id == split_id
        assert updated.splits[0].settled is True

    @pytest.mark.asyncio
    async def test_replacing_splits_resets_settlement(self, db_session, house_id, alice, bob, carol):
        """Resubmitting a settled debtor brings them back unsettled"""
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("30.00", [(alice.id, "10.00"), (bob.id, "10.00"), (carol.id, "10.00")]),
        )
        bob_split = next(s for s in expense.splits if s.user_id == bob.id)
        await SettlementService.settle_split(db_session, bob_split.id, bob.id)

        updated = await ExpenseService.update_expense(
            db_session,
            expense.id,
            ExpenseUpdate(
                title="Groceries",
                amount="36.00",
                category=ExpenseCategory.GROCERIES,
                date=date(2026, 1, 10),
                splits=[
                    SplitInput(user_id=alice.id, amount="12.00"),
                    SplitInput(user_id=bob.id, amount="12.00"),
                    SplitInput(user_id=carol.id, amount="12.00"),
                ],
            ),
        )

        new_bob = next(s for s in updated.splits if s.user_id == bob.id)
        assert new_bob.id != bob_split.id
        assert new_bob.amount == Decimal("12.00")
        assert new_bob.settled is False
        assert new_bob.settled_at is None
        assert new_bob.settled_by is None
        assert await count_rows(db_session, ExpenseSplit) == 2

    @pytest.mark.asyncio
    async def test_invalid_splits_leave_expense_untouched(self, db_session, house_id, alice, bob):
        """Validation runs before any field is written"""
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("20.00", [(alice.id, "10.00"), (bob.id, "10.00")]),
        )

        with pytest.raises(ValidationError):
            await ExpenseService.update_expense(
                db_session,
                expense.id,
                ExpenseUpdate(
                    title="Changed",
                    amount="50.00",
                    date=date(2026, 1, 10),
                    splits=[SplitInput(user_id=bob.id, amount="10.00")],
                ),
            )

        reloaded = await ExpenseService.get_expense(db_session, expense.id)
        assert reloaded.title == "Groceries"
        assert reloaded.amount == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_shrinking_amount_below_kept_splits(self, db_session, house_id, alice, bob, carol):
        """Without new splits the amount can't drop below what debtors owe"""
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("90.00", [(alice.id, "30.00"), (bob.id, "30.00"), (carol.id, "30.00")]),
        )

        with pytest.raises(ValidationError) as exc_info:
            await ExpenseService.update_expense(
                db_session,
                expense.id,
                ExpenseUpdate(title="Groceries", amount="10.00", date=date(2026, 1, 10)),
            )

        assert exc_info.value.details == {"splits_total": "60.00", "amount": "10.00"}
        reloaded = await ExpenseService.get_expense(db_session, expense.id)
        assert reloaded.amount == Decimal("90.00")
        assert reloaded.payer_share == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_growing_amount_keeps_splits(self, db_session, house_id, alice, bob):
        """A larger amount with kept splits lands on the payer's share"""
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("20.00", [(alice.id, "10.00"), (bob.id, "10.00")]),
        )

        updated = await ExpenseService.update_expense(
            db_session,
            expense.id,
            ExpenseUpdate(title="Groceries", amount="25.00", date=date(2026, 1, 10)),
        )

        assert updated.amount == Decimal("25.00")
        assert updated.payer_share == Decimal("15.00")
        assert updated.splits[0].amount == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_split_replacement_rolls_back(self, db_session, house_id, alice, bob, carol):
        """A failed commit keeps the old splits and their settlement state"""
        alice_id, bob_id, carol_id = alice.id, bob.id, carol.id
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice_id, alice_id,
            expense_create("20.00", [(alice_id, "10.00"), (bob_id, "10.00")]),
        )
        expense_id = expense.id
        old_split_id = expense.splits[0].id
        await SettlementService.settle_split(db_session, old_split_id, bob_id)
        failure = OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with patch.object(db_session, "commit", side_effect=failure):
            with pytest.raises(StorageError):
                await ExpenseService.update_expense(
                    db_session,
                    expense_id,
                    ExpenseUpdate(
                        title="Groceries",
                        amount="30.00",
                        date=date(2026, 1, 10),
                        splits=[
                            SplitInput(user_id=alice_id, amount="10.00"),
                            SplitInput(user_id=bob_id, amount="10.00"),
                            SplitInput(user_id=carol_id, amount="10.00"),
                        ],
                    ),
                )

        reloaded = await ExpenseService.get_expense(db_session, expense_id)
        assert reloaded.amount == Decimal("20.00")
        assert [s.id for s in reloaded.splits] == [old_split_id]
        assert reloaded.splits[0].settled is True
        assert reloaded.splits[0].settled_by == bob_id

    @pytest.mark.asyncio
    async def test_unknown_expense(self, db_session):
        with pytest.raises(NotFoundError):
            await ExpenseService.update_expense(
                db_session, uuid4(), ExpenseUpdate(title="x", amount="1.00", date=date(2026, 1, 1))
            )


class TestDeleteAndRead:
    """Test delete, get and list"""

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_session, house_id, alice, bob):
        expense = await ExpenseService.create_expense(
            db_session, house_id, alice.id, alice.id,
            expense_create("20.00", [(alice.id, "10.00"), (bob.id, "10.00")]),
        )

        await ExpenseService.delete_expense(db_session, expense.id)

        assert await count_rows(db_session, Expense) == 0
        assert await count_rows(db_session, ExpenseSplit) == 0
        with pytest.raises(NotFoundError):
            await ExpenseService.get_expense(db_session, expense.id)

    @pytest.mark.asyncio
    async def test_delete_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await ExpenseService.delete_expense(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_list_order_and_filters(self, db_session, house_id, alice, bob):
        """Newest date first, then newest created; scoped to the house"""
        for title, on, category in [
            ("first", date(2026, 1, 1), ExpenseCategory.RENT),
            ("second", date(2026, 1, 5), ExpenseCategory.GROCERIES),
            ("third", date(2026, 1, 5), ExpenseCategory.RENT),
        ]:
            await ExpenseService.create_expense(
                db_session, house_id, alice.id, alice.id,
                expense_create("10.00", [(bob.id, "10.00")], title=title, on=on, category=category),
            )
        await ExpenseService.create_expense(
            db_session, uuid4(), alice.id, alice.id,
            expense_create("10.00", [(bob.id, "10.00")], title="elsewhere"),
        )

        expenses, total = await ExpenseService.list_expenses(db_session, house_id)
        assert [e.title for e in expenses] == ["third", "second", "first"]
        assert total == 3

        rent, rent_total = await ExpenseService.list_expenses(
            db_session, house_id, category=ExpenseCategory.RENT
        )
        assert [e.title for e in rent] == ["third", "first"]
        assert rent_total == 2

        page, page_total = await ExpenseService.list_expenses(db_session, house_id, page=2, page_size=2)
        assert [e.title for e in page] == ["first"]
        assert page_total == 3

        recent, _ = await ExpenseService.list_expenses(
            db_session, house_id, start_date=date(2026, 1, 2)
        )
        assert {e.title for e in recent} == {"second", "third"}
