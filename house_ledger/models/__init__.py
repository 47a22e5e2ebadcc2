"""SQLAlchemy models"""
from house_ledger.models.profile import Profile
from house_ledger.models.house_member import HouseMember, InviteStatus
from house_ledger.models.expense import Expense, ExpenseCategory
from house_ledger.models.expense_split import ExpenseSplit

__all__ = [
    "Profile",
    "HouseMember",
    "InviteStatus",
    "Expense",
    "ExpenseCategory",
    "ExpenseSplit",
]
