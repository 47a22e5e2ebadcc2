"""Expense split model"""
import uuid
from datetime import datetime

from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, ForeignKey,
                        Numeric, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from house_ledger.database import Base


class ExpenseSplit(Base):
    """One debtor's share of an expense"""

    __tablename__ = "expense_splits"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    settled = Column(Boolean, default=False, nullable=False)
    settled_at = Column(DateTime, nullable=True)
    settled_by = Column(Uuid, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        UniqueConstraint('expense_id', 'user_id', name='uq_expense_split_user'),
        CheckConstraint('amount >= 0', name='check_split_amount_non_negative'),
    )

    # Relationships
    expense = relationship("Expense", back_populates="splits")
    debtor = relationship("Profile", foreign_keys=[user_id])
    settler = relationship("Profile", foreign_keys=[settled_by])

    def mark_settled(self, settled_by, settled_at=None) -> None:
        """Stamp this split as settled"""
        self.settled = True
        self.settled_at = settled_at or datetime.utcnow()
        self.settled_by = settled_by

    def mark_unsettled(self) -> None:
        """Clear settlement state"""
        self.settled = False
        self.settled_at = None
        self.settled_by = None

    def __repr__(self) -> str:
        return f"<ExpenseSplit(expense_id={self.expense_id}, user_id={self.user_id}, amount={self.amount}, settled={self.settled})>"
