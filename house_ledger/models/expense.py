"""Expense model"""
import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (CheckConstraint, Column, Date, DateTime, Enum,
                        ForeignKey, Numeric, String, Text, Uuid)
from sqlalchemy.orm import relationship

from house_ledger.database import Base
from house_ledger.utils.decimal_utils import round_decimal, sum_decimals


class ExpenseCategory(str, enum.Enum):
    """Enum for expense categories"""
    GROCERIES = "groceries"
    UTILITIES = "utilities"
    SUPPLIES = "supplies"
    RENT = "rent"
    ENTERTAINMENT = "entertainment"
    TRANSPORTATION = "transportation"
    GUEST_FEES = "guest_fees"
    OTHER = "other"


class Expense(Base):
    """Expense paid by one house member and split among others"""

    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    house_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(
        Enum(
            ExpenseCategory,
            name="expense_category",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=ExpenseCategory.OTHER,
        nullable=False,
    )
    date = Column(Date, nullable=False)
    paid_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    created_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    receipt_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_expense_amount_positive'),
    )

    # Relationships
    payer = relationship("Profile", foreign_keys=[paid_by])
    creator = relationship("Profile", foreign_keys=[created_by])
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.created_at",
    )

    @property
    def payer_share(self) -> Decimal:
        """Portion of the amount the payer covers for themselves"""
        return round_decimal(
            Decimal(self.amount) - sum_decimals(split.amount for split in self.splits)
        )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, title={self.title}, amount={self.amount})>"
