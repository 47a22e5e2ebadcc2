"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel

from house_ledger.schemas.expense import SplitInput


class MemberSplit(BaseModel):
    """Result of split calculation for one member"""

    user_id: UUID
    amount: Decimal


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    @abstractmethod
    def calculate_splits(
        self, total_amount: Decimal, split_inputs: List[SplitInput]
    ) -> List[MemberSplit]:
        """
        Calculate split amounts for members.

        Args:
            total_amount: Total expense amount
            split_inputs: Members sharing the expense

        Returns:
            List of MemberSplit objects with user_id and amount
        """
        pass
