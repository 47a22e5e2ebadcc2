"""Custom split strategy"""
from decimal import Decimal
from typing import List

from house_ledger.core.exceptions import ValidationError
from house_ledger.schemas.expense import SplitInput
from house_ledger.services.split_strategies.base import BaseSplitStrategy, MemberSplit
from house_ledger.utils.decimal_utils import round_decimal


class CustomSplitStrategy(BaseSplitStrategy):
    """Strategy for splits with amounts entered per member"""

    def calculate_splits(
        self,
        total_amount: Decimal,
        split_inputs: List[SplitInput]
    ) -> List[MemberSplit]:
        """
        Use the amounts supplied for each member.

        The sum is checked against the total by the expense service, which
        applies the same tolerance to every split mode.

        Raises:
            ValidationError: If an amount is missing or negative
        """
        splits = []
        for split in split_inputs:
            if split.amount is None:
                raise ValidationError(f"Missing split amount for user {split.user_id}")
            if split.amount < 0:
                raise ValidationError(
                    f"Split amount cannot be negative, got {split.amount}"
                )

            splits.append(MemberSplit(
                user_id=split.user_id,
                amount=round_decimal(split.amount)
            ))

        return splits
