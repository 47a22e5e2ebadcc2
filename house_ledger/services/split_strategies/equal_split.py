"""Even split strategy"""

from decimal import Decimal
from typing import List

from house_ledger.schemas.expense import SplitInput
from house_ledger.services.split_strategies.base import (BaseSplitStrategy,
                                                         MemberSplit)
from house_ledger.utils.decimal_utils import round_decimal, sum_decimals


class EvenSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense evenly among members"""

    def calculate_splits(
        self, total_amount: Decimal, split_inputs: List[SplitInput]
    ) -> List[MemberSplit]:
        """
        Divide the total evenly, rounding each share to the cent.

        The rounding remainder goes to the first member so the shares add
        up to the total exactly.

        Args:
            total_amount: Total expense amount
            split_inputs: Members sharing the expense (amounts ignored)

        Returns:
            List of MemberSplit with even amounts
        """
        num_members = len(split_inputs)

        if num_members == 0:
            return []

        per_member = round_decimal(total_amount / num_members)

        splits = [
            MemberSplit(user_id=split.user_id, amount=per_member)
            for split in split_inputs
        ]

        remainder = total_amount - sum_decimals(split.amount for split in splits)
        if remainder != 0:
            splits[0].amount = round_decimal(splits[0].amount + remainder)

        return splits
