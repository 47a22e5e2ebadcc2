"""Split calculation strategies"""

from house_ledger.core.exceptions import ValidationError
from house_ledger.schemas.expense import SplitMode
from house_ledger.services.split_strategies.base import (BaseSplitStrategy,
                                                         MemberSplit)
from house_ledger.services.split_strategies.equal_split import \
    EvenSplitStrategy
from house_ledger.services.split_strategies.manual_split import \
    CustomSplitStrategy


def get_split_strategy(split_mode: SplitMode) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split mode.

    Args:
        split_mode: How amounts are supplied (even or custom)

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If split_mode is not recognized
    """
    strategies = {
        SplitMode.EVEN: EvenSplitStrategy(),
        SplitMode.CUSTOM: CustomSplitStrategy(),
    }

    strategy = strategies.get(split_mode)
    if strategy is None:
        raise ValidationError(f"Unknown split mode: {split_mode}")

    return strategy


__all__ = [
    "BaseSplitStrategy",
    "MemberSplit",
    "EvenSplitStrategy",
    "CustomSplitStrategy",
    "get_split_strategy",
]
