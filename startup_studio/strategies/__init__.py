"""Strategies ("hypotheses") that drive concept generation.

A strategy names which taxonomy dimensions take part in the cross-product,
how each is filtered and prioritized, and what constraints bound the
generated population.
"""

from .schemas import (
    DimensionConfig,
    StrategyConfig,
    StrategyConstraints,
    StrategyDimensions,
    StrategyStatus,
)
from .registry import StrategyRegistry, get_strategy_registry

__all__ = [
    "DimensionConfig",
    "StrategyConfig",
    "StrategyConstraints",
    "StrategyDimensions",
    "StrategyStatus",
    "StrategyRegistry",
    "get_strategy_registry",
]
