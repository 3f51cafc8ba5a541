"""Cross-product of filtered dimension candidates into concept seeds.

Axes are the strategy's enabled dimensions, ordered by descending priority
(ties by dimension declaration order). The highest-priority axis is the
outer loop, so when max_concepts truncates the product the kept seeds
favour combinations that vary the lower-priority dimensions first.
"""

import itertools
import logging
from typing import Optional

from pydantic import BaseModel, Field

from startup_studio.catalog.schemas import DIMENSION_ORDER, DimensionEntity, DimensionName
from startup_studio.generation.schemas import ConceptSeed
from startup_studio.strategies.schemas import StrategyConfig

logger = logging.getLogger(__name__)


class SeedPlan(BaseModel):
    """Seeds plus a report of how they were enumerated."""

    seeds: list[ConceptSeed] = Field(default_factory=list)
    total_combinations: int = 0
    truncated: bool = False
    empty_required: list[DimensionName] = Field(
        default_factory=list,
        description="Required dimensions with no candidates; non-empty means zero seeds",
    )
    axis_order: list[DimensionName] = Field(default_factory=list)


def axis_order(strategy: StrategyConfig) -> list[DimensionName]:
    """Enabled dimensions, highest priority first, ties by declaration order."""
    enabled = [d for d in DIMENSION_ORDER if strategy.dimensions.get(d).enabled]
    return sorted(
        enabled,
        key=lambda d: (-strategy.dimensions.get(d).priority, DIMENSION_ORDER.index(d)),
    )


def plan_seeds(
    candidates: dict[DimensionName, list[DimensionEntity]],
    strategy: StrategyConfig,
    max_concepts: Optional[int] = None,
) -> SeedPlan:
    """Enumerate seeds for a strategy from per-dimension candidate lists.

    Args:
        candidates: Filtered entities per dimension; missing keys count as empty
        strategy: Supplies enabled flags, priorities and required dimensions
        max_concepts: Cap on the seed count; defaults to the strategy constraint

    A required dimension with no candidates yields an empty plan that names
    it in empty_required. This is reported, never raised.
    """
    if max_concepts is None:
        max_concepts = strategy.constraints.max_concepts

    order = axis_order(strategy)
    plan = SeedPlan(axis_order=order)

    required = set(strategy.constraints.required_dimensions)
    empty_required = [d for d in order if d in required and not candidates.get(d)]
    if empty_required:
        names = ", ".join(d.value for d in empty_required)
        logger.info(
            f"Strategy '{strategy.id}': required dimension(s) {names} have no "
            f"candidates, generating no seeds"
        )
        plan.empty_required = empty_required
        return plan

    axes = [d for d in order if candidates.get(d)]
    skipped = [d.value for d in order if d not in axes]
    if skipped:
        logger.info(
            f"Strategy '{strategy.id}': enabled dimension(s) {', '.join(skipped)} "
            f"have no candidates and contribute no axis"
        )
    plan.axis_order = axes
    if not axes:
        logger.info(f"Strategy '{strategy.id}': no enabled dimension has candidates")
        return plan

    total = 1
    for d in axes:
        total *= len(candidates[d])
    plan.total_combinations = total

    product = itertools.product(*(candidates[d] for d in axes))
    if max_concepts is not None:
        product = itertools.islice(product, max_concepts)
        plan.truncated = total > max_concepts

    plan.seeds = [ConceptSeed(entities=dict(zip(axes, combo))) for combo in product]

    logger.info(
        f"Strategy '{strategy.id}': {len(plan.seeds)} seed(s) from {total} combination(s) "
        f"over axes [{', '.join(d.value for d in axes)}]"
        + (" (truncated)" if plan.truncated else "")
    )
    return plan


def generate_seeds(
    candidates: dict[DimensionName, list[DimensionEntity]],
    strategy: StrategyConfig,
) -> list[ConceptSeed]:
    """Seeds for a strategy, bounded by its max_concepts constraint."""
    return plan_seeds(candidates, strategy).seeds
