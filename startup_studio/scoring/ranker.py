"""Ranking of scored concepts.

Order is by display score descending, then concept id ascending, so
ranking is deterministic and idempotent. Weight overrides recompute the
aggregate from each concept's stored sub-scores; nothing is regenerated.
Tier buckets cover only the returned (top-N) slice.
"""

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from startup_studio.generation.schemas import Concept
from startup_studio.scoring.schemas import ScoringDimension, Tier
from startup_studio.scoring.scorer import InsufficientScoringData, compute_overall, tier_for

logger = logging.getLogger(__name__)


class RankedConcept(BaseModel):
    rank: int = Field(..., ge=1)
    score: int = Field(..., description="Display score: stored overall, or recomputed with overrides")
    tier: Tier
    concept: Concept


class RankingResult(BaseModel):
    ranked: list[RankedConcept] = Field(default_factory=list)
    tiers: dict[Tier, list[str]] = Field(
        default_factory=lambda: {t: [] for t in Tier},
        description="Concept ids per tier, in rank order",
    )
    unscored: list[str] = Field(default_factory=list, description="Concept ids left out")


def display_score(
    concept: Concept,
    weight_overrides: Optional[Mapping[ScoringDimension, float]] = None,
) -> int:
    """A scored concept's overall, recomputed when overrides are given."""
    viability = concept.viability
    if not weight_overrides:
        return viability.overall
    try:
        return compute_overall(viability.dimensions, weights=weight_overrides)
    except InsufficientScoringData as e:
        logger.warning(f"{concept.id}: override weights unusable ({e}), using stored score")
        return viability.overall


def rank_concepts(
    concepts: list[Concept],
    weight_overrides: Optional[Mapping[ScoringDimension, float]] = None,
    top_n: Optional[int] = None,
) -> RankingResult:
    """Order scored concepts and bucket the kept slice into tiers.

    Args:
        concepts: Concepts to rank; unscored ones are left out and logged
        weight_overrides: Per-dimension weights replacing the stored ones
        top_n: Keep only the first N after ordering
    """
    if top_n is not None and top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")

    unscored = [c.id for c in concepts if c.viability is None]
    if unscored:
        logger.warning(f"Ranking skips {len(unscored)} unscored concept(s): {', '.join(unscored)}")

    scored = [(display_score(c, weight_overrides), c) for c in concepts if c.viability is not None]
    scored.sort(key=lambda pair: (-pair[0], pair[1].id))
    if top_n is not None:
        scored = scored[:top_n]

    result = RankingResult(unscored=unscored)
    for position, (score, concept) in enumerate(scored, start=1):
        tier = tier_for(score)
        result.ranked.append(RankedConcept(rank=position, score=score, tier=tier, concept=concept))
        result.tiers[tier].append(concept.id)

    logger.info(
        f"Ranked {len(result.ranked)} of {len(concepts)} concept(s): "
        + ", ".join(f"{t.value}={len(ids)}" for t, ids in result.tiers.items())
    )
    return result
