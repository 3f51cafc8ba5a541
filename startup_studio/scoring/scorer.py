"""Viability scoring: weighted aggregate, tier and recommendation.

The aggregate is renormalized by the weights actually supplied, so a
partial assessment (a dimension missing) is scored on what it has rather
than silently dragged down. Uniformly scaling all weights leaves the
aggregate unchanged.

Tier thresholds and recommendations are fixed:

    overall >= 90  S  pursue-aggressively
    overall >= 75  A  test-hypothesis
    overall >= 60  B  explore-further
    overall >= 40  C  deprioritize
    otherwise      D  skip
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from startup_studio.generation.schemas import Concept
from startup_studio.llm.generator import ContentGenerator, PromptContext, generate_validated
from startup_studio.scoring.schemas import (
    DimensionAssessment,
    DimensionScore,
    Recommendation,
    ScoringDimension,
    Tier,
    ViabilityScore,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: dict[ScoringDimension, float] = {
    ScoringDimension.MARKET_SIZE: 0.2,
    ScoringDimension.PROBLEM_SEVERITY: 0.2,
    ScoringDimension.SOLUTION_FIT: 0.2,
    ScoringDimension.COMPETITION: 0.1,
    ScoringDimension.GTM_EASE: 0.1,
    ScoringDimension.MONETIZATION: 0.1,
    ScoringDimension.DEFENSIBILITY: 0.05,
    ScoringDimension.TIMING: 0.05,
}

TIER_THRESHOLDS: list[tuple[int, Tier]] = [
    (90, Tier.S),
    (75, Tier.A),
    (60, Tier.B),
    (40, Tier.C),
]

RECOMMENDATIONS: dict[Tier, Recommendation] = {
    Tier.S: Recommendation.PURSUE_AGGRESSIVELY,
    Tier.A: Recommendation.TEST_HYPOTHESIS,
    Tier.B: Recommendation.EXPLORE_FURTHER,
    Tier.C: Recommendation.DEPRIORITIZE,
    Tier.D: Recommendation.SKIP,
}


class InsufficientScoringData(ValueError):
    """No dimensions, or only zero-weight dimensions, were supplied."""


def compute_overall(
    dimensions: Mapping[ScoringDimension, DimensionScore],
    weights: Optional[Mapping[ScoringDimension, float]] = None,
) -> int:
    """Weighted mean of sub-scores, rounded half up.

    Args:
        dimensions: Sub-scores actually supplied
        weights: Replacement weights; dimensions missing from it keep their own

    Raises:
        InsufficientScoringData: If nothing was supplied or the weights sum to 0
    """
    if not dimensions:
        raise InsufficientScoringData("No scoring dimensions supplied")

    weighted_sum = 0.0
    weight_sum = 0.0
    for dimension, entry in dimensions.items():
        weight = entry.weight
        if weights is not None and dimension in weights:
            weight = weights[dimension]
        weighted_sum += entry.score * weight
        weight_sum += weight

    if weight_sum <= 0:
        raise InsufficientScoringData("Scoring weights sum to zero")

    # 6-decimal rounding absorbs float noise before the half-up step
    raw = Decimal(str(round(weighted_sum / weight_sum, 6)))
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def tier_for(overall: int) -> Tier:
    for threshold, tier in TIER_THRESHOLDS:
        if overall >= threshold:
            return tier
    return Tier.D


def recommendation_for(tier: Tier) -> Recommendation:
    return RECOMMENDATIONS[tier]


def score_concept(
    concept: Concept,
    dimension_scores: Mapping[ScoringDimension, DimensionScore],
) -> ViabilityScore:
    """Build the ViabilityScore for a concept from per-dimension scores.

    Raises:
        InsufficientScoringData: If no usable dimensions were supplied
    """
    try:
        overall = compute_overall(dimension_scores)
    except InsufficientScoringData as e:
        raise InsufficientScoringData(f"{concept.id}: {e}") from e
    tier = tier_for(overall)
    return ViabilityScore(
        dimensions=dict(dimension_scores),
        overall=overall,
        tier=tier,
        recommendation=recommendation_for(tier),
    )


def _concept_summary(concept: Concept) -> dict:
    content = concept.content
    return {
        "name": content.name,
        "one_liner": content.one_liner,
        "pitch": content.pitch,
        "problem": content.problem,
        "solution": content.solution,
        "service_type": content.service_type,
        "business_model": content.business_model,
        "target_customer": content.target_customer,
        "pricing_model": content.pricing_model,
        "target": concept.seed.label(),
    }


class ViabilityAssessor:
    """Scores concepts with sub-scores obtained from the content generator."""

    def __init__(
        self,
        generator: ContentGenerator,
        weights: Optional[Mapping[ScoringDimension, float]] = None,
    ):
        self.generator = generator
        self.weights = dict(weights or DEFAULT_WEIGHTS)

    async def assess(
        self,
        concept: Concept,
        enrichments: Optional[dict[str, str]] = None,
    ) -> Concept:
        """Return the concept rescored; any earlier score moves to its history.

        Raises:
            GenerationFailed: If the generator errors or replies with the wrong shape
            InsufficientScoringData: If the reply carries no usable dimensions
        """
        seed_ids = set(concept.seed.entity_ids())
        context = PromptContext(
            task="viability_score",
            instructions=(
                "Score the viability of this startup concept from 0 to 100 across "
                "market size, problem severity, solution fit, competition (higher "
                "means less competition), go-to-market ease, monetization, "
                "defensibility and timing."
            ),
            strategy={"id": concept.strategy_id},
            enrichments={k: v for k, v in (enrichments or {}).items() if k in seed_ids},
            extra={"concept": _concept_summary(concept)},
        )
        assessment = await generate_validated(self.generator, context, DimensionAssessment)

        dimension_scores: dict[ScoringDimension, DimensionScore] = {}
        for item in assessment.dimensions:
            if item.dimension in dimension_scores:
                logger.warning(f"{concept.id}: duplicate {item.dimension.value} score, keeping first")
                continue
            weight = item.weight if item.weight is not None else self.weights.get(item.dimension, 0.0)
            dimension_scores[item.dimension] = DimensionScore(
                score=item.score,
                weight=weight,
                rationale=item.rationale,
                signals=item.signals,
            )

        missing = [d.value for d in ScoringDimension if d not in dimension_scores]
        if missing:
            logger.warning(f"{concept.id}: assessment missing {', '.join(missing)}")

        viability = score_concept(concept, dimension_scores)
        logger.debug(f"Scored {concept.id}: {viability.overall} ({viability.tier.value})")
        return concept.with_score(viability)
