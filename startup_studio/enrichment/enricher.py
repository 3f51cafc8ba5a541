"""Entity enrichment: prior research fed into concept synthesis and scoring."""

import logging

from startup_studio.catalog.schemas import DimensionEntity, DimensionName
from startup_studio.enrichment.schemas import DEPTH_ITEM_COUNTS, EnrichmentDepth, EntityEnrichment
from startup_studio.llm.generator import ContentGenerator, PromptContext, generate_validated

logger = logging.getLogger(__name__)

ENRICH_TASK = "entity_enrichment"

# What the research should dwell on, per dimension
DIMENSION_FOCUS: dict[DimensionName, str] = {
    DimensionName.INDUSTRIES: "market structure and the workflows that still run on manual effort",
    DimensionName.OCCUPATIONS: "the day-to-day work and which parts of it are repetitive",
    DimensionName.PROCESSES: "bottlenecks, handoff friction and the steps worth automating",
    DimensionName.TASKS: "how often the task recurs, its error rate and the barriers to automating it",
}


async def enrich_entity(
    generator: ContentGenerator,
    dimension: DimensionName,
    entity: DimensionEntity,
    depth: EnrichmentDepth = EnrichmentDepth.STANDARD,
) -> EntityEnrichment:
    """Research one entity.

    Raises:
        GenerationFailed: If the generator errors or replies with the wrong shape
    """
    count = DEPTH_ITEM_COUNTS[EnrichmentDepth(depth)]
    entity_info = {"id": entity.id, "name": entity.name, "description": entity.description}
    if entity.code:
        entity_info["code"] = entity.code
    context = PromptContext(
        task=ENRICH_TASK,
        instructions=(
            f"Research this entry of the {dimension.value} taxonomy for a startup entering it. "
            f"List the {count} most important pain points and the {count} most "
            f"important trends, and describe the AI opportunity."
            + (f" Focus on {DIMENSION_FOCUS[dimension]}." if dimension in DIMENSION_FOCUS else "")
        ),
        entities={dimension.value: entity_info},
    )
    enrichment = await generate_validated(generator, context, EntityEnrichment)
    logger.debug(
        f"Enriched {dimension.value}/{entity.id}: "
        f"{len(enrichment.pain_points)} pain points, {len(enrichment.trends)} trends"
    )
    return enrichment


def summarize_enrichment(enrichment: EntityEnrichment, max_pain_points: int = 3) -> str:
    """One-paragraph summary passed as prior research in later prompts."""
    parts = [enrichment.summary]
    if enrichment.pain_points:
        parts.append("Pain points: " + "; ".join(enrichment.pain_points[:max_pain_points]) + ".")
    if enrichment.ai_opportunity:
        parts.append("AI opportunity: " + enrichment.ai_opportunity)
    return " ".join(parts)
