import asyncio

import pytest

from startup_studio.catalog.schemas import DimensionName
from startup_studio.enrichment import EnrichmentDepth, EntityEnrichment, enrich_entity, summarize_enrichment
from startup_studio.llm.generator import GenerationFailed


@pytest.mark.parametrize(
    "depth,count",
    [
        (EnrichmentDepth.BASIC, "3-5"),
        (EnrichmentDepth.STANDARD, "5-8"),
        (EnrichmentDepth.COMPREHENSIVE, "8-12"),
    ],
)
def test_depth_controls_requested_item_count(depth, count, fake_generator, make_entity):
    asyncio.run(enrich_entity(fake_generator, DimensionName.INDUSTRIES, make_entity("HealthCare"), depth))
    (context,) = fake_generator.calls_for("entity_enrichment")
    assert f"the {count} most important pain points" in context.instructions
    assert context.entities["industries"]["id"] == "HealthCare"


def test_enrichment_result_is_validated(make_generator, make_entity):
    generator = make_generator(overrides={"EntityEnrichment": {"summary": "x", "pain_points": "not a list"}})
    with pytest.raises(GenerationFailed):
        asyncio.run(enrich_entity(generator, DimensionName.INDUSTRIES, make_entity("HealthCare")))


def test_summary_keeps_the_top_pain_points():
    enrichment = EntityEnrichment(
        summary="Fragmented.",
        pain_points=["a", "b", "c", "d"],
        trends=[],
        ai_opportunity="Intake automation",
    )
    assert summarize_enrichment(enrichment) == (
        "Fragmented. Pain points: a; b; c. AI opportunity: Intake automation"
    )
    quiet = EntityEnrichment(summary="Quiet.", pain_points=[], trends=[], ai_opportunity="")
    assert summarize_enrichment(quiet) == "Quiet."


@pytest.mark.parametrize(
    "dimension,focus",
    [
        (DimensionName.PROCESSES, "bottlenecks, handoff friction"),
        (DimensionName.TASKS, "barriers to automating it"),
    ],
)
def test_processes_and_tasks_get_their_own_focus(dimension, focus, fake_generator, make_entity):
    asyncio.run(enrich_entity(fake_generator, dimension, make_entity("Intake"), EnrichmentDepth.BASIC))
    (context,) = fake_generator.calls_for("entity_enrichment")
    assert focus in context.instructions
    assert "the 3-5 most important pain points" in context.instructions
    assert context.entities[dimension.value]["id"] == "Intake"
