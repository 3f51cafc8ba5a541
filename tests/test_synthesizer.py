import asyncio

import pytest

from startup_studio.catalog.schemas import DimensionName
from startup_studio.generation.branding import brand_concept
from startup_studio.generation.schemas import ConceptSeed, ConceptStatus
from startup_studio.generation.synthesizer import (
    ConceptSynthesizer,
    build_prompt_context,
    make_concept_id,
)
from startup_studio.llm.generator import GenerationFailed
from conftest import content_payload


@pytest.fixture
def seed(make_entity):
    return ConceptSeed(entities={
        DimensionName.INDUSTRIES: make_entity("HealthCare", name="Health Care"),
        DimensionName.OCCUPATIONS: make_entity("Paralegals"),
    })


def test_concept_id_is_deterministic_and_traceable(seed):
    concept_id = make_concept_id("Vertical AI", seed, "001")
    assert concept_id == "vertical-ai-paralegals-healthcare-001"
    assert make_concept_id("Vertical AI", seed, "001") == concept_id


def test_prompt_context_carries_structured_values(seed, make_strategy):
    strategy = make_strategy(industries={}, occupations={})
    context = build_prompt_context(
        seed, strategy, enrichments={"HealthCare": "Big market", "Other": "ignored"}
    )
    assert context.strategy["thesis"] == "Agents do the busywork"
    assert list(context.entities) == ["occupations", "industries"]
    assert context.entities["industries"]["name"] == "Health Care"
    assert context.enrichments == {"HealthCare": "Big market"}


def test_synthesize_returns_generated_concept(seed, make_strategy, fake_generator):
    strategy = make_strategy(industries={}, occupations={})
    concept = asyncio.run(ConceptSynthesizer(fake_generator).synthesize(seed, strategy, "007"))

    assert concept.id == "test-strategy-paralegals-healthcare-007"
    assert concept.strategy_id == "test-strategy"
    assert concept.seed == seed
    assert concept.status == ConceptStatus.GENERATED
    assert concept.viability is None
    assert concept.content.name == "Concept Paralegals/HealthCare"
    assert len(fake_generator.calls) == 1


def test_missing_field_fails(seed, make_strategy, make_generator):
    payload = content_payload()
    del payload["moat"]
    generator = make_generator(overrides={"ConceptContent": payload})

    with pytest.raises(GenerationFailed):
        asyncio.run(ConceptSynthesizer(generator).synthesize(seed, make_strategy(industries={}, occupations={}), "1"))


def test_collaborator_error_fails_without_retry(seed, make_strategy, make_generator):
    generator = make_generator(fail_when=lambda context: True)

    with pytest.raises(GenerationFailed, match="scripted failure"):
        asyncio.run(ConceptSynthesizer(generator).synthesize(seed, make_strategy(industries={}, occupations={}), "1"))
    assert len(generator.calls) == 1


def test_brand_concept_returns_new_concept(seed, make_strategy, fake_generator):
    strategy = make_strategy(industries={}, occupations={})
    concept = asyncio.run(ConceptSynthesizer(fake_generator).synthesize(seed, strategy, "1"))

    branded = asyncio.run(brand_concept(fake_generator, concept))

    assert branded.brand.domain == "acme.ai"
    assert concept.brand is None
    assert branded.id == concept.id
    brand_context = fake_generator.calls_for("brand_identity")[0]
    assert brand_context.extra["target_audience"] == "Paralegals"
