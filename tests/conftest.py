"""Shared fixtures: a scripted content generator, a small catalog, strategies."""

import asyncio
from typing import Callable, Optional

import pytest

from startup_studio.catalog.registry import DimensionCatalog
from startup_studio.catalog.schemas import DimensionEntity, DimensionName
from startup_studio.generation.schemas import Concept, ConceptContent, ConceptSeed
from startup_studio.llm.generator import PromptContext
from startup_studio.scoring.schemas import DimensionScore, ScoringDimension
from startup_studio.scoring.scorer import score_concept
from startup_studio.strategies.schemas import StrategyConfig


def content_payload(name: str = "Acme") -> dict:
    """A valid ConceptContent reply."""
    return {
        "name": name,
        "tagline": "Less busywork",
        "one_liner": f"{name} automates the dull half of the job",
        "pitch": "An agent that handles intake, follow-ups and filing.",
        "problem": "Hours lost to repetitive paperwork",
        "solution": "An AI agent that files it",
        "service_type": "full-automation",
        "business_model": "saas",
        "target_customer": "human",
        "pricing_model": "seat",
        "free_tier": False,
        "moat": "Workflow data",
        "tags": ["agents"],
    }


def assessment_payload(score: int = 70) -> dict:
    """A valid DimensionAssessment reply with the same score everywhere."""
    return {
        "dimensions": [
            {"dimension": d.value, "score": score, "rationale": "ok", "signals": []}
            for d in ScoringDimension
        ],
        "top_strengths": [],
        "top_weaknesses": [],
    }


ENRICHMENT_PAYLOAD = {
    "summary": "A fragmented market.",
    "pain_points": ["manual intake", "slow billing"],
    "trends": ["consolidation"],
    "ai_opportunity": "Document automation",
}

BRAND_PAYLOAD = {
    "tone": "friendly",
    "domain": "acme.ai",
    "alternative_domains": ["getacme.com"],
    "primary_color": "#112233",
    "secondary_color": "#445566",
    "personality": ["warm", "precise", "calm"],
}


class FakeGenerator:
    """Scripted ContentGenerator.

    Replies per task with a default payload; `fail_when` makes selected calls
    raise, `delay` makes every call await first.
    """

    def __init__(
        self,
        fail_when: Optional[Callable[[PromptContext], bool]] = None,
        delay: float = 0.0,
        score_for: Optional[Callable[[PromptContext], int]] = None,
        overrides: Optional[dict] = None,
    ):
        self.fail_when = fail_when
        self.delay = delay
        self.score_for = score_for
        self.overrides = overrides or {}
        self.calls: list[tuple[PromptContext, type]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _payload(self, context: PromptContext, result_shape: type):
        if result_shape.__name__ in self.overrides:
            return self.overrides[result_shape.__name__]
        if context.task == "startup_concept":
            ids = "/".join(e["id"] for e in context.entities.values())
            return content_payload(name=f"Concept {ids}")
        if context.task == "viability_score":
            score = self.score_for(context) if self.score_for else 70
            return assessment_payload(score)
        if context.task == "entity_enrichment":
            return dict(ENRICHMENT_PAYLOAD)
        if context.task == "brand_identity":
            return dict(BRAND_PAYLOAD)
        raise AssertionError(f"unexpected task {context.task}")

    async def generate(self, context: PromptContext, result_shape: type):
        self.calls.append((context, result_shape))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            if self.fail_when is not None and self.fail_when(context):
                raise RuntimeError(f"scripted failure for {context.task}")
            return self._payload(context, result_shape)
        finally:
            self.in_flight -= 1

    def calls_for(self, task: str) -> list[PromptContext]:
        return [c for c, _ in self.calls if c.task == task]


def entity(entity_id: str, level: int = 1, name: Optional[str] = None) -> DimensionEntity:
    return DimensionEntity(id=entity_id, name=name or entity_id, level=level)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def make_generator() -> Callable[..., FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def make_entity() -> Callable[..., DimensionEntity]:
    return entity


@pytest.fixture
def catalog() -> DimensionCatalog:
    return DimensionCatalog.from_entities({
        DimensionName.OCCUPATIONS: [
            entity("Paralegals", level=2, name="Paralegals and Legal Assistants"),
            entity("ClaimsAdjusters", level=2, name="Claims Adjusters"),
            entity("Dispatchers", level=3, name="Dispatchers"),
        ],
        DimensionName.INDUSTRIES: [
            entity("HealthCare", level=1, name="Health Care"),
            entity("LegalServices", level=3, name="Legal Services"),
            entity("Construction", level=1, name="Construction"),
        ],
        DimensionName.TECHNOLOGIES: [
            entity("LargeLanguageModels", name="Large Language Models"),
        ],
    })


@pytest.fixture
def make_strategy() -> Callable[..., StrategyConfig]:
    """Build a StrategyConfig from compact per-dimension settings.

    make_strategy(industries={"priority": 6}, occupations={"filter": {...}})
    enables each named dimension with the given config.
    """
    def _make(strategy_id: str = "test-strategy", constraints: Optional[dict] = None, **dimensions):
        return StrategyConfig.model_validate({
            "id": strategy_id,
            "name": "Test strategy",
            "thesis": "Agents do the busywork",
            "dimensions": {
                name: {"enabled": True, **config} for name, config in dimensions.items()
            },
            "constraints": constraints or {},
        })
    return _make


@pytest.fixture
def make_scored_concept() -> Callable[..., Concept]:
    """Concept with a viability score built from {dimension: (score, weight)}."""
    def _make(concept_id: str, scores: dict, strategy_id: str = "test-strategy") -> Concept:
        concept = Concept(
            id=concept_id,
            strategy_id=strategy_id,
            seed=ConceptSeed(entities={DimensionName.INDUSTRIES: entity("HealthCare")}),
            content=ConceptContent.model_validate(content_payload(concept_id)),
        )
        dimension_scores = {
            ScoringDimension(d): DimensionScore(score=s, weight=w) for d, (s, w) in scores.items()
        }
        return concept.with_score(score_concept(concept, dimension_scores))
    return _make
