"""Concept synthesis: turn a seed into a concept via the content generator.

The synthesizer's own logic is small: build the prompt context, assign a
deterministic concept id, and link the concept to its seed and strategy.
Every piece of free text comes from the generator. Failures raise
GenerationFailed and are never retried here.
"""

import logging
import re
from typing import Optional

from startup_studio.catalog.schemas import DIMENSION_ORDER
from startup_studio.generation.schemas import Concept, ConceptContent, ConceptSeed
from startup_studio.llm.generator import ContentGenerator, PromptContext, generate_validated
from startup_studio.strategies.schemas import StrategyConfig

logger = logging.getLogger(__name__)

CONCEPT_TASK = "startup_concept"

CONCEPT_INSTRUCTIONS = (
    "Design one startup concept at the intersection of the target entities, "
    "in line with the strategy thesis. Name the concrete customer pain and "
    "how the product removes it."
)

_ID_UNSAFE = re.compile(r"[^a-z0-9]+")


def _slug(value: str) -> str:
    return _ID_UNSAFE.sub("-", value.lower()).strip("-")


def make_concept_id(strategy_id: str, seed: ConceptSeed, suffix: str) -> str:
    """Deterministic id from strategy, seed entity ids and a suffix.

    Traceable to its seed; not unique across runs unless the suffix is.
    """
    parts = [strategy_id, *seed.entity_ids(), suffix]
    return "-".join(s for s in (_slug(p) for p in parts) if s)


def build_prompt_context(
    seed: ConceptSeed,
    strategy: StrategyConfig,
    enrichments: Optional[dict[str, str]] = None,
) -> PromptContext:
    """Structured context for a concept: thesis, entities, prior research."""
    entities = {
        d.value: {
            "id": seed.entities[d].id,
            "name": seed.entities[d].name,
            "description": seed.entities[d].description,
        }
        for d in DIMENSION_ORDER
        if d in seed.entities
    }
    seed_ids = set(seed.entity_ids())
    return PromptContext(
        task=CONCEPT_TASK,
        instructions=CONCEPT_INSTRUCTIONS,
        strategy={
            "id": strategy.id,
            "name": strategy.name,
            "thesis": strategy.thesis,
        },
        entities=entities,
        enrichments={k: v for k, v in (enrichments or {}).items() if k in seed_ids},
    )


class ConceptSynthesizer:
    """Synthesizes concepts from seeds with an injected generator."""

    def __init__(self, generator: ContentGenerator):
        self.generator = generator

    async def synthesize(
        self,
        seed: ConceptSeed,
        strategy: StrategyConfig,
        suffix: str,
        enrichments: Optional[dict[str, str]] = None,
    ) -> Concept:
        """Generate one concept for a seed.

        Raises:
            GenerationFailed: If the generator errors or returns content
                missing a required field
        """
        context = build_prompt_context(seed, strategy, enrichments)
        content = await generate_validated(self.generator, context, ConceptContent)
        concept = Concept(
            id=make_concept_id(strategy.id, seed, suffix),
            strategy_id=strategy.id,
            seed=seed,
            content=content,
        )
        logger.debug(f"Synthesized {concept.id}: {content.name}")
        return concept
