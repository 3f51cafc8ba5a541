"""Brand identity for selected concepts."""

import logging

from startup_studio.catalog.schemas import DimensionName
from startup_studio.generation.schemas import BrandIdentity, Concept
from startup_studio.llm.generator import ContentGenerator, PromptContext, generate_validated

logger = logging.getLogger(__name__)

BRAND_TASK = "brand_identity"


async def brand_concept(generator: ContentGenerator, concept: Concept) -> Concept:
    """Return a copy of the concept carrying a generated brand identity.

    Raises:
        GenerationFailed: If the generator errors or the reply has the wrong shape
    """
    occupation = concept.seed.entities.get(DimensionName.OCCUPATIONS)
    context = PromptContext(
        task=BRAND_TASK,
        instructions=(
            f'Create a brand identity for "{concept.content.name}". '
            "Define the tone, colors, domain options and personality."
        ),
        extra={
            "one_liner": concept.content.one_liner,
            "tagline": concept.content.tagline,
            "target_audience": occupation.name if occupation else "Business professionals",
        },
    )
    brand = await generate_validated(generator, context, BrandIdentity)
    logger.debug(f"Branded {concept.id}: {brand.domain} ({brand.tone})")
    return concept.model_copy(update={"brand": brand})
