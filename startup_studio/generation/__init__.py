"""Concept generation: seed enumeration, synthesis, branding."""

from startup_studio.generation.schemas import (
    BrandIdentity,
    Concept,
    ConceptContent,
    ConceptSeed,
    ConceptStatus,
)
from startup_studio.generation.cross_product import SeedPlan, generate_seeds, plan_seeds
from startup_studio.generation.synthesizer import ConceptSynthesizer, make_concept_id
from startup_studio.generation.branding import brand_concept

__all__ = [
    "BrandIdentity",
    "Concept",
    "ConceptContent",
    "ConceptSeed",
    "ConceptStatus",
    "SeedPlan",
    "generate_seeds",
    "plan_seeds",
    "ConceptSynthesizer",
    "make_concept_id",
    "brand_concept",
]
