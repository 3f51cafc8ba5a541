"""Concept schemas: seeds, generated content, and the concept record.

Concepts are frozen. Scoring, selection and branding each produce a new
Concept via `model_copy`; nothing is updated in place.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from startup_studio.catalog.schemas import DIMENSION_ORDER, DimensionEntity, DimensionName
from startup_studio.scoring.schemas import ViabilityScore


class ConceptSeed(BaseModel):
    """At most one entity per enabled dimension.

    Ephemeral: produced and consumed within a single generation run.
    """

    model_config = ConfigDict(frozen=True)

    entities: dict[DimensionName, DimensionEntity] = Field(default_factory=dict)

    def entity_ids(self) -> list[str]:
        """Entity ids in dimension declaration order."""
        return [self.entities[d].id for d in DIMENSION_ORDER if d in self.entities]

    def label(self) -> str:
        return " × ".join(self.entities[d].name for d in DIMENSION_ORDER if d in self.entities)


class ConceptStatus(str, Enum):
    """Concept lifecycle within the core."""

    GENERATED = "generated"
    SCORED = "scored"
    SELECTED = "selected"


class ConceptContent(BaseModel):
    """Generator result shape for a startup concept. Every field is required."""

    name: str = Field(..., description="The startup name")
    tagline: str = Field(..., description="Short tagline (max 10 words)")
    one_liner: str = Field(..., description="One line description (max 100 chars)")
    pitch: str = Field(..., description="Elevator pitch (max 500 chars)")
    problem: str = Field(..., description="The problem being solved, as the customer feels it")
    solution: str = Field(..., description="How the startup solves it")
    service_type: Literal["full-automation", "augmentation", "overlay", "platform", "api"]
    business_model: Literal[
        "saas", "paas", "api", "marketplace", "agency", "productized", "data", "infrastructure"
    ]
    target_customer: Literal["agent", "human", "hybrid"]
    pricing_model: Literal[
        "usage", "seat", "flat", "tiered", "freemium", "outcome", "hybrid", "marketplace", "credits"
    ]
    free_tier: bool
    moat: str = Field(..., description="Competitive moat or unfair advantage")
    tags: list[str]


class BrandIdentity(BaseModel):
    """Generator result shape for a concept's brand."""

    tone: Literal["professional", "technical", "friendly", "playful", "bold", "minimal", "premium"]
    domain: str = Field(..., description="Primary domain name suggestion")
    alternative_domains: list[str]
    primary_color: str = Field(..., description="Primary brand color (hex)")
    secondary_color: str = Field(..., description="Secondary brand color (hex)")
    personality: list[str] = Field(..., description="3-5 personality traits")


class Concept(BaseModel):
    """A synthesized startup concept."""

    model_config = ConfigDict(frozen=True)

    id: str
    strategy_id: str
    seed: ConceptSeed
    content: ConceptContent
    status: ConceptStatus = ConceptStatus.GENERATED
    viability: Optional[ViabilityScore] = None
    score_history: list[ViabilityScore] = Field(default_factory=list)
    brand: Optional[BrandIdentity] = None
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def with_score(self, viability: ViabilityScore) -> "Concept":
        """A new concept carrying this score; any previous score moves to history."""
        history = list(self.score_history)
        if self.viability is not None:
            history.append(self.viability)
        return self.model_copy(
            update={
                "viability": viability,
                "score_history": history,
                "status": ConceptStatus.SCORED,
            }
        )
