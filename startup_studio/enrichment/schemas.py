"""Entity enrichment schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class EnrichmentDepth(str, Enum):
    """How much research to request per entity."""

    BASIC = "basic"
    STANDARD = "standard"
    COMPREHENSIVE = "comprehensive"


# Items requested per list field at each depth
DEPTH_ITEM_COUNTS: dict[EnrichmentDepth, str] = {
    EnrichmentDepth.BASIC: "3-5",
    EnrichmentDepth.STANDARD: "5-8",
    EnrichmentDepth.COMPREHENSIVE: "8-12",
}


class EntityEnrichment(BaseModel):
    """Generator result shape for researching one taxonomy entity."""

    summary: str = Field(..., description="Two or three sentences on the entity's business context")
    pain_points: list[str] = Field(..., description="Concrete recurring pains")
    trends: list[str] = Field(..., description="Trends creating openings for new entrants")
    ai_opportunity: str = Field(..., description="Where AI can create the most value")
