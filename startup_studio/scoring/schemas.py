"""Viability scoring schemas."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ScoringDimension(str, Enum):
    """The eight viability dimensions."""

    MARKET_SIZE = "market_size"
    PROBLEM_SEVERITY = "problem_severity"
    SOLUTION_FIT = "solution_fit"
    COMPETITION = "competition"  # higher = less competition
    GTM_EASE = "gtm_ease"
    MONETIZATION = "monetization"
    DEFENSIBILITY = "defensibility"
    TIMING = "timing"


class Tier(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class Recommendation(str, Enum):
    PURSUE_AGGRESSIVELY = "pursue-aggressively"
    TEST_HYPOTHESIS = "test-hypothesis"
    EXPLORE_FURTHER = "explore-further"
    DEPRIORITIZE = "deprioritize"
    SKIP = "skip"


class DimensionScore(BaseModel):
    """Score for one viability dimension."""

    score: float = Field(..., ge=0, le=100, description="Sub-score 0-100")
    weight: float = Field(..., ge=0, le=1, description="Weight in the overall score")
    rationale: str = Field(default="", description="Why this score")
    signals: list[str] = Field(default_factory=list, description="Supporting evidence")


class ViabilityScore(BaseModel):
    """Weighted multi-dimension viability assessment of a concept."""

    dimensions: dict[ScoringDimension, DimensionScore]
    overall: int = Field(..., ge=0, le=100)
    tier: Tier
    recommendation: Recommendation


class AssessedDimension(BaseModel):
    """One dimension as returned by the generator."""

    dimension: ScoringDimension
    score: int = Field(..., ge=0, le=100)
    weight: Optional[float] = Field(default=None, ge=0, le=1)
    rationale: str
    signals: list[str] = Field(default_factory=list)


class DimensionAssessment(BaseModel):
    """Generator result shape for a viability assessment.

    The generator supplies sub-scores and rationale, and optionally weights.
    The aggregate, tier and recommendation are always computed locally.
    """

    dimensions: list[AssessedDimension]
    top_strengths: list[str] = Field(default_factory=list)
    top_weaknesses: list[str] = Field(default_factory=list)
