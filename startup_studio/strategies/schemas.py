"""Strategy ("hypothesis") schemas.

A strategy is a meta-thesis that defines a class of startups, e.g.
"Headless SaaS for agents, not humans". Crossed with the taxonomy
dimensions it yields the seeds from which concepts are synthesized.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from startup_studio.catalog.schemas import DIMENSION_ORDER, DimensionFilter, DimensionName


class StrategyStatus(str, Enum):
    """Lifecycle of a strategy."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"


class DimensionConfig(BaseModel):
    """How one taxonomy dimension takes part in the cross-product."""

    enabled: bool = Field(default=False, description="Whether this dimension is an axis of the cross-product")
    filter: Optional[DimensionFilter] = Field(default=None, description="Filtering criteria for this dimension")
    priority: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Priority weight (1-10). Higher-priority dimensions are enumerated first.",
    )


class StrategyDimensions(BaseModel):
    """Configuration for each of the six taxonomy dimensions."""

    occupations: DimensionConfig = Field(default_factory=DimensionConfig)
    industries: DimensionConfig = Field(default_factory=DimensionConfig)
    processes: DimensionConfig = Field(default_factory=DimensionConfig)
    tasks: DimensionConfig = Field(default_factory=DimensionConfig)
    services: DimensionConfig = Field(default_factory=DimensionConfig)
    technologies: DimensionConfig = Field(default_factory=DimensionConfig)

    def get(self, dimension: DimensionName) -> DimensionConfig:
        return getattr(self, DimensionName(dimension).value)

    def enabled(self) -> list[DimensionName]:
        """Enabled dimensions in declaration order."""
        return [d for d in DIMENSION_ORDER if self.get(d).enabled]


class StrategyConstraints(BaseModel):
    """Bounds on what a strategy may generate."""

    min_score: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Minimum viability score for a concept to be retained",
    )
    max_concepts: Optional[int] = Field(
        default=None,
        ge=0,
        description="Maximum seeds (and therefore concepts) to generate",
    )
    required_dimensions: list[DimensionName] = Field(
        default_factory=list,
        description="Dimensions every seed must carry",
    )

    @model_validator(mode="before")
    @classmethod
    def _migrate_require_flags(cls, data: Any) -> Any:
        """Backwards compatibility: accept 'require_industry'/'require_occupation' flags."""
        if isinstance(data, dict):
            data = dict(data)
            flags = {
                "require_industry": DimensionName.INDUSTRIES.value,
                "require_occupation": DimensionName.OCCUPATIONS.value,
            }
            required = list(data.get("required_dimensions") or [])
            for flag, dimension in flags.items():
                if data.pop(flag, False) and dimension not in required:
                    required.append(dimension)
            data["required_dimensions"] = required
        return data


class StrategyConfig(BaseModel):
    """A strategy definition: thesis, dimension configuration, constraints."""

    id: str = Field(..., description="Unique identifier (kebab-case)")
    name: str = Field(..., description="Human-readable name")
    thesis: str = Field(default="", description="Core belief this strategy tests")
    description: str = Field(default="", description="Rationale and details")
    dimensions: StrategyDimensions = Field(default_factory=StrategyDimensions)
    constraints: StrategyConstraints = Field(default_factory=StrategyConstraints)
    status: StrategyStatus = StrategyStatus.DRAFT
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_required_dimensions(self) -> "StrategyConfig":
        """A required dimension must also be enabled."""
        disabled = [
            d.value
            for d in self.constraints.required_dimensions
            if not self.dimensions.get(d).enabled
        ]
        if disabled:
            raise ValueError(
                f"Required dimensions must be enabled. Disabled: {', '.join(disabled)}"
            )
        return self


class StrategySummary(BaseModel):
    """Lightweight strategy info for listing endpoints."""

    id: str
    name: str
    status: StrategyStatus
    enabled_dimensions: list[DimensionName]
