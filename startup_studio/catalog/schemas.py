"""Catalog schemas for taxonomy dimensions and their filters.

Entities are sourced from external taxonomies (O*NET occupations, NAICS
industries, APQC processes, ...) and are never modified by the core.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DimensionName(str, Enum):
    """Taxonomy axes, in declaration order.

    Declaration order breaks priority ties during cross-product generation,
    so the order of members here is significant.
    """

    OCCUPATIONS = "occupations"
    INDUSTRIES = "industries"
    PROCESSES = "processes"
    TASKS = "tasks"
    SERVICES = "services"
    TECHNOLOGIES = "technologies"


DIMENSION_ORDER: list[DimensionName] = list(DimensionName)


class DimensionEntity(BaseModel):
    """A single taxonomy entity (an occupation, an industry, ...)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable identifier, unique within its dimension")
    name: str = Field(..., description="Human-readable display name")
    level: int = Field(
        default=1,
        description="Hierarchy depth (dimension-dependent, e.g. NAICS 1=sector .. 5=national industry)",
    )
    description: str = Field(default="", description="What this entity represents")
    code: Optional[str] = Field(
        default=None,
        description="Source taxonomy code (NAICS code, O*NET SOC code, ...)",
    )
    source_type: Optional[str] = Field(
        default=None,
        description="Origin taxonomy (e.g. 'NAICS', 'ONET', 'APQC')",
    )


class DimensionFilter(BaseModel):
    """Per-dimension filtering criteria.

    Applied in a fixed order: ids, exclude_ids, levels, name_pattern, limit.
    When an id is in both ids and exclude_ids, the exclusion wins.
    """

    ids: Optional[list[str]] = Field(default=None, description="Specific IDs to include")
    exclude_ids: Optional[list[str]] = Field(default=None, description="Specific IDs to exclude")
    levels: Optional[list[int]] = Field(default=None, description="Hierarchy levels to include")
    name_pattern: Optional[str] = Field(
        default=None,
        description="Regular expression searched case-insensitively in entity names",
    )
    limit: Optional[int] = Field(default=None, description="Maximum entities to keep")


class DimensionSummary(BaseModel):
    """Lightweight dimension info for listing endpoints."""

    dimension: DimensionName
    entity_count: int
