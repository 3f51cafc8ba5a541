"""Dimension catalog API routes.

Endpoints:
    GET /v1/catalog                             Entity counts per dimension
    GET /v1/catalog/{dimension}                 Entities, optionally filtered
    GET /v1/catalog/{dimension}/{entity_id}     One entity
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from startup_studio.catalog.filters import FilterError, validate_filter
from startup_studio.catalog.registry import get_dimension_catalog
from startup_studio.catalog.schemas import (
    DimensionEntity,
    DimensionFilter,
    DimensionName,
    DimensionSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("", response_model=list[DimensionSummary])
async def list_dimensions() -> list[DimensionSummary]:
    """Entity counts for every dimension."""
    return get_dimension_catalog().list_summaries()


@router.get("/{dimension}", response_model=list[DimensionEntity])
async def list_entities(
    dimension: DimensionName,
    levels: Optional[list[int]] = Query(None, description="Hierarchy levels to keep"),
    name_pattern: Optional[str] = Query(None, description="Case-insensitive regex on names"),
    limit: Optional[int] = Query(None, description="Maximum entities to return"),
) -> list[DimensionEntity]:
    """Entities of one dimension, in source order."""
    dimension_filter = DimensionFilter(levels=levels, name_pattern=name_pattern, limit=limit)
    try:
        validate_filter(dimension_filter, label=dimension.value)
    except FilterError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return get_dimension_catalog().lookup(dimension, dimension_filter)


@router.get("/{dimension}/{entity_id}", response_model=DimensionEntity)
async def get_entity(dimension: DimensionName, entity_id: str) -> DimensionEntity:
    """Get one entity by id."""
    entity = get_dimension_catalog().get(dimension, entity_id)
    if entity is None:
        raise HTTPException(
            status_code=404,
            detail=f"{dimension.value} entity not found: {entity_id}",
        )
    return entity
