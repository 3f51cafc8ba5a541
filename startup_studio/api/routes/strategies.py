"""Strategy API routes.

Endpoints:
    GET /v1/strategies                     List strategies (optional status filter)
    GET /v1/strategies/count               Total number of strategies
    GET /v1/strategies/{strategy_id}       Full strategy definition
    GET /v1/strategies/{strategy_id}/seeds Seed plan preview (no generation)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from startup_studio.catalog.filters import FilterError, validate_filter
from startup_studio.catalog.registry import get_dimension_catalog
from startup_studio.catalog.schemas import DimensionName
from startup_studio.generation.cross_product import plan_seeds
from startup_studio.strategies.registry import get_strategy_registry
from startup_studio.strategies.schemas import StrategyConfig, StrategyStatus, StrategySummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/strategies", tags=["strategies"])


class SeedPreview(BaseModel):
    """Seed plan without the generated content."""

    strategy_id: str
    axis_order: list[DimensionName]
    total_combinations: int
    truncated: bool
    empty_required: list[DimensionName]
    seeds: list[dict[str, str]] = Field(
        default_factory=list,
        description="Dimension -> entity id, one dict per seed",
    )


@router.get("", response_model=list[StrategySummary])
async def list_strategies(
    status: Optional[StrategyStatus] = Query(None, description="Filter by status"),
) -> list[StrategySummary]:
    """List all strategies."""
    registry = get_strategy_registry()
    if status:
        return registry.list_by_status(status)
    return registry.list_all()


@router.get("/count")
async def get_strategy_count() -> dict[str, int]:
    """Get total number of strategies."""
    return {"count": get_strategy_registry().count()}


@router.get("/{strategy_id}", response_model=StrategyConfig)
async def get_strategy(strategy_id: str) -> StrategyConfig:
    """Get full strategy definition."""
    strategy = get_strategy_registry().get(strategy_id)
    if strategy is None:
        raise HTTPException(status_code=404, detail=f"Strategy not found: {strategy_id}")
    return strategy


@router.get("/{strategy_id}/seeds", response_model=SeedPreview)
async def preview_seeds(
    strategy_id: str,
    limit: int = Query(50, ge=0, le=1000, description="Max seeds to return"),
) -> SeedPreview:
    """Enumerate a strategy's seeds against the catalog without generating anything."""
    strategy = get_strategy_registry().get(strategy_id)
    if strategy is None:
        raise HTTPException(status_code=404, detail=f"Strategy not found: {strategy_id}")

    catalog = get_dimension_catalog()
    candidates = {}
    try:
        for dimension in strategy.dimensions.enabled():
            dimension_filter = strategy.dimensions.get(dimension).filter
            validate_filter(dimension_filter, label=dimension.value)
            candidates[dimension] = catalog.lookup(dimension, dimension_filter)
    except FilterError as e:
        raise HTTPException(status_code=422, detail=str(e))

    plan = plan_seeds(candidates, strategy)
    return SeedPreview(
        strategy_id=strategy.id,
        axis_order=plan.axis_order,
        total_combinations=plan.total_combinations,
        truncated=plan.truncated,
        empty_required=plan.empty_required,
        seeds=[
            {d.value: e.id for d, e in seed.entities.items()}
            for seed in plan.seeds[:limit]
        ],
    )
