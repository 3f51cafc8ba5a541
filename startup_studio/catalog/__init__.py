"""Taxonomy dimension catalog and filter engine."""

from .schemas import DimensionEntity, DimensionFilter, DimensionName, DIMENSION_ORDER
from .filters import FilterError, apply_filter, validate_filter
from .registry import DimensionCatalog, get_dimension_catalog

__all__ = [
    "DimensionEntity",
    "DimensionFilter",
    "DimensionName",
    "DIMENSION_ORDER",
    "FilterError",
    "apply_filter",
    "validate_filter",
    "DimensionCatalog",
    "get_dimension_catalog",
]
