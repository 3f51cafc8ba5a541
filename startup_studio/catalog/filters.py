"""Filter engine: reduces a dimension's entity list with a DimensionFilter."""

import logging
import re
from typing import Optional

from startup_studio.catalog.schemas import DimensionEntity, DimensionFilter

logger = logging.getLogger(__name__)


class FilterError(ValueError):
    """A filter is malformed (bad pattern, negative limit).

    Indicates misconfiguration, so it aborts a run before any generation.
    """


def validate_filter(dimension_filter: Optional[DimensionFilter], label: str = "") -> None:
    """Raise FilterError if the filter could never be applied."""
    if dimension_filter is None:
        return
    prefix = f"{label}: " if label else ""
    if dimension_filter.limit is not None and dimension_filter.limit < 0:
        raise FilterError(f"{prefix}limit must be >= 0, got {dimension_filter.limit}")
    if dimension_filter.name_pattern is not None:
        _compile_pattern(dimension_filter.name_pattern, prefix)


def _compile_pattern(pattern: str, prefix: str = "") -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise FilterError(f"{prefix}invalid name_pattern {pattern!r}: {e}") from e


def apply_filter(
    entities: list[DimensionEntity],
    dimension_filter: Optional[DimensionFilter],
) -> list[DimensionEntity]:
    """Apply a filter to a dimension's entities.

    Order of operations:
    1. keep only ids in the allow-list (if given)
    2. drop ids in the deny-list (if given)
    3. keep only entities whose level is in the level set (if given)
    4. keep only entities whose name matches the pattern (if given)
    5. truncate to the first `limit` entities, in input order

    The input order is preserved throughout; nothing is sorted.

    Raises:
        FilterError: If the pattern does not compile or limit is negative
    """
    if dimension_filter is None:
        return list(entities)

    validate_filter(dimension_filter)
    result = list(entities)

    if dimension_filter.ids is not None:
        allowed = set(dimension_filter.ids)
        result = [e for e in result if e.id in allowed]

    if dimension_filter.exclude_ids is not None:
        denied = set(dimension_filter.exclude_ids)
        result = [e for e in result if e.id not in denied]

    if dimension_filter.levels is not None:
        levels = set(dimension_filter.levels)
        result = [e for e in result if e.level in levels]

    if dimension_filter.name_pattern is not None:
        pattern = _compile_pattern(dimension_filter.name_pattern)
        result = [e for e in result if pattern.search(e.name)]

    if dimension_filter.limit is not None:
        result = result[: dimension_filter.limit]

    logger.debug(f"Filter kept {len(result)}/{len(entities)} entities")
    return result
