import pytest

from startup_studio.catalog.filters import FilterError, apply_filter, validate_filter
from startup_studio.catalog.schemas import DimensionEntity, DimensionFilter


ENTITIES = [
    DimensionEntity(id="a", name="Accounting", level=1),
    DimensionEntity(id="b", name="Billing Clerks", level=2),
    DimensionEntity(id="c", name="Claims Adjusters", level=2),
    DimensionEntity(id="d", name="Dispatchers", level=3),
    DimensionEntity(id="e", name="Medical Billing", level=3),
]


def ids(entities):
    return [e.id for e in entities]


def test_no_filter_returns_copy_in_order():
    result = apply_filter(ENTITIES, None)
    assert ids(result) == ["a", "b", "c", "d", "e"]
    assert result is not ENTITIES


def test_allow_then_deny_deny_wins():
    f = DimensionFilter(ids=["a", "b", "c"], exclude_ids=["b"])
    assert ids(apply_filter(ENTITIES, f)) == ["a", "c"]


def test_levels():
    assert ids(apply_filter(ENTITIES, DimensionFilter(levels=[2, 3]))) == ["b", "c", "d", "e"]


def test_name_pattern_is_case_insensitive_search():
    assert ids(apply_filter(ENTITIES, DimensionFilter(name_pattern="billing"))) == ["b", "e"]
    assert ids(apply_filter(ENTITIES, DimensionFilter(name_pattern="^claims|dispatch"))) == ["c", "d"]


def test_limit_keeps_first_n_in_input_order():
    assert ids(apply_filter(ENTITIES, DimensionFilter(limit=2))) == ["a", "b"]
    assert ids(apply_filter(list(reversed(ENTITIES)), DimensionFilter(limit=2))) == ["e", "d"]


def test_limit_applies_after_other_criteria():
    f = DimensionFilter(levels=[2, 3], exclude_ids=["c"], limit=2)
    assert ids(apply_filter(ENTITIES, f)) == ["b", "d"]


def test_limit_zero_and_larger_than_input():
    assert apply_filter(ENTITIES, DimensionFilter(limit=0)) == []
    assert len(apply_filter(ENTITIES, DimensionFilter(limit=50))) == 5


def test_invalid_pattern_raises_filter_error():
    with pytest.raises(FilterError, match="industries"):
        validate_filter(DimensionFilter(name_pattern="(unclosed"), label="industries")
    with pytest.raises(FilterError):
        apply_filter(ENTITIES, DimensionFilter(name_pattern="[a-"))


def test_negative_limit_raises_filter_error():
    with pytest.raises(FilterError):
        validate_filter(DimensionFilter(limit=-1))


def test_entities_are_not_mutated():
    before = [e.model_dump() for e in ENTITIES]
    apply_filter(ENTITIES, DimensionFilter(ids=["a"], levels=[1], name_pattern="acc", limit=1))
    assert [e.model_dump() for e in ENTITIES] == before
