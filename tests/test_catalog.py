import json

from startup_studio.catalog.registry import DimensionCatalog
from startup_studio.catalog.schemas import DimensionFilter, DimensionName


def test_bundled_definitions_load():
    catalog = DimensionCatalog()
    assert catalog.count(DimensionName.INDUSTRIES) == 8
    assert catalog.count(DimensionName.OCCUPATIONS) == 6
    assert catalog.count() > 14

    legal = catalog.get(DimensionName.INDUSTRIES, "LegalServices")
    assert legal is not None
    assert legal.level == 3
    assert legal.source_type == "NAICS"


def test_yaml_file_with_entities_key():
    catalog = DimensionCatalog()
    paralegals = catalog.get(DimensionName.OCCUPATIONS, "Paralegals")
    assert paralegals is not None
    assert paralegals.code == "23-2011.00"


def test_lookup_applies_filter(catalog):
    result = catalog.lookup(DimensionName.INDUSTRIES, DimensionFilter(levels=[1]))
    assert [e.id for e in result] == ["HealthCare", "Construction"]


def test_missing_dimension_is_empty(catalog):
    assert catalog.list_entities(DimensionName.TASKS) == []
    assert catalog.get(DimensionName.TASKS, "anything") is None


def test_loads_list_file_and_skips_malformed(tmp_path):
    (tmp_path / "services.json").write_text(json.dumps([
        {"id": "Bookkeeping", "name": "Bookkeeping"},
        {"name": "missing id"},
        {"id": "Bookkeeping", "name": "Duplicate"},
    ]))
    catalog = DimensionCatalog(tmp_path)
    entities = catalog.list_entities(DimensionName.SERVICES)
    assert [e.name for e in entities] == ["Bookkeeping"]


def test_missing_directory_gives_empty_catalog(tmp_path):
    catalog = DimensionCatalog(tmp_path / "nope")
    assert catalog.count() == 0


def test_summaries_cover_every_dimension(catalog):
    summaries = {s.dimension: s.entity_count for s in catalog.list_summaries()}
    assert set(summaries) == set(DimensionName)
    assert summaries[DimensionName.OCCUPATIONS] == 3
    assert summaries[DimensionName.PROCESSES] == 0
