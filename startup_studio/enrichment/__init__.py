"""Entity enrichment module."""

from startup_studio.enrichment.enricher import enrich_entity, summarize_enrichment
from startup_studio.enrichment.schemas import EnrichmentDepth, EntityEnrichment

__all__ = [
    "EnrichmentDepth",
    "EntityEnrichment",
    "enrich_entity",
    "summarize_enrichment",
]
