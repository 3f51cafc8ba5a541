"""Viability scoring and ranking.

- schemas: viability dimensions, scores, tiers, recommendations
- scorer: weighted aggregate, tier and recommendation; generator-backed assessment
- ranker: ordering with optional weight overrides, top-N and tier buckets
"""
