"""Startup Studio - generation and orchestration core.

Turns a strategy ("hypothesis") and a taxonomy catalog into scored,
ranked startup concepts:
- Dimension catalog and filters (occupations, industries, processes, ...)
- Cross-product seed generation and concept synthesis
- Viability scoring and ranking
- Dependency-ordered pipeline execution with bounded concurrency
"""

__version__ = "0.1.0"
