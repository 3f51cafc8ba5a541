#!/usr/bin/env python3
"""Concept Generation Script - run the studio workflow for one strategy.

Usage:
    # Run a registered strategy
    python scripts/generate_concepts.py vertical-ai-agents

    # Run a strategy from a JSON file, with enrichment and branding
    python scripts/generate_concepts.py --strategy-file my-strategy.json \
        --enrich --brand-top-n 3

    # Dry run (show the seed plan without calling the API)
    python scripts/generate_concepts.py vertical-ai-agents --dry-run

    # Write ranked concepts to a file
    python scripts/generate_concepts.py vertical-ai-agents --output concepts.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from startup_studio.catalog.filters import FilterError, validate_filter
from startup_studio.catalog.registry import DimensionCatalog
from startup_studio.enrichment.schemas import EnrichmentDepth
from startup_studio.executor.schemas import RunConfig, RunStatus
from startup_studio.executor.studio_workflow import execute_workflow
from startup_studio.generation.cross_product import plan_seeds
from startup_studio.llm.client import GENERATION_MODEL
from startup_studio.llm.factory import get_generator
from startup_studio.strategies.registry import get_strategy_registry
from startup_studio.strategies.schemas import StrategyConfig

logger = logging.getLogger(__name__)


def load_strategy(args: argparse.Namespace) -> StrategyConfig:
    if args.strategy_file:
        with open(args.strategy_file, "r") as f:
            return StrategyConfig.model_validate(json.load(f))
    strategy = get_strategy_registry().get(args.strategy_id)
    if strategy is None:
        raise SystemExit(f"Error: strategy not found: {args.strategy_id}")
    return strategy


def print_seed_plan(strategy: StrategyConfig, catalog: DimensionCatalog) -> None:
    candidates = {}
    for dimension in strategy.dimensions.enabled():
        dimension_filter = strategy.dimensions.get(dimension).filter
        validate_filter(dimension_filter, label=dimension.value)
        candidates[dimension] = catalog.lookup(dimension, dimension_filter)
        print(f"  - {dimension.value}: {len(candidates[dimension])} candidate(s)")

    plan = plan_seeds(candidates, strategy)
    print("")
    print(f"Axis order: {', '.join(d.value for d in plan.axis_order) or '(none)'}")
    print(f"Combinations: {plan.total_combinations}, seeds: {len(plan.seeds)}"
          + (" (truncated)" if plan.truncated else ""))
    if plan.empty_required:
        print(f"No seeds: required dimension(s) empty: "
              f"{', '.join(d.value for d in plan.empty_required)}")
    for seed in plan.seeds:
        print(f"  * {seed.label()}")


def main():
    parser = argparse.ArgumentParser(
        description="Generate, score and rank startup concepts for a strategy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("strategy_id", nargs="?", help="Registered strategy id")
    parser.add_argument("--strategy-file", help="Path to a strategy JSON file")
    parser.add_argument("--catalog-dir", type=Path, help="Taxonomy definitions directory")
    parser.add_argument("--model", default=GENERATION_MODEL, help="Generation model id")
    parser.add_argument("--concurrency", type=int, default=RunConfig().concurrency,
                        help="Generator calls in flight per fan-out step")
    parser.add_argument("--timeout", type=float, default=RunConfig().timeout,
                        help="Seconds per generator call")
    parser.add_argument("--enrich", action="store_true", help="Research the strategy's taxonomy entries first")
    parser.add_argument("--depth", choices=[d.value for d in EnrichmentDepth],
                        default=EnrichmentDepth.STANDARD.value, help="Enrichment depth")
    parser.add_argument("--top-n", type=int, help="Keep only the best N concepts")
    parser.add_argument("--brand-top-n", type=int, default=0, help="Brand the best N concepts")
    parser.add_argument("--dry-run", action="store_true", help="Show the seed plan only")
    parser.add_argument("--output", type=Path, help="Write ranked concepts as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if not args.strategy_id and not args.strategy_file:
        parser.error("a strategy id or --strategy-file is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    strategy = load_strategy(args)
    catalog = DimensionCatalog(args.catalog_dir)

    print("Concept Generation")
    print("=" * 50)
    print(f"Strategy: {strategy.id} ({strategy.name})")
    print(f"Thesis: {strategy.thesis}")
    print("")

    if args.dry_run:
        try:
            print_seed_plan(strategy, catalog)
        except FilterError as e:
            raise SystemExit(f"Error: {e}")
        return

    config = RunConfig(
        concurrency=args.concurrency,
        timeout=args.timeout,
        model=args.model,
        enrich=args.enrich,
        enrichment_depth=EnrichmentDepth(args.depth),
        top_n=args.top_n,
        brand_top_n=args.brand_top_n,
    )
    try:
        generator = get_generator(config.model)
        execution = asyncio.run(execute_workflow(strategy, config, catalog, generator))
    except (FilterError, ValueError) as e:
        raise SystemExit(f"Error: {e}")

    print("")
    print(f"Run {execution.id}: {execution.status.value} ({execution.progress:.0f}%)")
    for step in execution.steps:
        line = f"  - {step.id}: {step.status.value}"
        if step.error:
            line += f" ({step.error})"
        print(line)

    ranking = execution.results.get("rank-concepts")
    if ranking is None:
        sys.exit(1)

    print("")
    for entry in ranking.ranked:
        content = entry.concept.content
        print(f"{entry.rank:>3}. [{entry.tier.value}] {entry.score:>3}  {content.name}: {content.one_liner}")

    if args.output:
        payload = {
            "run_id": execution.id,
            "strategy_id": strategy.id,
            "status": execution.status.value,
            "ranked": [entry.model_dump(mode="json") for entry in ranking.ranked],
        }
        branding = execution.results.get("brand-concepts")
        if branding is not None:
            payload["branded"] = [c.model_dump(mode="json") for c in branding["concepts"]]
        args.output.write_text(json.dumps(payload, indent=2))
        print(f"\nWrote {len(ranking.ranked)} concept(s) to {args.output}")

    if execution.status != RunStatus.COMPLETED:
        sys.exit(1)


if __name__ == "__main__":
    main()
