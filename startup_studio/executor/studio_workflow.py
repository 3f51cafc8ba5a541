"""The standard concept-generation workflow.

    filter-dimensions ─┬─ enrich-industries ──┐
                       ├─ enrich-occupations ─┤
                       ├─ enrich-processes ───┤
                       ├─ enrich-tasks ───────┤
                       └─ generate-seeds ─────┴─ synthesize-concepts
                                                   └─ score-concepts
                                                        └─ rank-concepts
                                                             └─ brand-concepts

Enrichment steps exist only when the run config enables enrichment and the
dimension is enabled in the strategy; branding only when brand_top_n > 0.
Synthesis uses whatever summaries the enrichment steps produced; an
enrichment step only fails, and blocks synthesis, when every item failed.
"""

import asyncio
import logging
from typing import Optional

from startup_studio.catalog.filters import validate_filter
from startup_studio.catalog.registry import DimensionCatalog
from startup_studio.catalog.schemas import DimensionEntity, DimensionName
from startup_studio.enrichment.enricher import enrich_entity, summarize_enrichment
from startup_studio.executor.operations import Operation, OperationRegistry, RunContext
from startup_studio.executor.schemas import Phase, PipelineStep, RunConfig, WorkflowExecution
from startup_studio.executor.workflow_runner import PipelineOrchestrator
from startup_studio.generation.branding import brand_concept
from startup_studio.generation.cross_product import SeedPlan, plan_seeds
from startup_studio.generation.schemas import Concept, ConceptSeed, ConceptStatus
from startup_studio.generation.synthesizer import ConceptSynthesizer
from startup_studio.llm.generator import ContentGenerator, TimedContentGenerator
from startup_studio.scoring.ranker import RankingResult, rank_concepts
from startup_studio.scoring.scorer import ViabilityAssessor
from startup_studio.strategies.schemas import StrategyConfig

logger = logging.getLogger(__name__)

ENRICHABLE_DIMENSIONS = [
    DimensionName.INDUSTRIES,
    DimensionName.OCCUPATIONS,
    DimensionName.PROCESSES,
    DimensionName.TASKS,
]


class StudioContext(RunContext):
    """Run context carrying the collaborators of a studio run."""

    def __init__(
        self,
        strategy: StrategyConfig,
        config: RunConfig,
        catalog: DimensionCatalog,
        generator: ContentGenerator,
    ):
        super().__init__()
        self.strategy = strategy
        self.config = config
        self.catalog = catalog
        self.generator = generator

    def candidates(self) -> dict[DimensionName, list[DimensionEntity]]:
        return self.output("filter-dimensions", {})

    def enrichments(self) -> dict[str, str]:
        """Enrichment summaries from every finished enrichment step, by entity id."""
        merged: dict[str, str] = {}
        for dimension in ENRICHABLE_DIMENSIONS:
            output = self.output(f"enrich-{dimension.value}")
            if output:
                merged.update(output["summaries"])
        return merged


# =============================================================================
# Operations
# =============================================================================


async def _filter_dimensions(step: PipelineStep, context: StudioContext) -> dict:
    candidates: dict[DimensionName, list[DimensionEntity]] = {}
    for dimension in context.strategy.dimensions.enabled():
        config = context.strategy.dimensions.get(dimension)
        candidates[dimension] = context.catalog.lookup(dimension, config.filter)
    logger.info(
        "Filtered candidates: "
        + ", ".join(f"{d.value}={len(v)}" for d, v in candidates.items())
    )
    return candidates


def _enrich_items(step: PipelineStep, context: StudioContext) -> list[DimensionEntity]:
    dimension = DimensionName(step.input["dimension"])
    return context.candidates().get(dimension, [])


async def _enrich_work(entity: DimensionEntity, step: PipelineStep, context: StudioContext):
    dimension = DimensionName(step.input["dimension"])
    return await enrich_entity(
        context.generator, dimension, entity, depth=context.config.enrichment_depth
    )


def _collect_enrichments(step: PipelineStep, context: StudioContext, results: dict) -> dict:
    return {
        "enrichments": {k: r.value for k, r in results.items() if r.ok},
        "summaries": {k: summarize_enrichment(r.value) for k, r in results.items() if r.ok},
        "errors": {k: r.error for k, r in results.items() if not r.ok},
    }


async def _generate_seeds(step: PipelineStep, context: StudioContext) -> SeedPlan:
    return plan_seeds(context.candidates(), context.strategy)


def _seed_items(step: PipelineStep, context: StudioContext) -> list[tuple[int, ConceptSeed]]:
    plan: SeedPlan = context.output("generate-seeds")
    return list(enumerate(plan.seeds, start=1))


async def _synthesize_work(item: tuple[int, ConceptSeed], step: PipelineStep, context: StudioContext) -> Concept:
    index, seed = item
    synthesizer = ConceptSynthesizer(context.generator)
    return await synthesizer.synthesize(
        seed, context.strategy, suffix=f"{index:03d}", enrichments=context.enrichments()
    )


def _collect_concepts(step: PipelineStep, context: StudioContext, results: dict) -> dict:
    """Concepts in item order, plus per-item errors."""
    return {
        "concepts": [r.value for r in results.values() if r.ok],
        "errors": {str(k): r.error for k, r in results.items() if not r.ok},
    }


def _concept_items(source_step: str):
    def items(step: PipelineStep, context: StudioContext) -> list[Concept]:
        output = context.output(source_step)
        return list(output["concepts"]) if output else []
    return items


async def _score_work(concept: Concept, step: PipelineStep, context: StudioContext) -> Concept:
    assessor = ViabilityAssessor(context.generator)
    return await assessor.assess(concept, enrichments=context.enrichments())


async def _rank_concepts(step: PipelineStep, context: StudioContext) -> RankingResult:
    scored: list[Concept] = context.output("score-concepts")["concepts"]
    min_score = context.strategy.constraints.min_score

    kept = [c for c in scored if c.viability.overall >= min_score]
    if len(kept) < len(scored):
        logger.info(f"Dropped {len(scored) - len(kept)} concept(s) below min_score {min_score}")

    ranking = rank_concepts(
        kept,
        weight_overrides=context.config.weight_overrides,
        top_n=context.config.top_n,
    )
    for entry in ranking.ranked:
        entry.concept = entry.concept.model_copy(update={"status": ConceptStatus.SELECTED})
    return ranking


def _brand_items(step: PipelineStep, context: StudioContext) -> list[Concept]:
    ranking: RankingResult = context.output("rank-concepts")
    return [entry.concept for entry in ranking.ranked[: context.config.brand_top_n]]


async def _brand_work(concept: Concept, step: PipelineStep, context: StudioContext) -> Concept:
    return await brand_concept(context.generator, concept)


def _concept_id(concept: Concept) -> str:
    return concept.id


def get_studio_operations() -> OperationRegistry:
    """Registry holding every operation the studio workflow uses."""
    registry = OperationRegistry()
    registry.register(Operation(
        name="filter_dimensions",
        run=_filter_dimensions,
        description="Reduce each enabled dimension to its filtered candidates",
    ))
    registry.register(Operation(
        name="enrich_entities",
        items=_enrich_items,
        work=_enrich_work,
        key=lambda entity: entity.id,
        collect=_collect_enrichments,
        description="Research each candidate of one dimension",
    ))
    registry.register(Operation(
        name="generate_seeds",
        run=_generate_seeds,
        description="Cross-product candidates into seeds",
    ))
    registry.register(Operation(
        name="synthesize_concepts",
        items=_seed_items,
        work=_synthesize_work,
        key=lambda item: item[0],
        collect=_collect_concepts,
        description="Generate one concept per seed",
    ))
    registry.register(Operation(
        name="score_concepts",
        items=_concept_items("synthesize-concepts"),
        work=_score_work,
        key=_concept_id,
        collect=_collect_concepts,
        description="Assess each concept's viability",
    ))
    registry.register(Operation(
        name="rank_concepts",
        run=_rank_concepts,
        description="Drop concepts below min_score, rank and select the rest",
    ))
    registry.register(Operation(
        name="brand_concepts",
        items=_brand_items,
        work=_brand_work,
        key=_concept_id,
        collect=_collect_concepts,
        description="Generate brand identities for the top concepts",
    ))
    return registry


# =============================================================================
# Workflow
# =============================================================================


def build_studio_steps(strategy: StrategyConfig, config: RunConfig) -> list[PipelineStep]:
    """The standard DAG for one strategy and run config."""
    steps = [
        PipelineStep(
            id="filter-dimensions",
            name="Filter dimensions",
            phase=Phase.GENERATION,
            operation="filter_dimensions",
        )
    ]

    enrich_ids: list[str] = []
    if config.enrich:
        enabled = set(strategy.dimensions.enabled())
        for dimension in ENRICHABLE_DIMENSIONS:
            if dimension not in enabled:
                continue
            step_id = f"enrich-{dimension.value}"
            enrich_ids.append(step_id)
            steps.append(PipelineStep(
                id=step_id,
                name=f"Enrich {dimension.value}",
                phase=Phase.ENRICHMENT,
                operation="enrich_entities",
                input={"dimension": dimension.value},
                depends_on=["filter-dimensions"],
            ))

    steps.append(PipelineStep(
        id="generate-seeds",
        name="Generate seeds",
        phase=Phase.GENERATION,
        operation="generate_seeds",
        depends_on=["filter-dimensions"],
    ))
    steps.append(PipelineStep(
        id="synthesize-concepts",
        name="Synthesize concepts",
        phase=Phase.GENERATION,
        operation="synthesize_concepts",
        depends_on=["generate-seeds", *enrich_ids],
    ))
    steps.append(PipelineStep(
        id="score-concepts",
        name="Score concepts",
        phase=Phase.SCORING,
        operation="score_concepts",
        depends_on=["synthesize-concepts"],
    ))
    steps.append(PipelineStep(
        id="rank-concepts",
        name="Rank concepts",
        phase=Phase.SCORING,
        operation="rank_concepts",
        depends_on=["score-concepts"],
    ))
    if config.brand_top_n > 0:
        steps.append(PipelineStep(
            id="brand-concepts",
            name="Brand top concepts",
            phase=Phase.BRANDING,
            operation="brand_concepts",
            depends_on=["rank-concepts"],
        ))
    return steps


def prepare_workflow(strategy: StrategyConfig, config: RunConfig) -> WorkflowExecution:
    """Validate filters and build a pending execution.

    Raises:
        FilterError: If any enabled dimension's filter is malformed
    """
    for dimension in strategy.dimensions.enabled():
        validate_filter(strategy.dimensions.get(dimension).filter, label=dimension.value)
    return WorkflowExecution(
        strategy_id=strategy.id,
        steps=build_studio_steps(strategy, config),
    )


async def execute_workflow(
    strategy: StrategyConfig,
    config: RunConfig,
    catalog: DimensionCatalog,
    generator: ContentGenerator,
    cancel_event: Optional[asyncio.Event] = None,
    execution: Optional[WorkflowExecution] = None,
) -> WorkflowExecution:
    """Run the studio workflow for one strategy.

    Args:
        strategy: What to generate
        config: Per-run settings
        catalog: Taxonomy source, read-only
        generator: Content generator; every call is bounded by config.timeout
        cancel_event: Set to stop launching new steps
        execution: A pending execution from prepare_workflow, if already built

    Raises:
        FilterError: If a filter is malformed; raised before any step runs
    """
    if execution is None:
        execution = prepare_workflow(strategy, config)

    if config.timeout:
        generator = TimedContentGenerator(generator, config.timeout)

    logger.info(
        f"Starting workflow for strategy '{strategy.id}' (run {execution.id}, "
        f"concurrency={config.concurrency}, enrich={config.enrich}, "
        f"brand_top_n={config.brand_top_n})"
    )
    orchestrator = PipelineOrchestrator(
        get_studio_operations(),
        max_parallel_steps=config.max_parallel_steps,
        batch_concurrency=config.concurrency,
    )
    context = StudioContext(strategy, config, catalog, generator)
    return await orchestrator.run(execution, context, cancel_event=cancel_event)
