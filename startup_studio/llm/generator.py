"""Content generator protocol: the narrow seam to external LLM generation.

The core never talks to a provider directly. It builds a structured
PromptContext, names the pydantic model it expects back, and hands both to
a ContentGenerator. Whatever comes back is validated strictly against that
model: a string "true" for a boolean or "42" for an integer is a failure,
not something to coerce.
"""

import asyncio
import json
import logging
from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

ShapeT = TypeVar("ShapeT", bound=BaseModel)


class GenerationFailed(RuntimeError):
    """The generator errored, timed out, or returned a result of the wrong shape."""


class PromptContext(BaseModel):
    """Structured input for a single generation call.

    Only already-structured values go in here; rendering them into prompt
    text is the generator's job.
    """

    task: str = Field(..., description="What to generate, e.g. 'startup_concept'")
    instructions: str = Field(default="", description="Short task guidance")
    strategy: dict[str, str] = Field(
        default_factory=dict,
        description="Strategy id, name and thesis",
    )
    entities: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Dimension name -> {id, name, description}",
    )
    enrichments: dict[str, str] = Field(
        default_factory=dict,
        description="Prior enrichment summaries keyed by entity id",
    )
    extra: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class ContentGenerator(Protocol):
    """Anything that can fill a result shape from a prompt context."""

    async def generate(
        self,
        context: PromptContext,
        result_shape: type[ShapeT],
    ) -> ShapeT: ...


def validate_result(result: Any, result_shape: type[ShapeT]) -> ShapeT:
    """Check a generator result against the expected shape.

    Model instances of the right type pass through. Dicts and JSON strings
    are validated in strict JSON mode. Anything else is a failure.

    Raises:
        GenerationFailed: If the result does not match the shape
    """
    if isinstance(result, result_shape):
        return result
    try:
        if isinstance(result, dict):
            return result_shape.model_validate_json(json.dumps(result), strict=True)
        if isinstance(result, (str, bytes)):
            return result_shape.model_validate_json(result, strict=True)
    except ValidationError as e:
        raise GenerationFailed(
            f"Result does not match {result_shape.__name__}: {e.error_count()} error(s): {e}"
        ) from e
    raise GenerationFailed(
        f"Expected {result_shape.__name__}, got {type(result).__name__}"
    )


async def generate_validated(
    generator: ContentGenerator,
    context: PromptContext,
    result_shape: type[ShapeT],
) -> ShapeT:
    """Call the generator and validate what it returns.

    Every failure mode surfaces as GenerationFailed.
    """
    try:
        result = await generator.generate(context, result_shape)
    except GenerationFailed:
        raise
    except Exception as e:
        raise GenerationFailed(f"{context.task}: generator error: {e}") from e
    return validate_result(result, result_shape)


class TimedContentGenerator:
    """Wraps a generator so every call is bounded by a timeout.

    A timeout is reported as GenerationFailed, like any other failure.
    """

    def __init__(self, inner: ContentGenerator, timeout: Optional[float]):
        self.inner = inner
        self.timeout = timeout

    async def generate(self, context: PromptContext, result_shape: type[ShapeT]) -> ShapeT:
        if not self.timeout:
            return await self.inner.generate(context, result_shape)
        try:
            return await asyncio.wait_for(
                self.inner.generate(context, result_shape),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"{context.task}: generation timed out after {self.timeout}s")
            raise GenerationFailed(
                f"{context.task}: timed out after {self.timeout}s"
            ) from e
