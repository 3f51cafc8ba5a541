"""LLM-backed content generators.

Each backend handles provider-specific concerns:
- Client creation and timeout configuration
- Rendering a PromptContext into system prompt + user message
- Retrying transient transport failures with back-off
- Fence stripping and strict validation of the JSON reply

Schema mismatches are never retried: a reply that does not fit the result
shape raises GenerationFailed straight away.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from startup_studio.llm.client import GENERATION_MODEL, get_anthropic_client, parse_llm_json_response
from startup_studio.llm.generator import GenerationFailed, PromptContext, ShapeT, validate_result

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAYS = [2, 5, 15]  # seconds

SYSTEM_PROMPT = (
    "You generate structured data for a startup studio. "
    "Reply with a single JSON object that validates against the given JSON schema. "
    "Use JSON booleans and numbers, never strings, for boolean and numeric fields. "
    "Do not wrap the JSON in markdown and do not add commentary."
)


@dataclass
class GenerationCallStats:
    """Token and timing stats for the most recent call."""

    model_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0
    retries: int = 0


def render_user_message(context: PromptContext, result_shape: type[BaseModel]) -> str:
    """Render a prompt context as plain text sections.

    Only interpolates already-structured values; there is no templating.
    """
    parts: list[str] = [f"TASK: {context.task}"]
    if context.instructions:
        parts.append(context.instructions)

    if context.strategy:
        parts.append("")
        parts.append("STRATEGY:")
        for key, value in context.strategy.items():
            parts.append(f"- {key}: {value}")

    if context.entities:
        parts.append("")
        parts.append("TARGET:")
        for dimension, entity in context.entities.items():
            parts.append(f"- {dimension}: {entity.get('name', '')} ({entity.get('id', '')})")
            if entity.get("description"):
                parts.append(f"  {entity['description']}")

    if context.enrichments:
        parts.append("")
        parts.append("PRIOR RESEARCH:")
        for entity_id, summary in context.enrichments.items():
            parts.append(f"- {entity_id}: {summary}")

    if context.extra:
        parts.append("")
        parts.append("ADDITIONAL CONTEXT:")
        parts.append(json.dumps(context.extra, indent=2, default=str))

    parts.append("")
    parts.append(f"Return JSON matching this schema ({result_shape.__name__}):")
    parts.append(json.dumps(result_shape.model_json_schema(), indent=2))
    return "\n".join(parts)


class AnthropicContentGenerator:
    """Content generator backed by Anthropic Claude."""

    def __init__(
        self,
        model_id: str = GENERATION_MODEL,
        max_tokens: int = 4096,
        client=None,
    ):
        self._model_id = model_id
        self.max_tokens = max_tokens
        self._client = client
        self.last_call: Optional[GenerationCallStats] = None

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self):
        if self._client is None:
            self._client = get_anthropic_client()
            if self._client is None:
                raise GenerationFailed(
                    "LLM service unavailable. Set ANTHROPIC_API_KEY environment variable."
                )
        return self._client

    async def generate(self, context: PromptContext, result_shape: type[ShapeT]) -> ShapeT:
        """Generate one structured result.

        Raises:
            GenerationFailed: On exhausted retries, an empty reply, or a
                reply that does not validate against result_shape
        """
        import anthropic

        client = self._get_client()
        user_message = render_user_message(context, result_shape)
        label = f"{context.task}/{result_shape.__name__}"
        start_time = time.time()

        response = None
        retries = 0
        for attempt in range(MAX_RETRIES + 1):
            try:
                response = await client.messages.create(
                    model=self._model_id,
                    max_tokens=self.max_tokens,
                    system=SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": user_message}],
                )
                break
            except (
                anthropic.APIConnectionError,
                anthropic.RateLimitError,
                anthropic.InternalServerError,
            ) as e:
                if attempt == MAX_RETRIES:
                    raise GenerationFailed(
                        f"[{label}] {self._model_id} failed after {MAX_RETRIES} retries: {e}"
                    ) from e
                delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                retries += 1
                logger.warning(
                    f"[{label}] Attempt {attempt + 1} failed ({type(e).__name__}), "
                    f"retrying in {delay}s: {e}"
                )
                await asyncio.sleep(delay)
            except anthropic.APIError as e:
                raise GenerationFailed(f"[{label}] {self._model_id} error: {e}") from e

        raw_text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not raw_text.strip():
            raise GenerationFailed(f"[{label}] Empty response from {self._model_id}")

        self.last_call = GenerationCallStats(
            model_id=self._model_id,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            duration_ms=int((time.time() - start_time) * 1000),
            retries=retries,
        )
        logger.info(
            f"[{label}] Completed: {response.usage.input_tokens}+"
            f"{response.usage.output_tokens} tokens, {self.last_call.duration_ms}ms"
        )

        try:
            content = parse_llm_json_response(raw_text)
        except json.JSONDecodeError as e:
            raise GenerationFailed(f"[{label}] Reply is not JSON: {e}") from e
        return validate_result(content, result_shape)
