"""Content generator factory.

Resolves model IDs to the appropriate generator implementation.
"""

import logging
from typing import Optional

from startup_studio.llm.backends import AnthropicContentGenerator
from startup_studio.llm.generator import ContentGenerator, TimedContentGenerator

logger = logging.getLogger(__name__)


def get_generator(model_id: str, timeout: Optional[float] = None) -> ContentGenerator:
    """Get the generator for a model ID, optionally bounded by a per-call timeout.

    Args:
        model_id: Full model identifier (e.g. 'claude-sonnet-4-5-20250929')
        timeout: Seconds allowed per generation call; None for no bound

    Raises:
        ValueError: If model_id is not recognized
    """
    if model_id.startswith("claude-"):
        generator: ContentGenerator = AnthropicContentGenerator(model_id=model_id)
    else:
        raise ValueError(
            f"Unknown model: '{model_id}'. Expected a model ID starting with 'claude-'."
        )

    if timeout:
        logger.debug(f"Wrapping {model_id} generator with {timeout}s timeout")
        return TimedContentGenerator(generator, timeout)
    return generator
