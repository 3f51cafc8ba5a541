"""Content generation seam.

The core depends only on the ContentGenerator protocol; the Anthropic
backend is one implementation of it.
"""

from startup_studio.llm.generator import (
    ContentGenerator,
    GenerationFailed,
    PromptContext,
    TimedContentGenerator,
    generate_validated,
    validate_result,
)
from startup_studio.llm.backends import AnthropicContentGenerator
from startup_studio.llm.factory import get_generator

__all__ = [
    "ContentGenerator",
    "GenerationFailed",
    "PromptContext",
    "TimedContentGenerator",
    "generate_validated",
    "validate_result",
    "AnthropicContentGenerator",
    "get_generator",
]
