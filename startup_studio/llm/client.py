"""Shared Anthropic client utilities.

Used by the Anthropic content generator.
"""

import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

# Default model
GENERATION_MODEL = os.environ.get("STUDIO_MODEL", "claude-sonnet-4-5-20250929")


def get_anthropic_client(timeout: Optional[float] = None):
    """Get an async Anthropic client if an API key is available.

    Returns None if ANTHROPIC_API_KEY is not set.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        return None

    import httpx
    from anthropic import AsyncAnthropic

    read_timeout = timeout or 300.0
    return AsyncAnthropic(
        api_key=api_key,
        timeout=httpx.Timeout(
            connect=30.0,
            read=read_timeout,
            write=60.0,
            pool=30.0,
        ),
        # Retries are handled by the generator so they can be logged per call
        max_retries=0,
    )


def parse_llm_json_response(raw_text: str) -> str:
    """Strip markdown code fences from an LLM JSON response.

    LLMs sometimes wrap JSON in ```json ... ``` fences despite being
    told not to. The returned text is left for the caller to validate.

    Raises:
        json.JSONDecodeError: If the stripped text is not JSON at all
    """
    content = raw_text.strip()

    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]

    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]

    content = content.strip()
    json.loads(content)
    return content
