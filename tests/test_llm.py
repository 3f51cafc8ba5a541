import asyncio
import json

import pytest
from pydantic import BaseModel

from startup_studio.llm.backends import render_user_message
from startup_studio.llm.client import parse_llm_json_response
from startup_studio.llm.factory import get_generator
from startup_studio.llm.generator import (
    GenerationFailed,
    PromptContext,
    TimedContentGenerator,
    generate_validated,
    validate_result,
)


class Flags(BaseModel):
    free_tier: bool
    seats: int


def test_strict_validation_rejects_string_booleans():
    with pytest.raises(GenerationFailed):
        validate_result({"free_tier": "true", "seats": 3}, Flags)


def test_strict_validation_rejects_numeric_strings():
    with pytest.raises(GenerationFailed):
        validate_result('{"free_tier": true, "seats": "42"}', Flags)


def test_valid_json_and_dicts_pass():
    assert validate_result('{"free_tier": true, "seats": 42}', Flags).seats == 42
    assert validate_result({"free_tier": False, "seats": 1}, Flags).free_tier is False
    instance = Flags(free_tier=True, seats=2)
    assert validate_result(instance, Flags) is instance


def test_other_types_fail():
    with pytest.raises(GenerationFailed):
        validate_result(["not", "a", "dict"], Flags)


def test_fence_stripping():
    raw = '```json\n{"free_tier": true, "seats": 1}\n```'
    assert json.loads(parse_llm_json_response(raw)) == {"free_tier": True, "seats": 1}
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json_response("no json here")


class SlowGenerator:
    async def generate(self, context, result_shape):
        await asyncio.sleep(1)
        return {"free_tier": True, "seats": 1}


class BrokenGenerator:
    async def generate(self, context, result_shape):
        raise KeyError("boom")


def test_timeout_becomes_generation_failed():
    generator = TimedContentGenerator(SlowGenerator(), timeout=0.01)
    with pytest.raises(GenerationFailed, match="timed out"):
        asyncio.run(generate_validated(generator, PromptContext(task="t"), Flags))


def test_generator_errors_become_generation_failed():
    with pytest.raises(GenerationFailed, match="boom"):
        asyncio.run(generate_validated(BrokenGenerator(), PromptContext(task="t"), Flags))


def test_render_user_message_interpolates_context():
    context = PromptContext(
        task="startup_concept",
        strategy={"thesis": "Agents everywhere"},
        entities={"industries": {"id": "HealthCare", "name": "Health Care"}},
        enrichments={"HealthCare": "Big market"},
    )
    message = render_user_message(context, Flags)
    assert "TASK: startup_concept" in message
    assert "- thesis: Agents everywhere" in message
    assert "- industries: Health Care (HealthCare)" in message
    assert "- HealthCare: Big market" in message
    assert '"free_tier"' in message


def test_factory_accepts_claude_models_only():
    generator = get_generator("claude-sonnet-4-5-20250929", timeout=30)
    assert isinstance(generator, TimedContentGenerator)
    assert generator.timeout == 30
    with pytest.raises(ValueError):
        get_generator("gpt-4o")
