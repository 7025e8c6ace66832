"""Tests for prompt construction."""

import json
import pytest

from src.models.generation import PropertyType
from src.services.prompt_builder import (
    ROCKRIDGE_CONTEXT,
    build_batch_prompt,
    build_system_prompt,
    request_specs,
)
from tests.utils.factories import create_generation_request


@pytest.mark.unit
def test_system_prompt_embeds_neighborhood_context():
    prompt = build_system_prompt()

    assert "Rockridge" in prompt
    assert json.dumps(ROCKRIDGE_CONTEXT, indent=2) in prompt
    assert "Oakland Unified School District" in prompt
    assert "Return valid JSON only" in prompt


@pytest.mark.unit
def test_request_specs_are_one_based():
    requests = [
        create_generation_request(PropertyType.CONDO, bedrooms=2),
        create_generation_request(PropertyType.TOWNHOUSE, bedrooms=4),
    ]

    specs = request_specs(requests)

    assert [spec["property_id"] for spec in specs] == [1, 2]
    assert specs[0]["property_type"] == "condo"
    assert specs[1]["bedrooms"] == 4
    assert specs[0]["price_range"] == [1_400_000, 2_500_000]


@pytest.mark.unit
def test_batch_prompt_carries_specs_and_skeleton():
    requests = [create_generation_request() for _ in range(3)]

    prompt = build_batch_prompt(requests)

    assert prompt.startswith("Generate 3 realistic property listings")
    assert prompt.count('"property_id":') == 3
    assert '"zipCode"' in prompt
    assert '"photos"' in prompt
    assert "valid JSON only" in prompt


@pytest.mark.unit
def test_prompts_are_deterministic():
    requests = [create_generation_request()]

    assert build_batch_prompt(requests) == build_batch_prompt(requests)
    assert build_system_prompt() == build_system_prompt()
