"""Tests for the request planner."""

import random
import pytest
from collections import Counter

from src.models.generation import PropertyType
from src.services.request_planner import (
    BEDROOM_WEIGHTS,
    PROPERTY_TYPE_WEIGHTS,
    RANGES_BY_TYPE,
    YEAR_BUILT_RANGE,
    plan_requests,
    round_to_half,
    weighted_random,
)


class StubRandom:
    """Always returns the same draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.unit
@pytest.mark.slow
@pytest.mark.parametrize("weights", [PROPERTY_TYPE_WEIGHTS, BEDROOM_WEIGHTS])
def test_weighted_draws_converge_to_weights(weights):
    """Test that draw frequencies match configured weights."""
    rng = random.Random(1234)
    draws = 20_000

    counts = Counter(weighted_random(weights, rng) for _ in range(draws))

    for value, weight in weights:
        assert counts[value] / draws == pytest.approx(weight, abs=0.02)


@pytest.mark.unit
def test_weighted_random_low_draw_picks_first():
    assert weighted_random([("a", 0.5), ("b", 0.5)], StubRandom(0.0)) == "a"


@pytest.mark.unit
def test_weighted_random_falls_back_to_last_item():
    """Test that float drift leaving a positive remainder returns the last option."""
    # 0.1 + 0.2 sums to slightly more than 0.3, so the walk never reaches zero
    options = [("a", 0.1), ("b", 0.2)]

    assert weighted_random(options, StubRandom(1.0)) == "b"


@pytest.mark.unit
def test_weighted_random_requires_options():
    with pytest.raises(ValueError):
        weighted_random([])


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    (2.2, 2.0),
    (2.25, 2.5),
    (1.75, 2.0),
    (3.74, 3.5),
    (6.25, 6.5),
])
def test_round_to_half(value, expected):
    assert round_to_half(value) == expected


@pytest.mark.unit
def test_bathrooms_are_positive_half_steps():
    """Test that every planned bathroom count is a positive multiple of 0.5."""
    requests = plan_requests(2000, random.Random(7))

    for request in requests:
        assert request.bathrooms > 0
        assert (request.bathrooms * 2) == int(request.bathrooms * 2)
        low, high = request.bedrooms * 0.75, request.bedrooms * 1.25
        assert low - 0.25 <= request.bathrooms <= high + 0.25


@pytest.mark.unit
def test_ranges_follow_property_type():
    """Test that price and sqft ranges come from the type table."""
    for request in plan_requests(300, random.Random(99)):
        price_range, sqft_range = RANGES_BY_TYPE[request.property_type]
        assert request.price_range == price_range
        assert request.sqft_range == sqft_range
        assert request.year_built_range == YEAR_BUILT_RANGE
        assert request.bedrooms in {2, 3, 4, 5}


@pytest.mark.unit
def test_condo_ranges():
    assert RANGES_BY_TYPE[PropertyType.CONDO] == ((800_000, 1_200_000), (900, 1800))


@pytest.mark.unit
def test_plan_requests_shape():
    assert plan_requests(0) == []
    assert len(plan_requests(17)) == 17

    with pytest.raises(ValueError):
        plan_requests(-1)


@pytest.mark.unit
def test_seeded_plans_are_reproducible():
    first = plan_requests(25, random.Random(2024))
    second = plan_requests(25, random.Random(2024))

    assert first == second
