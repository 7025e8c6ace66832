"""Request planner - turn a listing count into weighted per-listing generation specs."""

import math
import random
from typing import Optional, Sequence, TypeVar

from src.models.generation import GenerationRequest, PropertyType
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T")

# Rockridge housing stock mix
PROPERTY_TYPE_WEIGHTS: list[tuple[PropertyType, float]] = [
    (PropertyType.SINGLE_FAMILY, 0.7),
    (PropertyType.CONDO, 0.2),
    (PropertyType.TOWNHOUSE, 0.1),
]

BEDROOM_WEIGHTS: list[tuple[int, float]] = [
    (2, 0.2),
    (3, 0.4),
    (4, 0.3),
    (5, 0.1),
]

# (price range, sqft range) per property type
RANGES_BY_TYPE: dict[PropertyType, tuple[tuple[int, int], tuple[int, int]]] = {
    PropertyType.SINGLE_FAMILY: ((1_400_000, 2_500_000), (1800, 3500)),
    PropertyType.CONDO: ((800_000, 1_200_000), (900, 1800)),
    PropertyType.TOWNHOUSE: ((1_200_000, 1_800_000), (1400, 2400)),
}
DEFAULT_RANGES: tuple[tuple[int, int], tuple[int, int]] = ((1_000_000, 2_000_000), (1200, 2800))

YEAR_BUILT_RANGE: tuple[int, int] = (1920, 2020)

BATHS_PER_BEDROOM = (0.75, 1.25)


def weighted_random(options: Sequence[tuple[T, float]], rng: Optional[random.Random] = None) -> T:
    """
    Pick one value from ``(value, weight)`` pairs.

    A single uniform draw scaled to the total weight is walked down by
    cumulative subtraction. If float drift leaves nothing selected, the last
    option is returned.
    """
    if not options:
        raise ValueError("weighted_random needs at least one option")

    rng = rng or random
    total_weight = sum(weight for _, weight in options)
    remaining = rng.random() * total_weight

    for value, weight in options:
        remaining -= weight
        if remaining <= 0:
            return value

    return options[-1][0]


def round_to_half(value: float) -> float:
    """Round half-up to the nearest multiple of 0.5."""
    return math.floor(value * 2 + 0.5) / 2


def ranges_for(property_type: PropertyType) -> tuple[tuple[int, int], tuple[int, int]]:
    """Return ``(price_range, sqft_range)`` for a property type."""
    return RANGES_BY_TYPE.get(property_type, DEFAULT_RANGES)


def plan_request(rng: Optional[random.Random] = None) -> GenerationRequest:
    """Draw a single generation request."""
    rng = rng or random
    property_type = weighted_random(PROPERTY_TYPE_WEIGHTS, rng)
    bedrooms = weighted_random(BEDROOM_WEIGHTS, rng)
    bathrooms = round_to_half(bedrooms * rng.uniform(*BATHS_PER_BEDROOM))
    price_range, sqft_range = ranges_for(property_type)

    return GenerationRequest(
        property_type=property_type,
        price_range=price_range,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        sqft_range=sqft_range,
        year_built_range=YEAR_BUILT_RANGE,
    )


def plan_requests(n: int, rng: Optional[random.Random] = None) -> list[GenerationRequest]:
    """Plan ``n`` generation requests. Pass a seeded ``rng`` for reproducible runs."""
    if n < 0:
        raise ValueError(f"Cannot plan a negative number of requests: {n}")

    requests = [plan_request(rng) for _ in range(n)]

    logger.info(
        "Planned generation requests",
        requested=n,
        single_family=sum(1 for r in requests if r.property_type == PropertyType.SINGLE_FAMILY),
        condo=sum(1 for r in requests if r.property_type == PropertyType.CONDO),
        townhouse=sum(1 for r in requests if r.property_type == PropertyType.TOWNHOUSE),
    )
    return requests
