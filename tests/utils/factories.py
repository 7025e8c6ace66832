"""Test data factories using Faker."""

from faker import Faker
from typing import Optional

from src.models.generation import GenerationRequest, PropertyType
from src.models.listing import GeneratedListing

fake = Faker()

ROCKRIDGE_STREETS = [
    "College Ave", "Claremont Ave", "Keith Ave", "Manila Ave", "Lawton Ave",
    "Ocean View Dr", "Chabot Rd", "Broadway Terrace", "Hudson St", "Bryant Ave",
]

PROPERTY_TYPES = ["single_family", "condo", "townhouse"]


def create_zpid() -> str:
    """Create a unique 8-digit zpid."""
    return str(fake.unique.random_int(min=10_000_000, max=99_999_999))


def create_photo_data(sort_order: int) -> dict:
    return {
        "caption": fake.sentence(nb_words=5),
        "roomType": fake.random_element(["exterior", "living_room", "kitchen", "bedroom", "bathroom", "yard"]),
        "isPrimary": sort_order == 0,
        "sortOrder": sort_order,
    }


def create_listing_payload(zpid: Optional[str] = None, photo_count: int = 3, **overrides) -> dict:
    """Create a camelCase listing payload shaped like an LLM response item."""
    bedrooms = fake.random_int(min=2, max=5)
    sqft = fake.random_int(min=900, max=3500)
    price = fake.random_int(min=800_000, max=2_500_000)

    payload = {
        "zpid": zpid or create_zpid(),
        "address": f"{fake.building_number()} {fake.random_element(ROCKRIDGE_STREETS)}",
        "zipCode": fake.random_element(["94618", "94609"]),
        "latitude": round(fake.random.uniform(37.81, 37.89), 6),
        "longitude": round(fake.random.uniform(-122.29, -122.21), 6),
        "bedrooms": bedrooms,
        "bathrooms": float(fake.random_element([1.5, 2.0, 2.5, 3.0, 3.5])),
        "sqft": sqft,
        "lotSizeSqft": fake.random_int(min=2000, max=8000),
        "yearBuilt": fake.random_int(min=1920, max=2020),
        "propertyType": fake.random_element(PROPERTY_TYPES),
        "stories": fake.random_int(min=1, max=3),
        "garageSpaces": fake.random_int(min=0, max=2),
        "parkingSpaces": fake.random_int(min=1, max=3),
        "price": price,
        "pricePerSqft": round(price / sqft, 2),
        "hoaFee": 0,
        "propertyTax": round(price * 0.012),
        "status": "For Sale",
        "listingType": "Resale",
        "listing": {
            "listDate": "2024-05-22T10:00:00Z",
            "daysOnMarket": fake.random_int(min=0, max=60),
            "description": fake.paragraph(nb_sentences=4),
            "keyFeatures": [fake.sentence(nb_words=4) for _ in range(4)],
            "agentName": fake.name(),
            "agentPhone": fake.phone_number(),
            "agentEmail": fake.email(),
            "brokerage": fake.random_element(["Compass", "Coldwell Banker", "Red Oak Realty"]),
            "openHouseDates": ["2024-05-25T14:00:00Z", "2024-05-26T14:00:00Z"],
            "tourAvailable": True,
            "originalPrice": price,
            "priceChanges": [],
        },
        "features": {
            "flooringTypes": ["hardwood", "tile"],
            "kitchenFeatures": ["quartz counters", "gas range"],
            "bathroomFeatures": ["soaking tub"],
            "fireplace": True,
            "fireplaceCount": 1,
            "laundryFeatures": "In-unit",
            "cooling": "None",
            "heating": "Forced air",
            "yardFeatures": ["garden"],
            "pool": False,
            "spa": False,
            "garageType": "Detached",
            "securityFeatures": [],
            "accessibilityFeatures": [],
            "greenFeatures": ["solar panels"],
            "schoolDistrict": "Oakland Unified School District",
            "walkabilityScore": fake.random_int(min=70, max=95),
            "transitScore": fake.random_int(min=80, max=95),
            "bikeScore": fake.random_int(min=60, max=85),
        },
        "photos": [create_photo_data(i) for i in range(photo_count)],
    }
    payload.update(overrides)
    return payload


def create_listing(zpid: Optional[str] = None, **overrides) -> GeneratedListing:
    """Create a validated GeneratedListing."""
    return GeneratedListing.model_validate(create_listing_payload(zpid=zpid, **overrides))


def create_generation_request(property_type: PropertyType = PropertyType.SINGLE_FAMILY, bedrooms: int = 3) -> GenerationRequest:
    return GenerationRequest(
        property_type=property_type,
        price_range=(1_400_000, 2_500_000),
        bedrooms=bedrooms,
        bathrooms=2.5,
        sqft_range=(1800, 3500),
        year_built_range=(1920, 2020),
    )
