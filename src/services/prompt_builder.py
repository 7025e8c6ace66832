"""Prompt builder for Rockridge listing generation."""

import json

from src.models.generation import GenerationRequest
from src.models.listing import DEFAULT_SCHOOL_DISTRICT


ROCKRIDGE_CONTEXT = {
    "neighborhood": "Rockridge",
    "city": "Oakland",
    "state": "CA",
    "zipCodes": ["94618", "94609"],
    "characteristics": [
        "Tree-lined streets with Craftsman and Tudor homes",
        "Close to Berkeley border",
        "College Avenue shopping district",
        "BART accessible (Rockridge station)",
        "Hills with bay views",
        "Family-friendly neighborhood",
        "Mix of single-family homes and condos",
        "Active community with local shops and restaurants",
    ],
    "nearbyAmenities": [
        "College Avenue shops and restaurants",
        "Rockridge BART station",
        "Claremont Avenue",
        "UC Berkeley campus",
        "Tilden Regional Park",
        "Dreyer's Grand Ice Cream factory",
        "Market Hall Foods",
        "Various cafes and boutiques",
    ],
    "schoolDistrict": DEFAULT_SCHOOL_DISTRICT,
    "typicalPriceRanges": {
        "condo": [800000, 1200000],
        "townhouse": [1200000, 1800000],
        "single_family": [1400000, 2500000],
    },
}

LISTING_SKELETON = """{
  "properties": [
    {
      "zpid": "string (8-digit unique ID)",
      "address": "string (realistic Rockridge street address)",
      "zipCode": "string (94618 or 94609)",
      "latitude": number (37.8 to 37.9),
      "longitude": number (-122.3 to -122.2),
      "bedrooms": integer,
      "bathrooms": number,
      "sqft": integer,
      "lotSizeSqft": integer,
      "yearBuilt": integer,
      "propertyType": "string",
      "stories": integer,
      "garageSpaces": integer,
      "parkingSpaces": integer,
      "price": integer,
      "pricePerSqft": number,
      "hoaFee": integer,
      "propertyTax": integer,
      "status": "For Sale",
      "listingType": "string",
      "listing": {
        "listDate": "2024-05-22T10:00:00Z",
        "daysOnMarket": integer,
        "description": "string (compelling 150-200 word property description)",
        "keyFeatures": ["list of 4-6 key selling points"],
        "agentName": "string",
        "agentPhone": "string",
        "agentEmail": "string",
        "brokerage": "string",
        "openHouseDates": ["2024-05-25T14:00:00Z", "2024-05-26T14:00:00Z"],
        "tourAvailable": true,
        "originalPrice": integer,
        "priceChanges": []
      },
      "features": {
        "flooringTypes": ["array of 2-3 flooring types"],
        "kitchenFeatures": ["array of 2-3 kitchen features"],
        "bathroomFeatures": ["array of 2-3 bathroom features"],
        "fireplace": boolean,
        "fireplaceCount": integer,
        "laundryFeatures": "string",
        "cooling": "string",
        "heating": "string",
        "yardFeatures": ["array of 2-3 yard features if applicable"],
        "pool": boolean,
        "spa": boolean,
        "garageType": "string",
        "securityFeatures": ["array if any, max 2"],
        "accessibilityFeatures": ["array if any, max 2"],
        "greenFeatures": ["array if any, max 2"],
        "schoolDistrict": "Oakland Unified School District",
        "walkabilityScore": integer (70-95 for Rockridge),
        "transitScore": integer (80-95 for Rockridge),
        "bikeScore": integer (60-85 for Rockridge)
      },
      "photos": [
        {
          "caption": "string (concise description of room/area)",
          "roomType": "string",
          "isPrimary": boolean,
          "sortOrder": integer
        }
      ]
    }
  ]
}"""


def build_system_prompt() -> str:
    """Build the system prompt carrying the static neighborhood context."""
    return f"""You are a real estate data specialist generating realistic property listings for the Rockridge neighborhood in Oakland, CA.

NEIGHBORHOOD CONTEXT:
{json.dumps(ROCKRIDGE_CONTEXT, indent=2)}

Your task is to generate realistic property data that accurately reflects:
1. Rockridge's architectural styles (primarily Craftsman, Tudor, some contemporary)
2. Actual market prices for the area
3. Realistic square footage and lot sizes for the neighborhood
4. Authentic street names and locations within Rockridge
5. Appropriate amenities and features for properties in this price range
6. Realistic agent names and brokerages that operate in the Bay Area

IMPORTANT GUIDELINES:
- Use REAL street names from Rockridge (College Ave, Claremont Ave, Keith Ave, etc.)
- Generate realistic but not real addresses
- Prices should reflect the current Rockridge market (very expensive)
- Include Bay Area-specific features (earthquake retrofitting, etc.)
- Use authentic local brokerage names (Compass, Coldwell Banker, etc.)
- Property descriptions should mention neighborhood-specific amenities
- All data should be internally consistent

OUTPUT FORMAT: Return valid JSON only, no additional text."""


def request_specs(requests: list[GenerationRequest]) -> list[dict]:
    """Per-item specs with 1-based ``property_id``."""
    return [
        {
            "property_id": i + 1,
            "property_type": request.property_type.value,
            "price_range": list(request.price_range),
            "bedrooms": request.bedrooms,
            "bathrooms": request.bathrooms,
            "sqft_range": list(request.sqft_range),
            "year_built_range": list(request.year_built_range),
        }
        for i, request in enumerate(requests)
    ]


def build_batch_prompt(requests: list[GenerationRequest]) -> str:
    """Build the user prompt for one slice of requests."""
    specs = json.dumps(request_specs(requests), indent=2)

    return f"""Generate {len(requests)} realistic property listings for Rockridge, Oakland, CA based on these specifications:

{specs}

For each property, generate this COMPLETE data structure. Keep descriptions concise but compelling:

{LISTING_SKELETON}

IMPORTANT: Return COMPLETE, valid JSON only. Ensure all brackets and braces are properly closed."""
