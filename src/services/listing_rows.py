"""Mapping between GeneratedListing and the four table rows that store it."""

import json
from typing import Any, Optional

from src.models.listing import GeneratedListing, ListingDetail, ListingFeatures, ListingPhoto

# Columns holding JSON-encoded text
LISTING_JSON_COLUMNS = ("key_features", "open_house_dates", "price_changes")
FEATURE_JSON_COLUMNS = (
    "flooring_types",
    "kitchen_features",
    "bathroom_features",
    "yard_features",
    "security_features",
    "accessibility_features",
    "green_features",
)

PROPERTY_COLUMNS = (
    "zpid", "address", "zip_code", "latitude", "longitude",
    "bedrooms", "bathrooms", "sqft", "lot_size_sqft", "year_built",
    "property_type", "stories", "garage_spaces", "parking_spaces",
    "price", "price_per_sqft", "hoa_fee", "property_tax", "status", "listing_type",
)


def _encode(values: Optional[list]) -> str:
    return json.dumps(values or [])


def _decode(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return json.loads(value)


def property_row(listing: GeneratedListing, property_id: str) -> dict:
    row = {column: getattr(listing, column) for column in PROPERTY_COLUMNS}
    row["id"] = property_id
    return row


def listing_detail_row(listing: GeneratedListing, property_id: str) -> Optional[dict]:
    detail = listing.listing
    if detail is None:
        return None

    return {
        "property_id": property_id,
        "list_date": detail.list_date.isoformat(),
        "days_on_market": detail.days_on_market or 0,
        "description": detail.description,
        "key_features": _encode(detail.key_features),
        "agent_name": detail.agent_name,
        "agent_phone": detail.agent_phone,
        "agent_email": detail.agent_email,
        "brokerage": detail.brokerage,
        "open_house_dates": _encode(detail.open_house_dates),
        "tour_available": detail.tour_available,
        "virtual_tour_url": detail.virtual_tour_url,
        # Unset or zero falls back to the current price
        "original_price": detail.original_price or listing.price,
        "price_changes": _encode(detail.price_changes),
    }


def features_row(listing: GeneratedListing, property_id: str) -> Optional[dict]:
    features = listing.features
    if features is None:
        return None

    row = features.model_dump(exclude=set(FEATURE_JSON_COLUMNS))
    row.update({column: _encode(getattr(features, column)) for column in FEATURE_JSON_COLUMNS})
    row["property_id"] = property_id
    return row


def photo_rows(listing: GeneratedListing, property_id: str) -> list[dict]:
    """Photo rows; URL stays empty, order and primary flag default to position."""
    return [
        {
            "property_id": property_id,
            "caption": photo.caption,
            "room_type": photo.room_type,
            "is_primary": photo.is_primary if photo.is_primary is not None else i == 0,
            "sort_order": photo.sort_order if photo.sort_order is not None else i,
            "image_url": None,
        }
        for i, photo in enumerate(listing.photos)
    ]


def to_aggregate_rows(listing: GeneratedListing, property_id: str) -> dict:
    """Build the payload for the atomic aggregate insert."""
    return {
        "property": property_row(listing, property_id),
        "listing": listing_detail_row(listing, property_id),
        "features": features_row(listing, property_id),
        "photos": photo_rows(listing, property_id),
    }


def from_aggregate_rows(
    property_data: dict,
    listing_data: Optional[dict] = None,
    features_data: Optional[dict] = None,
    photos_data: Optional[list[dict]] = None,
) -> GeneratedListing:
    """Rebuild a GeneratedListing from stored rows, decoding JSON text columns."""
    values = {column: property_data.get(column) for column in PROPERTY_COLUMNS}
    # Optional root columns come back as NULL
    values = {key: value for key, value in values.items() if value is not None}

    if listing_data:
        detail = {k: v for k, v in listing_data.items() if k in ListingDetail.model_fields and v is not None}
        for column in LISTING_JSON_COLUMNS:
            detail[column] = _decode(listing_data.get(column))
        values["listing"] = ListingDetail(**detail)

    if features_data:
        features = {k: v for k, v in features_data.items() if k in ListingFeatures.model_fields and v is not None}
        for column in FEATURE_JSON_COLUMNS:
            features[column] = _decode(features_data.get(column))
        values["features"] = ListingFeatures(**features)

    photos = sorted(photos_data or [], key=lambda row: (row.get("sort_order") or 0, row.get("id") or 0))
    values["photos"] = [
        ListingPhoto(**{k: v for k, v in row.items() if k in ListingPhoto.model_fields})
        for row in photos
    ]

    return GeneratedListing(**values)
