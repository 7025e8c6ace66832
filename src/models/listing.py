"""Generated listing models (the shape the LLM must return)."""

from typing import Any, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_SCHOOL_DISTRICT = "Oakland Unified School District"

# Placeholder zpid for records rejected before an id could be read
MISSING_ZPID = "<missing>"


class CamelModel(BaseModel):
    """Accepts the camelCase keys the LLM emits as well as snake_case names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingDetail(CamelModel):
    """Listing Detail: market-facing information for a record."""
    list_date: datetime = Field(..., description="Date the listing went on market")
    days_on_market: int = Field(0, ge=0, description="Days on market")
    description: Optional[str] = Field(None, description="Marketing description")
    key_features: list[str] = Field(default_factory=list, description="Key selling points")
    agent_name: Optional[str] = None
    agent_phone: Optional[str] = None
    agent_email: Optional[str] = None
    brokerage: Optional[str] = None
    open_house_dates: list[str] = Field(default_factory=list, description="ISO timestamps of open houses")
    tour_available: bool = True
    virtual_tour_url: Optional[str] = None
    original_price: Optional[int] = Field(None, description="Price at first listing; defaults to current price")
    price_changes: list[Any] = Field(default_factory=list, description="Price change history")


class ListingFeatures(CamelModel):
    """Feature Set: amenities and scores for a record."""
    flooring_types: list[str] = Field(default_factory=list)
    kitchen_features: list[str] = Field(default_factory=list)
    bathroom_features: list[str] = Field(default_factory=list)
    fireplace: bool = False
    fireplace_count: int = Field(0, ge=0)
    laundry_features: Optional[str] = None
    cooling: Optional[str] = None
    heating: Optional[str] = None
    yard_features: list[str] = Field(default_factory=list)
    pool: bool = False
    spa: bool = False
    garage_type: Optional[str] = None
    security_features: list[str] = Field(default_factory=list)
    accessibility_features: list[str] = Field(default_factory=list)
    green_features: list[str] = Field(default_factory=list)
    school_district: str = DEFAULT_SCHOOL_DISTRICT
    walkability_score: int = Field(80, ge=0, le=100)
    transit_score: int = Field(85, ge=0, le=100)
    bike_score: int = Field(70, ge=0, le=100)


class ListingPhoto(CamelModel):
    """Photo metadata. The image URL is filled by a separate enrichment step."""
    caption: Optional[str] = None
    room_type: Optional[str] = None
    is_primary: Optional[bool] = None
    sort_order: Optional[int] = None
    image_url: Optional[str] = None


class GeneratedListing(CamelModel):
    """Listing Record as produced by the LLM."""
    zpid: str = Field(..., min_length=1, description="Unique listing identifier")

    # Location
    address: str
    zip_code: str
    latitude: float
    longitude: float

    # Physical
    bedrooms: int
    bathrooms: float
    sqft: int
    lot_size_sqft: Optional[int] = None
    year_built: int
    property_type: str
    stories: Optional[int] = None
    garage_spaces: Optional[int] = None
    parking_spaces: Optional[int] = None

    # Financial
    price: int
    price_per_sqft: Optional[float] = None
    hoa_fee: int = 0
    property_tax: int = 0

    status: str = "For Sale"
    listing_type: str = "Resale"

    listing: Optional[ListingDetail] = None
    features: Optional[ListingFeatures] = None
    photos: list[ListingPhoto] = Field(default_factory=list)


class ListingBatchResponse(CamelModel):
    """Envelope of one completion: ``{"properties": [...]}``.

    Only the envelope is checked here. Each element is validated on its own
    so one malformed record does not sink its siblings.
    """
    properties: list[dict[str, Any]]
