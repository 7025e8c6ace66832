"""Export stored listings to JSON and check store integrity."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

from src.models.listing import GeneratedListing
from src.services import supabase_client as store
from src.services.listing_inserter import ListingInserter
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)


class ExportMetadata(BaseModel):
    export_date: str
    total_properties: int
    price_range: Optional[tuple[int, int]] = None
    property_types: list[str] = Field(default_factory=list)
    bedroom_range: Optional[tuple[int, int]] = None
    avg_price_per_sqft: Optional[int] = None
    zip_codes: list[str] = Field(default_factory=list)


class IntegrityReport(BaseModel):
    """Row counts per table plus root records missing a child row."""
    properties: int = 0
    listing_details: int = 0
    features: int = 0
    photos: int = 0
    missing_listing_details: int = 0
    missing_features: int = 0

    @property
    def is_consistent(self) -> bool:
        return self.missing_listing_details == 0 and self.missing_features == 0


def _unique_in_order(values: list) -> list:
    return list(dict.fromkeys(values))


def build_export_metadata(listings: list[GeneratedListing]) -> ExportMetadata:
    metadata = ExportMetadata(
        export_date=datetime.now(timezone.utc).isoformat(),
        total_properties=len(listings),
    )
    if not listings:
        return metadata

    prices = [listing.price for listing in listings]
    bedrooms = [listing.bedrooms for listing in listings]
    # Fall back to price / sqft when the model left it out
    per_sqft = [listing.price_per_sqft or listing.price / listing.sqft for listing in listings]

    metadata.price_range = (min(prices), max(prices))
    metadata.bedroom_range = (min(bedrooms), max(bedrooms))
    metadata.property_types = _unique_in_order([listing.property_type for listing in listings])
    metadata.avg_price_per_sqft = round(sum(per_sqft) / len(per_sqft))
    metadata.zip_codes = _unique_in_order([listing.zip_code for listing in listings])
    return metadata


class ListingExporter:
    """Reads stored aggregates back and writes them as one JSON document."""

    def __init__(self, inserter: Optional[ListingInserter] = None):
        self.inserter = inserter or ListingInserter()

    async def load_listings(self, limit: Optional[int] = None) -> list[GeneratedListing]:
        rows = await store.get_property_rows(limit=limit)
        return [await self.inserter.load_aggregate(row) for row in rows]

    async def export_listings(self, output_path: str, sample: Optional[int] = None) -> ExportMetadata:
        """Write ``{metadata, properties}`` to ``output_path``; ``sample`` limits the count."""
        with log_timing("export_listings", logger=logger, output_path=output_path, sample=sample):
            listings = await self.load_listings(limit=sample)
            metadata = build_export_metadata(listings)

            if not listings:
                logger.warning("No properties found in database", output_path=output_path)

            document = {
                "metadata": metadata.model_dump(mode="json"),
                "properties": [listing.model_dump(mode="json", by_alias=True) for listing in listings],
            }

            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)

        logger.info(
            "Export complete",
            output_path=str(path),
            total_properties=metadata.total_properties,
            price_range=metadata.price_range,
            property_types=metadata.property_types,
            bedroom_range=metadata.bedroom_range,
            zip_codes=metadata.zip_codes,
            file_size_bytes=path.stat().st_size,
        )
        return metadata

    async def check_store_integrity(self) -> IntegrityReport:
        """Count rows per table and root records without a detail or feature row."""
        property_ids = await store.get_property_ids(store.PROPERTIES_TABLE)
        detail_ids = await store.get_property_ids(store.LISTING_DETAILS_TABLE)
        feature_ids = await store.get_property_ids(store.FEATURES_TABLE)

        report = IntegrityReport(
            properties=await store.count_rows(store.PROPERTIES_TABLE),
            listing_details=await store.count_rows(store.LISTING_DETAILS_TABLE),
            features=await store.count_rows(store.FEATURES_TABLE),
            photos=await store.count_rows(store.PHOTOS_TABLE),
            missing_listing_details=len(property_ids - detail_ids),
            missing_features=len(property_ids - feature_ids),
        )

        if report.is_consistent:
            logger.info("Store integrity check passed", **report.model_dump())
        else:
            logger.warning("Store integrity check found incomplete records", **report.model_dump())
        return report
