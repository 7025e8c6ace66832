"""Listing inserter - range-check generated listings and store them atomically."""

from datetime import datetime
from typing import Optional
from ulid import ULID

from src.models.generation import (
    InsertOutcome,
    InsertStatus,
    InsertSummary,
    RejectedListing,
    ValidationResults,
)
from src.models.listing import MISSING_ZPID, GeneratedListing
from src.services import supabase_client as store
from src.services.listing_rows import from_aggregate_rows, to_aggregate_rows
from src.utils.errors import DuplicateListingError, ListingValidationError, SupabaseError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

# Rockridge bounding box, inclusive
MIN_LATITUDE = 37.8
MAX_LATITUDE = 37.9
MIN_LONGITUDE = -122.3
MAX_LONGITUDE = -122.2

MIN_YEAR_BUILT = 1800

VALIDATION_SAMPLE_SIZE = 20

REQUIRED_FIELDS = (
    "zpid", "address", "zip_code", "latitude", "longitude", "bedrooms",
    "bathrooms", "sqft", "year_built", "property_type", "price",
)


def generate_property_id() -> str:
    """Generate a text-based property ID."""
    return str(ULID())


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def check_listing(listing: GeneratedListing) -> None:
    """Raise ListingValidationError if the listing is out of range."""
    zpid = listing.zpid or MISSING_ZPID

    for field in REQUIRED_FIELDS:
        value = getattr(listing, field, None)
        if value is None or value == "":
            raise ListingValidationError(zpid, f"missing required field {field}")

    for field in ("bedrooms", "sqft", "price"):
        if not _is_positive_int(getattr(listing, field)):
            raise ListingValidationError(zpid, f"{field} must be a positive integer")

    if listing.bathrooms <= 0:
        raise ListingValidationError(zpid, "bathrooms must be positive")

    current_year = datetime.now().year
    if not MIN_YEAR_BUILT <= listing.year_built <= current_year:
        raise ListingValidationError(zpid, f"year_built {listing.year_built} outside [{MIN_YEAR_BUILT}, {current_year}]")

    if not MIN_LATITUDE <= listing.latitude <= MAX_LATITUDE:
        raise ListingValidationError(zpid, f"latitude {listing.latitude} outside Rockridge")

    if not MIN_LONGITUDE <= listing.longitude <= MAX_LONGITUDE:
        raise ListingValidationError(zpid, f"longitude {listing.longitude} outside Rockridge")


def validate_listing(listing: GeneratedListing) -> tuple[bool, Optional[str]]:
    """Return ``(is_valid, reason)``."""
    try:
        check_listing(listing)
    except ListingValidationError as e:
        return False, e.reason
    return True, None


class ListingInserter:
    """Validates, de-duplicates and stores generated listings."""

    async def listing_exists(self, zpid: str) -> bool:
        return await store.listing_exists(zpid)

    async def insert_one(self, listing: GeneratedListing) -> InsertOutcome:
        """Insert one listing; every failure is reported as an outcome."""
        is_valid, reason = validate_listing(listing)
        if not is_valid:
            logger.warning("Skipping invalid listing", zpid=listing.zpid, reason=reason)
            return InsertOutcome(zpid=listing.zpid, status=InsertStatus.INVALID, reason=reason)

        try:
            if await self.listing_exists(listing.zpid):
                logger.info("Listing already exists, skipping", zpid=listing.zpid)
                return InsertOutcome(zpid=listing.zpid, status=InsertStatus.DUPLICATE, reason="zpid already stored")

            property_id = generate_property_id()
            await store.insert_listing_aggregate(to_aggregate_rows(listing, property_id))
        except DuplicateListingError as e:
            # Lost a race with another writer between the check and the insert
            logger.info("Listing already exists, skipping", zpid=listing.zpid, error=str(e))
            return InsertOutcome(zpid=listing.zpid, status=InsertStatus.DUPLICATE, reason=str(e))
        except SupabaseError as e:
            logger.error("Failed to insert listing", zpid=listing.zpid, error=str(e))
            return InsertOutcome(zpid=listing.zpid, status=InsertStatus.FAILED, reason=str(e))

        logger.debug("Inserted listing", zpid=listing.zpid, property_id=property_id, photos=len(listing.photos))
        return InsertOutcome(zpid=listing.zpid, status=InsertStatus.INSERTED, property_id=property_id)

    def reject(self, rejected: RejectedListing) -> InsertOutcome:
        """Record a listing that never passed schema validation as invalid."""
        logger.warning("Skipping invalid listing", zpid=rejected.zpid, reason=rejected.reason)
        return InsertOutcome(zpid=rejected.zpid, status=InsertStatus.INVALID, reason=rejected.reason)

    async def insert_many(
        self,
        listings: list[GeneratedListing],
        rejected: Optional[list[RejectedListing]] = None,
    ) -> InsertSummary:
        """Insert listings in order and collect per-record outcomes.

        ``rejected`` records failed schema validation upstream; they are
        counted as invalid alongside the range-check failures.
        """
        rejected = rejected or []
        summary = InsertSummary(outcomes=[self.reject(record) for record in rejected])

        with log_timing("insert_listings", logger=logger, listings=len(listings)):
            for listing in listings:
                summary.outcomes.append(await self.insert_one(listing))

        logger.info(
            "Insert batch complete",
            listings=len(listings) + len(rejected),
            inserted=summary.inserted,
            skipped=summary.skipped,
            insert_failures=summary.failed,
        )
        return summary

    async def insert_listings(self, listings: list[GeneratedListing]) -> int:
        """Insert listings and return how many were stored."""
        summary = await self.insert_many(listings)
        return summary.inserted

    async def count_listings(self) -> int:
        return await store.count_rows(store.PROPERTIES_TABLE)

    async def get_sample_listings(self, limit: int = 5) -> list[dict]:
        """Raw property rows for a quick look at stored data."""
        return await store.get_property_rows(limit=limit)

    async def get_listing(self, zpid: str) -> Optional[GeneratedListing]:
        """Read a stored aggregate back as a GeneratedListing."""
        property_data = await store.get_property_row(zpid)
        if property_data is None:
            return None
        return await self.load_aggregate(property_data)

    async def load_aggregate(self, property_data: dict) -> GeneratedListing:
        property_id = property_data["id"]
        listing_rows = await store.get_child_rows(store.LISTING_DETAILS_TABLE, property_id)
        feature_rows = await store.get_child_rows(store.FEATURES_TABLE, property_id)
        photo_rows = await store.get_child_rows(store.PHOTOS_TABLE, property_id)

        return from_aggregate_rows(
            property_data,
            listing_rows[0] if listing_rows else None,
            feature_rows[0] if feature_rows else None,
            photo_rows,
        )

    async def validate_generation(self) -> ValidationResults:
        """Summarize stored data: totals plus ranges over a sample.

        Store failures propagate as SupabaseError after being logged.
        """
        results = ValidationResults()

        try:
            results.total_properties = await self.count_listings()
            if results.total_properties > 0:
                sample = await store.get_property_rows(limit=VALIDATION_SAMPLE_SIZE)
            else:
                sample = []
        except SupabaseError as e:
            logger.error("Validation failed", error=str(e))
            raise

        if not sample:
            results.errors.append("No properties found in database")
            logger.warning("Validation results", total_properties=results.total_properties, errors=results.errors)
            return results

        results.sample_size = len(sample)
        prices = [row["price"] for row in sample]
        bedrooms = [row["bedrooms"] for row in sample]
        results.price_range = (min(prices), max(prices))
        results.bedroom_range = (min(bedrooms), max(bedrooms))
        results.property_types = sorted({row["property_type"] for row in sample})
        results.is_valid = True

        logger.info(
            "Validation results",
            total_properties=results.total_properties,
            sample_size=results.sample_size,
            price_range=results.price_range,
            bedroom_range=results.bedroom_range,
            property_types=results.property_types,
            is_valid=results.is_valid,
        )
        return results
