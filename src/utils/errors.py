"""Error handling utilities."""


class ListingGeneratorError(Exception):
    """Base exception for the listing generator."""
    pass


class ConfigurationError(ListingGeneratorError):
    """Missing credential or invalid setting, raised before any work starts."""
    pass


class GenerationError(ListingGeneratorError):
    """LLM call, parse or schema failure for a single slice."""
    pass


class ListingValidationError(ListingGeneratorError):
    """Generated listing failed a range or presence check."""

    def __init__(self, zpid: str, reason: str):
        self.zpid = zpid
        self.reason = reason
        super().__init__(f"Listing {zpid} rejected: {reason}")


class SupabaseError(ListingGeneratorError):
    """Supabase operation error."""
    pass


class DuplicateListingError(SupabaseError):
    """A listing with the same zpid is already stored."""
    pass
