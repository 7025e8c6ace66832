"""Models describing generation requests, per-unit results and run summaries."""

from enum import Enum
from typing import Any, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from src.models.listing import GeneratedListing


class PropertyType(str, Enum):
    """Property types the planner draws from."""
    SINGLE_FAMILY = "single_family"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"


class GenerationRequest(BaseModel):
    """One planned listing, sent to the LLM as a per-item spec."""
    property_type: PropertyType
    price_range: tuple[int, int]
    bedrooms: int = Field(..., gt=0)
    bathrooms: float = Field(..., gt=0)
    sqft_range: tuple[int, int]
    year_built_range: tuple[int, int]


class ParseErrorKind(str, Enum):
    """Why a completion could not be turned into listings."""
    EMPTY = "empty"
    JSON = "json"
    SCHEMA = "schema"


class RejectedListing(BaseModel):
    """A generated record that failed schema validation on its own."""
    zpid: str
    reason: str
    record: Any = Field(None, description="Raw record as returned by the LLM")


class ParseResult(BaseModel):
    """Tagged success/failure of parsing one completion."""
    ok: bool
    listings: list[GeneratedListing] = Field(default_factory=list)
    rejected: list[RejectedListing] = Field(default_factory=list)
    error_kind: Optional[ParseErrorKind] = None
    error: Optional[str] = None


class SliceResult(BaseModel):
    """Outcome of one API call covering ``requested`` planned listings."""
    index: int = Field(..., description="0-based slice index within the batch")
    requested: int
    ok: bool
    listings: list[GeneratedListing] = Field(default_factory=list)
    rejected: list[RejectedListing] = Field(default_factory=list)
    error: Optional[str] = None


class InsertStatus(str, Enum):
    """Per-record insertion result."""
    INSERTED = "inserted"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class InsertOutcome(BaseModel):
    zpid: str
    status: InsertStatus
    property_id: Optional[str] = None
    reason: Optional[str] = None


class InsertSummary(BaseModel):
    """Aggregated outcomes of one ``insert_many`` call."""
    outcomes: list[InsertOutcome] = Field(default_factory=list)

    def count(self, status: InsertStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def inserted(self) -> int:
        return self.count(InsertStatus.INSERTED)

    @property
    def skipped(self) -> int:
        """Records not written because they were invalid or already stored."""
        return self.count(InsertStatus.INVALID) + self.count(InsertStatus.DUPLICATE)

    @property
    def failed(self) -> int:
        return self.count(InsertStatus.FAILED)


class OrchestratorState(str, Enum):
    """Orchestrator lifecycle states."""
    IDLE = "idle"
    PLANNING = "planning"
    GENERATING = "generating"
    SAVING_RAW = "saving_raw"
    INSERTING = "inserting"
    SUMMARIZING = "summarizing"
    DONE = "done"


class GenerationProgress(BaseModel):
    """Run-scoped counters owned by one orchestrator."""
    total_requested: int = 0
    total_generated: int = 0
    total_inserted: int = 0
    total_skipped: int = 0
    total_insert_failures: int = 0
    failed_slices: int = 0
    current_chunk: int = 0
    total_chunks: int = 0
    failed_chunks: list[int] = Field(default_factory=list, description="1-based chunk numbers")
    start_time: datetime = Field(default_factory=datetime.now)


class RunSummary(BaseModel):
    """Final report of a generation run."""
    run_id: Optional[str] = None
    total_requested: int
    total_generated: int
    total_inserted: int
    total_skipped: int
    total_insert_failures: int
    failed_slices: int
    failed_chunks: list[int]
    total_chunks: int
    elapsed_seconds: float
    success_rate: float = Field(..., description="inserted / requested, 0.0 when nothing was requested")


class ValidationResults(BaseModel):
    """Report on stored data, used by validate-only mode."""
    total_properties: int = 0
    sample_size: int = 0
    price_range: Optional[tuple[int, int]] = None
    property_types: list[str] = Field(default_factory=list)
    bedroom_range: Optional[tuple[int, int]] = None
    is_valid: bool = False
    errors: list[str] = Field(default_factory=list)
