"""Generation orchestrator - chunked plan → generate → save raw → insert loop."""

import asyncio
import json
import random
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from src.models.generation import (
    GenerationProgress,
    GenerationRequest,
    OrchestratorState,
    RejectedListing,
    RunSummary,
)
from src.models.listing import GeneratedListing
from src.services.listing_generator import ListingGenerator, require_llm_credentials
from src.services.listing_inserter import ListingInserter
from src.services.request_planner import plan_requests
from src.utils.errors import SupabaseError
from src.utils.generation_config import GenerationConfig
from src.utils.logging import correlation_context, get_structured_logger

logger = get_structured_logger(__name__)


class GenerationOrchestrator:
    """
    Drives one generation run.

    Requests are planned up front and processed in fixed-size chunks,
    independent of the API batch size. Each chunk is generated, saved as raw
    JSON for debugging, then inserted. A chunk that raises is recorded by its
    1-based number and the run moves on.
    """

    def __init__(
        self,
        total_properties: int = 100,
        batch_size: int = 10,
        chunk_size: Optional[int] = None,
        chunk_delay_seconds: Optional[float] = None,
        raw_output_dir: Optional[str] = None,
        generator: Optional[ListingGenerator] = None,
        inserter: Optional[ListingInserter] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if total_properties < 0:
            raise ValueError(f"total_properties must not be negative, got {total_properties}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.total_properties = total_properties
        self.batch_size = batch_size
        self.chunk_size = chunk_size or GenerationConfig.GENERATION_CHUNK_SIZE
        self.chunk_delay_seconds = (
            GenerationConfig.GENERATION_CHUNK_DELAY_SECONDS
            if chunk_delay_seconds is None else chunk_delay_seconds
        )
        self.raw_output_dir = Path(raw_output_dir or GenerationConfig.RAW_OUTPUT_DIR)
        self.generator = generator or ListingGenerator(sleep=sleep)
        self.inserter = inserter or ListingInserter()
        self.rng = rng
        self._sleep = sleep

        self.state = OrchestratorState.IDLE
        self.state_history: list[OrchestratorState] = [OrchestratorState.IDLE]
        self.progress = GenerationProgress()

    def _transition(self, state: OrchestratorState) -> None:
        logger.debug("Orchestrator state change", from_state=self.state.value, to_state=state.value)
        self.state = state
        self.state_history.append(state)

    def save_raw_chunk(
        self,
        chunk_index: int,
        listings: list[GeneratedListing],
        rejected: Optional[list[RejectedListing]] = None,
    ) -> Optional[Path]:
        """Write ``chunk_{idx:03d}.json``; failures are logged, never raised.

        Rejected records are saved as the LLM returned them.
        """
        file_path = self.raw_output_dir / f"chunk_{chunk_index:03d}.json"
        try:
            self.raw_output_dir.mkdir(parents=True, exist_ok=True)
            payload = [listing.model_dump(mode="json", by_alias=True) for listing in listings]
            payload.extend(record.record for record in rejected or [])
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            logger.warning("Failed to save raw chunk", chunk_index=chunk_index, path=str(file_path), error=str(e))
            return None

        logger.debug("Saved raw chunk", chunk_index=chunk_index, path=str(file_path), listings=len(listings))
        return file_path

    async def process_chunk(self, chunk_index: int, requests: list[GenerationRequest]) -> None:
        chunk_number = chunk_index + 1
        logger.info(
            "Processing chunk",
            chunk_number=chunk_number,
            total_chunks=self.progress.total_chunks,
            chunk_requests=len(requests),
        )

        self._transition(OrchestratorState.GENERATING)
        slices = await self.generator.generate_slices(requests, self.batch_size)
        listings = [listing for result in slices for listing in result.listings]
        rejected = [record for result in slices for record in result.rejected]
        self.progress.failed_slices += sum(1 for result in slices if not result.ok)
        self.progress.total_generated += len(listings) + len(rejected)

        if not listings and not rejected:
            logger.warning("No listings generated for chunk", chunk_number=chunk_number)
            return

        self._transition(OrchestratorState.SAVING_RAW)
        self.save_raw_chunk(chunk_index, listings, rejected)

        self._transition(OrchestratorState.INSERTING)
        summary = await self.inserter.insert_many(listings, rejected=rejected)
        self.progress.total_inserted += summary.inserted
        self.progress.total_skipped += summary.skipped
        self.progress.total_insert_failures += summary.failed

        logger.info(
            "Chunk complete",
            chunk_number=chunk_number,
            generated=len(listings) + len(rejected),
            inserted=summary.inserted,
            total_inserted=self.progress.total_inserted,
            total_requested=self.progress.total_requested,
            rate_limit=self.generator.rate_limiter.status(),
        )

    def summarize(self, run_id: Optional[str]) -> RunSummary:
        progress = self.progress
        elapsed = (datetime.now() - progress.start_time).total_seconds()
        success_rate = (
            progress.total_inserted / progress.total_requested if progress.total_requested else 0.0
        )
        summary = RunSummary(
            run_id=run_id,
            total_requested=progress.total_requested,
            total_generated=progress.total_generated,
            total_inserted=progress.total_inserted,
            total_skipped=progress.total_skipped,
            total_insert_failures=progress.total_insert_failures,
            failed_slices=progress.failed_slices,
            failed_chunks=list(progress.failed_chunks),
            total_chunks=progress.total_chunks,
            elapsed_seconds=round(elapsed, 2),
            success_rate=round(success_rate, 4),
        )
        logger.info("Generation complete", **summary.model_dump())
        return summary

    async def run(self) -> RunSummary:
        """Run the whole pipeline and return its summary."""
        # Fails before any state transition when the key is missing
        require_llm_credentials()

        with correlation_context() as run_id:
            self.progress = GenerationProgress(total_requested=self.total_properties)

            logger.info(
                "Starting listing generation",
                total_properties=self.total_properties,
                batch_size=self.batch_size,
                chunk_size=self.chunk_size,
            )
            try:
                existing = await self.inserter.count_listings()
                logger.info("Existing listings in store", existing_listings=existing)
            except SupabaseError as e:
                logger.warning("Could not count existing listings", error=str(e))

            self._transition(OrchestratorState.PLANNING)
            requests = plan_requests(self.total_properties, self.rng)
            chunks = [requests[i:i + self.chunk_size] for i in range(0, len(requests), self.chunk_size)]
            self.progress.total_chunks = len(chunks)

            for chunk_index, chunk in enumerate(chunks):
                self.progress.current_chunk = chunk_index + 1
                try:
                    await self.process_chunk(chunk_index, chunk)
                except Exception:
                    logger.exception("Chunk failed", chunk_number=chunk_index + 1)
                    self.progress.failed_chunks.append(chunk_index + 1)

                if chunk_index < len(chunks) - 1:
                    await self._sleep(self.chunk_delay_seconds)

            self._transition(OrchestratorState.SUMMARIZING)
            summary = self.summarize(run_id)

            self._transition(OrchestratorState.DONE)
            return summary
