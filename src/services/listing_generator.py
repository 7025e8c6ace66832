"""Batch listing generator using LangChain chat models."""

import asyncio
import json
import os
import re
import time
from typing import Awaitable, Callable, Optional
from pydantic import ValidationError
from pydantic.alias_generators import to_snake
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from src.models.generation import GenerationRequest, ParseErrorKind, ParseResult, RejectedListing, SliceResult
from src.models.listing import MISSING_ZPID, GeneratedListing, ListingBatchResponse
from src.services.prompt_builder import build_batch_prompt, build_system_prompt
from src.services.rate_limiter import RateLimiter
from src.utils.errors import ConfigurationError, GenerationError, ListingValidationError
from src.utils.generation_config import GenerationConfig
from src.utils.logging import get_structured_logger, truncate_for_log

logger = get_structured_logger(__name__)

_LEADING_FENCE = re.compile(r'^```(?:json)?\s*', re.IGNORECASE)
_TRAILING_FENCE = re.compile(r'\s*```$')


def require_llm_credentials(provider: Optional[str] = None) -> str:
    """Return the API key for the configured provider or raise ConfigurationError."""
    provider = (provider or GenerationConfig.LLM_PROVIDER).lower()
    env_name = GenerationConfig.PROVIDER_KEY_ENV.get(provider)
    if env_name is None:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    api_key = os.environ.get(env_name)
    if not api_key:
        raise ConfigurationError(f"{env_name} not set")
    return api_key


def get_llm_model():
    """Get configured LLM model."""
    provider = GenerationConfig.LLM_PROVIDER
    model_name = GenerationConfig.LLM_MODEL
    api_key = require_llm_credentials(provider)

    logger.debug(
        "Getting LLM model",
        llm_provider=provider,
        llm_model=model_name,
        temperature=GenerationConfig.LLM_TEMPERATURE,
        max_tokens=GenerationConfig.LLM_MAX_TOKENS,
    )

    if provider == "anthropic":
        return ChatAnthropic(
            model=model_name,
            api_key=api_key,
            temperature=GenerationConfig.LLM_TEMPERATURE,
            max_tokens=GenerationConfig.LLM_MAX_TOKENS,
        )
    return ChatOpenAI(
        model=model_name,
        api_key=api_key,
        temperature=GenerationConfig.LLM_TEMPERATURE,
        max_tokens=GenerationConfig.LLM_MAX_TOKENS,
    )


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json or ``` fence and a trailing ``` fence."""
    content = text.strip()
    if content.startswith("```"):
        content = _LEADING_FENCE.sub("", content)
        content = _TRAILING_FENCE.sub("", content)
    return content


def response_text(response) -> str:
    """Extract the text of a chat model response."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        # Anthropic may return content blocks
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return content if isinstance(content, str) else str(content)


def rejection_reason(error: ValidationError) -> str:
    """One-line reason for a record that failed schema validation."""
    first = error.errors()[0]
    field = ".".join(to_snake(str(part)) for part in first["loc"])
    if first["type"] == "missing":
        return f"missing required field {field}"
    return f"{field}: {first['msg']}"


def parse_listing_record(record: dict) -> GeneratedListing:
    """Validate one element of the envelope; raises ListingValidationError."""
    try:
        return GeneratedListing.model_validate(record)
    except ValidationError as e:
        zpid = str(record.get("zpid") or MISSING_ZPID)
        raise ListingValidationError(zpid, rejection_reason(e)) from e


def parse_listing_response(content: Optional[str]) -> ParseResult:
    """Turn one completion into listings, tagging why it failed if it did.

    JSON and envelope errors fail the whole completion. A record that does
    not fit the listing schema is rejected alone and reported in ``rejected``.
    """
    if not content or not content.strip():
        return ParseResult(ok=False, error_kind=ParseErrorKind.EMPTY, error="No content in LLM response")

    try:
        data = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        return ParseResult(ok=False, error_kind=ParseErrorKind.JSON, error=f"Invalid JSON: {e}")

    try:
        batch = ListingBatchResponse.model_validate(data)
    except ValidationError as e:
        return ParseResult(
            ok=False,
            error_kind=ParseErrorKind.SCHEMA,
            error=f"Schema validation failed: {e.error_count()} errors, first: {e.errors()[0]['msg']}",
        )

    result = ParseResult(ok=True)
    for record in batch.properties:
        try:
            result.listings.append(parse_listing_record(record))
        except ListingValidationError as e:
            result.rejected.append(RejectedListing(zpid=e.zpid, reason=e.reason, record=record))
    return result


class ListingGenerator:
    """Sends slices of generation requests to the LLM and collects validated listings."""

    def __init__(
        self,
        model=None,
        rate_limiter: Optional[RateLimiter] = None,
        slice_pause_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._model = model
        self.rate_limiter = rate_limiter or RateLimiter()
        self.slice_pause_seconds = (
            GenerationConfig.GENERATION_SLICE_PAUSE_SECONDS
            if slice_pause_seconds is None else slice_pause_seconds
        )
        self._sleep = sleep
        self._system_prompt = build_system_prompt()

    @property
    def model(self):
        """Chat model, created lazily so tests and validate-only runs need no key."""
        if self._model is None:
            self._model = get_llm_model()
        return self._model

    async def _complete(self, requests: list[GenerationRequest]) -> str:
        messages = [
            ("system", self._system_prompt),
            ("human", build_batch_prompt(requests)),
        ]
        model = self.model
        try:
            response = await model.ainvoke(messages)
        except Exception as e:
            raise GenerationError(f"LLM call failed: {e}") from e
        return response_text(response)

    async def generate_slice(self, index: int, requests: list[GenerationRequest]) -> SliceResult:
        """Generate one slice. Failures become a failed SliceResult, never an exception."""
        await self.rate_limiter.acquire()

        content: Optional[str] = None
        start_time = time.time()
        try:
            content = await self._complete(requests)
            parsed = parse_listing_response(content)
            if not parsed.ok:
                raise GenerationError(parsed.error)
        except GenerationError as e:
            logger.error(
                "Slice generation failed",
                slice_index=index,
                slice_size=len(requests),
                error=str(e),
                raw_response=truncate_for_log(content),
            )
            return SliceResult(index=index, requested=len(requests), ok=False, error=str(e))

        logger.info(
            "Slice generated",
            slice_index=index,
            slice_size=len(requests),
            listings_returned=len(parsed.listings),
            listings_rejected=len(parsed.rejected),
            llm_latency_ms=round((time.time() - start_time) * 1000, 2),
        )
        return SliceResult(
            index=index,
            requested=len(requests),
            ok=True,
            listings=parsed.listings,
            rejected=parsed.rejected,
        )

    async def generate_slices(self, requests: list[GenerationRequest], batch_size: int = 10) -> list[SliceResult]:
        """Split ``requests`` into slices of ``batch_size`` and generate each in order."""
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        results: list[SliceResult] = []
        total_slices = (len(requests) + batch_size - 1) // batch_size

        for index, start in enumerate(range(0, len(requests), batch_size)):
            batch = requests[start:start + batch_size]
            result = await self.generate_slice(index, batch)
            results.append(result)

            logger.debug(
                "Slice progress",
                slice_number=index + 1,
                total_slices=total_slices,
                ok=result.ok,
            )

            # Fixed pause after every slice, successful or not
            await self._sleep(self.slice_pause_seconds)

        return results

    async def generate_batch(self, requests: list[GenerationRequest], batch_size: int = 10) -> list[GeneratedListing]:
        """Generate listings for ``requests``; failed slices contribute nothing."""
        results = await self.generate_slices(requests, batch_size)
        return [listing for result in results for listing in result.listings]
