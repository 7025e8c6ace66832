"""Generation settings read from environment variables."""

import os

from dotenv import load_dotenv

load_dotenv()


class GenerationConfig:
    """Centralized generation configuration.

    Values are read once at import time, after ``.env`` has been loaded.
    """

    LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "openai").lower()
    LLM_MODEL = os.environ.get("LLM_MODEL", "gpt-4o")
    LLM_TEMPERATURE = float(os.environ.get("LLM_TEMPERATURE", "0.8"))
    LLM_MAX_TOKENS = int(os.environ.get("LLM_MAX_TOKENS", "8000"))
    LLM_MAX_REQUESTS_PER_MINUTE = int(os.environ.get("LLM_MAX_REQUESTS_PER_MINUTE", "50"))

    GENERATION_CHUNK_SIZE = int(os.environ.get("GENERATION_CHUNK_SIZE", "50"))
    GENERATION_CHUNK_DELAY_SECONDS = float(os.environ.get("GENERATION_CHUNK_DELAY_SECONDS", "2"))
    GENERATION_SLICE_PAUSE_SECONDS = float(os.environ.get("GENERATION_SLICE_PAUSE_SECONDS", "1"))

    RAW_OUTPUT_DIR = os.environ.get("RAW_OUTPUT_DIR", "data/raw_generated")
    EXPORT_OUTPUT_PATH = os.environ.get("EXPORT_OUTPUT_PATH", "data/export/properties.json")

    # Provider name -> environment variable holding its API key
    PROVIDER_KEY_ENV = {
        "openai": "OPENAI_API_KEY",
        "anthropic": "ANTHROPIC_API_KEY",
    }
