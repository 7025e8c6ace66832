"""Command-line entry point: generate Rockridge listings, validate or export stored data."""

import argparse
import asyncio
import sys
from typing import Optional

from src.utils.generation_config import GenerationConfig
from src.services.generation_orchestrator import GenerationOrchestrator
from src.services.listing_exporter import ListingExporter
from src.services.listing_inserter import ListingInserter
from src.services.supabase_client import close_supabase_client
from src.utils.logging import get_structured_logger
from src.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate synthetic Rockridge real-estate listings")
    parser.add_argument("-p", "--properties", type=positive_int, default=100,
                        help="Number of listings to generate (default: 100)")
    parser.add_argument("-b", "--batch-size", type=positive_int, default=10,
                        help="Listings per LLM call (default: 10)")
    parser.add_argument("--validate-only", action="store_true",
                        help="Report on stored data without generating")
    parser.add_argument("--export", nargs="?", const=GenerationConfig.EXPORT_OUTPUT_PATH, metavar="PATH",
                        help=f"Export stored listings to JSON (default path: {GenerationConfig.EXPORT_OUTPUT_PATH})")
    parser.add_argument("--sample", type=positive_int, metavar="N",
                        help="With --export, export only N listings")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log at DEBUG level regardless of LOG_LEVEL")
    parser.add_argument("--check-integrity", action="store_true",
                        help="Count rows per table and report incomplete listings")
    return parser


async def run_command(args: argparse.Namespace) -> None:
    inserter = ListingInserter()

    try:
        if args.validate_only:
            await inserter.validate_generation()
            return

        if args.check_integrity or args.export:
            exporter = ListingExporter(inserter)
            if args.check_integrity:
                await exporter.check_store_integrity()
            if args.export:
                await exporter.export_listings(args.export, sample=args.sample)
            return

        orchestrator = GenerationOrchestrator(
            total_properties=args.properties,
            batch_size=args.batch_size,
            inserter=inserter,
        )
        await orchestrator.run()
        await inserter.validate_generation()
    finally:
        await close_supabase_client()


def main(argv: Optional[list[str]] = None) -> int:
    """Parse arguments, run the command and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.sample is not None and not args.export:
        parser.error("--sample requires --export")
    LoggingConfig.setup_logging(level="DEBUG" if args.verbose else None)

    try:
        asyncio.run(run_command(args))
    except Exception as e:
        logger.exception("Listing generator failed", error=str(e), error_type=type(e).__name__)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
