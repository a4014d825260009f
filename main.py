#!/usr/bin/env python
"""CLI for the disaster-relief resource aggregator."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator

from relief_sources.config import (
    Credentials,
    create_from_config,
    create_recovery_pipeline,
    get_default_config_path,
    load_config,
    prepare_storage,
)
from relief_sources.errors import InvalidInput

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: str
    zip_code: str | None = None
    config: Path
    log: bool = False
    log_dir: str = "logs"
    as_json: bool = False
    recovery: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def run_search(args: CLIArgs) -> int:
    """Aggregate resources for one ZIP code and print them.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    credentials = Credentials.from_env()
    pipeline, run_logger, engine = create_from_config(
        config,
        credentials=credentials,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    if args.recovery:
        recovery = create_recovery_pipeline(config, pipeline.store, credentials, run_logger)
        if recovery is None:
            logger.error(f"No recovery section in {args.config}")
            if engine is not None:
                await engine.dispose()
            return 1
        pipeline = recovery

    logger.info(f"Searching resources for: {args.zip_code}")
    logger.info(f"Config: {args.config}")

    try:
        await prepare_storage(config, engine)
        result = await pipeline.aggregate(args.zip_code or "")
    except InvalidInput as e:
        logger.error(str(e))
        return 2
    finally:
        if engine is not None:
            await engine.dispose()

    if args.as_json:
        print(json.dumps(result.to_response(), indent=2))
        return 0

    origin = f"cache ({result.cached_at.isoformat()})" if result.cached_at else "live sources"
    print(f"\nFound {len(result.resources)} resources from {origin}:\n")
    for i, resource in enumerate(result.resources, 1):
        logger.info(f"{i}. {resource.name} [{resource.source}]")
        if resource.category:
            logger.info(f"   Category: {resource.category}")
        if resource.address:
            logger.info(f"   Address: {resource.address}")
        if resource.phone:
            logger.info(f"   Phone: {resource.phone}")
        if resource.website:
            logger.info(f"   Website: {resource.website}")
        if resource.distance_mi is not None:
            logger.info(f"   Distance: {resource.distance_mi} mi")

    for error in result.errors:
        logger.warning(f"Source error: {error}")

    usage = result.usage
    logger.info("\n--- Usage Summary ---")
    logger.info(f"LLM API calls: {len(usage.api_calls)}")
    logger.info(f"Input tokens: {usage.input_tokens:,}")
    logger.info(f"Output tokens: {usage.output_tokens:,}")
    if usage.web_searches:
        logger.info(f"Web searches: {usage.web_searches}")
    if usage.geocode_requests:
        logger.info(f"Geocode requests: {usage.geocode_requests}")
    if usage.directory_requests:
        logger.info(f"Directory requests: {usage.directory_requests}")
    if usage.places_requests:
        logger.info(f"Places requests: {usage.places_requests}")
    if usage.perplexity_requests:
        logger.info(f"Perplexity requests: {usage.perplexity_requests}")

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")
    return 0


def serve(args: CLIArgs) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from relief_sources.api import create_app

    os.environ["RELIEF_CONFIG"] = str(args.config)
    uvicorn.run(create_app(), host=args.host, port=args.port)


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Find disaster-relief resources near a ZIP code.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: bundled default.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Aggregate resources for a ZIP code")
    search_parser.add_argument("zip_code", help="5-digit ZIP or ZIP+4")
    search_parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable per-run logging to a JSON file",
    )
    search_parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    search_parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Print the API response body as JSON",
    )
    search_parser.add_argument(
        "--recovery",
        action="store_true",
        default=False,
        help="Search the recovery-services pipeline instead",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            zip_code=getattr(ns, "zip_code", None),
            config=config_path,
            log=getattr(ns, "log", False),
            log_dir=getattr(ns, "log_dir", "logs"),
            as_json=getattr(ns, "as_json", False),
            recovery=getattr(ns, "recovery", False),
            host=getattr(ns, "host", "127.0.0.1"),
            port=getattr(ns, "port", 8000),
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    if args.command == "serve":
        serve(args)
        return

    try:
        sys.exit(asyncio.run(run_search(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
