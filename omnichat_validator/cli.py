"""CLI entry point for the OmniChat API validator."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from omnichat_validator.auth import resolve_auth
from omnichat_validator.catalogue import ENDPOINT_CATALOGUE, KNOWN_ENDPOINT_COUNT
from omnichat_validator.models.config import (
    DEFAULT_BASE_URL,
    ValidatorConfig,
)
from omnichat_validator.models.spec import TestSpec
from omnichat_validator.report import (
    CATEGORY_RULES,
    format_output,
    has_failures,
    log_report,
    summarize,
)
from omnichat_validator.runner import EndpointRunner
from omnichat_validator.transport import open_transports


async def run(
    config: ValidatorConfig, specs: Sequence[TestSpec] = ENDPOINT_CATALOGUE
) -> int:
    """Run the endpoint checks and return exit code."""
    log = logging.getLogger("omnichat_validator")

    log.info("🚀 OmniChat API Validator")
    log.info(
        "📍 Testing %d endpoints across %d categories",
        KNOWN_ENDPOINT_COUNT,
        len(CATEGORY_RULES),
    )
    log.info("🔍 Validating OmniChat API at %s", config.base_url)

    auth = resolve_auth(config)
    async with open_transports(auth) as transports:
        runner = EndpointRunner(
            transports=transports,
            strict_provider_match=config.strict_provider_match,
        )
        context = await runner.run(specs, auth)

    summary = summarize(context.results)
    log_report(log, context, summary)

    print(json.dumps(format_output(context, summary), indent=2))

    return 1 if has_failures(context.results) else 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="omnichat-validator",
        description=(
            f"Comprehensive testing for all {KNOWN_ENDPOINT_COUNT} OmniChat API "
            "endpoints"
        ),
        epilog=(
            "The OmniChat API uses two authentication methods: Clerk tokens for "
            "web app endpoints (/api/*) and JWT tokens for V1 API endpoints "
            "(/api/v1/*)."
        ),
    )
    parser.add_argument(
        "--url",
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the API (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--clerk",
        default="",
        help="Clerk session token for web app endpoints",
    )
    parser.add_argument(
        "--bearer",
        default="",
        help="JWT bearer token for V1 API endpoints",
    )
    parser.add_argument(
        "--token",
        default="",
        help="Bearer token (deprecated, use --clerk or --bearer)",
    )
    parser.add_argument(
        "--timeout",
        default="30s",
        help="Request timeout, e.g. 30s, 1m, 500ms (default: 30s)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--lenient-provider-match",
        action="store_true",
        help="Accept models whose provider differs from the key they are listed under",
    )
    return parser


def build_config(
    args: argparse.Namespace, log: logging.Logger | None = None
) -> ValidatorConfig:
    """Turn parsed arguments into a validated configuration.

    Raises:
        ValidationError: If a value is invalid

    """
    log = log or logging.getLogger("omnichat_validator")
    clerk_token = args.clerk
    if args.token and not args.clerk and not args.bearer:
        log.warning("The --token flag is deprecated. Use --clerk or --bearer instead.")
        clerk_token = args.token

    return ValidatorConfig(
        base_url=args.url,
        clerk_token=clerk_token,
        bearer_token=args.bearer,
        timeout=args.timeout,
        verbose=args.verbose,
        strict_provider_match=not args.lenient_provider_match,
    )


def configure_logging(config: ValidatorConfig) -> None:
    """Send log records to stderr, at DEBUG level in verbose mode."""
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        config = build_config(args)
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(config)

    exit_code = asyncio.run(run(config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
