#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional, Sequence, Tuple

from config import (DEFAULT_API_URL, DEFAULT_LANGUAGES, Config, FailurePolicy,
                    GitHubConfig, MigrationBehaviorConfig, SourceConfig)
from logging_utils import Logger
from security import SecurityValidator
from utils import parse_languages

# Exit codes
EXIT_AUTH_ERROR = 40
EXIT_MISSING_ARGUMENTS = 2


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Fork public repositories of a GitHub organization into another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -s acme -d acme-mirror
  %(prog)s -s acme -d acme-mirror --dry-run
  %(prog)s -s acme -d acme-mirror -l python,rust --failure-policy fail-fast
  %(prog)s -r acme/widgets -d acme-mirror
  %(prog)s --gh-api https://github.company.com/api/v3 -s team -d team-mirror
        """,
    )
    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    """Add source/destination arguments to parser."""
    parser.add_argument(
        "-s",
        "--source-org",
        dest="source_org",
        help="Source organization name (required unless -r is given)",
    )
    parser.add_argument(
        "-r",
        "--source-repo",
        dest="source_repo",
        help="Single source repository (owner/name); skips org discovery",
    )
    parser.add_argument(
        "-d",
        "--dest-org",
        dest="dest_org",
        required=True,
        help="Destination organization name",
    )


def _add_github_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitHub-related arguments to parser."""
    parser.add_argument(
        "--gh-api",
        dest="gh_api_url",
        default=DEFAULT_API_URL,
        help="Base URL of the GitHub API",
    )
    parser.add_argument(
        "--gh-token",
        dest="gh_token",
        help="GitHub API token (or set GITHUB_TOKEN / GH_TOKEN env var)",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "-l",
        "--languages",
        dest="languages",
        default=",".join(DEFAULT_LANGUAGES),
        help="Comma-separated language filters, in discovery order "
        f"(default: {','.join(DEFAULT_LANGUAGES)})",
    )
    parser.add_argument(
        "--failure-policy",
        dest="failure_policy",
        choices=[policy.value for policy in FailurePolicy],
        default=FailurePolicy.BEST_EFFORT.value,
        help="Continue past per-repository errors and report them, or stop at "
        "the first one (default: best-effort)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="List the repositories that would be forked without doing it",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        dest="assume_yes",
        help="Do not ask for confirmation before forking",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        dest="no_wait",
        help="Do not wait for forks to become visible before tagging",
    )
    parser.add_argument(
        "--retry-delay",
        dest="retry_delay_s",
        type=float,
        default=3.0,
        help="Seconds between fork visibility checks (default: 3.0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        help="Show debug output",
    )


def _validate_parsed_arguments(
    args,
) -> Tuple[str, Optional[str], Optional[str], str, List[str]]:
    """Validate and sanitize parsed arguments for security."""
    try:
        validated_gh_api_url = SecurityValidator.validate_url(
            args.gh_api_url, ["https"]
        )

        validated_dest_org = SecurityValidator.validate_login(args.dest_org)

        validated_source_org = None
        if args.source_org:
            validated_source_org = SecurityValidator.validate_login(args.source_org)

        validated_source_repo = None
        if args.source_repo:
            validated_source_repo = SecurityValidator.validate_full_name(
                args.source_repo
            )

        languages = parse_languages(args.languages)
        if not languages:
            raise ValueError("at least one language filter is required")
        validated_languages = [
            SecurityValidator.validate_language(language) for language in languages
        ]

        if args.retry_delay_s < 0 or args.retry_delay_s > 300:
            raise ValueError("retry delay must be between 0 and 300 seconds")

        Logger.security_event(
            "CONFIG_VALIDATION", "successfully validated all configuration inputs"
        )

        return (
            validated_gh_api_url,
            validated_source_org,
            validated_source_repo,
            validated_dest_org,
            validated_languages,
        )

    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)


def _get_token(args) -> str:
    """Get the GitHub token from flags or environment."""
    gh_token = args.gh_token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
    if not gh_token:
        Logger.error(
            "error: github token not provided (use --gh-token, GITHUB_TOKEN "
            "or GH_TOKEN)"
        )
        sys.exit(EXIT_AUTH_ERROR)
    return gh_token


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_source_arguments(parser)
    _add_github_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)

    if not args.source_org and not args.source_repo:
        parser.print_usage(sys.stderr)
        Logger.error("error: provide a source organization (-s) or repository (-r)")
        sys.exit(EXIT_MISSING_ARGUMENTS)

    Logger.verbose = args.verbose

    (
        validated_gh_api_url,
        validated_source_org,
        validated_source_repo,
        validated_dest_org,
        validated_languages,
    ) = _validate_parsed_arguments(args)

    if validated_source_org and validated_source_repo:
        Logger.warn(
            f"warning: -r given, ignoring source organization '{validated_source_org}'"
        )

    gh_token = _get_token(args)

    return Config(
        source=SourceConfig(
            org=validated_source_org,
            repo=validated_source_repo,
        ),
        github=GitHubConfig(
            api_url=validated_gh_api_url,
            token=gh_token,
            dest_org=validated_dest_org,
        ),
        behavior=MigrationBehaviorConfig(
            languages=validated_languages,
            failure_policy=FailurePolicy(args.failure_policy),
            dry_run=args.dry_run,
            assume_yes=args.assume_yes,
            wait=not args.no_wait,
            retry_delay_s=float(args.retry_delay_s),
        ),
    )
