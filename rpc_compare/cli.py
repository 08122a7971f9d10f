"""Command-line interface for comparing two Filecoin RPC endpoints."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .models.core import RunMode
from .models.errors import GenerationError, SetupError, TestRunFailure
from .runner.filter_list import FilterList
from .runner.orchestrator import compare_apis, plan_comparison
from .utils.config import CompareConfig, ReportFormat, StragglerPolicy, load_config, set_config
from .utils.logging import configure_logging, get_logger


EXIT_OK = 0
EXIT_TEST_FAILURE = 1
EXIT_SETUP_ERROR = 2
EXIT_GENERATION_ERROR = 3

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpc-compare",
        description="Differential conformance testing of Filecoin JSON-RPC nodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare a local node against a local Lotus over HTTP
  rpc-compare compare --sut /ip4/127.0.0.1/tcp/2345/http --reference /ip4/127.0.0.1/tcp/1234/http

  # Add tests derived from a chain export, only for state methods
  rpc-compare compare --filter Filecoin.State calibnet_export.json

  # Run the ignored tests only and stop at the first failure
  rpc-compare compare --run-ignored ignored-only --fail-fast
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Compare two RPC endpoints")

    # Endpoints
    compare.add_argument(
        "--sut",
        metavar="MULTIADDR",
        help="Address of the system under test (default: /ip4/127.0.0.1/tcp/2345/http)"
    )
    compare.add_argument(
        "--reference",
        metavar="MULTIADDR",
        help="Address of the reference node (default: /ip4/127.0.0.1/tcp/1234/http)"
    )
    compare.add_argument(
        "snapshots",
        nargs="*",
        type=Path,
        metavar="SNAPSHOT",
        help="Chain exports to derive additional tests from"
    )

    # Selection
    filter_group = compare.add_mutually_exclusive_group()
    filter_group.add_argument(
        "--filter",
        default="",
        help="Only run methods whose name contains this substring"
    )
    filter_group.add_argument(
        "--filter-file",
        type=Path,
        help="File of allow rules and '!'-prefixed reject rules, one per line"
    )
    compare.add_argument(
        "--run-ignored",
        choices=[mode.value for mode in RunMode],
        help="Which tests to run with respect to their ignore marker (default: default)"
    )
    compare.add_argument(
        "-n", "--n-tipsets",
        type=int,
        help="Number of tipsets to derive tests from (default: 20)"
    )

    # Execution
    compare.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Stop at the first failing test"
    )
    compare.add_argument(
        "--max-concurrent-requests",
        type=int,
        help="Number of tests in flight at once (default: 8)"
    )
    compare.add_argument(
        "--timeout",
        type=float,
        help="Default per-call timeout in seconds (default: 60)"
    )
    compare.add_argument(
        "--straggler-policy",
        choices=[policy.value for policy in StragglerPolicy],
        help="What to do with in-flight tests after --fail-fast triggers (default: abandon)"
    )

    # Output
    compare.add_argument(
        "--format",
        choices=[report_format.value for report_format in ReportFormat],
        help="Report format (default: markdown)"
    )
    compare.add_argument(
        "--config",
        type=Path,
        help="JSON or YAML configuration file (default: ./rpc_compare.json if present)"
    )
    compare.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    compare.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit logs as JSON lines on stderr"
    )
    compare.add_argument(
        "--list-tests",
        action="store_true",
        help="Print the selected tests instead of running them"
    )
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> CompareConfig:
    """Merge file and environment configuration with the command-line flags."""
    return load_config(
        args.config,
        sut_address=args.sut,
        reference_address=args.reference,
        n_tipsets=args.n_tipsets,
        max_concurrent_requests=args.max_concurrent_requests,
        default_timeout_seconds=args.timeout,
        fail_fast=args.fail_fast,
        run_ignored=args.run_ignored,
        straggler_policy=args.straggler_policy,
        report_format=args.format,
        log_level="DEBUG" if args.verbose else None,
        json_logging=args.json_logs,
    )


def filter_from_args(args: argparse.Namespace) -> FilterList:
    if args.filter_file is not None:
        return FilterList.from_file(args.filter_file)
    return FilterList.from_substring(args.filter)


def list_tests(config: CompareConfig, args: argparse.Namespace) -> int:
    plan = plan_comparison(config, args.snapshots, filter_from_args(args))
    for test in plan.tests:
        suffix = f"  (ignored: {test.ignore_reason})" if test.ignored else ""
        print(f"{test.method_name}{suffix}")
    print(f"\n{len(plan.tests)} test(s)", file=sys.stderr)
    return EXIT_OK


async def run_compare(config: CompareConfig, args: argparse.Namespace) -> int:
    """
    Run one comparison.

    Returns:
        Exit code: 0 pass, 1 failed tests, 2 setup error, 3 generation error
    """
    try:
        await compare_apis(config, args.snapshots, filter_from_args(args))
    except TestRunFailure as e:
        logger.error("Comparison failed", failed=e.failed)
        return EXIT_TEST_FAILURE
    return EXIT_OK


def run(args: argparse.Namespace) -> int:
    try:
        config = config_from_args(args)
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_SETUP_ERROR

    set_config(config)
    configure_logging(config.log_level, config.json_logging)

    try:
        if args.list_tests:
            return list_tests(config, args)
        return asyncio.run(run_compare(config, args))
    except SetupError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_SETUP_ERROR
    except GenerationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_GENERATION_ERROR


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    args = parse_arguments(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
