"""
End-to-end comparison flow.

Resolve both endpoints and their common transport, build the catalogue from
the static suites and any chain archives, filter it, run it, print the report.
Setup and generation errors abort before any RPC call is made.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from ..archive.export import ExportArchive
from ..cases import RpcTest
from ..client.api_info import ApiInfo, derive_protocol
from ..client.transport import create_client
from ..models.core import Protocol
from ..models.errors import ArchiveError, GenerationError, TestRunFailure
from ..suites.snapshot import snapshot_tests
from ..suites.static import static_tests, websocket_tests
from ..utils.config import CompareConfig
from ..utils.logging import get_logger
from .executor import BoundedExecutor
from .filter_list import FilterList
from .report import ResultAggregator


logger = get_logger(__name__)


@dataclass
class ComparisonPlan:
    """Everything resolved before the first RPC call."""
    sut: ApiInfo
    reference: ApiInfo
    protocol: Protocol
    tests: List[RpcTest]


def build_catalogue(
    protocol: Protocol,
    snapshot_paths: Sequence[Path] = (),
    n_tipsets: int = 20,
) -> List[RpcTest]:
    """Static suites, snapshot tests and transport-specific tests sorted by method name."""
    tests = static_tests()
    logger.debug("Built static tests", count=len(tests))

    if snapshot_paths:
        try:
            archive = ExportArchive.from_paths(snapshot_paths)
        except ArchiveError as e:
            raise GenerationError(f"failed to load chain archive: {e.message}", **e.context) from e
        snapshot = snapshot_tests(archive, n_tipsets)
        logger.debug("Built snapshot tests", count=len(snapshot), archives=len(snapshot_paths))
        tests.extend(snapshot)

    if protocol == Protocol.WS:
        tests.extend(websocket_tests())

    # Stable sort keeps each method's tests in generation order
    tests.sort(key=lambda test: test.method_name)
    return tests


def apply_filter(tests: List[RpcTest], filter_list: Optional[FilterList]) -> List[RpcTest]:
    if filter_list is None:
        return tests
    selected = [test for test in tests if filter_list.authorize(test.method_name)]
    if len(selected) != len(tests):
        logger.info("Filtered out tests", skipped=len(tests) - len(selected), remaining=len(selected))
    return selected


def plan_comparison(
    config: CompareConfig,
    snapshot_paths: Sequence[Path] = (),
    filter_list: Optional[FilterList] = None,
) -> ComparisonPlan:
    """
    Resolve endpoints and build the filtered catalogue.

    Raises:
        SetupError: If an address is malformed or the transports differ
        GenerationError: If a chain archive cannot be read
    """
    sut = ApiInfo.from_str(config.sut_address)
    reference = ApiInfo.from_str(config.reference_address)
    protocol = derive_protocol(sut, reference)

    tests = build_catalogue(protocol, snapshot_paths, config.n_tipsets)
    tests = apply_filter(tests, filter_list)
    return ComparisonPlan(sut=sut, reference=reference, protocol=protocol, tests=tests)


async def run_plan(plan: ComparisonPlan, config: CompareConfig) -> ResultAggregator:
    async with create_client(plan.sut, plan.protocol, config.default_timeout_seconds) as sut_client, \
            create_client(plan.reference, plan.protocol, config.default_timeout_seconds) as reference_client:
        executor = BoundedExecutor(
            sut_client,
            reference_client,
            max_concurrent=config.max_concurrent_requests,
            fail_fast=config.fail_fast,
            run_mode=config.run_ignored,
            straggler_policy=config.straggler_policy,
        )
        return await executor.run(plan.tests)


async def compare_apis(
    config: CompareConfig,
    snapshot_paths: Sequence[Path] = (),
    filter_list: Optional[FilterList] = None,
    output: Optional[TextIO] = None,
) -> ResultAggregator:
    """
    Compare the system under test against the reference node.

    The report is written to ``output`` (stdout by default) whether or not
    the run passed.

    Raises:
        SetupError: Before any call, if the endpoints are incompatible
        GenerationError: Before any call, if a chain archive cannot be read
        TestRunFailure: After the report, if any test failed
    """
    plan = plan_comparison(config, snapshot_paths, filter_list)
    logger.info(
        "Starting comparison",
        sut=plan.sut.multiaddr,
        reference=plan.reference.multiaddr,
        protocol=plan.protocol.value,
        tests=len(plan.tests),
    )

    aggregator = await run_plan(plan, config)

    stream = output if output is not None else sys.stdout
    print(aggregator.render(config.report_format), file=stream)

    logger.info(
        "Comparison finished",
        passed=aggregator.passed,
        failed=aggregator.failed,
        discarded=aggregator.discarded,
    )
    if aggregator.has_failures:
        raise TestRunFailure(f"{aggregator.failed} test(s) failed", failed=aggregator.failed)
    return aggregator
