"""
Bounded concurrent executor.

A scheduler task acquires one of ``max_concurrent`` permits before starting
each test's execution unit. A unit calls both endpoints, gives its permit back
as soon as both calls returned and then posts ``(method, sut, reference)`` to
a completion queue. The coordinator consumes that queue in arrival order and
owns the result counters.
"""

import asyncio
from typing import List, Optional, Set, Tuple

from ..cases import RpcTest
from ..client.transport import RpcClient
from ..models.core import EndpointStatus, RunMode
from ..utils.config import StragglerPolicy
from ..utils.logging import LoggerMixin
from .report import ResultAggregator


Completion = Tuple[str, EndpointStatus, EndpointStatus]


def select_by_run_mode(tests: List[RpcTest], run_mode: RunMode) -> List[RpcTest]:
    if run_mode == RunMode.ALL:
        return list(tests)
    if run_mode == RunMode.IGNORED_ONLY:
        return [test for test in tests if test.ignored]
    return [test for test in tests if not test.ignored]


class BoundedExecutor(LoggerMixin):
    """Runs RPC tests against two endpoints with at most ``max_concurrent`` in flight.

    Args:
        sut: Client for the system under test
        reference: Client for the reference node
        max_concurrent: Number of tests allowed in flight at once
        fail_fast: Stop consuming completions after the first failure
        run_mode: Which tests to run with respect to their ignore marker
        straggler_policy: What to do with in-flight tests once fail-fast
            triggered: ``abandon`` returns immediately, ``drain`` waits for
            them and counts their results as discarded
    """

    def __init__(
        self,
        sut: RpcClient,
        reference: RpcClient,
        max_concurrent: int,
        fail_fast: bool = False,
        run_mode: RunMode = RunMode.DEFAULT,
        straggler_policy: StragglerPolicy = StragglerPolicy.ABANDON,
    ):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.sut = sut
        self.reference = reference
        self.max_concurrent = max_concurrent
        self.fail_fast = fail_fast
        self.run_mode = run_mode
        self.straggler_policy = straggler_policy
        # Abandoned units stay referenced until they finish
        self._stragglers: Set[asyncio.Task] = set()

    def eligible(self, tests: List[RpcTest]) -> List[RpcTest]:
        selected = select_by_run_mode(tests, self.run_mode)
        skipped = len(tests) - len(selected)
        if skipped:
            self.logger.info("Skipping tests excluded by run mode", run_mode=self.run_mode.value, skipped=skipped)
        return selected

    async def _run_unit(self, test: RpcTest, semaphore: asyncio.Semaphore, completions: asyncio.Queue) -> None:
        try:
            sut_status, reference_status = await test.run(self.sut, self.reference)
        except Exception as e:
            self.logger.exception("Test raised unexpectedly", method=test.method_name, error=str(e))
            sut_status = reference_status = EndpointStatus.INTERNAL_SERVER_ERROR
        finally:
            semaphore.release()

        self.logger.debug(
            "Test completed",
            method=test.method_name,
            sut=str(sut_status),
            reference=str(reference_status),
        )
        completions.put_nowait((test.method_name, sut_status, reference_status))

    async def _schedule(
        self,
        tests: List[RpcTest],
        semaphore: asyncio.Semaphore,
        completions: asyncio.Queue,
        units: List[asyncio.Task],
        stop: asyncio.Event,
    ) -> None:
        for test in tests:
            await semaphore.acquire()
            if stop.is_set():
                semaphore.release()
                return
            units.append(asyncio.create_task(self._run_unit(test, semaphore, completions)))

    async def run(self, tests: List[RpcTest], aggregator: Optional[ResultAggregator] = None) -> ResultAggregator:
        """Run the eligible tests and return the filled aggregator."""
        aggregator = aggregator if aggregator is not None else ResultAggregator()
        selected = self.eligible(tests)
        if not selected:
            return aggregator

        semaphore = asyncio.Semaphore(self.max_concurrent)
        completions: asyncio.Queue = asyncio.Queue()
        units: List[asyncio.Task] = []
        stop = asyncio.Event()

        self.log_operation_start("run_tests", tests=len(selected), max_concurrent=self.max_concurrent)
        loop = asyncio.get_running_loop()
        started = loop.time()
        scheduler = asyncio.create_task(self._schedule(selected, semaphore, completions, units, stop))

        consumed = 0
        stopped_early = False
        try:
            while consumed < len(selected):
                method, sut_status, reference_status = await completions.get()
                consumed += 1
                aggregator.record(method, sut_status, reference_status)
                if self.fail_fast and aggregator.has_failures:
                    self.logger.warning(
                        "Failure observed, stopping early",
                        method=method,
                        consumed=consumed,
                        remaining=len(selected) - consumed,
                    )
                    stopped_early = True
                    break
        finally:
            stop.set()
            scheduler.cancel()
            await asyncio.gather(scheduler, return_exceptions=True)

        if stopped_early:
            await self._handle_stragglers(units, completions, aggregator)

        self.log_operation_success(
            "run_tests",
            duration_ms=int((loop.time() - started) * 1000),
            passed=aggregator.passed,
            failed=aggregator.failed,
            discarded=aggregator.discarded,
        )
        return aggregator

    async def _handle_stragglers(
        self, units: List[asyncio.Task], completions: asyncio.Queue, aggregator: ResultAggregator
    ) -> None:
        pending = [unit for unit in units if not unit.done()]
        if self.straggler_policy == StragglerPolicy.DRAIN and pending:
            self.logger.info("Waiting for in-flight tests", in_flight=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        else:
            self._stragglers.update(pending)
            for unit in pending:
                unit.add_done_callback(self._stragglers.discard)

        aggregator.discarded = completions.qsize()
        if pending or aggregator.discarded:
            self.logger.info(
                "Results discarded after fail-fast",
                policy=self.straggler_policy.value,
                discarded=aggregator.discarded,
                abandoned=0 if self.straggler_policy == StragglerPolicy.DRAIN else len(pending),
            )
