"""Workload simulators mixing I/O waits, CPU burns and retained allocations.

``WorkloadSimulator`` serves blocking callers (one thread per request, or a
worker pool behind an event loop). ``AsyncWorkloadSimulator`` serves
coroutine callers, one task per request. Both take the suspend primitive from
the host so that the I/O phase really parks whatever execution context is
running it.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable

import structlog

from .exceptions import QueryCancelledError
from .phases import DEFAULT_CHECK_INTERVAL, ResultSet, allocate_result_set, burn_cpu
from .profiles import Profile
from .results import BatchResult, CpuResult, QueryResult, StressResult
from .sampling import ProfileSampler

logger = structlog.get_logger(__name__)

Suspender = Callable[[float], None]
AsyncSuspender = Callable[[float], Awaitable[None]]


class InterruptibleSleep:
    """Blocking suspender that a host can cancel from another thread.

    Waiting on an event instead of ``time.sleep`` lets a shutdown hook or a
    request watchdog wake the parked thread immediately.
    """

    def __init__(self, cancel_event: threading.Event | None = None) -> None:
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        """Wake every caller parked in this suspender."""
        self.cancel_event.set()

    def reset(self) -> None:
        """Accept new suspensions after a previous ``cancel``."""
        self.cancel_event.clear()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def __call__(self, seconds: float) -> None:
        if self.cancel_event.wait(seconds):
            msg = f"Suspension cancelled before {seconds * 1000:.1f}ms elapsed."
            raise QueryCancelledError(msg)


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        msg = f"{name} must be non-negative, got {value}."
        raise ValueError(msg)


class _SimulatorBase:
    """Sampling and the non-suspending phases shared by both simulators."""

    def __init__(
        self,
        profile: Profile,
        *,
        seed: int | None = None,
        cpu_check_interval: int = DEFAULT_CHECK_INTERVAL,
    ) -> None:
        self._profile = profile
        self._sampler = ProfileSampler(profile, seed)
        self.cpu_check_interval = cpu_check_interval

    @property
    def profile(self) -> Profile:
        return self._profile

    def _finish_query(self, label: str, io_time_ms: float) -> QueryResult:
        """Run the CPU and memory phases after the I/O wait and build the result."""
        cpu_time_ms = 0.0
        cpu_target = self._sampler.cpu_target_ms()
        if cpu_target is not None:
            cpu_time_ms = burn_cpu(cpu_target, self.cpu_check_interval).elapsed_ms

        mem_time_ms = 0.0
        result_set: ResultSet | None = None
        mem_target = self._sampler.memory_target_bytes()
        if mem_target is not None:
            started = time.perf_counter()
            result_set = allocate_result_set(mem_target)
            mem_time_ms = (time.perf_counter() - started) * 1000

        result = QueryResult(
            label=label,
            io_time_ms=io_time_ms,
            cpu_time_ms=cpu_time_ms,
            mem_time_ms=mem_time_ms,
            allocated_bytes=result_set.size if result_set else 0,
            rows=result_set.rows if result_set else 0,
            total_ms=io_time_ms + cpu_time_ms + mem_time_ms,
        )
        logger.debug(
            "query.complete",
            label=label,
            profile=self._profile.name,
            io_ms=round(io_time_ms, 3),
            cpu_ms=round(cpu_time_ms, 3),
            mem_ms=round(mem_time_ms, 3),
            rows=result.rows,
            thread=threading.current_thread().name,
        )
        # the result set stays referenced until here
        del result_set
        return result

    def _burst(self, duration_ms: float) -> CpuResult:
        _check_non_negative("duration_ms", duration_ms)
        result = burn_cpu(duration_ms, self.cpu_check_interval)
        logger.debug(
            "cpu.complete",
            target_ms=duration_ms,
            elapsed_ms=round(result.elapsed_ms, 3),
            operations=result.operations,
            thread=threading.current_thread().name,
        )
        return result

    def _log_batch(self, batch: BatchResult) -> None:
        logger.debug(
            "batch.complete",
            profile=self._profile.name,
            count=batch.count,
            io_ms=round(batch.total_io_time_ms, 3),
            cpu_ms=round(batch.total_cpu_time_ms, 3),
            rows=batch.total_rows,
            total_ms=round(batch.total_ms, 3),
        )


class WorkloadSimulator(_SimulatorBase):
    """Simulator for blocking callers.

    The profile is read only and per-call state stays on the caller's stack, so
    one instance can be shared by any number of threads.
    """

    def __init__(
        self,
        profile: Profile,
        *,
        seed: int | None = None,
        sleep: Suspender = time.sleep,
        cpu_check_interval: int = DEFAULT_CHECK_INTERVAL,
    ) -> None:
        super().__init__(profile, seed=seed, cpu_check_interval=cpu_check_interval)
        self._sleep = sleep

    def _suspend(self, label: str, delay_ms: float) -> None:
        if delay_ms <= 0:
            return
        try:
            self._sleep(delay_ms / 1000)
        except QueryCancelledError:
            logger.info("query.cancelled", label=label, delay_ms=round(delay_ms, 3))
            raise

    def run_query(self, label: str = "query") -> QueryResult:
        """Simulate one query with profile-sampled I/O, CPU and memory phases.

        Args:
            label: Name of the simulated query, used in logs and the result.

        Returns:
            The per-phase timings and the simulated row count.

        Raises:
            QueryCancelledError: If the suspender is cancelled during the I/O wait.

        """
        delay_ms = self._sampler.io_delay_ms()
        self._suspend(label, delay_ms)
        return self._finish_query(label, delay_ms)

    def run_query_with_delay(self, label: str, delay_ms: float) -> QueryResult:
        """Like ``run_query`` but with an exact I/O wait instead of a sampled one.

        Raises:
            QueryCancelledError: If the suspender is cancelled during the I/O wait.

        """
        _check_non_negative("delay_ms", delay_ms)
        self._suspend(label, delay_ms)
        return self._finish_query(label, delay_ms)

    def run_batch(self, count: int) -> BatchResult:
        """Run ``count`` queries one after another and sum their phases.

        Args:
            count: Number of sequential queries; 0 yields an all-zero result.

        Returns:
            The aggregate, whose ``total_ms`` is the exact sum of per-query totals.

        """
        _check_non_negative("count", count)
        batch = BatchResult.aggregate(self.run_query(f"batch-{index}") for index in range(count))
        self._log_batch(batch)
        return batch

    def run_cpu_burst(self, duration_ms: float) -> CpuResult:
        """Burn CPU for at least ``duration_ms`` regardless of the profile.

        Args:
            duration_ms: Target burn duration in milliseconds.

        Returns:
            The measured burn and its operation count.

        """
        return self._burst(duration_ms)

    def run_stress(self, queries: int = 5, cpu_ms: float = 100) -> StressResult:
        """Run a batch of queries followed by an extra CPU burst."""
        batch = self.run_batch(queries)
        cpu = self.run_cpu_burst(cpu_ms)
        return StressResult(batch=batch, cpu=cpu, total_ms=batch.total_ms + cpu.elapsed_ms)


class AsyncWorkloadSimulator(_SimulatorBase):
    """Simulator for coroutine callers.

    The I/O phase awaits the suspender, so other tasks run while a query waits.
    The CPU and memory phases run inline on the event loop, which is exactly the
    contention a task-per-request server has to live with.
    """

    def __init__(
        self,
        profile: Profile,
        *,
        seed: int | None = None,
        sleep: AsyncSuspender = asyncio.sleep,
        cpu_check_interval: int = DEFAULT_CHECK_INTERVAL,
    ) -> None:
        super().__init__(profile, seed=seed, cpu_check_interval=cpu_check_interval)
        self._sleep = sleep

    async def _suspend(self, label: str, delay_ms: float) -> None:
        if delay_ms <= 0:
            return
        try:
            await self._sleep(delay_ms / 1000)
        except asyncio.CancelledError:
            logger.info("query.cancelled", label=label, delay_ms=round(delay_ms, 3))
            raise

    async def run_query(self, label: str = "query") -> QueryResult:
        """Simulate one query; see ``WorkloadSimulator.run_query``.

        Raises:
            asyncio.CancelledError: If the running task is cancelled during the I/O wait.

        """
        delay_ms = self._sampler.io_delay_ms()
        await self._suspend(label, delay_ms)
        return self._finish_query(label, delay_ms)

    async def run_query_with_delay(self, label: str, delay_ms: float) -> QueryResult:
        """Simulate one query with an exact I/O wait."""
        _check_non_negative("delay_ms", delay_ms)
        await self._suspend(label, delay_ms)
        return self._finish_query(label, delay_ms)

    async def run_batch(self, count: int) -> BatchResult:
        """Run ``count`` queries sequentially within the calling task."""
        _check_non_negative("count", count)
        results = [await self.run_query(f"batch-{index}") for index in range(count)]
        batch = BatchResult.aggregate(results)
        self._log_batch(batch)
        return batch

    async def run_cpu_burst(self, duration_ms: float) -> CpuResult:
        """Burn CPU on the event loop for at least ``duration_ms``."""
        return self._burst(duration_ms)

    async def run_stress(self, queries: int = 5, cpu_ms: float = 100) -> StressResult:
        """Run a batch of queries followed by an extra CPU burst."""
        batch = await self.run_batch(queries)
        cpu = await self.run_cpu_burst(cpu_ms)
        return StressResult(batch=batch, cpu=cpu, total_ms=batch.total_ms + cpu.elapsed_ms)
