"""Tests for the coroutine AsyncWorkloadSimulator."""

import asyncio
import inspect
import time

import pytest
from conftest import AsyncRecordingSleep

from workload_sim.profiles import Profile
from workload_sim.sampling import ProfileSampler
from workload_sim.simulator import AsyncWorkloadSimulator, WorkloadSimulator

CANCEL_GRACE_SECONDS = 0.05


@pytest.mark.asyncio
async def test_fixed_delay_profile(fixed_io_profile: Profile, async_recording_sleep: AsyncRecordingSleep) -> None:
    """Test a 50ms fixed I/O profile awaits exactly one 50ms suspension."""
    simulator = AsyncWorkloadSimulator(fixed_io_profile, sleep=async_recording_sleep)

    result = await simulator.run_query("x")

    assert async_recording_sleep.calls == [pytest.approx(0.05)]
    assert result.io_time_ms == 50
    assert result.cpu_time_ms == 0
    assert result.rows == 0
    assert result.total_ms == 50


@pytest.mark.asyncio
async def test_cpu_only_profile_does_not_suspend(
    fixed_cpu_profile: Profile, async_recording_sleep: AsyncRecordingSleep
) -> None:
    """Test a CPU-only profile burns on the loop without awaiting a wait."""
    simulator = AsyncWorkloadSimulator(fixed_cpu_profile, sleep=async_recording_sleep)

    result = await simulator.run_query("x")

    assert async_recording_sleep.calls == []
    assert result.io_time_ms == 0
    assert result.cpu_time_ms >= 10


@pytest.mark.asyncio
async def test_batch_matches_seeded_samples(async_recording_sleep: AsyncRecordingSleep) -> None:
    """Test the async batch sums the same seeded waits as the sampler."""
    profile = Profile("RANGE", 10, 40)
    simulator = AsyncWorkloadSimulator(profile, seed=7, sleep=async_recording_sleep)
    reference = ProfileSampler(profile, seed=7)

    batch = await simulator.run_batch(4)

    assert batch.count == 4
    assert batch.total_io_time_ms == sum(reference.io_delay_ms() for _ in range(4))


@pytest.mark.asyncio
async def test_empty_batch_and_stress(async_recording_sleep: AsyncRecordingSleep) -> None:
    """Test run_batch(0) is all zeros and stress adds the extra burst."""
    simulator = AsyncWorkloadSimulator(Profile("TEN", 10, 10), sleep=async_recording_sleep)

    empty = await simulator.run_batch(0)
    stress = await simulator.run_stress(queries=3, cpu_ms=2)

    assert empty.model_dump() == {
        "count": 0,
        "total_io_time_ms": 0,
        "total_cpu_time_ms": 0,
        "total_mem_time_ms": 0,
        "total_rows": 0,
        "total_ms": 0,
    }
    assert stress.batch.total_io_time_ms == 30
    assert stress.cpu.elapsed_ms >= 2


@pytest.mark.asyncio
async def test_cpu_burst_targets_duration() -> None:
    """Test the async burst meets the requested duration."""
    result = await AsyncWorkloadSimulator(Profile("IDLE", 0, 0)).run_cpu_burst(20)
    assert result.elapsed_ms >= 20


@pytest.mark.asyncio
async def test_cpu_burst_is_awaitable_and_validates() -> None:
    """Test the async burst is a coroutine and rejects negative durations like the blocking one."""
    simulator = AsyncWorkloadSimulator(Profile("IDLE", 0, 0))

    assert inspect.iscoroutinefunction(simulator.run_cpu_burst)
    assert not inspect.iscoroutinefunction(WorkloadSimulator(Profile("IDLE", 0, 0)).run_cpu_burst)
    with pytest.raises(ValueError, match="duration_ms"):
        await simulator.run_cpu_burst(-1)


@pytest.mark.asyncio
async def test_waits_overlap_across_tasks() -> None:
    """Test concurrent queries suspend together instead of serialising."""
    simulator = AsyncWorkloadSimulator(Profile("FIFTY", 50, 50))

    started = time.perf_counter()
    results = await asyncio.gather(*(simulator.run_query(f"q{i}") for i in range(20)))
    elapsed = time.perf_counter() - started

    assert len(results) == 20
    assert elapsed < 0.5


@pytest.mark.asyncio
async def test_cancellation_propagates_promptly() -> None:
    """Test cancelling the task during the wait raises CancelledError quickly."""
    simulator = AsyncWorkloadSimulator(Profile("LONG", 5000, 5000))
    task = asyncio.create_task(simulator.run_query("long"))
    await asyncio.sleep(0.05)

    cancelled_at = time.perf_counter()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert time.perf_counter() - cancelled_at < CANCEL_GRACE_SECONDS
    assert task.cancelled()
