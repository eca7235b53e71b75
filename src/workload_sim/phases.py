"""Resource consumption phases shared by the blocking and async simulators."""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass

from .exceptions import ResourceExhaustedError
from .results import CpuResult

ROW_BYTES = 100
PAGE_BYTES = 4096
DEFAULT_CHECK_INTERVAL = 256

_SEED = b"workload-sim"


def burn_cpu(target_ms: float, check_interval: int = DEFAULT_CHECK_INTERVAL) -> CpuResult:
    """Hash repeatedly until at least ``target_ms`` of wall time has passed.

    The clock is read once per ``check_interval`` hashes. Each hash feeds the
    next, so the chain cannot be skipped.

    Args:
        target_ms: Minimum burn duration in milliseconds.
        check_interval: Work units between clock checks.

    Returns:
        The measured burn; ``elapsed_ms`` is never below ``target_ms``.

    """
    if check_interval < 1:
        msg = f"check_interval must be at least 1, got {check_interval}."
        raise ValueError(msg)

    digest = _SEED
    operations = 0
    start = time.perf_counter()
    elapsed_ms = 0.0
    while True:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if elapsed_ms >= target_ms:
            break
        for _ in range(check_interval):
            digest = hashlib.blake2b(digest, digest_size=16).digest()
        operations += check_interval

    return CpuResult(
        target_ms=target_ms,
        elapsed_ms=elapsed_ms,
        operations=operations,
        checksum=int.from_bytes(digest[:8], "big"),
    )


@dataclass(slots=True)
class ResultSet:
    """A retained allocation standing in for a fetched result set."""

    buffer: bytearray

    @property
    def size(self) -> int:
        return len(self.buffer)

    @property
    def rows(self) -> int:
        return rows_for(self.size)


def rows_for(target_bytes: int) -> int:
    """Number of ~100 byte rows represented by ``target_bytes``."""
    return target_bytes // ROW_BYTES


def allocate_result_set(target_bytes: int) -> ResultSet:
    """Allocate and touch ``target_bytes`` so the pages are resident.

    Args:
        target_bytes: Allocation size in bytes.

    Returns:
        The allocation; callers keep it referenced for as long as it should count.

    Raises:
        ResourceExhaustedError: If the interpreter cannot satisfy the allocation.

    """
    try:
        buffer = bytearray(target_bytes)
        # one write per page, otherwise the zeroed mapping may never be committed
        buffer[::PAGE_BYTES] = b"\x01" * len(range(0, target_bytes, PAGE_BYTES))
    except MemoryError as exc:
        msg = f"Could not allocate {target_bytes} bytes for the simulated result set."
        raise ResourceExhaustedError(msg) from exc
    return ResultSet(buffer)
