"""Result models returned by the workload simulator."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


class QueryResult(BaseModel):
    """Outcome of one simulated query."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Caller supplied query label")
    io_time_ms: float = Field(default=0.0, ge=0, description="Requested I/O suspension")
    cpu_time_ms: float = Field(default=0.0, ge=0, description="Measured CPU burn time")
    mem_time_ms: float = Field(default=0.0, ge=0, description="Measured allocation time")
    allocated_bytes: int = Field(default=0, ge=0, description="Bytes held for the result set")
    rows: int = Field(default=0, ge=0, description="Simulated result rows")
    total_ms: float = Field(default=0.0, ge=0, description="Sum of all phase durations")


class BatchResult(BaseModel):
    """Aggregate of sequentially executed queries."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(default=0, ge=0)
    total_io_time_ms: float = 0.0
    total_cpu_time_ms: float = 0.0
    total_mem_time_ms: float = 0.0
    total_rows: int = 0
    total_ms: float = 0.0

    @classmethod
    def aggregate(cls, results: Iterable[QueryResult]) -> BatchResult:
        """Sum per-query results in execution order.

        Args:
            results: Query results in the order they ran.

        Returns:
            The aggregate; all zeros when ``results`` is empty.

        """
        collected = list(results)
        return cls(
            count=len(collected),
            total_io_time_ms=sum(r.io_time_ms for r in collected),
            total_cpu_time_ms=sum(r.cpu_time_ms for r in collected),
            total_mem_time_ms=sum(r.mem_time_ms for r in collected),
            total_rows=sum(r.rows for r in collected),
            total_ms=sum(r.total_ms for r in collected),
        )


class CpuResult(BaseModel):
    """Outcome of a CPU burn."""

    model_config = ConfigDict(frozen=True)

    target_ms: float = Field(ge=0)
    elapsed_ms: float = Field(ge=0, description="Actual burn time, never below the target")
    operations: int = Field(ge=0, description="Work units performed")
    checksum: int = Field(description="Fold of the final digest")


class StressResult(BaseModel):
    """A batch of queries followed by an extra CPU burst."""

    model_config = ConfigDict(frozen=True)

    batch: BatchResult
    cpu: CpuResult
    total_ms: float
