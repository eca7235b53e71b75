"""Synthetic workload simulator for comparing concurrency strategies."""

from .exceptions import InvalidProfileError, QueryCancelledError, ResourceExhaustedError, SimulatorError
from .profiles import CATALOG, DEFAULT_PROFILE, Profile, get_profile
from .results import BatchResult, CpuResult, QueryResult, StressResult
from .simulator import AsyncWorkloadSimulator, InterruptibleSleep, WorkloadSimulator

__all__ = [
    "CATALOG",
    "DEFAULT_PROFILE",
    "AsyncWorkloadSimulator",
    "BatchResult",
    "CpuResult",
    "InterruptibleSleep",
    "InvalidProfileError",
    "Profile",
    "QueryCancelledError",
    "QueryResult",
    "ResourceExhaustedError",
    "SimulatorError",
    "StressResult",
    "WorkloadSimulator",
    "get_profile",
]
