"""Workload profiles bounding the I/O, CPU and memory phases of a query."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from .exceptions import InvalidProfileError

KIB = 1024
MIB = 1024 * KIB


@dataclass(frozen=True, slots=True)
class Profile:
    """Immutable bounds for one simulated query.

    Durations are milliseconds and sizes are bytes. A phase whose bounds are
    both zero is skipped entirely; any other range (including ``0..n``) is an
    active phase that may sample exactly zero.
    """

    name: str
    io_min_ms: float
    io_max_ms: float
    cpu_min_ms: float = 0
    cpu_max_ms: float = 0
    mem_min_bytes: int = 0
    mem_max_bytes: int = 0

    def __post_init__(self) -> None:
        """Reject negative or inverted bounds.

        Raises:
            InvalidProfileError: If any bound is negative or a minimum exceeds its maximum.

        """
        for phase, low, high in (
            ("io", self.io_min_ms, self.io_max_ms),
            ("cpu", self.cpu_min_ms, self.cpu_max_ms),
            ("mem", self.mem_min_bytes, self.mem_max_bytes),
        ):
            if low < 0 or high < 0:
                msg = f"Profile '{self.name}': {phase} bounds must be non-negative, got ({low}, {high})."
                raise InvalidProfileError(msg)
            if low > high:
                msg = f"Profile '{self.name}': {phase} minimum {low} exceeds maximum {high}."
                raise InvalidProfileError(msg)

    @property
    def has_io(self) -> bool:
        """Whether the I/O phase runs."""
        return not (self.io_min_ms == 0 and self.io_max_ms == 0)

    @property
    def has_cpu(self) -> bool:
        """Whether the CPU phase runs."""
        return not (self.cpu_min_ms == 0 and self.cpu_max_ms == 0)

    @property
    def has_memory(self) -> bool:
        """Whether the memory phase runs."""
        return not (self.mem_min_bytes == 0 and self.mem_max_bytes == 0)

    def describe(self) -> dict[str, float | int | str]:
        """Return the profile bounds as a flat mapping for logs and responses."""
        return {
            "name": self.name,
            "io_min_ms": self.io_min_ms,
            "io_max_ms": self.io_max_ms,
            "cpu_min_ms": self.cpu_min_ms,
            "cpu_max_ms": self.cpu_max_ms,
            "mem_min_bytes": self.mem_min_bytes,
            "mem_max_bytes": self.mem_max_bytes,
        }


LIGHT = Profile("LIGHT", 10, 50)
MEDIUM = Profile("MEDIUM", 50, 200)
HEAVY = Profile("HEAVY", 100, 500)
IO_PLUS_CPU = Profile("IO_PLUS_CPU", 50, 200, 10, 50)
IO_PLUS_MEMORY = Profile("IO_PLUS_MEMORY", 50, 200, 0, 0, 1 * MIB, 5 * MIB)
REALISTIC_MIXED = Profile("REALISTIC_MIXED", 50, 200, 20, 100, 512 * KIB, 2 * MIB)
CPU_INTENSIVE = Profile("CPU_INTENSIVE", 10, 50, 100, 500)
EXTREME = Profile("EXTREME", 200, 1000, 50, 200, 5 * MIB, 10 * MIB)

DEFAULT_PROFILE = MEDIUM

CATALOG: MappingProxyType[str, Profile] = MappingProxyType({
    profile.name: profile
    for profile in (
        LIGHT,
        MEDIUM,
        HEAVY,
        IO_PLUS_CPU,
        IO_PLUS_MEMORY,
        REALISTIC_MIXED,
        CPU_INTENSIVE,
        EXTREME,
    )
})


def get_profile(name: str) -> Profile:
    """Look up a catalog profile by case-insensitive name.

    Args:
        name: The profile name, e.g. ``"realistic_mixed"``.

    Returns:
        The matching catalog profile.

    Raises:
        KeyError: If the name is not in the catalog.

    """
    key = name.strip().upper()
    try:
        return CATALOG[key]
    except KeyError:
        msg = f"Unknown workload profile '{name}'. Known profiles: {', '.join(CATALOG)}."
        raise KeyError(msg) from None
