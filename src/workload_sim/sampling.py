"""Seedable sampling of phase targets from a profile's bounds."""

from __future__ import annotations

import random

from .profiles import Profile


class ProfileSampler:
    """Draws I/O, CPU and memory targets uniformly from a profile's ranges.

    Each simulator owns its sampler, so a fixed seed reproduces the exact
    sequence of targets for that simulator.
    """

    def __init__(self, profile: Profile, seed: int | None = None) -> None:
        self.profile = profile
        self._random = random.Random(seed)

    def _uniform(self, low: float, high: float) -> float:
        return low + self._random.random() * (high - low)

    def io_delay_ms(self) -> float:
        """Sample the I/O wait, or 0 when the phase is skipped."""
        if not self.profile.has_io:
            return 0.0
        return self._uniform(self.profile.io_min_ms, self.profile.io_max_ms)

    def cpu_target_ms(self) -> float | None:
        """Sample the CPU burn target, or ``None`` when the phase is skipped."""
        if not self.profile.has_cpu:
            return None
        return self._uniform(self.profile.cpu_min_ms, self.profile.cpu_max_ms)

    def memory_target_bytes(self) -> int | None:
        """Sample the allocation size, or ``None`` when the phase is skipped."""
        if not self.profile.has_memory:
            return None
        return int(self._uniform(self.profile.mem_min_bytes, self.profile.mem_max_bytes))
