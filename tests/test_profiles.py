"""Tests for workload profiles and sampling."""

import pytest

from workload_sim.exceptions import InvalidProfileError
from workload_sim.profiles import CATALOG, DEFAULT_PROFILE, MIB, Profile, get_profile
from workload_sim.sampling import ProfileSampler

SAMPLES = 2000


class TestProfile:
    """Test Profile construction and phase flags."""

    def test_catalog_bounds(self) -> None:
        """Test the catalog carries the documented bounds."""
        assert set(CATALOG) == {
            "LIGHT",
            "MEDIUM",
            "HEAVY",
            "IO_PLUS_CPU",
            "IO_PLUS_MEMORY",
            "REALISTIC_MIXED",
            "CPU_INTENSIVE",
            "EXTREME",
        }
        extreme = CATALOG["EXTREME"]
        assert (extreme.io_min_ms, extreme.io_max_ms) == (200, 1000)
        assert (extreme.cpu_min_ms, extreme.cpu_max_ms) == (50, 200)
        assert (extreme.mem_min_bytes, extreme.mem_max_bytes) == (5 * MIB, 10 * MIB)
        assert CATALOG["REALISTIC_MIXED"].mem_min_bytes == 512 * 1024
        assert DEFAULT_PROFILE is CATALOG["MEDIUM"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"io_min_ms": 10, "io_max_ms": 5},
            {"io_min_ms": 0, "io_max_ms": 0, "cpu_min_ms": 20, "cpu_max_ms": 10},
            {"io_min_ms": 0, "io_max_ms": 0, "mem_min_bytes": 200, "mem_max_bytes": 100},
            {"io_min_ms": -1, "io_max_ms": 5},
            {"io_min_ms": 0, "io_max_ms": 0, "mem_min_bytes": -100, "mem_max_bytes": 0},
        ],
    )
    def test_invalid_bounds_rejected_at_construction(self, kwargs: dict[str, int]) -> None:
        """Test inverted or negative bounds raise InvalidProfileError."""
        with pytest.raises(InvalidProfileError):
            Profile("BROKEN", **kwargs)

    def test_invalid_profile_is_value_error(self) -> None:
        """Test InvalidProfileError can be handled as a ValueError."""
        with pytest.raises(ValueError, match="io minimum 10 exceeds maximum 5"):
            Profile("BROKEN", 10, 5)

    def test_only_double_zero_skips_a_phase(self) -> None:
        """Test (0, 0) skips a phase while (0, n) keeps it active."""
        skipped = Profile("SKIP", 0, 0)
        assert not skipped.has_io
        assert not skipped.has_cpu
        assert not skipped.has_memory

        active = Profile("ACTIVE", 0, 5, 0, 5, 0, 150)
        assert active.has_io
        assert active.has_cpu
        assert active.has_memory

    def test_profile_is_immutable(self) -> None:
        """Test profiles cannot be mutated after construction."""
        profile = get_profile("light")
        with pytest.raises(AttributeError):
            profile.io_min_ms = 0  # type: ignore[misc]

    def test_get_profile_unknown(self) -> None:
        """Test unknown names raise KeyError listing the catalog."""
        with pytest.raises(KeyError, match="Known profiles"):
            get_profile("bogus")


class TestProfileSampler:
    """Test uniform sampling from profile bounds."""

    def test_io_samples_stay_in_bounds_and_cover_them(self) -> None:
        """Test sampled waits lie in [min, max] and approach both ends."""
        sampler = ProfileSampler(CATALOG["LIGHT"], seed=1234)
        samples = [sampler.io_delay_ms() for _ in range(SAMPLES)]

        assert all(10 <= sample <= 50 for sample in samples)
        assert min(samples) < 11
        assert max(samples) > 49

    def test_degenerate_range_returns_constant(self) -> None:
        """Test min == max always samples that value."""
        sampler = ProfileSampler(Profile("FIXED", 50, 50, 10, 10, 100, 100))
        assert {sampler.io_delay_ms() for _ in range(20)} == {50}
        assert sampler.cpu_target_ms() == 10
        assert sampler.memory_target_bytes() == 100

    def test_skipped_phases_sample_nothing(self) -> None:
        """Test skipped phases report no target."""
        sampler = ProfileSampler(Profile("IDLE", 0, 0))
        assert sampler.io_delay_ms() == 0
        assert sampler.cpu_target_ms() is None
        assert sampler.memory_target_bytes() is None

    def test_zero_inclusive_range_can_sample_zero_bytes(self) -> None:
        """Test an active (0, n) memory range samples integers within bounds."""
        sampler = ProfileSampler(Profile("SMALL", 0, 0, 0, 0, 0, 150), seed=3)
        samples = [sampler.memory_target_bytes() for _ in range(SAMPLES)]
        assert all(isinstance(sample, int) and 0 <= sample <= 150 for sample in samples)
        assert min(samples) == 0  # type: ignore[type-var]

    def test_seed_reproduces_sequence(self) -> None:
        """Test equal seeds produce equal target sequences."""
        first = ProfileSampler(CATALOG["REALISTIC_MIXED"], seed=99)
        second = ProfileSampler(CATALOG["REALISTIC_MIXED"], seed=99)
        assert [first.io_delay_ms() for _ in range(10)] == [second.io_delay_ms() for _ in range(10)]
