"""Exception hierarchy for the workload simulator."""


class SimulatorError(RuntimeError):
    """Base exception for workload simulator failures."""


class InvalidProfileError(SimulatorError, ValueError):
    """Raised when a profile's bounds are negative or inverted."""


class QueryCancelledError(SimulatorError):
    """Raised when the host cancels a simulated query during its I/O wait."""


class ResourceExhaustedError(SimulatorError, MemoryError):
    """Raised when the memory phase cannot obtain the requested allocation."""
