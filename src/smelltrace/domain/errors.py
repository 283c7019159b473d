class SmellTraceError(Exception):
    """Base exception for domain-specific errors."""


class TrackerStateError(SmellTraceError):
    """Tracker used out of order: stale/duplicate version or call after finalize()."""


class InvariantViolation(SmellTraceError):
    """The track graph lost an invariant (missing origin, missing predecessor...)."""


class ScorerContractError(SmellTraceError):
    """A similarity scorer returned NaN or a value outside [0, 1]."""


class InvalidSmellError(SmellTraceError):
    """Malformed smell or version records in the input."""


class ConfigurationError(SmellTraceError):
    """Bad CLI args or unusable tracker config (e.g., threshold out of range)."""


class ExportError(SmellTraceError):
    """Problems while writing reports or graph exports."""
