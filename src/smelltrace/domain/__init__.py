from .errors import (
    ConfigurationError,
    ExportError,
    InvalidSmellError,
    InvariantViolation,
    ScorerContractError,
    SmellTraceError,
    TrackerStateError,
)
from .smell import Element, Level, Smell, SmellType
from .version import Version

__all__ = [
    "ConfigurationError",
    "Element",
    "ExportError",
    "InvalidSmellError",
    "InvariantViolation",
    "Level",
    "ScorerContractError",
    "Smell",
    "SmellTraceError",
    "SmellType",
    "TrackerStateError",
    "Version",
]
