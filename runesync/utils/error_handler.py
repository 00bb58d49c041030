"""Error taxonomy and handling policy for runesync."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from runesync.utils.logger import get_logger


class RuneSyncError(Exception):
    """Base class for every error raised by runesync."""
    pass


class MissingField(RuneSyncError):
    """A required positional field is absent or has the wrong type."""
    pass


class InvalidReference(RuneSyncError):
    """An ID does not resolve against reference data."""
    pass


class IncompleteRunePage(RuneSyncError):
    """A rune page cannot be made to hold exactly nine selections."""
    pass


class NoBuildFound(RuneSyncError):
    """The catalog has no build for the live selection."""
    pass


class InventoryFull(RuneSyncError):
    """Every page slot is in use and none of them can be deleted."""
    pass


class TransportFailure(RuneSyncError):
    """An HTTP request to a collaborator failed."""
    pass


class VersionUnavailable(RuneSyncError):
    """The vendor's current patch version could not be discovered."""
    pass


class ErrorSeverity(Enum):
    """How far an error propagates."""
    RECORD = auto()   # Drop one record or champion, keep going
    TICK = auto()     # End the current reconciliation tick, retry next tick
    FATAL = auto()    # Stop the process


class ErrorType(Enum):
    """Kinds of errors runesync distinguishes."""
    MISSING_FIELD = "missing_field"
    INVALID_REFERENCE = "invalid_reference"
    INCOMPLETE_RUNE_PAGE = "incomplete_rune_page"
    NO_BUILD_FOUND = "no_build_found"
    INVENTORY_FULL = "inventory_full"
    TRANSPORT_FAILURE = "transport_failure"
    VERSION_UNAVAILABLE = "version_unavailable"
    UNEXPECTED = "unexpected"


ERROR_TYPES: Dict[type, ErrorType] = {
    MissingField: ErrorType.MISSING_FIELD,
    InvalidReference: ErrorType.INVALID_REFERENCE,
    IncompleteRunePage: ErrorType.INCOMPLETE_RUNE_PAGE,
    NoBuildFound: ErrorType.NO_BUILD_FOUND,
    InventoryFull: ErrorType.INVENTORY_FULL,
    TransportFailure: ErrorType.TRANSPORT_FAILURE,
    VersionUnavailable: ErrorType.VERSION_UNAVAILABLE,
}

ERROR_CLASSIFICATION: Dict[ErrorType, ErrorSeverity] = {
    ErrorType.MISSING_FIELD: ErrorSeverity.RECORD,
    ErrorType.INVALID_REFERENCE: ErrorSeverity.RECORD,
    ErrorType.INCOMPLETE_RUNE_PAGE: ErrorSeverity.RECORD,
    ErrorType.NO_BUILD_FOUND: ErrorSeverity.TICK,
    ErrorType.INVENTORY_FULL: ErrorSeverity.TICK,
    ErrorType.TRANSPORT_FAILURE: ErrorSeverity.TICK,
    ErrorType.VERSION_UNAVAILABLE: ErrorSeverity.FATAL,
    ErrorType.UNEXPECTED: ErrorSeverity.TICK,
}


def classify(error: BaseException) -> ErrorType:
    """Map an exception onto its ErrorType (unknown exceptions are UNEXPECTED)."""
    for error_class in type(error).__mro__:
        if error_class in ERROR_TYPES:
            return ERROR_TYPES[error_class]
    return ErrorType.UNEXPECTED


@dataclass
class SyncError:
    """One handled error."""
    error_type: ErrorType
    severity: ErrorSeverity
    scope: str
    operation: str
    message: str = ""
    timestamp: float = field(default_factory=time.time)


class ErrorResolution(Enum):
    """What the caller should do after an error was handled."""
    CONTINUE = auto()   # Skip the failed unit and carry on
    RESET = auto()      # Forget the applied selection, retry on the next tick
    STOP = auto()       # Give up


class ErrorHandler:
    """
    Central error policy.

    Every handled error is logged with its scope, kept in a bounded history
    and turned into a resolution. Too many consecutive tick failures
    escalate to STOP so a dead client does not spin forever.
    """

    def __init__(self, max_consecutive_failures: int = 0, max_history: int = 200):
        """
        Initialize error handler.

        Args:
            max_consecutive_failures: Tick failures in a row before STOP
                (0 disables escalation)
            max_history: Number of errors kept for reporting
        """
        self.max_consecutive_failures = max_consecutive_failures
        self.max_history = max_history
        self.log = get_logger()

        self._history: List[SyncError] = []
        self._consecutive_failures = 0

    def handle(
        self,
        error: BaseException,
        scope: str = "-",
        operation: str = "",
    ) -> ErrorResolution:
        """
        Handle an error.

        Args:
            error: The exception that was caught
            scope: What was being processed (champion, "Ahri Mid", ...)
            operation: What was being done ("normalize", "create page", ...)

        Returns:
            ErrorResolution for the caller
        """
        error_type = classify(error)
        severity = ERROR_CLASSIFICATION[error_type]

        entry = SyncError(
            error_type=error_type,
            severity=severity,
            scope=scope,
            operation=operation,
            message=str(error),
        )
        self._history.append(entry)
        if len(self._history) > self.max_history:
            self._history.pop(0)

        log = get_logger(scope)

        if severity == ErrorSeverity.RECORD:
            log.warning(f"{operation} failed ({error_type.value}): {error}")
            return ErrorResolution.CONTINUE

        if severity == ErrorSeverity.FATAL:
            log.error(f"{operation} failed ({error_type.value}): {error}")
            return ErrorResolution.STOP

        self._consecutive_failures += 1
        log.error(
            f"{operation} failed ({error_type.value}): {error} "
            f"[{self._consecutive_failures} in a row]"
        )

        if (
            self.max_consecutive_failures
            and self._consecutive_failures >= self.max_consecutive_failures
        ):
            log.error("Too many consecutive failures - stopping")
            return ErrorResolution.STOP

        return ErrorResolution.RESET

    def record_success(self) -> None:
        """Reset the consecutive failure counter."""
        self._consecutive_failures = 0

    @property
    def consecutive_failures(self) -> int:
        """Tick failures since the last success."""
        return self._consecutive_failures

    def get_error_history(self) -> List[SyncError]:
        """Get error history."""
        return self._history.copy()

    def get_error_count(self, error_type: Optional[ErrorType] = None) -> int:
        """Count handled errors, optionally of one type."""
        if error_type is None:
            return len(self._history)
        return sum(1 for e in self._history if e.error_type == error_type)
