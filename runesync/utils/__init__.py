"""Utility modules."""

from .logger import setup_logger, get_logger
from .error_handler import (
    ErrorHandler,
    ErrorResolution,
    ErrorSeverity,
    ErrorType,
    IncompleteRunePage,
    InvalidReference,
    InventoryFull,
    MissingField,
    NoBuildFound,
    RuneSyncError,
    TransportFailure,
    VersionUnavailable,
)

__all__ = [
    "ErrorHandler",
    "ErrorResolution",
    "ErrorSeverity",
    "ErrorType",
    "IncompleteRunePage",
    "InvalidReference",
    "InventoryFull",
    "MissingField",
    "NoBuildFound",
    "RuneSyncError",
    "TransportFailure",
    "VersionUnavailable",
    "get_logger",
    "setup_logger",
]
