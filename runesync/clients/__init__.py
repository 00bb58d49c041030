"""Clients for reference data, vendor statistics and the local game client."""

from .base import (
    InventoryProvider,
    ReferenceDataProvider,
    SelectionProvider,
    SessionProvider,
    VendorDataProvider,
)
from .ddragon import DataDragonClient
from .lcu import LcuClient, Lockfile, parse_lockfile
from .vendor import UggClient

__all__ = [
    "DataDragonClient",
    "InventoryProvider",
    "LcuClient",
    "Lockfile",
    "ReferenceDataProvider",
    "SelectionProvider",
    "SessionProvider",
    "UggClient",
    "VendorDataProvider",
    "parse_lockfile",
]
