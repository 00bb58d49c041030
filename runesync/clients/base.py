"""Interfaces of the services runesync talks to."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from runesync.data.models import (
    ChampSelectSession,
    CharacterIdentity,
    GameMode,
    GamePhase,
    PageInventorySnapshot,
    PageSpec,
    RuneTreeIndex,
)


class ReferenceDataProvider(ABC):
    """Official patch, champion and rune tree data."""

    @abstractmethod
    def get_latest_version(self) -> str:
        """Newest reference data version, e.g. "15.23.1"."""
        pass

    @abstractmethod
    def get_champions(self, version: str) -> List[CharacterIdentity]:
        pass

    @abstractmethod
    def get_rune_trees(self, version: str) -> RuneTreeIndex:
        pass


class VendorDataProvider(ABC):
    """Third-party build statistics."""

    @abstractmethod
    def get_current_patch_version(self) -> str:
        """
        Patch the vendor currently serves, e.g. "15_23".

        Raises:
            VersionUnavailable: The version cannot be discovered
        """
        pass

    @abstractmethod
    def get_role_data(self, character: CharacterIdentity, patch_version: str) -> Dict[str, Any]:
        """Role key -> positional role node for one champion."""
        pass


class SessionProvider(ABC):
    """Read-only view of the live client session."""

    @abstractmethod
    def get_phase(self) -> GamePhase:
        pass

    @abstractmethod
    def get_champ_select(self) -> ChampSelectSession:
        pass

    @abstractmethod
    def get_game_mode(self) -> GameMode:
        pass


class InventoryProvider(ABC):
    """Rune page inventory of the live client."""

    @abstractmethod
    def list_pages(self) -> PageInventorySnapshot:
        pass

    @abstractmethod
    def create_page(self, spec: PageSpec) -> None:
        pass

    @abstractmethod
    def delete_page(self, page_id: int) -> None:
        pass


class SelectionProvider(ABC):
    """Champion select spell and skin selection."""

    @abstractmethod
    def set_selection(
        self,
        spell1_id: int,
        spell2_id: int,
        skin_id: Optional[int] = None,
    ) -> None:
        pass
