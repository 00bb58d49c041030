"""Data models, normalization, catalogs and configuration."""

from .config import ConfigManager, ConfigError
from .models import (
    IDLE,
    BuildCatalog,
    BuildRecord,
    ChampSelectSession,
    CharacterEntry,
    CharacterIdentity,
    Config,
    GameMode,
    GamePhase,
    ItemSet,
    PageInventorySnapshot,
    PageSpec,
    ReconcilerState,
    ReconcilerStatus,
    Role,
    RunePage,
    RunePageInfo,
    RuneTree,
    RuneTreeIndex,
    SummonerSpells,
    TeamMember,
)
from .catalog import CatalogStore, assemble_catalog, load_or_assemble

__all__ = [
    "IDLE",
    "BuildCatalog",
    "BuildRecord",
    "CatalogStore",
    "ChampSelectSession",
    "CharacterEntry",
    "CharacterIdentity",
    "Config",
    "ConfigError",
    "ConfigManager",
    "GameMode",
    "GamePhase",
    "ItemSet",
    "PageInventorySnapshot",
    "PageSpec",
    "ReconcilerState",
    "ReconcilerStatus",
    "Role",
    "RunePage",
    "RunePageInfo",
    "RuneTree",
    "RuneTreeIndex",
    "SummonerSpells",
    "TeamMember",
    "assemble_catalog",
    "load_or_assemble",
]
