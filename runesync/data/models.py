"""Data models for configuration, reference data, builds and client state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


FLASH_SPELL_ID = 4


class Role(Enum):
    """Lane assignment. Values are the vendor's numeric role keys."""
    UNKNOWN = 0
    JUNGLE = 1
    SUPPORT = 2
    BOTTOM = 3
    TOP = 4
    MID = 5

    @property
    def label(self) -> str:
        """Display name used in page titles and file names ("Mid", "Top"...)."""
        return self.name.capitalize()

    @classmethod
    def from_vendor_key(cls, key: int) -> "Role":
        """Map a vendor role key; unknown numbers become UNKNOWN."""
        try:
            return cls(int(key))
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def from_position(cls, position: Optional[str]) -> "Role":
        """Map a client assignedPosition string ("middle", "utility"...)."""
        return _POSITION_ROLES.get((position or "").strip().lower(), cls.UNKNOWN)


_POSITION_ROLES: Dict[str, Role] = {
    "top": Role.TOP,
    "jungle": Role.JUNGLE,
    "middle": Role.MID,
    "mid": Role.MID,
    "bottom": Role.BOTTOM,
    "bot": Role.BOTTOM,
    "utility": Role.SUPPORT,
    "support": Role.SUPPORT,
}


class GamePhase(Enum):
    """Client gameflow phase, collapsed to what reconciliation cares about."""
    LOBBY = "Lobby"
    CHAMP_SELECT = "ChampSelect"
    IN_PROGRESS = "InProgress"
    OTHER = "Other"

    @classmethod
    def from_client(cls, phase: Optional[str]) -> "GamePhase":
        """Map a raw gameflow phase string; anything unrecognised is OTHER."""
        for member in cls:
            if member.value == phase:
                return member
        return cls.OTHER


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuneTree:
    """One official rune tree (style) with its slots in canonical order."""
    id: int
    key: str = ""
    name: str = ""
    slots: Tuple[FrozenSet[int], ...] = ()


@dataclass(frozen=True)
class RuneTreeIndex:
    """Official rune trees for one patch. Loaded once, never mutated."""
    trees: Tuple[RuneTree, ...] = ()

    def get_tree(self, tree_id: int) -> Optional[RuneTree]:
        """Find a tree by ID."""
        for tree in self.trees:
            if tree.id == tree_id:
                return tree
        return None

    @classmethod
    def from_reference(cls, data: List[dict]) -> "RuneTreeIndex":
        """
        Build the index from a runesReforged.json document.

        Args:
            data: List of trees, each {"id", "key", "name", "slots": [{"runes": [{"id"}]}]}
        """
        trees = []
        for tree in data:
            slots = tuple(
                frozenset(int(rune["id"]) for rune in slot.get("runes", []))
                for slot in tree.get("slots", [])
            )
            trees.append(RuneTree(
                id=int(tree["id"]),
                key=str(tree.get("key", "")),
                name=str(tree.get("name", "")),
                slots=slots,
            ))
        return cls(trees=tuple(trees))


@dataclass(frozen=True, order=True)
class CharacterIdentity:
    """A champion. Ordered and compared by numeric key only."""
    key: int
    id: str = field(default="", compare=False)     # Data Dragon id, e.g. "MonkeyKing"
    name: str = field(default="", compare=False)   # Display name, e.g. "Wukong"


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RunePage:
    """Normalized rune page: 4 primary, 2 secondary, 3 shard IDs."""
    primary_tree_id: int
    secondary_tree_id: int
    rune_ids: Tuple[int, ...]
    confidence_score: float = 0.0


@dataclass(frozen=True)
class ItemSet:
    """Labelled, ordered list of item IDs."""
    label: str
    item_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class SummonerSpells:
    """Recommended summoner spell pair."""
    first: int
    second: int


@dataclass(frozen=True)
class BuildRecord:
    """Recommended build for one champion in one role."""
    role: Role
    rune_page: RunePage
    item_sets: Tuple[ItemSet, ...]
    skill_order: str
    summoner_spells: SummonerSpells

    @property
    def sort_key(self) -> Tuple[float, int]:
        """Higher confidence first, role value breaks ties."""
        return (-self.rune_page.confidence_score, self.role.value)

    def matches_role(self, role: Role) -> bool:
        """Whether this record is the one applied for ``role``."""
        return self.role == role


@dataclass(frozen=True)
class CharacterEntry:
    """A champion with its builds, best first (at most one per role)."""
    character: CharacterIdentity
    builds: Tuple[BuildRecord, ...] = ()

    def build_for(self, role: Role) -> Optional[BuildRecord]:
        """Exact role lookup. UNKNOWN is never a target."""
        if role == Role.UNKNOWN:
            return None
        for build in self.builds:
            if build.matches_role(role):
                return build
        return None

    def best_build(self) -> Optional[BuildRecord]:
        """Highest-confidence build whose role is known."""
        for build in self.builds:
            if build.role != Role.UNKNOWN:
                return build
        return None


@dataclass(frozen=True)
class BuildCatalog:
    """All builds for one vendor patch, entries sorted by champion key."""
    patch_version: str
    entries: Tuple[CharacterEntry, ...] = ()

    def find_entry(self, character_key: int) -> Optional[CharacterEntry]:
        """Look up a champion by numeric key."""
        for entry in self.entries:
            if entry.character.key == character_key:
                return entry
        return None

    def find_build(
        self,
        character_key: int,
        role: Role,
        fallback: bool = False,
    ) -> Optional[BuildRecord]:
        """
        Find the build to apply.

        Args:
            character_key: Champion numeric key
            role: Assigned role
            fallback: Use the champion's best build when no exact role exists

        Returns:
            BuildRecord or None
        """
        entry = self.find_entry(character_key)
        if entry is None:
            return None
        build = entry.build_for(role)
        if build is None and fallback:
            build = entry.best_build()
        return build

    @property
    def build_count(self) -> int:
        """Total number of builds across all champions."""
        return sum(len(entry.builds) for entry in self.entries)


# ---------------------------------------------------------------------------
# Live client state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TeamMember:
    """One player in the local team's champion select roster."""
    cell_id: int
    summoner_id: int = 0
    champion_id: int = 0
    assigned_position: str = ""
    spell1_id: int = 0
    spell2_id: int = 0

    @property
    def role(self) -> Role:
        return Role.from_position(self.assigned_position)

    @property
    def spells(self) -> Tuple[int, int]:
        return (self.spell1_id, self.spell2_id)


@dataclass(frozen=True)
class ChampSelectSession:
    """Champion select roster as seen by the local player."""
    local_summoner_id: int = 0
    local_cell_id: int = -1
    my_team: Tuple[TeamMember, ...] = ()

    def local_member(self) -> Optional[TeamMember]:
        """Find the local player by summoner ID, or by cell ID if the ID is unknown."""
        if self.local_summoner_id:
            for member in self.my_team:
                if member.summoner_id == self.local_summoner_id:
                    return member
            return None
        for member in self.my_team:
            if member.cell_id == self.local_cell_id:
                return member
        return None


@dataclass(frozen=True)
class GameMode:
    """Game mode and the spells it disallows (None = no constraint information)."""
    name: str = ""
    disallowed_spells: Optional[FrozenSet[int]] = None


@dataclass(frozen=True)
class RunePageInfo:
    """Existing rune page in the client inventory."""
    id: int
    name: str = ""
    is_deletable: bool = False


@dataclass(frozen=True)
class PageInventorySnapshot:
    """Pages in inventory order plus slot usage."""
    pages: Tuple[RunePageInfo, ...] = ()
    owned_page_count: int = 0   # Slots in use by custom (deletable) pages
    max_page_count: int = 0     # Slots the account owns

    @property
    def is_full(self) -> bool:
        return self.owned_page_count >= self.max_page_count


@dataclass(frozen=True)
class PageSpec:
    """A rune page to create."""
    name: str
    primary_tree_id: int
    secondary_tree_id: int
    rune_ids: Tuple[int, ...]


# ---------------------------------------------------------------------------
# Reconciler state
# ---------------------------------------------------------------------------

class ReconcilerStatus(Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class ReconcilerState:
    """
    What the reconciler last applied.

    IDLE carries no champion; TRACKING remembers the (champion, role) pair
    whose build is on the client, so a repeat of it is a no-op.
    """
    last_character_id: Optional[int] = None
    last_role: Optional[Role] = None

    @property
    def status(self) -> ReconcilerStatus:
        if self.last_character_id is None:
            return ReconcilerStatus.IDLE
        return ReconcilerStatus.TRACKING

    def matches(self, character_id: int, role: Role) -> bool:
        return (
            self.status == ReconcilerStatus.TRACKING
            and self.last_character_id == character_id
            and self.last_role == role
        )

    @classmethod
    def applied(cls, character_id: int, role: Role) -> "ReconcilerState":
        return cls(last_character_id=character_id, last_role=role)


IDLE = ReconcilerState()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_INSTALL_DIR = r"C:\Riot Games\League of Legends"


@dataclass
class Config:
    """Main configuration."""

    # General
    data_dir: str = "data"
    page_marker: str = "RS"

    # Local client
    install_dir: str = DEFAULT_INSTALL_DIR
    lockfile: str = ""  # Empty: LOL_LOCKFILE env var, then install_dir/lockfile
    client_timeout: float = 2.0

    # Vendor
    vendor_region: str = "12"   # World
    vendor_rank: str = "10"     # Platinum+
    vendor_api_version: str = "1.5"
    vendor_overview_version: str = "1.5.0"
    vendor_concurrency: int = 5
    vendor_timeout: float = 10.0

    # Sync loop
    poll_interval: float = 2.5
    in_game_poll_interval: float = 10.0
    role_fallback: bool = True
    apply_spells: bool = True
    flash_slot: str = "first"  # first (D) or second (F)

    # Item set export
    export_enabled: bool = True
    builds_dir: str = ""  # Empty: install_dir/Config/Champions

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
