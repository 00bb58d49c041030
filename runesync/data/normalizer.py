"""
Vendor build data normalization.

The vendor's champion overview has no field names: every value sits at a
fixed array position. VendorRoleRecord wraps one role node and exposes one
named accessor per field; nothing else in the package indexes into vendor
data directly.

Role node layout (``node[0]`` is the stats array)::

    [0][0]     rune stats   [played, won, primary tree, secondary tree, [rune ids]]
    [0][1][2]  spells       [first, second]
    [0][2]     start items  [won, played, [item ids]]
    [0][3]     core items   [won, played, [item ids]]
    [0][4][3]  skill order  "QWEQ..."
    [0][5]     item options [[[item id, ...], ...], ...]
    [0][8][2]  stat shards  ["5008", "5008", "5002"]
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from runesync.data import confidence
from runesync.data.models import (
    BuildRecord,
    ItemSet,
    Role,
    RunePage,
    RuneTreeIndex,
    SummonerSpells,
)
from runesync.utils.error_handler import (
    IncompleteRunePage,
    InvalidReference,
    MissingField,
    RuneSyncError,
)
from runesync.utils.logger import get_logger


RUNE_PAGE_SIZE = 9

STARTING_BUILD = ("Starting Build", 2)
CORE_BUILD = ("Core Build", 3)
ITEM_OPTION_NAMES = ("Fourth", "Fifth", "Sixth")


def _lookup(node: Any, path: Sequence[int]) -> Any:
    """Follow an index path, returning None if any step is missing."""
    current = node
    for index in path:
        if isinstance(current, list) and -len(current) <= index < len(current):
            current = current[index]
        elif isinstance(current, dict) and index in current:
            current = current[index]
        elif isinstance(current, dict) and str(index) in current:
            current = current[str(index)]
        else:
            return None
    return current


def _as_int(value: Any) -> Optional[int]:
    """Integral JSON numbers only (bools and fractional floats are rejected)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class VendorRoleRecord:
    """Named accessors over one positional role node."""

    def __init__(self, node: Any):
        self.node = node

    def _int(self, path: Sequence[int], what: str) -> int:
        value = _as_int(_lookup(self.node, path))
        if value is None:
            raise MissingField(f"Failed to read {what}")
        return value

    def _number(self, path: Sequence[int], what: str) -> float:
        value = _as_number(_lookup(self.node, path))
        if value is None:
            raise MissingField(f"Failed to read {what}")
        return value

    def _list(self, path: Sequence[int], what: str) -> list:
        value = _lookup(self.node, path)
        if not isinstance(value, list):
            raise MissingField(f"Failed to read {what}")
        return value

    # ----- runes -----

    def rune_stats(self) -> list:
        """[0][0]: [played, won, primary tree, secondary tree, [rune ids]]."""
        return self._list((0, 0), "rune stats")

    def games_played(self) -> int:
        """[0][0][0]: games played with this rune page."""
        return self._int((0, 0, 0), "runes games played")

    def games_won(self) -> int:
        """[0][0][1]: games won with this rune page."""
        return self._int((0, 0, 1), "runes games won")

    def primary_tree_id(self) -> int:
        """[0][0][2]: primary tree ID."""
        return self._int((0, 0, 2), "runes primary tree")

    def secondary_tree_id(self) -> int:
        """[0][0][3]: secondary tree ID."""
        return self._int((0, 0, 3), "runes secondary tree")

    def rune_picks(self) -> List[int]:
        """[0][0][4]: rune IDs in vendor order."""
        picks = []
        for value in self._list((0, 0, 4), "rune picks"):
            rune_id = _as_int(value)
            if rune_id is None:
                raise MissingField(f"Failed to read rune pick {value!r}")
            picks.append(rune_id)
        return picks

    def stat_shards(self) -> List[int]:
        """[0][8][2]: stat shard IDs, sent by the vendor as numeric strings."""
        shards = []
        for value in self._list((0, 8, 2), "stat shards"):
            try:
                shards.append(int(str(value)))
            except ValueError:
                raise MissingField(f"Failed to read stat shard {value!r}")
        return shards

    # ----- items -----

    def item_set_counts(self, index: int, name: str) -> Tuple[float, float]:
        """[0][index][0] games won, [0][index][1] games played."""
        won = self._number((0, index, 0), f"item set: {name} for games_won")
        played = self._number((0, index, 1), f"item set: {name} for games_played")
        return won, played

    def item_set_items(self, index: int, name: str) -> List[int]:
        """[0][index][2]: item IDs. Unreadable entries become 0."""
        items = self._list((0, index, 2), f"item set: {name} items")
        return [_as_int(v) or 0 for v in items]

    def item_options(self) -> List[List[int]]:
        """
        [0][5]: option groups, each a list of [item id, ...stats] entries.

        Missing or malformed option data yields no groups.
        """
        groups = _lookup(self.node, (0, 5))
        if not isinstance(groups, list):
            return []
        result = []
        for group in groups:
            if not isinstance(group, list):
                continue
            result.append([_as_int(_lookup(entry, (0,))) or 0 for entry in group])
        return result

    # ----- skills & spells -----

    def skill_priority(self) -> str:
        """[0][4][3]: one character per skill-up."""
        value = _lookup(self.node, (0, 4, 3))
        if not isinstance(value, str):
            raise MissingField("Failed to read skill order")
        return value

    def summoner_spell_ids(self) -> Tuple[int, int]:
        """[0][1][2][0] and [0][1][2][1]."""
        first = self._int((0, 1, 2, 0), "first summoner spell")
        second = self._int((0, 1, 2, 1), "second summoner spell")
        return first, second


def reorder_runes(
    picks: List[int],
    primary_slots: Sequence[frozenset],
    secondary_slots: Sequence[frozenset],
) -> List[int]:
    """
    Put vendor rune picks into canonical slot order.

    Every primary slot must be matched. Secondary slots after the keystone
    row are optional. Picks that match no slot stay behind the reordered ones.

    Raises:
        IncompleteRunePage: A primary slot has no matching pick
    """
    runes = list(picks)
    position = 0

    for slot_number, slot in enumerate(primary_slots):
        match = next((i for i in range(position, len(runes)) if runes[i] in slot), None)
        if match is None:
            raise IncompleteRunePage(
                f"No rune for primary slot {slot_number} in {picks}"
            )
        runes[position], runes[match] = runes[match], runes[position]
        position += 1

    for slot in secondary_slots[1:]:
        match = next((i for i in range(position, len(runes)) if runes[i] in slot), None)
        if match is None:
            continue
        runes[position], runes[match] = runes[match], runes[position]
        position += 1

    return runes


def normalize_rune_page(record: VendorRoleRecord, rune_trees: RuneTreeIndex) -> RunePage:
    """Read, validate and reorder the rune page of a role node."""
    played = record.games_played()
    won = record.games_won()
    if played < 0 or won < 0 or won > played:
        raise MissingField(f"Inconsistent rune page counts: {won} won of {played} played")

    primary_id = record.primary_tree_id()
    secondary_id = record.secondary_tree_id()

    primary = rune_trees.get_tree(primary_id)
    if primary is None:
        raise InvalidReference(f"Primary tree {primary_id} is not a known rune tree")
    secondary = rune_trees.get_tree(secondary_id)
    if secondary is None:
        raise InvalidReference(f"Secondary tree {secondary_id} is not a known rune tree")

    runes = reorder_runes(record.rune_picks(), primary.slots, secondary.slots)
    runes.extend(record.stat_shards())

    if len(runes) != RUNE_PAGE_SIZE:
        raise IncompleteRunePage(
            f"Could not find a complete rune page ({len(runes)} of {RUNE_PAGE_SIZE})"
        )

    return RunePage(
        primary_tree_id=primary_id,
        secondary_tree_id=secondary_id,
        rune_ids=tuple(runes),
        confidence_score=confidence.score(won, played),
    )


def normalize_item_sets(record: VendorRoleRecord) -> List[ItemSet]:
    """Starting and core sets (mandatory) followed by the option groups."""
    sets = []

    for name, index in (STARTING_BUILD, CORE_BUILD):
        won, played = record.item_set_counts(index, name)
        rate = confidence.item_set_win_rate(won, played)
        sets.append(ItemSet(
            label=f"{name} - {rate:.2f}% win rate",
            item_ids=tuple(record.item_set_items(index, name)),
        ))

    for i, items in enumerate(record.item_options()):
        name = ITEM_OPTION_NAMES[i] if i < len(ITEM_OPTION_NAMES) else "Unknown"
        sets.append(ItemSet(
            label=f"{name} Item Options (ordered by games played)",
            item_ids=tuple(items),
        ))

    return sets


def normalize_skill_order(record: VendorRoleRecord) -> str:
    """"QWEQ" -> "Q>W>E>Q"."""
    return ">".join(record.skill_priority())


def normalize_summoner_spells(record: VendorRoleRecord) -> SummonerSpells:
    first, second = record.summoner_spell_ids()
    return SummonerSpells(first=first, second=second)


def normalize_role(
    node: Any,
    role: Role,
    rune_trees: RuneTreeIndex,
    character_name: str,
) -> BuildRecord:
    """
    Turn one vendor role node into a BuildRecord.

    Raises:
        MissingField, InvalidReference, IncompleteRunePage: with the
            champion and role prepended to the message
    """
    record = VendorRoleRecord(node)
    try:
        return BuildRecord(
            role=role,
            rune_page=normalize_rune_page(record, rune_trees),
            item_sets=tuple(normalize_item_sets(record)),
            skill_order=normalize_skill_order(record),
            summoner_spells=normalize_summoner_spells(record),
        )
    except RuneSyncError as e:
        raise type(e)(f"{character_name} {role.label} - {e}") from e


def normalize_character(
    overview: Dict[str, Any],
    rune_trees: RuneTreeIndex,
    character_name: str,
) -> List[BuildRecord]:
    """
    Normalize every role of one champion's overview.

    Roles that fail are logged and dropped; the survivors are returned best
    first, one per role.

    Args:
        overview: Role key ("1".."5") -> role node
        rune_trees: Reference rune trees
        character_name: For log and error messages

    Raises:
        MissingField: The overview holds no roles at all
    """
    if not isinstance(overview, dict) or not overview:
        raise MissingField(f"{character_name} - No build data found.")

    builds: Dict[Role, BuildRecord] = {}

    for key, node in overview.items():
        try:
            role = Role.from_vendor_key(int(key))
        except (TypeError, ValueError):
            get_logger(character_name).warning(f"Skipping unknown role key {key!r}")
            continue

        try:
            build = normalize_role(node, role, rune_trees, character_name)
        except RuneSyncError as e:
            get_logger(f"{character_name} {role.label}").warning(f"Dropped build: {e}")
            continue

        current = builds.get(role)
        if current is None or build.sort_key < current.sort_key:
            builds[role] = build

    return sorted(builds.values(), key=lambda b: b.sort_key)
