"""Build catalog assembly and on-disk snapshots."""

import gzip
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from runesync.data.models import (
    BuildCatalog,
    BuildRecord,
    CharacterEntry,
    CharacterIdentity,
    ItemSet,
    Role,
    RunePage,
    RuneTreeIndex,
    SummonerSpells,
)
from runesync.data.normalizer import normalize_character
from runesync.utils.logger import get_logger


DEFAULT_CONCURRENCY = 5

FetchRoleData = Callable[[CharacterIdentity], Dict[str, Any]]


def assemble_catalog(
    characters: Sequence[CharacterIdentity],
    fetch_role_data: FetchRoleData,
    rune_trees: RuneTreeIndex,
    patch_version: str,
    max_workers: int = DEFAULT_CONCURRENCY,
) -> BuildCatalog:
    """
    Fetch and normalize builds for every champion.

    Fetches run on a bounded thread pool. A champion whose fetch or
    normalization raises is logged and left out; a champion whose roles
    all fail is kept with no builds. Entries come back sorted by key
    whatever order the fetches finish in.

    Args:
        characters: Champions to fetch
        fetch_role_data: Returns the role-key -> role-node overview of a champion
        rune_trees: Reference rune trees for validation
        patch_version: Vendor patch the data belongs to
        max_workers: Requests in flight

    Returns:
        BuildCatalog
    """
    log = get_logger()
    log.info(
        f"Assembling catalog for patch {patch_version}: "
        f"{len(characters)} champions, {max_workers} in flight"
    )

    def build_entry(character: CharacterIdentity) -> CharacterEntry:
        overview = fetch_role_data(character)
        builds = normalize_character(overview, rune_trees, character.name)
        return CharacterEntry(character=character, builds=tuple(builds))

    entries: List[CharacterEntry] = []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(build_entry, c): c for c in characters}
        for future in as_completed(futures):
            character = futures[future]
            try:
                entry = future.result()
            except Exception as e:
                get_logger(character.name).error(
                    f"Failed to download build data for {character.name}: {e}"
                )
                continue
            log.debug(f"{character.name}: {len(entry.builds)} builds")
            entries.append(entry)

    entries.sort(key=lambda entry: entry.character)

    catalog = BuildCatalog(patch_version=patch_version, entries=tuple(entries))
    log.info(
        f"Catalog ready: {len(catalog.entries)}/{len(characters)} champions, "
        f"{catalog.build_count} builds"
    )
    return catalog


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _build_to_dict(build: BuildRecord) -> Dict[str, Any]:
    page = build.rune_page
    return {
        "role": build.role.value,
        "rune_page": {
            "primary_tree_id": page.primary_tree_id,
            "secondary_tree_id": page.secondary_tree_id,
            "rune_ids": list(page.rune_ids),
            "confidence_score": page.confidence_score,
        },
        "item_sets": [
            {"label": s.label, "item_ids": list(s.item_ids)} for s in build.item_sets
        ],
        "skill_order": build.skill_order,
        "summoner_spells": {
            "first": build.summoner_spells.first,
            "second": build.summoner_spells.second,
        },
    }


def _build_from_dict(data: Dict[str, Any]) -> BuildRecord:
    page = data["rune_page"]
    spells = data["summoner_spells"]
    return BuildRecord(
        role=Role(data["role"]),
        rune_page=RunePage(
            primary_tree_id=page["primary_tree_id"],
            secondary_tree_id=page["secondary_tree_id"],
            rune_ids=tuple(page["rune_ids"]),
            confidence_score=page["confidence_score"],
        ),
        item_sets=tuple(
            ItemSet(label=s["label"], item_ids=tuple(s["item_ids"]))
            for s in data["item_sets"]
        ),
        skill_order=data["skill_order"],
        summoner_spells=SummonerSpells(first=spells["first"], second=spells["second"]),
    )


def catalog_to_dict(catalog: BuildCatalog) -> Dict[str, Any]:
    """Plain JSON-compatible form of a catalog."""
    return {
        "patch_version": catalog.patch_version,
        "entries": [
            {
                "character": {
                    "key": entry.character.key,
                    "id": entry.character.id,
                    "name": entry.character.name,
                },
                "builds": [_build_to_dict(b) for b in entry.builds],
            }
            for entry in catalog.entries
        ],
    }


def catalog_from_dict(data: Dict[str, Any]) -> BuildCatalog:
    """Inverse of catalog_to_dict."""
    entries = []
    for entry in data["entries"]:
        character = entry["character"]
        entries.append(CharacterEntry(
            character=CharacterIdentity(
                key=character["key"],
                id=character["id"],
                name=character["name"],
            ),
            builds=tuple(_build_from_dict(b) for b in entry["builds"]),
        ))
    return BuildCatalog(patch_version=data["patch_version"], entries=tuple(entries))


class CatalogStore:
    """
    Gzip-compressed JSON snapshots of build catalogs, one file per patch.

    Treated as a cache: a missing or unreadable snapshot is a miss.
    """

    FILE_TEMPLATE = "builds-{patch}.json.gz"

    def __init__(self, data_dir: str = "data"):
        """
        Initialize catalog store.

        Args:
            data_dir: Directory holding the snapshots
        """
        self.data_dir = Path(data_dir)
        self.log = get_logger()

    def path_for(self, patch_version: str) -> Path:
        """Snapshot path for a patch version."""
        return self.data_dir / self.FILE_TEMPLATE.format(patch=patch_version)

    def load(self, patch_version: str) -> Optional[BuildCatalog]:
        """
        Load the snapshot for a patch.

        Returns:
            BuildCatalog, or None when there is no usable snapshot
        """
        path = self.path_for(patch_version)
        if not path.exists():
            self.log.info(f"No existing data found at {path}")
            return None

        try:
            with gzip.open(path, "rt", encoding="utf-8") as f:
                catalog = catalog_from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.log.warning(f"Ignoring unreadable snapshot {path}: {e}")
            return None

        self.log.info(f"Loaded existing data from {path} ({len(catalog.entries)} champions)")
        return catalog

    def save(self, catalog: BuildCatalog, patch_version: Optional[str] = None) -> Path:
        """
        Save a catalog snapshot.

        Args:
            catalog: Catalog to persist
            patch_version: Key for the file (defaults to the catalog's own patch)

        Returns:
            Path written
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(patch_version or catalog.patch_version)

        data = json.dumps(catalog_to_dict(catalog), sort_keys=True, separators=(",", ":"))
        # mtime=0 keeps identical catalogs byte-identical on disk
        with open(path, "wb") as raw:
            with gzip.GzipFile(fileobj=raw, mode="wb", mtime=0) as f:
                f.write(data.encode("utf-8"))

        self.log.info(f"Saved catalog to {path}")
        return path


def load_or_assemble(
    store: CatalogStore,
    cache_key: str,
    assemble: Callable[[], BuildCatalog],
    force: bool = False,
) -> BuildCatalog:
    """
    Return the cached catalog for ``cache_key`` or assemble and cache a new one.

    Args:
        store: Snapshot store
        cache_key: Version the snapshot is keyed by (reference data version)
        assemble: Builds a fresh catalog on a miss
        force: Ignore any cached snapshot

    A catalog with no builds at all is returned but never cached, so an
    unreachable vendor is retried on the next run.
    """
    if not force:
        catalog = store.load(cache_key)
        if catalog is not None:
            return catalog

    catalog = assemble()
    if catalog.build_count == 0:
        get_logger().warning(
            f"Assembled catalog for {cache_key} has no builds; not caching it"
        )
        return catalog

    store.save(catalog, cache_key)
    return catalog
