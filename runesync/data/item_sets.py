"""Export of build item sets as client item-set JSON files."""

import json
from pathlib import Path
from typing import Any, Dict, List

from runesync.data.models import BuildCatalog, BuildRecord, CharacterIdentity
from runesync.utils.logger import get_logger


SORT_RANK = 9999999999


def _block(label: str, item_ids) -> Dict[str, Any]:
    return {
        "recMath": False,
        "minSummonerLevel": -1,
        "maxSummonerLevel": -1,
        "showIfSummonerSpell": "",
        "hideIfSummonerSpell": "",
        "type": label,
        "items": [{"id": str(item_id), "count": 1} for item_id in item_ids],
    }


def to_item_set_document(
    record: BuildRecord,
    character: CharacterIdentity,
    marker: str,
) -> Dict[str, Any]:
    """
    Project a build onto the client's item-set document.

    The skill order is appended to the first block's label.
    """
    blocks: List[Dict[str, Any]] = []
    for i, item_set in enumerate(record.item_sets):
        label = item_set.label
        if i == 0:
            label = f"{label} [Skill Order: {record.skill_order}]"
        blocks.append(_block(label, item_set.item_ids))

    return {
        "title": f"[{marker}] - {character.name} {record.role.label}",
        "type": "custom",
        "map": "any",
        "mode": "any",
        "priority": False,
        "sortrank": SORT_RANK,
        "blocks": blocks,
        "championKey": character.id,
    }


class ItemSetExporter:
    """
    Writes recommended item sets into the client's champion config tree.

    Files are named ``<marker>_<champion>-<Role>-<patch>.json`` so the
    exporter can find and remove its own files without touching any
    others.
    """

    def __init__(self, builds_path: str, marker: str = "RS"):
        """
        Initialize exporter.

        Args:
            builds_path: Champions config directory of the client install
            marker: Prefix identifying files written by runesync
        """
        self.builds_path = Path(builds_path)
        self.marker = marker
        self.log = get_logger()

    def file_path(self, character: CharacterIdentity, record: BuildRecord, patch: str) -> Path:
        """Target path of one build's item set."""
        file_name = f"{self.marker}_{character.id}-{record.role.label}-{patch}.json"
        return self.builds_path / character.id / "Recommended" / file_name

    def delete_old(self) -> int:
        """
        Remove previously exported item sets.

        Returns:
            Number of files removed
        """
        if not self.builds_path.exists():
            return 0

        removed = 0
        for path in self.builds_path.rglob(f"{self.marker}_*.json"):
            path.unlink()
            removed += 1

        if removed:
            self.log.info(f"Deleted {removed} old item sets")
        return removed

    def export(self, catalog: BuildCatalog) -> List[Path]:
        """
        Replace exported item sets with the catalog's builds.

        Args:
            catalog: Builds to export

        Returns:
            Paths written
        """
        self.delete_old()

        written = []
        for entry in catalog.entries:
            for record in entry.builds:
                path = self.file_path(entry.character, record, catalog.patch_version)
                path.parent.mkdir(parents=True, exist_ok=True)
                document = to_item_set_document(record, entry.character, self.marker)
                with open(path, "w", encoding="utf-8") as f:
                    json.dump(document, f)
                written.append(path)

        self.log.info(f"Exported {len(written)} item sets to {self.builds_path}")
        return written
