"""Data Dragon reference data client."""

from typing import Any, List, Optional

import requests

from runesync.clients.base import ReferenceDataProvider
from runesync.data.models import CharacterIdentity, RuneTreeIndex
from runesync.utils.error_handler import MissingField, TransportFailure
from runesync.utils.logger import get_logger


DDRAGON_URL = "https://ddragon.leagueoflegends.com"


class DataDragonClient(ReferenceDataProvider):
    """
    Fetches versions, champions and rune trees from Data Dragon.

    Example:
        ddragon = DataDragonClient()
        version = ddragon.get_latest_version()
        runes = ddragon.get_rune_trees(version)
    """

    def __init__(
        self,
        base_url: str = DDRAGON_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Data Dragon root
            timeout: Request timeout in seconds
            session: HTTP session (created if not given)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.log = get_logger()

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise TransportFailure(f"GET {url} failed: {e}")

    def get_latest_version(self) -> str:
        versions = self._get_json("/api/versions.json")
        if not isinstance(versions, list) or not versions:
            raise MissingField("Data Dragon returned no versions")
        version = str(versions[0])
        self.log.debug(f"Latest Data Dragon version: {version}")
        return version

    def get_champions(self, version: str) -> List[CharacterIdentity]:
        """
        Champions of a version, sorted by key.

        Data Dragon keys are numeric strings ("266"); entries whose key is
        not numeric are skipped.
        """
        data = self._get_json(f"/cdn/{version}/data/en_US/champion.json")
        champions = []
        for champion in (data.get("data") or {}).values():
            try:
                key = int(champion["key"])
            except (KeyError, TypeError, ValueError):
                self.log.warning(f"Skipping champion with bad key: {champion.get('id')}")
                continue
            champions.append(CharacterIdentity(
                key=key,
                id=str(champion.get("id", "")),
                name=str(champion.get("name", "")),
            ))
        champions.sort()
        self.log.info(f"Loaded {len(champions)} champions for {version}")
        return champions

    def get_rune_trees(self, version: str) -> RuneTreeIndex:
        data = self._get_json(f"/cdn/{version}/data/en_US/runesReforged.json")
        if not isinstance(data, list):
            raise MissingField("runesReforged.json is not a list of trees")
        try:
            index = RuneTreeIndex.from_reference(data)
        except (KeyError, TypeError, ValueError) as e:
            raise MissingField(f"Malformed rune tree data: {e}")
        self.log.info(f"Loaded {len(index.trees)} rune trees for {version}")
        return index
