"""u.gg build statistics client."""

import json
import re
from typing import Any, Dict, Optional

import requests

from runesync.clients.base import VendorDataProvider
from runesync.data.models import CharacterIdentity
from runesync.utils.error_handler import MissingField, TransportFailure, VersionUnavailable
from runesync.utils.logger import get_logger


UGG_URL = "https://u.gg"
STATS_URL = "https://stats2.u.gg/lol"
VERSIONS_KEY = "https://static.bigbrain.gg/assets/lol/riot_patch_update/prod/versions.json"

SSR_DATA_RE = re.compile(r"window\.__SSR_DATA__ = (\{.*})")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def parse_patch_version(home_page: str) -> str:
    """
    Extract the vendor patch from the home page's embedded state.

    "15.23.1" becomes "15_23".

    Raises:
        VersionUnavailable: The page has no usable version data
    """
    match = SSR_DATA_RE.search(home_page)
    if match is None:
        raise VersionUnavailable("Failed to find __SSR_DATA__ on the home page")

    try:
        data = json.loads(match.group(1))
        latest = data[VERSIONS_KEY]["data"][0]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise VersionUnavailable(f"Failed to get patch version data: {e}")

    parts = str(latest).split(".")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise VersionUnavailable(f"Failed to parse patch version {latest!r}")
    return f"{parts[0]}_{parts[1]}"


class UggClient(VendorDataProvider):
    """
    Fetches champion overviews from u.gg.

    Overviews are narrowed to one region and rank bracket before being
    handed to the normalizer.
    """

    def __init__(
        self,
        region: str = "12",
        rank: str = "10",
        api_version: str = "1.5",
        overview_version: str = "1.5.0",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            region: Overview region key ("12" is world)
            rank: Overview rank key ("10" is platinum and above)
            api_version: Stats API version in the URL
            overview_version: Overview file version
            timeout: Request timeout in seconds
            session: HTTP session (created if not given)
        """
        self.region = region
        self.rank = rank
        self.api_version = api_version
        self.overview_version = overview_version
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(BROWSER_HEADERS)
        self.log = get_logger()

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise TransportFailure(f"GET {url} failed: {e}")

    def get_current_patch_version(self) -> str:
        try:
            home_page = self._get(UGG_URL).text
        except TransportFailure as e:
            raise VersionUnavailable(str(e))

        patch = parse_patch_version(home_page)
        self.log.info(f"Vendor patch version: {patch}")
        return patch

    def overview_url(self, character: CharacterIdentity, patch_version: str) -> str:
        return (
            f"{STATS_URL}/{self.api_version}/overview/{patch_version}"
            f"/ranked_solo_5x5/{character.key}/{self.overview_version}.json"
        )

    def get_role_data(self, character: CharacterIdentity, patch_version: str) -> Dict[str, Any]:
        """
        Fetch one champion's overview.

        Returns:
            Role key -> role node for the configured region and rank

        Raises:
            TransportFailure: The request failed or returned non-JSON
            MissingField: The region or rank bracket is absent
        """
        response = self._get(self.overview_url(character, patch_version))
        try:
            data = response.json()
        except ValueError as e:
            raise TransportFailure(f"{character.name}: overview is not JSON: {e}")

        try:
            overview = data[self.region][self.rank]
        except (KeyError, TypeError):
            raise MissingField(
                f"{character.name}: no data for region {self.region} rank {self.rank}"
            )
        if not isinstance(overview, dict):
            raise MissingField(f"{character.name}: overview is not a mapping")
        return overview

    def check_patch_alignment(self, reference_version: str, vendor_patch: str) -> bool:
        """
        Compare the reference data version with the vendor patch.

        "15.23.1" lines up with "15_23". A mismatch is only logged; builds
        are still usable but may reference runes the client does not know.
        """
        parts = reference_version.split(".")
        aligned = "_".join(parts[:2]) == vendor_patch
        if not aligned:
            self.log.warning(
                f"Reference data {reference_version} does not match vendor patch {vendor_patch}"
            )
        return aligned
