"""
Local game client (LCU) API client.

The client serves a REST API over HTTPS on 127.0.0.1 with a self-signed
certificate. Port and password come from the lockfile the client writes
into its install directory while running.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests
import urllib3

from runesync.clients.base import InventoryProvider, SelectionProvider, SessionProvider
from runesync.data.models import (
    ChampSelectSession,
    GameMode,
    GamePhase,
    PageInventorySnapshot,
    PageSpec,
    RunePageInfo,
    TeamMember,
)
from runesync.utils.error_handler import TransportFailure
from runesync.utils.logger import get_logger

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


@dataclass(frozen=True)
class Lockfile:
    """Parsed ``name:pid:port:password:protocol`` lockfile."""
    name: str
    pid: int
    port: int
    password: str
    protocol: str = "https"

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://127.0.0.1:{self.port}"


def parse_lockfile(content: str) -> Lockfile:
    """
    Parse lockfile contents.

    Raises:
        TransportFailure: Malformed lockfile
    """
    parts = content.strip().split(":")
    if len(parts) < 5:
        raise TransportFailure(f"Unexpected lockfile format: {content.strip()!r}")

    try:
        return Lockfile(
            name=parts[0],
            pid=int(parts[1]),
            port=int(parts[2]),
            password=parts[3],
            protocol=parts[4] or "https",
        )
    except ValueError:
        raise TransportFailure(f"Bad pid or port in lockfile: {content.strip()!r}")


def find_lockfile(candidates: Iterable[Path]) -> Path:
    """
    First existing lockfile among the candidates.

    Raises:
        TransportFailure: None exists (the client is not running)
    """
    for path in candidates:
        if Path(path).is_file():
            return Path(path)
    raise TransportFailure(
        "League client lockfile not found. Is the client running? "
        "Set LOL_LOCKFILE or client.lockfile to its path."
    )


class LcuClient(SessionProvider, InventoryProvider, SelectionProvider):
    """
    Authenticated access to the local client.

    The lockfile is read on first use and again after a connection error,
    so a restarted client is picked up without restarting runesync.
    """

    def __init__(
        self,
        lockfile_candidates: Iterable[Path],
        timeout: float = 2.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            lockfile_candidates: Lockfile paths to try, in order
            timeout: Request timeout in seconds
            session: HTTP session (created if not given)
        """
        self.lockfile_candidates = list(lockfile_candidates)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.log = get_logger()
        self._lockfile: Optional[Lockfile] = None

    # ----- connection -----

    def connect(self) -> Lockfile:
        """Read the lockfile and configure authentication."""
        path = find_lockfile(self.lockfile_candidates)
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lockfile = parse_lockfile(f.read())

        self.session.auth = ("riot", lockfile.password)
        self.session.verify = False
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self._lockfile = lockfile
        self.log.info(f"Connected to client on port {lockfile.port} (pid {lockfile.pid})")
        return lockfile

    @property
    def is_connected(self) -> bool:
        return self._lockfile is not None

    def _request(self, method: str, endpoint: str, body: Any = None) -> requests.Response:
        lockfile = self._lockfile or self.connect()
        url = f"{lockfile.base_url}{endpoint}"

        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.ConnectionError as e:
            self._lockfile = None
            raise TransportFailure(f"{method} {endpoint} failed: {e}")
        except requests.RequestException as e:
            raise TransportFailure(f"{method} {endpoint} failed: {e}")

        if not 200 <= response.status_code < 300:
            if response.status_code == 401:
                self._lockfile = None
            raise TransportFailure(
                f"{method} {endpoint} returned {response.status_code}: {response.text[:200]}"
            )
        return response

    def _get_json(self, endpoint: str) -> Any:
        response = self._request("GET", endpoint)
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(f"GET {endpoint} returned invalid JSON: {e}")

    # ----- session -----

    def get_phase(self) -> GamePhase:
        phase = self._get_json("/lol-gameflow/v1/gameflow-phase")
        return GamePhase.from_client(phase if isinstance(phase, str) else None)

    def get_current_summoner_id(self) -> int:
        summoner = self._get_json("/lol-summoner/v1/current-summoner")
        return int(summoner.get("summonerId") or 0)

    def get_champ_select(self) -> ChampSelectSession:
        summoner_id = self.get_current_summoner_id()
        data = self._get_json("/lol-champ-select/v1/session")
        return ChampSelectSession(
            local_summoner_id=summoner_id,
            local_cell_id=int(data.get("localPlayerCellId", -1)),
            my_team=tuple(_team_member(m) for m in data.get("myTeam") or []),
        )

    def get_game_mode(self) -> GameMode:
        """
        Current game mode and the spells it disallows.

        The client lists the modes each spell is available in. A mode no
        spell lists carries no constraint information.
        """
        session = self._get_json("/lol-gameflow/v1/session")
        mode = (((session.get("gameData") or {}).get("queue") or {}).get("gameMode")) or ""

        spells = self._get_json("/lol-game-data/assets/v1/summoner-spells.json")
        return GameMode(name=mode, disallowed_spells=disallowed_spells(spells, mode))

    # ----- inventory -----

    def list_pages(self) -> PageInventorySnapshot:
        pages = [
            RunePageInfo(
                id=int(page["id"]),
                name=str(page.get("name", "")),
                is_deletable=bool(page.get("isDeletable", False)),
            )
            for page in self._get_json("/lol-perks/v1/pages")
        ]
        inventory = self._get_json("/lol-perks/v1/inventory")

        return PageInventorySnapshot(
            pages=tuple(pages),
            owned_page_count=sum(1 for page in pages if page.is_deletable),
            max_page_count=int(inventory.get("ownedPageCount", 0)),
        )

    def create_page(self, spec: PageSpec) -> None:
        self._request("POST", "/lol-perks/v1/pages", {
            "name": spec.name,
            "primaryStyleId": spec.primary_tree_id,
            "subStyleId": spec.secondary_tree_id,
            "selectedPerkIds": list(spec.rune_ids),
            "current": True,
        })
        self.log.debug(f"Created rune page '{spec.name}'")

    def delete_page(self, page_id: int) -> None:
        self._request("DELETE", f"/lol-perks/v1/pages/{page_id}")
        self.log.debug(f"Deleted rune page {page_id}")

    # ----- selection -----

    def set_selection(
        self,
        spell1_id: int,
        spell2_id: int,
        skin_id: Optional[int] = None,
    ) -> None:
        body: Dict[str, Any] = {"spell1Id": spell1_id, "spell2Id": spell2_id}
        if skin_id is not None:
            body["selectedSkinId"] = skin_id
        self._request("PATCH", "/lol-champ-select/v1/session/my-selection", body)


def _team_member(data: Dict[str, Any]) -> TeamMember:
    return TeamMember(
        cell_id=int(data.get("cellId", -1)),
        summoner_id=int(data.get("summonerId") or 0),
        champion_id=int(data.get("championId") or 0),
        assigned_position=str(data.get("assignedPosition") or ""),
        spell1_id=int(data.get("spell1Id") or 0),
        spell2_id=int(data.get("spell2Id") or 0),
    )


def disallowed_spells(spells: List[Dict[str, Any]], mode: str):
    """
    Spell IDs unavailable in ``mode``.

    Returns:
        Frozenset of IDs, or None when no spell mentions the mode
    """
    if not mode or not any(mode in (s.get("gameModes") or []) for s in spells):
        return None
    return frozenset(
        int(s["id"]) for s in spells if mode not in (s.get("gameModes") or [])
    )
