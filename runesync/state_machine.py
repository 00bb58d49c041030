"""Session reconciliation loop."""

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from runesync.clients.base import InventoryProvider, SelectionProvider, SessionProvider
from runesync.data.models import (
    IDLE,
    BuildCatalog,
    BuildRecord,
    Config,
    GamePhase,
    PageSpec,
    ReconcilerState,
    TeamMember,
)
from runesync.sync.pages import PageReconciler, page_name
from runesync.sync.spells import SpellReconciler
from runesync.utils.error_handler import (
    ErrorHandler,
    ErrorResolution,
    NoBuildFound,
    RuneSyncError,
)
from runesync.utils.logger import get_logger


class TickAction(Enum):
    """What one tick did."""
    IDLE = auto()        # Not in champion select
    WAITING = auto()     # In champion select, nothing picked yet
    UNCHANGED = auto()   # Selection already applied
    APPLIED = auto()     # Build applied
    FAILED = auto()      # Apply attempted and failed
    ERROR = auto()       # Could not read the client state


@dataclass(frozen=True)
class TickResult:
    """State after a tick, the phase it saw and what it did."""
    state: ReconcilerState
    phase: Optional[GamePhase]
    action: TickAction


class SessionReconciler:
    """
    Keeps the client's rune page and summoner spells in line with the
    recommended build for the champion and role in champion select.

    Each tick reads fresh client state and is a no-op when the selection
    has not changed since the last successful apply. The applied selection
    is only remembered once every step of an apply succeeded, so a failed
    apply is retried on the next tick.

    Example:
        reconciler = SessionReconciler(catalog, lcu, lcu, lcu, config)
        reconciler.start()
        ...
        reconciler.stop()
    """

    def __init__(
        self,
        catalog: BuildCatalog,
        session: SessionProvider,
        inventory: InventoryProvider,
        selection: SelectionProvider,
        config: Optional[Config] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the reconciler.

        Args:
            catalog: Builds to apply (read-only)
            session: Phase and champion select reader
            inventory: Rune page inventory
            selection: Summoner spell selection
            config: Settings (defaults if not given)
            error_handler: Error policy (a fresh one if not given)
        """
        self.catalog = catalog
        self.session = session
        self.config = config or Config()
        self.error_handler = error_handler or ErrorHandler()
        self.log = get_logger()

        self.pages = PageReconciler(inventory, self.config.page_marker)
        self.spells = SpellReconciler(selection, self.config.flash_slot)

        self._state = IDLE
        self._ticks = 0
        self._applied = 0
        self._failed = 0

        # Control
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def state(self) -> ReconcilerState:
        """Get current state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if main loop is running."""
        return self._running

    @property
    def tick_count(self) -> int:
        return self._ticks

    @property
    def applied_count(self) -> int:
        return self._applied

    @property
    def failed_count(self) -> int:
        return self._failed

    def tick(self, state: ReconcilerState = IDLE) -> TickResult:
        """
        Run one reconciliation step.

        Args:
            state: State returned by the previous tick

        Returns:
            TickResult with the state for the next tick
        """
        try:
            phase = self.session.get_phase()
        except RuneSyncError as e:
            self.error_handler.handle(e, operation="read gameflow phase")
            return TickResult(IDLE, None, TickAction.ERROR)

        if phase != GamePhase.CHAMP_SELECT:
            if state != IDLE:
                self.log.debug(f"Left champion select ({phase.value})")
            return TickResult(IDLE, phase, TickAction.IDLE)

        try:
            roster = self.session.get_champ_select()
        except RuneSyncError as e:
            self.error_handler.handle(e, operation="read champion select")
            return TickResult(IDLE, phase, TickAction.ERROR)

        member = roster.local_member()
        if member is None or member.champion_id == 0:
            return TickResult(state, phase, TickAction.WAITING)

        if state.matches(member.champion_id, member.role):
            return TickResult(state, phase, TickAction.UNCHANGED)

        return self._apply(state, phase, member)

    def _apply(
        self,
        state: ReconcilerState,
        phase: GamePhase,
        member: TeamMember,
    ) -> TickResult:
        role = member.role
        entry = self.catalog.find_entry(member.champion_id)
        name = entry.character.name if entry else str(member.champion_id)
        scope = f"{name} {role.label}"
        operation = "find build"

        try:
            build = self.catalog.find_build(
                member.champion_id, role, fallback=self.config.role_fallback
            )
            if build is None:
                raise NoBuildFound(f"No build for {name} in role {role.label}")

            operation = "apply rune page"
            self.pages.apply(self._page_spec(name, build))

            if self.config.apply_spells:
                operation = "apply summoner spells"
                mode = self.session.get_game_mode()
                self.spells.apply(member.spells, build.summoner_spells, mode.disallowed_spells)

        except RuneSyncError as e:
            self._failed += 1
            resolution = self.error_handler.handle(e, scope=scope, operation=operation)
            if resolution == ErrorResolution.STOP:
                self._running = False
                self._stop_event.set()
            return TickResult(state, phase, TickAction.FAILED)

        self._applied += 1
        get_logger(scope).info(
            f"Applied {build.role.label} build "
            f"(confidence {build.rune_page.confidence_score:.3f})"
        )
        return TickResult(
            ReconcilerState.applied(member.champion_id, role),
            phase,
            TickAction.APPLIED,
        )

    def _page_spec(self, name: str, build: BuildRecord) -> PageSpec:
        page = build.rune_page
        return PageSpec(
            name=page_name(self.config.page_marker, name, build.role),
            primary_tree_id=page.primary_tree_id,
            secondary_tree_id=page.secondary_tree_id,
            rune_ids=page.rune_ids,
        )

    def next_interval(self, phase: Optional[GamePhase]) -> float:
        """Seconds to sleep after a tick that saw ``phase``."""
        if phase == GamePhase.IN_PROGRESS:
            return self.config.in_game_poll_interval
        return self.config.poll_interval

    def update(self) -> TickResult:
        """
        Execute one tick against the current state.

        Unexpected exceptions are handled like a failed tick.
        """
        self._ticks += 1
        try:
            result = self.tick(self._state)
        except Exception as e:
            resolution = self.error_handler.handle(e, operation="tick")
            if resolution == ErrorResolution.STOP:
                self._running = False
                self._stop_event.set()
            result = TickResult(IDLE, None, TickAction.ERROR)

        if result.action not in (TickAction.FAILED, TickAction.ERROR):
            self.error_handler.record_success()

        self._state = result.state
        return result

    def start(self) -> None:
        """
        Start the main loop in a background thread.

        The loop runs until stop() is called.
        """
        if self._running:
            self.log.warning("Reconciler already running")
            return

        self._running = True
        self._stop_event.clear()

        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()
        self.log.info("Reconciler started")

    def stop(self) -> None:
        """
        Stop the main loop.

        Waits for the loop to exit cleanly.
        """
        if not self._running and not (self._thread and self._thread.is_alive()):
            return

        self.log.info("Stopping reconciler...")
        self._running = False
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

        self._state = IDLE
        self.log.info(
            f"Reconciler stopped ({self._ticks} ticks, "
            f"{self._applied} applied, {self._failed} failed)"
        )

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the loop stops.

        Returns:
            True if the loop has stopped
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run_loop(self) -> None:
        """Main loop that runs in background thread."""
        while self._running:
            result = self.update()
            if self._stop_event.wait(self.next_interval(result.phase)):
                break
        self._running = False

    def run_synchronously(self, max_ticks: int = 100) -> List[TickResult]:
        """
        Run ticks back to back without sleeping (for testing).

        Args:
            max_ticks: Maximum number of ticks

        Returns:
            Result of every tick
        """
        self._running = True
        results = []

        for _ in range(max_ticks):
            if not self._running:
                break
            results.append(self.update())

        self._running = False
        return results
