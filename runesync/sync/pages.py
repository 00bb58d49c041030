"""Rune page inventory reconciliation."""

from typing import List, Optional

from runesync.clients.base import InventoryProvider
from runesync.data.models import PageInventorySnapshot, PageSpec, Role
from runesync.utils.error_handler import InventoryFull
from runesync.utils.logger import get_logger


def page_name(marker: str, character_name: str, role: Role) -> str:
    """Name of the page runesync creates, e.g. "[RS] Ahri Mid"."""
    return f"[{marker}] {character_name} {role.label}"


def is_owned(name: str, marker: str) -> bool:
    """Whether a page name carries the runesync marker."""
    return name.startswith(f"[{marker}]")


def plan_cleanup(snapshot: PageInventorySnapshot, marker: str) -> List[int]:
    """IDs of deletable pages runesync created earlier."""
    return [
        page.id for page in snapshot.pages
        if page.is_deletable and is_owned(page.name, marker)
    ]


def plan_eviction(snapshot: PageInventorySnapshot, marker: str) -> Optional[int]:
    """
    Page to delete so a new one fits.

    Returns:
        None when there is a free slot, otherwise an owned deletable page
        if there is one, else the first deletable page

    Raises:
        InventoryFull: Every slot is used and nothing can be deleted
    """
    if not snapshot.is_full:
        return None

    deletable = [page for page in snapshot.pages if page.is_deletable]
    for page in deletable:
        if is_owned(page.name, marker):
            return page.id
    if deletable:
        return deletable[0].id

    raise InventoryFull(
        f"All {snapshot.max_page_count} rune page slots are in use and none can be deleted"
    )


class PageReconciler:
    """
    Replaces runesync's rune page with a new one.

    Each apply runs the same steps: list, delete owned pages, list again,
    free a slot if the inventory is full, create.
    """

    def __init__(self, inventory: InventoryProvider, marker: str = "RS"):
        """
        Initialize page reconciler.

        Args:
            inventory: Client rune page inventory
            marker: Page name prefix identifying runesync's pages
        """
        self.inventory = inventory
        self.marker = marker
        self.log = get_logger()

    def apply(self, spec: PageSpec) -> None:
        """
        Create ``spec`` as the current page.

        Raises:
            InventoryFull: No slot can be freed (nothing is created)
            TransportFailure: A client request failed
        """
        snapshot = self.inventory.list_pages()

        for page_id in plan_cleanup(snapshot, self.marker):
            self.inventory.delete_page(page_id)
            self.log.debug(f"Deleted old page {page_id}")

        snapshot = self.inventory.list_pages()

        evict = plan_eviction(snapshot, self.marker)
        if evict is not None:
            self.log.info(f"Rune pages full, deleting page {evict}")
            self.inventory.delete_page(evict)

        self.inventory.create_page(spec)
        self.log.info(f"Applied rune page '{spec.name}'")
