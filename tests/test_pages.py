"""Tests for rune page inventory reconciliation."""

from unittest.mock import Mock

from runesync.data.models import PageInventorySnapshot, PageSpec, Role, RunePageInfo
from runesync.sync.pages import PageReconciler, page_name, plan_cleanup, plan_eviction
from runesync.utils.error_handler import InventoryFull
from runesync.utils.logger import setup_logger, get_logger


def create_snapshot(pages, max_pages):
    """Snapshot counting deletable pages as used slots."""
    return PageInventorySnapshot(
        pages=tuple(pages),
        owned_page_count=sum(1 for p in pages if p.is_deletable),
        max_page_count=max_pages,
    )


def create_spec():
    return PageSpec(
        name="[RS] Ahri Mid",
        primary_tree_id=8100,
        secondary_tree_id=8300,
        rune_ids=(8126, 8101, 8103, 8105, 8139, 8313, 5008, 5008, 5002),
    )


class FakeInventory:
    """In-memory inventory recording every call."""

    def __init__(self, pages, max_pages):
        self.pages = list(pages)
        self.max_pages = max_pages
        self.calls = []

    def list_pages(self):
        self.calls.append(("list",))
        return create_snapshot(self.pages, self.max_pages)

    def delete_page(self, page_id):
        self.calls.append(("delete", page_id))
        self.pages = [p for p in self.pages if p.id != page_id]

    def create_page(self, spec):
        self.calls.append(("create", spec.name))
        self.pages.append(RunePageInfo(id=999, name=spec.name, is_deletable=True))


def test_page_name():
    """Test page naming."""
    assert page_name("RS", "Ahri", Role.MID) == "[RS] Ahri Mid"
    assert page_name("X", "Lee Sin", Role.JUNGLE) == "[X] Lee Sin Jungle"


def test_plan_cleanup():
    """Test only deletable pages with the marker are cleaned up."""
    log = get_logger()
    log.info("Testing cleanup plan...")

    snapshot = create_snapshot([
        RunePageInfo(1, "Domination", False),
        RunePageInfo(2, "[RS] Zed Mid", True),
        RunePageInfo(3, "My page", True),
        RunePageInfo(4, "[RS] Locked", False),
        RunePageInfo(5, "[RS] Ahri Mid", True),
    ], 5)

    assert plan_cleanup(snapshot, "RS") == [2, 5]
    assert plan_cleanup(snapshot, "XX") == []

    log.info("PASSED: cleanup plan")


def test_plan_eviction():
    """Test which page is freed when full."""
    log = get_logger()
    log.info("Testing eviction plan...")

    not_full = create_snapshot([RunePageInfo(3, "My page", True)], 2)
    assert plan_eviction(not_full, "RS") is None

    full_with_owned = create_snapshot([
        RunePageInfo(3, "My page", True),
        RunePageInfo(4, "[RS] Zed Mid", True),
    ], 2)
    assert plan_eviction(full_with_owned, "RS") == 4

    full_no_owned = create_snapshot([
        RunePageInfo(1, "Preset", False),
        RunePageInfo(3, "My page", True),
        RunePageInfo(6, "Other page", True),
    ], 2)
    assert plan_eviction(full_no_owned, "RS") == 3

    log.info("PASSED: eviction plan")


def test_plan_eviction_inventory_full():
    """Test a full inventory with nothing deletable raises InventoryFull."""
    snapshot = PageInventorySnapshot(
        pages=(RunePageInfo(1, "Preset", False),),
        owned_page_count=0,
        max_page_count=0,
    )
    try:
        plan_eviction(snapshot, "RS")
        assert False, "Should have raised InventoryFull"
    except InventoryFull:
        pass


def test_apply_order():
    """Test list, delete owned, list, create with one owned page at capacity."""
    log = get_logger()
    log.info("Testing apply order...")

    inventory = FakeInventory([
        RunePageInfo(1, "Preset", False),
        RunePageInfo(2, "[RS] Zed Mid", True),
        RunePageInfo(3, "My page", True),
    ], max_pages=2)

    PageReconciler(inventory, "RS").apply(create_spec())

    assert inventory.calls == [
        ("list",),
        ("delete", 2),
        ("list",),
        ("create", "[RS] Ahri Mid"),
    ]
    assert [p.id for p in inventory.pages] == [1, 3, 999]

    log.info("PASSED: apply order")


def test_apply_evicts_when_full():
    """Test a user page is evicted when no owned page frees a slot."""
    inventory = FakeInventory([
        RunePageInfo(3, "My page", True),
        RunePageInfo(4, "Other", True),
    ], max_pages=2)

    PageReconciler(inventory, "RS").apply(create_spec())

    assert inventory.calls == [
        ("list",),
        ("list",),
        ("delete", 3),
        ("create", "[RS] Ahri Mid"),
    ]


def test_apply_inventory_full_creates_nothing():
    """Test InventoryFull propagates and no page is created."""
    log = get_logger()
    log.info("Testing inventory full...")

    inventory = Mock()
    inventory.list_pages.return_value = PageInventorySnapshot(
        pages=(RunePageInfo(1, "Preset", False),),
        owned_page_count=1,
        max_page_count=1,
    )

    try:
        PageReconciler(inventory, "RS").apply(create_spec())
        assert False, "Should have raised InventoryFull"
    except InventoryFull:
        pass

    inventory.create_page.assert_not_called()
    inventory.delete_page.assert_not_called()

    log.info("PASSED: inventory full")


def run_all_tests():
    """Run all page tests."""
    setup_logger(level="INFO")
    log = get_logger()

    tests = [
        ("Page Name", test_page_name),
        ("Cleanup Plan", test_plan_cleanup),
        ("Eviction Plan", test_plan_eviction),
        ("Eviction Inventory Full", test_plan_eviction_inventory_full),
        ("Apply Order", test_apply_order),
        ("Apply Evicts", test_apply_evicts_when_full),
        ("Inventory Full", test_apply_inventory_full_creates_nothing),
    ]

    failed = 0
    for name, test_func in tests:
        try:
            test_func()
        except Exception as e:
            log.error(f"FAILED: {name} - {e}")
            failed += 1

    log.info(f"Results: {len(tests) - failed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
