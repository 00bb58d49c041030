"""Tests for item set export."""

import json
import tempfile
from pathlib import Path

from runesync.data.item_sets import ItemSetExporter, to_item_set_document
from runesync.data.models import CharacterIdentity, Role
from runesync.utils.logger import setup_logger, get_logger

from tests.test_catalog import create_build, create_catalog


def test_document_shape():
    """Test the document fields and block layout."""
    log = get_logger()
    log.info("Testing item set document...")

    build = create_build(Role.MID)
    character = CharacterIdentity(103, "Ahri", "Ahri")

    doc = to_item_set_document(build, character, "RS")

    assert doc["title"] == "[RS] - Ahri Mid"
    assert doc["type"] == "custom"
    assert doc["map"] == "any"
    assert doc["mode"] == "any"
    assert doc["priority"] is False
    assert doc["sortrank"] == 9999999999
    assert doc["championKey"] == "Ahri"
    assert len(doc["blocks"]) == 2

    first = doc["blocks"][0]
    assert first["type"] == "Starting Build - 200.00% win rate [Skill Order: Q>W>E]"
    assert first["items"] == [{"id": "1056", "count": 1}, {"id": "2003", "count": 1}]
    assert first["recMath"] is False
    assert first["minSummonerLevel"] == -1
    assert first["maxSummonerLevel"] == -1
    assert first["showIfSummonerSpell"] == ""
    assert first["hideIfSummonerSpell"] == ""

    assert doc["blocks"][1]["type"] == "Core Build - 150.00% win rate"

    # The record keeps its own label
    assert build.item_sets[0].label == "Starting Build - 200.00% win rate"

    log.info("PASSED: item set document")


def test_export_writes_files():
    """Test one file per build under <champion>/Recommended."""
    log = get_logger()
    log.info("Testing export...")

    with tempfile.TemporaryDirectory() as tmpdir:
        exporter = ItemSetExporter(tmpdir, marker="RS")
        written = exporter.export(create_catalog())

        expected = {
            Path(tmpdir) / "Ahri" / "Recommended" / "RS_Ahri-Mid-15_23.json",
            Path(tmpdir) / "Ahri" / "Recommended" / "RS_Ahri-Support-15_23.json",
        }
        assert set(written) == expected

        with open(Path(tmpdir) / "Ahri" / "Recommended" / "RS_Ahri-Mid-15_23.json") as f:
            doc = json.load(f)
        assert doc["title"] == "[RS] - Ahri Mid"

    log.info("PASSED: export")


def test_delete_old_only_removes_own_files():
    """Test stale exports are removed and other files kept."""
    log = get_logger()
    log.info("Testing delete_old...")

    with tempfile.TemporaryDirectory() as tmpdir:
        stale = Path(tmpdir) / "Zed" / "Recommended" / "RS_Zed-Mid-15_22.json"
        other = Path(tmpdir) / "Zed" / "Recommended" / "Mine.json"
        stale.parent.mkdir(parents=True)
        stale.write_text("{}")
        other.write_text("{}")

        exporter = ItemSetExporter(tmpdir, marker="RS")
        assert exporter.delete_old() == 1
        assert not stale.exists()
        assert other.exists()

    log.info("PASSED: delete_old")


def test_delete_old_missing_dir():
    """Test a missing builds directory is not an error."""
    exporter = ItemSetExporter("/nonexistent/runesync/builds")
    assert exporter.delete_old() == 0


def run_all_tests():
    """Run all item set tests."""
    setup_logger(level="INFO")
    log = get_logger()

    tests = [
        ("Document Shape", test_document_shape),
        ("Export", test_export_writes_files),
        ("Delete Old", test_delete_old_only_removes_own_files),
        ("Delete Old Missing Dir", test_delete_old_missing_dir),
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
