"""Tests for the vendor and reference data clients."""

import json
from unittest.mock import Mock

import requests

from runesync.clients.ddragon import DataDragonClient
from runesync.clients.vendor import VERSIONS_KEY, UggClient, parse_patch_version
from runesync.data.models import CharacterIdentity
from runesync.utils.error_handler import MissingField, TransportFailure, VersionUnavailable
from runesync.utils.logger import setup_logger, get_logger


AHRI = CharacterIdentity(103, "Ahri", "Ahri")


def create_home_page(versions):
    """Home page HTML embedding the versions list."""
    state = {VERSIONS_KEY: {"data": versions}, "other": {"x": 1}}
    return (
        "<html><head><script>"
        f"window.__SSR_DATA__ = {json.dumps(state)}"
        "</script></head></html>"
    )


def create_session(text=None, data=None, status=200):
    """Mocked requests.Session returning one response for every GET."""
    response = Mock()
    response.status_code = status
    response.text = text
    response.json.return_value = data
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")

    session = Mock()
    session.headers = {}
    session.get.return_value = response
    return session


def test_parse_patch_version():
    """Test patch discovery from the embedded state."""
    log = get_logger()
    log.info("Testing patch version parsing...")

    assert parse_patch_version(create_home_page(["15.23.1", "15.22.1"])) == "15_23"
    assert parse_patch_version(create_home_page(["14.1"])) == "14_1"

    log.info("PASSED: patch version parsing")


def test_parse_patch_version_failures():
    """Test every discovery failure is VersionUnavailable."""
    for page in (
        "<html>nothing here</html>",
        "window.__SSR_DATA__ = {not json}",
        create_home_page([]),
        create_home_page(["15"]),
        "window.__SSR_DATA__ = {\"other\": {}}",
    ):
        try:
            parse_patch_version(page)
            assert False, f"Should have raised VersionUnavailable for {page!r}"
        except VersionUnavailable:
            pass


def test_get_current_patch_version():
    """Test the client fetches the home page with browser headers."""
    session = create_session(text=create_home_page(["15.23.1"]))
    client = UggClient(session=session)

    assert client.get_current_patch_version() == "15_23"
    assert session.get.call_args[0][0] == "https://u.gg"
    assert "Mozilla" in session.headers["User-Agent"]


def test_patch_version_transport_failure():
    """Test an unreachable home page is VersionUnavailable."""
    session = create_session(status=503)
    client = UggClient(session=session)

    try:
        client.get_current_patch_version()
        assert False, "Should have raised VersionUnavailable"
    except VersionUnavailable:
        pass


def test_get_role_data():
    """Test the overview is narrowed to region and rank."""
    log = get_logger()
    log.info("Testing overview fetch...")

    overview = {"12": {"10": {"5": [[1]]}, "11": {}}, "1": {}}
    session = create_session(data=overview)
    client = UggClient(session=session)

    assert client.get_role_data(AHRI, "15_23") == {"5": [[1]]}
    assert session.get.call_args[0][0] == (
        "https://stats2.u.gg/lol/1.5/overview/15_23/ranked_solo_5x5/103/1.5.0.json"
    )

    log.info("PASSED: overview fetch")


def test_get_role_data_missing_bracket():
    """Test a missing region or rank is MissingField."""
    client = UggClient(region="3", session=create_session(data={"12": {"10": {}}}))
    try:
        client.get_role_data(AHRI, "15_23")
        assert False, "Should have raised MissingField"
    except MissingField:
        pass


def test_get_role_data_http_error():
    """Test HTTP errors become TransportFailure."""
    client = UggClient(session=create_session(status=404))
    try:
        client.get_role_data(AHRI, "15_23")
        assert False, "Should have raised TransportFailure"
    except TransportFailure:
        pass


def test_check_patch_alignment():
    """Test reference and vendor versions are compared by major and minor."""
    client = UggClient(session=create_session())

    assert client.check_patch_alignment("15.23.1", "15_23")
    assert not client.check_patch_alignment("15.24.1", "15_23")


def test_ddragon_versions_and_champions():
    """Test Data Dragon version and champion mapping."""
    log = get_logger()
    log.info("Testing Data Dragon client...")

    session = create_session(data=["15.23.1", "15.22.1"])
    client = DataDragonClient(session=session)
    assert client.get_latest_version() == "15.23.1"

    session.get.return_value.json.return_value = {
        "data": {
            "Zed": {"key": "238", "id": "Zed", "name": "Zed"},
            "MonkeyKing": {"key": "62", "id": "MonkeyKing", "name": "Wukong"},
            "Broken": {"key": "n/a", "id": "Broken", "name": "Broken"},
        }
    }
    champions = client.get_champions("15.23.1")
    assert [c.key for c in champions] == [62, 238]
    assert champions[0].id == "MonkeyKing"
    assert champions[0].name == "Wukong"
    assert session.get.call_args[0][0] == (
        "https://ddragon.leagueoflegends.com/cdn/15.23.1/data/en_US/champion.json"
    )

    log.info("PASSED: Data Dragon client")


def test_ddragon_rune_trees():
    """Test rune trees are indexed by ID with ordered slots."""
    session = create_session(data=[
        {
            "id": 8100, "key": "Domination", "name": "Domination",
            "slots": [{"runes": [{"id": 8112}, {"id": 8124}]}, {"runes": [{"id": 8126}]}],
        },
    ])
    trees = DataDragonClient(session=session).get_rune_trees("15.23.1")

    tree = trees.get_tree(8100)
    assert tree.key == "Domination"
    assert tree.slots == (frozenset({8112, 8124}), frozenset({8126}))
    assert trees.get_tree(8200) is None


def test_ddragon_failures():
    """Test transport and shape failures."""
    client = DataDragonClient(session=create_session(status=500))
    try:
        client.get_latest_version()
        assert False, "Should have raised TransportFailure"
    except TransportFailure:
        pass

    client = DataDragonClient(session=create_session(data=[]))
    try:
        client.get_latest_version()
        assert False, "Should have raised MissingField"
    except MissingField:
        pass


def run_all_tests():
    """Run all client tests."""
    setup_logger(level="INFO")
    log = get_logger()

    tests = [
        ("Patch Version", test_parse_patch_version),
        ("Patch Version Failures", test_parse_patch_version_failures),
        ("Current Patch", test_get_current_patch_version),
        ("Patch Transport Failure", test_patch_version_transport_failure),
        ("Role Data", test_get_role_data),
        ("Role Data Missing Bracket", test_get_role_data_missing_bracket),
        ("Role Data HTTP Error", test_get_role_data_http_error),
        ("Patch Alignment", test_check_patch_alignment),
        ("Data Dragon", test_ddragon_versions_and_champions),
        ("Rune Trees", test_ddragon_rune_trees),
        ("Data Dragon Failures", test_ddragon_failures),
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
