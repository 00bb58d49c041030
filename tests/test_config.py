"""Tests for configuration system."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import yaml

from runesync.data.config import ConfigManager, ConfigError
from runesync.data.models import Config, DEFAULT_INSTALL_DIR
from runesync.utils.logger import setup_logger, get_logger


def test_load_default_config():
    """Test loading config with no file (uses defaults)."""
    log = get_logger()
    log.info("Testing default config loading...")

    with tempfile.TemporaryDirectory() as tmpdir:
        manager = ConfigManager(config_dir=tmpdir)
        config = manager.load()

        assert config.page_marker == "RS"
        assert config.install_dir == DEFAULT_INSTALL_DIR
        assert config.vendor_region == "12"
        assert config.vendor_rank == "10"
        assert config.vendor_concurrency == 5
        assert config.poll_interval == 2.5
        assert config.in_game_poll_interval == 10.0
        assert config.role_fallback is True
        assert config.flash_slot == "first"

    log.info("PASSED: default config loading")


def test_load_config_from_yaml():
    """Test loading config from YAML file."""
    log = get_logger()
    log.info("Testing YAML config loading...")

    with tempfile.TemporaryDirectory() as tmpdir:
        config_data = {
            "general": {"page_marker": "XX", "data_dir": "/tmp/runesync"},
            "client": {"install_dir": "/games/lol", "request_timeout": 5},
            "vendor": {"region": "1", "concurrency": 8},
            "sync": {"poll_interval": 1, "role_fallback": False, "flash_slot": "second"},
            "export": {"enabled": False},
            "logging": {"level": "debug", "directory": "/tmp/logs"},
        }

        settings_path = Path(tmpdir) / "settings.yaml"
        with open(settings_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(config_dir=tmpdir).load()

        assert config.page_marker == "XX"
        assert config.data_dir == "/tmp/runesync"
        assert config.install_dir == "/games/lol"
        assert config.client_timeout == 5.0
        assert config.vendor_region == "1"
        assert config.vendor_rank == "10"
        assert config.vendor_concurrency == 8
        assert config.poll_interval == 1.0
        assert config.role_fallback is False
        assert config.flash_slot == "second"
        assert config.export_enabled is False
        assert config.log_level == "DEBUG"
        assert config.log_dir == "/tmp/logs"

    log.info("PASSED: YAML config loading")


def test_invalid_yaml_raises_error():
    """Test that invalid YAML raises ConfigError."""
    log = get_logger()
    log.info("Testing invalid YAML handling...")

    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = Path(tmpdir) / "settings.yaml"
        with open(settings_path, "w") as f:
            f.write("invalid: yaml: content: [")

        try:
            ConfigManager(config_dir=tmpdir).load()
            assert False, "Should have raised ConfigError"
        except ConfigError as e:
            assert "Invalid YAML" in str(e)

    log.info("PASSED: invalid YAML handling")


def test_invalid_values_raise_error():
    """Test bad values raise ConfigError."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = Path(tmpdir) / "settings.yaml"

        for data in (
            {"vendor": {"concurrency": 0}},
            {"vendor": {"concurrency": "many"}},
            {"sync": {"poll_interval": -1}},
        ):
            with open(settings_path, "w") as f:
                yaml.dump(data, f)
            try:
                ConfigManager(config_dir=tmpdir).load()
                assert False, f"Should have raised ConfigError for {data}"
            except ConfigError:
                pass


def test_unknown_flash_slot_defaults():
    """Test an unknown flash slot falls back to first."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with open(Path(tmpdir) / "settings.yaml", "w") as f:
            yaml.dump({"sync": {"flash_slot": "middle"}}, f)

        assert ConfigManager(config_dir=tmpdir).load().flash_slot == "first"


def test_save_config():
    """Test saving config to YAML."""
    log = get_logger()
    log.info("Testing config save...")

    with tempfile.TemporaryDirectory() as tmpdir:
        manager = ConfigManager(config_dir=tmpdir)

        config = Config(
            page_marker="SV",
            vendor_rank="7",
            in_game_poll_interval=20.0,
            apply_spells=False,
            builds_dir="/games/lol/Config/Champions",
        )
        manager.save(config)

        loaded = ConfigManager(config_dir=tmpdir).load()
        assert loaded == config

    log.info("PASSED: config save")


def test_builds_dir():
    """Test the builds directory defaults under the install directory."""
    manager = ConfigManager(config_dir="/nonexistent")

    config = Config(install_dir="/games/lol")
    assert manager.get_builds_dir(config) == Path("/games/lol") / "Config" / "Champions"

    config = Config(builds_dir="/elsewhere")
    assert manager.get_builds_dir(config) == Path("/elsewhere")


def test_lockfile_candidates():
    """Test lockfile lookup order."""
    log = get_logger()
    log.info("Testing lockfile candidates...")

    manager = ConfigManager(config_dir="/nonexistent")
    config = Config(install_dir="/games/lol", lockfile="/custom/lockfile")

    with patch.dict(os.environ, {"LOL_LOCKFILE": "/env/lockfile"}):
        candidates = manager.get_lockfile_candidates(config)

    assert candidates[:3] == [
        Path("/env/lockfile"),
        Path("/custom/lockfile"),
        Path("/games/lol") / "lockfile",
    ]
    assert Path(DEFAULT_INSTALL_DIR) / "lockfile" in candidates

    with patch.dict(os.environ, {}, clear=True):
        candidates = manager.get_lockfile_candidates(Config(install_dir="/games/lol"))
    assert candidates[0] == Path("/games/lol") / "lockfile"

    log.info("PASSED: lockfile candidates")


def test_load_real_config():
    """Test loading the shipped example settings."""
    config_dir = Path(__file__).parent.parent / "config"
    if not (config_dir / "settings.yaml").exists():
        return

    config = ConfigManager(config_dir=str(config_dir)).load()
    assert config.page_marker
    assert config.vendor_concurrency >= 1


def run_all_tests():
    """Run all config tests."""
    setup_logger(level="INFO")
    log = get_logger()

    log.info("=" * 50)
    log.info("Configuration Tests")
    log.info("=" * 50)

    tests = [
        ("Default Config Loading", test_load_default_config),
        ("YAML Config Loading", test_load_config_from_yaml),
        ("Invalid YAML Handling", test_invalid_yaml_raises_error),
        ("Invalid Values", test_invalid_values_raise_error),
        ("Unknown Flash Slot", test_unknown_flash_slot_defaults),
        ("Config Save", test_save_config),
        ("Builds Dir", test_builds_dir),
        ("Lockfile Candidates", test_lockfile_candidates),
        ("Real Config Files", test_load_real_config),
    ]

    failed = 0
    for name, test_func in tests:
        try:
            test_func()
        except Exception as e:
            log.error(f"FAILED: {name} - {e}")
            failed += 1

    log.info("=" * 50)
    log.info(f"Results: {len(tests) - failed} passed, {failed} failed")
    log.info("=" * 50)
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
