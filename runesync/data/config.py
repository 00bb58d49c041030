"""Configuration management for runesync."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from runesync.data.models import Config, DEFAULT_INSTALL_DIR
from runesync.utils.logger import get_logger


FLASH_SLOTS = ("first", "second")


class ConfigError(Exception):
    """Configuration related error."""
    pass


class ConfigManager:
    """
    Manages runesync configuration from a YAML file.

    Every setting has a default, so a missing settings.yaml (or a missing
    section in it) is not an error.
    """

    DEFAULT_CONFIG_DIR = "config"

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config manager.

        Args:
            config_dir: Path to configuration directory
        """
        self.config_dir = Path(config_dir or self.DEFAULT_CONFIG_DIR)
        self.log = get_logger()
        self._config: Optional[Config] = None

    @property
    def settings_path(self) -> Path:
        return self.config_dir / "settings.yaml"

    def load(self) -> Config:
        """
        Load main configuration.

        Returns:
            Config object with all settings

        Raises:
            ConfigError: If config file is invalid
        """
        settings_path = self.settings_path

        if not settings_path.exists():
            self.log.warning(f"No settings.yaml found at {settings_path}, using defaults")
            self._config = Config()
            return self._config

        try:
            with open(settings_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in settings.yaml: {e}")

        if not isinstance(data, dict):
            raise ConfigError("settings.yaml must contain a mapping at the top level")

        self._config = self._parse_config(data)
        self.log.info(f"Loaded config from {settings_path}")
        return self._config

    def _parse_config(self, data: Dict[str, Any]) -> Config:
        """Parse raw YAML data into Config object."""
        general = data.get("general") or {}
        client = data.get("client") or {}
        vendor = data.get("vendor") or {}
        sync = data.get("sync") or {}
        export = data.get("export") or {}
        logging_cfg = data.get("logging") or {}

        flash_slot = str(sync.get("flash_slot", "first")).lower()
        if flash_slot not in FLASH_SLOTS:
            self.log.warning(f"Unknown flash slot '{flash_slot}', defaulting to first")
            flash_slot = "first"

        try:
            config = Config(
                # General
                data_dir=str(general.get("data_dir", "data")),
                page_marker=str(general.get("page_marker", "RS")),
                # Local client
                install_dir=str(client.get("install_dir", DEFAULT_INSTALL_DIR)),
                lockfile=str(client.get("lockfile") or ""),
                client_timeout=float(client.get("request_timeout", 2.0)),
                # Vendor
                vendor_region=str(vendor.get("region", "12")),
                vendor_rank=str(vendor.get("rank", "10")),
                vendor_api_version=str(vendor.get("api_version", "1.5")),
                vendor_overview_version=str(vendor.get("overview_version", "1.5.0")),
                vendor_concurrency=int(vendor.get("concurrency", 5)),
                vendor_timeout=float(vendor.get("request_timeout", 10.0)),
                # Sync loop
                poll_interval=float(sync.get("poll_interval", 2.5)),
                in_game_poll_interval=float(sync.get("in_game_poll_interval", 10.0)),
                role_fallback=bool(sync.get("role_fallback", True)),
                apply_spells=bool(sync.get("apply_spells", True)),
                flash_slot=flash_slot,
                # Item set export
                export_enabled=bool(export.get("enabled", True)),
                builds_dir=str(export.get("builds_dir") or ""),
                # Logging
                log_level=str(logging_cfg.get("level", "INFO")).upper(),
                log_dir=str(logging_cfg.get("directory", "logs")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in settings.yaml: {e}")

        if config.vendor_concurrency < 1:
            raise ConfigError("vendor.concurrency must be at least 1")
        if config.poll_interval <= 0 or config.in_game_poll_interval <= 0:
            raise ConfigError("sync poll intervals must be positive")

        return config

    def get_config(self) -> Config:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            self.load()
        return self._config

    def save(self, config: Config) -> None:
        """
        Save configuration to settings.yaml.

        Args:
            config: Config object to save
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        settings_path = self.settings_path

        data = {
            "general": {
                "data_dir": config.data_dir,
                "page_marker": config.page_marker,
            },
            "client": {
                "install_dir": config.install_dir,
                "lockfile": config.lockfile,
                "request_timeout": config.client_timeout,
            },
            "vendor": {
                "region": config.vendor_region,
                "rank": config.vendor_rank,
                "api_version": config.vendor_api_version,
                "overview_version": config.vendor_overview_version,
                "concurrency": config.vendor_concurrency,
                "request_timeout": config.vendor_timeout,
            },
            "sync": {
                "poll_interval": config.poll_interval,
                "in_game_poll_interval": config.in_game_poll_interval,
                "role_fallback": config.role_fallback,
                "apply_spells": config.apply_spells,
                "flash_slot": config.flash_slot,
            },
            "export": {
                "enabled": config.export_enabled,
                "builds_dir": config.builds_dir,
            },
            "logging": {
                "level": config.log_level,
                "directory": config.log_dir,
            },
        }

        with open(settings_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        self.log.info(f"Saved config to {settings_path}")

    def get_builds_dir(self, config: Optional[Config] = None) -> Path:
        """
        Directory the client reads item sets from.

        Args:
            config: Config to resolve against (defaults to the loaded one)
        """
        config = config or self.get_config()
        if config.builds_dir:
            return Path(config.builds_dir)
        return Path(config.install_dir) / "Config" / "Champions"

    def get_lockfile_candidates(self, config: Optional[Config] = None) -> list:
        """
        Lockfile paths to try, most specific first.

        Order: LOL_LOCKFILE environment variable, configured lockfile,
        lockfile in the configured install directory, then the usual
        install locations.
        """
        config = config or self.get_config()
        candidates = []

        env_path = os.environ.get("LOL_LOCKFILE")
        if env_path:
            candidates.append(Path(env_path))
        if config.lockfile:
            candidates.append(Path(config.lockfile))
        candidates.append(Path(config.install_dir) / "lockfile")
        for default_dir in DEFAULT_LOCKFILE_DIRS:
            path = Path(default_dir) / "lockfile"
            if path not in candidates:
                candidates.append(path)

        return candidates


DEFAULT_LOCKFILE_DIRS = (
    DEFAULT_INSTALL_DIR,
    "/Applications/League of Legends.app/Contents/LoL",
)
