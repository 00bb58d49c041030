"""runesync - Main CLI entry point."""

import signal
import sys
from typing import Optional

import click

from runesync.clients.ddragon import DataDragonClient
from runesync.clients.lcu import LcuClient
from runesync.clients.vendor import UggClient
from runesync.data.catalog import CatalogStore, assemble_catalog, load_or_assemble
from runesync.data.config import ConfigError, ConfigManager
from runesync.data.item_sets import ItemSetExporter
from runesync.data.models import BuildCatalog, Config
from runesync.state_machine import SessionReconciler
from runesync.utils.error_handler import ErrorHandler, RuneSyncError
from runesync.utils.logger import get_logger, setup_logger


class SyncRunner:
    """Wires clients, catalog and reconciler together."""

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self.config: Config = config_manager.get_config()
        self.log = get_logger()

        self.ddragon = DataDragonClient()
        self.vendor = UggClient(
            region=self.config.vendor_region,
            rank=self.config.vendor_rank,
            api_version=self.config.vendor_api_version,
            overview_version=self.config.vendor_overview_version,
            timeout=self.config.vendor_timeout,
        )
        self.store = CatalogStore(data_dir=self.config.data_dir)
        self.error_handler = ErrorHandler()

        self.reconciler: Optional[SessionReconciler] = None

    def load_catalog(self, force: bool = False) -> BuildCatalog:
        """
        Cached catalog for the current reference data, assembled on a miss.

        Raises:
            RuneSyncError: Reference data or the vendor patch is unavailable
        """
        reference_version = self.ddragon.get_latest_version()
        self.log.info(f"Reference data version: {reference_version}")

        def assemble() -> BuildCatalog:
            patch = self.vendor.get_current_patch_version()
            self.vendor.check_patch_alignment(reference_version, patch)

            champions = self.ddragon.get_champions(reference_version)
            rune_trees = self.ddragon.get_rune_trees(reference_version)

            return assemble_catalog(
                champions,
                lambda character: self.vendor.get_role_data(character, patch),
                rune_trees,
                patch,
                max_workers=self.config.vendor_concurrency,
            )

        return load_or_assemble(self.store, reference_version, assemble, force=force)

    def export(self, catalog: BuildCatalog) -> int:
        """Write item sets for every build. Returns the number of files."""
        exporter = ItemSetExporter(
            builds_path=str(self.config_manager.get_builds_dir(self.config)),
            marker=self.config.page_marker,
        )
        return len(exporter.export(catalog))

    def start(self, catalog: BuildCatalog) -> None:
        """Run the reconciler until stopped."""
        lcu = LcuClient(
            self.config_manager.get_lockfile_candidates(self.config),
            timeout=self.config.client_timeout,
        )
        lcu.connect()

        self.reconciler = SessionReconciler(
            catalog=catalog,
            session=lcu,
            inventory=lcu,
            selection=lcu,
            config=self.config,
            error_handler=self.error_handler,
        )

        self.log.info("Watching champion select. Press Ctrl+C to stop.")
        self.reconciler.start()
        try:
            while not self.reconciler.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            self.log.info("Stopped by user")
        finally:
            self.shutdown()

    def shutdown(self):
        """Stop the reconciler and print a summary."""
        if self.reconciler is None:
            return
        self.reconciler.stop()

        self.log.info("=" * 60)
        self.log.info("SESSION SUMMARY")
        self.log.info("=" * 60)
        self.log.info(f"Ticks: {self.reconciler.tick_count}")
        self.log.info(f"Builds applied: {self.reconciler.applied_count}")
        self.log.info(f"Failed applies: {self.reconciler.failed_count}")
        self.log.info(f"Errors: {self.error_handler.get_error_count()}")
        self.log.info("=" * 60)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Set logging level (overrides settings.yaml)",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=None,
    help="Directory for log files (overrides settings.yaml)",
)
@click.option(
    "--config-dir",
    type=click.Path(),
    default="config",
    help="Directory containing settings.yaml",
)
@click.pass_context
def cli(ctx, log_level: Optional[str], log_dir: Optional[str], config_dir: str):
    """runesync - rune pages and summoner spells from build statistics.

    Downloads recommended builds for every champion and applies the one
    for your pick during champion select.
    """
    ctx.ensure_object(dict)

    config_manager = ConfigManager(config_dir)
    try:
        config = config_manager.load()
    except ConfigError as e:
        setup_logger(level=log_level or "INFO", log_dir=log_dir or "logs")
        get_logger().error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logger(level=log_level or config.log_level, log_dir=log_dir or config.log_dir)

    ctx.obj["logger"] = get_logger()
    ctx.obj["config_manager"] = config_manager


def _load_catalog(runner: SyncRunner, log, force: bool = False) -> BuildCatalog:
    try:
        return runner.load_catalog(force=force)
    except RuneSyncError as e:
        runner.error_handler.handle(e, operation="load build catalog")
        log.error("Build data is unavailable, exiting")
        sys.exit(1)


@cli.command()
@click.option("--force", is_flag=True, help="Ignore the cached catalog")
@click.pass_context
def build(ctx, force: bool):
    """Download and cache build data."""
    log = ctx.obj["logger"]
    runner = SyncRunner(ctx.obj["config_manager"])

    catalog = _load_catalog(runner, log, force=force)
    log.info(
        f"Catalog for patch {catalog.patch_version}: "
        f"{len(catalog.entries)} champions, {catalog.build_count} builds"
    )


@cli.command()
@click.pass_context
def export(ctx):
    """Write recommended item sets into the client's config directory."""
    log = ctx.obj["logger"]
    runner = SyncRunner(ctx.obj["config_manager"])

    catalog = _load_catalog(runner, log)
    try:
        count = runner.export(catalog)
    except OSError as e:
        log.error(f"Failed to export item sets: {e}")
        sys.exit(1)
    click.echo(f"Exported {count} item sets")


@cli.command()
@click.pass_context
def sync(ctx):
    """Apply builds during champion select until stopped."""
    log = ctx.obj["logger"]

    log.info("=" * 50)
    log.info("runesync starting")
    log.info("=" * 50)

    runner = SyncRunner(ctx.obj["config_manager"])
    catalog = _load_catalog(runner, log)

    if runner.config.export_enabled:
        try:
            runner.export(catalog)
        except OSError as e:
            log.warning(f"Could not export item sets: {e}")

    def signal_handler(signum, frame):
        log.info("Received shutdown signal")
        if runner.reconciler:
            runner.reconciler.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        runner.start(catalog)
    except RuneSyncError as e:
        log.error(f"Cannot reach the game client: {e}")
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    from runesync import __version__

    click.echo(f"runesync v{__version__}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
