import logging
import sqlite3
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from .config import CONFIG_FILENAME, AppConfig, ConfigError
from .estimate import print_estimate
from .identity import IdentityResolver, UidCache
from .ingest import Ingestor, RetryPolicy
from .models import IngestStats
from .reporter import ProgressReporter
from .usage_db import UsageDB
from .UsageStore import UsageStore
from .walker import walk_tree

logger: logging.Logger = logging.getLogger("diskusage")


def package_version() -> str:
    try:
        return version(distribution_name="diskusage")
    except PackageNotFoundError:
        return "unknown (package not installed)"


app: typer.Typer = typer.Typer(
    help=f"diskusage — track disk usage per directory\n\nVersion: {package_version()}",
)


def configure_logging(debug: bool = False) -> None:
    root: logging.Logger = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(show_path=False, rich_tracebacks=True))
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def print_version(is_version: bool) -> None:
    """
    Callback for the global --version / -V option.

    Prints the installed version of the 'diskusage' package and exits
    before any subcommand runs.
    """
    if not is_version:
        return

    typer.echo(package_version())
    raise typer.Exit()


def load_config() -> AppConfig:
    try:
        return AppConfig.load()
    except ConfigError as e:
        typer.echo(e)
        raise typer.Exit(code=1)


def retry_policy(cfg: AppConfig) -> RetryPolicy:
    return RetryPolicy(
        min_delay=cfg.retry_min_delay,
        max_delay=cfg.retry_max_delay,
        time_unit=cfg.retry_time_unit,
        max_attempts=cfg.retry_max_attempts,
    )


def walk_command(cfg: AppConfig, root_dir: Path) -> IngestStats:
    with UsageDB(cfg.db_path, create_schema=True) as db:
        store: UsageStore = UsageStore(db)
        logger.info("Connected to database: %s", cfg.db_path)

        reporter: ProgressReporter = ProgressReporter(
            count_files=store.count_files,
            count_directories=store.count_directories,
            interval=cfg.log_frequency,
        )
        reporter.start()

        ingestor: Ingestor = Ingestor(
            store=store,
            resolver=IdentityResolver(store=store, cache=UidCache()),
            retry=retry_policy(cfg),
        )

        try:
            logger.info("Starting disk usage tracking for: %s", root_dir)
            stats: IngestStats = ingestor.run(
                walk_tree(root_dir, max_workers=cfg.max_workers),
                max_workers=cfg.max_workers,
                max_in_flight=cfg.max_inflight,
            )
        finally:
            reporter.stop()

    logger.info(
        "Stored %s directories and %s files (%s skipped, %s failed)",
        stats.directories,
        stats.files,
        stats.skipped,
        stats.failed,
    )
    return stats


@app.command()
def walk(
    root_dir: Annotated[Path, typer.Option("--root-dir", "-r", help="The root directory to track.")],
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Enable debug logging.")] = False,
    max_workers: Annotated[int | None, typer.Option(min=1)] = None,
    max_inflight: Annotated[int | None, typer.Option(min=1)] = None,
) -> None:
    """Walk a directory tree and record its files and directories."""
    configure_logging(debug)

    if not root_dir.exists():
        typer.echo(f"Root directory does not exist: {root_dir}")
        raise typer.Exit(code=1)
    if not root_dir.is_dir():
        typer.echo(f"Root directory is not a directory: {root_dir}")
        raise typer.Exit(code=1)

    cfg: AppConfig = load_config()

    if max_workers is not None:
        cfg.max_workers = max_workers
    if max_inflight is not None:
        cfg.max_inflight = max_inflight

    _ = walk_command(cfg, root_dir.resolve())


@app.command()
def estimate(
    path: Annotated[str, typer.Option("--path", "-p", help="The directory to estimate.")],
    top: Annotated[int, typer.Option(min=0, help="How many of the largest files to list.")] = 5,
) -> None:
    """Estimate the size of a recorded directory and list its largest files."""
    cfg: AppConfig = load_config()

    if not cfg.db_path.exists():
        typer.echo(f"No database at {cfg.db_path}. Run diskusage walk first.")
        raise typer.Exit(code=1)

    with UsageDB(cfg.db_path) as db:
        try:
            _ = print_estimate(UsageStore(db), path, top)
        except sqlite3.Error as e:
            typer.echo(f"Cannot read {cfg.db_path}: {e}")
            raise typer.Exit(code=1)


@app.command(name="init-db")
def init_db(
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Print the statements instead of running them.")] = False,
) -> None:
    """Drop all tables and create them again."""
    cfg: AppConfig = load_config()

    with UsageDB(cfg.db_path) as db:
        logger.warning("Dropping all tables...")
        logger.warning("Initializing database...")
        db.reset_schema(debug=debug)

    logger.info("Database initialized.")


@app.command()
def config(
    force: Annotated[bool, typer.Option()] = False,
) -> None:
    """Write the current tuning settings to the config file."""
    if CONFIG_FILENAME.exists() and not force:
        typer.echo("Config file already exists. Use --force to overwrite.")
        raise typer.Exit(code=1)

    cfg: AppConfig = load_config()
    cfg.save(CONFIG_FILENAME)
    typer.echo(f"Config written to {CONFIG_FILENAME}")


@app.command(name="version")
def version_cmd() -> None:
    """Print the installed version of diskusage."""
    print_version(True)


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=print_version,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """
    Global options for diskusage. All subcommands run after this callback
    unless --version is used.
    """
    configure_logging()


if __name__ == "__main__":
    app()
