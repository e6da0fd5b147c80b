"""Command line interface for the abbrlink generator."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import coloredlogs

from config import Config, ConfigurationError, Encoding
from core.errors import AbbrlinkError
from core.inventory import VaultInventory
from core.notices import ConsoleNotifier
from core.outputs import ReportWriter
from core.processor import AbbrlinkProcessor, RunReport

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_CONFIG_FILE = Path(".abbrlink.yaml")

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Install colored console logging and an optional log file."""
    level = logging.DEBUG if verbose else logging.WARNING
    coloredlogs.install(level=level, fmt=LOG_FORMAT)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root = logging.getLogger()
        root.addHandler(file_handler)
        root.setLevel(min(root.level, file_handler.level))


_COMMON_OPTIONS = [
    click.option(
        "--root-dir",
        required=True,
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help="Root directory of the document collection",
    ),
    click.option(
        "--config-file",
        default=None,
        type=click.Path(dir_okay=False, path_type=Path),
        help=f"Settings YAML file (default: <root-dir>/{DEFAULT_CONFIG_FILE})",
    ),
    click.option("--hash-length", type=int, default=None, help="Abbrlink length (4-32)"),
    click.option(
        "--encoding",
        type=click.Choice([e.value for e in Encoding]),
        default=None,
        help="Abbrlink alphabet",
    ),
    click.option("--workers", type=int, default=None, help="Number of parallel workers"),
    click.option("--verbose", "-v", is_flag=True, help="Enable debug logging"),
    click.option("--log-file", type=click.Path(path_type=Path), help="Also log to this file"),
]


def common_options(func):
    """Options shared by every command that works on a collection."""
    for option in reversed(_COMMON_OPTIONS):
        func = option(func)
    return func


def config_path(root_dir: Path, config_file: Optional[Path]) -> Path:
    return config_file or root_dir / DEFAULT_CONFIG_FILE


def load_config(
    root_dir: Path, config_file: Optional[Path], workers: Optional[int] = None, **overrides
) -> Config:
    """Load settings from file and environment, then apply CLI overrides."""
    config = Config.from_yaml(config_path(root_dir, config_file))
    config.load_env()

    config = config.with_overrides(root_dir=root_dir, **overrides)
    if workers is not None:
        processing = {**config.processing.model_dump(), "workers": workers}
        config = config.with_overrides(processing=processing)
    return config


def print_summary(report: RunReport, dry_run: bool):
    """Print a minimal run summary to the terminal."""
    click.echo("=" * 60)
    click.echo("Abbrlink run complete" + (" (dry run)" if dry_run else ""))
    click.echo(f"  Documents: {report.total}")
    click.echo(f"  Selected: {report.processed}")
    if dry_run:
        click.echo(f"  Would write: {report.planned}")
    else:
        click.echo(f"  Written: {report.written}")
    click.echo(f"  Unchanged: {report.unchanged}")
    if report.state is not None:
        click.echo(f"  Collision check: {report.state.value} after {report.rounds} round(s)")
    if report.unresolved:
        click.echo(f"  Unresolved: {report.unresolved}")
    if report.failures:
        click.echo(f"  Failed: {len(report.failures)}")
    click.echo("=" * 60)


@click.group()
def cli():
    """Abbrlink - assign short unique hash identifiers to Markdown documents."""
    pass


@cli.command(short_help="Generate abbrlinks for every document in a collection")
@common_options
@click.option(
    "--skip-existing/--no-skip-existing",
    default=None,
    help="Leave documents that already have an abbrlink untouched",
)
@click.option(
    "--override-different-length/--no-override-different-length",
    default=None,
    help="Regenerate existing abbrlinks whose length differs from --hash-length",
)
@click.option("--random/--no-random", "use_random_mode", default=None, help="Use random hashes")
@click.option(
    "--check-collisions/--no-check-collisions",
    default=None,
    help="Resolve abbrlinks shared by several documents",
)
@click.option("--max-rounds", type=int, default=None, help="Maximum resolution rounds (1-10)")
@click.option("--fail-fast", is_flag=True, help="Abort the batch on the first I/O error")
@click.option("--dry-run", is_flag=True, help="Compute abbrlinks without writing files")
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a per-document report (.jsonl or .csv)",
)
@click.option("--save-config", is_flag=True, help="Persist the effective settings")
def generate(
    root_dir: Path,
    config_file: Optional[Path],
    hash_length: Optional[int],
    encoding: Optional[str],
    workers: Optional[int],
    verbose: bool,
    log_file: Optional[Path],
    skip_existing: Optional[bool],
    override_different_length: Optional[bool],
    use_random_mode: Optional[bool],
    check_collisions: Optional[bool],
    max_rounds: Optional[int],
    fail_fast: bool,
    dry_run: bool,
    report_path: Optional[Path],
    save_config: bool,
):
    """Generate abbrlinks for every document under ROOT_DIR."""
    setup_logging(verbose, log_file)

    try:
        config = load_config(
            root_dir,
            config_file,
            workers=workers,
            hash_length=hash_length,
            encoding=encoding,
            skip_existing=skip_existing,
            override_on_length_mismatch=override_different_length,
            use_random_mode=use_random_mode,
            check_collisions=check_collisions,
            max_rounds=max_rounds,
            dry_run=dry_run,
        )
        if fail_fast:
            config = config.with_overrides(
                processing={**config.processing.model_dump(), "fail_fast": True}
            )
    except ConfigurationError as e:
        click.secho(f"Invalid configuration: {e}", err=True, fg="red")
        sys.exit(2)

    if save_config:
        path = config_path(root_dir, config_file)
        config.to_yaml(path)
        logger.info(f"Saved settings to {path}")

    inventory = VaultInventory(
        root_dir,
        extensions=config.processing.extensions,
        ignore_patterns=config.processing.ignore_patterns,
    )
    processor = AbbrlinkProcessor(inventory, config, ConsoleNotifier())

    try:
        report = processor.process_files()
    except AbbrlinkError as e:
        logger.debug("Run aborted", exc_info=e)
        sys.exit(1)

    if report_path:
        ReportWriter().write(report.records, report_path)

    print_summary(report, dry_run)
    if report.failures:
        sys.exit(1)


@cli.command(short_help="Generate an abbrlink for a single new document")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@common_options
@click.option(
    "--use-config-mode",
    is_flag=True,
    help="Use the configured hash mode instead of random mode",
)
def assign(
    path: Path,
    root_dir: Path,
    config_file: Optional[Path],
    hash_length: Optional[int],
    encoding: Optional[str],
    workers: Optional[int],
    verbose: bool,
    log_file: Optional[Path],
    use_config_mode: bool,
):
    """Generate an abbrlink for PATH, checking it against the rest of ROOT_DIR."""
    setup_logging(verbose, log_file)

    try:
        config = load_config(
            root_dir, config_file, workers=workers, hash_length=hash_length, encoding=encoding
        )
    except ConfigurationError as e:
        click.secho(f"Invalid configuration: {e}", err=True, fg="red")
        sys.exit(2)

    inventory = VaultInventory(
        root_dir,
        extensions=config.processing.extensions,
        ignore_patterns=config.processing.ignore_patterns,
    )
    processor = AbbrlinkProcessor(inventory, config, ConsoleNotifier())

    try:
        abbrlink = processor.process_file(path, random_mode=None if use_config_mode else True)
    except AbbrlinkError as e:
        click.secho(f"Error generating abbrlink: {e}", err=True, fg="red")
        sys.exit(1)

    if abbrlink is None:
        sys.exit(1)
    click.echo(abbrlink)


@cli.command(short_help="Report abbrlinks shared by several documents")
@common_options
def check(
    root_dir: Path,
    config_file: Optional[Path],
    hash_length: Optional[int],
    encoding: Optional[str],
    workers: Optional[int],
    verbose: bool,
    log_file: Optional[Path],
):
    """List duplicate abbrlinks under ROOT_DIR without changing any file."""
    setup_logging(verbose, log_file)

    try:
        config = load_config(
            root_dir, config_file, workers=workers, hash_length=hash_length, encoding=encoding
        )
    except ConfigurationError as e:
        click.secho(f"Invalid configuration: {e}", err=True, fg="red")
        sys.exit(2)

    inventory = VaultInventory(
        root_dir,
        extensions=config.processing.extensions,
        ignore_patterns=config.processing.ignore_patterns,
    )
    conflicts = AbbrlinkProcessor(inventory, config, ConsoleNotifier()).find_existing_conflicts()

    if not conflicts:
        click.echo("No duplicate abbrlinks found")
        return

    for conflict in conflicts:
        click.echo(f"{conflict.abbrlink}:")
        for task in conflict.tasks:
            click.echo(f"  {task.document.file_path.relative_to(root_dir)}")
    sys.exit(1)


@cli.command("init-config", short_help="Write a settings file with default values")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(path: Path, force: bool):
    """Write default settings to PATH."""
    if path.exists() and not force:
        click.secho(f"{path} already exists, use --force to overwrite", err=True, fg="red")
        sys.exit(1)

    Config().to_yaml(path)
    click.echo(f"Wrote default settings to {path}")


if __name__ == "__main__":
    cli()
