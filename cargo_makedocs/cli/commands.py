"""CLI commands for cargo-makedocs.

Provides the Click-based command group that cargo dispatches to: for
``cargo makedocs ...`` cargo runs ``cargo-makedocs makedocs ...``.
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import click
import yaml

from cargo_makedocs import __version__
from cargo_makedocs.doc.command import build_doc_command, query_root_pkgid, run_command
from cargo_makedocs.doc.targets import compose_targets
from cargo_makedocs.errors import MakedocsError
from cargo_makedocs.manifest.models import DependencyKind
from cargo_makedocs.manifest.reader import ManifestReader, find_lock_file, find_manifest
from cargo_makedocs.manifest.resolver import resolve_dependencies
from cargo_makedocs.utils.config import AppConfig, load_config
from cargo_makedocs.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _fail(ctx: click.Context, error: MakedocsError) -> NoReturn:
    click.echo(f"error: {error}", err=True)
    ctx.exit(1)


def _dependency_kinds(
    config: AppConfig, no_buildtime: bool, no_dev: bool
) -> list[DependencyKind]:
    """Work out which dependency tables to document.

    Args:
        config: Loaded application config.
        no_buildtime: Whether --no-buildtime was given.
        no_dev: Whether --no-dev was given.

    Returns:
        Dependency kinds in resolution priority order.
    """
    kinds = [DependencyKind.NORMAL]
    if config.doc.build_dependencies and not no_buildtime:
        kinds.append(DependencyKind.BUILD)
    if config.doc.dev_dependencies and not no_dev:
        kinds.append(DependencyKind.DEV)
    return kinds


def _configure(config_path: Optional[str], log_level: Optional[str]) -> AppConfig:
    """Load the config file and set up logging from it.

    Args:
        config_path: YAML config file, or None for the default.
        log_level: Level overriding the configured one, if given.

    Returns:
        The loaded AppConfig.

    Raises:
        click.ClickException: If the config is invalid or the log file
            cannot be opened.
    """
    try:
        config = load_config(config_path)
    except (yaml.YAMLError, ValueError) as e:
        raise click.ClickException(f"invalid config: {e}") from e
    try:
        setup_logging(
            level=log_level or config.logging.level,
            log_format=config.logging.format,
            log_file=config.logging.file,
        )
    except OSError as e:
        raise click.ClickException(f"could not open log file: {e}") from e
    return config


_CONFIG_HELP = "Path to a YAML config file. Also read from CARGO_MAKEDOCS_CONFIG."
_LOG_LEVEL_HELP = "Override the configured log level. Also read from CARGO_MAKEDOCS_LOG."
_LOG_LEVELS = click.Choice(
    ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
)


@click.group()
@click.version_option(version=__version__, prog_name="cargo-makedocs")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="CARGO_MAKEDOCS_CONFIG",
    default=None,
    help=_CONFIG_HELP,
)
@click.option(
    "--log-level",
    type=_LOG_LEVELS,
    envvar="CARGO_MAKEDOCS_LOG",
    default=None,
    help=_LOG_LEVEL_HELP,
)
@click.pass_context
def cargo(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]) -> None:
    """cargo-makedocs: document only the direct dependencies of a crate."""
    ctx.obj = _configure(config_path, log_level)
    ctx.meta["cargo_makedocs.config_path"] = config_path
    ctx.meta["cargo_makedocs.log_level"] = log_level


@cargo.command()
@click.option(
    "-e",
    "--exclude",
    multiple=True,
    metavar="CRATE",
    help="Do not build documentation for a crate. Repeatable.",
)
@click.option(
    "-i",
    "--include",
    multiple=True,
    metavar="CRATE",
    help="Build documentation for a crate. Repeatable.",
)
@click.option("-o", "--open", "open_docs", is_flag=True, help="Open the built documentation.")
@click.option("-r", "--root", is_flag=True, help="Also build the documentation for the root crate.")
@click.option(
    "-d",
    "--document-private-items",
    is_flag=True,
    help="Pass --document-private-items when documenting the root crate (requires --root).",
)
@click.option("-n", "--no-buildtime", is_flag=True, help="Ignore build dependencies.")
@click.option("--no-dev", is_flag=True, help="Ignore dev dependencies.")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to Cargo.toml. By default it is searched for upwards from the current directory.",
)
@click.option("--dry-run", is_flag=True, help="Print the cargo command instead of running it.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=_CONFIG_HELP,
)
@click.option("--log-level", type=_LOG_LEVELS, default=None, help=_LOG_LEVEL_HELP)
@click.pass_context
def makedocs(
    ctx: click.Context,
    exclude: tuple[str, ...],
    include: tuple[str, ...],
    open_docs: bool,
    root: bool,
    document_private_items: bool,
    no_buildtime: bool,
    no_dev: bool,
    manifest_path: Optional[str],
    dry_run: bool,
    config_path: Optional[str],
    log_level: Optional[str],
) -> None:
    """Build docs for the current crate's direct dependencies only.

    Scans Cargo.toml and Cargo.lock and runs `cargo doc --no-deps` with
    one -p per direct dependency. Crates can be explicitly excluded
    with -e and included with -i; -i wins over -e.
    """
    config: AppConfig = ctx.obj
    if config_path or log_level:
        config = _configure(
            config_path or ctx.meta.get("cargo_makedocs.config_path"),
            log_level or ctx.meta.get("cargo_makedocs.log_level"),
        )
    if document_private_items and not root:
        raise click.UsageError("--document-private-items requires --root")

    reader = ManifestReader()
    try:
        manifest_file = Path(manifest_path) if manifest_path else find_manifest()
        manifest = reader.read_manifest(str(manifest_file))
        lock = reader.read_lock_file(str(find_lock_file(manifest_file)))
    except MakedocsError as e:
        _fail(ctx, e)

    kinds = _dependency_kinds(config, no_buildtime, no_dev)
    resolved = resolve_dependencies(manifest, lock, kinds)
    targets = compose_targets(
        (dep.name for dep in resolved),
        exclude=(*config.doc.exclude, *exclude),
        include=(*config.doc.include, *include),
    )

    if not targets and not root:
        click.echo("Found no crates to document", err=True)
        ctx.exit(1)

    program = config.cargo.program
    try:
        root_pkgid = query_root_pkgid(program, manifest_path) if root else None
        command = build_doc_command(
            targets,
            program=program,
            selectors={dep.name: dep.selector for dep in resolved},
            root_pkgid=root_pkgid,
            document_private_items=document_private_items,
            open_docs=open_docs,
            manifest_path=manifest_path,
        )
        if dry_run:
            click.echo(str(command))
            return
        exit_code = run_command(command)
    except MakedocsError as e:
        _fail(ctx, e)
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        ctx.exit(130)

    ctx.exit(exit_code)
