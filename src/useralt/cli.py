"""Typer CLI entrypoint for useralt."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path

import click
import typer
import yaml

from useralt.backend import UpdateAlternatives
from useralt.config import AppSettings, load_settings
from useralt.errors import UserAltError
from useralt.importer import find_source_report, import_group, plan_import
from useralt.logging_utils import configure_logging
from useralt.overlay import (
    SYSTEM_ROOT_NAME,
    OverlayRoot,
    active_root,
    create_session_base,
    ensure_overlay_directories,
    import_sources,
    overlay_root,
    persistent_root,
    system_root,
)
from useralt.paths.search import SearchPaths

app = typer.Typer(
    add_completion=False,
    help="Manage a per-user overlay of alternative groups.",
    no_args_is_help=True,
)


@dataclass(frozen=True, slots=True)
class CliState:
    config_file: Path | None = None
    verbose: bool = False


def build_backend(settings: AppSettings, logger: logging.Logger) -> UpdateAlternatives:
    return UpdateAlternatives(program=settings.executable.program, logger=logger)


def _load_and_optionally_configure_logger(
    ctx: typer.Context,
    configure: bool,
) -> tuple[AppSettings, logging.Logger]:
    state: CliState = ctx.obj or CliState()
    settings = load_settings(config_file=state.config_file)
    if configure:
        level = logging.DEBUG if state.verbose else logging.INFO
        logger = configure_logging(settings.paths.logs_root / "useralt.log", level=level)
    else:
        logger = logging.getLogger("useralt")
    return settings, logger


def _fail(logger: logging.Logger, exc: UserAltError) -> typer.Exit:
    logger.error("useralt.failed %s: %s", type(exc).__name__, exc)
    typer.echo(f"error: {exc}", err=True)
    return typer.Exit(code=1)


def _search_paths_for(settings: AppSettings, sources: list[OverlayRoot]) -> SearchPaths:
    """Process lookup paths, with the bin/man trees of user overlays in front."""

    overlays = [root for root in sources if root.name != SYSTEM_ROOT_NAME]
    environment = SearchPaths.from_environment(manual_fallback=settings.search.manual_fallback)
    return environment.with_prefix(
        executables=[str(root.bin_dir) for root in overlays],
        manuals=[str(root.man_dir) for root in overlays],
    )


def _resolve_link(root: OverlayRoot, link: str) -> str:
    return link if link.startswith("/") else str(root.link_path(link))


def _run_verb(ctx: typer.Context, args: list[str]) -> None:
    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    _run_on_root(settings, logger, active_root(settings), args)


def _run_on_root(settings: AppSettings, logger: logging.Logger, root: OverlayRoot, args: list[str]) -> None:
    ensure_overlay_directories(root)
    try:
        build_backend(settings, logger).run(root, args)
    except UserAltError as exc:
        raise _fail(logger, exc) from exc


def _passthrough_verb(ctx: typer.Context, args: list[str]) -> None:
    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    root = active_root(settings)
    try:
        returncode = build_backend(settings, logger).passthrough(root, args)
    except UserAltError as exc:
        raise _fail(logger, exc) from exc
    if returncode != 0:
        raise typer.Exit(code=returncode)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Manage a per-user overlay of alternative groups."""

    ctx.obj = CliState(config_file=config_file, verbose=verbose)


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(ctx, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("init")
def init(ctx: typer.Context) -> None:
    """Create the active overlay's link and state directories."""

    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    root = active_root(settings)
    created_dirs = ensure_overlay_directories(root)
    logger.info("init.created_dirs root=%s count=%s", root.name, len(created_dirs))
    for directory in created_dirs:
        typer.echo(str(directory))


@app.command("env")
def env(
    ctx: typer.Context,
    session: bool = typer.Option(
        False,
        "--session",
        help="Create a temporary overlay for this shell and export it.",
    ),
) -> None:
    """Print shell export lines that put the overlay on PATH and MANPATH."""

    settings, _ = _load_and_optionally_configure_logger(ctx, configure=False)
    roots = [persistent_root(settings)]
    if session:
        session_root = overlay_root(create_session_base(), settings.executable, name="session")
        ensure_overlay_directories(session_root)
        roots.insert(0, session_root)
        typer.echo(f"export USERALT_PATHS__SESSION_ROOT={shlex.quote(str(session_root.base))}")
    elif settings.paths.session_root is not None:
        roots.insert(0, active_root(settings))

    bin_dirs = ":".join(shlex.quote(str(root.bin_dir)) for root in roots)
    man_dirs = ":".join(shlex.quote(str(root.man_dir)) for root in roots)
    typer.echo(f'export PATH={bin_dirs}:"$PATH"')
    typer.echo(f'export MANPATH={man_dirs}:"${{MANPATH:-}}"')


@app.command("query")
def query(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
    system: bool = typer.Option(False, "--system", help="Query the system root instead of the overlay."),
) -> None:
    """Query one group and print its parsed report as YAML."""

    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    root = system_root(settings.executable) if system else active_root(settings)
    try:
        _, report = find_source_report(name, [root], build_backend(settings, logger), logger=logger)
    except UserAltError as exc:
        raise _fail(logger, exc) from exc
    typer.echo(yaml.safe_dump(report.as_dict(), sort_keys=False))


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
    root_dir: Path | None = typer.Option(
        None,
        "--root",
        help="Overlay base directory to import into (default: active overlay).",
        file_okay=False,
        dir_okay=True,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the operations without running them."),
) -> None:
    """Recreate a group from the user or system root inside the overlay."""

    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    target = overlay_root(root_dir, settings.executable, name="target") if root_dir else active_root(settings)
    sources = import_sources(settings, target)
    search_paths = _search_paths_for(settings, sources)
    backend = build_backend(settings, logger)

    try:
        if dry_run:
            source, report = find_source_report(name, sources, backend, logger=logger)
            plan = plan_import(report, target, search_paths, logger=logger)
            operations = plan.operations
        else:
            ensure_overlay_directories(target)
            result = import_group(name, target, sources, backend, search_paths, logger=logger)
            source, plan, operations = result.source, result.plan, result.applied
    except UserAltError as exc:
        raise _fail(logger, exc) from exc

    typer.echo(f"source: {source.describe()}")
    typer.echo(f"target: {target.describe()}")
    for operation in operations:
        typer.echo(operation.describe())
    for warning in plan.warnings:
        typer.echo(f"warning: {warning}", err=True)


@app.command("install")
def install(
    ctx: typer.Context,
    link: str = typer.Argument(..., help="Link path; relative paths are placed under the overlay."),
    name: str = typer.Argument(..., help="Alternative group name."),
    path: str = typer.Argument(..., help="Alternative being offered."),
    priority: int = typer.Argument(..., min=0, help="Candidate priority."),
    slaves: list[str] | None = typer.Option(
        None,
        "--slave",
        click_type=click.Tuple([str, str, str]),
        metavar="LINK NAME PATH",
        help="Secondary link installed with the candidate; repeatable.",
    ),
) -> None:
    """Install one candidate for a group in the active overlay."""

    settings, logger = _load_and_optionally_configure_logger(ctx, configure=True)
    root = active_root(settings)
    args = ["--install", _resolve_link(root, link), name, path, str(priority)]
    for slave_link, slave_name, slave_path in slaves or []:
        args.extend(["--slave", _resolve_link(root, slave_link), slave_name, slave_path])
    _run_on_root(settings, logger, root, args)


@app.command("remove")
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
    path: str = typer.Argument(..., help="Alternative to remove."),
) -> None:
    """Remove one candidate from a group in the active overlay."""

    _run_verb(ctx, ["--remove", name, path])


@app.command("set")
def set_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
    path: str = typer.Argument(..., help="Alternative to select."),
) -> None:
    """Pin a group to one alternative in the active overlay."""

    _run_verb(ctx, ["--set", name, path])


@app.command("auto")
def auto(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
) -> None:
    """Return a group to automatic selection in the active overlay."""

    _run_verb(ctx, ["--auto", name])


@app.command("display")
def display(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
) -> None:
    """Show a group as the alternatives executable reports it."""

    _passthrough_verb(ctx, ["--display", name])


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
) -> None:
    """List the alternatives of a group."""

    _passthrough_verb(ctx, ["--list", name])


@app.command("config")
def config(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Alternative group name."),
) -> None:
    """Interactively choose an alternative (prompt handled by the executable)."""

    _passthrough_verb(ctx, ["--config", name])


def main() -> None:
    """CLI script entrypoint."""

    app()


if __name__ == "__main__":
    main()
