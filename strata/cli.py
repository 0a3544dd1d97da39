"""Command line interface for Strata."""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .config import (
    load_config,
    normalize_log_level,
    normalize_max_depth,
    normalize_patterns,
    resolve_debug,
)
from .loader import CumulativeResourceInfo, FlatContent, TreeContent
from .logs import init_logging
from .output import format_freshness
from .services.build_service import BuildRequest, BuildStatus, build_manifest, encode_info, make_loader
from .services.cache_service import clear_cache_file, inspect_cache
from .services.config_service import apply_config_updates, get_config_snapshot
from .text import Messages, Styles
from .utils import format_path, layer_of, resolve_directory

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class ScanOutputFormat(str, Enum):
    rich = "rich"
    json = "json"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Strata v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _styled(text: str, style: str) -> str:
    return f"[{style}]{escape(text)}[/{style}]"


def _resolve_root(path: Path) -> Path:
    try:
        return resolve_directory(path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1) from exc


def _resolve_override(path: Path | None) -> Path | None:
    if path is None:
        return None
    return path.expanduser().resolve()


def _resolve_scan_options(
    patterns: Sequence[str] | None,
    max_depth: int | None,
    tree: bool | None,
) -> tuple[tuple[str, ...], int, bool]:
    config = load_config()
    effective_patterns = normalize_patterns(patterns) or config.patterns
    depth = config.max_depth if max_depth is None else max_depth
    try:
        depth = normalize_max_depth(depth)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    flat = config.flat if tree is None else not tree
    return effective_patterns, depth, flat


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help=Messages.HELP_LOG_LEVEL,
    ),
) -> None:
    """Global Typer callback for shared options."""
    level = log_level or load_config().log_level
    try:
        init_logging(level)
    except ValueError as exc:
        raise typer.BadParameter(
            Messages.ERROR_LOG_LEVEL_INVALID.format(value=level)
        ) from exc


@app.command()
def scan(
    relative_path: str = typer.Argument(..., help=Messages.HELP_RELATIVE_PATH),
    root: Path = typer.Option(Path.cwd(), "--root", "-r", help=Messages.HELP_ROOT),
    override: Path | None = typer.Option(None, "--override", "-o", help=Messages.HELP_OVERRIDE),
    patterns: list[str] | None = typer.Option(None, "--pattern", "-p", help=Messages.HELP_PATTERN),
    regex: bool = typer.Option(False, "--regex", help=Messages.HELP_REGEX),
    max_depth: int | None = typer.Option(None, "--max-depth", "-d", help=Messages.HELP_MAX_DEPTH),
    tree: bool | None = typer.Option(None, "--tree/--flat", help=Messages.HELP_TREE),
    output_format: ScanOutputFormat = typer.Option(
        ScanOutputFormat.rich,
        "--format",
        help=Messages.HELP_FORMAT,
    ),
) -> None:
    """List the files a build would collect."""
    base_dir = _resolve_root(root)
    override_dir = _resolve_override(override)
    effective_patterns, depth, flat = _resolve_scan_options(patterns, max_depth, tree)
    try:
        loader = make_loader(
            relative_path,
            patterns=effective_patterns,
            regex=regex,
            max_depth=depth,
            flat=flat,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    info = loader.load(base_dir.name or str(base_dir), base_dir, override_dir)
    if info is None:
        console.print(_styled(Messages.INFO_SCAN_EMPTY.format(path=relative_path), Styles.WARNING))
        raise typer.Exit(code=0)
    if output_format == ScanOutputFormat.json:
        typer.echo(json.dumps(encode_info(info), indent=2, ensure_ascii=False))
        return
    _render_info(info, override_dir)


@app.command()
def build(
    relative_path: str = typer.Argument(..., help=Messages.HELP_RELATIVE_PATH),
    cache: Path = typer.Option(..., "--cache", "-c", help=Messages.HELP_CACHE),
    root: Path = typer.Option(Path.cwd(), "--root", "-r", help=Messages.HELP_ROOT),
    override: Path | None = typer.Option(None, "--override", "-o", help=Messages.HELP_OVERRIDE),
    patterns: list[str] | None = typer.Option(None, "--pattern", "-p", help=Messages.HELP_PATTERN),
    regex: bool = typer.Option(False, "--regex", help=Messages.HELP_REGEX),
    max_depth: int | None = typer.Option(None, "--max-depth", "-d", help=Messages.HELP_MAX_DEPTH),
    tree: bool | None = typer.Option(None, "--tree/--flat", help=Messages.HELP_TREE),
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help=Messages.HELP_DEBUG),
    force: bool = typer.Option(False, "--force", "-f", help=Messages.HELP_FORCE),
) -> None:
    """Compile the collected file list into a cache artifact unless it is fresh."""
    base_dir = _resolve_root(root)
    effective_patterns, depth, flat = _resolve_scan_options(patterns, max_depth, tree)
    cache_path = cache.expanduser().resolve()
    request = BuildRequest(
        relative_path=relative_path,
        root=base_dir,
        cache_path=cache_path,
        override=_resolve_override(override),
        debug=resolve_debug(debug),
        patterns=effective_patterns,
        regex=regex,
        max_depth=depth,
        flat=flat,
        force=force,
    )
    console.print(_styled(Messages.INFO_BUILD_RUNNING.format(path=cache_path), Styles.INFO))
    try:
        result = build_manifest(request)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except OSError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1) from exc

    if result.status == BuildStatus.UP_TO_DATE:
        console.print(_styled(Messages.INFO_BUILD_UP_TO_DATE.format(path=result.cache_path), Styles.INFO))
        return
    if result.status == BuildStatus.EMPTY:
        console.print(_styled(Messages.INFO_BUILD_EMPTY.format(path=result.cache_path), Styles.WARNING))
        return
    plural = "" if result.files == 1 else "s"
    console.print(
        _styled(
            Messages.INFO_BUILD_SAVED.format(path=result.cache_path, files=result.files, plural=plural),
            Styles.SUCCESS,
        )
    )


@app.command()
def check(
    cache: Path = typer.Option(..., "--cache", "-c", help=Messages.HELP_CACHE),
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help=Messages.HELP_DEBUG),
) -> None:
    """Report whether a cache artifact is still fresh (exit code 1 when it is not)."""
    report = inspect_cache(cache.expanduser().resolve(), debug=resolve_debug(debug))
    if not report.exists:
        console.print(_styled(Messages.INFO_CHECK_MISSING.format(path=report.path), Styles.WARNING))
        raise typer.Exit(code=1)
    message = Messages.INFO_CHECK_FRESH if report.fresh else Messages.INFO_CHECK_STALE
    console.print(f"{format_freshness(report.fresh, console)} {escape(message.format(path=report.path))}")
    console.print(
        _styled(
            Messages.INFO_CHECK_SUMMARY.format(
                mode="debug" if report.debug else "production",
                generated=report.generated_at,
                resources=report.resources if report.debug else "not tracked",
            ),
            Styles.INFO,
        )
    )
    if not report.fresh:
        raise typer.Exit(code=1)


@app.command()
def clear(
    cache: Path = typer.Option(..., "--cache", "-c", help=Messages.HELP_CACHE),
) -> None:
    """Delete a cache artifact and its metadata."""
    cache_path = cache.expanduser().resolve()
    if clear_cache_file(cache_path):
        console.print(_styled(Messages.INFO_CLEARED.format(path=cache_path), Styles.SUCCESS))
    else:
        console.print(_styled(Messages.INFO_CLEAR_NONE.format(path=cache_path), Styles.INFO))


@app.command()
def config(
    set_debug_option: str | None = typer.Option(
        None,
        "--set-debug",
        help=Messages.HELP_SET_DEBUG,
    ),
    set_max_depth_option: int | None = typer.Option(
        None,
        "--set-max-depth",
        help=Messages.HELP_SET_MAX_DEPTH,
    ),
    set_pattern_option: list[str] | None = typer.Option(
        None,
        "--set-pattern",
        help=Messages.HELP_SET_PATTERN,
    ),
    clear_patterns: bool = typer.Option(
        False,
        "--clear-patterns",
        help=Messages.HELP_CLEAR_PATTERNS,
    ),
    set_flat_option: str | None = typer.Option(
        None,
        "--set-flat",
        help=Messages.HELP_SET_FLAT,
    ),
    set_log_level_option: str | None = typer.Option(
        None,
        "--set-log-level",
        help=Messages.HELP_SET_LOG_LEVEL,
    ),
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
) -> None:
    """Manage Strata configuration stored in ~/.strata/config.json."""
    try:
        debug_value = _parse_boolean(set_debug_option) if set_debug_option is not None else None
        flat_value = _parse_boolean(set_flat_option) if set_flat_option is not None else None
        if set_max_depth_option is not None:
            normalize_max_depth(set_max_depth_option)
        if set_log_level_option is not None:
            set_log_level_option = normalize_log_level(set_log_level_option)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        updates = apply_config_updates(
            debug=debug_value,
            max_depth=set_max_depth_option,
            patterns=set_pattern_option,
            clear_patterns=clear_patterns,
            flat=flat_value,
            log_level=set_log_level_option,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    cfg = get_config_snapshot()
    if updates.debug_set:
        console.print(_styled(Messages.INFO_DEBUG_SET.format(value="on" if cfg.debug else "off"), Styles.SUCCESS))
    if updates.max_depth_set:
        console.print(_styled(Messages.INFO_MAX_DEPTH_SET.format(value=cfg.max_depth), Styles.SUCCESS))
    if updates.patterns_cleared and not updates.patterns_set:
        console.print(_styled(Messages.INFO_PATTERNS_CLEARED, Styles.SUCCESS))
    if updates.patterns_set:
        console.print(_styled(Messages.INFO_PATTERNS_SET.format(value=", ".join(cfg.patterns)), Styles.SUCCESS))
    if updates.flat_set:
        console.print(_styled(Messages.INFO_FLAT_SET.format(value="flat" if cfg.flat else "tree"), Styles.SUCCESS))
    if updates.log_level_set:
        console.print(_styled(Messages.INFO_LOG_LEVEL_SET.format(value=cfg.log_level), Styles.SUCCESS))

    if show:
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    debug="on" if cfg.debug else "off",
                    max_depth="unlimited" if cfg.max_depth == -1 else cfg.max_depth,
                    patterns=", ".join(cfg.patterns) if cfg.patterns else "all files",
                    structure="flat" if cfg.flat else "tree",
                    log_level=cfg.log_level,
                ),
                Styles.INFO,
            )
        )
    elif not updates.changed:
        console.print(_styled(Messages.INFO_NO_CONFIG_CHANGES, Styles.INFO))


def _render_info(info: CumulativeResourceInfo, override_dir: Path | None) -> None:
    console.print(_styled(Messages.TABLE_TITLE, Styles.TITLE))
    console.print(_styled(f"{info.name} ({info.path})", Styles.INFO))
    if isinstance(info.content, FlatContent):
        _render_flat(info.content, Path(info.path), override_dir)
    else:
        tree = Tree(escape(info.path))
        _fill_tree(tree, info.content, override_dir)
        console.print(tree)


def _render_flat(content: FlatContent, base: Path, override_dir: Path | None) -> None:
    table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_LAYER)
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    for idx, file in enumerate(content.files, start=1):
        path = Path(file)
        table.add_row(str(idx), layer_of(path, override_dir), escape(format_path(path, base)))
    console.print(table)


def _fill_tree(node: Tree, content: TreeContent, override_dir: Path | None) -> None:
    for file in content.files:
        path = Path(file)
        node.add(f"{escape(path.name)} [{Styles.INFO}]({layer_of(path, override_dir)})[/{Styles.INFO}]")
    for name, child in content.dirs.items():
        _fill_tree(node.add(f"[bold]{escape(name)}/[/bold]"), child, override_dir)


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    if argv is None:
        app()
    else:
        app(args=args)
