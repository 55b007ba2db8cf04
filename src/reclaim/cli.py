"""CLI interface for Reclaim."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Callable

import click

from reclaim.core.context import ScanContext
from reclaim.core.duplicates import DEFAULT_MAX_FILES, DEFAULT_MIN_SIZE, DuplicateDetector
from reclaim.core.engine import ReclaimEngine
from reclaim.core.errors import ProfileError, UnsafePathError
from reclaim.core.fs import DEFAULT_MAX_DEPTH
from reclaim.core.loader import build_registry
from reclaim.core.paths import expand_path
from reclaim.models.category import CATEGORIES, Category
from reclaim.models.clean_result import CleanSummary
from reclaim.models.scan_result import CleanableItem, ScanResult, ScanSummary
from reclaim.models.scanner import ScannerOptions
from reclaim.settings import Config, Settings, scanner_options
from reclaim.storage import BUILTIN_PROFILES, Profile, delete_profile, get_profile, load_profiles, save_profile
from reclaim.utils import bytes_to_human, disk_space, format_elapsed, parse_size

_SAFETY_COLORS = {"safe": "green", "moderate": "yellow", "risky": "red"}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine(config: Config) -> ReclaimEngine:
    context = ScanContext(config=config)
    return ReclaimEngine(build_registry(context))


def _safety_tag(category: Category) -> str:
    return click.style("●", fg=_SAFETY_COLORS[category.safety_level])


def _item_to_dict(item: CleanableItem) -> dict[str, Any]:
    return {
        "path": str(item.path),
        "name": item.name,
        "size": item.size,
        "is_directory": item.is_directory,
        "modified_at": item.modified_at.isoformat() if item.modified_at else None,
        "content_hash": item.content_hash,
    }


def _result_to_dict(result: ScanResult) -> dict[str, Any]:
    return {
        "category": result.category.id,
        "name": result.category.name,
        "safety_level": result.category.safety_level,
        "total_size": result.total_size,
        "item_count": len(result.items),
        "partial": result.partial,
        "error": result.error or None,
        "items": [_item_to_dict(i) for i in result.items],
    }


def _clean_summary_to_dict(summary: CleanSummary, dry_run: bool) -> dict[str, Any]:
    return {
        "status": "dry_run" if dry_run else "cleaned",
        "total_freed_space": summary.total_freed_space,
        "total_cleaned_items": summary.total_cleaned_items,
        "total_errors": summary.total_errors,
        "results": [
            {
                "category": r.category.id,
                "cleaned_items": r.cleaned_items,
                "freed_space": r.freed_space,
                "errors": r.errors,
                "skipped": [str(p) for p in r.skipped],
            }
            for r in summary.results
        ],
    }


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Use this configuration file instead of the default one",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None) -> None:
    """Reclaim — find and remove caches, temp files, duplicates and stale downloads."""
    _setup_logging(verbose)
    ctx.obj = Settings(config_path)


# ── categories ──────────────────────────────────────────────────────────

@main.command("categories")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def categories_cmd(as_json: bool) -> None:
    """List all known categories."""
    if as_json:
        data = [
            {
                "id": c.id,
                "name": c.name,
                "group": c.group,
                "safety_level": c.safety_level,
                "safety_note": c.safety_note,
            }
            for c in CATEGORIES.values()
        ]
        click.echo(json.dumps(data, indent=2))
        return

    grouped: dict[str, list[Category]] = {}
    for category in CATEGORIES.values():
        grouped.setdefault(category.group, []).append(category)

    for group, members in grouped.items():
        click.echo(f"\n  {click.style(group, fg='blue', bold=True)}")
        for category in members:
            click.echo(f"    {_safety_tag(category)} {click.style(category.id, fg='cyan', bold=True):30s}  {category.name}")
            if category.safety_note:
                click.echo(click.style(f"        {category.safety_note}", fg="bright_black"))
    click.echo()


# ── scan ─────────────────────────────────────────────────────────────────

def _selected_categories(
    engine: ReclaimEngine,
    config: Config,
    category_ids: tuple[str, ...],
    profile: Profile | None,
    include_risky: bool,
    *,
    risky_needs_flag: bool = False,
) -> list[str]:
    """Decide which categories to run from arguments, profile and config.

    Risky categories are left out unless *include_risky* is set. Naming them
    explicitly is enough for a scan, but with *risky_needs_flag* (cleaning)
    only the flag lets them through.
    """
    explicit = (bool(category_ids) or profile is not None) and not risky_needs_flag
    if profile is not None:
        requested = list(profile.categories)
    elif category_ids:
        requested = list(category_ids)
    elif config.default_categories:
        requested = list(config.default_categories)
    else:
        requested = engine.registry.ids()

    unknown = [cid for cid in requested if cid not in engine.registry]
    if unknown:
        raise click.UsageError(
            f"Unknown category: {', '.join(unknown)}. Use 'reclaim categories' to list valid IDs."
        )

    excluded = set(config.exclude_categories)
    selected = [cid for cid in requested if cid not in excluded]
    if not include_risky and not explicit:
        risky = [cid for cid in selected if engine.registry.get(cid).category.is_risky]
        if risky and risky_needs_flag:
            click.echo(
                click.style(f"Skipping risky categories ({', '.join(risky)}), pass --risky to clean them.", fg="yellow"),
                err=True,
            )
        selected = [cid for cid in selected if cid not in risky]
    return selected


def _load_profile(profile_id: str | None) -> Profile | None:
    if profile_id is None:
        return None
    profile = get_profile(profile_id)
    if profile is None:
        raise click.BadParameter(f"Profile '{profile_id}' not found", param_hint="--profile")
    return profile


def _options_function(config: Config, profile: Profile | None) -> Callable[[Category], ScannerOptions | None]:
    base = scanner_options(config)

    def options_for(category: Category) -> ScannerOptions | None:
        options = base(category)
        overrides = profile.options.get(category.id) if profile else None
        if overrides:
            options = {**(options or {}), **overrides}
        return options

    return options_for


def _run_scans(
    engine: ReclaimEngine,
    config: Config,
    ids: list[str],
    profile: Profile | None,
    show_progress: bool,
) -> ScanSummary:
    def on_progress(completed: int, total: int, category: Category) -> None:
        click.echo(f"\r  Scanning... {completed}/{total} ({category.name})\033[K", nl=False, err=True)

    summary = asyncio.run(
        engine.run_scans(
            ids,
            concurrency=config.scan_concurrency,
            options_for_scanner=_options_function(config, profile),
            on_progress=on_progress if show_progress else None,
        )
    )
    if show_progress:
        click.echo("\r\033[K", nl=False, err=True)
    return summary


def _print_scan_summary(summary: ScanSummary, verbose: bool = False) -> None:
    for result in summary.results:
        category = result.category
        if result.error:
            click.echo(
                f"  {click.style('✗', fg='red')} {category.name:35s} — "
                f"{click.style('error: ' + result.error, fg='red')}"
            )
            continue
        if result.total_size == 0:
            click.echo(f"  {click.style('·', fg='bright_black')} {category.name:35s} — nothing to clean")
            continue
        partial = click.style(" [partial]", fg="yellow") if result.partial else ""
        click.echo(
            f"  {_safety_tag(category)} {category.name:35s} — "
            f"{click.style(bytes_to_human(result.total_size), fg='green', bold=True)} "
            f"({len(result.items):,} items){partial}"
        )
        if verbose:
            for item in sorted(result.items, key=lambda i: i.size, reverse=True)[:5]:
                click.echo(click.style(f"        {bytes_to_human(item.size):>10s}  {item.path}", fg="bright_black"))


@main.command()
@click.argument("category_ids", nargs=-1)
@click.option("--profile", "-p", "profile_id", default=None, help="Scan the categories of a profile")
@click.option("--risky", "-r", is_flag=True, help="Include risky categories")
@click.option("--details", "-d", is_flag=True, help="Show the largest items per category")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def scan(
    settings: Settings,
    category_ids: tuple[str, ...],
    profile_id: str | None,
    risky: bool,
    details: bool,
    as_json: bool,
) -> None:
    """Scan for cleanable files (preview only, never deletes)."""
    config = settings.config()
    engine = _build_engine(config)
    profile = _load_profile(profile_id)
    ids = _selected_categories(engine, config, category_ids, profile, risky)

    show_progress = not as_json and sys.stderr.isatty()
    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {len(ids)} categories...\n")

    summary = _run_scans(engine, config, ids, profile, show_progress)

    if as_json:
        data = {
            "total_size": summary.total_size,
            "total_items": summary.total_items,
            "results": [_result_to_dict(r) for r in summary.results],
        }
        click.echo(json.dumps(data, indent=2))
        return

    _print_scan_summary(summary, verbose=details)
    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(summary.total_size), fg='green', bold=True)}")

    space = asyncio.run(disk_space(Path.home()))
    if space is not None:
        click.echo(f"Free disk space:   {bytes_to_human(space.free)} of {bytes_to_human(space.total)} ({space.mount})")
    click.echo()


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_ids", nargs=-1)
@click.option("--profile", "-p", "profile_id", default=None, help="Clean the categories of a profile")
@click.option("--risky", "-r", is_flag=True, help="Include risky categories")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def clean(
    settings: Settings,
    category_ids: tuple[str, ...],
    profile_id: str | None,
    risky: bool,
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Scan and clean selected categories."""
    if as_json and not (yes or dry_run):
        raise click.UsageError("--json needs --yes or --dry-run, there is no prompt in JSON mode")
    config = settings.config()
    engine = _build_engine(config)
    profile = _load_profile(profile_id)
    ids = _selected_categories(engine, config, category_ids, profile, risky, risky_needs_flag=True)

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning...\n")

    summary = _run_scans(engine, config, ids, profile, show_progress=not as_json and sys.stderr.isatty())
    actionable = [r for r in summary.results if r.items]

    if not actionable:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    if not as_json:
        _print_scan_summary(ScanSummary(results=actionable))
        total = sum(r.total_size for r in actionable)
        click.echo(f"\nTotal: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")
        for result in actionable:
            if result.category.is_risky and result.category.safety_note:
                click.echo(click.style(f"⚠ {result.category.name}: {result.category.safety_note}", fg="red"))

    if not yes and not dry_run and not as_json:
        choice = click.prompt("Clean all? [y/N/select]", default="n", show_default=False)
        match choice.lower():
            case "y" | "yes":
                pass
            case "select":
                selected_ids = _interactive_select(actionable)
                if not selected_ids:
                    click.echo("Nothing selected.")
                    return
                actionable = [r for r in actionable if r.category.id in selected_ids]
            case _:
                click.echo("Aborted.")
                return
        actionable = _review_risky_items(actionable)
        if not actionable:
            click.echo("Nothing selected.")
            return

    if not as_json:
        label = "Simulating" if dry_run else "Cleaning"
        click.echo(f"\n{click.style('🧹', bold=True)} {label}...\n")

    selection = [(r.category.id, r.items) for r in actionable]
    result = asyncio.run(engine.clean(selection, dry_run=dry_run))

    if as_json:
        click.echo(json.dumps(_clean_summary_to_dict(result, dry_run), indent=2))
        return

    _print_clean_summary(result, dry_run)


def _print_clean_summary(summary: CleanSummary, dry_run: bool) -> None:
    verb = "would free" if dry_run else "freed"
    for result in summary.results:
        name = result.category.name
        if result.errors:
            click.echo(
                f"  {click.style('!', fg='yellow')} {name:35s} — "
                f"{verb} {bytes_to_human(result.freed_space)}, {len(result.errors)} error(s)"
            )
            for error in result.errors[:10]:
                click.echo(click.style(f"      {error}", fg="bright_black"))
        else:
            click.echo(
                f"  {click.style('✓', fg='green')} {name:35s} — "
                f"{verb} {click.style(bytes_to_human(result.freed_space), fg='green', bold=True)}"
            )
        for path in result.skipped:
            click.echo(click.style(f"      skipped protected path: {path}", fg="yellow"))

    total = click.style(bytes_to_human(summary.total_freed_space), fg="green", bold=True)
    if dry_run:
        click.echo(f"\n(dry run — no files were deleted) Would free: {total}\n")
    else:
        click.echo(f"\nTotal freed: {total}\n")


def _parse_selection(raw: str, count: int) -> list[int]:
    """Zero-based indexes from comma-separated 1-based numbers; ``all`` selects everything."""
    if raw.strip().lower() == "all":
        return list(range(count))
    indexes: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit() and 0 < int(part) <= count and int(part) - 1 not in indexes:
            indexes.append(int(part) - 1)
    return indexes


def _interactive_select(results: list[ScanResult]) -> set[str]:
    """Let the user pick which categories to clean."""
    click.echo("\nSelect categories to clean (enter numbers, comma-separated):\n")
    for i, r in enumerate(results, 1):
        click.echo(f"  [{i}] {r.category.name:35s} — {bytes_to_human(r.total_size)}")
    click.echo()
    raw = click.prompt("Selection", default="")
    return {results[i].category.id for i in _parse_selection(raw, len(results))}


def _select_items(result: ScanResult) -> list[CleanableItem]:
    """Let the user pick single items of a risky category. Nothing is selected by default."""
    items = sorted(result.items, key=lambda i: (-i.size, i.name))
    click.echo(f"\n{click.style(result.category.name, bold=True)}: select items to clean (numbers, comma-separated, 'all'):\n")
    for i, item in enumerate(items, 1):
        click.echo(f"  [{i}] {bytes_to_human(item.size):>10s}  {item.name}")
    click.echo()
    raw = click.prompt("Items", default="")
    return [items[i] for i in _parse_selection(raw, len(items))]


def _review_risky_items(results: list[ScanResult]) -> list[ScanResult]:
    """Replace every risky result by the items the user picked, dropping empty ones."""
    reviewed: list[ScanResult] = []
    for result in results:
        if result.category.is_risky:
            items = _select_items(result)
            if not items:
                continue
            result = dataclasses.replace(result, items=items)
        reviewed.append(result)
    return reviewed


# ── duplicates ───────────────────────────────────────────────────────────

def _size_option(ctx: click.Context, param: click.Parameter, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return parse_size(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.option("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, show_default=True, help="Directory depth limit")
@click.option("--min-size", callback=_size_option, default=None, help="Ignore smaller files, e.g. 4KB")
@click.option("--max-files", type=int, default=None, help="Stop after considering this many files")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def duplicates(
    settings: Settings,
    paths: tuple[str, ...],
    max_depth: int,
    min_size: int | None,
    max_files: int | None,
    as_json: bool,
) -> None:
    """Find files with identical content (never deletes)."""
    config = settings.config()
    try:
        roots = [expand_path(p) for p in paths] if paths else config.paths_for("duplicates") or [Path.cwd()]
    except UnsafePathError as exc:
        raise click.BadParameter(str(exc), param_hint="PATHS") from exc

    detector = DuplicateDetector(
        max_files=max_files or config.duplicates_max_files or DEFAULT_MAX_FILES,
        aggregator=ScanContext(config=config).aggregator,
    )
    started = time.monotonic()
    report = asyncio.run(
        detector.find_duplicates(
            roots,
            max_depth=max_depth,
            min_size=min_size if min_size is not None else config.duplicates_min_size or DEFAULT_MIN_SIZE,
        )
    )
    elapsed = time.monotonic() - started

    if as_json:
        data = {
            "partial": report.partial,
            "files_considered": report.files_considered,
            "reclaimable_size": report.reclaimable_size,
            "groups": [
                {
                    "size": g.size,
                    "content_hash": g.kept_item.content_hash,
                    "kept": str(g.kept_item.path),
                    "reclaimable": [str(i.path) for i in g.reclaimable],
                }
                for g in report.groups
            ],
        }
        click.echo(json.dumps(data, indent=2))
        return

    for group in sorted(report.groups, key=lambda g: g.reclaimable_size, reverse=True):
        click.echo(f"\n  {click.style(bytes_to_human(group.size), fg='cyan', bold=True)} × {len(group.items)}")
        click.echo(f"    {click.style('keep', fg='green')}  {group.kept_item.path}")
        for item in group.reclaimable:
            click.echo(f"    {click.style('dup ', fg='red')}  {item.path}")

    click.echo(
        f"\n{len(report.groups)} duplicate groups among {report.files_considered:,} files, "
        f"{click.style(bytes_to_human(report.reclaimable_size), fg='green', bold=True)} reclaimable "
        f"({format_elapsed(elapsed)})"
    )
    if report.partial:
        click.echo(
            click.style(
                f"Warning: stopped after {report.files_considered:,} files; results are partial. "
                "Raise --max-files to search further.",
                fg="yellow",
            )
        )
    click.echo()


# ── profiles ─────────────────────────────────────────────────────────────

@main.group()
def profiles() -> None:
    """Cleaning profile management."""


@profiles.command("list")
def profiles_list() -> None:
    """List built-in and custom profiles."""
    for profile in load_profiles().values():
        tag = click.style(" [built-in]", fg="blue") if profile.id in BUILTIN_PROFILES else ""
        click.echo(f"  {click.style(profile.id, fg='cyan', bold=True):25s} {profile.name}{tag}")
        click.echo(click.style(f"      {profile.description}", fg="bright_black"))


@profiles.command("show")
@click.argument("profile_id")
def profiles_show(profile_id: str) -> None:
    """Show the categories of a profile."""
    profile = get_profile(profile_id)
    if profile is None:
        click.echo(f"Profile '{profile_id}' not found.", err=True)
        sys.exit(1)

    click.echo(f"\n  {click.style('ID:', bold=True)}          {profile.id}")
    click.echo(f"  {click.style('Name:', bold=True)}        {profile.name}")
    click.echo(f"  {click.style('Description:', bold=True)} {profile.description}")
    click.echo(f"  {click.style('Categories:', bold=True)}")
    for cid in profile.categories:
        category = CATEGORIES.get(cid)
        label = f"{_safety_tag(category)} {category.name}" if category else click.style("unknown", fg="red")
        click.echo(f"    {cid:20s} {label}")
    click.echo()


@profiles.command("create")
@click.argument("profile_id")
@click.option("--name", required=True, help="Display name")
@click.option("--description", default="", help="Short description")
@click.option(
    "--category",
    "-c",
    "categories",
    multiple=True,
    required=True,
    type=click.Choice(list(CATEGORIES)),
    help="Category to include (repeatable)",
)
def profiles_create(profile_id: str, name: str, description: str, categories: tuple[str, ...]) -> None:
    """Create or replace a custom profile."""
    try:
        save_profile(Profile(profile_id, name, description, list(categories)))
    except ProfileError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Saved profile '{profile_id}'.")


@profiles.command("delete")
@click.argument("profile_id")
def profiles_delete(profile_id: str) -> None:
    """Delete a custom profile."""
    try:
        delete_profile(profile_id)
    except ProfileError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted profile '{profile_id}'.")


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Configuration management."""


@config_group.command("init")
@click.pass_obj
def config_init(settings: Settings) -> None:
    """Create a default configuration file."""
    if not settings.init():
        click.echo(f"Configuration file already exists: {settings.path}")
        return
    click.echo(f"Created configuration file at: {settings.path}")


@config_group.command("show")
@click.pass_obj
def config_show(settings: Settings) -> None:
    """Show the effective configuration."""
    if not settings.exists:
        click.echo("No configuration file found, showing defaults. Run 'reclaim config init' to create one.", err=True)
    click.echo(json.dumps(settings.config().to_dict(), indent=2))


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(settings: Settings, key: str, value: str) -> None:
    """Set a configuration value. VALUE is parsed as JSON when possible."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    settings.set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")
