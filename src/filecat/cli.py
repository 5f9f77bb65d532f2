"""Command line interface for filecat."""

from __future__ import annotations

import contextlib
import difflib
from pathlib import Path
from typing import Any, Iterator, Optional
from uuid import UUID

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from filecat.catalog import ALL, UNCATEGORIZED, CatalogSession, CategoryNode
from filecat.config import ConfigError, ConfigManager, FilecatConfig, resolve_with_precedence
from filecat.errors import CatalogError
from filecat.log import configure_logging
from filecat.state import FileEntry, StateError, default_data_dir

console = Console()


def format_size(size: int) -> str:
    """Return a human-readable size using binary units."""
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.1f} MB"
    return f"{size / 1024**3:.1f} GB"


def _load_config() -> FilecatConfig:
    try:
        return ConfigManager().load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@contextlib.contextmanager
def _session() -> Iterator[tuple[CatalogSession, FilecatConfig]]:
    """Open a catalog session and translate core errors into CLI errors."""
    config = _load_config()
    data_dir = config.storage.data_dir
    configure_logging(
        config.logging, Path(data_dir).expanduser() if data_dir else default_data_dir()
    )
    try:
        session = CatalogSession.from_config(config)
    except OSError as exc:
        raise click.ClickException(f"Unable to prepare metadata directory: {exc}") from exc
    try:
        yield session, config
    except (CatalogError, StateError) as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        session.close()


def _save(session: CatalogSession) -> None:
    try:
        session.save()
    except StateError as exc:
        raise click.ClickException(str(exc)) from exc


def _resolve_entry_id(session: CatalogSession, token: str) -> UUID:
    """Resolve a full id or a unique id prefix to an entry id."""
    try:
        return UUID(token)
    except ValueError:
        pass
    prefix = token.lower()
    matches = [entry.id for entry in session.files.entries if str(entry.id).startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise click.ClickException(f"No entry id starts with {token!r}.")
    raise click.ClickException(f"Id prefix {token!r} is ambiguous ({len(matches)} entries).")


def _entry_rows(entries: list[FileEntry], date_format: str) -> Table:
    table = Table(show_lines=False)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Created")
    table.add_column("Category")
    table.add_column("Location", overflow="fold")
    table.add_column("Description")
    for entry in entries:
        table.add_row(
            str(entry.id)[:8],
            escape(entry.name),
            escape(entry.extension),
            format_size(entry.size_bytes),
            entry.created_at.astimezone().strftime(date_format),
            escape(entry.category or "-"),
            escape(entry.source_path),
            escape(entry.description),
        )
    return table


def _render_tree(root: CategoryNode, session: CatalogSession) -> Tree:
    tree = Tree(f"[bold]{root.label}[/bold] ({len(session.files)})")
    branches: dict[int, Tree] = {0: tree}
    for node, depth in root.walk():
        if node.is_root:
            continue
        if node.is_category:
            count = len(session.files.in_category(node.category or ""))
            label = f"{escape(node.label)} ({count})"
        else:
            label = f"[dim]{escape(node.label)}[/dim]"
        branches[depth] = branches[depth - 1].add(label)
    return tree


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="filecat")
def cli() -> None:
    """filecat catalogs your files under hierarchical categories."""


def _launch(path: Path, *, locate: bool = False) -> None:
    """Hand ``path`` to the desktop's default handler."""
    if not path.exists():
        raise click.ClickException(f"{path} does not exist.")
    if click.launch(str(path), locate=locate) != 0:
        console.print(f"[yellow]The system could not open {escape(str(path))}.[/yellow]")


@cli.command()
@click.option("--open", "open_document", is_flag=True, help="Open the metadata document.")
def info(open_document: bool) -> None:
    """Show where the catalog is stored and what it holds."""
    with _session() as (session, _):
        console.print(f"Metadata: {session.metadata_path}", markup=False, soft_wrap=True)
        console.print(f"Categories: {len(session.categories)}")
        console.print(f"Entries: {len(session.files)}")
        if open_document:
            if not session.metadata_path.exists():
                _save(session)
            _launch(session.metadata_path)


# Categories -----------------------------------------------------------


@cli.group()
def category() -> None:
    """Manage categories."""


@category.command("add")
@click.argument("name")
@click.option("--parent", type=str, help="Existing category path to nest under.")
def category_add(name: str, parent: Optional[str]) -> None:
    """Add a category NAME (use '/' to nest)."""
    with _session() as (session, _):
        path = session.add_category(name, parent)
        _save(session)
        console.print(f"[green]Added category {escape(path)}.[/green]")


@category.command("rm")
@click.argument("path")
@click.option("--yes", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
def category_rm(path: str, assume_yes: bool) -> None:
    """Remove category PATH; its files become uncategorized.

    Shortcuts to those files on the desktop and in the start menu are removed.
    Files on disk are never deleted.
    """
    with _session() as (session, config):
        skip_prompt = assume_yes or config.cli.assume_yes

        def _confirm(name: str, entries: list[FileEntry]) -> bool:
            if skip_prompt:
                return True
            return click.confirm(
                f'Category "{name}" contains {len(entries)} file(s). Removing it clears their '
                "category and deletes their shortcuts (the files are kept). Continue?",
                default=False,
            )

        result = session.remove_category(path, _confirm)
        if not result.removed:
            console.print("[yellow]Removal cancelled; no changes applied.[/yellow]")
            return

        removed = sum(len(report.removed) for report in result.cleanup)
        problems = [message for report in result.cleanup for message in report.errors]
        console.print(
            f"[green]Removed category {escape(result.category)}: {len(result.affected)} file(s) "
            f"uncategorized, {removed} shortcut(s) deleted.[/green]"
        )
        for message in problems:
            console.print(f"[yellow]  - {escape(message)}[/yellow]")


@category.command("list")
def category_list() -> None:
    """List stored categories."""
    with _session() as (session, _):
        for path in session.categories:
            console.print(path, markup=False, highlight=False)


@category.command("tree")
def category_tree() -> None:
    """Show categories as a tree; dimmed nodes only group subcategories."""
    with _session() as (session, _):
        console.print(_render_tree(session.tree(), session))


# Entries --------------------------------------------------------------


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=str))
@click.option("-c", "--category", "category_path", type=str, help="Category for the files.")
def add(files: tuple[str, ...], category_path: Optional[str]) -> None:
    """Add FILES to the catalog, refreshing any already tracked."""
    with _session() as (session, _):
        if category_path and category_path not in session.categories:
            console.print(
                f"[yellow]Category {escape(repr(category_path))} does not exist; "
                "files will be uncategorized.[/yellow]"
            )
        result = session.add_entries(files, category_path)
        _save(session)
        console.print(
            f"[green]{len(result.added)} added, {len(result.updated)} updated, "
            f"{len(result.failures)} failed.[/green]"
        )
        for path, message in result.failures.items():
            console.print(f"[red]  - {escape(path)}: {escape(message)}[/red]")
        if result.failures:
            raise SystemExit(1)


@cli.command("ls")
@click.option("-c", "--category", "category_path", type=str, help="Only this category.")
@click.option("--uncategorized", is_flag=True, help="Only files without a category.")
@click.option("--json", "json_output", is_flag=True, help="Emit entries as JSON.")
def list_entries(category_path: Optional[str], uncategorized: bool, json_output: bool) -> None:
    """List catalog entries."""
    if category_path and uncategorized:
        raise click.UsageError("--category and --uncategorized are mutually exclusive.")
    with _session() as (session, config):
        selector: Any = UNCATEGORIZED if uncategorized else (category_path or ALL)
        entries = session.list_entries(selector)
        if json_output:
            console.print_json(
                data=[entry.model_dump(mode="json", by_alias=True) for entry in entries]
            )
            return
        if not entries:
            console.print("[yellow]No entries.[/yellow]")
            return
        console.print(_entry_rows(entries, config.cli.date_format))


@cli.command("rm")
@click.argument("ids", nargs=-1, required=True)
@click.option("--yes", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
def remove_entries(ids: tuple[str, ...], assume_yes: bool) -> None:
    """Remove entries by id (or id prefix). Files on disk are kept."""
    with _session() as (session, config):
        targets = [_resolve_entry_id(session, token) for token in ids]
        if not (assume_yes or config.cli.assume_yes) and not click.confirm(
            f"Remove {len(targets)} entr{'y' if len(targets) == 1 else 'ies'} from the catalog?",
            default=False,
        ):
            console.print("[yellow]Cancelled; no changes applied.[/yellow]")
            return
        removed = sum(1 for entry_id in targets if session.remove_entry(entry_id))
        _save(session)
        console.print(f"[green]Removed {removed} entr{'y' if removed == 1 else 'ies'}.[/green]")


@cli.command()
@click.argument("entry_id")
@click.argument("text", required=False)
def describe(entry_id: str, text: Optional[str]) -> None:
    """Set the description of ENTRY_ID; opens an editor when TEXT is omitted."""
    with _session() as (session, _):
        target = _resolve_entry_id(session, entry_id)
        if text is None:
            current = session.files.get(target).description
            edited = click.edit(current)
            if edited is None:
                console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
                return
            text = edited.rstrip("\n")
        entry = session.edit_description(target, text)
        _save(session)
        console.print(f"[green]Updated description of {escape(entry.name)}.[/green]")


@cli.command("open")
@click.argument("entry_id")
@click.option("--reveal", is_flag=True, help="Show the file in its folder instead.")
def open_entry(entry_id: str, reveal: bool) -> None:
    """Open ENTRY_ID with its default program, or reveal it with --reveal."""
    with _session() as (session, _):
        entry = session.files.get(_resolve_entry_id(session, entry_id))
        _launch(Path(entry.source_path), locate=reveal)


# Shortcuts ------------------------------------------------------------


@cli.group()
def shortcut() -> None:
    """Create shortcuts to catalog entries."""


@shortcut.command("create")
@click.argument("ids", nargs=-1, required=True)
@click.option(
    "--dest",
    "destination",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory that receives the shortcuts.",
)
def shortcut_create(ids: tuple[str, ...], destination: Path) -> None:
    """Create shortcuts for entries IDS inside --dest."""
    with _session() as (session, _):
        targets = [_resolve_entry_id(session, token) for token in ids]
        result = session.create_shortcuts(targets, destination)
        for path in result.created.values():
            console.print(f"[green]Created {escape(str(path))}[/green]")
        for entry_id, message in result.failures.items():
            console.print(f"[red]  - {entry_id}: {escape(message)}[/red]")
        if result.failures:
            raise SystemExit(1)


# Configuration --------------------------------------------------------


def _checked(data: dict[str, Any]) -> dict[str, Any]:
    """Return ``data`` if it forms a valid configuration file."""
    try:
        resolve_with_precedence(defaults=FilecatConfig(), file_overrides=data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    return data


def _set_key(data: dict[str, Any], key: str, value: Any) -> None:
    *parents, leaf = key.split(".")
    node = data
    for segment in parents:
        node = node.setdefault(segment, {})
        if not isinstance(node, dict):
            raise click.ClickException(f"'{segment}' in {key} is not a section.")
    node[leaf] = value


@cli.group()
def config() -> None:
    """Inspect or change filecat settings."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show the file values without FILECAT__ overrides.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration as YAML."""
    try:
        settings = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    rendered = yaml.safe_dump(settings.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="New value, parsed as YAML.")
def config_set(key: str, value: str) -> None:
    """Store VALUE under the dotted KEY, e.g. 'shortcuts.provider'."""
    key = ".".join(part.strip() for part in key.split(".") if part.strip())
    if not key:
        raise click.ClickException("KEY must be a dotted path such as 'logging.level'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text()
    try:
        data = manager.load_file_overrides()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _set_key(data, key, parsed)
    manager.save(_checked(data))

    diff = difflib.unified_diff(
        before.splitlines(),
        manager.read_text().splitlines(),
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )
    console.print(Syntax("\n".join(diff), "diff"))
    console.print(f"[green]Updated {escape(key)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR, validating before saving."""
    manager = ConfigManager()
    manager.ensure_exists()
    current = manager.read_text()
    edited = click.edit(current, extension=".yaml")
    if edited is None or edited == current:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        data = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")
    manager.save(_checked(data))
    console.print("[green]Configuration updated.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
