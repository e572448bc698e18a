from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from .core import parser, store
from .core.errors import ConfigError
from .core.model import Document, HostEntry
from . import __version__

SSH_DIR = Path.home() / ".ssh"
CONFIG_FILE = SSH_DIR / "config"

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=CONFIG_FILE,
    envvar="SSH_CONFIG_EDITOR_CONFIG",
    show_default=True,
    help="Main SSH config file",
)


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log include resolution and writes")
def main(verbose: bool) -> None:
    """ssh-config-editor: inspect and edit an SSH config and its Include files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_document(config_path: Path) -> Document:
    try:
        return parser.parse_config_file(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def save_document(doc: Document) -> None:
    try:
        written = store.save_all(doc)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Saved {len(written)} file(s)")


def lookup_host(doc: Document, pattern: str) -> HostEntry:
    entry = doc.find_host(pattern)
    if entry is None:
        raise click.ClickException(f"No host block with pattern '{pattern}'")
    return entry


def _display_path(doc: Document, path: Path) -> str:
    # Hosts from the main file print bare; included ones show their file
    return "" if path == doc.root else str(path)


@main.command()
@config_option
@click.option("--search", default="", help="Only hosts whose pattern contains TEXT (case-insensitive)")
@click.option("--json", "as_json", is_flag=True, help="Output JSON for scripting")
def hosts(config_path: Path, search: str, as_json: bool) -> None:
    """List host blocks in document order."""
    doc = load_document(config_path)
    matches = doc.search_hosts(search)
    if as_json:
        payload = [
            {"pattern": h.pattern, "source_file": str(h.source_file), "options": [list(o) for o in h.options]}
            for _, h in matches
        ]
        click.echo(json.dumps(payload, indent=2))
        return
    for _, h in matches:
        origin = _display_path(doc, h.source_file)
        click.echo(f"{h.pattern}\t{origin}" if origin else h.pattern)
    if not matches:
        click.echo("No hosts found", err=True)


@main.command()
@config_option
def files(config_path: Path) -> None:
    """List the main file and every file pulled in by Include."""
    doc = load_document(config_path)
    for path in doc.files():
        click.echo(str(path))


@main.command()
@config_option
@click.argument("pattern")
@click.option("--numbered", is_flag=True, help="Number the options for edit-option/remove-option")
def show(config_path: Path, pattern: str, numbered: bool) -> None:
    """Print one host block as it will be written."""
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    click.echo(f"# {entry.source_file}")
    if not numbered:
        click.echo(entry.serialize(), nl=False)
        return
    click.echo(f"Host {entry.pattern}")
    for number, (key, value) in enumerate(entry.options, start=1):
        click.echo(f"{number:>3}  {key} {value}")


@main.command("add-host")
@config_option
@click.argument("pattern")
@click.option("--file", "target_file", type=click.Path(path_type=Path, dir_okay=False), help="File to own the new block (default: main file)")
@click.option("--option", "options", type=(str, str), multiple=True, help="KEY VALUE pair; repeatable")
def add_host(config_path: Path, pattern: str, target_file: Optional[Path], options: Tuple[Tuple[str, str], ...]) -> None:
    """Append a new host block to the main file or an included file."""
    doc = load_document(config_path)
    try:
        entry = doc.add_host(pattern, target_file)
        for key, value in options:
            entry.add_option(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created new host '{entry.pattern}' in {entry.source_file}")
    save_document(doc)


@main.command("rename-host")
@config_option
@click.argument("pattern")
@click.argument("new_pattern")
def rename_host(config_path: Path, pattern: str, new_pattern: str) -> None:
    """Change the pattern of a host block in place."""
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    try:
        entry.rename(new_pattern)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Renamed '{pattern}' to '{entry.pattern}' in {entry.source_file}")
    save_document(doc)


@main.command("get-option")
@config_option
@click.argument("pattern")
@click.argument("key")
def get_option(config_path: Path, pattern: str, key: str) -> None:
    """Print the first value of KEY in a host block."""
    doc = load_document(config_path)
    value = lookup_host(doc, pattern).get_option(key)
    if value is None:
        raise click.ClickException(f"Host '{pattern}' has no {key} option")
    click.echo(value)


@main.command("edit-option")
@config_option
@click.argument("pattern")
@click.argument("number", type=click.IntRange(min=1))
@click.argument("value")
def edit_option(config_path: Path, pattern: str, number: int, value: str) -> None:
    """Replace the value of option NUMBER (1-based, as listed by show)."""
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    try:
        entry.update_option(number - 1, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    save_document(doc)


@main.command("set-option")
@config_option
@click.argument("pattern")
@click.argument("key")
@click.argument("value")
def set_option(config_path: Path, pattern: str, key: str, value: str) -> None:
    """Set KEY to VALUE in a host block, adding it if missing."""
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    try:
        entry.set_option(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    save_document(doc)


@main.command("remove-option")
@config_option
@click.argument("pattern")
@click.argument("key", required=False)
@click.option("--number", type=click.IntRange(min=1), help="Remove only option NUMBER (1-based, as listed by show)")
def remove_option(config_path: Path, pattern: str, key: Optional[str], number: Optional[int]) -> None:
    """Remove every KEY option from a host block, or a single one by --number."""
    if (key is None) == (number is None):
        raise click.UsageError("Give either KEY or --number")
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    if number is not None:
        try:
            removed_key, _ = entry.remove_option(number - 1)
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Removed {removed_key} from {entry.pattern}")
    elif not entry.remove_options(key):
        raise click.ClickException(f"Host '{pattern}' has no {key} option")
    save_document(doc)


@main.command("add-legacy")
@config_option
@click.argument("pattern")
def add_legacy(config_path: Path, pattern: str) -> None:
    """Re-enable old host key, cipher, MAC and kex algorithms for a host."""
    doc = load_document(config_path)
    entry = lookup_host(doc, pattern)
    added = entry.add_legacy_options()
    if not added:
        click.echo(f"Legacy options already present for {pattern}")
        return
    click.echo(f"Added legacy SSH options to {pattern}: {', '.join(added)}")
    save_document(doc)


@main.command()
@config_option
@click.option("--file", "target_file", type=click.Path(path_type=Path, dir_okay=False), help="File to render (default: main file)")
def render(config_path: Path, target_file: Optional[Path]) -> None:
    """Print the text that saving would write for one file."""
    doc = load_document(config_path)
    target = doc.root if target_file is None else target_file.expanduser().absolute()
    if target not in doc.files():
        raise click.ClickException(f"{target} is not part of this configuration")
    click.echo(store.render_file(doc, target), nl=False)


@main.command()
@config_option
def normalize(config_path: Path) -> None:
    """Parse and write back every file (re-indents host blocks)."""
    doc = load_document(config_path)
    save_document(doc)


@main.command()
@config_option
def tui(config_path: Path) -> None:  # pragma: no cover - UI launcher
    """Launch the Textual editor."""
    try:
        from .tui.app import SSHConfigEditorApp
    except ImportError as exc:
        raise SystemExit(f"TUI not available: {exc}")
    SSHConfigEditorApp(config_path).run()
