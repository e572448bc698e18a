from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Footer, Header, Input, ListItem, ListView, Static

from ..core import parser, store
from ..core.errors import ConfigError
from ..core.model import Document, HostEntry


class HostItem(ListItem):
    """List row tied to a HostEntry by its position in Document.lines."""

    def __init__(self, line_index: int, entry: HostEntry, label: str) -> None:
        super().__init__(Static(label, markup=False))
        self.line_index = line_index
        self.entry = entry


class HostDetail(Vertical):
    current: Optional[HostEntry] = None

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Static("Configuration Details", id="title")
        self.input_pattern = Input(placeholder="Host pattern (Enter to rename)", id="pattern")
        yield self.input_pattern
        self.summary = Static(id="host-summary", markup=False)
        yield self.summary
        self.input_number = Input(placeholder="#", id="opt-number")
        self.input_key = Input(placeholder="Option key", id="opt-key")
        self.input_value = Input(placeholder="Option value", id="opt-value")
        yield Horizontal(self.input_number, self.input_key, self.input_value, id="option-row")
        self.input_new_host = Input(placeholder="New host pattern (Enter to create)", id="new-host")
        yield self.input_new_host

    def show(self, entry: Optional[HostEntry]) -> None:
        self.current = entry
        if entry is None:
            self.input_pattern.value = ""
            self.summary.update("No host selected")
            return
        self.input_pattern.value = entry.pattern
        numbered = [f"{n:>3}  {key} {value}" for n, (key, value) in enumerate(entry.options, start=1)]
        self.summary.update("\n".join([f"Source File: {entry.source_file}", "", *numbered]))

    def clear_option_inputs(self) -> None:
        self.input_number.value = ""
        self.input_key.value = ""
        self.input_value.value = ""


class SSHConfigEditorApp(App):
    BINDINGS = [
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+r", "reload", "Reload", priority=True),
        Binding("ctrl+l", "legacy", "Legacy algos", priority=True),
        Binding("ctrl+f", "focus_search", "Search", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    status: reactive[str] = reactive("")

    def __init__(self, config_path: Path) -> None:
        super().__init__()
        self.config_path = Path(config_path)
        self.document: Optional[Document] = None
        self.visible_hosts: List[Tuple[int, HostEntry]] = []
        self.dirty = False
        self._quit_armed = False

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Header(show_clock=True)
        self.search = Input(placeholder="Search hosts", id="search")
        self.host_list = ListView(id="hosts")
        self.detail = HostDetail(id="detail")
        yield Horizontal(
            Vertical(self.search, self.host_list, id="left"),
            self.detail,
            id="main",
        )
        self.status_widget = Static(id="status", markup=False)
        yield self.status_widget
        yield Footer()

    def on_mount(self) -> None:
        self.load()

    def watch_status(self, value: str) -> None:  # pragma: no cover - trivial
        if hasattr(self, "status_widget"):
            self.status_widget.update(value)

    def load(self) -> None:
        try:
            self.document = parser.parse_config_file(self.config_path)
        except ConfigError as exc:
            self.document = None
            self.status = f"Error loading file: {exc}"
        else:
            count = len(self.document.included_files)
            self.status = f"Loaded: {self.config_path}" + (f" ({count} included files)" if count else "")
        self.dirty = False
        self._quit_armed = False
        self.detail.current = None
        self.refresh_hosts()

    def refresh_hosts(self, select: Optional[HostEntry] = None) -> None:
        self.host_list.clear()
        if self.document is None:
            self.visible_hosts = []
            self.detail.show(None)
            return
        self.visible_hosts = self.document.search_hosts(self.search.value)
        for idx, entry in self.visible_hosts:
            # Indent hosts that live in an included file
            label = entry.pattern if entry.source_file == self.document.root else f"  {entry.pattern}"
            self.host_list.append(HostItem(idx, entry, label))
        if select is None:
            select = self.detail.current
        if select is not None and any(entry is select for _, entry in self.visible_hosts):
            self.detail.show(select)
        elif self.visible_hosts:
            self.detail.show(self.visible_hosts[0][1])
        else:
            self.detail.show(None)

    def mark_dirty(self, message: str) -> None:
        self.dirty = True
        self._quit_armed = False
        self.status = message
        self.detail.show(self.detail.current)

    def on_list_view_selected(self, message: ListView.Selected) -> None:  # pragma: no cover - UI event
        if isinstance(message.item, HostItem):
            self.detail.show(message.item.entry)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self.refresh_hosts()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id in ("opt-number", "opt-key", "opt-value"):
            detail = self.detail
            self.apply_option(detail.input_number.value, detail.input_key.value, detail.input_value.value)
        elif event.input.id == "pattern":
            self.rename_host(event.value)
        elif event.input.id == "new-host":
            self.create_host(event.value)

    def apply_option(self, number: str, key: str, value: str) -> None:
        """Edit the selected host's options.

        With a number the option at that position is edited (value given) or
        removed (no value). Otherwise the first ``key`` option is set, or every
        ``key`` option is removed when no value is given.
        """
        entry = self.detail.current
        if entry is None:
            return
        number, key, value = number.strip(), key.strip(), value.strip()
        try:
            if number:
                if not number.isdigit():
                    self.status = f"Not an option number: {number}"
                    return
                index = int(number) - 1
                if value:
                    entry.update_option(index, value)
                    message = f"Changed option #{number} of {entry.pattern}"
                else:
                    removed, _ = entry.remove_option(index)
                    message = f"Removed {removed} from {entry.pattern}"
            elif not key:
                return
            elif value:
                entry.set_option(key, value)
                message = f"Set {key} on {entry.pattern}"
            elif entry.remove_options(key):
                message = f"Removed {key} from {entry.pattern}"
            else:
                self.status = f"{entry.pattern} has no {key} option"
                return
        except ConfigError as exc:
            self.status = str(exc)
            return
        self.detail.clear_option_inputs()
        self.mark_dirty(message)

    def rename_host(self, pattern: str) -> None:
        entry = self.detail.current
        if entry is None or pattern.strip() == entry.pattern:
            return
        old = entry.pattern
        try:
            entry.rename(pattern)
        except ConfigError as exc:
            self.status = str(exc)
            return
        self.refresh_hosts(select=entry)
        self.mark_dirty(f"Renamed '{old}' to '{entry.pattern}'")

    def create_host(self, pattern: str) -> None:
        if self.document is None:
            self.status = "No file loaded"
            return
        # New hosts go next to the selected one, else into the main file
        current = self.detail.current
        target = current.source_file if current is not None else self.document.root
        try:
            entry = self.document.add_host(pattern, target)
        except ConfigError as exc:
            self.status = str(exc)
            return
        self.detail.input_new_host.value = ""
        self.refresh_hosts(select=entry)
        self.detail.current = entry
        self.mark_dirty(f"Created new host '{entry.pattern}' in {target}")

    def action_save(self) -> None:
        if self.document is None:
            self.status = "No file loaded"
            return
        try:
            written = store.save_all(self.document)
        except ConfigError as exc:
            self.status = f"Error saving: {exc}"
            return
        self.dirty = False
        self.status = f"Saved {len(written)} file(s)"

    def action_reload(self) -> None:
        self.load()

    def action_legacy(self) -> None:
        entry = self.detail.current
        if entry is None:
            return
        if entry.add_legacy_options():
            self.mark_dirty(f"Added legacy SSH options to {entry.pattern}")
        else:
            self.status = f"Legacy options already present for {entry.pattern}"

    def action_focus_search(self) -> None:
        self.search.focus()

    async def action_quit(self) -> None:
        if self.dirty and not self._quit_armed:
            self._quit_armed = True
            self.status = "You have unsaved changes. Save with ctrl+s or press ctrl+q again to discard."
            return
        self.exit()


__all__ = ["SSHConfigEditorApp"]
