from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from .errors import ConfigError

OPTION_INDENT = "    "

# Algorithms re-enabled for old appliances that only speak ssh-rsa/dss/cbc.
LEGACY_OPTIONS: List[Tuple[str, str]] = [
    ("HostKeyAlgorithms", "+ssh-rsa,ssh-rsa-cert-v01@openssh.com,ssh-dss"),
    ("PubkeyAcceptedAlgorithms", "+ssh-rsa,ssh-rsa-cert-v01@openssh.com"),
    ("Ciphers", "+aes256-cbc,aes128-cbc,3des-cbc"),
    ("MACs", "+hmac-sha1,hmac-md5"),
    ("KexAlgorithms", "+diffie-hellman-group14-sha1,diffie-hellman-group1-sha1"),
]


@dataclass
class Comment:
    text: str
    source_file: Path

    def serialize(self) -> str:
        return self.text + "\n"


@dataclass
class Empty:
    source_file: Path

    def serialize(self) -> str:
        return "\n"


@dataclass
class Include:
    path: str
    source_file: Path

    def serialize(self) -> str:
        # Raw argument, never rewritten even if nothing matches it any more.
        return f"Include {self.path}\n"


@dataclass
class HostEntry:
    pattern: str
    source_file: Path
    options: List[Tuple[str, str]] = field(default_factory=list)

    def serialize(self) -> str:
        lines = [f"Host {self.pattern}"]
        lines.extend(f"{OPTION_INDENT}{key} {value}" for key, value in self.options)
        return "\n".join(lines) + "\n"

    def get_option(self, key: str) -> Optional[str]:
        wanted = key.lower()
        for k, v in self.options:
            if k.lower() == wanted:
                return v
        return None

    def add_option(self, key: str, value: str) -> None:
        key, value = key.strip(), value.strip()
        if not key or not value:
            raise ConfigError("Option key and value must not be empty")
        self.options.append((key, value))

    def set_option(self, key: str, value: str) -> None:
        """Replace the first option named ``key`` (any case) or append it."""
        wanted = key.strip().lower()
        for i, (k, _) in enumerate(self.options):
            if k.lower() == wanted:
                if not value.strip():
                    raise ConfigError("Option value must not be empty")
                self.options[i] = (k, value.strip())
                return
        self.add_option(key, value)

    def rename(self, pattern: str) -> None:
        pattern = pattern.strip()
        if not pattern:
            raise ConfigError("Host pattern must not be empty")
        self.pattern = pattern

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.options):
            raise ConfigError(f"Host '{self.pattern}' has no option #{index + 1}")

    def update_option(self, index: int, value: str) -> None:
        """Change the value of the option at ``index``, keeping its key and position."""
        self._check_index(index)
        if not value.strip():
            raise ConfigError("Option value must not be empty")
        key, _ = self.options[index]
        self.options[index] = (key, value.strip())

    def remove_option(self, index: int) -> Tuple[str, str]:
        self._check_index(index)
        return self.options.pop(index)

    def remove_options(self, key: str) -> int:
        wanted = key.lower()
        before = len(self.options)
        self.options = [(k, v) for k, v in self.options if k.lower() != wanted]
        return before - len(self.options)

    def add_legacy_options(self) -> List[str]:
        added = []
        for key, value in LEGACY_OPTIONS:
            if not any(k == key for k, _ in self.options):
                self.options.append((key, value))
                added.append(key)
        return added


@dataclass
class GlobalOption:
    key: str
    value: str
    source_file: Path

    def serialize(self) -> str:
        return f"{self.key} {self.value}\n"


ConfigLine = Union[Comment, Empty, Include, HostEntry, GlobalOption]


@dataclass
class IncludedFile:
    content: str
    # Reserved for per-file tracking; saving only relies on Document.lines.
    lines: List[ConfigLine] = field(default_factory=list)


@dataclass
class Document:
    root: Path
    lines: List[ConfigLine] = field(default_factory=list)
    included_files: Dict[Path, IncludedFile] = field(default_factory=dict)
    visited: Set[Path] = field(default_factory=set, repr=False)

    def files(self) -> List[Path]:
        return [self.root, *self.included_files]

    def hosts(self) -> Iterator[Tuple[int, HostEntry]]:
        for idx, line in enumerate(self.lines):
            if isinstance(line, HostEntry):
                yield idx, line

    def search_hosts(self, query: str = "") -> List[Tuple[int, HostEntry]]:
        needle = query.strip().lower()
        return [(idx, h) for idx, h in self.hosts() if needle in h.pattern.lower()]

    def find_host(self, pattern: str) -> Optional[HostEntry]:
        for _, h in self.hosts():
            if h.pattern == pattern:
                return h
        return None

    def add_host(self, pattern: str, target_file: Optional[Path] = None) -> HostEntry:
        """Append a new empty host block owned by ``target_file``.

        The target defaults to the main file and must be one of ``files()``.
        """
        pattern = pattern.strip()
        if not pattern:
            raise ConfigError("Host pattern must not be empty")
        target = self.root if target_file is None else Path(target_file).expanduser().absolute()
        if target not in self.files():
            raise ConfigError(f"{target} is not part of this configuration")
        entry = HostEntry(pattern=pattern, source_file=target)
        self.lines.append(entry)
        return entry


__all__ = [
    "Comment",
    "ConfigLine",
    "Document",
    "Empty",
    "GlobalOption",
    "HostEntry",
    "Include",
    "IncludedFile",
    "LEGACY_OPTIONS",
]
