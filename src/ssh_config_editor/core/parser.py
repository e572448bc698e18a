from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from .errors import ConfigIOError
from .model import Comment, Document, Empty, GlobalOption, HostEntry, Include, IncludedFile
from .util import canonical_path, expand_include

logger = logging.getLogger(__name__)

DIRECTIVE_RE = re.compile(r"^(?P<key>\S+)\s+(?P<value>.+)$")


@dataclass
class CommentLine:
    text: str


@dataclass
class BlankLine:
    pass


@dataclass
class Directive:
    key: str
    value: str

    @property
    def keyword(self) -> str:
        return self.key.lower()


@dataclass
class MalformedLine:
    text: str


Classified = Union[CommentLine, BlankLine, Directive, MalformedLine]


def classify_line(raw: str) -> Classified:
    """Classify one physical line.

    Comments keep the untrimmed text. A directive is split on the first run
    of whitespace; a keyword with no value is reported as malformed.
    """
    trimmed = raw.strip()
    if trimmed.startswith("#"):
        return CommentLine(raw)
    if not trimmed:
        return BlankLine()
    m = DIRECTIVE_RE.match(trimmed)
    if not m:
        return MalformedLine(raw)
    return Directive(m.group("key"), m.group("value").strip())


def physical_lines(text: str) -> List[str]:
    # Split on \n only and drop a trailing \r, like ssh itself reads lines.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass
class _OpenHost:
    pattern: str
    options: List[Tuple[str, str]] = field(default_factory=list)


class _FileBuilder:
    """Line-by-line state machine for a single physical file."""

    def __init__(self, document: Document, source: Path, visited: Set[Path]):
        self.document = document
        self.source = source
        self.visited = visited
        self.current: Optional[_OpenHost] = None

    def flush(self) -> None:
        if self.current is None:
            return
        self.document.lines.append(
            HostEntry(pattern=self.current.pattern, options=self.current.options, source_file=self.source)
        )
        self.current = None

    def feed(self, raw: str) -> None:
        line = classify_line(raw)
        if isinstance(line, CommentLine):
            self.flush()
            self.document.lines.append(Comment(text=line.text, source_file=self.source))
        elif isinstance(line, BlankLine):
            self.flush()
            self.document.lines.append(Empty(source_file=self.source))
        elif isinstance(line, MalformedLine):
            logger.debug("Dropping line without value in %s: %r", self.source, line.text)
        elif line.keyword == "host":
            self.flush()
            self.current = _OpenHost(line.value)
        elif line.keyword == "include":
            self.flush()
            self.document.lines.append(Include(path=line.value, source_file=self.source))
            _parse_include(self.document, line.value, self.source, self.visited)
        elif self.current is not None:
            self.current.options.append((line.key, line.value))
        else:
            self.document.lines.append(GlobalOption(key=line.key, value=line.value, source_file=self.source))

    def finish(self) -> None:
        self.flush()


def _parse_include(document: Document, raw_pattern: str, including_file: Path, visited: Set[Path]) -> None:
    for path in expand_include(raw_pattern, including_file.parent):
        key = canonical_path(path)
        if key in visited:
            logger.debug("Skipping %s: already parsed", path)
            continue
        visited.add(key)
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable include %s: %s", path, exc)
            continue
        document.included_files[path] = IncludedFile(content=content)
        _parse_into(document, content, path, visited)


def _parse_into(document: Document, text: str, source: Path, visited: Set[Path]) -> None:
    builder = _FileBuilder(document, source, visited)
    for raw in physical_lines(text):
        builder.feed(raw)
    builder.finish()


def parse_config_text(text: str, source: Union[str, Path], document: Optional[Document] = None) -> Document:
    """Parse ``text`` as the content of ``source`` and append it to a document.

    Includes are resolved relative to ``source``'s directory. A new document
    rooted at ``source`` is created when none is given.
    """
    source = Path(source).expanduser().absolute()
    if document is None:
        document = Document(root=source)
        document.visited.add(canonical_path(source))
    _parse_into(document, text, source, document.visited)
    return document


def parse_config_file(path: Union[str, Path]) -> Document:
    """Parse a root config file and everything it includes.

    Only a failure to read the root file raises; broken includes are skipped.
    """
    root = Path(path).expanduser().absolute()
    try:
        text = root.read_bytes().decode("utf-8")
    except OSError as exc:
        raise ConfigIOError.from_os_error(root, exc) from exc
    except UnicodeDecodeError as exc:
        raise ConfigIOError(root, f"not valid UTF-8 ({exc.reason})") from exc
    logger.debug("Parsing %s", root)
    document = parse_config_text(text, root)
    logger.info("Loaded %s (%d included files)", root, len(document.included_files))
    return document


__all__ = [
    "BlankLine",
    "CommentLine",
    "Directive",
    "MalformedLine",
    "classify_line",
    "parse_config_file",
    "parse_config_text",
    "physical_lines",
]
