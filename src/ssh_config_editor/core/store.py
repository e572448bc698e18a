from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .errors import ConfigIOError
from .model import Document

logger = logging.getLogger(__name__)


def render_file(document: Document, target: Union[str, Path]) -> str:
    """Rebuild the text of ``target`` from the lines it owns, in document order."""
    target = Path(target).expanduser().absolute()
    return "".join(line.serialize() for line in document.lines if line.source_file == target)


def write_config_file(path: Path, text: str) -> None:
    # in place: no temp file, no backup
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigIOError.from_os_error(path, exc, action="write") from exc
    logger.info("Wrote %s", path)


def save_all(document: Document, main_file: Optional[Union[str, Path]] = None) -> List[Path]:
    """Write the main file, then every included file.

    Stops at the first failing write; files written before it keep their new
    content. Returns the paths written.
    """
    main = Path(main_file).expanduser().absolute() if main_file is not None else document.root
    written: List[Path] = []
    for path in [main, *document.included_files]:
        write_config_file(path, render_file(document, path))
        written.append(path)
    return written


__all__ = ["render_file", "save_all", "write_config_file"]
