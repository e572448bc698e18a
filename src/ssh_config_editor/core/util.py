from __future__ import annotations

import glob
import logging
import re
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


def expand_user_prefix(raw: str) -> Path:
    """Expand a leading ``~/`` to the invoking user's home directory.

    Only the ``~/`` form is recognized; ``~user`` is left untouched.
    """
    if raw.startswith("~/"):
        return Path.home() / raw[2:]
    return Path(raw)


def canonical_path(path: Union[str, Path]) -> Path:
    """Return the symlink-free absolute form of ``path``.

    Falls back to the literal absolute path when the file cannot be resolved
    (dangling symlink, permission problem), so cycle detection stays
    best-effort instead of failing the parse.
    """
    p = Path(path)
    try:
        return p.resolve(strict=True)
    except (OSError, RuntimeError):
        return p.absolute()


def expand_include(raw_pattern: str, including_dir: Union[str, Path]) -> List[Path]:
    """Resolve an ``Include`` argument to the existing files it names.

    Relative patterns are anchored at ``including_dir`` (the directory of the
    file holding the directive). Matches are returned sorted; anything that
    is not a regular file is dropped. A pattern matching nothing yields an
    empty list.
    """
    target = expand_user_prefix(raw_pattern.strip())
    if not target.is_absolute():
        target = Path(including_dir) / target
    pattern = str(target)
    try:
        matches = sorted(glob.glob(pattern, recursive=True, include_hidden=True))
    except (re.error, ValueError) as exc:
        logger.debug("Glob failed for %s (%s); trying it as a literal path", pattern, exc)
        matches = []
    if not matches and target.is_file():
        # literal names containing glob metacharacters, e.g. "hosts[old]"
        matches = [pattern]
    files = [Path(m) for m in matches if Path(m).is_file()]
    if not files:
        logger.debug("Include %r matched no files", raw_pattern)
    return files


__all__ = ["canonical_path", "expand_include", "expand_user_prefix"]
