"""
Shared helpers for the character recovery engine.

Groups the small tree-manipulation helpers used across backups, validation
recovery and auto-save (structural cloning, dotted-path assignment, draft
presence checks) together with the atomic file I/O used by the file-backed
key-value store.

All file writes use atomic temp-file-then-os.replace() so a crash mid-write
never leaves a truncated snapshot behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def clone_data(value: Any) -> Any:
    """Return a structural deep copy of a JSON-like tree.

    Mappings become plain dicts with their keys visited in sorted order, so
    two equivalent inputs always produce identically ordered copies.  Lists
    and tuples become lists.  Everything else is treated as an immutable
    leaf and returned as-is.

    Parameters
    ----------
    value
        A mapping, sequence, or primitive.

    Returns
    -------
    object
        A copy that shares no mutable containers with *value*.
    """
    if isinstance(value, Mapping):
        return {
            key: clone_data(value[key])
            for key in sorted(value, key=str)
        }
    if isinstance(value, (list, tuple)):
        return [clone_data(item) for item in value]
    return value


def set_nested_value(tree: Any, path: str, value: Any) -> bool:
    """Assign *value* at the dotted *path* inside *tree*, in place.

    Missing intermediate keys in dicts are created as empty dicts.  List
    segments must be in-range integer indices.  When an intermediate
    segment resolves to anything that is neither a dict nor a list (a
    number, a string, an explicit ``None``), the assignment is skipped.

    Returns
    -------
    bool
        True if the value was written, False if the path was skipped.
    """
    parts = path.split(".")
    current = tree

    for part in parts[:-1]:
        if isinstance(current, dict):
            if part not in current:
                current[part] = {}
            current = current[part]
        elif isinstance(current, list):
            index = _list_index(current, part)
            if index is None:
                return False
            current = current[index]
        else:
            return False

    final_key = parts[-1]
    if isinstance(current, dict):
        current[final_key] = value
        return True
    if isinstance(current, list):
        index = _list_index(current, final_key)
        if index is None:
            return False
        current[index] = value
        return True
    return False


def _list_index(items: list, segment: str) -> int | None:
    """Parse *segment* as an index into *items*, or None if not usable."""
    if not segment.isdigit():
        return None
    index = int(segment)
    if index >= len(items):
        return None
    return index


def is_present(value: Any) -> bool:
    """True if a draft field holds something (not None and not blank)."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def has_content(draft: Any) -> bool:
    """True if *draft* is a mapping with at least one field."""
    return isinstance(draft, Mapping) and len(draft) > 0


# ---------------------------------------------------------------------------
# File I/O (atomic writes)
# ---------------------------------------------------------------------------

def read_text(path: str) -> str | None:
    """Read a UTF-8 text file, returning None if it does not exist."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return None


def atomic_write_text(path: str, text: str) -> None:
    """Atomically write *text* to *path*.

    Uses a temporary file in the same directory followed by
    ``os.replace()`` so that readers never see a partially-written file.
    Parent directories are created if they do not exist.
    """
    path = str(path)
    parent = os.path.dirname(path)
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any failure.
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
