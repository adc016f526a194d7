"""
app/paths.py -- Storage locations for the desktop host.

Uses platformdirs for the per-user data directory; snapshots live in a
``snapshots`` folder beneath it.
"""

from __future__ import annotations

import os

from platformdirs import user_data_dir

_APP_NAME = "DnDCharacterRecovery"
_APP_AUTHOR = "DnDEncounterTracker"


def get_user_data_dir() -> str:
    """Return the platform-appropriate user data directory, creating it."""
    path = user_data_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_storage_dir(base_dir: str | None = None) -> str:
    """Return the directory holding backup and auto-save snapshots.

    Parameters
    ----------
    base_dir : str, optional
        Overrides the user data directory (used by tests and portable
        installs).
    """
    root = base_dir if base_dir else get_user_data_dir()
    path = os.path.join(root, "snapshots")
    os.makedirs(path, exist_ok=True)
    return path
