"""
State directory management.

All generated material lives in a single directory:
    $XDG_STATE_HOME/localhost.py/     (default: ~/.local/state/localhost.py/)
        {name}.crt
        {name}.key
        {name}.lock

Older releases stored everything in ~/.localhost/. That directory is
migrated into the new location the first time the path is resolved.
"""

import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

STATE_HOME_VARIABLE = "XDG_STATE_HOME"
DEFAULT_STATE_HOME = "~/.local/state"
NAMESPACE = "localhost.py"
LEGACY_ROOT = "~/.localhost"


class State:
    """Resolves, migrates and purges the on-disk state directory."""

    @staticmethod
    def path(env: Mapping[str, str], old_root: str | Path = LEGACY_ROOT) -> Path:
        """
        Resolve the state directory, creating it if needed.

        Args:
            env: Environment mapping consulted for XDG_STATE_HOME
            old_root: Legacy directory to migrate from, if it exists

        Returns:
            Absolute path of the state directory
        """
        base = env.get(STATE_HOME_VARIABLE) or DEFAULT_STATE_HOME
        path = Path(base, NAMESPACE).expanduser().absolute()

        if not path.is_dir():
            path.mkdir(mode=0o700, parents=True, exist_ok=True)
            logger.debug(f"Created state directory {path}")

        State._migrate(Path(old_root).expanduser(), path)

        return path

    @staticmethod
    def purge(env: Mapping[str, str], old_root: str | Path = LEGACY_ROOT) -> None:
        """
        Delete the state directory and everything in it.

        Args:
            env: Environment mapping consulted for XDG_STATE_HOME
            old_root: Legacy directory to migrate from, if it exists
        """
        path = State.path(env, old_root)

        if path.is_dir():
            shutil.rmtree(path)

        logger.info(f"Purged state directory {path}")

    @staticmethod
    def _migrate(old_root: Path, path: Path) -> None:
        """Move every entry of the legacy directory into ``path``."""
        if not old_root.is_dir() or old_root.absolute() == path:
            return

        for entry in old_root.iterdir():
            destination = path / entry.name

            if destination.is_dir() and not destination.is_symlink():
                shutil.rmtree(destination)
            elif destination.exists() or destination.is_symlink():
                destination.unlink()

            shutil.move(os.fspath(entry), os.fspath(destination))

        old_root.rmdir()
        logger.info(f"Migrated legacy state directory {old_root} to {path}")
