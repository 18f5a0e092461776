"""File system operations used while materializing a template."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from shutil import copy2, copytree


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents; an existing directory is fine.

    Args:
        path: Directory to create
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Parent directories are not created.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def copy_directory_contents(source: Path, destination: Path) -> list[Path]:
    """Copy every entry of `source` into `destination`, overwriting files.

    A file `source` is copied into `destination` as a single entry.

    Returns:
        The copied top-level destination paths
    """
    if not source.exists():
        raise FileNotFoundError(f"Source path not found: {source}")

    entries = sorted(source.iterdir()) if source.is_dir() else [source]
    copied: list[Path] = []
    for entry in entries:
        target = destination / entry.name
        if entry.is_dir():
            copytree(entry, target, dirs_exist_ok=True)
        else:
            copy2(entry, target)
        copied.append(target)
    return copied
