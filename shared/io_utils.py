"""Shared I/O utilities for journal snapshots and report files."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, TextIO

import pandas as pd

logger = logging.getLogger(__name__)


def safe_json_read(filepath: Path, default=None):
    """Read and parse a JSON file with automatic backup recovery.

    Tries *filepath* first, then the ``.json.bak`` backup written by
    :func:`atomic_json_write`.  If both fail, *default* is returned.

    Args:
        filepath: Path to the JSON file.
        default: Value returned when both primary and backup reads fail.

    Returns:
        Parsed JSON data, or *default* on failure.
    """
    filepath = Path(filepath)
    try:
        with open(filepath, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, FileNotFoundError, OSError):
        pass

    backup_path = filepath.with_suffix(".json.bak")
    try:
        with open(backup_path, "r") as f:
            data = json.load(f)
        logger.warning(
            "Recovered JSON from backup %s (primary %s was unreadable)",
            backup_path,
            filepath,
        )
        return data
    except (json.JSONDecodeError, FileNotFoundError, OSError):
        pass

    return default


def _atomic_write(filepath: Path, write: Callable[[TextIO], None], *,
                  mkdir: bool = True, backup_suffix: str = None):
    """Run *write* against a temp file in the target directory, then rename."""
    if mkdir:
        filepath.parent.mkdir(parents=True, exist_ok=True)

    if backup_suffix and filepath.exists():
        try:
            shutil.copy2(filepath, filepath.with_suffix(backup_suffix))
        except OSError:
            logger.warning("Could not back up %s before overwrite", filepath)

    fd, tmp_path = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="") as f:
            write(f)
        os.replace(tmp_path, filepath)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def atomic_json_write(filepath: Path, data, *, mkdir: bool = True):
    """Write JSON atomically, keeping a ``.json.bak`` of the previous file.

    Args:
        filepath: Destination file path.
        data: JSON-serialisable data to write.
        mkdir: If *True* (default), create parent directories as needed.
    """
    _atomic_write(
        Path(filepath),
        lambda f: json.dump(data, f, indent=2, default=str),
        mkdir=mkdir,
        backup_suffix=".json.bak",
    )


def atomic_text_write(filepath: Path, text: str, *, mkdir: bool = True):
    """Write a text file atomically."""
    _atomic_write(Path(filepath), lambda f: f.write(text), mkdir=mkdir)


def atomic_csv_write(filepath: Path, df: pd.DataFrame, *, mkdir: bool = True):
    """Write a DataFrame to CSV atomically (no index column)."""
    _atomic_write(Path(filepath), lambda f: df.to_csv(f, index=False), mkdir=mkdir)
