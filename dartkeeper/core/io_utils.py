"""
YAML files on disk: the user config and the saved game history.

The history file is rewritten on every save, so writes land in a sibling
temp file first and are swapped in with os.replace(). A crash mid-save
leaves the previous history intact.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any
import logging

import yaml

logger = logging.getLogger(__name__)


def atomic_write_yaml(filepath: Path, data: Any) -> None:
    """
    Replace a YAML document in one step.

    Keys keep their insertion order, so a saved game reads id, type, date,
    ... top to bottom like GameRecord.to_dict() builds it.

    Args:
        filepath: Destination (parent directories are created)
        data: Plain dicts/lists/scalars

    Raises:
        IOError: If serializing or swapping the file failed
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    # Same directory as the target: os.replace() cannot cross filesystems
    fd, temp_path = tempfile.mkstemp(
        dir=filepath.parent,
        prefix=f".{filepath.stem}_",
        suffix=".tmp"
    )

    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        os.replace(temp_path, filepath)
        logger.debug(f"Wrote {filepath}")

    except Exception as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        logger.error(f"Could not save {filepath}: {e}")
        raise IOError(f"Atomic write failed: {e}") from e


def load_yaml(filepath: Path) -> Any:
    """
    Read a YAML document written by atomic_write_yaml() or by hand.

    Returns:
        Parsed document; an empty file reads as {}

    Raises:
        FileNotFoundError: If the file is missing
        yaml.YAMLError: If the file is not valid YAML
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"YAML file not found: {filepath}")

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {filepath}: {e}")
        raise

    logger.debug(f"Read {filepath}")
    return {} if data is None else data


def backup_file(filepath: Path, backup_suffix: str = ".bak") -> None:
    """
    Keep the previous version of a file next to it (history.yaml -> history.yaml.bak).

    Nothing happens for a missing file. A failed copy is logged and does
    not stop the save that follows.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        return

    backup_path = filepath.with_name(filepath.name + backup_suffix)
    try:
        shutil.copy2(filepath, backup_path)
    except OSError as e:
        logger.warning(f"Backup of {filepath} failed: {e}")
        return
    logger.info(f"Previous version kept as {backup_path}")
