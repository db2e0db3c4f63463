"""
Manifest file handling: load, save, backup and restore of package.json.
"""

import json
import logging
import time
from pathlib import Path
from typing import List, Optional

from .exceptions import BackupError, LoadError, RestoreError, SaveError
from .types import DEFAULT_TARGET_PATH, DependencyType, PackageJson

logger = logging.getLogger(__name__)

BACKUP_MARKER = ".backup."


def load_package_json(file_path: str) -> PackageJson:
    """
    Load and validate a package.json file.

    Raises:
        LoadError: If the file cannot be read, is not valid JSON, is not an
            object, or holds a dependency category that is not a map of
            strings.
    """
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LoadError(f"Failed to load package.json from {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise LoadError(f"Failed to load package.json from {file_path}: top level is not an object")

    for dep_type in DependencyType:
        deps = data.get(dep_type.value)
        if deps is None:
            continue
        if not isinstance(deps, dict) or not all(isinstance(v, str) for v in deps.values()):
            raise LoadError(
                f"Failed to load package.json from {file_path}: "
                f"{dep_type.value} must map package names to version strings"
            )

    return data


def save_package_json(file_path: str, data: PackageJson) -> None:
    """
    Write a manifest as 2-space indented JSON.

    Raises:
        SaveError: If the file cannot be written.
    """
    try:
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        Path(file_path).write_text(content, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise SaveError(f"Failed to save package.json to {file_path}: {e}") from e


def _backup_token() -> int:
    return time.time_ns() // 1_000_000


def create_backup(file_path: str) -> str:
    """
    Copy the manifest byte for byte to ``<file_path>.backup.<millis>``.

    The token is bumped until the name is unused, so two backups in the same
    millisecond never overwrite each other.

    Returns:
        Path of the backup file.

    Raises:
        BackupError: If the source cannot be read or the copy cannot be written.
    """
    source = Path(file_path)
    try:
        content = source.read_bytes()
        token = _backup_token()
        backup_path = Path(f"{file_path}{BACKUP_MARKER}{token}")
        while backup_path.exists():
            token += 1
            backup_path = Path(f"{file_path}{BACKUP_MARKER}{token}")
        with open(backup_path, "xb") as f:
            f.write(content)
    except OSError as e:
        raise BackupError(f"Failed to create backup of {file_path}: {e}") from e

    logger.info(f"Backed up {file_path} to {backup_path}")
    return str(backup_path)


def restore_from_backup(backup_path: str, target_path: Optional[str] = None) -> str:
    """
    Copy a backup byte for byte onto the target manifest.

    Returns:
        The resolved target path.

    Raises:
        RestoreError: If the backup cannot be read or the target cannot be written.
    """
    target = Path(target_path or DEFAULT_TARGET_PATH).resolve()
    try:
        content = Path(backup_path).read_bytes()
        target.write_bytes(content)
    except OSError as e:
        raise RestoreError(f"Failed to restore from backup {backup_path}: {e}") from e

    logger.info(f"Restored {target} from {backup_path}")
    return str(target)


def _backup_sort_key(path: Path) -> int:
    token = path.name.rsplit(BACKUP_MARKER, 1)[-1]
    return int(token) if token.isdigit() else -1


def list_backups(file_path: str = DEFAULT_TARGET_PATH) -> List[str]:
    """Return existing backups of a manifest, newest first."""
    path = Path(file_path)
    directory = path.parent if str(path.parent) else Path(".")
    if not directory.is_dir():
        return []
    backups = [p for p in directory.glob(f"{path.name}{BACKUP_MARKER}*") if p.is_file()]
    backups.sort(key=_backup_sort_key, reverse=True)
    return [str(p) for p in backups]


def find_latest_backup(file_path: str = DEFAULT_TARGET_PATH) -> Optional[str]:
    backups = list_backups(file_path)
    return backups[0] if backups else None
