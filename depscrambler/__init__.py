"""
Dependency Scrambler
====================

Scramble package.json version specifiers into realistic installation
conflicts for debugging exercises, with backup and restore support.
"""

__version__ = "1.0.0"

from .exceptions import (
    BackupError,
    ConfigError,
    LoadError,
    RestoreError,
    SaveError,
    ScramblerError,
)
from .manifest import (
    create_backup,
    load_package_json,
    restore_from_backup,
    save_package_json,
)
from .scrambler import scramble_package_json
from .selector import scramble_dependencies
from .types import ConflictMode, DependencyType, ScrambleOptions, ScrambleResult
from .versions import scramble_version

__all__ = [
    "scramble_package_json",
    "scramble_dependencies",
    "scramble_version",
    "load_package_json",
    "save_package_json",
    "create_backup",
    "restore_from_backup",
    "ConflictMode",
    "DependencyType",
    "ScrambleOptions",
    "ScrambleResult",
    "ScramblerError",
    "LoadError",
    "SaveError",
    "BackupError",
    "RestoreError",
    "ConfigError",
]
