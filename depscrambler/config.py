"""
Scramble option resolution.

Options come from three layers, later ones winning:

1. the defaults of :class:`ScrambleOptions`;
2. a YAML profile (``--config`` or ``.depscrambler.yaml`` next to the
   manifest);
3. explicit command line flags.

Example profile::

    percentage: 50
    aggression: 8
    mode: peer-conflict
    types: [dependencies, peerDependencies]
    respect_major: true
    constraints:
      "@angular": "^14.0.0"
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from .exceptions import ConfigError
from .types import ConflictMode, DependencyType, ScrambleOptions

logger = logging.getLogger(__name__)

PROFILE_FILENAME = ".depscrambler.yaml"

# profile key -> ScrambleOptions field
PROFILE_KEYS = {
    "path": "target_path",
    "backup": "create_backup",
    "types": "dependency_types",
    "percentage": "scramble_percentage",
    "aggression": "aggression_level",
    "mode": "conflict_mode",
    "respect_major": "respect_major_versions",
    "constraints": "version_constraints",
    "dry_run": "dry_run",
}


def load_profile(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML scramble profile.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read profile {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Profile {path} must be a mapping")

    unknown = set(data) - set(PROFILE_KEYS)
    if unknown:
        raise ConfigError(f"Unknown profile keys in {path}: {', '.join(sorted(unknown))}")
    return data


def find_profile(target_path: str) -> Optional[Path]:
    """Return the profile next to the manifest, if there is one."""
    candidate = Path(target_path).resolve().parent / PROFILE_FILENAME
    return candidate if candidate.is_file() else None


def parse_dependency_types(value: Union[str, Iterable[str]]) -> List[DependencyType]:
    """
    Parse dependency type names, given comma separated or as a list.

    Unknown names are skipped with a warning.
    """
    names = value.split(",") if isinstance(value, str) else list(value)
    known = {dep_type.value: dep_type for dep_type in DependencyType}
    result = []
    for name in names:
        name = str(name).strip()
        if not name:
            continue
        if name in known:
            if known[name] not in result:
                result.append(known[name])
        else:
            logger.warning(f"Ignoring unknown dependency type: {name}")
    return result


def parse_conflict_mode(value: Union[str, ConflictMode]) -> ConflictMode:
    if isinstance(value, ConflictMode):
        return value
    try:
        return ConflictMode(value)
    except ValueError:
        choices = ", ".join(mode.value for mode in ConflictMode)
        raise ConfigError(f"Unknown conflict mode: {value}. Choose from: {choices}")


def parse_constraints(value: Union[Dict[str, str], Iterable[str], None]) -> Dict[str, str]:
    """
    Parse version constraints from a mapping or ``NAME=SPEC`` strings.

    Scoped names keep their ``@``: ``@angular=^14.0.0``.
    """
    if not value:
        return {}
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items()}

    constraints = {}
    for item in value:
        name, sep, spec = str(item).partition("=")
        if not sep or not name.strip() or not spec.strip():
            raise ConfigError(f"Invalid constraint '{item}', expected NAME=SPEC")
        constraints[name.strip()] = spec.strip()
    return constraints


def _to_number(key: str, value: Any, cast):
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Option '{key}' must be a number, got {value!r}")


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"Option '{key}' must be true or false, got {value!r}")


def resolve_options(
    profile: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ScrambleOptions:
    """
    Merge defaults, a profile and explicit overrides into clamped options.

    Both ``profile`` and ``overrides`` use profile key names; ``None`` values
    in ``overrides`` mean "not given".
    """
    merged: Dict[str, Any] = dict(profile or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    options = ScrambleOptions()
    if "path" in merged:
        options.target_path = str(merged["path"])
    if "backup" in merged:
        options.create_backup = _to_bool("backup", merged["backup"])
    if "types" in merged:
        options.dependency_types = parse_dependency_types(merged["types"])
    if "percentage" in merged:
        options.scramble_percentage = _to_number("percentage", merged["percentage"], float)
    if "aggression" in merged:
        options.aggression_level = _to_number("aggression", merged["aggression"], int)
    if "mode" in merged:
        options.conflict_mode = parse_conflict_mode(merged["mode"])
    if "respect_major" in merged:
        options.respect_major_versions = _to_bool("respect_major", merged["respect_major"])
    if "constraints" in merged:
        options.version_constraints = parse_constraints(merged["constraints"])
    if "dry_run" in merged:
        options.dry_run = _to_bool("dry_run", merged["dry_run"])

    return options.clamped()
