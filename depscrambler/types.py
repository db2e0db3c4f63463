"""
Types for the dependency scrambler.

Enumerations for dependency categories and conflict modes, the options record
that drives a scramble run, and the result record returned to callers.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# A parsed package.json document. Only the dependency categories are
# interpreted; every other key is carried through untouched.
PackageJson = Dict[str, Any]


class DependencyType(Enum):
    """Dependency categories of a package.json manifest."""
    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "devDependencies"
    PEER_DEPENDENCIES = "peerDependencies"
    OPTIONAL_DEPENDENCIES = "optionalDependencies"


class ConflictMode(Enum):
    """Families of conflicts a scramble run may generate."""
    # Version changes that can usually be fixed by updating
    SIMPLE = "simple"
    # Conflicts that cannot be fixed by just updating
    REALISTIC = "realistic"
    # Focused on peer dependency conflicts
    PEER_CONFLICT = "peer-conflict"


# modifier, major, minor, patch, prerelease
VERSION_RANGE_REGEX = re.compile(r"^(\^|~|>=|>|<=|<|=)?(\d+)\.(\d+)\.(\d+)(-[a-zA-Z0-9.-]+)?$")

DEFAULT_TARGET_PATH = "./package.json"
DEFAULT_SCRAMBLE_PERCENTAGE = 30
DEFAULT_AGGRESSION_LEVEL = 5

MIN_AGGRESSION_LEVEL = 1
MAX_AGGRESSION_LEVEL = 10


def clamp_percentage(value: float) -> float:
    """Clamp a scramble percentage to [0, 100]."""
    return min(100, max(0, value))


def clamp_aggression(value: int) -> int:
    """Clamp an aggression level to [1, 10]."""
    return min(MAX_AGGRESSION_LEVEL, max(MIN_AGGRESSION_LEVEL, int(value)))


@dataclass
class ScrambleOptions:
    """Options for a single scramble run."""
    target_path: str = DEFAULT_TARGET_PATH
    create_backup: bool = True
    dependency_types: List[DependencyType] = field(default_factory=lambda: list(DependencyType))
    scramble_percentage: float = DEFAULT_SCRAMBLE_PERCENTAGE
    aggression_level: int = DEFAULT_AGGRESSION_LEVEL
    # Package name or scope (e.g. "@angular") -> reference specifier
    version_constraints: Dict[str, str] = field(default_factory=dict)
    respect_major_versions: bool = True
    conflict_mode: ConflictMode = ConflictMode.REALISTIC
    dry_run: bool = False

    def clamped(self) -> "ScrambleOptions":
        """Return a copy with percentage and aggression inside their ranges."""
        return ScrambleOptions(
            target_path=self.target_path,
            create_backup=self.create_backup,
            dependency_types=list(self.dependency_types),
            scramble_percentage=clamp_percentage(self.scramble_percentage),
            aggression_level=clamp_aggression(self.aggression_level),
            version_constraints=dict(self.version_constraints),
            respect_major_versions=self.respect_major_versions,
            conflict_mode=self.conflict_mode,
            dry_run=self.dry_run,
        )


def empty_scrambled_deps() -> Dict[DependencyType, List[str]]:
    return {dep_type: [] for dep_type in DependencyType}


@dataclass
class ScrambleResult:
    """Before/after record of a scramble run."""
    original: PackageJson
    modified: PackageJson
    scrambled_deps: Dict[DependencyType, List[str]] = field(default_factory=empty_scrambled_deps)
    backup_path: Optional[str] = None
    issues: List[str] = field(default_factory=list)

    @property
    def total_scrambled(self) -> int:
        return sum(len(names) for names in self.scrambled_deps.values())

    def changes(self) -> List[tuple]:
        """List (dependency type, name, before, after) for every scrambled entry."""
        rows = []
        for dep_type, names in self.scrambled_deps.items():
            before = self.original.get(dep_type.value) or {}
            after = self.modified.get(dep_type.value) or {}
            for name in names:
                rows.append((dep_type, name, before.get(name), after.get(name)))
        return rows
