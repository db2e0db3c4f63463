"""
Working state shared by the selection and conflict steps of one run.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .types import DependencyType, PackageJson, ScrambleResult, empty_scrambled_deps

logger = logging.getLogger(__name__)


@dataclass
class ScrambleSession:
    """
    Working state of one scramble run.

    ``original`` is never written. ``modified`` starts as a deep copy of it
    and collects every change; ``scrambled_deps`` and ``issues`` record them.
    The session is owned by whichever step is running and is returned by it.
    """
    original: PackageJson
    modified: PackageJson
    scrambled_deps: Dict[DependencyType, List[str]] = field(default_factory=empty_scrambled_deps)
    issues: List[str] = field(default_factory=list)

    @classmethod
    def start(cls, pkg: PackageJson) -> "ScrambleSession":
        return cls(original=pkg, modified=copy.deepcopy(pkg))

    def dependencies_of(self, dep_type: DependencyType) -> Dict[str, str]:
        """Return an original category map, or an empty dict if it is absent."""
        deps = self.original.get(dep_type.value)
        return deps if isinstance(deps, dict) else {}

    def has_category(self, dep_type: DependencyType) -> bool:
        """Whether the modified manifest declares this category."""
        return isinstance(self.modified.get(dep_type.value), dict)

    def record(self, dep_type: DependencyType, name: str, version: str, issue: str) -> None:
        """Write a new specifier into the modified manifest and log the change."""
        self.modified[dep_type.value][name] = version
        self.mark_scrambled(dep_type, name)
        self.issues.append(issue)
        logger.debug(issue)

    def mark_scrambled(self, dep_type: DependencyType, name: str) -> None:
        names = self.scrambled_deps[dep_type]
        if name not in names:
            names.append(name)

    def is_scrambled(self, dep_type: DependencyType, name: str) -> bool:
        return name in self.scrambled_deps[dep_type]

    def to_result(self, backup_path=None) -> ScrambleResult:
        return ScrambleResult(
            original=self.original,
            modified=self.modified,
            scrambled_deps=self.scrambled_deps,
            backup_path=backup_path,
            issues=self.issues,
        )
