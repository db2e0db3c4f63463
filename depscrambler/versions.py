"""
Version specifier mutation.

Turns a package.json version specifier into a different, still well-formed
specifier that is likely to break installation. Two paths exist:

- free mutation, which may swap the range modifier and shift one numeric
  component (the major only when allowed);
- constraint-aware mutation, used when the caller pins a reference
  specifier for a package or its scope, which always keeps the reference
  major version.

Specifiers that are not ``[modifier]major.minor.patch[-prerelease]`` (tags,
URLs, ``workspace:*`` and friends) are returned unchanged.

All draws come from the ``rng`` argument and only ``rng.random()`` is used,
so a scripted source can reproduce any branch.
"""

import random
import re
from dataclasses import dataclass
from typing import Dict, Optional

import semantic_version as sv

from .types import VERSION_RANGE_REGEX, ConflictMode

VERSION_MODIFIERS = ["^", "~", ">=", ">", "=", "<", "<=", ""]
MAJOR_VERSION_BOUND = 3
MINOR_VERSION_BOUND = 5
PATCH_VERSION_BOUND = 10

_COERCE_REGEX = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass
class VersionSpec:
    """A parsed ``[modifier]major.minor.patch[-prerelease]`` specifier."""
    modifier: str
    major: int
    minor: int
    patch: int
    prerelease: str = ""

    @classmethod
    def parse(cls, specifier: str) -> Optional["VersionSpec"]:
        """Parse a specifier, or return None if it is opaque."""
        if not isinstance(specifier, str):
            return None
        match = VERSION_RANGE_REGEX.match(specifier)
        if not match:
            return None
        modifier, major, minor, patch, prerelease = match.groups()
        return cls(
            modifier=modifier or "",
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            prerelease=prerelease or "",
        )

    def __str__(self) -> str:
        return f"{self.modifier}{self.major}.{self.minor}.{self.patch}{self.prerelease}"


def is_scrambleable(specifier: str) -> bool:
    return VersionSpec.parse(specifier) is not None


def coerce_version(text: Optional[str]) -> Optional[sv.Version]:
    """
    Extract a best-effort release version from a loose version string.

    ``"^17.0.2"`` gives 17.0.2, ``">=4.1"`` gives 4.1.0, ``"v3"`` gives 3.0.0.
    Returns None when the string holds no digits.
    """
    if not text or not isinstance(text, str):
        return None
    match = _COERCE_REGEX.search(text)
    if not match:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return sv.Version(major=major, minor=minor, patch=patch)


def find_constraint(package_name: Optional[str],
                    version_constraints: Optional[Dict[str, str]]) -> Optional[str]:
    """
    Look up the reference specifier for a package.

    A key matches the exact package name, or a scope such that the package
    name starts with ``<key>/`` (``@angular`` matches ``@angular/core``).
    """
    if not package_name or not version_constraints:
        return None
    for key, constraint in version_constraints.items():
        if package_name == key or package_name.startswith(f"{key}/"):
            return constraint or None
    return None


def _offset(rng: random.Random, bound: int) -> int:
    return int(rng.random() * bound) + 1


def _shift(rng: random.Random, value: int, change: int) -> int:
    return max(0, value + change if rng.random() > 0.5 else value - change)


def scramble_version(
    original_version: str,
    aggression_level: int,
    conflict_mode: Optional[ConflictMode] = None,
    package_name: Optional[str] = None,
    version_constraints: Optional[Dict[str, str]] = None,
    respect_major_version: bool = False,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Mutate a version specifier to create conflicts.

    Args:
        original_version: Specifier from the manifest.
        aggression_level: 1-10, already clamped by the caller.
        conflict_mode: Biases the mutation; REALISTIC prefers exact pins and
            never touches the major version.
        package_name: Used to look up ``version_constraints``.
        version_constraints: Package name or scope -> reference specifier.
        respect_major_version: Never shift the major version.
        rng: Random source.

    Returns:
        The mutated specifier, or ``original_version`` if it is opaque.
    """
    rng = rng or random.Random()

    spec = VersionSpec.parse(original_version)
    if spec is None:
        return original_version

    constraint = VersionSpec.parse(find_constraint(package_name, version_constraints))
    if constraint is not None:
        return scramble_within_constraint(
            constraint.modifier,
            constraint.major,
            constraint.minor,
            constraint.patch,
            aggression_level,
            rng=rng,
        )

    scaled_aggression = aggression_level / 10
    realistic = conflict_mode == ConflictMode.REALISTIC

    mod_type = rng.random()
    modifier = spec.modifier
    major, minor, patch = spec.major, spec.minor, spec.patch

    if rng.random() < scaled_aggression * 0.8:
        if realistic:
            # Exact versions and tight ranges are harder to satisfy
            if rng.random() < 0.6:
                modifier = ""
            else:
                modifier = "~" if rng.random() < 0.7 else "^"
        else:
            modifier = VERSION_MODIFIERS[int(rng.random() * len(VERSION_MODIFIERS))]

    if rng.random() < scaled_aggression * 0.7:
        if mod_type < 0.3 and not respect_major_version and not realistic:
            major = _shift(rng, major, _offset(rng, MAJOR_VERSION_BOUND))
        elif mod_type < 0.7:
            minor = _shift(rng, minor, _offset(rng, MINOR_VERSION_BOUND))
        else:
            patch = _shift(rng, patch, _offset(rng, PATCH_VERSION_BOUND))

    # A pin that is slightly off is the hardest conflict to spot
    if realistic and rng.random() < 0.4 * scaled_aggression:
        modifier = ""
        if rng.random() < 0.5:
            patch = patch + 1 + int(rng.random() * 3)

    return str(VersionSpec(modifier, major, minor, patch, spec.prerelease))


def scramble_within_constraint(
    modifier: str,
    major: int,
    minor: int,
    patch: int,
    aggression_level: int,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Mutate a reference specifier without leaving its major version.

    The range is tightened and minor or patch shifted. The prerelease is
    dropped so the result always targets a release line.
    """
    rng = rng or random.Random()
    scaled_aggression = aggression_level / 10

    if rng.random() < scaled_aggression * 0.8:
        if modifier == "^":
            modifier = "~" if rng.random() < 0.6 else ""
        elif modifier == "~":
            modifier = "" if rng.random() < 0.7 else "^"
        else:
            modifier = "=" if rng.random() < 0.3 else ""

        if rng.random() < 0.6:
            minor = _shift(rng, minor, _offset(rng, MINOR_VERSION_BOUND))
        else:
            patch = _shift(rng, patch, _offset(rng, PATCH_VERSION_BOUND))

    return f"{modifier}{major}.{minor}.{patch}"
