"""
Targeted conflict generation.

Runs after each dependency category has been scrambled and injects the kinds
of conflicts that random version shifts rarely produce on their own:

- a peer dependency that no longer accepts the version declared as a regular
  dependency;
- a forced downgrade of packages known to carry peer expectations of other
  packages (simulated transitive conflicts);
- one member of a package family (``@scope/*`` or ``prefix-*``) drifting a
  few patches away from its siblings.

Reference values are always read from the original manifest; writes go to the
session's modified manifest. A missing or unparseable reference version skips
the strategy silently. Writes that would move a package covered by a
version constraint off the constraint's major version are skipped.
"""

import logging
import random
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .session import ScrambleSession
from .types import ConflictMode, DependencyType, ScrambleOptions
from .versions import VersionSpec, coerce_version, find_constraint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitiveConflict:
    """A package whose version constrains what another package accepts."""
    name: str
    version: str
    transitive: str
    trans_version: str


class ConflictStrategist:
    """Injects peer, transitive and package-family conflicts into a session."""

    # Packages that commonly pull in transitive peer requirements
    POPULAR_PACKAGES = [
        "react",
        "react-dom",
        "angular",
        "@angular/core",
        "vue",
        "express",
        "next",
        "gatsby",
        "webpack",
    ]

    TRANSITIVE_CONFLICTS = [
        TransitiveConflict("@babel/core", "^7.0.0", "@babel/preset-env", "^7.18.0"),
        TransitiveConflict("webpack", "^4.0.0", "html-webpack-plugin", "^5.0.0"),
        TransitiveConflict("react", "^17.0.0", "react-router-dom", "^6.0.0"),
        TransitiveConflict("typescript", "^4.0.0", "tslib", "^2.5.0"),
    ]

    # "@scope/" or a hyphenated family prefix such as "eslint-plugin-"
    FAMILY_PREFIX_REGEX = re.compile(r"^(@[^/]+/|[^@][^/]+-)")

    PREFERRED_PEER = "react"

    def __init__(self, options: ScrambleOptions, rng: Optional[random.Random] = None):
        self.conflict_mode = options.conflict_mode
        self.scaled_aggression = options.aggression_level / 10
        self.version_constraints = options.version_constraints
        self.rng = rng or random.Random()

    def apply(self, session: ScrambleSession, current_type: DependencyType) -> ScrambleSession:
        """Run every strategy enabled for ``current_type`` and return the session."""
        if self._peer_conflict_enabled(current_type):
            self.create_peer_conflict(session)

        if self.conflict_mode == ConflictMode.REALISTIC and self.rng.random() < self.scaled_aggression * 0.6:
            self.create_transitive_conflicts(session)

        if self.conflict_mode == ConflictMode.REALISTIC and current_type == DependencyType.DEPENDENCIES:
            self.create_family_mismatches(session)

        return session

    def _peer_conflict_enabled(self, current_type: DependencyType) -> bool:
        if current_type == DependencyType.PEER_DEPENDENCIES:
            return True
        return self.conflict_mode == ConflictMode.PEER_CONFLICT and self.rng.random() < 0.8

    def _choose(self, items: List[str]) -> str:
        return items[int(self.rng.random() * len(items))]

    def _breaks_constraint(self, name: str, version: str) -> bool:
        """Whether writing ``version`` would move a constrained package off its major."""
        constraint = VersionSpec.parse(find_constraint(name, self.version_constraints))
        if constraint is None:
            return False
        coerced = coerce_version(version)
        return coerced is None or coerced.major != constraint.major

    def create_peer_conflict(self, session: ScrambleSession) -> None:
        """Make one peer dependency reject the version used as a regular dependency."""
        dependencies = session.dependencies_of(DependencyType.DEPENDENCIES)
        if not dependencies:
            return

        peer_deps = session.dependencies_of(DependencyType.PEER_DEPENDENCIES)
        shared = [name for name in peer_deps if dependencies.get(name)]
        if not shared:
            return

        if self.PREFERRED_PEER in shared and self.rng.random() < 0.7:
            shared_dep = self.PREFERRED_PEER
        else:
            shared_dep = self._choose(shared)

        regular_version = dependencies[shared_dep]
        coerced = coerce_version(regular_version)
        if coerced is None:
            logger.debug(f"Skipping peer conflict for {shared_dep}: cannot coerce {regular_version}")
            return

        conflict_version = self._peer_conflict_version(coerced)

        # Never invent a peerDependencies section that the manifest lacks
        if not session.has_category(DependencyType.PEER_DEPENDENCIES):
            return
        if self._breaks_constraint(shared_dep, conflict_version):
            logger.debug(f"Skipping peer conflict for {shared_dep}: outside its version constraint")
            return

        session.record(
            DependencyType.PEER_DEPENDENCIES,
            shared_dep,
            conflict_version,
            f"Created peer dependency conflict for {shared_dep}: "
            f"regular={regular_version}, peer={conflict_version}",
        )

    def _peer_conflict_version(self, coerced) -> str:
        choice = self.rng.random()
        if choice < 0.4:
            # One or two majors ahead
            major_diff = int(self.rng.random() * 2) + 1
            return f"^{coerced.major + major_diff}.0.0"
        if choice < 0.7:
            # Exact pin one patch ahead
            return f"{coerced.major}.{coerced.minor}.{coerced.patch + 1}"
        # Window of minors the regular version cannot reach
        return f">={coerced.major}.{coerced.minor + 2}.0 <{coerced.major}.{coerced.minor + 5}.0"

    def _matching(self, names: List[str], package: str) -> List[str]:
        return [name for name in names if name == package or name.startswith(f"{package}/")]

    def create_transitive_conflicts(self, session: ScrambleSession) -> None:
        """
        Force packages with known peer expectations onto an older minor.

        The forced version is derived from one popular package found in the
        regular dependencies: same major, one to three minors lower, patch 0.
        """
        dependencies = session.dependencies_of(DependencyType.DEPENDENCIES)
        names = list(dependencies)

        found_popular = [pkg for pkg in self.POPULAR_PACKAGES if self._matching(names, pkg)]
        if not found_popular or not session.has_category(DependencyType.DEPENDENCIES):
            return

        target = self._choose(found_popular)
        dep = self._choose(self._matching(names, target))

        coerced = coerce_version(dependencies.get(dep))
        if coerced is None:
            return

        new_minor = max(0, coerced.minor - int(self.rng.random() * 3) - 1)
        new_version = f"{coerced.major}.{new_minor}.0"

        for conflict in self.TRANSITIVE_CONFLICTS:
            dep_version = dependencies.get(conflict.name)
            if not dep_version or session.is_scrambled(DependencyType.DEPENDENCIES, conflict.name):
                continue
            if self._breaks_constraint(conflict.name, new_version):
                continue
            session.record(
                DependencyType.DEPENDENCIES,
                conflict.name,
                new_version,
                f"Created potential transitive dependency conflict for {conflict.name}: "
                f"{dep_version} -> {new_version}",
            )

    def family_prefixes(self, names: List[str]) -> List[str]:
        """Return the distinct family prefixes of ``names`` in first-seen order."""
        prefixes: Dict[str, None] = {}
        for name in names:
            match = self.FAMILY_PREFIX_REGEX.match(name)
            if match:
                prefixes.setdefault(match.group(1), None)
        return list(prefixes)

    def create_family_mismatches(self, session: ScrambleSession) -> None:
        """Let members of a package family lag their first sibling by a few patches."""
        dependencies = session.dependencies_of(DependencyType.DEPENDENCIES)
        names = list(dependencies)

        for prefix in self.family_prefixes(names):
            if self.rng.random() >= self.scaled_aggression * 0.7:
                continue

            related = [name for name in names if name.startswith(prefix)]
            if len(related) < 2:
                continue

            base_pkg = related[0]
            base_version = dependencies[base_pkg]
            base = VersionSpec.parse(base_version)
            if base is None or not session.has_category(DependencyType.DEPENDENCIES):
                continue

            for pkg in related[1:]:
                if self.rng.random() >= 0.7:
                    continue
                new_patch = base.patch + int(self.rng.random() * 3) + 1
                new_version = f"{base.modifier}{base.major}.{base.minor}.{new_patch}"
                if self._breaks_constraint(pkg, new_version):
                    continue
                session.record(
                    DependencyType.DEPENDENCIES,
                    pkg,
                    new_version,
                    f"Created version mismatch for related package {pkg}: "
                    f"{dependencies[pkg]} -> {new_version} (base: {base_version})",
                )


def create_realistic_conflicts(
    session: ScrambleSession,
    current_type: DependencyType,
    options: ScrambleOptions,
    rng: Optional[random.Random] = None,
) -> ScrambleSession:
    """Apply the conflict strategies for one processed category."""
    return ConflictStrategist(options, rng=rng).apply(session, current_type)
