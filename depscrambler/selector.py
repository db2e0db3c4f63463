"""
Dependency selection.

Picks a share of the entries of each requested dependency category, mutates
them, and hands the session to the conflict strategist for the modes that
call for targeted conflicts.
"""

import logging
import math
import random
from typing import List, Optional

from .conflicts import create_realistic_conflicts
from .session import ScrambleSession
from .types import ConflictMode, PackageJson, ScrambleOptions
from .versions import scramble_version

logger = logging.getLogger(__name__)

STRATEGIST_MODES = (ConflictMode.REALISTIC, ConflictMode.PEER_CONFLICT)


def select_candidates(names: List[str], percentage: float, rng: random.Random) -> List[str]:
    """
    Choose ``ceil(len(names) * percentage / 100)`` names uniformly at random.

    Ceiling rounding means a non-zero percentage always selects at least one
    entry.
    """
    count = min(len(names), math.ceil(len(names) * percentage / 100))
    shuffled = list(names)
    rng.shuffle(shuffled)
    return shuffled[:count]


def scramble_dependencies(
    pkg: PackageJson,
    options: ScrambleOptions,
    rng: Optional[random.Random] = None,
) -> ScrambleSession:
    """
    Scramble the requested dependency categories of a manifest.

    ``pkg`` is left untouched. Categories outside
    ``options.dependency_types`` are neither read nor written by the
    selection step.

    Args:
        pkg: Parsed manifest.
        options: Clamped scramble options.
        rng: Random source.

    Returns:
        The finished session.
    """
    rng = rng or random.Random()
    session = ScrambleSession.start(pkg)

    for dep_type in options.dependency_types:
        deps = session.dependencies_of(dep_type)
        if not deps:
            continue

        candidates = select_candidates(list(deps), options.scramble_percentage, rng)
        logger.debug(f"Selected {len(candidates)} of {len(deps)} {dep_type.value}")

        for name in candidates:
            original_version = deps[name]
            new_version = scramble_version(
                original_version,
                options.aggression_level,
                conflict_mode=options.conflict_mode,
                package_name=name,
                version_constraints=options.version_constraints,
                respect_major_version=options.respect_major_versions,
                rng=rng,
            )

            if new_version != original_version:
                session.record(
                    dep_type,
                    name,
                    new_version,
                    f"Modified {dep_type.value} {name}: {original_version} -> {new_version}",
                )

        if options.conflict_mode in STRATEGIST_MODES:
            session = create_realistic_conflicts(session, dep_type, options, rng=rng)

    return session
