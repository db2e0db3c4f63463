"""
Scramble orchestration: load a manifest, back it up, scramble it, save it.
"""

import logging
import random
from pathlib import Path
from typing import Optional

from .manifest import create_backup, load_package_json, save_package_json
from .selector import scramble_dependencies
from .types import ScrambleOptions, ScrambleResult

logger = logging.getLogger(__name__)


def scramble_package_json(
    options: Optional[ScrambleOptions] = None,
    rng: Optional[random.Random] = None,
) -> ScrambleResult:
    """
    Scramble a package.json file in place.

    The backup, when requested, is written before anything else touches the
    file. With ``options.dry_run`` nothing is written at all.

    Args:
        options: Scramble options; percentage and aggression are clamped here.
        rng: Random source, for reproducible runs.

    Returns:
        ScrambleResult with the original and modified manifests.

    Raises:
        LoadError, BackupError, SaveError: On the corresponding I/O failure.
    """
    options = (options or ScrambleOptions()).clamped()
    target_path = str(Path(options.target_path).resolve())

    original = load_package_json(target_path)
    logger.info(f"Loaded {target_path}")

    backup_path = None
    if options.create_backup and not options.dry_run:
        backup_path = create_backup(target_path)

    session = scramble_dependencies(original, options, rng=rng)

    if options.dry_run:
        logger.info(f"Dry run: {len(session.issues)} changes computed, nothing written")
    else:
        save_package_json(target_path, session.modified)
        logger.info(f"Saved scrambled manifest to {target_path}")

    return session.to_result(backup_path=backup_path)
