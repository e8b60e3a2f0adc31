"""
Status extractor for job artifacts.

Reads the "current status" and "last build" artifacts written by the status
fetcher and turns them into a JobSnapshot. Artifacts are scanned for the
two fields of interest only; a missing file or field never fails the cycle.
"""

import logging
import re
from pathlib import Path

from light_common.models import ZERO_SNAPSHOT, Color, Job, JobSnapshot

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r'"color"\s*:\s*"([^"]*)"')
TIMESTAMP_PATTERN = re.compile(r'"timestamp"\s*:\s*(\d+)')


def _read_text(path: str) -> str | None:
    if not path:
        return None
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read artifact {path}: {e}")
        return None


def read_color(path: str) -> tuple[Color, bool]:
    """
    Get the color of a job from its status artifact.

    Args:
        path: Status artifact file

    Returns:
        Tuple of (color, animated); (Color.NONE, False) when the file or
        the color field is missing
    """
    text = _read_text(path)
    if text is None:
        return Color.NONE, False

    match = COLOR_PATTERN.search(text)
    if match is None:
        logger.debug(f"No color field in {path}")
        return Color.NONE, False
    return Color.from_token(match.group(1))


def read_timestamp(path: str) -> int:
    """
    Get the completion time of the last build from its artifact.

    The build server reports milliseconds; the result is in seconds.

    Args:
        path: Last build artifact file

    Returns:
        Seconds since the epoch, 0 when the file or field is missing
    """
    text = _read_text(path)
    if text is None:
        return 0

    match = TIMESTAMP_PATTERN.search(text)
    if match is None:
        logger.debug(f"No timestamp field in {path}")
        return 0
    return int(match.group(1)) // 1000


def extract_snapshot(job: Job) -> JobSnapshot:
    """
    Build the snapshot of one job from its two artifacts.

    A job with neither field available yields ZERO_SNAPSHOT.
    """
    color, animated = read_color(job.status_file)
    last_build_at = read_timestamp(job.last_build_file)
    if color == Color.NONE and not animated and last_build_at == 0:
        logger.debug(f"Job {job.name}: no status available")
        return ZERO_SNAPSHOT

    snapshot = JobSnapshot(
        color=color,
        animated=animated,
        last_build_at=last_build_at,
    )
    logger.debug(f"Job {job.name}: {snapshot}")
    return snapshot
