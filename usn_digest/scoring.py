"""Filtering logic for parsed notices."""

import logging
from typing import Iterable, List, Sequence, Tuple
from .models import Bulletin

logger = logging.getLogger(__name__)

DEFAULT_TARGET_RELEASES = ("24.04", "24.04 LTS")

# Title markers of kernel variants that are not the generic kernel.
EXCLUDED_VARIANTS = {
    "(GKE)": "excluded",
    "(AWS)": "excluded",
    "(Azure)": "excluded",
    "(NVIDIA)": "excluded",
    "(Real-time)": "excluded",
    "(OEM)": "excluded",
    "(Raspberry Pi)": "excluded",
}


def applies_to_release(bulletin: Bulletin, target_releases: Sequence[str]) -> bool:
    """Check if a notice lists one of the target releases (exact match)."""
    return any(release in target_releases for release in bulletin.release_tags)


def is_generic_variant(bulletin: Bulletin) -> bool:
    """Check that the title carries none of the excluded variant markers."""
    title = bulletin.title or ""
    return not any(marker in title for marker in EXCLUDED_VARIANTS)


def should_report(
    bulletin: Bulletin,
    target_releases: Sequence[str] = DEFAULT_TARGET_RELEASES,
) -> Tuple[bool, str]:
    """
    Determine if a notice belongs in the report.

    Returns:
        Tuple of (should_report: bool, reason: str)
    """
    if not applies_to_release(bulletin, target_releases):
        return False, f"No target release in {list(bulletin.release_tags)}"

    if not is_generic_variant(bulletin):
        return False, f"Variant notice: {bulletin.title}"

    return True, "Generic notice for target release"


def filter_bulletins(
    bulletins: Iterable[Bulletin],
    target_releases: Sequence[str] = DEFAULT_TARGET_RELEASES,
) -> List[Bulletin]:
    """Keep the notices that pass both predicates, preserving order."""
    kept = []
    for bulletin in bulletins:
        keep, reason = should_report(bulletin, target_releases)
        if keep:
            kept.append(bulletin)
        else:
            logger.debug(f"Skipping {bulletin.id}: {reason}")
    logger.info(f"Kept {len(kept)} notices for releases {list(target_releases)}")
    return kept
