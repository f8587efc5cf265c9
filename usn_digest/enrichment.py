"""Severity, livepatch and reboot enrichment for filtered notices."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from .fetchers.base import BaseLookup
from .models import Bulletin, Severity, Status

logger = logging.getLogger(__name__)

LIVEPATCH_PHRASE = "canonical livepatch is available"
KERNEL_PHRASE = "linux kernel"
REBOOT_PHRASES = ("a reboot is required", "you need to reboot your computer")


def max_severity(levels: Sequence[Severity]) -> Severity:
    """Highest severity among resolved signals, Unknown when there are none."""
    if not levels:
        return Severity.UNKNOWN
    return max(levels, key=lambda severity: severity.level)


def livepatch_status(page_text: str, title: Optional[str]) -> Status:
    if LIVEPATCH_PHRASE in page_text.casefold():
        return Status.YES
    if title and KERNEL_PHRASE in title.casefold():
        return Status.NO
    return Status.UNKNOWN


def reboot_status(page_text: str) -> Status:
    text = page_text.casefold()
    if any(phrase in text for phrase in REBOOT_PHRASES):
        return Status.YES
    return Status.NO


class Enricher:
    """
    Fill in severity, livepatch and reboot status for each notice.

    Lookup failures never propagate: a failed CVE lookup gives no signal,
    a failed detail fetch marks both page-derived fields Unknown.

    Args:
        lookup: Provider of CVE priorities and notice pages
        max_workers: Notices enriched concurrently (1 runs in the calling thread)
        log: Logger for lookup outcomes (defaults to the module logger)
    """

    def __init__(
        self,
        lookup: BaseLookup,
        max_workers: int = 1,
        log: Optional[logging.Logger] = None,
    ):
        self.lookup = lookup
        self.max_workers = max(1, int(max_workers))
        self.log = log or logger

    def fetch_priority_safely(self, cve_id: str) -> Optional[Severity]:
        try:
            raw_priority = self.lookup.fetch_cve_priority(cve_id)
        except Exception as e:
            self.log.warning(f"Failed to fetch priority for {cve_id}: {e}")
            return None

        severity = Severity.from_label(raw_priority)
        if severity is None:
            self.log.warning(f"Unrecognized priority '{raw_priority}' for {cve_id}")
        else:
            self.log.debug(f"{cve_id}: {severity.value}")
        return severity

    def resolve_severity(self, bulletin: Bulletin) -> Severity:
        levels = []
        for cve_id in bulletin.cve_ids:
            severity = self.fetch_priority_safely(cve_id)
            if severity is not None:
                levels.append(severity)

        self.log.info(
            f"{bulletin.id}: {len(levels)}/{len(bulletin.cve_ids)} CVE priorities resolved"
        )
        bulletin.severity = max_severity(levels)
        return bulletin.severity

    def resolve_detail(self, bulletin: Bulletin) -> Tuple[Status, Status]:
        try:
            page_text = self.lookup.fetch_notice_detail(bulletin.id)
        except Exception as e:
            self.log.warning(f"Failed to fetch notice page for {bulletin.id}: {e}")
            bulletin.livepatch_status = Status.UNKNOWN
            bulletin.reboot_required = Status.UNKNOWN
            return bulletin.livepatch_status, bulletin.reboot_required

        bulletin.livepatch_status = livepatch_status(page_text, bulletin.title)
        bulletin.reboot_required = reboot_status(page_text)
        return bulletin.livepatch_status, bulletin.reboot_required

    def enrich(self, bulletin: Bulletin) -> Bulletin:
        self.resolve_severity(bulletin)
        self.resolve_detail(bulletin)
        return bulletin

    def enrich_all(self, bulletins: Sequence[Bulletin]) -> List[Bulletin]:
        """Enrich every notice; the result keeps the input order."""
        if self.max_workers == 1 or len(bulletins) <= 1:
            return [self.enrich(bulletin) for bulletin in bulletins]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self.enrich, bulletins))
