"""Parser for ubuntu-security-announce digest text."""

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional

from dateutil import parser as date_parser

from .models import Bulletin

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"^(?:Subject:\s*)?\[([A-Z][A-Z0-9]*-[\d-]+)\]\s+(.+)$")
HEADER_TRIGGER = re.compile(r"^(?:Subject: \[|\[[A-Z][A-Z0-9]*-\d)")
DATE_PATTERN = re.compile(
    r"(January|February|March|April|May|June|July|August|September|October|November|December)"
    r" \d{1,2}, \d{4}"
)
RELEASE_PATTERN = re.compile(r"-\s*Ubuntu (\d{2}\.\d{2}(?: LTS)?)")
UPDATE_RELEASE_PATTERN = re.compile(r"^Ubuntu (\d{2}\.\d{2}(?: LTS)?)\s+(\S.*)")
CVE_PATTERN = re.compile(r"(CVE-\d{4}-\d+)")
SOFTWARE_DESC_PATTERN = re.compile(r"^-\s*(.+):\s*(.+)$")


class ParserState(Enum):
    NONE = "none"
    SUMMARY = "summary"
    DETAILS = "details"
    UPDATE = "update"


# Section markers switch state and are not content themselves.
SECTION_MARKERS = (
    ("Summary:", ParserState.SUMMARY),
    ("Software Description:", ParserState.NONE),
    ("Details:", ParserState.DETAILS),
    ("Update instructions:", ParserState.UPDATE),
    ("References:", ParserState.NONE),
    ("Package Information:", ParserState.NONE),
)


def parse_date(date_str: str) -> Optional[str]:
    """Parse a date like 'May 1, 2024' into ISO format, or None if it is not a real date."""
    try:
        return date_parser.parse(date_str).date().isoformat()
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{date_str}': {e}")
        return None


def is_header(line: str) -> bool:
    return bool(HEADER_TRIGGER.match(line))


def new_bulletin(header_line: str) -> Bulletin:
    """Open a record from a header line; id and title stay unset if the header is malformed."""
    match = HEADER_PATTERN.match(header_line.rstrip())
    if not match:
        logger.warning(f"Unrecognized notice header: {header_line.strip()[:80]}")
        return Bulletin()
    return Bulletin(id=match.group(1), title=match.group(2).strip())


def extract_fields(bulletin: Bulletin, line: str) -> None:
    """Run every field extractor over one content line."""
    match = DATE_PATTERN.search(line)
    if match:
        bulletin.set_once("published_date", parse_date(match.group(0)))

    for match in RELEASE_PATTERN.finditer(line):
        bulletin.add_release(match.group(1))

    match = UPDATE_RELEASE_PATTERN.match(line.strip())
    if match:
        bulletin.add_release(match.group(1))

    for match in CVE_PATTERN.finditer(line):
        bulletin.add_cve(match.group(1))

    match = SOFTWARE_DESC_PATTERN.match(line)
    if match:
        bulletin.set_once(
            "software_description",
            f"{match.group(1).strip()}: {match.group(2).strip()}",
        )


class NoticeParser:
    """
    Line-driven state machine that rebuilds notices from a digest.

    A header line closes the open record and starts a new one. Section
    markers pick which buffer the following lines accumulate into.
    """

    def __init__(self):
        self.bulletins: List[Bulletin] = []
        self.current: Optional[Bulletin] = None
        self.state = ParserState.NONE
        self._buffers = {}

    def _reset(self, bulletin: Optional[Bulletin]) -> None:
        self.current = bulletin
        self.state = ParserState.NONE
        self._buffers = {
            ParserState.SUMMARY: [],
            ParserState.DETAILS: [],
            ParserState.UPDATE: [],
        }

    def _joined(self, state: ParserState) -> Optional[str]:
        text = " ".join(part for part in self._buffers[state] if part).strip()
        return text or None

    def _finalize_current(self) -> None:
        if self.current is None:
            return
        bulletin = self.current
        summary = self._joined(ParserState.SUMMARY)
        if summary is not None:
            bulletin.summary = summary
        details = self._joined(ParserState.DETAILS)
        if details is not None:
            bulletin.description = details
        updates = self._joined(ParserState.UPDATE)
        if updates is not None:
            bulletin.update_instructions = updates
        self.bulletins.append(bulletin.finalize())
        logger.debug(
            f"Parsed {bulletin.id}: {len(bulletin.cve_ids)} CVEs, releases={list(bulletin.release_tags)}"
        )

    def feed(self, line: str) -> None:
        line = line.rstrip("\r\n")

        if is_header(line):
            self._finalize_current()
            self._reset(new_bulletin(line))
            return

        if self.current is None:
            return

        for prefix, state in SECTION_MARKERS:
            if line.startswith(prefix):
                self.state = state
                if state is ParserState.SUMMARY:
                    self._buffers[ParserState.SUMMARY] = []
                return

        extract_fields(self.current, line)
        if self.state is not ParserState.NONE:
            self._buffers[self.state].append(line.strip())

    def close(self) -> List[Bulletin]:
        self._finalize_current()
        self._reset(None)
        return self.bulletins


def parse_notices(lines: Iterable[str]) -> List[Bulletin]:
    """
    Parse digest lines into bulletins, one per header, in input order.

    Args:
        lines: Raw digest lines (trailing newlines are tolerated)

    Returns:
        List of finalized Bulletin objects
    """
    notice_parser = NoticeParser()
    for line in lines:
        notice_parser.feed(line)
    bulletins = notice_parser.close()
    logger.info(f"Parsed {len(bulletins)} notices")
    return bulletins


def parse_text(text: str) -> List[Bulletin]:
    return parse_notices(text.splitlines())
