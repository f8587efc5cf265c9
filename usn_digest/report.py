"""Render enriched notices as TSV or JSON."""

import json
import logging
from typing import Optional, Sequence, TextIO

from .models import Bulletin

logger = logging.getLogger(__name__)

FORMATS = ("tsv", "json")
TSV_COLUMNS = ("id", "title", "published_date", "summary", "severity", "reboot", "livepatch")
MISSING = "NA"


class ReportError(Exception):
    """Raised when the report cannot be serialized or written."""


def tsv_cell(value: Optional[object]) -> str:
    """Render one TSV cell: NA for unset values, tabs and newlines flattened."""
    if value is None:
        return MISSING
    text = getattr(value, "value", value)
    return str(text).replace("\r\n", " ").replace("\t", " ").replace("\n", " ").replace("\r", " ")


def format_tsv(bulletins: Sequence[Bulletin]) -> str:
    lines = ["\t".join(TSV_COLUMNS)]
    for bulletin in bulletins:
        row = (
            bulletin.id,
            bulletin.title,
            bulletin.published_date,
            bulletin.summary,
            bulletin.severity,
            bulletin.reboot_required,
            bulletin.livepatch_status,
        )
        lines.append("\t".join(tsv_cell(value) for value in row))
    return "\n".join(lines) + "\n"


def format_json(bulletins: Sequence[Bulletin]) -> str:
    return json.dumps([bulletin.to_dict() for bulletin in bulletins], indent=2, ensure_ascii=False) + "\n"


def render_report(bulletins: Sequence[Bulletin], fmt: str = "tsv") -> str:
    """
    Render notices in the requested format.

    Args:
        bulletins: Enriched notices in report order
        fmt: "tsv" (default) or "json", case-insensitive

    Returns:
        Report text ending with a newline

    Raises:
        ValueError: If the format is not recognized
    """
    fmt = (fmt or "tsv").lower()
    if fmt == "tsv":
        return format_tsv(bulletins)
    if fmt == "json":
        return format_json(bulletins)
    raise ValueError(f"Unsupported output format: {fmt} (expected one of {', '.join(FORMATS)})")


def write_report(bulletins: Sequence[Bulletin], fmt: str, stream: TextIO) -> None:
    """Write the rendered report, raising ReportError on serialization or I/O failure."""
    try:
        text = render_report(bulletins, fmt)
    except (TypeError, ValueError) as e:
        raise ReportError(f"Failed to render {fmt} report: {e}") from e

    try:
        stream.write(text)
        stream.flush()
    except (OSError, UnicodeError) as e:
        raise ReportError(f"Failed to write report: {e}") from e

    logger.info(f"Wrote {len(bulletins)} notices as {fmt}")
