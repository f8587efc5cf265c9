"""Lookup interface used by the enrichment step."""

from abc import ABC, abstractmethod


class FetchError(Exception):
    """Raised when an external lookup cannot produce a usable answer."""


class BaseLookup(ABC):
    """External capabilities the enricher depends on."""

    @abstractmethod
    def fetch_cve_priority(self, cve_id: str) -> str:
        """Return the raw priority label (e.g. "High") assigned to a CVE."""

    @abstractmethod
    def fetch_notice_detail(self, notice_id: str) -> str:
        """Return the plain text of a notice's detail page."""
