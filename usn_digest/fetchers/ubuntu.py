"""Lookups against the Ubuntu security website."""

import logging
import re
import threading
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from .base import BaseLookup, FetchError

logger = logging.getLogger(__name__)

DEFAULT_CVE_URL = "https://ubuntu.com/security/{cve_id}"
DEFAULT_NOTICE_URL = "https://ubuntu.com/security/notices/{notice_id}"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; USNChecker/1.0)"
DEFAULT_TIMEOUT = 15

PRIORITY_PATTERN = re.compile(r"<strong>(Low|Medium|High|Critical)</strong>")
# The priority badge sits near the top of the CVE page; reading stops here.
MAX_PRIORITY_LINES = 3000


class UbuntuSecurityLookup(BaseLookup):
    """Fetch CVE priorities and notice pages from ubuntu.com."""

    def __init__(
        self,
        cve_url: str = DEFAULT_CVE_URL,
        notice_url: str = DEFAULT_NOTICE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        self.cve_url = cve_url
        self.notice_url = notice_url
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent}
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Injected session, or one session per worker thread."""
        if self._session is not None:
            return self._session
        if not hasattr(self._local, "session"):
            self._local.session = requests.Session()
        return self._local.session

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout, stream=stream)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

    def _read_head_lines(self, url: str) -> List[str]:
        """Read at most MAX_PRIORITY_LINES lines, leaving the rest of the body unread."""
        response = self._get(url, stream=True)
        if response.encoding is None:
            response.encoding = "utf-8"

        lines = []
        try:
            for line in response.iter_lines(decode_unicode=True):
                lines.append(line)
                if len(lines) >= MAX_PRIORITY_LINES:
                    break
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Reading {url} failed: {e}") from e
        finally:
            response.close()
        return lines

    def fetch_cve_priority(self, cve_id: str) -> str:
        """
        Fetch the Ubuntu priority for a CVE.

        Args:
            cve_id: CVE identifier, e.g. "CVE-2024-12345"

        Returns:
            Raw priority label as shown on the page

        Raises:
            FetchError: On network failure or when no priority marker is found
        """
        url = self.cve_url.format(cve_id=cve_id)
        head_lines = self._read_head_lines(url)

        for line in head_lines:
            match = PRIORITY_PATTERN.search(line)
            if match:
                return match.group(1)

        soup = BeautifulSoup("\n".join(head_lines), "html.parser")
        element = soup.select_one("div.cve-hero-scores strong")
        if element is not None and element.get_text(strip=True):
            return element.get_text(strip=True)

        raise FetchError(f"No priority marker found for {cve_id}")

    def fetch_notice_detail(self, notice_id: str) -> str:
        """Fetch a notice page and return its body text."""
        if not notice_id:
            raise FetchError("Notice has no id")

        url = self.notice_url.format(notice_id=notice_id)
        response = self._get(url)

        soup = BeautifulSoup(response.text, "html.parser")
        body = soup.body if soup.body is not None else soup
        # Wrapped phrases must match as single-spaced text.
        return " ".join(body.get_text(" ", strip=True).split())
