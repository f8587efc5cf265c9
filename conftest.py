"""Shared fixtures for the digest tests."""

import pytest

from usn_digest.fetchers.base import BaseLookup, FetchError


SAMPLE_DIGEST = """\
Message: 1
Date: Tue, 14 May 2024 10:12:01 +0000
From: Security Team <security@example.com>
Subject: [USN-6766-1] Linux kernel vulnerabilities

==========================================================================
Ubuntu Security Notice USN-6766-1
May 14, 2024

linux, linux-aws, linux-gcp vulnerabilities
==========================================================================

A security issue affects these releases of Ubuntu and its derivatives:

- Ubuntu 24.04 LTS
- Ubuntu 22.04 LTS

Summary:

Several security issues were fixed in the Linux kernel.

Software Description:
- linux: Linux kernel
- linux-aws: Linux kernel for Amazon Web Services (AWS) systems

Details:

It was discovered that the kernel did not properly handle certain
requests. (CVE-2024-26581)
Several other flaws were found (CVE-2024-26582, CVE-2024-26581).

Update instructions:

The problem can be corrected by updating your system to the following
package versions:

Ubuntu 24.04 LTS
  linux-image-6.8.0-31-generic    6.8.0-31.31

After a standard system update you need to reboot your computer to make
all the necessary changes.

References:
  https://ubuntu.com/security/notices/USN-6766-1
  CVE-2024-26581, CVE-2024-26583

Message: 2
Subject: [USN-6767-1] Linux kernel (OEM) vulnerabilities

Ubuntu Security Notice USN-6767-1
May 15, 2024

- Ubuntu 24.04 LTS

Summary:

The OEM kernel was patched.

References:
  CVE-2024-1111

Message: 3
Subject: [USN-6768-1] GLib vulnerability

Ubuntu Security Notice USN-6768-1
May 16, 2024

- Ubuntu 22.04 LTS
- Ubuntu 20.04 LTS

Summary:

GLib could be made to expose sensitive information.

Details:

It was discovered that GLib incorrectly handled signals. (CVE-2024-34397)
"""


class FakeLookup(BaseLookup):
    """Deterministic lookup; any CVE or notice missing from the tables fails."""

    def __init__(self, priorities=None, pages=None):
        self.priorities = priorities or {}
        self.pages = pages or {}
        self.cve_calls = []
        self.notice_calls = []

    def fetch_cve_priority(self, cve_id):
        self.cve_calls.append(cve_id)
        if cve_id not in self.priorities:
            raise FetchError(f"no priority for {cve_id}")
        return self.priorities[cve_id]

    def fetch_notice_detail(self, notice_id):
        self.notice_calls.append(notice_id)
        if notice_id not in self.pages:
            raise FetchError(f"no page for {notice_id}")
        return self.pages[notice_id]


@pytest.fixture
def sample_digest():
    return SAMPLE_DIGEST


@pytest.fixture
def digest_file(tmp_path):
    path = tmp_path / "digest.txt"
    path.write_text(SAMPLE_DIGEST, encoding="utf-8")
    return path


@pytest.fixture
def fake_lookup():
    return FakeLookup(
        priorities={
            "CVE-2024-26581": "Medium",
            "CVE-2024-26582": "high",
            "CVE-2024-26583": "Low",
        },
        pages={
            "USN-6766-1": (
                "Linux kernel vulnerabilities ... Canonical Livepatch is available "
                "for this update. A reboot is required to apply the fix."
            ),
        },
    )
