"""Tests for the notice filters."""

from usn_digest.models import Bulletin
from usn_digest.parser import parse_text
from usn_digest.scoring import (
    applies_to_release,
    filter_bulletins,
    is_generic_variant,
    should_report,
)


def make_bulletin(title="Linux kernel vulnerabilities", releases=("24.04 LTS",), notice_id="USN-1-1"):
    bulletin = Bulletin(id=notice_id, title=title)
    for release in releases:
        bulletin.add_release(release)
    return bulletin.finalize()


def test_other_release_is_dropped():
    bulletin = make_bulletin(releases=("22.04",))

    assert applies_to_release(bulletin, ["24.04"]) is False
    assert filter_bulletins([bulletin], ["24.04"]) == []


def test_release_match_is_exact():
    assert applies_to_release(make_bulletin(releases=("24.04",)), ["24.04", "24.04 LTS"])
    assert applies_to_release(make_bulletin(releases=("24.04 LTS",)), ["24.04", "24.04 LTS"])
    assert not applies_to_release(make_bulletin(releases=("24.04.1",)), ["24.04"])
    assert not applies_to_release(make_bulletin(releases=("24.04 lts",)), ["24.04 LTS"])


def test_variant_marker_drops_even_when_release_matches():
    bulletin = make_bulletin(title="Linux kernel (OEM) vulnerabilities")

    keep, reason = should_report(bulletin, ["24.04 LTS"])

    assert keep is False
    assert "(OEM)" in reason
    assert is_generic_variant(bulletin) is False


def test_variant_markers_are_case_sensitive():
    assert is_generic_variant(make_bulletin(title="Linux kernel (oem) vulnerabilities"))
    assert not is_generic_variant(make_bulletin(title="Linux kernel (Raspberry Pi) vulnerabilities"))


def test_untitled_bulletin_counts_as_generic():
    assert is_generic_variant(Bulletin().finalize())


def test_filter_preserves_order():
    bulletins = [
        make_bulletin(notice_id="USN-3-1"),
        make_bulletin(notice_id="USN-1-1", releases=("20.04",)),
        make_bulletin(notice_id="USN-2-1"),
        make_bulletin(notice_id="USN-4-1", title="Linux kernel (Azure) vulnerabilities"),
    ]

    kept = filter_bulletins(bulletins, ["24.04 LTS"])

    assert [b.id for b in kept] == ["USN-3-1", "USN-2-1"]


def test_sample_digest_keeps_only_generic_2404(sample_digest):
    kept = filter_bulletins(parse_text(sample_digest))

    assert [b.id for b in kept] == ["USN-6766-1"]
