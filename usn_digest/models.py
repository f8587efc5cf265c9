"""Data models for security notices."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Severity(str, Enum):
    """Aggregate Ubuntu priority of a notice, ordered by seriousness."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"
    UNKNOWN = "Unknown"

    @property
    def level(self) -> int:
        return _SEVERITY_LEVELS[self]

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["Severity"]:
        """Map a raw priority label to a severity, or None when it carries no signal."""
        if label is None:
            return None
        for severity in (cls.LOW, cls.MEDIUM, cls.HIGH, cls.CRITICAL):
            if label.strip().lower() == severity.value.lower():
                return severity
        return None


_SEVERITY_LEVELS = {
    Severity.UNKNOWN: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class Status(str, Enum):
    """Tri-state answer for livepatch and reboot questions."""

    YES = "Yes"
    NO = "No"
    UNKNOWN = "Unknown"


ENRICHMENT_FIELDS = ("severity", "livepatch_status", "reboot_required")
ONCE_ONLY_FIELDS = ("published_date", "software_description")


@dataclass
class Bulletin:
    """Represents one security notice parsed from a digest."""

    id: Optional[str] = None  # e.g. USN-7513-1
    title: Optional[str] = None
    published_date: Optional[str] = None  # ISO-8601 date
    summary: Optional[str] = None
    description: Optional[str] = None
    update_instructions: Optional[str] = None
    software_description: Optional[str] = None
    cve_ids: Union[List[str], Tuple[str, ...]] = field(default_factory=list)
    release_tags: Union[List[str], Tuple[str, ...]] = field(default_factory=list)
    severity: Optional[Severity] = None
    livepatch_status: Optional[Status] = None
    reboot_required: Optional[Status] = None

    def __post_init__(self):
        object.__setattr__(self, "_assigned", set())
        object.__setattr__(self, "_finalized", False)

    def __setattr__(self, name: str, value: Any):
        if getattr(self, "_finalized", False):
            if name not in ENRICHMENT_FIELDS:
                raise AttributeError(f"Bulletin {self.id} is finalized; cannot set {name}")
            if getattr(self, name) is not None:
                raise AttributeError(f"Bulletin {self.id}: {name} is already set")
        object.__setattr__(self, name, value)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def set_once(self, name: str, value: Optional[str]) -> bool:
        """
        Set a first-match-wins field.

        Returns True only for the call that actually stored the value.
        A None value never consumes the slot.
        """
        if name not in ONCE_ONLY_FIELDS:
            raise ValueError(f"{name} is not a once-only field")
        if value is None or name in self._assigned:
            return False
        setattr(self, name, value)
        self._assigned.add(name)
        return True

    def add_cve(self, cve_id: str) -> bool:
        return _add_unique(self.cve_ids, cve_id)

    def add_release(self, release: str) -> bool:
        return _add_unique(self.release_tags, release)

    def finalize(self) -> "Bulletin":
        """Freeze everything except the enrichment fields."""
        self.cve_ids = tuple(self.cve_ids)
        self.release_tags = tuple(self.release_tags)
        object.__setattr__(self, "_finalized", True)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (list, tuple)):
                value = list(value)
            data[f.name] = value
        return data


def _add_unique(items: List[str], value: str) -> bool:
    if value in items:
        return False
    items.append(value)
    return True
