"""
Domain Models
=============

Dataclasses shared by the provider clients, the reconciliation engine
and the batch driver.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Substrings that mark a provider status as finished. This is a heuristic over
# free-text status; if EmailListVerify changes its wording, batches stall in
# pending until the marker list is updated here.
COMPLETE_MARKERS = ("complete", "finish", "ready")


def is_complete(status: Optional[str]) -> bool:
    """Return True when the provider status text looks finished."""
    status_lower = (status or "").lower()
    return any(marker in status_lower for marker in COMPLETE_MARKERS)


class Bucket(str, Enum):
    """Classification buckets derived from provider category labels."""

    GOOD = "good"
    BAD = "bad"
    UNRESOLVED = "unresolved"


class LeadStatus(str, Enum):
    """Values of leads.verification_status."""

    UNVERIFIED = "unverified"
    VERIFIED_OK = "verified_ok"
    VERIFIED_BAD = "verified_bad"
    VERIFIED_UNKNOWN = "verified_unknown"


@dataclass(frozen=True)
class ClassifiedPair:
    """One parsed result-file row. Both fields are lowercased."""

    category: str
    email: str


@dataclass
class StatusDescriptor:
    """Parsed getApiFileInfo response line."""

    file_id: str
    filename: str
    unique: int
    lines: int
    lines_processed: int
    status: str
    timestamp: str
    link1: Optional[str] = None
    link2: Optional[str] = None

    @property
    def complete(self) -> bool:
        return is_complete(self.status)

    def progress_fields(self, checked_at: str) -> Dict[str, Any]:
        """Batch-row columns refreshed on every successful poll."""
        return {
            "status": self.status,
            "lines_processed": self.lines_processed,
            "link1": self.link1 or None,
            "link2": self.link2 or None,
            "checked_at": checked_at,
        }


@dataclass
class VerificationBatch:
    """One row of the verification batch table."""

    id: Any
    campaign_id: Any
    file_id: str
    lines: int = 0
    emails: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "VerificationBatch":
        emails = row.get("emails")
        if not isinstance(emails, list):
            emails = []
        try:
            lines = int(row.get("lines") or 0)
        except (TypeError, ValueError):
            lines = 0
        return cls(
            id=row.get("id"),
            campaign_id=row.get("campaign_id"),
            file_id=str(row.get("file_id") or ""),
            lines=lines,
            emails=[str(e) for e in emails if e is not None],
        )

    @property
    def submitted_emails(self) -> List[str]:
        """Lowercased submitted emails, order preserved, duplicates dropped."""
        seen = set()
        ordered = []
        for email in self.emails:
            email_lower = email.strip().lower()
            if email_lower and email_lower not in seen:
                seen.add(email_lower)
                ordered.append(email_lower)
        return ordered


@dataclass
class TickSummary:
    """Counts for one worker pass."""

    checked: int = 0
    completed: int = 0
    pending: int = 0
    failed: int = 0

    @property
    def message(self) -> str:
        if self.checked == 0:
            return "no files"
        return f"checked {self.checked}"
