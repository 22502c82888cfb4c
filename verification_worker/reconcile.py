"""
Reconciliation Engine
=====================

Merges provider classification output with the batch's submitted-email
universe and turns the result into lead-store updates.

Flow:
1. known = GOOD | BAD | UNRESOLVED
2. submitted emails missing from known are "unaccounted"
3. GOOD -> verified_ok, BAD -> verified_bad,
   UNRESOLVED + unaccounted -> verified_unknown
4. One UpdateInstruction per non-empty target status
5. Instructions are resolved to lead ids through a per-batch email index
   and written in fixed-size chunks

Every write sets an absolute status, so applying the same outcome twice
leaves the leads in the same state (only verification_checked_at moves).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from verification_worker.models import Bucket, LeadStatus
from verification_worker.utils.logger import get_logger

logger = get_logger(__name__)

BUCKET_STATUS = {
    Bucket.GOOD: LeadStatus.VERIFIED_OK,
    Bucket.BAD: LeadStatus.VERIFIED_BAD,
    Bucket.UNRESOLVED: LeadStatus.VERIFIED_UNKNOWN,
}

# Instruction order; also the precedence when input sets overlap (last wins)
STATUS_ORDER = (
    LeadStatus.VERIFIED_OK,
    LeadStatus.VERIFIED_BAD,
    LeadStatus.VERIFIED_UNKNOWN,
)


@dataclass
class UpdateInstruction:
    campaign_id: Any
    status: LeadStatus
    emails: List[str]


@dataclass
class ReconciliationOutcome:
    """Final lowercased email -> status decision for one batch."""

    statuses: Dict[str, LeadStatus] = field(default_factory=dict)
    unaccounted: List[str] = field(default_factory=list)

    def emails_for(self, status: LeadStatus) -> List[str]:
        return sorted(email for email, s in self.statuses.items() if s == status)

    def counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in STATUS_ORDER}
        for status in self.statuses.values():
            counts[status.value] += 1
        counts["unaccounted"] = len(self.unaccounted)
        return counts

    def instructions(self, campaign_id: Any) -> List[UpdateInstruction]:
        instructions = []
        for status in STATUS_ORDER:
            emails = self.emails_for(status)
            if emails:
                instructions.append(UpdateInstruction(campaign_id=campaign_id, status=status, emails=emails))
        return instructions


@dataclass
class ApplyReport:
    updated: int = 0
    unmatched: int = 0
    failed_chunks: int = 0

    @property
    def ok(self) -> bool:
        return self.failed_chunks == 0


def reconcile(
    good: Iterable[str],
    bad: Iterable[str],
    unresolved: Iterable[str],
    submitted: Iterable[str],
) -> ReconciliationOutcome:
    """
    Compute the terminal status of every email for one batch.

    Args:
        good: Emails the provider reported as ok
        bad: Emails in a BAD category
        unresolved: Emails in an UNRESOLVED category
        submitted: Emails originally uploaded for the batch

    Returns:
        ReconciliationOutcome covering known and unaccounted emails
    """
    outcome = ReconciliationOutcome()

    for bucket, emails in ((Bucket.GOOD, good), (Bucket.BAD, bad), (Bucket.UNRESOLVED, unresolved)):
        status = BUCKET_STATUS[bucket]
        for email in emails:
            outcome.statuses[email.lower()] = status

    for email in submitted:
        email_lower = email.strip().lower()
        if not email_lower or email_lower in outcome.statuses:
            continue
        outcome.statuses[email_lower] = LeadStatus.VERIFIED_UNKNOWN
        outcome.unaccounted.append(email_lower)

    return outcome


def build_email_index(leads: Iterable[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Map lowercased email -> lead ids. Duplicate leads share one entry."""
    index: Dict[str, List[Any]] = {}
    for lead in leads:
        email = lead.get("email")
        if not email:
            continue
        index.setdefault(str(email).strip().lower(), []).append(lead.get("id"))
    return index


def _chunks(items: List[Any], size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


async def apply_instructions(
    store,
    instructions: Iterable[UpdateInstruction],
    email_index: Dict[str, List[Any]],
    checked_at: str,
    chunk_size: int,
    file_id: Optional[str] = None,
) -> ApplyReport:
    """
    Write instructions to the lead store by id, chunk by chunk.

    Emails with no lead row are skipped and counted as unmatched. A failed
    chunk is logged and the remaining chunks are still written; the caller
    checks ApplyReport.ok before marking the batch processed.
    """
    report = ApplyReport()

    for instruction in instructions:
        ids: List[Any] = []
        unmatched = 0
        for email in instruction.emails:
            lead_ids = email_index.get(email.lower())
            if lead_ids:
                ids.extend(lead_ids)
            else:
                unmatched += 1
        report.unmatched += unmatched

        if unmatched:
            logger.info(
                "unmatched_emails",
                file_id=file_id,
                status=instruction.status.value,
                unmatched=unmatched,
            )

        for chunk in _chunks(ids, chunk_size):
            try:
                await store.update_lead_statuses(chunk, instruction.status.value, checked_at)
                report.updated += len(chunk)
            except Exception as e:
                report.failed_chunks += 1
                logger.error(
                    "lead_update_chunk_failed",
                    file_id=file_id,
                    campaign_id=instruction.campaign_id,
                    status=instruction.status.value,
                    chunk_size=len(chunk),
                    error=str(e),
                )

    return report
