"""
Category classification for EmailListVerify result labels.

- ok -> GOOD
- invalid_syntax, invalid_mx, email_disabled, dead_server, disposable,
  spamtrap -> BAD
- unknown, ok_for_all, antispam_system, smtp_protocol -> UNRESOLVED
- anything else -> UNRESOLVED (needs review, never silently good or bad)
"""

from typing import Dict, Iterable, Set

from verification_worker.models import Bucket, ClassifiedPair

GOOD_LABEL = "ok"

BAD_LABELS = frozenset({
    "invalid_syntax",
    "invalid_mx",
    "email_disabled",
    "dead_server",
    "disposable",
    "spamtrap",
})

UNRESOLVED_LABELS = frozenset({
    "unknown",
    "ok_for_all",
    "antispam_system",
    "smtp_protocol",
})


def classify(category: str) -> Bucket:
    """Map one lowercased provider label to a bucket."""
    if category == GOOD_LABEL:
        return Bucket.GOOD
    if category in BAD_LABELS:
        return Bucket.BAD
    return Bucket.UNRESOLVED


def bucket_pairs(pairs: Iterable[ClassifiedPair]) -> Dict[Bucket, Set[str]]:
    """
    Group pairs into disjoint GOOD / BAD / UNRESOLVED email sets.

    Each email ends up in exactly one bucket. When the same email shows up
    under conflicting labels, the last row wins.
    """
    by_email: Dict[str, Bucket] = {}
    for pair in pairs:
        by_email[pair.email] = classify(pair.category)

    buckets: Dict[Bucket, Set[str]] = {bucket: set() for bucket in Bucket}
    for email, bucket in by_email.items():
        buckets[bucket].add(email)
    return buckets
