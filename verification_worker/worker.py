"""
Verification Batch Driver
=========================

One tick = one pass over the oldest unprocessed verification batches.

Per batch:
1. Poll provider status (failure -> refresh checked_at, stay pending)
2. Persist progress snapshot (status, lines_processed, links, checked_at)
3. Not complete -> stay pending
4. Complete -> download link1 + link2, classify, reconcile, update leads
5. All lead updates written -> processed = true (terminal)

Batches run sequentially and each one has its own error boundary: a failing
batch is logged, left pending, and the tick moves on. Only a failure to list
batches aborts the tick. There is no locking across ticks; every write is
idempotent so overlapping ticks converge.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from verification_worker import config
from verification_worker.classifier import bucket_pairs
from verification_worker.db.client import get_async_write_client
from verification_worker.db.store import LeadStore
from verification_worker.models import Bucket, TickSummary, VerificationBatch
from verification_worker.provider.results import fetch_pairs
from verification_worker.provider.status import fetch_status
from verification_worker.reconcile import apply_instructions, build_email_index, reconcile
from verification_worker.utils.logger import get_logger

logger = get_logger(__name__)

# process_batch outcomes
POLL_FAILED = "poll_failed"
PENDING = "pending"
COMPLETED = "completed"
INCOMPLETE_UPDATE = "incomplete_update"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def process_batch(
    batch: VerificationBatch,
    *,
    session: aiohttp.ClientSession,
    store: LeadStore,
    api_key: str,
    chunk_size: int,
) -> str:
    """Drive one batch through a single state transition."""
    log = logger.bind(file_id=batch.file_id, batch_id=batch.id)
    log.info("checking_file")

    info = await fetch_status(session, api_key, batch.file_id)
    now_iso = utc_now_iso()

    if info is None:
        log.info("file_info_unavailable")
        await store.update_batch(batch.id, {"checked_at": now_iso})
        return POLL_FAILED

    await store.update_batch(batch.id, info.progress_fields(now_iso))

    if not info.complete:
        log.info(
            "progress",
            status=info.status,
            lines_processed=info.lines_processed,
            lines_total=info.lines,
            lines_uploaded=batch.lines,
        )
        return PENDING

    # Result files are independent reads
    link1_pairs, link2_pairs = await asyncio.gather(
        fetch_pairs(session, info.link1),
        fetch_pairs(session, info.link2),
    )
    buckets = bucket_pairs(list(link1_pairs) + list(link2_pairs))

    outcome = reconcile(
        buckets[Bucket.GOOD],
        buckets[Bucket.BAD],
        buckets[Bucket.UNRESOLVED],
        batch.submitted_emails,
    )
    log.info(
        "complete",
        status=info.status,
        lines_processed=info.lines_processed,
        lines_total=info.lines,
        lines_uploaded=batch.lines,
        **outcome.counts(),
    )

    leads = await store.fetch_campaign_leads(batch.campaign_id)
    email_index = build_email_index(leads)

    report = await apply_instructions(
        store,
        outcome.instructions(batch.campaign_id),
        email_index,
        checked_at=now_iso,
        chunk_size=chunk_size,
        file_id=batch.file_id,
    )

    if not report.ok:
        log.warning(
            "lead_updates_incomplete",
            failed_chunks=report.failed_chunks,
            updated=report.updated,
        )
        return INCOMPLETE_UPDATE

    await store.mark_processed(batch.id)
    log.info("file_processed", updated=report.updated, unmatched=report.unmatched)
    return COMPLETED


async def run_tick(
    store: LeadStore,
    session: aiohttp.ClientSession,
    api_key: str,
    max_batches: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> TickSummary:
    """
    Run one batch-processing pass.

    Raises:
        LeadStoreError: If pending batches cannot be listed
    """
    max_batches = max_batches or config.MAX_BATCHES_PER_TICK
    chunk_size = chunk_size or config.LEAD_UPDATE_CHUNK_SIZE

    batches = await store.list_pending_batches(max_batches)
    summary = TickSummary(checked=len(batches))

    if not batches:
        logger.info("no_files_to_process")
        return summary

    logger.info("processing", file_count=len(batches), file_ids=[b.file_id for b in batches])

    for batch in batches:
        try:
            result = await process_batch(
                batch,
                session=session,
                store=store,
                api_key=api_key,
                chunk_size=chunk_size,
            )
        except Exception as e:
            summary.failed += 1
            logger.exception("batch_failed", file_id=batch.file_id, batch_id=batch.id, error=str(e))
            continue

        if result == COMPLETED:
            summary.completed += 1
        elif result == INCOMPLETE_UPDATE:
            summary.failed += 1
        else:
            summary.pending += 1

    logger.info(
        "tick_finished",
        checked=summary.checked,
        completed=summary.completed,
        pending=summary.pending,
        failed=summary.failed,
    )
    return summary


async def run_worker() -> TickSummary:
    """Build clients from configuration and run one tick."""
    config.validate_config()

    client = await get_async_write_client()
    store = LeadStore(client)

    async with aiohttp.ClientSession() as session:
        return await run_tick(store, session, config.EMAIL_LIST_VERIFY_KEY)
