"""
Lead Store
==========

Read/update queries against the verification batch table and the leads table.

Tables:
- email_verification_files: id, campaign_id, file_id, lines, lines_processed,
  status, link1, link2, checked_at, processed, emails, created_at
- leads: id, campaign_id, email, verification_status, verification_checked_at

Every Supabase failure is re-raised as LeadStoreError so the driver can tell
store problems apart from provider problems.
"""

from typing import Any, Dict, List

from verification_worker import config
from verification_worker.exceptions import LeadStoreError
from verification_worker.models import VerificationBatch

BATCH_COLUMNS = "id,campaign_id,file_id,lines,processed,emails"
LEAD_COLUMNS = "id,email"


class LeadStore:
    """Thin async wrapper over a Supabase AsyncClient."""

    def __init__(self, client, batch_table: str = None, lead_table: str = None):
        self.client = client
        self.batch_table = batch_table or config.BATCH_TABLE
        self.lead_table = lead_table or config.LEAD_TABLE

    async def list_pending_batches(self, limit: int) -> List[VerificationBatch]:
        """Oldest unprocessed batches first, at most `limit` rows."""
        try:
            response = await (
                self.client.table(self.batch_table)
                .select(BATCH_COLUMNS)
                .eq("processed", False)
                .order("created_at", desc=False)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise LeadStoreError(f"Failed to load verification batches: {e}") from e

        return [VerificationBatch.from_row(row) for row in (response.data or [])]

    async def update_batch(self, batch_id: Any, fields: Dict[str, Any]) -> None:
        try:
            await (
                self.client.table(self.batch_table)
                .update(fields)
                .eq("id", batch_id)
                .execute()
            )
        except Exception as e:
            raise LeadStoreError(f"Failed to update batch {batch_id}: {e}") from e

    async def mark_processed(self, batch_id: Any) -> None:
        await self.update_batch(batch_id, {"processed": True})

    async def fetch_campaign_leads(self, campaign_id: Any) -> List[Dict[str, Any]]:
        """All (id, email) rows for one campaign."""
        try:
            response = await (
                self.client.table(self.lead_table)
                .select(LEAD_COLUMNS)
                .eq("campaign_id", campaign_id)
                .execute()
            )
        except Exception as e:
            raise LeadStoreError(f"Failed to load leads for campaign {campaign_id}: {e}") from e

        return response.data or []

    async def update_lead_statuses(self, lead_ids: List[Any], status: str, checked_at: str) -> None:
        if not lead_ids:
            return
        try:
            await (
                self.client.table(self.lead_table)
                .update({"verification_status": status, "verification_checked_at": checked_at})
                .in_("id", lead_ids)
                .execute()
            )
        except Exception as e:
            raise LeadStoreError(f"Failed to update {len(lead_ids)} leads to {status}: {e}") from e
