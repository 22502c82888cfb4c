"""
Shared fixtures: a fake aiohttp session for provider calls and an in-memory
stand-in for LeadStore.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from verification_worker import config
from verification_worker.exceptions import LeadStoreError
from verification_worker.models import VerificationBatch


class FakeResponse:
    def __init__(self, status=200, text=""):
        self.status = status
        self._text = text

    async def text(self, encoding="utf-8", errors="strict"):
        if isinstance(self._text, bytes):
            return self._text.decode(encoding, errors)
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """
    Minimal aiohttp.ClientSession replacement.

    routes maps URL -> (status, body), an exception instance to raise,
    or a callable(params) returning either of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        route = self.routes.get(url, (404, "not found"))
        if callable(route):
            route = route(params or {})
        if isinstance(route, BaseException):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def status_calls(self):
        return [params for url, params in self.calls if url == config.ELV_STATUS_URL]


class InMemoryStore:
    """Implements the LeadStore interface over plain dicts."""

    def __init__(self, batches=None, leads=None):
        self.batches = [dict(b) for b in (batches or [])]
        self.leads = [dict(l) for l in (leads or [])]
        self.fail_listing = False
        self.fail_lead_fetch = False
        self.fail_update_status = set()
        self.lead_update_calls = []

    async def list_pending_batches(self, limit):
        if self.fail_listing:
            raise LeadStoreError("listing failed")
        pending = [b for b in self.batches if not b.get("processed")]
        pending.sort(key=lambda b: b.get("created_at", ""))
        return [VerificationBatch.from_row(b) for b in pending[:limit]]

    async def update_batch(self, batch_id, fields):
        for batch in self.batches:
            if batch["id"] == batch_id:
                batch.update(fields)
                return
        raise LeadStoreError(f"no batch {batch_id}")

    async def mark_processed(self, batch_id):
        await self.update_batch(batch_id, {"processed": True})

    async def fetch_campaign_leads(self, campaign_id):
        if self.fail_lead_fetch:
            raise LeadStoreError("lead fetch failed")
        return [{"id": l["id"], "email": l["email"]} for l in self.leads if l["campaign_id"] == campaign_id]

    async def update_lead_statuses(self, lead_ids, status, checked_at):
        self.lead_update_calls.append((list(lead_ids), status))
        if status in self.fail_update_status:
            raise LeadStoreError(f"update to {status} failed")
        for lead in self.leads:
            if lead["id"] in lead_ids:
                lead["verification_status"] = status
                lead["verification_checked_at"] = checked_at

    def batch(self, batch_id):
        return next(b for b in self.batches if b["id"] == batch_id)

    def lead_status(self, lead_id):
        return next(l for l in self.leads if l["id"] == lead_id).get("verification_status", "unverified")


def make_lead(lead_id, email, campaign_id="camp-1"):
    return {
        "id": lead_id,
        "campaign_id": campaign_id,
        "email": email,
        "verification_status": "unverified",
        "verification_checked_at": None,
    }


def make_batch(batch_id, file_id, emails, campaign_id="camp-1", created_at="2024-01-01T00:00:00+00:00"):
    return {
        "id": batch_id,
        "campaign_id": campaign_id,
        "file_id": file_id,
        "lines": len(emails),
        "processed": False,
        "emails": list(emails),
        "created_at": created_at,
        "checked_at": None,
        "status": None,
    }


def status_line(file_id, status, link1="http://ok", link2="http://all", total=10, processed=10):
    return f"{file_id}|list.csv|{total}|{total}|{processed}|{status}|2024-01-01|{link1}|{link2}"


@pytest.fixture
def fake_session():
    return FakeSession()
