"""
LeadStore tests against a mocked Supabase query builder.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from verification_worker.db.store import BATCH_COLUMNS, LeadStore
from verification_worker.exceptions import LeadStoreError


def mock_client(data=None, error=None):
    """Supabase client whose every builder call returns the same query mock."""
    query = MagicMock()
    for method in ("select", "eq", "order", "limit", "update", "in_"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute = AsyncMock(side_effect=error)
    else:
        query.execute = AsyncMock(return_value=MagicMock(data=data))
    client = MagicMock()
    client.table.return_value = query
    return client, query


@pytest.mark.asyncio
async def test_list_pending_batches_query_and_parsing():
    client, query = mock_client(data=[
        {"id": 1, "campaign_id": "c", "file_id": "f1", "lines": "2", "processed": False, "emails": ["A@x.com"]},
        {"id": 2, "campaign_id": "c", "file_id": 99, "lines": None, "processed": False, "emails": None},
    ])
    store = LeadStore(client, batch_table="email_verification_files", lead_table="leads")

    batches = await store.list_pending_batches(20)

    client.table.assert_called_with("email_verification_files")
    query.select.assert_called_once_with(BATCH_COLUMNS)
    query.eq.assert_called_once_with("processed", False)
    query.order.assert_called_once_with("created_at", desc=False)
    query.limit.assert_called_once_with(20)
    assert batches[0].file_id == "f1"
    assert batches[0].lines == 2
    assert batches[0].submitted_emails == ["a@x.com"]
    assert batches[1].file_id == "99"
    assert batches[1].emails == []


@pytest.mark.asyncio
async def test_list_pending_batches_wraps_errors():
    client, _ = mock_client(error=RuntimeError("connection reset"))
    store = LeadStore(client)

    with pytest.raises(LeadStoreError):
        await store.list_pending_batches(20)


@pytest.mark.asyncio
async def test_update_batch_filters_by_id():
    client, query = mock_client(data=[])
    store = LeadStore(client, batch_table="email_verification_files")

    await store.mark_processed(7)

    query.update.assert_called_once_with({"processed": True})
    query.eq.assert_called_once_with("id", 7)


@pytest.mark.asyncio
async def test_fetch_campaign_leads():
    client, query = mock_client(data=[{"id": 1, "email": "a@x.com"}])
    store = LeadStore(client, lead_table="leads")

    leads = await store.fetch_campaign_leads("camp-1")

    client.table.assert_called_with("leads")
    query.eq.assert_called_once_with("campaign_id", "camp-1")
    assert leads == [{"id": 1, "email": "a@x.com"}]


@pytest.mark.asyncio
async def test_update_lead_statuses_by_id_list():
    client, query = mock_client(data=[])
    store = LeadStore(client, lead_table="leads")

    await store.update_lead_statuses([1, 2], "verified_ok", "2024-01-01T00:00:00+00:00")

    query.update.assert_called_once_with({
        "verification_status": "verified_ok",
        "verification_checked_at": "2024-01-01T00:00:00+00:00",
    })
    query.in_.assert_called_once_with("id", [1, 2])


@pytest.mark.asyncio
async def test_update_lead_statuses_skips_empty():
    client, query = mock_client(data=[])
    store = LeadStore(client)

    await store.update_lead_statuses([], "verified_ok", "ts")

    query.execute.assert_not_called()


@pytest.mark.asyncio
async def test_update_lead_statuses_wraps_errors():
    client, _ = mock_client(error=RuntimeError("payload too large"))
    store = LeadStore(client)

    with pytest.raises(LeadStoreError):
        await store.update_lead_statuses([1], "verified_bad", "ts")
