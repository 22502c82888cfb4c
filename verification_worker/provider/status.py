"""
EmailListVerify File Status Client
==================================

Looks up the state of an uploaded verification file:

    GET {ELV_STATUS_URL}?secret=<api key>&id=<file id>

The response body is a single pipe-delimited line:

    fileId|filename|unique|lines|linesProcessed|status|timestamp|link1|link2

link1/link2 are only present once the provider has produced result files.

Any failure (HTTP error, network error, timeout, short line) returns None.
The caller treats that exactly like "not ready yet" and checks again on the
next tick, so this module never retries and never raises for provider errors.
"""

import asyncio
from typing import Optional

import aiohttp

from verification_worker import config
from verification_worker.models import StatusDescriptor
from verification_worker.utils.logger import get_logger

logger = get_logger(__name__)

MIN_STATUS_FIELDS = 7


def _to_int(value: Optional[str]) -> int:
    try:
        return int((value or "0").strip() or "0")
    except ValueError:
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0


def parse_status_line(text: str) -> Optional[StatusDescriptor]:
    """
    Parse a getApiFileInfo response body.

    Returns None when the trimmed body has fewer than 7 fields. Numeric
    fields that fail to parse default to 0 instead of failing the line.
    """
    parts = (text or "").strip().split("|")
    if len(parts) < MIN_STATUS_FIELDS:
        return None

    # Pad so the optional link columns can be unpacked positionally
    parts = parts + [""] * (9 - len(parts))
    file_id, filename, unique, lines, lines_processed, status, timestamp, link1, link2 = parts[:9]

    return StatusDescriptor(
        file_id=file_id.strip(),
        filename=filename.strip(),
        unique=_to_int(unique),
        lines=_to_int(lines),
        lines_processed=_to_int(lines_processed),
        status=status.strip(),
        timestamp=timestamp.strip(),
        link1=link1.strip() or None,
        link2=link2.strip() or None,
    )


async def fetch_status(
    session: aiohttp.ClientSession,
    api_key: str,
    file_id: str,
) -> Optional[StatusDescriptor]:
    """
    Fetch and parse the provider status for one uploaded file.

    Args:
        session: Shared aiohttp session for this tick
        api_key: EmailListVerify API secret
        file_id: Provider-assigned file id

    Returns:
        StatusDescriptor, or None if the status could not be obtained
    """
    params = {"secret": api_key, "id": file_id}
    timeout = aiohttp.ClientTimeout(total=config.PROVIDER_TIMEOUT_SECONDS)

    try:
        async with session.get(config.ELV_STATUS_URL, params=params, timeout=timeout) as response:
            if response.status < 200 or response.status >= 300:
                try:
                    error_text = await response.text(errors="replace")
                except Exception:
                    error_text = ""
                logger.error(
                    "fetch_status_http_error",
                    file_id=file_id,
                    status=response.status,
                    response=error_text[:200],
                )
                return None

            text = (await response.text(errors="replace")).strip()

    except aiohttp.ClientError as e:
        logger.error("fetch_status_network_error", file_id=file_id, error=str(e))
        return None
    except asyncio.TimeoutError:
        logger.error("fetch_status_timeout", file_id=file_id, timeout=config.PROVIDER_TIMEOUT_SECONDS)
        return None

    descriptor = parse_status_line(text)
    if descriptor is None:
        logger.error(
            "fetch_status_invalid_format",
            file_id=file_id,
            parts_count=len(text.split("|")) if text else 0,
            preview=text[:200],
        )
        return None

    return descriptor
