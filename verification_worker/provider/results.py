"""
EmailListVerify Result List Fetcher
===================================

Downloads a result file (link1 / link2 from the status line) and parses it
into ClassifiedPair rows. Each data line is ``category,email``; the file may
start with an ``ELV Result`` header.

A missing link or a failed download yields an empty list. A batch whose
status says complete still reconciles with zero rows from a broken link.
"""

import asyncio
import re
from typing import List, Optional

import aiohttp

from verification_worker import config
from verification_worker.models import ClassifiedPair
from verification_worker.utils.logger import get_logger

logger = get_logger(__name__)

HEADER_PREFIXES = ("elv result",)

_LINE_SPLIT = re.compile(r"\r?\n")


def parse_pairs(text: str) -> List[ClassifiedPair]:
    """
    Parse result file content into (category, email) pairs.

    Skips empty lines, header rows, lines without a comma, and lines whose
    email part has no '@'. Only the first comma splits the line.
    """
    pairs = []
    for line in _LINE_SPLIT.split(text or ""):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower().startswith(HEADER_PREFIXES):
            continue
        idx = stripped.find(",")
        if idx == -1:
            continue
        category = stripped[:idx].strip().lower()
        email = stripped[idx + 1:].strip().lower()
        if "@" not in email:
            continue
        pairs.append(ClassifiedPair(category=category, email=email))
    return pairs


async def fetch_pairs(session: aiohttp.ClientSession, url: Optional[str]) -> List[ClassifiedPair]:
    """Download one result file and parse it. Never raises for provider errors."""
    if not url:
        return []

    timeout = aiohttp.ClientTimeout(total=config.PROVIDER_TIMEOUT_SECONDS)

    try:
        async with session.get(url, timeout=timeout) as response:
            if response.status < 200 or response.status >= 300:
                logger.warning("result_download_http_error", url=url, status=response.status)
                return []
            text = await response.text(errors="replace")

    except aiohttp.ClientError as e:
        logger.warning("result_download_network_error", url=url, error=str(e))
        return []
    except asyncio.TimeoutError:
        logger.warning("result_download_timeout", url=url)
        return []

    pairs = parse_pairs(text)
    logger.debug("result_download_parsed", url=url, pairs=len(pairs))
    return pairs
