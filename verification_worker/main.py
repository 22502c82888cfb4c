"""
Verification Worker Service
===========================

Endpoints:
- POST /: Run one verification pass, returns "checked N" / "no files"
- GET /health: Health check + build info

The scheduler (cron, Cloud Scheduler, pg_cron) hits POST / on a fixed
interval. The same pass can be run once from the command line:

    verification-worker            # one tick, prints the summary
    verification-worker --serve    # start the HTTP service
"""

import argparse
import asyncio
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from verification_worker import __version__, config
from verification_worker.exceptions import LeadStoreError, WorkerConfigError
from verification_worker.responses import HealthResponse
from verification_worker.utils.logger import configure_logging, get_logger
from verification_worker.worker import run_worker

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report the secret-free configuration."""
    configure_logging()
    logger.info("worker_startup", **config.config_summary())
    yield
    logger.info("worker_shutdown")


app = FastAPI(
    title="LeadPoet Verification Worker",
    description="Reconciles bulk email verification results into campaign leads",
    version=__version__,
    lifespan=lifespan,
)


@app.post("/", response_class=PlainTextResponse)
async def trigger():
    """
    Run exactly one batch-processing pass.

    Returns a short summary regardless of per-batch failures; details are
    only in the logs. Tick-level failures (missing key, batch listing
    failed) return HTTP 500.
    """
    try:
        summary = await run_worker()
    except WorkerConfigError as e:
        logger.error("missing_configuration", error=str(e))
        return PlainTextResponse("missing key", status_code=500)
    except LeadStoreError as e:
        logger.error("load_files_error", error=str(e))
        return PlainTextResponse("error", status_code=500)

    return PlainTextResponse(summary.message)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(
        service="verification-worker",
        status="ok",
        build_id=config.BUILD_ID,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bulk email verification reconciliation worker")
    parser.add_argument("--serve", action="store_true", help="Start the HTTP trigger service instead of running one tick")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host for --serve")
    parser.add_argument("--port", type=int, default=8080, help="Bind port for --serve")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging()

    if args.serve:
        import uvicorn

        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    try:
        summary = asyncio.run(run_worker())
    except WorkerConfigError as e:
        logger.error("missing_configuration", error=str(e))
        print("missing key")
        return 1
    except LeadStoreError as e:
        logger.error("load_files_error", error=str(e))
        print("error")
        return 1

    print(summary.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
