# earnings_ledger/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from earnings_ledger.api.v1.api import api_router
from earnings_ledger.core.config import settings
from earnings_ledger.scheduler import start_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENABLE_SCHEDULER:
        start_scheduler()
    logger.info("Earnings ledger service started")
    yield
    shutdown_scheduler()
    logger.info("Earnings ledger service stopped")


app = FastAPI(
    title="Earnings Ledger Service",
    version="1.0.0",
    description="""
        Organizer earnings and settlement ledger.

        * **Event earnings**: gross, fees and net per event, reconciled to the event currency
        * **Settlement**: funds release after a hold period past the event
        * **Payout eligibility**: ticket-level balances that never double-count disbursed tickets
        """,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")
