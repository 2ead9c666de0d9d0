"""
Finance Tracker: FastAPI application.

Run with `uvicorn finance_tracker.main:app`.
"""

from fastapi import FastAPI

from finance_tracker.config import get_settings
from finance_tracker.logging_config import configure_logging
from finance_tracker.api.health import router as health_router
from finance_tracker.api.transactions import router as transactions_router

settings = get_settings()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance tracker: transactions and account balances",
    debug=settings.DEBUG,
)

app.include_router(health_router)
app.include_router(transactions_router)
