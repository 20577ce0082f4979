"""Celery tasks for the order lifecycle.

All of them are idempotent and scheduled from CELERY_BEAT_SCHEDULE:
- expiring unpaid transactions past their payment window
- rejecting transactions the organizer never confirmed
- writing off expired points
"""

import structlog
from celery import shared_task

from events.service import points_service
from events.service.transaction_service import TransactionLifecycle

logger = structlog.get_logger(__name__)


@shared_task(name="events.sweep_expired_transactions")
def sweep_expired_transactions() -> list[str]:
    """Expire unpaid transactions past their deadline and release their seats."""
    expired = TransactionLifecycle().sweep_expired()
    logger.info("sweep_expired_transactions_finished", count=len(expired))
    return [str(pk) for pk in expired]


@shared_task(name="events.sweep_unconfirmed_transactions")
def sweep_unconfirmed_transactions() -> list[str]:
    """Reject transactions left waiting for confirmation past the confirmation window."""
    rejected = TransactionLifecycle().sweep_unconfirmed()
    logger.info("sweep_unconfirmed_transactions_finished", count=len(rejected))
    return [str(pk) for pk in rejected]


@shared_task(name="events.expire_points")
def expire_points() -> int:
    """Write off points past their expiry."""
    return points_service.expire_points()
