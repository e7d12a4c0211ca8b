"""
Celery background tasks
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from gamearena.celery_app import celery
from gamearena.core.config import settings
from gamearena.db.session import AsyncSessionLocal
from gamearena.models.enums import TransactionStatus
from gamearena.repos.notification_repo import create_notification
from gamearena.repos.participant_repo import get_participant_by_transaction
from gamearena.repos.transaction_repo import get_stale_pending_entries, transition_transaction_status

# Configure logging
logger = logging.getLogger(__name__)


async def deliver_notification_async(
    session_factory: async_sessionmaker,
    user_id: str,
    title: str,
    message: str,
    notification_type: str,
    tournament_id: Optional[str] = None
) -> str:
    """Store one notification row and return its id."""
    async with session_factory() as session:
        notification = await create_notification(
            session,
            user_id=UUID(user_id),
            title=title,
            message=message,
            notification_type=notification_type,
            tournament_id=UUID(tournament_id) if tournament_id else None
        )
        await session.commit()
        return str(notification.id)


@celery.task(bind=True, max_retries=3, default_retry_delay=30)
def deliver_notification(
    self,
    user_id: str,
    title: str,
    message: str,
    notification_type: str,
    tournament_id: Optional[str] = None
):
    """
    Retry storing a notification that could not be written inline.

    Args:
        user_id: Recipient UUID as string
        title: Notification title
        message: Notification body
        notification_type: One of NotificationType values
        tournament_id: Related tournament UUID as string (optional)
    """
    try:
        notification_id = asyncio.run(deliver_notification_async(
            AsyncSessionLocal, user_id, title, message, notification_type, tournament_id
        ))
        logger.info(f"Delivered notification {notification_id} to user {user_id}")
        return notification_id
    except Exception as exc:
        logger.error(f"Error delivering notification '{title}' to user {user_id}: {exc}")
        if self.request.retries < self.max_retries:
            raise self.retry(countdown=30 * (2 ** self.request.retries))  # Exponential backoff
        logger.error(f"Max retries exceeded for notification '{title}' to user {user_id}")
        raise


async def reconcile_pending_entries_async(
    session_factory: async_sessionmaker,
    now: Optional[datetime] = None
) -> Dict[str, int]:
    """
    Resolve tournament_entry transactions stuck in pending.

    An entry older than the configured timeout becomes completed when a
    participant row references it, otherwise failed. The wallet is never
    touched here.

    Returns:
        Counts of entries moved to each terminal status
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=settings.pending_entry_timeout_minutes)
    counts = {"completed": 0, "failed": 0}

    async with session_factory() as session:
        stale = await get_stale_pending_entries(session, older_than=cutoff)
        for transaction in stale:
            participant = await get_participant_by_transaction(session, transaction.id)
            new_status = TransactionStatus.COMPLETED.value if participant else TransactionStatus.FAILED.value
            if await transition_transaction_status(session, transaction.id, new_status):
                counts[new_status] += 1
                logger.warning(f"Reconciled stale entry transaction {transaction.id} to {new_status}")
        await session.commit()

    return counts


@celery.task
def reconcile_pending_entries():
    """Periodic sweep of stale pending tournament entries."""
    counts = asyncio.run(reconcile_pending_entries_async(AsyncSessionLocal))
    logger.info(f"Pending entry reconciliation finished: {counts}")
    return counts
