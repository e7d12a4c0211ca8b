"""
Notification sink

Notifications are a side effect of settlements and wallet requests. They are
written on their own session after the main commit, and a failure here is
logged and handed to the retry task rather than surfaced to the caller.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from gamearena.repos.notification_repo import create_notification

logger = logging.getLogger(__name__)


class NotificationSink:
    """Fire-and-forget notification enqueue backed by the notifications table"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def enqueue(
        self,
        user_id: UUID,
        title: str,
        message: str,
        notification_type: str,
        tournament_id: Optional[UUID] = None
    ) -> bool:
        """
        Store a notification for the user.

        Returns:
            True if stored now, False if it was deferred to the retry task
        """
        try:
            async with self.session_factory() as session:
                await create_notification(
                    session,
                    user_id=user_id,
                    title=title,
                    message=message,
                    notification_type=notification_type,
                    tournament_id=tournament_id
                )
                await session.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to store notification '{title}' for user {user_id}: {e}")
            schedule_retry(user_id, title, message, notification_type, tournament_id)
            return False


def schedule_retry(
    user_id: UUID,
    title: str,
    message: str,
    notification_type: str,
    tournament_id: Optional[UUID] = None
) -> None:
    """Hand a failed notification to the Celery retry task, best effort."""
    from gamearena.tasks.tasks import deliver_notification

    try:
        deliver_notification.delay(
            str(user_id),
            title,
            message,
            notification_type,
            str(tournament_id) if tournament_id else None
        )
    except Exception as e:
        logger.error(f"Could not schedule notification retry for user {user_id}: {e}")
