"""
Notification repository
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from gamearena.models.notification import Notification


async def create_notification(
    session: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    notification_type: str,
    tournament_id: Optional[UUID] = None
) -> Notification:
    """
    Create a notification row. Flushes; does not commit.

    Args:
        session: Database session
        user_id: Recipient
        title: Notification title
        message: Notification body
        notification_type: One of NotificationType values
        tournament_id: Related tournament (optional)

    Returns:
        Created Notification instance
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        tournament_id=tournament_id
    )
    session.add(notification)
    await session.flush()
    return notification


async def get_notifications_for_user(
    session: AsyncSession,
    user_id: UUID,
    limit: int = 100
) -> List[Notification]:
    """Notifications for a user, newest first."""
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(desc(Notification.created_at))
        .limit(limit)
    )
    return list(result.scalars().all())


async def set_notification_read(
    session: AsyncSession,
    notification_id: UUID,
    user_id: UUID,
    read: bool = True
) -> Optional[Notification]:
    """
    Update the read flag on one of the user's own notifications.

    Returns:
        Updated Notification, or None if it does not exist or belongs to
        someone else
    """
    result = await session.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        return None

    notification.read = read
    await session.flush()
    return notification
