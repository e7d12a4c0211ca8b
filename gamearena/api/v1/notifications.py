"""
Notification API endpoints
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from gamearena.core.auth import AuthenticatedUser, get_current_user
from gamearena.db.session import get_db
from gamearena.repos.notification_repo import get_notifications_for_user, set_notification_read

router = APIRouter(prefix="/notifications")


class NotificationUpdate(BaseModel):
    """Mark-as-read request model"""
    id: UUID
    read: bool = True


@router.get("")
async def list_notifications(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Caller's notifications, newest first."""
    notifications = await get_notifications_for_user(session, current_user.id)
    return [n.to_dict() for n in notifications]


@router.put("")
async def update_notification(
    update: NotificationUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Set the read flag on one of the caller's notifications."""
    notification = await set_notification_read(session, update.id, current_user.id, update.read)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    await session.commit()
    return notification.to_dict()
