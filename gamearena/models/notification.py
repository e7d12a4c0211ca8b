"""
Notification model matching the DDL schema
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from gamearena.db.base import Base
import sqlalchemy as sa
import uuid


class Notification(Base):
    """Notification model - informational, never part of a settlement"""
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        sa.Enum('tournament', 'payment', 'system', 'reminder',
                name='notification_type', native_enum=False),
        nullable=False,
        default='system'
    )
    read = Column(Boolean, nullable=False, default=False)
    tournament_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, title={self.title})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "read": self.read,
            "tournament_id": str(self.tournament_id) if self.tournament_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
