"""
Tournament participant model matching the DDL schema
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from gamearena.db.base import Base
import uuid


class Participant(Base):
    """Participant model - one row per (tournament, user)"""
    __tablename__ = "tournament_participants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tournament_id = Column(UUID(as_uuid=True), ForeignKey("tournaments.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    transaction_id = Column(UUID(as_uuid=True), ForeignKey("transactions.id"), nullable=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String(32), nullable=False, default='registered')
    placement = Column(Integer, nullable=True)
    payment_status = Column(String(32), nullable=False, default='pending')

    # Constraints
    __table_args__ = (
        UniqueConstraint('tournament_id', 'user_id', name='uq_tournament_participant'),
    )

    def __repr__(self):
        return f"<Participant(id={self.id}, tournament_id={self.tournament_id}, user_id={self.user_id})>"
