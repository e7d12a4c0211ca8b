"""
Tournament model matching the DDL schema
"""

from sqlalchemy import Column, String, Numeric, DateTime, Integer, Text, JSON, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gamearena.db.base import Base
import sqlalchemy as sa
import uuid


class Tournament(Base):
    """Tournament model - matches tournaments table in DDL"""
    __tablename__ = "tournaments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    game_name = Column(String(128), nullable=False)
    game_cover_image = Column(String(512), nullable=True)
    description = Column(Text, nullable=False, default='')
    rules = Column(JSON, nullable=False, default=list)
    start_time = Column(DateTime(timezone=True), nullable=False)
    total_slots = Column(Integer, nullable=False)
    entry_fee = Column(Numeric(12, 2), nullable=False, default=0)
    prize_pool = Column(Numeric(12, 2), nullable=False, default=0)
    room_id = Column(String(128), nullable=True)
    room_password = Column(String(128), nullable=True)
    status = Column(
        sa.Enum('upcoming', 'active', 'completed', 'cancelled',
                name='tournament_status', native_enum=False),
        nullable=False,
        default='upcoming'
    )
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    participants = relationship("Participant", lazy="raise")

    __table_args__ = (
        CheckConstraint('total_slots > 0', name='chk_tournament_slots_positive'),
        CheckConstraint('entry_fee >= 0', name='chk_tournament_fee_nonneg'),
        Index('idx_tournaments_status_start', 'status', 'start_time'),
    )

    def __repr__(self):
        return f"<Tournament(id={self.id}, title={self.title}, entry_fee={self.entry_fee}, slots={self.total_slots})>"
