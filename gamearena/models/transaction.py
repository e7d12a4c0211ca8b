"""
Transaction model matching the DDL schema
"""

from sqlalchemy import Column, String, Numeric, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from gamearena.db.base import Base
import sqlalchemy as sa
import uuid


class Transaction(Base):
    """Transaction model - append-only ledger entry"""
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(
        sa.Enum('deposit', 'withdrawal', 'tournament_entry', 'tournament_prize', 'refund',
                name='transaction_type', native_enum=False),
        nullable=False
    )
    status = Column(
        sa.Enum('pending', 'completed', 'failed', 'cancelled',
                name='transaction_status', native_enum=False),
        nullable=False,
        default='pending'
    )
    description = Column(String(255), nullable=False, default='')
    reference_id = Column(String(128), nullable=True)
    idempotency_key = Column(String(128), nullable=True)
    tournament_id = Column(UUID(as_uuid=True), sa.ForeignKey("tournaments.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_transactions_user_created', 'user_id', 'created_at'),
        Index('idx_transactions_type_status', 'type', 'status'),
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, user_id={self.user_id}, type={self.type}, amount={self.amount}, status={self.status})>"
