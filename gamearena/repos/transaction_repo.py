"""
Transaction (ledger) repository

Ledger rows are append-only. The only mutation allowed is the single
pending -> terminal status transition, which is guarded in SQL.
"""

from datetime import datetime
from typing import Optional, List, Tuple
from uuid import UUID
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc
from gamearena.models.transaction import Transaction
from gamearena.models.tournament import Tournament
from gamearena.models.enums import TransactionStatus, TransactionType


async def create_transaction(
    session: AsyncSession,
    user_id: UUID,
    tx_type: str,
    amount: Decimal,
    status: str = TransactionStatus.PENDING.value,
    description: str = '',
    tournament_id: Optional[UUID] = None,
    reference_id: Optional[str] = None,
    idempotency_key: Optional[str] = None
) -> Transaction:
    """
    Append a ledger entry. Flushes so the id is available; does not commit.

    Args:
        session: Database session
        user_id: Owner of the entry
        tx_type: One of TransactionType values
        amount: Entry amount
        status: Initial status (pending unless recording a terminal trace)
        description: Human readable description
        tournament_id: Related tournament (optional)
        reference_id: External payment reference (optional)
        idempotency_key: Client supplied retry key (optional)

    Returns:
        Created Transaction instance
    """
    transaction = Transaction(
        user_id=user_id,
        type=tx_type,
        amount=amount,
        status=status,
        description=description,
        tournament_id=tournament_id,
        reference_id=reference_id,
        idempotency_key=idempotency_key
    )
    session.add(transaction)
    await session.flush()
    return transaction


async def get_transaction_by_id(session: AsyncSession, transaction_id: UUID) -> Optional[Transaction]:
    """
    Get transaction by ID.

    Args:
        session: Database session
        transaction_id: Transaction UUID

    Returns:
        Transaction instance or None if not found
    """
    result = await session.execute(
        select(Transaction).where(Transaction.id == transaction_id)
    )
    return result.scalar_one_or_none()


async def transition_transaction_status(
    session: AsyncSession,
    transaction_id: UUID,
    new_status: str
) -> bool:
    """
    Move a pending transaction to a terminal status.

    Returns:
        True if the row was pending and is now new_status, False otherwise
    """
    result = await session.execute(
        update(Transaction)
        .where(
            Transaction.id == transaction_id,
            Transaction.status == TransactionStatus.PENDING.value
        )
        .values(status=new_status)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def get_transactions_by_user(
    session: AsyncSession,
    user_id: UUID,
    limit: int = 100,
    offset: int = 0
) -> List[Tuple[Transaction, Optional[Tournament]]]:
    """
    Get a user's ledger, newest first, with the related tournament if any.

    Args:
        session: Database session
        user_id: User UUID
        limit: Maximum number of transactions to return
        offset: Number of transactions to skip

    Returns:
        List of (Transaction, Tournament or None) pairs
    """
    result = await session.execute(
        select(Transaction, Tournament)
        .outerjoin(Tournament, Tournament.id == Transaction.tournament_id)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.created_at))
        .limit(limit)
        .offset(offset)
    )
    return list(result.all())


async def get_completed_entry_transaction(
    session: AsyncSession,
    user_id: UUID,
    tournament_id: UUID
) -> Optional[Transaction]:
    """Completed tournament_entry for (user, tournament), if any."""
    result = await session.execute(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.tournament_id == tournament_id,
            Transaction.type == TransactionType.TOURNAMENT_ENTRY.value,
            Transaction.status == TransactionStatus.COMPLETED.value
        )
    )
    return result.scalars().first()


async def get_stale_pending_entries(
    session: AsyncSession,
    older_than: datetime,
    limit: int = 500
) -> List[Transaction]:
    """
    Pending tournament_entry rows created before older_than.

    Args:
        session: Database session
        older_than: Cutoff timestamp
        limit: Maximum number of rows to return

    Returns:
        List of Transaction instances
    """
    result = await session.execute(
        select(Transaction)
        .where(
            Transaction.type == TransactionType.TOURNAMENT_ENTRY.value,
            Transaction.status == TransactionStatus.PENDING.value,
            Transaction.created_at < older_than
        )
        .order_by(Transaction.created_at)
        .limit(limit)
    )
    return list(result.scalars().all())
