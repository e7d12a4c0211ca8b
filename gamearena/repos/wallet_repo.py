"""
Wallet repository with atomic balance operations

Functions here flush but never commit: the caller owns the transaction
boundary so a debit can share one commit with the rest of a settlement.
"""

from typing import Optional
from uuid import UUID
from decimal import Decimal
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from gamearena.models.wallet import Wallet

# Configure logging
logger = logging.getLogger(__name__)


async def get_wallet_for_user(session: AsyncSession, user_id: UUID) -> Optional[Wallet]:
    """
    Get wallet for a specific user.

    Args:
        session: Database session
        user_id: User UUID

    Returns:
        Wallet instance or None if not found
    """
    result = await session.execute(
        select(Wallet).where(Wallet.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_wallet(session: AsyncSession, user_id: UUID) -> Wallet:
    """
    Get the user's wallet, creating an empty one on first access. The insert
    runs in a savepoint; losing a race on the user_id unique constraint
    re-reads the winner's row.

    Args:
        session: Database session
        user_id: User UUID

    Returns:
        Existing or newly created Wallet instance
    """
    existing_wallet = await get_wallet_for_user(session, user_id)
    if existing_wallet:
        return existing_wallet

    wallet = Wallet(user_id=user_id, balance=Decimal('0'))
    try:
        async with session.begin_nested():
            session.add(wallet)
            await session.flush()
    except IntegrityError:
        logger.info(f"Wallet for user {user_id} created concurrently, re-reading")
        return await get_wallet_for_user(session, user_id)

    logger.info(f"Created wallet for user {user_id}")
    return wallet


async def get_balance(session: AsyncSession, user_id: UUID) -> Decimal:
    """Current balance for display; a missing wallet reads as zero."""
    wallet = await get_wallet_for_user(session, user_id)
    return wallet.balance if wallet else Decimal('0')


async def lock_wallet_for_update(session: AsyncSession, user_id: UUID) -> Optional[Wallet]:
    """
    Load the wallet row under SELECT ... FOR UPDATE.

    The lock is held until the caller's transaction ends, so the balance read
    here is the balance the debit will be checked against.
    """
    result = await session.execute(
        select(Wallet)
        .where(Wallet.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def debit_wallet(session: AsyncSession, user_id: UUID, amount: Decimal) -> Optional[Decimal]:
    """
    Debit the wallet with a single conditional UPDATE.

    The WHERE clause re-checks the balance against the persisted row, so the
    debit cannot drive the balance negative even if an earlier read is stale.

    Args:
        session: Database session
        user_id: User UUID
        amount: Amount to debit (non-negative)

    Returns:
        New balance, or None if the wallet is missing or has insufficient funds
    """
    if amount < 0:
        raise ValueError("Debit amount must not be negative")

    result = await session.execute(
        update(Wallet)
        .where(Wallet.user_id == user_id, Wallet.balance >= amount)
        .values(balance=Wallet.balance - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(f"Debit of {amount} refused for user {user_id}")
        return None

    wallet = await lock_wallet_for_update(session, user_id)
    logger.info(f"Debited {amount} from user {user_id}. New balance: {wallet.balance}")
    return wallet.balance


async def credit_wallet(session: AsyncSession, user_id: UUID, amount: Decimal) -> Decimal:
    """
    Credit the wallet, creating it if needed.

    Used for approved deposits, prizes and refunds.

    Args:
        session: Database session
        user_id: User UUID
        amount: Amount to credit (must be positive)

    Returns:
        New balance
    """
    if amount <= 0:
        raise ValueError("Credit amount must be positive")

    await get_or_create_wallet(session, user_id)
    await session.execute(
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(balance=Wallet.balance + amount)
        .execution_options(synchronize_session=False)
    )
    wallet = await lock_wallet_for_update(session, user_id)
    logger.info(f"Credited {amount} to user {user_id}. New balance: {wallet.balance}")
    return wallet.balance
