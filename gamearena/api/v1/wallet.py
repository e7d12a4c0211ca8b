"""
Wallet API endpoints
"""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamearena.core.auth import AuthenticatedUser, get_current_user
from gamearena.core.metrics import WALLET_REQUEST_COUNT
from gamearena.db.session import get_db, get_session_factory
from gamearena.models.enums import NotificationType, TransactionType
from gamearena.repos.transaction_repo import create_transaction, get_transactions_by_user
from gamearena.repos.wallet_repo import get_or_create_wallet
from gamearena.services.notifications import NotificationSink

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallet")


class WalletRequest(BaseModel):
    """Deposit or withdrawal request model"""
    action: str = Field(..., description="'add' or 'withdraw'")
    amount: Decimal = Field(..., description="Requested amount")
    phone_number: str = Field(..., alias="phoneNumber", description="Mobile money number")
    transaction_id: Optional[str] = Field(None, alias="transactionId", description="External payment reference")


class WalletRequestResponse(BaseModel):
    """Pending request acknowledgement"""
    success: bool
    message: str
    transactionId: str


def get_notification_sink(
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> NotificationSink:
    return NotificationSink(session_factory)


@router.get("")
async def get_wallet(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """
    Current balance and ledger, newest first. Creates the wallet on first
    access.
    """
    wallet = await get_or_create_wallet(session, current_user.id)
    await session.commit()

    rows = await get_transactions_by_user(session, current_user.id)
    return {
        "balance": float(wallet.balance),
        "transactions": [
            {
                "id": str(tx.id),
                "amount": float(tx.amount),
                "type": tx.type,
                "status": tx.status,
                "description": tx.description,
                "date": tx.created_at.isoformat() if tx.created_at else None,
                "game": tournament.game_name if tournament else None,
                "tournamentTitle": tournament.title if tournament else None
            }
            for tx, tournament in rows
        ]
    }


@router.post("", response_model=WalletRequestResponse)
async def create_wallet_request(
    request: WalletRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink)
):
    """
    Submit a deposit ("add") or withdrawal ("withdraw") request.

    Both create a pending transaction that is processed out of band; the
    wallet balance is not changed here.
    """
    if request.action not in ("add", "withdraw"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action"
        )

    if request.amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Amount must be positive"
        )

    if request.action == "add":
        transaction = await create_transaction(
            session,
            user_id=current_user.id,
            tx_type=TransactionType.DEPOSIT.value,
            amount=request.amount,
            description=f"Deposit from {request.phone_number}",
            reference_id=request.transaction_id
        )
        label, message = "Deposit", "Deposit request submitted successfully"
    else:
        wallet = await get_or_create_wallet(session, current_user.id)
        # Display-level check only; the amount is not reserved here
        if wallet.balance < request.amount:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Insufficient funds"
            )
        transaction = await create_transaction(
            session,
            user_id=current_user.id,
            tx_type=TransactionType.WITHDRAWAL.value,
            amount=request.amount,
            description=f"Withdrawal to {request.phone_number}"
        )
        label, message = "Withdrawal", "Withdrawal request submitted successfully"

    await session.commit()
    WALLET_REQUEST_COUNT.labels(action=request.action).inc()
    logger.info(f"{label} request {transaction.id} of {request.amount} by user {current_user.id}")

    await notifier.enqueue(
        user_id=current_user.id,
        title=f"{label} Request Received",
        message=f"Your {label.lower()} request of ${request.amount} has been received and is being processed.",
        notification_type=NotificationType.PAYMENT.value
    )

    return WalletRequestResponse(
        success=True,
        message=message,
        transactionId=str(transaction.id)
    )
