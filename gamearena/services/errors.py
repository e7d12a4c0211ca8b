"""
Settlement error taxonomy

Each error carries a stable machine code and the HTTP status the API maps it
to, so clients can tell a capacity or duplicate failure apart from one that
should prompt a top-up.
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID


class SettlementError(Exception):
    """Base class for tournament entry failures"""

    code = "unknown"
    status_code = 500
    default_message = "Could not join tournament"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class Unauthorized(SettlementError):
    code = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class NotFound(SettlementError):
    code = "not_found"
    status_code = 404
    default_message = "Tournament not found"


class NotJoinable(SettlementError):
    code = "not_joinable"
    status_code = 400

    def __init__(self, status: str):
        self.tournament_status = status
        super().__init__(f"Tournament is {status} and can no longer be joined")


class TournamentFull(SettlementError):
    code = "tournament_full"
    status_code = 400
    default_message = "Tournament is full"


class AlreadyJoined(SettlementError):
    code = "already_joined"
    status_code = 400
    default_message = "You have already joined this tournament"


class InsufficientFunds(SettlementError):
    code = "insufficient_funds"
    status_code = 400

    def __init__(self, required_amount: Decimal, current_balance: Decimal):
        self.required_amount = required_amount
        self.current_balance = current_balance
        super().__init__(
            f"Insufficient funds. You need ${required_amount} to join this tournament. "
            f"Your current balance is ${current_balance}."
        )

    @property
    def shortfall(self) -> Decimal:
        return self.required_amount - self.current_balance

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "insufficientFunds": True,
            "requiredAmount": float(self.required_amount),
            "currentBalance": float(self.current_balance),
            "shortfall": float(self.shortfall),
        })
        return data


class TransientStorageFailure(SettlementError):
    """Lock timeout, deadlock or serialization conflict; safe to retry"""

    code = "transient_storage_failure"
    status_code = 503
    default_message = "The tournament is busy, please try again"


class Unknown(SettlementError):
    code = "unknown"
    status_code = 500

    def __init__(self, message: Optional[str] = None, transaction_id: Optional[UUID] = None):
        self.transaction_id = transaction_id
        super().__init__(message)
