"""
Database enums matching the DDL schema
"""

import enum


class TournamentStatus(enum.Enum):
    """Tournament status enum"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses a user can still join from
JOINABLE_TOURNAMENT_STATUSES = (TournamentStatus.UPCOMING.value, TournamentStatus.ACTIVE.value)


class TransactionType(enum.Enum):
    """Ledger entry type enum"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TOURNAMENT_ENTRY = "tournament_entry"
    TOURNAMENT_PRIZE = "tournament_prize"
    REFUND = "refund"


class TransactionStatus(enum.Enum):
    """Ledger entry status enum"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ParticipantStatus(enum.Enum):
    """Participant status enum"""
    REGISTERED = "registered"
    CHECKED_IN = "checked_in"
    NO_SHOW = "no_show"
    DISQUALIFIED = "disqualified"
    COMPLETED = "completed"


class PaymentStatus(enum.Enum):
    """Participant payment status enum"""
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class NotificationType(enum.Enum):
    """Notification type enum"""
    TOURNAMENT = "tournament"
    PAYMENT = "payment"
    SYSTEM = "system"
    REMINDER = "reminder"
