"""
Tournament entry settlement

Joining a paid tournament is one database transaction: lock the tournament
row, validate status, capacity, membership and balance, then append the
entry transaction, insert the participant, debit the wallet and complete the
transaction. Nothing is visible to other sessions until the commit, and any
failure rolls every step back together.

Ordering guarantees:
- All joiners of a tournament queue on its row lock, so the capacity check
  and the participant insert happen under the same lock.
- The (tournament_id, user_id) unique constraint backstops double entry.
- Locks are always taken tournament first, wallet second.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamearena.core.config import settings
from gamearena.models.enums import (
    JOINABLE_TOURNAMENT_STATUSES,
    NotificationType,
    TransactionStatus,
    TransactionType,
)
from gamearena.repos.participant_repo import count_participants, get_participant, insert_participant
from gamearena.repos.tournament_repo import lock_tournament_for_update
from gamearena.repos.transaction_repo import (
    create_transaction,
    get_transaction_by_id,
    transition_transaction_status,
)
from gamearena.repos.wallet_repo import debit_wallet, get_balance, lock_wallet_for_update
from gamearena.services.errors import (
    AlreadyJoined,
    InsufficientFunds,
    NotFound,
    NotJoinable,
    SettlementError,
    TournamentFull,
    TransientStorageFailure,
    Unauthorized,
    Unknown,
)
from gamearena.services.notifications import NotificationSink

# Configure logging
logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = {"40001", "40P01", "55P03"}


@dataclass
class JoinResult:
    """Outcome of a successful (or replayed) tournament entry"""
    transaction_id: UUID
    tournament_id: UUID
    entry_fee: Decimal
    balance: Decimal
    replayed: bool = False


@dataclass
class _EntryAttempt:
    """Tracks how far one attempt got, for the compensating ledger trace"""
    entry_fee: Decimal = Decimal('0')
    effect_started: bool = False


def is_transient_error(exc: DBAPIError) -> bool:
    """True for lock/serialization conflicts that a fresh attempt may clear."""
    if isinstance(exc, OperationalError):
        return True
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code in TRANSIENT_SQLSTATES


class EntrySettlementService:
    """Settles tournament entries for an explicitly passed user"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        notifier: Optional[NotificationSink] = None,
        max_retries: Optional[int] = None,
        retry_backoff_seconds: float = 0.05
    ):
        self.session_factory = session_factory
        self.notifier = notifier or NotificationSink(session_factory)
        self.max_retries = max_retries if max_retries is not None else settings.settlement_max_retries
        self.retry_backoff_seconds = retry_backoff_seconds

    async def join_tournament(
        self,
        user_id: Optional[UUID],
        tournament_id: UUID,
        idempotency_key: Optional[str] = None
    ) -> JoinResult:
        """
        Join a tournament, paying its entry fee from the user's wallet.

        Args:
            user_id: Authenticated caller, None if unauthenticated
            tournament_id: Tournament to join
            idempotency_key: Optional client retry key; a repeat of a
                committed join with the same key replays its result

        Returns:
            JoinResult

        Raises:
            SettlementError subclass describing why the join was refused
        """
        if user_id is None:
            raise Unauthorized()

        attempts = max(1, self.max_retries)
        for attempt in range(1, attempts + 1):
            try:
                result = await self._settle(user_id, tournament_id, idempotency_key)
                break
            except TransientStorageFailure:
                if attempt == attempts:
                    logger.error(f"Join of tournament {tournament_id} by {user_id} failed after {attempt} attempts")
                    raise
                logger.warning(f"Transient conflict joining tournament {tournament_id} (attempt {attempt}), retrying")
                await asyncio.sleep(self.retry_backoff_seconds * attempt)

        if result.replayed:
            logger.info(f"Replayed join of tournament {tournament_id} for user {user_id}")
        else:
            logger.info(
                f"User {user_id} joined tournament {tournament_id}, "
                f"fee {result.entry_fee}, transaction {result.transaction_id}"
            )
            await self._notify_joined(user_id, result)

        return result

    async def _settle(
        self,
        user_id: UUID,
        tournament_id: UUID,
        idempotency_key: Optional[str]
    ) -> JoinResult:
        attempt = _EntryAttempt()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await self._settle_in_transaction(
                        session, user_id, tournament_id, idempotency_key, attempt
                    )
        except SettlementError as e:
            if attempt.effect_started:
                status = TransactionStatus.FAILED.value if isinstance(e, Unknown) else TransactionStatus.CANCELLED.value
                await self._record_failed_entry(user_id, tournament_id, attempt, status, e.message)
            raise
        except IntegrityError as e:
            logger.warning(f"Constraint violation joining tournament {tournament_id} for user {user_id}: {e.orig}")
            error = await self._explain_integrity_error(user_id, tournament_id, attempt)
            if attempt.effect_started:
                await self._record_failed_entry(user_id, tournament_id, attempt, TransactionStatus.CANCELLED.value, error.message)
            raise error from e
        except DBAPIError as e:
            if attempt.effect_started:
                await self._record_failed_entry(user_id, tournament_id, attempt, TransactionStatus.FAILED.value, str(e.orig))
            if is_transient_error(e):
                raise TransientStorageFailure() from e
            logger.error(f"Database error joining tournament {tournament_id} for user {user_id}: {e}")
            raise Unknown() from e
        except Exception as e:
            logger.error(f"Unexpected error joining tournament {tournament_id} for user {user_id}: {e}")
            if attempt.effect_started:
                await self._record_failed_entry(user_id, tournament_id, attempt, TransactionStatus.FAILED.value, str(e))
            raise Unknown() from e

    async def _settle_in_transaction(
        self,
        session: AsyncSession,
        user_id: UUID,
        tournament_id: UUID,
        idempotency_key: Optional[str],
        attempt: _EntryAttempt
    ) -> JoinResult:
        tournament = await lock_tournament_for_update(session, tournament_id)
        if not tournament:
            raise NotFound()

        if tournament.status not in JOINABLE_TOURNAMENT_STATUSES:
            raise NotJoinable(tournament.status)

        existing = await get_participant(session, tournament.id, user_id)
        if existing:
            # A replay is not a new admission, so it skips the capacity check
            replay = await self._replay_if_same_request(session, existing.transaction_id, user_id, idempotency_key)
            if replay:
                return replay

        joined_players = await count_participants(session, tournament.id)
        if joined_players >= tournament.total_slots:
            raise TournamentFull()

        if existing:
            raise AlreadyJoined()

        entry_fee = Decimal(str(tournament.entry_fee))
        wallet = await lock_wallet_for_update(session, user_id)
        current_balance = wallet.balance if wallet else Decimal('0')
        if current_balance < entry_fee:
            raise InsufficientFunds(entry_fee, current_balance)

        attempt.entry_fee = entry_fee
        attempt.effect_started = True

        transaction = await create_transaction(
            session,
            user_id=user_id,
            tx_type=TransactionType.TOURNAMENT_ENTRY.value,
            amount=entry_fee,
            description=f"Entry fee for tournament: {tournament.title}",
            tournament_id=tournament.id,
            idempotency_key=idempotency_key
        )

        await insert_participant(session, tournament.id, user_id, transaction.id)

        new_balance = current_balance
        if entry_fee > 0:
            new_balance = await debit_wallet(session, user_id, entry_fee)
            if new_balance is None:
                raise InsufficientFunds(entry_fee, current_balance)

        completed = await transition_transaction_status(session, transaction.id, TransactionStatus.COMPLETED.value)
        if not completed:
            raise Unknown("Entry transaction left pending state unexpectedly", transaction.id)

        return JoinResult(
            transaction_id=transaction.id,
            tournament_id=tournament.id,
            entry_fee=entry_fee,
            balance=new_balance
        )

    async def _replay_if_same_request(
        self,
        session: AsyncSession,
        transaction_id: Optional[UUID],
        user_id: UUID,
        idempotency_key: Optional[str]
    ) -> Optional[JoinResult]:
        if not idempotency_key or not transaction_id:
            return None

        prior = await get_transaction_by_id(session, transaction_id)
        if (
            prior is None
            or prior.idempotency_key != idempotency_key
            or prior.status != TransactionStatus.COMPLETED.value
        ):
            return None

        return JoinResult(
            transaction_id=prior.id,
            tournament_id=prior.tournament_id,
            entry_fee=Decimal(str(prior.amount)),
            balance=await get_balance(session, user_id),
            replayed=True
        )

    async def _explain_integrity_error(
        self,
        user_id: UUID,
        tournament_id: UUID,
        attempt: _EntryAttempt
    ) -> SettlementError:
        """Map a constraint violation back to the rule it enforced."""
        try:
            async with self.session_factory() as session:
                if await get_participant(session, tournament_id, user_id):
                    return AlreadyJoined()
                balance = await get_balance(session, user_id)
                if balance < attempt.entry_fee:
                    return InsufficientFunds(attempt.entry_fee, balance)
        except Exception as e:
            logger.error(f"Could not classify constraint violation for user {user_id}: {e}")
        return Unknown()

    async def _record_failed_entry(
        self,
        user_id: UUID,
        tournament_id: UUID,
        attempt: _EntryAttempt,
        status: str,
        reason: str
    ) -> None:
        """
        Leave a terminal ledger trace of an entry whose unit was rolled back.

        Best effort: the wallet and participant rows were already restored by
        the rollback, and the debit is never re-attempted here.
        """
        try:
            async with self.session_factory() as session:
                await create_transaction(
                    session,
                    user_id=user_id,
                    tx_type=TransactionType.TOURNAMENT_ENTRY.value,
                    amount=attempt.entry_fee,
                    status=status,
                    description=f"Entry to tournament {tournament_id} not completed: {reason}"[:255],
                    tournament_id=tournament_id
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to record {status} entry for user {user_id} in tournament {tournament_id}: {e}")

    async def _notify_joined(self, user_id: UUID, result: JoinResult) -> None:
        try:
            await self.notifier.enqueue(
                user_id=user_id,
                title="Tournament Joined",
                message=(
                    f"You have successfully joined the tournament. Entry fee of "
                    f"${result.entry_fee} has been deducted from your wallet."
                ),
                notification_type=NotificationType.TOURNAMENT.value,
                tournament_id=result.tournament_id
            )
        except Exception as e:
            logger.error(f"Join notification for user {user_id} failed: {e}")

