"""
Integration tests for tournament entry settlement
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from gamearena.services.errors import (
    AlreadyJoined,
    InsufficientFunds,
    NotFound,
    NotJoinable,
    TournamentFull,
    Unauthorized,
    Unknown,
)
from gamearena.services.settlement import EntrySettlementService
from tests.fixtures.database import (
    count_participants,
    create_test_tournament,
    create_test_wallet,
    get_balance,
    get_entry_transactions,
    get_notifications,
)


@pytest.fixture
def service(session_factory):
    return EntrySettlementService(session_factory, retry_backoff_seconds=0)


@pytest.mark.asyncio
async def test_join_debits_fee_and_registers_player(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("25.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    result = await service.join_tournament(wallet.user_id, tournament.id)

    assert result.balance == Decimal("15.00")
    assert result.entry_fee == Decimal("10.00")
    assert result.replayed is False
    assert await get_balance(session_factory, wallet.user_id) == Decimal("15.00")
    assert await count_participants(session_factory, tournament.id) == 1

    entries = await get_entry_transactions(session_factory, wallet.user_id, tournament.id)
    assert len(entries) == 1
    assert entries[0].id == result.transaction_id
    assert entries[0].status == "completed"
    assert entries[0].amount == Decimal("10.00")

    notifications = await get_notifications(session_factory, wallet.user_id)
    assert [n.title for n in notifications] == ["Tournament Joined"]
    assert notifications[0].tournament_id == tournament.id


@pytest.mark.asyncio
async def test_insufficient_funds_changes_nothing(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("5.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    with pytest.raises(InsufficientFunds) as exc_info:
        await service.join_tournament(wallet.user_id, tournament.id)

    payload = exc_info.value.to_dict()
    assert payload["requiredAmount"] == 10.0
    assert payload["currentBalance"] == 5.0
    assert await get_balance(session_factory, wallet.user_id) == Decimal("5.00")
    assert await count_participants(session_factory, tournament.id) == 0
    assert await get_entry_transactions(session_factory, wallet.user_id, tournament.id) == []


@pytest.mark.asyncio
async def test_user_without_wallet_has_zero_balance(service, session_factory):
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("1.00"))

    with pytest.raises(InsufficientFunds) as exc_info:
        await service.join_tournament(uuid4(), tournament.id)

    assert exc_info.value.current_balance == Decimal("0")


@pytest.mark.asyncio
async def test_free_tournament_needs_no_funds(service, session_factory):
    wallet = await create_test_wallet(session_factory)
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("0"))

    result = await service.join_tournament(wallet.user_id, tournament.id)

    assert result.balance == Decimal("0")
    entries = await get_entry_transactions(session_factory, wallet.user_id, tournament.id)
    assert [e.status for e in entries] == ["completed"]


@pytest.mark.asyncio
async def test_second_join_is_refused_without_second_debit(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    await service.join_tournament(wallet.user_id, tournament.id)
    with pytest.raises(AlreadyJoined):
        await service.join_tournament(wallet.user_id, tournament.id)

    assert await get_balance(session_factory, wallet.user_id) == Decimal("40.00")
    assert await count_participants(session_factory, tournament.id) == 1
    assert len(await get_entry_transactions(session_factory, wallet.user_id, tournament.id)) == 1


@pytest.mark.asyncio
async def test_idempotency_key_replays_original_result(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    first = await service.join_tournament(wallet.user_id, tournament.id, idempotency_key="join-1")
    again = await service.join_tournament(wallet.user_id, tournament.id, idempotency_key="join-1")

    assert again.replayed is True
    assert again.transaction_id == first.transaction_id
    assert again.balance == Decimal("40.00")
    assert await get_balance(session_factory, wallet.user_id) == Decimal("40.00")

    with pytest.raises(AlreadyJoined):
        await service.join_tournament(wallet.user_id, tournament.id, idempotency_key="join-2")


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["completed", "cancelled"])
async def test_finished_tournaments_cannot_be_joined(service, session_factory, status):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, status=status)

    with pytest.raises(NotJoinable):
        await service.join_tournament(wallet.user_id, tournament.id)

    assert await get_balance(session_factory, wallet.user_id) == Decimal("50.00")


@pytest.mark.asyncio
async def test_active_tournament_can_still_be_joined(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, status="active")

    result = await service.join_tournament(wallet.user_id, tournament.id)
    assert result.balance == Decimal("40.00")


@pytest.mark.asyncio
async def test_unknown_tournament(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))

    with pytest.raises(NotFound):
        await service.join_tournament(wallet.user_id, uuid4())


@pytest.mark.asyncio
async def test_missing_user_is_unauthorized(service, session_factory):
    tournament = await create_test_tournament(session_factory)

    with pytest.raises(Unauthorized):
        await service.join_tournament(None, tournament.id)


@pytest.mark.asyncio
async def test_full_tournament_is_refused(service, session_factory):
    first = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    second = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, total_slots=1)

    await service.join_tournament(first.user_id, tournament.id)
    with pytest.raises(TournamentFull):
        await service.join_tournament(second.user_id, tournament.id)

    assert await get_balance(session_factory, second.user_id) == Decimal("50.00")


@pytest.mark.asyncio
async def test_failure_after_debit_rolls_back_and_leaves_failed_trace(service, session_factory, monkeypatch):
    wallet = await create_test_wallet(session_factory, balance=Decimal("25.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    async def broken_transition(session, transaction_id, new_status):
        raise RuntimeError("storage went away")

    monkeypatch.setattr("gamearena.services.settlement.transition_transaction_status", broken_transition)

    with pytest.raises(Unknown):
        await service.join_tournament(wallet.user_id, tournament.id)

    assert await get_balance(session_factory, wallet.user_id) == Decimal("25.00")
    assert await count_participants(session_factory, tournament.id) == 0

    entries = await get_entry_transactions(session_factory, wallet.user_id, tournament.id)
    assert [e.status for e in entries] == ["failed"]
    assert entries[0].amount == Decimal("10.00")


@pytest.mark.asyncio
async def test_refused_debit_cancels_the_entry(service, session_factory, monkeypatch):
    wallet = await create_test_wallet(session_factory, balance=Decimal("25.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    async def refusing_debit(session, user_id, amount):
        return None

    monkeypatch.setattr("gamearena.services.settlement.debit_wallet", refusing_debit)

    with pytest.raises(InsufficientFunds):
        await service.join_tournament(wallet.user_id, tournament.id)

    assert await get_balance(session_factory, wallet.user_id) == Decimal("25.00")
    assert await count_participants(session_factory, tournament.id) == 0
    entries = await get_entry_transactions(session_factory, wallet.user_id, tournament.id)
    assert [e.status for e in entries] == ["cancelled"]


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_join(
    service, session_factory, monkeypatch, no_notification_retries
):
    wallet = await create_test_wallet(session_factory, balance=Decimal("25.00"))
    tournament = await create_test_tournament(session_factory, entry_fee=Decimal("10.00"))

    async def broken_create_notification(*args, **kwargs):
        raise RuntimeError("notifications table unavailable")

    monkeypatch.setattr("gamearena.services.notifications.create_notification", broken_create_notification)

    result = await service.join_tournament(wallet.user_id, tournament.id)

    assert result.balance == Decimal("15.00")
    assert await count_participants(session_factory, tournament.id) == 1
    assert len(no_notification_retries) == 1
    args, _ = no_notification_retries[0]
    assert args[0] == wallet.user_id
    assert args[1] == "Tournament Joined"


@pytest.mark.asyncio
async def test_capacity_is_checked_before_membership_but_not_for_replays(service, session_factory):
    wallet = await create_test_wallet(session_factory, balance=Decimal("50.00"))
    tournament = await create_test_tournament(session_factory, total_slots=1, entry_fee=Decimal("10.00"))

    first = await service.join_tournament(wallet.user_id, tournament.id, idempotency_key="only-seat")

    with pytest.raises(TournamentFull):
        await service.join_tournament(wallet.user_id, tournament.id)

    replay = await service.join_tournament(wallet.user_id, tournament.id, idempotency_key="only-seat")
    assert replay.replayed is True
    assert replay.transaction_id == first.transaction_id
    assert await get_balance(session_factory, wallet.user_id) == Decimal("40.00")
