"""
Integration tests for wallet repository balance operations
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from gamearena.repos.wallet_repo import credit_wallet, debit_wallet, get_balance, get_or_create_wallet


@pytest.mark.asyncio
async def test_get_or_create_wallet_is_stable(session_factory):
    user_id = uuid4()
    async with session_factory() as session:
        first = await get_or_create_wallet(session, user_id)
        second = await get_or_create_wallet(session, user_id)
        await session.commit()

    assert first.id == second.id
    assert first.balance == Decimal("0")


@pytest.mark.asyncio
async def test_debit_refuses_to_overdraw(session_factory):
    user_id = uuid4()
    async with session_factory() as session:
        await credit_wallet(session, user_id, Decimal("7.50"))

        assert await debit_wallet(session, user_id, Decimal("10.00")) is None
        assert await debit_wallet(session, user_id, Decimal("7.50")) == Decimal("0.00")
        await session.commit()

    async with session_factory() as session:
        assert await get_balance(session, user_id) == Decimal("0")


@pytest.mark.asyncio
async def test_debit_of_missing_wallet_is_refused(session_factory):
    async with session_factory() as session:
        assert await debit_wallet(session, uuid4(), Decimal("1.00")) is None


@pytest.mark.asyncio
async def test_invalid_amounts_are_rejected(session_factory):
    async with session_factory() as session:
        with pytest.raises(ValueError):
            await debit_wallet(session, uuid4(), Decimal("-1"))
        with pytest.raises(ValueError):
            await credit_wallet(session, uuid4(), Decimal("0"))


@pytest.mark.asyncio
async def test_get_or_create_wallet_survives_concurrent_create(session_factory, monkeypatch):
    from gamearena.repos import wallet_repo

    user_id = uuid4()
    async with session_factory() as session:
        existing = await get_or_create_wallet(session, user_id)
        await session.commit()

    real_lookup = wallet_repo.get_wallet_for_user
    lookups = []

    async def lookup_missing_first(session, user_id):
        lookups.append(user_id)
        if len(lookups) == 1:
            # The other request has not committed yet when we first look
            return None
        return await real_lookup(session, user_id)

    monkeypatch.setattr(wallet_repo, "get_wallet_for_user", lookup_missing_first)

    async with session_factory() as session:
        wallet = await get_or_create_wallet(session, user_id)
        await session.commit()

    assert wallet.id == existing.id
    assert len(lookups) == 2
    async with session_factory() as session:
        assert await get_balance(session, user_id) == Decimal("0")
