"""
Integration tests for profile endpoints, game stats and achievements
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from gamearena.models.participant import Participant
from gamearena.models.tournament import Tournament
from gamearena.repos.participant_repo import get_user_participations
from gamearena.repos.transaction_repo import create_transaction
from gamearena.services.profile_stats import get_game_stats
from tests.fixtures.database import create_test_tournament, create_test_wallet, set_placement


@pytest.mark.asyncio
async def test_profile_created_on_first_access(test_client, auth_headers):
    user_id = uuid4()

    response = await test_client.get("/api/v1/profile", headers=auth_headers(user_id, "ace.player@example.com"))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(user_id)
    assert data["username"] == "ace.player"
    assert data["game_stats"] == []
    assert data["high_roller"] is False
    assert data["hat_trick"] is False


@pytest.mark.asyncio
async def test_update_profile(test_client, auth_headers):
    user_id = uuid4()
    headers = auth_headers(user_id, "rookie@example.com")
    await test_client.get("/api/v1/profile", headers=headers)

    response = await test_client.put("/api/v1/profile", headers=headers, json={
        "username": "rookie_no_more",
        "fullName": "Sam Rivera",
        "steamId": "STEAM_0:1:1234",
        "riotId": "rookie#EUW"
    })

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["username"] == "rookie_no_more"
    assert data["full_name"] == "Sam Rivera"
    assert data["steam_id"] == "STEAM_0:1:1234"
    assert data["riot_id"] == "rookie#EUW"


@pytest.mark.asyncio
async def test_username_must_be_unique(test_client, auth_headers):
    await test_client.get("/api/v1/profile", headers=auth_headers(uuid4(), "taken@example.com"))
    other = auth_headers(uuid4(), "other@example.com")
    await test_client.get("/api/v1/profile", headers=other)

    response = await test_client.put("/api/v1/profile", headers=other, json={"username": "taken"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_public_profile_and_missing_profile(test_client, auth_headers):
    user_id = uuid4()
    await test_client.get("/api/v1/profile", headers=auth_headers(user_id, "visible@example.com"))

    found = await test_client.get(f"/api/v1/profile/{user_id}")
    missing = await test_client.get(f"/api/v1/profile/{uuid4()}")

    assert found.status_code == 200
    assert found.json()["username"] == "visible"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_game_stats_and_achievements(test_client, session_factory, auth_headers):
    wallet = await create_test_wallet(session_factory, balance=Decimal("500.00"))
    headers = auth_headers(wallet.user_id, "champ@example.com")

    wins = []
    for i in range(3):
        tournament = await create_test_tournament(
            session_factory, title=f"Valorant Cup {i}", entry_fee=Decimal("50.00") if i == 0 else Decimal("5.00")
        )
        await test_client.post(f"/api/v1/tournaments/{tournament.id}/join", headers=headers)
        await set_placement(session_factory, tournament.id, wallet.user_id, 1)
        wins.append(tournament)

    apex = await create_test_tournament(session_factory, title="Apex Night", game_name="Apex Legends",
                                        entry_fee=Decimal("5.00"))
    await test_client.post(f"/api/v1/tournaments/{apex.id}/join", headers=headers)
    await set_placement(session_factory, apex.id, wallet.user_id, 4)

    async with session_factory() as session:
        await create_transaction(
            session,
            user_id=wallet.user_id,
            tx_type="tournament_prize",
            amount=Decimal("120.00"),
            status="completed",
            tournament_id=wins[0].id
        )
        await session.commit()

    data = (await test_client.get("/api/v1/profile", headers=headers)).json()

    stats = {s["game"]: s for s in data["game_stats"]}
    assert stats["Valorant"]["tournaments"] == 3
    assert stats["Valorant"]["wins"] == 3
    assert stats["Valorant"]["winRate"] == 100.0
    assert stats["Valorant"]["earnings"] == 120.0
    assert stats["Apex Legends"]["tournaments"] == 1
    assert stats["Apex Legends"]["wins"] == 0
    assert stats["Apex Legends"]["winRate"] == 0.0
    assert data["high_roller"] is True
    assert data["hat_trick"] is True


@pytest.mark.asyncio
async def test_same_email_local_part_gets_a_distinct_username(test_client, auth_headers):
    first_id, second_id = uuid4(), uuid4()

    first = await test_client.get("/api/v1/profile", headers=auth_headers(first_id, "alex@gmail.com"))
    second = await test_client.get("/api/v1/profile", headers=auth_headers(second_id, "alex@yahoo.com"))

    assert first.status_code == 200
    assert second.status_code == 200, second.text
    assert first.json()["username"] == "alex"
    assert second.json()["username"] == f"alex_{second_id.hex[:8]}"

    again = await test_client.get("/api/v1/profile", headers=auth_headers(second_id, "alex@yahoo.com"))
    assert again.json()["username"] == second.json()["username"]


@pytest.mark.asyncio
async def test_long_email_local_part_is_truncated(test_client, auth_headers):
    local_part = "x" * 60

    response = await test_client.get("/api/v1/profile", headers=auth_headers(uuid4(), f"{local_part}@example.com"))

    assert response.status_code == 200, response.text
    assert response.json()["username"] == "x" * 48


@pytest.mark.asyncio
async def test_long_colliding_local_part_keeps_suffix_within_limit(test_client, auth_headers):
    local_part = "y" * 60
    await test_client.get("/api/v1/profile", headers=auth_headers(uuid4(), f"{local_part}@example.com"))
    user_id = uuid4()

    response = await test_client.get("/api/v1/profile", headers=auth_headers(user_id, f"{local_part}@example.org"))

    assert response.status_code == 200, response.text
    username = response.json()["username"]
    assert len(username) == 48
    assert username.endswith(f"_{user_id.hex[:8]}")


@pytest.mark.asyncio
async def test_game_stats_count_every_participation(session_factory):
    user_id = uuid4()
    async with session_factory() as session:
        for i in range(501):
            tournament = Tournament(
                title=f"Daily Cup {i}",
                game_name="Chess",
                start_time=datetime.now(timezone.utc) - timedelta(days=1),
                total_slots=2,
                entry_fee=Decimal("0"),
                prize_pool=Decimal("0"),
                status="completed",
            )
            session.add(tournament)
            await session.flush()
            session.add(Participant(tournament_id=tournament.id, user_id=user_id, placement=1))
        await session.commit()

    async with session_factory() as session:
        stats = await get_game_stats(session, user_id)
        participations = await get_user_participations(session, user_id)

    assert len(participations) == 501
    assert stats[0]["tournaments"] == 501
    assert stats[0]["wins"] == 501
