"""
Integration tests for notification endpoints
"""

import pytest
from uuid import uuid4

from gamearena.repos.notification_repo import create_notification


async def seed_notification(session_factory, user_id, title="Welcome"):
    async with session_factory() as session:
        notification = await create_notification(
            session,
            user_id=user_id,
            title=title,
            message="Hello there",
            notification_type="system"
        )
        await session.commit()
    return notification


@pytest.mark.asyncio
async def test_list_only_own_notifications(test_client, session_factory, auth_headers):
    mine, theirs = uuid4(), uuid4()
    await seed_notification(session_factory, mine, "For me")
    await seed_notification(session_factory, theirs, "Not for me")

    response = await test_client.get("/api/v1/notifications", headers=auth_headers(mine))

    assert response.status_code == 200
    assert [n["title"] for n in response.json()] == ["For me"]
    assert response.json()[0]["read"] is False


@pytest.mark.asyncio
async def test_mark_notification_read(test_client, session_factory, auth_headers):
    user_id = uuid4()
    notification = await seed_notification(session_factory, user_id)
    headers = auth_headers(user_id)

    response = await test_client.put("/api/v1/notifications", headers=headers, json={
        "id": str(notification.id), "read": True
    })

    assert response.status_code == 200
    assert response.json()["read"] is True
    listed = (await test_client.get("/api/v1/notifications", headers=headers)).json()
    assert listed[0]["read"] is True


@pytest.mark.asyncio
async def test_cannot_touch_someone_elses_notification(test_client, session_factory, auth_headers):
    notification = await seed_notification(session_factory, uuid4())

    response = await test_client.put("/api/v1/notifications", headers=auth_headers(uuid4()), json={
        "id": str(notification.id), "read": True
    })

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_notifications_require_auth(test_client):
    response = await test_client.get("/api/v1/notifications")
    assert response.status_code == 401
