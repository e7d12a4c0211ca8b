"""
Test health and metrics endpoints
"""

import pytest

from gamearena.api.health import health_check


@pytest.mark.asyncio
async def test_health_endpoint(test_client):
    """Test that health endpoint returns 200 and correct response"""
    response = await test_client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class _BrokenSession:
    async def execute(self, statement):
        raise ConnectionError("database is down")


@pytest.mark.asyncio
async def test_health_reports_unreachable_database():
    """Test health endpoint directly with a failing session"""
    response = await health_check(session=_BrokenSession())
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_join_counter(test_client):
    response = await test_client.get("/metrics")
    assert response.status_code == 200
    assert "tournament_joins_total" in response.text
