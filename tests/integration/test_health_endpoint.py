import pytest


@pytest.mark.asyncio
async def test_health_is_public(anon_client):
    response = await anon_client.get("/conf/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["uptime_seconds"] >= 0


@pytest.mark.asyncio
async def test_root(anon_client):
    response = await anon_client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "conference-backend"
