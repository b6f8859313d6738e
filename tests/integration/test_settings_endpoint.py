import pytest


@pytest.mark.asyncio
class TestSettingsEndpoint:
    async def test_non_chair_forbidden(self, pc_client):
        response = await pc_client.get("/conf/settings")
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "insufficient_permissions"

    async def test_save_list_delete(self, chair_client):
        response = await chair_client.put("/conf/settings/au_seerev", json={"value": 1})
        assert response.status_code == 200
        assert response.json() == {"name": "au_seerev", "changed": True}

        response = await chair_client.put("/conf/settings/conf_blurb", json={"value": 1, "data": {"a": 1}})
        assert response.json()["changed"] is True

        listing = (await chair_client.get("/conf/settings")).json()["settings"]
        assert {"name": "au_seerev", "value": 1, "data": None} in listing
        assert {"name": "conf_blurb", "value": 1, "data": '{"a": 1}'} in listing

        response = await chair_client.delete("/conf/settings/au_seerev")
        assert response.status_code == 200
        names = [s["name"] for s in (await chair_client.get("/conf/settings")).json()["settings"]]
        assert "au_seerev" not in names

    async def test_delete_missing_is_404(self, chair_client):
        response = await chair_client.delete("/conf/settings/nope")
        assert response.status_code == 404

    async def test_changes_are_logged(self, chair_client):
        await chair_client.put("/conf/settings/pc_seeallrev", json={"value": 1})
        await chair_client.put("/conf/settings/pc_seeallrev", json={"value": 1})
        body = (await chair_client.get("/conf/log", params={"contact_id": 1})).json()
        assert body["total"] == 1
        assert body["items"][0]["action"] == "Setting pc_seeallrev changed"

    async def test_log_requires_chair(self, pc_client):
        assert (await pc_client.get("/conf/log")).status_code == 403
