import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.models.sessions import Session
from beacon.repos.session import SessionRepository


@pytest.mark.integration
class TestTrackDeviceAPI:
    """POST /api/track-device."""

    async def test_requires_authentication(
        self, async_client: AsyncClient, db_session: AsyncSession, auth_session: Session
    ):
        response = await async_client.post("/api/track-device", json={}, headers={"User-Agent": "intruder"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == 2000
        await db_session.refresh(auth_session)
        assert auth_session.user_agent is None

    @pytest.mark.parametrize("content", [b"{not json", b'{"deviceInfo": "not-an-object"}'])
    async def test_anonymous_bad_body_is_401(self, async_client: AsyncClient, content: bytes):
        response = await async_client.post(
            "/api/track-device", content=content, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == 2000

    async def test_unknown_token_rejected(self, async_client: AsyncClient):
        response = await async_client.post("/api/track-device", headers={"Authorization": "Bearer not-a-session"})
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == 2001

    async def test_tracks_device(
        self, async_client: AsyncClient, db_session: AsyncSession, auth_session: Session, auth_headers: dict[str, str]
    ):
        headers = {
            **auth_headers,
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0)",
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
        }
        response = await async_client.post(
            "/api/track-device",
            json={"deviceInfo": {"platform": "Win32"}, "fingerprint": "k3j9x2"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "tracked": True}
        await db_session.refresh(auth_session)
        assert auth_session.user_agent == "Mozilla/5.0 (Windows NT 10.0)"
        assert auth_session.ip_address == "203.0.113.7"

    async def test_long_values_truncated(
        self, async_client: AsyncClient, db_session: AsyncSession, auth_session: Session, auth_headers: dict[str, str]
    ):
        headers = {**auth_headers, "User-Agent": "A" * 300, "X-Real-IP": "2001:db8::" + "f" * 60}
        response = await async_client.post("/api/track-device", headers=headers)

        assert response.status_code == 200
        await db_session.refresh(auth_session)
        assert len(auth_session.user_agent or "") == 255
        assert len(auth_session.ip_address or "") == 45

    async def test_cookie_authentication(
        self, async_client: AsyncClient, db_session: AsyncSession, auth_session: Session
    ):
        headers = {
            "Cookie": f"better-auth.session_token={auth_session.token}.c2lnbmF0dXJl",
            "User-Agent": "cookie-client",
        }
        response = await async_client.post("/api/track-device", headers=headers)

        assert response.status_code == 200
        await db_session.refresh(auth_session)
        assert auth_session.user_agent == "cookie-client"

    async def test_malformed_body_is_400(self, async_client: AsyncClient, auth_headers: dict[str, str]):
        response = await async_client.post(
            "/api/track-device",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == 1003

    async def test_wrong_field_type_is_400(self, async_client: AsyncClient, auth_headers: dict[str, str]):
        response = await async_client.post(
            "/api/track-device", json={"deviceInfo": "not-an-object"}, headers=auth_headers
        )
        assert response.status_code == 400

    async def test_store_failure_is_500(
        self, async_client: AsyncClient, auth_headers: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ):
        async def broken_update(*args, **kwargs) -> int:
            raise OperationalError("UPDATE session", {}, Exception("database is locked"))

        monkeypatch.setattr(SessionRepository, "update_device_metadata", broken_update)
        response = await async_client.post("/api/track-device", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == 1004


@pytest.mark.integration
class TestDevicesAPI:
    async def test_list_devices(self, async_client: AsyncClient, auth_session: Session, auth_headers: dict[str, str]):
        await async_client.post("/api/track-device", headers={**auth_headers, "User-Agent": "listed-agent"})

        response = await async_client.get("/api/devices", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["devices"][0]["id"] == auth_session.id
        assert data["devices"][0]["current"] is True
        assert data["devices"][0]["user_agent"] == "listed-agent"

    async def test_list_devices_requires_auth(self, async_client: AsyncClient):
        response = await async_client.get("/api/devices")
        assert response.status_code == 401


@pytest.mark.integration
class TestHealthAPI:
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
