from types import SimpleNamespace

import pytest
from pywebpush import WebPushException

from beacon.configs import configs
from beacon.core.notification import vapid
from beacon.core.notification.vapid import PushDeliveryError, ensure_vapid_keys, send_push

INFO = {"endpoint": "https://push.example/a", "keys": {"p256dh": "p256dh", "auth": "auth"}}


class TestEnsureVapidKeys:
    def test_disabled_without_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(configs.Push, "VapidPrivateKey", "")
        assert ensure_vapid_keys() is False

    def test_enabled_with_keys(self, vapid_keys: None) -> None:
        assert ensure_vapid_keys() is True


class TestSendPush:
    async def test_refuses_without_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(configs.Push, "VapidPublicKey", "")
        with pytest.raises(PushDeliveryError):
            await send_push(INFO, {"title": "t"})

    async def test_passes_claims_and_payload(self, vapid_keys: None, monkeypatch: pytest.MonkeyPatch) -> None:
        captured: dict = {}

        def fake_webpush(**kwargs) -> None:
            captured.update(kwargs)

        monkeypatch.setattr(vapid, "webpush", fake_webpush)
        await send_push(INFO, {"title": "t"})

        assert captured["subscription_info"] == INFO
        assert captured["data"] == '{"title": "t"}'
        assert captured["vapid_private_key"] == "test-private-key"
        assert captured["vapid_claims"] == {"sub": f"mailto:{configs.Push.VapidContactEmail}"}
        assert captured["ttl"] == configs.Push.Ttl

    @pytest.mark.parametrize("status_code", [410, 404, 500])
    async def test_push_service_rejection(
        self, vapid_keys: None, monkeypatch: pytest.MonkeyPatch, status_code: int
    ) -> None:
        def fake_webpush(**kwargs) -> None:
            raise WebPushException("Push failed", response=SimpleNamespace(status_code=status_code))

        monkeypatch.setattr(vapid, "webpush", fake_webpush)
        with pytest.raises(PushDeliveryError) as exc_info:
            await send_push(INFO, {"title": "t"})

        assert exc_info.value.status_code == status_code

    async def test_network_error_wrapped(self, vapid_keys: None, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_webpush(**kwargs) -> None:
            raise ConnectionError("unreachable")

        monkeypatch.setattr(vapid, "webpush", fake_webpush)
        with pytest.raises(PushDeliveryError) as exc_info:
            await send_push(INFO, {"title": "t"})

        assert exc_info.value.status_code is None
        assert "ConnectionError" in str(exc_info.value)
