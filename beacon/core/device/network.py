from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from beacon.core.device.fingerprint import EnvironmentSignals
from beacon.models.sessions import IP_ADDRESS_MAX_LENGTH, USER_AGENT_MAX_LENGTH

UNKNOWN_IP = "unknown"


def resolve_client_ip(headers: Mapping[str, str]) -> str:
    """First hop of ``X-Forwarded-For``, else ``X-Real-IP``, else ``"unknown"``."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    return UNKNOWN_IP


@dataclass(frozen=True, slots=True)
class RequestMeta:
    """Network metadata of one request, already cut to the session column limits."""

    user_agent: str
    ip_address: str
    language: str | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RequestMeta:
        return cls.build(
            user_agent=headers.get("user-agent") or "",
            ip_address=resolve_client_ip(headers),
            language=(headers.get("accept-language") or "").split(",")[0].split(";")[0].strip() or None,
        )

    @classmethod
    def build(cls, user_agent: str, ip_address: str, language: str | None = None) -> RequestMeta:
        return cls(
            user_agent=user_agent[:USER_AGENT_MAX_LENGTH],
            ip_address=ip_address[:IP_ADDRESS_MAX_LENGTH],
            language=language,
        )

    def signals(self) -> EnvironmentSignals:
        """Server-side fingerprint signals for clients that did not send one."""
        return EnvironmentSignals(user_agent=self.user_agent or None, language=self.language)
