from pydantic import BaseModel, Field


class PushConfig(BaseModel):
    """Web Push delivery configuration.

    The VAPID pair must be generated once per deployment and injected via
    ``BEACON_Push_VapidPrivateKey`` / ``BEACON_Push_VapidPublicKey``.  When
    either is empty, notifications are still stored but push delivery is
    skipped.
    """

    VapidPrivateKey: str = Field(default="", description="VAPID private key (URL-safe base64, 32-byte raw scalar)")
    VapidPublicKey: str = Field(default="", description="VAPID public key (URL-safe base64, 65-byte EC point)")
    VapidContactEmail: str = Field(default="noreply@beacon.dev", description="VAPID contact email (mailto:...)")

    Icon: str = Field(default="/logo.svg", description="Default notification icon")
    Badge: str = Field(default="/logo.svg", description="Default notification badge")
    DefaultUrl: str = Field(default="/notifications", description="Deep link used when a payload has no url")
    Ttl: int = Field(default=86400, description="Seconds the push service keeps an undelivered message")

    TimeoutSeconds: float = Field(default=10.0, description="Deadline for a single endpoint delivery")
    MaxConcurrency: int = Field(default=8, ge=1, description="Concurrent deliveries within one dispatch")
    PruneExpired: bool = Field(default=True, description="Delete subscriptions answering 404/410")

    @property
    def enabled(self) -> bool:
        return bool(self.VapidPrivateKey and self.VapidPublicKey)
