from datetime import datetime, timedelta, timezone
from uuid import uuid4

from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.models.push_subscription import PushSubscription
from beacon.models.sessions import Session


async def create_auth_session(
    db: AsyncSession,
    user_id: str,
    token: str | None = None,
    expires_in: timedelta = timedelta(days=7),
) -> Session:
    """Insert a session row the way the authentication service would."""
    session = Session(
        id=uuid4().hex,
        token=token or uuid4().hex,
        user_id=user_id,
        expires_at=datetime.now(timezone.utc) + expires_in,
    )
    db.add(session)
    await db.commit()
    return session


async def create_push_subscription(db: AsyncSession, user_id: str, endpoint: str) -> PushSubscription:
    sub = PushSubscription(user_id=user_id, endpoint=endpoint, keys_p256dh="p256dh-key", keys_auth="auth-secret")
    db.add(sub)
    await db.commit()
    return sub
