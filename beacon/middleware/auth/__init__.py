"""Resolve the caller from the session issued by the authentication service."""

import logging
from dataclasses import dataclass
from urllib.parse import unquote

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.common.code import ErrCode, handle_auth_error
from beacon.configs import configs
from beacon.infra.database import get_session
from beacon.repos.session import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthContext:
    user_id: str
    session_token: str


def extract_session_token(request: Request) -> str | None:
    """Bearer token if present, otherwise the token part of the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    cookie = request.cookies.get(configs.Auth.SessionCookieName)
    if cookie:
        # Signed cookies look like "<token>.<signature>"
        token = unquote(cookie).split(".", 1)[0]
        return token or None
    return None


async def get_current_session(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthContext:
    token = extract_session_token(request)
    if not token:
        raise handle_auth_error(ErrCode.AUTHENTICATION_REQUIRED.with_messages("Unauthorized"))

    session = await SessionRepository(db).get_active_by_token(token)
    if session is None:
        logger.debug("Rejected unknown or expired session token")
        raise handle_auth_error(ErrCode.INVALID_TOKEN.with_messages("Unauthorized"))

    return AuthContext(user_id=session.user_id, session_token=session.token)


async def get_current_user(auth: AuthContext = Depends(get_current_session)) -> str:
    return auth.user_id


__all__ = ["AuthContext", "extract_session_token", "get_current_session", "get_current_user"]
