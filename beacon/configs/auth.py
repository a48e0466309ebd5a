from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """How the caller's session is located on an incoming request.

    Sessions are issued by the authentication service; this service only
    resolves them.
    """

    SessionCookieName: str = Field(
        default="better-auth.session_token",
        description="Cookie carrying the session token (signed as ``<token>.<signature>``)",
    )
