"""Machine-readable error codes and their HTTP mapping."""

from __future__ import annotations

from enum import IntEnum

from fastapi import HTTPException, status


class ErrCode(IntEnum):
    """Error codes grouped by thousands: 1xxx generic, 2xxx auth, 4xxx notification."""

    # Generic
    INVALID_REQUEST = 1003
    STORE_UNAVAILABLE = 1004

    # Authentication
    AUTHENTICATION_REQUIRED = 2000
    INVALID_TOKEN = 2001

    # Notification
    READ_STATE_IRREVERSIBLE = 4001
    PUSH_SUBSCRIPTION_INVALID = 4101

    def with_messages(self, *messages: str) -> ErrCodeError:
        return ErrCodeError(self, messages)

    def with_errors(self, *errors: BaseException) -> ErrCodeError:
        return ErrCodeError(self, tuple(str(err) for err in errors if err))


class ErrCodeError(Exception):
    def __init__(self, code: ErrCode, messages: tuple[str, ...] = ()) -> None:
        self.code = code
        self.messages = tuple(m for m in messages if m)
        super().__init__(str(self))

    def __str__(self) -> str:
        head = f"{self.code.name}({self.code.value})"
        if self.messages:
            return f"{head}: {'; '.join(self.messages)}"
        return head

    def as_dict(self) -> dict:
        if not self.messages:
            return {"code": self.code.value, "msg": self.code.name.replace("_", " ").title(), "info": []}
        primary, *rest = self.messages
        body: dict = {"code": self.code.value, "msg": primary}
        if rest:
            body["info"] = rest
        return body


_STATUS_MAP: dict[ErrCode, int] = {
    ErrCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrCode.READ_STATE_IRREVERSIBLE: status.HTTP_400_BAD_REQUEST,
    ErrCode.PUSH_SUBSCRIPTION_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrCode.AUTHENTICATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
}


def handle_auth_error(error: ErrCodeError) -> HTTPException:
    """Translate an :class:`ErrCodeError` into the ``HTTPException`` a route raises."""
    status_code = _STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=error.as_dict())
