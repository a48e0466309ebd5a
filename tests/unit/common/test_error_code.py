"""Unit tests for ErrCode, ErrCodeError, and handle_auth_error."""

import pytest

from beacon.common.code import ErrCode, ErrCodeError, handle_auth_error


# ------------------------------------------------------------------
# ErrCode.with_messages / with_errors
# ------------------------------------------------------------------


class TestErrCode:
    def test_with_messages_creates_error(self) -> None:
        error = ErrCode.READ_STATE_IRREVERSIBLE.with_messages("Notifications cannot be marked unread")
        assert isinstance(error, ErrCodeError)
        assert error.code == ErrCode.READ_STATE_IRREVERSIBLE
        assert "Notifications cannot be marked unread" in error.messages

    def test_with_messages_multiple(self) -> None:
        error = ErrCode.INVALID_REQUEST.with_messages("msg1", "msg2")
        assert len(error.messages) == 2

    def test_with_errors_extracts_strings(self) -> None:
        error = ErrCode.STORE_UNAVAILABLE.with_errors(ValueError("bad value"), RuntimeError("runtime fail"))
        assert "bad value" in error.messages
        assert "runtime fail" in error.messages

    def test_with_errors_drops_empty_messages(self) -> None:
        error = ErrCode.STORE_UNAVAILABLE.with_errors(ValueError(""))
        assert error.messages == ()

    def test_code_set(self) -> None:
        assert {code.name for code in ErrCode} == {
            "INVALID_REQUEST",
            "STORE_UNAVAILABLE",
            "AUTHENTICATION_REQUIRED",
            "INVALID_TOKEN",
            "READ_STATE_IRREVERSIBLE",
            "PUSH_SUBSCRIPTION_INVALID",
        }


# ------------------------------------------------------------------
# ErrCodeError
# ------------------------------------------------------------------


class TestErrCodeError:
    def test_format_with_messages(self) -> None:
        error = ErrCodeError(ErrCode.READ_STATE_IRREVERSIBLE, ("Cannot mark unread",))
        formatted = str(error)
        assert "READ_STATE_IRREVERSIBLE" in formatted
        assert "4001" in formatted
        assert "Cannot mark unread" in formatted

    def test_format_without_messages(self) -> None:
        assert str(ErrCodeError(ErrCode.INVALID_TOKEN, ())) == "INVALID_TOKEN(2001)"

    def test_as_dict_with_messages(self) -> None:
        error = ErrCodeError(ErrCode.INVALID_REQUEST, ("primary", "detail1", "detail2"))
        d = error.as_dict()
        assert d["code"] == 1003
        assert d["msg"] == "primary"
        assert d["info"] == ["detail1", "detail2"]

    def test_as_dict_single_message(self) -> None:
        d = ErrCodeError(ErrCode.STORE_UNAVAILABLE, ("only message",)).as_dict()
        assert d["msg"] == "only message"
        assert "info" not in d

    def test_as_dict_no_messages(self) -> None:
        d = ErrCodeError(ErrCode.AUTHENTICATION_REQUIRED, ()).as_dict()
        assert d["msg"] == "Authentication Required"
        assert d["info"] == []

    def test_empty_messages_filtered(self) -> None:
        error = ErrCodeError(ErrCode.INVALID_REQUEST, ("", "valid", ""))
        assert error.messages == ("valid",)


# ------------------------------------------------------------------
# handle_auth_error
# ------------------------------------------------------------------


class TestHandleAuthError:
    @pytest.mark.parametrize(
        ("code", "expected_status"),
        [
            # 400
            (ErrCode.INVALID_REQUEST, 400),
            (ErrCode.READ_STATE_IRREVERSIBLE, 400),
            (ErrCode.PUSH_SUBSCRIPTION_INVALID, 400),
            # 401
            (ErrCode.AUTHENTICATION_REQUIRED, 401),
            (ErrCode.INVALID_TOKEN, 401),
            # 500
            (ErrCode.STORE_UNAVAILABLE, 500),
        ],
    )
    def test_status_code_mapping(self, code: ErrCode, expected_status: int) -> None:
        exc = handle_auth_error(code.with_messages("test"))
        assert exc.status_code == expected_status

    def test_response_body_matches_as_dict(self) -> None:
        error = ErrCode.STORE_UNAVAILABLE.with_messages("Failed to track device")
        assert handle_auth_error(error).detail == error.as_dict()
