from .error_code import ErrCode, ErrCodeError, handle_auth_error

__all__ = ["ErrCode", "ErrCodeError", "handle_auth_error"]
