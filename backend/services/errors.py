"""
Hi-Pot Test Log - Service Error Taxonomy
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): InvalidField validation code for malformed values
v1.0.0 (2026-10-01): Initial auth / validation / storage errors

Services raise these; main.py maps them onto HTTP responses of the form
{"success": false, "error": <message>, "code": <code>}.
"""

from enum import Enum


class AuthErrorCode(str, Enum):
    NO_TOKEN = "NO_TOKEN"
    EXPIRED = "TOKEN_EXPIRED"
    INVALID = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


class ValidationErrorCode(str, Enum):
    MISSING_FIELD = "MISSING_FIELD"
    EMPTY_LIST = "EMPTY_LIST"
    BAD_PDF_DATA = "BAD_PDF_DATA"
    INVALID_FIELD = "INVALID_FIELD"


class StorageErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    WRITE_FAILURE = "WRITE_FAILURE"


class ApiError(Exception):
    """Base class for errors that surface to the API caller"""

    status_code = 500

    def __init__(self, code: Enum, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code.value}


class AuthError(ApiError):
    """Missing, expired or invalid bearer token, or a failed login"""

    @property
    def status_code(self) -> int:
        # Malformed or forged tokens are forbidden; everything else asks for a login
        if self.code == AuthErrorCode.INVALID:
            return 403
        return 401


class ValidationError(ApiError):
    """Submitted work order rejected before any persistence"""

    status_code = 400

    def __init__(self, code: ValidationErrorCode, message: str, field: str = None):
        super().__init__(code, message)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class StorageError(ApiError):
    """Audit store lookup miss or failed write"""

    @property
    def status_code(self) -> int:
        if self.code == StorageErrorCode.NOT_FOUND:
            return 404
        return 500
