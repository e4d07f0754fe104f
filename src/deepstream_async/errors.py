"""
Standardized errors for deepstream-async.

Every failure raised by the async layer is a DeepstreamAsyncError subclass
carrying a numeric code, so callers can catch the whole family at once or
branch on a specific code.

Error Code Ranges:
- 1xxx: Authentication errors
- 2xxx: Record errors
- 3xxx: RPC errors
- 4xxx: Path errors
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


# ============================================================================
# Standard Error Codes
# ============================================================================


class ErrorCode(IntEnum):
    """Error codes used by deepstream-async."""

    # Login rejected by the store
    AUTH_ERROR = 1001

    # Store signaled an error for a record, list or snapshot request
    RECORD_ERROR = 2001

    # Existence check failed in strict mode
    NOT_FOUND_ERROR = 2002

    # Remote procedure call failed
    RPC_ERROR = 3001

    # Write target's container does not exist
    PATH_ERROR = 4001


ERROR_CODE_NAMES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_ERROR: "AUTH_ERROR",
    ErrorCode.RECORD_ERROR: "RECORD_ERROR",
    ErrorCode.NOT_FOUND_ERROR: "NOT_FOUND_ERROR",
    ErrorCode.RPC_ERROR: "RPC_ERROR",
    ErrorCode.PATH_ERROR: "PATH_ERROR",
}


# ============================================================================
# Base Error Class
# ============================================================================


class DeepstreamAsyncError(Exception):
    """
    Base error class for all deepstream-async errors.

    Error Hierarchy:
    - DeepstreamAsyncError (base)
      - AuthError: Login rejected
      - RecordError: Record/list/snapshot request failed
        - NotFoundError: Record does not exist (strict existence check)
      - RpcError: Remote call failed
      - PathError: Write into a container that does not exist

    Example:
        ```python
        try:
            record = await ds.get_record("users/123", must_exist=True)
        except DeepstreamAsyncError as error:
            print(f"[{error.code_name}] {error.message}")
        ```

    Attributes:
        message: Human-readable error message.
        code: Numeric error code.
        code_name: String name of the error code.
        detail: Raw rejection payload reported by the store, if any.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        code_name: str | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.code_name = code_name or ERROR_CODE_NAMES.get(code, "UNKNOWN_ERROR")
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.code_name}({self.code}): {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"

    def to_dict(self) -> dict[str, Any]:
        """Return a dictionary representation of the error."""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "code": int(self.code),
            "code_name": self.code_name,
        }


# ============================================================================
# Specific Error Types
# ============================================================================


class AuthError(DeepstreamAsyncError):
    """
    Error raised when the store rejects a login.

    Error Code: 1001 (AUTH_ERROR)

    The store's rejection payload is kept in ``detail``.
    """

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message, ErrorCode.AUTH_ERROR, "AUTH_ERROR", detail)


class RecordError(DeepstreamAsyncError):
    """
    Error raised when the store signals an error for a record request.

    Error Code: 2001 (RECORD_ERROR)

    Common causes:
    - Snapshot of a record that does not exist
    - Permission denied for the record
    - Store-side storage failure

    Attributes:
        ref: The record reference the request was made for.
    """

    def __init__(
        self,
        message: str,
        ref: str | None = None,
        detail: Any = None,
        *,
        code: ErrorCode = ErrorCode.RECORD_ERROR,
    ) -> None:
        super().__init__(message, code, detail=detail)
        self.ref = ref


class NotFoundError(RecordError):
    """
    Error raised by a strict existence check when the record is absent.

    Error Code: 2002 (NOT_FOUND_ERROR)
    """

    def __init__(self, ref: str) -> None:
        super().__init__(
            f"Record {ref} does not exist.",
            ref,
            code=ErrorCode.NOT_FOUND_ERROR,
        )


class RpcError(DeepstreamAsyncError):
    """
    Error raised when a remote procedure call fails.

    Error Code: 3001 (RPC_ERROR)

    Attributes:
        rpc_id: Name of the remote procedure that failed.
    """

    def __init__(
        self, message: str, rpc_id: str | None = None, detail: Any = None
    ) -> None:
        super().__init__(message, ErrorCode.RPC_ERROR, "RPC_ERROR", detail)
        self.rpc_id = rpc_id


class PathError(DeepstreamAsyncError):
    """
    Error raised when a field write targets a container that does not exist.

    Error Code: 4001 (PATH_ERROR)

    Attributes:
        path: The path expression that could not be written.
    """

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message, ErrorCode.PATH_ERROR, "PATH_ERROR")
        self.path = path


# ============================================================================
# Error Utilities
# ============================================================================


def is_error_code(error: BaseException, code: ErrorCode) -> bool:
    """
    Check if an error is a DeepstreamAsyncError with a specific error code.

    Example:
        ```python
        try:
            await ds.exists("users/1", reject_on_false=True)
        except Exception as error:
            if is_error_code(error, ErrorCode.NOT_FOUND_ERROR):
                ...
        ```
    """
    return isinstance(error, DeepstreamAsyncError) and error.code == code


def describe(detail: Any) -> str:
    """Render a store rejection payload as a message string."""
    if isinstance(detail, BaseException):
        return str(detail) or detail.__class__.__name__
    if isinstance(detail, str):
        return detail
    return repr(detail)
