"""
Error Taxonomy

Purpose: Standard errors raised or reported by the transport shim.
Defines a Pydantic model for structured error communication and the
Python exceptions used for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Request construction
    INVALID_URL = "INVALID_URL"

    # Transport
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    HTTP_STATUS_ERROR = "HTTP_STATUS_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class ErrorInfo(BaseModel):
    """
    Structured error description.

    Lets callers log or serialize a failure without holding on to the
    exception object (and its traceback).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.TRANSPORT_ERROR],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the caller may reasonably retry the operation",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class SoapwireException(Exception):
    """
    Base exception for all soapwire errors.

    Carries structured error information and can be converted to an
    ErrorInfo model.
    """

    def __init__(
        self,
        message: str,
        code: str = "SOAPWIRE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ErrorInfo:
        """Convert this exception to an ErrorInfo model."""
        return ErrorInfo(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidURLError(SoapwireException, ValueError):
    """Raised when a target URL cannot be split into scheme, host and path."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if url is not None:
            full_details["url"] = url
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_URL,
            details=full_details,
            retryable=False,
        )


class TransportError(SoapwireException):
    """
    Failure reported by the transport (connection refused, DNS, timeout, TLS)
    or a non-2xx status surfaced through SoapResponse.raise_for_status().
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ) -> None:
        full_details = details or {}
        if status_code is not None:
            full_details["status_code"] = status_code
        if url is not None:
            full_details["url"] = url
        super().__init__(
            message=message,
            code=ErrorCodes.HTTP_STATUS_ERROR if status_code is not None else ErrorCodes.TRANSPORT_ERROR,
            details=full_details,
            retryable=retryable,
        )
        self.status_code = status_code
        self.url = url
