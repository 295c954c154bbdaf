"""
Schemas

Purpose: Export the error models and exceptions shared across soapwire.
"""

from .errors import (
    ErrorCodes,
    ErrorInfo,
    InvalidURLError,
    SoapwireException,
    TransportError,
)

__all__ = [
    "ErrorCodes",
    "ErrorInfo",
    "InvalidURLError",
    "SoapwireException",
    "TransportError",
]
