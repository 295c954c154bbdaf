"""soapwire - HTTP transport shim for SOAP clients."""

from soapwire.version import __version__
from soapwire.http import (
    RequestDescriptor,
    SoapHttpClient,
    SoapResponse,
    build_request,
    normalize_response,
)
from soapwire.schemas import InvalidURLError, TransportError

__all__ = [
    "__version__",
    "InvalidURLError",
    "RequestDescriptor",
    "SoapHttpClient",
    "SoapResponse",
    "TransportError",
    "build_request",
    "normalize_response",
]
