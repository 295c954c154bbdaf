"""
HTTP Module

Request construction, response normalization and the transport facade.
"""

from .builder import (
    OPTION_MERGE_RULES,
    RequestDescriptor,
    RequestTarget,
    apply_option_overrides,
    build_request,
    parse_target,
)
from .client import SoapHttpClient, SoapResponse
from .normalizer import (
    DEFAULT_REPAIRS,
    ResponseNormalizer,
    extract_envelope,
    normalize_response,
    repair_logical_address_block,
)
from .transport import MockResponse, MockTransport, RequestsTransport, Transport

__all__ = [
    "DEFAULT_REPAIRS",
    "MockResponse",
    "MockTransport",
    "OPTION_MERGE_RULES",
    "RequestDescriptor",
    "RequestTarget",
    "RequestsTransport",
    "ResponseNormalizer",
    "SoapHttpClient",
    "SoapResponse",
    "Transport",
    "apply_option_overrides",
    "build_request",
    "extract_envelope",
    "normalize_response",
    "parse_target",
    "repair_logical_address_block",
]
