"""
Receipts Module

Audit records for HTTP exchanges made through the transport shim.
"""

from .models import (
    HTTPReceipt,
    Receipt,
    ReceiptKind,
    ReceiptRef,
    ReceiptTiming,
    hash_payload,
)
from .recorder import ReceiptRecorder

__all__ = [
    "HTTPReceipt",
    "Receipt",
    "ReceiptKind",
    "ReceiptRef",
    "ReceiptTiming",
    "ReceiptRecorder",
    "hash_payload",
]
