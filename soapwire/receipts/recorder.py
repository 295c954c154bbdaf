"""
Receipt Recorder

Records one receipt per HTTP exchange made through SoapHttpClient.send().
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from .models import HTTPReceipt, Receipt, ReceiptKind, ReceiptTiming


def generate_receipt_id(kind: ReceiptKind, request_data: dict[str, Any]) -> str:
    """
    Generate a receipt ID from kind and request data.

    Format: rc_{kind}_{hash_prefix}_{nonce}. Identical requests share the
    hash prefix; the random nonce keeps concurrent ones apart.
    """
    stable_str = f"{kind}|{sorted(request_data.items(), key=lambda item: item[0])}"
    hash_hex = hashlib.sha256(stable_str.encode()).hexdigest()[:12]
    return f"rc_{kind}_{hash_hex}_{uuid.uuid4().hex[:8]}"


class ReceiptRecorder:
    """
    Records receipts for HTTP exchanges.

    Usage:
        recorder = ReceiptRecorder()
        client = SoapHttpClient(recorder=recorder)

        client.fetch("https://example.org/service?wsdl")

        receipts = recorder.get_receipts()
    """

    def __init__(self) -> None:
        self._receipts: list[Receipt] = []
        self._in_progress: dict[str, Receipt] = {}

    def start_http_receipt(
        self,
        *,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Optional[Any] = None,
        **kwargs: Any,
    ) -> HTTPReceipt:
        """Start recording an HTTP request."""
        if isinstance(body, bytes):
            body = {"bytes": len(body)}
        request = {
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "body": body,
            **kwargs,
        }

        receipt = HTTPReceipt(
            receipt_id=generate_receipt_id("http", request),
            method=method,
            url=url,
            request=request,
            timing=ReceiptTiming(started_at=datetime.now(timezone.utc)),
        )

        self._in_progress[receipt.receipt_id] = receipt
        return receipt

    def complete(
        self,
        receipt: Receipt,
        *,
        response: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
        **extra_fields: Any,
    ) -> Receipt:
        """
        Complete a receipt with response data or error.

        Args:
            receipt: The receipt to complete
            response: Response data (dict)
            error: Error message if failed
            **extra_fields: Additional fields to set on the receipt

        Returns:
            The completed receipt
        """
        now = datetime.now(timezone.utc)
        receipt.timing.ended_at = now
        if receipt.timing.started_at:
            delta = now - receipt.timing.started_at
            receipt.timing.duration_ms = delta.total_seconds() * 1000

        if response is not None:
            receipt.response = response
        if error is not None:
            receipt.error = error

        # e.g. status_code, response_headers for HTTP receipts
        for key, value in extra_fields.items():
            if hasattr(receipt, key):
                setattr(receipt, key, value)

        receipt.compute_hashes()

        self._in_progress.pop(receipt.receipt_id, None)
        self._receipts.append(receipt)
        return receipt

    def get_receipts(self) -> list[Receipt]:
        """Return completed receipts in completion order."""
        return list(self._receipts)

    def get_receipt(self, receipt_id: str) -> Optional[Receipt]:
        """Look up a completed or in-progress receipt by id."""
        for receipt in self._receipts:
            if receipt.receipt_id == receipt_id:
                return receipt
        return self._in_progress.get(receipt_id)

    @property
    def pending_count(self) -> int:
        return len(self._in_progress)

    def clear(self) -> None:
        """Drop all recorded and in-progress receipts."""
        self._receipts.clear()
        self._in_progress.clear()
