"""
Receipt Models

Schemas for recording HTTP exchanges. A receipt is an audit trail entry:
what was requested, what came back, and how long it took.

request_hash and response_hash are computed over sorted-key JSON so two
identical exchanges produce identical hashes. Timing is excluded from hashing.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


ReceiptKind = Literal["http"]


def hash_payload(payload: Any) -> str:
    """Return the 0x-prefixed SHA-256 of a JSON-serializable payload."""
    encoded = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")
    return "0x" + hashlib.sha256(encoded).hexdigest()


class ReceiptRef(BaseModel):
    """Lightweight reference to a receipt."""

    model_config = ConfigDict(extra="forbid")

    receipt_id: str = Field(
        ...,
        description="Unique receipt identifier",
    )
    kind: ReceiptKind = Field(
        ...,
        description="Type of receipt",
    )
    request_hash: str = Field(
        ...,
        description="Hash of the request (0x-prefixed)",
    )
    response_hash: str = Field(
        ...,
        description="Hash of the response (0x-prefixed)",
    )


class ReceiptTiming(BaseModel):
    """
    Timing information for a receipt.

    Not part of either hash.
    """

    model_config = ConfigDict(extra="forbid")

    started_at: Optional[datetime] = Field(
        default=None,
        description="When the exchange started",
    )
    ended_at: Optional[datetime] = Field(
        default=None,
        description="When the exchange completed",
    )
    duration_ms: Optional[float] = Field(
        default=None,
        description="Duration in milliseconds",
    )


class Receipt(BaseModel):
    """Base receipt for an external interaction."""

    model_config = ConfigDict(extra="forbid")

    receipt_id: str = Field(
        ...,
        description="Unique identifier for this receipt",
    )
    kind: ReceiptKind = Field(
        ...,
        description="Type of external interaction",
    )
    request: dict[str, Any] = Field(
        ...,
        description="Request parameters/payload",
    )
    response: dict[str, Any] = Field(
        default_factory=dict,
        description="Response data",
    )
    request_hash: Optional[str] = Field(
        default=None,
        description="Hash of the request (0x-prefixed)",
    )
    response_hash: Optional[str] = Field(
        default=None,
        description="Hash of the response (0x-prefixed)",
    )
    timing: ReceiptTiming = Field(
        default_factory=ReceiptTiming,
        description="Timing metadata",
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message if the exchange failed",
    )

    def compute_hashes(self) -> "Receipt":
        """Compute request and response hashes if not already set."""
        if self.request_hash is None:
            self.request_hash = hash_payload(self.request)
        if self.response_hash is None and self.response:
            self.response_hash = hash_payload(self.response)
        return self

    def to_ref(self) -> ReceiptRef:
        """Convert to a lightweight reference."""
        self.compute_hashes()
        return ReceiptRef(
            receipt_id=self.receipt_id,
            kind=self.kind,
            request_hash=self.request_hash or "",
            response_hash=self.response_hash or "",
        )

    @property
    def is_successful(self) -> bool:
        """Check if the exchange completed without an error."""
        return self.error is None and self.timing.ended_at is not None


class HTTPReceipt(Receipt):
    """
    Receipt for HTTP requests.

    Captures method, URL, headers, status and response metadata.
    """

    kind: Literal["http"] = "http"

    method: str = Field(
        ...,
        description="HTTP method (GET or POST)",
    )
    url: str = Field(
        ...,
        description="Request URL",
    )
    status_code: Optional[int] = Field(
        default=None,
        description="HTTP status code",
    )
    response_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Response headers",
    )
