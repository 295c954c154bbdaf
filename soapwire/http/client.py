"""
SOAP HTTP Client

Builds the request, hands it to the transport and normalizes the response
body for the envelope parser.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TYPE_CHECKING

from soapwire.config.runtime import RuntimeConfig, get_default_config
from soapwire.http.builder import Payload, RequestDescriptor, build_request
from soapwire.http.normalizer import DEFAULT_REPAIRS, ResponseNormalizer
from soapwire.http.transport import Callback, RequestsTransport, Transport
from soapwire.schemas.errors import TransportError

if TYPE_CHECKING:
    from soapwire.receipts import HTTPReceipt, ReceiptRecorder

logger = logging.getLogger(__name__)


@dataclass
class SoapResponse:
    """
    Completed exchange with a normalized body.
    """
    status_code: int
    body: Any
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    elapsed_ms: float = 0.0
    receipt_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> None:
        """Raise TransportError if status is not 2xx."""
        if not self.ok:
            raise TransportError(
                f"HTTP {self.status_code}",
                status_code=self.status_code,
                url=self.url,
                retryable=self.status_code >= 500,
            )

    @classmethod
    def from_transport(
        cls,
        response: Any,
        body: Any,
        receipt_id: Optional[str] = None,
    ) -> "SoapResponse":
        """Wrap whatever response object the transport produced."""
        elapsed = getattr(response, "elapsed", None)
        return cls(
            status_code=getattr(response, "status_code", 0),
            body=body,
            headers=dict(getattr(response, "headers", None) or {}),
            url=str(getattr(response, "url", "") or ""),
            elapsed_ms=elapsed.total_seconds() * 1000 if elapsed is not None else 0.0,
            receipt_id=receipt_id,
        )


class SoapHttpClient:
    """
    HTTP transport shim for a SOAP client.

    Usage:
        client = SoapHttpClient()

        def on_complete(error, response, body):
            if error:
                ...
            envelope = parse(body)

        client.send("https://example.org/service", envelope_xml, on_complete,
                    headers={"SOAPAction": '"urn:Ping"'})

        # or, blocking:
        response = client.fetch("https://example.org/service?wsdl")
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        *,
        config: Optional[RuntimeConfig] = None,
        normalizer: Optional[ResponseNormalizer] = None,
        recorder: Optional["ReceiptRecorder"] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            transport: Transport performing the network exchange; defaults
                to a RequestsTransport built from the HTTP config
            config: Runtime configuration (defaults to the global config)
            normalizer: Response normalizer; defaults to envelope extraction
                plus the repairs enabled in the config
            recorder: Receipt recorder for audit logging
        """
        self.config = config or get_default_config()
        http = self.config.http

        if transport is None:
            transport = RequestsTransport(timeout=http.timeout, proxy=http.proxy)
        if normalizer is None:
            normalizer = ResponseNormalizer(
                repairs=DEFAULT_REPAIRS if http.repair_logical_address else (),
            )
        self.transport: Transport = transport
        self.normalizer = normalizer
        if recorder is None and self.config.record_receipts:
            from soapwire.receipts import ReceiptRecorder
            recorder = ReceiptRecorder()
        self.recorder = recorder

    def build_request(
        self,
        url: str,
        payload: Optional[Payload] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> RequestDescriptor:
        """Build the request descriptor using the configured User-Agent."""
        return build_request(
            url,
            payload,
            headers,
            options,
            user_agent=self.config.http.user_agent,
        )

    def handle_response(self, response: Any, body: Any) -> Any:
        """Normalize a raw response body."""
        return self.normalizer.normalize(body)

    def _start_receipt(self, request: RequestDescriptor) -> Optional["HTTPReceipt"]:
        if self.recorder is None:
            return None
        return self.recorder.start_http_receipt(
            method=request.method,
            url=request.url,
            headers=request.headers,
            body=request.body,
        )

    def _complete_receipt(
        self,
        receipt: Optional["HTTPReceipt"],
        error: Optional[Exception],
        response: Any,
        body: Any,
    ) -> None:
        if receipt is None or self.recorder is None:
            return
        if error is not None:
            self.recorder.complete(receipt, error=str(error))
            return
        headers = dict(getattr(response, "headers", None) or {})
        status_code = getattr(response, "status_code", None)
        self.recorder.complete(
            receipt,
            response={
                "status_code": status_code,
                "content_length": len(body) if isinstance(body, (str, bytes)) else None,
                "content_type": headers.get("content-type") or headers.get("Content-Type"),
            },
            status_code=status_code,
            response_headers={str(k): str(v) for k, v in headers.items()},
        )

    def _dispatch(
        self,
        request: RequestDescriptor,
        on_complete: Callable[[Optional[Exception], Any, Any, Optional["HTTPReceipt"]], None],
    ) -> Any:
        receipt = self._start_receipt(request)

        def _callback(error: Optional[Exception], response: Any, body: Any) -> None:
            self._complete_receipt(receipt, error, response, body)
            if error is not None:
                logger.debug("Http request to %s failed: %s", request.url, error)
                on_complete(error, None, None, receipt)
                return
            on_complete(None, response, self.handle_response(response, body), receipt)

        return self.transport(request, _callback)

    def send(
        self,
        url: str,
        payload: Optional[Payload],
        on_complete: Callback,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Send a request and report the normalized result.

        Args:
            url: Target URL
            payload: Request body (None for GET)
            on_complete: Called as ``on_complete(error, response, body)``.
                Transport errors are forwarded unchanged with response and
                body set to None.
            headers: Extra headers
            options: Extra options (see build_request)

        Returns:
            The transport's handle for the exchange

        Raises:
            InvalidURLError: if the URL cannot be parsed
        """
        request = self.build_request(url, payload, headers, options)
        return self._dispatch(
            request,
            lambda error, response, body, receipt: on_complete(error, response, body),
        )

    def send_stream(
        self,
        url: str,
        payload: Optional[Payload] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Send a request and return the transport's stream handle.

        The body is not normalized; callers reading the stream must call
        normalize_response() themselves once the full body is available.
        """
        request = self.build_request(url, payload, headers, options)
        return self.transport(request)

    def fetch(
        self,
        url: str,
        payload: Optional[Payload] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> SoapResponse:
        """
        Blocking variant of send().

        Requires a transport that completes before returning (the default
        RequestsTransport does).

        Raises:
            InvalidURLError: if the URL cannot be parsed
            TransportError: or whatever error the transport reported
        """
        request = self.build_request(url, payload, headers, options)
        outcome: dict[str, Any] = {}

        def _on_complete(error, response, body, receipt) -> None:
            outcome["error"] = error
            outcome["response"] = response
            outcome["body"] = body
            outcome["receipt_id"] = receipt.receipt_id if receipt is not None else None

        self._dispatch(request, _on_complete)

        if not outcome:
            raise RuntimeError("Transport returned before completing the request")
        if outcome["error"] is not None:
            raise outcome["error"]
        return SoapResponse.from_transport(
            outcome["response"],
            outcome["body"],
            receipt_id=outcome["receipt_id"],
        )

    def close(self) -> None:
        """Close the transport if it holds resources."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "SoapHttpClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
