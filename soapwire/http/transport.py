"""
HTTP Transports

The transport is the only component that touches the network. It receives
a RequestDescriptor and either:

- performs the exchange and calls ``callback(error, response, body)``, or
- when called without a callback, returns a stream handle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import requests

from soapwire.http.builder import RequestDescriptor
from soapwire.schemas.errors import TransportError

logger = logging.getLogger(__name__)


Callback = Callable[[Optional[Exception], Any, Any], None]

# Descriptor extras that map directly onto requests.Session.request kwargs.
PASSTHROUGH_OPTIONS = ("auth", "cert", "cookies", "params", "proxies", "verify")


def decode_body(response: requests.Response) -> str:
    """
    Decode a response body, honouring an explicit charset only.

    requests falls back to ISO-8859-1 for text/* without a charset, which
    garbles the UTF-8 most SOAP servers send as plain ``text/xml``.
    """
    content_type = response.headers.get("Content-Type", "")
    encoding = response.encoding if "charset=" in content_type.lower() else None
    try:
        return response.content.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return response.content.decode("utf-8", errors="replace")


@runtime_checkable
class Transport(Protocol):
    """Protocol every transport implements."""

    def __call__(
        self,
        request: RequestDescriptor,
        callback: Optional[Callback] = None,
    ) -> Any:
        """
        Execute the request.

        Args:
            request: Fully built request
            callback: Completion callback ``(error, response, body)``; when
                omitted the transport returns a stream handle instead

        Returns:
            The transport's handle for the exchange
        """
        ...


class RequestsTransport:
    """
    Transport backed by a ``requests`` session.

    Failures raised by requests become TransportError: reported through the
    callback when one is given, raised in stream mode.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            session: Session to use (one is created lazily otherwise)
            timeout: Default timeout in seconds, overridable per request
                with the "timeout" option
            proxy: Proxy URL applied to http and https
        """
        self.timeout = timeout
        self.proxy = proxy
        self._session = session

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            if self.proxy:
                self._session.proxies = {
                    "http": self.proxy,
                    "https": self.proxy,
                }
        return self._session

    def _request_kwargs(self, request: RequestDescriptor) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.url,
            "headers": dict(request.headers),
            "data": request.body,
            "allow_redirects": request.follow_redirects,
            "timeout": request.extra.get("timeout", self.timeout),
        }
        for name in PASSTHROUGH_OPTIONS:
            if name in request.extra:
                kwargs[name] = request.extra[name]

        ignored = set(request.extra) - set(PASSTHROUGH_OPTIONS) - {"timeout"}
        if ignored:
            logger.debug("Options not understood by requests, ignored: %s", sorted(ignored))
        return kwargs

    def __call__(
        self,
        request: RequestDescriptor,
        callback: Optional[Callback] = None,
    ) -> Any:
        session = self._get_session()
        kwargs = self._request_kwargs(request)

        if callback is None:
            try:
                return session.request(stream=True, **kwargs)
            except requests.RequestException as e:
                raise TransportError(str(e), url=request.url) from e

        try:
            response = session.request(**kwargs)
        except requests.RequestException as e:
            error = TransportError(str(e), url=request.url)
            error.__cause__ = e
            callback(error, None, None)
            return None

        callback(None, response, decode_body(response))
        return response

    def close(self) -> None:
        """Close the underlying session."""
        if self._session is not None:
            self._session.close()
            self._session = None


@dataclass
class MockResponse:
    """Response metadata produced by MockTransport."""
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    body: Any = None

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body or ""


class MockTransport:
    """
    Transport that never touches the network.

    Replays a canned body (or error) and keeps every request it was given
    in ``calls``. In stream mode it returns a MockResponse as the handle.
    """

    def __init__(
        self,
        body: Any = "",
        *,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.headers = headers or {}
        self.error = error
        self.calls: list[RequestDescriptor] = []

    def __call__(
        self,
        request: RequestDescriptor,
        callback: Optional[Callback] = None,
    ) -> Any:
        self.calls.append(request)
        response = MockResponse(
            status_code=self.status_code,
            headers=dict(self.headers),
            url=request.url,
            body=self.body,
        )

        if callback is None:
            return response

        if self.error is not None:
            callback(self.error, None, None)
        else:
            callback(None, response, self.body)
        return response

    @property
    def last_request(self) -> Optional[RequestDescriptor]:
        return self.calls[-1] if self.calls else None
