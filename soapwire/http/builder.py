"""
Request Builder

Turns a target URL, an optional payload and caller overrides into a fully
specified RequestDescriptor. Pure: no network I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlsplit

from soapwire.config.runtime import DEFAULT_USER_AGENT
from soapwire.schemas.errors import InvalidURLError

logger = logging.getLogger(__name__)


Payload = Union[str, bytes]

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml,text/xml;q=0.9,*/*;q=0.8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class RequestTarget:
    """Parsed target URL."""
    scheme: str
    host: str
    port: Optional[int] = None
    path: str = "/"

    @property
    def secure(self) -> bool:
        return self.scheme == "https"

    @property
    def netloc(self) -> str:
        """Host (bracketed when it is an IPv6 literal) plus the explicit port."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return host
        return f"{host}:{self.port}"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.netloc}{self.path}"


@dataclass
class RequestDescriptor:
    """
    Everything the transport needs to perform one HTTP exchange.

    Option names that are not fields of this class (timeout, auth, proxies,
    ...) are kept in ``extra`` and handed to the transport untouched.
    """
    target: RequestTarget
    method: str
    headers: dict[str, str]
    body: Optional[Payload] = None
    follow_redirects: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def url(self) -> str:
        if isinstance(self.target, RequestTarget):
            return self.target.url
        return str(self.target)

    def to_dict(self) -> dict[str, Any]:
        """Loggable summary of the request."""
        body: Any = self.body
        if isinstance(body, bytes):
            body = f"<{len(body)} bytes>"
        return {
            "url": self.url,
            "method": self.method,
            "headers": dict(self.headers),
            "body": body,
            "follow_redirects": self.follow_redirects,
            "extra": dict(self.extra),
        }


def parse_target(url: str) -> RequestTarget:
    """
    Split a URL into a RequestTarget.

    Path is pathname (default "/") + "?query" + "#fragment".

    Raises:
        InvalidURLError: if the URL has no scheme, no host, or a bad port
    """
    if not isinstance(url, str):
        raise InvalidURLError(f"URL must be a string, got {type(url).__name__}")
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise InvalidURLError(f"Cannot parse URL {url!r}: {e}", url=url) from e

    if not parts.scheme:
        raise InvalidURLError(f"URL has no scheme: {url!r}", url=url)
    if not parts.hostname:
        raise InvalidURLError(f"URL has no host: {url!r}", url=url)

    path = parts.path or "/"
    if parts.query:
        path += "?" + parts.query
    if parts.fragment:
        path += "#" + parts.fragment

    return RequestTarget(
        scheme=parts.scheme.lower(),
        host=parts.hostname,
        port=port,
        path=path,
    )


def default_headers(target: RequestTarget, user_agent: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    """The fixed header set every request starts from."""
    return {
        "User-Agent": user_agent,
        "Accept": DEFAULT_ACCEPT,
        "Accept-Encoding": "none",
        "Accept-Charset": "utf-8",
        "Connection": "close",
        "Host": target.netloc,
    }


# =============================================================================
# Option overrides
# =============================================================================

def _merge(current: Any, value: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(current or {})
    merged.update(value or {})
    return merged


def _replace(current: Any, value: Any) -> Any:
    return value


# Option name -> how an override combines with the current value.
# Names not listed here are replaced wholesale.
OPTION_MERGE_RULES: dict[str, Callable[[Any, Any], Any]] = {
    "headers": _merge,
}

_DESCRIPTOR_FIELDS = frozenset(f.name for f in fields(RequestDescriptor)) - {"extra"}


def apply_option_overrides(
    request: RequestDescriptor,
    options: Optional[Mapping[str, Any]],
) -> RequestDescriptor:
    """Apply caller options to the descriptor in place and return it."""
    for name, value in (options or {}).items():
        rule = OPTION_MERGE_RULES.get(name, _replace)
        if name in _DESCRIPTOR_FIELDS:
            setattr(request, name, rule(getattr(request, name), value))
        else:
            request.extra[name] = rule(request.extra.get(name), value)
    return request


def build_request(
    url: str,
    payload: Optional[Payload] = None,
    headers: Optional[Mapping[str, str]] = None,
    options: Optional[Mapping[str, Any]] = None,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RequestDescriptor:
    """
    Build the HTTP request for a SOAP call.

    Args:
        url: The resource URL
        payload: Request body; POST when given, GET otherwise
        headers: Extra headers, applied over the defaults
        options: Extra options; "headers" merges into the header mapping,
            any other name replaces the corresponding value
        user_agent: User-Agent header value

    Returns:
        RequestDescriptor ready for the transport

    Raises:
        InvalidURLError: if the URL cannot be parsed
    """
    target = parse_target(url)
    method = "POST" if payload is not None else "GET"
    request_headers = default_headers(target, user_agent)

    if isinstance(payload, str):
        request_headers["Content-Length"] = str(len(payload.encode("utf-8")))
        request_headers["Content-Type"] = FORM_CONTENT_TYPE

    request_headers.update(headers or {})

    request = RequestDescriptor(
        target=target,
        method=method,
        headers=request_headers,
        body=payload,
        follow_redirects=True,
    )
    apply_option_overrides(request, options)

    logger.debug("Http request: %s", request.to_dict())
    return request
