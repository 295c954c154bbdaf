"""
Response Normalizer

Cleans up raw response bodies before they reach the XML parser:

1. Envelope extraction: drop anything outside the SOAP envelope (transport
   framing, banners, trailing garbage).
2. Repairs: positional fixes for known-malformed server output. The only one
   shipped is repair_logical_address_block().

Normalization never raises; anything it does not recognise is returned as is.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)


Repair = Callable[[str], str]

_COMMENT = re.compile(r"<!--[\s\S]*?-->")
_ENVELOPE_MARKER = re.compile(r":Envelope", re.IGNORECASE)

ADDRESS_MARKER = 'element="itr:LogicalAddress"'
PART_END_MARKER = "</wsdl:part>"
MESSAGE_END_MARKER = "</wsdl:message>"


def _declaration_start(text: str, index: int) -> int:
    """
    Return where an XML declaration (plus trailing whitespace) directly in
    front of ``index`` starts, or ``index`` when there is none.
    """
    end = len(text[:index].rstrip())
    if end < 4 or not text.startswith("?>", end - 2):
        return index
    question = text.rfind("?", 0, end - 2)
    if question >= 1 and text[question - 1] == "<":
        return question - 1
    return index


def _closing_tag_end(text: str, prefix: str, start: int) -> int:
    """End offset of the last ``</prefix:Envelope>`` at or after ``start``, or -1."""
    closing = re.compile(f"</{re.escape(prefix)}:Envelope>", re.IGNORECASE)
    end = -1
    for match in closing.finditer(text, start):
        end = match.end()
    return end


def extract_envelope(body: str) -> str:
    """
    Return the SOAP envelope (with its XML declaration, if any) found in body.

    The first XML comment is ignored while searching. The opening tag's
    namespace prefix must match the closing tag's; the last matching closing
    tag wins. When nothing matches, body is returned unchanged.
    """
    text = _COMMENT.sub("", body, count=1)

    for marker in _ENVELOPE_MARKER.finditer(text):
        colon = marker.start()
        # The prefix runs from "<" to the first colon, so the "<" must sit
        # after the previous colon.
        lower_bound = text.rfind(":", 0, colon) + 1
        opening = text.find("<", lower_bound, colon)
        while opening != -1:
            prefix = text[opening + 1:colon]
            end = _closing_tag_end(text, prefix, marker.end())
            if end != -1:
                return text[_declaration_start(text, opening):end]
            opening = text.find("<", opening + 1, colon)

    return body


def repair_logical_address_block(body: str) -> str:
    """
    Move the LogicalAddress part below the rest of its wsdl:message.

    Some servers emit the ``itr:LogicalAddress`` part ahead of the other
    parts of the message. With lines split on os.linesep:

        adr_start  first line after line 0 containing element="itr:LogicalAddress"
        adr_end    first line at/after adr_start containing </wsdl:part>
        msg_end    first line at/after adr_end containing </wsdl:message>

    the lines are reassembled as
    [:adr_start] + [adr_end+1:msg_end] + [adr_start:adr_end+1] + [msg_end:]
    and joined without separators. If any marker is missing, body is
    returned unchanged.

    The address part always sits inside a wsdl:message opened on an earlier
    line, so a marker on line 0 is not a match. This also leaves already
    repaired (single-line) output alone.
    """
    rows = body.split(os.linesep)

    adr_start: Optional[int] = None
    adr_end: Optional[int] = None
    msg_end: Optional[int] = None

    for i, row in enumerate(rows):
        if adr_start is None and i > 0 and ADDRESS_MARKER in row:
            adr_start = i
        if adr_start is not None and adr_end is None and PART_END_MARKER in row:
            adr_end = i
        if adr_end is not None and msg_end is None and MESSAGE_END_MARKER in row:
            msg_end = i
            break

    if adr_start is None or adr_end is None or msg_end is None:
        return body

    logger.debug(
        "Repairing LogicalAddress block (lines %d-%d moved before line %d)",
        adr_start, adr_end, msg_end,
    )
    head = rows[:adr_start]
    rest_of_message = rows[adr_end + 1:msg_end]
    address = rows[adr_start:adr_end + 1]
    tail = rows[msg_end:]
    return "".join(head + rest_of_message + address + tail)


DEFAULT_REPAIRS: tuple[Repair, ...] = (repair_logical_address_block,)


class ResponseNormalizer:
    """
    Envelope extraction followed by an ordered list of repairs.

    Usage:
        normalizer = ResponseNormalizer()                 # default repairs
        normalizer = ResponseNormalizer(repairs=())       # extraction only
    """

    def __init__(self, repairs: Optional[Iterable[Repair]] = None) -> None:
        self.repairs: tuple[Repair, ...] = (
            DEFAULT_REPAIRS if repairs is None else tuple(repairs)
        )

    def normalize(self, body: Any) -> Any:
        """Normalize a textual body; bytes, None and streams pass through."""
        if not isinstance(body, str):
            return body
        logger.debug("Http response body: %r", body)

        body = extract_envelope(body)
        for repair in self.repairs:
            body = repair(body)
        return body

    __call__ = normalize

    def __repr__(self) -> str:
        names = ", ".join(getattr(r, "__name__", repr(r)) for r in self.repairs)
        return f"{self.__class__.__name__}(repairs=[{names}])"


_default_normalizer = ResponseNormalizer()


def normalize_response(body: Any) -> Any:
    """Normalize body with the default repairs."""
    return _default_normalizer.normalize(body)
