"""Reading addresses out of request headers.

Headers are handled as a mapping from *canonical* header name to the
list of values received for it, in the order they arrived.  HTTP allows
a list header such as ``X-Forwarded-For`` to be repeated; each instance
is one more segment of the same list, so order across instances matters
as much as order within one.

``Forwarded`` items (RFC 7239) are parsed permissively: unquoted IPv6
values, brackets without a port, and whitespace around ``;`` or ``=``
are all tolerated.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Union

from .address import ClientAddress, good_ip_addr, trim_matched_ends

X_FORWARDED_FOR_HEADER = "X-Forwarded-For"
FORWARDED_HEADER = "Forwarded"
LIST_HEADERS = (X_FORWARDED_FOR_HEADER, FORWARDED_HEADER)

_FORWARDED_FOR_PARAM = "for"
_HEADER_ENCODING = "latin-1"

# RFC 7230 token characters, besides letters and digits.
_TOKEN_PUNCTUATION = frozenset("!#$%&'*+-.^_`|~")


class CanonicalHeaders(dict[str, list[str]]):
    """Header values keyed by canonical name, in receipt order."""


HeadersInput = Union[
    CanonicalHeaders,
    Mapping[str, Any],
    Iterable[tuple[Union[str, bytes], Union[str, bytes]]],
]


def canonical_header_key(name: str) -> str:
    """Return the MIME canonical form of a header name.

    The first letter and any letter following a hyphen are upper-cased,
    the rest lower-cased: ``x-real-ip`` becomes ``X-Real-Ip``.  A name
    containing a space or a non-token character is returned unchanged.
    """
    for ch in name:
        if not (ch.isascii() and (ch.isalnum() or ch in _TOKEN_PUNCTUATION)):
            return name

    parts = []
    upper = True
    for ch in name:
        parts.append(ch.upper() if upper else ch.lower())
        upper = ch == "-"
    return "".join(parts)


def _decode(value: str | bytes | bytearray) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode(_HEADER_ENCODING)
    return value


def normalize_headers(headers: HeadersInput | None) -> CanonicalHeaders:
    """Build a ``CanonicalHeaders`` from the common header shapes.

    Accepted inputs:

    * a mapping of name to list of values (``{"X-Forwarded-For": [...]}``)
    * a mapping of name to a single string value
    * an object with ``multi_items()`` (Starlette ``Headers``)
    * an iterable of ``(name, value)`` pairs (raw / ASGI order)

    Names and values may be ``bytes``, as in an ASGI scope; they are
    decoded as latin-1.  Names that differ only in case are merged,
    keeping their order.
    """
    if isinstance(headers, CanonicalHeaders):
        return headers

    result = CanonicalHeaders()
    if headers is None:
        return result

    if hasattr(headers, "multi_items"):
        pairs: Iterable[tuple[str, Any]] = headers.multi_items()
    elif isinstance(headers, Mapping):
        pairs = headers.items()
    else:
        pairs = headers

    for name, value in pairs:
        if value is None:
            continue
        key = canonical_header_key(_decode(name))
        values = result.setdefault(key, [])
        if isinstance(value, (str, bytes, bytearray)):
            values.append(_decode(value))
        else:
            values.extend(_decode(v) for v in value)
    return result


def last_header(headers: CanonicalHeaders, header_name: str) -> str:
    """Return the last instance of a (canonical) header, or ``""``.

    Only meant for single-IP headers like ``X-Real-IP``, which should not
    repeat; if they do, the last one is the newest.  Never use this for
    ``X-Forwarded-For`` or ``Forwarded``.
    """
    values = headers.get(header_name)
    if not values:
        return ""
    return values[-1]


def parse_forwarded_list_item(item: str) -> ClientAddress | None:
    """Return the ``for=`` address of one ``Forwarded`` list item.

    The item may look like any of::

        For="[2001:db8:cafe::17%zone]:4711"
        for=192.0.2.60;proto=http; by=203.0.113.43
        for=192.0.2.43

    Only the first ``for`` parameter is used.  ``None`` is returned when
    it is missing, empty or not a usable address.
    """
    for_value = ""
    for param in item.split(";"):
        key, sep, value = param.strip().partition("=")
        if not sep:
            continue
        if key.strip().lower() == _FORWARDED_FOR_PARAM:
            for_value = value
            break

    # RFC 7239 requires quotes around IPv6 values; they are optional here.
    for_value = trim_matched_ends(for_value.strip(), '"')
    if not for_value:
        return None

    return good_ip_addr(for_value)


def get_ip_addr_list(
    headers: CanonicalHeaders, header_name: str
) -> list[ClientAddress | None]:
    """Flatten every instance of a list header into one list of addresses.

    *header_name* must be canonical and one of ``LIST_HEADERS``.  Each
    comma-separated item produces exactly one entry, ``None`` where the
    item is not a valid address, so that positions are preserved.
    """
    result: list[ClientAddress | None] = []
    is_forwarded = header_name == FORWARDED_HEADER

    for value in headers.get(header_name, ()):
        for raw_item in value.split(","):
            raw_item = raw_item.strip()
            if is_forwarded:
                result.append(parse_forwarded_list_item(raw_item))
            else:
                result.append(good_ip_addr(raw_item))

    return result
