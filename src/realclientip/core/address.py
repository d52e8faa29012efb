"""Parsing of single IP address tokens.

A token is whatever one proxy wrote for one hop: ``192.0.2.60``,
``192.0.2.60:4711``, ``[2001:db8::17]:4711``, ``fe80::1%eth0`` and so
on.  Ports are discarded, brackets stripped, and the IPv6 zone is kept
alongside the address rather than inside it.

IPv4-mapped IPv6 addresses (``::ffff:188.0.2.128``, in any spelling)
collapse to plain IPv4 so that the same client always stringifies the
same way.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

from .exceptions import InvalidAddressError

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class ClientAddress:
    """An IP address plus its (possibly empty) IPv6 zone identifier."""

    ip: IPAddress
    zone: str = ""

    @property
    def version(self) -> int:
        return self.ip.version

    def __str__(self) -> str:
        if self.zone:
            return f"{self.ip}%{self.zone}"
        return str(self.ip)


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def split_host_port(hostport: str) -> tuple[str, str]:
    """Split ``host:port`` or ``[host]:port`` into host and port.

    The port is returned as-is and never validated.

    Raises:
        ValueError: when there is no port, the host has stray colons,
            or the brackets are unbalanced.
    """
    i = hostport.rfind(":")
    if i < 0:
        raise ValueError(f"missing port in address: {hostport!r}")

    j = k = 0
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address: {hostport!r}")
        if end + 1 == len(hostport):
            raise ValueError(f"missing port in address: {hostport!r}")
        if end + 1 != i:
            if hostport[end + 1] == ":":
                raise ValueError(f"too many colons in address: {hostport!r}")
            raise ValueError(f"missing port in address: {hostport!r}")
        host = hostport[1:end]
        j, k = 1, end + 1
    else:
        host = hostport[:i]
        if ":" in host:
            raise ValueError(f"too many colons in address: {hostport!r}")

    if "[" in hostport[j:]:
        raise ValueError(f"unexpected '[' in address: {hostport!r}")
    if "]" in hostport[k:]:
        raise ValueError(f"unexpected ']' in address: {hostport!r}")

    return host, hostport[i + 1 :]


def split_host_zone(s: str) -> tuple[str, str]:
    """Split ``host%zone``.  Without a zone, ``host`` is the input unchanged.

    The zone starts after the *last* percent sign, and a leading ``%``
    does not count as a separator.
    """
    i = s.rfind("%")
    if i > 0:
        return s[:i], s[i + 1 :]
    return s, ""


def trim_matched_ends(s: str, chars: str) -> str:
    """Strip the first and last character of *s* only if they match *chars*.

    *chars* is either one character (``'"'``) used for both ends, or two
    (``"[]"``) giving the opening and closing character.
    """
    if len(chars) not in (1, 2):
        raise ValueError("trim_matched_ends chars must be length 1 or 2")

    first, last = chars[0], chars[-1]
    if len(s) < 2:
        return s
    if s[0] != first or s[-1] != last:
        return s
    return s[1:-1]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_ip_addr(ip_str: str) -> ClientAddress:
    """Parse *ip_str* into a ``ClientAddress``, discarding any port.

    The unspecified addresses (``0.0.0.0``, ``::``) are accepted here;
    use ``good_ip_addr`` when they must be refused.

    Raises:
        InvalidAddressError: if no IP address can be read from *ip_str*.
    """
    text = ip_str
    try:
        text, _ = split_host_port(text)
    except ValueError:
        # An unbracketed IPv6 address has "too many colons"; let the
        # address parser below decide.
        pass

    text = trim_matched_ends(text, "[]")
    text, zone = split_host_zone(text)

    # A second zone separator would otherwise reach ipaddress, which
    # accepts one scope id of its own.
    if "%" in text:
        raise InvalidAddressError(f"invalid IP address: {ip_str!r}", value=ip_str)

    try:
        ip = ipaddress.ip_address(text)
    except ValueError as exc:
        raise InvalidAddressError(
            f"invalid IP address: {ip_str!r}", value=ip_str
        ) from exc

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    return ClientAddress(ip=ip, zone=zone)


def good_ip_addr(ip_str: str) -> ClientAddress | None:
    """Parse *ip_str*, returning ``None`` if invalid or unspecified.

    Every strategy goes through this function; a client can never be
    identified as ``0.0.0.0`` or ``::``.
    """
    try:
        addr = parse_ip_addr(ip_str)
    except InvalidAddressError:
        return None

    if addr.ip.is_unspecified:
        return None

    return addr
