"""Network ranges: parsing trusted ranges and the private/local table."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable

from .address import IPAddress
from .exceptions import StrategyConfigError

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

_IPV4_MAPPED_PREFIX_BITS = 96


def _unmap_network(network: IPNetwork) -> IPNetwork:
    """Turn an IPv4-mapped IPv6 network into the equivalent IPv4 network.

    Addresses are unmapped when parsed, so a range like
    ``::ffff:188.0.2.128/112`` must become ``188.0.0.0/16`` to ever match.
    """
    if (
        isinstance(network, ipaddress.IPv6Network)
        and network.prefixlen >= _IPV4_MAPPED_PREFIX_BITS
        and network.network_address.ipv4_mapped is not None
    ):
        return ipaddress.IPv4Network(
            (
                network.network_address.ipv4_mapped,
                network.prefixlen - _IPV4_MAPPED_PREFIX_BITS,
            )
        )
    return network


def _parse_range(value: str) -> IPNetwork:
    # Zones inside ranges are ambiguous: a prefix with a zone would never
    # contain a zoned address, so they are refused outright.
    if "%" in value:
        raise StrategyConfigError(f"zones are not allowed: {value!r}")

    if "/" in value:
        _, _, prefix = value.partition("/")
        if not (prefix.isascii() and prefix.isdigit()):
            raise StrategyConfigError(f"invalid CIDR prefix length: {value!r}")
        try:
            network = ipaddress.ip_network(value, strict=False)
        except ValueError as exc:
            raise StrategyConfigError(f"invalid CIDR range: {value!r}") from exc
    else:
        try:
            network = ipaddress.ip_network(ipaddress.ip_address(value))
        except ValueError as exc:
            raise StrategyConfigError(f"invalid IP address: {value!r}") from exc

    return _unmap_network(network)


def addresses_and_ranges_to_networks(*ranges: str) -> list[IPNetwork]:
    """Convert IP addresses and CIDR ranges into network objects.

    A bare address becomes a range containing only itself (``/32`` or
    ``/128``).  Host bits of a CIDR are masked off, so ``1.1.1.1/16``
    yields ``1.1.0.0/16``.

    Raises:
        StrategyConfigError: on an empty, malformed or zoned entry.
    """
    return [_parse_range(r) for r in ranges]


def is_ip_contained_in_ranges(ip: IPAddress, ranges: Iterable[IPNetwork]) -> bool:
    """True if *ip* falls inside at least one of *ranges* of the same family."""
    return any(ip in r for r in ranges)


# ---------------------------------------------------------------------------
# Private, local and otherwise non-routable ranges
# ---------------------------------------------------------------------------

PRIVATE_AND_LOCAL_RANGES: tuple[IPNetwork, ...] = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "10.0.0.0/8",  # RFC 1918
        "172.16.0.0/12",  # RFC 1918
        "192.168.0.0/16",  # RFC 1918
        "127.0.0.0/8",  # RFC 5735
        "0.0.0.0/8",  # RFC 1122 Section 3.2.1.3
        "169.254.0.0/16",  # RFC 3927
        "192.0.0.0/24",  # RFC 5736
        "192.0.2.0/24",  # RFC 5737 TEST-NET-1
        "198.51.100.0/24",  # TEST-NET-2
        "203.0.113.0/24",  # TEST-NET-3
        "192.88.99.0/24",  # RFC 3068
        "192.18.0.0/15",  # historical entry, kept for compatibility
        "198.18.0.0/15",  # RFC 2544: benchmarking
        "224.0.0.0/4",  # RFC 3171
        "240.0.0.0/4",  # RFC 1112
        "255.255.255.255/32",  # RFC 919 Section 7
        "100.64.0.0/10",  # RFC 6598
        "::/128",  # RFC 4291: unspecified
        "::1/128",  # RFC 4291: loopback
        "100::/64",  # RFC 6666: discard
        "2001::/23",  # RFC 2928: IETF protocol assignments
        "2001:2::/48",  # RFC 5180: benchmarking
        "2001:db8::/32",  # RFC 3849: documentation
        "2001::/32",  # RFC 4380: Teredo
        "fc00::/7",  # RFC 4193: unique-local
        "fe80::/10",  # RFC 4291 Section 2.5.6: link-scoped unicast
        "ff00::/8",  # RFC 4291 Section 2.7: multicast
        "2002::/16",  # RFC 7526: deprecated 6to4 anycast prefix
    )
)


def is_private_or_local(ip: IPAddress) -> bool:
    """True if *ip* is private, local, or otherwise unfit as a client IP."""
    return is_ip_contained_in_ranges(ip, PRIVATE_AND_LOCAL_RANGES)


def coerce_networks(ranges: Iterable[IPNetwork | str]) -> tuple[IPNetwork, ...]:
    """Accept trusted ranges as strings or network objects.

    Strings go through the same parsing as
    ``addresses_and_ranges_to_networks``; network objects are unmapped
    and checked for zones.
    """
    result: list[IPNetwork] = []
    for r in ranges:
        if isinstance(r, str):
            result.append(_parse_range(r))
        elif isinstance(r, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
            if getattr(r.network_address, "scope_id", None):
                raise StrategyConfigError(f"zones are not allowed: {r}")
            result.append(_unmap_network(r))
        else:
            raise StrategyConfigError(f"not an IP range: {r!r}")
    return tuple(result)
