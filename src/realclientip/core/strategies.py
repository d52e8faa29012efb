"""Strategies for deriving the "real" client IP of a request.

Each strategy encodes one assumption about the network between the
client and this server.  Pick the one that matches the deployment:

* ``RemoteAddrStrategy`` -- the server is directly connected to the
  internet; use the socket peer.
* ``SingleIPHeaderStrategy`` -- a trusted proxy sets a header like
  ``X-Real-IP`` or ``CF-Connecting-IP``.
* ``LeftmostNonPrivateStrategy`` -- closest-to-client guess.  Trivially
  spoofable; never use it for security decisions.
* ``RightmostNonPrivateStrategy`` -- every trusted proxy has a private
  address.
* ``RightmostTrustedCountStrategy`` -- a fixed number of trusted proxies
  each append one entry.
* ``RightmostTrustedRangeStrategy`` -- the trusted proxies' address
  ranges are known.
* ``ChainStrategy`` -- try several of the above in order.

Configuration errors raise ``StrategyConfigError`` from the constructor.
Deriving never raises: ``client_ip`` returns ``None`` when no address
qualifies, which in production usually means the strategy no longer
matches the network topology.

Strategies are immutable once built and safe to share across threads
and tasks::

    strategy = RightmostNonPrivateStrategy("X-Forwarded-For")
    ip = strategy.client_ip(request_headers, remote_addr)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from .address import ClientAddress, good_ip_addr
from .exceptions import StrategyConfigError
from .headers import (
    LIST_HEADERS,
    CanonicalHeaders,
    HeadersInput,
    canonical_header_key,
    get_ip_addr_list,
    last_header,
    normalize_headers,
)
from .ranges import (
    IPNetwork,
    coerce_networks,
    is_ip_contained_in_ranges,
    is_private_or_local,
)

logger = logging.getLogger(__name__)


class Strategy(ABC):
    """Interface shared by every strategy, including ``ChainStrategy``."""

    #: Short identifier, also used as the ``type`` in configuration files.
    name: str = ""

    def client_ip(
        self, headers: HeadersInput | None, remote_addr: str | None = ""
    ) -> str | None:
        """Derive the client IP, or ``None`` if there is no derivable IP.

        Args:
            headers: The request headers, in any shape accepted by
                ``normalize_headers``.  Repeated headers must be in the
                order they were received.
            remote_addr: The socket peer as ``host``, ``host:port`` or
                ``[host]:port``.

        Returns:
            The canonical address string, possibly with a ``%zone``
            suffix and never with a port.
        """
        addr = self.derive(normalize_headers(headers), remote_addr or "")
        if addr is None:
            logger.debug("%r derived no client IP", self)
            return None
        return str(addr)

    def __call__(
        self, headers: HeadersInput | None, remote_addr: str | None = ""
    ) -> str | None:
        return self.client_ip(headers, remote_addr)

    @abstractmethod
    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        """Pick the winning address from already-normalized headers."""


# ---------------------------------------------------------------------------
# Header name validation
# ---------------------------------------------------------------------------


def _require_header(strategy: str, header_name: str) -> str:
    if not header_name:
        raise StrategyConfigError(f"{strategy} header must not be empty")
    return canonical_header_key(header_name)


def _require_list_header(strategy: str, header_name: str) -> str:
    header_name = _require_header(strategy, header_name)
    if header_name not in LIST_HEADERS:
        raise StrategyConfigError(
            f"{strategy} header must be {LIST_HEADERS[0]} or {LIST_HEADERS[1]}"
        )
    return header_name


class _ListHeaderStrategy(Strategy):
    """Base for strategies reading ``X-Forwarded-For`` or ``Forwarded``."""

    def __init__(self, header_name: str) -> None:
        self._header_name = _require_list_header(type(self).__name__, header_name)

    @property
    def header_name(self) -> str:
        return self._header_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(header_name={self._header_name!r})"


# ---------------------------------------------------------------------------
# Concrete strategies
# ---------------------------------------------------------------------------


class RemoteAddrStrategy(Strategy):
    """Use the socket peer address, stripped of its port.

    For servers that accept connections directly rather than through a
    reverse proxy.  Fails only if *remote_addr* is not an IP, e.g. when
    listening on a Unix domain socket.
    """

    name = "remote_addr"

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        return good_ip_addr(remote_addr)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SingleIPHeaderStrategy(Strategy):
    """Read the client IP from a header that carries exactly one address.

    Examples are ``X-Real-IP``, ``CF-Connecting-IP``, ``True-Client-IP``
    and ``Fastly-Client-IP``.  The header must be set by a trusted proxy
    *and* impossible for the client to spoof; some CDNs pass a
    client-supplied value through by default.

    If the header is repeated, the last instance wins.
    """

    name = "single_ip_header"

    def __init__(self, header_name: str) -> None:
        header_name = _require_header(type(self).__name__, header_name)
        if header_name in LIST_HEADERS:
            raise StrategyConfigError(
                f"{type(self).__name__} header must not be "
                f"{LIST_HEADERS[0]} or {LIST_HEADERS[1]}"
            )
        self._header_name = header_name

    @property
    def header_name(self) -> str:
        return self._header_name

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        value = last_header(headers, self._header_name)
        if not value:
            return None
        return good_ip_addr(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(header_name={self._header_name!r})"


class LeftmostNonPrivateStrategy(_ListHeaderStrategy):
    """Leftmost valid, non-private address in a list header.

    Gives the address closest to the client.  That address was written by
    the client or an untrusted hop, so it MUST NOT be used for anything
    security related: rate limiting, access control, audit logs.
    """

    name = "leftmost_non_private"

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        for addr in get_ip_addr_list(headers, self._header_name):
            if addr is not None and not is_private_or_local(addr.ip):
                return addr
        return None


class RightmostNonPrivateStrategy(_ListHeaderStrategy):
    """Rightmost valid, non-private address in a list header.

    Correct when every reverse proxy between the internet and this server
    has a private address.
    """

    name = "rightmost_non_private"

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        for addr in reversed(get_ip_addr_list(headers, self._header_name)):
            if addr is not None and not is_private_or_local(addr.ip):
                return addr
        return None


class RightmostTrustedCountStrategy(_ListHeaderStrategy):
    """The address added by the first of *trusted_count* trusted proxies.

    Each trusted proxy appends exactly one entry, so the client address
    is ``trusted_count`` entries from the right: with one proxy, the
    rightmost entry.
    """

    name = "rightmost_trusted_count"

    def __init__(self, header_name: str, trusted_count: int) -> None:
        super().__init__(header_name)
        if isinstance(trusted_count, bool) or not isinstance(trusted_count, int):
            raise StrategyConfigError(
                f"{type(self).__name__} count must be an integer"
            )
        if trusted_count <= 0:
            raise StrategyConfigError(
                f"{type(self).__name__} count must be greater than zero"
            )
        self._trusted_count = trusted_count

    @property
    def trusted_count(self) -> int:
        return self._trusted_count

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        addrs = get_ip_addr_list(headers, self._header_name)

        target = len(addrs) - self._trusted_count
        if target < 0:
            # Fewer entries than trusted proxies: misconfiguration.
            return None

        # None here means the first trusted proxy wrote garbage.
        return addrs[target]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(header_name={self._header_name!r}, "
            f"trusted_count={self._trusted_count})"
        )


class RightmostTrustedRangeStrategy(_ListHeaderStrategy):
    """Rightmost address that is not inside one of the trusted ranges.

    *trusted_ranges* must cover every reverse proxy on the path to this
    server, private or public.  They may be given as strings (CIDR or
    bare address) or ``ipaddress`` network objects.

    When a third-party CDN or WAF is trusted by address alone, anyone
    who can route through the same provider can spoof the header;
    prefer authenticated origin pulls where available.
    """

    name = "rightmost_trusted_range"

    def __init__(
        self, header_name: str, trusted_ranges: Iterable[IPNetwork | str]
    ) -> None:
        super().__init__(header_name)
        self._trusted_ranges = coerce_networks(trusted_ranges or ())

    @property
    def trusted_ranges(self) -> tuple[IPNetwork, ...]:
        return self._trusted_ranges

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        for addr in reversed(get_ip_addr_list(headers, self._header_name)):
            if addr is not None and is_ip_contained_in_ranges(
                addr.ip, self._trusted_ranges
            ):
                continue
            # First untrusted entry from the right; None if it is garbage.
            return addr
        return None

    def __repr__(self) -> str:
        ranges = [str(r) for r in self._trusted_ranges]
        return (
            f"{type(self).__name__}(header_name={self._header_name!r}, "
            f"trusted_ranges={ranges})"
        )


class ChainStrategy(Strategy):
    """Try each strategy in order; the first derived address wins.

    Typical for a server reachable both directly and via a proxy::

        ChainStrategy(
            SingleIPHeaderStrategy("CF-Connecting-IP"),
            RemoteAddrStrategy(),
        )
    """

    name = "chain"

    def __init__(self, *strategies: Strategy) -> None:
        for s in strategies:
            if not isinstance(s, Strategy):
                raise StrategyConfigError(f"not a strategy: {s!r}")
        self._strategies = strategies

    @property
    def strategies(self) -> tuple[Strategy, ...]:
        return self._strategies

    def derive(
        self, headers: CanonicalHeaders, remote_addr: str
    ) -> ClientAddress | None:
        for strategy in self._strategies:
            addr = strategy.derive(headers, remote_addr)
            if addr is not None:
                return addr
        return None

    def __repr__(self) -> str:
        inner = ", ".join(repr(s) for s in self._strategies)
        return f"{type(self).__name__}({inner})"
