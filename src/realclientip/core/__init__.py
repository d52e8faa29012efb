"""Client IP derivation: address parsing, header flattening, strategies.

Pure, synchronous and framework-agnostic.  Nothing in here performs I/O
or holds mutable state, so a configured strategy can be shared by every
request handler in the process.
"""

from .address import (
    ClientAddress,
    good_ip_addr,
    parse_ip_addr,
    split_host_port,
    split_host_zone,
    trim_matched_ends,
)
from .exceptions import InvalidAddressError, RealClientIPError, StrategyConfigError
from .headers import (
    FORWARDED_HEADER,
    X_FORWARDED_FOR_HEADER,
    CanonicalHeaders,
    canonical_header_key,
    get_ip_addr_list,
    last_header,
    normalize_headers,
    parse_forwarded_list_item,
)
from .providers import CLOUDFLARE_IP_RANGES
from .ranges import (
    PRIVATE_AND_LOCAL_RANGES,
    addresses_and_ranges_to_networks,
    is_ip_contained_in_ranges,
    is_private_or_local,
)
from .strategies import (
    ChainStrategy,
    LeftmostNonPrivateStrategy,
    RemoteAddrStrategy,
    RightmostNonPrivateStrategy,
    RightmostTrustedCountStrategy,
    RightmostTrustedRangeStrategy,
    SingleIPHeaderStrategy,
    Strategy,
)

__all__ = [
    "CLOUDFLARE_IP_RANGES",
    "FORWARDED_HEADER",
    "PRIVATE_AND_LOCAL_RANGES",
    "X_FORWARDED_FOR_HEADER",
    "CanonicalHeaders",
    "ChainStrategy",
    "ClientAddress",
    "InvalidAddressError",
    "LeftmostNonPrivateStrategy",
    "RealClientIPError",
    "RemoteAddrStrategy",
    "RightmostNonPrivateStrategy",
    "RightmostTrustedCountStrategy",
    "RightmostTrustedRangeStrategy",
    "SingleIPHeaderStrategy",
    "Strategy",
    "StrategyConfigError",
    "addresses_and_ranges_to_networks",
    "canonical_header_key",
    "get_ip_addr_list",
    "good_ip_addr",
    "is_ip_contained_in_ranges",
    "is_private_or_local",
    "last_header",
    "normalize_headers",
    "parse_forwarded_list_item",
    "parse_ip_addr",
    "split_host_port",
    "split_host_zone",
    "trim_matched_ends",
]
