"""Derive the real client IP of an HTTP request behind reverse proxies."""

from realclientip.core import (
    CLOUDFLARE_IP_RANGES,
    ChainStrategy,
    ClientAddress,
    InvalidAddressError,
    LeftmostNonPrivateStrategy,
    RealClientIPError,
    RemoteAddrStrategy,
    RightmostNonPrivateStrategy,
    RightmostTrustedCountStrategy,
    RightmostTrustedRangeStrategy,
    SingleIPHeaderStrategy,
    Strategy,
    StrategyConfigError,
    addresses_and_ranges_to_networks,
    parse_ip_addr,
)

__version__ = "0.1.0"

__all__ = [
    "CLOUDFLARE_IP_RANGES",
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
    "parse_ip_addr",
]
