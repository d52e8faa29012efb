"""Build strategies from ``StrategyConfig``.

Validation happens here, once, at startup: a bad header name, count or
range raises ``StrategyConfigError`` and should abort the process
rather than fall back to some default.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from realclientip.configs.system import StrategyConfig
from realclientip.core import (
    CLOUDFLARE_IP_RANGES,
    ChainStrategy,
    LeftmostNonPrivateStrategy,
    RemoteAddrStrategy,
    RightmostNonPrivateStrategy,
    RightmostTrustedCountStrategy,
    RightmostTrustedRangeStrategy,
    SingleIPHeaderStrategy,
    Strategy,
    StrategyConfigError,
)

logger = logging.getLogger(__name__)

StrategyBuilder = Callable[[StrategyConfig], Strategy]


def _build_remote_addr(config: StrategyConfig) -> Strategy:
    return RemoteAddrStrategy()


def _build_single_ip_header(config: StrategyConfig) -> Strategy:
    return SingleIPHeaderStrategy(config.header)


def _build_leftmost_non_private(config: StrategyConfig) -> Strategy:
    return LeftmostNonPrivateStrategy(config.header)


def _build_rightmost_non_private(config: StrategyConfig) -> Strategy:
    return RightmostNonPrivateStrategy(config.header)


def _build_rightmost_trusted_count(config: StrategyConfig) -> Strategy:
    return RightmostTrustedCountStrategy(config.header, config.trusted_count)


def _build_rightmost_trusted_range(config: StrategyConfig) -> Strategy:
    ranges = list(config.trusted_ranges)
    if config.include_cloudflare:
        ranges.extend(CLOUDFLARE_IP_RANGES)
    return RightmostTrustedRangeStrategy(config.header, ranges)


class StrategyRegistry:
    """Registry of strategy builders, keyed by ``StrategyConfig.type``."""

    _known_strategies: dict[str, StrategyBuilder] = {
        "remote_addr": _build_remote_addr,
        "single_ip_header": _build_single_ip_header,
        "leftmost_non_private": _build_leftmost_non_private,
        "rightmost_non_private": _build_rightmost_non_private,
        "rightmost_trusted_count": _build_rightmost_trusted_count,
        "rightmost_trusted_range": _build_rightmost_trusted_range,
    }

    def build(self, config: StrategyConfig) -> Strategy:
        """Build (and validate) the strategy described by *config*."""
        if config.type == "chain":
            return self._build_chain(config)

        builder = self._known_strategies.get(config.type)
        if builder is None:
            raise StrategyConfigError(f"unknown strategy type: {config.type!r}")

        strategy = builder(config)
        logger.debug("Built client IP strategy %r", strategy)
        return strategy

    def _build_chain(self, config: StrategyConfig) -> Strategy:
        if not config.strategies:
            raise StrategyConfigError("chain strategy needs at least one strategy")
        strategy = ChainStrategy(*(self.build(c) for c in config.strategies))
        logger.debug("Built client IP strategy %r", strategy)
        return strategy


def build_strategy(config: StrategyConfig) -> Strategy:
    """Build the strategy described by *config*.

    Raises:
        StrategyConfigError: if the configuration is invalid.
    """
    return StrategyRegistry().build(config)
