"""Try strategies against hand-written request headers."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from realclientip.configs.system import StrategyConfig
from realclientip.core import (
    FORWARDED_HEADER,
    X_FORWARDED_FOR_HEADER,
    CanonicalHeaders,
    LeftmostNonPrivateStrategy,
    RemoteAddrStrategy,
    RightmostNonPrivateStrategy,
    SingleIPHeaderStrategy,
    Strategy,
    normalize_headers,
)
from realclientip.registry import build_strategy

logger = logging.getLogger(__name__)

_NO_RESULT = "(none)"


def parse_header_line(line: str) -> tuple[str, str]:
    """Split ``"Name: value"`` into its name and value.

    Raises:
        ValueError: if the line has no colon or an empty name.
    """
    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"header must look like 'Name: value', got {line!r}")
    return name, value.strip()


class Playground:
    """Runs one or more strategies over a fixed set of request inputs."""

    def __init__(
        self,
        header_lines: list[str],
        remote_addr: str = "",
        output_stream: TextIO | None = None,
    ) -> None:
        self.headers: CanonicalHeaders = normalize_headers(
            [parse_header_line(line) for line in header_lines]
        )
        self.remote_addr = remote_addr
        self.output_stream = output_stream or sys.stdout

    def run(self, config: StrategyConfig) -> str | None:
        """Build the strategy in *config*, print and return its result."""
        strategy = build_strategy(config)
        client_ip = strategy.client_ip(self.headers, self.remote_addr)
        self._print(f"{client_ip or _NO_RESULT}\n")
        return client_ip

    def run_all(self) -> dict[str, str | None]:
        """Run every strategy that applies to the given headers.

        Count- and range-based strategies need deployment knowledge and
        are left out.
        """
        results: dict[str, str | None] = {}
        for strategy in self._applicable_strategies():
            client_ip = strategy.client_ip(self.headers, self.remote_addr)
            results[repr(strategy)] = client_ip
            self._print(f"{strategy!r}\n    {client_ip or _NO_RESULT}\n")
        return results

    def _applicable_strategies(self) -> list[Strategy]:
        strategies: list[Strategy] = [RemoteAddrStrategy()]
        for name in self.headers:
            if name in (X_FORWARDED_FOR_HEADER, FORWARDED_HEADER):
                strategies.append(LeftmostNonPrivateStrategy(name))
                strategies.append(RightmostNonPrivateStrategy(name))
            else:
                strategies.append(SingleIPHeaderStrategy(name))
        return strategies

    def _print(self, text: str) -> None:
        self.output_stream.write(text)
        self.output_stream.flush()
