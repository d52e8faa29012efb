"""Entry point for running the playground CLI as a module.

Examples::

    python -m realclientip.cli --remote-addr 192.168.1.2:8888 \\
        -H "X-Forwarded-For: 1.1.1.1, 3.3.3.3, 192.168.1.1" \\
        --strategy rightmost_non_private --header-name X-Forwarded-For

    python -m realclientip.cli --all -H "X-Real-IP: 4.4.4.4"
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from realclientip.configs.config import get_app_config
from realclientip.configs.system import LoggingConfig, StrategyConfig
from realclientip.core import StrategyConfigError
from realclientip.infra.logging import setup_logging

from .playground import Playground

_STRATEGY_CHOICES = (
    "remote_addr",
    "single_ip_header",
    "leftmost_non_private",
    "rightmost_non_private",
    "rightmost_trusted_count",
    "rightmost_trusted_range",
)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="realclientip",
        description="Derive the real client IP from request headers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-H",
        "--header",
        dest="headers",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Request header, in receipt order; repeat for more",
    )
    parser.add_argument(
        "--remote-addr",
        type=str,
        default="",
        help="Socket peer address, e.g. 192.168.1.2:8888",
    )
    parser.add_argument(
        "--strategy",
        choices=_STRATEGY_CHOICES,
        default=None,
        help="Strategy to apply (default: the configured strategy)",
    )
    parser.add_argument(
        "--header-name",
        type=str,
        default="",
        help="Header the strategy reads",
    )
    parser.add_argument(
        "--trusted-count",
        type=int,
        default=0,
        help="Number of trusted proxies (rightmost_trusted_count)",
    )
    parser.add_argument(
        "--trusted-range",
        dest="trusted_ranges",
        action="append",
        default=[],
        help="Trusted CIDR or address (rightmost_trusted_range); repeat for more",
    )
    parser.add_argument(
        "--include-cloudflare",
        action="store_true",
        help="Trust Cloudflare's edge ranges (rightmost_trusted_range)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Run every strategy that applies to the given headers",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def strategy_config_from_args(args: argparse.Namespace) -> StrategyConfig:
    """Strategy from the flags, or the application config without ``--strategy``."""
    if args.strategy is None:
        return get_app_config().strategy

    return StrategyConfig(
        type=args.strategy,
        header=args.header_name,
        trusted_count=args.trusted_count,
        trusted_ranges=args.trusted_ranges,
        include_cloudflare=args.include_cloudflare,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return its exit status."""
    args = parse_args(argv)
    setup_logging(
        LoggingConfig(level="DEBUG" if args.debug else "WARNING", json_output=False)
    )

    try:
        playground = Playground(args.headers, remote_addr=args.remote_addr)
        if args.all:
            results = playground.run_all()
            return 0 if any(results.values()) else 1

        client_ip = playground.run(strategy_config_from_args(args))
    except (StrategyConfigError, ValueError) as e:
        logging.getLogger(__name__).debug("Invalid input", exc_info=True)
        sys.stderr.write(f"error: {e}\n")
        return 2

    return 0 if client_ip else 1


def cli_entry() -> None:
    """CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
