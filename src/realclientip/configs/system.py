from typing import Literal

from pydantic import BaseModel, Field

StrategyType = Literal[
    "remote_addr",
    "single_ip_header",
    "leftmost_non_private",
    "rightmost_non_private",
    "rightmost_trusted_count",
    "rightmost_trusted_range",
    "chain",
]


class StrategyConfig(BaseModel):
    """Declarative description of a client IP strategy.

    Which fields are required depends on ``type``; they are checked when
    the strategy is built, not here.
    """

    type: StrategyType = Field(
        default="remote_addr", description="Strategy kind to build"
    )
    header: str = Field(
        default="",
        description="Header to read, e.g. 'X-Forwarded-For', 'Forwarded', "
        "'X-Real-IP'",
    )
    trusted_count: int = Field(
        default=0,
        description="Number of trusted reverse proxies (rightmost_trusted_count)",
    )
    trusted_ranges: list[str] = Field(
        default_factory=list,
        description="CIDR ranges or bare addresses of trusted proxies "
        "(rightmost_trusted_range)",
    )
    include_cloudflare: bool = Field(
        default=False,
        description="Also trust Cloudflare's published edge ranges",
    )
    strategies: list["StrategyConfig"] = Field(
        default_factory=list,
        description="Ordered sub-strategies (chain)",
    )


class LoggingConfig(BaseModel):
    """Logging output settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )


class MiddlewareConfig(BaseModel):
    """Behaviour of the ASGI client IP middleware."""

    reject_on_failure: bool = Field(
        default=False,
        description="Respond 400 when no client IP can be derived, "
        "instead of passing the request on without one",
    )
    exempt_paths: list[str] = Field(
        default_factory=lambda: ["/health", "/metrics"],
        description="Path prefixes never rejected, so liveness probes and "
        "metric scrapes without proxy headers still get through",
    )
