"""Client IP extraction for FastAPI / Starlette applications.

Adapts an ASGI request into the two inputs every strategy needs:

* the headers, as received and in order (``scope["headers"]``)
* the socket peer as ``host:port`` or ``[host]:port`` (``scope["client"]``)

Usable as a FastAPI dependency::

    client_ip: str | None = Depends(get_client_ip)

When ``ClientIPMiddleware`` is installed the IP is derived once per
request and read back from ``request.state``; otherwise the strategy
stored on ``app.state`` is applied on demand.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi import Request

from realclientip.core import CanonicalHeaders, Strategy, normalize_headers

from .exceptions import ClientIPUnavailable

CLIENT_IP_STATE_KEY = "client_ip"
STRATEGY_STATE_KEY = "client_ip_strategy"


def scope_headers(scope: Mapping[str, Any]) -> CanonicalHeaders:
    """Decode the raw ASGI header list, keeping duplicates and order."""
    return normalize_headers(scope.get("headers", ()))


def scope_remote_addr(scope: Mapping[str, Any]) -> str:
    """Format ``scope["client"]`` the way a socket peer address is written."""
    client = scope.get("client")
    if not client:
        return ""

    host, port = client[0], client[1]
    if port is None:
        return str(host)
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def get_strategy(request: Request) -> Strategy:
    """Return the strategy configured on the application."""
    strategy = getattr(request.app.state, STRATEGY_STATE_KEY, None)
    if strategy is None:
        raise RuntimeError(
            f"no client IP strategy on app.state.{STRATEGY_STATE_KEY}"
        )
    return strategy


def get_client_ip(request: Request) -> str | None:
    """Derive the real client IP of *request*, or ``None``."""
    state = request.scope.get("state") or {}
    if CLIENT_IP_STATE_KEY in state:
        return state[CLIENT_IP_STATE_KEY]

    strategy = get_strategy(request)
    return strategy.client_ip(
        scope_headers(request.scope), scope_remote_addr(request.scope)
    )


def require_client_ip(request: Request) -> str:
    """Like ``get_client_ip`` but fails the request when there is no IP."""
    client_ip = get_client_ip(request)
    if client_ip is None:
        raise ClientIPUnavailable("Client IP could not be determined")
    return client_ip
