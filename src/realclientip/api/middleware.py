"""ASGI middleware deriving the client IP once per request."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from starlette.types import ASGIApp, Receive, Scope, Send

from realclientip.core import Strategy
from realclientip.infra.metrics import record_derivation

from .exceptions import client_ip_unavailable_response
from .real_ip import CLIENT_IP_STATE_KEY, scope_headers, scope_remote_addr

logger = logging.getLogger(__name__)


class ClientIPMiddleware:
    """Store the derived client IP in ``request.state.client_ip``.

    A request without a derivable IP is logged and counted.  With
    ``reject_on_failure`` it is answered with a 400 instead of reaching
    the application, unless its path is one of ``exempt_paths`` or below
    one; otherwise ``request.state.client_ip`` is ``None``.
    """

    def __init__(
        self,
        app: ASGIApp,
        strategy: Strategy,
        reject_on_failure: bool = False,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        self.app = app
        self.strategy = strategy
        self.reject_on_failure = reject_on_failure
        self.exempt_paths = tuple(p.rstrip("/") for p in exempt_paths)

    def _is_exempt(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self.exempt_paths
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        remote_addr = scope_remote_addr(scope)
        client_ip = self.strategy.client_ip(scope_headers(scope), remote_addr)
        record_derivation(self.strategy.name, client_ip)
        scope.setdefault("state", {})[CLIENT_IP_STATE_KEY] = client_ip

        if client_ip is None:
            path = scope.get("path", "")
            if (
                self.reject_on_failure
                and scope["type"] == "http"
                and not self._is_exempt(path)
            ):
                logger.warning(
                    "Rejecting request without client IP: %r (remote_addr=%r, path=%s)",
                    self.strategy,
                    remote_addr,
                    path,
                )
                response = client_ip_unavailable_response(
                    "Client IP could not be determined"
                )
                await response(scope, receive, send)
                return
            logger.debug(
                "No client IP derivable with %r (remote_addr=%r, path=%s)",
                self.strategy,
                remote_addr,
                path,
            )

        await self.app(scope, receive, send)
