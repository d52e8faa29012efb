"""FastAPI application factory.

Run with::

    uvicorn realclientip.api.app:create_app --factory --no-proxy-headers

Uvicorn's own ``--proxy-headers`` handling rewrites ``scope["client"]``
from ``X-Forwarded-For``; turn it off so the strategy sees the real
socket peer.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from realclientip import __version__
from realclientip.configs.config import AppConfig, get_app_config
from realclientip.infra.logging import setup_logging
from realclientip.registry import build_strategy

from .exceptions import register_exception_handlers
from .middleware import ClientIPMiddleware
from .real_ip import STRATEGY_STATE_KEY
from .routes import router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The strategy is built before anything else, so a bad configuration
    fails startup with ``StrategyConfigError``.
    """
    if config is None:
        config = get_app_config()

    strategy = build_strategy(config.strategy)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(config.logging)
        logger.info("Client IP strategy: %r", strategy)
        yield

    app = FastAPI(
        title="realclientip",
        description="Reports the real client IP of each request",
        version=__version__,
        lifespan=lifespan,
    )
    setattr(app.state, STRATEGY_STATE_KEY, strategy)

    app.add_middleware(
        ClientIPMiddleware,
        strategy=strategy,
        reject_on_failure=config.middleware.reject_on_failure,
        exempt_paths=config.middleware.exempt_paths,
    )
    register_exception_handlers(app)
    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    return app
