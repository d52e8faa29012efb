"""Exception handlers for client IP failures."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from realclientip.infra.metrics import CLIENT_IP_REJECTIONS_TOTAL

CLIENT_IP_UNAVAILABLE_CODE = "CLIENT_IP_UNAVAILABLE"


class ClientIPUnavailable(Exception):
    """Raised when a handler requires a client IP and none is derivable."""


def client_ip_unavailable_response(detail: str) -> JSONResponse:
    """The 400 response sent when a request carries no usable client IP."""
    CLIENT_IP_REJECTIONS_TOTAL.inc()
    return JSONResponse(
        status_code=400,
        content={"detail": detail, "code": CLIENT_IP_UNAVAILABLE_CODE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(ClientIPUnavailable)
    async def handle_client_ip_unavailable(
        request: Request, exc: ClientIPUnavailable
    ) -> JSONResponse:
        return client_ip_unavailable_response(str(exc))
