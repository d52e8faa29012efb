"""HTTP routes: report the caller's derived client IP."""

from fastapi import APIRouter

from .deps import RequiredClientIPDep, StrategyDep
from .models import ClientIPResponse, HealthResponse

router = APIRouter()


@router.get("/ip", response_model=ClientIPResponse)
async def read_client_ip(
    client_ip: RequiredClientIPDep, strategy: StrategyDep
) -> ClientIPResponse:
    """Echo the client IP derived for this request."""
    return ClientIPResponse(client_ip=client_ip, strategy=strategy.name)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()
