"""API response models."""

from pydantic import BaseModel, Field


class ClientIPResponse(BaseModel):
    """The client IP derived for the calling request."""

    client_ip: str = Field(description="Canonical client IP, with zone if any")
    strategy: str = Field(description="Strategy that derived it")


class HealthResponse(BaseModel):
    status: str = "ok"
