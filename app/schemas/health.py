"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the gateway health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. local, dev, prod)")
    users_service: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Users manager reachability when the check is performed",
    )
