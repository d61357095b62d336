"""Pydantic schemas for the bridge's own endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str
    version: str
