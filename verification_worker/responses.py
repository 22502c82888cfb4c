"""
Worker Response Models
======================

Pydantic models for API responses.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""

    service: str
    status: str
    build_id: str
    version: str
    timestamp: str
