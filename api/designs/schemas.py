"""
Design records API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DesignCreateRequest(BaseModel):
    design_id: str = Field(..., min_length=1, max_length=100)
    client: str = Field(..., min_length=1, max_length=200)
    fabric: str | None = Field(default=None, max_length=200)
    comments: str | None = Field(default=None, max_length=2000)
    approved: str | None = Field(default=None, max_length=50)
    final_dress: str | None = Field(default=None, max_length=500)


class DesignUpdateRequest(BaseModel):
    # Only fields present in the request body are written.
    client: str | None = Field(default=None, min_length=1, max_length=200)
    fabric: str | None = Field(default=None, max_length=200)
    comments: str | None = Field(default=None, max_length=2000)
    approved: str | None = Field(default=None, max_length=50)
    final_dress: str | None = Field(default=None, max_length=500)
