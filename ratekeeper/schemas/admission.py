"""Pydantic schemas for admission endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AdmissionResponse(BaseModel):
    """Returned when a guarded request was admitted."""

    admitted: bool = Field(True, description="Always true; denials are returned as 429.")
    algorithm: str = Field(..., description="Limiter algorithm that made the decision.")


class PolicyResponse(BaseModel):
    """Active admission policy as configured."""

    enabled: bool = Field(..., description="Whether guarded routes are rate limited.")
    algorithm: str = Field(..., description="fixed_window, sliding_window, leaky_bucket or token_bucket.")
    parameters: dict[str, float | int] = Field(
        default_factory=dict,
        description="Parameters used by the selected algorithm.",
    )
