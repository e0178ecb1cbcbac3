from __future__ import annotations

from fastapi import APIRouter, Depends

from ratekeeper.core.config import settings
from ratekeeper.core.rate_limit import enforce_rate_limit
from ratekeeper.schemas.admission import AdmissionResponse, PolicyResponse

router = APIRouter(prefix="/admission", tags=["Admission"])


@router.get(
    "",
    response_model=AdmissionResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def check_admission() -> AdmissionResponse:
    """Consume one admission for the calling client.

    Returns 200 when the caller's limiter admits the request. Denied
    callers never reach this handler; they receive 429 from the
    rate limit dependency.
    """

    return AdmissionResponse(admitted=True, algorithm=settings.rate_limit.algorithm)


@router.get("/policy", response_model=PolicyResponse)
def get_policy() -> PolicyResponse:
    """Describe the configured admission policy without consuming capacity."""

    cfg = settings.rate_limit
    if cfg.algorithm in ("fixed_window", "sliding_window"):
        parameters = {"window_seconds": cfg.window_seconds, "max_requests": cfg.max_requests}
    else:
        parameters = {"rate": cfg.rate, "capacity": cfg.capacity}

    return PolicyResponse(enabled=cfg.enabled, algorithm=cfg.algorithm, parameters=parameters)
