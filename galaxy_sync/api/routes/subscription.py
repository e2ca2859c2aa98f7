"""
Automation platform subscription endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from galaxy_sync.api.auth import verify_api_key
from galaxy_sync.api.dependencies import get_subscription_service
from galaxy_sync.api.models import ErrorResponse, SubscriptionResponse
from galaxy_sync.subscription.service import SubscriptionService

router = APIRouter()


@router.get(
    "/aap/subscription",
    response_model=SubscriptionResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Last automation platform subscription check",
)
async def get_subscription(
    api_key: str = Depends(verify_api_key),
    service: SubscriptionService | None = Depends(get_subscription_service),
) -> JSONResponse:
    """
    Report the last subscription check, running one first if none has run.

    The HTTP status mirrors the check: 200 when the platform answered,
    495 for an expired certificate, 404 when the connection was refused.
    """
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Automation platform subscription check is not configured",
        )

    result = service.status
    if result.checked_at is None:
        result = await service.check()

    body = SubscriptionResponse(is_valid=result.is_valid, error_message=result.error_message)
    return JSONResponse(
        status_code=result.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
