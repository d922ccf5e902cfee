from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.api import schemas
from shortlink.api.dependencies import get_shortener_service, get_short_url_prefix
from shortlink.db.session import get_db
from shortlink.services.shortener import ShortenerService

router = APIRouter(tags=["shortener"])

ERROR_RESPONSES = {
    400: {"model": schemas.ErrorResponse, "description": "Invalid input"},
    500: {"model": schemas.ErrorResponse, "description": "Internal error"},
    503: {"model": schemas.ErrorResponse, "description": "Store unavailable or throttling"},
}


@router.post(
    "/urls",
    response_model=schemas.SuccessResponse[schemas.URLResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "The URL already had a short ID"}, **ERROR_RESPONSES},
)
async def create_short_url(
    response: Response,
    url_data: Optional[schemas.URLCreateRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenerService = Depends(get_shortener_service),
    short_url_prefix: str = Depends(get_short_url_prefix),
):
    raw_url = url_data.url if url_data is not None else None
    result = await shortener_service.create_short_url(db, raw_url)

    message = None
    if not result.created:
        response.status_code = status.HTTP_200_OK
        message = "URL already exists"

    return schemas.SuccessResponse(
        data=schemas.URLResponse(
            short_url=f"{short_url_prefix}/{result.short_id}",
            short_id=result.short_id,
            original_url=result.original_url,
            created_at=result.created_at,
            created=result.created,
            message=message,
        )
    )


@router.get(
    "/urls/{short_id}",
    response_model=schemas.SuccessResponse[schemas.URLResponse],
    response_model_exclude_none=True,
    responses={404: {"model": schemas.ErrorResponse, "description": "URL not found"}, **ERROR_RESPONSES},
)
async def get_url_info(
    short_id: str,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenerService = Depends(get_shortener_service),
    short_url_prefix: str = Depends(get_short_url_prefix),
):
    mapping = await shortener_service.get_url_mapping(db, short_id)
    return schemas.SuccessResponse(
        data=schemas.URLResponse(
            short_url=f"{short_url_prefix}/{mapping.short_id}",
            short_id=mapping.short_id,
            original_url=mapping.original_url,
            created_at=mapping.created_at,
        )
    )
