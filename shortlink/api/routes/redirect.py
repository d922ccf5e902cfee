"""URL redirection endpoint."""

from fastapi import APIRouter, Depends, status
from starlette.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.api import schemas
from shortlink.api.dependencies import get_settings, get_shortener_service
from shortlink.core.config import Settings
from shortlink.db.session import get_db
from shortlink.services.shortener import ShortenerService

router = APIRouter(tags=["redirect"])


@router.get(
    "/{short_id}",
    response_class=RedirectResponse,
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid short ID"},
        404: {"model": schemas.ErrorResponse, "description": "URL not found"},
        500: {"model": schemas.ErrorResponse, "description": "Invalid stored data or internal error"},
        503: {"model": schemas.ErrorResponse, "description": "Store unavailable or throttling"},
    },
)
async def redirect_to_original_url(
    short_id: str,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenerService = Depends(get_shortener_service),
    app_settings: Settings = Depends(get_settings),
):
    """Redirect to the original URL."""
    original_url = await shortener_service.resolve_short_url(db, short_id)
    return RedirectResponse(url=original_url, status_code=app_settings.REDIRECT_STATUS_CODE)
