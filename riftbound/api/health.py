"""
Health check endpoints.

`/health` answers as long as the process is up. `/ready` also reads the card
catalog, so a deployment is only routed traffic once the record store answers.
An empty or stale catalog still counts as ready; clients refresh it themselves.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.db.database import get_session
from riftbound.db.operations import card_sync_times
from riftbound.models.failure import RecordStoreError
from riftbound.services.card_catalog import should_refresh_cache

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    catalog_cards: int | None = None
    catalog_stale: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Report store connectivity and catalog size. 503 when the store is down."""
    try:
        synced = await card_sync_times(session)
    except RecordStoreError as e:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database=e.kind.value)

    return HealthResponse(
        status="ready",
        database="connected",
        catalog_cards=len(synced),
        catalog_stale=should_refresh_cache(synced, datetime.now(timezone.utc)),
    )
