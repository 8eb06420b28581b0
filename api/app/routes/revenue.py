"""Developer-facing earnings and payout endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.developer import Developer
from app.models.user import User
from app.schemas.revenue import (
    MONTH_REGEX, MonthlyEarning, PayoutResponse, WebsiteEarning,
)
from app.services.reporting_service import ReportingService
from app.utils.auth import get_current_user

router = APIRouter()


async def _current_developer(user: User, svc: ReportingService) -> Developer:
    developer = await svc.get_developer_for_user(user.id)
    if not developer:
        raise HTTPException(status_code=404, detail='Developer profile not found')
    return developer


@router.get('/earnings', response_model=list[MonthlyEarning])
async def get_earnings(
    limit: int = Query(12, ge=1, le=60),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Monthly earnings for the current developer, newest first."""
    svc = ReportingService(db)
    developer = await _current_developer(user, svc)
    return await svc.get_developer_earnings(developer.id, limit, offset)


@router.get('/earnings/{month}', response_model=list[WebsiteEarning])
async def get_earnings_details(
    month: str = Path(..., pattern=MONTH_REGEX),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Per-website earnings for one month."""
    svc = ReportingService(db)
    developer = await _current_developer(user, svc)
    return await svc.get_developer_earnings_details(developer.id, month)


@router.get('/payouts', response_model=list[PayoutResponse])
async def get_payouts(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Payout history for the current developer."""
    svc = ReportingService(db)
    developer = await _current_developer(user, svc)
    return await svc.get_developer_payouts(developer.id, limit)
