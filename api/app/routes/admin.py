"""Admin endpoints: trigger distribution, tune settings, platform reports."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.user import User
from app.schemas.revenue import (
    MONTH_REGEX,
    CalculateRevenueRequest,
    DistributionRunResponse,
    PayoutResponse,
    PayoutStatusUpdate,
    RevenueSettingsResponse,
    RevenueSettingsUpdate,
    TopDeveloper,
)
from app.services.distribution_service import (
    DistributionService, DuplicateRunError, PersistenceFailure,
)
from app.services.reporting_service import ReportingService
from app.services.settings_service import ConfigurationError, SettingsService
from app.utils.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/calculate', response_model=DistributionRunResponse)
async def calculate_revenue(
    data: CalculateRevenueRequest | None = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Run the monthly distribution. 409 if the month was already run."""
    data = data or CalculateRevenueRequest()
    svc = DistributionService(db)
    try:
        log = await svc.calculate_monthly_revenue(data.month, force=data.force)
    except DuplicateRunError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PersistenceFailure as e:
        logger.error(f'Revenue calculation failed: {e}')
        raise HTTPException(status_code=500, detail='Failed to calculate revenue')
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f'Admin {admin.id} ran distribution for {log.month}')
    return log


@router.get('/settings', response_model=RevenueSettingsResponse)
async def get_settings(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Current revenue settings (defaults if never configured)."""
    return await SettingsService(db).get_settings()


@router.put('/settings', response_model=RevenueSettingsResponse)
async def update_settings(
    data: RevenueSettingsUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partially update revenue settings. Out-of-range values are rejected whole."""
    try:
        return await SettingsService(db).update_settings(data.model_dump(exclude_unset=True))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get('/stats', response_model=list[DistributionRunResponse])
async def get_platform_stats(
    months: int = Query(12, ge=1, le=120),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Distribution run history, newest month first."""
    return await ReportingService(db).get_platform_revenue_stats(months)


@router.get('/top-developers/{month}', response_model=list[TopDeveloper])
async def get_top_developers(
    month: str = Path(..., pattern=MONTH_REGEX),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Leaderboard of developer earnings for a month."""
    return await ReportingService(db).get_top_earning_developers(month, limit)


@router.patch('/payouts/{payout_id}', response_model=PayoutResponse)
async def update_payout_status(
    data: PayoutStatusUpdate,
    payout_id: int = Path(..., ge=1),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Record progress reported by the payment processor."""
    svc = ReportingService(db)
    try:
        payout = await svc.update_payout_status(
            payout_id, data.status, data.reference_id, data.notes,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not payout:
        raise HTTPException(status_code=404, detail='Payout not found')
    return payout
