# app/routers/admin_stats.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminDashboardStats
from app.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

service = StatsService(StatsRepository())


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(session: Session = Depends(get_session)):
    """
    Platform totals for the admin dashboard, with last-30-days vs
    previous-30-days figures for revenue, orders, products and customers.

    Only accessible to users with role='admin'.
    """
    return service.get_admin_dashboard_stats(session=session)
