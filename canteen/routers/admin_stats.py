# canteen/routers/admin_stats.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.core.auth import require_admin
from canteen.database import get_session
from canteen.repositories.menu_repo import MenuRepository
from canteen.repositories.stats_repo import StatsRepository
from canteen.schemas.stats import AdminDashboardStats, InventoryStats
from canteen.services.stats_service import StatsService

router = APIRouter(prefix="/admin", tags=["Admin Stats"])

repo = StatsRepository()
service = StatsService(repo, MenuRepository())


@router.get(
    "/dashboard",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_dashboard(
    latest: int = 5,
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Query params (optional):
      - latest: number of recent orders to include (default 5)

    Only accessible to users with role='admin'.
    """
    return service.dashboard(session, latest_n_orders=latest)


@router.get(
    "/inventory",
    response_model=InventoryStats,
    dependencies=[Depends(require_admin)],
)
def get_inventory(session: Session = Depends(get_session)):
    """
    Stock value, sales revenue/profit and low-stock alerts.
    """
    return service.inventory(session)
