# canteen/services/stats_service.py
from collections import defaultdict
from datetime import datetime, timezone

from sqlmodel import Session

from canteen.core.config import get_settings
from canteen.repositories.menu_repo import MenuRepository
from canteen.repositories.stats_repo import StatsRepository
from canteen.schemas.stats import (
    AdminDashboardStats,
    CategoryInventory,
    InventoryStats,
    LatestOrderSummary,
    LowStockItem,
)
from canteen.services.order_service import ACTIVE_STATUSES

settings = get_settings()


class StatsService:
    """
    Orchestrates aggregated admin statistics (inventory and dashboard).
    """

    def __init__(
        self,
        repo: StatsRepository,
        menu_repo: MenuRepository,
        low_stock_threshold: int | None = None,
    ):
        self.repo = repo
        self.menu_repo = menu_repo
        self.low_stock_threshold = (
            settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
        )

    def inventory(self, session: Session) -> InventoryStats:
        """
        Stock and sales figures over the whole catalog.

        Low stock means 0 < stock < threshold; 0 is counted as out of stock.
        """
        items = self.menu_repo.list_items(session)
        threshold = self.low_stock_threshold

        stock_value = revenue = cost = 0.0
        categories: dict[str, dict] = defaultdict(
            lambda: {"item_count": 0, "stock": 0, "stock_value": 0.0, "revenue": 0.0}
        )
        low_stock: list[LowStockItem] = []
        out_of_stock = 0

        for item in items:
            item_stock_value = item.stock_quantity * item.cost_price
            item_revenue = item.sales_count * item.price

            stock_value += item_stock_value
            revenue += item_revenue
            cost += item.sales_count * item.cost_price

            bucket = categories[item.category]
            bucket["item_count"] += 1
            bucket["stock"] += item.stock_quantity
            bucket["stock_value"] += item_stock_value
            bucket["revenue"] += item_revenue

            if item.stock_quantity == 0:
                out_of_stock += 1
            elif item.stock_quantity < threshold:
                low_stock.append(
                    LowStockItem(
                        id=item.id,
                        name=item.name,
                        category=item.category,
                        stock_quantity=item.stock_quantity,
                    )
                )

        low_stock.sort(key=lambda it: it.stock_quantity)

        return InventoryStats(
            total_items=len(items),
            low_stock_count=len(low_stock),
            out_of_stock_count=out_of_stock,
            low_stock_threshold=threshold,
            stock_value=round(stock_value, 2),
            revenue=round(revenue, 2),
            cost=round(cost, 2),
            profit=round(revenue - cost, 2),
            by_category=[
                CategoryInventory(
                    category=name,
                    item_count=data["item_count"],
                    stock=data["stock"],
                    stock_value=round(data["stock_value"], 2),
                    revenue=round(data["revenue"], 2),
                )
                for name, data in sorted(categories.items())
            ],
            low_stock_items=low_stock,
        )

    def dashboard(self, session: Session, latest_n_orders: int = 5) -> AdminDashboardStats:
        """
        Revenue and order counts. Cancelled orders never count as revenue.
        """
        start_of_day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        by_status = self.repo.orders_by_status(session)

        latest_orders = [
            LatestOrderSummary(
                id=o.id,
                order_number=o.order_number,
                created_at=o.created_at,
                user_name=o.user_name,
                total_amount=o.total_amount,
                status=o.status,
            )
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return AdminDashboardStats(
            total_students=self.repo.count_students(session),
            total_orders=self.repo.count_orders(session),
            total_revenue=round(self.repo.total_revenue(session), 2),
            today_revenue=round(self.repo.total_revenue(session, since=start_of_day), 2),
            today_orders=self.repo.count_orders(session, since=start_of_day),
            active_orders=sum(by_status.get(s, 0) for s in ACTIVE_STATUSES),
            orders_by_status=by_status,
            latest_orders=latest_orders,
        )
