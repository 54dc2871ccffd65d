# canteen/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from canteen.schemas.order import OrderStatus


class CategoryInventory(SQLModel):
    """
    Per-category inventory aggregate.
    """
    model_config = ConfigDict(extra="forbid")

    category: str
    item_count: int
    stock: int
    stock_value: float
    revenue: float


class LowStockItem(SQLModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    category: str
    stock_quantity: int


class InventoryStats(SQLModel):
    """
    Stock and sales overview computed from the catalog counters.

      stock_value = sum(stock_quantity * cost_price)
      revenue     = sum(sales_count * price)
      cost        = sum(sales_count * cost_price)
      profit      = revenue - cost
    """
    model_config = ConfigDict(extra="forbid")

    total_items: int
    low_stock_count: int
    out_of_stock_count: int
    low_stock_threshold: int
    stock_value: float
    revenue: float
    cost: float
    profit: float
    by_category: list[CategoryInventory]
    low_stock_items: list[LowStockItem]


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    order_number: str
    created_at: datetime
    user_name: str
    total_amount: float
    status: OrderStatus


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_students: int
    total_orders: int
    total_revenue: float
    today_revenue: float
    today_orders: int
    active_orders: int
    orders_by_status: dict[str, int]
    latest_orders: list[LatestOrderSummary]
