# app/schemas/stats.py
from decimal import Decimal

from pydantic import ConfigDict
from sqlmodel import SQLModel


class TopProduct(SQLModel):
    """
    Aggregated sales of one product.
    """
    model_config = ConfigDict(extra="forbid")

    product_id: str
    name: str
    total_quantity: int
    total_revenue: Decimal


class SellerDashboardStats(SQLModel):
    """
    Full payload for the seller dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    pending_orders: int
    total_revenue: Decimal
    top_products: list[TopProduct]


class AdminDashboardStats(SQLModel):
    """
    Platform-wide payload for the admin dashboard.

    `*_last_30_days` covers the 30 days up to now and
    `*_previous_30_days` the 30 days before that, so the dashboard can show
    a trend. Revenue only counts orders whose payment is recorded as paid.
    """
    model_config = ConfigDict(extra="forbid")

    total_revenue: Decimal
    revenue_last_30_days: Decimal
    revenue_previous_30_days: Decimal

    total_orders: int
    orders_last_30_days: int
    orders_previous_30_days: int

    total_products: int
    products_last_30_days: int
    products_previous_30_days: int

    total_customers: int
    customers_last_30_days: int
    customers_previous_30_days: int

    total_sellers: int

    pending_orders: int
    delivered_orders: int
    cancelled_orders: int
    paid_orders: int
    unpaid_orders: int

    top_products: list[TopProduct]
