# app/repositories/stats_repo.py
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.order import Order, OrderItem
from app.models.product import Product
from app.models.shop import Shop


def _in_window(stmt, column, since: datetime | None, until: datetime | None):
    if since is not None:
        stmt = stmt.where(column >= since)
    if until is not None:
        stmt = stmt.where(column < until)
    return stmt


class StatsRepository:
    """
    Read-only aggregated queries for the seller and admin dashboards.

    A seller "owns" an order when at least one of its lines carries the
    seller's id; seller revenue only counts the seller's own lines.
    """

    # ---- Seller dashboard ----

    def count_orders(self, session: Session, seller_id: str) -> int:
        stmt = (
            select(func.count(func.distinct(OrderItem.order_id)))
            .where(OrderItem.seller_id == seller_id)
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_pending_orders(self, session: Session, seller_id: str) -> int:
        stmt = (
            select(func.count(func.distinct(Order.id)))
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(OrderItem.seller_id == seller_id, Order.status == "pending")
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(self, session: Session, seller_id: str) -> Decimal:
        """
        Sum of price * quantity over the seller's lines in non-cancelled orders.
        """
        stmt = (
            select(func.coalesce(func.sum(OrderItem.price * OrderItem.quantity), 0))
            .join(Order, Order.id == OrderItem.order_id)
            .where(OrderItem.seller_id == seller_id, Order.status != "cancelled")
        )
        value = session.exec(stmt).one()
        return Decimal(str(value or 0))

    def top_products(
        self,
        session: Session,
        seller_id: str | None = None,
        limit: int = 5,
    ) -> list[tuple]:
        """
        Products ranked by units sold in non-cancelled orders, for one
        seller or across the platform when `seller_id` is None.
        """
        qty_sum = func.coalesce(func.sum(OrderItem.quantity), 0)
        revenue_sum = func.coalesce(func.sum(OrderItem.quantity * OrderItem.price), 0)

        stmt = (
            select(
                OrderItem.product_id,
                func.max(OrderItem.product_name),
                qty_sum.label("total_quantity"),
                revenue_sum.label("total_revenue"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status != "cancelled")
        )
        if seller_id is not None:
            stmt = stmt.where(OrderItem.seller_id == seller_id)
        stmt = stmt.group_by(OrderItem.product_id).order_by(qty_sum.desc()).limit(limit)

        return list(session.exec(stmt).all())

    # ---- Admin dashboard ----

    def paid_revenue(
        self,
        session: Session,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> Decimal:
        """Sum of order totals whose payment was recorded as paid."""
        stmt = select(func.coalesce(func.sum(Order.total), 0)).where(
            Order.payment_status == "paid"
        )
        value = session.exec(_in_window(stmt, Order.created_at, since, until)).one()
        return Decimal(str(value or 0))

    def count_all_orders(
        self,
        session: Session,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Order)
        value = session.exec(_in_window(stmt, Order.created_at, since, until)).one()
        return int(value or 0)

    def count_orders_where(
        self,
        session: Session,
        status: str | None = None,
        payment_status: str | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        if payment_status:
            stmt = stmt.where(Order.payment_status == payment_status)
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_products(
        self,
        session: Session,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Product)
        value = session.exec(_in_window(stmt, Product.created_at, since, until)).one()
        return int(value or 0)

    def count_customers(
        self,
        session: Session,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        """
        Distinct users who placed at least one order in the window.
        """
        stmt = select(func.count(func.distinct(Order.user_id)))
        value = session.exec(_in_window(stmt, Order.created_at, since, until)).one()
        return int(value or 0)

    def count_active_sellers(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Shop).where(Shop.is_active == True)  # noqa: E712
        value = session.exec(stmt).one()
        return int(value or 0)
