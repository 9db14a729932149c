# app/services/stats_service.py
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlmodel import Session

from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminDashboardStats, SellerDashboardStats, TopProduct

PERIOD = timedelta(days=30)


class StatsService:
    """
    Orchestrates aggregated seller and admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def _top_products(
        self,
        session: Session,
        seller_id: str | None,
        limit: int,
    ) -> list[TopProduct]:
        top_rows = self.repo.top_products(session, seller_id, limit=limit)
        top_products: list[TopProduct] = []
        for product_id, name, total_quantity, product_revenue in top_rows:
            top_products.append(
                TopProduct(
                    product_id=product_id,
                    name=name,
                    total_quantity=int(total_quantity or 0),
                    total_revenue=Decimal(str(product_revenue or 0)),
                )
            )
        return top_products

    def get_seller_dashboard_stats(
        self,
        session: Session,
        seller_id: uuid.UUID,
        top_n_products: int = 5,
    ) -> SellerDashboardStats:
        # order_items store the seller id as text
        seller_key = str(seller_id)

        return SellerDashboardStats(
            total_orders=self.repo.count_orders(session, seller_key),
            pending_orders=self.repo.count_pending_orders(session, seller_key),
            total_revenue=self.repo.total_revenue(session, seller_key),
            top_products=self._top_products(session, seller_key, top_n_products),
        )

    def get_admin_dashboard_stats(
        self,
        session: Session,
        now: datetime | None = None,
        top_n_products: int = 5,
    ) -> AdminDashboardStats:
        now = now or datetime.now(timezone.utc)
        last_start = now - PERIOD
        previous_start = last_start - PERIOD
        repo = self.repo

        return AdminDashboardStats(
            total_revenue=repo.paid_revenue(session),
            revenue_last_30_days=repo.paid_revenue(session, since=last_start),
            revenue_previous_30_days=repo.paid_revenue(
                session, since=previous_start, until=last_start
            ),
            total_orders=repo.count_all_orders(session),
            orders_last_30_days=repo.count_all_orders(session, since=last_start),
            orders_previous_30_days=repo.count_all_orders(
                session, since=previous_start, until=last_start
            ),
            total_products=repo.count_products(session),
            products_last_30_days=repo.count_products(session, since=last_start),
            products_previous_30_days=repo.count_products(
                session, since=previous_start, until=last_start
            ),
            total_customers=repo.count_customers(session),
            customers_last_30_days=repo.count_customers(session, since=last_start),
            customers_previous_30_days=repo.count_customers(
                session, since=previous_start, until=last_start
            ),
            total_sellers=repo.count_active_sellers(session),
            pending_orders=repo.count_orders_where(session, status="pending"),
            delivered_orders=repo.count_orders_where(session, status="delivered"),
            cancelled_orders=repo.count_orders_where(session, status="cancelled"),
            paid_orders=repo.count_orders_where(session, payment_status="paid"),
            unpaid_orders=repo.count_orders_where(session, payment_status="pending"),
            top_products=self._top_products(session, None, top_n_products),
        )
