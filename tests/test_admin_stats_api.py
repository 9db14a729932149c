from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.models.order import Order

API = "/api/v1"


def test_admin_dashboard_compares_last_two_periods(
    client, session, make_user, make_shop, make_product, make_order, auth_headers
):
    admin, alice, bob = make_user(role="admin"), make_user(), make_user(name="Bob")
    seller = make_user(role="seller")
    make_shop(seller)
    towel = make_product(seller, price="100", name="Towel")
    stole = make_product(None, price="50", name="Stole")

    recent = make_order(alice, [(towel, 2)])
    older = make_order(bob, [(stole, 1)], status="delivered")
    make_order(alice, [(stole, 1)], status="cancelled")

    for order, created_at in (
        (recent, datetime.now(timezone.utc)),
        (older, datetime.now(timezone.utc) - timedelta(days=45)),
    ):
        row = session.get(Order, order.id)
        row.payment_status = "paid"
        row.created_at = created_at
        session.add(row)
    session.commit()

    resp = client.get(f"{API}/admin/stats", headers=auth_headers(admin))
    stats = resp.json()

    assert resp.status_code == 200
    assert Decimal(stats["total_revenue"]) == Decimal("250")
    assert Decimal(stats["revenue_last_30_days"]) == Decimal("200")
    assert Decimal(stats["revenue_previous_30_days"]) == Decimal("50")
    for metric, expected in (("orders", (3, 2, 1)), ("customers", (2, 1, 1))):
        assert (
            stats[f"total_{metric}"],
            stats[f"{metric}_last_30_days"],
            stats[f"{metric}_previous_30_days"],
        ) == expected
    assert (stats["total_products"], stats["products_last_30_days"]) == (2, 2)
    assert stats["total_sellers"] == 1
    assert stats["pending_orders"] == 1
    assert stats["delivered_orders"] == 1
    assert stats["cancelled_orders"] == 1
    assert stats["paid_orders"] == 2
    assert stats["unpaid_orders"] == 1
    assert [p["name"] for p in stats["top_products"]] == ["Towel", "Stole"]


def test_admin_dashboard_is_admin_only(client, make_user, auth_headers):
    seller = make_user(role="seller")

    assert client.get(f"{API}/admin/stats", headers=auth_headers(seller)).status_code == 403
