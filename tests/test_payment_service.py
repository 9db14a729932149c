from decimal import Decimal

from app.schemas.cart import CartItem
from app.schemas.payment import SellerPaymentProfile
from app.services.payment_service import (
    FALLBACK_SHOP_NAME,
    aggregate_cart,
    build_upi_link,
    shipping_for,
)


def line(pid: str, price: str, qty: int, seller: str | None) -> CartItem:
    return CartItem(id=pid, name=pid, price=Decimal(price), quantity=qty, seller_id=seller)


def profile(seller: str, **kw) -> SellerPaymentProfile:
    return SellerPaymentProfile(seller_id=seller, shop_name=f"Shop {seller}", **kw)


def test_two_seller_scenario():
    items = [line("p1", "100", 2, "A"), line("p2", "50", 1, "B")]
    profiles = [
        profile("A", shipping_charge=Decimal("50"), free_shipping_above=Decimal("150")),
        profile(
            "B",
            shipping_charge=Decimal("30"),
            charge_gst=True,
            gst_percentage=Decimal("5"),
        ),
    ]

    breakdown = aggregate_cart(items, profiles)

    assert breakdown.subtotal == Decimal("250")
    assert breakdown.shipping == Decimal("30")
    assert breakdown.gst == Decimal("2.5")
    assert breakdown.convenience == Decimal("0")
    assert breakdown.grand_total == Decimal("282.5")
    assert [s.seller_id for s in breakdown.sellers] == ["A", "B"]


def test_free_shipping_threshold_boundary():
    p = profile("A", shipping_charge=Decimal("40"), free_shipping_above=Decimal("500"))

    assert shipping_for(p, Decimal("500")) == Decimal("0")
    assert shipping_for(p, Decimal("500.01")) == Decimal("0")
    assert shipping_for(p, Decimal("499.99")) == Decimal("40")


def test_gst_off_ignores_rate():
    items = [line("p1", "1000", 1, "A")]
    profiles = [profile("A", charge_gst=False, gst_percentage=Decimal("18"))]

    assert aggregate_cart(items, profiles).gst == Decimal("0")


def test_lines_of_one_seller_share_a_bucket():
    items = [line("p1", "100", 1, "A"), line("p2", "60", 2, "A")]
    profiles = [
        profile(
            "A",
            shipping_charge=Decimal("25"),
            charge_convenience=True,
            convenience_charge=Decimal("10"),
        )
    ]

    breakdown = aggregate_cart(items, profiles)

    assert len(breakdown.sellers) == 1
    assert breakdown.sellers[0].product_ids == ["p1", "p2"]
    assert breakdown.shipping == Decimal("25")
    assert breakdown.convenience == Decimal("10")
    assert breakdown.grand_total == Decimal("255")
    assert breakdown.grand_total == sum(s.total for s in breakdown.sellers)


def test_missing_profile_uses_fallback_bucket():
    items = [line("p1", "80", 1, None), line("p2", "20", 1, "ghost")]

    breakdown = aggregate_cart(items, [])

    assert [s.seller_id for s in breakdown.sellers] == [None, "ghost"]
    assert all(s.shop_name == FALLBACK_SHOP_NAME for s in breakdown.sellers)
    assert breakdown.shipping == Decimal("0")
    assert breakdown.grand_total == Decimal("100")
    assert breakdown.available_methods == ["cod"]


def test_inactive_profile_is_ignored():
    items = [line("p1", "100", 1, "A")]
    profiles = [profile("A", upi_id="a@upi", shipping_charge=Decimal("99"), is_active=False)]

    breakdown = aggregate_cart(items, profiles)

    assert breakdown.shipping == Decimal("0")
    assert breakdown.upi_available is False


def test_any_policy_offers_method_of_some_seller():
    items = [line("p1", "100", 1, "A"), line("p2", "100", 1, "B")]
    profiles = [
        profile("A", upi_id="a@okaxis", accepts_cod=False),
        profile("B", accepts_cod=True),
    ]

    breakdown = aggregate_cart(items, profiles, policy="any")

    assert breakdown.available_methods == ["upi", "cod"]


def test_all_policy_offers_only_shared_methods():
    items = [line("p1", "100", 1, "A"), line("p2", "100", 1, "B")]
    profiles = [
        profile("A", upi_id="a@okaxis", accepts_cod=False),
        profile("B", upi_id="b@ybl", accepts_cod=True),
    ]

    breakdown = aggregate_cart(items, profiles, policy="all")

    assert breakdown.upi_available is True
    assert breakdown.cod_available is False
    assert breakdown.available_methods == ["upi"]


def test_qr_only_seller_offers_upi():
    items = [line("p1", "100", 1, "A")]
    profiles = [profile("A", payment_qr_url="https://cdn.gamchha.in/qr/a.png", accepts_cod=False)]

    breakdown = aggregate_cart(items, profiles)

    assert breakdown.available_methods == ["upi"]
    assert breakdown.sellers[0].upi_link is None


def test_empty_cart_keeps_cod():
    breakdown = aggregate_cart([], [])

    assert breakdown.grand_total == Decimal("0")
    assert breakdown.available_methods == ["cod"]


def test_seller_bucket_carries_upi_link_for_its_total():
    items = [line("p1", "199.5", 1, "A")]
    profiles = [profile("A", upi_id="rina@okhdfc", shipping_charge=Decimal("40"))]

    seller = aggregate_cart(items, profiles).sellers[0]

    assert seller.total == Decimal("239.5")
    assert seller.upi_link == "upi://pay?pa=rina@okhdfc&pn=Shop%20A&am=239.50&cu=INR"


def test_upi_link_encodes_payee_name():
    link = build_upi_link("weaver@sbi", "Tant & Co", Decimal("10"))

    assert link == "upi://pay?pa=weaver@sbi&pn=Tant%20%26%20Co&am=10.00&cu=INR"
