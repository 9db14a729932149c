# app/services/payment_service.py
"""
Per-seller charge aggregation for a multi-seller cart.

Each seller is paid directly, so the cart is split into seller buckets
and every bucket gets its own shipping, GST and convenience fee from that
seller's payment profile. Missing data never blocks checkout:

  - lines without a seller go to a single fallback bucket
  - sellers without an (active) profile use the same fallback defaults:
    COD accepted, no UPI, zero shipping/GST/fee

Money stays in Decimal and is not rounded here; rounding happens when an
order is written.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from urllib.parse import quote

from app.schemas.cart import CartItem
from app.schemas.payment import (
    CheckoutBreakdown,
    SellerCartTotal,
    SellerPaymentProfile,
)

ZERO = Decimal("0")
CENTS = Decimal("0.01")

FALLBACK_SHOP_NAME = "Marketplace"


def to_money(value: Decimal) -> Decimal:
    """Round a Decimal amount to paise (2 places, half-up)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def shipping_for(profile: SellerPaymentProfile | None, subtotal: Decimal) -> Decimal:
    if profile is None:
        return ZERO
    threshold = profile.free_shipping_above
    if threshold is not None and subtotal >= threshold:
        return ZERO
    return profile.shipping_charge


def gst_for(profile: SellerPaymentProfile | None, subtotal: Decimal) -> Decimal:
    if profile is None or not profile.charge_gst:
        return ZERO
    return subtotal * profile.gst_percentage / Decimal("100")


def convenience_for(profile: SellerPaymentProfile | None) -> Decimal:
    if profile is None or not profile.charge_convenience:
        return ZERO
    return profile.convenience_charge


def build_upi_link(
    upi_id: str,
    payee_name: str,
    amount: Decimal,
    currency: str = "INR",
) -> str:
    """
    UPI deep link (upi://pay) that opens the shopper's UPI app
    pre-filled with payee and amount.
    """
    return (
        f"upi://pay?pa={quote(upi_id, safe='@')}"
        f"&pn={quote(payee_name)}"
        f"&am={to_money(amount)}"
        f"&cu={quote(currency)}"
    )


def _bucket_lines(items: Iterable[CartItem]) -> dict[str | None, list[CartItem]]:
    # dict keeps first-appearance order of sellers
    buckets: dict[str | None, list[CartItem]] = {}
    for item in items:
        buckets.setdefault(item.seller_id or None, []).append(item)
    return buckets


def _seller_total(
    seller_id: str | None,
    lines: list[CartItem],
    profile: SellerPaymentProfile | None,
    currency: str,
) -> SellerCartTotal:
    subtotal = sum((it.price * it.quantity for it in lines), ZERO)
    shipping = shipping_for(profile, subtotal)
    gst = gst_for(profile, subtotal)
    convenience = convenience_for(profile)
    total = subtotal + shipping + gst + convenience

    shop_name = profile.shop_name if profile else FALLBACK_SHOP_NAME
    upi_id = profile.upi_id if profile else None

    return SellerCartTotal(
        seller_id=seller_id,
        shop_name=shop_name,
        product_ids=[it.id for it in lines],
        subtotal=subtotal,
        shipping=shipping,
        gst=gst,
        convenience=convenience,
        total=total,
        upi_id=upi_id,
        payment_qr_url=profile.payment_qr_url if profile else None,
        payment_instructions=profile.payment_instructions if profile else None,
        # Fallback buckets are COD-only
        accepts_cod=profile.accepts_cod if profile else True,
        upi_link=build_upi_link(upi_id, shop_name, total, currency) if upi_id else None,
    )


def _offers_upi(seller: SellerCartTotal) -> bool:
    return bool(seller.upi_id or seller.payment_qr_url)


def _offers_cod(seller: SellerCartTotal) -> bool:
    # None counts as accepted
    return seller.accepts_cod is not False


def aggregate_cart(
    items: Iterable[CartItem],
    profiles: Iterable[SellerPaymentProfile],
    policy: str = "any",
    currency: str = "INR",
) -> CheckoutBreakdown:
    """
    Compute per-seller and cart-wide charges.

    Args:
        items: cart lines, each with an optional seller_id.
        profiles: payment profiles for (some of) the sellers present;
            extra or inactive profiles are ignored.
        policy: "any" offers a payment method when at least one seller
            bucket supports it; "all" only when every bucket does.
        currency: currency code used in UPI links.

    Returns:
        CheckoutBreakdown. Never raises for missing or partial profiles.
    """
    profile_map = {p.seller_id: p for p in profiles if p.is_active}

    sellers = [
        _seller_total(
            seller_id,
            lines,
            profile_map.get(seller_id) if seller_id else None,
            currency,
        )
        for seller_id, lines in _bucket_lines(items).items()
    ]

    if policy == "all":
        upi_available = bool(sellers) and all(_offers_upi(s) for s in sellers)
        cod_available = all(_offers_cod(s) for s in sellers)
    else:
        upi_available = any(_offers_upi(s) for s in sellers)
        # No seller information at all => COD stays available
        cod_available = not sellers or any(_offers_cod(s) for s in sellers)

    subtotal = sum((s.subtotal for s in sellers), ZERO)
    shipping = sum((s.shipping for s in sellers), ZERO)
    gst = sum((s.gst for s in sellers), ZERO)
    convenience = sum((s.convenience for s in sellers), ZERO)

    return CheckoutBreakdown(
        sellers=sellers,
        subtotal=subtotal,
        shipping=shipping,
        gst=gst,
        convenience=convenience,
        grand_total=subtotal + shipping + gst + convenience,
        upi_available=upi_available,
        cod_available=cod_available,
    )
