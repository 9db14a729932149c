# app/services/delivery_service.py
"""
Delivery date estimation from pincode proximity.

This is a display heuristic for the storefront, not a logistics
guarantee: it only compares pincode prefixes and never consults a
courier. It never raises.

Rules:
  - no destination pincode         => unknown (not deliverable, no date)
  - product lists no pincodes      => ships everywhere, 3-6 days
  - destination listed, or shares its first 3 digits (sorting district)
    with a listed pincode          => deliverable
  - range: shares first 2 digits with a listed pincode => 2-4 days,
           else shares the first digit                  => 4-6 days,
           else                                         => 3-6 days
  - date = today + upper bound of the range, pushed to Monday if it
    lands on a weekend
"""
from datetime import date, timedelta

from app.schemas.delivery import DeliveryEstimate

SAME_ZONE_RANGE = (2, 4)
SAME_REGION_RANGE = (4, 6)
DEFAULT_RANGE = (3, 6)

# Pincode digits that identify the sorting district
DISTRICT_PREFIX_LEN = 3


def _shares_prefix(codes: list[str], destination: str, length: int) -> bool:
    prefix = destination[:length]
    return any(code[:length] == prefix for code in codes)


def _roll_past_weekend(day: date) -> date:
    # Saturday=5, Sunday=6
    if day.weekday() == 5:
        return day + timedelta(days=2)
    if day.weekday() == 6:
        return day + timedelta(days=1)
    return day


def _is_deliverable(codes: list[str], destination: str) -> bool:
    if destination in codes:
        return True
    return _shares_prefix(codes, destination, DISTRICT_PREFIX_LEN)


def delivery_range(codes: list[str], destination: str) -> tuple[int, int]:
    """Day range for `destination` by prefix proximity to the listed pincodes."""
    if not codes:
        return DEFAULT_RANGE
    if _shares_prefix(codes, destination, 2):
        return SAME_ZONE_RANGE
    if _shares_prefix(codes, destination, 1):
        return SAME_REGION_RANGE
    return DEFAULT_RANGE


def estimate_delivery(
    deliverable_pincodes: list[str] | None,
    destination_pincode: str | None,
    today: date | None = None,
) -> DeliveryEstimate:
    """
    Estimate whether and when a product reaches `destination_pincode`.

    Args:
        deliverable_pincodes: pincodes the product ships to; None or []
            means it ships everywhere.
        destination_pincode: the shopper's pincode, if known.
        today: reference date (defaults to date.today()).

    Returns:
        DeliveryEstimate with deliverable flag, date and "<min>-<max> days"
        label. Undeliverable or unknown results carry no date or label.
    """
    destination = (destination_pincode or "").strip()
    if not destination:
        return DeliveryEstimate(deliverable=False)

    codes = [c.strip() for c in (deliverable_pincodes or []) if c and c.strip()]

    if codes and not _is_deliverable(codes, destination):
        return DeliveryEstimate(deliverable=False, pincode=destination)

    low, high = delivery_range(codes, destination)
    start = today or date.today()
    estimated = _roll_past_weekend(start + timedelta(days=high))

    return DeliveryEstimate(
        deliverable=True,
        estimated_date=estimated,
        range_label=f"{low}-{high} days",
        pincode=destination,
    )
