from datetime import date

from app.services.delivery_service import delivery_range, estimate_delivery

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


def test_missing_destination_is_unknown():
    for destination in (None, "", "   "):
        estimate = estimate_delivery(["700002"], destination, today=MONDAY)
        assert estimate.deliverable is False
        assert estimate.estimated_date is None
        assert estimate.range_label is None


def test_ships_everywhere_without_pincode_list():
    for codes in (None, []):
        estimate = estimate_delivery(codes, "110001", today=MONDAY)
        assert estimate.deliverable is True
        assert estimate.range_label == "3-6 days"
        # Monday + 6 = Sunday, rolled to Monday
        assert estimate.estimated_date == date(2026, 10, 26)


def test_same_district_neighbour_is_deliverable_in_two_to_four_days():
    estimate = estimate_delivery(["700002", "700099"], "700001", today=MONDAY)

    assert estimate.deliverable is True
    assert estimate.range_label == "2-4 days"
    assert estimate.estimated_date == date(2026, 10, 23)
    assert estimate.pincode == "700001"


def test_exact_match_is_deliverable():
    estimate = estimate_delivery(["560034"], "560034", today=MONDAY)

    assert estimate.deliverable is True
    assert estimate.range_label == "2-4 days"


def test_unlisted_district_is_not_deliverable():
    estimate = estimate_delivery(["700002"], "711101", today=MONDAY)

    assert estimate.deliverable is False
    assert estimate.estimated_date is None
    assert estimate.range_label is None
    assert estimate.pincode == "711101"


def test_weekend_date_rolls_to_monday():
    # Tuesday + 4 = Saturday
    estimate = estimate_delivery(["700002"], "700001", today=TUESDAY)

    assert estimate.estimated_date == date(2026, 10, 26)
    assert estimate.estimated_date.weekday() == 0


def test_range_tiers_by_prefix_proximity():
    assert delivery_range(["700002"], "701234") == (2, 4)
    assert delivery_range(["700002"], "781001") == (4, 6)
    assert delivery_range(["700002"], "110001") == (3, 6)
    assert delivery_range([], "110001") == (3, 6)
