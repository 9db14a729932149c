import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from app.repositories.cart_repo import MemoryCartStorage
from app.schemas.cart import CartProduct
from app.schemas.payment import SellerPaymentProfile
from app.schemas.user import AddressCreate, AddressRead
from app.services.cart_store import CartStore
from app.services.checkout_service import CheckoutOrchestrator, CheckoutStep

pytestmark = pytest.mark.anyio

USER_ID = uuid.uuid4()


def address(is_default: bool = False, city: str = "Kolkata") -> AddressRead:
    return AddressRead(
        id=uuid.uuid4(),
        user_id=USER_ID,
        full_name="Asha Das",
        phone="9876543210",
        address_line1="12 Park Street",
        city=city,
        state="West Bengal",
        pincode="700016",
        is_default=is_default,
        created_at=datetime.now(timezone.utc),
    )


def cart_with(*lines: tuple[str, str, str | None]) -> CartStore:
    cart = CartStore(MemoryCartStorage(), "gamchha-cart:checkout")
    for pid, price, seller in lines:
        cart.add_to_cart(CartProduct(id=pid, name=pid, price=Decimal(price), seller_id=seller))
    return cart


UPI_SELLER = SellerPaymentProfile(
    seller_id="A",
    shop_name="Tant Ghar",
    upi_id="tant@okaxis",
    accepts_cod=False,
    shipping_charge=Decimal("40"),
)


class RecordingWriter:
    def __init__(self, failures: int = 0):
        self.failures = failures
        self.drafts = []

    def __call__(self, draft):
        self.drafts.append(draft)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("database unavailable")
        return {"order_number": "GC261019ABCDEF", "idempotency_key": draft.idempotency_key}


def orchestrator(cart, profiles=(), writer=None, addresses=None, **kw) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        cart=cart,
        addresses=[address(is_default=True)] if addresses is None else addresses,
        fetch_profiles=lambda ids: [p for p in profiles if p.seller_id in ids],
        create_order=writer or RecordingWriter(),
        **kw,
    )


async def to_review(checkout: CheckoutOrchestrator, method: str) -> None:
    checkout.continue_to_payment()
    await checkout.refresh_payment_options()
    checkout.choose_payment_method(method)
    checkout.continue_to_review()


def field_of(exc: pytest.ExceptionInfo) -> str:
    return exc.value.detail["field"]


async def test_default_address_is_preselected():
    first, default = address(), address(is_default=True, city="Howrah")
    checkout = orchestrator(cart_with(("p1", "100", "A")), addresses=[first, default])

    assert checkout.selected_address_id == default.id


async def test_first_address_used_when_none_is_default():
    first, second = address(), address()
    checkout = orchestrator(cart_with(("p1", "100", "A")), addresses=[first, second])

    assert checkout.selected_address_id == first.id


async def test_payment_step_needs_an_address():
    checkout = orchestrator(cart_with(("p1", "100", "A")), addresses=[])

    with pytest.raises(HTTPException) as exc:
        checkout.continue_to_payment()

    assert exc.value.status_code == 400
    assert field_of(exc) == "address_id"
    assert checkout.step == CheckoutStep.ADDRESS


NEW_ADDRESS = AddressCreate(
    full_name="Asha Das",
    phone="9876543210",
    address_line1="12 Park Street",
    city="Kolkata",
    state="West Bengal",
    pincode="700016",
)


async def test_new_address_is_saved_only_with_the_order():
    saved = []

    def save_address(payload: AddressCreate, is_default: bool) -> AddressRead:
        saved.append(is_default)
        return address(is_default=is_default)

    checkout = orchestrator(cart_with(("p1", "100", None)), addresses=[], save_address=save_address)
    checkout.add_address(NEW_ADDRESS)

    assert saved == []
    assert checkout.selected_address is NEW_ADDRESS

    await to_review(checkout, "cod")
    await checkout.submit()

    assert saved == [True]
    assert checkout.selected_address_id == checkout.addresses[0].id
    assert checkout.new_address is None


async def test_rejected_checkout_does_not_save_new_address():
    saved = []

    def save_address(payload: AddressCreate, is_default: bool) -> AddressRead:
        saved.append(payload)
        return address(is_default=is_default)

    checkout = orchestrator(cart_with(("p1", "100", None)), addresses=[], save_address=save_address)
    checkout.add_address(NEW_ADDRESS)
    checkout.continue_to_payment()
    await checkout.refresh_payment_options()

    with pytest.raises(HTTPException):
        checkout.choose_payment_method("upi")

    assert saved == []


async def test_upi_is_preselected_when_offered():
    checkout = orchestrator(cart_with(("p1", "100", "A")), profiles=[UPI_SELLER])
    checkout.continue_to_payment()

    breakdown = await checkout.refresh_payment_options()

    assert breakdown.grand_total == Decimal("140")
    assert checkout.payment_method == "upi"


async def test_slow_profile_fetch_falls_back_to_defaults():
    def slow_fetch(ids):
        time.sleep(0.5)
        return [UPI_SELLER]

    checkout = CheckoutOrchestrator(
        cart=cart_with(("p1", "100", "A")),
        addresses=[address(is_default=True)],
        fetch_profiles=slow_fetch,
        create_order=RecordingWriter(),
        timeout=0.05,
    )
    checkout.continue_to_payment()

    breakdown = await checkout.refresh_payment_options()

    assert breakdown.shipping == Decimal("0")
    assert breakdown.available_methods == ["cod"]
    assert checkout.payment_method == "cod"


async def test_failing_profile_fetch_falls_back_to_defaults():
    def broken_fetch(ids):
        raise ConnectionError("profiles unavailable")

    checkout = CheckoutOrchestrator(
        cart=cart_with(("p1", "100", "A")),
        addresses=[address(is_default=True)],
        fetch_profiles=broken_fetch,
        create_order=RecordingWriter(),
    )
    checkout.continue_to_payment()

    breakdown = await checkout.refresh_payment_options()

    assert breakdown.available_methods == ["cod"]


async def test_result_is_discarded_when_cart_changes_during_fetch():
    cart = cart_with(("p1", "100", "A"))

    def fetch_while_cart_changes(ids):
        cart.add_to_cart(CartProduct(id="p2", name="p2", price=Decimal("50"), seller_id="A"))
        return [UPI_SELLER]

    checkout = CheckoutOrchestrator(
        cart=cart,
        addresses=[address(is_default=True)],
        fetch_profiles=fetch_while_cart_changes,
        create_order=RecordingWriter(),
    )
    checkout.continue_to_payment()

    assert await checkout.refresh_payment_options() is None
    assert checkout.breakdown is None
    assert checkout.payment_method is None


async def test_result_is_discarded_after_leaving_payment_step():
    holder = {}

    def fetch_then_go_back(ids):
        holder["checkout"].back()
        return [UPI_SELLER]

    checkout = CheckoutOrchestrator(
        cart=cart_with(("p1", "100", "A")),
        addresses=[address(is_default=True)],
        fetch_profiles=fetch_then_go_back,
        create_order=RecordingWriter(),
    )
    holder["checkout"] = checkout
    checkout.continue_to_payment()

    assert await checkout.refresh_payment_options() is None
    assert checkout.step == CheckoutStep.ADDRESS
    assert checkout.breakdown is None


async def test_unavailable_method_is_rejected():
    checkout = orchestrator(cart_with(("p1", "100", "A")), profiles=[UPI_SELLER])
    checkout.continue_to_payment()
    await checkout.refresh_payment_options()

    with pytest.raises(HTTPException) as exc:
        checkout.choose_payment_method("cod")

    assert field_of(exc) == "payment_method"
    assert checkout.payment_method == "upi"


async def test_upi_requires_reference_and_confirmation():
    writer = RecordingWriter()
    checkout = orchestrator(cart_with(("p1", "100", "A")), profiles=[UPI_SELLER], writer=writer)
    await to_review(checkout, "upi")

    assert not checkout.can_submit
    with pytest.raises(HTTPException) as exc:
        await checkout.submit()
    assert field_of(exc) == "transaction_reference"

    checkout.set_transaction_reference("  412345678901 ")
    with pytest.raises(HTTPException) as exc:
        await checkout.submit()
    assert field_of(exc) == "payment_confirmed"

    assert writer.drafts == []
    assert checkout.step == CheckoutStep.REVIEW

    checkout.confirm_payment(True)
    assert checkout.can_submit
    await checkout.submit()

    assert writer.drafts[0].notes == "UPI Payment - Txn: 412345678901"
    assert writer.drafts[0].payment_method == "upi"


async def test_cod_submission_clears_cart_and_completes():
    writer = RecordingWriter()
    cart = cart_with(("p1", "100", None), ("p1", "100", None), ("p2", "49.99", None))
    checkout = orchestrator(cart, writer=writer)
    await to_review(checkout, "cod")

    order = await checkout.submit()

    draft = writer.drafts[0]
    assert draft.notes == "Cash on Delivery"
    assert draft.total == Decimal("249.99")
    assert [(ln.product_id, ln.quantity) for ln in draft.lines] == [("p1", 2), ("p2", 1)]
    assert draft.shipping_address["city"] == "Kolkata"
    assert cart.items == []
    assert checkout.step == CheckoutStep.COMPLETE
    assert checkout.order == order


async def test_failed_write_is_retryable_with_same_key():
    writer = RecordingWriter(failures=1)
    cart = cart_with(("p1", "100", None))
    checkout = orchestrator(cart, writer=writer)
    await to_review(checkout, "cod")

    with pytest.raises(HTTPException) as exc:
        await checkout.submit()

    assert exc.value.status_code == 503
    assert exc.value.detail == "Could not place your order. Please try again."
    assert checkout.step == CheckoutStep.REVIEW
    assert cart.get_cart_count() == 1

    await checkout.submit()

    assert len(writer.drafts) == 2
    assert writer.drafts[0].idempotency_key == writer.drafts[1].idempotency_key
    assert checkout.step == CheckoutStep.COMPLETE


async def test_writer_http_errors_pass_through():
    def conflicting_writer(draft):
        raise HTTPException(status_code=409, detail="Idempotency key already used")

    checkout = orchestrator(cart_with(("p1", "100", None)), writer=conflicting_writer)
    await to_review(checkout, "cod")

    with pytest.raises(HTTPException) as exc:
        await checkout.submit()

    assert exc.value.status_code == 409


async def test_cart_change_after_review_blocks_submit():
    cart = cart_with(("p1", "100", None))
    checkout = orchestrator(cart)
    await to_review(checkout, "cod")

    cart.update_quantity("p1", 3)

    with pytest.raises(HTTPException) as exc:
        await checkout.submit()
    assert field_of(exc) == "cart"


async def test_empty_cart_cannot_be_submitted():
    cart = cart_with(("p1", "100", None))
    checkout = orchestrator(cart)
    await to_review(checkout, "cod")

    cart.clear_cart()

    with pytest.raises(HTTPException) as exc:
        await checkout.submit()
    assert exc.value.detail == "Cart is empty"


async def test_no_changes_after_completion():
    writer = RecordingWriter()
    checkout = orchestrator(cart_with(("p1", "100", None)), writer=writer)
    await to_review(checkout, "cod")
    await checkout.submit()

    with pytest.raises(HTTPException):
        await checkout.submit()
    with pytest.raises(HTTPException):
        checkout.back()

    assert len(writer.drafts) == 1


async def test_back_from_review_keeps_payment_choice():
    checkout = orchestrator(cart_with(("p1", "100", None)))
    await to_review(checkout, "cod")

    checkout.back()

    assert checkout.step == CheckoutStep.PAYMENT
    assert checkout.payment_method == "cod"
