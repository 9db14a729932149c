# app/services/checkout_service.py
import logging
import uuid
from enum import Enum
from typing import Callable

import anyio
import anyio.to_thread
from fastapi import HTTPException, status

from app.schemas.order import (
    OrderCreate,
    OrderLineCreate,
    OrderWithItemsRead,
)
from app.schemas.payment import CheckoutBreakdown, SellerPaymentProfile
from app.schemas.user import AddressCreate, AddressRead
from app.services.cart_store import CartStore
from app.services.payment_service import aggregate_cart, to_money

logger = logging.getLogger(__name__)

ProfileFetcher = Callable[[list[str]], list[SellerPaymentProfile]]
OrderWriter = Callable[[OrderCreate], OrderWithItemsRead]
AddressWriter = Callable[[AddressCreate, bool], AddressRead]

ADDRESS_FIELDS = (
    "full_name",
    "phone",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "pincode",
)


class CheckoutStep(str, Enum):
    ADDRESS = "address"
    PAYMENT = "payment"
    REVIEW = "review"
    COMPLETE = "complete"


def _invalid(field: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"field": field, "message": message},
    )


class CheckoutOrchestrator:
    """
    Drives one checkout attempt: Address -> Payment -> Review -> Complete.

    Responsibilities:
      - block each forward transition until its step is valid
      - load seller payment profiles with a bounded timeout, discarding
        results that no longer match the cart or the step
      - offer only the payment methods the aggregator marked available
      - require a transaction reference + explicit confirmation for UPI
      - write a newly entered address, then header + lines, only at
        submit, under one idempotency key per attempt; then clear the cart

    Collaborators are injected:
      - fetch_profiles(seller_ids) -> list[SellerPaymentProfile]
      - create_order(OrderCreate) -> OrderWithItemsRead
      - save_address(AddressCreate, is_default) -> AddressRead

    Validation failures raise HTTPException(400) with a
    {"field", "message"} detail and leave the state untouched.
    Going back is allowed at any point before Complete.
    """

    def __init__(
        self,
        cart: CartStore,
        addresses: list[AddressRead],
        fetch_profiles: ProfileFetcher,
        create_order: OrderWriter,
        save_address: AddressWriter | None = None,
        timeout: float = 5.0,
        policy: str = "any",
        currency: str = "INR",
        idempotency_key: str | None = None,
    ):
        self.cart = cart
        self.addresses = list(addresses)
        self.fetch_profiles = fetch_profiles
        self.create_order = create_order
        self.save_address = save_address
        self.timeout = timeout
        self.policy = policy
        self.currency = currency
        self.idempotency_key = idempotency_key or uuid.uuid4().hex

        self.step = CheckoutStep.ADDRESS
        self.selected_address_id: uuid.UUID | None = None
        self.new_address: AddressCreate | None = None
        self.payment_method: str | None = None
        self.transaction_reference: str | None = None
        self.payment_confirmed = False
        self.breakdown: CheckoutBreakdown | None = None
        self.order: OrderWithItemsRead | None = None

        self._generation = 0
        self._breakdown_fingerprint: tuple | None = None
        self._submitting = False

        # Default address first, else the first saved one
        default = next((a for a in self.addresses if a.is_default), None)
        if default is None and self.addresses:
            default = self.addresses[0]
        if default is not None:
            self.selected_address_id = default.id

    # ---- helpers ----

    def _require_step(self, *allowed: CheckoutStep) -> None:
        if self.step == CheckoutStep.COMPLETE:
            raise _invalid("step", "Order already placed")
        if self.step not in allowed:
            raise _invalid("step", f"Not available during the {self.step.value} step")

    @property
    def selected_address(self) -> AddressRead | AddressCreate | None:
        if self.new_address is not None:
            return self.new_address
        return next(
            (a for a in self.addresses if a.id == self.selected_address_id), None
        )

    @property
    def available_methods(self) -> list[str]:
        return self.breakdown.available_methods if self.breakdown else []

    # ---- Address ----

    def select_address(self, address_id: uuid.UUID) -> None:
        self._require_step(CheckoutStep.ADDRESS)
        if not any(a.id == address_id for a in self.addresses):
            raise _invalid("address_id", "Please select a saved address")
        self.new_address = None
        self.selected_address_id = address_id

    def add_address(self, payload: AddressCreate) -> None:
        """
        Use a new address for this order.

        Nothing is written yet: `submit` saves it right before the order,
        so a rejected checkout leaves the address book untouched. The first
        address becomes default.
        """
        self._require_step(CheckoutStep.ADDRESS)
        if self.save_address is None:
            raise _invalid("new_address", "Adding addresses is not available")
        self.new_address = payload
        self.selected_address_id = None

    def continue_to_payment(self) -> None:
        self._require_step(CheckoutStep.ADDRESS)
        if self.selected_address is None:
            raise _invalid("address_id", "Please select an address")
        self.step = CheckoutStep.PAYMENT

    # ---- Payment ----

    def _seller_ids(self) -> list[str]:
        return list(dict.fromkeys(it.seller_id for it in self.cart.items if it.seller_id))

    async def _load_profiles(self, seller_ids: list[str]) -> list[SellerPaymentProfile]:
        """
        Run the blocking fetcher in a worker thread under `timeout`.

        A timeout or fetcher error yields no profiles, so every seller is
        charged with the unknown-seller defaults.
        """
        if not seller_ids:
            return []
        try:
            with anyio.fail_after(self.timeout):
                return await anyio.to_thread.run_sync(
                    self.fetch_profiles, seller_ids, abandon_on_cancel=True
                )
        except TimeoutError:
            logger.warning(
                "Seller profile fetch timed out after %.1fs; using fallback charges",
                self.timeout,
            )
        except Exception:
            logger.warning(
                "Seller profile fetch failed; using fallback charges", exc_info=True
            )
        return []

    async def quote(self) -> CheckoutBreakdown:
        """
        Breakdown of the current cart without touching the checkout state.
        """
        profiles = await self._load_profiles(self._seller_ids())
        return aggregate_cart(
            self.cart.items, profiles, policy=self.policy, currency=self.currency
        )

    async def refresh_payment_options(self) -> CheckoutBreakdown | None:
        """
        Fetch seller profiles and recompute the charge breakdown.

        Fail-open: a timeout or fetch error falls back to the unknown-seller
        defaults. Returns None when the result went stale while waiting
        (cart changed, shopper left the step, or a newer refresh started).
        """
        self._require_step(CheckoutStep.PAYMENT, CheckoutStep.REVIEW)

        self._generation += 1
        generation = self._generation
        fingerprint = self.cart.fingerprint()

        profiles = await self._load_profiles(self._seller_ids())

        if generation != self._generation or fingerprint != self.cart.fingerprint():
            logger.info("Discarding stale payment options (generation %d)", generation)
            return None
        if self.step not in (CheckoutStep.PAYMENT, CheckoutStep.REVIEW):
            logger.info("Discarding payment options, checkout moved to %s", self.step.value)
            return None

        self.breakdown = aggregate_cart(
            self.cart.items, profiles, policy=self.policy, currency=self.currency
        )
        self._breakdown_fingerprint = fingerprint

        methods = self.breakdown.available_methods
        if self.payment_method not in methods:
            # Pre-select, still changeable when both are offered
            self.payment_method = methods[0] if methods else None
            self.transaction_reference = None
            self.payment_confirmed = False
        return self.breakdown

    def choose_payment_method(self, method: str) -> None:
        self._require_step(CheckoutStep.PAYMENT)
        if self.breakdown is None:
            raise _invalid("payment_method", "Payment options are still loading")
        if method not in self.available_methods:
            raise _invalid("payment_method", "This payment method is not available for your cart")
        if method != self.payment_method:
            self.transaction_reference = None
            self.payment_confirmed = False
        self.payment_method = method

    def continue_to_review(self) -> None:
        self._require_step(CheckoutStep.PAYMENT)
        if self.breakdown is None or self.payment_method not in self.available_methods:
            raise _invalid("payment_method", "Please select a payment method")
        self.step = CheckoutStep.REVIEW

    def back(self) -> None:
        """
        One step back. Leaving the Payment step invalidates in-flight
        profile fetches.
        """
        if self.step == CheckoutStep.COMPLETE:
            raise _invalid("step", "Order already placed")
        if self.step == CheckoutStep.REVIEW:
            self.step = CheckoutStep.PAYMENT
        elif self.step == CheckoutStep.PAYMENT:
            self._generation += 1
            self.step = CheckoutStep.ADDRESS

    # ---- Review / pay ----

    def set_transaction_reference(self, reference: str | None) -> None:
        self._require_step(CheckoutStep.REVIEW)
        reference = (reference or "").strip()
        self.transaction_reference = reference or None

    def confirm_payment(self, confirmed: bool = True) -> None:
        self._require_step(CheckoutStep.REVIEW)
        self.payment_confirmed = bool(confirmed)

    @property
    def can_submit(self) -> bool:
        if self.step != CheckoutStep.REVIEW or self._submitting:
            return False
        if not self.cart.items or self.breakdown is None:
            return False
        if self.payment_method == "cod":
            return True
        if self.payment_method == "upi":
            return bool(self.transaction_reference) and self.payment_confirmed
        return False

    def _validate_submission(self) -> None:
        self._require_step(CheckoutStep.REVIEW)
        if self._submitting:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Order submission already in progress",
            )
        if not self.cart.items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )
        if self.breakdown is None or self._breakdown_fingerprint != self.cart.fingerprint():
            raise _invalid("cart", "Your cart changed, please review your order again")
        if self.payment_method not in self.available_methods:
            raise _invalid("payment_method", "Please select a payment method")
        if self.payment_method == "upi":
            if not self.transaction_reference:
                raise _invalid(
                    "transaction_reference", "Please enter the UPI Transaction ID"
                )
            if not self.payment_confirmed:
                raise _invalid(
                    "payment_confirmed",
                    "Please confirm that you have completed the payment",
                )

    def build_order(self) -> OrderCreate:
        """
        Header + frozen line snapshots for the current cart.
        """
        address = self.selected_address
        breakdown = self.breakdown
        if self.payment_method == "upi":
            notes = f"UPI Payment - Txn: {self.transaction_reference}"
        else:
            notes = "Cash on Delivery"

        return OrderCreate(
            idempotency_key=self.idempotency_key,
            shipping_address={f: getattr(address, f) for f in ADDRESS_FIELDS},
            subtotal=to_money(breakdown.subtotal),
            shipping_cost=to_money(breakdown.shipping),
            gst_amount=to_money(breakdown.gst),
            convenience_fee=to_money(breakdown.convenience),
            total=to_money(breakdown.grand_total),
            payment_method=self.payment_method,
            notes=notes,
            lines=[
                OrderLineCreate(
                    product_id=it.id,
                    seller_id=it.seller_id,
                    product_name=it.name,
                    product_image=it.image,
                    quantity=it.quantity,
                    price=it.price,
                )
                for it in self.cart.items
            ],
        )

    def _write(self, draft: OrderCreate) -> tuple[AddressRead | None, OrderWithItemsRead]:
        saved = None
        if self.new_address is not None:
            saved = self.save_address(self.new_address, not self.addresses)
        return saved, self.create_order(draft)

    async def submit(self) -> OrderWithItemsRead:
        """
        Place the order, clear the cart and move to Complete.

        A new address is handed to `save_address` just before `create_order`,
        in the same worker thread, so the writer can commit both together.

        Raises:
            HTTPException(400): validation failures (state unchanged).
            HTTPException(409): a submission is already running.
            HTTPException(503): persistence failed; safe to retry, the
                idempotency key prevents duplicates.
        """
        self._validate_submission()
        draft = self.build_order()

        self._submitting = True
        try:
            saved, order = await anyio.to_thread.run_sync(self._write, draft)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Order submission failed (key %s)", self.idempotency_key)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not place your order. Please try again.",
            )
        finally:
            self._submitting = False

        if saved is not None:
            self.addresses.append(saved)
            self.new_address = None
            self.selected_address_id = saved.id

        self.cart.clear_cart()
        self.order = order
        self.step = CheckoutStep.COMPLETE
        return order
