# app/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.core.auth import require_customer
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.shop_repo import ShopRepository
from app.repositories.user_repo import UserRepository
from app.routers.cart import get_cart_store
from app.schemas.order import CheckoutSummary, OrderCreate, OrderWithItemsRead, PlaceOrderRequest
from app.schemas.payment import SellerPaymentProfile
from app.schemas.user import AddressCreate, AddressRead
from app.services.cart_store import CartStore
from app.services.checkout_service import CheckoutOrchestrator
from app.services.order_service import OrderService
from app.services.user_service import UserService

router = APIRouter(prefix="/checkout", tags=["Checkout"])

settings = get_settings()
shop_repo = ShopRepository()
order_service = OrderService(OrderRepository())
user_service = UserService(UserRepository())


def _orchestrator(
    session: Session,
    user: User,
    cart: CartStore,
    idempotency_key: str | None = None,
) -> CheckoutOrchestrator:
    """
    Wire one checkout attempt to the caller's cart, addresses and the DB.
    """
    addresses = [
        AddressRead.model_validate(a)
        for a in user_service.list_addresses(session, user.id)
    ]

    def create_order(draft: OrderCreate) -> OrderWithItemsRead:
        return order_service.create_order(session, user.id, draft)

    def save_address(payload: AddressCreate, is_default: bool) -> AddressRead:
        # Flushed only; create_order commits it together with the order
        address = user_service.add_address(
            session, user.id, payload, is_default=is_default, commit=False
        )
        return AddressRead.model_validate(address)

    def fetch_profiles(seller_ids: list[str]) -> list[SellerPaymentProfile]:
        # Own session: on timeout this thread is abandoned while the request
        # session goes on to write the order
        with Session(session.get_bind()) as fetch_session:
            return shop_repo.fetch_payment_profiles(fetch_session, seller_ids)

    return CheckoutOrchestrator(
        cart=cart,
        addresses=addresses,
        fetch_profiles=fetch_profiles,
        create_order=create_order,
        save_address=save_address,
        timeout=settings.SELLER_PROFILE_FETCH_TIMEOUT_SECONDS,
        policy=settings.PAYMENT_METHOD_POLICY,
        currency=settings.UPI_CURRENCY,
        idempotency_key=idempotency_key,
    )


@router.get("/summary", response_model=CheckoutSummary)
async def get_checkout_summary(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Per-seller charges, grand total and the payment methods on offer.

    Seller profiles that cannot be loaded in time are replaced by the
    default charges (no shipping, no GST, COD only).
    """
    checkout = _orchestrator(session, current_user, cart)
    breakdown = await checkout.quote()
    methods = breakdown.available_methods
    return CheckoutSummary(
        sellers=breakdown.sellers,
        subtotal=breakdown.subtotal,
        shipping=breakdown.shipping,
        gst=breakdown.gst,
        convenience=breakdown.convenience,
        grand_total=breakdown.grand_total,
        payment_methods=methods,
        default_payment_method=methods[0] if methods else None,
        default_address_id=checkout.selected_address_id,
        item_count=cart.get_cart_count(),
    )


@router.post("/orders", response_model=OrderWithItemsRead)
async def place_order(
    payload: PlaceOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Run the whole checkout in one request:
    address -> payment options -> method -> review -> submit.

    - `new_address` is used and saved together with the order; otherwise
      `address_id`, else the default address. A rejected checkout saves
      nothing.
    - UPI needs `transaction_reference` and `payment_confirmed=true`.
    - Re-sending the same `idempotency_key` returns the original order.

    Validation errors => 400 {"field", "message"};
    storage failure => 503.
    """
    if payload.idempotency_key:
        replay = order_service.find_replay(session, current_user.id, payload.idempotency_key)
        if replay is not None:
            return replay

    checkout = _orchestrator(session, current_user, cart, payload.idempotency_key)

    try:
        if payload.new_address is not None:
            checkout.add_address(payload.new_address)
        elif payload.address_id is not None:
            checkout.select_address(payload.address_id)
        checkout.continue_to_payment()

        await checkout.refresh_payment_options()
        checkout.choose_payment_method(payload.payment_method)
        checkout.continue_to_review()

        checkout.set_transaction_reference(payload.transaction_reference)
        checkout.confirm_payment(payload.payment_confirmed)
        return await checkout.submit()
    except HTTPException:
        session.rollback()
        raise
