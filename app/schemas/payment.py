# app/schemas/payment.py
from decimal import Decimal
from typing import Literal

from sqlmodel import SQLModel, Field

PaymentMethod = Literal["upi", "cod"]


class SellerPaymentProfile(SQLModel):
    """
    Read-only view of a seller's direct-payment configuration,
    as consumed by checkout.
    """

    seller_id: str
    shop_name: str
    upi_id: str | None = None
    accepts_cod: bool | None = None
    payment_qr_url: str | None = None
    payment_instructions: str | None = None
    shipping_charge: Decimal = Decimal("0")
    free_shipping_above: Decimal | None = None
    charge_gst: bool = False
    gst_percentage: Decimal = Decimal("0")
    charge_convenience: bool = False
    convenience_charge: Decimal = Decimal("0")
    is_active: bool = True


class SellerCartTotal(SQLModel):
    """
    Charges owed to one seller for their bucket of the cart.

    seller_id is None only for the bucket of lines without a seller. A
    seller whose profile could not be loaded keeps its id but is charged
    with the fallback defaults ("Marketplace", COD only, no charges).
    """

    seller_id: str | None
    shop_name: str
    product_ids: list[str] = Field(default_factory=list)
    subtotal: Decimal
    shipping: Decimal
    gst: Decimal
    convenience: Decimal
    total: Decimal

    upi_id: str | None = None
    payment_qr_url: str | None = None
    payment_instructions: str | None = None
    accepts_cod: bool | None = None
    upi_link: str | None = None


class CheckoutBreakdown(SQLModel):
    """
    Cart-wide charge breakdown plus the payment methods on offer.
    """

    sellers: list[SellerCartTotal]
    subtotal: Decimal
    shipping: Decimal
    gst: Decimal
    convenience: Decimal
    grand_total: Decimal
    upi_available: bool
    cod_available: bool

    @property
    def available_methods(self) -> list[str]:
        methods: list[str] = []
        if self.upi_available:
            methods.append("upi")
        if self.cod_available:
            methods.append("cod")
        return methods
