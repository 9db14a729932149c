# app/repositories/shop_repo.py
import uuid

from sqlmodel import Session, select

from app.models.shop import Shop
from app.schemas.payment import SellerPaymentProfile


def _parse_ids(raw_ids: list[str]) -> list[uuid.UUID]:
    ids: list[uuid.UUID] = []
    for raw in raw_ids:
        try:
            ids.append(uuid.UUID(str(raw)))
        except ValueError:
            # Unknown id format => no profile; checkout falls back
            continue
    return ids


class ShopRepository:
    """
    Data access layer for Shop (seller storefront + payment settings).
    """

    def get_by_seller(self, session: Session, seller_id: uuid.UUID) -> Shop | None:
        stmt = select(Shop).where(Shop.seller_id == seller_id)
        return session.exec(stmt).first()

    def fetch_payment_profiles(
        self,
        session: Session,
        seller_ids: list[str],
    ) -> list[SellerPaymentProfile]:
        """
        Payment profiles of the given sellers, active shops only.

        May return fewer profiles than requested (unknown or inactive
        sellers); callers treat missing ones as fallback sellers.
        """
        ids = _parse_ids(seller_ids)
        if not ids:
            return []

        stmt = select(Shop).where(Shop.seller_id.in_(ids), Shop.is_active == True)  # noqa: E712
        return [
            SellerPaymentProfile(
                seller_id=str(shop.seller_id),
                shop_name=shop.shop_name,
                upi_id=shop.upi_id,
                accepts_cod=shop.accepts_cod,
                payment_qr_url=shop.payment_qr_url,
                payment_instructions=shop.payment_instructions,
                shipping_charge=shop.shipping_charge,
                free_shipping_above=shop.free_shipping_above,
                charge_gst=shop.charge_gst,
                gst_percentage=shop.gst_percentage,
                charge_convenience=shop.charge_convenience,
                convenience_charge=shop.convenience_charge,
                is_active=shop.is_active,
            )
            for shop in session.exec(stmt).all()
        ]

    def save(self, session: Session, shop: Shop) -> Shop:
        session.add(shop)
        session.commit()
        session.refresh(shop)
        return shop
