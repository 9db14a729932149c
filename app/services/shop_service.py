# app/services/shop_service.py
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.shop import Shop
from app.models.user import User
from app.repositories.shop_repo import ShopRepository
from app.schemas.shop import PaymentSettingsUpdate, SellerRegister


class ShopService:
    """
    Seller shop and payment-settings management.
    """

    def __init__(self, repo: ShopRepository):
        self.repo = repo

    def register_seller(
        self,
        session: Session,
        current_user: User,
        payload: SellerRegister,
    ) -> Shop:
        """
        Open a shop for the current user and promote them to seller.

        Admins keep their role; a user can own only one shop.
        """
        if self.repo.get_by_seller(session, current_user.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You already have a shop",
            )

        shop = Shop(seller_id=current_user.id, **payload.model_dump())
        if current_user.role == "customer":
            current_user.role = "seller"
            session.add(current_user)
        return self.repo.save(session, shop)

    def get_shop(self, session: Session, current_user: User) -> Shop:
        shop = self.repo.get_by_seller(session, current_user.id)
        if not shop:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Shop not found",
            )
        return shop

    def update_payment_settings(
        self,
        session: Session,
        current_user: User,
        payload: PaymentSettingsUpdate,
    ) -> Shop:
        """
        Replace the seller's payment settings.

        At least one payment method must remain: a UPI id, a QR image or COD.
        """
        shop = self.get_shop(session, current_user)

        if not (payload.upi_id or payload.payment_qr_url) and payload.accepts_cod is False:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Enable COD or add a UPI ID / QR code",
            )

        for field, value in payload.model_dump().items():
            setattr(shop, field, value)
        shop.updated_at = datetime.now(timezone.utc)
        return self.repo.save(session, shop)
