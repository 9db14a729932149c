# app/services/product_service.py
import re
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartProduct
from app.schemas.delivery import DeliveryEstimate
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.delivery_service import estimate_delivery

# Columns that cannot be cleared through a partial update
REQUIRED_FIELDS = {"name", "price", "images", "stock_on_hand", "is_active"}


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - slug generation & uniqueness
      - seller ownership of products
      - cart snapshots and delivery estimates for a product
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    @staticmethod
    def to_cart_product(product: Product) -> CartProduct:
        """
        Snapshot of a catalog product for the cart / wishlist.
        """
        return CartProduct(
            id=str(product.id),
            name=product.name,
            price=product.price,
            original_price=product.original_price,
            seller_id=str(product.seller_id) if product.seller_id else None,
            category=product.category,
            fabric=product.fabric,
            color=product.color,
            pattern=product.pattern,
            image=product.images[0] if product.images else None,
            deliverable_pincodes=product.deliverable_pincodes,
        )

    # ----- Storefront -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        category: str | None = None,
        seller_id: uuid.UUID | None = None,
    ) -> list[Product]:
        return self.repo.list_products(
            session, skip=skip, limit=limit, category=category, seller_id=seller_id
        )

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_purchasable(self, session: Session, product_id: uuid.UUID) -> Product:
        """
        Product that may go into a cart or wishlist: must exist and be active.
        """
        product = self.get_product(session, product_id)
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is inactive",
            )
        return product

    def delivery_estimate(
        self,
        session: Session,
        product_id: uuid.UUID,
        pincode: str | None,
    ) -> DeliveryEstimate:
        product = self.get_product(session, product_id)
        return estimate_delivery(product.deliverable_pincodes, pincode)

    # ----- Seller back office -----

    def create_product(
        self,
        session: Session,
        seller_id: uuid.UUID,
        payload: ProductCreate,
    ) -> Product:
        """
        Create a new product owned by `seller_id` with a unique slug.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        """
        raw_slug = payload.slug or payload.name
        slug = self._ensure_unique_slug(session, self._slugify(raw_slug))

        product = Product(
            **payload.model_dump(exclude={"slug"}),
            seller_id=seller_id,
            slug=slug,
        )
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        seller_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of one of the seller's products.

        - 404 when the product belongs to another seller.
        - If slug is changed, enforce uniqueness.
        """
        product = self.get_product(session, product_id)
        if product.seller_id != seller_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        changes = payload.model_dump(exclude_unset=True)

        new_slug = changes.pop("slug", None)
        if new_slug is not None:
            new_base_slug = self._slugify(new_slug)
            if new_base_slug != product.slug:
                product.slug = self._ensure_unique_slug(session, new_base_slug)

        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(product, field, value)

        return self.repo.update(session, product)
