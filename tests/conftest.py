import os
import time
import uuid
from decimal import Decimal

# Settings are read at import time by app.core.config / app.database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app
from app.models.product import Product
from app.models.shop import Shop
from app.models.user import Address, User
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderCreate, OrderLineCreate
from app.services.order_service import OrderService

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    app.dependency_overrides[get_session] = lambda: session
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def make_token(user_id: uuid.UUID, email: str) -> str:
    claims = {
        "sub": str(user_id),
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}

    return _headers


@pytest.fixture
def make_user(session):
    def _make(role: str = "customer", name: str = "Asha", pincode: str | None = None) -> User:
        user_id = uuid.uuid4()
        user = User(
            id=user_id,
            email=f"{role}-{user_id.hex[:8]}@gamchha.in",
            name=name,
            role=role,
            pincode=pincode,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_shop(session):
    def _make(seller: User, **overrides) -> Shop:
        data = {
            "shop_name": f"{seller.name} Handlooms",
            "upi_id": None,
            "accepts_cod": True,
            "shipping_charge": Decimal("0"),
        }
        data.update(overrides)
        shop = Shop(seller_id=seller.id, **data)
        session.add(shop)
        session.commit()
        session.refresh(shop)
        return shop

    return _make


@pytest.fixture
def make_product(session):
    def _make(seller: User | None, price: str = "100", **overrides) -> Product:
        product_id = uuid.uuid4()
        data = {
            "name": "Cotton Gamchha",
            "slug": f"cotton-gamchha-{product_id.hex[:8]}",
            "price": Decimal(price),
            "category": "gamchha",
            "images": ["https://cdn.gamchha.in/p/1.jpg"],
            "stock_on_hand": 10,
        }
        data.update(overrides)
        product = Product(
            id=product_id,
            seller_id=seller.id if seller else None,
            **data,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_address(session):
    def _make(user: User, is_default: bool = True, **overrides) -> Address:
        data = {
            "full_name": "Asha Das",
            "phone": "9876543210",
            "address_line1": "12 Park Street",
            "city": "Kolkata",
            "state": "West Bengal",
            "pincode": "700016",
        }
        data.update(overrides)
        address = Address(user_id=user.id, is_default=is_default, **data)
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    return _make


@pytest.fixture
def make_order(session):
    """Place an order directly through OrderService."""
    service = OrderService(OrderRepository())

    def _make(customer: User, lines: list[tuple[Product, int]], status: str = "pending"):
        subtotal = sum((p.price * qty for p, qty in lines), Decimal("0"))
        draft = OrderCreate(
            idempotency_key=uuid.uuid4().hex,
            shipping_address={"full_name": "Asha Das", "city": "Kolkata", "pincode": "700016"},
            subtotal=subtotal,
            shipping_cost=Decimal("0"),
            gst_amount=Decimal("0"),
            convenience_fee=Decimal("0"),
            total=subtotal,
            payment_method="cod",
            notes="Cash on Delivery",
            lines=[
                OrderLineCreate(
                    product_id=str(p.id),
                    seller_id=str(p.seller_id) if p.seller_id else None,
                    product_name=p.name,
                    quantity=qty,
                    price=p.price,
                )
                for p, qty in lines
            ],
        )
        order = service.create_order(session, customer.id, draft)
        if status != "pending":
            row = service.order_repo.get_by_id(session, order.id)
            row.status = status
            session.add(row)
            session.commit()
        return order

    return _make
