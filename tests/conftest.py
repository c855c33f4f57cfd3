# Standard Library

from decimal import Decimal
from typing import AsyncGenerator

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries (Your project)
import src.models  # noqa: F401
from src.main import app
from src.config import settings
from src.database import get_db_session
from src.auth.security import get_password_hash, create_access_token
from src.addresses.models import Address
from src.brands.models import Brand
from src.categories.models import Category
from src.products.models import DiscountType, Product
from src.users.models import User

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

API_PREFIX = settings.API_V1_PREFIX

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(
        TEST_DATABASE_BASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx qui utilise la session DB de test isolée."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.dependency_overrides[get_db_session]

# --- Fixtures Utilisateur et Authentification ---

async def _create_user(db_session: AsyncSession, email: str, password: str, name: str, **kwargs) -> User:
    user = User(email=email, password_hash=get_password_hash(password), name=name, **kwargs)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user

def _headers_for(user: User) -> dict[str, str]:
    if user.id is None:
        pytest.fail("L'ID de l'utilisateur est None après commit/refresh.")
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user.id)})}"}

@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    """Client actif (compte approuvé)."""
    return await _create_user(
        db_session, "testuser@example.com", "testpassword", "Test User", phone="0612345678", is_active=True
    )

@pytest_asyncio.fixture(scope="function")
async def test_user_2(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "testuser2@example.com", "testpassword2", "Test User 2", is_active=True)

@pytest_asyncio.fixture(scope="function")
async def inactive_user(db_session: AsyncSession) -> User:
    """Client inscrit mais pas encore approuvé."""
    return await _create_user(db_session, "pending@example.com", "pendingpassword", "Pending User")

@pytest_asyncio.fixture(scope="function")
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session, "admin@example.com", "adminpassword", "Admin User", is_admin=True, is_active=True
    )

@pytest_asyncio.fixture(scope="function")
async def auth_headers_user(test_user: User) -> dict[str, str]:
    return _headers_for(test_user)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_user_2(test_user_2: User) -> dict[str, str]:
    return _headers_for(test_user_2)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_admin(admin_user: User) -> dict[str, str]:
    return _headers_for(admin_user)

@pytest_asyncio.fixture(scope="function")
async def test_address(db_session: AsyncSession, test_user: User) -> Address:
    address = Address(
        user_id=test_user.id,
        country="Nepal",
        province="Bagmati",
        city="Kathmandu",
        neighbourhood="Thamel",
        nearest_landmark="Garden of Dreams",
        is_default=True,
    )
    db_session.add(address)
    await db_session.commit()
    await db_session.refresh(address)
    return address

# --- Fixtures Catalogue ---

@pytest_asyncio.fixture(scope="function")
async def test_category(db_session: AsyncSession) -> Category:
    category = Category(name="Seeds", slug="seeds", description="Garden seeds")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category

@pytest_asyncio.fixture(scope="function")
async def test_brand(db_session: AsyncSession) -> Brand:
    brand = Brand(name="GreenCo")
    db_session.add(brand)
    await db_session.commit()
    await db_session.refresh(brand)
    return brand

async def _create_product(db_session: AsyncSession, category: Category, **kwargs) -> Product:
    data = {"name": "Tomato Seeds", "price": Decimal("20.00"), "stock": 10, "category_id": category.id}
    data.update(kwargs)
    product = Product(**data)
    db_session.add(product)
    await db_session.commit()
    await db_session.refresh(product)
    return product

@pytest_asyncio.fixture(scope="function")
async def test_product(db_session: AsyncSession, test_category: Category, test_brand: Brand) -> Product:
    """Produit à 20.00, stock 10, remise de 10 %."""
    return await _create_product(
        db_session,
        test_category,
        brand_id=test_brand.id,
        discount_type=DiscountType.PERCENTAGE,
        discount_percent=Decimal("10"),
    )

@pytest_asyncio.fixture(scope="function")
async def plain_product(db_session: AsyncSession, test_category: Category) -> Product:
    """Produit à 15.00 sans remise, stock 5."""
    return await _create_product(db_session, test_category, name="Watering Can", price=Decimal("15.00"), stock=5)

@pytest_asyncio.fixture(scope="function")
async def hidden_price_product(db_session: AsyncSession, test_category: Category) -> Product:
    return await _create_product(
        db_session, test_category, name="Rare Bonsai", price=Decimal("150.00"), stock=2, hide_price=True
    )

@pytest_asyncio.fixture(scope="function")
async def negotiable_product(db_session: AsyncSession, test_category: Category) -> Product:
    return await _create_product(
        db_session, test_category, name="Garden Shed", price=Decimal("500.00"), stock=3, negotiable_price=True
    )
