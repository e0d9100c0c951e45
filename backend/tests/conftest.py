"""
Pytest configuration and fixtures.

Ogni test riceve un database SQLite in memoria (aiosqlite) con lo schema
completo, più repository e service già collegati alla sessione.
"""

from datetime import date
from typing import Any, AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from app.core.database import build_engine, build_session_factory, create_all, get_db
from app.repositories import CustomerRepository, InvoiceRepository, PaymentRepository
from app.schemas.customer import CustomerCreate
from app.schemas.invoice import InvoiceCreate
from app.services.customer_service import CustomerService
from app.services.invoice_service import InvoiceService
from app.services.payment_service import PaymentService

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TODAY = date(2024, 3, 15)


# ============================================================
# Fixtures Database
# ============================================================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Engine SQLite in memoria condiviso da tutte le sessioni del test."""
    engine = build_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async with build_session_factory(engine)() as session:
        yield session


# ============================================================
# Fixtures Repository e Service
# ============================================================


@pytest.fixture
def customer_repo(session):
    return CustomerRepository(session)


@pytest.fixture
def invoice_repo(session):
    return InvoiceRepository(session)


@pytest.fixture
def payment_repo(session):
    return PaymentRepository(session)


@pytest.fixture
def customer_service(customer_repo):
    return CustomerService(customer_repo)


@pytest.fixture
def invoice_service(invoice_repo, customer_repo):
    """InvoiceService con data fissa al 15/03/2024 e un retry su collisione."""
    return InvoiceService(invoice_repo, customer_repo, clock=lambda: TODAY, number_retries=1)


@pytest.fixture
def payment_service(payment_repo, invoice_repo):
    return PaymentService(payment_repo, invoice_repo)


# ============================================================
# Fixtures Dati
# ============================================================


def customer_payload(**overrides: Any) -> dict:
    data = {
        "name": "Acme S.r.l.",
        "email": "billing@acme.com",
        "phone": "+39 02 1234567",
        "company": "Acme",
        "address": "Via Roma 1, Milano",
        "tax_id": "IT12345678901",
    }
    data.update(overrides)
    return data


def invoice_payload(customer_id, **overrides: Any) -> dict:
    data = {
        "customer_id": customer_id,
        "issue_date": TODAY,
        "due_date": date(2024, 4, 14),
        "tax_rate": "0.08",
        "notes": "Consulenza marzo",
        "items": [
            {"description": "Sviluppo", "quantity": 2, "rate": "10.005"},
            {"description": "Supporto", "quantity": 1, "rate": "5"},
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
async def customer(customer_service):
    return await customer_service.create_customer(CustomerCreate(**customer_payload()))


@pytest.fixture
async def invoice(invoice_service, customer):
    return await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))


# ============================================================
# Fixtures API
# ============================================================


@pytest.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """
    Client HTTP sull'app FastAPI con get_db puntato al database di test.

    Ogni richiesta apre una propria sessione, come in produzione.
    """
    from app.main import app

    session_factory = build_session_factory(engine)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
