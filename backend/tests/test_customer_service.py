"""
Tests per CustomerService su database SQLite in memoria.
"""

import uuid

import pytest
from sqlalchemy.exc import InvalidRequestError

from app.core.exceptions import ConflictError, DuplicateError, NotFoundError
from app.schemas.customer import CustomerCreate, CustomerUpdate

from conftest import customer_payload


# ============================================================
# Creazione e lettura
# ============================================================


class TestCreateCustomer:
    async def test_create_normalizes_fields(self, customer_service):
        customer = await customer_service.create_customer(
            CustomerCreate(**customer_payload(name="  Globex  ", email="Info@GLOBEX.com", phone=""))
        )

        assert customer.id is not None
        assert customer.name == "Globex"
        assert customer.email == "info@globex.com"
        assert customer.phone is None
        assert customer.invoice_count == 0
        assert customer.created_at is not None

    async def test_duplicate_email_rejected(self, customer_service, customer):
        with pytest.raises(DuplicateError):
            await customer_service.create_customer(
                CustomerCreate(**customer_payload(name="Altro", email="BILLING@acme.com"))
            )

    async def test_get_missing_customer(self, customer_service):
        with pytest.raises(NotFoundError) as exc_info:
            await customer_service.get_customer(uuid.uuid4())

        assert exc_info.value.status_code == 404


class TestListCustomers:
    async def test_search_is_case_insensitive(self, customer_service, customer):
        await customer_service.create_customer(
            CustomerCreate(**customer_payload(name="Initech", email="info@initech.com", company=None))
        )

        items, total = await customer_service.list_customers(search="INITECH")
        assert total == 1
        assert items[0].name == "Initech"

        items, total = await customer_service.list_customers()
        assert total == 2
        assert len(items) == 2

    async def test_pagination(self, customer_service):
        for i in range(3):
            await customer_service.create_customer(
                CustomerCreate(**customer_payload(name=f"Cliente {i}", email=f"c{i}@example.com"))
            )

        items, total = await customer_service.list_customers(limit=2, offset=2)

        assert total == 3
        assert len(items) == 1


# ============================================================
# Aggiornamento
# ============================================================


class TestUpdateCustomer:
    async def test_partial_update_changes_only_sent_fields(self, customer_service, customer):
        updated = await customer_service.update_customer(
            customer.id, CustomerUpdate(phone="+39 06 7654321")
        )

        assert updated.phone == "+39 06 7654321"
        assert updated.name == "Acme S.r.l."
        assert updated.email == "billing@acme.com"

    async def test_update_missing_customer(self, customer_service):
        with pytest.raises(NotFoundError):
            await customer_service.update_customer(uuid.uuid4(), CustomerUpdate(name="X"))

    async def test_update_to_email_of_other_customer(self, customer_service, customer):
        other = await customer_service.create_customer(
            CustomerCreate(**customer_payload(name="Other", email="other@example.com"))
        )

        with pytest.raises(DuplicateError):
            await customer_service.update_customer(
                other.id, CustomerUpdate(email="billing@acme.com")
            )

    async def test_keeping_own_email_is_allowed(self, customer_service, customer):
        updated = await customer_service.update_customer(
            customer.id, CustomerUpdate(email="billing@acme.com", name="Acme SpA")
        )

        assert updated.name == "Acme SpA"


# ============================================================
# Eliminazione
# ============================================================


class TestDeleteCustomer:
    async def test_delete_customer_without_invoices(self, customer_service, customer):
        customer_id = customer.id

        await customer_service.delete_customer(customer_id)

        with pytest.raises(NotFoundError):
            await customer_service.get_customer(customer_id)

    async def test_delete_customer_with_invoices_is_refused(
        self, customer_service, customer, invoice
    ):
        with pytest.raises(ConflictError) as exc_info:
            await customer_service.delete_customer(customer.id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.extra == {"invoice_count": 1}

        still_there = await customer_service.get_customer(customer.id)
        assert still_there.invoice_count == 1

    async def test_invoices_are_never_loaded_implicitly(self, customer_service, customer, invoice):
        loaded = await customer_service.get_customer(customer.id)

        with pytest.raises(InvalidRequestError):
            loaded.invoices
        assert loaded.invoice_count == 1

    async def test_delete_missing_customer(self, customer_service):
        with pytest.raises(NotFoundError):
            await customer_service.delete_customer(uuid.uuid4())
