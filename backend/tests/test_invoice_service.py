"""
Tests per InvoiceService su database SQLite in memoria.

Coprono numerazione annuale, calcolo totali al salvataggio,
sostituzione righe e retry in caso di collisione sul numero.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from app.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    CustomerNotFoundError,
    DuplicateError,
    NotFoundError,
)
from app.models import InvoiceItem
from app.schemas.invoice import InvoiceCreate, InvoiceItemCreate, InvoiceStatus, InvoiceUpdate
from app.schemas.payment import PaymentCreate

from conftest import invoice_payload


async def count_items(session) -> int:
    result = await session.execute(select(func.count(InvoiceItem.id)))
    return result.scalar()


# ============================================================
# Creazione
# ============================================================


class TestCreateInvoice:
    async def test_create_computes_totals_and_number(self, invoice_service, customer):
        invoice = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        assert invoice.number == "INV-2024-001"
        assert invoice.status == "DRAFT"
        assert invoice.subtotal == Decimal("25.01")
        assert invoice.tax_amount == Decimal("2.00")
        assert invoice.total == Decimal("27.01")
        assert [i.amount for i in invoice.items] == [Decimal("20.01"), Decimal("5.00")]
        assert [i.line_number for i in invoice.items] == [1, 2]
        assert invoice.customer.id == customer.id
        assert invoice.balance_due == Decimal("27.01")

    async def test_numbers_are_sequential(self, invoice_service, customer, invoice):
        second = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        assert invoice.number == "INV-2024-001"
        assert second.number == "INV-2024-002"

    async def test_sequence_is_scoped_to_current_year(self, invoice_service, customer):
        await invoice_service.create_invoice(
            InvoiceCreate(**invoice_payload(customer.id, number="INV-2023-005"))
        )

        invoice = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        assert invoice.number == "INV-2024-001"

    async def test_sequence_grows_past_999(self, invoice_service, customer):
        await invoice_service.create_invoice(
            InvoiceCreate(**invoice_payload(customer.id, number="INV-2024-999"))
        )

        first = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))
        second = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        assert first.number == "INV-2024-1000"
        assert second.number == "INV-2024-1001"

    async def test_missing_customer_creates_nothing(self, invoice_service, invoice_repo):
        with pytest.raises(CustomerNotFoundError) as exc_info:
            await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(uuid.uuid4())))

        assert exc_info.value.status_code == 400
        assert await invoice_repo.count() == 0
        assert await count_items(invoice_repo.session) == 0

    async def test_padded_alias_of_existing_number_is_rejected(self, invoice_service, customer, invoice):
        with pytest.raises(ValidationError):
            InvoiceCreate(**invoice_payload(customer.id, number="INV-2024-0001"))

        # La numerazione automatica prosegue senza collisioni
        second = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))
        assert second.number == "INV-2024-002"

    async def test_caller_supplied_number_must_be_unused(self, invoice_service, customer, invoice):
        with pytest.raises(DuplicateError):
            await invoice_service.create_invoice(
                InvoiceCreate(**invoice_payload(customer.id, number=invoice.number))
            )

    async def test_line_rounding_to_zero_is_rejected(self, invoice_service, customer, invoice_repo):
        payload = invoice_payload(
            customer.id, items=[{"description": "Bullone", "quantity": 1, "rate": "0.0001"}]
        )

        with pytest.raises(BusinessValidationError):
            await invoice_service.create_invoice(InvoiceCreate(**payload))

        assert await invoice_repo.count() == 0


class TestNumberCollision:
    """Numero generato già preso da una creazione concorrente."""

    async def test_retry_with_fresh_number(self, invoice_service, invoice_repo, customer, invoice):
        customer_id = customer.id
        real_lookup = invoice_repo.find_last_number_for_year
        calls = []

        async def stale_then_real(year):
            calls.append(year)
            if len(calls) == 1:
                # Simula una lettura fatta prima del commit della fattura concorrente
                return None
            return await real_lookup(year)

        invoice_repo.find_last_number_for_year = stale_then_real

        created = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer_id)))

        assert calls == [2024, 2024]
        assert created.number == "INV-2024-002"
        assert await invoice_repo.count() == 2
        assert await count_items(invoice_repo.session) == 4

    async def test_conflict_after_retries_exhausted(self, invoice_service, invoice_repo, customer, invoice):
        customer_id = customer.id

        async def always_stale(year):
            return None

        invoice_repo.find_last_number_for_year = always_stale

        with pytest.raises(ConflictError) as exc_info:
            await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer_id)))

        assert exc_info.value.extra == {"attempts": 2}
        assert await invoice_repo.count() == 1


# ============================================================
# Lettura
# ============================================================


class TestReadInvoices:
    async def test_get_missing_invoice(self, invoice_service):
        with pytest.raises(NotFoundError):
            await invoice_service.get_invoice(uuid.uuid4())

    async def test_get_by_number(self, invoice_service, invoice):
        found = await invoice_service.get_invoice_by_number("INV-2024-001")
        assert found.id == invoice.id

        with pytest.raises(NotFoundError):
            await invoice_service.get_invoice_by_number("INV-2024-404")

    async def test_preview_next_number(self, invoice_service, invoice):
        assert await invoice_service.preview_next_number() == "INV-2024-002"
        # L'anteprima non riserva il numero
        assert await invoice_service.preview_next_number() == "INV-2024-002"

    async def test_list_filters(self, invoice_service, customer, invoice):
        await invoice_service.update_invoice(invoice.id, InvoiceUpdate(status=InvoiceStatus.SENT))
        await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        _, total = await invoice_service.list_invoices()
        assert total == 2

        items, total = await invoice_service.list_invoices(status=InvoiceStatus.SENT)
        assert total == 1
        assert items[0].id == invoice.id

        items, total = await invoice_service.list_invoices(search="acme")
        assert total == 2

        items, total = await invoice_service.list_invoices(search="2024-002")
        assert [i.number for i in items] == ["INV-2024-002"]

        _, total = await invoice_service.list_invoices(customer_id=uuid.uuid4())
        assert total == 0

    def test_calculate(self, invoice_service):
        items = [
            InvoiceItemCreate(description="A", quantity=2, rate=Decimal("10.005")),
            InvoiceItemCreate(description="B", quantity=1, rate=Decimal("5")),
        ]

        result = invoice_service.calculate(items, Decimal("0.08"))

        assert [i.amount for i in result.items] == [Decimal("20.01"), Decimal("5.00")]
        assert result.subtotal == Decimal("25.01")
        assert result.total == Decimal("27.01")


# ============================================================
# Aggiornamento
# ============================================================


class TestUpdateInvoice:
    async def test_items_are_replaced_not_merged(self, invoice_service, invoice, session):
        updated = await invoice_service.update_invoice(
            invoice.id,
            InvoiceUpdate(items=[InvoiceItemCreate(description="C", quantity=3, rate=Decimal("7.5"))]),
        )

        assert [i.description for i in updated.items] == ["C"]
        assert updated.items[0].amount == Decimal("22.50")
        assert updated.subtotal == Decimal("22.50")
        assert updated.tax_amount == Decimal("1.80")
        assert updated.total == Decimal("24.30")
        assert await count_items(session) == 1

    async def test_failed_replacement_keeps_original_items(self, invoice_service, invoice, session, monkeypatch):
        invoice_id = invoice.id
        real_flush = session.flush
        flushes = []

        async def fail_after_delete(*args, **kwargs):
            flushes.append(1)
            if len(flushes) == 2:
                # Le righe vecchie sono già state eliminate, l'inserimento fallisce
                raise RuntimeError("insert fallito")
            return await real_flush(*args, **kwargs)

        monkeypatch.setattr(session, "flush", fail_after_delete)

        with pytest.raises(RuntimeError):
            await invoice_service.update_invoice(
                invoice_id,
                InvoiceUpdate(items=[InvoiceItemCreate(description="C", quantity=1, rate=Decimal("1"))]),
            )

        monkeypatch.undo()
        reloaded = await invoice_service.get_invoice(invoice_id)
        assert [i.description for i in reloaded.items] == ["Sviluppo", "Supporto"]
        assert reloaded.total == Decimal("27.01")
        assert await count_items(session) == 2

    async def test_tax_rate_change_recomputes_totals(self, invoice_service, invoice):
        updated = await invoice_service.update_invoice(invoice.id, InvoiceUpdate(tax_rate=Decimal("0")))

        assert len(updated.items) == 2
        assert updated.subtotal == Decimal("25.01")
        assert updated.tax_amount == Decimal("0.00")
        assert updated.total == Decimal("25.01")

    async def test_update_missing_invoice(self, invoice_service):
        with pytest.raises(NotFoundError):
            await invoice_service.update_invoice(uuid.uuid4(), InvoiceUpdate(notes="x"))

    async def test_update_to_missing_customer(self, invoice_service, invoice):
        with pytest.raises(CustomerNotFoundError):
            await invoice_service.update_invoice(invoice.id, InvoiceUpdate(customer_id=uuid.uuid4()))

    async def test_update_to_used_number(self, invoice_service, customer, invoice):
        second = await invoice_service.create_invoice(InvoiceCreate(**invoice_payload(customer.id)))

        with pytest.raises(DuplicateError):
            await invoice_service.update_invoice(second.id, InvoiceUpdate(number=invoice.number))

    async def test_due_date_before_issue_date(self, invoice_service, invoice):
        with pytest.raises(BusinessValidationError):
            await invoice_service.update_invoice(invoice.id, InvoiceUpdate(due_date=date(2024, 1, 1)))


# ============================================================
# Eliminazione
# ============================================================


class TestDeleteInvoice:
    async def test_delete_removes_items_and_payments(
        self, invoice_service, payment_service, invoice, invoice_repo, payment_repo, session
    ):
        invoice_id = invoice.id
        await payment_service.record_payment(
            invoice_id,
            PaymentCreate(amount=Decimal("10.00"), payment_date=date(2024, 3, 20), method="CASH"),
        )

        await invoice_service.delete_invoice(invoice_id)

        with pytest.raises(NotFoundError):
            await invoice_service.get_invoice(invoice_id)
        assert await invoice_repo.count() == 0
        assert await payment_repo.count() == 0
        assert await count_items(session) == 0

    async def test_delete_missing_invoice(self, invoice_service):
        with pytest.raises(NotFoundError):
            await invoice_service.delete_invoice(uuid.uuid4())
