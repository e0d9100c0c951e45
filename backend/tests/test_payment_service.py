"""
Tests per PaymentService su database SQLite in memoria.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import NotFoundError
from app.schemas.payment import PaymentCreate


def payment_data(amount="10.00", payment_date=date(2024, 3, 20), method="BANK_TRANSFER"):
    return PaymentCreate(amount=amount, payment_date=payment_date, method=method, reference="CRO-1")


class TestRecordPayment:
    async def test_record_and_balance(self, payment_service, invoice_service, invoice):
        payment = await payment_service.record_payment(invoice.id, payment_data(amount="7.01"))

        assert payment.invoice_id == invoice.id
        assert payment.amount == Decimal("7.01")
        assert payment.method == "BANK_TRANSFER"

        reloaded = await invoice_service.get_invoice(invoice.id)
        assert reloaded.paid_amount == Decimal("7.01")
        assert reloaded.balance_due == Decimal("20.00")

    async def test_record_on_missing_invoice(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.record_payment(uuid.uuid4(), payment_data())

    @pytest.mark.parametrize("amount", ["0", "-5", "1.001"])
    def test_invalid_amount_rejected_by_schema(self, amount):
        with pytest.raises(PydanticValidationError):
            payment_data(amount=amount)

    def test_unknown_method_rejected(self):
        with pytest.raises(PydanticValidationError):
            payment_data(method="BITCOIN")


class TestListAndDeletePayments:
    async def test_list_newest_first(self, payment_service, invoice):
        await payment_service.record_payment(invoice.id, payment_data(payment_date=date(2024, 3, 16)))
        await payment_service.record_payment(invoice.id, payment_data(payment_date=date(2024, 3, 30)))

        payments = await payment_service.list_payments(invoice.id)

        assert [p.payment_date for p in payments] == [date(2024, 3, 30), date(2024, 3, 16)]

    async def test_list_for_missing_invoice(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.list_payments(uuid.uuid4())

    async def test_delete_payment(self, payment_service, invoice_service, invoice):
        payment = await payment_service.record_payment(invoice.id, payment_data())
        payment_id = payment.id

        await payment_service.delete_payment(payment_id)

        with pytest.raises(NotFoundError):
            await payment_service.get_payment(payment_id)
        reloaded = await invoice_service.get_invoice(invoice.id)
        assert reloaded.payments == []
        assert reloaded.balance_due == reloaded.total

    async def test_delete_missing_payment(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.delete_payment(uuid.uuid4())
