"""
Service Layer per i Pagamenti
Progetto: Invoice Manager (Gestionale Fatture)

I pagamenti si aggiungono a una fattura esistente e possono essere
eliminati singolarmente; non vengono modificati.
"""

import logging
import uuid

from app.core.database import atomic
from app.core.exceptions import NotFoundError
from app.models import Invoice, Payment
from app.repositories import InvoiceRepository, PaymentRepository
from app.schemas.payment import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    """Registrazione e consultazione dei pagamenti sulle fatture."""

    def __init__(self, payments: PaymentRepository, invoices: InvoiceRepository) -> None:
        self.payments = payments
        self.invoices = invoices

    async def _get_invoice(self, invoice_id: uuid.UUID) -> Invoice:
        invoice = await self.invoices.find_unique(invoice_id)
        if invoice is None:
            logger.warning("Fattura non trovata: %s", invoice_id)
            raise NotFoundError(f"Fattura con ID {invoice_id} non trovata")
        return invoice

    async def list_payments(self, invoice_id: uuid.UUID) -> list[Payment]:
        """
        Pagamenti registrati sulla fattura, dal più recente.

        Raises:
            NotFoundError: Se la fattura non esiste
        """
        await self._get_invoice(invoice_id)
        return await self.payments.find_by_invoice(invoice_id)

    async def get_payment(self, payment_id: uuid.UUID) -> Payment:
        payment = await self.payments.find_unique(payment_id)
        if payment is None:
            logger.warning("Pagamento non trovato: %s", payment_id)
            raise NotFoundError(f"Pagamento con ID {payment_id} non trovato")
        return payment

    async def record_payment(self, invoice_id: uuid.UUID, data: PaymentCreate) -> Payment:
        """
        Registra un pagamento sulla fattura.

        L'importo positivo è garantito dallo schema di input.

        Raises:
            NotFoundError: Se la fattura non esiste
        """
        invoice = await self._get_invoice(invoice_id)

        async with atomic(self.payments.session):
            payment = await self.payments.create({**data.model_dump(), "invoice_id": invoice.id})

        logger.info(
            "Registrato pagamento %s di %s su fattura %s (%s)",
            payment.id, payment.amount, invoice.number, payment.method,
        )
        return payment

    async def delete_payment(self, payment_id: uuid.UUID) -> None:
        """
        Elimina un pagamento.

        Raises:
            NotFoundError: Se il pagamento non esiste
        """
        payment = await self.get_payment(payment_id)

        async with atomic(self.payments.session):
            await self.payments.delete(payment)

        logger.info("Eliminato pagamento %s", payment_id)
