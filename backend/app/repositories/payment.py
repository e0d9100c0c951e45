"""
Repository Payment
Progetto: Invoice Manager (Gestionale Fatture)
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Payment
from app.repositories.base import SQLAlchemyRepository


class PaymentRepository(SQLAlchemyRepository[Payment]):
    """Accesso ai dati dei pagamenti."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Payment)

    async def find_by_invoice(self, invoice_id: uuid.UUID) -> list[Payment]:
        """Pagamenti della fattura, dal più recente."""
        query = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        )
        return list(await self._scalars(query))
