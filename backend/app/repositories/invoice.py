"""
Repository Invoice
Progetto: Invoice Manager (Gestionale Fatture)

Oltre alle operazioni di base espone la ricerca dell'ultimo numero
emesso nell'anno, usata dal sequenziatore, e la sostituzione in blocco
delle righe.
"""

import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Customer, Invoice, InvoiceItem
from app.repositories.base import SQLAlchemyRepository
from app.services.invoice_number import year_prefix


class InvoiceRepository(SQLAlchemyRepository[Invoice]):
    """Accesso ai dati delle fatture e delle relative righe."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invoice)

    async def search(
        self,
        search: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        """
        Ricerca paginata delle fatture.

        Args:
            search: Testo cercato su numero fattura, nome o email del cliente
            customer_id: Solo le fatture di questo cliente
            status: Solo le fatture in questo stato
            limit: Elementi per pagina
            offset: Elementi da saltare

        Returns:
            Tuple di (lista fatture, totale count), dalla più recente
        """
        conditions = []
        if customer_id is not None:
            conditions.append(Invoice.customer_id == customer_id)
        if status is not None:
            conditions.append(Invoice.status == status)
        if search:
            search_term = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Invoice.number.ilike(search_term),
                    Customer.name.ilike(search_term),
                    Customer.email.ilike(search_term),
                )
            )

        query = (
            select(Invoice)
            .join(Customer, Invoice.customer_id == Customer.id)
            .where(*conditions)
            .order_by(Invoice.created_at.desc(), Invoice.number.desc())
            .offset(offset)
            .limit(limit)
        )
        invoices = list(await self._scalars(query))

        count_query = (
            select(func.count(Invoice.id))
            .join(Customer, Invoice.customer_id == Customer.id)
            .where(*conditions)
        )
        total = (await self.session.execute(count_query)).scalar() or 0

        return invoices, total

    async def find_by_number(self, number: str) -> Optional[Invoice]:
        query = (
            select(Invoice)
            .where(Invoice.number == number)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_last_number_for_year(self, year: int) -> Optional[str]:
        """
        Ultimo numero fattura emesso nell'anno, None se nessuno.

        L'ordinamento per lunghezza e poi lessicografico coincide con
        l'ordine numerico dei progressivi (INV-2024-1000 dopo INV-2024-999).
        """
        query = (
            select(Invoice.number)
            .where(Invoice.number.startswith(year_prefix(year), autoescape=True))
            .order_by(func.length(Invoice.number).desc(), Invoice.number.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def replace_items(self, invoice: Invoice, items: list[InvoiceItem]) -> Invoice:
        """
        Sostituisce tutte le righe della fattura con quelle indicate.

        Le righe esistenti vengono eliminate (delete-orphan) prima di
        inserire le nuove; va chiamato dentro un blocco atomic perché
        la fattura non resti mai senza righe.
        """
        invoice.items.clear()
        await self.session.flush()
        invoice.items.extend(items)
        await self.session.flush()
        return invoice
