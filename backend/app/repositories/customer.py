"""
Repository Customer
Progetto: Invoice Manager (Gestionale Fatture)
"""

import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Customer, Invoice
from app.repositories.base import SQLAlchemyRepository


class CustomerRepository(SQLAlchemyRepository[Customer]):
    """Accesso ai dati dei clienti."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Customer)

    def _search_conditions(self, search: Optional[str]) -> list:
        if not search:
            return []
        search_term = f"%{search.strip()}%"
        return [
            or_(
                Customer.name.ilike(search_term),
                Customer.email.ilike(search_term),
                Customer.company.ilike(search_term),
            )
        ]

    async def search(
        self,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        """
        Ricerca paginata per nome, email o azienda (case-insensitive).

        Returns:
            Tuple di (lista clienti, totale count), dal più recente
        """
        conditions = self._search_conditions(search)

        query = (
            select(Customer)
            .where(*conditions)
            .order_by(Customer.created_at.desc(), Customer.name.asc())
            .offset(offset)
            .limit(limit)
        )
        customers = list(await self._scalars(query))

        count_query = select(func.count()).select_from(Customer).where(*conditions)
        total = (await self.session.execute(count_query)).scalar() or 0

        return customers, total

    async def count_invoices(self, customer_id: uuid.UUID) -> int:
        """Numero di fatture che referenziano il cliente."""
        query = select(func.count(Invoice.id)).where(Invoice.customer_id == customer_id)
        result = await self.session.execute(query)
        return result.scalar() or 0
