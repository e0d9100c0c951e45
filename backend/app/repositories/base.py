"""
Repository generico SQLAlchemy
Progetto: Invoice Manager (Gestionale Fatture)

Operazioni di base comuni a tutte le entità: ricerca, lettura per ID,
creazione, aggiornamento, eliminazione e conteggio. Nessun commit qui:
la transazione è governata dal service tramite app.core.database.atomic.
"""

import uuid
from typing import Any, Dict, Generic, Iterable, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class SQLAlchemyRepository(Generic[ModelT]):
    """
    Accesso ai dati per un singolo modello.

    Usage:
        repo = SQLAlchemyRepository(session, Customer)
        customer = await repo.find_unique(customer_id)
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT]) -> None:
        self.session = session
        self.model = model

    def _conditions(self, filters: Optional[Dict[str, Any]]) -> list:
        return [getattr(self.model, key) == value for key, value in (filters or {}).items()]

    async def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Iterable[Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[ModelT]:
        """
        Elenco di entità filtrate per uguaglianza sui campi indicati.

        Args:
            filters: Mappa campo -> valore
            order_by: Espressioni di ordinamento SQLAlchemy
            limit: Numero massimo di risultati
            offset: Risultati da saltare
        """
        query = select(self.model).where(*self._conditions(filters))
        if order_by is not None:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_unique(self, entity_id: uuid.UUID) -> Optional[ModelT]:
        """Entità per ID, None se assente."""
        query = (
            select(self.model)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = select(func.count()).select_from(self.model).where(*self._conditions(filters))
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def create(self, data: Dict[str, Any]) -> ModelT:
        """Aggiunge una nuova entità alla sessione ed esegue il flush."""
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, entity: ModelT, data: Dict[str, Any]) -> ModelT:
        for field, value in data.items():
            setattr(entity, field, value)
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def _scalars(self, query) -> Sequence[ModelT]:
        result = await self.session.execute(query)
        return result.scalars().all()
