"""
Service Layer per l'entità Customer
Progetto: Invoice Manager (Gestionale Fatture)

Definisce la logica di business per la gestione dei clienti:
- Validazione proattiva (email già in uso)
- Vincolo referenziale: un cliente con fatture non può essere eliminato
- Logging delle operazioni di scrittura
"""

import logging
import uuid
from typing import Optional

from app.core.database import atomic
from app.core.exceptions import ConflictError, DuplicateError, NotFoundError
from app.models import Customer
from app.repositories import CustomerRepository
from app.schemas.customer import CustomerCreate, CustomerUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class CustomerService:
    """
    Service per le operazioni CRUD sui clienti.

    Riceve il repository dall'esterno: nessuna dipendenza da FastAPI,
    utilizzabile anche da script e test.

    Usage:
        service = CustomerService(CustomerRepository(session))
        customer = await service.get_customer(customer_id)
    """

    def __init__(self, customers: CustomerRepository) -> None:
        self.customers = customers

    async def list_customers(
        self,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        """
        Recupera la lista paginata dei clienti.

        Args:
            search: Termine di ricerca su nome, email, azienda
            limit: Elementi per pagina
            offset: Elementi da saltare

        Returns:
            Tuple di (lista clienti, totale count)
        """
        customers, total = await self.customers.search(search=search, limit=limit, offset=offset)
        logger.debug("Recuperati %s clienti su %s totali", len(customers), total)
        return customers, total

    async def get_customer(self, customer_id: uuid.UUID) -> Customer:
        """
        Recupera un cliente tramite ID.

        Raises:
            NotFoundError: Se il cliente non esiste
        """
        customer = await self.customers.find_unique(customer_id)
        if customer is None:
            logger.warning("Cliente non trovato: %s", customer_id)
            raise NotFoundError(f"Cliente con ID {customer_id} non trovato")
        return customer

    async def create_customer(self, data: CustomerCreate) -> Customer:
        """
        Crea un nuovo cliente.

        Raises:
            DuplicateError: Se l'email è già registrata per un altro cliente
        """
        await self._ensure_email_available(data.email)

        async with atomic(self.customers.session):
            customer = await self.customers.create(data.model_dump())

        logger.info("Creato cliente %s (%s)", customer.id, customer.email)
        return await self.get_customer(customer.id)

    async def update_customer(self, customer_id: uuid.UUID, data: CustomerUpdate) -> Customer:
        """
        Aggiorna un cliente esistente.

        Vengono modificati solo i campi effettivamente inviati.

        Raises:
            NotFoundError: Se il cliente non esiste
            DuplicateError: Se la nuova email è già in uso
        """
        customer = await self.get_customer(customer_id)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != customer.email:
            await self._ensure_email_available(changes["email"], exclude_id=customer.id)

        async with atomic(self.customers.session):
            await self.customers.update(customer, changes)

        logger.info("Aggiornato cliente %s (campi: %s)", customer_id, ", ".join(sorted(changes)))
        return await self.get_customer(customer_id)

    async def delete_customer(self, customer_id: uuid.UUID) -> None:
        """
        Elimina un cliente.

        Raises:
            NotFoundError: Se il cliente non esiste
            ConflictError: Se il cliente ha fatture associate
        """
        customer = await self.get_customer(customer_id)

        invoice_count = await self.customers.count_invoices(customer.id)
        if invoice_count > 0:
            logger.warning(
                "Eliminazione cliente %s rifiutata: %s fatture associate",
                customer_id, invoice_count,
            )
            raise ConflictError(
                "Impossibile eliminare un cliente con fatture esistenti",
                extra={"invoice_count": invoice_count},
            )

        async with atomic(self.customers.session):
            await self.customers.delete(customer)

        logger.info("Eliminato cliente %s", customer_id)

    async def _ensure_email_available(
        self,
        email: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        existing = await self.customers.find_many({"email": email}, limit=2)
        if any(c.id != exclude_id for c in existing):
            logger.warning("Email cliente già registrata: %s", email)
            raise DuplicateError(f"Email '{email}' già registrata per un altro cliente")
