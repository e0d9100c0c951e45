"""
Service Layer per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Gestisce:
- Creazione fattura con righe e totali calcolati in un'unica transazione
- Numerazione progressiva annuale (INV-YYYY-NNN) con retry su collisione
- Aggiornamento con sostituzione integrale delle righe
- Ricalcolo live dei totali per il form di compilazione
"""

import logging
import uuid
from datetime import date
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.database import atomic
from app.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    CustomerNotFoundError,
    DuplicateError,
    NotFoundError,
)
from app.core.money import Number
from app.models import Invoice, InvoiceItem
from app.repositories import CustomerRepository, InvoiceRepository
from app.schemas.invoice import (
    CalculatedItem,
    InvoiceCalculationResponse,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceUpdate,
)
from app.services.invoice_calculations import compute_item_amount, compute_totals
from app.services.invoice_number import next_invoice_number

# Logger per questo modulo
logger = logging.getLogger(__name__)

NUMBER_CONSTRAINT = "uq_invoices_number"


def is_number_collision(exc: IntegrityError) -> bool:
    """True se la violazione riguarda l'unicità del numero fattura."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return NUMBER_CONSTRAINT in message or "invoices.number" in message


class InvoiceService:
    """
    Service per la gestione delle fatture.

    Args:
        invoices: Repository delle fatture
        customers: Repository dei clienti (verifica del cliente intestatario)
        clock: Funzione che restituisce la data corrente (anno di numerazione)
        number_retries: Tentativi aggiuntivi dopo una collisione sul numero
    """

    def __init__(
        self,
        invoices: InvoiceRepository,
        customers: CustomerRepository,
        clock: Callable[[], date] = date.today,
        number_retries: Optional[int] = None,
    ) -> None:
        self.invoices = invoices
        self.customers = customers
        self.clock = clock
        self.number_retries = (
            settings.invoice_number_retries if number_retries is None else number_retries
        )

    @property
    def session(self):
        return self.invoices.session

    # ------------------------------------------------------------
    # Lettura
    # ------------------------------------------------------------
    async def list_invoices(
        self,
        search: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        """
        Recupera la lista paginata delle fatture, dalla più recente.

        Returns:
            Tuple di (lista fatture, totale count)
        """
        invoices, total = await self.invoices.search(
            search=search,
            customer_id=customer_id,
            status=getattr(status, "value", status),
            limit=limit,
            offset=offset,
        )
        logger.debug("Recuperate %s fatture su %s totali", len(invoices), total)
        return invoices, total

    async def get_invoice(self, invoice_id: uuid.UUID) -> Invoice:
        """
        Recupera una fattura con cliente, righe e pagamenti.

        Raises:
            NotFoundError: Se la fattura non esiste
        """
        invoice = await self.invoices.find_unique(invoice_id)
        if invoice is None:
            logger.warning("Fattura non trovata: %s", invoice_id)
            raise NotFoundError(f"Fattura con ID {invoice_id} non trovata")
        return invoice

    async def get_invoice_by_number(self, number: str) -> Invoice:
        invoice = await self.invoices.find_by_number(number)
        if invoice is None:
            logger.warning("Fattura non trovata: %s", number)
            raise NotFoundError(f"Fattura numero {number} non trovata")
        return invoice

    async def preview_next_number(self) -> str:
        """
        Prossimo numero dell'anno corrente.

        Serve a precompilare il form: il numero non viene riservato e
        al salvataggio viene ricalcolato.
        """
        return await self._next_number()

    # ------------------------------------------------------------
    # Calcolo
    # ------------------------------------------------------------
    def calculate(self, items: Iterable[Any], tax_rate: Number) -> InvoiceCalculationResponse:
        """Importi riga e totali con la stessa politica usata al salvataggio."""
        items = list(items)
        totals = compute_totals(items, tax_rate)
        return InvoiceCalculationResponse(
            items=[
                CalculatedItem(
                    quantity=item.quantity,
                    rate=item.rate,
                    amount=compute_item_amount(item.quantity, item.rate),
                )
                for item in items
            ],
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
        )

    # ------------------------------------------------------------
    # Scrittura
    # ------------------------------------------------------------
    async def create_invoice(self, data: InvoiceCreate) -> Invoice:
        """
        Crea una fattura con le sue righe.

        Logica:
        1. Verifica che il cliente esista (nessuna scrittura altrimenti)
        2. Numero indicato dal chiamante: deve essere libero
        3. Altrimenti genera il numero successivo dell'anno corrente
        4. Calcola i totali e salva fattura e righe in un'unica transazione
        5. Se il numero generato collide (creazione concorrente) ripete
           l'intera unità di lavoro con un numero ricalcolato

        Raises:
            CustomerNotFoundError: Cliente inesistente
            DuplicateError: Numero indicato già in uso
            ConflictError: Numero ancora in collisione dopo i tentativi
            BusinessValidationError: Riga con importo nullo dopo l'arrotondamento
        """
        await self._ensure_customer(data.customer_id)

        if data.number is not None:
            await self._ensure_number_available(data.number)
            try:
                invoice_id = await self._insert_invoice(data, data.number)
            except IntegrityError as e:
                if not is_number_collision(e):
                    raise
                logger.warning("Numero fattura %s già in uso (creazione concorrente)", data.number)
                raise DuplicateError(f"Numero fattura '{data.number}' già in uso") from e
            return await self.get_invoice(invoice_id)

        attempts = self.number_retries + 1
        for attempt in range(1, attempts + 1):
            number = await self._next_number()
            try:
                invoice_id = await self._insert_invoice(data, number)
            except IntegrityError as e:
                if not is_number_collision(e):
                    raise
                logger.warning(
                    "Collisione numero fattura %s (tentativo %s di %s)",
                    number, attempt, attempts,
                )
                continue
            return await self.get_invoice(invoice_id)

        raise ConflictError(
            "Impossibile assegnare un numero fattura: riprovare",
            extra={"attempts": attempts},
        )

    async def update_invoice(self, invoice_id: uuid.UUID, data: InvoiceUpdate) -> Invoice:
        """
        Aggiorna una fattura.

        Se `items` è presente le righe esistenti vengono sostituite
        integralmente, nella stessa transazione che aggiorna i totali.
        I totali sono sempre ricalcolati da righe e aliquota correnti.

        Raises:
            NotFoundError: Fattura inesistente
            CustomerNotFoundError: Nuovo cliente inesistente
            DuplicateError: Nuovo numero già in uso
        """
        invoice = await self.get_invoice(invoice_id)
        changes = data.model_dump(exclude_unset=True, exclude={"items"})

        if "customer_id" in changes and changes["customer_id"] != invoice.customer_id:
            await self._ensure_customer(changes["customer_id"])

        if "number" in changes and changes["number"] != invoice.number:
            await self._ensure_number_available(changes["number"])

        issue_date = changes.get("issue_date", invoice.issue_date)
        due_date = changes.get("due_date", invoice.due_date)
        if due_date < issue_date:
            raise BusinessValidationError(
                "La data di scadenza non può essere precedente alla data di emissione"
            )

        try:
            async with atomic(self.session):
                if data.items is not None:
                    await self.invoices.replace_items(invoice, self._build_items(data.items))
                totals = compute_totals(invoice.items, changes.get("tax_rate", invoice.tax_rate))
                changes.update(totals._asdict())
                await self.invoices.update(invoice, changes)
        except IntegrityError as e:
            if not is_number_collision(e):
                raise
            raise DuplicateError(f"Numero fattura '{changes.get('number')}' già in uso") from e

        logger.info(
            "Aggiornata fattura %s (righe sostituite: %s, totale %s)",
            invoice_id, data.items is not None, changes["total"],
        )
        return await self.get_invoice(invoice_id)

    async def delete_invoice(self, invoice_id: uuid.UUID) -> None:
        """
        Elimina una fattura con le sue righe e i suoi pagamenti.

        Raises:
            NotFoundError: Fattura inesistente
        """
        invoice = await self.get_invoice(invoice_id)
        number, payment_count = invoice.number, len(invoice.payments)

        async with atomic(self.session):
            await self.invoices.delete(invoice)

        logger.info(
            "Eliminata fattura %s (%s) con %s pagamenti", invoice_id, number, payment_count
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------
    async def _ensure_customer(self, customer_id: uuid.UUID) -> None:
        if await self.customers.find_unique(customer_id) is None:
            logger.warning("Cliente %s inesistente per la fattura", customer_id)
            raise CustomerNotFoundError(
                f"Cliente con ID {customer_id} non trovato",
                extra={"customer_id": str(customer_id)},
            )

    async def _ensure_number_available(self, number: str) -> None:
        if await self.invoices.find_by_number(number) is not None:
            logger.warning("Numero fattura già in uso: %s", number)
            raise DuplicateError(f"Numero fattura '{number}' già in uso")

    async def _next_number(self) -> str:
        year = self.clock().year
        last_number = await self.invoices.find_last_number_for_year(year)
        return next_invoice_number(year, last_number)

    def _build_items(self, items: Iterable[Any]) -> list[InvoiceItem]:
        rows = []
        for line_number, item in enumerate(items, start=1):
            amount = compute_item_amount(item.quantity, item.rate)
            if amount <= 0:
                raise BusinessValidationError(
                    f"La riga {line_number} ha importo nullo dopo l'arrotondamento",
                    extra={"line_number": line_number},
                )
            rows.append(
                InvoiceItem(
                    line_number=line_number,
                    description=item.description,
                    quantity=item.quantity,
                    rate=item.rate,
                    amount=amount,
                )
            )
        return rows

    async def _insert_invoice(self, data: InvoiceCreate, number: str) -> uuid.UUID:
        items = self._build_items(data.items)
        totals = compute_totals(items, data.tax_rate)

        async with atomic(self.session):
            invoice = await self.invoices.create(
                {
                    "number": number,
                    "customer_id": data.customer_id,
                    "issue_date": data.issue_date,
                    "due_date": data.due_date,
                    "status": InvoiceStatus.DRAFT.value,
                    "tax_rate": data.tax_rate,
                    "notes": data.notes,
                    "items": items,
                    **totals._asdict(),
                }
            )

        logger.info(
            "Creata fattura %s (%s) per cliente %s: totale %s",
            number, invoice.id, data.customer_id, totals.total,
        )
        return invoice.id
