"""
Router FastAPI per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Definisce gli endpoint API per fatture, anteprima del numero
successivo e ricalcolo live dei totali.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.repositories import CustomerRepository, InvoiceRepository
from app.schemas.invoice import (
    InvoiceCalculationRequest,
    InvoiceCalculationResponse,
    InvoiceCreate,
    InvoiceList,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
    NextInvoiceNumber,
)
from app.services.invoice_service import InvoiceService

# Router con prefix e tag
router = APIRouter(
    prefix="/invoices",
    tags=["Fatture"],
)


# -------------------------------------------------------------------
# Dependency Injection
# -------------------------------------------------------------------

def get_invoice_service(db: AsyncSession = Depends(get_db)) -> InvoiceService:
    """
    Dependency per ottenere un InvoiceService legato alla sessione
    della richiesta corrente.
    """
    return InvoiceService(InvoiceRepository(db), CustomerRepository(db))


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="fatture_lista",
    summary="Lista fatture",
    description="Recupera la lista paginata delle fatture con filtri opzionali.",
    response_model=InvoiceList,
)
async def list_invoices(
    search: Optional[str] = Query(None, description="Ricerca su numero, nome o email cliente"),
    customer_id: Optional[uuid.UUID] = Query(None, description="Filtra per cliente"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="Filtra per stato"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceList:
    invoices, total = await service.list_invoices(
        search=search,
        customer_id=customer_id,
        status=invoice_status,
        limit=limit,
        offset=offset,
    )
    return InvoiceList(
        items=[InvoiceRead.model_validate(i) for i in invoices],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/next-number",
    name="fattura_prossimo_numero",
    summary="Prossimo numero fattura",
    description="Anteprima del prossimo numero dell'anno corrente (non riservato).",
    response_model=NextInvoiceNumber,
)
async def next_number(
    service: InvoiceService = Depends(get_invoice_service),
) -> NextInvoiceNumber:
    return NextInvoiceNumber(number=await service.preview_next_number())


@router.post(
    "/calculate",
    name="fattura_calcola",
    summary="Ricalcolo totali",
    description="Calcola importi riga e totali senza salvare nulla.",
    response_model=InvoiceCalculationResponse,
)
async def calculate(
    data: InvoiceCalculationRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceCalculationResponse:
    return service.calculate(data.items, data.tax_rate)


@router.get(
    "/number/{number}",
    name="fattura_per_numero",
    summary="Fattura per numero",
    response_model=InvoiceRead,
)
async def get_invoice_by_number(
    number: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    invoice = await service.get_invoice_by_number(number)
    return InvoiceRead.model_validate(invoice)


@router.get(
    "/{invoice_id}",
    name="fattura_dettaglio",
    summary="Dettaglio fattura",
    response_model=InvoiceRead,
)
async def get_invoice(
    invoice_id: uuid.UUID,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    """
    Recupera una fattura con cliente, righe e pagamenti.

    Raises:
        NotFoundError: Se la fattura non esiste
    """
    invoice = await service.get_invoice(invoice_id)
    return InvoiceRead.model_validate(invoice)


@router.post(
    "",
    name="fattura_crea",
    summary="Crea fattura",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    invoice_data: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    """
    Crea una fattura con le sue righe.

    Il numero, se omesso, viene generato (INV-AAAA-NNN).
    Subtotale, imposta e totale sono sempre calcolati dal server.

    Raises:
        CustomerNotFoundError: Se il cliente non esiste (400)
        DuplicateError: Se il numero indicato è già in uso
    """
    invoice = await service.create_invoice(invoice_data)
    return InvoiceRead.model_validate(invoice)


@router.put(
    "/{invoice_id}",
    name="fattura_aggiorna",
    summary="Aggiorna fattura",
    description="Aggiorna la fattura; se presenti, le righe sostituiscono integralmente quelle esistenti.",
    response_model=InvoiceRead,
)
async def update_invoice(
    invoice_id: uuid.UUID,
    invoice_data: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    invoice = await service.update_invoice(invoice_id, invoice_data)
    return InvoiceRead.model_validate(invoice)


@router.delete(
    "/{invoice_id}",
    name="fattura_elimina",
    summary="Elimina fattura",
    description="Elimina la fattura con le sue righe e i suoi pagamenti.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_invoice(
    invoice_id: uuid.UUID,
    service: InvoiceService = Depends(get_invoice_service),
) -> None:
    await service.delete_invoice(invoice_id)
