"""
Router FastAPI per i Pagamenti
Progetto: Invoice Manager (Gestionale Fatture)

I pagamenti si registrano e si elencano sotto la fattura
(/invoices/{id}/payments) e si consultano o eliminano per ID.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.repositories import InvoiceRepository, PaymentRepository
from app.schemas.payment import PaymentCreate, PaymentRead
from app.services.payment_service import PaymentService

router = APIRouter(tags=["Pagamenti"])


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    """Dependency per ottenere un PaymentService legato alla richiesta."""
    return PaymentService(PaymentRepository(db), InvoiceRepository(db))


@router.get(
    "/invoices/{invoice_id}/payments",
    name="pagamenti_fattura",
    summary="Pagamenti della fattura",
    response_model=list[PaymentRead],
)
async def list_payments(
    invoice_id: uuid.UUID,
    service: PaymentService = Depends(get_payment_service),
) -> list[PaymentRead]:
    payments = await service.list_payments(invoice_id)
    return [PaymentRead.model_validate(p) for p in payments]


@router.post(
    "/invoices/{invoice_id}/payments",
    name="pagamento_registra",
    summary="Registra pagamento",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    invoice_id: uuid.UUID,
    payment_data: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    """
    Registra un pagamento sulla fattura.

    Raises:
        NotFoundError: Se la fattura non esiste
    """
    payment = await service.record_payment(invoice_id, payment_data)
    return PaymentRead.model_validate(payment)


@router.get(
    "/payments/{payment_id}",
    name="pagamento_dettaglio",
    summary="Dettaglio pagamento",
    response_model=PaymentRead,
)
async def get_payment(
    payment_id: uuid.UUID,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.get_payment(payment_id)
    return PaymentRead.model_validate(payment)


@router.delete(
    "/payments/{payment_id}",
    name="pagamento_elimina",
    summary="Elimina pagamento",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_payment(
    payment_id: uuid.UUID,
    service: PaymentService = Depends(get_payment_service),
) -> None:
    await service.delete_payment(payment_id)
