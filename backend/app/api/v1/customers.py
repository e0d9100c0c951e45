"""
Router FastAPI per l'entità Customer
Progetto: Invoice Manager (Gestionale Fatture)

Definisce gli endpoint API per la gestione dei clienti.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.repositories import CustomerRepository
from app.schemas.customer import (
    CustomerCreate,
    CustomerList,
    CustomerRead,
    CustomerUpdate,
)
from app.services.customer_service import CustomerService

# Router con prefix e tag
router = APIRouter(
    prefix="/customers",
    tags=["Clienti"],
)


# -------------------------------------------------------------------
# Dependency Injection
# -------------------------------------------------------------------

def get_customer_service(db: AsyncSession = Depends(get_db)) -> CustomerService:
    """
    Dependency per ottenere un CustomerService legato alla sessione
    della richiesta corrente.
    """
    return CustomerService(CustomerRepository(db))


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="clienti_lista",
    summary="Lista clienti",
    description="Recupera la lista paginata dei clienti con eventuale filtro di ricerca.",
    response_model=CustomerList,
    status_code=status.HTTP_200_OK,
)
async def list_customers(
    search: Optional[str] = Query(None, description="Ricerca su nome, email, azienda"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerList:
    customers, total = await service.list_customers(search=search, limit=limit, offset=offset)
    return CustomerList(
        items=[CustomerRead.model_validate(c) for c in customers],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{customer_id}",
    name="cliente_dettaglio",
    summary="Dettaglio cliente",
    response_model=CustomerRead,
    status_code=status.HTTP_200_OK,
)
async def get_customer(
    customer_id: uuid.UUID,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerRead:
    """
    Recupera i dettagli di un cliente, incluso il numero di fatture.

    Raises:
        NotFoundError: Se il cliente non esiste
    """
    customer = await service.get_customer(customer_id)
    return CustomerRead.model_validate(customer)


@router.post(
    "",
    name="cliente_crea",
    summary="Crea cliente",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    customer_data: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerRead:
    customer = await service.create_customer(customer_data)
    return CustomerRead.model_validate(customer)


@router.put(
    "/{customer_id}",
    name="cliente_aggiorna",
    summary="Aggiorna cliente",
    description="Aggiorna i soli campi inviati di un cliente esistente.",
    response_model=CustomerRead,
    status_code=status.HTTP_200_OK,
)
async def update_customer(
    customer_id: uuid.UUID,
    customer_data: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerRead:
    customer = await service.update_customer(customer_id, customer_data)
    return CustomerRead.model_validate(customer)


@router.delete(
    "/{customer_id}",
    name="cliente_elimina",
    summary="Elimina cliente",
    description="Elimina un cliente senza fatture associate.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_customer(
    customer_id: uuid.UUID,
    service: CustomerService = Depends(get_customer_service),
) -> None:
    """
    Elimina un cliente.

    Raises:
        NotFoundError: Se il cliente non esiste
        ConflictError: Se il cliente ha fatture esistenti
    """
    await service.delete_customer(customer_id)
