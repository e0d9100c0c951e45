"""
Schemas Pydantic per il progetto Invoice Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from app.schemas import CustomerRead, InvoiceRead, etc.

from app.schemas.customer import (
    CustomerCreate,
    CustomerList,
    CustomerRead,
    CustomerSummary,
    CustomerUpdate,
)
from app.schemas.invoice import (
    CalculatedItem,
    InvoiceCalculationRequest,
    InvoiceCalculationResponse,
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceItemRead,
    InvoiceList,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
    NextInvoiceNumber,
)
from app.schemas.payment import PaymentCreate, PaymentMethod, PaymentRead

__all__ = [
    # Customer
    "CustomerCreate",
    "CustomerList",
    "CustomerRead",
    "CustomerSummary",
    "CustomerUpdate",
    # Invoice
    "CalculatedItem",
    "InvoiceCalculationRequest",
    "InvoiceCalculationResponse",
    "InvoiceCreate",
    "InvoiceItemCreate",
    "InvoiceItemRead",
    "InvoiceList",
    "InvoiceRead",
    "InvoiceStatus",
    "InvoiceUpdate",
    "NextInvoiceNumber",
    # Payment
    "PaymentCreate",
    "PaymentMethod",
    "PaymentRead",
]
