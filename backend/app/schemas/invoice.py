"""
Schemas Pydantic per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Contiene:
- Enum: InvoiceStatus
- Schemas per InvoiceItem
- Schemas per Invoice
- Schemas per il ricalcolo live dei totali
"""

import datetime
import re
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.exceptions import BusinessValidationError
from app.schemas.customer import CustomerSummary
from app.schemas.payment import PaymentRead

# Solo cifre ASCII e progressivo nella forma canonica (001, 042, 1000): mai 0001 o 000
INVOICE_NUMBER_PATTERN = re.compile(r"INV-[0-9]{4}-(?:00[1-9]|0[1-9][0-9]|[1-9][0-9]{2,})")


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class InvoiceStatus(str, Enum):
    """Stato della fattura (iniziale DRAFT)."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


def _validate_number(v):
    if not isinstance(v, str):
        return v
    v = v.strip().upper()
    if not INVOICE_NUMBER_PATTERN.fullmatch(v):
        raise ValueError("Il numero fattura deve avere il formato INV-AAAA-NNN")
    return v


# -------------------------------------------------------------------
# Schemas per InvoiceItem
# -------------------------------------------------------------------

class InvoiceItemBase(BaseModel):
    """Schema base per le righe della fattura."""

    quantity: int = Field(
        ...,
        gt=0,
        description="Quantità (intero positivo)",
    )
    rate: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=4,
        description="Prezzo unitario",
    )

    model_config = ConfigDict(from_attributes=True)


class InvoiceItemCreate(InvoiceItemBase):
    """
    Schema per una riga in creazione/aggiornamento fattura.

    L'importo non viene accettato dal client: è sempre ricalcolato
    dal service come round2(quantity * rate).
    """

    description: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Descrizione della riga",
    )

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class InvoiceItemRead(InvoiceItemCreate):
    """Schema per la lettura di una riga fattura."""

    id: uuid.UUID = Field(..., description="UUID della riga fattura")
    line_number: int = Field(..., ge=1, description="Posizione della riga")
    amount: Decimal = Field(..., description="Importo riga")


# -------------------------------------------------------------------
# Schemas per Invoice
# -------------------------------------------------------------------

class InvoiceCreate(BaseModel):
    """
    Schema per la creazione di una fattura.

    NON include subtotal/tax_amount/total (calcolati dal service) né lo
    stato (ogni fattura nasce DRAFT). Il numero è facoltativo: se assente
    viene generato dal sequenziatore annuale.
    """

    model_config = ConfigDict(from_attributes=True)

    customer_id: uuid.UUID = Field(..., description="UUID del cliente")
    number: Optional[str] = Field(
        None,
        max_length=50,
        description="Numero fattura (generato se omesso)",
    )
    issue_date: datetime.date = Field(..., description="Data emissione")
    due_date: datetime.date = Field(..., description="Data scadenza pagamento")
    tax_rate: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("1"),
        max_digits=5,
        decimal_places=4,
        description="Aliquota frazionaria (0.08 = 8%)",
    )
    notes: Optional[str] = Field(None, max_length=1000, description="Note")
    items: list[InvoiceItemCreate] = Field(
        ...,
        min_length=1,
        description="Righe della fattura (almeno una)",
    )

    _normalize_number = field_validator("number", mode="before")(_validate_number)

    @model_validator(mode="after")
    def validate_dates(self) -> "InvoiceCreate":
        """Valida che due_date >= issue_date."""
        if self.due_date < self.issue_date:
            raise BusinessValidationError(
                "La data di scadenza non può essere precedente alla data di emissione"
            )
        return self


class InvoiceUpdate(BaseModel):
    """
    Schema per l'aggiornamento di una fattura.

    Tutti i campi sono opzionali. Se `items` è presente sostituisce
    integralmente le righe esistenti: il client deve reinviare l'elenco
    completo.
    """

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    customer_id: Optional[uuid.UUID] = None
    number: Optional[str] = Field(None, max_length=50)
    issue_date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    status: Optional[InvoiceStatus] = None
    tax_rate: Optional[Decimal] = Field(
        None,
        ge=Decimal("0"),
        le=Decimal("1"),
        max_digits=5,
        decimal_places=4,
    )
    notes: Optional[str] = Field(None, max_length=1000)
    items: Optional[list[InvoiceItemCreate]] = Field(None, min_length=1)

    _normalize_number = field_validator("number", mode="before")(_validate_number)

    @model_validator(mode="after")
    def validate_update(self) -> "InvoiceUpdate":
        """Campi obbligatori della fattura non possono essere annullati."""
        required = ("customer_id", "number", "issue_date", "due_date", "status", "tax_rate", "items")
        for field in required:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise BusinessValidationError(f"Il campo '{field}' non può essere nullo")
        if self.issue_date and self.due_date and self.due_date < self.issue_date:
            raise BusinessValidationError(
                "La data di scadenza non può essere precedente alla data di emissione"
            )
        return self


class InvoiceRead(BaseModel):
    """Schema per la lettura di una fattura, con righe e pagamenti."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    number: str
    customer_id: uuid.UUID
    customer: Optional[CustomerSummary] = None
    issue_date: datetime.date
    due_date: datetime.date
    status: InvoiceStatus
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    notes: Optional[str] = None
    items: list[InvoiceItemRead] = Field(default_factory=list)
    payments: list[PaymentRead] = Field(default_factory=list)
    paid_amount: Decimal = Field(..., description="Somma dei pagamenti registrati")
    balance_due: Decimal = Field(..., description="Importo residuo")
    created_at: datetime.datetime
    updated_at: datetime.datetime


class InvoiceList(BaseModel):
    """Risposta paginata per la lista fatture."""

    items: list[InvoiceRead] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Numero totale di fatture")
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)


class NextInvoiceNumber(BaseModel):
    """Prossimo numero fattura dell'anno corrente (non riservato)."""

    number: str


# -------------------------------------------------------------------
# Schemas per il ricalcolo live
# -------------------------------------------------------------------

class InvoiceCalculationRequest(BaseModel):
    """Righe e aliquota da ricalcolare mentre la fattura viene compilata."""

    items: list[InvoiceItemBase] = Field(default_factory=list)
    tax_rate: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("1"),
    )


class CalculatedItem(InvoiceItemBase):
    amount: Decimal


class InvoiceCalculationResponse(BaseModel):
    """Importi riga e totali calcolati con la stessa politica del salvataggio."""

    items: list[CalculatedItem]
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
