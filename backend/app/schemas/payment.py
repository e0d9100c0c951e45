"""
Schemas Pydantic per i Pagamenti
Progetto: Invoice Manager (Gestionale Fatture)
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethod(str, Enum):
    """Metodi di pagamento supportati."""
    CASH = "CASH"
    CHECK = "CHECK"
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    OTHER = "OTHER"


class PaymentBase(BaseModel):
    """Schema base per un pagamento registrato su una fattura."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Importo del pagamento",
    )
    payment_date: datetime.date = Field(
        ...,
        description="Data del pagamento",
    )
    method: PaymentMethod = Field(
        ...,
        description="Metodo di pagamento",
    )
    reference: Optional[str] = Field(
        None,
        max_length=255,
        description="Riferimento (numero assegno, CRO bonifico, etc.)",
    )
    notes: Optional[str] = Field(
        None,
        max_length=1000,
        description="Note aggiuntive sul pagamento",
    )


class PaymentCreate(PaymentBase):
    """Schema per registrare un pagamento (la fattura è indicata nell'URL)."""
    pass


class PaymentRead(PaymentBase):
    """Schema per leggere un pagamento esistente."""

    id: uuid.UUID = Field(..., description="UUID del pagamento")
    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    created_at: datetime.datetime = Field(..., description="Data/ora creazione")
