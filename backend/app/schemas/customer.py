"""
Schemas Pydantic per l'entità Customer
Progetto: Invoice Manager (Gestionale Fatture)

Definisce gli schemi per la validazione e serializzazione dei dati
dei clienti nelle API REST.
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.core.exceptions import BusinessValidationError


def _normalize_email(v: Optional[str]) -> Optional[str]:
    """Email salvata sempre in minuscolo."""
    if v is None:
        return v
    return v.strip().lower()


def _blank_to_none(v):
    # Stringhe vuote dal form trattate come campo non compilato
    if not isinstance(v, str):
        return v
    v = v.strip()
    return v or None


# -------------------------------------------------------------------
# Validatori condivisi
# -------------------------------------------------------------------
class CustomerValidatorsMixin(BaseModel):
    """Normalizzazioni comuni a creazione e aggiornamento."""

    @field_validator("name", mode="before", check_fields=False)
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def lower_email(cls, v):
        if isinstance(v, str):
            return _normalize_email(v)
        return v

    _optional_text = field_validator(
        "phone", "company", "address", "tax_id", mode="before", check_fields=False
    )(_blank_to_none)


# -------------------------------------------------------------------
# Schemas Base
# -------------------------------------------------------------------
class CustomerBase(CustomerValidatorsMixin):
    """Schema base per i dati anagrafici del cliente."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Nome o ragione sociale",
    )

    email: EmailStr = Field(
        ...,
        description="Indirizzo email",
    )

    phone: Optional[str] = Field(
        None,
        max_length=50,
        description="Numero di telefono",
    )

    company: Optional[str] = Field(
        None,
        max_length=255,
        description="Azienda",
    )

    address: Optional[str] = Field(
        None,
        max_length=500,
        description="Indirizzo completo",
    )

    tax_id: Optional[str] = Field(
        None,
        max_length=50,
        description="Identificativo fiscale",
    )


class CustomerCreate(CustomerBase):
    """Schema per la creazione di un nuovo cliente."""
    pass


# -------------------------------------------------------------------
# Schemas per Aggiornamento
# -------------------------------------------------------------------
class CustomerUpdate(CustomerValidatorsMixin):
    """
    Schema per l'aggiornamento di un cliente esistente.

    Tutti i campi sono opzionali: il service applica solo quelli
    effettivamente inviati (model_dump(exclude_unset=True)).
    """

    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = Field(None)
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    tax_id: Optional[str] = Field(None, max_length=50)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "CustomerUpdate":
        """Nome ed email possono essere modificati ma non svuotati."""
        for field in ("name", "email"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise BusinessValidationError(f"Il campo '{field}' non può essere nullo")
        return self


# -------------------------------------------------------------------
# Schemas per Lettura (API Response)
# -------------------------------------------------------------------
class CustomerRead(BaseModel):
    """Schema per la risposta API, con campi di sistema e conteggio fatture."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    invoice_count: int = Field(0, ge=0, description="Numero di fatture intestate")
    created_at: datetime.datetime
    updated_at: datetime.datetime


class CustomerSummary(BaseModel):
    """Dati essenziali del cliente incorporati nella fattura."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    company: Optional[str] = None


class CustomerList(BaseModel):
    """Risposta paginata per la lista clienti."""

    model_config = ConfigDict(from_attributes=True)

    items: list[CustomerRead] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Numero totale di clienti")
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)
