"""
Modello SQLAlchemy per l'entità Customer
Progetto: Invoice Manager (Gestionale Fatture)

Rappresenta l'anagrafica dei clienti a cui vengono intestate le fatture.
"""


from __future__ import annotations
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

# Import per type hinting relazioni (evita circular import)
if TYPE_CHECKING:
    from app.models.invoice import Invoice


class Customer(Base, UUIDMixin, TimestampMixin):
    """
    Modello per l'anagrafica clienti.

    Un cliente può avere più fatture associate. Il legame è referenziale:
    finché esiste almeno una fattura il cliente non può essere eliminato.

    Attributes:
        id: UUID primary key, generato automaticamente
        name: Nome o ragione sociale (obbligatorio)
        email: Indirizzo email (univoco per regola di business, non a livello DB)
        phone: Numero di telefono
        company: Azienda di appartenenza
        address: Indirizzo completo
        tax_id: Codice fiscale / partita IVA
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento

    Relationships:
        invoices: Fatture intestate al cliente (non caricate di default)

    Properties:
        invoice_count: Numero di fatture (column_property definita in models.invoice)
    """

    __tablename__ = "customers"

    # ------------------------------------------------------------
    # Colonne Dati Anagrafici
    # ------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Nome o ragione sociale",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Indirizzo email (salvato in minuscolo)",
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Numero di telefono",
    )

    company: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Azienda",
    )

    address: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Indirizzo completo",
    )

    tax_id: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Identificativo fiscale",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="customer",
        lazy="raise",
        passive_deletes=True,
        doc="Fatture intestate al cliente",
    )

    __table_args__ = (
        Index("ix_customers_email", "email"),
        Index("ix_customers_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name!r}, email={self.email!r})>"
