"""
Modelli SQLAlchemy per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Contiene:
- Invoice: Fattura principale
- InvoiceItem: Righe della fattura
- Payment: Pagamenti registrati sulla fattura
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    select,
)
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from app.core.money import ZERO, round2
from app.models import Base
from app.models.customer import Customer
from app.models.mixins import TimestampMixin, UUIDMixin


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le fatture.

    Gli importi (subtotal, tax_amount, total) sono sempre derivati dalle righe
    e dall'aliquota tramite app.services.invoice_calculations e salvati come
    NUMERIC a due decimali.

    Attributes:
        id: UUID primary key, generato automaticamente
        number: Numero fattura progressivo annuale (formato: INV-YYYY-NNN)
        customer_id: UUID del cliente intestatario
        issue_date: Data emissione
        due_date: Data scadenza pagamento
        status: DRAFT, SENT, PAID, OVERDUE, CANCELLED (iniziale DRAFT)
        subtotal: Somma degli importi riga
        tax_rate: Aliquota frazionaria (0-1)
        tax_amount: Importo imposta
        total: Totale fattura (subtotal + tax_amount)
        notes: Note libere
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento

    Relationships:
        customer: Cliente intestatario
        items: Righe della fattura, ordinate per line_number
        payments: Pagamenti registrati, dal più recente
    """

    __tablename__ = "invoices"

    # ------------------------------------------------------------
    # Colonne Identificazione
    # ------------------------------------------------------------
    number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Numero fattura progressivo annuale (formato: INV-YYYY-NNN)",
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        doc="UUID del cliente intestatario",
    )

    issue_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data emissione fattura",
    )

    due_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data scadenza pagamento",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="DRAFT",
        doc="Stato fattura",
    )

    # ------------------------------------------------------------
    # Colonne Importi
    # ------------------------------------------------------------
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Somma degli importi riga",
    )

    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 4),
        nullable=False,
        default=Decimal("0"),
        doc="Aliquota frazionaria applicata (0.08 = 8%)",
    )

    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Importo imposta calcolato",
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Totale fattura (subtotal + tax_amount)",
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Note",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="invoices",
        lazy="selectin",
        doc="Cliente intestatario",
    )

    items: Mapped[List["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="InvoiceItem.line_number",
        doc="Righe della fattura",
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Payment.payment_date.desc()",
        doc="Pagamenti registrati",
    )

    # ------------------------------------------------------------
    # Properties Calcolate
    # ------------------------------------------------------------
    @property
    def paid_amount(self) -> Decimal:
        """Somma dei pagamenti registrati."""
        return round2(sum((p.amount for p in self.payments), ZERO))

    @property
    def balance_due(self) -> Decimal:
        """Importo residuo da incassare."""
        return round2(self.total - self.paid_amount)

    # ------------------------------------------------------------
    # Indici e Vincoli
    # ------------------------------------------------------------
    __table_args__ = (
        UniqueConstraint("number", name="uq_invoices_number"),
        Index("ix_invoices_customer_id", "customer_id"),
        Index("ix_invoices_issue_date", "issue_date"),
        Index("ix_invoices_due_date", "due_date"),
        CheckConstraint(
            "status IN ('DRAFT', 'SENT', 'PAID', 'OVERDUE', 'CANCELLED')",
            name="ck_invoices_status",
        ),
        CheckConstraint("subtotal >= 0", name="ck_invoices_subtotal_positive"),
        CheckConstraint(
            "tax_rate >= 0 AND tax_rate <= 1", name="ck_invoices_tax_rate_range"
        ),
        CheckConstraint("tax_amount >= 0", name="ck_invoices_tax_amount_positive"),
        CheckConstraint("total >= 0", name="ck_invoices_total_positive"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.number}, total={self.total})>"


class InvoiceItem(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le righe della fattura.

    Invariante: amount == round2(quantity * rate). Le righe vengono create
    con la fattura e sostituite in blocco quando la fattura viene
    aggiornata con un nuovo elenco di righe.

    Attributes:
        id: UUID primary key, generato automaticamente
        invoice_id: UUID della fattura padre
        line_number: Posizione della riga nella fattura (da 1)
        description: Descrizione della riga
        quantity: Quantità (intero positivo)
        rate: Prezzo unitario (positivo)
        amount: Importo riga arrotondato
    """

    __tablename__ = "invoice_items"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="UUID della fattura padre",
    )

    line_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Numero progressivo riga nella fattura",
    )

    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Descrizione della riga",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Quantità",
    )

    rate: Mapped[Decimal] = mapped_column(
        Numeric(12, 4),
        nullable=False,
        doc="Prezzo unitario",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Importo riga: round2(quantity * rate)",
    )

    invoice: Mapped["Invoice"] = relationship(
        "Invoice",
        back_populates="items",
        doc="Fattura padre",
    )

    __table_args__ = (
        Index("ix_invoice_items_invoice_line", "invoice_id", "line_number"),
        CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_positive"),
        CheckConstraint("rate > 0", name="ck_invoice_items_rate_positive"),
        CheckConstraint("amount > 0", name="ck_invoice_items_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<InvoiceItem(id={self.id}, line={self.line_number}, amount={self.amount})>"


class Payment(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i pagamenti registrati su una fattura.

    Dal punto di vista della fattura i pagamenti sono solo in aggiunta:
    non vengono modificati, al più eliminati singolarmente.

    Attributes:
        id: UUID primary key, generato automaticamente
        invoice_id: UUID della fattura pagata
        amount: Importo del pagamento
        payment_date: Data del pagamento
        method: CASH, CHECK, BANK_TRANSFER, CREDIT_CARD, OTHER
        reference: Riferimento (numero assegno, CRO bonifico, etc.)
        notes: Note aggiuntive
    """

    __tablename__ = "payments"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID della fattura pagata",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Importo del pagamento",
    )

    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del pagamento",
    )

    method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="Metodo di pagamento",
    )

    reference: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        doc="Riferimento (numero assegno, CRO bonifico, etc.)",
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive sul pagamento",
    )

    invoice: Mapped["Invoice"] = relationship(
        "Invoice",
        back_populates="payments",
        doc="Fattura pagata",
    )

    __table_args__ = (
        Index("ix_payments_invoice_id", "invoice_id"),
        Index("ix_payments_payment_date", "payment_date"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "method IN ('CASH', 'CHECK', 'BANK_TRANSFER', 'CREDIT_CARD', 'OTHER')",
            name="ck_payments_method",
        ),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, amount={self.amount}, method={self.method})>"


# Conteggio fatture sul cliente, definito qui perché richiede Invoice
Customer.invoice_count = column_property(
    select(func.count(Invoice.id))
    .where(Invoice.customer_id == Customer.id)
    .correlate_except(Invoice)
    .scalar_subquery(),
    doc="Numero di fatture intestate al cliente",
)
