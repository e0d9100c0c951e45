"""
Modelli Database SQLAlchemy
Progetto: Invoice Manager (Gestionale Fatture)

Import centralizzato di tutti i modelli per create_all e usage generico.

Modelli:
- Customer: Anagrafica clienti
- Invoice: Fatture
- InvoiceItem: Righe fattura
- Payment: Pagamenti registrati sulle fatture
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


# Import modelli implementati
from app.models.customer import Customer
from app.models.invoice import Invoice, InvoiceItem, Payment

# Esportazione di tutti i modelli
__all__ = [
    "Base",
    "Customer",
    "Invoice",
    "InvoiceItem",
    "Payment",
]
