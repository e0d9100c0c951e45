"""
Repository per l'accesso ai dati
Progetto: Invoice Manager (Gestionale Fatture)
"""

from app.repositories.base import SQLAlchemyRepository
from app.repositories.customer import CustomerRepository
from app.repositories.invoice import InvoiceRepository
from app.repositories.payment import PaymentRepository

__all__ = [
    "SQLAlchemyRepository",
    "CustomerRepository",
    "InvoiceRepository",
    "PaymentRepository",
]
