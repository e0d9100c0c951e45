"""
API v1 Routes
Progetto: Invoice Manager (Gestionale Fatture)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from app.api.v1 import customers, invoices, payments

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(customers.router)
api_v1_router.include_router(invoices.router)
api_v1_router.include_router(payments.router)

# Esportazione
__all__ = ["api_v1_router"]
