"""
Numerazione fatture
Progetto: Invoice Manager (Gestionale Fatture)

Formato: INV-{anno}-{progressivo}, progressivo annuale con zero-padding
minimo a 3 cifre (INV-2024-001 ... INV-2024-999, INV-2024-1000).
"""

import logging
from typing import Optional

from app.core.exceptions import DataIntegrityError

logger = logging.getLogger(__name__)

INVOICE_NUMBER_PREFIX = "INV"
SEQUENCE_MIN_WIDTH = 3


def year_prefix(year: int) -> str:
    """Prefisso comune ai numeri fattura di un anno (es. 'INV-2024-')."""
    return f"{INVOICE_NUMBER_PREFIX}-{year}-"


def format_invoice_number(year: int, sequence: int) -> str:
    """Formatta il numero fattura; la larghezza è un minimo, non un limite."""
    if sequence < 1:
        raise ValueError("Il progressivo fattura parte da 1")
    return f"{year_prefix(year)}{sequence:0{SEQUENCE_MIN_WIDTH}d}"


def parse_invoice_sequence(number: str, year: int) -> int:
    """
    Estrae il progressivo numerico da un numero fattura dell'anno indicato.

    Raises:
        DataIntegrityError: prefisso diverso o suffisso non numerico
    """
    prefix = year_prefix(year)
    suffix = number[len(prefix):] if number.startswith(prefix) else ""
    if not suffix.isdigit() or not suffix.isascii():
        logger.error("Numero fattura non valido nel database: %r (anno %s)", number, year)
        raise DataIntegrityError(
            f"Numero fattura '{number}' non conforme al formato {prefix}NNN",
            extra={"number": number, "year": year},
        )
    return int(suffix)


def next_invoice_number(current_year: int, last_number_for_year: Optional[str]) -> str:
    """
    Calcola il numero fattura successivo.

    Args:
        current_year: Anno solare di riferimento
        last_number_for_year: Ultimo numero emesso nell'anno, None se nessuno

    Returns:
        str: Numero successivo (INV-{anno}-001 se è la prima dell'anno)

    Raises:
        DataIntegrityError: se l'ultimo numero ha un suffisso corrotto.
            Non si riparte da 001, che rischierebbe una collisione.
    """
    if last_number_for_year is None:
        return format_invoice_number(current_year, 1)
    return format_invoice_number(
        current_year, parse_invoice_sequence(last_number_for_year, current_year) + 1
    )
