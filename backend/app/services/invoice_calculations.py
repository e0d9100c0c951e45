"""
Calcolo totali fattura
Progetto: Invoice Manager (Gestionale Fatture)

Funzioni pure, senza accesso al database: usate dal service in fase di
salvataggio e dall'endpoint di ricalcolo live delle righe.

Politica di arrotondamento:
1. importo riga = round2(quantità * prezzo)
2. imponibile = round2(somma degli importi riga GIÀ arrotondati)
3. imposta = round2(imponibile * aliquota)
4. totale = round2(imponibile + imposta)
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, NamedTuple

from app.core.money import ZERO, Number, round2, to_decimal


class InvoiceTotals(NamedTuple):
    """Totali calcolati di una fattura."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def _field(item: Any, name: str) -> Any:
    # Righe come dict (payload grezzi) o come oggetti (schema / modello ORM)
    if isinstance(item, Mapping):
        return item[name]
    return getattr(item, name)


def compute_item_amount(quantity: Number, rate: Number) -> Decimal:
    """Importo di una riga: round2(quantity * rate)."""
    return round2(to_decimal(quantity) * to_decimal(rate))


def compute_totals(items: Iterable[Any], tax_rate: Number) -> InvoiceTotals:
    """
    Calcola imponibile, imposta e totale da un elenco di righe.

    La validazione (almeno una riga, quantità e prezzi positivi,
    aliquota tra 0 e 1) è responsabilità degli schemi e del service:
    qui un elenco vuoto produce semplicemente totali a zero.

    Args:
        items: Righe con attributi/chiavi `quantity` e `rate`
        tax_rate: Aliquota frazionaria (0.08 = 8%)

    Returns:
        InvoiceTotals: (subtotal, tax_amount, total)
    """
    subtotal = round2(
        sum(
            (compute_item_amount(_field(i, "quantity"), _field(i, "rate")) for i in items),
            ZERO,
        )
    )
    tax_amount = round2(subtotal * to_decimal(tax_rate))
    total = round2(subtotal + tax_amount)
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)
