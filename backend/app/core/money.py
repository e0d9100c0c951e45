"""
Utility per importi monetari
Progetto: Invoice Manager (Gestionale Fatture)

Tutti gli importi (righe, imponibile, imposta, totale, pagamenti) passano
da round2: arrotondamento a due decimali ROUND_HALF_UP su Decimal.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Converte un valore numerico in Decimal.

    I float passano da str() così viene usato il letterale decimale
    (10.005 -> Decimal("10.005")) e non la sua approssimazione binaria.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Un booleano non è un importo valido")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return Decimal(value.strip().replace(",", "."))


def round2(value: Number) -> Decimal:
    """
    Arrotonda a due decimali con ROUND_HALF_UP.

    Idempotente: round2(round2(x)) == round2(x).

    Examples:
        >>> round2(20.005)
        Decimal('20.01')
        >>> round2("2.0008")
        Decimal('2.00')
    """
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
