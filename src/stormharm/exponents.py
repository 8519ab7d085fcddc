"""Damage exponent decoding.

The storm database stores damage as a base amount (``PROPDMG``) plus a
one-character magnitude code (``PROPDMGEXP``): "K" for thousands, "M" for
millions, a digit for a power of ten, and assorted junk ("+", "-", "?")
that carries no magnitude at all.

Both damage fields decode every code class the same way, whether or not
the code was ever seen in that column. Junk (any code made only of
non-alphanumeric characters) decodes to 1. Any other code with no entry
(a stray letter, a multi-digit code) is unknown: it decodes to 1 with a
diagnostic, or raises ``UnknownExponentCodeError`` in strict mode.

Examples:
    decode("K", DamageField.PROPERTY) → 1_000.0
    decode("h", DamageField.CROP)     → 100.0
    decode("5", DamageField.CROP)     → 100_000.0
    decode("",  DamageField.CROP)     → 1.0
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import Enum

import pandas as pd

from .errors import UnknownExponentCodeError

logger = logging.getLogger(__name__)


class DamageField(str, Enum):
    PROPERTY = "property"
    CROP = "crop"


_LETTER_MULTIPLIERS: dict[str, float] = {
    "h": 1e2,
    "k": 1e3,
    "m": 1e6,
    "b": 1e9,
}


def _table() -> dict[str, float]:
    table: dict[str, float] = {code: 1.0 for code in ("", "+", "-", "?")}
    table.update({str(n): 10.0**n for n in range(10)})
    table.update(_LETTER_MULTIPLIERS)
    return table


EXPONENT_TABLES: dict[DamageField, dict[str, float]] = {
    field: _table() for field in DamageField
}

# Distinct values of PROPDMGEXP / CROPDMGEXP in repdata_StormData.csv.bz2,
# case-folded. Only used to audit a new extract, never to decode.
OBSERVED_CODES: dict[DamageField, frozenset[str]] = {
    DamageField.PROPERTY: frozenset(
        ["", "-", "?", "+", "0", "1", "2", "3", "4", "5", "6", "7", "8",
         "b", "h", "k", "m"]
    ),
    DamageField.CROP: frozenset(["", "?", "0", "2", "b", "k", "m"]),
}


def normalize_code(code: object) -> str:
    """Case-fold and trim a raw exponent code; missing values become "".

    pandas may hand digit codes over as floats (``5.0``) when the column
    was not read as strings, so integral floats are turned back into
    their digit.
    """
    if code is None or (not isinstance(code, str) and pd.isna(code)):
        return ""
    if isinstance(code, float) and code.is_integer():
        code = int(code)
    return str(code).strip().lower()


def _is_junk(key: str) -> bool:
    return not any(ch.isalnum() for ch in key)


def known_codes(field: DamageField | str) -> frozenset[str]:
    """Return the (case-folded) codes with an explicit table entry."""
    return frozenset(EXPONENT_TABLES[DamageField(field)])


def observed_codes(field: DamageField | str) -> frozenset[str]:
    """Return the codes seen in the field's column of the reference file."""
    return OBSERVED_CODES[DamageField(field)]


def has_multiplier(code: object, field: DamageField | str) -> bool:
    """True when ``code`` decodes without falling back to the unknown path."""
    key = normalize_code(code)
    return key in EXPONENT_TABLES[DamageField(field)] or _is_junk(key)


def decode(
    code: object,
    field: DamageField | str,
    *,
    strict: bool = False,
    unknown: Counter | None = None,
) -> float:
    """Map an exponent code to its dollar multiplier for one damage field.

    Args:
        code: Raw exponent code, any case; None/NaN count as blank.
        field: Which column the code came from.
        strict: Raise instead of defaulting to 1 for unknown codes.
        unknown: Tally of ``(field, code)`` pairs that fell back to 1. When
            given, the caller owns reporting them; otherwise every fallback
            logs a warning.

    Returns:
        Positive multiplier.

    Raises:
        UnknownExponentCodeError: ``strict`` is set and the code has no
            multiplier.
    """
    field = DamageField(field)
    key = normalize_code(code)
    table = EXPONENT_TABLES[field]

    if key in table:
        return table[key]
    if _is_junk(key):
        return 1.0

    if strict:
        raise UnknownExponentCodeError(key, field.value)

    if unknown is None:
        logger.warning(
            "Unknown %s damage exponent code %r, using multiplier 1",
            field.value,
            key,
        )
    else:
        unknown[(field.value, key)] += 1
    return 1.0
