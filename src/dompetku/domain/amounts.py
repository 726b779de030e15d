"""Rupiah amount parsing and formatting.

Indonesian chat users write amounts as ``50rb``, ``50 ribu``, ``2jt``, ``50k``,
``1,5 juta`` or ``Rp 50.000``. Dots and commas between digits are thousand
separators unless followed by a unit word, in which case a single short group
after the separator is a decimal part (``1,5jt``, ``2.5 juta``).
"""

from __future__ import annotations

import re

UNIT_MULTIPLIERS: dict[str, int] = {
    "k": 1_000,
    "rb": 1_000,
    "ribu": 1_000,
    "jt": 1_000_000,
    "juta": 1_000_000,
    "m": 1_000_000,
}

# Unit suffix glued to (or one space after) a number, ending at a word
# boundary so that "50 makan" is not read as "50 m". The number keeps its
# separators ("1,5jt", "1.500rb"); _to_number decides what they mean.
_SUFFIX_PATTERN = re.compile(r"(?<!\d)(\d+(?:[.,]\d+)*)\s*(k|rb|jt|m)\b", re.IGNORECASE)

_AMOUNT_PATTERN = re.compile(
    r"(?<![\w])(\d+(?:[.,]\d+)*)\s*(ribu|juta|rb|jt|k|m)?\b",
    re.IGNORECASE,
)

_CURRENCY_PREFIX = re.compile(r"\brp\.?\s*", re.IGNORECASE)


def expand_amount_suffixes(text: str) -> str:
    """Rewrites ``50k``/``50rb`` into ``50000`` and ``1,5jt`` into ``1500000``."""

    def _replace(match: re.Match[str]) -> str:
        value = _to_number(match.group(1), has_unit=True)
        unit = match.group(2).lower()
        return str(int(round(value * UNIT_MULTIPLIERS[unit])))

    return _SUFFIX_PATTERN.sub(_replace, text)


def _to_number(digits: str, has_unit: bool) -> float:
    """Converts a digit group with separators into a number."""
    if has_unit and re.fullmatch(r"\d+[.,]\d{1,2}", digits):
        return float(digits.replace(",", "."))
    return float(re.sub(r"[.,]", "", digits))


def find_amount(text: str) -> int | None:
    """Returns the first amount mentioned in free text, or None."""
    cleaned = _CURRENCY_PREFIX.sub("", text.lower())
    for match in _AMOUNT_PATTERN.finditer(cleaned):
        digits, unit = match.group(1), match.group(2)
        value = _to_number(digits, has_unit=unit is not None)
        if unit:
            value *= UNIT_MULTIPLIERS[unit.lower()]
        amount = int(round(value))
        if amount > 0:
            return amount
    return None


def parse_amount(text: str) -> int | None:
    """Parses a reply that is expected to be just an amount.

    Everything except digits and unit letters is stripped, so ``Rp 50.000``,
    ``50,000`` and ``50 000`` all parse to 50000. A trailing ``k``/``rb``/``ribu``
    multiplies by 1 000 and ``jt``/``juta``/``m`` by 1 000 000.

    Returns None for unparseable input or a zero amount.
    """
    if not text:
        return None

    lowered = _CURRENCY_PREFIX.sub("", text.lower())
    compact = re.sub(r"[^0-9a-z.,]", "", lowered).strip(".,")

    match = re.fullmatch(r"(\d+(?:[.,]\d+)*)(ribu|juta|rb|jt|k|m)?", compact)
    if not match:
        return None

    digits, unit = match.group(1), match.group(2)
    value = _to_number(digits, has_unit=unit is not None)
    if unit:
        value *= UNIT_MULTIPLIERS[unit]

    amount = int(round(value))
    return amount or None


def format_rupiah(amount: int | float) -> str:
    """Formats an amount the Indonesian way: ``Rp 1.250.000``."""
    whole = int(round(amount))
    sign = "-" if whole < 0 else ""
    grouped = f"{abs(whole):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"
