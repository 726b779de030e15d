"""Parameter extraction for one-shot chat commands.

Works on normalized text ("buat" is already "untuk", "50rb" already
"50000"), e.g.:

    catat pengeluaran 50000 untuk makan   -> expense, 50000, "makan"
    atur budget makan 2000000             -> category "makan", 2000000
    target menabung 10000000 untuk liburan -> purpose "liburan"
    ubah jumlah jadi 75000                -> amount 75000
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from dompetku.domain.amounts import find_amount
from dompetku.domain.enums import TransactionType

PERIODS: tuple[str, ...] = (
    "hari ini",
    "kemarin",
    "minggu ini",
    "bulan ini",
    "tahun ini",
    "minggu lalu",
    "bulan lalu",
    "tahun lalu",
)

EXPENSE_WORDS = frozenset({"pengeluaran", "keluar", "bayar", "beli", "belanja", "habis"})
INCOME_WORDS = frozenset({"pemasukan", "masuk", "terima", "gaji", "dapat", "pendapatan"})

# Words that introduce the thing being paid for / saved for.
_PURPOSE_MARKERS = ("untuk", "dari")
_BUDGET_MARKERS = ("budget", "anggaran")
_UPDATE_PATTERN = re.compile(r"\b(jumlah|nominal|kategori)\s+(?:jadi|menjadi|ke)\s+(.+)$")
_FILLER = frozenset({"sebesar", "senilai", "seharga", "rp", "sejumlah"})
_AMOUNT_TOKEN = re.compile(r"^(rp\.?)?\d[\d.,]*(k|rb|ribu|jt|juta|m)?$")


@dataclass(slots=True)
class CommandParameters:
    """Values pulled out of a command utterance (all optional)."""

    amount: int | None = None
    transaction_type: TransactionType | None = None
    category: str | None = None
    period: str | None = None
    purpose: str | None = None
    update_field: str | None = None
    update_value: str | None = None


def _is_amount_token(token: str) -> bool:
    return bool(_AMOUNT_TOKEN.match(token)) or token in ("ribu", "juta")


def _clean_phrase(words: list[str]) -> str | None:
    kept: list[str] = []
    for word in words:
        if _is_amount_token(word) or word in _FILLER:
            continue
        if word in ("untuk", "dari") and kept:
            break
        kept.append(word)
    phrase = " ".join(kept).strip(" .,!?")
    return phrase or None


def _strip_period(text: str, period: str | None) -> str:
    if period:
        text = text.replace(period, " ")
    return " ".join(text.split())


def find_period(text: str) -> str | None:
    lowered = text.lower()
    for period in PERIODS:
        if period in lowered:
            return period
    return None


def find_transaction_type(tokens: list[str]) -> TransactionType | None:
    for token in tokens:
        if token in EXPENSE_WORDS:
            return TransactionType.EXPENSE
        if token in INCOME_WORDS:
            return TransactionType.INCOME
    return None


def find_purpose(tokens: list[str]) -> str | None:
    """Phrase after the first "untuk"/"dari"."""
    for index, token in enumerate(tokens):
        if token in _PURPOSE_MARKERS:
            return _clean_phrase(tokens[index + 1:])
    return None


def find_budget_category(tokens: list[str]) -> str | None:
    """Word(s) after "budget"/"anggaran", up to the amount."""
    for index, token in enumerate(tokens):
        if token in _BUDGET_MARKERS:
            rest = tokens[index + 1:]
            if rest and rest[0] == "untuk":
                rest = rest[1:]
            words: list[str] = []
            for word in rest:
                if _is_amount_token(word) or word in _FILLER:
                    break
                words.append(word)
            return " ".join(words) or None
    return None


def extract_parameters(text: str) -> CommandParameters:
    """Pulls amount, type, category, period and goal purpose out of text."""
    lowered = " ".join((text or "").lower().split())
    period = find_period(lowered)
    body = _strip_period(lowered, period)
    tokens = body.split()

    params = CommandParameters(
        amount=find_amount(body),
        transaction_type=find_transaction_type(tokens),
        period=period,
        purpose=find_purpose(tokens),
    )
    params.category = find_budget_category(tokens) or params.purpose
    if params.category is None and tokens and tokens[0] in ("bayar", "beli"):
        # "bayar listrik sebesar 200000"
        params.category = _clean_phrase(tokens[1:])

    update = _UPDATE_PATTERN.search(body)
    if update:
        params.update_field = "category" if update.group(1) == "kategori" else "amount"
        params.update_value = update.group(2).strip()

    return params
