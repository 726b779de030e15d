"""Common typos of dialogue trigger words, corrected before signal detection."""

from __future__ import annotations

TYPO_CORRECTIONS: dict[str, str] = {
    # pengeluaran
    "pngeluaran": "pengeluaran",
    "pengluaran": "pengeluaran",
    "keluar": "pengeluaran",
    # pemasukan
    "pmasukan": "pemasukan",
    "pemaskan": "pemasukan",
    "masuk": "pemasukan",
    # tabungan
    "tabungn": "tabungan",
    "tabunagn": "tabungan",
    "nabung": "tabungan",
    # anggaran
    "angaran": "anggaran",
    "anggran": "anggaran",
    "bugdet": "anggaran",
    # categories
    "mkn": "makan",
    "makn": "makan",
    "transport": "transportasi",
    "trans": "transportasi",
    # commands
    "ctat": "catat",
    "liat": "lihat",
    "lht": "lihat",
}


def correct_typos(text: str, corrections: dict[str, str] | None = None) -> str:
    """Lower-cases text and replaces whole-token typos."""
    table = TYPO_CORRECTIONS if corrections is None else corrections
    return " ".join(table.get(word, word) for word in text.lower().split())
