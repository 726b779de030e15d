"""Domain lexicon: Indonesian financial terms, synonyms and categories.

Reads are lock-free: every table is replaced wholesale (copy-on-write) by
writers holding `_write_lock`, so a reader sees either the old or the new
table and an entry only becomes visible once it is fully built.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from dompetku.domain.models import Term, TermSuggestion
from dompetku.domain.similarity import similarity
from dompetku.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

# key -> (definition, examples, related)
DEFAULT_TERMS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "anggaran": (
        "Rencana keuangan untuk periode tertentu",
        ("anggaran bulanan", "anggaran tahunan"),
        ("budget", "perencanaan"),
    ),
    "tabungan": (
        "Uang yang disimpan untuk keperluan masa depan",
        ("tabungan pendidikan", "tabungan pensiun"),
        ("saving", "deposito"),
    ),
    "investasi": (
        "Penanaman modal untuk mendapatkan keuntungan di masa depan",
        ("investasi saham", "investasi properti"),
        ("reksadana", "obligasi"),
    ),
    "utang": (
        "Kewajiban finansial yang harus dibayar",
        ("utang kartu kredit", "utang KPR"),
        ("pinjaman", "cicilan"),
    ),
    "pemasukan": (
        "Uang yang diterima dari berbagai sumber",
        ("gaji", "bonus", "pendapatan sampingan"),
        ("income", "pendapatan"),
    ),
    "pengeluaran": (
        "Uang yang digunakan untuk berbagai keperluan",
        ("biaya makan", "transportasi", "belanja"),
        ("expense", "biaya"),
    ),
    "saldo": (
        "Jumlah uang yang tersedia",
        ("saldo rekening", "saldo e-wallet"),
        ("balance", "dana"),
    ),
    "transfer": (
        "Pengiriman uang dari satu akun ke akun lain",
        ("transfer antar bank", "transfer e-wallet"),
        ("kirim uang", "TF"),
    ),
    "saham": (
        "Bukti kepemilikan bagian perusahaan",
        ("saham blue chip", "saham growth"),
        ("stock", "equity"),
    ),
    "reksadana": (
        "Wadah investasi kolektif yang dikelola manajer investasi",
        ("reksadana saham", "reksadana pasar uang"),
        ("mutual fund", "investasi"),
    ),
    "obligasi": (
        "Surat utang yang dapat diperdagangkan",
        ("obligasi pemerintah", "obligasi korporasi"),
        ("bond", "surat utang"),
    ),
    "deposito": (
        "Simpanan berjangka dengan bunga tetap",
        ("deposito 1 bulan", "deposito 1 tahun"),
        ("time deposit", "simpanan"),
    ),
    "dana_darurat": (
        "Dana yang disiapkan untuk keadaan tidak terduga",
        ("dana darurat 6 bulan", "emergency fund"),
        ("simpanan", "cadangan"),
    ),
    "asuransi": (
        "Perlindungan finansial terhadap risiko",
        ("asuransi jiwa", "asuransi kesehatan"),
        ("insurance", "proteksi"),
    ),
    "pensiun": (
        "Dana yang disiapkan untuk masa pensiun",
        ("dana pensiun", "tabungan hari tua"),
        ("retirement", "jaminan hari tua"),
    ),
    "pajak": (
        "Kewajiban finansial kepada negara",
        ("pajak penghasilan", "pajak properti"),
        ("tax", "PPh", "PPN"),
    ),
}

DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    # Income
    "pemasukan": ("pendapatan", "income", "gaji", "penghasilan", "masukan"),
    "gaji": ("salary", "upah", "bayaran", "pendapatan tetap"),
    "bonus": ("insentif", "tambahan", "reward", "komisi"),
    # Expense
    "pengeluaran": ("biaya", "expense", "cost", "pembayaran", "belanja"),
    "tagihan": ("bill", "invoice", "pembayaran", "kewajiban"),
    "belanja": ("shopping", "pembelian", "konsumsi"),
    # Saving
    "tabungan": ("saving", "simpanan", "deposito", "dana"),
    "menabung": ("menyimpan", "saving", "investasi", "mengumpulkan"),
    "celengan": ("tabungan", "saving box", "tempat nabung"),
    # Investment
    "investasi": ("penanaman modal", "investment", "tabungan masa depan"),
    "saham": ("stock", "equity", "kepemilikan perusahaan"),
    "reksadana": ("mutual fund", "investasi kolektif"),
    # Debt
    "utang": ("pinjaman", "kredit", "debt", "loan", "kewajiban"),
    "cicilan": ("angsuran", "installment", "pembayaran berkala"),
    "kpr": ("kredit rumah", "mortgage", "housing loan"),
    # Budget
    "anggaran": ("budget", "rencana keuangan", "alokasi dana"),
    "alokasi": ("pembagian", "distribusi", "penempatan dana"),
    "target": ("goal", "tujuan", "rencana"),
}

DEFAULT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "pengeluaran_rutin": (
        "makan", "transportasi", "utilities", "internet", "pulsa", "sewa", "cicilan",
    ),
    "pengeluaran_non_rutin": (
        "belanja", "hiburan", "kesehatan", "pendidikan", "liburan", "hadiah",
    ),
    "pemasukan_rutin": ("gaji", "pension", "sewa", "dividen"),
    "pemasukan_non_rutin": ("bonus", "komisi", "freelance", "hadiah", "warisan"),
    "investasi": ("saham", "reksadana", "obligasi", "deposito", "properti", "emas"),
    "utang": ("kartu_kredit", "kpr", "kta", "pinjaman_online", "cicilan"),
}


@dataclass(frozen=True, slots=True)
class _Tables:
    terms: dict[str, Term]
    synonyms: dict[str, tuple[str, ...]]
    categories: dict[str, tuple[str, ...]]


def _first_category(categories: dict[str, tuple[str, ...]], word: str) -> str | None:
    for category, members in categories.items():
        if word in members:
            return category
    return None


class DomainLexicon:
    """Dictionary of financial vocabulary with fuzzy suggestions."""

    def __init__(
        self,
        terms: dict[str, tuple[str, Iterable[str], Iterable[str]]] | None = None,
        synonyms: dict[str, Iterable[str]] | None = None,
        categories: dict[str, Iterable[str]] | None = None,
        suggestion_threshold: float = 0.3,
    ) -> None:
        raw_categories = DEFAULT_CATEGORIES if categories is None else categories
        category_table = {
            name.lower(): tuple(member.lower() for member in members)
            for name, members in raw_categories.items()
        }
        raw_terms = DEFAULT_TERMS if terms is None else terms
        term_table = {
            key.lower(): Term(
                key=key.lower(),
                definition=definition,
                examples=tuple(examples),
                related=tuple(related),
                category=_first_category(category_table, key.lower()),
            )
            for key, (definition, examples, related) in raw_terms.items()
        }
        raw_synonyms = DEFAULT_SYNONYMS if synonyms is None else synonyms
        synonym_table = {key.lower(): tuple(values) for key, values in raw_synonyms.items()}

        self._tables = _Tables(term_table, synonym_table, category_table)
        self._suggestion_threshold = suggestion_threshold
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def lookup(self, term: str) -> Term | None:
        return self._tables.terms.get(term.lower())

    def synonyms_of(self, term: str) -> list[str]:
        return list(self._tables.synonyms.get(term.lower(), ()))

    def category_of(self, term: str) -> str | None:
        """First category listing the word, in category registration order."""
        return _first_category(self._tables.categories, term.lower())

    def terms_in_category(self, category: str) -> list[str]:
        return list(self._tables.categories.get(category.lower(), ()))

    def categories(self) -> list[str]:
        return list(self._tables.categories)

    def search(self, query: str) -> list[Term]:
        """Terms whose key, definition, examples or related terms contain query."""
        needle = query.lower()
        if not needle:
            return []

        def _hit(term: Term) -> bool:
            return (
                needle in term.key
                or needle in term.definition.lower()
                or any(needle in example.lower() for example in term.examples)
                or any(needle in related.lower() for related in term.related)
            )

        return [term for term in self._tables.terms.values() if _hit(term)]

    def suggest(self, term: str, limit: int = 5) -> list[TermSuggestion]:
        """Term keys and their synonyms similar to term (score > threshold).

        Sorted by score descending; ties keep table order (each key before
        its own synonyms).
        """
        needle = term.lower()
        tables = self._tables
        scored: list[TermSuggestion] = []
        for key, entry in tables.terms.items():
            for word in (key, *tables.synonyms.get(key, ())):
                score = similarity(needle, word.lower())
                if score > self._suggestion_threshold:
                    scored.append(TermSuggestion(word=word, similarity=score, term=entry))

        scored.sort(key=lambda suggestion: suggestion.similarity, reverse=True)
        return scored[:limit]

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.lower() in self._tables.terms

    def __len__(self) -> int:
        return len(self._tables.terms)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_term(
        self,
        key: str,
        definition: str,
        examples: Iterable[str] = (),
        related: Iterable[str] = (),
        category: str | None = None,
    ) -> Term:
        """Adds (or replaces) a term. Returns the published entry."""
        normalized = key.strip().lower()
        if not normalized:
            raise ValueError("term key must not be empty")
        if not definition.strip():
            raise ValueError("term definition must not be empty")

        with self._write_lock:
            current = self._tables
            categories = current.categories
            if category:
                category = category.lower()
                members = categories.get(category, ())
                if normalized not in members:
                    categories = {**categories, category: (*members, normalized)}

            entry = Term(
                key=normalized,
                definition=definition.strip(),
                examples=tuple(examples),
                related=tuple(related),
                category=category or _first_category(categories, normalized),
            )
            self._tables = _Tables(
                terms={**current.terms, normalized: entry},
                synonyms=current.synonyms,
                categories=categories,
            )

        logger.info("lexicon_term_added", extra={"term": normalized})
        return entry

    def add_synonyms(self, key: str, synonyms: Iterable[str]) -> list[str]:
        """Appends synonyms to a key (duplicates skipped). Returns the full list."""
        normalized = key.strip().lower()
        if not normalized:
            raise ValueError("term key must not be empty")

        with self._write_lock:
            current = self._tables
            existing = current.synonyms.get(normalized, ())
            merged = (*existing, *(s for s in dict.fromkeys(synonyms) if s not in existing))
            self._tables = _Tables(
                terms=current.terms,
                synonyms={**current.synonyms, normalized: merged},
                categories=current.categories,
            )

        logger.info("lexicon_synonyms_added", extra={"term": normalized})
        return list(merged)
