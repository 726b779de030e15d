"""Lexical normalizer: dialect, slang and shorthand amounts to standard Indonesian.

Steps (in order):
1. lower-case
2. regional rewrite rules, in registration order
3. multi-word dialect phrases, then per-token dialect map and slang map
4. numeric unit suffixes (``50k``, ``2jt``) expanded into digits

Mapping values are always standard forms, so normalizing an already
normalized text is a no-op.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from dompetku.domain.amounts import expand_amount_suffixes
from dompetku.domain.models import NormalizationResult, RegionalMatch
from dompetku.domain.similarity import rank_by_similarity
from dompetku.observability.logging import get_logger, log_fallback

logger: logging.Logger = get_logger(__name__)

MAPPING_KINDS = ("dialect", "slang")

DEFAULT_DIALECT_MAP: dict[str, str] = {
    # Javanese
    "piye": "bagaimana",
    "piro": "berapa",
    "duit": "uang",
    "duwit": "uang",
    "opo": "apa",
    "nggo": "untuk",
    # Sundanese
    "kumaha": "bagaimana",
    "sabaraha": "berapa",
    "naon": "apa",
    "keur": "untuk",
    # Betawi
    "gimana": "bagaimana",
    "berape": "berapa",
    "apaan": "apa",
    "buat": "untuk",
    # Medan
    "macam mana": "bagaimana",
    "brapa": "berapa",
}

DEFAULT_SLANG_MAP: dict[str, str] = {
    # Money
    "duid": "uang",
    "gopek": "500",
    "cepe": "100",
    "sejuta": "1000000",
    "sejt": "1000000",
    "seceng": "1000",
    "serbu": "1000",
    # Transfers
    "tf": "transfer",
    "trf": "transfer",
    "kirim": "transfer",
    "krim": "transfer",
    # Categories
    "mam": "makan",
    "mkn": "makan",
    "gojek": "transportasi",
    "grab": "transportasi",
    "belanja": "shopping",
    "listrik": "utilities",
    "pln": "utilities",
    "pulsa": "utilities",
    "inet": "internet",
    # Actions
    "cek": "lihat",
    "liat": "lihat",
    "tampil": "lihat",
    "simpen": "simpan",
    "masukin": "masukkan",
}

_TRAILING_PUNCTUATION = "?!.,;:"


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """A regional pattern and the transform applied to each match."""

    region: str
    matcher: re.Pattern[str]
    transform: Callable[[re.Match[str]], str]

    def apply(self, text: str) -> str:
        return self.matcher.sub(self.transform, text)

    def matches(self, text: str) -> bool:
        return self.matcher.search(text) is not None


def template_rule(region: str, pattern: str, template: str) -> RewriteRule:
    """Builds a rule whose replacement is a ``re`` template (``\\1`` groups allowed)."""
    compiled = re.compile(pattern, re.IGNORECASE)
    return RewriteRule(region, compiled, lambda match: match.expand(template))


def default_rules() -> list[RewriteRule]:
    return [
        template_rule("jawa", r"\btak\s+(.*?)\s+sek\b", r"saya \1 dulu"),
        template_rule("jawa", r"\bmonggo\s+", "silakan "),
        template_rule("sunda", r"\bmangga\s+", "silakan "),
        template_rule("sunda", r"\babdi\b", "saya"),
        template_rule("betawi", r"\bgua\b", "saya"),
        template_rule("betawi", r"\bane\b", "saya"),
    ]


@dataclass(frozen=True, slots=True)
class _Tables:
    """Immutable snapshot of every table the normalizer reads."""

    dialect: dict[str, str]
    slang: dict[str, str]
    rules: tuple[RewriteRule, ...]


class LexicalNormalizer:
    """Maps regional and slang vocabulary to standard Indonesian.

    Writers (`add_mapping`, `add_rule`) build a new snapshot under a lock and
    publish it with one assignment; `normalize` and `suggest` read whichever
    snapshot is current and never block.
    """

    def __init__(
        self,
        dialect_map: dict[str, str] | None = None,
        slang_map: dict[str, str] | None = None,
        rules: Iterable[RewriteRule] | None = None,
        suggestion_threshold: float = 0.6,
        suggestion_limit: int = 3,
    ) -> None:
        self._tables = _Tables(
            dialect=dict(DEFAULT_DIALECT_MAP if dialect_map is None else dialect_map),
            slang=dict(DEFAULT_SLANG_MAP if slang_map is None else slang_map),
            rules=tuple(default_rules() if rules is None else rules),
        )
        self._suggestion_threshold = suggestion_threshold
        self._suggestion_limit = suggestion_limit
        self._write_lock = threading.Lock()

    def normalize(self, text: str) -> NormalizationResult:
        """Returns the standardized text; unknown tokens pass through unchanged."""
        tables = self._tables
        lowered = (text or "").lower()

        try:
            standardized = lowered
            for rule in tables.rules:
                standardized = rule.apply(standardized)
            standardized = self._replace_phrases(standardized, tables.dialect)
            standardized = " ".join(
                self._map_token(token, tables) for token in standardized.split()
            )
            standardized = expand_amount_suffixes(standardized)

            matches = tuple(
                RegionalMatch(rule.region, rule.matcher.pattern)
                for rule in tables.rules
                if rule.matches(lowered)
            )
        except Exception as e:
            logger.error("normalization_failed", extra={"error": type(e).__name__})
            log_fallback(logger, "normalizer", reason="internal_error")
            return NormalizationResult(original=text, standardized=text or "")

        return NormalizationResult(
            original=text,
            standardized=standardized,
            contains_dialect=standardized != lowered,
            regional_matches=matches,
        )

    @staticmethod
    def _replace_phrases(text: str, dialect: dict[str, str]) -> str:
        for phrase, standard in dialect.items():
            if " " in phrase:
                text = re.sub(rf"\b{re.escape(phrase)}\b", standard, text)
        return text

    @staticmethod
    def _map_token(token: str, tables: _Tables) -> str:
        if token in tables.dialect:
            return tables.dialect[token]
        if token in tables.slang:
            return tables.slang[token]

        # "duit?" -> "uang?"
        core = token.rstrip(_TRAILING_PUNCTUATION)
        if core and core != token:
            tail = token[len(core):]
            mapped = tables.dialect.get(core) or tables.slang.get(core)
            if mapped:
                return mapped + tail
        return token

    def suggest(self, token: str, limit: int | None = None) -> list[str]:
        """Known dialect/slang keys close to token (similarity >= threshold)."""
        tables = self._tables
        known = [*tables.dialect, *(key for key in tables.slang if key not in tables.dialect)]
        ranked = rank_by_similarity(
            token.lower(),
            known,
            threshold=self._suggestion_threshold,
            limit=self._suggestion_limit if limit is None else limit,
            inclusive=True,
        )
        return [word for word, _ in ranked]

    def add_mapping(self, kind: str, word: str, standard: str) -> None:
        """Registers a dialect or slang word and its standard form."""
        if kind not in MAPPING_KINDS:
            raise ValueError(f"Unknown mapping kind '{kind}'. Valid: {MAPPING_KINDS}")
        word = word.strip().lower()
        if not word:
            raise ValueError("word must not be empty")

        with self._write_lock:
            current = self._tables
            dialect = dict(current.dialect)
            slang = dict(current.slang)
            (dialect if kind == "dialect" else slang)[word] = standard.strip().lower()
            self._tables = _Tables(dialect=dialect, slang=slang, rules=current.rules)

        logger.info("normalizer_mapping_added", extra={"kind": kind})

    def add_rule(
        self,
        region: str,
        pattern: str,
        template: str | Callable[[re.Match[str]], str],
    ) -> RewriteRule:
        """Appends a regional rewrite rule; it runs after the existing ones."""
        if callable(template):
            rule = RewriteRule(region, re.compile(pattern, re.IGNORECASE), template)
        else:
            rule = template_rule(region, pattern, template)

        with self._write_lock:
            current = self._tables
            self._tables = _Tables(
                dialect=current.dialect,
                slang=current.slang,
                rules=(*current.rules, rule),
            )

        logger.info("normalizer_rule_added", extra={"region": region})
        return rule

    @property
    def regions(self) -> list[str]:
        """Regions with at least one rule, in registration order."""
        seen: dict[str, None] = {}
        for rule in self._tables.rules:
            seen.setdefault(rule.region, None)
        return list(seen)
