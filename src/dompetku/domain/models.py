"""Domain models (main contracts between pipeline stages)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dompetku.domain.enums import CommandAction, CommandDomain, ResponseType, TemplateId


class Utterance(BaseModel):
    """One inbound chat message. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    text: str
    received_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    message_id: str | None = None

    @field_validator("user_id")
    @classmethod
    def user_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("user_id must not be blank")
        return value


class ResponseEnvelope(BaseModel):
    """Reply handed back to the transport for delivery."""

    text: str
    suggestions: list[str] = Field(default_factory=list)
    type: ResponseType = ResponseType.FALLBACK
    action: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RegionalMatch:
    """A regional speech pattern that fired on an utterance."""

    region: str
    pattern: str


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Output of the lexical normalizer for one message."""

    original: str
    standardized: str
    contains_dialect: bool = False
    regional_matches: tuple[RegionalMatch, ...] = ()


@dataclass(frozen=True, slots=True)
class Term:
    """A financial vocabulary entry of the domain lexicon."""

    key: str
    definition: str
    examples: tuple[str, ...] = ()
    related: tuple[str, ...] = ()
    category: str | None = None


@dataclass(frozen=True, slots=True)
class TermSuggestion:
    """A lexicon entry (or one of its synonyms) close to an unknown token."""

    word: str
    similarity: float
    term: Term


@dataclass(frozen=True, slots=True)
class IntentScore:
    """One weighted label produced by an intent matcher."""

    label: str
    weight: float


@dataclass(frozen=True, slots=True)
class SentimentResult:
    """Stress/confidence assessment plus the selected canned response."""

    stress_level: int
    confidence_level: int
    template_id: TemplateId
    message: str
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Command:
    """A chat command: keyword trigger mapped to a domain action."""

    keyword: str
    domain: CommandDomain
    action: CommandAction
    examples: tuple[str, ...] = field(default_factory=tuple)
