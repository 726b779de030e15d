"""Domain protocol for the external intent/sentiment matcher."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dompetku.domain.models import IntentScore


@runtime_checkable
class IntentMatcher(Protocol):
    """Returns zero or more weighted labels for a text.

    Labels come from a fixed taxonomy: ``stress.high``, ``stress.medium``,
    ``stress.low``, ``confidence.high``, ``confidence.medium``,
    ``confidence.low``. Unknown labels are ignored by consumers.
    """

    def classify_intents(self, text: str) -> list[IntentScore]: ...
