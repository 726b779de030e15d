"""Application settings loaded from environment variables.

Every tunable of the NLU pipeline is a named field with a documented default;
nothing in the pipeline reads `os.environ` directly.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_SESSION_BACKENDS: frozenset[str] = frozenset({"memory", "redis"})


class Settings(BaseSettings):
    """Settings read from the environment (prefix ``DOMPETKU_``)."""

    model_config = SettingsConfigDict(
        env_prefix="DOMPETKU_",
        case_sensitive=False,
    )

    # Application
    service_name: str = "dompetku"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Dialogue sessions
    session_timeout_seconds: int = 300  # Inactivity timeout (5 minutes)
    session_store_backend: str = "memory"  # memory | redis
    redis_url: str | None = None  # Required when session_store_backend=redis

    # Response selection
    stress_override_threshold: int = 2  # stress >= threshold overrides dialogue context

    # Fuzzy matching
    lexicon_similarity_threshold: float = 0.3  # term-to-term suggestions (strictly greater)
    dialect_similarity_threshold: float = 0.6  # dialect/slang token suggestions (at least)
    term_suggestion_limit: int = 3
    dialect_suggestion_limit: int = 3

    # Default keyword intent matcher
    intent_min_weight: float = 0.6

    def validate_session_store_config(self) -> list[str]:
        """Validates the session store backend.

        Returns a list of errors (empty = OK).
        """
        errors: list[str] = []
        backend = self.session_store_backend.lower()

        if backend not in VALID_SESSION_BACKENDS:
            errors.append(
                f"SESSION_STORE_BACKEND '{backend}' invalid. "
                f"Valid values: {sorted(VALID_SESSION_BACKENDS)}"
            )

        if backend == "redis" and not self.redis_url:
            errors.append("SESSION_STORE_BACKEND=redis requires REDIS_URL")

        if self.is_production and backend == "memory":
            errors.append(
                "SESSION_STORE_BACKEND=memory is not allowed in production "
                "(sessions would not be shared between workers)"
            )

        if self.session_timeout_seconds <= 0:
            errors.append("SESSION_TIMEOUT_SECONDS must be > 0")

        return errors

    def validate_thresholds(self) -> list[str]:
        """Validates similarity and stress thresholds."""
        errors: list[str] = []
        if not 0 <= self.lexicon_similarity_threshold <= 1:
            errors.append("LEXICON_SIMILARITY_THRESHOLD must be between 0 and 1")
        if not 0 <= self.dialect_similarity_threshold <= 1:
            errors.append("DIALECT_SIMILARITY_THRESHOLD must be between 0 and 1")
        if not 0 < self.intent_min_weight <= 1:
            errors.append("INTENT_MIN_WEIGHT must be between 0 (exclusive) and 1")
        if not 1 <= self.stress_override_threshold <= 3:
            errors.append("STRESS_OVERRIDE_THRESHOLD must be between 1 and 3")
        if self.term_suggestion_limit < 0 or self.dialect_suggestion_limit < 0:
            errors.append("Suggestion limits must be >= 0")
        return errors

    def validate_all(self) -> list[str]:
        """Runs every validator and concatenates the errors."""
        return [*self.validate_session_store_config(), *self.validate_thresholds()]

    @property
    def is_production(self) -> bool:
        """True when running in production."""
        return self.environment.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached Settings instance."""
    return Settings()
