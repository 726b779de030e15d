"""Domain enums: transaction types, command table vocabulary, response tags."""

from __future__ import annotations

from enum import StrEnum


class TransactionType(StrEnum):
    """Kind of transaction being drafted or recorded."""

    EXPENSE = "expense"
    INCOME = "income"


class CommandDomain(StrEnum):
    """Domain a chat command belongs to."""

    TRANSACTION = "transaction"
    BUDGET = "budget"
    GOAL = "goal"
    REPORT = "report"
    HELP = "help"


class CommandAction(StrEnum):
    """Action a chat command performs within its domain."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    SET = "set"
    CHECK = "check"
    GENERATE = "generate"
    ANALYZE = "analyze"
    SHOW = "show"


class ResponseType(StrEnum):
    """Tag carried by every ResponseEnvelope."""

    SUPPORT = "support"
    DIALOGUE = "dialogue"
    FINANCIAL_GUIDANCE = "financial_guidance"
    FALLBACK = "fallback"
    COMMAND = "command"
    HELP = "help"
    ERROR = "error"


class TemplateId(StrEnum):
    """Canned sentiment response templates."""

    CRISIS_SUPPORT = "crisis_support"
    BUDGET_ADJUSTMENT = "budget_adjustment"
    GROWTH_PLANNING = "growth_planning"
    BEGINNER_HABITS = "beginner_habits"


class SummaryScope(StrEnum):
    """What a summary fetch is about."""

    BALANCE = "balance"
    TRANSACTIONS = "transactions"
    BUDGET = "budget"
    GOALS = "goals"
    REPORT = "report"
    ANALYSIS = "analysis"
