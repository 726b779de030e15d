"""Domain protocol for the persistence collaborators.

Only the command router calls these. Every method may raise a
`FinanceBackendError` subclass (validation, not found, conflict).
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from dompetku.domain.enums import SummaryScope, TransactionType


class TransactionRef(BaseModel):
    """Reference to a stored transaction."""

    transaction_id: str
    type: TransactionType
    amount: int
    category: str


class GoalRef(BaseModel):
    """Reference to a stored savings goal."""

    goal_id: str
    name: str
    target_amount: int
    current_amount: int = 0
    created: bool = True


class SummaryData(BaseModel):
    """Aggregated figures for a summary scope."""

    scope: SummaryScope
    total_income: int = 0
    total_expense: int = 0
    balance: int = 0
    items: list[dict[str, Any]] = Field(default_factory=list)


@runtime_checkable
class FinanceBackend(Protocol):
    """Persistence operations for transactions, budgets, goals and reports."""

    async def create_transaction(
        self,
        user_id: str,
        type: TransactionType,  # noqa: A002
        amount: int,
        category: str,
        description: str,
    ) -> TransactionRef: ...

    async def adjust_budget_spending(
        self, user_id: str, category: str, delta_amount: int
    ) -> None: ...

    async def set_budget(self, user_id: str, category: str, limit_amount: int) -> None: ...

    async def update_last_transaction(
        self, user_id: str, fields: dict[str, Any]
    ) -> TransactionRef: ...

    async def delete_last_transaction(self, user_id: str) -> TransactionRef: ...

    async def create_or_update_goal(self, user_id: str, fields: dict[str, Any]) -> GoalRef: ...

    async def fetch_summary(self, user_id: str, scope: SummaryScope) -> SummaryData: ...
