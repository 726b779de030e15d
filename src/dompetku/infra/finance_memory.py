"""In-memory FinanceBackend (development and tests).

Real persistence of transactions, budgets and goals lives in the backend
services; this implementation only mirrors their observable behavior:
validation errors, not-found on missing budgets/transactions, and conflicts
when a goal target would drop below what is already saved.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from dompetku.domain.enums import SummaryScope, TransactionType
from dompetku.domain.errors import Conflict, NotFound, ValidationFailed
from dompetku.domain.protocols.finance_backend import GoalRef, SummaryData, TransactionRef
from dompetku.observability.logging import get_logger, mask_user_id

logger: logging.Logger = get_logger(__name__)

RECENT_TRANSACTIONS_LIMIT = 10


@dataclass(slots=True)
class _Budget:
    limit_amount: int
    spent: int = 0


@dataclass(slots=True)
class _Ledger:
    transactions: list[dict[str, Any]] = field(default_factory=list)
    budgets: dict[str, _Budget] = field(default_factory=dict)
    goals: dict[str, GoalRef] = field(default_factory=dict)


class InMemoryFinanceBackend:
    """Per-user ledgers kept in process memory."""

    def __init__(self) -> None:
        self._ledgers: dict[str, _Ledger] = defaultdict(_Ledger)
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    async def create_transaction(
        self,
        user_id: str,
        type: TransactionType,  # noqa: A002
        amount: int,
        category: str,
        description: str,
    ) -> TransactionRef:
        if amount <= 0:
            raise ValidationFailed("amount must be positive")
        if not category or not category.strip():
            raise ValidationFailed("category is required")

        ref = TransactionRef(
            transaction_id=self._next_id("trx"),
            type=TransactionType(type),
            amount=amount,
            category=category.strip(),
        )
        self._ledgers[user_id].transactions.append(
            {**ref.model_dump(mode="json"), "description": description}
        )
        logger.info(
            "transaction_created",
            extra={"user_id": mask_user_id(user_id), "transaction_type": ref.type},
        )
        return ref

    async def adjust_budget_spending(self, user_id: str, category: str, delta_amount: int) -> None:
        budget = self._ledgers[user_id].budgets.get(category.strip().lower())
        if budget is None:
            raise NotFound(f"no active budget for category '{category}'")
        budget.spent = max(0, budget.spent + delta_amount)

    async def set_budget(self, user_id: str, category: str, limit_amount: int) -> None:
        if limit_amount <= 0:
            raise ValidationFailed("budget limit must be positive")
        if not category or not category.strip():
            raise ValidationFailed("category is required")

        budgets = self._ledgers[user_id].budgets
        key = category.strip().lower()
        existing = budgets.get(key)
        if existing is None:
            budgets[key] = _Budget(limit_amount=limit_amount)
        else:
            existing.limit_amount = limit_amount

    async def update_last_transaction(
        self, user_id: str, fields: dict[str, Any]
    ) -> TransactionRef:
        transactions = self._ledgers[user_id].transactions
        if not transactions:
            raise NotFound("no transaction to update")

        last = transactions[-1]
        if "amount" in fields and fields["amount"] is not None:
            if fields["amount"] <= 0:
                raise ValidationFailed("amount must be positive")
            last["amount"] = fields["amount"]
        if fields.get("category"):
            last["category"] = fields["category"]
        return TransactionRef.model_validate(last)

    async def delete_last_transaction(self, user_id: str) -> TransactionRef:
        transactions = self._ledgers[user_id].transactions
        if not transactions:
            raise NotFound("no transaction to delete")
        return TransactionRef.model_validate(transactions.pop())

    async def create_or_update_goal(self, user_id: str, fields: dict[str, Any]) -> GoalRef:
        name = (fields.get("name") or "").strip()
        target = fields.get("target_amount")
        if not name:
            raise ValidationFailed("goal name is required")
        if not target or target <= 0:
            raise ValidationFailed("goal target must be positive")

        goals = self._ledgers[user_id].goals
        existing = goals.get(name.lower())
        if existing is None:
            goal = GoalRef(goal_id=self._next_id("goal"), name=name, target_amount=target)
        else:
            if target < existing.current_amount:
                raise Conflict("target is below the amount already saved")
            goal = existing.model_copy(update={"target_amount": target, "created": False})
        goals[name.lower()] = goal
        return goal

    async def fetch_summary(self, user_id: str, scope: SummaryScope) -> SummaryData:
        ledger = self._ledgers[user_id]
        income = sum(t["amount"] for t in ledger.transactions if t["type"] == "income")
        expense = sum(t["amount"] for t in ledger.transactions if t["type"] == "expense")
        summary = SummaryData(
            scope=scope, total_income=income, total_expense=expense, balance=income - expense
        )

        if scope == SummaryScope.TRANSACTIONS:
            summary.items = list(reversed(ledger.transactions[-RECENT_TRANSACTIONS_LIMIT:]))
        elif scope == SummaryScope.BUDGET:
            summary.items = [
                {
                    "category": category,
                    "limit": budget.limit_amount,
                    "spent": budget.spent,
                    "remaining": budget.limit_amount - budget.spent,
                }
                for category, budget in ledger.budgets.items()
            ]
        elif scope == SummaryScope.GOALS:
            summary.items = [goal.model_dump(mode="json") for goal in ledger.goals.values()]
        elif scope in (SummaryScope.REPORT, SummaryScope.ANALYSIS):
            per_category: dict[str, int] = defaultdict(int)
            for t in ledger.transactions:
                if t["type"] == "expense":
                    per_category[t["category"]] += t["amount"]
            summary.items = [
                {"category": category, "amount": amount}
                for category, amount in sorted(
                    per_category.items(), key=lambda item: item[1], reverse=True
                )
            ]
        return summary
