"""Command router: keyword commands mapped to finance backend actions.

The router is the only component that calls the persistence collaborators.
Every collaborator failure is logged (user id, command, payload) and turned
into a polite reply; nothing escapes to the message loop.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

from dompetku.ai.entities import CommandParameters, extract_parameters
from dompetku.domain.amounts import format_rupiah, parse_amount
from dompetku.domain.enums import (
    CommandAction,
    CommandDomain,
    ResponseType,
    SummaryScope,
    TransactionType,
)
from dompetku.domain.errors import Conflict, FinanceBackendError, NotFound, ValidationFailed
from dompetku.domain.models import Command, ResponseEnvelope
from dompetku.domain.protocols.finance_backend import FinanceBackend, SummaryData
from dompetku.observability.logging import get_logger, mask_user_id

if TYPE_CHECKING:
    from dompetku.ai.orchestrator import OrchestratorResult

logger: logging.Logger = get_logger(__name__)

_D = CommandDomain
_A = CommandAction

DEFAULT_COMMANDS: tuple[Command, ...] = (
    # Transactions
    Command("catat", _D.TRANSACTION, _A.CREATE, (
        "catat pengeluaran 50rb untuk makan",
        "catat pemasukan 5jt dari gaji",
    )),
    Command("hapus", _D.TRANSACTION, _A.DELETE, (
        "hapus transaksi terakhir",
        "hapus pengeluaran makan kemarin",
    )),
    Command("ubah", _D.TRANSACTION, _A.UPDATE, (
        "ubah jumlah jadi 75rb",
        "ubah kategori jadi transportasi",
    )),
    Command("lihat", _D.TRANSACTION, _A.VIEW, (
        "lihat transaksi hari ini",
        "lihat pengeluaran bulan ini",
    )),
    # Budgets
    Command("atur", _D.BUDGET, _A.SET, (
        "atur budget makan 2jt",
        "atur anggaran transportasi 500rb",
    )),
    Command("cek", _D.BUDGET, _A.CHECK, (
        "cek budget",
        "cek sisa anggaran",
    )),
    # Goals
    Command("target", _D.GOAL, _A.CREATE, (
        "target menabung 10jt untuk liburan",
        "target keuangan 50jt untuk dp rumah",
    )),
    Command("progress", _D.GOAL, _A.CHECK, (
        "progress tabungan",
        "progress target",
    )),
    # Reports
    Command("laporan", _D.REPORT, _A.GENERATE, (
        "laporan keuangan bulan ini",
        "laporan pengeluaran minggu ini",
    )),
    Command("analisis", _D.REPORT, _A.ANALYZE, (
        "analisis pengeluaran",
        "analisis budget",
    )),
    # Help
    Command("bantuan", _D.HELP, _A.SHOW, (
        "bantuan",
        "cara pakai bot",
    )),
)

GENERIC_APOLOGY = "Maaf, terjadi kesalahan dalam menjalankan perintah. Silakan coba lagi."

BACKEND_ERROR_REPLIES: dict[type[FinanceBackendError], str] = {
    ValidationFailed: "Maaf, data yang Anda kirim tidak valid. Silakan periksa kembali.",
    NotFound: "Maaf, data yang Anda maksud tidak ditemukan.",
    Conflict: "Maaf, perubahan tersebut bertentangan dengan data yang sudah ada.",
}

INVALID_ACTION_REPLIES: dict[CommandDomain, str] = {
    _D.TRANSACTION: "Maaf, aksi transaksi tidak valid.",
    _D.BUDGET: "Maaf, aksi anggaran tidak valid.",
    _D.GOAL: "Maaf, aksi target tidak valid.",
    _D.REPORT: "Maaf, aksi laporan tidak valid.",
    _D.HELP: "Maaf, aksi bantuan tidak valid.",
}

_KIND_LABELS = {TransactionType.EXPENSE: "Pengeluaran", TransactionType.INCOME: "Pemasukan"}

Handler = Callable[[str, Command, CommandParameters, str], Awaitable[ResponseEnvelope]]


def _reply(text: str, action: dict[str, Any] | None = None) -> ResponseEnvelope:
    return ResponseEnvelope(text=text, type=ResponseType.COMMAND, action=action)


def _format_usage(command: Command) -> str:
    examples = "\n".join(f"- {example}" for example in command.examples)
    return f"Format perintah belum lengkap. Contoh:\n{examples}"


def _wants_balance(text: str) -> bool:
    return "saldo" in text.split()


class CommandRouter:
    """Identifies commands and dispatches them to the finance backend."""

    def __init__(
        self,
        backend: FinanceBackend,
        commands: Iterable[Command] = DEFAULT_COMMANDS,
    ) -> None:
        self._backend = backend
        self._commands: tuple[Command, ...] = tuple(commands)
        self._handlers: dict[tuple[CommandDomain, CommandAction], Handler] = {
            (_D.TRANSACTION, _A.CREATE): self._create_transaction,
            (_D.TRANSACTION, _A.DELETE): self._delete_transaction,
            (_D.TRANSACTION, _A.UPDATE): self._update_transaction,
            (_D.TRANSACTION, _A.VIEW): self._view_transactions,
            (_D.BUDGET, _A.SET): self._set_budget,
            (_D.BUDGET, _A.CHECK): self._check_budget,
            (_D.GOAL, _A.CREATE): self._create_goal,
            (_D.GOAL, _A.CHECK): self._check_goals,
            (_D.REPORT, _A.GENERATE): self._generate_report,
            (_D.REPORT, _A.ANALYZE): self._analyze,
            (_D.HELP, _A.SHOW): self._show_help,
        }

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._commands

    def identify(self, text: str) -> Command | None:
        """First command whose keyword starts the text (case-insensitive)."""
        lowered = (text or "").strip().lower()
        if not lowered:
            return None
        for command in self._commands:
            if lowered.startswith(command.keyword.lower()):
                return command
        return None

    def find(self, keyword: str) -> Command | None:
        lowered = keyword.lower()
        return next((c for c in self._commands if c.keyword.lower() == lowered), None)

    async def dispatch(
        self,
        user_id: str,
        command: Command,
        result: OrchestratorResult | None = None,
        text: str | None = None,
    ) -> ResponseEnvelope:
        """Runs the handler for (domain, action); never raises."""
        handler = self._handlers.get((command.domain, command.action))
        if handler is None:
            logger.warning(
                "command_action_invalid",
                extra={"command": command.keyword, "domain": command.domain,
                       "action": command.action},
            )
            return ResponseEnvelope(
                text=INVALID_ACTION_REPLIES.get(command.domain, "Maaf, aksi tidak valid."),
                type=ResponseType.ERROR,
            )

        source = text if text is not None else (result.standardized_text if result else "")
        normalized = " ".join(source.lower().split())
        params = extract_parameters(normalized)

        try:
            return await handler(user_id, command, params, normalized)
        except Exception as e:
            return self._failure(user_id, command.keyword, params, e)

    async def persist_draft(self, user_id: str, payload: dict[str, Any]) -> ResponseEnvelope:
        """Stores a draft confirmed in the dialogue."""
        params = CommandParameters(
            amount=payload.get("amount"),
            transaction_type=TransactionType(payload["type"]) if payload.get("type") else None,
            category=payload.get("category"),
        )
        try:
            envelope = await self._record(user_id, params, description=params.category or "")
        except Exception as e:
            return self._failure(user_id, "dialogue_draft", params, e)
        return envelope.model_copy(update={"text": f"Transaksi berhasil dicatat! {envelope.text}"})

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _failure(
        self,
        user_id: str,
        command: str,
        params: CommandParameters,
        error: Exception,
    ) -> ResponseEnvelope:
        payload = {
            "amount": params.amount,
            "type": params.transaction_type,
            "category": params.category,
            "period": params.period,
        }
        extra = {
            "user_id": mask_user_id(user_id),
            "command": command,
            "payload": payload,
            "error": type(error).__name__,
        }
        if isinstance(error, FinanceBackendError):
            logger.warning("command_backend_error", extra=extra)
            text = next(
                (reply for cls, reply in BACKEND_ERROR_REPLIES.items() if isinstance(error, cls)),
                GENERIC_APOLOGY,
            )
        else:
            logger.error("command_failed", extra=extra, exc_info=True)
            text = GENERIC_APOLOGY
        return ResponseEnvelope(text=text, type=ResponseType.ERROR)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def _record(
        self, user_id: str, params: CommandParameters, description: str
    ) -> ResponseEnvelope:
        kind = params.transaction_type or TransactionType.EXPENSE
        ref = await self._backend.create_transaction(
            user_id, kind, params.amount, params.category, description
        )
        if kind == TransactionType.EXPENSE:
            try:
                await self._backend.adjust_budget_spending(user_id, ref.category, ref.amount)
            except NotFound:
                logger.debug("budget_not_tracked", extra={"user_id": mask_user_id(user_id)})

        text = f"{_KIND_LABELS[kind]} {format_rupiah(ref.amount)} untuk {ref.category} dicatat."
        return _reply(text, action={"type": "transaction_created", **ref.model_dump(mode="json")})

    async def _create_transaction(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if params.amount is None or not params.category:
            return _reply(_format_usage(command))
        return await self._record(user_id, params, description=text)

    async def _delete_transaction(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        ref = await self._backend.delete_last_transaction(user_id)
        if ref.type == TransactionType.EXPENSE:
            try:
                await self._backend.adjust_budget_spending(user_id, ref.category, -ref.amount)
            except NotFound:
                logger.debug("budget_not_tracked", extra={"user_id": mask_user_id(user_id)})
        return _reply(
            f"Transaksi terakhir ({_KIND_LABELS[ref.type].lower()} "
            f"{format_rupiah(ref.amount)} untuk {ref.category}) telah dihapus.",
            action={"type": "transaction_deleted", "transaction_id": ref.transaction_id},
        )

    async def _update_transaction(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if params.update_field is None or not params.update_value:
            return _reply(_format_usage(command))

        if params.update_field == "amount":
            amount = parse_amount(params.update_value) or params.amount
            if amount is None:
                return _reply(_format_usage(command))
            fields: dict[str, Any] = {"amount": amount}
        else:
            fields = {"category": params.update_value}

        ref = await self._backend.update_last_transaction(user_id, fields)
        return _reply(
            f"Transaksi terakhir diperbarui: {_KIND_LABELS[ref.type].lower()} "
            f"{format_rupiah(ref.amount)} untuk {ref.category}.",
            action={"type": "transaction_updated", "transaction_id": ref.transaction_id},
        )

    async def _view_transactions(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if _wants_balance(text):
            return await self._show_balance(user_id)

        summary = await self._backend.fetch_summary(user_id, SummaryScope.TRANSACTIONS)
        title = "Riwayat transaksi" + (f" {params.period}" if params.period else "") + ":"
        if not summary.items:
            return _reply("Belum ada transaksi yang tercatat.")
        lines = [
            f"- {item['category']}: {format_rupiah(item['amount'])} "
            f"({'masuk' if item['type'] == TransactionType.INCOME else 'keluar'})"
            for item in summary.items
        ]
        return _reply("\n".join([title, *lines]))

    async def _show_balance(self, user_id: str) -> ResponseEnvelope:
        summary = await self._backend.fetch_summary(user_id, SummaryScope.BALANCE)
        return _reply(
            f"Saldo Anda: {format_rupiah(summary.balance)}\n"
            f"Pemasukan: {format_rupiah(summary.total_income)}\n"
            f"Pengeluaran: {format_rupiah(summary.total_expense)}"
        )

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    async def _set_budget(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if params.amount is None or not params.category:
            return _reply(_format_usage(command))
        await self._backend.set_budget(user_id, params.category, params.amount)
        return _reply(
            f"Budget {params.category} diatur sebesar {format_rupiah(params.amount)}.",
            action={"type": "budget_set", "category": params.category, "limit": params.amount},
        )

    async def _check_budget(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if _wants_balance(text):
            return await self._show_balance(user_id)

        summary = await self._backend.fetch_summary(user_id, SummaryScope.BUDGET)
        if not summary.items:
            return _reply('Belum ada budget. Contoh: "atur budget makan 2jt".')
        lines = [
            f"- {item['category']}: sisa {format_rupiah(item['remaining'])} "
            f"dari {format_rupiah(item['limit'])}"
            for item in summary.items
        ]
        return _reply("\n".join(["Ringkasan budget Anda:", *lines]))

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def _create_goal(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        if params.amount is None or not params.purpose:
            return _reply(_format_usage(command))
        goal = await self._backend.create_or_update_goal(
            user_id, {"name": params.purpose, "target_amount": params.amount}
        )
        verb = "dibuat" if goal.created else "diperbarui"
        return _reply(
            f"Target menabung {verb}: {format_rupiah(goal.target_amount)} untuk {goal.name}.",
            action={"type": "goal_saved", **goal.model_dump(mode="json")},
        )

    async def _check_goals(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        summary = await self._backend.fetch_summary(user_id, SummaryScope.GOALS)
        if not summary.items:
            return _reply('Belum ada target. Contoh: "target menabung 10jt untuk liburan".')
        lines = []
        for item in summary.items:
            target = item["target_amount"] or 1
            percent = min(100, round(item["current_amount"] * 100 / target))
            lines.append(
                f"- {item['name']}: {format_rupiah(item['current_amount'])} dari "
                f"{format_rupiah(item['target_amount'])} ({percent}%)"
            )
        return _reply("\n".join(["Progress target tabungan Anda:", *lines]))

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def _generate_report(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        summary = await self._backend.fetch_summary(user_id, SummaryScope.REPORT)
        title = "Ringkasan keuangan Anda" + (f" {params.period}" if params.period else "") + ":"
        return _reply("\n".join([title, *self._totals(summary)]))

    async def _analyze(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        summary = await self._backend.fetch_summary(user_id, SummaryScope.ANALYSIS)
        if not summary.items:
            return _reply("Belum ada pengeluaran untuk dianalisis.")
        total = summary.total_expense or 1
        lines = [
            f"- {item['category']}: {format_rupiah(item['amount'])} "
            f"({round(item['amount'] * 100 / total)}%)"
            for item in summary.items
        ]
        return _reply("\n".join(["Analisis pengeluaran:", *lines]))

    @staticmethod
    def _totals(summary: SummaryData) -> list[str]:
        return [
            f"Pemasukan: {format_rupiah(summary.total_income)}",
            f"Pengeluaran: {format_rupiah(summary.total_expense)}",
            f"Saldo: {format_rupiah(summary.balance)}",
        ]

    # ------------------------------------------------------------------
    # Help
    # ------------------------------------------------------------------

    async def _show_help(
        self, user_id: str, command: Command, params: CommandParameters, text: str
    ) -> ResponseEnvelope:
        words = text.split()
        topic = self.find(words[1]) if len(words) > 1 else None
        if topic is not None:
            examples = "\n".join(topic.examples)
            body = f'Bantuan untuk perintah "{topic.keyword}":\n\nContoh penggunaan:\n{examples}'
        else:
            body = "Perintah yang tersedia:\n\n" + "\n\n".join(
                f"{c.keyword}: {c.examples[0]}" for c in self._commands if c.examples
            )
        return ResponseEnvelope(text=body, type=ResponseType.HELP)
