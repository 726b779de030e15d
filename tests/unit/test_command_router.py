"""Command identification, dispatch and collaborator failures."""

from __future__ import annotations

import logging

import pytest

from dompetku.application.router import (
    BACKEND_ERROR_REPLIES,
    GENERIC_APOLOGY,
    INVALID_ACTION_REPLIES,
    CommandRouter,
)
from dompetku.domain.enums import CommandAction, CommandDomain, ResponseType
from dompetku.domain.errors import NotFound, ValidationFailed
from dompetku.domain.models import Command
from dompetku.infra import InMemoryFinanceBackend


class FailingBackend(InMemoryFinanceBackend):
    def __init__(self, error: Exception) -> None:
        super().__init__()
        self._error = error

    async def create_transaction(self, *args, **kwargs):
        raise self._error


@pytest.fixture()
def router(backend) -> CommandRouter:
    return CommandRouter(backend)


async def _send(router: CommandRouter, text: str, user_id: str = "6281234567890"):
    command = router.identify(text)
    assert command is not None, text
    return await router.dispatch(user_id, command, text=text)


class TestIdentify:
    @pytest.mark.parametrize(
        ("text", "keyword"),
        [
            ("catat pengeluaran 50rb untuk makan", "catat"),
            ("Bantuan", "bantuan"),
            ("  cek budget", "cek"),
            ("laporan keuangan bulan ini", "laporan"),
        ],
    )
    def test_known_commands(self, router, text, keyword):
        assert router.identify(text).keyword == keyword

    @pytest.mark.parametrize("text", ["", "halo", "apa itu saham"])
    def test_no_command(self, router, text):
        assert router.identify(text) is None

    def test_find_by_keyword(self, router):
        assert router.find("TARGET").domain == CommandDomain.GOAL
        assert router.find("nope") is None


class TestTransactions:
    @pytest.mark.asyncio
    async def test_create_expense(self, router):
        envelope = await _send(router, "catat pengeluaran 50000 untuk makan")
        assert envelope.type == ResponseType.COMMAND
        assert envelope.text == "Pengeluaran Rp 50.000 untuk makan dicatat."
        assert envelope.action["type"] == "transaction_created"
        assert envelope.action["amount"] == 50_000

    @pytest.mark.asyncio
    async def test_create_income(self, router):
        envelope = await _send(router, "catat pemasukan 5000000 dari gaji")
        assert envelope.text == "Pemasukan Rp 5.000.000 untuk gaji dicatat."

    @pytest.mark.asyncio
    async def test_incomplete_create_shows_usage(self, router):
        envelope = await _send(router, "catat pengeluaran")
        assert envelope.text.startswith("Format perintah belum lengkap")
        assert "catat pengeluaran 50rb untuk makan" in envelope.text

    @pytest.mark.asyncio
    async def test_update_last_amount(self, router):
        await _send(router, "catat pengeluaran 50000 untuk makan")
        envelope = await _send(router, "ubah jumlah jadi 75000")
        assert envelope.text == "Transaksi terakhir diperbarui: pengeluaran Rp 75.000 untuk makan."

    @pytest.mark.asyncio
    async def test_update_last_category(self, router):
        await _send(router, "catat pengeluaran 50000 untuk makan")
        envelope = await _send(router, "ubah kategori jadi transportasi")
        assert envelope.text.endswith("untuk transportasi.")

    @pytest.mark.asyncio
    async def test_view_history_and_balance(self, router):
        await _send(router, "catat pemasukan 5000000 dari gaji")
        await _send(router, "catat pengeluaran 50000 untuk makan")

        history = await _send(router, "lihat transaksi hari ini")
        assert history.text.splitlines() == [
            "Riwayat transaksi hari ini:",
            "- makan: Rp 50.000 (keluar)",
            "- gaji: Rp 5.000.000 (masuk)",
        ]

        balance = await _send(router, "cek saldo")
        assert balance.text.splitlines()[0] == "Saldo Anda: Rp 4.950.000"

    @pytest.mark.asyncio
    async def test_empty_history(self, router):
        assert (await _send(router, "lihat transaksi")).text == "Belum ada transaksi yang tercatat."

    @pytest.mark.asyncio
    async def test_delete_without_transactions_is_not_found(self, router):
        envelope = await _send(router, "hapus transaksi terakhir")
        assert envelope.type == ResponseType.ERROR
        assert envelope.text == BACKEND_ERROR_REPLIES[NotFound]


class TestBudgetsGoalsReports:
    @pytest.mark.asyncio
    async def test_budget_tracks_expenses(self, router):
        await _send(router, "atur budget makan 2000000")
        await _send(router, "catat pengeluaran 50000 untuk makan")
        budget = await _send(router, "cek budget")
        assert "- makan: sisa Rp 1.950.000 dari Rp 2.000.000" in budget.text

        await _send(router, "hapus transaksi terakhir")
        budget = await _send(router, "cek budget")
        assert "- makan: sisa Rp 2.000.000 dari Rp 2.000.000" in budget.text

    @pytest.mark.asyncio
    async def test_no_budget_yet(self, router):
        assert (await _send(router, "cek budget")).text.startswith("Belum ada budget")

    @pytest.mark.asyncio
    async def test_goal_create_update_and_progress(self, router):
        created = await _send(router, "target menabung 10000000 untuk liburan")
        assert created.text == "Target menabung dibuat: Rp 10.000.000 untuk liburan."
        updated = await _send(router, "target menabung 12000000 untuk liburan")
        assert updated.text.startswith("Target menabung diperbarui")

        progress = await _send(router, "progress target")
        assert "- liburan: Rp 0 dari Rp 12.000.000 (0%)" in progress.text

    @pytest.mark.asyncio
    async def test_report_and_analysis(self, router):
        await _send(router, "catat pemasukan 1000000 dari gaji")
        await _send(router, "catat pengeluaran 300000 untuk makan")
        await _send(router, "catat pengeluaran 100000 untuk transportasi")

        report = await _send(router, "laporan keuangan bulan ini")
        assert report.text.splitlines() == [
            "Ringkasan keuangan Anda bulan ini:",
            "Pemasukan: Rp 1.000.000",
            "Pengeluaran: Rp 400.000",
            "Saldo: Rp 600.000",
        ]

        analysis = await _send(router, "analisis pengeluaran")
        assert analysis.text.splitlines()[1:] == [
            "- makan: Rp 300.000 (75%)",
            "- transportasi: Rp 100.000 (25%)",
        ]

    @pytest.mark.asyncio
    async def test_help(self, router):
        general = await _send(router, "bantuan")
        assert general.type == ResponseType.HELP
        assert "catat: catat pengeluaran 50rb untuk makan" in general.text

        topic = await _send(router, "bantuan target")
        assert topic.text.startswith('Bantuan untuk perintah "target"')


class TestFailures:
    @pytest.mark.asyncio
    async def test_invalid_domain_action_pair(self, backend):
        command = Command("hapus", CommandDomain.HELP, CommandAction.DELETE)
        router = CommandRouter(backend, commands=[command])
        envelope = await router.dispatch("u1", command, text="hapus semua")
        assert envelope.type == ResponseType.ERROR
        assert envelope.text == INVALID_ACTION_REPLIES[CommandDomain.HELP]

    @pytest.mark.asyncio
    async def test_validation_error_becomes_polite_reply(self):
        router = CommandRouter(FailingBackend(ValidationFailed("bad")))
        envelope = await _send(router, "catat pengeluaran 50000 untuk makan")
        assert envelope.type == ResponseType.ERROR
        assert envelope.text == BACKEND_ERROR_REPLIES[ValidationFailed]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_logged_with_context(self, caplog):
        router = CommandRouter(FailingBackend(RuntimeError("db down")))
        with caplog.at_level(logging.ERROR):
            envelope = await _send(
                router, "catat pengeluaran 50000 untuk makan", user_id="6281234567890"
            )

        assert envelope.text == GENERIC_APOLOGY
        record = next(r for r in caplog.records if r.getMessage() == "command_failed")
        assert record.user_id == "628123..."
        assert record.command == "catat"
        assert record.payload["amount"] == 50_000
        assert record.error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_persist_draft(self, router):
        envelope = await router.persist_draft(
            "u1", {"type": "income", "amount": 250_000, "category": "bonus"}
        )
        assert envelope.text == (
            "Transaksi berhasil dicatat! Pemasukan Rp 250.000 untuk bonus dicatat."
        )

    @pytest.mark.asyncio
    async def test_persist_draft_failure(self):
        router = CommandRouter(FailingBackend(ValidationFailed("bad")))
        envelope = await router.persist_draft(
            "u1", {"type": "expense", "amount": 1, "category": "x"}
        )
        assert envelope.type == ResponseType.ERROR
