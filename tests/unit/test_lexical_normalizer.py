"""Dialect, slang and shorthand normalization."""

from __future__ import annotations

import threading

import pytest

from dompetku.ai.normalizer import LexicalNormalizer


@pytest.fixture()
def normalizer() -> LexicalNormalizer:
    return LexicalNormalizer()


class TestNormalize:
    def test_maps_dialect_word(self, normalizer):
        result = normalizer.normalize("piye kabarmu")
        assert result.standardized == "bagaimana kabarmu"
        assert result.contains_dialect is True
        assert result.original == "piye kabarmu"

    def test_is_case_insensitive(self, normalizer):
        assert normalizer.normalize("PIYE").standardized == "bagaimana"

    def test_regional_rule_slang_and_amount_suffix(self, normalizer):
        result = normalizer.normalize("gua mau tf 50k")
        assert result.standardized == "saya mau transfer 50000"
        assert [match.region for match in result.regional_matches] == ["betawi"]

    @pytest.mark.parametrize(
        ("text", "region"),
        [("ini punya gua", "betawi"), ("uangnya ane", "betawi"), ("ieu milik abdi", "sunda")],
    )
    def test_pronoun_at_end_of_message(self, normalizer, text, region):
        result = normalizer.normalize(text)
        assert result.standardized.endswith(" saya")
        assert region in [match.region for match in result.regional_matches]

    def test_pronoun_rule_does_not_touch_longer_words(self, normalizer):
        assert normalizer.normalize("guava").standardized == "guava"

    def test_javanese_rule_with_group(self, normalizer):
        assert normalizer.normalize("tak makan sek").standardized == "saya makan dulu"

    def test_multi_word_dialect_phrase(self, normalizer):
        assert normalizer.normalize("macam mana ni").standardized == "bagaimana ni"

    def test_keeps_trailing_punctuation(self, normalizer):
        assert normalizer.normalize("duit?").standardized == "uang?"

    def test_unknown_tokens_pass_through(self, normalizer):
        result = normalizer.normalize("halo apa kabar")
        assert result.standardized == "halo apa kabar"
        assert result.contains_dialect is False
        assert result.regional_matches == ()

    @pytest.mark.parametrize(
        "text",
        [
            "gua mau tf 50k",
            "piye carane nggo duit",
            "kumaha abdi bayar listrik 200rb",
            "cek saldo dong",
            "macam mana ni",
        ],
    )
    def test_normalizing_twice_changes_nothing(self, normalizer, text):
        once = normalizer.normalize(text).standardized
        assert normalizer.normalize(once).standardized == once

    def test_empty_text(self, normalizer):
        assert normalizer.normalize("").standardized == ""

    def test_failing_rule_returns_original_text(self, normalizer):
        def explode(match):
            raise RuntimeError("bad rule")

        normalizer.add_rule("uji", r"abc", explode)
        result = normalizer.normalize("abc def")
        assert result.standardized == "abc def"
        assert result.contains_dialect is False


class TestSuggest:
    def test_suggests_close_dialect_key(self, normalizer):
        suggestions = normalizer.suggest("piy")
        assert suggestions[0] == "piye"

    def test_nothing_close(self, normalizer):
        assert normalizer.suggest("zzzzzzzz") == []

    def test_respects_limit(self):
        normalizer = LexicalNormalizer(
            dialect_map={"abca": "x", "abcb": "y", "abcc": "z"},
            slang_map={},
            rules=[],
            suggestion_limit=2,
        )
        assert normalizer.suggest("abcd") == ["abca", "abcb"]
        assert normalizer.suggest("abcd", limit=3) == ["abca", "abcb", "abcc"]


class TestRuntimeUpdates:
    def test_add_mapping_is_visible_to_next_normalize(self, normalizer):
        normalizer.add_mapping("slang", "gajian", "gaji")
        assert normalizer.normalize("gajian masuk").standardized == "gaji masuk"

    def test_add_mapping_rejects_unknown_kind(self, normalizer):
        with pytest.raises(ValueError):
            normalizer.add_mapping("emoji", "x", "y")

    def test_add_rule_registers_region(self, normalizer):
        normalizer.add_rule("medan", r"\bawak\s+", "saya ")
        assert normalizer.normalize("awak lapar").standardized == "saya lapar"
        assert "medan" in normalizer.regions

    def test_concurrent_writers_and_readers(self, normalizer):
        errors: list[Exception] = []

        def writer(index: int) -> None:
            try:
                normalizer.add_mapping("slang", f"kata{index}", f"baku{index}")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        def reader() -> None:
            try:
                for _ in range(50):
                    assert normalizer.normalize("piye duit").standardized == "bagaimana uang"
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(20)]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert all(
            normalizer.normalize(f"kata{i}").standardized == f"baku{i}" for i in range(20)
        )
