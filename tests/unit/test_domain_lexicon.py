"""Financial lexicon lookups, suggestions and runtime additions."""

from __future__ import annotations

import threading

import pytest

from dompetku.ai.lexicon import DEFAULT_TERMS, DomainLexicon


@pytest.fixture()
def lexicon() -> DomainLexicon:
    return DomainLexicon()


class TestReads:
    def test_lookup_is_case_insensitive(self, lexicon):
        term = lexicon.lookup("INVESTASI")
        assert term is not None
        assert term.key == "investasi"
        assert term.definition.startswith("Penanaman modal")
        assert "investasi saham" in term.examples

    def test_lookup_unknown(self, lexicon):
        assert lexicon.lookup("blockchain") is None

    def test_synonyms(self, lexicon):
        assert lexicon.synonyms_of("utang") == ["pinjaman", "kredit", "debt", "loan", "kewajiban"]
        assert lexicon.synonyms_of("tidak_ada") == []

    def test_category_of_uses_first_listing(self, lexicon):
        assert lexicon.category_of("saham") == "investasi"
        assert lexicon.category_of("cicilan") == "pengeluaran_rutin"
        assert lexicon.category_of("blockchain") is None

    def test_term_carries_its_category(self, lexicon):
        assert lexicon.lookup("deposito").category == "investasi"
        assert lexicon.lookup("pajak").category is None

    def test_categories_and_members(self, lexicon):
        assert "investasi" in lexicon.categories()
        assert "emas" in lexicon.terms_in_category("investasi")

    def test_search_matches_definition_and_examples(self, lexicon):
        keys = [term.key for term in lexicon.search("darurat")]
        assert keys == ["dana_darurat"]

    def test_contains_and_len(self, lexicon):
        assert "saldo" in lexicon
        assert 42 not in lexicon
        assert len(lexicon) == len(DEFAULT_TERMS)


class TestSuggest:
    def test_typo_suggests_the_term_first(self, lexicon):
        suggestions = lexicon.suggest("investsi")
        assert suggestions[0].word == "investasi"
        assert suggestions[0].term.key == "investasi"
        scores = [s.similarity for s in suggestions]
        assert scores == sorted(scores, reverse=True)

    def test_nothing_similar(self, lexicon):
        assert lexicon.suggest("qqqq") == []

    def test_threshold_is_strict(self):
        tables = {"terms": {"ab": ("definisi", (), ())}, "synonyms": {}, "categories": {}}
        # similarity("ac", "ab") == 0.5
        assert DomainLexicon(**tables, suggestion_threshold=0.5).suggest("ac") == []
        assert [s.word for s in DomainLexicon(**tables).suggest("ac")] == ["ab"]

    def test_limit(self, lexicon):
        assert len(lexicon.suggest("saham", limit=2)) <= 2

    def test_ties_follow_table_order(self):
        # every candidate is one edit away from "abz"
        lexicon = DomainLexicon(
            terms={"abx": ("definisi", (), ()), "aby": ("definisi", (), ())},
            synonyms={"abx": ["abw"]},
            categories={},
        )
        assert [s.word for s in lexicon.suggest("abz")] == ["abx", "abw", "aby"]

        reordered = DomainLexicon(
            terms={"aby": ("definisi", (), ()), "abx": ("definisi", (), ())},
            synonyms={"abx": ["abw"]},
            categories={},
        )
        assert [s.word for s in reordered.suggest("abz")] == ["aby", "abx", "abw"]


class TestWrites:
    def test_add_term_with_category(self, lexicon):
        entry = lexicon.add_term(
            "PayLater",
            "Fasilitas beli sekarang bayar nanti",
            examples=("paylater e-commerce",),
            category="utang",
        )
        assert entry.key == "paylater"
        assert entry.category == "utang"
        assert lexicon.lookup("paylater") == entry
        assert "paylater" in lexicon.terms_in_category("utang")
        assert len(lexicon) == len(DEFAULT_TERMS) + 1

    def test_add_term_rejects_empty_key(self, lexicon):
        with pytest.raises(ValueError):
            lexicon.add_term("  ", "definisi")

    def test_add_synonyms_skips_duplicates(self, lexicon):
        merged = lexicon.add_synonyms("utang", ["pinjol", "kredit"])
        assert merged == ["pinjaman", "kredit", "debt", "loan", "kewajiban", "pinjol"]
        assert lexicon.synonyms_of("utang") == merged

    def test_readers_never_see_partial_entries(self, lexicon):
        errors: list[Exception] = []
        original_synonyms = lexicon.synonyms_of("utang")

        def writer(index: int) -> None:
            try:
                lexicon.add_term(
                    f"istilah{index}",
                    f"definisi {index}",
                    examples=(f"contoh {index}",),
                    category="baru",
                )
                lexicon.add_synonyms("utang", [f"sinonim{index}"])
            except Exception as e:  # pragma: no cover
                errors.append(e)

        def reader() -> None:
            try:
                for _ in range(50):
                    for index in range(20):
                        term = lexicon.lookup(f"istilah{index}")
                        if term is not None:
                            assert term.definition == f"definisi {index}"
                            assert term.examples == (f"contoh {index}",)
                            assert term.category == "baru"
                    assert lexicon.synonyms_of("utang")[:5] == original_synonyms
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(20)]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sorted(lexicon.terms_in_category("baru")) == sorted(f"istilah{i}" for i in range(20))
        assert set(lexicon.synonyms_of("utang")) >= {f"sinonim{i}" for i in range(20)}
