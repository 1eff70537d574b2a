"""
Unit tests for quote resolution, ranking, the pipeline run and its outputs.
Run: python -m pytest test_pipeline.py -v
"""

import json
import math
import os
import sys

import numpy as np
import pytest

# Add parent dir to path
sys.path.insert(0, os.path.dirname(__file__))

from ftse_ranker import data_yahoo
from ftse_ranker.data_snapshot import SnapshotSource
from ftse_ranker.data_wiki import WikiSource
from ftse_ranker.errors import QuoteBatchFailed, SourceFormatChanged
from ftse_ranker.export_json import snapshot_to_payload, to_dataframe, write_snapshot
from ftse_ranker.fallback import fallback_quote, simple_hash
from ftse_ranker.models import Company
from ftse_ranker.pipeline import build_snapshot, run_pipeline
from ftse_ranker.quotes import resolve_quotes
from ftse_ranker.ranking import rank_companies
from ftse_ranker.summary import format_market_cap, print_summary
from test_sources import SNAPSHOT, make_wikitext, table_page, wiki_fetch

NOW = "2024-05-01T12:00:00+00:00"


# ═══════════════════════════════════════════════════
#  HELPER: Fake quote sources
# ═══════════════════════════════════════════════════

def hashed_cap(symbol):
    return 1e9 + simple_hash(symbol) % 100_000_000_000


class FakeQuotes:
    """quote_source(symbols) that records batches; optionally fails on call `fail_on`."""

    def __init__(self, fail_on=None, skip=()):
        self.calls   = []
        self.fail_on = fail_on
        self.skip    = set(skip)

    def __call__(self, symbols):
        self.calls.append(list(symbols))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise ConnectionError("HTTP 503 from quote endpoint")
        return [{"symbol": s, "regularMarketPrice": 10.0, "marketCap": hashed_cap(s)}
                for s in symbols if s not in self.skip]


def companies(n, candidate_at=None):
    return [Company(name=f"Company {i}", ticker=f"C{i:03d}.L", is_candidate=(i == candidate_at))
            for i in range(n)]


def wiki_source(n=95, with_candidate=False):
    return WikiSource(wiki_fetch(make_wikitext(n, with_candidate)))


# ═══════════════════════════════════════════════════
#  TEST: Quote resolver
# ═══════════════════════════════════════════════════

class TestResolveQuotes:
    def test_carried_mode_keeps_values(self):
        cos = [Company("A", "A.L", 1.0, 5.0), Company("B", "B.L")]
        res = resolve_quotes(cos)
        assert res.mode == "carried"
        assert res.companies == tuple(cos)
        assert res.unresolved == 1

    def test_live_batches(self):
        quotes = FakeQuotes()
        res = resolve_quotes(companies(7), quotes, batch_size=3, pause=0, now=NOW)
        assert [len(b) for b in quotes.calls] == [3, 3, 1]
        assert res.mode == "live"
        assert res.companies[0].market_cap == hashed_cap("C000.L")
        assert res.companies[0].updated_at == NOW

    def test_live_missing_quote_stays_unknown(self):
        res = resolve_quotes(companies(4), FakeQuotes(skip={"C002.L"}), batch_size=2, pause=0)
        assert res.mode == "live"
        assert np.isnan(res.companies[2].market_cap)
        assert res.unresolved == 1

    def test_live_symbols_matched_after_normalization(self):
        def lower_case_quotes(symbols):
            return [{"symbol": s.lower(), "regularMarketPrice": "12.5", "marketCap": "3e9"}
                    for s in symbols]
        res = resolve_quotes(companies(2), lower_case_quotes, pause=0)
        assert [c.market_cap for c in res.companies] == [3e9, 3e9]
        assert res.companies[0].price == 12.5

    def test_batch_failure_switches_everything_to_fallback(self):
        quotes = FakeQuotes(fail_on=2)
        cos = companies(7)
        res = resolve_quotes(cos, quotes, batch_size=3, pause=0)
        assert res.mode == "fallback"
        assert isinstance(res.error, QuoteBatchFailed)
        assert len(quotes.calls) == 2, "remaining batches must be skipped"
        for pos, c in enumerate(res.companies):
            assert (c.price, c.market_cap) == fallback_quote(c.ticker, pos)

    def test_inputs_not_mutated(self):
        cos = companies(3)
        resolve_quotes(cos, FakeQuotes(), pause=0)
        assert all(np.isnan(c.market_cap) for c in cos)


# ═══════════════════════════════════════════════════
#  TEST: Ranking engine
# ═══════════════════════════════════════════════════

def caps_to_companies(caps):
    return [Company(f"Co{i}", f"T{i}.L", market_cap=cap) for i, cap in enumerate(caps)]


class TestRanking:
    def test_descending_by_market_cap(self):
        ranked = rank_companies(caps_to_companies([10.0, 30.0, 20.0]))
        assert [c.market_cap for c in ranked] == [30.0, 20.0, 10.0]
        assert [c.rank for c in ranked] == [1, 2, 3]

    def test_unknown_caps_last_in_input_order(self):
        ranked = rank_companies(caps_to_companies([10.0, np.nan, 30.0, np.nan, 20.0]))
        assert [c.ticker for c in ranked] == ["T2.L", "T4.L", "T0.L", "T1.L", "T3.L"]

    def test_non_finite_treated_as_unknown(self):
        ranked = rank_companies(caps_to_companies([math.inf, 5.0]))
        assert [c.ticker for c in ranked] == ["T1.L", "T0.L"]

    def test_ties_are_stable(self):
        ranked = rank_companies(caps_to_companies([5.0, 5.0, 7.0, 5.0]))
        assert [c.ticker for c in ranked] == ["T2.L", "T0.L", "T1.L", "T3.L"]

    def test_ranks_contiguous(self):
        ranked = rank_companies(caps_to_companies(list(np.linspace(1, 1e9, 96))))
        assert [c.rank for c in ranked] == list(range(1, 97))

    def test_empty(self):
        assert rank_companies([]) == ()

    def test_flags_carried_through(self):
        cos = [Company("A", "A.L", market_cap=1.0), Company("B", "B.L", market_cap=2.0, is_candidate=True)]
        ranked = rank_companies(cos)
        assert ranked[0].is_candidate and ranked[0].rank == 1


# ═══════════════════════════════════════════════════
#  TEST: Pipeline scenarios
# ═══════════════════════════════════════════════════

class TestPipelineScenarios:
    def test_95_with_candidate(self):
        result = run_pipeline(wiki_source(94, with_candidate=True), FakeQuotes(), now=NOW, pause=0)
        snap = result.snapshot
        assert result.outcome == "success"
        assert len(snap) == 95
        caps = [c.market_cap for c in snap.companies]
        assert caps[0] == max(caps)
        assert [c.rank for c in snap.companies] == list(range(1, 96))
        cand = snap.candidate
        assert cand.ticker == "BGEO.L" and cand.is_candidate
        assert sum(c.is_candidate for c in snap.companies) == 1

    def test_95_without_candidate_gives_96(self):
        result = run_pipeline(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        snap = result.snapshot
        assert len(snap) == 96
        cand = snap.candidate
        assert cand.name == "Bank of Georgia Group"
        assert np.isfinite(cand.market_cap) and np.isfinite(cand.price)
        assert 1 <= cand.rank <= 96

    def test_failing_batch_reports_fallback(self):
        quotes = FakeQuotes(fail_on=3)
        result = run_pipeline(wiki_source(95), quotes, now=NOW, pause=0)
        assert result.outcome == "fallback"
        assert "fallback" in result.status
        assert "503" in result.status
        assert result.unresolved == 0
        # positions come from the deduplicated list, not the ranked order
        by_ticker = {c.ticker: c for c in result.snapshot.companies}
        assert by_ticker["C000.L"].market_cap == fallback_quote("C000.L", 0)[1]
        assert by_ticker["BGEO.L"].market_cap == fallback_quote("BGEO.L", 95)[1]

    def test_40_tickers_fails_without_snapshot(self):
        with pytest.raises(SourceFormatChanged):
            build_snapshot(wiki_source(40), FakeQuotes(), pause=0)
        result = run_pipeline(wiki_source(40), FakeQuotes(), pause=0)
        assert result.outcome == "error"
        assert result.snapshot is None
        assert isinstance(result.error, SourceFormatChanged)
        assert "only 40 distinct tickers" in result.status

    def test_carried_snapshot_partial(self, tmp_path):
        path = tmp_path / "ftse100.json"
        path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
        result = run_pipeline(SnapshotSource(str(path)), now=NOW)
        assert result.outcome == "partial"
        # UNK has no cap and the candidate stub has none either
        assert result.unresolved == 2
        assert result.snapshot.companies[0].ticker == "AZN.L"
        assert result.snapshot.source == SNAPSHOT["source"]

    def test_carried_snapshot_success(self, tmp_path):
        payload = {"companies": [
            {"name": "AstraZeneca", "ticker": "AZN", "price": 1, "marketCap": 2e11},
            {"name": "Bank of Georgia Group", "ticker": "BGEO.L", "price": 1, "marketCap": 2e9},
        ]}
        path = tmp_path / "ftse100.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        result = run_pipeline(SnapshotSource(str(path)), now=NOW)
        assert result.outcome == "success"
        assert result.snapshot.candidate.rank == 2

    def test_snapshot_timestamp(self):
        snap, resolution = build_snapshot(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        assert snap.updated_at == NOW
        assert resolution.mode == "live"


# ═══════════════════════════════════════════════════
#  TEST: Export + summary
# ═══════════════════════════════════════════════════

class TestExport:
    def test_payload_shape(self):
        snap, _ = build_snapshot(wiki_source(95), None, now=NOW)
        payload = snapshot_to_payload(snap, status="Partial data", unresolved=96)
        assert payload["count"] == 96
        row = payload["companies"][0]
        assert set(row) == {"rank", "name", "ticker", "price", "marketCap", "updatedAt", "isCandidate"}
        assert row["marketCap"] is None
        assert payload["status"] == "Partial data"

    def test_write_then_read_back(self, tmp_path):
        snap, _ = build_snapshot(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        path = tmp_path / "data" / "ftse100.json"
        write_snapshot(snap, str(path))
        assert os.listdir(tmp_path / "data") == ["ftse100.json"]

        rows = SnapshotSource(str(path)).acquire()
        assert [r.ticker for r in rows] == [c.ticker for c in snap.companies]
        assert [r.market_cap for r in rows] == [c.market_cap for c in snap.companies]

    def test_overwrite_replaces_file(self, tmp_path):
        path = tmp_path / "ftse100.json"
        path.write_text("old", encoding="utf-8")
        snap, _ = build_snapshot(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        write_snapshot(snap, str(path))
        assert json.loads(path.read_text(encoding="utf-8"))["count"] == 96

    def test_to_dataframe(self):
        snap, _ = build_snapshot(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        df = to_dataframe(snap.companies)
        assert len(df) == 96
        assert df["rank"].tolist() == list(range(1, 97))
        assert df["is_candidate"].sum() == 1


class TestSummary:
    def test_format_market_cap(self):
        assert format_market_cap(np.nan) == "—"
        assert format_market_cap(None) == "—"
        assert format_market_cap(2.5e11) == "£250.00B"
        assert format_market_cap(3.4e8) == "£340.0M"

    def test_prints_candidate_rank(self, capsys):
        result = run_pipeline(wiki_source(95), FakeQuotes(), now=NOW, pause=0)
        capsys.readouterr()
        print_summary(result, top=5)
        out = capsys.readouterr().out
        cand = result.snapshot.candidate
        assert f"#{cand.rank} of 96" in out
        assert "TOP 5 OF 96" in out

    def test_prints_error(self, capsys):
        result = run_pipeline(wiki_source(40), FakeQuotes(), pause=0)
        print_summary(result)
        assert "NO SNAPSHOT" in capsys.readouterr().out


# ═══════════════════════════════════════════════════
#  TEST: Yahoo quote source (yfinance monkeypatched)
# ═══════════════════════════════════════════════════

class _FastInfo:
    def __init__(self, price, cap, broken=False):
        self.values = {"lastPrice": price, "marketCap": cap}
        self.broken = broken

    def __getitem__(self, key):
        if self.broken:
            raise KeyError(key)
        return self.values[key]


class _Ticker:
    def __init__(self, symbol, broken):
        self.fast_info = _FastInfo(100.0, 1e10 + len(symbol), broken)


def fake_tickers(broken=()):
    class _Tickers:
        def __init__(self, symbols):
            self.tickers = {s: _Ticker(s, s in broken) for s in symbols.split()}
    return _Tickers


class TestYahoo:
    def test_fetch_quotes(self, monkeypatch):
        monkeypatch.setattr(data_yahoo.yf, "Tickers", fake_tickers())
        rows = data_yahoo.fetch_quotes(["AZN.L", "SHEL.L"])
        assert {r["symbol"] for r in rows} == {"AZN.L", "SHEL.L"}
        assert rows[0]["regularMarketPrice"] == 100.0

    def test_single_symbol_failure_skipped(self, monkeypatch):
        monkeypatch.setattr(data_yahoo.yf, "Tickers", fake_tickers(broken={"SHEL.L"}))
        rows = data_yahoo.fetch_quotes(["AZN.L", "SHEL.L"])
        assert [r["symbol"] for r in rows] == ["AZN.L"]

    def test_whole_batch_failure_raises(self, monkeypatch):
        monkeypatch.setattr(data_yahoo.yf, "Tickers", fake_tickers(broken={"AZN.L", "SHEL.L"}))
        with pytest.raises(RuntimeError):
            data_yahoo.fetch_quotes(["AZN.L", "SHEL.L"])

    def test_resolver_falls_back_on_yahoo_outage(self, monkeypatch):
        monkeypatch.setattr(data_yahoo.yf, "Tickers", fake_tickers(broken={"C000.L", "C001.L"}))
        res = resolve_quotes(companies(2), data_yahoo.fetch_quotes, pause=0)
        assert res.mode == "fallback"

    def test_empty_batch(self):
        assert data_yahoo.fetch_quotes([]) == []


# ═══════════════════════════════════════════════════
#  TEST: Command-line scripts
# ═══════════════════════════════════════════════════

class TestScripts:
    def test_run_tracker_json_export(self, tmp_path, capsys):
        import run_tracker
        src = tmp_path / "ftse100.json"
        src.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
        out = tmp_path / "ranked.json"
        code = run_tracker.main(["--source", "json", "--snapshot", str(src), "--export", str(out)])
        assert code == 0
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["companies"][0]["ticker"] == "AZN.L"
        assert payload["unresolved"] == 2

    def test_run_tracker_missing_snapshot_exits_1(self, tmp_path):
        import run_tracker
        assert run_tracker.main(["--snapshot", str(tmp_path / "missing.json")]) == 1

    def test_refresh_writes_only_on_success(self, tmp_path):
        from refresh_snapshot import refresh
        out = tmp_path / "ftse100.json"
        rows = [[f"C{i:03d}", f"Company {i}", "GBX", f"{1000 - i}", "100", ""] for i in range(95)]
        pages = {"p1": table_page(rows[:50]), "p2": table_page(rows[50:])}
        assert refresh(pages.__getitem__, str(out), urls=list(pages)) == 0
        assert json.loads(out.read_text(encoding="utf-8"))["count"] == 96

        broken = {"p1": {"headers": [], "rows": []}}
        out.write_text("previous", encoding="utf-8")
        assert refresh(broken.__getitem__, str(out), urls=list(broken)) == 1
        assert out.read_text(encoding="utf-8") == "previous"

    def test_refresh_keeps_previous_file_on_short_scrape(self, tmp_path):
        from refresh_snapshot import refresh
        out = tmp_path / "ftse100.json"
        out.write_text("previous", encoding="utf-8")
        rows = [[f"C{i:03d}", f"Company {i}", "GBX", f"{1000 - i}", "100", ""] for i in range(60)]
        pages = {"p1": table_page(rows)}
        assert refresh(pages.__getitem__, str(out), urls=list(pages)) == 1
        assert out.read_text(encoding="utf-8") == "previous"

        assert refresh(pages.__getitem__, str(out), urls=list(pages), allow_partial=True) == 0
        assert json.loads(out.read_text(encoding="utf-8"))["count"] == 61
