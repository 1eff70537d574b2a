# ftse_ranker/__init__.py — FTSE 100 constituent ranker
#
# Module layout:
#   config.py        — CFG, source URLs, fallback curve, table header map
#   errors.py        — PipelineError + SourceUnavailable / SourceFormatChanged / QuoteBatchFailed
#   utils.py         — _safe(), clean_number() shared helpers
#   models.py        — RawConstituent, Company, RankedCompany, Snapshot
#   tickers.py       — normalize_ticker()
#   data_wiki.py     — Wikipedia wikitext constituents table
#   data_table.py    — rendered HTML table (paginated)
#   data_snapshot.py — JSON snapshot (file or URL)
#   sources.py       — make_source(kind)
#   fetch.py         — requests session + get_json
#   browser.py       — Selenium page scraper (optional extra)
#   dedup.py         — deduplication + candidate injection
#   data_yahoo.py    — Yahoo Finance live quotes
#   fallback.py      — deterministic synthetic quotes
#   quotes.py        — resolve_quotes (live / carried / fallback)
#   ranking.py       — rank_companies
#   pipeline.py      — build_snapshot / run_pipeline
#   export_json.py   — snapshot JSON export (atomic write)
#   summary.py       — console summary output

__version__ = "1.0"
