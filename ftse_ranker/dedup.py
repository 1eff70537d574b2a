# ftse_ranker/dedup.py — Deduplication + candidate injection
from ftse_ranker.config import CFG
from ftse_ranker.models import Company
from ftse_ranker.tickers import normalize_ticker
from ftse_ranker.utils import _safe


def deduplicate(raws: list, candidate: dict = None) -> list:
    """
    Merge raw constituents into Companies keyed by normalized ticker.

    First-seen wins: the earliest record (the most authoritative source's
    spelling and carried values) is kept, later duplicates are ignored.
    The candidate is flagged when present and appended as a stub otherwise,
    so exactly one Company in the result has is_candidate=True.
    """
    candidate = candidate or CFG["candidate"]
    cand_key  = normalize_ticker(candidate["ticker"])

    by_ticker, dropped, duplicates = {}, 0, 0
    for raw in raws:
        key = normalize_ticker(raw.ticker)
        if not key:
            dropped += 1
            continue
        if key in by_ticker:
            duplicates += 1
            continue
        by_ticker[key] = Company(
            name=(raw.name or "").strip() or key,
            ticker=key,
            price=_safe(raw.price),
            market_cap=_safe(raw.market_cap),
            updated_at=raw.updated_at,
            is_candidate=(key == cand_key),
        )

    if dropped:
        print(f"  ⚠️  Dropped {dropped} rows without a usable ticker")
    if duplicates:
        print(f"  ℹ️  Ignored {duplicates} duplicate tickers (first seen wins)")

    companies = list(by_ticker.values())
    if cand_key not in by_ticker:
        print(f"  ➕ Candidate {cand_key} not in source — added")
        companies.append(Company(name=candidate["name"], ticker=cand_key, is_candidate=True))
    return companies
