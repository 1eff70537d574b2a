# ftse_ranker/quotes.py — Quote resolution: live batches, carried values, or fallback
import time
from dataclasses import dataclass
from tqdm import tqdm
from ftse_ranker.config import CFG
from ftse_ranker.errors import QuoteBatchFailed
from ftse_ranker.fallback import fallback_quote
from ftse_ranker.tickers import normalize_ticker
from ftse_ranker.utils import _safe, utc_now


@dataclass(frozen=True)
class QuoteResolution:
    companies: tuple
    mode:      str
    error:     "QuoteBatchFailed | None" = None

    @property
    def unresolved(self) -> int:
        return sum(1 for c in self.companies if not c.has_market_cap)


def _batches(items: list, size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def fetch_live(symbols: list, quote_source, batch_size: int, pause: float) -> dict:
    """symbol → quote row. The first failing batch raises QuoteBatchFailed."""
    found = {}
    batches = list(_batches(symbols, batch_size))
    for i, batch in enumerate(tqdm(batches, desc="Live quotes")):
        try:
            rows = quote_source(batch) or []
        except Exception as e:
            raise QuoteBatchFailed(batch, e) from e
        for row in rows:
            key = normalize_ticker(row.get("symbol"))
            if key:
                found.setdefault(key, row)
        if pause and i < len(batches) - 1:
            time.sleep(pause)
    return found


def apply_fallback(companies: list) -> tuple:
    """Synthetic values for every company, by its position in the deduplicated list."""
    out = []
    for position, c in enumerate(companies):
        price, market_cap = fallback_quote(c.ticker, position)
        out.append(c.with_quote(price, market_cap))
    return tuple(out)


def resolve_quotes(companies: list, quote_source=None, batch_size: int = None,
                   pause: float = None, now: str = None) -> QuoteResolution:
    """
    Attach price / market cap to every company.

    quote_source None  → carried: keep whatever the source reported.
    otherwise          → live: sequential batches; on any batch failure the whole
                         snapshot switches to fallback values (never mixed).
    """
    companies = list(companies)
    if quote_source is None:
        return QuoteResolution(tuple(companies), "carried")

    batch_size = batch_size or CFG["quote_batch_size"]
    pause      = CFG["sleep_quotes"] if pause is None else pause
    try:
        found = fetch_live([c.ticker for c in companies], quote_source, batch_size, pause)
    except QuoteBatchFailed as e:
        print(f"  ⚠️  {e} — using fallback values for all {len(companies)} constituents")
        return QuoteResolution(apply_fallback(companies), "fallback", e)

    ts = now or utc_now()
    out = []
    for c in companies:
        row = found.get(c.ticker)
        if row is None:
            out.append(c.with_quote(float("nan"), float("nan")))
            continue
        out.append(c.with_quote(_safe(row.get("regularMarketPrice")),
                                _safe(row.get("marketCap")), ts))
    res = QuoteResolution(tuple(out), "live")
    print(f"✅  Live quotes: {len(companies) - res.unresolved}/{len(companies)} resolved")
    return res
