# ftse_ranker/data_yahoo.py — Yahoo Finance live quotes (parallel within a batch)
import yfinance as yf
from concurrent.futures import ThreadPoolExecutor
from ftse_ranker.config import CFG
from ftse_ranker.utils import _safe


def _quote_one(tickers: "yf.Tickers", symbol: str) -> dict:
    fi = tickers.tickers[symbol].fast_info
    return {
        "symbol":             symbol,
        "regularMarketPrice": _safe(fi["lastPrice"]),
        "marketCap":          _safe(fi["marketCap"]),
    }


def fetch_quotes(symbols: list) -> list:
    """
    Quote rows for one batch of Yahoo symbols.

    Individual symbols that fail are left out (their values stay unknown);
    only a batch in which every symbol fails is raised, so the resolver
    switches the whole snapshot to fallback values.
    """
    symbols = [s for s in symbols if s]
    if not symbols:
        return []
    tickers = yf.Tickers(" ".join(symbols))

    rows, errors = [], []
    with ThreadPoolExecutor(max_workers=CFG["max_workers_yf"]) as executor:
        futures = {s: executor.submit(_quote_one, tickers, s) for s in symbols}
        for symbol, future in futures.items():
            try:
                rows.append(future.result())
            except Exception as e:
                errors.append((symbol, e))

    if errors and not rows:
        symbol, err = errors[0]
        raise RuntimeError(f"Yahoo returned no quotes for batch ({symbol}: {err})")
    if errors:
        print(f"  ⚠️  Yahoo: {len(errors)}/{len(symbols)} symbols without quote")
    return rows
