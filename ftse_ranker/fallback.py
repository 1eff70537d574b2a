# ftse_ranker/fallback.py — Deterministic synthetic quotes
#
# Used for the whole snapshot when live quotes cannot be fetched. Pure functions
# of (ticker, position): the same pair always yields the same values, so a
# fallback table is stable across reloads and in tests.
from ftse_ranker.config import FALLBACK


def simple_hash(text: str) -> int:
    """32-bit shift-and-add string hash ((h << 5) - h + code), absolute value."""
    h = 0
    for ch in text or "":
        h = (h << 5) - h + ord(ch)
        h = (h + 2**31) % 2**32 - 2**31    # wrap to signed 32-bit
    return abs(h)


def fallback_quote(ticker: str, position: int, params: dict = None) -> tuple:
    """Return (price, market_cap) for the constituent at ordinal `position`."""
    p = params or FALLBACK
    seed = simple_hash(ticker)
    market_cap = max(
        p["base_cap"] - position * p["cap_decay_step"] - seed % p["cap_jitter"],
        p["floor_cap"] + seed % p["floor_jitter"],
    )
    price = round(p["base_price"] + (seed % p["price_jitter"]) / 10, 2)
    return float(price), float(market_cap)
