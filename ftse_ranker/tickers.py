# ftse_ranker/tickers.py — Ticker normalization (the identity key everywhere)
from ftse_ranker.config import CFG


def normalize_ticker(raw, suffix: str = None) -> str:
    """
    'bt.a ' → 'BT-A.L', 'AZN' → 'AZN.L', 'AZN.L' → 'AZN.L'.
    Missing or blank input gives '' instead of raising. Idempotent.
    """
    suffix = (suffix or CFG["ticker_suffix"]).upper()
    if not isinstance(raw, str):
        return ""
    t = raw.strip().upper().rstrip(".")
    if t.endswith(suffix):
        t = t[: -len(suffix)].rstrip(".")
    if not t:
        return ""
    # Class shares use '-' on Yahoo (BT.A → BT-A)
    t = t.replace(".", "-")
    return f"{t}{suffix}"
