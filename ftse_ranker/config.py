# ftse_ranker/config.py — Configuration, sources, constants
import os

# ════════════════════════════════════════════════════════════
#  CONFIGURATION
# ════════════════════════════════════════════════════════════
CFG = {
    "candidate": {
        "name":   "Bank of Georgia Group",
        "ticker": "BGEO.L",
    },
    "ticker_suffix":      ".L",
    "min_constituents":   90,       # sanity floor against silent upstream format drift
    "quote_batch_size":   25,
    "sleep_quotes":       0.35,
    "max_workers_yf":     8,
    "http_timeout":       15,
    "page_timeout":       120,      # seconds, per page load
    "page_settle":        5.0,      # client-rendered tables populate after load
    "snapshot_path":      os.path.join("data", "ftse100.json"),
    "default_source":     "json",
}

# Deterministic fallback curve (see ftse_ranker/fallback.py)
FALLBACK = {
    "base_cap":        180_000_000_000,
    "cap_decay_step":    7_200_000_000,
    "cap_jitter":          450_000_000,
    "floor_cap":         5_000_000_000,
    "floor_jitter":        350_000_000,
    "base_price":                100.0,
    "price_jitter":               2400,
}
assert FALLBACK["cap_jitter"] < FALLBACK["cap_decay_step"], "Jitter must not reorder the curve"
assert FALLBACK["floor_cap"] > 0, "Fallback floor must stay positive"

# ════════════════════════════════════════════════════════════
#  SOURCES
# ════════════════════════════════════════════════════════════
WIKI_API_URL = "https://en.wikipedia.org/w/api.php"
WIKI_PAGE    = "FTSE_100_Index"
WIKI_SECTION = "Constituents"
WIKI_PARAMS  = {
    "action":        "parse",
    "page":          WIKI_PAGE,
    "prop":          "wikitext",
    "format":        "json",
    "formatversion": 2,
}

LSE_BASE_URL = "https://www.londonstockexchange.com/indices/ftse-100/constituents/table"
LSE_URLS = [LSE_BASE_URL] + [f"{LSE_BASE_URL}?page={n}" for n in range(2, 6)]

WIKI_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-GB,en;q=0.9",
}

# Header text (lower-cased, substring match) → field
TABLE_COLUMNS = {
    "name":       ("company",),
    "ticker":     ("ticker", "epic"),
    "price":      ("price",),
    "market_cap": ("market cap",),
}

SOURCE_KINDS = ("json", "wiki", "table")
assert CFG["default_source"] in SOURCE_KINDS
