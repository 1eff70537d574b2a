# ftse_ranker/utils.py — Shared utility functions
import re
from datetime import datetime, timezone
import numpy as np

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def _safe(val, default=np.nan):
    """Safely convert value to float, returning default for None/NaN/inf/non-numeric."""
    if val is None or isinstance(val, bool):
        return default
    try:
        f = float(val)
        return default if not np.isfinite(f) else f
    except Exception:
        return default


def clean_number(raw, default=np.nan):
    """Cell text → float: '1.2e11' → 1.2e11, '1,234.50p' → 1234.5, '' / 'N/A' → default."""
    if raw is None:
        return default
    if not isinstance(raw, str):
        return _safe(raw, default)
    value = _safe(raw.strip())
    if not np.isnan(value):
        return value
    cleaned = _NON_NUMERIC.sub("", raw.replace(",", ""))
    if cleaned in ("", "-", ".", "-."):
        return default
    return _safe(cleaned, default)


def is_known(val) -> bool:
    return not np.isnan(_safe(val))


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
