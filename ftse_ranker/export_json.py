# ftse_ranker/export_json.py — Snapshot JSON (the artifact the json source reads back)
import json, os, tempfile
import pandas as pd
from ftse_ranker.models import Snapshot

COLUMNS = ["rank", "ticker", "name", "price", "market_cap", "updated_at", "is_candidate"]


def _num(v):
    if v is None:
        return None
    try:
        f = float(v)
        return None if (f != f or f in (float("inf"), float("-inf"))) else f   # NaN → None
    except Exception:
        return None


def to_dataframe(companies) -> pd.DataFrame:
    rows = [{c: getattr(rc, c, None) for c in COLUMNS} for rc in companies]
    return pd.DataFrame(rows, columns=COLUMNS)


def snapshot_to_payload(snapshot: Snapshot, status: str = None, unresolved: int = None) -> dict:
    payload = {
        "source":    snapshot.source,
        "updatedAt": snapshot.updated_at,
        "count":     len(snapshot),
        "companies": [
            {
                "rank":        rc.rank,
                "name":        rc.name,
                "ticker":      rc.ticker,
                "price":       _num(rc.price),
                "marketCap":   _num(rc.market_cap),
                "updatedAt":   rc.updated_at,
                "isCandidate": rc.is_candidate,
            }
            for rc in snapshot.companies
        ],
    }
    if status is not None:
        payload["status"] = status
    if unresolved is not None:
        payload["unresolved"] = unresolved
    return payload


def write_snapshot(snapshot: Snapshot, path: str, status: str = None, unresolved: int = None) -> str:
    """Write the snapshot JSON atomically: temp file in the same dir, then os.replace."""
    payload = snapshot_to_payload(snapshot, status, unresolved)
    folder = os.path.dirname(os.path.abspath(path))
    os.makedirs(folder, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".ftse100-", suffix=".json", dir=folder)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    print(f"💾  Snapshot → {path}  ({len(snapshot)} constituents)")
    return path
