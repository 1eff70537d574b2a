# ftse_ranker/data_snapshot.py — Constituents from a cached JSON snapshot
import json, os
from ftse_ranker.config import CFG
from ftse_ranker.errors import SourceUnavailable, SourceFormatChanged
from ftse_ranker.models import RawConstituent
from ftse_ranker.utils import clean_number


def parse_snapshot(payload) -> list:
    """Snapshot JSON → RawConstituents, coercing numeric strings ('1,234.5' → 1234.5)."""
    companies = payload.get("companies") if isinstance(payload, dict) else None
    if not isinstance(companies, list) or not companies:
        raise SourceFormatChanged("json", "payload is missing companies[]")

    default_ts = payload.get("updatedAt")
    out, skipped = [], 0
    for row in companies:
        name = row.get("name") if isinstance(row, dict) else None
        if not isinstance(name, str) or not name.strip():
            skipped += 1
            continue
        out.append(RawConstituent(
            name=name.strip(),
            ticker=row.get("ticker"),
            price=clean_number(row.get("price")),
            market_cap=clean_number(row.get("marketCap")),
            updated_at=row.get("updatedAt") or default_ts,
        ))
    if skipped:
        print(f"  ⚠️  Snapshot: skipped {skipped} rows without a name")
    if not out:
        raise SourceFormatChanged("json", "no usable rows in companies[]")
    return out


def load_snapshot_file(path: str) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise SourceUnavailable(path, str(e)) from e
    except ValueError as e:
        raise SourceFormatChanged(path, f"invalid JSON: {e}") from e


class SnapshotSource:
    """Constituents (with carried prices) from a local file or URL snapshot."""

    name = "json"

    def __init__(self, location: str = None, fetch_json=None):
        self.location   = location or CFG["snapshot_path"]
        self.fetch_json = fetch_json
        self.payload_source = None

    @property
    def label(self) -> str:
        return self.payload_source or self.location

    def _load(self):
        if self.location.startswith(("http://", "https://")):
            if self.fetch_json is None:
                raise SourceUnavailable(self.location, "no HTTP transport configured")
            return self.fetch_json(self.location, None)
        if not os.path.exists(self.location):
            raise SourceUnavailable(self.location, "snapshot file not found")
        return load_snapshot_file(self.location)

    def acquire(self) -> list:
        payload = self._load()
        rows = parse_snapshot(payload)
        self.payload_source = payload.get("source") or None
        print(f"✅  {len(rows)} constituents (snapshot {self.location})")
        return rows
