# ftse_ranker/pipeline.py — Main orchestration
from dataclasses import dataclass
from datetime import datetime
from ftse_ranker.config import CFG
from ftse_ranker.dedup import deduplicate
from ftse_ranker.errors import PipelineError
from ftse_ranker.models import Snapshot
from ftse_ranker.quotes import resolve_quotes
from ftse_ranker.ranking import rank_companies
from ftse_ranker.utils import utc_now


@dataclass(frozen=True)
class PipelineResult:
    snapshot:   "Snapshot | None"
    status:     str
    outcome:    str
    unresolved: int = 0
    error:      "PipelineError | None" = None


def _source_label(source) -> str:
    return getattr(source, "label", None) or getattr(source, "name", type(source).__name__)


def build_snapshot(source, quote_source=None, candidate: dict = None, now: str = None,
                   batch_size: int = None, pause: float = None) -> tuple:
    """
    source → (Snapshot, QuoteResolution). Source errors propagate unchanged;
    a failed live quote batch is absorbed as fallback mode.
    """
    now = now or utc_now()

    print("\n[1/4]  Constituents...")
    raws = source.acquire()

    print("\n[2/4]  Deduplicate + candidate...")
    companies = deduplicate(raws, candidate or CFG["candidate"])

    print(f"\n[3/4]  Quotes ({len(companies)} constituents)...")
    resolution = resolve_quotes(companies, quote_source, batch_size, pause, now)

    print("\n[4/4]  Ranking...")
    ranked = rank_companies(resolution.companies)
    return Snapshot(source=_source_label(source), updated_at=now, companies=ranked), resolution


def _status(snapshot: Snapshot, mode: str, error=None) -> tuple:
    n, unresolved = len(snapshot), snapshot.unresolved
    if mode == "fallback":
        return "fallback", (f"Live quotes unavailable ({error}); "
                            f"showing fallback values for all {n} constituents")
    if unresolved:
        what = "carried" if mode == "carried" else "live"
        return "partial", f"Partial data: {unresolved} of {n} constituents without {what} market cap"
    if mode == "carried":
        return "success", f"Loaded {n} constituents with market caps from {snapshot.source}"
    return "success", f"Live quotes for all {n} constituents"


def run_pipeline(source, quote_source=None, candidate: dict = None, now: str = None,
                 batch_size: int = None, pause: float = None) -> PipelineResult:
    """Never raises PipelineError: a fatal source failure becomes outcome 'error' with no snapshot."""
    print("=" * 65)
    print(f"  FTSE 100 MARKET-CAP RANKING — source: {getattr(source, 'name', '?')}")
    print(f"  {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    print("=" * 65)

    try:
        snapshot, resolution = build_snapshot(source, quote_source, candidate, now,
                                              batch_size, pause)
    except PipelineError as e:
        print(f"  ❌  {e}")
        return PipelineResult(None, f"Error: {e}", "error", 0, e)

    outcome, status = _status(snapshot, resolution.mode, resolution.error)
    marker = "✅" if outcome == "success" else "⚠️ "
    print(f"\n{marker}  {status}")
    return PipelineResult(snapshot, status, outcome, snapshot.unresolved, resolution.error)
