# ftse_ranker/summary.py — Console summary output
from ftse_ranker.export_json import to_dataframe
from ftse_ranker.utils import is_known


def format_market_cap(v) -> str:
    """£ with B/M scaling; '—' when unknown."""
    if not is_known(v):
        return "—"
    v = float(v)
    if abs(v) >= 1e9:
        return f"£{v / 1e9:.2f}B"
    if abs(v) >= 1e6:
        return f"£{v / 1e6:.1f}M"
    return f"£{v:,.0f}"


def print_summary(result, top: int = 20):
    print("\n" + "=" * 65)
    if result.snapshot is None:
        print(f"  NO SNAPSHOT — {result.status}")
        print("=" * 65)
        return

    snap = result.snapshot
    print(f"  TOP {min(top, len(snap))} OF {len(snap)} CONSTITUENTS  ({snap.source})")
    print("=" * 65)
    df = to_dataframe(snap.companies).head(top).copy()
    df["market_cap"] = df["market_cap"].map(format_market_cap)
    df["is_candidate"] = df["is_candidate"].map(lambda x: "★" if x else "")
    print(df[["rank", "ticker", "name", "price", "market_cap", "is_candidate"]]
          .to_string(index=False))

    cand = snap.candidate
    if cand is not None:
        print(f"\n  Candidate {cand.name} ({cand.ticker}): "
              f"#{cand.rank} of {len(snap)} — {format_market_cap(cand.market_cap)}")
    print(f"  Status: {result.status}")
    if result.unresolved:
        print(f"  ⚠️  {result.unresolved} constituents without market cap")
