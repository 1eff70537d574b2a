# ============================================================
# FTSE 100 MARKET-CAP TRACKER
# Constituents (snapshot / Wikipedia / LSE table) → quotes → ranking
# Usage: python run_tracker.py --source wiki --quotes live --export out.json
# ============================================================
import argparse, sys
import pandas as pd
from ftse_ranker.config import CFG, SOURCE_KINDS
from ftse_ranker.export_json import write_snapshot
from ftse_ranker.pipeline import run_pipeline
from ftse_ranker.sources import make_source
from ftse_ranker.summary import print_summary

pd.set_option("display.max_columns", None)
pd.set_option("display.width", 160)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Rank FTSE 100 constituents by market cap.")
    p.add_argument("--source", choices=SOURCE_KINDS, default=CFG["default_source"],
                   help="constituent source (default: %(default)s)")
    p.add_argument("--snapshot", default=CFG["snapshot_path"],
                   help="snapshot path or URL for --source json (default: %(default)s)")
    p.add_argument("--quotes", choices=("live", "none"), default=None,
                   help="live = Yahoo Finance quotes; none = values carried by the source "
                        "(default: none for json, live otherwise)")
    p.add_argument("--top", type=int, default=20, help="rows to print (default: %(default)s)")
    p.add_argument("--export", metavar="PATH", help="write the ranked snapshot JSON here")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    quotes = args.quotes or ("none" if args.source == "json" else "live")

    quote_source = None
    if quotes == "live":
        from ftse_ranker.data_yahoo import fetch_quotes
        quote_source = fetch_quotes

    source = make_source(args.source, location=args.snapshot)
    try:
        result = run_pipeline(source, quote_source)
    finally:
        close = getattr(getattr(source, "scrape_page", None), "close", None)
        if close is not None:
            close()

    print_summary(result, top=args.top)
    if result.snapshot is None:
        return 1
    if args.export:
        write_snapshot(result.snapshot, args.export, result.status, result.unresolved)
    return 0


if __name__ == "__main__":
    sys.exit(main())
