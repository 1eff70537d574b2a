"""Scrape the five LSE constituent pages and rewrite data/ftse100.json (only after a full successful run)."""
import argparse, sys
from ftse_ranker.browser import SeleniumPageScraper
from ftse_ranker.config import CFG, LSE_URLS
from ftse_ranker.data_table import TableSource
from ftse_ranker.errors import PipelineError
from ftse_ranker.export_json import write_snapshot
from ftse_ranker.pipeline import build_snapshot


def refresh(scrape_page, out_path: str, urls: list = None, allow_partial: bool = False) -> int:
    """Carried prices only; the existing snapshot is left untouched on failure or a short scrape."""
    source = TableSource(scrape_page, urls or LSE_URLS)
    try:
        snapshot, _ = build_snapshot(source)
    except PipelineError as e:
        print(f"  ❌  Refresh failed, {out_path} left unchanged: {e}")
        return 1
    if source.partial and not allow_partial:
        print(f"  ❌  Fewer than {source.min_count} constituents scraped, {out_path} left unchanged "
              f"(use --allow-partial to write anyway)")
        return 1
    write_snapshot(snapshot, out_path)
    return 0


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--out", default=CFG["snapshot_path"])
    p.add_argument("--settle", type=float, default=CFG["page_settle"],
                   help="seconds to wait after each page load")
    p.add_argument("--allow-partial", action="store_true",
                   help=f"write the snapshot even with fewer than {CFG['min_constituents']} rows")
    p.add_argument("--show-browser", action="store_true", help="run Chrome with a window")
    args = p.parse_args(argv)

    with SeleniumPageScraper(settle=args.settle, headless=not args.show_browser) as scrape_page:
        return refresh(scrape_page, args.out, allow_partial=args.allow_partial)


if __name__ == "__main__":
    sys.exit(main())
