# ftse_ranker/sources.py — Source adapter selection by configuration
from ftse_ranker.config import CFG, SOURCE_KINDS
from ftse_ranker.data_snapshot import SnapshotSource
from ftse_ranker.data_table import TableSource
from ftse_ranker.data_wiki import WikiSource


def make_source(kind: str = None, fetch_json=None, scrape_page=None,
                location: str = None, min_count: int = None):
    """
    'json'  → SnapshotSource(location, fetch_json)
    'wiki'  → WikiSource(fetch_json)
    'table' → TableSource(scrape_page)

    Capabilities that a kind needs and the caller did not inject get the
    default transport (requests session / headless Chrome).
    """
    kind = (kind or CFG["default_source"]).lower()
    if kind not in SOURCE_KINDS:
        raise ValueError(f"Unknown source kind '{kind}' (expected one of {', '.join(SOURCE_KINDS)})")

    if kind in ("json", "wiki") and fetch_json is None:
        from ftse_ranker.fetch import get_json
        fetch_json = get_json

    if kind == "json":
        return SnapshotSource(location, fetch_json)
    if kind == "wiki":
        return WikiSource(fetch_json, min_count=min_count)

    if scrape_page is None:
        from ftse_ranker.browser import SeleniumPageScraper
        scrape_page = SeleniumPageScraper()
    return TableSource(scrape_page, min_count=min_count)
