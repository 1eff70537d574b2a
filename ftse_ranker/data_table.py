# ftse_ranker/data_table.py — Constituents from a rendered (paginated) HTML table
from bs4 import BeautifulSoup
from tqdm import tqdm
from ftse_ranker.config import CFG, LSE_URLS, TABLE_COLUMNS
from ftse_ranker.errors import SourceFormatChanged
from ftse_ranker.models import RawConstituent
from ftse_ranker.utils import clean_number, utc_now


def extract_first_table(html: str) -> dict:
    """Rendered page → {'headers': [lower-cased th text], 'rows': [[td text, ...], ...]}."""
    soup  = BeautifulSoup(html or "", "html.parser")
    table = soup.find("table")
    if table is None:
        return {"headers": [], "rows": []}
    head = table.find("thead")
    header_cells = head.find_all("th") if head else table.find_all("th")
    headers = [th.get_text(" ", strip=True).lower() for th in header_cells]
    body = table.find("tbody") or table
    rows = []
    for tr in body.find_all("tr"):
        cells = tr.find_all("td")
        if cells:
            rows.append([td.get_text(" ", strip=True) for td in cells])
    return {"headers": headers, "rows": rows}


def map_columns(headers: list) -> dict:
    """Header texts → {field: column index}; later headers win, as on the live page."""
    colmap = {}
    for idx, header in enumerate(headers):
        text = (header or "").strip().lower()
        for field, needles in TABLE_COLUMNS.items():
            if any(n in text for n in needles):
                colmap[field] = idx
    return colmap


def _pick(row: list, colmap: dict, field: str):
    idx = colmap.get(field)
    if idx is None or idx >= len(row):
        return None
    value = (row[idx] or "").strip()
    return value or None


def parse_table_page(page: dict, updated_at: str = None) -> list:
    """One scraped page → RawConstituents; rows without a company name are dropped."""
    headers = page.get("headers") or []
    if not headers:
        raise SourceFormatChanged("table", "no table headers on page")
    colmap = map_columns(headers)

    out = []
    for row in page.get("rows") or []:
        name = _pick(row, colmap, "name") or (row[0].strip() if row and row[0] else None)
        if not name:
            continue
        out.append(RawConstituent(
            name=name,
            ticker=_pick(row, colmap, "ticker"),
            price=clean_number(_pick(row, colmap, "price")),
            market_cap=clean_number(_pick(row, colmap, "market_cap")),
            updated_at=updated_at,
        ))
    return out


class TableSource:
    """Constituents scraped page by page through an injected scrape_page(url)."""

    name = "table"

    def __init__(self, scrape_page, urls: list = None, min_count: int = None):
        self.scrape_page = scrape_page
        self.urls        = list(urls or LSE_URLS)
        self.min_count   = CFG["min_constituents"] if min_count is None else min_count
        self.partial     = False

    @property
    def label(self) -> str:
        return self.urls[0] if self.urls else "table"

    def acquire(self) -> list:
        updated_at = utc_now()
        by_key = {}
        for url in tqdm(self.urls, desc="Constituent pages"):
            try:
                rows = parse_table_page(self.scrape_page(url), updated_at)
            except SourceFormatChanged as e:
                raise SourceFormatChanged("table", f"{url}: {e.message}") from e
            for r in rows:
                key = f"{(r.ticker or '').upper()}|{r.name.upper()}"
                by_key.setdefault(key, r)
            print(f"  Scraped {len(rows)} rows from {url}")

        companies = list(by_key.values())
        if not companies:
            raise SourceFormatChanged("table", "no constituent rows on any page")
        self.partial = len(companies) < self.min_count
        if self.partial:
            print(f"  ⚠️  Expected ~100 constituents, got {len(companies)} — "
                  f"continuing with partial data (pagination/rendering may have limited results)")
        else:
            print(f"✅  {len(companies)} constituents (rendered table)")
        return companies
