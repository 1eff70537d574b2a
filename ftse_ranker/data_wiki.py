# ftse_ranker/data_wiki.py — FTSE 100 constituents from Wikipedia wikitext
import re
from ftse_ranker.config import CFG, WIKI_API_URL, WIKI_PARAMS, WIKI_SECTION
from ftse_ranker.errors import SourceFormatChanged
from ftse_ranker.models import RawConstituent
from ftse_ranker.tickers import normalize_ticker

_HEADER_RE   = re.compile(r"^(=+)\s*(.*?)\s*\1\s*$", re.M)
_LINK_RE     = re.compile(r"\[\[([^\[\]|]*)(?:\|([^\[\]]*))?\]\]")
_TEMPLATE_RE = re.compile(r"\{\{([^{}]*)\}\}")
_REF_RE      = re.compile(r"<ref[^>]*/>|<ref[^>]*>.*?</ref>", re.S | re.I)
_TAG_RE      = re.compile(r"<[^>]+>")
_PREFIX_RE   = re.compile(r"^\s*:?[A-Za-z]+:\s*")
_ATTRS_RE    = re.compile(r'^[^\[\]{}|]*=[^\[\]{}|]*\|(?!\|)')


# ════════════════════════════════════════════════════════════
#  MARKUP HELPERS
# ════════════════════════════════════════════════════════════

def extract_section(wikitext: str, title: str = WIKI_SECTION) -> "str | None":
    """Body of the `== title ==` section, up to the next header of the same or higher level."""
    headers = list(_HEADER_RE.finditer(wikitext or ""))
    for i, m in enumerate(headers):
        if m.group(2).strip().lower() != title.lower():
            continue
        level = len(m.group(1))
        end = len(wikitext)
        for nxt in headers[i + 1:]:
            if len(nxt.group(1)) <= level:
                end = nxt.start()
                break
        return wikitext[m.end():end]
    return None


def _link_label(match) -> str:
    target, label = match.group(1), match.group(2)
    if label:
        return label
    return _PREFIX_RE.sub("", target)


def _template_value(match) -> str:
    parts = match.group(1).split("|")
    return parts[-1] if len(parts) > 1 else ""


def strip_markup(text: str) -> str:
    """Plain text of a wikitext cell: links → labels, {{T|X}} → X, no italics/refs/tags/prefixes."""
    text = _REF_RE.sub("", text or "")
    text = _TAG_RE.sub("", text)
    text = _TEMPLATE_RE.sub(_template_value, text)
    text = _LINK_RE.sub(_link_label, text)
    text = text.replace("'''", "").replace("''", "")
    text = _PREFIX_RE.sub("", text)
    return " ".join(text.split())


def _row_cells(row: str) -> list:
    cells = []
    for line in row.splitlines():
        line = line.strip()
        if not line.startswith("|") or line.startswith(("|-", "|}", "|+")):
            continue
        for cell in line[1:].split("||"):
            cells.append(_ATTRS_RE.sub("", cell, count=1).strip())
    return cells


# ════════════════════════════════════════════════════════════
#  PARSER
# ════════════════════════════════════════════════════════════

def parse_wikitext(wikitext: str, section: str = WIKI_SECTION,
                   min_count: int = None) -> list:
    """
    (name, ticker) pairs from the constituents table rows of `section`.

    Each row whose first cell is a [[link]] is a pair: link label → name, second
    cell → ticker. Tokens with whitespace or shorter than 3 characters (as written,
    before the suffix is added) are discarded, the rest normalized; duplicates
    are dropped (first seen wins).
    """
    min_count = CFG["min_constituents"] if min_count is None else min_count
    body = extract_section(wikitext, section)
    if body is None:
        raise SourceFormatChanged("wiki", f"section '{section}' not found")

    pairs, seen, rejected = [], set(), 0
    for row in re.split(r"^\s*\|-.*$", body, flags=re.M):
        cells = _row_cells(row)
        if len(cells) < 2 or not _LINK_RE.search(cells[0]):
            continue
        name   = strip_markup(_LINK_RE.search(cells[0]).group(0))
        token  = strip_markup(cells[1])
        if not name or len(token) < 3 or any(ch.isspace() for ch in token):
            rejected += 1
            continue
        ticker = normalize_ticker(token)
        if not ticker or ticker in seen:
            continue
        seen.add(ticker)
        pairs.append(RawConstituent(name=name, ticker=ticker))

    if rejected:
        print(f"  ⚠️  Wiki: discarded {rejected} malformed rows")
    if len(pairs) < min_count:
        raise SourceFormatChanged(
            "wiki", f"only {len(pairs)} distinct tickers in '{section}' (expected ≥{min_count})")
    print(f"✅  {len(pairs)} constituents (Wikipedia)")
    return pairs


def wikitext_from_payload(payload) -> str:
    """MediaWiki action=parse JSON → wikitext (formatversion 2 string or v1 {'*': ...})."""
    parse = payload.get("parse") if isinstance(payload, dict) else None
    wikitext = parse.get("wikitext") if isinstance(parse, dict) else None
    if isinstance(wikitext, dict):
        wikitext = wikitext.get("*")
    if not isinstance(wikitext, str) or not wikitext:
        raise SourceFormatChanged("wiki", "payload has no parse.wikitext field")
    return wikitext


class WikiSource:
    """Constituents from the Wikipedia FTSE 100 article (via an injected fetch_json)."""

    name = "wiki"

    def __init__(self, fetch_json, url: str = WIKI_API_URL, params: dict = None,
                 section: str = WIKI_SECTION, min_count: int = None):
        self.fetch_json = fetch_json
        self.url        = url
        self.params     = dict(params or WIKI_PARAMS)
        self.section    = section
        self.min_count  = min_count

    @property
    def label(self) -> str:
        return f"{self.url}?page={self.params.get('page', '')}"

    def acquire(self) -> list:
        payload = self.fetch_json(self.url, self.params)
        return parse_wikitext(wikitext_from_payload(payload), self.section, self.min_count)
