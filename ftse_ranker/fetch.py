# ftse_ranker/fetch.py — HTTP transport for the wiki and JSON sources
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from ftse_ranker.config import CFG, WIKI_HEADERS
from ftse_ranker.errors import SourceUnavailable, SourceFormatChanged


def make_session(retries: int = 3) -> requests.Session:
    session = requests.Session()
    session.headers.update(WIKI_HEADERS)
    retry = Retry(total=retries, backoff_factor=1,
                  status_forcelist=[429, 500, 502, 503, 504])
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def get_json(url: str, params: dict = None, session: requests.Session = None,
             timeout: float = None):
    """GET → decoded JSON. Transport/status errors → SourceUnavailable, bad JSON → SourceFormatChanged."""
    owned = session is None
    session = session or make_session()
    try:
        resp = session.get(url, params=params, timeout=timeout or CFG["http_timeout"])
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(url, str(e)) from e
    finally:
        if owned:
            session.close()
    try:
        return resp.json()
    except ValueError as e:
        raise SourceFormatChanged(url, f"response is not JSON: {e}") from e
