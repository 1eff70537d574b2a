# ftse_ranker/browser.py — Headless Chrome page scraper for the rendered-table source
#
# Selenium is an optional extra (pip install "ftse100-ranker[browser]"); it is
# imported only when a scraper is opened.
import time
from ftse_ranker.config import CFG, WIKI_HEADERS
from ftse_ranker.data_table import extract_first_table
from ftse_ranker.errors import SourceUnavailable


class SeleniumPageScraper:
    """
    Callable scrape_page(url) → {'headers', 'rows'} backed by one Chrome session.

        with SeleniumPageScraper() as scrape_page:
            rows = TableSource(scrape_page).acquire()
    """

    def __init__(self, timeout: float = None, settle: float = None, headless: bool = True):
        self.timeout  = CFG["page_timeout"] if timeout is None else timeout
        self.settle   = CFG["page_settle"] if settle is None else settle
        self.headless = headless
        self.driver   = None

    def open(self):
        try:
            from selenium import webdriver
            from selenium.webdriver.chrome.options import Options
        except ImportError as e:
            raise RuntimeError(
                'Selenium is not installed. Install with: pip install "ftse100-ranker[browser]"') from e

        options = Options()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--disable-gpu")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--window-size=1920,1080")
        options.add_argument(f"--user-agent={WIKI_HEADERS['User-Agent']}")
        self.driver = webdriver.Chrome(options=options)
        self.driver.set_page_load_timeout(self.timeout)
        return self

    def close(self):
        if self.driver is not None:
            self.driver.quit()
            self.driver = None

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc):
        self.close()

    def __call__(self, url: str) -> dict:
        from selenium.common.exceptions import WebDriverException

        if self.driver is None:
            self.open()
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise SourceUnavailable(url, f"page load failed: {e.msg or e}") from e
        time.sleep(self.settle)     # table is filled client-side after load
        return extract_first_table(self.driver.page_source)
