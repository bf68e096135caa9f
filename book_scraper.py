#!/usr/bin/env python3
"""
Book Catalogue Scraper

This script crawls every page of a paginated book catalogue, visits each book's
detail page, extracts its fields and writes them to a semicolon-delimited file.
Catalogue pages are processed in parallel by a fixed pool of worker threads;
the books of one page are fetched sequentially by the thread that owns it.

Records are appended in whatever order their detail fetches complete, so the
output file is an unordered set of books, not sorted by page.
"""

import argparse
import logging
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urljoin

from curl_cffi import requests as curl_requests
from bs4 import BeautifulSoup
import tqdm

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://books.toscrape.com"
PAGE_PATH = "catalogue/page-{page}.html"

DELIMITER = ";"
DELIMITER_SUBSTITUTE = ","
HEADER_FIELDS = ["title", "price", "availability", "rating", "bookUrl", "description"]

# Rank tokens carried by the star-rating element, in ordinal order
RATING_WORDS = {
    'one': 1,
    'two': 2,
    'three': 3,
    'four': 4,
    'five': 5,
}

# Selectors for the book detail page
TITLE_SELECTOR = 'div.product_main > h1'
PRICE_SELECTOR = 'div.product_main > p.price_color'
AVAILABILITY_SELECTOR = 'div.product_main > p.instock.availability'
RATING_SELECTOR = 'div.product_main > p.star-rating'
DESCRIPTION_MARKER_SELECTOR = '#product_description'

# Selector for book links on a catalogue page
BOOK_LINK_SELECTOR = 'article.product_pod h3 > a'


class SinkError(Exception):
    """Raised when the output file cannot be opened, written or closed."""


@dataclass
class ScraperConfig:
    """Settings for a single scraping run."""

    base_url: str = DEFAULT_BASE_URL
    total_pages: int = 51
    max_workers: int = 10
    output_file: str = "books.csv"
    timeout: float = 10.0
    impersonate: Optional[str] = None
    user_agent: Optional[str] = None
    show_progress: bool = True

    def __post_init__(self):
        if self.total_pages < 0:
            raise ValueError(f"total_pages must be >= 0, got {self.total_pages}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        self.base_url = self._normalize_base_url(self.base_url)

    @staticmethod
    def _normalize_base_url(url: str) -> str:
        """Normalize base URL by removing trailing slash and ensuring scheme."""
        if not url.startswith(('http://', 'https://')):
            url = 'http://' + url
        return url.rstrip('/')

    def page_url(self, page: int) -> str:
        return f"{self.base_url}/{PAGE_PATH.format(page=page)}"


@dataclass(frozen=True)
class BookRecord:
    """One scraped book. Text fields are never None; rating is in [0, 5]."""

    title: str
    price: str
    availability: str
    rating: int
    book_url: str
    description: str

    def to_fields(self) -> List[str]:
        return [
            self.title,
            self.price,
            self.availability,
            str(self.rating),
            self.book_url,
            self.description,
        ]


@dataclass(frozen=True)
class RunSummary:
    """Outcome of a finished crawl."""

    total_books: int
    elapsed_seconds: float


def _element_text(element) -> str:
    """Return the whitespace-normalized text of an element, or '' if missing."""
    if element is None:
        return ""
    return " ".join(element.get_text().split())


def rating_from_classes(classes: List[str]) -> int:
    """
    Map the class list of a star-rating element to a number of stars.

    The first class that names a rank ("One".."Five", any case) wins;
    0 means no recognizable rating.
    """
    for cls in classes:
        rating = RATING_WORDS.get(cls.lower())
        if rating:
            return rating
    return 0


def extract_book(soup: BeautifulSoup, book_url: str) -> BookRecord:
    """
    Extract a BookRecord from a parsed detail page.

    Every missing element degrades to its default: an empty string, or a
    rating of 0.
    """
    title = _element_text(soup.select_one(TITLE_SELECTOR))
    price = _element_text(soup.select_one(PRICE_SELECTOR))
    availability = _element_text(soup.select_one(AVAILABILITY_SELECTOR))

    rating = 0
    rating_el = soup.select_one(RATING_SELECTOR)
    if rating_el is not None:
        rating = rating_from_classes(rating_el.get('class', []))

    description = ""
    marker = soup.select_one(DESCRIPTION_MARKER_SELECTOR)
    if marker is not None:
        # Only the immediately following element counts
        sibling = marker.find_next_sibling()
        if sibling is not None and sibling.name == 'p':
            description = _element_text(sibling)

    return BookRecord(
        title=title,
        price=price,
        availability=availability,
        rating=rating,
        book_url=book_url,
        description=description,
    )


def format_line(record: BookRecord) -> str:
    """Serialize a record to one output line, without the trailing newline."""
    return DELIMITER.join(
        field.replace(DELIMITER, DELIMITER_SUBSTITUTE) for field in record.to_fields()
    )


class CsvSink:
    """
    Append-only writer shared by all page workers.

    Each append writes one complete line while holding a lock, so lines from
    concurrent workers never interleave. The header is written on open,
    before any worker starts.
    """

    def __init__(self, path: str):
        self.path = path
        self._file = None
        self._lock = threading.Lock()
        self.lines_written = 0

    def open(self):
        try:
            self._file = open(self.path, 'w', encoding='utf-8', newline='')
            self._file.write(DELIMITER.join(HEADER_FIELDS) + '\n')
        except OSError as e:
            self._release()
            raise SinkError(f"Cannot open output file {self.path}: {e}") from e
        return self

    def append(self, record: BookRecord):
        """
        Write one record as a single line.

        Raises:
            SinkError: If the underlying write fails; the run cannot continue.
        """
        line = format_line(record) + '\n'
        with self._lock:
            if self._file is None:
                raise SinkError(f"Output file {self.path} is not open")
            try:
                self._file.write(line)
            except OSError as e:
                raise SinkError(f"Cannot write to {self.path}: {e}") from e
            self.lines_written += 1

    def close(self):
        with self._lock:
            try:
                if self._file is not None:
                    self._file.close()
            except OSError as e:
                raise SinkError(f"Cannot close output file {self.path}: {e}") from e
            finally:
                self._file = None

    def _release(self):
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                logger.debug(f"Ignoring error while closing {self.path}")
            self._file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            # Propagate the pending exception; only release the handle
            self._release()
            return False
        self.close()
        return False


class BookScraper:
    """
    A scraper for a paginated book catalogue.

    Uses a fixed-size thread pool where each worker processes one catalogue
    page end to end: the catalogue fetch followed by sequential detail fetches
    for every book listed on it.
    """

    def __init__(self, config: Optional[ScraperConfig] = None):
        """
        Initialize the scraper.

        Args:
            config: Run settings; defaults to ScraperConfig()
        """
        self.config = config or ScraperConfig()

    def _request_kwargs(self) -> Dict:
        kwargs = {'timeout': self.config.timeout}
        if self.config.impersonate:
            kwargs['impersonate'] = self.config.impersonate
        if self.config.user_agent:
            kwargs['headers'] = {'User-Agent': self.config.user_agent}
        return kwargs

    def _fetch_page(self, url: str) -> Optional[BeautifulSoup]:
        """Fetch a page and parse it. Returns None on any fetch or parse failure."""
        try:
            response = curl_requests.get(url, **self._request_kwargs())
        except Exception as e:
            logger.error(f"Error fetching {url}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Failed to fetch {url}, status: {response.status_code}")
            return None

        try:
            return BeautifulSoup(response.text, 'html.parser')
        except Exception as e:
            logger.error(f"Error parsing {url}: {e}")
            return None

    def fetch_book(self, book_url: str) -> Optional[BookRecord]:
        """
        Fetch one detail page and extract its record.

        Returns:
            The extracted BookRecord, or None if the page could not be fetched
        """
        soup = self._fetch_page(book_url)
        if soup is None:
            return None
        return extract_book(soup, book_url)

    def _extract_book_links(self, page_url: str, soup: BeautifulSoup) -> List[str]:
        """Return absolute detail-page URLs in document order."""
        links = []
        for a_tag in soup.select(BOOK_LINK_SELECTOR):
            href = (a_tag.get('href') or '').strip()
            if not href:
                logger.debug(f"Skipping product without link on {page_url}")
                continue
            links.append(urljoin(page_url, href))
        return links

    def scrape_catalog_page(self, page: int, sink: CsvSink) -> int:
        """
        Scrape one catalogue page and every book listed on it.

        Args:
            page: 1-based catalogue page number
            sink: Shared writer that receives each successful record

        Returns:
            Number of books written for this page
        """
        thread_name = threading.current_thread().name
        page_url = self.config.page_url(page)

        soup = self._fetch_page(page_url)
        if soup is None:
            logger.error(f"[{thread_name}] Error processing page {page}: {page_url} unavailable")
            return 0

        count = 0
        for book_url in self._extract_book_links(page_url, soup):
            record = self.fetch_book(book_url)
            if record is None:
                continue
            sink.append(record)
            count += 1

        logger.info(f"[{thread_name}] Page {page} processed, books: {count}")
        return count

    def crawl(self) -> RunSummary:
        """
        Scrape every catalogue page and write the books to the output file.

        Raises:
            SinkError: If the output file cannot be opened or written
        """
        config = self.config
        logger.info(f"Starting scrape of {config.total_pages} pages with {config.max_workers} workers")

        with CsvSink(config.output_file) as sink, ThreadPoolExecutor(
            max_workers=config.max_workers, thread_name_prefix='page-worker'
        ) as executor:
            start_time = time.perf_counter()
            futures = {
                executor.submit(self.scrape_catalog_page, page, sink): page
                for page in range(1, config.total_pages + 1)
            }

            progress = tqdm.tqdm(
                total=config.total_pages,
                desc="Scraping catalogue",
                unit="pages",
                disable=not config.show_progress,
            )
            total_books = 0
            try:
                for future in as_completed(futures):
                    page = futures[future]
                    try:
                        total_books += future.result()
                    except SinkError:
                        executor.shutdown(wait=False, cancel_futures=True)
                        raise
                    except Exception:
                        logger.exception(f"Page {page} task failed unexpectedly")
                    progress.update(1)
            finally:
                progress.close()

            elapsed = time.perf_counter() - start_time

        if sink.lines_written != total_books:
            # A page task that failed after writing some books counts as 0
            logger.warning(
                f"Counted {total_books} books but wrote {sink.lines_written} lines to {config.output_file}"
            )

        summary = RunSummary(total_books=total_books, elapsed_seconds=elapsed)
        logger.info(f"Scrape completed in {summary.elapsed_seconds:.2f} seconds")
        logger.info(f"Total books written: {summary.total_books}")
        return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Book Catalogue Scraper')
    parser.add_argument('--base-url', default=DEFAULT_BASE_URL,
                        help=f'Catalogue base URL (default: {DEFAULT_BASE_URL})')
    parser.add_argument('--pages', type=int, default=51,
                        help='Number of catalogue pages to scrape (default: 51)')
    parser.add_argument('--workers', type=int, default=10,
                        help='Number of worker threads (default: 10)')
    parser.add_argument('--output', default='books.csv',
                        help='Output file path (default: books.csv)')
    parser.add_argument('--timeout', type=float, default=10.0,
                        help='Request timeout in seconds (default: 10)')
    parser.add_argument('--impersonate',
                        help='curl_cffi browser profile to impersonate, e.g. chrome120')
    parser.add_argument('--user-agent',
                        help='User agent to use for requests')
    parser.add_argument('--no-progress', action='store_true',
                        help='Disable the progress bar')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the scraper from command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logger.setLevel(logging.DEBUG)

    try:
        config = ScraperConfig(
            base_url=args.base_url,
            total_pages=args.pages,
            max_workers=args.workers,
            output_file=args.output,
            timeout=args.timeout,
            impersonate=args.impersonate,
            user_agent=args.user_agent,
            show_progress=not args.no_progress,
        )
    except ValueError as e:
        parser.error(str(e))

    scraper = BookScraper(config)
    try:
        summary = scraper.crawl()
    except SinkError as e:
        logger.critical(f"Scrape aborted: {e}")
        return 1

    print(f"Done! Total books processed: {summary.total_books}")
    print(f"Elapsed time: {summary.elapsed_seconds:.2f} seconds.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
