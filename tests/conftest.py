from __future__ import annotations

from types import SimpleNamespace

import pytest

import book_scraper

BASE_URL = "http://books.test"


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code


def detail_html(
    title="Book A",
    price="£10.00",
    availability="In stock",
    rating="Three",
    description="A tale.",
) -> str:
    parts = ['<html><body><article class="product_page">', '<div class="product_main">']
    if title is not None:
        parts.append(f"<h1>{title}</h1>")
    if price is not None:
        parts.append(f'<p class="price_color">{price}</p>')
    if availability is not None:
        parts.append(
            '<p class="instock availability">'
            f'<i class="icon-ok"></i>\n    {availability}\n</p>'
        )
    if rating is not None:
        parts.append(f'<p class="star-rating {rating}"><i class="icon-star"></i></p>')
    parts.append("</div>")
    if description is not None:
        parts.append('<div id="product_description" class="sub-header"><h2>Product Description</h2></div>')
        parts.append(f"<p>{description}</p>")
    parts.append("</article></body></html>")
    return "\n".join(parts)


def catalog_html(hrefs) -> str:
    items = "\n".join(
        '<li><article class="product_pod">'
        f'<h3><a href="{href}" title="t">t</a></h3>'
        "</article></li>"
        for href in hrefs
    )
    return f'<html><body><ol class="row">{items}</ol></body></html>'


def page_url(page: int) -> str:
    return f"{BASE_URL}/catalogue/page-{page}.html"


@pytest.fixture
def fake_site(monkeypatch):
    """Replace HTTP access with an in-memory site.

    Map a URL to a FakeResponse, or to an exception instance to raise it.
    Unknown URLs answer 404. Every request is recorded in ``site.calls``.
    """
    routes = {}
    calls = []

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        result = routes.get(url)
        if result is None:
            return FakeResponse("not found", status_code=404)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(book_scraper, "curl_requests", SimpleNamespace(get=fake_get))
    return SimpleNamespace(routes=routes, calls=calls)


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        settings = {
            "base_url": BASE_URL,
            "total_pages": 1,
            "max_workers": 4,
            "output_file": str(tmp_path / "books.csv"),
            "show_progress": False,
        }
        settings.update(overrides)
        return book_scraper.ScraperConfig(**settings)

    return _make


def read_lines(path) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()
