from __future__ import annotations

import pytest

from book_scraper import ScraperConfig, main

from .conftest import BASE_URL, FakeResponse, catalog_html, detail_html, page_url, read_lines


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://books.test/", "http://books.test"),
        ("books.test", "http://books.test"),
        ("https://books.test//", "https://books.test"),
    ],
)
def test_base_url_normalized(raw, expected):
    assert ScraperConfig(base_url=raw).base_url == expected


@pytest.mark.parametrize(
    "kwargs",
    [{"total_pages": -1}, {"max_workers": 0}, {"timeout": 0}],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        ScraperConfig(**kwargs)


def test_main_runs_scrape(fake_site, tmp_path, capsys):
    output = tmp_path / "books.csv"
    fake_site.routes[page_url(1)] = FakeResponse(catalog_html(["a_1/index.html"]))
    fake_site.routes[f"{BASE_URL}/catalogue/a_1/index.html"] = FakeResponse(detail_html())

    code = main([
        "--base-url", BASE_URL,
        "--pages", "1",
        "--workers", "2",
        "--output", str(output),
        "--no-progress",
    ])

    assert code == 0
    assert len(read_lines(output)) == 2
    assert "Total books processed: 1" in capsys.readouterr().out


def test_main_reports_fatal_output_error(fake_site, tmp_path):
    code = main([
        "--pages", "1",
        "--output", str(tmp_path / "missing" / "books.csv"),
        "--no-progress",
    ])
    assert code == 1


def test_main_rejects_bad_worker_count(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--workers", "0", "--output", str(tmp_path / "books.csv")])
    assert excinfo.value.code == 2
