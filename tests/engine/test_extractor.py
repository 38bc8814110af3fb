from __future__ import annotations

import pytest

from potd_crawler.engine.extractor import ContentExtractor, resolve_canonical_url, split_credit
from potd_crawler.errors import ExtractionError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (
            "//upload.wikimedia.org/wikipedia/commons/thumb/a/a4/Example.jpg/300px-Example.jpg",
            "https://upload.wikimedia.org/wikipedia/commons/a/a4/Example.jpg",
        ),
        (
            "https://upload.wikimedia.org/wikipedia/en/thumb/1/1b/Map.svg/320px-Map.svg.png",
            "https://upload.wikimedia.org/wikipedia/en/1/1b/Map.svg",
        ),
        (
            "https://upload.wikimedia.org/wikipedia/commons/a/a4/Example.jpg",
            "https://upload.wikimedia.org/wikipedia/commons/a/a4/Example.jpg",
        ),
        ("//example.org/plain.png", "https://example.org/plain.png"),
    ],
)
def test_resolve_canonical_url(raw: str, expected: str) -> None:
    assert resolve_canonical_url(raw) == expected


def test_split_credit_prefers_the_first_listed_marker() -> None:
    text = "A lighthouse at dusk. Photograph credit: John Smith"
    assert split_credit(text) == ("A lighthouse at dusk.", "John Smith")
    assert split_credit("Old harbour. Photograph: Ana Lee") == ("Old harbour.", "Ana Lee")
    assert split_credit("No attribution here.") == ("No attribution here.", "")


def test_extract_featured_picture(page_factory) -> None:
    extractor = ContentExtractor()
    content = extractor.extract(page_factory())
    assert content.description == "A red fox resting in the snow near a frozen lake."
    assert content.credit == "Jane Doe"
    assert content.raw_image_ref.startswith("//upload.wikimedia.org/")
    assert content.canonical_image_url == (
        "https://upload.wikimedia.org/wikipedia/commons/a/a4/Example.jpg"
    )


def test_extract_collapses_whitespace(page_factory) -> None:
    html = page_factory(description="A   tall\n\n   ship   under sail.", credit="Photograph: Crew")
    content = ContentExtractor().extract(html)
    assert content.description == "A tall ship under sail."
    assert content.credit == "Crew"


def test_extract_missing_region_raises() -> None:
    with pytest.raises(ExtractionError):
        ContentExtractor().extract("<html><body><div id='other'>nothing</div></body></html>")


def test_extract_missing_image_raises() -> None:
    html = "<div id='mp-tfp'><p>Text only. Photograph credit: Someone</p></div>"
    with pytest.raises(ExtractionError):
        ContentExtractor().extract(html)
