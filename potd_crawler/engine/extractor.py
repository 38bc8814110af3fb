"""Extract description, credit and image reference from the daily page."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from selectolax.parser import HTMLParser

from ..errors import ExtractionError

THUMB_SEGMENT = "/thumb/"
DEFAULT_CREDIT_MARKERS = ("Photograph credit:", "Photograph:")

_WHITESPACE = re.compile(r"\s+")


@dataclass(slots=True)
class ExtractedContent:
    """Structured representation of the featured picture block."""

    description: str
    credit: str
    raw_image_ref: str
    canonical_image_url: str


def resolve_canonical_url(image_ref: str) -> str:
    """Map a served thumbnail reference to its full-resolution source URL.

    ``//host/wikipedia/commons/thumb/a/a4/Name.jpg/300px-Name.jpg`` becomes
    ``https://host/wikipedia/commons/a/a4/Name.jpg``.
    """

    url = image_ref.strip()
    if url.startswith("//"):
        url = "https:" + url
    if THUMB_SEGMENT in url:
        last_slash = url.rfind("/")
        if last_slash > 0:
            return url[:last_slash].replace(THUMB_SEGMENT, "/")
    return url


def split_credit(text: str, markers: Sequence[str] = DEFAULT_CREDIT_MARKERS) -> tuple[str, str]:
    """Split region text into ``(description, credit)`` on the first known marker."""

    for marker in markers:
        if marker in text:
            before, _, after = text.partition(marker)
            return before.strip(), after.strip()
    return text.strip(), ""


class ContentExtractor:
    """Parse the featured-picture region of one fetched document."""

    def __init__(
        self,
        content_selector: str = "#mp-tfp",
        credit_markers: Sequence[str] = DEFAULT_CREDIT_MARKERS,
    ) -> None:
        self.content_selector = content_selector
        self.credit_markers = tuple(credit_markers)

    def extract(self, html: str) -> ExtractedContent:
        parser = HTMLParser(html)
        region = parser.css_first(self.content_selector)
        if region is None:
            raise ExtractionError(
                f"Content region '{self.content_selector}' not found; page layout may have changed"
            )

        image = region.css_first("img")
        image_ref = (image.attributes.get("src") or "").strip() if image is not None else ""
        if not image_ref:
            raise ExtractionError(f"No image reference inside '{self.content_selector}'")

        text = _WHITESPACE.sub(" ", region.text(separator=" ", strip=True)).strip()
        description, credit = split_credit(text, self.credit_markers)
        return ExtractedContent(
            description=description,
            credit=credit,
            raw_image_ref=image_ref,
            canonical_image_url=resolve_canonical_url(image_ref),
        )


__all__ = ["ContentExtractor", "ExtractedContent", "resolve_canonical_url", "split_credit"]
