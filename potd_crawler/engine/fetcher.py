"""HTTP fetching of the source page and the canonical image."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from ..errors import FetchError


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: dict[str, str] = field(default_factory=dict)


class PageFetcher:
    """Fetch the daily page markup and download image payloads."""

    def __init__(
        self,
        timeout: float = 20.0,
        logger: structlog.stdlib.BoundLogger | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("potd_crawler.fetcher")
        self._client = client or httpx.Client(follow_redirects=True, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()

    def fetch(self, url: str, user_agent: str) -> FetchResponse:
        response = self._request(url, user_agent)
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
        )

    def download(self, url: str, user_agent: str) -> bytes:
        self.logger.info("image_download_started", url=url)
        response = self._request(url, user_agent)
        payload = response.content
        self.logger.info("image_downloaded", url=url, size_bytes=len(payload))
        return payload

    # ------------------------------------------------------------------
    def _request(self, url: str, user_agent: str) -> httpx.Response:
        try:
            response = self._client.request(
                "GET",
                url,
                headers={"User-Agent": user_agent},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_error", url=url, error=str(exc))
            raise FetchError(f"Request to {url} failed: {exc}", url=url) from exc
        if self._is_failure(response):
            self.logger.warning("fetch_bad_status", url=url, status=response.status_code)
            raise FetchError(
                f"Unexpected status {response.status_code} from {url}",
                url=url,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _is_failure(response: Any) -> bool:
        return getattr(response, "status_code", 0) >= 400


__all__ = ["FetchResponse", "PageFetcher"]
