"""Short-description summarizer backed by the OpenAI Responses API."""

from __future__ import annotations

import os
import time
from typing import Any, Protocol

import structlog
from openai import OpenAI

from ..config import SummarizerConfig
from ..errors import SummarizationError


class Summarizer(Protocol):
    """Anything that can shorten a description."""

    def summarize(self, text: str) -> str:
        """Return a short summary of ``text`` or raise ``SummarizationError``."""


class OpenAISummarizer:
    """Summarize picture descriptions into a single short sentence."""

    def __init__(self, client: Any, config: SummarizerConfig | None = None) -> None:
        if client is None:
            raise ValueError("An OpenAI client is required.")
        self.client = client
        self.config = config or SummarizerConfig()
        self.logger = structlog.get_logger("potd_crawler.summarizer")

    def summarize(self, text: str) -> str:
        start = time.time()
        try:
            response = self.client.responses.create(
                model=self.config.model,
                input=[
                    {
                        "type": "message",
                        "role": "system",
                        "content": [{"type": "input_text", "text": self.config.system_prompt}],
                    },
                    {
                        "type": "message",
                        "role": "user",
                        "content": [
                            {
                                "type": "input_text",
                                "text": self.config.user_prompt.format(text=text),
                            }
                        ],
                    },
                ],
            )
        except Exception as exc:  # noqa: BLE001
            raise SummarizationError(f"Summarizer request failed: {exc}") from exc

        summary = self._extract_text(response)
        if not summary:
            raise SummarizationError("Summarizer returned an empty response")
        self.logger.info("summary_generated", latency=round(time.time() - start, 3))
        return summary

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Pull the plain text out of a Responses API result."""

        text = getattr(response, "output_text", None)
        if isinstance(text, str) and text.strip():
            return text.strip()
        for item in getattr(response, "output", None) or []:
            if getattr(item, "type", None) != "message":
                continue
            for content in getattr(item, "content", None) or []:
                if getattr(content, "type", None) == "output_text":
                    value = getattr(content, "text", "") or ""
                    if value.strip():
                        return value.strip()
        return ""


def build_summarizer(config: SummarizerConfig) -> Summarizer | None:
    """Return a configured summarizer, or ``None`` when summarization is off."""

    if not config.enabled:
        return None
    api_key = os.environ.get(config.api_key_env)
    if not api_key:
        structlog.get_logger("potd_crawler.summarizer").warning(
            "summarizer_disabled_missing_key", env_var=config.api_key_env
        )
        return None
    return OpenAISummarizer(OpenAI(api_key=api_key), config)


__all__ = ["OpenAISummarizer", "Summarizer", "build_summarizer"]
