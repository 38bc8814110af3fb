from __future__ import annotations

from types import SimpleNamespace

import pytest

from potd_crawler.config import SummarizerConfig
from potd_crawler.engine.summarizer import OpenAISummarizer, build_summarizer
from potd_crawler.errors import SummarizationError


class StubResponses:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _client(responses: StubResponses) -> SimpleNamespace:
    return SimpleNamespace(responses=responses)


def test_summarize_sends_prompts_and_returns_text() -> None:
    responses = StubResponses(SimpleNamespace(output_text="  A fox naps in snow.  "))
    summarizer = OpenAISummarizer(_client(responses))

    assert summarizer.summarize("A red fox resting in the snow.") == "A fox naps in snow."
    call = responses.calls[0]
    assert call["model"] == "gpt-4o-mini"
    system, user = call["input"]
    assert system["role"] == "system"
    assert system["content"][0]["text"] == "You are a helpful assistant that summarizes text."
    assert user["content"][0]["text"].endswith("summary: A red fox resting in the snow.")


def test_summarize_reads_structured_output() -> None:
    content = SimpleNamespace(type="output_text", text="Short summary.")
    response = SimpleNamespace(
        output_text=None,
        output=[SimpleNamespace(type="reasoning"), SimpleNamespace(type="message", content=[content])],
    )
    summarizer = OpenAISummarizer(_client(StubResponses(response)))
    assert summarizer.summarize("text") == "Short summary."


def test_summarize_wraps_client_errors() -> None:
    summarizer = OpenAISummarizer(_client(StubResponses(error=RuntimeError("quota"))))
    with pytest.raises(SummarizationError):
        summarizer.summarize("text")


def test_summarize_rejects_empty_output() -> None:
    summarizer = OpenAISummarizer(_client(StubResponses(SimpleNamespace(output_text="", output=[]))))
    with pytest.raises(SummarizationError):
        summarizer.summarize("text")


def test_summarizer_requires_client() -> None:
    with pytest.raises(ValueError):
        OpenAISummarizer(None)


def test_build_summarizer_respects_config(monkeypatch: pytest.MonkeyPatch) -> None:
    assert build_summarizer(SummarizerConfig(enabled=False)) is None
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert build_summarizer(SummarizerConfig()) is None
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert isinstance(build_summarizer(SummarizerConfig()), OpenAISummarizer)
