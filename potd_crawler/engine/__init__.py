"""Engine components: fetch, extract, transform, summarize, store, resilience."""

from .extractor import ContentExtractor, ExtractedContent, resolve_canonical_url
from .fetcher import FetchResponse, PageFetcher
from .imaging import ImageTransformer
from .raster import convert_to_raster, is_vector_format
from .resilience import CircuitBreaker, CircuitState, RateLimiter, ResiliencePolicy
from .store import BaseStore, InMemoryStore, SQLiteStore
from .summarizer import OpenAISummarizer, Summarizer, build_summarizer
from .thread_pool import IMAGING_POOL, ThreadPoolManager

__all__ = [
    "BaseStore",
    "CircuitBreaker",
    "CircuitState",
    "ContentExtractor",
    "ExtractedContent",
    "FetchResponse",
    "IMAGING_POOL",
    "ImageTransformer",
    "InMemoryStore",
    "OpenAISummarizer",
    "PageFetcher",
    "RateLimiter",
    "ResiliencePolicy",
    "SQLiteStore",
    "Summarizer",
    "ThreadPoolManager",
    "build_summarizer",
    "convert_to_raster",
    "is_vector_format",
    "resolve_canonical_url",
]
