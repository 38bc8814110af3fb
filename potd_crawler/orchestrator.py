"""Daily acquisition workflow: idempotency, dedup, resilient fetch/transform, persist."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

import structlog

from .config import AppConfig
from .engine import (
    IMAGING_POOL,
    BaseStore,
    ContentExtractor,
    ImageTransformer,
    PageFetcher,
    ResiliencePolicy,
    Summarizer,
    ThreadPoolManager,
    convert_to_raster,
    is_vector_format,
)
from .errors import (
    CircuitOpenError,
    ConflictError,
    ExtractionError,
    FetchError,
    ImageDecodeError,
    RateLimitedError,
)
from .logging_conf import get_logger
from .models import AcquiredAssets, PictureRecord, RunOutcome, RunResult


@dataclass(slots=True)
class _RunContext:
    run_date: date
    canonical_url: str | None = None


class Orchestrator:
    """Central coordinator for one picture-of-the-day acquisition per calendar day."""

    def __init__(
        self,
        config: AppConfig,
        store: BaseStore,
        fetcher: PageFetcher,
        thread_pool: ThreadPoolManager,
        transformer: ImageTransformer | None = None,
        summarizer: Summarizer | None = None,
        extractor: ContentExtractor | None = None,
        resilience: ResiliencePolicy | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config
        self.store = store
        self.fetcher = fetcher
        self.thread_pool = thread_pool
        self.transformer = transformer or ImageTransformer()
        self.summarizer = summarizer
        self.extractor = extractor or ContentExtractor(
            config.source.content_selector, config.source.credit_markers
        )
        self.resilience = resilience or ResiliencePolicy(config.resilience)
        self._today = today
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    def register_schedule(self, scheduler) -> None:
        scheduler.schedule_job(self.config.schedule, self.run_async)
        scheduler.start()

    def run_async(self) -> Future[RunResult]:
        return self.thread_pool.get().submit(self.run)

    def run(self, run_date: date | None = None) -> RunResult:
        ctx = _RunContext(run_date=run_date or self._today())
        log = self.logger.bind(run_date=ctx.run_date.isoformat())

        try:
            existing = self.store.find_by_date(ctx.run_date)
        except Exception as exc:  # noqa: BLE001
            log.exception("store_lookup_failed", error=str(exc))
            return self._failed(ctx, "store_error")
        if existing is not None:
            log.info("run_skipped_existing")
            return RunResult(
                RunOutcome.SKIPPED,
                ctx.run_date,
                reason="already_exists",
                canonical_url=existing.canonical_image_url,
            )

        log.info("run_started", page_url=self.config.source.page_url)
        try:
            assets = self.resilience.call(self._acquire, ctx, log)
        except RateLimitedError:
            log.warning("run_skipped_rate_limited")
            return RunResult(RunOutcome.SKIPPED, ctx.run_date, reason="rate_limited")
        except CircuitOpenError:
            log.warning("run_skipped_circuit_open")
            return RunResult(RunOutcome.SKIPPED, ctx.run_date, reason="circuit_open")
        except ExtractionError as exc:
            log.error("extraction_failed", alert=True, error=str(exc))
            return self._failed(ctx, "extraction_error")
        except FetchError as exc:
            log.error(
                "fetch_failed",
                canonical_url=ctx.canonical_url,
                url=exc.url,
                status=exc.status_code,
                error=str(exc),
            )
            return self._failed(ctx, "fetch_error")
        except ImageDecodeError as exc:
            log.error("transform_failed", canonical_url=ctx.canonical_url, error=str(exc))
            return self._failed(ctx, "image_decode_error")
        except Exception as exc:  # noqa: BLE001
            log.exception("run_error", canonical_url=ctx.canonical_url, error=str(exc))
            return self._failed(ctx, "unexpected_error")

        if assets.reused:
            short_description = assets.reused_from.short_description
        else:
            short_description = self._summarize(assets.description, log)

        record = PictureRecord(
            date=ctx.run_date,
            description=assets.description,
            short_description=short_description,
            credit=assets.credit,
            canonical_image_url=assets.canonical_image_url,
            original_image=assets.original_image,
            dithered_image=assets.dithered_image,
            created_at=datetime.now(timezone.utc),
        )
        try:
            stored = self.store.insert(record)
        except ConflictError:
            log.info("run_conflict_noop", canonical_url=assets.canonical_image_url)
            return RunResult(
                RunOutcome.SKIPPED,
                ctx.run_date,
                reason="already_exists",
                canonical_url=assets.canonical_image_url,
            )
        except Exception as exc:  # noqa: BLE001
            log.exception(
                "persist_failed", canonical_url=assets.canonical_image_url, error=str(exc)
            )
            return self._failed(ctx, "store_error")

        log.info(
            "run_completed",
            canonical_url=assets.canonical_image_url,
            reused=assets.reused,
            original_bytes=len(stored.original_image),
        )
        return RunResult(
            RunOutcome.SUCCESS,
            ctx.run_date,
            canonical_url=assets.canonical_image_url,
            reused=assets.reused,
            record=stored,
        )

    def close(self) -> None:
        self.fetcher.close()
        self.store.close()
        self.thread_pool.shutdown()

    # ------------------------------------------------------------------
    def _acquire(self, ctx: _RunContext, log: structlog.stdlib.BoundLogger) -> AcquiredAssets:
        source = self.config.source
        page = self.fetcher.fetch(source.page_url, source.user_agent)
        content = self.extractor.extract(page.text)
        ctx.canonical_url = content.canonical_image_url
        log.info(
            "image_resolved",
            raw_image_ref=content.raw_image_ref,
            canonical_url=content.canonical_image_url,
        )

        prior = self.store.find_by_canonical_url(content.canonical_image_url)
        if prior is not None:
            log.info("image_reused", previous_date=prior.date.isoformat())
            return AcquiredAssets(
                description=content.description,
                credit=content.credit,
                canonical_image_url=content.canonical_image_url,
                original_image=prior.original_image,
                dithered_image=prior.dithered_image,
                reused_from=prior,
            )

        payload = self.fetcher.download(content.canonical_image_url, source.user_agent)
        original, dithered = self.thread_pool.get(IMAGING_POOL).submit(
            self._transform, payload
        ).result()
        log.info("image_transformed", original_bytes=len(original), dithered_bytes=len(dithered))
        return AcquiredAssets(
            description=content.description,
            credit=content.credit,
            canonical_image_url=content.canonical_image_url,
            original_image=original,
            dithered_image=dithered,
        )

    def _transform(self, payload: bytes) -> tuple[bytes, bytes]:
        original = convert_to_raster(payload) if is_vector_format(payload) else payload
        return original, self.transformer.dither(original)

    def _summarize(self, description: str, log: structlog.stdlib.BoundLogger) -> str:
        placeholder = self.config.summarizer.placeholder
        if self.summarizer is None:
            log.info("summarizer_unavailable")
            return placeholder
        try:
            return self.summarizer.summarize(description)
        except Exception as exc:  # noqa: BLE001
            log.error("summarize_failed", error=str(exc))
            return placeholder

    @staticmethod
    def _failed(ctx: _RunContext, reason: str) -> RunResult:
        return RunResult(
            RunOutcome.FAILED, ctx.run_date, reason=reason, canonical_url=ctx.canonical_url
        )


__all__ = ["Orchestrator"]
