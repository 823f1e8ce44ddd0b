from contextlib import nullcontext
from typing import Callable, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from opentelemetry.trace import SpanKind

from .logging_service import LoggingService
from .metrics import MetricsService
from .settings import Settings
from .snowflake import ClockMovedBackwards, IdWorker
from .tracing import TracingService


class IdGenApp:
    def __init__(self, settings: Settings, clock: Optional[Callable[[], int]] = None) -> None:
        self._settings = settings
        self._metrics = MetricsService()
        self._logger = LoggingService(settings)
        self._tracing = TracingService(settings)
        self._worker = IdWorker(settings.NODE_ID, settings.DATA_CENTER_ID, clock=clock)

    @property
    def worker(self) -> IdWorker:
        return self._worker

    @property
    def metrics(self) -> MetricsService:
        return self._metrics

    @property
    def tracing(self) -> TracingService:
        return self._tracing

    async def startup_tasks(self) -> None:
        self._tracing.init_tracing()
        self._logger.log(
            "idgen_started",
            node_id=self._worker.node_id,
            data_center_id=self._worker.data_center_id,
            epoch_ms=self._worker.epoch_ms,
        )

    async def shutdown_tasks(self) -> None:
        return None

    def _check_api_key(self, request: Request) -> None:
        if not self._settings.IDGEN_API_KEY:
            return
        if request.headers.get("x-api-key", "") != self._settings.IDGEN_API_KEY:
            self._metrics.inc("unauthorized_total")
            raise HTTPException(status_code=401, detail="invalid api key")

    def _span(self, name: str, request: Request):
        traceparent = request.headers.get("traceparent", "")
        if not self._tracing.should_record(bool(traceparent)):
            return nullcontext()
        span_ctx = self._tracing.extract_context(traceparent) if traceparent else None
        return self._tracing.tracer.start_as_current_span(name, context=span_ctx, kind=SpanKind.SERVER)

    def _generate(self, count: int) -> List[str]:
        ids = [self._worker.next_id_str() for _ in range(count)]
        self._metrics.inc("ids_generated_total", count)
        return ids

    def _clock_error(self, exc: ClockMovedBackwards) -> JSONResponse:
        self._metrics.inc("clock_moved_backwards_total")
        self._logger.warn(
            "clock_moved_backwards",
            last_timestamp_ms=exc.last_timestamp_ms,
            current_timestamp_ms=exc.current_timestamp_ms,
            offset_ms=exc.offset_ms,
        )
        return JSONResponse(
            {"detail": "clock moved backwards", "retry_after_ms": exc.offset_ms},
            status_code=503,
        )

    async def next_id(self, request: Request):
        self._check_api_key(request)
        self._metrics.inc("id_requests_total")
        with self._span("idgen.next", request) as span:
            if span is not None:
                span.set_attribute("idgen.node_id", self._worker.node_id)
                span.set_attribute("idgen.data_center_id", self._worker.data_center_id)
            try:
                (snowflake_id,) = self._generate(1)
            except ClockMovedBackwards as exc:
                return self._clock_error(exc)
        return JSONResponse(
            {
                "id": snowflake_id,
                "node_id": self._worker.node_id,
                "data_center_id": self._worker.data_center_id,
            }
        )

    async def next_ids(self, request: Request, count: int = 1):
        self._check_api_key(request)
        if count < 1 or count > self._settings.ID_BATCH_MAX:
            raise HTTPException(status_code=400, detail=f"count must be between 1 and {self._settings.ID_BATCH_MAX}")
        self._metrics.inc("id_batch_requests_total")
        with self._span("idgen.batch", request) as span:
            if span is not None:
                span.set_attribute("idgen.count", count)
            try:
                ids = self._generate(count)
            except ClockMovedBackwards as exc:
                return self._clock_error(exc)
        self._logger.log("id_batch_issued", count=count, first=ids[0], last=ids[-1])
        return JSONResponse({"ids": ids})

    async def parse_id(self, snowflake_id: str, request: Request):
        self._check_api_key(request)
        self._metrics.inc("id_parse_requests_total")
        if not (snowflake_id.isascii() and snowflake_id.isdigit()):
            raise HTTPException(status_code=400, detail="id must be a decimal integer")
        try:
            parts = self._worker.parse(int(snowflake_id))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return JSONResponse({"id": snowflake_id, **parts.to_dict()})

    async def metrics_endpoint(self):
        return PlainTextResponse(self._metrics.to_prometheus())

    async def health(self):
        return JSONResponse({"ok": True})

    async def ready(self):
        return JSONResponse({"ok": True})
