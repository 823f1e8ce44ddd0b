import random
from typing import Optional

from opentelemetry import propagate, trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as OtlpHttpSpanExporter,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

from .settings import Settings


class TracingService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.tracer = trace.get_tracer("idgen")
        self.enabled = False
        self.provider: Optional[TracerProvider] = None

    def _create_otlp_exporter(self):
        if self._settings.OTEL_EXPORTER_OTLP_PROTOCOL.startswith("grpc"):
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter as OtlpGrpcSpanExporter,
            )

            return OtlpGrpcSpanExporter(endpoint=self._settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        return OtlpHttpSpanExporter(endpoint=self._settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    def init_tracing(self) -> None:
        if self._settings.TRACING_STRATEGY == "none" or self._settings.TRACING_EXPORTER == "none":
            return
        resource = Resource.create({"service.name": self._settings.OTEL_SERVICE_NAME})
        provider = TracerProvider(resource=resource)
        if self._settings.TRACING_EXPORTER == "otlp" and self._settings.OTEL_EXPORTER_OTLP_ENDPOINT:
            exporter = self._create_otlp_exporter()
            provider.add_span_processor(BatchSpanProcessor(exporter))
        else:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(provider)
        self.provider = provider
        self.tracer = provider.get_tracer("idgen")
        self.enabled = True

    def should_sample(self) -> bool:
        if self._settings.TRACING_SAMPLE_RATE <= 0:
            return False
        if self._settings.TRACING_SAMPLE_RATE >= 1:
            return True
        return random.random() < self._settings.TRACING_SAMPLE_RATE

    def should_record(self, has_parent: bool) -> bool:
        if not self.enabled or self._settings.TRACING_STRATEGY == "none":
            return False
        if self._settings.TRACING_STRATEGY == "propagate" and not has_parent:
            return False
        return self.should_sample()

    def extract_context(self, traceparent: str):
        if not traceparent:
            return None
        return propagate.extract({"traceparent": traceparent})
