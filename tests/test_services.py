import json
import logging

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from idgen.app.services.logging_service import LoggingService
from idgen.app.services.metrics import MetricsService
from idgen.app.services.settings import Settings
from idgen.app.services.tracing import TracingService


def test_logging_service_renders_json(caplog):
    service = LoggingService(Settings(LOG_FORMAT="json"))

    with caplog.at_level(logging.INFO, logger="idgen"):
        service.log("idgen_started", node_id=1, data_center_id=2)

    assert json.loads(caplog.records[-1].getMessage()) == {
        "event": "idgen_started",
        "node_id": 1,
        "data_center_id": 2,
    }


def test_logging_service_warns_in_text_format(caplog):
    service = LoggingService(Settings(LOG_FORMAT="text"))

    with caplog.at_level(logging.INFO, logger="idgen"):
        service.warn("clock_moved_backwards", offset_ms=3)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage().startswith("clock_moved_backwards ")


def test_metrics_service_counts_and_exports():
    metrics = MetricsService()

    metrics.inc("ids_generated_total", 4)
    metrics.inc("custom_total")

    assert metrics.get("ids_generated_total") == 4
    assert metrics.snapshot()["custom_total"] == 1
    assert "custom_total 1\n" in metrics.to_prometheus()


def test_tracing_disabled_by_default():
    tracing = TracingService(Settings())

    tracing.init_tracing()

    assert tracing.enabled is False
    assert tracing.should_record(True) is False
    assert tracing.extract_context("") is None


def test_tracing_propagate_requires_parent():
    tracing = TracingService(Settings(TRACING_STRATEGY="propagate"))
    tracing.enabled = True

    assert tracing.should_record(False) is False
    assert tracing.should_record(True) is True


def test_tracing_sample_rate_zero_never_records():
    tracing = TracingService(Settings(TRACING_STRATEGY="always", TRACING_SAMPLE_RATE=0))
    tracing.enabled = True

    assert tracing.should_record(True) is False


def test_tracing_builds_http_otlp_exporter():
    tracing = TracingService(
        Settings(
            TRACING_STRATEGY="always",
            TRACING_EXPORTER="otlp",
            OTEL_EXPORTER_OTLP_ENDPOINT="http://collector:4318/v1/traces",
        )
    )

    assert isinstance(tracing._create_otlp_exporter(), OTLPSpanExporter)

    tracing.init_tracing()

    assert tracing.enabled is True
    assert tracing.provider is not None
    assert tracing.provider.resource.attributes["service.name"] == "idgen"
    tracing.provider.shutdown()
