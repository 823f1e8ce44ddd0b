import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return float(raw)


@dataclass
class Settings:
    NODE_ID: int = 0
    DATA_CENTER_ID: int = 0
    IDGEN_API_KEY: str = ""
    ID_BATCH_MAX: int = 1000
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    TRACING_STRATEGY: str = "none"
    TRACING_EXPORTER: str = "console"
    TRACING_SAMPLE_RATE: float = 1.0
    OTEL_SERVICE_NAME: str = "idgen"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""
    OTEL_EXPORTER_OTLP_PROTOCOL: str = "http/protobuf"


def load_settings() -> Settings:
    return Settings(
        NODE_ID=_env_int("NODE_ID", 0),
        DATA_CENTER_ID=_env_int("DATA_CENTER_ID", 0),
        IDGEN_API_KEY=os.getenv("IDGEN_API_KEY", ""),
        ID_BATCH_MAX=_env_int("ID_BATCH_MAX", 1000),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FORMAT=os.getenv("LOG_FORMAT", "json").lower(),
        TRACING_STRATEGY=os.getenv("TRACING_STRATEGY", "none").lower(),
        TRACING_EXPORTER=os.getenv("TRACING_EXPORTER", "console").lower(),
        TRACING_SAMPLE_RATE=_env_float("TRACING_SAMPLE_RATE", 1.0),
        OTEL_SERVICE_NAME=os.getenv("OTEL_SERVICE_NAME", "idgen"),
        OTEL_EXPORTER_OTLP_ENDPOINT=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
        OTEL_EXPORTER_OTLP_PROTOCOL=os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", "http/protobuf").lower(),
    )
