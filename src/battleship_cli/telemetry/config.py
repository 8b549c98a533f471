"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

TRUTHY = {"1", "true", "yes", "on"}

# Instrumentation scope prefix; modules pass their dotted name under it.
ROOT_SCOPE = "battleship_cli"


def env_flag(*names: str) -> bool | None:
    """Return the first boolean-looking env var among `names`, or None."""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in TRUTHY
    return None


def _with_suffix(base: str | None, suffix: str) -> str | None:
    if not base:
        return None
    return f"{base.rstrip('/')}/{suffix}"


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "battleship-cli"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.enable_tracing or self.enable_metrics or self.enable_logging

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`BATTLESHIP_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()

        flags = {
            "enable_tracing": ("BATTLESHIP_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("BATTLESHIP_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("BATTLESHIP_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }
        for name, env_names in flags.items():
            value = env_flag(*env_names)
            if value is not None:
                data[name] = value

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        data["otlp_traces_endpoint"] = os.getenv(
            "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"
        ) or _with_suffix(base_endpoint, "v1/traces")
        data["otlp_metrics_endpoint"] = os.getenv(
            "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT"
        ) or _with_suffix(base_endpoint, "v1/metrics")
        data["otlp_logs_endpoint"] = os.getenv(
            "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT"
        ) or _with_suffix(base_endpoint, "v1/logs")

        data["service_name"] = os.getenv("OTEL_SERVICE_NAME") or data["service_name"]
        data["service_namespace"] = os.getenv("OTEL_SERVICE_NAMESPACE") or data["service_namespace"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            data["resource_attributes"] = {
                **data["resource_attributes"],
                **_parse_resource_attributes(resource_env),
            }

        # An explicit endpoint turns its exporter on.
        if data["otlp_traces_endpoint"]:
            data["enable_tracing"] = True
        if data["otlp_metrics_endpoint"]:
            data["enable_metrics"] = True
        if data["otlp_logs_endpoint"]:
            data["enable_logging"] = True

        data.update(overrides)
        return cls(**data)

    def resource_dict(self) -> dict[str, str]:
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise whichever telemetry subsystems the config enables."""

    from .logger import init_logging
    from .metrics import init_metrics
    from .tracer import init_tracing

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
