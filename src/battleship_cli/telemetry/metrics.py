"""Metrics helper utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from .config import ROOT_SCOPE

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

# Scope owning the per-match counters recorded through `record_game_metric`.
GAME_SCOPE = f"{ROOT_SCOPE}.game"

_METER_PROVIDER: MeterProvider | None = None
_METERS: dict[str, Meter] = {}
_INSTRUMENTS: dict[str, Counter] = {}

MetricAttributes = Mapping[str, str | bool | int | float]


def get_meter(scope: str = ROOT_SCOPE) -> Meter:
    meter = _METERS.get(scope)
    if meter is None:
        if _METER_PROVIDER is not None:
            meter = _METER_PROVIDER.get_meter(scope)
        else:
            meter = otel_metrics.get_meter(scope)
        _METERS[scope] = meter
    return meter


def init_metrics(config: TelemetryConfig) -> Meter:
    global _METER_PROVIDER, _INSTRUMENTS

    readers = []
    if config.otlp_metrics_endpoint:
        exporter = OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True)
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=5000))

    provider = MeterProvider(
        resource=Resource.create(config.resource_dict()), metric_readers=readers
    )
    otel_metrics.set_meter_provider(provider)

    _METER_PROVIDER = provider
    _METERS.clear()
    _INSTRUMENTS = {}
    return get_meter(GAME_SCOPE)


def record_game_metric(name: str, value: float, attrs: MetricAttributes | None = None) -> None:
    """Add `value` to the match counter called `name`, creating it on first use."""
    instrument = _INSTRUMENTS.get(name)
    if instrument is None:
        instrument = get_meter(GAME_SCOPE).create_counter(name, unit="1")
        _INSTRUMENTS[name] = instrument
    instrument.add(value, attributes=attrs or {})


def shutdown_metrics() -> None:
    global _METER_PROVIDER
    if _METER_PROVIDER is not None:
        _METER_PROVIDER.shutdown()
        _METER_PROVIDER = None
        _METERS.clear()
