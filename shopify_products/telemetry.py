"""OpenTelemetry helpers for metrics instrumentation."""

from opentelemetry import metrics
from opentelemetry.metrics import Histogram
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader

METER_NAME = "shopify_products"

_meter_provider_initialized = False


def init_metrics() -> None:
    """Initialize OpenTelemetry metrics with a console exporter."""
    global _meter_provider_initialized
    if _meter_provider_initialized:
        return
    reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    provider = MeterProvider(metric_readers=[reader])
    metrics.set_meter_provider(provider)
    _meter_provider_initialized = True


def get_page_fetch_histogram() -> Histogram:
    """Return a histogram for product page fetch durations.

    Without ``init_metrics()`` the global no-op provider is used.
    """
    meter = metrics.get_meter(METER_NAME)
    return meter.create_histogram(
        name="shopify.products.page_fetch.duration",
        unit="ms",
        description="Duration of a single products.json page request",
    )


def get_request_duration_histogram() -> Histogram:
    """Return a histogram for HTTP surface request durations."""
    meter = metrics.get_meter(METER_NAME)
    return meter.create_histogram(
        name="shopify.products.request.duration",
        unit="ms",
        description="Duration of list/create requests served over HTTP",
    )
