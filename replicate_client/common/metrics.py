"""Client-side metrics for calls made against the inference service.

Provides a thin convenience wrapper around ``prometheus_client`` so every
resource client records requests, stream events, and prediction creation
consistently.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- Labels carry operation names (``predictions.create``), never URLs or ids
- Each collector owns its registry unless one is injected (e.g. the
  application's default registry)
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class ClientMetrics:
    """Metrics collection for HTTP calls made by the client.

    Parameters
    - registry: Optional custom ``CollectorRegistry``; a private one is
      created by default so several clients can coexist in one process
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.request_count = Counter(
            'replicate_client_requests_total',
            'Total HTTP requests sent to the inference service',
            ['method', 'operation', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'replicate_client_request_duration_seconds',
            'HTTP request duration',
            ['method', 'operation'],
            registry=self.registry
        )

        self.stream_events = Counter(
            'replicate_client_stream_events_total',
            'Server-sent events received from prediction streams',
            ['event'],
            registry=self.registry
        )

        self.predictions_created = Counter(
            'replicate_client_predictions_created_total',
            'Predictions created',
            ['model'],
            registry=self.registry
        )

    def record_request(
        self,
        method: str,
        operation: str,
        status: str,
        duration: float
    ) -> None:
        """Record one request/response round trip.

        ``status`` is the HTTP status code, or ``"error"`` when the transport
        failed before a response arrived. ``duration`` is in seconds.
        """
        self.request_count.labels(method=method, operation=operation, status=status).inc()
        self.request_duration.labels(method=method, operation=operation).observe(duration)

    def record_stream_event(self, event: str) -> None:
        """Record a decoded stream event."""
        self.stream_events.labels(event=event).inc()

    def record_prediction_created(self, model: str) -> None:
        """Record a successfully created prediction."""
        self.predictions_created.labels(model=model).inc()

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')
