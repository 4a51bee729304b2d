"""Prometheus metrics for monitoring tier distribution, batch tolerance and upstream health"""

from prometheus_client import Counter, Histogram

from credito_gateway.domain.models import DENTRO_DA_TOLERANCIA, EligibilityResult, ValidationSummary

# Eligibility metrics
eligibility_counter = Counter(
    "credito_eligibility_total",
    "Eligibility evaluations by suggested tier",
    ["faixa"],  # P | M | G | RECUSADO
)

# Batch validation metrics
validation_batch_counter = Counter(
    "credito_validation_batches_total",
    "Validated invoice batches by tolerance outcome",
    ["status"],  # dentro | fora
)

notes_per_batch_histogram = Histogram(
    "credito_notes_per_batch",
    "Normalized notes per validated batch",
    buckets=[1, 5, 10, 20, 50, 100, 500, 1000],
)

# Final decision metrics
final_decision_counter = Counter(
    "credito_final_decision_total",
    "Final decisions recorded by analysts",
    ["decisao"],  # aprovado | ajustes | reprovado
)

# Upstream data source metrics
upstream_latency_histogram = Histogram(
    "upstream_latency_seconds",
    "Credit data upstream response time",
    ["recurso"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

upstream_fetch_failures_counter = Counter(
    "upstream_fetch_failures_total",
    "Failed credit data upstream calls after retries",
    ["recurso"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_eligibility(result: EligibilityResult) -> None:
    """Record tier distribution for monitoring approval rates"""
    eligibility_counter.labels(faixa=result.faixa_sugerida).inc()


def record_validation(summary: ValidationSummary) -> None:
    """Record batch tolerance outcome and size"""
    status = "dentro" if summary.status == DENTRO_DA_TOLERANCIA else "fora"
    validation_batch_counter.labels(status=status).inc()
    notes_per_batch_histogram.observe(summary.total_notas)


def record_final_decision(decisao: str) -> None:
    final_decision_counter.labels(decisao=decisao).inc()
