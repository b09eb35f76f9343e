"""Prometheus metrics for request resolution and legacy migration."""

from prometheus_client import Counter

requests_resolved_total = Counter(
    "fluent_requests_resolved_total",
    "Total requests whose Fluent state was resolved",
    ["frontend", "domain_mode"],
)

migration_queries_total = Counter(
    "fluent_migration_queries_total",
    "Total legacy migration queries by outcome",
    ["outcome"],
)


def record_resolution(is_frontend: bool, is_domain_mode: bool) -> None:
    """Count one resolved request."""
    requests_resolved_total.labels(
        frontend=str(is_frontend).lower(), domain_mode=str(is_domain_mode).lower()
    ).inc()


def record_migration_query(outcome: str) -> None:
    """Count one migration query (executed, failed or dry_run)."""
    migration_queries_total.labels(outcome=outcome).inc()
