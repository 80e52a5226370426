"""Prometheus metrics for retrieval and generation."""

from prometheus_client import Counter, Histogram

retrieval_documents = Histogram(
    "retrieval_documents",
    "Documents returned per retrieval call",
    ["mode"],
    buckets=[0, 1, 2, 3, 4, 5, 10],
)

generation_latency_ms = Histogram(
    "generation_latency_ms",
    "Generation service latency in milliseconds",
    ["outcome"],
    buckets=[100, 500, 1000, 2000, 5000, 10000, 15000, 30000],
)

generation_requests_total = Counter(
    "generation_requests_total",
    "Total generation service calls",
    ["outcome"],
)

chat_turns_total = Counter(
    "chat_turns_total",
    "Total chat turns answered",
    ["source"],
)


class PrometheusChatMetrics:
    """Prometheus-based metrics for the chat pipeline."""

    def record_retrieval(self, mode: str, count: int) -> None:
        """Record how many documents a search returned."""
        retrieval_documents.labels(mode=mode).observe(count)

    def record_generation(self, outcome: str, latency_ms: float) -> None:
        """Record one generation attempt."""
        generation_requests_total.labels(outcome=outcome).inc()
        generation_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_turn(self, source: str) -> None:
        """Increment answered-turn counter."""
        chat_turns_total.labels(source=source).inc()
