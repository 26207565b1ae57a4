"""Prometheus metrics for loan service calls, payment workflow and HTTP requests"""

from prometheus_client import Counter, Histogram

# Loan service metrics
loan_api_latency_histogram = Histogram(
    "loan_api_latency_seconds",
    "Loan service response time",
    ["operation"],  # list_loans | submit_payment
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

loan_api_failure_counter = Counter(
    "loan_api_failures_total",
    "Failed loan service calls",
    ["operation", "kind"],  # kind: network | decode
)

directory_refresh_failures_counter = Counter(
    "loan_directory_refresh_failures_total",
    "Loan listing refreshes that kept the stale listing",
)

# Workflow metrics
workflow_transition_counter = Counter(
    "emi_payment_workflow_transitions_total",
    "Payment workflow state transitions",
    ["to_state"],
)

workflow_failure_counter = Counter(
    "emi_payment_workflow_failures_total",
    "Payment attempts that ended in a failure state",
    ["reason"],
)

payment_submission_counter = Counter(
    "emi_payment_submissions_total",
    "Payment submissions by outcome",
    ["outcome"],  # completed | rejected | error
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transition(to_state: str, failure_reason: str | None = None) -> None:
    """Record a workflow transition, and the failure reason when it lands in failed"""
    workflow_transition_counter.labels(to_state=to_state).inc()
    if failure_reason is not None:
        workflow_failure_counter.labels(reason=failure_reason).inc()
