"""Prometheus metrics for monitoring split reconciliation, schedules and layaway plans"""

from prometheus_client import Counter, Histogram

from allocation_gateway.domain.models import ErrorKind, SplitOutcome

# Split metrics
split_outcome_counter = Counter(
    "allocation_split_total",
    "Total split calculations",
    ["outcome"],  # reconciled | infeasible | invalid
)

rounding_adjustment_counter = Counter(
    "allocation_rounding_adjustments_total",
    "Split outcomes where the reconciliation pass moved a non-zero drift",
)

clamped_value_counter = Counter(
    "allocation_clamped_values_total",
    "Individual split amounts reduced or raised to fit funds or bounds",
)

# Schedule metrics
schedule_counter = Counter(
    "allocation_schedule_total",
    "Installment schedules generated",
    ["interest"],  # interest_free | amortized
)

layaway_counter = Counter(
    "allocation_layaway_plan_total",
    "Layaway plans computed",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_split(outcome: SplitOutcome) -> None:
    """Record split metrics for monitoring reconciliation failures and clamping"""
    if outcome.reconciled:
        label = "reconciled"
    elif outcome.error_kind == ErrorKind.INVALID_REQUEST:
        label = "invalid"
    else:
        label = "infeasible"
    split_outcome_counter.labels(outcome=label).inc()

    if outcome.rounding_adjustment != 0:
        rounding_adjustment_counter.inc()
    if outcome.notes:
        clamped_value_counter.inc(len(outcome.notes))


def record_schedule(interest_free: bool) -> None:
    schedule_counter.labels(interest="interest_free" if interest_free else "amortized").inc()
