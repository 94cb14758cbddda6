"""Prometheus metrics for monitoring decision mix, payoff plans and request latency"""

from prometheus_client import Counter, Histogram

# Affordability metrics
affordability_decision_counter = Counter(
    "obsidian_affordability_decisions_total",
    "Total affordability decisions made",
    ["decision"],  # YES | CONDITIONAL | DEFER | NO
)

affordability_risk_counter = Counter(
    "obsidian_affordability_risk_level_total",
    "Affordability decisions by risk level",
    ["risk_level"],  # LOW | MODERATE | HIGH | CRITICAL
)

# Debt planning metrics
payoff_plan_counter = Counter(
    "obsidian_payoff_plans_total",
    "Debt payoff plans generated",
    ["recommended_strategy"],  # avalanche | snowball | hybrid | none
)

simulated_months_histogram = Histogram(
    "obsidian_simulated_months",
    "Months to debt freedom for simulated strategies",
    ["strategy"],
    buckets=[1, 3, 6, 12, 24, 36, 60, 120, 240, 360],
)

# Request handling
idempotent_replay_counter = Counter(
    "obsidian_idempotent_replays_total",
    "Responses served from the idempotency store",
    ["endpoint"],
)

validation_failure_counter = Counter(
    "obsidian_validation_failures_total",
    "Requests rejected by schema or limit validation",
    ["endpoint", "code"],  # VALIDATION_ERROR | LIMITS_EXCEEDED
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_affordability_decision(decision: str, risk_level: str) -> None:
    """Record decision mix for monitoring how often purchases are approved"""
    affordability_decision_counter.labels(decision=decision).inc()
    affordability_risk_counter.labels(risk_level=risk_level).inc()


def record_payoff_plan(recommended_strategy: str, months_by_strategy: dict) -> None:
    payoff_plan_counter.labels(recommended_strategy=recommended_strategy).inc()
    for strategy, months in months_by_strategy.items():
        simulated_months_histogram.labels(strategy=strategy).observe(months)
