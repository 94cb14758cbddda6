"""Debt payoff strategies - priority ordering and extra-payment allocation"""

from typing import Callable, Dict, List, Sequence

from obsidian_engine.domain import thresholds
from obsidian_engine.domain.models import DebtState, DebtStrategy
from obsidian_engine.utils.money import round_cents

StrategySorter = Callable[[Sequence[DebtState]], List[DebtState]]


def _active(debts: Sequence[DebtState]) -> List[DebtState]:
    return [d for d in debts if d.is_active]


def sort_by_avalanche(debts: Sequence[DebtState]) -> List[DebtState]:
    """Highest APR first, smallest balance breaks ties. Minimizes total interest."""
    return sorted(_active(debts), key=lambda d: (-d.apr, d.balance))


def sort_by_snowball(debts: Sequence[DebtState]) -> List[DebtState]:
    """Smallest balance first, highest APR breaks ties. Maximizes early payoffs."""
    return sorted(_active(debts), key=lambda d: (d.balance, -d.apr))


def _normalize(value: float, low: float, high: float) -> float:
    if high == low:
        return 1.0
    return (value - low) / (high - low)


def sort_by_hybrid(debts: Sequence[DebtState]) -> List[DebtState]:
    """
    Weighted blend of avalanche and snowball.

    score = 0.6 * normalized_apr + 0.4 * (1 - normalized_balance)

    Normalization is min-max over the debts still active, so the ordering is
    recomputed as debts drop out. A dimension with no spread normalizes to 1.
    Higher scores are paid first.
    """
    active = _active(debts)
    if not active:
        return []

    aprs = [d.apr for d in active]
    balances = [d.balance for d in active]
    min_apr, max_apr = min(aprs), max(aprs)
    min_balance, max_balance = min(balances), max(balances)

    def score(debt: DebtState) -> float:
        apr_score = _normalize(debt.apr, min_apr, max_apr)
        if max_balance == min_balance:
            balance_score = 1.0
        else:
            balance_score = 1 - _normalize(debt.balance, min_balance, max_balance)
        return thresholds.HYBRID_APR_WEIGHT * apr_score + thresholds.HYBRID_BALANCE_WEIGHT * balance_score

    return sorted(active, key=score, reverse=True)


def sort_by_minimum_only(debts: Sequence[DebtState]) -> List[DebtState]:
    """Input order, active debts only. Baseline for comparison."""
    return _active(debts)


_SORTERS: Dict[DebtStrategy, StrategySorter] = {
    DebtStrategy.AVALANCHE: sort_by_avalanche,
    DebtStrategy.SNOWBALL: sort_by_snowball,
    DebtStrategy.HYBRID: sort_by_hybrid,
    DebtStrategy.MINIMUM_ONLY: sort_by_minimum_only,
}

_DESCRIPTIONS: Dict[DebtStrategy, str] = {
    DebtStrategy.AVALANCHE: "Pay off highest interest rate debts first to minimize total interest paid",
    DebtStrategy.SNOWBALL: "Pay off smallest balances first for quick wins and momentum",
    DebtStrategy.HYBRID: "Balance between interest savings and quick wins using a weighted scoring system",
    DebtStrategy.MINIMUM_ONLY: "Pay only minimum payments (baseline comparison)",
}


def get_strategy_sorter(strategy: DebtStrategy) -> StrategySorter:
    return _SORTERS[DebtStrategy(strategy)]


def get_strategy_description(strategy: DebtStrategy) -> str:
    return _DESCRIPTIONS[DebtStrategy(strategy)]


def allocate_extra_payments(
    debts: Sequence[DebtState],
    sorted_debts: Sequence[DebtState],
    extra_payment: float,
    freed_minimums: float,
) -> Dict[str, float]:
    """
    Split the month's discretionary budget across debts in priority order.

    Budget = user extra + minimums freed by debts paid off in earlier months.
    The top-priority debt receives the whole budget, capped at its remaining
    balance. Only a debt whose balance is covered in full passes the rest on
    to the next debt, so a month has a single target otherwise.

    Returns:
        Mapping of every debt id to its extra amount (0 when not targeted)
    """
    allocations = {d.id: 0.0 for d in debts}
    remaining = extra_payment + freed_minimums

    for debt in sorted_debts:
        if remaining <= 0:
            break
        if not debt.is_active:
            continue

        applied = min(remaining, debt.balance)
        allocations[debt.id] = round_cents(applied)
        remaining -= applied

        if applied < debt.balance:
            break

    return allocations
