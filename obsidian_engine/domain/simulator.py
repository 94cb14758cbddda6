"""Month-by-month debt payoff simulation, strategy comparison and insights"""

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence

from obsidian_engine.domain import thresholds
from obsidian_engine.domain.amortization import (
    estimate_minimum_payment,
    initialize_debt_state,
    monthly_rate,
)
from obsidian_engine.domain.models import (
    DebtAccount,
    DebtInsights,
    DebtPayment,
    DebtState,
    DebtStrategy,
    DebtType,
    HighestAprDebt,
    LowestBalanceDebt,
    MonthlySimulationState,
    PayoffOrderEntry,
    StrategyComparison,
    StrategySimulationResult,
)
from obsidian_engine.domain.strategies import allocate_extra_payments, get_strategy_sorter
from obsidian_engine.utils.date_utils import add_months, to_date_string, to_month_year
from obsidian_engine.utils.money import format_money, round_cents

logger = logging.getLogger(__name__)

COMPARED_STRATEGIES = (
    DebtStrategy.AVALANCHE,
    DebtStrategy.SNOWBALL,
    DebtStrategy.HYBRID,
    DebtStrategy.MINIMUM_ONLY,
)
EXTRA_PAYMENT_STRATEGIES = COMPARED_STRATEGIES[:3]


def simulate_month(
    debts: Sequence[DebtState],
    strategy: DebtStrategy,
    extra_payment: float,
    freed_minimums: float,
    month: int,
    start_date: date,
    cumulative_interest: float = 0.0,
) -> MonthlySimulationState:
    """
    Advance every debt by one billing cycle.

    Pure: `debts` is left untouched and the returned state carries the next
    snapshot in `debts`. Per active debt, interest accrues on the opening
    balance, the payment (minimum + allocated extra, capped at the balance
    with interest) pays interest first, and the rest reduces principal.
    """
    if strategy == DebtStrategy.MINIMUM_ONLY:
        allocations: Dict[str, float] = {}
        extra_available = 0.0
    else:
        ordered = get_strategy_sorter(strategy)(debts)
        allocations = allocate_extra_payments(debts, ordered, extra_payment, freed_minimums)
        extra_available = extra_payment + freed_minimums

    next_debts: List[DebtState] = []
    payments: List[DebtPayment] = []
    paid_off: List[str] = []
    total_payment = 0.0
    total_interest = 0.0
    total_principal = 0.0

    for debt in debts:
        if not debt.is_active:
            next_debts.append(replace(debt, balance=0.0, is_paid_off=True))
            continue

        interest = round_cents(debt.balance * monthly_rate(debt.apr))
        balance_with_interest = round_cents(debt.balance + interest)
        desired = debt.minimum_payment + allocations.get(debt.id, 0.0)

        actual = round_cents(min(desired, balance_with_interest))
        interest_paid = min(interest, actual)
        principal_paid = round_cents(actual - interest_paid)
        new_balance = max(0.0, round_cents(balance_with_interest - actual))

        is_paid_off = new_balance <= thresholds.PAYOFF_TOLERANCE
        if is_paid_off:
            new_balance = 0.0
            paid_off.append(debt.id)

        payments.append(
            DebtPayment(
                debt_id=debt.id,
                debt_name=debt.name,
                payment_amount=actual,
                principal_paid=principal_paid,
                interest_paid=interest_paid,
                remaining_balance=new_balance,
            )
        )
        next_debts.append(
            DebtState(
                id=debt.id,
                name=debt.name,
                type=debt.type,
                balance=new_balance,
                apr=debt.apr,
                minimum_payment=debt.minimum_payment,
                credit_limit=debt.credit_limit,
                is_paid_off=is_paid_off,
            )
        )

        total_payment += actual
        total_interest += interest_paid
        total_principal += principal_paid

    return MonthlySimulationState(
        month=month,
        date=to_month_year(add_months(start_date, month - 1)),
        debts=tuple(next_debts),
        payments=tuple(payments),
        total_payment=round_cents(total_payment),
        total_interest_paid=round_cents(total_interest),
        cumulative_interest_paid=round_cents(cumulative_interest + total_interest),
        total_principal_paid=round_cents(total_principal),
        total_remaining_debt=round_cents(sum(d.balance for d in next_debts)),
        debts_paid_off_this_month=tuple(paid_off),
        extra_payment_applied=round_cents(extra_available),
    )


def simulate_strategy(
    debts: Sequence[DebtAccount],
    strategy: DebtStrategy,
    extra_monthly_payment: float,
    max_months: int = thresholds.MAX_SIMULATION_MONTHS,
    start_date: Optional[date] = None,
) -> StrategySimulationResult:
    """
    Run a full payoff simulation for one strategy.

    Months are folded sequentially until every debt is closed or `max_months`
    is reached. Minimums freed by a payoff in month m join the extra budget
    from month m + 1. Debts still open at the cap are reported with
    months_to_payoff = max_months + 999.
    """
    strategy = DebtStrategy(strategy)
    if start_date is None:
        start_date = date.today()

    state = tuple(initialize_debt_state(d, i) for i, d in enumerate(debts))
    by_id = {d.id: d for d in state}
    interest_by_debt: Dict[str, float] = {d.id: 0.0 for d in state}

    schedule: List[MonthlySimulationState] = []
    payoff_order: List[PayoffOrderEntry] = []
    cumulative_interest = 0.0
    total_paid = 0.0
    freed_minimums = 0.0
    month = 0

    while month < max_months and any(d.is_active for d in state):
        month += 1
        month_state = simulate_month(
            state,
            strategy,
            extra_monthly_payment,
            freed_minimums,
            month,
            start_date,
            cumulative_interest,
        )

        cumulative_interest = month_state.cumulative_interest_paid
        total_paid += month_state.total_payment
        for payment in month_state.payments:
            interest_by_debt[payment.debt_id] += payment.interest_paid

        for debt_id in month_state.debts_paid_off_this_month:
            debt = by_id[debt_id]
            freed_minimums += debt.minimum_payment
            payoff_order.append(
                PayoffOrderEntry(
                    debt_id=debt_id,
                    debt_name=debt.name,
                    months_to_payoff=month,
                    interest_paid=round_cents(interest_by_debt[debt_id]),
                    original_balance=debt.balance,
                )
            )

        schedule.append(month_state)
        state = month_state.debts

    unpaid = [d for d in state if d.is_active]
    if unpaid:
        logger.warning(
            "Simulation reached month cap with debts outstanding",
            extra={"strategy": strategy.value, "max_months": max_months, "unpaid_debts": len(unpaid)},
        )
    for debt in unpaid:
        payoff_order.append(
            PayoffOrderEntry(
                debt_id=debt.id,
                debt_name=debt.name,
                months_to_payoff=max_months + thresholds.UNPAID_SENTINEL_OFFSET,
                interest_paid=round_cents(interest_by_debt[debt.id]),
                original_balance=by_id[debt.id].balance,
            )
        )

    total_minimum = sum(d.minimum_payment for d in by_id.values() if d.balance > 0)
    return StrategySimulationResult(
        strategy=strategy,
        total_months=month,
        total_interest_paid=round_cents(cumulative_interest),
        total_amount_paid=round_cents(total_paid),
        monthly_payment_required=round_cents(total_minimum + extra_monthly_payment),
        schedule=schedule,
        payoff_order=payoff_order,
    )


def _recommend(
    avalanche: StrategySimulationResult,
    snowball: StrategySimulationResult,
    min_interest: float,
) -> tuple[DebtStrategy, str]:
    """
    Fixed recommendation policy, evaluated in order:
    1. snowball costs > $500 more, or has no payoff within 3 months -> avalanche
    2. snowball pays something off within 3 months for < $200 more -> snowball
    3. otherwise -> hybrid
    """
    differential = snowball.total_interest_paid - avalanche.total_interest_paid
    quick_snowball_win = (
        bool(snowball.payoff_order)
        and snowball.payoff_order[0].months_to_payoff <= thresholds.QUICK_WIN_MONTHS
    )

    if differential > thresholds.AVALANCHE_INTEREST_GAP or not quick_snowball_win:
        return DebtStrategy.AVALANCHE, (
            f"The avalanche method saves you the most money ({format_money(min_interest)} "
            "in interest total). Focus on your highest-rate debt first."
        )
    if differential < thresholds.SNOWBALL_INTEREST_GAP:
        return DebtStrategy.SNOWBALL, (
            f"The snowball method gives you quick wins while only costing "
            f"{format_money(differential)} more in interest. The psychological momentum "
            "may help you stay motivated."
        )
    return DebtStrategy.HYBRID, (
        "The hybrid approach balances interest savings with quick wins, making it a good "
        "middle-ground strategy for your situation."
    )


def compare_strategies(
    debts: Sequence[DebtAccount],
    extra_monthly_payment: float,
    max_months: int = thresholds.MAX_SIMULATION_MONTHS,
    start_date: Optional[date] = None,
) -> StrategyComparison:
    """Simulate all four strategies over the same debts and pick one to recommend"""
    results = [
        simulate_strategy(
            debts,
            strategy,
            0.0 if strategy == DebtStrategy.MINIMUM_ONLY else extra_monthly_payment,
            max_months,
            start_date,
        )
        for strategy in COMPARED_STRATEGIES
    ]
    by_strategy = {r.strategy: r for r in results}
    baseline = by_strategy[DebtStrategy.MINIMUM_ONLY]
    accelerated = [by_strategy[s] for s in EXTRA_PAYMENT_STRATEGIES]

    min_interest = min(r.total_interest_paid for r in accelerated)
    min_months = min(r.total_months for r in accelerated)
    all_interest = [r.total_interest_paid for r in results]

    recommended, reason = _recommend(
        by_strategy[DebtStrategy.AVALANCHE],
        by_strategy[DebtStrategy.SNOWBALL],
        min_interest,
    )

    return StrategyComparison(
        strategies=results,
        recommended_strategy=recommended,
        recommendation_reason=reason,
        savings_vs_minimum=round_cents(baseline.total_interest_paid - min_interest),
        savings_vs_worst=round_cents(max(all_interest) - min(all_interest)),
        time_saved_months=baseline.total_months - min_months,
    )


def generate_debt_insights(
    debts: Sequence[DebtAccount],
    comparison: StrategyComparison,
    today: Optional[date] = None,
) -> DebtInsights:
    """Summarize the debt set and the recommended plan"""
    if today is None:
        today = date.today()

    active = [d for d in debts if d.balance > 0]
    total_debt = sum(d.balance for d in active)
    average_apr = sum(d.apr * d.balance for d in active) / total_debt if total_debt > 0 else 0.0

    highest_apr = None
    lowest_balance = None
    if active:
        top = max(active, key=lambda d: d.apr)
        smallest = min(active, key=lambda d: d.balance)
        highest_apr = HighestAprDebt(
            id=top.id or "unknown",
            name=top.name or DebtType(top.type).value,
            apr=top.apr,
            balance=top.balance,
        )
        lowest_balance = LowestBalanceDebt(
            id=smallest.id or "unknown",
            name=smallest.name or DebtType(smallest.type).value,
            balance=smallest.balance,
        )

    recommended = comparison.result_for(comparison.recommended_strategy)
    quick_wins: List[str] = []
    debt_free_date = "Unknown"
    if recommended is not None:
        quick_wins = [
            f"Pay off {p.debt_name} ({format_money(p.original_balance)}) in {p.months_to_payoff} months"
            for p in recommended.payoff_order
            if p.months_to_payoff <= thresholds.QUICK_WIN_MONTHS
        ]
        debt_free_date = to_date_string(add_months(today, recommended.total_months))

    return DebtInsights(
        total_debt=round_cents(total_debt),
        average_apr=round_cents(average_apr),
        highest_apr_debt=highest_apr,
        lowest_balance_debt=lowest_balance,
        quick_wins=quick_wins,
        potential_interest_savings=comparison.savings_vs_minimum,
        debt_free_date=debt_free_date,
        monthly_minimum_required=round_cents(sum(estimate_minimum_payment(d) for d in active)),
    )
