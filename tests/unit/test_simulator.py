"""Unit tests for the month-by-month payoff simulation, comparison and insights"""

import pytest
from datetime import date
from obsidian_engine.domain.amortization import initialize_debt_state
from obsidian_engine.domain.models import DebtAccount, DebtStrategy, DebtType
from obsidian_engine.domain.simulator import (
    compare_strategies,
    generate_debt_insights,
    simulate_month,
    simulate_strategy,
)


def test_empty_debt_list(start_date):
    """Test simulating no debts finishes immediately with nothing paid"""
    result = simulate_strategy([], DebtStrategy.AVALANCHE, 500.0, start_date=start_date)

    assert result.total_months == 0
    assert result.total_interest_paid == 0
    assert result.schedule == []
    assert result.payoff_order == []


@pytest.mark.parametrize("strategy", list(DebtStrategy))
def test_principal_sums_to_original_balance(sample_debts, start_date, strategy):
    """Test principal paid per debt adds up to its starting balance"""
    result = simulate_strategy(sample_debts, strategy, 200.0, start_date=start_date)

    for debt in sample_debts:
        principal = sum(
            p.principal_paid
            for month in result.schedule
            for p in month.payments
            if p.debt_id == debt.id
        )
        assert principal == pytest.approx(debt.balance, abs=0.01)


def test_avalanche_never_costs_more_interest_than_snowball(sample_debts, start_date):
    """Test avalanche interest is never above snowball interest"""
    avalanche = simulate_strategy(sample_debts, DebtStrategy.AVALANCHE, 200.0, start_date=start_date)
    snowball = simulate_strategy(sample_debts, DebtStrategy.SNOWBALL, 200.0, start_date=start_date)

    assert avalanche.total_interest_paid <= snowball.total_interest_paid


def test_large_extra_payment_caps_each_debt_at_its_balance(sample_debts, start_date):
    """Test a huge budget pays each balance in full but not the month's interest on top"""
    result = simulate_strategy(sample_debts, DebtStrategy.AVALANCHE, 50000.0, start_date=start_date)

    # cc1 accrues $104.13 against a $100 minimum, so $4.13 carries into month 2
    first, second = result.schedule
    assert set(first.debts_paid_off_this_month) == {"cc2", "loan1"}
    assert first.total_remaining_debt == pytest.approx(4.13, abs=0.01)
    assert second.debts_paid_off_this_month == ("cc1",)
    assert second.total_remaining_debt == 0
    assert result.total_months == 2


def test_schedule_dates_are_calendar_months(sample_debts, start_date):
    """Test schedule months step through the calendar from the start date"""
    result = simulate_strategy(sample_debts, DebtStrategy.SNOWBALL, 200.0, start_date=start_date)

    assert result.schedule[0].date == "January 2027"
    assert result.schedule[1].date == "February 2027"
    assert result.schedule[12].date == "January 2028"


def test_freed_minimum_rolls_into_next_month(start_date):
    """Test a closed debt's minimum joins the budget the following month"""
    debts = [
        DebtAccount(id="small", type=DebtType.OTHER, balance=50.0, apr=0.0, minimum_payment=50.0),
        DebtAccount(id="large", type=DebtType.OTHER, balance=1000.0, apr=0.0, minimum_payment=50.0),
    ]
    result = simulate_strategy(debts, DebtStrategy.SNOWBALL, 0.0, start_date=start_date)

    first, second = result.schedule[0], result.schedule[1]
    assert first.debts_paid_off_this_month == ("small",)
    assert first.extra_payment_applied == 0.0
    assert second.extra_payment_applied == 50.0
    assert second.payments[0].debt_id == "large"
    assert second.payments[0].payment_amount == 100.0


def test_minimum_only_never_applies_extra(sample_debts, start_date):
    """Test the baseline pays minimums only, ignoring the extra"""
    result = simulate_strategy(sample_debts, DebtStrategy.MINIMUM_ONLY, 500.0, start_date=start_date)

    assert all(month.extra_payment_applied == 0 for month in result.schedule)
    assert result.schedule[0].total_payment == 325.0


def test_month_cap_reports_unpaid_debts(start_date):
    """Test debts still open at the cap get the sentinel payoff month"""
    # Interest of $250 a month outruns a $25 minimum forever
    debts = [DebtAccount(id="trap", type=DebtType.PAYDAY_LOAN, balance=10000.0, apr=30.0, minimum_payment=25.0)]
    result = simulate_strategy(debts, DebtStrategy.AVALANCHE, 0.0, max_months=12, start_date=start_date)

    assert result.total_months == 12
    assert len(result.schedule) == 12
    assert result.payoff_order[0].debt_id == "trap"
    assert result.payoff_order[0].months_to_payoff == 12 + 999


def test_zero_balance_debt_is_ignored(start_date):
    """Test zero-balance debts are neither paid nor counted in the required payment"""
    debts = [
        DebtAccount(id="done", type=DebtType.CREDIT_CARD, balance=0.0, apr=20.0),
        DebtAccount(id="open", type=DebtType.OTHER, balance=100.0, apr=0.0, minimum_payment=100.0),
    ]
    result = simulate_strategy(debts, DebtStrategy.AVALANCHE, 0.0, start_date=start_date)

    assert result.total_months == 1
    assert [p.debt_id for p in result.payoff_order] == ["open"]
    assert [p.debt_id for p in result.schedule[0].payments] == ["open"]
    assert result.monthly_payment_required == 100.0


def test_simulate_month_leaves_input_untouched(sample_debts, start_date):
    """Test a month step returns a new snapshot without mutating its input"""
    debts = tuple(initialize_debt_state(d, i) for i, d in enumerate(sample_debts))
    before = tuple(debts)

    state = simulate_month(debts, DebtStrategy.AVALANCHE, 200.0, 0.0, 1, start_date)

    assert debts == before
    assert state.debts != debts
    assert state.month == 1
    # cc1 accrues about $104.13 and receives its minimum plus the whole extra
    cc1 = next(p for p in state.payments if p.debt_id == "cc1")
    assert cc1.interest_paid == pytest.approx(104.13, abs=0.01)
    assert cc1.payment_amount == 300.0
    assert cc1.remaining_balance == pytest.approx(4804.13, abs=0.01)


def test_simulation_is_deterministic(sample_debts, start_date):
    """Test identical inputs give identical results"""
    first = simulate_strategy(sample_debts, DebtStrategy.HYBRID, 150.0, start_date=start_date)
    second = simulate_strategy(sample_debts, DebtStrategy.HYBRID, 150.0, start_date=start_date)
    assert first == second


def test_compare_returns_all_four_strategies(sample_debts, start_date):
    """Test the comparison runs every strategy in a fixed order"""
    comparison = compare_strategies(sample_debts, 200.0, start_date=start_date)

    assert [r.strategy for r in comparison.strategies] == [
        DebtStrategy.AVALANCHE,
        DebtStrategy.SNOWBALL,
        DebtStrategy.HYBRID,
        DebtStrategy.MINIMUM_ONLY,
    ]
    assert comparison.savings_vs_minimum > 0
    assert comparison.time_saved_months > 0
    assert comparison.savings_vs_worst >= comparison.savings_vs_minimum


def test_compare_recommends_snowball_for_cheap_quick_win(start_date):
    """Test a quick win costing under $200 extra picks snowball"""
    # Smallest balance is also the highest rate, so both orders agree
    debts = [
        DebtAccount(id="small", type=DebtType.CREDIT_CARD, balance=200.0, apr=25.0, minimum_payment=25.0),
        DebtAccount(id="large", type=DebtType.PERSONAL_LOAN, balance=5000.0, apr=10.0, minimum_payment=100.0),
    ]
    comparison = compare_strategies(debts, 200.0, start_date=start_date)

    assert comparison.recommended_strategy == DebtStrategy.SNOWBALL
    assert "snowball" in comparison.recommendation_reason


def test_compare_recommends_hybrid_for_moderate_interest_gap(start_date):
    """Test a quick snowball win costing $200-$500 extra interest picks hybrid"""
    # Snowball spends three months on the 0% promo balance while the 24% card
    # keeps compounding, costing roughly $360 more than avalanche
    debts = [
        DebtAccount(id="promo", type=DebtType.OTHER, balance=1500.0, apr=0.0, minimum_payment=25.0),
        DebtAccount(id="card", type=DebtType.CREDIT_CARD, balance=10000.0, apr=24.0, minimum_payment=400.0),
    ]
    comparison = compare_strategies(debts, 500.0, start_date=start_date)

    avalanche = comparison.result_for(DebtStrategy.AVALANCHE)
    snowball = comparison.result_for(DebtStrategy.SNOWBALL)
    assert snowball.payoff_order[0].debt_id == "promo"
    assert snowball.payoff_order[0].months_to_payoff == 3
    assert 200 < snowball.total_interest_paid - avalanche.total_interest_paid < 500
    assert comparison.recommended_strategy == DebtStrategy.HYBRID
    assert "hybrid" in comparison.recommendation_reason


def test_compare_recommends_avalanche_without_quick_win(start_date):
    """Test no payoff within three months picks avalanche"""
    debts = [DebtAccount(id="only", type=DebtType.CREDIT_CARD, balance=10000.0, apr=20.0, minimum_payment=250.0)]
    comparison = compare_strategies(debts, 100.0, start_date=start_date)

    assert comparison.recommended_strategy == DebtStrategy.AVALANCHE
    assert "avalanche" in comparison.recommendation_reason


def test_insights_summarize_debts(sample_debts, start_date):
    """Test insights report totals, extremes and the debt-free date"""
    comparison = compare_strategies(sample_debts, 200.0, start_date=start_date)
    insights = generate_debt_insights(sample_debts, comparison, today=date(2027, 1, 1))

    assert insights.total_debt == 13500.0
    assert insights.average_apr == pytest.approx(17.07, abs=0.01)
    assert insights.highest_apr_debt.id == "cc1"
    assert insights.lowest_balance_debt.id == "cc2"
    assert insights.monthly_minimum_required == 325.0
    assert insights.potential_interest_savings == comparison.savings_vs_minimum

    recommended = comparison.result_for(comparison.recommended_strategy)
    year, month = divmod(recommended.total_months, 12)
    assert insights.debt_free_date == date(2027 + year, 1 + month, 1).isoformat()


def test_insights_list_quick_wins(start_date):
    """Test debts closed within three months are listed as quick wins"""
    debts = [
        DebtAccount(id="tiny", name="Gym Card", type=DebtType.CREDIT_CARD, balance=200.0, apr=25.0, minimum_payment=25.0),
        DebtAccount(id="large", type=DebtType.PERSONAL_LOAN, balance=5000.0, apr=10.0, minimum_payment=100.0),
    ]
    comparison = compare_strategies(debts, 200.0, start_date=start_date)
    insights = generate_debt_insights(debts, comparison, today=start_date)

    assert insights.quick_wins == ["Pay off Gym Card ($200.00) in 1 months"]


def test_insights_are_idempotent(sample_debts, start_date):
    """Test insights are stable for the same comparison and date"""
    comparison = compare_strategies(sample_debts, 200.0, start_date=start_date)
    today = date(2027, 1, 1)

    assert generate_debt_insights(sample_debts, comparison, today) == generate_debt_insights(
        sample_debts, comparison, today
    )
