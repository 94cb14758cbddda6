"""Unit tests for payoff ordering and extra-payment allocation"""

import pytest
from obsidian_engine.domain.amortization import initialize_debt_state
from obsidian_engine.domain.models import DebtState, DebtStrategy, DebtType
from obsidian_engine.domain.strategies import (
    allocate_extra_payments,
    get_strategy_description,
    get_strategy_sorter,
    sort_by_avalanche,
    sort_by_hybrid,
    sort_by_minimum_only,
    sort_by_snowball,
)


def _states(debts):
    return [initialize_debt_state(d, i) for i, d in enumerate(debts)]


def _ids(debts):
    return [d.id for d in debts]


def _debt(debt_id, balance, apr, minimum=25.0):
    return DebtState(
        id=debt_id,
        name=debt_id,
        type=DebtType.OTHER,
        balance=balance,
        apr=apr,
        minimum_payment=minimum,
    )


def test_avalanche_orders_by_apr(sample_debts):
    """Test avalanche puts the highest APR first"""
    assert _ids(sort_by_avalanche(_states(sample_debts))) == ["cc1", "cc2", "loan1"]


def test_snowball_orders_by_balance(sample_debts):
    """Test snowball puts the smallest balance first"""
    assert _ids(sort_by_snowball(_states(sample_debts))) == ["cc2", "cc1", "loan1"]


def test_avalanche_tie_broken_by_smaller_balance():
    """Test equal APRs fall back to the smaller balance"""
    debts = [_debt("big", 3000.0, 20.0), _debt("small", 300.0, 20.0)]
    assert _ids(sort_by_avalanche(debts)) == ["small", "big"]


def test_snowball_tie_broken_by_higher_apr():
    """Test equal balances fall back to the higher APR"""
    debts = [_debt("cheap", 1000.0, 5.0), _debt("pricey", 1000.0, 22.0)]
    assert _ids(sort_by_snowball(debts)) == ["pricey", "cheap"]


def test_hybrid_blends_rate_and_balance(sample_debts):
    """Test hybrid ranks by the weighted APR/balance score"""
    # cc1 scores 0.76, cc2 about 0.72, loan1 0.0
    assert _ids(sort_by_hybrid(_states(sample_debts))) == ["cc1", "cc2", "loan1"]


def test_hybrid_identical_debts_keep_input_order():
    """Test debts with no spread in either dimension stay in input order"""
    debts = [_debt("a", 1000.0, 10.0), _debt("b", 1000.0, 10.0), _debt("c", 1000.0, 10.0)]
    assert _ids(sort_by_hybrid(debts)) == ["a", "b", "c"]


def test_minimum_only_keeps_input_order(sample_debts):
    """Test the baseline strategy does not reorder"""
    assert _ids(sort_by_minimum_only(_states(sample_debts))) == ["cc1", "cc2", "loan1"]


@pytest.mark.parametrize("strategy", list(DebtStrategy))
def test_sorters_drop_paid_off_debts(strategy):
    """Test every sorter skips debts with no balance left"""
    debts = [_debt("open", 1000.0, 10.0), _debt("closed", 0.0, 30.0)]
    assert _ids(get_strategy_sorter(strategy)(debts)) == ["open"]


def test_strategy_descriptions():
    """Test each strategy has a readable description"""
    assert "highest interest" in get_strategy_description(DebtStrategy.AVALANCHE)
    assert "smallest balances" in get_strategy_description(DebtStrategy.SNOWBALL)
    assert "baseline" in get_strategy_description("minimum_only")


def test_extra_goes_to_top_priority_only_when_it_is_not_closed():
    """Test a budget smaller than the top balance goes entirely to the top debt"""
    first, second = _debt("a", 1000.0, 0.0), _debt("b", 1000.0, 0.0)
    allocations = allocate_extra_payments([first, second], [first, second], 200.0, 0.0)
    assert allocations == {"a": 200.0, "b": 0.0}


def test_single_target_when_top_debt_stays_open():
    """Test nothing reaches the next debt while the top debt is not fully covered"""
    first = _debt("a", 1000.0, 12.0, minimum=200.0)
    second = _debt("b", 5000.0, 12.0, minimum=100.0)

    allocations = allocate_extra_payments([first, second], [first, second], 900.0, 0.0)

    # 900 covers most of a's balance but not all of it
    assert allocations == {"a": 900.0, "b": 0.0}


def test_top_debt_capped_at_remaining_balance():
    """Test the top debt never receives more than its balance"""
    first = _debt("a", 300.0, 12.0, minimum=200.0)
    second = _debt("b", 5000.0, 12.0, minimum=100.0)

    allocations = allocate_extra_payments([first, second], [first, second], 900.0, 0.0)

    assert allocations == {"a": 300.0, "b": 600.0}


def test_extra_cascades_after_covering_top_priority():
    """Test the remainder moves on once the top balance is covered in full"""
    first, second = _debt("a", 100.0, 0.0), _debt("b", 1000.0, 0.0)
    allocations = allocate_extra_payments([first, second], [first, second], 200.0, 0.0)

    assert allocations == {"a": 100.0, "b": 100.0}


def test_cascade_stops_at_second_open_debt():
    """Test the cascade halts at the first debt the remainder cannot cover"""
    debts = [_debt("a", 50.0, 0.0), _debt("b", 400.0, 0.0), _debt("c", 100.0, 0.0)]
    allocations = allocate_extra_payments(debts, debts, 300.0, 0.0)

    assert allocations == {"a": 50.0, "b": 250.0, "c": 0.0}


def test_freed_minimums_join_the_budget():
    """Test minimums freed by earlier payoffs add to the extra"""
    debt = _debt("a", 1000.0, 0.0)
    allocations = allocate_extra_payments([debt], [debt], 50.0, 25.0)
    assert allocations == {"a": 75.0}


def test_no_budget_allocates_nothing():
    """Test a zero budget leaves every allocation at zero"""
    debt = _debt("a", 1000.0, 0.0)
    assert allocate_extra_payments([debt], [debt], 0.0, 0.0) == {"a": 0.0}
