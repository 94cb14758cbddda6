"""Amortization math and minimum-payment estimation"""

from typing import Callable, Dict

from obsidian_engine.domain import thresholds
from obsidian_engine.domain.models import DebtAccount, DebtState, DebtType
from obsidian_engine.utils.money import round_cents


def monthly_rate(apr: float) -> float:
    """Convert an APR percentage to a monthly decimal rate"""
    return apr / 100 / 12


def calculate_amortized_payment(principal: float, apr: float, term_months: int) -> float:
    """
    Fixed monthly payment that retires `principal` over `term_months`.

    payment = P * r * (1 + r)^n / ((1 + r)^n - 1), with r = APR / 100 / 12.
    A zero rate degrades to straight-line repayment. Result is rounded to cents.
    """
    if principal <= 0 or term_months <= 0:
        return 0.0

    rate = monthly_rate(apr)
    if rate == 0:
        return round_cents(principal / term_months)

    growth = (1 + rate) ** term_months
    return round_cents(principal * rate * growth / (growth - 1))


def percent_of_balance_payment(balance: float, percent: float) -> float:
    """Revolving-style minimum: percent of balance with a fixed dollar floor"""
    return max(round_cents(balance * percent), thresholds.MIN_PAYMENT_FLOOR)


def _term_payment(term_months: int) -> Callable[[DebtAccount], float]:
    def estimate(debt: DebtAccount) -> float:
        return calculate_amortized_payment(debt.balance, debt.apr, term_months)

    return estimate


def _percent_payment(percent: float) -> Callable[[DebtAccount], float]:
    def estimate(debt: DebtAccount) -> float:
        return percent_of_balance_payment(debt.balance, percent)

    return estimate


_MINIMUM_PAYMENT_ESTIMATORS: Dict[DebtType, Callable[[DebtAccount], float]] = {
    DebtType.CREDIT_CARD: _percent_payment(thresholds.MIN_CREDIT_CARD_PAYMENT_PERCENT),
    DebtType.MORTGAGE: _term_payment(thresholds.MORTGAGE_TERM_MONTHS),
    DebtType.AUTO_LOAN: _term_payment(thresholds.INSTALLMENT_LOAN_TERM_MONTHS),
    DebtType.PERSONAL_LOAN: _term_payment(thresholds.INSTALLMENT_LOAN_TERM_MONTHS),
    DebtType.STUDENT_LOAN: _term_payment(thresholds.STUDENT_LOAN_TERM_MONTHS),
}
_DEFAULT_ESTIMATOR = _percent_payment(thresholds.MIN_OTHER_PAYMENT_PERCENT)


def estimate_minimum_payment(debt: DebtAccount) -> float:
    """Minimum payment as supplied, or estimated from the debt type"""
    if debt.minimum_payment is not None:
        return debt.minimum_payment

    estimator = _MINIMUM_PAYMENT_ESTIMATORS.get(DebtType(debt.type), _DEFAULT_ESTIMATOR)
    return estimator(debt)


def initialize_debt_state(debt: DebtAccount, index: int) -> DebtState:
    """Build the starting simulation snapshot for a debt account"""
    debt_type = DebtType(debt.type)
    return DebtState(
        id=debt.id if debt.id is not None else f"debt_{index}",
        name=debt.name if debt.name is not None else f"{debt_type.value}_{index}",
        type=debt_type,
        balance=debt.balance,
        apr=debt.apr,
        minimum_payment=estimate_minimum_payment(debt),
        credit_limit=debt.credit_limit,
        is_paid_off=debt.balance <= 0,
    )
