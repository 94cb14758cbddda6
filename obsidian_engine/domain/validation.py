"""Operating limits and cross-field consistency checks for incoming profiles and purchases"""

from typing import List, Optional

from obsidian_engine.config import Settings, settings as default_settings
from obsidian_engine.domain.exceptions import InputLimitError, ValidationIssue
from obsidian_engine.domain.models import DebtAccount, DebtType, PurchaseRequest, UserFinancialProfile


def validate_debt_account(debt: DebtAccount) -> List[ValidationIssue]:
    """A minimum above the balance or a card limit below it means the data is wrong"""
    issues = []

    if debt.minimum_payment and debt.minimum_payment > debt.balance:
        issues.append(
            ValidationIssue("minimum_payment", "Minimum payment cannot exceed balance", "invalid_minimum_payment")
        )

    if DebtType(debt.type) == DebtType.CREDIT_CARD and debt.credit_limit and debt.credit_limit < debt.balance:
        issues.append(
            ValidationIssue("credit_limit", "Credit limit cannot be less than balance", "invalid_credit_limit")
        )

    return issues


def validate_debts_consistency(debts: List[DebtAccount], field_prefix: str = "debts") -> List[ValidationIssue]:
    issues = []
    for index, debt in enumerate(debts):
        for issue in validate_debt_account(debt):
            issues.append(ValidationIssue(f"{field_prefix}[{index}].{issue.field}", issue.message, issue.code))
    return issues


def validate_profile_consistency(profile: UserFinancialProfile) -> List[ValidationIssue]:
    issues = validate_debts_consistency(profile.debts)

    # Only supplied minimums count here; estimates are not the user's claim
    total_minimums = sum(d.minimum_payment or 0.0 for d in profile.debts)
    available_for_debt = profile.monthly_income - profile.monthly_fixed_expenses
    if available_for_debt > 0 and total_minimums > available_for_debt:
        issues.append(
            ValidationIssue(
                "debts",
                "Total minimum payments exceed available income after expenses",
                "insufficient_income_for_debt",
            )
        )

    return issues


def validate_debt_limits(
    debts: List[DebtAccount],
    config: Optional[Settings] = None,
    field_prefix: str = "debts",
) -> List[ValidationIssue]:
    config = config or default_settings
    issues = []

    if len(debts) > config.max_debt_accounts:
        issues.append(
            ValidationIssue(field_prefix, f"Too many debt accounts (max {config.max_debt_accounts})", "too_many_debts")
        )

    if any(d.balance > config.max_debt_balance for d in debts):
        issues.append(
            ValidationIssue(
                f"{field_prefix}.balance",
                f"One or more debts exceed maximum balance ({config.max_debt_balance:.0f})",
                "debt_balance_out_of_bounds",
            )
        )

    return issues


def validate_profile_limits(profile: UserFinancialProfile, config: Optional[Settings] = None) -> List[ValidationIssue]:
    config = config or default_settings
    issues = []

    if profile.monthly_income > config.max_monthly_income:
        issues.append(
            ValidationIssue(
                "monthly_income",
                f"Monthly income exceeds allowed maximum ({config.max_monthly_income:.2f})",
                "income_out_of_bounds",
            )
        )

    return issues + validate_debt_limits(profile.debts, config)


def validate_purchase_limits(purchase: PurchaseRequest, config: Optional[Settings] = None) -> List[ValidationIssue]:
    config = config or default_settings
    issues = []

    if purchase.amount > config.max_purchase_amount:
        issues.append(
            ValidationIssue(
                "purchase.amount",
                f"Purchase amount exceeds maximum ({config.max_purchase_amount:.0f})",
                "purchase_amount_out_of_bounds",
            )
        )

    if purchase.description and len(purchase.description) > config.max_description_length:
        issues.append(
            ValidationIssue(
                "purchase.description",
                f"Description exceeds maximum length ({config.max_description_length})",
                "description_too_long",
            )
        )

    return issues


def ensure_valid(issues: List[ValidationIssue]) -> None:
    """Raise InputLimitError when any issue was collected"""
    if issues:
        raise InputLimitError(issues)
