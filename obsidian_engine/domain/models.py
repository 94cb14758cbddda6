"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DebtType(str, Enum):
    CREDIT_CARD = "credit_card"
    PERSONAL_LOAN = "personal_loan"
    AUTO_LOAN = "auto_loan"
    STUDENT_LOAN = "student_loan"
    MORTGAGE = "mortgage"
    MEDICAL_DEBT = "medical_debt"
    PAYDAY_LOAN = "payday_loan"
    BUY_NOW_PAY_LATER = "buy_now_pay_later"
    OTHER = "other"


class DebtStrategy(str, Enum):
    AVALANCHE = "avalanche"  # highest APR first
    SNOWBALL = "snowball"  # smallest balance first
    HYBRID = "hybrid"  # weighted blend of the two
    MINIMUM_ONLY = "minimum_only"  # baseline, no extra payment


class PaymentMethod(str, Enum):
    CASH = "cash"
    DEBIT = "debit"
    CREDIT_CARD = "credit_card"
    BUY_NOW_PAY_LATER = "buy_now_pay_later"
    FINANCING = "financing"
    SAVINGS = "savings"
    MIXED = "mixed"


class Decision(str, Enum):
    YES = "YES"
    CONDITIONAL = "CONDITIONAL"
    DEFER = "DEFER"
    NO = "NO"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReasonCode(str, Enum):
    """Machine-readable tokens explaining rule outcomes"""

    POSITIVE_CASHFLOW = "POSITIVE_CASHFLOW"
    NEGATIVE_CASHFLOW = "NEGATIVE_CASHFLOW"
    INSUFFICIENT_BUFFER = "INSUFFICIENT_BUFFER"
    HEALTHY_BUFFER = "HEALTHY_BUFFER"
    HIGH_DEBT_TO_INCOME = "HIGH_DEBT_TO_INCOME"
    ACCEPTABLE_DEBT_TO_INCOME = "ACCEPTABLE_DEBT_TO_INCOME"
    HIGH_CREDIT_UTILIZATION = "HIGH_CREDIT_UTILIZATION"
    LOW_CREDIT_UTILIZATION = "LOW_CREDIT_UTILIZATION"
    EMERGENCY_FUND_INADEQUATE = "EMERGENCY_FUND_INADEQUATE"
    EMERGENCY_FUND_ADEQUATE = "EMERGENCY_FUND_ADEQUATE"
    SAVINGS_DEPLETED = "SAVINGS_DEPLETED"
    SAVINGS_HEALTHY = "SAVINGS_HEALTHY"
    AFFORDABLE_PURCHASE = "AFFORDABLE_PURCHASE"
    UNAFFORDABLE_PURCHASE = "UNAFFORDABLE_PURCHASE"
    PURCHASE_STRAINS_BUDGET = "PURCHASE_STRAINS_BUDGET"
    LUXURY_WHILE_IN_DEBT = "LUXURY_WHILE_IN_DEBT"


# ---------------------------------------------------------------------------
# Debt payoff
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DebtAccount:
    """Debt record as supplied by the caller, never mutated"""

    type: DebtType
    balance: float
    apr: float  # percentage, e.g. 24.99
    minimum_payment: Optional[float] = None
    credit_limit: Optional[float] = None
    name: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class DebtState:
    """Simulation-ready snapshot of a single debt"""

    id: str
    name: str
    type: DebtType
    balance: float
    apr: float
    minimum_payment: float
    credit_limit: Optional[float] = None
    is_paid_off: bool = False

    @property
    def is_active(self) -> bool:
        return not self.is_paid_off and self.balance > 0


@dataclass(frozen=True)
class DebtPayment:
    """Payment applied to one debt in one month"""

    debt_id: str
    debt_name: str
    payment_amount: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float


@dataclass(frozen=True)
class MonthlySimulationState:
    """Record of one simulated month"""

    month: int
    date: str
    debts: Tuple[DebtState, ...]
    payments: Tuple[DebtPayment, ...]
    total_payment: float
    total_interest_paid: float
    cumulative_interest_paid: float
    total_principal_paid: float
    total_remaining_debt: float
    debts_paid_off_this_month: Tuple[str, ...]
    extra_payment_applied: float


@dataclass(frozen=True)
class PayoffOrderEntry:
    debt_id: str
    debt_name: str
    months_to_payoff: int
    interest_paid: float
    original_balance: float


@dataclass
class StrategySimulationResult:
    strategy: DebtStrategy
    total_months: int
    total_interest_paid: float
    total_amount_paid: float
    monthly_payment_required: float
    schedule: List[MonthlySimulationState]
    payoff_order: List[PayoffOrderEntry]


@dataclass
class StrategyComparison:
    strategies: List[StrategySimulationResult]
    recommended_strategy: DebtStrategy
    recommendation_reason: str
    savings_vs_minimum: float
    savings_vs_worst: float
    time_saved_months: int

    def result_for(self, strategy: DebtStrategy) -> Optional[StrategySimulationResult]:
        return next((r for r in self.strategies if r.strategy == strategy), None)


@dataclass(frozen=True)
class HighestAprDebt:
    id: str
    name: str
    apr: float
    balance: float


@dataclass(frozen=True)
class LowestBalanceDebt:
    id: str
    name: str
    balance: float


@dataclass
class DebtInsights:
    total_debt: float
    average_apr: float
    highest_apr_debt: Optional[HighestAprDebt]
    lowest_balance_debt: Optional[LowestBalanceDebt]
    quick_wins: List[str]
    potential_interest_savings: float
    debt_free_date: str
    monthly_minimum_required: float


# ---------------------------------------------------------------------------
# Affordability
# ---------------------------------------------------------------------------


@dataclass
class UserFinancialProfile:
    monthly_income: float
    monthly_fixed_expenses: float
    cash_balance: float
    savings_balance: float = 0.0
    emergency_fund: float = 0.0
    debts: List[DebtAccount] = field(default_factory=list)
    user_id: Optional[str] = None


@dataclass(frozen=True)
class FinancingTerms:
    apr: float
    term_months: int
    down_payment: float = 0.0


@dataclass
class PurchaseRequest:
    amount: float
    payment_method: PaymentMethod
    category: str = "other"
    description: Optional[str] = None
    is_urgent: bool = False
    financing_terms: Optional[FinancingTerms] = None


@dataclass
class AffordabilityMetrics:
    """Financial snapshot, recomputed for every request"""

    monthly_income: float
    monthly_expenses: float
    monthly_debt_payments: float
    monthly_cashflow: float
    liquid_assets: float
    total_debt: float
    debt_to_income_ratio: float
    credit_utilization: float
    emergency_fund_months: float
    savings_rate: float


@dataclass
class PurchaseImpact:
    projected_cash_balance: float
    months_of_buffer_remaining: float
    new_monthly_cashflow: Optional[float]
    new_debt_to_income_ratio: Optional[float]
    credit_utilization_change: Optional[float]
    buffer_consumption_percent: float
    purchase_to_income_ratio: float


@dataclass
class RuleResult:
    rule_id: str
    passed: bool
    reason_codes: List[ReasonCode]
    weight: float
    explanation: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleEvaluationResult:
    rules: List[RuleResult]
    pass_count: int
    fail_count: int
    weighted_score: float
    all_reason_codes: List[ReasonCode]
    suggested_decision: Decision
    suggested_risk_level: RiskLevel


@dataclass(frozen=True)
class Alternative:
    strategy: str
    description: str
    savings: Optional[float] = None
    timeline: Optional[str] = None


@dataclass
class AffordabilityCalculation:
    """Complete affordability outcome before response formatting"""

    metrics: AffordabilityMetrics
    impact: PurchaseImpact
    rule_evaluation: RuleEvaluationResult
    decision: Decision
    confidence: float
    risk_level: RiskLevel
    reason_codes: List[ReasonCode]
    recommendations: List[str]
    alternatives: List[Alternative]
