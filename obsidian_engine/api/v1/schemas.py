"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from obsidian_engine.domain.models import (
    DebtAccount,
    DebtStrategy,
    DebtType,
    FinancingTerms,
    MonthlySimulationState,
    PaymentMethod,
    PayoffOrderEntry,
    PurchaseRequest,
    UserFinancialProfile,
)

PurchaseCategory = Literal[
    "essential_needs",
    "housing",
    "transportation",
    "healthcare",
    "education",
    "electronics",
    "appliances",
    "furniture",
    "clothing",
    "entertainment",
    "travel",
    "dining",
    "luxury",
    "investment",
    "emergency",
    "gift",
    "subscription",
    "other",
]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class DebtAccountSchema(BaseModel):
    """A single debt account as supplied by the client"""

    id: Optional[str] = None
    type: DebtType
    balance: float = Field(..., ge=0, description="Outstanding balance in dollars")
    apr: float = Field(..., ge=0, le=100, description="Annual percentage rate, e.g. 24.99")
    minimum_payment: Optional[float] = Field(None, ge=0)
    credit_limit: Optional[float] = Field(None, ge=0)
    name: Optional[str] = None

    def to_domain(self) -> DebtAccount:
        return DebtAccount(
            type=self.type,
            balance=self.balance,
            apr=self.apr,
            minimum_payment=self.minimum_payment,
            credit_limit=self.credit_limit,
            name=self.name,
            id=self.id,
        )


class UserProfileSchema(BaseModel):
    user_id: Optional[str] = None
    monthly_income: float = Field(..., ge=0)
    monthly_fixed_expenses: float = Field(..., ge=0)
    cash_balance: float = Field(..., ge=0)
    savings_balance: float = Field(0.0, ge=0)
    emergency_fund: float = Field(0.0, ge=0)
    debts: List[DebtAccountSchema] = Field(default_factory=list)

    def to_domain(self) -> UserFinancialProfile:
        return UserFinancialProfile(
            monthly_income=self.monthly_income,
            monthly_fixed_expenses=self.monthly_fixed_expenses,
            cash_balance=self.cash_balance,
            savings_balance=self.savings_balance,
            emergency_fund=self.emergency_fund,
            debts=[d.to_domain() for d in self.debts],
            user_id=self.user_id,
        )


class FinancingTermsSchema(BaseModel):
    apr: float = Field(..., ge=0, le=100)
    term_months: int = Field(..., gt=0)
    down_payment: float = Field(0.0, ge=0)


class PurchaseSchema(BaseModel):
    amount: float = Field(..., gt=0, description="Purchase amount in dollars")
    category: PurchaseCategory
    payment_method: PaymentMethod
    description: Optional[str] = None
    is_urgent: bool = False
    financing_terms: Optional[FinancingTermsSchema] = None

    def to_domain(self) -> PurchaseRequest:
        terms = None
        if self.financing_terms is not None:
            terms = FinancingTerms(
                apr=self.financing_terms.apr,
                term_months=self.financing_terms.term_months,
                down_payment=self.financing_terms.down_payment,
            )
        return PurchaseRequest(
            amount=self.amount,
            payment_method=self.payment_method,
            category=self.category,
            description=self.description,
            is_urgent=self.is_urgent,
            financing_terms=terms,
        )


class AffordabilityRequest(BaseModel):
    """Request body for POST /api/v1/affordability"""

    user: UserProfileSchema
    purchase: PurchaseSchema


class PayoffPlanRequest(BaseModel):
    """Request body for POST /api/v1/debt/payoff-plan"""

    user: UserProfileSchema
    extra_monthly_payment: Optional[float] = Field(None, ge=0, description="Defaults to the configured amount")
    include_schedule: bool = True
    max_months: Optional[int] = Field(None, ge=1, le=480)


class SimulationRequest(BaseModel):
    """Request body for POST /api/v1/debt/simulate"""

    debts: List[DebtAccountSchema]
    strategy: DebtStrategy
    extra_monthly_payment: float = Field(0.0, ge=0)
    max_months: Optional[int] = Field(None, ge=1, le=480)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ResponseMetadata(BaseModel):
    request_id: str
    timestamp: str
    engine_version: str
    idempotency_key: Optional[str] = None
    computation_time_ms: float
    rules_evaluated: Optional[List[str]] = None


class ExplanationDetails(BaseModel):
    summary: str
    key_factors: List[str]
    risks: List[str]
    opportunities: List[str]


class ImpactAnalysis(BaseModel):
    projected_cash_balance: float
    months_of_buffer_remaining: float
    new_monthly_cashflow: Optional[float] = None
    new_debt_to_income: Optional[float] = None
    credit_utilization_change: Optional[float] = None
    buffer_consumption_percent: float
    purchase_to_income_ratio: float


class AlternativeSchema(BaseModel):
    strategy: str
    description: str
    savings: Optional[float] = None
    timeline: Optional[str] = None


class RuleResultSchema(BaseModel):
    rule_id: str
    passed: bool
    weight: float
    reason_codes: List[str]
    explanation: str


class AffordabilityResponse(BaseModel):
    """Response for POST /api/v1/affordability"""

    decision: str
    confidence: float
    weighted_score: float
    reason_codes: List[str]
    explanation: str
    explanation_details: ExplanationDetails
    risk_level: str
    recommended_plan: List[str]
    impact_analysis: ImpactAnalysis
    alternatives: List[AlternativeSchema]
    rules: List[RuleResultSchema]
    metadata: ResponseMetadata


class DebtPaymentSchema(BaseModel):
    debt_id: str
    debt_name: str
    payment_amount: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float


class PayoffMonthSchema(BaseModel):
    month: int
    date: str
    payments: List[DebtPaymentSchema]
    total_payment: float
    total_interest_paid: float
    total_principal_paid: float
    total_remaining_debt: float
    debts_paid_off_this_month: List[str]

    @classmethod
    def from_domain(cls, state: MonthlySimulationState) -> "PayoffMonthSchema":
        return cls(
            month=state.month,
            date=state.date,
            payments=[
                DebtPaymentSchema(
                    debt_id=p.debt_id,
                    debt_name=p.debt_name,
                    payment_amount=p.payment_amount,
                    principal_paid=p.principal_paid,
                    interest_paid=p.interest_paid,
                    remaining_balance=p.remaining_balance,
                )
                for p in state.payments
            ],
            total_payment=state.total_payment,
            total_interest_paid=state.total_interest_paid,
            total_principal_paid=state.total_principal_paid,
            total_remaining_debt=state.total_remaining_debt,
            debts_paid_off_this_month=list(state.debts_paid_off_this_month),
        )


class PayoffOrderSchema(BaseModel):
    debt_id: str
    debt_name: str
    months_to_payoff: int
    interest_paid: float
    original_balance: float

    @classmethod
    def from_domain(cls, entry: PayoffOrderEntry) -> "PayoffOrderSchema":
        return cls(
            debt_id=entry.debt_id,
            debt_name=entry.debt_name,
            months_to_payoff=entry.months_to_payoff,
            interest_paid=entry.interest_paid,
            original_balance=entry.original_balance,
        )


class StrategySummary(BaseModel):
    strategy_name: DebtStrategy
    description: str
    total_months_to_payoff: int
    total_interest_paid: float
    total_amount_paid: float
    monthly_payment_required: float
    payoff_order: List[PayoffOrderSchema]


class PayoffInsights(BaseModel):
    total_debt: float = 0.0
    average_apr: float = 0.0
    potential_interest_savings: float = 0.0
    debt_free_date: str
    highest_interest_debt: Optional[str] = None
    lowest_balance_debt: Optional[str] = None
    quick_wins: List[str] = Field(default_factory=list)
    monthly_minimum_required: float = 0.0


class PayoffPlanResponse(BaseModel):
    """Response for POST /api/v1/debt/payoff-plan"""

    message: Optional[str] = None
    recommended_strategy: Optional[DebtStrategy] = None
    recommendation_reason: Optional[str] = None
    strategy_comparison: List[StrategySummary] = Field(default_factory=list)
    savings_vs_minimum: float = 0.0
    savings_vs_worst: float = 0.0
    time_saved_months: int = 0
    monthly_schedule: List[PayoffMonthSchema] = Field(default_factory=list)
    insights: PayoffInsights
    explanation: Optional[str] = None
    risk_level: Optional[str] = None
    confidence: Optional[float] = None
    metadata: ResponseMetadata


class SimulationResponse(BaseModel):
    """Response for POST /api/v1/debt/simulate"""

    strategy: DebtStrategy
    strategy_description: str
    total_months: int
    total_interest_paid: float
    total_amount_paid: float
    monthly_payment: float
    payoff_order: List[PayoffOrderSchema]
    schedule_preview: List[PayoffMonthSchema]
    metadata: ResponseMetadata


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None
    request_id: Optional[str] = None
    timestamp: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorBody

    def to_content(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
