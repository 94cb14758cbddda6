"""Financial policy thresholds used by the decision engine"""

# Emergency fund, in months of essential spending
MIN_EMERGENCY_FUND_MONTHS = 3.0
EMERGENCY_FUND_YES_FLOOR_MONTHS = 2.0  # below this a YES is downgraded

# Debt-to-income (annual minimums / annual income)
DTI_GOOD = 0.25
DTI_ACCEPTABLE = 0.35

# Revolving credit utilization
CREDIT_UTILIZATION_GOOD = 0.30

# Purchase size as a share of monthly income
SMALL_PURCHASE_RATIO = 0.05
LARGE_PURCHASE_RATIO = 0.25
MAJOR_PURCHASE_RATIO = 0.50

# Post-purchase buffer
MIN_POST_PURCHASE_BUFFER_MONTHS = 1.0
CRITICAL_BUFFER_MONTHS = 0.5  # below this the decision is forced to NO
MAX_BUFFER_CONSUMPTION = 0.25
LOW_BUFFER_CONFIDENCE_PENALTY = 0.8

# Score bands shared by decision and risk mapping
SCORE_YES = 0.85
SCORE_CONDITIONAL = 0.60
SCORE_DEFER = 0.40

# Debt payoff
MAX_SIMULATION_MONTHS = 360
UNPAID_SENTINEL_OFFSET = 999  # months_to_payoff = cap + offset when not paid off in horizon
PAYOFF_TOLERANCE = 0.01  # balances at or below one cent count as paid off
MIN_CREDIT_CARD_PAYMENT_PERCENT = 0.02
MIN_OTHER_PAYMENT_PERCENT = 0.03
MIN_PAYMENT_FLOOR = 25.0
MORTGAGE_TERM_MONTHS = 360
INSTALLMENT_LOAN_TERM_MONTHS = 60
STUDENT_LOAN_TERM_MONTHS = 120
HYBRID_APR_WEIGHT = 0.6
HYBRID_BALANCE_WEIGHT = 0.4

# Strategy recommendation
QUICK_WIN_MONTHS = 3
AVALANCHE_INTEREST_GAP = 500.0  # snowball costing more than this favours avalanche
SNOWBALL_INTEREST_GAP = 200.0  # snowball costing less than this is worth the quick wins
