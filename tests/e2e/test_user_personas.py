"""
E2E tests for user personas driven through the full HTTP stack.

User personas:
- healthy professional: deep savings, no debt, affordable purchase expected
- paycheck-to-paycheck renter: purchase larger than cash, decline expected
- card juggler: several cards, payoff plan comparison expected
- maxed-out gig worker: card purchase pushes utilization over the limit
- debt-free saver: nothing to pay off
- car buyer: financed purchase adds a new monthly payment
"""

import pytest
from fastapi.testclient import TestClient


def _afford(client: TestClient, user: dict, purchase: dict) -> dict:
    response = client.post("/api/v1/affordability", json={"user": user, "purchase": purchase})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.integration
def test_healthy_professional_buys_laptop(client: TestClient, healthy_user_payload: dict):
    """
    Healthy professional: 35k liquid, 5k monthly surplus
    Expected: YES with low risk
    """
    data = _afford(
        client,
        healthy_user_payload,
        {"amount": 1800, "category": "electronics", "payment_method": "debit", "description": "Work laptop"},
    )

    assert data["decision"] == "YES"
    assert data["risk_level"] == "LOW"
    assert data["confidence"] == 1.0
    assert data["alternatives"] == []
    assert all(rule["passed"] for rule in data["rules"])


@pytest.mark.integration
def test_paycheck_to_paycheck_renter_declined(client: TestClient):
    """
    Renter with $400 cash wants a $900 appliance on debit
    Expected: NO, cash would go negative
    """
    user = {
        "user_id": "user_renter",
        "monthly_income": 3200,
        "monthly_fixed_expenses": 2900,
        "cash_balance": 400,
        "debts": [
            {"type": "credit_card", "balance": 1500, "apr": 26.99, "minimum_payment": 45, "credit_limit": 2000},
        ],
    }
    data = _afford(client, user, {"amount": 900, "category": "appliances", "payment_method": "debit"})

    assert data["decision"] == "NO"
    assert data["impact_analysis"]["projected_cash_balance"] == -500
    assert "INSUFFICIENT_BUFFER" in data["reason_codes"]
    assert "negative" in data["explanation"]
    assert data["recommended_plan"], "Declines should come with next steps"
    assert any(alt["strategy"] == "delay_and_save" for alt in data["alternatives"])


@pytest.mark.integration
def test_card_juggler_gets_payoff_plan(client: TestClient):
    """
    Three cards at different rates with $200 extra per month
    Expected: a plan that beats paying minimums
    """
    payload = {
        "user": {
            "user_id": "user_juggler",
            "monthly_income": 5200,
            "monthly_fixed_expenses": 2600,
            "cash_balance": 1500,
            "debts": [
                {"id": "a", "name": "Travel Card", "type": "credit_card", "balance": 3200, "apr": 27.99,
                 "minimum_payment": 96, "credit_limit": 4000},
                {"id": "b", "name": "Cashback Card", "type": "credit_card", "balance": 1800, "apr": 21.5,
                 "minimum_payment": 54, "credit_limit": 2500},
                {"id": "c", "name": "Store Card", "type": "credit_card", "balance": 650, "apr": 15.9,
                 "minimum_payment": 25, "credit_limit": 1000},
            ],
        },
        "extra_monthly_payment": 200,
    }
    response = client.post("/api/v1/debt/payoff-plan", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert len(data["strategy_comparison"]) == 4
    assert data["savings_vs_minimum"] >= 0
    assert data["insights"]["highest_interest_debt"] == "Travel Card"
    assert data["insights"]["lowest_balance_debt"] == "Store Card"
    assert data["insights"]["monthly_minimum_required"] == 175

    by_name = {s["strategy_name"]: s for s in data["strategy_comparison"]}
    assert by_name["avalanche"]["total_interest_paid"] <= by_name["minimum_only"]["total_interest_paid"]
    assert by_name["avalanche"]["total_months_to_payoff"] < by_name["minimum_only"]["total_months_to_payoff"]
    assert data["explanation"]


@pytest.mark.integration
def test_maxed_out_gig_worker_card_purchase(client: TestClient):
    """
    Gig worker at 90% utilization charges another $600
    Expected: NO, utilization rule fails
    """
    user = {
        "user_id": "user_gig",
        "monthly_income": 4200,
        "monthly_fixed_expenses": 2800,
        "cash_balance": 900,
        "debts": [
            {"type": "credit_card", "balance": 2700, "apr": 29.99, "minimum_payment": 81, "credit_limit": 3000},
        ],
    }
    data = _afford(client, user, {"amount": 600, "category": "entertainment", "payment_method": "credit_card"})

    assert data["decision"] == "NO"
    assert data["impact_analysis"]["credit_utilization_change"] == pytest.approx(0.2)
    utilization = next(r for r in data["rules"] if r["rule_id"] == "CREDIT_UTILIZATION")
    assert utilization["passed"] is False
    assert utilization["reason_codes"] == ["HIGH_CREDIT_UTILIZATION"]


@pytest.mark.integration
def test_debt_free_saver_has_nothing_to_plan(client: TestClient):
    """Debt-free saver: no debts, so no plan to compare"""
    payload = {
        "user": {
            "user_id": "user_saver",
            "monthly_income": 4500,
            "monthly_fixed_expenses": 2000,
            "cash_balance": 12000,
            "savings_balance": 30000,
        }
    }
    response = client.post("/api/v1/debt/payoff-plan", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Congratulations! You have no debt to pay off."
    assert data["monthly_schedule"] == []


@pytest.mark.integration
def test_car_buyer_financing(client: TestClient):
    """
    $25k car, $5k down, 60 months at 6.9%
    Expected: new monthly payment reflected in cashflow and debt-to-income
    """
    user = {
        "user_id": "user_car",
        "monthly_income": 7000,
        "monthly_fixed_expenses": 3000,
        "cash_balance": 15000,
        "savings_balance": 5000,
    }
    purchase = {
        "amount": 25000,
        "category": "transportation",
        "payment_method": "financing",
        "financing_terms": {"apr": 6.9, "term_months": 60, "down_payment": 5000},
    }
    data = _afford(client, user, purchase)

    impact = data["impact_analysis"]
    assert impact["projected_cash_balance"] == 15000
    assert impact["new_monthly_cashflow"] == pytest.approx(4000 - 395.08, abs=1)
    assert impact["new_debt_to_income"] == pytest.approx(395.08 / 7000, abs=0.001)
    assert data["decision"] in ("YES", "CONDITIONAL", "DEFER", "NO")
