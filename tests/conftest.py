"""Pytest fixtures for testing"""

import pytest
from datetime import date
from fastapi.testclient import TestClient

from obsidian_engine.api.main import create_app
from obsidian_engine.domain.models import DebtAccount, DebtType, UserFinancialProfile


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client with a fresh idempotency store"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def start_date() -> date:
    return date(2027, 1, 15)


@pytest.fixture
def sample_debts() -> list[DebtAccount]:
    """Two cards and an installment loan, $13,500 in total"""
    return [
        DebtAccount(
            id="cc1",
            name="Rewards Card",
            type=DebtType.CREDIT_CARD,
            balance=5000.0,
            apr=24.99,
            minimum_payment=100.0,
            credit_limit=10000.0,
        ),
        DebtAccount(
            id="cc2",
            name="Store Card",
            type=DebtType.CREDIT_CARD,
            balance=500.0,
            apr=18.99,
            minimum_payment=25.0,
            credit_limit=2000.0,
        ),
        DebtAccount(
            id="loan1",
            name="Personal Loan",
            type=DebtType.PERSONAL_LOAN,
            balance=8000.0,
            apr=12.0,
            minimum_payment=200.0,
        ),
    ]


@pytest.fixture
def sample_debts_payload() -> list[dict]:
    """Same debts as sample_debts, as sent over the API"""
    return [
        {
            "id": "cc1",
            "name": "Rewards Card",
            "type": "credit_card",
            "balance": 5000,
            "apr": 24.99,
            "minimum_payment": 100,
            "credit_limit": 10000,
        },
        {
            "id": "cc2",
            "name": "Store Card",
            "type": "credit_card",
            "balance": 500,
            "apr": 18.99,
            "minimum_payment": 25,
            "credit_limit": 2000,
        },
        {
            "id": "loan1",
            "name": "Personal Loan",
            "type": "personal_loan",
            "balance": 8000,
            "apr": 12.0,
            "minimum_payment": 200,
        },
    ]


@pytest.fixture
def healthy_profile() -> UserFinancialProfile:
    """Debt-free earner with a deep cash cushion"""
    return UserFinancialProfile(
        user_id="user_healthy",
        monthly_income=8000.0,
        monthly_fixed_expenses=3000.0,
        cash_balance=20000.0,
        savings_balance=10000.0,
        emergency_fund=5000.0,
    )


@pytest.fixture
def healthy_user_payload() -> dict:
    return {
        "user_id": "user_healthy",
        "monthly_income": 8000,
        "monthly_fixed_expenses": 3000,
        "cash_balance": 20000,
        "savings_balance": 10000,
        "emergency_fund": 5000,
        "debts": [],
    }
