"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from allocation_gateway.api.main import create_app
from allocation_gateway.domain.models import SplitRequest, SplitRule, SplitRuleType


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def start_date() -> date:
    """Fixed start date so schedules are reproducible"""
    return date(2024, 1, 1)


@pytest.fixture
def marketplace_split() -> SplitRequest:
    """Scenario A: fixed fee, platform percentage, two sellers share the rest"""
    return SplitRequest(
        total_amount=Decimal("10000.00"),
        rules=(
            SplitRule("logistics", SplitRuleType.FIXED_AMOUNT, Decimal("2000.00")),
            SplitRule("platform", SplitRuleType.PERCENTAGE, Decimal("10")),
            SplitRule("seller_a", SplitRuleType.REMAINING),
            SplitRule("seller_b", SplitRuleType.REMAINING),
        ),
    )


@pytest.fixture
def marketplace_split_payload() -> dict:
    """Scenario A as an API request body"""
    return {
        "total_amount": "10000.00",
        "currency": "NGN",
        "rules": [
            {"recipient_id": "logistics", "type": "fixed_amount", "value": "2000.00"},
            {"recipient_id": "platform", "type": "percentage", "value": "10"},
            {"recipient_id": "seller_a", "type": "remaining"},
            {"recipient_id": "seller_b", "type": "remaining"},
        ],
    }
