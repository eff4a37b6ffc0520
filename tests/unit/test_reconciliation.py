"""Unit tests for the reconciliation pass"""

import pytest
from decimal import Decimal
from allocation_gateway.domain.exceptions import ReconciliationError
from allocation_gateway.domain.reconciliation import (
    check_reconciliation,
    largest_index,
    reconcile_amounts,
)


def test_reconcile_adds_drift_to_largest_entry():
    """Test a one-kobo shortfall lands on the first largest entry"""
    result = reconcile_amounts("100.00", ["33.33", "33.33", "33.33"])

    assert result.amounts == (Decimal("33.34"), Decimal("33.33"), Decimal("33.33"))
    assert result.adjustment == Decimal("0.01")
    assert result.adjusted_index == 0


def test_reconcile_explicit_target():
    """Test caller-selected entry absorbs the drift"""
    result = reconcile_amounts("100.00", ["33.33", "33.33", "33.33"], target_index=2)

    assert result.amounts == (Decimal("33.33"), Decimal("33.33"), Decimal("33.34"))
    assert result.adjusted_index == 2


def test_reconcile_negative_drift():
    """Test over-allocation is removed from the target"""
    result = reconcile_amounts("99.99", ["50.00", "50.00"])

    assert result.amounts == (Decimal("49.99"), Decimal("50.00"))
    assert result.adjustment == Decimal("-0.01")


def test_reconcile_rounds_inputs_first():
    """Test unrounded inputs are rounded half-to-even before measuring drift"""
    # 33.335 -> 33.34 twice, sum 100.01, drift -0.01 on the first largest
    result = reconcile_amounts("100.00", ["33.335", "33.335", "33.33"])

    assert result.amounts == (Decimal("33.33"), Decimal("33.34"), Decimal("33.33"))
    assert sum(result.amounts) == Decimal("100.00")


def test_reconcile_without_drift():
    result = reconcile_amounts("10.00", ["4.00", "6.00"])

    assert result.adjusted_index is None
    assert str(result.adjustment) == "0.00"


def test_reconcile_refuses_negative_result():
    """Test a drift larger than the target raises instead of going negative"""
    with pytest.raises(ReconciliationError):
        reconcile_amounts("1.00", ["0.00", "5.00"], target_index=0)


def test_largest_index_first_wins_on_ties():
    assert largest_index([Decimal("5"), Decimal("7"), Decimal("7")]) == 1


def test_check_reconciliation():
    """Test exact zero-tolerance comparison"""
    ok = check_reconciliation(["60.00", "40.00"], "100.00")
    assert ok.is_valid is True
    assert ok.difference == Decimal("0.00")

    off = check_reconciliation(["60.00", "39.99"], "100.00")
    assert off.is_valid is False
    assert off.actual_total == Decimal("99.99")
    assert off.difference == Decimal("0.01")
    assert "expected 100.00" in off.message
