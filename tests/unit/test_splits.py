"""Unit tests for the split calculator"""

import pytest
from decimal import Decimal
from allocation_gateway.domain.models import (
    Currency,
    ErrorKind,
    SplitRequest,
    SplitRule,
    SplitRuleType,
)
from allocation_gateway.domain.splits import compute_split

FIXED = SplitRuleType.FIXED_AMOUNT
PERCENT = SplitRuleType.PERCENTAGE
COMMISSION = SplitRuleType.COMMISSION
REMAINING = SplitRuleType.REMAINING


def split(total, *rules, currency=Currency.NGN):
    return compute_split(SplitRequest(total_amount=Decimal(total), rules=tuple(rules), currency=currency))


def amounts(outcome):
    return {a.recipient_id: a.amount for a in outcome.per_recipient}


def test_marketplace_split(marketplace_split: SplitRequest):
    """Test Scenario A: fixed 2000, 10% platform, two sellers share 7000"""
    outcome = compute_split(marketplace_split)

    assert amounts(outcome) == {
        "logistics": Decimal("2000.00"),
        "platform": Decimal("1000.00"),
        "seller_a": Decimal("3500.00"),
        "seller_b": Decimal("3500.00"),
    }
    assert outcome.total_calculated == Decimal("10000.00")
    assert outcome.rounding_adjustment == Decimal("0.00")
    assert outcome.reconciled is True
    assert outcome.errors == ()
    assert outcome.error_kind is None


def test_fixed_commitments_exceed_total():
    """Test Scenario B: 60 + 50 fixed against a 100 total is infeasible"""
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("60.00")),
        SplitRule("b", FIXED, Decimal("50.00")),
    )

    assert outcome.reconciled is False
    assert outcome.error_kind == ErrorKind.INFEASIBLE_ALLOCATION
    assert any("110.00 exceed total amount 100.00" in e for e in outcome.errors)
    # Second fixed split was clamped to what was left, noted rather than failed
    assert amounts(outcome)["b"] == Decimal("40.00")
    assert len(outcome.notes) == 1


def test_priority_order_is_stable():
    """Test fixed -> percentage -> commission -> remaining regardless of request order"""
    outcome = split(
        "1000.00",
        SplitRule("rest_1", REMAINING),
        SplitRule("fee", COMMISSION, Decimal("5")),
        SplitRule("rest_2", REMAINING),
        SplitRule("platform", PERCENT, Decimal("10")),
        SplitRule("courier", FIXED, Decimal("100.00")),
    )

    assert [a.recipient_id for a in outcome.per_recipient] == ["courier", "platform", "fee", "rest_1", "rest_2"]
    assert amounts(outcome)["rest_1"] == Decimal("375.00")
    assert outcome.reconciled is True


def test_percentages_use_full_total():
    """Test percentage is taken from the total, not the pool left after fixed splits"""
    outcome = split(
        "1000.00",
        SplitRule("fixed", FIXED, Decimal("500.00")),
        SplitRule("pct", PERCENT, Decimal("20")),
        SplitRule("rest", REMAINING),
    )

    assert amounts(outcome)["pct"] == Decimal("200.00")
    assert amounts(outcome)["rest"] == Decimal("300.00")


def test_remaining_last_recipient_absorbs_remainder():
    """Test half-even percentages plus remaining split reconcile to the kobo"""
    outcome = split(
        "100.00",
        SplitRule("pct", PERCENT, Decimal("33.33")),
        SplitRule("fee", COMMISSION, Decimal("10.005")),  # 10.005 -> 10.00
        SplitRule("r1", REMAINING),
        SplitRule("r2", REMAINING),
    )

    assert amounts(outcome) == {
        "pct": Decimal("33.33"),
        "fee": Decimal("10.00"),
        "r1": Decimal("28.33"),
        "r2": Decimal("28.34"),
    }
    assert sum(amounts(outcome).values()) == Decimal("100.00")
    assert outcome.reconciled is True


def test_percentage_clamped_to_maximum():
    """Test max_amount caps a percentage and the clamp is a note, not an error"""
    outcome = split(
        "1000.00",
        SplitRule("capped", PERCENT, Decimal("50"), max_amount=Decimal("300.00")),
        SplitRule("rest", REMAINING),
    )

    assert amounts(outcome) == {"capped": Decimal("300.00"), "rest": Decimal("700.00")}
    assert outcome.reconciled is True
    assert len(outcome.notes) == 1
    assert "maximum" in outcome.notes[0]


def test_commission_raised_to_minimum():
    outcome = split(
        "1000.00",
        SplitRule("agent", COMMISSION, Decimal("1"), min_amount=Decimal("25.00")),
        SplitRule("merchant", REMAINING),
    )

    assert amounts(outcome)["agent"] == Decimal("25.00")
    assert amounts(outcome)["merchant"] == Decimal("975.00")
    assert outcome.reconciled is True
    assert outcome.notes


def test_fixed_only_split_reconciles():
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("60.00")),
        SplitRule("b", FIXED, Decimal("40.00")),
    )

    assert outcome.reconciled is True
    assert outcome.errors == ()


def test_unallocated_amount_without_remaining_rule():
    """Test leftover funds with nobody to absorb them are reported, not pushed onto someone"""
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("20.00")),
        SplitRule("b", PERCENT, Decimal("10")),
    )

    assert outcome.reconciled is False
    assert outcome.error_kind == ErrorKind.INFEASIBLE_ALLOCATION
    assert amounts(outcome) == {"a": Decimal("20.00"), "b": Decimal("10.00")}
    assert outcome.total_calculated == Decimal("30.00")
    assert any("Unallocated amount 70.00" in e for e in outcome.errors)


def test_exact_fill_leaves_remaining_rule_empty():
    """Test fixed + percentage consuming the whole total still fails a present remaining rule"""
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("60.00")),
        SplitRule("b", PERCENT, Decimal("40")),
        SplitRule("rest", REMAINING),
    )

    assert outcome.total_calculated == Decimal("100.00")
    assert amounts(outcome)["rest"] == Decimal("0.00")
    assert outcome.reconciled is False
    assert outcome.error_kind == ErrorKind.INFEASIBLE_ALLOCATION
    assert any("No remaining amount" in e for e in outcome.errors)

def test_remaining_rule_with_nothing_left():
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("80.00")),
        SplitRule("b", FIXED, Decimal("50.00")),
        SplitRule("rest", REMAINING),
    )

    assert outcome.reconciled is False
    assert amounts(outcome) == {"a": Decimal("80.00"), "b": Decimal("20.00"), "rest": Decimal("0.00")}
    assert any("No remaining amount" in e for e in outcome.errors)
    assert any("reduced from 50.00 to 20.00" in n for n in outcome.notes)


def test_fixed_below_its_minimum_after_clamping():
    outcome = split(
        "100.00",
        SplitRule("a", FIXED, Decimal("90.00")),
        SplitRule("b", FIXED, Decimal("30.00"), min_amount=Decimal("15.00")),
        SplitRule("rest", REMAINING),
    )

    assert outcome.reconciled is False
    assert any("below minimum" in e for e in outcome.errors)


@pytest.mark.parametrize(
    "total, rules, message",
    [
        ("0.00", (SplitRule("a", FIXED, Decimal("1")), SplitRule("b", REMAINING)), "greater than zero"),
        ("-5.00", (SplitRule("a", FIXED, Decimal("1")), SplitRule("b", REMAINING)), "greater than zero"),
        ("100.00", (SplitRule("a", REMAINING),), "At least 2"),
        ("100.00", (SplitRule("a", "bonus", Decimal("1")), SplitRule("b", REMAINING)), "Unknown split type"),
        (
            "100.00",
            (SplitRule("a", PERCENT, Decimal("10"), min_amount=Decimal("50"), max_amount=Decimal("20")), SplitRule("b", REMAINING)),
            "exceeds maximum",
        ),
        ("100.00", (SplitRule("a", PERCENT, Decimal("101")), SplitRule("b", REMAINING)), "0-100"),
        ("100.00", (SplitRule("a", FIXED, Decimal("-1")), SplitRule("b", REMAINING)), "negative"),
    ],
)
def test_invalid_requests_return_no_allocations(total, rules, message):
    """Test structurally invalid requests fail as a whole with INVALID_REQUEST"""
    outcome = split(total, *rules)

    assert outcome.error_kind == ErrorKind.INVALID_REQUEST
    assert outcome.reconciled is False
    assert outcome.per_recipient == ()
    assert message in outcome.errors[0]


@pytest.mark.parametrize("total", ["0.01", "0.02", "1.00", "99.99", "1000000.01"])
def test_reconciles_and_never_negative(total):
    """Test reconciliation and non-negativity on awkward totals"""
    outcome = split(
        total,
        SplitRule("pct", PERCENT, Decimal("12.5")),
        SplitRule("fee", COMMISSION, Decimal("2.75")),
        SplitRule("r1", REMAINING),
        SplitRule("r2", REMAINING),
        SplitRule("r3", REMAINING),
    )

    assert outcome.reconciled is True
    assert sum(a.amount for a in outcome.per_recipient) == Decimal(total)
    assert all(a.amount >= 0 for a in outcome.per_recipient)


def test_zero_decimal_currency():
    """Test UGX splits in whole shillings"""
    outcome = split(
        "1001",
        SplitRule("a", REMAINING),
        SplitRule("b", REMAINING),
        currency=Currency.UGX,
    )

    assert amounts(outcome) == {"a": Decimal("500"), "b": Decimal("501")}
    assert outcome.currency == Currency.UGX


def test_split_is_deterministic(marketplace_split: SplitRequest):
    """Test identical input produces identical output"""
    first = compute_split(marketplace_split)
    second = compute_split(marketplace_split)

    assert first == second
    assert repr(first) == repr(second)
