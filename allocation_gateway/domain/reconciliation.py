"""Reconciliation pass - force a list of computed amounts to sum to a total exactly"""

from typing import Optional, Sequence, Union

from allocation_gateway.domain.exceptions import InvalidRequest, ReconciliationError
from allocation_gateway.domain.models import Currency, ReconciliationCheck, ReconciliationResult
from allocation_gateway.domain.money import Number, ZERO, round_to_minor_unit, sum_money


def largest_index(amounts: Sequence[Number]) -> int:
    """Index of the largest amount (first one wins on ties)"""
    if not amounts:
        raise InvalidRequest("No amounts given")
    return max(range(len(amounts)), key=lambda i: amounts[i])


def reconcile_amounts(
    total: Number,
    amounts: Sequence[Number],
    target_index: Optional[int] = None,
    currency: Union[Currency, str] = Currency.NGN,
) -> ReconciliationResult:
    """
    Round each amount and push any drift onto a single entry.

    Args:
        total: Amount the entries must sum to
        amounts: Near-exact computed amounts
        target_index: Entry that absorbs the drift (default: largest entry)
        currency: Determines the minor unit

    Returns:
        ReconciliationResult with the adjusted amounts, the signed adjustment
        and the index it was applied to (None when no adjustment was needed)

    Raises:
        ReconciliationError: the adjustment would make the target negative,
            or the adjusted amounts still do not sum to the total
    """
    expected = round_to_minor_unit(total, currency)
    rounded = [round_to_minor_unit(amount, currency) for amount in amounts]
    if not rounded:
        raise InvalidRequest("No amounts to reconcile")

    drift = expected - sum_money(rounded, currency)
    if drift == 0:
        return ReconciliationResult(
            amounts=tuple(rounded),
            adjustment=round_to_minor_unit(ZERO, currency),
        )

    index = largest_index(rounded) if target_index is None else target_index
    if not 0 <= index < len(rounded):
        raise InvalidRequest(f"Reconciliation target {index} out of range")

    adjusted = rounded[index] + drift
    if adjusted < 0:
        raise ReconciliationError(
            f"Reconciliation would make entry {index} negative: {rounded[index]} + {drift}"
        )
    rounded[index] = adjusted

    final_total = sum_money(rounded, currency)
    if final_total != expected:
        raise ReconciliationError(
            f"Reconciliation failed: expected {expected}, got {final_total}"
        )

    return ReconciliationResult(amounts=tuple(rounded), adjustment=drift, adjusted_index=index)


def check_reconciliation(
    amounts: Sequence[Number],
    expected_total: Number,
    currency: Union[Currency, str] = Currency.NGN,
) -> ReconciliationCheck:
    """Compare amounts against an expected total to the minor unit (zero tolerance)"""
    actual = sum_money(amounts, currency)
    expected = round_to_minor_unit(expected_total, currency)
    difference = abs(actual - expected)

    if difference == 0:
        message = "Amounts reconcile correctly"
    else:
        message = f"Reconciliation failed: expected {expected}, got {actual}, difference: {difference}"

    return ReconciliationCheck(
        is_valid=difference == 0,
        actual_total=actual,
        difference=difference,
        message=message,
    )
