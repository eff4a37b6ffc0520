"""Split calculator - distribute a payment across recipients under mixed rules"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Tuple

from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.models import (
    Currency,
    ErrorKind,
    RecipientAllocation,
    SplitOutcome,
    SplitRequest,
    SplitRule,
    SplitRuleType,
)
from allocation_gateway.domain.money import (
    ONE_HUNDRED,
    ZERO,
    as_currency,
    percent_of,
    round_to_minor_unit,
    split_evenly,
    sum_money,
    to_decimal,
)
from allocation_gateway.domain.reconciliation import reconcile_amounts

PERCENT_TYPES = (SplitRuleType.PERCENTAGE, SplitRuleType.COMMISSION)


def compute_split(request: SplitRequest) -> SplitOutcome:
    """
    Main entry point: allocate request.total_amount across request.rules.

    Processing order:
    1. fixed_amount - capped at what is still available
    2. percentage / commission - percent of the ORIGINAL total, clamped to
       [min_amount, max_amount] and then to what is still available
    3. remaining - leftover shared equally, last recipient absorbs the remainder

    Structurally invalid requests come back as an outcome with
    error_kind=INVALID_REQUEST and no allocations. Infeasible requests come
    back with error_kind=INFEASIBLE_ALLOCATION, reconciled=False and the
    unadjusted amounts.

    Note: a "remaining" rule that receives nothing is infeasible too. When
    fixed and percentage splits consume the whole total, the outcome is
    reconciled=False even though the amounts sum to the total; the remaining
    recipients would be allocated 0.00.
    """
    try:
        currency = as_currency(request.currency)
        total = _validate_total(request.total_amount, currency)
        rules = _validate_rules(request.rules, currency)
    except InvalidRequest as e:
        return _rejected(request.currency, str(e))

    return _allocate(total, rules, currency)


def _rejected(currency, message: str) -> SplitOutcome:
    try:
        currency = as_currency(currency)
    except InvalidRequest:
        currency = Currency.NGN
    zero = round_to_minor_unit(ZERO, currency)

    return SplitOutcome(
        per_recipient=(),
        total_calculated=zero,
        rounding_adjustment=zero,
        reconciled=False,
        currency=currency,
        errors=(message,),
        error_kind=ErrorKind.INVALID_REQUEST,
    )


def _validate_total(total_amount, currency: Currency) -> Decimal:
    total = round_to_minor_unit(total_amount, currency)
    if total <= 0:
        raise InvalidRequest("Total amount must be greater than zero")
    return total


def _validate_rules(rules, currency: Currency) -> Tuple[SplitRule, ...]:
    """Normalize rule types and amounts; raise InvalidRequest on malformed rules"""
    rules = tuple(rules or ())
    if len(rules) < 2:
        raise InvalidRequest(f"At least 2 split rules are required, got {len(rules)}")

    normalized = []
    for rule in rules:
        if not rule.recipient_id:
            raise InvalidRequest("Split rule is missing a recipient id")

        try:
            rule_type = SplitRuleType(rule.rule_type)
        except ValueError:
            raise InvalidRequest(f"Unknown split type: {rule.rule_type}")

        value = to_decimal(rule.value)
        if value < 0:
            raise InvalidRequest(f"Split value for {rule.recipient_id} must not be negative")
        if rule_type in PERCENT_TYPES and value > ONE_HUNDRED:
            raise InvalidRequest(f"Invalid percentage for {rule.recipient_id}: {value}. Must be between 0-100")

        min_amount = _optional_bound(rule.min_amount, currency)
        max_amount = _optional_bound(rule.max_amount, currency)
        if (min_amount is not None and min_amount < 0) or (max_amount is not None and max_amount < 0):
            raise InvalidRequest(f"Amount bounds for {rule.recipient_id} must not be negative")
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise InvalidRequest(
                f"Minimum amount {min_amount} exceeds maximum amount {max_amount} for {rule.recipient_id}"
            )

        normalized.append(
            replace(rule, rule_type=rule_type, value=value, min_amount=min_amount, max_amount=max_amount)
        )

    return tuple(normalized)


def _optional_bound(bound, currency: Currency) -> Optional[Decimal]:
    return None if bound is None else round_to_minor_unit(bound, currency)


def _allocate(total: Decimal, rules: Tuple[SplitRule, ...], currency: Currency) -> SplitOutcome:
    # sorted() is stable: rules of the same type keep their request order
    ordered = sorted(rules, key=lambda r: r.rule_type.priority)
    committed = [r for r in ordered if r.rule_type != SplitRuleType.REMAINING]
    remaining = [r for r in ordered if r.rule_type == SplitRuleType.REMAINING]

    errors: List[str] = []
    notes: List[str] = []
    available = total
    requested = round_to_minor_unit(ZERO, currency)
    amounts: List[Decimal] = []

    for rule in committed:
        if rule.rule_type == SplitRuleType.FIXED_AMOUNT:
            amount = round_to_minor_unit(rule.value, currency)
        else:
            amount = percent_of(total, rule.value, currency)
            if rule.min_amount is not None and amount < rule.min_amount:
                notes.append(f"Split for {rule.recipient_id} raised from {amount} to minimum {rule.min_amount}")
                amount = rule.min_amount
            if rule.max_amount is not None and amount > rule.max_amount:
                notes.append(f"Split for {rule.recipient_id} reduced from {amount} to maximum {rule.max_amount}")
                amount = rule.max_amount

        requested += amount
        if amount > available:
            notes.append(
                f"Split for {rule.recipient_id} reduced from {amount} to {available} due to insufficient remaining amount"
            )
            amount = available

        if rule.rule_type == SplitRuleType.FIXED_AMOUNT and rule.min_amount is not None and amount < rule.min_amount:
            errors.append(f"Fixed amount split for {rule.recipient_id} is below minimum: {amount} < {rule.min_amount}")

        amounts.append(amount)
        available -= amount

    if remaining:
        if available == 0:
            errors.append('No remaining amount available for "remaining" type splits')
        amounts.extend(split_evenly(available, len(remaining), currency))
        available = round_to_minor_unit(ZERO, currency)
    elif requested > total:
        errors.append(f"Fixed and percentage commitments {requested} exceed total amount {total}")
    elif available > 0:
        errors.append(f"Unallocated amount {available} left with no \"remaining\" type split to absorb it")

    allocated = committed + remaining

    if errors:
        return SplitOutcome(
            per_recipient=tuple(
                RecipientAllocation(recipient_id=r.recipient_id, amount=a, rule_type=r.rule_type)
                for r, a in zip(allocated, amounts)
            ),
            total_calculated=sum_money(amounts, currency),
            rounding_adjustment=round_to_minor_unit(ZERO, currency),
            reconciled=False,
            currency=currency,
            errors=tuple(errors),
            notes=tuple(notes),
            error_kind=ErrorKind.INFEASIBLE_ALLOCATION,
        )

    result = reconcile_amounts(total, amounts, _reconciliation_target(allocated, amounts), currency)
    zero = round_to_minor_unit(ZERO, currency)
    per_recipient = tuple(
        RecipientAllocation(
            recipient_id=r.recipient_id,
            amount=a,
            rule_type=r.rule_type,
            rounding_adjustment=result.adjustment if i == result.adjusted_index else zero,
        )
        for i, (r, a) in enumerate(zip(allocated, result.amounts))
    )
    total_calculated = sum_money(result.amounts, currency)

    return SplitOutcome(
        per_recipient=per_recipient,
        total_calculated=total_calculated,
        rounding_adjustment=result.adjustment,
        reconciled=total_calculated == total,
        currency=currency,
        notes=tuple(notes),
    )


def _reconciliation_target(rules: List[SplitRule], amounts: List[Decimal]) -> int:
    """Last remaining recipient, else the largest fixed/percentage entry, else the largest entry"""
    for i in range(len(rules) - 1, -1, -1):
        if rules[i].rule_type == SplitRuleType.REMAINING:
            return i

    candidates = [
        i for i, r in enumerate(rules)
        if r.rule_type in (SplitRuleType.FIXED_AMOUNT, SplitRuleType.PERCENTAGE)
    ] or list(range(len(rules)))
    return max(candidates, key=lambda i: amounts[i])
