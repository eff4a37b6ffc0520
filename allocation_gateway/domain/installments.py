"""Installment schedule generation for financed purchases"""

from decimal import Decimal, localcontext
from typing import List, Optional, Sequence, Union

from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.models import (
    FREQUENCY_DAYS,
    Currency,
    Frequency,
    InstallmentEntry,
    InstallmentRequest,
    InstallmentStatus,
    PartialPaymentCheck,
    ScheduleSummary,
)
from allocation_gateway.domain.money import (
    ONE_HUNDRED,
    PRECISION,
    ZERO,
    Number,
    as_currency,
    round_to_minor_unit,
    split_evenly,
    sum_money,
    to_decimal,
)
from allocation_gateway.utils.date_utils import generate_due_dates

MONTHS_PER_YEAR = 12
DEFAULT_PARTIAL_PAYMENT_RATIO = Decimal("0.5")


def resolve_frequency_days(frequency: Union[Frequency, str], frequency_days: Optional[int] = None) -> int:
    """Map a named cadence to days; `custom` requires an explicit day count"""
    try:
        frequency = Frequency(frequency)
    except ValueError:
        raise InvalidRequest(f"Unknown installment frequency: {frequency}")

    if frequency == Frequency.CUSTOM:
        if frequency_days is None or frequency_days < 1:
            raise InvalidRequest("Custom frequency requires frequency_days >= 1")
        return int(frequency_days)

    return FREQUENCY_DAYS[frequency]


def compute_installment_schedule(request: InstallmentRequest) -> List[InstallmentEntry]:
    """
    Generate a repayment schedule for the financed principal.

    Requirements:
    - Financed principal = total_amount - down_payment, must be > 0
    - 0% interest: equal principal, last installment absorbs rounding remainder
    - Interest > 0: fixed-payment amortization at annual_rate / 100 / 12 per
      period, final installment adjusted so principal portions sum exactly
    - Due dates every frequency_days, first one a full period after start_date

    Args:
        request: Validated installment request

    Returns:
        installment_count InstallmentEntry objects, all pending

    Raises:
        InvalidRequest: malformed counts, negative amounts/rates or nothing financed

    Example:
        1000.00 over 3 at 0% -> [333.33, 333.33, 333.34]
        100000 kobo // 3 = 33333 base, last installment: 100000 - 66666 = 33334
    """
    currency = as_currency(request.currency)
    principal, rate = _validate(request, currency)
    due_dates = generate_due_dates(request.start_date, request.installment_count, request.frequency_days)

    if rate == 0:
        return _equal_principal_schedule(principal, due_dates, currency)
    return _amortized_schedule(principal, rate, due_dates, currency)


def _validate(request: InstallmentRequest, currency: Currency):
    count = request.installment_count
    if isinstance(count, bool) or not isinstance(count, int) or count < 2:
        raise InvalidRequest(f"installment_count must be an integer >= 2, got {count!r}")
    if isinstance(request.frequency_days, bool) or not isinstance(request.frequency_days, int) or request.frequency_days < 1:
        raise InvalidRequest(f"frequency_days must be an integer >= 1, got {request.frequency_days!r}")

    total = round_to_minor_unit(request.total_amount, currency)
    down_payment = round_to_minor_unit(request.down_payment, currency)
    rate = to_decimal(request.annual_interest_rate_percent)

    if down_payment < 0:
        raise InvalidRequest("down_payment must not be negative")
    if rate < 0:
        raise InvalidRequest("annual_interest_rate_percent must not be negative")

    principal = total - down_payment
    if principal <= 0:
        raise InvalidRequest(f"Financed principal must be greater than zero, got {principal}")

    return principal, rate


def _equal_principal_schedule(principal: Decimal, due_dates, currency: Currency) -> List[InstallmentEntry]:
    zero = round_to_minor_unit(ZERO, currency)
    balance = principal
    schedule = []

    for index, (due_date, share) in enumerate(zip(due_dates, split_evenly(principal, len(due_dates), currency)), start=1):
        balance -= share
        schedule.append(
            InstallmentEntry(
                index=index,
                due_date=due_date,
                principal_portion=share,
                interest_portion=zero,
                total_due=share,
                remaining_balance=balance,
            )
        )

    return schedule


def level_payment(principal: Number, periodic_rate: Number, periods: int, currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    """Standard annuity payment P * r(1+r)^n / ((1+r)^n - 1), rounded once"""
    if isinstance(periods, bool) or not isinstance(periods, int) or periods < 1:
        raise InvalidRequest(f"periods must be an integer >= 1, got {periods!r}")

    with localcontext() as ctx:
        ctx.prec = PRECISION
        rate = to_decimal(periodic_rate)
        if rate == 0:
            raw = to_decimal(principal) / periods
        else:
            growth = (1 + rate) ** periods
            raw = to_decimal(principal) * rate * growth / (growth - 1)
    return round_to_minor_unit(raw, currency)


def _amortized_schedule(principal: Decimal, annual_rate: Decimal, due_dates, currency: Currency) -> List[InstallmentEntry]:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        periodic_rate = annual_rate / ONE_HUNDRED / MONTHS_PER_YEAR

    count = len(due_dates)
    payment = level_payment(principal, periodic_rate, count, currency)
    zero = round_to_minor_unit(ZERO, currency)
    balance = principal
    schedule = []

    for index, due_date in enumerate(due_dates, start=1):
        with localcontext() as ctx:
            ctx.prec = PRECISION
            interest = round_to_minor_unit(balance * periodic_rate, currency)

        if index == count:
            # Final period clears whatever rounding left on the balance
            principal_portion = balance
        else:
            principal_portion = min(max(payment - interest, zero), balance)

        # Balance is recomputed from rounded values only
        balance -= principal_portion
        schedule.append(
            InstallmentEntry(
                index=index,
                due_date=due_date,
                principal_portion=principal_portion,
                interest_portion=interest,
                total_due=principal_portion + interest,
                remaining_balance=max(balance, zero),
            )
        )

    return schedule


def summarize_schedule(
    schedule: Sequence[InstallmentEntry],
    financed_principal: Number,
    currency: Union[Currency, str] = Currency.NGN,
) -> ScheduleSummary:
    total_principal = sum_money((e.principal_portion for e in schedule), currency)
    total_interest = sum_money((e.interest_portion for e in schedule), currency)

    return ScheduleSummary(
        financed_principal=round_to_minor_unit(financed_principal, currency),
        total_principal=total_principal,
        total_interest=total_interest,
        total_payable=total_principal + total_interest,
        installment_count=len(schedule),
        first_due_date=schedule[0].due_date if schedule else None,
        first_payment=schedule[0].total_due if schedule else round_to_minor_unit(ZERO, currency),
    )


def next_pending_installment(schedule: Sequence[InstallmentEntry]) -> Optional[InstallmentEntry]:
    for entry in schedule:
        if entry.status == InstallmentStatus.PENDING:
            return entry
    return None


def evaluate_partial_payment(
    schedule: Sequence[InstallmentEntry],
    amount: Number,
    minimum_ratio: Number = DEFAULT_PARTIAL_PAYMENT_RATIO,
    currency: Union[Currency, str] = Currency.NGN,
) -> PartialPaymentCheck:
    """
    Check a partial payment against the next pending installment.

    A partial payment must cover at least minimum_ratio (default half) of
    that installment's total_due.
    """
    amount = round_to_minor_unit(amount, currency)
    ratio = to_decimal(minimum_ratio)
    if amount <= 0:
        raise InvalidRequest("Payment amount must be greater than zero")
    if ratio < 0 or ratio > 1:
        raise InvalidRequest(f"minimum_ratio must be between 0 and 1, got {ratio}")

    zero = round_to_minor_unit(ZERO, currency)
    entry = next_pending_installment(schedule)
    if entry is None:
        return PartialPaymentCheck(
            installment_index=None,
            due_amount=zero,
            minimum_amount=zero,
            amount=amount,
            accepted=False,
            message="No pending installments found",
        )

    with localcontext() as ctx:
        ctx.prec = PRECISION
        minimum = round_to_minor_unit(entry.total_due * ratio, currency)

    accepted = amount >= minimum
    message = (
        f"Partial payment accepted for installment {entry.index}"
        if accepted
        else f"Minimum payment amount is {minimum}"
    )

    return PartialPaymentCheck(
        installment_index=entry.index,
        due_amount=entry.total_due,
        minimum_amount=minimum,
        amount=amount,
        accepted=accepted,
        message=message,
    )
