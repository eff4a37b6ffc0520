"""Layaway planner - deposit, balance and suggested payment cadence"""

from datetime import date
from decimal import localcontext
from typing import Iterable, List

from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.models import (
    LayawayPayment,
    LayawayPlan,
    LayawayRequest,
    SuggestedInstallment,
)
from allocation_gateway.domain.money import (
    ONE_HUNDRED,
    PRECISION,
    as_currency,
    percent_of,
    round_to_minor_unit,
    to_decimal,
)
from allocation_gateway.utils.date_utils import add_days, dates_before, generate_due_dates

DAYS_PER_MONTH = 30
DEFAULT_REMINDER_DAYS = (14, 7, 3, 1)


def compute_layaway_plan(request: LayawayRequest) -> LayawayPlan:
    """
    Compute deposit and balance terms for a layaway purchase.

    - Deposit is deposit_percent of the total, but never below minimum_deposit
      and never above the total
    - Expiry is start_date + period_days
    - Balance is suggested as monthly payments (30-day months); under a month
      means a single payment of the full balance

    Example:
        50000.00 at 10%, minimum 2000.00, 90 days
        -> deposit 5000.00, remaining 45000.00, 3 x 15000.00
    """
    currency = as_currency(request.currency)
    total = round_to_minor_unit(request.total_amount, currency)
    deposit_percent = to_decimal(request.deposit_percent)
    minimum_deposit = round_to_minor_unit(request.minimum_deposit, currency)

    if total <= 0:
        raise InvalidRequest("Total amount must be greater than zero")
    if deposit_percent < 0 or deposit_percent > ONE_HUNDRED:
        raise InvalidRequest(f"Invalid deposit percentage: {deposit_percent}. Must be between 0-100")
    if minimum_deposit < 0:
        raise InvalidRequest("minimum_deposit must not be negative")
    if isinstance(request.period_days, bool) or not isinstance(request.period_days, int) or request.period_days < 0:
        raise InvalidRequest(f"period_days must be a non-negative integer, got {request.period_days!r}")

    calculated_deposit = percent_of(total, deposit_percent, currency)
    required_deposit = min(max(calculated_deposit, minimum_deposit), total)
    remaining_amount = total - required_deposit

    months_available = request.period_days // DAYS_PER_MONTH
    if months_available == 0:
        suggested = SuggestedInstallment(amount=remaining_amount, count=1)
    else:
        with localcontext() as ctx:
            ctx.prec = PRECISION
            amount = round_to_minor_unit(remaining_amount / months_available, currency)
        suggested = SuggestedInstallment(amount=amount, count=months_available)

    return LayawayPlan(
        total_amount=total,
        required_deposit=required_deposit,
        remaining_amount=remaining_amount,
        expiry_date=add_days(request.start_date, request.period_days),
        suggested_installment=suggested,
        currency=currency,
    )


def expand_layaway_payments(plan: LayawayPlan, start_date: date) -> List[LayawayPayment]:
    """
    Turn the suggested cadence into concrete payments every 30 days.

    Each payment is the suggested amount capped at the outstanding balance;
    the last payment absorbs whatever is left so the payments sum exactly to
    plan.remaining_amount.
    """
    if plan.remaining_amount <= 0:
        return []

    count = plan.suggested_installment.count
    due_dates = generate_due_dates(start_date, count, DAYS_PER_MONTH)
    if count == 1:
        # Single payment is due at expiry
        due_dates = [plan.expiry_date]

    balance = plan.remaining_amount
    payments = []
    for index, due_date in enumerate(due_dates, start=1):
        amount = balance if index == count else min(plan.suggested_installment.amount, balance)
        balance -= amount
        payments.append(LayawayPayment(index=index, due_date=due_date, amount=amount))

    return payments


def reminder_dates(
    plan: LayawayPlan,
    start_date: date,
    days_before: Iterable[int] = DEFAULT_REMINDER_DAYS,
) -> List[date]:
    """
    Payment reminder dates ahead of expiry, ascending.

    Only dates strictly after start_date are kept; offsets reaching back to
    or past the start of the layaway are dropped.
    """
    offsets = list(days_before)
    if any(offset < 0 for offset in offsets):
        raise InvalidRequest("Reminder offsets must not be negative")

    period_days = (plan.expiry_date - start_date).days
    return dates_before(plan.expiry_date, [offset for offset in offsets if offset < period_days])
