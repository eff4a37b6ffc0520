"""POST /v1/installments/* - installment schedule and partial payment checks"""

import time
import logging
from dataclasses import replace
from fastapi import APIRouter, HTTPException, Request

from allocation_gateway.api.v1.schemas import (
    InstallmentEntrySchema,
    InstallmentPlanRequest,
    PartialPaymentRequest,
    PartialPaymentResponse,
    ScheduleResponse,
    ScheduleSummarySchema,
)
from allocation_gateway.api.dependencies import enforce_range, get_request_id
from allocation_gateway.config import settings
from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.installments import (
    compute_installment_schedule,
    evaluate_partial_payment,
    resolve_frequency_days,
    summarize_schedule,
)
from allocation_gateway.domain.models import InstallmentEntry, InstallmentRequest, InstallmentStatus
from allocation_gateway.infrastructure.observability.metrics import record_schedule
from allocation_gateway.infrastructure.observability.logging import log_schedule_created

router = APIRouter()


def to_installment_request(body: InstallmentPlanRequest) -> InstallmentRequest:
    enforce_range("installment_count", body.installment_count, maximum=settings.max_installments)
    enforce_range(
        "annual_interest_rate_percent",
        float(body.annual_interest_rate_percent),
        maximum=settings.max_interest_rate_percent,
    )

    return InstallmentRequest(
        total_amount=body.total_amount,
        installment_count=body.installment_count,
        frequency_days=resolve_frequency_days(body.frequency, body.frequency_days),
        start_date=body.start_date,
        down_payment=body.down_payment,
        annual_interest_rate_percent=body.annual_interest_rate_percent,
        currency=body.currency,
    )


def _entry_schema(entry: InstallmentEntry) -> InstallmentEntrySchema:
    return InstallmentEntrySchema(
        index=entry.index,
        due_date=entry.due_date,
        principal_portion=entry.principal_portion,
        interest_portion=entry.interest_portion,
        total_due=entry.total_due,
        remaining_balance=entry.remaining_balance,
        status=entry.status,
    )


def _build_schedule(body: InstallmentPlanRequest, request_id: str):
    try:
        plan_request = to_installment_request(body)
        return plan_request, compute_installment_schedule(plan_request)
    except InvalidRequest as e:
        logging.warning(f"Invalid installment request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/installments/schedule", response_model=ScheduleResponse)
def create_schedule(body: InstallmentPlanRequest, request: Request):
    """
    Generate an installment schedule.

    Returns:
        Per-period principal/interest/balance plus totals; principal portions
        always sum exactly to total_amount - down_payment
    """
    start_time = time.time()
    request_id = get_request_id(request)

    plan_request, schedule = _build_schedule(body, request_id)
    summary = summarize_schedule(schedule, plan_request.financed_principal, plan_request.currency)

    duration_ms = (time.time() - start_time) * 1000
    record_schedule(plan_request.annual_interest_rate_percent == 0)
    log_schedule_created(request_id, summary, str(plan_request.annual_interest_rate_percent), duration_ms)

    return ScheduleResponse(
        currency=plan_request.currency,
        frequency_days=plan_request.frequency_days,
        summary=ScheduleSummarySchema(
            financed_principal=summary.financed_principal,
            total_principal=summary.total_principal,
            total_interest=summary.total_interest,
            total_payable=summary.total_payable,
            installment_count=summary.installment_count,
            first_due_date=summary.first_due_date,
            first_payment=summary.first_payment,
        ),
        schedule=[_entry_schema(entry) for entry in schedule],
    )


@router.post("/installments/partial-payment", response_model=PartialPaymentResponse)
def check_partial_payment(body: PartialPaymentRequest, request: Request):
    """
    Check whether an amount is acceptable as a partial payment.

    The schedule is regenerated from the plan terms (nothing is stored);
    the first `paid_installments` entries are treated as settled.
    """
    request_id = get_request_id(request)
    plan_request, schedule = _build_schedule(body.plan, request_id)

    schedule = [
        replace(entry, status=InstallmentStatus.PAID) if entry.index <= body.paid_installments else entry
        for entry in schedule
    ]

    try:
        check = evaluate_partial_payment(
            schedule,
            body.amount,
            minimum_ratio=str(settings.partial_payment_min_ratio),
            currency=plan_request.currency,
        )
    except InvalidRequest as e:
        logging.warning(f"Invalid partial payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    return PartialPaymentResponse(
        installment_index=check.installment_index,
        due_amount=check.due_amount,
        minimum_amount=check.minimum_amount,
        amount=check.amount,
        accepted=check.accepted,
        message=check.message,
    )
