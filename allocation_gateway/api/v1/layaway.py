"""POST /v1/layaway/plan - layaway deposit and payment plan"""

import time
import logging
from fastapi import APIRouter, HTTPException, Request

from allocation_gateway.api.v1.schemas import (
    LayawayPaymentSchema,
    LayawayPlanRequest,
    LayawayPlanResponse,
    SuggestedInstallmentSchema,
)
from allocation_gateway.api.dependencies import enforce_range, get_request_id
from allocation_gateway.config import settings
from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.layaway import compute_layaway_plan, expand_layaway_payments, reminder_dates
from allocation_gateway.domain.models import LayawayRequest
from allocation_gateway.infrastructure.observability.metrics import layaway_counter
from allocation_gateway.infrastructure.observability.logging import log_layaway_plan

router = APIRouter()


@router.post("/layaway/plan", response_model=LayawayPlanResponse)
def create_layaway_plan(body: LayawayPlanRequest, request: Request):
    """
    Compute deposit, balance, expiry and a suggested payment cadence.

    Deposit percent and holding period are bounded by service settings.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    enforce_range(
        "deposit_percent",
        float(body.deposit_percent),
        minimum=settings.min_deposit_percent,
        maximum=settings.max_deposit_percent,
    )
    enforce_range(
        "period_days",
        body.period_days,
        minimum=settings.layaway_min_period_days,
        maximum=settings.layaway_max_period_days,
    )

    try:
        plan = compute_layaway_plan(
            LayawayRequest(
                total_amount=body.total_amount,
                deposit_percent=body.deposit_percent,
                minimum_deposit=body.minimum_deposit,
                period_days=body.period_days,
                start_date=body.start_date,
                currency=body.currency,
            )
        )
        payments = expand_layaway_payments(plan, body.start_date)
        reminders = reminder_dates(plan, body.start_date, body.reminder_days)
    except InvalidRequest as e:
        logging.warning(f"Invalid layaway request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    layaway_counter.inc()
    log_layaway_plan(request_id, plan, duration_ms)

    return LayawayPlanResponse(
        currency=plan.currency,
        total_amount=plan.total_amount,
        required_deposit=plan.required_deposit,
        remaining_amount=plan.remaining_amount,
        expiry_date=plan.expiry_date,
        suggested_installment=SuggestedInstallmentSchema(
            amount=plan.suggested_installment.amount,
            count=plan.suggested_installment.count,
        ),
        payments=[
            LayawayPaymentSchema(index=p.index, due_date=p.due_date, amount=p.amount)
            for p in payments
        ],
        reminder_dates=reminders,
    )
