"""POST /v1/splits - multi-recipient payment split endpoints"""

import time
import logging
from decimal import Decimal
from fastapi import APIRouter, HTTPException, Request

from allocation_gateway.api.v1.schemas import (
    RecipientAllocationSchema,
    SplitRequestSchema,
    SplitResponse,
    SplitValidationResponse,
)
from allocation_gateway.api.dependencies import enforce_range, get_request_id
from allocation_gateway.config import settings
from allocation_gateway.domain.exceptions import ReconciliationError
from allocation_gateway.domain.models import ErrorKind, SplitOutcome, SplitRequest, SplitRule
from allocation_gateway.domain.money import round_to_minor_unit
from allocation_gateway.domain.splits import compute_split
from allocation_gateway.infrastructure.observability.metrics import record_split
from allocation_gateway.infrastructure.observability.logging import log_split_outcome

router = APIRouter()


def to_split_request(body: SplitRequestSchema) -> SplitRequest:
    return SplitRequest(
        total_amount=body.total_amount,
        currency=body.currency,
        rules=tuple(
            SplitRule(
                recipient_id=rule.recipient_id,
                rule_type=rule.type,
                value=rule.value,
                min_amount=rule.min_amount,
                max_amount=rule.max_amount,
            )
            for rule in body.rules
        ),
    )


def to_split_response(total_amount: Decimal, outcome: SplitOutcome) -> SplitResponse:
    return SplitResponse(
        currency=outcome.currency,
        total_amount=round_to_minor_unit(total_amount, outcome.currency),
        per_recipient=[
            RecipientAllocationSchema(
                recipient_id=a.recipient_id,
                amount=a.amount,
                rule_type=a.rule_type,
                rounding_adjustment=a.rounding_adjustment,
            )
            for a in outcome.per_recipient
        ],
        total_calculated=outcome.total_calculated,
        rounding_adjustment=outcome.rounding_adjustment,
        reconciled=outcome.reconciled,
        errors=list(outcome.errors),
        notes=list(outcome.notes),
        error_kind=outcome.error_kind,
    )


def _run_split(body: SplitRequestSchema, request_id: str) -> SplitOutcome:
    """Compute, record metrics and write the audit log entry"""
    enforce_range("rules", len(body.rules), minimum=2, maximum=settings.max_split_parties)
    start_time = time.time()

    try:
        outcome = compute_split(to_split_request(body))
    except ReconciliationError as e:
        logging.error(f"Split reconciliation invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Split reconciliation failed")

    duration_ms = (time.time() - start_time) * 1000
    record_split(outcome)
    log_split_outcome(request_id, str(body.total_amount), outcome, duration_ms)
    return outcome


@router.post("/splits", response_model=SplitResponse)
def create_split(body: SplitRequestSchema, request: Request):
    """
    Split a payment across recipients.

    Returns 200 even when the outcome is not reconciled (infeasible
    configuration): callers must treat reconciled=false as "do not proceed".
    Structurally invalid rule sets return 422.
    """
    request_id = get_request_id(request)
    outcome = _run_split(body, request_id)

    if outcome.error_kind == ErrorKind.INVALID_REQUEST:
        logging.warning(f"Invalid split request: {outcome.errors}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=list(outcome.errors))

    return to_split_response(body.total_amount, outcome)


@router.post("/splits/validate", response_model=SplitValidationResponse)
def validate_split_configuration(body: SplitRequestSchema, request: Request):
    """Dry-run a split configuration and report whether it reconciles"""
    outcome = _run_split(body, get_request_id(request))

    return SplitValidationResponse(
        valid=outcome.reconciled,
        errors=list(outcome.errors),
        notes=list(outcome.notes),
        outcome=to_split_response(body.total_amount, outcome),
    )
