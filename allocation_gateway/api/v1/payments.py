"""POST /v1/payments/multi-method/validate - check tender amounts against the total"""

import logging
from fastapi import APIRouter, Request

from allocation_gateway.api.v1.schemas import MultiMethodRequest, MultiMethodResponse
from allocation_gateway.api.dependencies import enforce_range, get_request_id
from allocation_gateway.config import settings
from allocation_gateway.domain.money import round_to_minor_unit
from allocation_gateway.domain.reconciliation import check_reconciliation

router = APIRouter()


@router.post("/payments/multi-method/validate", response_model=MultiMethodResponse)
def validate_multi_method_payment(body: MultiMethodRequest, request: Request):
    """Payment method amounts must sum to the total exactly, to the minor unit"""
    enforce_range("payment_methods", len(body.payment_methods), minimum=2, maximum=settings.max_payment_methods)

    check = check_reconciliation(
        [tender.amount for tender in body.payment_methods],
        body.total_amount,
        body.currency,
    )
    if not check.is_valid:
        logging.warning(check.message, extra={"request_id": get_request_id(request)})

    return MultiMethodResponse(
        valid=check.is_valid,
        total_amount=round_to_minor_unit(body.total_amount, body.currency),
        actual_total=check.actual_total,
        difference=check.difference,
        message=check.message,
    )
