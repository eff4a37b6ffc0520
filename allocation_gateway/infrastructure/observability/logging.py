"""Structured JSON logging for production observability and calculation audit"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from allocation_gateway.config import settings
from allocation_gateway.domain.models import LayawayPlan, ScheduleSummary, SplitOutcome


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_split_outcome(request_id: str, total_amount: str, outcome: SplitOutcome, duration_ms: float) -> None:
    """Audit record of a split calculation (amounts logged as strings, never floats)"""
    logging.info(
        "Split calculated",
        extra={
            "request_id": request_id,
            "step": "split_complete",
            "total_amount": total_amount,
            "currency": outcome.currency.value,
            "reconciled": outcome.reconciled,
            "error_kind": outcome.error_kind.value if outcome.error_kind else None,
            "allocations": {a.recipient_id: str(a.amount) for a in outcome.per_recipient},
            "rounding_adjustment": str(outcome.rounding_adjustment),
            "errors": list(outcome.errors),
            "notes": list(outcome.notes),
            "duration_ms": duration_ms,
        },
    )


def log_schedule_created(request_id: str, summary: ScheduleSummary, interest_rate: str, duration_ms: float) -> None:
    logging.info(
        "Installment schedule generated",
        extra={
            "request_id": request_id,
            "step": "schedule_complete",
            "financed_principal": str(summary.financed_principal),
            "installment_count": summary.installment_count,
            "annual_interest_rate_percent": interest_rate,
            "total_interest": str(summary.total_interest),
            "total_payable": str(summary.total_payable),
            "duration_ms": duration_ms,
        },
    )


def log_layaway_plan(request_id: str, plan: LayawayPlan, duration_ms: float) -> None:
    logging.info(
        "Layaway plan computed",
        extra={
            "request_id": request_id,
            "step": "layaway_complete",
            "total_amount": str(plan.total_amount),
            "required_deposit": str(plan.required_deposit),
            "remaining_amount": str(plan.remaining_amount),
            "expiry_date": plan.expiry_date.isoformat(),
            "duration_ms": duration_ms,
        },
    )
