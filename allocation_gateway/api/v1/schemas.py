"""Pydantic schemas for API request/response validation

Money fields are Decimal: requests accept JSON numbers or strings, responses
serialize them as strings ("1000.00") so no binary float carries an amount.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field

from allocation_gateway.config import settings
from allocation_gateway.domain.models import (
    Currency,
    ErrorKind,
    Frequency,
    InstallmentStatus,
    SplitRuleType,
)


def _default_currency() -> Currency:
    return Currency(settings.default_currency)


ReminderOffset = Annotated[int, Field(ge=0, le=settings.layaway_max_period_days)]


# Splits

class SplitRuleSchema(BaseModel):
    """One recipient's allocation rule"""

    recipient_id: str = Field(..., min_length=1, description="Recipient identifier")
    type: SplitRuleType
    value: Decimal = Field(Decimal("0"), ge=0, description="Amount for fixed_amount, 0-100 for percentage/commission")
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0)


class SplitRequestSchema(BaseModel):
    """Request body for POST /v1/splits"""

    total_amount: Decimal = Field(..., gt=0, description="Amount to distribute in major units")
    currency: Currency = Field(default_factory=_default_currency)
    rules: List[SplitRuleSchema] = Field(..., min_length=2)


class RecipientAllocationSchema(BaseModel):
    recipient_id: str
    amount: Decimal
    rule_type: SplitRuleType
    rounding_adjustment: Decimal


class SplitResponse(BaseModel):
    """Response for POST /v1/splits"""

    currency: Currency
    total_amount: Decimal
    per_recipient: List[RecipientAllocationSchema]
    total_calculated: Decimal
    rounding_adjustment: Decimal
    reconciled: bool
    errors: List[str]
    notes: List[str]
    error_kind: Optional[ErrorKind] = None


class SplitValidationResponse(BaseModel):
    """Response for POST /v1/splits/validate"""

    valid: bool
    errors: List[str]
    notes: List[str]
    outcome: SplitResponse


# Multi-method payments

class TenderSchema(BaseModel):
    method: Literal["card", "bank", "ussd", "mobile_money", "wallet", "credit", "points", "gift_card"]
    amount: Decimal = Field(..., gt=0)


class MultiMethodRequest(BaseModel):
    """Request body for POST /v1/payments/multi-method/validate"""

    total_amount: Decimal = Field(..., gt=0)
    currency: Currency = Field(default_factory=_default_currency)
    payment_methods: List[TenderSchema] = Field(..., min_length=2)


class MultiMethodResponse(BaseModel):
    valid: bool
    total_amount: Decimal
    actual_total: Decimal
    difference: Decimal
    message: str


# Installments

class InstallmentPlanRequest(BaseModel):
    """Request body for POST /v1/installments/schedule"""

    total_amount: Decimal = Field(..., gt=0)
    installment_count: int = Field(..., ge=2)
    frequency: Frequency = Frequency.MONTHLY
    frequency_days: Optional[int] = Field(None, ge=1, description="Required when frequency is custom")
    start_date: date
    down_payment: Decimal = Field(Decimal("0"), ge=0)
    annual_interest_rate_percent: Decimal = Field(Decimal("0"), ge=0)
    currency: Currency = Field(default_factory=_default_currency)


class InstallmentEntrySchema(BaseModel):
    """Single installment in a repayment schedule"""

    index: int
    due_date: date
    principal_portion: Decimal
    interest_portion: Decimal
    total_due: Decimal
    remaining_balance: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING


class ScheduleSummarySchema(BaseModel):
    financed_principal: Decimal
    total_principal: Decimal
    total_interest: Decimal
    total_payable: Decimal
    installment_count: int
    first_due_date: Optional[date] = None
    first_payment: Decimal


class ScheduleResponse(BaseModel):
    """Response for POST /v1/installments/schedule"""

    currency: Currency
    frequency_days: int
    summary: ScheduleSummarySchema
    schedule: List[InstallmentEntrySchema]


class PartialPaymentRequest(BaseModel):
    """Request body for POST /v1/installments/partial-payment"""

    plan: InstallmentPlanRequest
    amount: Decimal = Field(..., gt=0)
    paid_installments: int = Field(0, ge=0, description="Leading installments already settled")


class PartialPaymentResponse(BaseModel):
    installment_index: Optional[int] = None
    due_amount: Decimal
    minimum_amount: Decimal
    amount: Decimal
    accepted: bool
    message: str


# Layaway

class LayawayPlanRequest(BaseModel):
    """Request body for POST /v1/layaway/plan"""

    total_amount: Decimal = Field(..., gt=0)
    deposit_percent: Decimal = Field(Decimal("10"), ge=0, le=100)
    minimum_deposit: Decimal = Field(..., ge=0)
    period_days: int = Field(default_factory=lambda: settings.layaway_default_period_days)
    start_date: date
    currency: Currency = Field(default_factory=_default_currency)
    reminder_days: List[ReminderOffset] = Field(default_factory=lambda: [14, 7, 3, 1], max_length=10)


class SuggestedInstallmentSchema(BaseModel):
    amount: Decimal
    count: int


class LayawayPaymentSchema(BaseModel):
    index: int
    due_date: date
    amount: Decimal


class LayawayPlanResponse(BaseModel):
    """Response for POST /v1/layaway/plan"""

    currency: Currency
    total_amount: Decimal
    required_deposit: Decimal
    remaining_amount: Decimal
    expiry_date: date
    suggested_installment: SuggestedInstallmentSchema
    payments: List[LayawayPaymentSchema]
    reminder_dates: List[date]
