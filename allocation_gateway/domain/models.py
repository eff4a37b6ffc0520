"""Domain models - immutable dataclasses for allocation requests and results"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class Currency(str, Enum):
    """Supported settlement currencies"""

    NGN = "NGN"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    ZAR = "ZAR"
    KES = "KES"
    GHS = "GHS"
    UGX = "UGX"
    RWF = "RWF"

    @property
    def minor_unit_exponent(self) -> int:
        """Number of decimal places in the currency's minor unit (ISO 4217)"""
        return 0 if self in (Currency.UGX, Currency.RWF) else 2


class SplitRuleType(str, Enum):
    """Allocation rule types, declared in processing priority order"""

    FIXED_AMOUNT = "fixed_amount"
    PERCENTAGE = "percentage"
    COMMISSION = "commission"
    REMAINING = "remaining"

    @property
    def priority(self) -> int:
        return list(SplitRuleType).index(self)


class ErrorKind(str, Enum):
    """Why a split outcome is not reconciled"""

    INVALID_REQUEST = "invalid_request"
    INFEASIBLE_ALLOCATION = "infeasible_allocation"


class Frequency(str, Enum):
    """Installment cadence"""

    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


FREQUENCY_DAYS = {
    Frequency.WEEKLY: 7,
    Frequency.BI_WEEKLY: 14,
    Frequency.MONTHLY: 30,
}


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SplitRule:
    """One recipient's allocation rule"""

    recipient_id: str
    rule_type: SplitRuleType
    value: Decimal = Decimal("0")  # amount for fixed_amount, 0-100 for percentage/commission
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class SplitRequest:
    """Total to distribute across two or more recipients"""

    total_amount: Decimal
    rules: Tuple[SplitRule, ...]
    currency: Currency = Currency.NGN


@dataclass(frozen=True)
class RecipientAllocation:
    """Calculated amount for a single recipient"""

    recipient_id: str
    amount: Decimal
    rule_type: SplitRuleType
    rounding_adjustment: Decimal = Decimal("0")


@dataclass(frozen=True)
class SplitOutcome:
    """
    Result of a split calculation.

    `reconciled` is a hard gate: callers must not proceed with a payment
    whose outcome is not reconciled. `notes` carry non-fatal clamping
    information and do not affect reconciliation.
    """

    per_recipient: Tuple[RecipientAllocation, ...]
    total_calculated: Decimal
    rounding_adjustment: Decimal
    reconciled: bool
    currency: Currency = Currency.NGN
    errors: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()
    error_kind: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ReconciliationResult:
    """Amounts after the reconciliation pass"""

    amounts: Tuple[Decimal, ...]
    adjustment: Decimal
    adjusted_index: Optional[int] = None


@dataclass(frozen=True)
class ReconciliationCheck:
    """Exact comparison of a set of amounts against an expected total"""

    is_valid: bool
    actual_total: Decimal
    difference: Decimal
    message: str


@dataclass(frozen=True)
class InstallmentRequest:
    """Financing request; financed principal is total minus down payment"""

    total_amount: Decimal
    installment_count: int
    frequency_days: int
    start_date: date
    down_payment: Decimal = Decimal("0")
    annual_interest_rate_percent: Decimal = Decimal("0")
    currency: Currency = Currency.NGN

    @property
    def financed_principal(self) -> Decimal:
        return self.total_amount - self.down_payment


@dataclass(frozen=True)
class InstallmentEntry:
    """Single period in a repayment schedule"""

    index: int
    due_date: date
    principal_portion: Decimal
    interest_portion: Decimal
    total_due: Decimal
    remaining_balance: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING


@dataclass(frozen=True)
class ScheduleSummary:
    """Aggregate figures for a repayment schedule"""

    financed_principal: Decimal
    total_principal: Decimal
    total_interest: Decimal
    total_payable: Decimal
    installment_count: int
    first_due_date: Optional[date]
    first_payment: Decimal


@dataclass(frozen=True)
class PartialPaymentCheck:
    """Whether an amount is acceptable against the next pending installment"""

    installment_index: Optional[int]
    due_amount: Decimal
    minimum_amount: Decimal
    amount: Decimal
    accepted: bool
    message: str


@dataclass(frozen=True)
class LayawayRequest:
    total_amount: Decimal
    deposit_percent: Decimal
    minimum_deposit: Decimal
    period_days: int
    start_date: date
    currency: Currency = Currency.NGN


@dataclass(frozen=True)
class SuggestedInstallment:
    amount: Decimal
    count: int


@dataclass(frozen=True)
class LayawayPlan:
    """Deposit and balance terms for a layaway purchase"""

    total_amount: Decimal
    required_deposit: Decimal
    remaining_amount: Decimal
    expiry_date: date
    suggested_installment: SuggestedInstallment
    currency: Currency = Currency.NGN


@dataclass(frozen=True)
class LayawayPayment:
    index: int
    due_date: date
    amount: Decimal

