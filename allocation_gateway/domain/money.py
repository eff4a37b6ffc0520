"""Monetary rounding primitives - every amount in the engine passes through here"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Iterable, List, Union

from allocation_gateway.domain.exceptions import InvalidRequest
from allocation_gateway.domain.models import Currency

Number = Union[int, float, str, Decimal]

# Working precision for intermediate products (percentages, amortization factors)
PRECISION = 50

ONE_HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """
    Convert an input value to Decimal without inheriting binary float error.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not
    Decimal(0.1000000000000000055511151231257827...).
    """
    if isinstance(value, bool):
        raise InvalidRequest(f"Invalid monetary value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidRequest(f"Invalid monetary value: {value!r}")
    else:
        raise InvalidRequest(f"Invalid monetary value: {value!r}")

    if not result.is_finite():
        raise InvalidRequest(f"Invalid monetary value: {value!r}")
    return result


def as_currency(currency: Union[Currency, str]) -> Currency:
    try:
        return Currency(currency)
    except ValueError:
        raise InvalidRequest(f"Unsupported currency: {currency}")


def minor_unit(currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    """Smallest representable amount, e.g. Decimal("0.01") for NGN (one kobo)"""
    return Decimal(1).scaleb(-as_currency(currency).minor_unit_exponent)


def round_to_minor_unit(amount: Number, currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    """
    Round to the nearest minor unit using round-half-to-even (banker's rounding).

    Examples (NGN):
        2.345 -> 2.34  (4 is even)
        2.355 -> 2.36  (6 is even)
        2.3451 -> 2.35

    Idempotent: round_to_minor_unit(round_to_minor_unit(x)) == round_to_minor_unit(x).
    """
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return to_decimal(amount).quantize(minor_unit(currency), rounding=ROUND_HALF_EVEN)


def percent_of(total: Number, percent: Number, currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    """
    Compute total * percent / 100 with a single final rounding step.

    Raises:
        InvalidRequest: percent outside 0..100
    """
    pct = to_decimal(percent)
    if pct < 0 or pct > ONE_HUNDRED:
        raise InvalidRequest(f"Invalid percentage: {pct}. Must be between 0-100")

    with localcontext() as ctx:
        ctx.prec = PRECISION
        raw = to_decimal(total) * pct / ONE_HUNDRED

    return round_to_minor_unit(raw, currency)


def to_minor_units(amount: Number, currency: Union[Currency, str] = Currency.NGN) -> int:
    """Rounded amount as an integer count of minor units (kobo, cents)"""
    exponent = as_currency(currency).minor_unit_exponent
    return int(round_to_minor_unit(amount, currency) * (10 ** exponent))


def from_minor_units(units: int, currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    exponent = as_currency(currency).minor_unit_exponent
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return (Decimal(units) / (10 ** exponent)).quantize(minor_unit(currency))


def split_evenly(amount: Number, parts: int, currency: Union[Currency, str] = Currency.NGN) -> List[Decimal]:
    """
    Divide an amount into equal shares, last share absorbs the remainder.

    Example:
        1000.00 / 3 -> [333.33, 333.33, 333.34]
        100000 kobo // 3 = 33333 base, last = 100000 - 2 * 33333 = 33334
    """
    if parts < 1:
        raise InvalidRequest(f"Cannot split into {parts} parts")

    units = to_minor_units(amount, currency)
    base = units // parts
    shares = [base] * (parts - 1)
    shares.append(units - base * (parts - 1))

    return [from_minor_units(share, currency) for share in shares]


def sum_money(amounts: Iterable[Number], currency: Union[Currency, str] = Currency.NGN) -> Decimal:
    """Exact sum of already-rounded amounts, quantized so an empty sum is 0.00"""
    total = ZERO
    for amount in amounts:
        total += round_to_minor_unit(amount, currency)
    return round_to_minor_unit(total, currency)
