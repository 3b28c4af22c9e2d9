# backend/portfolio_ledger/utils/financial.py
"""
Fixed-precision arithmetic for money, quantities and prices.

Every value that is persisted, returned by the API or compared goes through
one of the rounding helpers first. All helpers work on ``Decimal`` and round
half-up, so a chain of N operations drifts at most one half-unit of the
target precision per step.

Precision contract:
    currency    2 decimals   (round_currency)
    quantity    6 decimals   (round_quantity)
    price       4 decimals   (round_price)
    percentage  2 decimals   (round_percentage)

Usage:
    from portfolio_ledger.utils.financial import calculate_total, subtract_currency

    cost = calculate_total(Decimal("10.00"), Decimal("50"))   # Decimal("500.00")
    remaining = subtract_currency(cash, cost)
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

# =============================================================================
# PRECISION
# =============================================================================

CURRENCY_EXP = Decimal("0.01")
QUANTITY_EXP = Decimal("0.000001")
PRICE_EXP = Decimal("0.0001")
PERCENT_EXP = Decimal("0.01")

ZERO = Decimal("0")
HUNDRED = Decimal("100")

Number = Decimal | int | float | str


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without binary floating point artifacts.

    Floats are converted through ``str`` so that 0.1 becomes Decimal("0.1")
    rather than Decimal("0.1000000000000000055511151231257827...").

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric value: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a numeric value: {value!r}") from exc


def _quantize(value: Number, exp: Decimal) -> Decimal:
    return to_decimal(value).quantize(exp, rounding=ROUND_HALF_UP)


# =============================================================================
# ROUNDING
# =============================================================================

def round_currency(value: Number) -> Decimal:
    return _quantize(value, CURRENCY_EXP)


def round_quantity(value: Number) -> Decimal:
    return _quantize(value, QUANTITY_EXP)


def round_price(value: Number) -> Decimal:
    return _quantize(value, PRICE_EXP)


def round_percentage(value: Number) -> Decimal:
    return _quantize(value, PERCENT_EXP)


# =============================================================================
# ARITHMETIC
# =============================================================================

def calculate_total(price: Number, quantity: Number) -> Decimal:
    """Total value of ``quantity`` units at ``price``, rounded to currency."""
    return round_currency(to_decimal(price) * to_decimal(quantity))


def add_currency(a: Number, b: Number) -> Decimal:
    return round_currency(to_decimal(a) + to_decimal(b))


def subtract_currency(a: Number, b: Number) -> Decimal:
    return round_currency(to_decimal(a) - to_decimal(b))


def add_quantity(a: Number, b: Number) -> Decimal:
    return round_quantity(to_decimal(a) + to_decimal(b))


def subtract_quantity(a: Number, b: Number) -> Decimal:
    return round_quantity(to_decimal(a) - to_decimal(b))


def percentage_of(part: Number, whole: Number) -> Decimal:
    """
    ``part`` as a percentage of ``whole`` with two decimals.

    Returns 0 when ``whole`` is zero, never a division error.

    Example:
        >>> percentage_of(Decimal("250"), Decimal("1000"))
        Decimal('25.00')
    """
    whole_dec = to_decimal(whole)
    if whole_dec == ZERO:
        return round_percentage(ZERO)
    return round_percentage(to_decimal(part) / whole_dec * HUNDRED)


def weighted_average_price(total_value: Number, total_quantity: Number) -> Decimal | None:
    """
    Volume-weighted average price: Σ(price × qty) / Σ(qty).

    Returns None when no quantity traded on that side.
    """
    qty = to_decimal(total_quantity)
    if qty == ZERO:
        return None
    return round_currency(to_decimal(total_value) / qty)


# =============================================================================
# VALIDATION & COMPARISON
# =============================================================================

def is_valid_currency(value: Number | None) -> bool:
    """A currency amount is valid when it is a finite, non-negative number."""
    if value is None:
        return False
    try:
        dec = to_decimal(value)
    except ValueError:
        return False
    return dec.is_finite() and dec >= ZERO


def is_valid_quantity(value: Number | None) -> bool:
    """A quantity is valid when it is a finite, strictly positive number."""
    if value is None:
        return False
    try:
        dec = to_decimal(value)
    except ValueError:
        return False
    return dec.is_finite() and dec > ZERO


def has_sufficient_funds(available: Number, required: Number) -> bool:
    """Compare rounded amounts so representation noise never causes a false negative."""
    return round_currency(available) >= round_currency(required)
