from __future__ import annotations

from typing import Any, Iterable


# Maximum price: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class InvalidQuantityError(ValidationError):
    """Quantity is not an acceptable integer for the requested operation."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate item name)."""


def _coerce_int(value: Any, field: str, error_cls: type[ValidationError]) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise error_cls(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise error_cls(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise error_cls(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise error_cls(f"{field} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise error_cls(f"{field} must be an integer, not a decimal")
    raise error_cls(f"{field} must be an integer")


def parse_quantity(value: Any, *, field: str = "quantity", allow_zero: bool = False) -> int:
    """
    Validate a unit quantity.

    Additive ledger operations need a positive integer; the set-quantity
    variants and inventory counts accept zero (allow_zero=True).
    """
    if value is None:
        raise InvalidQuantityError(f"{field} is required")
    qty = _coerce_int(value, field, InvalidQuantityError)
    if allow_zero:
        if qty < 0:
            raise InvalidQuantityError(f"{field} cannot be negative")
    elif qty <= 0:
        raise InvalidQuantityError(f"{field} must be a positive integer")
    return qty


def parse_cents(value: Any, *, field: str) -> int:
    """Money amounts are integer cents, never negative."""
    if value is None:
        raise ValidationError(f"{field} is required")
    cents = _coerce_int(value, field, ValidationError)
    if cents < 0:
        raise ValidationError(f"{field} cannot be negative")
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} exceeds maximum of {MAX_PRICE_CENTS} cents")
    return cents


def parse_text(value: Any, *, field: str, max_length: int, required: bool = True) -> str | None:
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    text = str(value).strip()
    if not text:
        if required:
            raise ValidationError(f"{field} cannot be blank")
        return None
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def parse_choice(value: Any, choices: Iterable[str], *, field: str) -> str:
    """
    Match value against a closed set of labels.

    Matching ignores case, spaces and underscores, so "QUALITY_ISSUE" and
    "quality issue" both resolve to "Quality Issue". The canonical label is
    returned.
    """
    if value is None:
        raise ValidationError(f"{field} is required")

    def _key(s: str) -> str:
        return s.replace(" ", "").replace("_", "").lower()

    wanted = _key(str(value))
    for choice in choices:
        if _key(choice) == wanted:
            return choice
    raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
