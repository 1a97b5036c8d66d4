# src/perp_orders/core/utils/fixed_point.py
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from perp_orders.core.errors import OutOfRangeError, ValidationError

LOT_DECIMALS = 6
LOT_SCALE = 10 ** LOT_DECIMALS
MAX_SAFE_LOTS = 2 ** 53 - 1

# UI-side keystroke guard (total digits before + after the point)
MAX_INPUT_DIGITS = 13

_DECIMAL_RE = re.compile(r"^-?\d*\.?\d*$")
_INPUT_RE = re.compile(r"^\d*\.?\d*$")


def accepts_input(text: str) -> bool:
    """
    Keystroke filter for amount/price fields.

    "" and "." are allowed as in-progress input; the codec rejects them later.
    """
    if text in ("", "."):
        return True
    if not _INPUT_RE.match(text):
        return False
    digits = sum(1 for ch in text if ch.isdigit())
    return digits <= MAX_INPUT_DIGITS


def _check_range(lots: int) -> int:
    if lots < 0:
        raise OutOfRangeError(f"negative value is not allowed: {lots} lots")
    if lots > MAX_SAFE_LOTS:
        raise OutOfRangeError(f"value exceeds maximum ({MAX_SAFE_LOTS} lots)")
    return lots


def decimal_to_lots(text: str) -> int:
    """
    "1.5" -> 1_500_000

    Round-half-up at 6 fraction digits. Empty input and a lone "." are rejected
    instead of being read as zero.
    """
    if not isinstance(text, str):
        raise ValidationError(f"expected decimal string, got {type(text).__name__}")

    s = text.strip()
    if s in ("", ".", "-", "-."):
        raise ValidationError("enter a number")
    if not _DECIMAL_RE.match(s):
        raise ValidationError(f"not a decimal number: {text!r}")

    try:
        value = Decimal(s)
    except InvalidOperation:
        raise ValidationError(f"not a decimal number: {text!r}")

    # before rounding: "-0.0000001" must not quantize to 0
    if value < 0:
        raise OutOfRangeError(f"negative value is not allowed: {text.strip()}")

    lots = int((value * LOT_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return _check_range(lots)


def lots_to_decimal(lots: int) -> str:
    """1_500_000 -> "1.5" (up to 6 fraction digits, no trailing zeros)."""
    if isinstance(lots, bool) or not isinstance(lots, int):
        raise ValidationError(f"lots must be an integer, got {type(lots).__name__}")
    _check_range(lots)

    whole, frac = divmod(lots, LOT_SCALE)
    if not frac:
        return str(whole)
    frac_s = str(frac).rjust(LOT_DECIMALS, "0").rstrip("0")
    return f"{whole}.{frac_s}"


def normalize_decimal(text: str) -> str:
    """Canonical decimal form of user input ("01.50" -> "1.5")."""
    return lots_to_decimal(decimal_to_lots(text))


def is_valid_lots(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= MAX_SAFE_LOTS
