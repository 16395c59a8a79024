"""Exact conversions between human decimal strings and raw on-chain integers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Optional, Union

from ..core.recovery.errors import InvalidAmountError

_DECIMAL_RE = re.compile(r"^\d+(\.\d*)?$|^\.\d+$")

MAX_UINT256 = 2**256 - 1


def parse_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Parse a human amount (``"1.5"``) into raw units for ``decimals``.

    Rejects negative, zero, non-numeric and over-precise input with
    ``InvalidAmountError``; no floats are involved at any point.
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    text = str(amount).strip().replace(",", "") if amount is not None else ""
    if not text or not _DECIMAL_RE.match(text):
        raise InvalidAmountError(f"Invalid amount format: {amount!r}", details={"amount": str(amount)})

    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidAmountError(
            f"Too many decimal places: {text} (token supports {decimals})",
            details={"amount": text, "decimals": decimals},
        )

    raw = int(whole or "0") * 10**decimals + int((fraction or "0").ljust(decimals, "0") or "0")
    if raw <= 0:
        raise InvalidAmountError("Amount must be greater than zero", details={"amount": text})
    if raw > MAX_UINT256:
        raise InvalidAmountError("Amount exceeds uint256 range", details={"amount": text})
    return raw


def validate_amount(amount: Union[str, int, Decimal]) -> Decimal:
    """
    Syntax and sign check that needs no token metadata.

    Lets a caller reject ``"0"``, ``"-1"`` or ``"abc"`` before any network
    call; ``parse_units`` applies the precision check once decimals are known.
    """
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    text = str(amount).strip().replace(",", "")
    if not text or not _DECIMAL_RE.match(text):
        raise InvalidAmountError(f"Invalid amount format: {amount!r}", details={"amount": str(amount)})
    value = Decimal(text)
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero", details={"amount": text})
    return value


def format_units(raw: int, decimals: int, max_fraction_digits: Optional[int] = None) -> str:
    """
    Format raw units as a plain decimal string.

    Full precision by default (``format_units(1500000, 6) == "1.5"``). With
    ``max_fraction_digits`` the fraction is truncated toward zero, so the
    re-scaled value is never above ``raw``.
    """
    raw = int(raw)
    sign = "-" if raw < 0 else ""
    raw = abs(raw)
    if decimals == 0:
        return f"{sign}{raw}"

    whole, fraction = divmod(raw, 10**decimals)
    fraction_text = str(fraction).rjust(decimals, "0")
    if max_fraction_digits is not None:
        fraction_text = fraction_text[:max_fraction_digits]
    fraction_text = fraction_text.rstrip("0")
    if not fraction_text:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{fraction_text}"


def to_decimal(raw: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 100
        return Decimal(int(raw)).scaleb(-decimals)


def rescale(formatted: str, decimals: int) -> int:
    """Inverse of ``format_units``: ``"1.5", 6 -> 1500000`` (truncating extra digits)."""
    try:
        with localcontext() as ctx:
            ctx.prec = 100
            value = Decimal(formatted).scaleb(decimals)
            return int(value.to_integral_value(rounding=ROUND_DOWN))
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Invalid amount format: {formatted!r}") from exc


def is_zero_formatted(formatted: str) -> bool:
    try:
        return Decimal(formatted) == 0
    except InvalidOperation:
        return True


def format_rate(amount_in: int, in_decimals: int, amount_out: int, out_decimals: int) -> str:
    """Units of output per one unit of input, as a decimal string."""
    if amount_in == 0:
        return "0"
    with localcontext() as ctx:
        ctx.prec = 40
        rate = to_decimal(amount_out, out_decimals) / to_decimal(amount_in, in_decimals)
        return format(rate.normalize(), "f")


__all__ = [
    "MAX_UINT256",
    "validate_amount",
    "parse_units",
    "format_units",
    "to_decimal",
    "rescale",
    "is_zero_formatted",
    "format_rate",
]
