"""Exact conversion between decimal coin amounts and integer satoshis.

Node responses carry amounts either as JSON numbers or decimal strings. Values are
split at the decimal point and recombined as integers so nothing ever rounds
through binary floating point.
"""

from typing import Any

COIN_DECIMALS = 8
SAT_PER_COIN = 10**COIN_DECIMALS


def coin_to_sat(value: Any) -> int:
    """Convert a coin amount (float, int, Decimal or str) to integer satoshis.

    The fractional part is right-padded or truncated to exactly 8 digits.
    ``None`` and empty strings convert to 0.
    """
    if value is None:
        return 0

    if isinstance(value, float):
        text = f"{value:.{COIN_DECIMALS}f}"
    else:
        text = str(value).strip()
    if not text:
        return 0

    sign = 1
    if text[0] == "-":
        sign = -1
        text = text[1:]
    elif text[0] == "+":
        text = text[1:]

    whole_part, _, frac_part = text.partition(".")
    if not (whole_part or frac_part):
        raise ValueError(f"Invalid coin amount: {value!r}")
    if (whole_part and not whole_part.isdigit()) or (frac_part and not frac_part.isdigit()):
        raise ValueError(f"Invalid coin amount: {value!r}")

    whole = int(whole_part or "0")
    frac = int((frac_part + "0" * COIN_DECIMALS)[:COIN_DECIMALS])
    return sign * (whole * SAT_PER_COIN + frac)


def sat_to_coin_string(sat: int) -> str:
    """Render integer satoshis as a trimmed decimal string (``150000000`` -> ``"1.5"``)."""
    negative = sat < 0
    whole, frac = divmod(abs(sat), SAT_PER_COIN)
    text = f"{whole}.{frac:0{COIN_DECIMALS}d}".rstrip("0").rstrip(".")
    return f"-{text}" if negative else text


def parse_sat(value: Any, field_name: str) -> int:
    """Validate a request field holding a non-negative integer satoshi amount."""
    text = str(value if value is not None else "").strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    if not text.isdigit():
        raise ValueError(f"{field_name} must be integer sat")
    return int(text)
