"""
Checksum and geometry helpers for label generation.
"""

import re

MM_PER_INCH = 25.4


def digits_only(value: str) -> str:
    """Strip everything that is not a decimal digit."""
    return re.sub(r'[^0-9]', '', value or '')


def ean8_check_digit(data7: str) -> int:
    """
    Compute the EAN-8 check digit for 7 data digits.

    Positions 1, 3, 5 and 7 (1-based) weigh 3, the others weigh 1.

    Raises:
        ValueError: if data7 is not exactly 7 digits
    """
    if len(data7) != 7 or not data7.isdigit():
        raise ValueError(f'EAN-8 data must be 7 digits, got {data7!r}')

    total = 0
    for i, ch in enumerate(data7):
        weight = 3 if i % 2 == 0 else 1
        total += weight * int(ch)

    return (10 - total % 10) % 10


def ean8_from(value: str) -> str:
    """
    Derive an 8-digit EAN-8 code from an arbitrary string.

    Keeps the last 6 digits of the input (left-padded with zeros when
    there are fewer), prefixes a 0 and appends the check digit.

    >>> ean8_from('ABC123456')
    '01234565'
    """
    digits = digits_only(value)[-6:].rjust(6, '0')
    data7 = '0' + digits
    return data7 + str(ean8_check_digit(data7))


def mm_to_dots(mm: float, dpi: int = 203) -> int:
    """Convert millimetres to printer dots (rounded)."""
    return int(round(mm * dpi / MM_PER_INCH))
