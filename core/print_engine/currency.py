"""
Currency & number formatting for Indian rupee documents.

- format_currency: 2-3-2 digit grouping ("12,34,567.00")
- number_to_words: Indian numbering scale (crore / lakh / thousand / hundred)
"""

from datetime import datetime
from typing import Optional

RUPEE_SYMBOL = "₹"

ONES = [
    "Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight",
    "Nine", "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen",
    "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy",
    "Eighty", "Ninety",
]

# (divisor, scale word), largest first
SCALES = [
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
    (100, "Hundred"),
]


def group_indian(integer_digits: str) -> str:
    """Group a digit string as 12,34,56,789 (last three, then pairs)."""
    if len(integer_digits) <= 3:
        return integer_digits
    head, tail = integer_digits[:-3], integer_digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(
    amount: Optional[float],
    use_fractions: bool = True,
    symbol: str = RUPEE_SYMBOL,
) -> str:
    """
    Format an amount with Indian digit grouping.

    Args:
        amount: Value to format (None renders as zero)
        use_fractions: Show two decimal places
        symbol: Currency prefix

    Returns:
        e.g. "₹12,34,567.50"
    """
    value = float(amount or 0)
    sign = "-" if value < 0 else ""
    value = abs(value)

    if use_fractions:
        text = f"{value:.2f}"
        integer_part, fraction = text.split(".")
        grouped = f"{group_indian(integer_part)}.{fraction}"
    else:
        grouped = group_indian(f"{value:.0f}")

    return f"{sign}{symbol}{grouped}"


def _below_hundred(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens_word = TENS[n // 10]
    if n % 10:
        return f"{tens_word} {ONES[n % 10]}"
    return tens_word


def _to_words(n: int) -> str:
    """Words for a positive integer on the Indian scale."""
    parts = []
    for divisor, word in SCALES:
        if n >= divisor:
            parts.append(f"{_to_words(n // divisor)} {word}")
            n %= divisor
    if n:
        parts.append(_below_hundred(n))
    return " ".join(parts)


def number_to_words(amount: Optional[float]) -> str:
    """
    Spell out the rupee part of an amount.

    Paise are not spelled out: 1500.75 -> "One Thousand Five Hundred Rupees Only".
    """
    whole = int(abs(float(amount or 0)))
    if whole == 0:
        return "Zero Rupees Only"
    return f"{_to_words(whole)} Rupees Only"


def format_date(value: Optional[datetime]) -> str:
    """dd/mm/yyyy, blank for missing dates"""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")
