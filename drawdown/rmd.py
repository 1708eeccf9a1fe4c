"""Minimum withdrawal tables: US RMD divisors and Canadian RRIF percentages."""

from __future__ import annotations

from typing import Final

# IRS Uniform Lifetime Table.
UNIFORM_LIFETIME_DIVISORS: Final[dict[int, float]] = {
    73: 26.5,
    74: 25.5,
    75: 24.6,
    76: 23.7,
    77: 22.9,
    78: 22.0,
    79: 21.1,
    80: 20.2,
    81: 19.4,
    82: 18.5,
    83: 17.7,
    84: 16.8,
    85: 16.0,
    86: 15.2,
    87: 14.4,
    88: 13.7,
    89: 12.9,
    90: 12.2,
    91: 11.5,
    92: 10.8,
    93: 10.1,
    94: 9.5,
    95: 8.9,
    96: 8.4,
    97: 7.8,
    98: 7.3,
    99: 6.8,
    100: 6.4,
    101: 6.0,
    102: 5.6,
    103: 5.2,
    104: 4.9,
    105: 4.6,
    106: 4.3,
    107: 4.1,
    108: 3.9,
    109: 3.7,
    110: 3.5,
    111: 3.4,
    112: 3.3,
    113: 3.1,
    114: 3.0,
    115: 2.9,
    116: 2.8,
    117: 2.7,
    118: 2.5,
    119: 2.3,
    120: 2.0,
}

# Prescribed RRIF minimum withdrawal factors; 95 and older stays at 20%.
RRIF_MINIMUM_PERCENTAGES: Final[dict[int, float]] = {
    71: 0.0528,
    72: 0.0540,
    73: 0.0553,
    74: 0.0567,
    75: 0.0582,
    76: 0.0598,
    77: 0.0617,
    78: 0.0636,
    79: 0.0658,
    80: 0.0682,
    81: 0.0708,
    82: 0.0738,
    83: 0.0771,
    84: 0.0808,
    85: 0.0851,
    86: 0.0899,
    87: 0.0955,
    88: 0.1021,
    89: 0.1099,
    90: 0.1192,
    91: 0.1306,
    92: 0.1449,
    93: 0.1634,
    94: 0.1879,
    95: 0.2000,
}

RMD_START_AGE: Final[int] = min(UNIFORM_LIFETIME_DIVISORS)
RRIF_START_AGE: Final[int] = min(RRIF_MINIMUM_PERCENTAGES)


def _lookup(table: dict[int, float], age: int) -> float | None:
    """Return the factor for ``age``, None below the table, clamped above it."""
    if age < min(table):
        return None
    if age in table:
        return table[age]
    if age > max(table):
        return table[max(table)]
    # Gap inside the table: use the closest lower age.
    return table[max(a for a in table if a < age)]


def divisor_for_age(age: int) -> float | None:
    return _lookup(UNIFORM_LIFETIME_DIVISORS, age)


def rrif_percentage_for_age(age: int) -> float | None:
    return _lookup(RRIF_MINIMUM_PERCENTAGES, age)


def compute_rmd_amount(balance: float, age: int) -> float:
    divisor = divisor_for_age(age)
    if divisor is None or divisor <= 0 or balance <= 0:
        return 0.0
    return balance / divisor


def compute_rrif_minimum(balance: float, age: int) -> float:
    percentage = rrif_percentage_for_age(age)
    if percentage is None or balance <= 0:
        return 0.0
    return balance * percentage
