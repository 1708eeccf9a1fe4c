"""Tax bracket and threshold reference data for the US and Canada."""

from __future__ import annotations

from typing import Final

US_FILING_STATUSES: Final[set[str]] = {
    "single",
    "married_filing_jointly",
    "married_filing_separately",
    "head_of_household",
}

# Brackets are (upper_bound, marginal_rate). Upper bound None means infinity.
US_FEDERAL_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [
        (11_600.0, 0.10),
        (47_150.0, 0.12),
        (100_525.0, 0.22),
        (191_950.0, 0.24),
        (243_725.0, 0.32),
        (609_350.0, 0.35),
        (None, 0.37),
    ],
    "married_filing_jointly": [
        (23_200.0, 0.10),
        (94_300.0, 0.12),
        (201_050.0, 0.22),
        (383_900.0, 0.24),
        (487_450.0, 0.32),
        (731_200.0, 0.35),
        (None, 0.37),
    ],
    "married_filing_separately": [
        (11_600.0, 0.10),
        (47_150.0, 0.12),
        (100_525.0, 0.22),
        (191_950.0, 0.24),
        (243_725.0, 0.32),
        (365_600.0, 0.35),
        (None, 0.37),
    ],
    "head_of_household": [
        (16_550.0, 0.10),
        (63_100.0, 0.12),
        (100_500.0, 0.22),
        (191_950.0, 0.24),
        (243_700.0, 0.32),
        (609_350.0, 0.35),
        (None, 0.37),
    ],
}

US_CAPITAL_GAINS_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [(47_025.0, 0.0), (518_900.0, 0.15), (None, 0.20)],
    "married_filing_jointly": [(94_050.0, 0.0), (583_750.0, 0.15), (None, 0.20)],
    "married_filing_separately": [(47_025.0, 0.0), (291_850.0, 0.15), (None, 0.20)],
    "head_of_household": [(63_000.0, 0.0), (551_350.0, 0.15), (None, 0.20)],
}

US_STANDARD_DEDUCTIONS: Final[dict[str, float]] = {
    "single": 14_600.0,
    "married_filing_jointly": 29_200.0,
    "married_filing_separately": 14_600.0,
    "head_of_household": 21_900.0,
}

# Share of government retirement benefits included in ordinary income.
BENEFIT_TAXABLE_FRACTION: Final[float] = 0.85

CA_FEDERAL_BRACKETS: Final[list[tuple[float | None, float]]] = [
    (55_867.0, 0.15),
    (111_733.0, 0.205),
    (173_205.0, 0.26),
    (246_752.0, 0.29),
    (None, 0.33),
]

CA_FEDERAL_BASIC_PERSONAL_AMOUNT: Final[float] = 15_705.0

CA_PROVINCE_NAMES: Final[dict[str, str]] = {
    "AB": "Alberta",
    "BC": "British Columbia",
    "MB": "Manitoba",
    "NB": "New Brunswick",
    "NS": "Nova Scotia",
    "ON": "Ontario",
    "QC": "Quebec",
    "SK": "Saskatchewan",
}

CA_DEFAULT_PROVINCE: Final[str] = "ON"

CA_PROVINCIAL_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "AB": [
        (148_269.0, 0.10),
        (177_922.0, 0.12),
        (237_230.0, 0.13),
        (355_845.0, 0.14),
        (None, 0.15),
    ],
    "BC": [
        (47_937.0, 0.0506),
        (95_875.0, 0.077),
        (110_076.0, 0.105),
        (133_664.0, 0.1229),
        (181_232.0, 0.147),
        (252_752.0, 0.168),
        (None, 0.205),
    ],
    "MB": [(47_000.0, 0.108), (100_000.0, 0.1275), (None, 0.174)],
    "NB": [(49_958.0, 0.094), (99_916.0, 0.14), (185_064.0, 0.16), (None, 0.195)],
    "NS": [
        (29_590.0, 0.0879),
        (59_180.0, 0.1495),
        (93_000.0, 0.1667),
        (150_000.0, 0.175),
        (None, 0.21),
    ],
    "ON": [
        (51_446.0, 0.0505),
        (102_894.0, 0.0915),
        (150_000.0, 0.1116),
        (220_000.0, 0.1216),
        (None, 0.1316),
    ],
    "QC": [(51_780.0, 0.14), (103_545.0, 0.19), (126_000.0, 0.24), (None, 0.2575)],
    "SK": [(52_057.0, 0.105), (148_734.0, 0.125), (None, 0.145)],
}

CA_PROVINCIAL_BASIC_PERSONAL_AMOUNTS: Final[dict[str, float]] = {
    "AB": 21_885.0,
    "BC": 12_580.0,
    "MB": 15_780.0,
    "NB": 13_396.0,
    "NS": 8_744.0,
    "ON": 12_399.0,
    "QC": 18_056.0,
    "SK": 18_491.0,
}

# Capital gains inclusion: base rate up to the threshold, higher rate above it.
CA_CAPITAL_GAINS_INCLUSION_RATE: Final[float] = 0.5
CA_CAPITAL_GAINS_HIGH_INCLUSION_RATE: Final[float] = 2.0 / 3.0
CA_CAPITAL_GAINS_INCLUSION_THRESHOLD: Final[float] = 250_000.0
