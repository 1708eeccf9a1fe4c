"""Cost basis tracking for taxable accounts using a proportional basis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Per-lot history is not tracked; half of a taxable balance is assumed to be basis.
INITIAL_BASIS_FRACTION: Final[float] = 0.5
# Gain share used when the tracker holds no basis.
DEFAULT_GAIN_RATIO: Final[float] = 0.5


@dataclass(slots=True)
class CostBasisTracker:
    total_basis: float = 0.0

    @classmethod
    def estimated(cls, balance: float, fraction: float = INITIAL_BASIS_FRACTION) -> "CostBasisTracker":
        return cls(total_basis=max(0.0, balance) * fraction)

    def gain_ratio(self, balance: float) -> float:
        if self.total_basis <= 0 or balance <= 0:
            return DEFAULT_GAIN_RATIO
        return max(0.0, 1.0 - self.total_basis / balance)

    def withdraw(self, amount: float, balance_before: float) -> float:
        """Apply a withdrawal and return realized gain for the withdrawn amount."""
        if amount <= 0 or balance_before <= 0:
            return 0.0

        gain = amount * self.gain_ratio(balance_before)
        remaining = balance_before - amount
        if remaining > 0:
            self.total_basis *= remaining / balance_before
        else:
            self.total_basis = 0.0
        return gain
