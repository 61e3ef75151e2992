"""
Legal numeric range of one tunable for a provider family.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ParameterRange:
    minimum: float
    maximum: float
    integer: bool = False

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def capped(self, ceiling: float) -> "ParameterRange":
        """Return a copy whose maximum is at most ``ceiling``."""
        return ParameterRange(self.minimum, min(self.maximum, ceiling), self.integer)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.minimum, self.maximum)


__all__ = ["ParameterRange"]
