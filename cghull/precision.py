from __future__ import annotations
from dataclasses import dataclass
from math import isfinite
from typing import Union

from .geom import EPS


@dataclass(frozen=True)
class Precision:
    """
    Порівняння float з допуском epsilon: a == b, якщо |a - b| <= epsilon.
    Один екземпляр на все обчислення оболонки.
    """
    epsilon: float = EPS

    def __post_init__(self):
        if not isfinite(self.epsilon) or self.epsilon < 0.0:
            raise ValueError(f"epsilon must be finite and non-negative, got {self.epsilon!r}")

    def eq(self, a: float, b: float) -> bool:
        return abs(a - b) <= self.epsilon

    def eq_zero(self, a: float) -> bool:
        return abs(a) <= self.epsilon

    def compare(self, a: float, b: float) -> int:
        if self.eq(a, b):
            return 0
        return -1 if a < b else 1

    def sign(self, a: float) -> int:
        return self.compare(a, 0.0)

    def lt(self, a: float, b: float) -> bool:
        return self.compare(a, b) < 0

    def lte(self, a: float, b: float) -> bool:
        return self.compare(a, b) <= 0

    def gt(self, a: float, b: float) -> bool:
        return self.compare(a, b) > 0

    def gte(self, a: float, b: float) -> bool:
        return self.compare(a, b) >= 0


PrecisionLike = Union[Precision, float]


def as_precision(precision: PrecisionLike) -> Precision:
    if isinstance(precision, Precision):
        return precision
    return Precision(float(precision))
