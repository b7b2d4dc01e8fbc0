"""Invertible scalar transforms for parameter values.

Transforms map a parameter's natural value to the coordinate an
optimizer works in and back again. They are stateless, so a single
instance can be shared by any number of parameters.

Unlike range-checked transforms, these perform NO domain validation:
a log of zero is -inf and a log of a negative value is NaN. Keeping
values inside the transform's domain is the job of the Limits attached
to the owning parameter.
"""

import math
from dataclasses import dataclass
from typing import Protocol, Tuple, runtime_checkable

import numpy as np

from .limits import Limits

_LN10 = math.log(10.0)


@runtime_checkable
class Transform(Protocol):
    """Protocol for parameter transforms.

    Implementations must satisfy reverse(forward(x)) == x (to rounding)
    for all x in their domain.

    The built-in transforms also provide bounds(limits), mapping a pair
    of limits into transformed space.
    """

    def description(self) -> str:
        """Human-readable description of the mapping."""
        ...

    def forward(self, x: float) -> float:
        """Natural value -> transformed value."""
        ...

    def reverse(self, y: float) -> float:
        """Transformed value -> natural value."""
        ...

    def derivative(self, x: float) -> float:
        """Derivative of forward() evaluated at natural value x."""
        ...


def _apply(fn, x: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(fn(np.float64(x)))


@dataclass(frozen=True)
class Identity:
    """Identity transform (no-op).

    The default for parameters constructed without a transform.
    """

    def description(self) -> str:
        return "Unit transform"

    def forward(self, x: float) -> float:
        return float(x)

    def reverse(self, y: float) -> float:
        return float(y)

    def derivative(self, x: float) -> float:
        return 1.0

    def bounds(self, limits: Limits) -> Tuple[float, float]:
        return (limits.get_min(), limits.get_max())


UnitTransform = Identity


@dataclass(frozen=True)
class LogTransform:
    """Natural logarithm transform for positive parameters.

    Maps (0, ∞) → (-∞, ∞).
    """

    def description(self) -> str:
        return "Natural (base e) logarithmic transform"

    def forward(self, x: float) -> float:
        return _apply(np.log, x)

    def reverse(self, y: float) -> float:
        return _apply(np.exp, y)

    def derivative(self, x: float) -> float:
        return _apply(np.reciprocal, x)

    def bounds(self, limits: Limits) -> Tuple[float, float]:
        return (self.forward(limits.get_min()), self.forward(limits.get_max()))


@dataclass(frozen=True)
class Log10Transform:
    """Base-10 logarithm transform for positive parameters.

    Maps (0, ∞) → (-∞, ∞). The derivative is the analytic 1/(x ln 10).
    """

    def description(self) -> str:
        return "Base 10 logarithmic transform"

    def forward(self, x: float) -> float:
        return _apply(np.log10, x)

    def reverse(self, y: float) -> float:
        return _apply(lambda v: np.power(10.0, v), y)

    def derivative(self, x: float) -> float:
        return _apply(lambda v: np.reciprocal(v * _LN10), x)

    def bounds(self, limits: Limits) -> Tuple[float, float]:
        return (self.forward(limits.get_min()), self.forward(limits.get_max()))


# Shared default for parameters without an explicit transform
TRANSFORM_NONE = Identity()
