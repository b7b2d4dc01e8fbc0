"""Inclusive numeric ranges for parameter values.

Limits are shared between parameters: mutating an instance affects every
parameter holding it immediately. Category maxima are published as
read-only copies (see Limits.frozen).
"""

import math
from numbers import Real

from .errors import ConstructionError


def _as_bound(value, which: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Limits {which} must be numeric, got {type(value).__name__}")
    try:
        return float(value)
    except OverflowError:
        raise ConstructionError(f"Limits {which}={value} is too large for a float") from None


class Limits:
    """Inclusive range [min, max] with validation and clipping.

    Attributes:
        name: Descriptive label, free to change
    """

    __slots__ = ("_min", "_max", "_read_only", "name")

    def __init__(self, min: float = -math.inf, max: float = math.inf, name: str = ""):
        self.name = name
        self._read_only = False
        min, max = _as_bound(min, "min"), _as_bound(max, "max")
        self._check(min, max)
        self._min = min
        self._max = max

    def _check(self, min: float, max: float, action: str = "initialized") -> None:
        if math.isnan(min) or math.isnan(max):
            raise ConstructionError(f"{self} can't be {action} with NaN limits")
        if not min <= max:
            raise ConstructionError(f"{self} can't be {action} with min={min} > max={max}")

    def _check_writable(self) -> None:
        if self._read_only:
            raise ConstructionError(f"{self} is read-only")

    def check(self, value: float) -> bool:
        """Return True iff min <= value <= max (NaN is never inside)."""
        return self._min <= value <= self._max

    def clip(self, value: float) -> float:
        """Return the closest value to `value` within the limits."""
        if value > self._max:
            return self._max
        if value < self._min:
            return self._min
        return value

    def get_min(self) -> float:
        return self._min

    def get_max(self) -> float:
        return self._max

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    @property
    def read_only(self) -> bool:
        return self._read_only

    def set(self, min: float, max: float) -> None:
        """Set both bounds.

        Raises:
            ConstructionError: If either bound is NaN, min > max, or the
                limits are read-only
        """
        self._check_writable()
        min, max = _as_bound(min, "min"), _as_bound(max, "max")
        self._check(min, max, "set")
        self._min = min
        self._max = max

    def set_min(self, min: float) -> None:
        """Set the lower bound, checked against the current upper bound."""
        self._check_writable()
        min = _as_bound(min, "min")
        if math.isnan(min):
            raise ConstructionError(f"{self} set_min given NaN")
        if not min <= self._max:
            raise ConstructionError(f"{self} set_min({min}) would exceed max={self._max}")
        self._min = min

    def set_max(self, max: float) -> None:
        """Set the upper bound, checked against the current lower bound."""
        self._check_writable()
        max = _as_bound(max, "max")
        if math.isnan(max):
            raise ConstructionError(f"{self} set_max given NaN")
        if not max >= self._min:
            raise ConstructionError(f"{self} set_max({max}) would fall below min={self._min}")
        self._max = max

    def frozen(self, name: str | None = None) -> "Limits":
        """Return a read-only copy of these limits.

        Args:
            name: Name for the copy (defaults to this instance's name)
        """
        copy = Limits(self._min, self._max, self.name if name is None else name)
        copy._read_only = True
        return copy

    def __str__(self) -> str:
        # Called from _check during __init__, before bounds exist
        lo = getattr(self, "_min", "?")
        hi = getattr(self, "_max", "?")
        return f"Limits({lo}, {hi}, '{self.name}')"

    def __repr__(self) -> str:
        return f"Limits(min={self._min!r}, max={self._max!r}, name={self.name!r})"
