"""Parameter categories.

A Category holds the constants shared by every parameter of one kind:
default value, the widest permissible range, a name and a description.
Each category publishes its maximal Limits once, as a read-only object,
and parameters constructed without explicit limits share it.
"""

import math
from dataclasses import dataclass, field

from .errors import ConstructionError
from .limits import Limits


@dataclass(frozen=True)
class Category:
    """Constants for a kind of parameter.

    Attributes:
        name: Short identifier (e.g. "non_negative")
        desc: Human-readable description
        default: Default value for new instances
        min: Smallest value any instance may accept (inclusive)
        max: Largest value any instance may accept (inclusive)
        linear: Whether the parameter enters a model linearly
        limits_maximal: Read-only Limits spanning [min, max], set on creation
    """
    name: str
    desc: str = ""
    default: float = 0.0
    min: float = -math.inf
    max: float = math.inf
    linear: bool = False
    limits_maximal: Limits = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate the range and publish the maximal limits."""
        if not self.name:
            raise ValueError("Category name cannot be empty")
        limits = Limits(self.min, self.max, f"{self.name}.limits_maximal").frozen()
        if not limits.check(self.default):
            raise ConstructionError(
                f"Category {self.name} default={self.default} outside {limits}"
            )
        object.__setattr__(self, "limits_maximal", limits)

    def allows(self, limits: Limits) -> bool:
        """Whether `limits` lie within this category's maximal range."""
        return limits.get_min() >= self.min and limits.get_max() <= self.max


REAL = Category(
    name="real",
    desc="Real, potentially infinite parameter",
)

NON_NEGATIVE = Category(
    name="non_negative",
    desc="Non-negative, potentially infinite parameter",
    min=0.0,
)

# Smallest positive (subnormal) double
POSITIVE = Category(
    name="positive",
    desc="Positive, potentially infinite parameter",
    default=1.0,
    min=math.ulp(0.0),
)
