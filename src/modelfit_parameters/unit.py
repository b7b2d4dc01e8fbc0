"""Units of measurement attached to parameters.

Units are bookkeeping only; they are never consulted during validation.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Unit(Protocol):
    """Anything that can report a unit name."""

    def get_name(self) -> str:
        ...


@dataclass(frozen=True)
class NamedUnit:
    """A unit identified only by its name."""
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError(f"Unit name must be str, got {type(self.name).__name__}")

    def get_name(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


UNIT_NONE = NamedUnit("None")
