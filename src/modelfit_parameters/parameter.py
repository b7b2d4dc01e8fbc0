"""Bounded, transformable scalar parameters.

A Parameter holds a raw value, the cached transformed value, the Limits
the raw value must satisfy and the Transform relating the two. Every
successful mutation keeps these invariants:

- get_limits().check(get_value()) is True
- get_value_transformed() == get_transform().forward(get_value())

Parameters can drive other parameters ("inheritors"): each set_value()
on the parent is pushed to its inheritors after the parent itself has
been updated. Propagation is exactly one level deep; an inheritor may
not have inheritors of its own.

Equality, hashing and ordering are by identity. Ordering follows the
integer handle issued at construction, so sets of linked parameters
iterate in a stable order regardless of their values.
"""

import functools
import itertools
import logging
import weakref
from numbers import Real
from typing import ClassVar, Dict, Iterable, Optional, Protocol, Tuple, runtime_checkable

from .category import Category, NON_NEGATIVE, POSITIVE, REAL
from .config import get_options
from .errors import BoundsViolation, InheritanceRuleViolation
from .limits import Limits
from .transforms import TRANSFORM_NONE, Transform
from .unit import Unit

logger = logging.getLogger(__name__)

# Process-wide handle issuer; handles are never reused
_next_handle = itertools.count(1)


@runtime_checkable
class ParameterBase(Protocol):
    """Capability interface shared by all parameter kinds.

    Code that stores heterogeneous parameters together should depend on
    this protocol rather than on a concrete Parameter subclass.
    """

    def get_default(self) -> float: ...
    def get_desc(self) -> str: ...
    def get_fixed(self) -> bool: ...
    def get_free(self) -> bool: ...
    def get_label(self) -> str: ...
    def get_limits(self) -> Limits: ...
    def get_limits_maximal(self) -> Limits: ...
    def get_linear(self) -> bool: ...
    def get_min(self) -> float: ...
    def get_max(self) -> float: ...
    def get_name(self) -> str: ...
    def get_transform(self) -> Transform: ...
    def get_transform_derivative(self) -> float: ...
    def get_unit(self) -> Optional[Unit]: ...
    def get_value(self) -> float: ...
    def get_value_transformed(self) -> float: ...
    def set_fixed(self, fixed: bool) -> None: ...
    def set_free(self, free: bool) -> None: ...
    def set_label(self, label: str) -> None: ...
    def set_limits(self, limits: Optional[Limits]) -> None: ...
    def set_transform(self, transform: Optional[Transform]) -> None: ...
    def set_unit(self, unit: Optional[Unit] = None) -> None: ...
    def set_value(self, value: float) -> None: ...
    def set_value_transformed(self, value_transformed: float) -> None: ...


def _as_value(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Parameter value must be numeric, got {type(value).__name__}")
    try:
        return float(value)
    except OverflowError:
        raise BoundsViolation(f"Parameter value={value} is too large for a float") from None


@functools.total_ordering
class Parameter:
    """A scalar model parameter with limits, a transform and inheritors.

    Subclasses select their kind by setting the `category` class attribute.

    Args:
        value: Initial raw value (defaults to the category default)
        limits: Limits for the raw value; None uses the category maximum
        transform: Transform for the value; None uses the identity
        unit: Unit of the raw value, bookkeeping only
        fixed: Whether the parameter is held fixed during fitting
        label: Descriptive label for this instance
        inheritors: Parameters to link as inheritors
        modifiers: Parameters to link as modifiers

    Raises:
        BoundsViolation: If limits exceed the category range or value is
            outside the limits
        InheritanceRuleViolation: If an inheritor or modifier is invalid
    """

    category: ClassVar[Category] = REAL

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not isinstance(cls.category, Category):
            raise TypeError(f"{cls.__name__}.category must be a Category, got {cls.category!r}")

    def __init__(
        self,
        value: Optional[float] = None,
        limits: Optional[Limits] = None,
        transform: Optional[Transform] = None,
        unit: Optional[Unit] = None,
        fixed: bool = False,
        label: str = "",
        inheritors: Iterable["Parameter"] = (),
        modifiers: Iterable["Parameter"] = (),
    ):
        self._handle = next(_next_handle)
        self._free = True
        self._inheritee: Optional[weakref.ref] = None
        self._inheritors: Dict[int, Parameter] = {}
        self._modifiers: Dict[int, Parameter] = {}
        self._unit: Optional[Unit] = None
        self._label = ""
        self.set_label(label)

        self._limits = self._resolve_limits(limits, "__init__")
        value = self.category.default if value is None else _as_value(value)
        self._check_value(value)
        self._value = value
        self._transform = TRANSFORM_NONE
        self.set_transform(transform)
        self.set_unit(unit)
        self.set_fixed(fixed)

        linked = []
        try:
            for inheritor in inheritors:
                self.add_inheritor(inheritor)
                linked.append(inheritor)
            for modifier in modifiers:
                self.add_modifier(modifier)
        except Exception:
            # Children must not stay bound to a parameter that failed to construct
            for inheritor in linked:
                self.remove_inheritor(inheritor)
            raise

    # Category constants

    @classmethod
    def get_type_name(cls) -> str:
        """Name of the concrete parameter class."""
        return cls.__name__

    def get_default(self) -> float:
        return self.category.default

    def get_desc(self) -> str:
        return self.category.desc

    def get_linear(self) -> bool:
        return self.category.linear

    def get_min(self) -> float:
        """Smallest value any instance of this category may take."""
        return self.category.min

    def get_max(self) -> float:
        """Largest value any instance of this category may take."""
        return self.category.max

    def get_name(self) -> str:
        return self.category.name

    def get_limits_maximal(self) -> Limits:
        """The category's widest limits, shared and read-only."""
        return self.category.limits_maximal

    # Instance state

    @property
    def handle(self) -> int:
        """Stable integer identity, increasing in construction order."""
        return self._handle

    @property
    def value(self) -> float:
        return self._value

    @property
    def value_transformed(self) -> float:
        return self._value_transformed

    @property
    def label(self) -> str:
        return self._label

    def get_fixed(self) -> bool:
        return not self._free

    def get_free(self) -> bool:
        return self._free

    def get_label(self) -> str:
        return self._label

    def get_limits(self) -> Limits:
        return self._limits

    def get_transform(self) -> Transform:
        return self._transform

    def get_transform_derivative(self) -> float:
        """Derivative of the transform at the current raw value."""
        return self._transform.derivative(self._value)

    def get_unit(self) -> Optional[Unit]:
        return self._unit

    def get_value(self) -> float:
        return self._value

    def get_value_transformed(self) -> float:
        return self._value_transformed

    def set_fixed(self, fixed: bool) -> None:
        self.set_free(not fixed)

    def set_free(self, free: bool) -> None:
        """Set whether the parameter is free.

        Raises:
            InheritanceRuleViolation: If freeing a parameter that is
                driven by an inheritee
        """
        inheritee = self.get_inheritee()
        if free and inheritee is not None:
            raise InheritanceRuleViolation(
                f"Can't set {self} free while it inherits from {inheritee}"
            )
        self._free = bool(free)

    def set_label(self, label: str) -> None:
        if not isinstance(label, str):
            raise TypeError(f"Parameter label must be str, got {type(label).__name__}")
        self._label = label

    def set_unit(self, unit: Optional[Unit] = None) -> None:
        if unit is not None and not isinstance(unit, Unit):
            raise TypeError(f"unit must provide get_name(), got {type(unit).__name__}")
        self._unit = unit

    def _resolve_limits(self, limits: Optional[Limits], action: str = "set_limits") -> Limits:
        maximal = self.get_limits_maximal()
        if limits is None:
            return maximal
        if not isinstance(limits, Limits):
            raise TypeError(f"limits must be Limits, got {type(limits).__name__}")
        if not self.category.allows(limits):
            raise BoundsViolation(
                f"{self.get_type_name()}(label='{self._label}').{action}(limits={limits}) "
                f"sets limits that are less restrictive than the maximal={maximal}"
            )
        return limits

    def set_limits(self, limits: Optional[Limits]) -> None:
        """Replace the limits on the raw value.

        What happens to a stored value outside the new limits depends on
        the limits_policy option (see modelfit_parameters.config).

        Args:
            limits: New limits, or None for the category maximum

        Raises:
            BoundsViolation: If limits exceed the category range, or the
                policy is "check" and the current value is outside them
        """
        limits = self._resolve_limits(limits)
        policy = get_options().limits_policy
        if not limits.check(self._value):
            if policy == "check":
                raise BoundsViolation(
                    f"{self.get_type_name()}.set_limits({limits}) excludes current value={self._value}"
                )
            if policy == "clip":
                clipped = limits.clip(self._value)
                value_transformed = self._transform.forward(clipped)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(f"Clipping {self} value {self._value} -> {clipped} to fit {limits}")
                self._value = clipped
                self._value_transformed = value_transformed
        self._limits = limits

    def set_transform(self, transform: Optional[Transform]) -> None:
        """Replace the transform and refresh the cached transformed value.

        Args:
            transform: New transform, or None for the identity
        """
        if transform is None:
            transform = TRANSFORM_NONE
        elif not isinstance(transform, Transform):
            raise TypeError(f"transform must implement Transform, got {type(transform).__name__}")
        value_transformed = transform.forward(self._value)
        self._transform = transform
        self._value_transformed = value_transformed

    def _check_value(self, value: float) -> None:
        if not self._limits.check(value):
            raise BoundsViolation(
                f"{self.get_type_name()}(label='{self._label}') value={value} "
                f"beyond limits={self._limits}"
            )

    def set_value(self, value: float) -> None:
        """Set the raw value and push it to every inheritor.

        The parameter's own value and cached transformed value are updated
        before any inheritor is touched; inheritors are then updated in
        handle order. Under the default "best_effort" propagation, the
        first inheritor rejecting the value aborts the loop and its
        BoundsViolation is re-raised, leaving earlier inheritors updated.
        Under "atomic", all inheritors are checked first.

        Raises:
            BoundsViolation: If this parameter or an inheritor rejects value
        """
        value = _as_value(value)
        self._check_value(value)
        inheritors = self.get_inheritors()
        if inheritors and get_options().propagation == "atomic":
            rejecting = [p for p in inheritors if not p.get_limits().check(value)]
            if rejecting:
                raise BoundsViolation(
                    f"{self.get_type_name()}.set_value({value}) rejected by inheritors "
                    f"{[str(p) for p in rejecting]}"
                )

        value_transformed = self._transform.forward(value)
        self._value = value
        self._value_transformed = value_transformed

        for n_done, inheritor in enumerate(inheritors):
            try:
                inheritor.set_value(value)
            except BoundsViolation:
                logger.warning(
                    f"Propagating value={value} from {self} stopped at {inheritor}; "
                    f"{n_done} of {len(inheritors)} inheritors updated"
                )
                raise
        if inheritors and logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Propagated value={value} from {self} to {len(inheritors)} inheritors")

    def set_value_transformed(self, value_transformed: float) -> None:
        """Set the value from transformed space; same checks as set_value()."""
        self.set_value(self._transform.reverse(_as_value(value_transformed)))

    # Links

    def get_inheritee(self) -> Optional["Parameter"]:
        """The parameter driving this one, if any."""
        return None if self._inheritee is None else self._inheritee()

    def get_inheritors(self) -> Tuple["Parameter", ...]:
        return tuple(self._inheritors[h] for h in sorted(self._inheritors))

    def get_modifiers(self) -> Tuple["Parameter", ...]:
        return tuple(self._modifiers[h] for h in sorted(self._modifiers))

    def _require_parameter(self, other, role: str, action: str) -> None:
        if other is None:
            raise InheritanceRuleViolation(f"Can't {action} null {role} for {self}")
        if not isinstance(other, Parameter):
            raise TypeError(f"{role} must be a Parameter, got {type(other).__name__}")

    def add_inheritor(self, inheritor: "Parameter") -> None:
        """Make `inheritor` follow every future value set on this parameter.

        Raises:
            InheritanceRuleViolation: If inheritor is None, this parameter,
                fixed, has inheritors of its own, is driven by another
                parameter, or if this parameter is itself an inheritor
        """
        self._require_parameter(inheritor, "inheritor", "add")
        if inheritor is self:
            raise InheritanceRuleViolation(f"{self} can't inherit from itself")
        if not inheritor.get_free():
            raise InheritanceRuleViolation(
                f"Can't add_inheritor({inheritor}) with fixed inheritor"
            )
        if inheritor._inheritors:
            raise InheritanceRuleViolation(
                f"Can't add_inheritor({inheritor}) with inheritors of its own; "
                "inheritance may not be nested"
            )
        if self.get_inheritee() is not None:
            raise InheritanceRuleViolation(
                f"Can't add_inheritor({inheritor}) to {self}, which is itself an inheritor; "
                "inheritance may not be nested"
            )
        current = inheritor.get_inheritee()
        if current is not None and current is not self:
            raise InheritanceRuleViolation(
                f"Can't add_inheritor({inheritor}) already inheriting from {current}"
            )
        self._inheritors[inheritor.handle] = inheritor
        inheritor._inheritee = weakref.ref(self)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{inheritor} now inherits from {self}")

    def remove_inheritor(self, inheritor: "Parameter") -> None:
        """Unlink `inheritor`; unknown parameters are ignored."""
        self._require_parameter(inheritor, "inheritor", "remove")
        if self._inheritors.pop(inheritor.handle, None) is not None:
            inheritor._inheritee = None
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"{inheritor} no longer inherits from {self}")

    def add_modifier(self, modifier: "Parameter") -> None:
        self._require_parameter(modifier, "modifier", "add")
        self._modifiers[modifier.handle] = modifier

    def remove_modifier(self, modifier: "Parameter") -> None:
        self._require_parameter(modifier, "modifier", "remove")
        self._modifiers.pop(modifier.handle, None)

    # Identity comparisons

    def __lt__(self, other):
        if not isinstance(other, Parameter):
            return NotImplemented
        return self._handle < other._handle

    def __repr__(self) -> str:
        return (
            f"{self.get_type_name()}(value={self._value!r}, limits={self._limits!r}, "
            f"transform={self._transform!r}, fixed={self.get_fixed()}, label={self._label!r})"
        )

    def __str__(self) -> str:
        parts = [f"value={self._value}"]
        if self._limits is not self.get_limits_maximal():
            parts.append(f"limits={self._limits!r}")
        if self._transform != TRANSFORM_NONE:
            parts.append(f"transform={self._transform!r}")
        if self.get_fixed():
            parts.append("fixed=True")
        if self._label:
            parts.append(f"label='{self._label}'")
        return f"{self.get_type_name()}({', '.join(parts)})"


class RealParameter(Parameter):
    """Parameter taking any real value, including infinities."""
    category = REAL


class NonNegativeParameter(Parameter):
    """Parameter restricted to values >= 0."""
    category = NON_NEGATIVE


class PositiveParameter(Parameter):
    """Parameter restricted to values > 0; defaults to 1."""
    category = POSITIVE
