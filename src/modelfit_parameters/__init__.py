"""Bounded, transformable scalar parameters for model fitting.

This package provides the single-parameter contract used as the unit of
state when fitting numerical models:
- Limits: validated inclusive ranges
- Transforms: invertible scalar reparameterizations
- Parameter: a value kept consistent with its limits and transform,
  optionally propagating to inheritor parameters
"""

from .errors import (
    ConstructionError,
    BoundsViolation,
    InheritanceRuleViolation,
)
from .limits import Limits
from .transforms import (
    Transform,
    Identity,
    UnitTransform,
    LogTransform,
    Log10Transform,
    TRANSFORM_NONE,
)
from .unit import Unit, NamedUnit, UNIT_NONE
from .category import Category, REAL, NON_NEGATIVE, POSITIVE
from .config import (
    ParameterOptions,
    get_options,
    set_options,
    reset_options,
    options,
)
from .parameter import (
    ParameterBase,
    Parameter,
    RealParameter,
    NonNegativeParameter,
    PositiveParameter,
)
from .registry import ParameterRegistry

try:
    from importlib.metadata import version
    __version__ = version("modelfit-parameters")
except Exception:
    __version__ = "0.1.0"

__all__ = [
    # Errors
    "ConstructionError",
    "BoundsViolation",
    "InheritanceRuleViolation",
    # Limits
    "Limits",
    # Transforms
    "Transform",
    "Identity",
    "UnitTransform",
    "LogTransform",
    "Log10Transform",
    "TRANSFORM_NONE",
    # Units
    "Unit",
    "NamedUnit",
    "UNIT_NONE",
    # Categories
    "Category",
    "REAL",
    "NON_NEGATIVE",
    "POSITIVE",
    # Options
    "ParameterOptions",
    "get_options",
    "set_options",
    "reset_options",
    "options",
    # Parameters
    "ParameterBase",
    "Parameter",
    "RealParameter",
    "NonNegativeParameter",
    "PositiveParameter",
    "ParameterRegistry",
    "__version__",
]
