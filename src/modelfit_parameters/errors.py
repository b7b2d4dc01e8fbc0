"""Exception types raised by the parameter system.

All errors derive from ValueError so that callers written against plain
ValueError keep working.
"""


class ConstructionError(ValueError):
    """Limits built or mutated with a NaN bound or min > max."""


class BoundsViolation(ValueError):
    """Value outside the current limits, or limits wider than the category allows."""


class InheritanceRuleViolation(ValueError):
    """Invalid inheritor/modifier link or freeing a parameter that has an inheritee."""
