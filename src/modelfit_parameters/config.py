"""Process-wide options for parameter behaviour.

Two behaviours are left open by the parameter contract and are
configurable here:

- limits_policy: what set_limits() does with a stored value that falls
  outside the new limits.
    "keep"  - nothing; the value is not re-validated (default)
    "check" - raise BoundsViolation and leave the old limits in place
    "clip"  - clip the value into the new limits
- propagation: what set_value() does when an inheritor rejects a value.
    "best_effort" - stop at the first rejecting inheritor; the parameter
                    itself and earlier inheritors stay updated (default)
    "atomic"      - check every inheritor first and mutate nothing
                    unless all accept

Options are read at call time, so changes apply to existing parameters.
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator

LIMITS_POLICIES = ("keep", "check", "clip")
PROPAGATION_POLICIES = ("best_effort", "atomic")


@dataclass(frozen=True)
class ParameterOptions:
    """Immutable snapshot of the parameter options.

    Attributes:
        limits_policy: One of LIMITS_POLICIES
        propagation: One of PROPAGATION_POLICIES
    """
    limits_policy: str = "keep"
    propagation: str = "best_effort"

    def __post_init__(self):
        """Validate option values."""
        if self.limits_policy not in LIMITS_POLICIES:
            raise ValueError(
                f"limits_policy must be one of {LIMITS_POLICIES}, got {self.limits_policy!r}"
            )
        if self.propagation not in PROPAGATION_POLICIES:
            raise ValueError(
                f"propagation must be one of {PROPAGATION_POLICIES}, got {self.propagation!r}"
            )


_options = ParameterOptions()


def get_options() -> ParameterOptions:
    """Return the current options."""
    return _options


def set_options(**changes: str) -> ParameterOptions:
    """Update the current options.

    Args:
        **changes: Fields of ParameterOptions to change

    Returns:
        The previous options, for restoring later

    Raises:
        TypeError: If an unknown option is given
        ValueError: If an option value is invalid
    """
    global _options
    previous = _options
    _options = replace(_options, **changes)
    return previous


def reset_options() -> None:
    """Restore the default options."""
    global _options
    _options = ParameterOptions()


@contextmanager
def options(**changes: str) -> Iterator[ParameterOptions]:
    """Temporarily change options within a with-block.

    Example:
        >>> with options(propagation="atomic"):
        ...     parent.set_value(2.0)
    """
    global _options
    previous = set_options(**changes)
    try:
        yield _options
    finally:
        _options = previous
