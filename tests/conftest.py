"""Shared fixtures for parameter tests."""

import math
from dataclasses import dataclass

import pytest

from modelfit_parameters import (
    Limits,
    LogTransform,
    NonNegativeParameter,
    PositiveParameter,
    RealParameter,
    reset_options,
)


def pytest_runtest_setup(item):
    """Every test starts with default options."""
    reset_options()


@pytest.fixture
def real():
    """Unconstrained parameter at its default value."""
    return RealParameter()


@pytest.fixture
def nonneg():
    """Non-negative parameter at its default value."""
    return NonNegativeParameter()


@pytest.fixture
def log_scale():
    """Positive parameter with a natural-log transform on [1e-3, 1e3]."""
    return PositiveParameter(2.0, limits=Limits(1e-3, 1e3, "scale"), transform=LogTransform(), label="scale")


@pytest.fixture
def family():
    """A parent with two unconstrained children, not yet linked."""
    return RealParameter(label="parent"), RealParameter(label="a"), RealParameter(label="b")


@dataclass(frozen=True)
class CheckedLogTransform:
    """Log transform that raises outside its domain."""

    def description(self) -> str:
        return "Domain-checked natural log"

    def forward(self, x: float) -> float:
        if x <= 0:
            raise ValueError(f"CheckedLogTransform requires x > 0, got {x}")
        return math.log(x)

    def reverse(self, y: float) -> float:
        return math.exp(y)

    def derivative(self, x: float) -> float:
        return 1.0 / x


@pytest.fixture
def checked_log():
    """A user-supplied transform whose forward() raises on x <= 0."""
    return CheckedLogTransform()
