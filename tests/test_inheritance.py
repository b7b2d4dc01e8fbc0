"""Tests for inheritor and modifier links.

Tests one-level value propagation including:
- add_inheritor rules (null, fixed, nested, doubly-driven)
- Propagation order and the parent-first guarantee
- Best-effort versus atomic partial-failure behaviour
- Modifiers as informational links only
"""

import gc
import logging

import pytest

from modelfit_parameters import (
    BoundsViolation,
    InheritanceRuleViolation,
    Limits,
    LogTransform,
    PositiveParameter,
    RealParameter,
    options,
)


class TestAddInheritor:
    """Tests for add_inheritor validation."""

    def test_propagates_value(self, family):
        """Test an inheritor follows the parent's value."""
        parent, child, _ = family
        parent.add_inheritor(child)
        parent.set_value(5)
        assert child.get_value() == 5
        assert child.get_value_transformed() == 5
        assert child.get_inheritee() is parent
        assert parent.get_inheritors() == (child,)

    def test_null_inheritor_raises(self, real):
        """Test None is rejected."""
        with pytest.raises(InheritanceRuleViolation, match="null inheritor"):
            real.add_inheritor(None)

    def test_non_parameter_raises(self, real):
        """Test non-parameters are rejected."""
        with pytest.raises(TypeError):
            real.add_inheritor(1.0)

    def test_fixed_inheritor_raises(self, family):
        """Test a fixed parameter cannot be a propagation target."""
        parent, child, _ = family
        child.set_fixed(True)
        with pytest.raises(InheritanceRuleViolation, match="fixed inheritor"):
            parent.add_inheritor(child)
        assert parent.get_inheritors() == ()

    def test_inheritor_with_inheritors_raises(self, family):
        """Test propagation may not be nested below the inheritor."""
        parent, child, grandchild = family
        child.add_inheritor(grandchild)
        with pytest.raises(InheritanceRuleViolation, match="may not be nested"):
            parent.add_inheritor(child)

    def test_inheritor_cannot_gain_inheritors(self, family):
        """Test propagation may not be nested above the parent."""
        parent, child, grandchild = family
        parent.add_inheritor(child)
        with pytest.raises(InheritanceRuleViolation, match="may not be nested"):
            child.add_inheritor(grandchild)

    def test_self_inheritance_raises(self, real):
        """Test a parameter cannot inherit from itself."""
        with pytest.raises(InheritanceRuleViolation):
            real.add_inheritor(real)

    def test_second_parent_raises(self, family):
        """Test a parameter is driven by at most one parent."""
        parent, child, other = family
        parent.add_inheritor(child)
        with pytest.raises(InheritanceRuleViolation, match="already inheriting"):
            other.add_inheritor(child)

    def test_re_adding_is_idempotent(self, family):
        """Test adding the same inheritor twice keeps one link."""
        parent, child, _ = family
        parent.add_inheritor(child)
        parent.add_inheritor(child)
        assert parent.get_inheritors() == (child,)

    def test_constructor_links(self):
        """Test inheritors and modifiers passed at construction."""
        child, modifier = RealParameter(), RealParameter()
        parent = RealParameter(inheritors=[child], modifiers=[modifier])
        assert parent.get_inheritors() == (child,)
        assert parent.get_modifiers() == (modifier,)
        parent.set_value(2.0)
        assert child.get_value() == 2.0

    def test_failed_construction_unlinks_inheritors(self):
        """Test children linked before a rejected entry are released again."""
        good = RealParameter()
        fixed = RealParameter(fixed=True)
        with pytest.raises(InheritanceRuleViolation, match="fixed inheritor"):
            RealParameter(label="broken", inheritors=[good, fixed])
        assert good.get_inheritee() is None
        good.set_free(True)
        other = RealParameter()
        other.add_inheritor(good)
        assert good.get_inheritee() is other

    def test_failed_modifier_unlinks_inheritors(self):
        """Test a rejected modifier also releases linked inheritors."""
        child = RealParameter()
        with pytest.raises(InheritanceRuleViolation, match="null modifier"):
            RealParameter(inheritors=[child], modifiers=[None])
        assert child.get_inheritee() is None


class TestInheriteeFreedom:
    """Tests for the free state of driven parameters."""

    def test_driven_parameter_cannot_be_freed(self, family):
        """Test set_free(True) is rejected while an inheritee drives it."""
        parent, child, _ = family
        parent.add_inheritor(child)
        with pytest.raises(InheritanceRuleViolation, match="inherits from"):
            child.set_free(True)
        with pytest.raises(InheritanceRuleViolation):
            child.set_fixed(False)

    def test_driven_parameter_can_be_fixed(self, family):
        """Test fixing a driven parameter is allowed."""
        parent, child, _ = family
        parent.add_inheritor(child)
        child.set_fixed(True)
        assert child.get_fixed()

    def test_removal_allows_freeing(self, family):
        """Test removing the link lifts the restriction."""
        parent, child, _ = family
        parent.add_inheritor(child)
        child.set_fixed(True)
        parent.remove_inheritor(child)
        assert child.get_inheritee() is None
        child.set_free(True)
        assert child.get_free()

    def test_inheritee_is_weak(self):
        """Test a child does not keep its parent alive."""
        child = RealParameter()
        parent = RealParameter()
        parent.add_inheritor(child)
        del parent
        gc.collect()
        assert child.get_inheritee() is None


class TestRemoveInheritor:
    """Tests for remove_inheritor."""

    def test_stops_propagation(self, family):
        """Test a removed inheritor no longer follows the parent."""
        parent, child, _ = family
        parent.add_inheritor(child)
        parent.remove_inheritor(child)
        parent.set_value(3.0)
        assert child.get_value() == 0.0
        assert parent.get_inheritors() == ()

    def test_null_raises(self, real):
        """Test None is rejected."""
        with pytest.raises(InheritanceRuleViolation, match="null inheritor"):
            real.remove_inheritor(None)

    def test_unknown_is_ignored(self, family):
        """Test removing a non-inheritor is a no-op."""
        parent, child, other = family
        parent.add_inheritor(child)
        parent.remove_inheritor(other)
        assert parent.get_inheritors() == (child,)
        assert child.get_inheritee() is parent


class TestPropagation:
    """Tests for value propagation semantics."""

    def test_inheritors_ordered_by_handle(self):
        """Test iteration order is construction order, not insertion order."""
        a, b, c = RealParameter(), RealParameter(), RealParameter()
        parent = RealParameter()
        for child in (c, a, b):
            parent.add_inheritor(child)
        assert parent.get_inheritors() == (a, b, c)

    def test_parent_updated_before_inheritors(self):
        """Test inheritors observe the parent's new state."""
        seen = []

        class Recording(RealParameter):
            def set_value(self, value):
                seen.append((parent.get_value(), parent.get_value_transformed()))
                super().set_value(value)

        parent = PositiveParameter(transform=LogTransform())
        parent.add_inheritor(Recording())
        parent.set_value(1.0)
        assert seen == [(1.0, 0.0)]

    def test_transformed_propagates_raw_value(self):
        """Test set_value_transformed pushes the raw value to inheritors."""
        parent = PositiveParameter(transform=LogTransform())
        child = RealParameter()
        parent.add_inheritor(child)
        parent.set_value_transformed(0.0)
        assert parent.get_value() == 1.0
        assert child.get_value() == 1.0
        assert child.get_value_transformed() == 1.0

    def test_inheritor_uses_own_transform(self):
        """Test each inheritor recomputes its cache with its own transform."""
        parent = PositiveParameter()
        child = PositiveParameter(transform=LogTransform())
        parent.add_inheritor(child)
        parent.set_value(1.0)
        assert child.get_value_transformed() == 0.0

    def test_best_effort_partial_apply(self, caplog):
        """Test the first rejecting inheritor stops propagation after partial apply."""
        first = RealParameter()
        narrow = RealParameter(limits=Limits(-1.0, 1.0))
        last = RealParameter()
        parent = RealParameter(inheritors=[first, narrow, last])

        with caplog.at_level(logging.WARNING, logger="modelfit_parameters.parameter"):
            with pytest.raises(BoundsViolation):
                parent.set_value(5.0)

        assert parent.get_value() == 5.0
        assert first.get_value() == 5.0
        assert narrow.get_value() == 0.0
        assert last.get_value() == 0.0
        assert "1 of 3 inheritors updated" in caplog.text

    def test_atomic_rejects_before_mutating(self):
        """Test atomic propagation leaves every parameter unchanged."""
        first = RealParameter()
        narrow = RealParameter(limits=Limits(-1.0, 1.0))
        parent = RealParameter(inheritors=[first, narrow])

        with options(propagation="atomic"):
            with pytest.raises(BoundsViolation, match="rejected by inheritors"):
                parent.set_value(5.0)
            parent.set_value(0.5)

        assert parent.get_value() == 0.5
        assert first.get_value() == 0.5
        assert narrow.get_value() == 0.5

    def test_parent_rejection_touches_nothing(self, family):
        """Test a value the parent rejects is never propagated."""
        parent, child, _ = family
        parent.set_limits(Limits(0.0, 1.0))
        parent.add_inheritor(child)
        with pytest.raises(BoundsViolation):
            parent.set_value(2.0)
        assert child.get_value() == 0.0


class TestPropagationLogging:
    """Tests for debug logging during propagation."""

    def test_no_formatting_when_debug_disabled(self, caplog):
        """Test parameters are not formatted for disabled debug records."""
        calls = []

        class Counting(RealParameter):
            def __str__(self):
                calls.append(self)
                return super().__str__()

        caplog.set_level(logging.INFO, logger="modelfit_parameters.parameter")
        parent = Counting()
        parent.add_inheritor(Counting())
        parent.set_value(1.0)
        assert calls == []

    def test_debug_record_when_enabled(self, caplog):
        """Test propagation is logged at debug level."""
        caplog.set_level(logging.DEBUG, logger="modelfit_parameters.parameter")
        parent = RealParameter()
        parent.add_inheritor(RealParameter())
        parent.set_value(1.0)
        assert "Propagated value=1.0" in caplog.text


class TestModifiers:
    """Tests for modifier links."""

    def test_add_and_remove(self, family):
        """Test modifier set maintenance."""
        parent, m1, m2 = family
        parent.add_modifier(m2)
        parent.add_modifier(m1)
        assert parent.get_modifiers() == (m1, m2)
        parent.remove_modifier(m1)
        assert parent.get_modifiers() == (m2,)

    def test_no_propagation(self, family):
        """Test modifiers do not follow the parent's value."""
        parent, modifier, _ = family
        parent.add_modifier(modifier)
        parent.set_value(4.0)
        assert modifier.get_value() == 0.0

    def test_null_modifier_raises(self, real):
        """Test None is rejected on add and remove."""
        with pytest.raises(InheritanceRuleViolation, match="null modifier"):
            real.add_modifier(None)
        with pytest.raises(InheritanceRuleViolation, match="null modifier"):
            real.remove_modifier(None)
