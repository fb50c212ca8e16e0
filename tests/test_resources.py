"""
Tests for the tension / line integrity resource model.
"""

from __future__ import annotations

import pytest

from tideline.models.content import IntegrityTuning, TensionTuning
from tideline.models.event import FishPhase
from tideline.skills.resources import (
    apply_tension,
    compute_wear,
    control_factors,
    fish_phase_for,
    max_line_integrity,
    phase_tuning,
    round_half_up,
    safe_tension_limit,
)


class TestRounding:
    """Tests for half-up rounding."""

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(22.5) == 23

    def test_below_half_rounds_down(self):
        assert round_half_up(4.2) == 4


class TestSafeLimit:
    """Tests for the safe tension limit."""

    def test_base_limit(self):
        """Test no control gives the base limit."""
        assert safe_tension_limit(TensionTuning(), 0, 0) == 58

    def test_control_raises_limit(self):
        """Test combat control and the control stat both raise the limit."""
        assert safe_tension_limit(TensionTuning(), 5, 10) == 78

    def test_limit_is_clamped(self):
        """Test the limit never passes the tuning bounds."""
        assert safe_tension_limit(TensionTuning(), 50, 99) == 86
        low = TensionTuning(safe_base=10)
        assert safe_tension_limit(low, 0, 0) == 50


class TestWear:
    """Tests for integrity wear."""

    def test_no_wear_at_limit(self):
        """Test tension exactly at the safe limit causes no wear."""
        assert compute_wear(58, 58, 0) == 0

    def test_no_wear_below_limit(self):
        assert compute_wear(10, 58, 0) == 0

    def test_minimum_wear(self):
        """Test one point over the limit wears at least 1."""
        assert compute_wear(59, 58, 0) == 1

    def test_wear_scales_with_excess(self):
        """Test wear is ceil(excess / 10)."""
        assert compute_wear(100, 58, 0) == 5

    def test_wear_is_capped(self):
        """Test wear never exceeds 8."""
        assert compute_wear(100, 0, 0) == 8

    def test_durability_reduces_wear(self):
        """Test durability scales wear down to a 0.65 floor."""
        assert compute_wear(100, 58, 20) == 3

    def test_wear_mult_reduces_wear(self):
        assert compute_wear(100, 58, 0, wear_mult=0.5) == 3

    def test_scaled_wear_never_below_one(self):
        """Test heavy reduction still wears at least 1."""
        assert compute_wear(59, 58, 99, wear_mult=0.01) == 1


class TestMaxLineIntegrity:
    """Tests for derived max line integrity."""

    def test_level_one(self):
        assert max_line_integrity(IntegrityTuning(), 1, 0) == 100

    def test_level_and_durability(self):
        """Test level and durability both add integrity."""
        assert max_line_integrity(IntegrityTuning(), 3, 4) == 132

    def test_clamped(self):
        assert max_line_integrity(IntegrityTuning(), 40, 99) == 260
        assert max_line_integrity(IntegrityTuning(base=10), 1, 0) == 60


class TestTension:
    """Tests for tension application."""

    def test_clamped_to_range(self):
        assert apply_tension(95, 20, 100) == 100
        assert apply_tension(5, -20, 100) == 0

    def test_control_factors_floor(self):
        """Test both control factors respect their floors."""
        assert control_factors(0, 0) == (1, 1)
        stat_factor, combat_factor = control_factors(20, 10)
        assert stat_factor == pytest.approx(0.72)
        assert combat_factor == pytest.approx(0.7)


class TestFishPhase:
    """Tests for fish phase derivation."""

    def test_aggressive(self):
        assert fish_phase_for(67, 100) == FishPhase.AGGRESSIVE

    def test_boundaries_fall_to_next_phase(self):
        """Test ratios exactly at a boundary belong to the lower phase."""
        assert fish_phase_for(66, 100) == FishPhase.DEFENSIVE
        assert fish_phase_for(33, 100) == FishPhase.EXHAUSTED

    def test_no_stamina_pool(self):
        assert fish_phase_for(0, 0) == FishPhase.EXHAUSTED

    def test_phase_tuning(self):
        """Test phase multipliers, with aggressive pressure easing by level."""
        assert phase_tuning(FishPhase.AGGRESSIVE, 1).pressure_mult == pytest.approx(1.2)
        assert phase_tuning(FishPhase.AGGRESSIVE, 1).reel_mult == pytest.approx(0.9)
        assert phase_tuning(FishPhase.AGGRESSIVE, 20).pressure_mult == pytest.approx(1.08)
        assert phase_tuning(FishPhase.DEFENSIVE, 1).reel_mult == pytest.approx(0.8)
        assert phase_tuning(FishPhase.EXHAUSTED, 1).pressure_mult == pytest.approx(0.7)
        assert phase_tuning(FishPhase.EXHAUSTED, 1).reel_mult == pytest.approx(1.25)
