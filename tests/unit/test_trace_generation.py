"""
Tests for FHR walk synthesis, acceleration injection and TOCO synthesis.
"""
import pytest
import numpy as np
from fhr_simulator.constants import TOTAL_POINTS
from fhr_simulator.random_variates import RandomVariate
from fhr_simulator.trace_generation import (
    AccelerationEvent,
    Contraction,
    add_acceleration,
    apply_accelerations,
    contraction_profile,
    draw_contractions,
    generate_fhr_trace,
    generate_toco_trace,
    sample_times,
    seconds_to_index,
)
from fhr_simulator.variability import pick_variability


class TestFHRTraceSynthesizer:

    @pytest.mark.unit
    def test_trace_length_and_start(self, seeded_rv, moderate_band):
        trace = generate_fhr_trace(150, moderate_band, seeded_rv)
        assert len(trace) == TOTAL_POINTS == 600
        assert trace[0] == 150.0
        assert np.all(np.isfinite(trace))

    @pytest.mark.unit
    def test_walk_stays_in_band(self, many_seeds, tolerance_config):
        """Pre-acceleration samples never leave baseline ± amplitude."""
        eps = tolerance_config['walk_overshoot_bpm']
        for seed in many_seeds:
            rv = RandomVariate(seed=seed)
            band = pick_variability(rv)
            trace = generate_fhr_trace(140, band, rv)
            assert trace.min() >= 140 - band.amplitude - eps
            assert trace.max() <= 140 + band.amplitude + eps

    @pytest.mark.unit
    def test_per_sample_delta_bounded_by_step(self, seeded_rv, moderate_band):
        trace = generate_fhr_trace(150, moderate_band, seeded_rv)
        assert np.max(np.abs(np.diff(trace))) <= moderate_band.step + 1e-9

    @pytest.mark.unit
    def test_walk_does_not_stick_to_rail(self, minimal_band):
        """Soft reflection keeps the walk off the exact band edge."""
        trace = generate_fhr_trace(120, minimal_band, RandomVariate(seed=3))
        low, high = 120 - minimal_band.amplitude, 120 + minimal_band.amplitude
        at_rail = np.isclose(trace, low, rtol=0, atol=1e-9) | np.isclose(trace, high, rtol=0, atol=1e-9)
        assert at_rail.sum() < 5

    @pytest.mark.unit
    def test_walk_moves(self, seeded_rv, moderate_band):
        trace = generate_fhr_trace(150, moderate_band, seeded_rv)
        assert np.std(trace) > 0.5

    @pytest.mark.unit
    def test_degenerate_lengths(self, seeded_rv, moderate_band):
        assert len(generate_fhr_trace(150, moderate_band, seeded_rv, total_points=0)) == 0
        single = generate_fhr_trace(150, moderate_band, seeded_rv, total_points=1)
        assert single.tolist() == [150.0]


class TestAccelerationInjector:

    @pytest.mark.unit
    def test_seconds_to_index(self):
        assert seconds_to_index(0) == 0
        assert seconds_to_index(10) == 9
        assert seconds_to_index(300) == 299
        assert seconds_to_index(600) == 599

    @pytest.mark.unit
    def test_gate_closed_consumes_no_draws(self, scripted_rv, flat_trace):
        """Absent/Minimal strips never get accelerations."""
        rv = scripted_rv([])
        events = apply_accelerations(flat_trace, 150, False, rv)
        assert events == []
        assert rv.calls == 0
        assert np.all(flat_trace == 150.0)

    @pytest.mark.unit
    def test_exact_event_from_scripted_draws(self, scripted_rv, flat_trace):
        """count=1, duration=15 s, onset-to-peak=5 s, amp=15 bpm, start=10 s."""
        rv = scripted_rv([0.4, 0.0, 0.0, 0.0, 0.0])
        events = apply_accelerations(flat_trace, 150, True, rv)

        assert len(events) == 1
        event = events[0]
        assert (event.start_sec, event.peak_sec, event.end_sec) == (10, 15, 25)
        assert event.amp == 15
        assert (event.start_idx, event.peak_idx, event.end_idx) == (9, 14, 24)
        assert event.baseline == 150
        assert flat_trace[14] == pytest.approx(165.0)
        assert flat_trace[9] == pytest.approx(150.0)
        assert flat_trace[24] == pytest.approx(150.0)
        assert np.all(flat_trace[25:] == 150.0)

    @pytest.mark.unit
    def test_zero_count_draw(self, scripted_rv, flat_trace):
        events = apply_accelerations(flat_trace, 150, True, scripted_rv([0.1]))
        assert events == []
        assert np.all(flat_trace == 150.0)

    @pytest.mark.unit
    def test_event_geometry_invariants(self, many_seeds):
        for seed in many_seeds:
            rv = RandomVariate(seed=seed)
            trace = np.full(600, 140.0)
            events = apply_accelerations(trace, 140, True, rv)

            assert 0 <= len(events) <= 2
            for e in events:
                assert 0 <= e.start_idx <= e.peak_idx <= e.end_idx <= 599
                assert 5 <= e.peak_sec - e.start_sec <= 30
                assert 15 <= e.end_sec - e.start_sec <= 90
                assert e.end_sec - e.peak_sec >= 5
                assert e.start_sec >= 10
                assert e.end_sec <= 590
                assert 15 <= e.amp <= 30

    @pytest.mark.unit
    def test_injection_is_additive(self, many_seeds, moderate_band):
        """Post-injection ≥ pre-injection inside windows, identical outside."""
        for seed in many_seeds[:50]:
            rv = RandomVariate(seed=seed)
            trace = generate_fhr_trace(150, moderate_band, rv)
            before = trace.copy()
            events = apply_accelerations(trace, 150, True, rv)

            inside = np.zeros(600, dtype=bool)
            for e in events:
                inside[e.start_idx:e.end_idx + 1] = True
            assert np.all(trace[inside] >= before[inside])
            assert np.array_equal(trace[~inside], before[~inside])

    @pytest.mark.unit
    def test_overlapping_events_stack(self, flat_trace):
        first = AccelerationEvent.from_seconds(100, 120, 160, 20, 150)
        second = AccelerationEvent.from_seconds(100, 120, 160, 15, 150)
        add_acceleration(flat_trace, first)
        add_acceleration(flat_trace, second)
        assert flat_trace[first.peak_idx] == pytest.approx(150 + 20 + 15)

    @pytest.mark.unit
    def test_add_acceleration_on_empty_trace(self):
        trace = np.empty(0)
        add_acceleration(trace, AccelerationEvent.from_seconds(10, 20, 40, 20, 150))
        assert trace.size == 0


class TestTOCOTraceSynthesizer:

    @pytest.mark.unit
    def test_trace_shape_and_range(self, many_seeds):
        for seed in many_seeds[:100]:
            trace, contractions = generate_toco_trace(RandomVariate(seed=seed))
            assert len(trace) == 600
            assert trace.min() >= 0.0
            assert trace.max() <= 100.0
            assert len(contractions) <= 1

    @pytest.mark.unit
    def test_draw_contraction_from_scripted_draws(self, scripted_rv):
        """count=1, centre 5 min, duration 90 s, amp 53."""
        contractions = draw_contractions(scripted_rv([0.9, 0.5, 0.5, 0.5]))
        assert len(contractions) == 1
        c = contractions[0]
        assert c.start_sec == pytest.approx(255.0)
        assert c.end_sec == pytest.approx(345.0)
        assert c.amp == 53

    @pytest.mark.unit
    def test_no_contraction_draw(self, scripted_rv):
        assert draw_contractions(scripted_rv([0.2])) == []

    @pytest.mark.unit
    def test_contraction_geometry_over_many_draws(self, many_seeds):
        for seed in many_seeds:
            for c in draw_contractions(RandomVariate(seed=seed)):
                duration = c.end_sec - c.start_sec
                centre = (c.start_sec + c.end_sec) / 2
                assert 60 <= duration <= 120
                assert 180 <= centre <= 420
                assert 35 <= c.amp <= 70

    @pytest.mark.unit
    def test_tonus_walk_hard_clamped(self, constant_rv):
        """Always stepping down pins the tonus at exactly 8 (no reflection)."""
        trace, _ = generate_toco_trace(constant_rv(0.0), contractions=[])
        # tonus 10 -> 8.5 -> 8 (clamped); noise is -1 on every sample
        assert trace[0] == pytest.approx(7.5)
        assert np.allclose(trace[1:], 7.0)

    @pytest.mark.unit
    def test_tonus_upper_clamp(self, constant_rv):
        trace, _ = generate_toco_trace(constant_rv(0.999), contractions=[])
        assert trace.max() <= 25.0 + 1.0

    @pytest.mark.unit
    def test_explicit_contraction_dome(self, constant_rv):
        """Neutral draws leave tonus at 12.5 with no noise, exposing the dome."""
        contraction = Contraction.centered(300.0, 90.0, 50)
        trace, contractions = generate_toco_trace(constant_rv(0.5), contractions=[contraction])

        assert contractions == [contraction]
        expected = 12.5 + contraction_profile(sample_times(), [contraction])
        np.testing.assert_allclose(trace, expected, atol=1e-9)
        assert trace.max() == pytest.approx(62.5, abs=0.05)
        assert trace[0] == pytest.approx(12.5)

    @pytest.mark.unit
    def test_overlapping_contractions_take_maximum(self):
        t = np.array([300.0])
        profile = contraction_profile(t, [Contraction.centered(300, 90, 40), Contraction.centered(300, 90, 60)])
        assert profile[0] == pytest.approx(60.0)

    @pytest.mark.unit
    def test_sample_times(self):
        t = sample_times()
        assert t[0] == 0.0
        assert t[-1] == pytest.approx(600.0)
        assert len(sample_times(1)) == 1
