"""
Performance tests for strip generation and rendering.
Tests execution time and memory usage of the per-strip work.
"""
import pytest
import time
import psutil
import os
from fhr_simulator.chart_rendering import render_png
from fhr_simulator.grid_mapping import SurfaceSize
from fhr_simulator.session import StripSession


class TestPerformance:

    @pytest.mark.performance
    def test_regeneration_time(self):
        """A strip regenerates in well under 100 ms on average."""
        session = StripSession.seeded(1)
        num_generations = 20

        start_time = time.time()
        for _ in range(num_generations):
            session.regenerate()
        execution_time = time.time() - start_time

        assert execution_time / num_generations < 0.1, \
            f"Regeneration took {execution_time / num_generations:.3f}s per strip (too slow)"

    @pytest.mark.performance
    def test_display_list_build_time(self):
        session = StripSession.seeded(1)
        session.regenerate()
        session.add_marker()
        session.reveal_baseline()
        session.reveal_acceleration_truth()
        surface = SurfaceSize(2400, 840, css_width=1200)

        start_time = time.time()
        for _ in range(10):
            session.render_fhr(surface)
            session.render_toco(surface)
        execution_time = time.time() - start_time

        assert execution_time < 2.0, f"Building 20 display lists took {execution_time:.3f}s"

    @pytest.mark.performance
    @pytest.mark.slow
    def test_png_render_time(self):
        session = StripSession.seeded(1)
        session.regenerate()

        start_time = time.time()
        png = render_png(session.render_fhr(SurfaceSize(1200, 420)))
        execution_time = time.time() - start_time

        assert execution_time < 5.0, f"PNG render took {execution_time:.3f}s"
        assert len(png) > 0

    @pytest.mark.performance
    def test_memory_usage(self):
        """Regenerating many strips does not accumulate memory."""
        process = psutil.Process(os.getpid())
        session = StripSession.seeded(1)
        session.regenerate()
        baseline_memory = process.memory_info().rss / 1024 / 1024  # MB

        for _ in range(200):
            session.regenerate()

        peak_memory = process.memory_info().rss / 1024 / 1024  # MB
        memory_increase = peak_memory - baseline_memory
        assert memory_increase < 50, f"Memory grew {memory_increase:.1f}MB over 200 strips"
