"""
Performance tests for strip generation.
Tests execution time and memory usage of the per-request engine calls.
"""
import pytest
import time
import psutil
import os
import numpy as np
from ecg_strip.rhythm_logic import compose_strip
from ecg_strip.projection import zoom_window, to_path
from ecg_strip.time_base import grid_lines
from ecg_strip.api_models import RhythmId

class TestPerformance:
    """Test performance characteristics of strip generation."""

    @pytest.mark.performance
    def test_all_rhythms_generation_time(self, time_base, seeded_rng):
        """A full question set renders well within one UI frame budget per strip."""
        start_time = time.time()

        for rhythm in RhythmId:
            strip = compose_strip(rhythm, time_base, seeded_rng)
            zoom_window(strip.points, 1.2, time_base)
            to_path(strip.points, time_base)

        execution_time = time.time() - start_time
        assert execution_time < 2.0, f"Generating all rhythms took {execution_time:.3f}s (too slow)"

    @pytest.mark.performance
    def test_fast_paper_scaling(self, fast_paper_time_base, seeded_rng):
        """Doubling paper speed stays proportional in work."""
        start_time = time.time()
        strip = compose_strip("afib", fast_paper_time_base, seeded_rng)
        execution_time = time.time() - start_time

        assert len(strip.points) == int(fast_paper_time_base.strip_width)
        assert execution_time < 1.0

    @pytest.mark.performance
    def test_memory_usage_repeated_generation(self, time_base):
        """Strips are not cached or retained between calls."""
        process = psutil.Process(os.getpid())
        initial_memory = process.memory_info().rss / 1024 / 1024  # MB

        for seed in range(200):
            compose_strip("afib", time_base, np.random.default_rng(seed))
            compose_strip("sinus_tachy", time_base)
            grid_lines(time_base.strip_width, time_base.strip_height_px)

        final_memory = process.memory_info().rss / 1024 / 1024
        memory_increase = final_memory - initial_memory
        assert memory_increase < 50, f"Memory increased by {memory_increase:.1f}MB"
