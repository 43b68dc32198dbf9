"""
Pytest configuration and shared fixtures for ECG strip engine tests.
"""
import pytest
import numpy as np

from ecg_strip.api_models import BeatParams
from ecg_strip.time_base import DEFAULT_TIME_BASE, TimeBase

@pytest.fixture
def time_base():
    """Standard 25 mm/s, 6 second strip."""
    return DEFAULT_TIME_BASE

@pytest.fixture
def fast_paper_time_base():
    """50 mm/s paper, used to check that nothing hardcodes the paper speed."""
    return TimeBase(paper_speed_mm_per_sec=50.0)

@pytest.fixture
def seeded_rng():
    """Deterministic random source for the irregular-rhythm generators."""
    return np.random.default_rng(1234)

@pytest.fixture
def normal_beat_params():
    return BeatParams()

@pytest.fixture
def tolerance_config():
    """Standard tolerance values for numerical comparisons."""
    return {
        'position_tolerance_px': 1e-6,
        'sample_step_px': 1.0,        # one sample per pixel
        'amplitude_fraction': 0.05,   # 5% of the configured amplitude
    }

@pytest.fixture
def medical_reference_values():
    """Reference values used by the rhythm checks."""
    return {
        'normal_pr_interval_sec': (0.12, 0.20),
        'first_degree_pr_segment_min_sec': 0.20,
        'sinus_rate_range_bpm': (60, 100),
        'brady_rate_max_bpm': 60,
        'tachy_rate_min_bpm': 100,
        'psvt_rate_range_bpm': (150, 220),
    }


@pytest.fixture
def samples_between():
    """Helper selecting the samples with x_start <= x < x_end."""
    def _select(points, x_start, x_end):
        mask = (points[:, 0] >= x_start) & (points[:, 0] < x_end)
        return points[mask]
    return _select
