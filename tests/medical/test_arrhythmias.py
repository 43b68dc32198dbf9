"""
Tests for the irregular generators: atrial flutter and atrial fibrillation.
"""
import pytest
import numpy as np
from ecg_strip.rhythm_logic import (
    compose_strip,
    compose_flutter,
    compose_fibrillation,
    flutter_baseline,
    fibrillatory_baseline,
    flutter_period_px
)
from ecg_strip.constants import FLUTTER_PARAMS, AFIB_PARAMS
from ecg_strip.projection import to_path

class TestAtrialFlutter:
    """Test sawtooth flutter with fixed conduction."""

    @pytest.mark.medical
    def test_flutter_period(self, time_base):
        """300/min flutter waves are 0.2 s apart on paper."""
        assert flutter_period_px(300, time_base) == pytest.approx(0.2 * time_base.px_per_sec)

    @pytest.mark.medical
    def test_baseline_periodic(self, time_base):
        """F-wave trace repeats every flutter period."""
        baseline = flutter_baseline(time_base=time_base)
        period = int(round(flutter_period_px(FLUTTER_PARAMS["flutter_rate_bpm"], time_base)))
        y = baseline[:, 1]

        np.testing.assert_allclose(y[:-period], y[period:], atol=1e-9)

    @pytest.mark.medical
    def test_baseline_periodic_outside_conducted_windows(self, time_base):
        """With conducted spikes, the trace still matches the sawtooth away from the spikes."""
        strip = compose_strip("aflutter", time_base)
        baseline = flutter_baseline(time_base=time_base)

        in_spike = np.zeros(len(baseline), dtype=bool)
        for beat in strip.beats:
            lo, hi = int(beat.landmarks.qrs_onset), int(np.ceil(beat.landmarks.qrs_end))
            in_spike[lo:hi] = True

        np.testing.assert_allclose(strip.points[~in_spike, 1], baseline[~in_spike, 1])
        np.testing.assert_array_equal(strip.points[:, 0], baseline[:, 0])

    @pytest.mark.medical
    def test_sawtooth_amplitude(self, time_base):
        y = flutter_baseline(300, 18.0, time_base)[:, 1]
        assert np.max(y) == pytest.approx(9.0)
        assert np.min(y) >= 0

    @pytest.mark.medical
    def test_flutter_waves_drawn_above_baseline(self, time_base):
        """F-waves rise from the isoelectric line on screen (smaller y)."""
        baseline = flutter_baseline(300, 18.0, time_base)
        path = to_path(baseline, time_base)

        assert path[0].y == pytest.approx(81.0)
        assert path[1].y == pytest.approx(81.72)
        assert all(command.y <= time_base.baseline_px for command in path)

    @pytest.mark.medical
    def test_four_to_one_conduction(self, time_base):
        """Every 4th flutter wave conducts: ventricular rate 75 bpm."""
        strip = compose_strip("aflutter", time_base)
        rr_sec = np.diff(strip.beat_onsets) / time_base.px_per_sec

        np.testing.assert_allclose(rr_sec, 4 * 60.0 / FLUTTER_PARAMS["flutter_rate_bpm"])
        assert len(strip.beats) == 8

    @pytest.mark.medical
    def test_conducted_spike_magnitude(self, time_base, samples_between):
        strip = compose_strip("aflutter", time_base)
        for beat in strip.beats:
            window = samples_between(strip.points, beat.landmarks.qrs_onset, beat.landmarks.qrs_end)
            assert np.max(window[:, 1]) == pytest.approx(20.0)
            assert np.min(window[:, 1]) == pytest.approx(-6.0)

    @pytest.mark.medical
    def test_conduction_ratio_parameter(self, time_base):
        two_to_one = compose_flutter(conduction_ratio=2, time_base=time_base)
        four_to_one = compose_flutter(conduction_ratio=4, time_base=time_base)
        assert len(two_to_one.beats) > len(four_to_one.beats)

    @pytest.mark.medical
    def test_zero_flutter_rate(self, time_base):
        strip = compose_flutter(flutter_rate_bpm=0, time_base=time_base)
        assert strip.beats == []
        assert np.all(strip.points[:, 1] == 0)


class TestAtrialFibrillation:
    """Test the irregularly irregular generator."""

    @pytest.mark.medical
    def test_irregular_rr_across_draws(self, time_base):
        """RR intervals vary, unlike every regular rhythm."""
        intervals = []
        for seed in range(20):
            strip = compose_strip("afib", time_base, np.random.default_rng(seed))
            intervals.extend(np.diff(strip.beat_onsets))

        assert len(intervals) > 20
        assert np.var(intervals) > 0

    @pytest.mark.medical
    def test_rr_within_configured_range(self, time_base, seeded_rng):
        strip = compose_strip("afib", time_base, seeded_rng)
        low, high = AFIB_PARAMS["rr_range"]
        scale = time_base.strip_width * 0.2
        rr = np.diff(strip.beat_onsets)

        assert np.all(rr >= low * scale - 1e-9)
        assert np.all(rr <= high * scale + 1e-9)

    @pytest.mark.medical
    def test_seeded_strip_reproducible(self, time_base):
        a = compose_strip("afib", time_base, np.random.default_rng(99))
        b = compose_strip("afib", time_base, np.random.default_rng(99))

        np.testing.assert_array_equal(a.points, b.points)
        assert a.beat_onsets == b.beat_onsets

    @pytest.mark.medical
    def test_fibrillatory_baseline_bounded(self, time_base, seeded_rng):
        y = fibrillatory_baseline(time_base=time_base, rng=seeded_rng)[:, 1]

        assert np.all(np.abs(y) <= AFIB_PARAMS["bound"])
        assert np.all(np.abs(np.diff(y)) <= AFIB_PARAMS["step"] + 1e-12)
        assert np.std(y) > 0

    @pytest.mark.medical
    def test_conducted_spikes_present(self, time_base, seeded_rng, samples_between):
        strip = compose_strip("afib", time_base, seeded_rng)
        assert len(strip.beats) >= 3
        for beat in strip.beats:
            window = samples_between(strip.points, beat.landmarks.qrs_onset, beat.landmarks.qrs_end)
            assert np.max(window[:, 1]) == pytest.approx(18.0)

    @pytest.mark.medical
    def test_default_rng_when_not_injected(self, time_base):
        strip = compose_fibrillation(time_base=time_base)
        assert len(strip.points) == int(time_base.strip_width)

    @pytest.mark.medical
    def test_degenerate_rr_range(self, time_base, seeded_rng):
        strip = compose_fibrillation(rr_range=(0.0, 0.0), time_base=time_base, rng=seeded_rng)
        assert strip.beats == []
