# ecg_strip/waveform_primitives.py
import numpy as np
from typing import Sequence, Tuple

from .constants import QRS_PHASES


# --- Waveform Primitives ---
def half_sine_lobe(n_samples: int, seg_len: float, height: float) -> np.ndarray:
    """Raised half-sine over one segment, sampled at 0, 1, ... n_samples-1 px."""
    if n_samples <= 0 or seg_len <= 1e-9:
        return np.zeros(max(n_samples, 0))
    t = np.arange(n_samples) / seg_len
    return height * np.sin(t * np.pi)


def qrs_shape(n_samples: int, seg_len: float, amplitude: float) -> np.ndarray:
    """
    Stylized q-R-S complex.

    Each sample takes the level of the phase its fractional position falls in,
    so the complex is a run of flat steps rather than a smooth curve.
    """
    if n_samples <= 0 or seg_len <= 1e-9:
        return np.zeros(max(n_samples, 0))
    frac = np.arange(n_samples) / seg_len
    shape = np.zeros(n_samples)
    lower = 0.0
    for upper, level in QRS_PHASES:
        shape[(frac >= lower) & (frac < upper)] = level
        lower = upper
    return amplitude * shape


def sawtooth_wave(x: np.ndarray, period_px: float, amplitude: float) -> np.ndarray:
    """
    Triangular flutter baseline: amplitude * |phase - 0.5| * 2 * 0.5 above the
    isoelectric line, phase being the position within one flutter cycle.
    """
    if period_px <= 1e-9:
        return np.zeros_like(x, dtype=float)
    phase = np.mod(x, period_px) / period_px
    return amplitude * np.abs(phase - 0.5) * 2 * 0.5


def bounded_random_walk(n_samples: int, step: float, bound: float, rng: np.random.Generator) -> np.ndarray:
    """Each sample is the previous plus U(-step, step), held within +/- bound."""
    walk = np.zeros(max(n_samples, 0))
    if n_samples <= 0:
        return walk
    steps = rng.uniform(-step, step, n_samples)
    level = 0.0
    for i in range(n_samples):
        level = min(bound, max(-bound, level + steps[i]))
        walk[i] = level
    return walk


def spike_template(phases: Sequence[Tuple[float, float]], px_per_sec: float) -> np.ndarray:
    """Conducted QRS-like spike as a run of flat phases, one sample per pixel."""
    levels = []
    for duration_sec, level in phases:
        n = int(np.ceil(max(0.0, duration_sec) * px_per_sec))
        levels.extend([level] * n)
    return np.asarray(levels, dtype=float)


def impulse_train(n_samples: int, onsets: Sequence[float], template: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Place the spike template at each onset (pixel index).

    Returns the impulse signal and a boolean mask of the samples it covers, so
    callers can compose it with an independently generated baseline.
    Windows running past the end of the strip are cut off.
    """
    signal = np.zeros(max(n_samples, 0))
    mask = np.zeros(max(n_samples, 0), dtype=bool)
    width = len(template)
    for onset in onsets:
        start = int(np.floor(onset))
        if start >= n_samples or width == 0:
            continue
        lo = max(0, start)
        hi = min(n_samples, start + width)
        if lo >= hi:
            continue
        signal[lo:hi] = template[lo - start:hi - start]
        mask[lo:hi] = True
    return signal, mask


def compose_with_impulses(baseline: np.ndarray, impulses: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Conducted-spike windows replace the baseline; elsewhere the baseline shows."""
    return np.where(mask, impulses, baseline)
