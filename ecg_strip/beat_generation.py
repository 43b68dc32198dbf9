# ecg_strip/beat_generation.py
import math
from typing import NamedTuple, Optional, Union, Dict

import numpy as np

from .api_models import BeatParams
from .constants import (
    P_WAVE_SEC, ST_SEGMENT_SEC, T_WAVE_SEC, T_RETURN_SEC, P_WAVE_HEIGHT,
    T_WAVE_HEIGHT, SAMPLE_STEP_PX
)
from .waveform_primitives import half_sine_lobe, qrs_shape


class BeatLandmarks(NamedTuple):
    """x positions of the segment boundaries of one beat."""
    p_onset: float
    p_end: float
    qrs_onset: float
    qrs_end: float
    st_end: float
    t_end: float
    beat_end: float
    st_level: float


def _as_params(params: Optional[Union[BeatParams, Dict[str, float]]]) -> BeatParams:
    if params is None:
        return BeatParams()
    if isinstance(params, BeatParams):
        return params
    return BeatParams(**params)


def segment_durations_sec(params: Optional[Union[BeatParams, Dict[str, float]]] = None):
    """
    (P, PR segment, QRS, ST, T + return) durations in seconds.
    Negative or too-short intervals clamp to zero-length segments.
    """
    p = _as_params(params)
    return (
        P_WAVE_SEC,
        max(0.0, p.pr_interval_sec - P_WAVE_SEC),
        max(0.0, p.qrs_duration_sec),
        ST_SEGMENT_SEC,
        T_WAVE_SEC + T_RETURN_SEC,
    )


def beat_duration_sec(params: Optional[Union[BeatParams, Dict[str, float]]] = None) -> float:
    return sum(segment_durations_sec(params))


def beat_landmarks(start_x: float, px_per_sec: float,
                   params: Optional[Union[BeatParams, Dict[str, float]]] = None) -> BeatLandmarks:
    p = _as_params(params)
    px_per_sec = max(0.0, px_per_sec)
    p_len, pr_len, qrs_len, st_len, t_total = (d * px_per_sec for d in segment_durations_sec(p))
    p_end = start_x + p_len
    qrs_onset = p_end + pr_len
    qrs_end = qrs_onset + qrs_len
    st_end = qrs_end + st_len
    t_end = st_end + T_WAVE_SEC * px_per_sec
    beat_end = st_end + t_total
    return BeatLandmarks(start_x, p_end, qrs_onset, qrs_end, st_end, t_end, beat_end, p.st_deviation)


def _segment_count(seg_len: float) -> int:
    # Samples at seg_start + i for every i < seg_len
    if seg_len <= 1e-9:
        return 0
    return int(math.ceil(seg_len / SAMPLE_STEP_PX - 1e-9))


def sample_beat(start_x: float, px_per_sec: float,
                params: Optional[Union[BeatParams, Dict[str, float]]] = None) -> np.ndarray:
    """
    Synthesize one P-QRS-T cycle as an (N, 2) array of (x, amplitude) samples.

    Segments are laid end to end starting exactly at start_x: P wave, PR
    segment, QRS, ST segment, T wave, return to baseline. A closing baseline
    sample sits at the exact beat end, so the span of x equals the summed
    segment durations at the given sampling density. px_per_sec may differ
    from the paper speed to compress or stretch the complexes on paper.
    """
    p = _as_params(params)
    marks = beat_landmarks(start_x, px_per_sec, p)
    px_per_sec = max(0.0, px_per_sec)
    t_len = T_WAVE_SEC * px_per_sec

    segments = (
        # (segment start, segment length, amplitude builder)
        (marks.p_onset, marks.p_end - marks.p_onset,
         lambda n, L: half_sine_lobe(n, L, P_WAVE_HEIGHT * p.amplitude)),
        (marks.p_end, marks.qrs_onset - marks.p_end,
         lambda n, L: np.zeros(n)),
        (marks.qrs_onset, marks.qrs_end - marks.qrs_onset,
         lambda n, L: qrs_shape(n, L, p.amplitude)),
        (marks.qrs_end, marks.st_end - marks.qrs_end,
         lambda n, L: np.full(n, p.st_deviation)),
        (marks.st_end, t_len,
         lambda n, L: half_sine_lobe(n, L, T_WAVE_HEIGHT * p.amplitude * p.t_polarity)),
        (marks.t_end, marks.beat_end - marks.t_end,
         lambda n, L: np.zeros(n)),
    )

    xs = []
    ys = []
    for seg_start, seg_len, build in segments:
        n = _segment_count(seg_len)
        if n == 0:
            continue
        xs.append(seg_start + np.arange(n) * SAMPLE_STEP_PX)
        ys.append(build(n, seg_len / SAMPLE_STEP_PX))

    xs.append(np.array([marks.beat_end]))
    ys.append(np.zeros(1))
    return np.column_stack((np.concatenate(xs), np.concatenate(ys)))
