# ecg_strip/rhythm_logic.py
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .api_models import BeatParams, RhythmId
from .beat_generation import BeatLandmarks, beat_landmarks, sample_beat
from .constants import (
    LEAD_IN_PX, TRAILING_MARGIN_PX, SINUS_PARAMS, PAC_PARAMS, PSVT_PARAMS,
    JUNCTIONAL_PARAMS, FIRST_DEGREE_AV_BLOCK_PARAMS, STEMI_PARAMS, NSTEMI_PARAMS,
    SINUS_RATE_BPM, SINUS_BRADY_RATE_BPM, SINUS_TACHY_RATE_BPM, PSVT_RATE_BPM,
    PSVT_DENSITY_SCALE, JUNCTIONAL_RATE_BPM, PAC_BEAT_INDEX, PAC_EARLY_SEC,
    FLUTTER_PARAMS, FLUTTER_CONDUCTED_SPIKE, AFIB_PARAMS, AFIB_CONDUCTED_SPIKE,
    AFIB_RR_WIDTH_SCALE
)
from .time_base import DEFAULT_TIME_BASE, TimeBase
from .waveform_primitives import (
    sawtooth_wave, bounded_random_walk, spike_template, impulse_train,
    compose_with_impulses
)

logger = logging.getLogger(__name__)

ParamsLike = Union[BeatParams, Dict[str, float]]


# --- Strip Containers ---
class PlacedBeat:
    def __init__(self, landmarks: BeatLandmarks, beat_type: str = "sinus"):
        self.landmarks = landmarks
        self.beat_type = beat_type

    @property
    def onset(self) -> float:
        return self.landmarks.p_onset

    def __repr__(self): return f"PlacedBeat(x={self.onset:.1f}, type='{self.beat_type}')"


class Strip(NamedTuple):
    points: np.ndarray
    beats: List[PlacedBeat]
    rhythm_id: Optional[str] = None
    description: Optional[str] = None

    @property
    def beat_onsets(self) -> List[float]:
        return [beat.onset for beat in self.beats]


def _empty_points() -> np.ndarray:
    return np.zeros((0, 2))


def _flat_baseline(time_base: TimeBase) -> np.ndarray:
    x = np.arange(int(np.floor(time_base.strip_width)) + 1, dtype=float)
    return np.column_stack((x, np.zeros_like(x)))


def _beat_limit(time_base: TimeBase) -> float:
    return time_base.strip_width - TRAILING_MARGIN_PX


def _assemble(chunks: Sequence[np.ndarray], strip_width: float) -> np.ndarray:
    """
    Join per-beat sample runs into one strip.

    A run that starts before the end of the runs already placed cuts their
    tails, so x never decreases. Samples past the strip width are dropped.
    """
    kept: List[np.ndarray] = []
    for chunk in chunks:
        if chunk.size == 0:
            continue
        x0 = chunk[0, 0]
        while kept and kept[-1][-1, 0] >= x0:
            trimmed = kept[-1][kept[-1][:, 0] < x0]
            if trimmed.size == 0:
                kept.pop()
            else:
                kept[-1] = trimmed
                break
        kept.append(chunk)
    if not kept:
        return _empty_points()
    points = np.concatenate(kept)
    return points[points[:, 0] <= strip_width]


# --- Tiling Composers ---
def compose_regular(
    rate_bpm: float,
    beat_params: Optional[ParamsLike] = None,
    density_scale: float = 1.0,
    beat_type: str = "sinus",
    time_base: TimeBase = DEFAULT_TIME_BASE,
) -> Strip:
    """
    Identical beats at a fixed RR interval of 60 / rate_bpm seconds.

    density_scale shrinks or stretches each complex on paper without changing
    the beat spacing (used for the narrow, fast PSVT complexes).
    """
    if rate_bpm <= 0:
        logger.warning("Non-positive rate %s bpm, returning flat baseline", rate_bpm)
        return Strip(_flat_baseline(time_base), [])

    px_per_sec = time_base.px_per_sec
    rr_px = (60.0 / rate_bpm) * px_per_sec
    beat_density = px_per_sec * max(0.0, density_scale)
    limit = _beat_limit(time_base)

    chunks = []
    beats = []
    cursor = LEAD_IN_PX
    while cursor < limit:
        chunks.append(sample_beat(cursor, beat_density, beat_params))
        beats.append(PlacedBeat(beat_landmarks(cursor, beat_density, beat_params), beat_type))
        cursor += rr_px

    logger.debug("Placed %d %s beats at RR %.1f px", len(beats), beat_type, rr_px)
    return Strip(_assemble(chunks, time_base.strip_width), beats)


def compose_premature(
    rate_bpm: float,
    beat_params: Optional[ParamsLike] = None,
    premature_index: int = PAC_BEAT_INDEX,
    early_sec: float = PAC_EARLY_SEC,
    time_base: TimeBase = DEFAULT_TIME_BASE,
) -> Strip:
    """
    Regular tiling with one ectopic beat pulled early_sec ahead of schedule.

    The early beat never starts before the previous beat has finished, nor
    before x = 0. The following beats keep the underlying schedule.
    """
    if rate_bpm <= 0:
        logger.warning("Non-positive rate %s bpm, returning flat baseline", rate_bpm)
        return Strip(_flat_baseline(time_base), [])

    px_per_sec = time_base.px_per_sec
    rr_px = (60.0 / rate_bpm) * px_per_sec
    limit = _beat_limit(time_base)

    chunks = []
    beats = []
    cursor = LEAD_IN_PX
    beat_index = 0
    previous_end = 0.0
    while cursor < limit:
        start = cursor
        beat_type = "sinus"
        if beat_index == premature_index:
            start = max(cursor - max(0.0, early_sec) * px_per_sec, previous_end, 0.0)
            beat_type = "pac"
        marks = beat_landmarks(start, px_per_sec, beat_params)
        chunks.append(sample_beat(start, px_per_sec, beat_params))
        beats.append(PlacedBeat(marks, beat_type))
        previous_end = marks.beat_end
        cursor += rr_px
        beat_index += 1

    logger.debug("Premature beat #%d placed among %d beats", premature_index, len(beats))
    return Strip(_assemble(chunks, time_base.strip_width), beats)


# --- Irregular Generators ---
def _conducted_beats(onsets: Sequence[float], width_px: int, beat_type: str) -> List[PlacedBeat]:
    beats = []
    for onset in onsets:
        end = onset + width_px
        beats.append(PlacedBeat(BeatLandmarks(onset, onset, onset, end, end, end, end, 0.0), beat_type))
    return beats


def flutter_period_px(flutter_rate_bpm: float, time_base: TimeBase = DEFAULT_TIME_BASE) -> float:
    if flutter_rate_bpm <= 0:
        return 0.0
    return (60.0 / flutter_rate_bpm) * time_base.px_per_sec


def flutter_baseline(
    flutter_rate_bpm: float = FLUTTER_PARAMS["flutter_rate_bpm"],
    amplitude: float = FLUTTER_PARAMS["amplitude"],
    time_base: TimeBase = DEFAULT_TIME_BASE,
) -> np.ndarray:
    """Sawtooth F-wave trace across the strip, without conducted complexes."""
    x = np.arange(int(np.ceil(time_base.strip_width)), dtype=float)
    y = sawtooth_wave(x, flutter_period_px(flutter_rate_bpm, time_base), amplitude)
    return np.column_stack((x, y))


def compose_flutter(
    flutter_rate_bpm: float = FLUTTER_PARAMS["flutter_rate_bpm"],
    amplitude: float = FLUTTER_PARAMS["amplitude"],
    conduction_ratio: int = FLUTTER_PARAMS["conduction_ratio"],
    spike_phases: Sequence[Tuple[float, float]] = FLUTTER_CONDUCTED_SPIKE,
    time_base: TimeBase = DEFAULT_TIME_BASE,
) -> Strip:
    """
    Atrial flutter with fixed AV conduction.

    The sawtooth baseline and the conducted-spike train are generated
    independently; every conduction_ratio-th flutter cycle opens a spike
    window that replaces the baseline there.
    """
    baseline = flutter_baseline(flutter_rate_bpm, amplitude, time_base)
    n_samples = len(baseline)
    period = flutter_period_px(flutter_rate_bpm, time_base)
    if period <= 0:
        logger.warning("Non-positive flutter rate %s, no conducted beats", flutter_rate_bpm)
        return Strip(baseline, [])

    ratio = max(1, int(conduction_ratio))
    limit = _beat_limit(time_base)
    onsets = []
    cycle = 0
    while cycle * period < limit:
        onsets.append(cycle * period)
        cycle += ratio

    template = spike_template(spike_phases, time_base.px_per_sec)
    impulses, mask = impulse_train(n_samples, onsets, template)
    baseline[:, 1] = compose_with_impulses(baseline[:, 1], impulses, mask)

    logger.debug("Flutter period %.1f px, %d conducted beats at %d:1", period, len(onsets), ratio)
    return Strip(baseline, _conducted_beats(onsets, len(template), "flutter_conducted"))


def fibrillatory_baseline(
    step: float = AFIB_PARAMS["step"],
    bound: float = AFIB_PARAMS["bound"],
    time_base: TimeBase = DEFAULT_TIME_BASE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Bounded random-walk f-wave trace with no discrete P waves."""
    if rng is None:
        rng = np.random.default_rng()
    x = np.arange(int(np.ceil(time_base.strip_width)), dtype=float)
    y = bounded_random_walk(len(x), step, bound, rng)
    return np.column_stack((x, y))


def compose_fibrillation(
    step: float = AFIB_PARAMS["step"],
    bound: float = AFIB_PARAMS["bound"],
    rr_range: Tuple[float, float] = AFIB_PARAMS["rr_range"],
    spike_phases: Sequence[Tuple[float, float]] = AFIB_CONDUCTED_SPIKE,
    time_base: TimeBase = DEFAULT_TIME_BASE,
    rng: Optional[np.random.Generator] = None,
) -> Strip:
    """
    Atrial fibrillation: wandering baseline plus an irregularly irregular
    ventricular response, each RR drawn uniformly from rr_range scaled to the
    strip width.
    """
    if rng is None:
        rng = np.random.default_rng()
    baseline = fibrillatory_baseline(step, bound, time_base, rng)
    n_samples = len(baseline)

    rr_low, rr_high = sorted(rr_range)
    rr_scale = time_base.strip_width * AFIB_RR_WIDTH_SCALE
    if rr_low <= 0 or rr_scale <= 0:
        logger.warning("Degenerate AFib RR range %s, no conducted beats", rr_range)
        return Strip(baseline, [])

    limit = _beat_limit(time_base)
    onsets = []
    cursor = 0.0
    while cursor < limit:
        onsets.append(cursor)
        cursor += rng.uniform(rr_low, rr_high) * rr_scale

    template = spike_template(spike_phases, time_base.px_per_sec)
    impulses, mask = impulse_train(n_samples, onsets, template)
    baseline[:, 1] = compose_with_impulses(baseline[:, 1], impulses, mask)

    logger.debug("AFib strip with %d conducted beats", len(onsets))
    return Strip(baseline, _conducted_beats(onsets, len(template), "afib_conducted"))


# --- Rhythm Dispatch ---
class RhythmConfig(NamedTuple):
    composer: Callable[..., Strip]
    params: Dict[str, Any]
    label: str
    stochastic: bool = False  # composer takes an rng


# Static and read-only: one entry per RhythmId.
RHYTHM_TABLE: Dict[RhythmId, RhythmConfig] = {
    RhythmId.SINUS: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_RATE_BPM, "beat_params": SINUS_PARAMS},
        "Normal Sinus Rhythm (~60-100 bpm)"),
    RhythmId.SINUS_BRADY: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_BRADY_RATE_BPM, "beat_params": SINUS_PARAMS},
        "Sinus Bradycardia (<60 bpm)"),
    RhythmId.SINUS_TACHY: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_TACHY_RATE_BPM, "beat_params": SINUS_PARAMS},
        "Sinus Tachycardia (>100 bpm)"),
    RhythmId.AFLUTTER: RhythmConfig(
        compose_flutter, dict(FLUTTER_PARAMS),
        "Atrial Flutter with 4:1 block"),
    RhythmId.AFIB: RhythmConfig(
        compose_fibrillation, dict(AFIB_PARAMS),
        "Atrial Fibrillation (irregularly irregular)", stochastic=True),
    RhythmId.SINUS_PAC: RhythmConfig(
        compose_premature, {"rate_bpm": SINUS_RATE_BPM, "beat_params": PAC_PARAMS,
                            "premature_index": PAC_BEAT_INDEX, "early_sec": PAC_EARLY_SEC},
        "PACs on underlying sinus rhythm"),
    RhythmId.PSVT: RhythmConfig(
        compose_regular, {"rate_bpm": PSVT_RATE_BPM, "beat_params": PSVT_PARAMS,
                          "density_scale": PSVT_DENSITY_SCALE, "beat_type": "svt_beat"},
        "Paroxysmal SVT (regular narrow-complex tachycardia)"),
    RhythmId.JUNCTIONAL: RhythmConfig(
        compose_regular, {"rate_bpm": JUNCTIONAL_RATE_BPM, "beat_params": JUNCTIONAL_PARAMS,
                          "beat_type": "junctional"},
        "Junctional rhythm (~40-60 bpm)"),
    RhythmId.FIRST_DEGREE: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_RATE_BPM, "beat_params": FIRST_DEGREE_AV_BLOCK_PARAMS},
        "First-degree AV block (PR > 0.20 s)"),
    RhythmId.STEMI_INFERIOR: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_RATE_BPM, "beat_params": STEMI_PARAMS},
        "STEMI (contiguous ST elevation)"),
    RhythmId.NSTEMI: RhythmConfig(
        compose_regular, {"rate_bpm": SINUS_RATE_BPM, "beat_params": NSTEMI_PARAMS},
        "NSTEMI or ischemia (ST depression / T inversion)"),
}


def resolve_rhythm(rhythm_id: Union[RhythmId, str, None]) -> RhythmId:
    try:
        return RhythmId(rhythm_id)
    except ValueError:
        logger.warning("Unknown rhythm id %r, falling back to normal sinus", rhythm_id)
        return RhythmId.SINUS


def compose_strip(
    rhythm_id: Union[RhythmId, str, None],
    time_base: TimeBase = DEFAULT_TIME_BASE,
    rng: Optional[np.random.Generator] = None,
) -> Strip:
    key = resolve_rhythm(rhythm_id)
    config = RHYTHM_TABLE[key]
    kwargs = dict(config.params, time_base=time_base)
    if config.stochastic:
        kwargs["rng"] = rng
    strip = config.composer(**kwargs)
    return strip._replace(rhythm_id=key.value, description=config.label)


def generate_strip(
    rhythm_id: Union[RhythmId, str, None],
    time_base: TimeBase = DEFAULT_TIME_BASE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Full-strip (x, amplitude) samples for one rhythm."""
    return compose_strip(rhythm_id, time_base, rng).points


def list_rhythms() -> List[Tuple[str, str]]:
    return [(rhythm.value, config.label) for rhythm, config in RHYTHM_TABLE.items()]
