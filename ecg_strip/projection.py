# ecg_strip/projection.py
from typing import Iterable, List, NamedTuple, Sequence, Union

import numpy as np

from .constants import (
    ZOOM_START_FRACTION, ZOOM_DEFAULT_SECONDS, ZOOM_OVERSIZE, ZOOM_MIN_VIEW_WIDTH_PX
)
from .time_base import DEFAULT_TIME_BASE, TimeBase

PointsLike = Union[np.ndarray, Sequence[Sequence[float]]]


class PathCommand(NamedTuple):
    op: str   # "M" move or "L" line
    x: float
    y: float


class ZoomWindow(NamedTuple):
    points: np.ndarray
    path: List[PathCommand]
    start_x: float
    end_x: float
    view_width: float
    view_height: float


def _as_points(points: PointsLike) -> np.ndarray:
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return np.zeros((0, 2))
    return arr.reshape(-1, 2)


def crop(points: PointsLike, start_x: float, end_x: float) -> np.ndarray:
    """
    Samples with start_x <= x <= end_x, translated so the first kept sample
    sits at x = 0. Samples are filtered, never resampled.
    """
    arr = _as_points(points)
    if arr.size == 0 or end_x < start_x:
        return np.zeros((0, 2))
    kept = arr[(arr[:, 0] >= start_x) & (arr[:, 0] <= end_x)].copy()
    if kept.size:
        kept[:, 0] -= kept[0, 0]
    return kept


def to_path(points: PointsLike, time_base: TimeBase = DEFAULT_TIME_BASE) -> List[PathCommand]:
    """One move to the first sample, then a line to every following sample, in screen y."""
    arr = _as_points(points)
    commands = []
    for idx, (x, amplitude) in enumerate(arr):
        commands.append(PathCommand("M" if idx == 0 else "L", float(x), float(time_base.baseline_px - amplitude)))
    return commands


def path_to_svg(commands: Iterable[PathCommand]) -> str:
    return " ".join(f"{op}{x:g},{y:g}" for op, x, y in commands)


def zoom_window(
    points: PointsLike,
    seconds: float = ZOOM_DEFAULT_SECONDS,
    time_base: TimeBase = DEFAULT_TIME_BASE,
) -> ZoomWindow:
    """Default magnified view: from 32% of the strip, `seconds` long, drawn on a 1.4x oversized canvas."""
    start_x = time_base.strip_width * ZOOM_START_FRACTION
    end_x = start_x + seconds * time_base.px_per_sec
    view_width = max(ZOOM_MIN_VIEW_WIDTH_PX, seconds * time_base.px_per_sec * ZOOM_OVERSIZE)
    cropped = crop(points, start_x, end_x)
    return ZoomWindow(cropped, to_path(cropped, time_base), start_x, end_x,
                      view_width, time_base.strip_height_px)
