# ecg_strip/time_base.py
from typing import List, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    SMALL_BOX_PX, PAPER_SPEED_MM_PER_SEC, STRIP_SECONDS, STRIP_HEIGHT_PX,
    BASELINE_PX, BOXES_PER_MAJOR
)


class TimeBase(BaseModel):
    """
    Coordinate system shared by every generator.

    x positions are elapsed seconds * px_per_sec. Amplitudes are deviations
    from the isoelectric line in the same pixel unit, positive upward; the
    screen y of an amplitude is baseline_px - amplitude.
    """
    model_config = ConfigDict(frozen=True)

    small_box_px: float = Field(SMALL_BOX_PX, gt=0, description="Pixels per 1 mm minor box.")
    paper_speed_mm_per_sec: float = Field(PAPER_SPEED_MM_PER_SEC, gt=0)
    strip_seconds: float = Field(STRIP_SECONDS, gt=0)
    baseline_px: float = Field(BASELINE_PX)
    strip_height_px: float = Field(STRIP_HEIGHT_PX, gt=0)

    @property
    def px_per_sec(self) -> float:
        return self.small_box_px * self.paper_speed_mm_per_sec

    @property
    def strip_width(self) -> float:
        return self.px_per_sec * self.strip_seconds

    def seconds_to_px(self, seconds: float) -> float:
        return seconds * self.px_per_sec

    def px_to_seconds(self, px: float) -> float:
        return px / self.px_per_sec


DEFAULT_TIME_BASE = TimeBase()


class GridLine(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float
    major: bool


def grid_lines(width: float, height: float, time_base: TimeBase = DEFAULT_TIME_BASE) -> List[GridLine]:
    """
    Ruled ECG paper: vertical lines first, then horizontal, one per minor box.
    Every BOXES_PER_MAJOR-th line (counting from 0) is a major line.
    """
    step = time_base.small_box_px
    lines: List[GridLine] = []
    if width < 0 or height < 0:
        return lines

    n_vertical = int(width // step)
    for i in range(n_vertical + 1):
        x = i * step
        lines.append(GridLine(x, 0.0, x, float(height), i % BOXES_PER_MAJOR == 0))

    n_horizontal = int(height // step)
    for j in range(n_horizontal + 1):
        y = j * step
        lines.append(GridLine(0.0, y, float(width), y, j % BOXES_PER_MAJOR == 0))

    return lines
