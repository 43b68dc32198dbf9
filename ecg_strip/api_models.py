# ecg_strip/api_models.py
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from .constants import DEFAULT_BEAT_PARAMS, PAPER_SPEED_MM_PER_SEC, ZOOM_DEFAULT_SECONDS


class RhythmId(str, Enum):
    SINUS = "sinus"
    SINUS_BRADY = "sinus_brady"
    SINUS_TACHY = "sinus_tachy"
    AFLUTTER = "aflutter"
    AFIB = "afib"
    SINUS_PAC = "sinus_pac"
    PSVT = "psvt"
    JUNCTIONAL = "junctional"
    FIRST_DEGREE = "firstdeg"
    STEMI_INFERIOR = "stemi_inferior"
    NSTEMI = "nstemi"


class BeatParams(BaseModel):
    # Not range-checked: the beat sampler clamps degenerate values itself.
    amplitude: float = Field(DEFAULT_BEAT_PARAMS["amplitude"], description="R-wave height in pixels.")
    pr_interval_sec: float = Field(DEFAULT_BEAT_PARAMS["pr_interval_sec"], description="P onset to QRS onset.")
    qrs_duration_sec: float = Field(DEFAULT_BEAT_PARAMS["qrs_duration_sec"])
    st_deviation: float = Field(DEFAULT_BEAT_PARAMS["st_deviation"], description="ST offset from baseline; positive is elevation, negative is depression.")
    t_polarity: float = Field(DEFAULT_BEAT_PARAMS["t_polarity"], description="+1 upright T wave, -1 inverted.")


class StripRequest(BaseModel):
    rhythm: RhythmId = Field(RhythmId.SINUS)
    paper_speed_mm_per_sec: float = Field(PAPER_SPEED_MM_PER_SEC, gt=0, le=100, description="25 mm/s standard, 50 mm/s for expanded strips.")
    seed: Optional[int] = Field(None, ge=0, description="Seed for the irregular-rhythm generators. None draws fresh randomness.")


class ZoomRequest(StripRequest):
    seconds: float = Field(ZOOM_DEFAULT_SECONDS, gt=0, le=6.0, description="Length of the magnified window in seconds.")


class CropRequest(BaseModel):
    points: List[Tuple[float, float]] = Field(default_factory=list)
    start_x: float = Field(..., ge=0)
    end_x: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_x < self.start_x:
            raise ValueError("end_x must not be less than start_x")
        return self
