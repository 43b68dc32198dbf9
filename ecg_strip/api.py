# ecg_strip/api.py
import logging

import numpy as np
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .api_models import CropRequest, StripRequest, ZoomRequest
from .constants import GRID_STYLE, STRIP_HEIGHT_PX
from .projection import crop, path_to_svg, to_path, zoom_window
from .rhythm_logic import compose_strip, list_rhythms
from .time_base import DEFAULT_TIME_BASE, TimeBase, grid_lines

logger = logging.getLogger(__name__)

MAX_GRID_PX = 5000

app = FastAPI()

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _time_base_for(request: StripRequest) -> TimeBase:
    if request.paper_speed_mm_per_sec == DEFAULT_TIME_BASE.paper_speed_mm_per_sec:
        return DEFAULT_TIME_BASE
    return DEFAULT_TIME_BASE.model_copy(update={"paper_speed_mm_per_sec": request.paper_speed_mm_per_sec})


def _rng_for(request: StripRequest):
    return np.random.default_rng(request.seed)


@app.get("/rhythms")
def get_rhythms():
    return [{"id": rhythm_id, "label": label} for rhythm_id, label in list_rhythms()]


@app.post("/generate_strip")
def get_strip(params: StripRequest):
    time_base = _time_base_for(params)
    strip = compose_strip(params.rhythm, time_base, _rng_for(params))
    logger.info("Generated %s strip: %d samples, %d beats", strip.rhythm_id, len(strip.points), len(strip.beats))
    return {
        "rhythm_generated": strip.description,
        "strip_width": time_base.strip_width,
        "px_per_sec": time_base.px_per_sec,
        "points": strip.points.tolist(),
        "path": path_to_svg(to_path(strip.points, time_base)),
        "beat_onsets": strip.beat_onsets,
    }


@app.post("/zoom")
def get_zoom(params: ZoomRequest):
    time_base = _time_base_for(params)
    strip = compose_strip(params.rhythm, time_base, _rng_for(params))
    window = zoom_window(strip.points, params.seconds, time_base)
    return {
        "rhythm_generated": strip.description,
        "start_x": window.start_x,
        "end_x": window.end_x,
        "view_width": window.view_width,
        "view_height": window.view_height,
        "points": window.points.tolist(),
        "path": path_to_svg(window.path),
    }


@app.post("/crop")
def post_crop(params: CropRequest):
    cropped = crop(params.points, params.start_x, params.end_x)
    return {"points": cropped.tolist(), "path": path_to_svg(to_path(cropped))}


@app.get("/grid")
def get_grid(width: float = Query(DEFAULT_TIME_BASE.strip_width), height: float = Query(STRIP_HEIGHT_PX)):
    if not (0 < width <= MAX_GRID_PX and 0 < height <= MAX_GRID_PX):
        raise HTTPException(status_code=400, detail=f"Grid dimensions must be within (0, {MAX_GRID_PX}] px")
    lines = grid_lines(width, height)
    return {"lines": [line._asdict() for line in lines], "style": GRID_STYLE}
