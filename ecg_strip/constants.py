# ecg_strip/constants.py

# --- Paper / Time-Base Constants ---
SMALL_BOX_PX = 5                  # pixels per 1 mm minor box
PAPER_SPEED_MM_PER_SEC = 25.0     # standard paper speed
STRIP_SECONDS = 6.0
STRIP_HEIGHT_PX = 180
BASELINE_PX = 90                  # screen y of the isoelectric line
BOXES_PER_MAJOR = 5               # small boxes per big box

# Renderer conventions for the ruled background
GRID_STYLE = {
    "major": {"stroke_width": 1.2, "stroke_opacity": 0.5},
    "minor": {"stroke_width": 0.4, "stroke_opacity": 0.25},
    "group_opacity": 0.6,
}

# --- Strip Placement Constants ---
LEAD_IN_PX = 10.0          # first beat onset
TRAILING_MARGIN_PX = 10.0  # no beat may start inside this margin
SAMPLE_STEP_PX = 1.0       # one sample per pixel

# --- Beat Segment Durations (seconds) ---
P_WAVE_SEC = 0.08
ST_SEGMENT_SEC = 0.08
T_WAVE_SEC = 0.16
T_RETURN_SEC = 0.04

# Lobe heights relative to the beat amplitude
P_WAVE_HEIGHT = 0.25
T_WAVE_HEIGHT = 0.40

# QRS phases: (end fraction of the complex, multiple of amplitude)
QRS_PHASES = (
    (0.15, -0.3),  # q
    (0.50, 1.0),   # R
    (0.85, -0.4),  # S
    (1.00, 0.0),   # J point back to baseline
)

# --- Beat Morphology Definitions ---
DEFAULT_BEAT_PARAMS = {
    "amplitude": 22.0, "pr_interval_sec": 0.16, "qrs_duration_sec": 0.08,
    "st_deviation": 0.0, "t_polarity": 1.0,
}

SINUS_PARAMS = DEFAULT_BEAT_PARAMS.copy()

PAC_PARAMS = SINUS_PARAMS.copy()
PAC_PARAMS.update({"pr_interval_sec": 0.14})

PSVT_PARAMS = SINUS_PARAMS.copy()
PSVT_PARAMS.update({"amplitude": 18.0, "pr_interval_sec": 0.10, "qrs_duration_sec": 0.06})

JUNCTIONAL_PARAMS = SINUS_PARAMS.copy()
JUNCTIONAL_PARAMS.update({"amplitude": 16.0, "pr_interval_sec": 0.06, "t_polarity": -1.0})

FIRST_DEGREE_AV_BLOCK_PARAMS = SINUS_PARAMS.copy()
FIRST_DEGREE_AV_BLOCK_PARAMS.update({"pr_interval_sec": 0.30})  # P end to QRS onset = 0.22 s

STEMI_PARAMS = SINUS_PARAMS.copy()
STEMI_PARAMS.update({"st_deviation": 6.0})   # elevation

NSTEMI_PARAMS = SINUS_PARAMS.copy()
NSTEMI_PARAMS.update({"st_deviation": -3.0, "t_polarity": -1.0})  # depression + T inversion

# --- Rate Constants (bpm) ---
SINUS_RATE_BPM = 75.0
SINUS_BRADY_RATE_BPM = 48.0
SINUS_TACHY_RATE_BPM = 120.0
PSVT_RATE_BPM = 150.0
PSVT_DENSITY_SCALE = 0.7       # compresses each complex on paper
JUNCTIONAL_RATE_BPM = 60.0

# --- Premature Atrial Complex ---
PAC_BEAT_INDEX = 2
PAC_EARLY_SEC = 0.30

# --- Conducted Spike Template (flutter / fibrillation) ---
# (duration in seconds, amplitude)
FLUTTER_CONDUCTED_SPIKE = ((0.02, -4.0), (0.03, 20.0), (0.03, -6.0))
AFIB_CONDUCTED_SPIKE = ((0.02, -4.0), (0.03, 18.0), (0.03, -6.0))

# --- Atrial Flutter ---
FLUTTER_PARAMS = {
    "flutter_rate_bpm": 300.0,
    "amplitude": 18.0,
    "conduction_ratio": 4,     # 4:1 block
}

# --- Atrial Fibrillation ---
AFIB_PARAMS = {
    "step": 1.2,                # max baseline change per sample
    "bound": 8.0,               # baseline wander limit
    "rr_range": (0.5, 1.1),     # fraction of AFIB_RR_WIDTH_SCALE * strip width
}
AFIB_RR_WIDTH_SCALE = 0.2

# --- Magnified Window Policy ---
ZOOM_START_FRACTION = 0.32
ZOOM_DEFAULT_SECONDS = 1.2
ZOOM_OVERSIZE = 1.4
ZOOM_MIN_VIEW_WIDTH_PX = 400
