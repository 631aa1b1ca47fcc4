"""
Configuration: service endpoint, timeouts, pool sizes and grid layout.

Every value can be overridden with a GASCALC_* environment variable.
"""

import os


def _env(name, default, cast=str):
    raw = os.environ.get(f"GASCALC_{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        print(f"[CONFIG] Ignoring invalid GASCALC_{name}={raw!r}, using {default!r}")
        return default


# --- Remote calculation service ---
SERVICE_BASE_URL = _env("SERVICE_URL", "http://localhost:3000").rstrip("/")
REQUEST_TIMEOUT_SECONDS = _env("TIMEOUT", 30.0, float)

# --- Calculation policy ---
# auto: batch endpoint first, sequential pipeline when the endpoint is missing
CALCULATION_MODES = ("auto", "batch", "sequential")
CALCULATION_MODE = _env("MODE", "auto")
if CALCULATION_MODE not in CALCULATION_MODES:
    print(f"[CONFIG] Unknown mode {CALCULATION_MODE!r}, falling back to 'auto'")
    CALCULATION_MODE = "auto"

# Per-row tasks of the sequential pipeline
PIPELINE_MAX_WORKERS = _env("MAX_WORKERS", min(8, os.cpu_count() or 4), int)

# --- Grid layout ---
GRID_ROW_COUNT = _env("GRID_ROWS", 20, int)
GRID_COLUMN_COUNT = 7

WELL_INFO_HEADERS = [
    "Well", "Mid-depth (m)", "Wellhead T (K)", "Bottom-hole T (K)", "rg",
    "Pc (MPa)", "Tc (K)", "N2 (%)", "CO2 (%)", "H2S (%)",
]
