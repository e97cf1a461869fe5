# Application settings

# --- Pipeline Parameters ---
PIPELINE_DEFAULTS = {
    # Convolution caps. Cost is O(w * h * k^2) so sizes are capped before
    # any kernel is built.
    "max_box_blur_size": 15,
    "max_gaussian_radius": 10,
    "max_sharpen_passes": 3,

    # Detail kernels: scale applied to the slider amount before it is added
    # to the centre weight of the unsharp kernel.
    "texture_scale": 0.05,
    "clarity_scale": 0.08,

    # Tone zones (luma thresholds on the 0-255 scale)
    "highlight_luma": 192.0,
    "shadow_luma": 64.0,

    # Color grading
    "grading_intensity": 2.0,
    "temperature_scale": 30.0,
    "tint_scale": 20.0,

    # Log a warning when a single pipeline pass takes longer than this
    "slow_pass_warning_ms": 500,
}

# --- Worker Settings ---
WORKER_DEFAULTS = {
    "timeout_seconds": 5.0,
    "min_request_interval_seconds": 0.1,  # throttle between dispatches
    "thread_name_prefix": "pixel-pipeline",
}

# --- History ---
HISTORY_DEFAULTS = {
    "max_size": 50,
}

# --- IO Defaults ---
IO_DEFAULTS = {
    "default_png_compression": 6,
}

# --- Logging ---
LOGGING_LEVEL = "INFO" # Options: DEBUG, INFO, WARNING, ERROR
