# Background matting by alpha threshold
import numpy as np


def threshold_white(raster, t):
    """Zero the alpha of every pixel whose R, G and B are all above t."""
    rgb = raster.rgb
    raster.alpha[np.all(rgb > t, axis=-1)] = 0
    return raster


def threshold_black(raster, t):
    """Zero the alpha of every pixel whose R, G and B are all below t."""
    rgb = raster.rgb
    raster.alpha[np.all(rgb < t, axis=-1)] = 0
    return raster


def white_cutoff(slider):
    """Cutoff for the white-background slider: 0 keeps everything, larger values eat into lighter grays."""
    return 255.0 - float(slider)
