# IO package initialization
from .raster_io import (
    load_raster,
    save_raster,
    SUPPORTED_EXTENSIONS,
)

__all__ = [
    'load_raster',
    'save_raster',
    'SUPPORTED_EXTENSIONS',
]
