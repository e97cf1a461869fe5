# Raster import/export using Pillow
import os
from typing import Optional

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import settings
from ..processing.raster import Raster
from ..utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp")
# Formats that cannot store an alpha channel
_OPAQUE_FORMATS = {"JPEG", "BMP"}


def load_raster(file_path) -> Optional[Raster]:
    """Loads an image file as an RGBA Raster.

    EXIF orientation is applied; any mode (grayscale, palette, RGB, ...) is
    converted to RGBA.

    Args:
        file_path (str): The path to the image file.

    Returns:
        Raster, or None if the file is missing or cannot be decoded.
    """
    if not isinstance(file_path, (str, os.PathLike)) or not str(file_path):
        logger.error("Invalid file path provided: %r", file_path)
        return None

    if not os.path.isfile(file_path):
        logger.error("File not found at '%s'", file_path)
        return None

    try:
        with Image.open(file_path) as img:
            oriented = ImageOps.exif_transpose(img)
            if oriented.mode != "RGBA":
                logger.debug("Converting image from mode '%s' to 'RGBA'", oriented.mode)
                oriented = oriented.convert("RGBA")
            pixels = np.array(oriented, dtype=np.uint8)
    except UnidentifiedImageError:
        logger.error("Cannot identify image file '%s'", file_path)
        return None
    except OSError as e:
        logger.error("Failed to read '%s': %s", file_path, e)
        return None

    logger.info("Loaded %dx%d image from '%s'", pixels.shape[1], pixels.shape[0], file_path)
    return Raster(pixels)


def save_raster(raster: Raster, file_path, quality: int = 95) -> bool:
    """Saves a Raster to file_path; the format follows the extension.

    Formats without alpha (JPEG, BMP) get the colour channels only.

    Returns:
        True on success, False on failure.
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    if not os.path.isdir(directory):
        logger.error("Output directory does not exist: '%s'", directory)
        return False

    img = Image.fromarray(np.ascontiguousarray(raster.pixels))
    try:
        fmt = Image.registered_extensions().get(os.path.splitext(str(file_path))[1].lower())
        if fmt is None:
            logger.error("Unsupported output format for '%s'", file_path)
            return False

        save_kwargs = {}
        if fmt in _OPAQUE_FORMATS:
            img = img.convert("RGB")
        if fmt in ("JPEG", "WEBP"):
            save_kwargs["quality"] = quality
        elif fmt == "PNG":
            save_kwargs["compress_level"] = settings.IO_DEFAULTS["default_png_compression"]

        img.save(file_path, format=fmt, **save_kwargs)
    except (OSError, ValueError) as e:
        logger.error("Failed to save '%s': %s", file_path, e)
        return False
    finally:
        img.close()

    logger.info("Saved %dx%d image to '%s'", raster.width, raster.height, file_path)
    return True
