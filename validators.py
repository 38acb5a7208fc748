"""
Image Cropper Pro v1.2 - Validation Module
==========================================
Input validation, sanitization and the crop error taxonomy
"""

import math
import os
import re
from pathlib import Path
from PIL import Image
import config
from logger import get_logger

logger = get_logger(__name__)

class ValidationError(Exception):
    """Custom validation error"""
    pass

# === CROP ERRORS ===

class CropError(Exception):
    """Base class for errors raised by the crop core"""
    pass

class ImageNotReady(CropError):
    """Edit requested before the image dimensions were measured"""

    def __init__(self, image_id: str):
        super().__init__(f"Image {image_id} is still loading, try again in a moment")
        self.image_id = image_id

class ImageUnreadable(CropError):
    """Measuring the image failed; retrying will not help"""

    def __init__(self, image_id: str, reason: str):
        super().__init__(f"Image {image_id} could not be read: {reason}")
        self.image_id = image_id
        self.reason = reason

class InvalidRectangle(CropError):
    """No rectangle satisfies the current constraints"""
    pass

class EmptyRegion(CropError):
    """Zero-sized rectangle reached commit"""
    pass

class UnknownImage(CropError):
    """Image id not present in the store"""

    def __init__(self, image_id: str):
        super().__init__(f"Unknown image: {image_id}")
        self.image_id = image_id

class NoActiveSession(CropError):
    """Edit operation issued while no crop session is open"""
    pass

# === FILE VALIDATION ===

def validate_file_path(file_path: str) -> bool:
    """
    Validate that file exists and is accessible

    Raises:
        ValidationError: If file is invalid
    """
    if not file_path:
        raise ValidationError("File path is empty")

    path = Path(file_path)

    if not path.exists():
        raise ValidationError(f"File not found: {file_path}")

    if not path.is_file():
        raise ValidationError(f"Not a file: {file_path}")

    if not os.access(file_path, os.R_OK):
        raise ValidationError(f"File not readable: {file_path}")

    return True

def validate_mime_type(mime_type: str) -> bool:
    """
    Accept any image/* MIME type

    Raises:
        ValidationError: If the type is not an image type
    """
    if not mime_type or not mime_type.lower().startswith("image/"):
        raise ValidationError(f"Not an image: {mime_type or 'unknown type'}")
    return True

def validate_image_file(file_path: str) -> bool:
    """
    Validate image file format and integrity

    Raises:
        ValidationError: If image is invalid
    """
    validate_file_path(file_path)

    # Check extension
    ext = Path(file_path).suffix.lower()
    if ext not in config.SUPPORTED_INPUT_FORMATS:
        raise ValidationError(
            f"Unsupported format: {ext}. "
            f"Supported: {', '.join(config.SUPPORTED_INPUT_FORMATS)}"
        )

    # Check file size
    file_size = os.path.getsize(file_path)
    if file_size > config.MAX_FILE_SIZE:
        size_mb = file_size / (1024 * 1024)
        max_mb = config.MAX_FILE_SIZE / (1024 * 1024)
        raise ValidationError(
            f"File too large: {size_mb:.1f} MB (max: {max_mb:.1f} MB)"
        )

    # Verify image integrity
    try:
        with Image.open(file_path) as img:
            img.verify()
    except Exception as e:
        logger.warning(f"Image check failed for {file_path}: {e}")
        raise ValidationError(f"Corrupted or invalid image: {e}")

    return True

def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing dangerous characters

    Args:
        filename: Original filename

    Returns:
        Safe filename
    """
    if not filename:
        return "unnamed.png"

    # Keep only filename (remove path)
    filename = Path(filename).name

    # Remove dangerous characters
    filename = re.sub(r'[<>:"|?*\x00-\x1f]', '', filename)

    # Replace spaces with underscores
    filename = filename.replace(' ', '_')

    # Limit length
    if len(filename) > config.MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        max_name_len = config.MAX_FILENAME_LENGTH - len(ext)
        filename = name[:max_name_len] + ext

    # Ensure not empty
    if not filename or filename == '.':
        filename = "unnamed.png"

    return filename

def validate_dimensions(width: int, height: int) -> bool:
    """
    Validate measured image dimensions

    Raises:
        ValidationError: If dimensions are invalid
    """
    if width <= 0 or height <= 0:
        raise ValidationError(f"Invalid dimensions: {width}x{height}")

    if width > config.MAX_IMAGE_DIMENSION or height > config.MAX_IMAGE_DIMENSION:
        raise ValidationError(
            f"Dimensions too large: {width}x{height} "
            f"(max: {config.MAX_IMAGE_DIMENSION}px)"
        )

    return True

def validate_finite(name: str, value: float) -> float:
    """
    Reject NaN and infinite numeric input before it reaches the geometry

    Raises:
        InvalidRectangle: If value is not a finite number
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidRectangle(f"{name} must be numeric, got: {value!r}")
    if not math.isfinite(number):
        raise InvalidRectangle(f"{name} must be finite, got: {value!r}")
    return number
