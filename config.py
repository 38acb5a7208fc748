"""
Image Cropper Pro v1.2.0 - Configuration Module
===============================================
Centralized configuration and constants
"""

from pathlib import Path

# === APPLICATION INFO ===
APP_VERSION = "1.2.0"
APP_NAME = "Image Cropper Pro"
APP_AUTHOR = "Marynyuk Andriy"
APP_LICENSE = "Proprietary"
APP_REPO = "https://github.com/MaanAndrii"

# === FILE SETTINGS ===
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MB
MAX_FILENAME_LENGTH = 255
MAX_IMAGES = 10
SUPPORTED_INPUT_FORMATS = ['.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp']
DEFAULT_OUTPUT_FORMAT = 'PNG'
EXPORT_PREFIX = "cropped"

# Extension -> Pillow format used when re-encoding the crop
OUTPUT_FORMAT_BY_EXT = {
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
    '.webp': 'WEBP',
    '.png': 'PNG',
}

MIME_BY_FORMAT = {
    'JPEG': 'image/jpeg',
    'WEBP': 'image/webp',
    'PNG': 'image/png',
}

# === IMAGE PROCESSING ===
MAX_IMAGE_DIMENSION = 20000
THUMBNAIL_SIZE = (300, 300)
PROXY_IMAGE_WIDTH = 700
EXPORT_QUALITY = 95

# === CROP ===
MIN_CROP_DIMENSION = 10
# Relative ratio drift tolerated from the cropper widget before a warning
RATIO_TOLERANCE = 0.02
MIN_ZOOM = 1.0
MAX_ZOOM = 3.0
ZOOM_STEP = 0.1

# === ASPECT RATIOS ===
# None -> free-form, "original" -> source ratio, float -> fixed ratio
ASPECT_RATIOS = {
    "Free-form": None,
    "Original": "original",
    "1:1 (Square)": 1.0,
    "16:9": 16 / 9,
    "4:3": 4 / 3,
    "3:2": 3 / 2,
    "9:16 (Portrait)": 9 / 16,
}

# === PERFORMANCE ===
EXPORT_WORKERS = 2
MEASURE_WORKERS = 2

# === UI ===
GRID_COLUMNS = 4
HISTORY_DISPLAY_LIMIT = 20

# === PATHS ===
def get_project_root() -> Path:
    """Get project root directory"""
    return Path(__file__).parent

# === LOGGING ===
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL = 'INFO'
LOG_FILE = 'cropper.log'
