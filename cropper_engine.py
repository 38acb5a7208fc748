"""
Image Cropper Pro v1.2 - Engine Module
======================================
Pixel work: measuring, thumbnails and rectangular crop export
"""

import concurrent.futures
import io
import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple
from PIL import Image, ImageOps
from translitua import translit
import config
from geometry import ImageDimensions, Rectangle
from logger import get_logger
from validators import validate_dimensions

logger = get_logger(__name__)

# === MEASURING ===
def measure_image(file_path: str) -> ImageDimensions:
    """Natural size after EXIF orientation, as the user sees the image"""
    with Image.open(file_path) as img_temp:
        img = ImageOps.exif_transpose(img_temp)
        width, height = img.size
    validate_dimensions(width, height)
    return ImageDimensions(width, height)

# === FILENAME GENERATION ===
def format_for(name: str) -> str:
    ext = os.path.splitext(name)[1].lower()
    return config.OUTPUT_FORMAT_BY_EXT.get(ext, config.DEFAULT_OUTPUT_FORMAT)

def generate_filename(original_name: str, extension: Optional[str] = None) -> str:
    try:
        name_only, ext = os.path.splitext(os.path.basename(original_name))
        extension = extension or ext.lstrip('.').lower() or "png"
        slug = re.sub(r'[\s\W_]+', '-', translit(name_only).lower()).strip('-') or "image"
        return f"{config.EXPORT_PREFIX}-{slug}.{extension}"
    except Exception:
        return f"{config.EXPORT_PREFIX}-image.{extension or 'png'}"

# === THUMBNAIL ===
def thumbnail_path(file_path: str) -> str:
    return f"{file_path}.thumb.jpg"

def get_thumbnail(file_path: str, size: Tuple[int, int] = None) -> Optional[str]:
    size = size or config.THUMBNAIL_SIZE
    thumb_path = thumbnail_path(file_path)
    try:
        if os.path.exists(thumb_path) and os.path.getmtime(thumb_path) >= os.path.getmtime(file_path):
            return thumb_path
        with Image.open(file_path) as img:
            img = ImageOps.exif_transpose(img).convert('RGB')
            img.thumbnail(size, Image.Resampling.LANCZOS)
            img.save(thumb_path, "JPEG", quality=70, optimize=True)
        return thumb_path
    except Exception as e:
        logger.warning(f"Thumbnail failed for {file_path}: {e}")
        return None

def remove_thumbnail(file_path: str) -> bool:
    thumb_path = thumbnail_path(file_path)
    if not os.path.exists(thumb_path):
        return False
    try:
        os.remove(thumb_path)
        return True
    except OSError as e:
        logger.error(f"Could not remove thumbnail {thumb_path}: {e}")
        return False

# === CROPPING ===
def crop_image(file_path: str, rect: Rectangle, out_fmt: str = None, quality: int = None) -> Tuple[bytes, Dict]:
    """
    Extract `rect` (whole source pixels) from the image at `file_path`

    Returns:
        Tuple of (encoded bytes, stats dict)
    """
    out_fmt = out_fmt or format_for(file_path)
    quality = quality or config.EXPORT_QUALITY
    with Image.open(file_path) as img_temp:
        img = ImageOps.exif_transpose(img_temp)
        exif_data = img.info.get('exif')
        orig_w, orig_h = img.size
        cropped = img.crop(rect.as_box())

    result_bytes = _export_image(cropped, out_fmt, quality, exif_data)
    stats = {
        "orig_res": f"{orig_w}x{orig_h}",
        "new_res": f"{cropped.width}x{cropped.height}",
        "new_size": len(result_bytes),
        "format": out_fmt,
    }
    logger.info(f"Cropped {os.path.basename(file_path)}: {stats['orig_res']} -> {stats['new_res']}")
    return result_bytes, stats

def _export_image(img, fmt, qual, exif):
    if fmt == "JPEG" and img.mode != "RGB":
        bg = Image.new("RGB", img.size, (255, 255, 255))
        rgba = img.convert("RGBA")
        bg.paste(rgba, mask=rgba.split()[3]); img = bg
    elif fmt == "WEBP" and img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")
    buf = io.BytesIO()
    sk = {"format": fmt}
    if exif and fmt in ["JPEG", "WEBP"]: sk['exif'] = exif
    if fmt == "JPEG": sk.update({"quality": qual, "optimize": True, "subsampling": 0})
    elif fmt == "WEBP": sk.update({"quality": qual, "method": 6})
    elif fmt == "PNG": sk.update({"optimize": True})
    img.save(buf, **sk)
    return buf.getvalue()

# === EXPORT COLLABORATOR ===
@dataclass(frozen=True)
class ExportResult:
    image_id: str
    filename: str
    data: bytes
    mime: str
    stats: Dict

class ExportCollaborator:
    """
    Runs crop exports off the UI thread

    Called by the crop controller after a commit. Results go to `on_done`,
    failures to `on_error`; nothing is reported back to the controller.
    """

    def __init__(self, on_done: Callable[[ExportResult], None],
                 on_error: Callable[[str, Exception], None],
                 executor: Optional[concurrent.futures.Executor] = None):
        self.on_done = on_done
        self.on_error = on_error
        self.executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=config.EXPORT_WORKERS, thread_name_prefix="export"
        )

    def __call__(self, entry, rect: Rectangle) -> concurrent.futures.Future:
        out_fmt = format_for(entry.display_name)
        filename = generate_filename(entry.display_name, out_fmt.lower().replace('jpeg', 'jpg'))
        future = self.executor.submit(crop_image, entry.source_handle, rect, out_fmt)

        def _finished(fut: concurrent.futures.Future):
            try:
                data, stats = fut.result()
            except Exception as e:
                logger.error(f"Export failed for {entry.display_name}: {e}", exc_info=True)
                self.on_error(entry.display_name, e)
                return
            self.on_done(ExportResult(entry.id, filename, data, config.MIME_BY_FORMAT[out_fmt], stats))

        future.add_done_callback(_finished)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
