"""
Image Cropper Pro v1.2 - Image Store Module
==========================================
Loaded images, their crop history and the last accepted crop
"""

import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import config
import cropper_engine as engine
from geometry import ImageDimensions, Rectangle
from logger import get_logger
from validators import UnknownImage, ValidationError

logger = get_logger(__name__)

def new_id() -> str:
    return uuid.uuid4().hex[:12]

@dataclass(frozen=True)
class CropRecord:
    """One committed crop, in whole pixels"""
    id: str
    width: int
    height: int
    timestamp: datetime

    @property
    def dimensions(self) -> str:
        return f"{self.width} x {self.height}"

    def label(self) -> str:
        return f"{self.dimensions} - {self.timestamp.strftime('%H:%M:%S')}"

@dataclass
class ImageEntry:
    id: str
    source_handle: str
    display_name: str
    byte_size: int
    has_been_cropped: bool = False
    history: List[CropRecord] = field(default_factory=list)
    last_accepted_crop: Optional[Rectangle] = None
    last_zoom: Optional[float] = None
    dimensions: Optional[ImageDimensions] = None
    load_error: Optional[str] = None

    @property
    def size_mb(self) -> float:
        return self.byte_size / (1024 * 1024)

class ImageSessionStore:
    """
    In-memory collection of loaded images, kept in upload order

    Owns the files behind each entry from intake until deletion. Only the
    crop controller's commit, the one-shot dimension report and deletion
    mutate entries.
    """

    def __init__(self, max_images: int = config.MAX_IMAGES):
        self.max_images = max_images
        self._entries: Dict[str, ImageEntry] = {}
        # Dimension reports arrive from measuring worker threads
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, image_id: str) -> bool:
        return image_id in self._entries

    def list(self) -> List[ImageEntry]:
        return list(self._entries.values())

    def remaining_slots(self) -> int:
        return max(0, self.max_images - len(self._entries))

    def get(self, image_id: str) -> ImageEntry:
        """
        Look up an entry

        Raises:
            UnknownImage: If no entry has this id
        """
        try:
            return self._entries[image_id]
        except KeyError:
            raise UnknownImage(image_id) from None

    def add(self, entry: ImageEntry) -> ImageEntry:
        if entry.id in self._entries:
            raise ValidationError(f"Image id already in use: {entry.id}")
        self._entries[entry.id] = entry
        logger.info(f"Image added: {entry.display_name} ({entry.byte_size} bytes, id={entry.id})")
        return entry

    def find_duplicate(self, name: str, byte_size: int) -> Optional[ImageEntry]:
        for entry in self._entries.values():
            if entry.display_name == name and entry.byte_size == byte_size:
                return entry
        return None

    def set_dimensions(self, image_id: str, dimensions: ImageDimensions) -> bool:
        """Record measured dimensions once; later reports are ignored"""
        with self._lock:
            entry = self.get(image_id)
            if entry.dimensions is not None:
                logger.debug(f"Dimensions already known for {image_id}, ignoring report")
                return False
            entry.dimensions = dimensions
        logger.debug(f"Dimensions measured: {entry.display_name} {dimensions.label()}")
        return True

    def mark_unreadable(self, image_id: str, reason: str) -> bool:
        """Flag an image that could not be measured; measured images are left alone"""
        with self._lock:
            entry = self.get(image_id)
            if entry.dimensions is not None:
                return False
            entry.load_error = reason
        logger.warning(f"Image unreadable: {entry.display_name} ({reason})")
        return True

    def record_commit(self, image_id: str, rect: Rectangle, zoom: float, record: CropRecord) -> ImageEntry:
        entry = self.get(image_id)
        entry.history.append(record)
        entry.last_accepted_crop = rect
        entry.last_zoom = zoom
        entry.has_been_cropped = True
        logger.info(f"Crop recorded: {entry.display_name} {record.dimensions} "
                    f"(history: {len(entry.history)})")
        return entry

    def delete(self, image_id: str) -> None:
        """Remove an entry and release its files immediately"""
        entry = self._entries.pop(image_id, None)
        if entry is None:
            raise UnknownImage(image_id)
        _release(entry)
        logger.info(f"Image deleted: {entry.display_name}")

    def clear(self) -> None:
        for entry in list(self._entries.values()):
            _release(entry)
        self._entries.clear()
        logger.info("Workspace cleared")

def _release(entry: ImageEntry) -> None:
    engine.remove_thumbnail(entry.source_handle)
    try:
        if entry.source_handle and os.path.exists(entry.source_handle):
            os.remove(entry.source_handle)
    except OSError as e:
        logger.error(f"Could not release {entry.source_handle}: {e}")
