"""
Image Cropper Pro v1.2 - Crop Session Module
============================================
Opens images for cropping, commits finished crops into the store
"""

from datetime import datetime
from typing import Callable, Optional
import geometry
from crop_engine import CropConstraintEngine, EditSession
from geometry import AspectLock, Rectangle
from image_store import CropRecord, ImageEntry, ImageSessionStore, new_id
from logger import get_logger
from validators import EmptyRegion, ImageNotReady, ImageUnreadable, NoActiveSession

logger = get_logger(__name__)

# Receives the entry and the whole-pixel rectangle to export
Exporter = Callable[[ImageEntry, Rectangle], None]

class CropSessionController:
    """Bridge between the image store and the crop engine"""

    def __init__(self, store: ImageSessionStore,
                 engine: Optional[CropConstraintEngine] = None,
                 exporter: Optional[Exporter] = None):
        self.store = store
        self.engine = engine or CropConstraintEngine()
        self.exporter = exporter

    @property
    def session(self) -> Optional[EditSession]:
        return self.engine.session

    def open_for_edit(self, image_id: str) -> EditSession:
        """
        Start editing an image

        Raises:
            UnknownImage: If the id is not in the store
            ImageUnreadable: If measuring the image failed
            ImageNotReady: If the image has not been measured yet
        """
        entry = self.store.get(image_id)
        if entry.load_error is not None:
            raise ImageUnreadable(image_id, entry.load_error)
        if entry.dimensions is None:
            raise ImageNotReady(image_id)
        session = self.engine.begin(entry, entry.dimensions)
        logger.info(f"Editing {entry.display_name} ({entry.dimensions.label()})")
        return session

    def _check(self, session: Optional[EditSession]) -> EditSession:
        active = self.engine.session
        if active is None or (session is not None and session is not active):
            raise NoActiveSession("Crop session is closed or was replaced")
        return active

    # === EDITS ===

    def set_aspect_lock(self, lock: AspectLock) -> Rectangle:
        return self.engine.set_aspect_lock(lock)

    def set_field_value(self, field_name: str, value: float) -> Rectangle:
        return self.engine.set_field_value(field_name, value)

    def set_zoom(self, value: float) -> float:
        return self.engine.set_zoom(value)

    def report_interactive_area(self, rect: Rectangle) -> Rectangle:
        return self.engine.report_interactive_area(rect)

    def maximize_area(self) -> Rectangle:
        """Grow the rectangle to the largest one the current lock allows"""
        session = self._check(None)
        ratio = geometry.resolve_ratio(session.aspect_lock, session.dimensions)
        return self.engine.report_interactive_area(geometry.max_rectangle(session.dimensions, ratio))

    # === CLOSE ===

    def commit(self, session: Optional[EditSession] = None) -> CropRecord:
        """
        Finalize the crop: record history, close the session, start the export

        The export runs after the store is updated; its outcome is reported
        by the exporter and never rolls the commit back.

        Raises:
            NoActiveSession: If no session (or a different one) is open
            EmptyRegion: If the rounded rectangle has no area; the session stays open
        """
        session = self._check(session)
        entry = self.store.get(session.target_image_id)

        rect = geometry.clamp_to_bounds(
            geometry.round_rectangle(self.engine.current_rectangle()),
            session.dimensions,
        )
        if rect.width <= 0 or rect.height <= 0:
            raise EmptyRegion(f"Crop of {entry.display_name} is empty ({rect.label()})")

        record = CropRecord(new_id(), int(rect.width), int(rect.height), datetime.now())
        self.store.record_commit(entry.id, rect, self.engine.current_zoom(), record)
        self.engine.end()

        if self.exporter is not None:
            self.exporter(entry, rect)
        return record

    def cancel(self, session: Optional[EditSession] = None) -> None:
        """Close the session without touching the store; safe to call when idle"""
        active = self.engine.session
        if active is None:
            return
        if session is not None and session is not active:
            logger.debug("Cancel for a stale session ignored")
            return
        self.engine.end()
        logger.info(f"Editing cancelled: {active.target_image_id}")

    def delete_image(self, image_id: str) -> None:
        active = self.engine.session
        if active is not None and active.target_image_id == image_id:
            self.cancel()
        self.store.delete(image_id)
