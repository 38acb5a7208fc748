"""
Image Cropper Pro v1.2 - Crop Engine Module
===========================================
Keeps the crop rectangle of the open edit session valid after every change
"""

from dataclasses import dataclass, field
from typing import Optional
import config
import geometry
from geometry import AspectLock, ImageDimensions, Rectangle
from logger import get_logger
from validators import InvalidRectangle, NoActiveSession, validate_finite

logger = get_logger(__name__)

@dataclass
class EditSession:
    """Transient state of one open crop interaction"""
    target_image_id: str
    dimensions: ImageDimensions
    rectangle: Rectangle
    zoom: float = config.MIN_ZOOM
    aspect_lock: AspectLock = field(default_factory=AspectLock.free)

def clamp_zoom(value: float) -> float:
    return max(config.MIN_ZOOM, min(config.MAX_ZOOM, value))

class CropConstraintEngine:
    """
    Two-state machine: Idle (no session) and Editing (one session)

    Every edit computes a candidate rectangle with the geometry helpers and
    only stores it when all invariants hold, so a rejected edit leaves the
    session exactly as it was.
    """

    def __init__(self, min_dimension: float = config.MIN_CROP_DIMENSION):
        self.min_dimension = min_dimension
        self._session: Optional[EditSession] = None

    @property
    def session(self) -> Optional[EditSession]:
        return self._session

    @property
    def is_editing(self) -> bool:
        return self._session is not None

    def begin(self, image, dimensions: ImageDimensions) -> EditSession:
        """
        Open a session for `image`, resuming its last accepted crop

        The aspect lock always starts free; history keeps only the rectangle.

        Raises:
            InvalidRectangle: If the minimum crop size exceeds the image
        """
        if self._session is not None:
            logger.warning(f"Discarding open session for {self._session.target_image_id}")
            self._session = None

        if self.min_dimension > min(dimensions.width, dimensions.height):
            raise InvalidRectangle(
                f"Image {dimensions.label()} is smaller than the minimum crop "
                f"size of {self.min_dimension}px"
            )

        if image.last_accepted_crop is not None:
            rect = image.last_accepted_crop
            if not geometry.is_valid(rect, dimensions, self.min_dimension):
                rect = geometry.fit_to_bounds(rect, dimensions, self.min_dimension)
            zoom = clamp_zoom(image.last_zoom) if image.last_zoom is not None else config.MIN_ZOOM
        else:
            rect = dimensions.full_rectangle()
            zoom = config.MIN_ZOOM

        self._session = EditSession(image.id, dimensions, rect, zoom)
        logger.debug(f"Session opened: {image.id} {rect} zoom={zoom}")
        return self._session

    def end(self) -> Optional[EditSession]:
        session, self._session = self._session, None
        return session

    def _require_session(self) -> EditSession:
        if self._session is None:
            raise NoActiveSession("No crop session is open")
        return self._session

    def _store(self, session: EditSession, rect: Rectangle) -> Rectangle:
        if not geometry.is_valid(rect, session.dimensions, self.min_dimension):
            raise InvalidRectangle(
                f"No {self.min_dimension}px crop fits {session.dimensions.label()} "
                f"under the current aspect ratio"
            )
        session.rectangle = rect
        return rect

    def current_ratio(self) -> Optional[float]:
        session = self._require_session()
        return geometry.resolve_ratio(session.aspect_lock, session.dimensions)

    def set_aspect_lock(self, lock: AspectLock) -> Rectangle:
        session = self._require_session()
        ratio = geometry.resolve_ratio(lock, session.dimensions)
        if ratio is None:
            session.aspect_lock = lock
            return session.rectangle

        rect = geometry.project_to_ratio(session.rectangle, ratio, session.dimensions)
        rect = geometry.fit_to_bounds(rect, session.dimensions, self.min_dimension, ratio)
        self._store(session, rect)
        session.aspect_lock = lock
        logger.debug(f"Aspect lock {lock.mode} ({ratio:.4f}): {rect}")
        return rect

    def set_field_value(self, field_name: str, value: float) -> Rectangle:
        session = self._require_session()
        value = validate_finite(field_name, value)
        rect = geometry.apply_field_edit(
            session.rectangle, field_name, value,
            geometry.resolve_ratio(session.aspect_lock, session.dimensions),
            session.dimensions, self.min_dimension,
        )
        self._store(session, rect)
        logger.debug(f"Field {field_name}={value}: {rect}")
        return rect

    def set_zoom(self, value: float) -> float:
        session = self._require_session()
        session.zoom = clamp_zoom(validate_finite("zoom", value))
        return session.zoom

    def report_interactive_area(self, rect: Rectangle) -> Rectangle:
        """
        Take a rectangle reported by the pointer-driven cropping surface

        The surface is trusted to stay inside the image but the area is still
        repaired here. Under a ratio lock the area is always re-projected, which
        absorbs the widget's pixel rounding; a repair of an out-of-bounds area or
        one off the locked ratio is logged so misbehaving surfaces show up.
        """
        session = self._require_session()
        for name in geometry.FIELDS:
            validate_finite(name, getattr(rect, name))

        ratio = geometry.resolve_ratio(session.aspect_lock, session.dimensions)
        valid = geometry.is_valid(rect, session.dimensions, self.min_dimension)
        off_ratio = ratio is not None and (
            rect.height <= 0 or abs(rect.width / rect.height - ratio) > ratio * config.RATIO_TOLERANCE
        )
        repaired = rect
        if not valid or ratio is not None:
            repaired = geometry.fit_to_bounds(rect, session.dimensions, self.min_dimension, ratio)
        if not valid or off_ratio:
            logger.warning(f"Interactive area {rect} repaired to {repaired}")
        return self._store(session, repaired)

    def current_rectangle(self) -> Rectangle:
        return self._require_session().rectangle

    def current_zoom(self) -> float:
        return self._require_session().zoom
