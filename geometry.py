"""
Image Cropper Pro v1.2 - Geometry Module
========================================
Rectangle clamping and aspect-ratio projection.

All functions here are pure: they take immutable values, return new ones,
and never raise for finite input. Coordinates are source-image pixels.
"""

import math
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

EPSILON = 1e-6

FIELDS = ('x', 'y', 'width', 'height')

@dataclass(frozen=True)
class Rectangle:
    """Crop rectangle in source-image pixel coordinates"""
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) as Pillow's crop() expects"""
        return (int(self.x), int(self.y), int(self.right), int(self.bottom))

    def label(self) -> str:
        return f"{round(self.width)} x {round(self.height)}"

@dataclass(frozen=True)
class ImageDimensions:
    """Natural pixel size of a source image"""
    width: int
    height: int

    @property
    def ratio(self) -> float:
        return self.width / self.height

    def full_rectangle(self) -> Rectangle:
        return Rectangle(0, 0, self.width, self.height)

    def label(self) -> str:
        return f"{self.width} x {self.height}"

@dataclass(frozen=True)
class AspectLock:
    """
    Aspect ratio constraint on the crop rectangle

    mode is one of 'free', 'original' or 'fixed'; ratio is only set for 'fixed'.
    """
    mode: str = 'free'
    ratio: Optional[float] = None

    FREE = 'free'
    ORIGINAL = 'original'
    FIXED = 'fixed'

    @classmethod
    def free(cls) -> 'AspectLock':
        return cls(cls.FREE)

    @classmethod
    def original(cls) -> 'AspectLock':
        return cls(cls.ORIGINAL)

    @classmethod
    def fixed(cls, ratio: float) -> 'AspectLock':
        if not isinstance(ratio, (int, float)) or not math.isfinite(ratio) or ratio <= 0:
            raise ValueError(f"Aspect ratio must be a positive number, got: {ratio!r}")
        return cls(cls.FIXED, float(ratio))

    @classmethod
    def from_setting(cls, value) -> 'AspectLock':
        """Build a lock from a config.ASPECT_RATIOS value"""
        if value is None:
            return cls.free()
        if value == cls.ORIGINAL:
            return cls.original()
        return cls.fixed(value)

    @property
    def is_free(self) -> bool:
        return self.mode == self.FREE

# === CORE OPERATIONS ===

def clamp_to_bounds(rect: Rectangle, bounds: ImageDimensions) -> Rectangle:
    """
    Shift the rectangle back inside the image without resizing it

    Overflow on the right/bottom moves x/y left/up, then x/y are floored at 0.
    """
    x, y = rect.x, rect.y
    if x + rect.width > bounds.width:
        x = bounds.width - rect.width
    if y + rect.height > bounds.height:
        y = bounds.height - rect.height
    return replace(rect, x=max(0, x), y=max(0, y))

def project_to_ratio(rect: Rectangle, ratio: float, bounds: ImageDimensions) -> Rectangle:
    """
    Reshape the rectangle to `ratio`, holding width first

    Falls back to holding the full image height when width / ratio would not fit.
    """
    width = rect.width
    height = width / ratio
    if height > bounds.height:
        height = bounds.height
        width = height * ratio
    return clamp_to_bounds(replace(rect, width=width, height=height), bounds)

def resolve_ratio(lock: AspectLock, dimensions: ImageDimensions) -> Optional[float]:
    if lock.mode == AspectLock.ORIGINAL:
        return dimensions.ratio
    if lock.mode == AspectLock.FIXED:
        return lock.ratio
    return None

# === SIZE LIMITS ===

def _clip(value: float, low: float, high: float) -> float:
    # The bound wins when the limits cross; callers check is_valid afterwards
    return min(high, max(low, value))

def size_limits(ratio: Optional[float], bounds: ImageDimensions,
                min_dimension: float) -> Dict[str, Tuple[float, float]]:
    """
    Allowed (low, high) range for width and height under the given ratio

    With a ratio both ranges are narrowed so the derived dimension also fits.
    """
    if ratio is None:
        return {
            'width': (min_dimension, bounds.width),
            'height': (min_dimension, bounds.height),
        }
    return {
        'width': (max(min_dimension, min_dimension * ratio),
                  min(bounds.width, bounds.height * ratio)),
        'height': (max(min_dimension, min_dimension / ratio),
                   min(bounds.height, bounds.width / ratio)),
    }

def _sized(rect: Rectangle, driving: str, value: float, ratio: Optional[float],
           bounds: ImageDimensions, min_dimension: float) -> Rectangle:
    """Set the driving dimension, derive the other one once under the ratio"""
    limits = size_limits(ratio, bounds, min_dimension)
    value = _clip(value, *limits[driving])

    if driving == 'width':
        width = value
        height = rect.height if ratio is None else min(width / ratio, bounds.height)
        if ratio is None:
            height = _clip(height, *limits['height'])
    else:
        height = value
        width = rect.width if ratio is None else min(height * ratio, bounds.width)
        if ratio is None:
            width = _clip(width, *limits['width'])

    return replace(rect, width=width, height=height)

def apply_field_edit(rect: Rectangle, field: str, value: float, ratio: Optional[float],
                     bounds: ImageDimensions, min_dimension: float) -> Rectangle:
    """
    Apply one numeric field edit in a single pass

    Position edits never touch the size. Size edits set the edited dimension,
    derive the other from the ratio when one is locked, enforce the minimum
    and the image size, then clamp the position.

    Raises:
        ValueError: If field is not one of x, y, width, height
    """
    if field not in FIELDS:
        raise ValueError(f"Unknown crop field: {field!r}")

    if field in ('x', 'y'):
        return clamp_to_bounds(replace(rect, **{field: value}), bounds)

    return clamp_to_bounds(_sized(rect, field, value, ratio, bounds, min_dimension), bounds)

def fit_to_bounds(rect: Rectangle, bounds: ImageDimensions, min_dimension: float,
                  ratio: Optional[float] = None) -> Rectangle:
    """
    Repair any rectangle into a valid one

    Width stays the primary dimension, as in project_to_ratio.
    """
    rect = replace(rect, x=max(0, rect.x), y=max(0, rect.y))
    if ratio is None:
        limits = size_limits(None, bounds, min_dimension)
        rect = replace(rect,
                       width=_clip(rect.width, *limits['width']),
                       height=_clip(rect.height, *limits['height']))
    else:
        rect = _sized(rect, 'width', rect.width, ratio, bounds, min_dimension)
    return clamp_to_bounds(rect, bounds)

def max_rectangle(bounds: ImageDimensions, ratio: Optional[float] = None) -> Rectangle:
    """Largest rectangle for the ratio, anchored at the top-left corner"""
    full = bounds.full_rectangle()
    if ratio is None:
        return full
    return project_to_ratio(full, ratio, bounds)

def is_valid(rect: Rectangle, bounds: ImageDimensions, min_dimension: float) -> bool:
    """Check the five rectangle invariants, allowing for float noise"""
    return (
        rect.width >= min_dimension - EPSILON
        and rect.height >= min_dimension - EPSILON
        and rect.x >= 0
        and rect.y >= 0
        and rect.right <= bounds.width + EPSILON
        and rect.bottom <= bounds.height + EPSILON
    )

# === CONVERSIONS ===

def round_rectangle(rect: Rectangle) -> Rectangle:
    """Round every field half-up to whole pixels"""
    def _half_up(v: float) -> int:
        return int(math.floor(v + 0.5))
    return Rectangle(_half_up(rect.x), _half_up(rect.y),
                     _half_up(rect.width), _half_up(rect.height))

def to_box(rect: Rectangle, scale: float = 1.0) -> Dict[str, int]:
    """Source rectangle -> {left, top, width, height} on a proxy scaled down by `scale`"""
    return {
        'left': int(round(rect.x / scale)),
        'top': int(round(rect.y / scale)),
        'width': int(round(rect.width / scale)),
        'height': int(round(rect.height / scale)),
    }

def to_coords(rect: Rectangle, scale: float = 1.0) -> Tuple[int, int, int, int]:
    """(left, right, top, bottom) on the proxy, the cropper's default_coords order"""
    box = to_box(rect, scale)
    return (box['left'], box['left'] + box['width'],
            box['top'], box['top'] + box['height'])

def from_box(box: Dict[str, float], scale: float = 1.0) -> Rectangle:
    """Proxy {left, top, width, height} box -> source rectangle"""
    return Rectangle(
        x=box['left'] * scale,
        y=box['top'] * scale,
        width=box['width'] * scale,
        height=box['height'] * scale,
    )
