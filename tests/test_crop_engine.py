"""
Image Cropper Pro v1.2 - Crop Engine Tests
==========================================
"""

import logging
import random
import pytest

import geometry
from crop_engine import CropConstraintEngine
from geometry import AspectLock, ImageDimensions, Rectangle
from image_store import ImageEntry
from validators import InvalidRectangle, NoActiveSession

# === FIXTURES ===

@pytest.fixture
def engine():
    return CropConstraintEngine(min_dimension=10)

def make_entry(last_crop=None, last_zoom=None):
    return ImageEntry(id="img1", source_handle="/tmp/img1.png", display_name="img1.png",
                      byte_size=100, last_accepted_crop=last_crop, last_zoom=last_zoom)

# === BEGIN ===

def test_begin_seeds_full_image(engine):
    """A never-cropped image starts with the whole image selected"""
    session = engine.begin(make_entry(), ImageDimensions(1000, 800))
    assert session.rectangle == Rectangle(0, 0, 1000, 800)
    assert session.zoom == 1
    assert session.aspect_lock.is_free
    assert engine.is_editing

def test_begin_resumes_last_crop_and_zoom(engine):
    """The last accepted crop and its zoom come back on reopen"""
    last = Rectangle(10, 20, 300, 200)
    session = engine.begin(make_entry(last, 2.0), ImageDimensions(1000, 800))
    assert session.rectangle == last
    assert session.zoom == 2.0
    assert session.aspect_lock.is_free

def test_begin_without_saved_zoom_uses_one(engine):
    """Unknown zoom falls back to 1x"""
    session = engine.begin(make_entry(Rectangle(0, 0, 50, 50)), ImageDimensions(100, 100))
    assert session.zoom == 1

def test_begin_rejects_image_below_minimum(engine):
    """No crop can exist when the image is smaller than the minimum size"""
    with pytest.raises(InvalidRectangle):
        engine.begin(make_entry(), ImageDimensions(8, 400))
    assert not engine.is_editing

def test_begin_replaces_open_session(engine):
    """Opening again discards the previous session"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    engine.set_field_value('width', 300)
    session = engine.begin(make_entry(), ImageDimensions(1000, 800))
    assert session.rectangle == Rectangle(0, 0, 1000, 800)

# === SCENARIOS ===

def test_square_lock_then_x_edit(engine):
    """1000x800: square lock gives 800x800, x=300 clamps to 200"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    assert engine.set_aspect_lock(AspectLock.fixed(1)) == Rectangle(0, 0, 800, 800)
    assert engine.set_field_value('x', 300) == Rectangle(200, 0, 800, 800)
    assert engine.current_rectangle() == Rectangle(200, 0, 800, 800)

def test_width_five_clamps_to_minimum(engine):
    """400x400: width 5 becomes 10, never an empty crop"""
    engine.begin(make_entry(), ImageDimensions(400, 400))
    rect = engine.set_field_value('width', 5)
    assert rect.width == 10
    assert rect.height == 400

# === ASPECT LOCK ===

def test_free_lock_never_snaps(engine):
    """Switching back to free-form keeps the current rectangle"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    engine.set_aspect_lock(AspectLock.fixed(16 / 9))
    before = engine.current_rectangle()
    assert engine.set_aspect_lock(AspectLock.free()) == before
    assert engine.session.aspect_lock.is_free

def test_original_lock_uses_image_ratio(engine):
    """Original locks to the source width/height ratio"""
    engine.begin(make_entry(Rectangle(0, 0, 500, 500)), ImageDimensions(1000, 800))
    rect = engine.set_aspect_lock(AspectLock.original())
    assert rect.width == 500
    assert rect.height == pytest.approx(400)
    assert engine.current_ratio() == pytest.approx(1.25)

def test_lock_projection_respects_minimum(engine):
    """A tiny crop locked to a wide ratio grows instead of going under 10px"""
    engine.begin(make_entry(Rectangle(0, 0, 10, 10)), ImageDimensions(1000, 800))
    rect = engine.set_aspect_lock(AspectLock.fixed(16 / 9))
    assert rect.height >= 10 - geometry.EPSILON
    assert rect.width / rect.height == pytest.approx(16 / 9)

def test_impossible_ratio_is_rejected_without_change(engine):
    """A ratio no 10px crop can satisfy is reported and nothing changes"""
    engine.begin(make_entry(), ImageDimensions(400, 400))
    before = engine.current_rectangle()
    with pytest.raises(InvalidRectangle):
        engine.set_aspect_lock(AspectLock.fixed(100))
    assert engine.current_rectangle() == before
    assert engine.session.aspect_lock.is_free

@pytest.mark.parametrize("ratio", [1.0, 16 / 9, 4 / 3, 3 / 2, 9 / 16])
@pytest.mark.parametrize("width", [10, 100, 333, 450, 800, 1000])
def test_locked_width_edit_keeps_ratio(engine, ratio, width):
    """height = width / ratio whenever that fits, else the height is pinned to the image"""
    dims = ImageDimensions(1000, 800)
    engine.begin(make_entry(), dims)
    engine.set_aspect_lock(AspectLock.fixed(ratio))
    rect = engine.set_field_value('width', width)
    if width / ratio <= dims.height and width >= 10 * ratio:
        assert rect.width == pytest.approx(width)
        assert rect.height == pytest.approx(width / ratio)
    assert rect.width / rect.height == pytest.approx(ratio)

# === ZOOM & AREA ===

def test_zoom_is_clamped(engine):
    """Zoom stays inside [1, 3] and leaves the rectangle alone"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    assert engine.set_zoom(5) == 3
    assert engine.set_zoom(0.2) == 1
    assert engine.set_zoom(1.7) == 1.7
    assert engine.current_zoom() == 1.7
    assert engine.current_rectangle() == Rectangle(0, 0, 1000, 800)

def test_valid_interactive_area_is_taken_verbatim(engine):
    """Areas inside the rules are stored unchanged"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    area = Rectangle(12.5, 40.25, 300.75, 200)
    assert engine.report_interactive_area(area) == area

def test_invalid_interactive_area_is_repaired(engine):
    """Out-of-bounds areas are clamped back in"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    rect = engine.report_interactive_area(Rectangle(-20, 700, 2000, 300))
    assert rect == Rectangle(0, 500, 1000, 300)

def test_wrong_ratio_area_is_reprojected_with_warning(engine, caplog):
    """A box far off the locked ratio is re-projected and logged"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    engine.set_aspect_lock(AspectLock.fixed(1))

    with caplog.at_level(logging.WARNING, logger="cropper"):
        rect = engine.report_interactive_area(Rectangle(0, 0, 400, 200))

    assert rect == Rectangle(0, 0, 400, 400)
    assert any("repaired" in r.getMessage() for r in caplog.records)

def test_rounding_drift_is_absorbed_quietly(engine, caplog):
    """A box a pixel off the locked ratio snaps back without a warning"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    engine.set_aspect_lock(AspectLock.fixed(1))

    with caplog.at_level(logging.WARNING, logger="cropper"):
        rect = engine.report_interactive_area(Rectangle(100, 100, 400, 401))

    assert rect == Rectangle(100, 100, 400, 400)
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

def test_non_finite_values_rejected(engine):
    """NaN and infinity never reach the geometry"""
    engine.begin(make_entry(), ImageDimensions(1000, 800))
    with pytest.raises(InvalidRectangle):
        engine.set_field_value('x', float('nan'))
    with pytest.raises(InvalidRectangle):
        engine.report_interactive_area(Rectangle(0, 0, float('inf'), 10))
    assert engine.current_rectangle() == Rectangle(0, 0, 1000, 800)

# === IDLE STATE ===

def test_edits_when_idle_are_errors(engine):
    """Every edit raises NoActiveSession while idle"""
    with pytest.raises(NoActiveSession):
        engine.set_field_value('x', 1)
    with pytest.raises(NoActiveSession):
        engine.set_aspect_lock(AspectLock.fixed(1))
    with pytest.raises(NoActiveSession):
        engine.set_zoom(2)
    with pytest.raises(NoActiveSession):
        engine.report_interactive_area(Rectangle(0, 0, 10, 10))
    with pytest.raises(NoActiveSession):
        engine.current_rectangle()
    assert engine.session is None

def test_end_returns_to_idle(engine):
    """end() closes the session"""
    engine.begin(make_entry(), ImageDimensions(100, 100))
    assert engine.end() is not None
    assert not engine.is_editing
    assert engine.end() is None

# === INVARIANTS ===

LOCKS = [AspectLock.free(), AspectLock.original(), AspectLock.fixed(1),
         AspectLock.fixed(16 / 9), AspectLock.fixed(9 / 16), AspectLock.fixed(4 / 3)]

@pytest.mark.parametrize("seed", range(20))
def test_invariants_hold_after_every_operation(engine, seed):
    """Random edit sequences never leave an invalid rectangle"""
    rng = random.Random(seed)
    dims = ImageDimensions(rng.randint(50, 3000), rng.randint(50, 3000))
    engine.begin(make_entry(), dims)

    for _ in range(200):
        op = rng.choice(['field', 'lock', 'zoom', 'area'])
        if op == 'field':
            engine.set_field_value(rng.choice(geometry.FIELDS), rng.uniform(-500, 4000))
        elif op == 'lock':
            engine.set_aspect_lock(rng.choice(LOCKS))
        elif op == 'zoom':
            engine.set_zoom(rng.uniform(-2, 6))
        else:
            engine.report_interactive_area(Rectangle(
                rng.uniform(-500, 4000), rng.uniform(-500, 4000),
                rng.uniform(-100, 4000), rng.uniform(-100, 4000),
            ))
        assert geometry.is_valid(engine.current_rectangle(), dims, 10)
        assert 1 <= engine.current_zoom() <= 3
