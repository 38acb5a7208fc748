"""
Image Cropper Pro v1.2 - Engine Tests
=====================================
Export, thumbnails and validation helpers
"""

import io
import os
import pytest
from PIL import Image

import cropper_engine as engine
from conftest import InlineExecutor
from crop_session import CropSessionController
from geometry import ImageDimensions, Rectangle
from validators import (
    InvalidRectangle, ValidationError, sanitize_filename, validate_finite,
    validate_image_file, validate_mime_type,
)

# === FIXTURES ===

@pytest.fixture
def marked_image(tmp_path):
    """800x600 white image with a red 100x50 block at (200, 150)"""
    img = Image.new('RGB', (800, 600), color='white')
    img.paste((255, 0, 0), (200, 150, 300, 200))
    path = tmp_path / "marked.png"
    img.save(path, 'PNG')
    return str(path)

# === VALIDATION TESTS ===

def test_sanitize_filename():
    """Test filename sanitization"""
    assert sanitize_filename("test file.jpg") == "test_file.jpg"
    assert sanitize_filename("a" * 300 + ".jpg") == "a" * 251 + ".jpg"
    assert sanitize_filename("") == "unnamed.png"
    assert sanitize_filename("../../../etc/passwd") == "passwd"

def test_validate_mime_type():
    """Any image/* type passes, everything else fails"""
    assert validate_mime_type("image/png")
    assert validate_mime_type("image/webp")
    with pytest.raises(ValidationError, match="Not an image"):
        validate_mime_type("application/pdf")
    with pytest.raises(ValidationError):
        validate_mime_type(None)

def test_validate_finite():
    """Numbers pass through, NaN and junk do not"""
    assert validate_finite("x", "12.5") == 12.5
    with pytest.raises(InvalidRectangle):
        validate_finite("x", float("nan"))
    with pytest.raises(InvalidRectangle):
        validate_finite("x", "abc")

def test_validate_image_file(marked_image, tmp_path):
    """Real images validate, broken ones are reported"""
    assert validate_image_file(marked_image)
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"corrupted image data")
    with pytest.raises(ValidationError, match="Corrupted"):
        validate_image_file(str(broken))
    with pytest.raises(ValidationError, match="File not found"):
        validate_image_file("/nonexistent/file.png")

# === ENGINE TESTS ===

def test_measure_image(marked_image):
    """Measuring reports the natural pixel size"""
    assert engine.measure_image(marked_image) == ImageDimensions(800, 600)

def test_crop_image_extracts_region(marked_image):
    """The exported bytes hold exactly the requested pixels"""
    data, stats = engine.crop_image(marked_image, Rectangle(200, 150, 100, 50))
    result = Image.open(io.BytesIO(data))

    assert result.size == (100, 50)
    assert result.format == "PNG"
    assert result.convert('RGB').getpixel((50, 25)) == (255, 0, 0)
    assert stats['orig_res'] == "800x600"
    assert stats['new_res'] == "100x50"

def test_crop_image_jpeg(tmp_path):
    """JPEG sources are re-encoded as JPEG"""
    path = tmp_path / "photo.jpg"
    Image.new('RGB', (400, 300), 'blue').save(path, 'JPEG')
    data, stats = engine.crop_image(str(path), Rectangle(0, 0, 120, 80))
    result = Image.open(io.BytesIO(data))
    assert result.format == "JPEG"
    assert result.size == (120, 80)

def test_generate_filename():
    """Exports are named cropped-<slug>.<ext>"""
    assert engine.generate_filename("My Photo.JPG") == "cropped-my-photo.jpg"
    assert engine.generate_filename("/path/shot.png", "webp") == "cropped-shot.webp"

def test_generate_filename_transliteration():
    """Cyrillic names are transliterated"""
    result = engine.generate_filename("фото.png")
    assert result.startswith("cropped-")
    assert "foto" in result

def test_format_for():
    """Output format follows the source extension"""
    assert engine.format_for("a.jpeg") == "JPEG"
    assert engine.format_for("a.webp") == "WEBP"
    assert engine.format_for("a.gif") == "PNG"

def test_thumbnail_generation(marked_image):
    """Thumbnails are created once and reused"""
    thumb = engine.get_thumbnail(marked_image)
    assert thumb is not None
    assert os.path.exists(thumb)
    assert engine.get_thumbnail(marked_image) == thumb

def test_thumbnail_removal(marked_image):
    """Removing a thumbnail deletes the cached file"""
    thumb = engine.get_thumbnail(marked_image)
    assert engine.remove_thumbnail(marked_image) is True
    assert not os.path.exists(thumb)
    assert engine.remove_thumbnail(marked_image) is False

# === EXPORT COLLABORATOR ===

def test_export_collaborator_delivers_result(marked_image, add_entry):
    """Finished exports reach on_done with a download name and MIME type"""
    entry = add_entry(800, 600, name="marked.png", handle=marked_image)
    done, failed = [], []
    exporter = engine.ExportCollaborator(done.append, lambda name, exc: failed.append(name),
                                         executor=InlineExecutor())

    exporter(entry, Rectangle(200, 150, 100, 50))

    assert failed == []
    result = done[0]
    assert result.image_id == entry.id
    assert result.filename == "cropped-marked.png"
    assert result.mime == "image/png"
    assert Image.open(io.BytesIO(result.data)).size == (100, 50)

def test_export_collaborator_reports_failure(add_entry):
    """A missing source is reported to on_error, not raised"""
    entry = add_entry(name="lost.png", handle="/nonexistent/lost.png")
    done, failed = [], []
    exporter = engine.ExportCollaborator(done.append, lambda name, exc: failed.append(name),
                                         executor=InlineExecutor())

    exporter(entry, Rectangle(0, 0, 10, 10))

    assert done == []
    assert failed == ["lost.png"]

# === INTEGRATION TESTS ===

def test_full_workflow(marked_image, store, add_entry):
    """Open, lock, edit, commit and receive the cropped file"""
    entry = add_entry(800, 600, name="marked.png", handle=marked_image)
    done = []
    exporter = engine.ExportCollaborator(done.append, lambda name, exc: None, executor=InlineExecutor())
    controller = CropSessionController(store, exporter=exporter)

    controller.open_for_edit(entry.id)
    controller.set_field_value('width', 100)
    controller.set_field_value('height', 50)
    controller.set_field_value('x', 200)
    controller.set_field_value('y', 150)
    record = controller.commit()

    assert record.dimensions == "100 x 50"
    assert entry.last_accepted_crop == Rectangle(200, 150, 100, 50)
    img = Image.open(io.BytesIO(done[0].data)).convert('RGB')
    assert img.size == (100, 50)
    assert img.getpixel((0, 0)) == (255, 0, 0)
    assert img.getpixel((99, 49)) == (255, 0, 0)

@pytest.mark.slow
def test_large_image_crop(tmp_path):
    """Cropping a large image keeps the exact requested size"""
    path = tmp_path / "large.jpg"
    Image.new('RGB', (6000, 4000), color='green').save(path, 'JPEG')
    data, stats = engine.crop_image(str(path), Rectangle(1000, 500, 3840, 2160))
    assert Image.open(io.BytesIO(data)).size == (3840, 2160)
