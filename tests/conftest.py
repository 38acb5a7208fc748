"""
Image Cropper Pro v1.2 - Shared Test Fixtures
=============================================
"""

import concurrent.futures
import io
import os
import sys
import pytest
from PIL import Image

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from geometry import ImageDimensions
from image_store import ImageEntry, ImageSessionStore, new_id

class FakeUpload:
    """Stands in for Streamlit's UploadedFile"""

    def __init__(self, name, data, mime="image/png"):
        self.name = name
        self.type = mime
        self._data = data
        self.size = len(data)

    def getbuffer(self):
        return memoryview(self._data)

class InlineExecutor(concurrent.futures.Executor):
    """Runs submitted work immediately so completion callbacks fire before submit returns"""

    def submit(self, fn, *args, **kwargs):
        future = concurrent.futures.Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

def png_bytes(size=(40, 30), color='white'):
    buf = io.BytesIO()
    Image.new('RGB', size, color=color).save(buf, 'PNG')
    return buf.getvalue()

@pytest.fixture
def make_image(tmp_path):
    """Factory writing a solid image file and returning its path"""
    def _make(name="photo.png", size=(1000, 800), color='white', fmt=None):
        path = tmp_path / name
        Image.new('RGB', size, color=color).save(path, fmt)
        return str(path)
    return _make

@pytest.fixture
def store():
    return ImageSessionStore()

@pytest.fixture
def add_entry(store):
    """Factory adding a measured entry to the store"""
    def _add(width=1000, height=800, name="photo.png", size=1234, handle=None, measured=True):
        entry = ImageEntry(
            id=new_id(),
            source_handle=handle or f"/nonexistent/{name}",
            display_name=name,
            byte_size=size,
        )
        store.add(entry)
        if measured:
            store.set_dimensions(entry.id, ImageDimensions(width, height))
        return entry
    return _add
