"""
Image Cropper Pro v1.2 - Intake Module
======================================
Upload validation, de-duplication and dimension measuring
"""

import concurrent.futures
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional
import config
import cropper_engine as engine
from geometry import ImageDimensions
from image_store import ImageEntry, ImageSessionStore, new_id
from logger import get_logger
from validators import UnknownImage, ValidationError, sanitize_filename, validate_mime_type

logger = get_logger(__name__)

@dataclass
class IntakeResult:
    accepted: List[ImageEntry] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    truncated: int = 0
    remaining: int = 0

    @property
    def all_invalid(self) -> bool:
        return bool(self.rejected) and not (self.accepted or self.duplicates or self.truncated)

def _read_bytes(uploaded_file) -> bytes:
    if hasattr(uploaded_file, "getbuffer"):
        return bytes(uploaded_file.getbuffer())
    return uploaded_file.getvalue()

class IntakeCollaborator:
    """
    Turns uploaded files into store entries

    Accepts anything shaped like Streamlit's UploadedFile: name, size,
    type and getbuffer()/getvalue().
    """

    def __init__(self, store: ImageSessionStore, workspace_dir: str):
        self.store = store
        self.workspace_dir = workspace_dir

    def ingest(self, files: Iterable) -> IntakeResult:
        result = IntakeResult()

        valid = []
        for f in files:
            try:
                validate_mime_type(getattr(f, "type", None))
            except ValidationError as e:
                logger.warning(f"Rejected {f.name}: {e}")
                result.rejected.append(f.name)
                continue
            valid.append(f)

        remaining = self.store.remaining_slots()
        result.remaining = remaining
        if len(valid) > remaining:
            result.truncated = len(valid) - remaining
            logger.warning(f"Upload limit: {result.truncated} file(s) over the "
                           f"{self.store.max_images} image limit dropped")
        valid = valid[:remaining]

        batch_keys = set()
        for f in valid:
            key = (f.name, f.size)
            if key in batch_keys or self.store.find_duplicate(f.name, f.size):
                result.duplicates.append(f.name)
                continue
            batch_keys.add(key)
            try:
                result.accepted.append(self._store_file(f))
            except OSError as e:
                logger.error(f"Upload processing failed for {f.name}: {e}")
                result.rejected.append(f.name)

        if result.duplicates:
            logger.info(f"Duplicates skipped: {', '.join(result.duplicates)}")
        return result

    def _store_file(self, uploaded_file) -> ImageEntry:
        safe_name = sanitize_filename(uploaded_file.name)
        final_path = os.path.join(self.workspace_dir, safe_name)
        if os.path.exists(final_path):
            final_path = os.path.join(
                self.workspace_dir, f"{datetime.now().strftime('%H%M%S%f')}_{safe_name}"
            )
        with open(final_path, "wb") as f:
            f.write(_read_bytes(uploaded_file))

        entry = ImageEntry(
            id=new_id(),
            source_handle=final_path,
            display_name=uploaded_file.name,
            byte_size=uploaded_file.size,
        )
        return self.store.add(entry)

class DimensionResolver:
    """
    Measures images off the UI thread and reports the size to the store

    Until a report lands, opening the image for editing fails with
    ImageNotReady. A failed measurement marks the entry unreadable for good.
    """

    def __init__(self, store: ImageSessionStore,
                 executor: Optional[concurrent.futures.Executor] = None):
        self.store = store
        self.executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=config.MEASURE_WORKERS, thread_name_prefix="measure"
        )

    def resolve(self, image_id: str,
                on_ready: Optional[Callable[[str, ImageDimensions], None]] = None,
                on_error: Optional[Callable[[str, Exception], None]] = None) -> concurrent.futures.Future:
        entry = self.store.get(image_id)
        future = self.executor.submit(engine.measure_image, entry.source_handle)

        def _finished(fut: concurrent.futures.Future):
            try:
                dimensions = fut.result()
            except Exception as e:
                logger.error(f"Could not measure {entry.display_name}: {e}")
                try:
                    self.store.mark_unreadable(image_id, str(e))
                except UnknownImage:
                    return
                if on_error is not None:
                    on_error(image_id, e)
                return
            try:
                self.store.set_dimensions(image_id, dimensions)
            except UnknownImage:
                logger.debug(f"Image {image_id} deleted while measuring")
                return
            if on_ready is not None:
                on_ready(image_id, dimensions)

        future.add_done_callback(_finished)
        return future

    def resolve_now(self, image_id: str) -> ImageDimensions:
        entry = self.store.get(image_id)
        if entry.dimensions is None:
            self.store.set_dimensions(image_id, engine.measure_image(entry.source_handle))
        return entry.dimensions

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
