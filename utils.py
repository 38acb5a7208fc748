"""
Image Cropper Pro v1.2 - Utils Module
=====================================
Streamlit session wiring and notifications
"""

import streamlit as st
import concurrent.futures
import os
import queue
import shutil
import tempfile
import threading
import weakref
from typing import List
import config
from cropper_engine import ExportCollaborator, ExportResult
from crop_session import CropSessionController
from image_store import ImageSessionStore
from intake import DimensionResolver, IntakeCollaborator, IntakeResult
from logger import get_logger

logger = get_logger(__name__)
_session_lock = threading.Lock()

def inject_css():
    st.markdown("""
    <style>
        div[data-testid="column"] { background-color: #f8f9fa; border-radius: 8px; padding: 10px; border: 1px solid #eee; }
        .empty-placeholder { border: 2px dashed #e0e0e0; border-radius: 10px; padding: 60px; text-align: center; color: #888; }
        .cropped-badge { color: #2f855a; font-size: 0.8em; font-weight: 600; }
        .unreadable-badge { color: #c53030; font-size: 0.8em; font-weight: 600; }
    </style>
    """, unsafe_allow_html=True)

@st.cache_resource
def shared_executors():
    """Export and measuring pools shared by every browser session"""
    export_pool = concurrent.futures.ThreadPoolExecutor(
        max_workers=config.EXPORT_WORKERS, thread_name_prefix="export"
    )
    measure_pool = concurrent.futures.ThreadPoolExecutor(
        max_workers=config.MEASURE_WORKERS, thread_name_prefix="measure"
    )
    logger.info("Worker pools started")
    return export_pool, measure_pool

def remove_when_collected(owner, path: str) -> weakref.finalize:
    """Delete a session's workspace once its state is garbage collected"""
    return weakref.finalize(owner, shutil.rmtree, path, True)

def init_session_state():
    """Initializes all state variables and the crop core for this browser session"""
    if 'temp_dir' not in st.session_state:
        st.session_state['temp_dir'] = tempfile.mkdtemp(prefix="cropper_")
    if 'uploader_key' not in st.session_state: st.session_state['uploader_key'] = 0
    if 'lang_code' not in st.session_state: st.session_state['lang_code'] = 'en'
    if 'reset_counter' not in st.session_state: st.session_state['reset_counter'] = 0
    if 'downloads' not in st.session_state: st.session_state['downloads'] = []

    if 'events' not in st.session_state:
        # Worker threads have no script context; they post here and the UI drains
        st.session_state['events'] = queue.Queue()

    if 'controller' not in st.session_state:
        events = st.session_state['events']
        export_pool, measure_pool = shared_executors()
        store = ImageSessionStore(config.MAX_IMAGES)
        # Streamlit has no session-end hook; the store goes when the session does
        remove_when_collected(store, st.session_state['temp_dir'])
        exporter = ExportCollaborator(
            on_done=lambda result: events.put(("export", result)),
            on_error=lambda name, exc: events.put(("export_error", (name, str(exc)))),
            executor=export_pool,
        )
        st.session_state['store'] = store
        st.session_state['controller'] = CropSessionController(store, exporter=exporter)
        st.session_state['intake'] = IntakeCollaborator(store, st.session_state['temp_dir'])
        st.session_state['resolver'] = DimensionResolver(store, executor=measure_pool)
        logger.info("Crop session state initialized")

def notify(message: str, kind: str = "info"):
    icons = {"info": "ℹ️", "success": "✅", "warning": "⚠️", "error": "❌"}
    st.toast(message, icon=icons.get(kind, "ℹ️"))

def queue_notice(message: str, kind: str = "info"):
    st.session_state['events'].put(("notice", (message, kind)))

def measure_failed_notice(events: queue.Queue, name: str, T: dict):
    """Error callback for the dimension resolver: tell the user on the next run"""
    def _failed(image_id: str, error: Exception):
        events.put(("notice", (T['toast_measure_failed'].format(name, error), "error")))
    return _failed

def handle_uploads(files: List, T: dict) -> IntakeResult:
    result = st.session_state['intake'].ingest(files)

    # The uploader is reset with a rerun, so notices wait for the next run
    if result.all_invalid:
        queue_notice(T['toast_invalid_title'], "error")
    if result.truncated:
        queue_notice(T['toast_too_many'].format(result.remaining), "warning")
    if result.duplicates:
        queue_notice(T['toast_duplicates'].format(", ".join(result.duplicates)), "info")
    if result.accepted:
        queue_notice(T['toast_added'].format(len(result.accepted)), "success")

    resolver = st.session_state['resolver']
    events = st.session_state['events']
    for entry in result.accepted:
        resolver.resolve(entry.id, on_error=measure_failed_notice(events, entry.display_name, T))
    return result

def drain_events(T: dict):
    """Apply results posted by export workers since the last run"""
    events = st.session_state['events']
    while True:
        try:
            kind, payload = events.get_nowait()
        except queue.Empty:
            break
        if kind == "export":
            add_download(payload)
            notify(T['toast_crop_ok'], "success")
        elif kind == "notice":
            notify(*payload)
        elif kind == "export_error":
            name, error = payload
            notify(T['toast_export_failed'].format(name, error), "error")

def add_download(result: ExportResult):
    with _session_lock:
        downloads = [d for d in st.session_state['downloads'] if d.image_id != result.image_id]
        downloads.append(result)
        st.session_state['downloads'] = downloads[-config.MAX_IMAGES:]

def drop_download(image_id: str):
    with _session_lock:
        st.session_state['downloads'] = [
            d for d in st.session_state['downloads'] if d.image_id != image_id
        ]

def bump_reset():
    """Force the cropper component to re-mount with fresh default coordinates"""
    st.session_state['reset_counter'] += 1

def cleanup_workspace():
    st.session_state['controller'].cancel()
    st.session_state['store'].clear()
    st.session_state['downloads'] = []
    # Same directory afterwards, so the collection-time cleanup still targets it
    temp_dir = st.session_state['temp_dir']
    shutil.rmtree(temp_dir, ignore_errors=True)
    os.makedirs(temp_dir, exist_ok=True)

def format_size(byte_size: int) -> str:
    size_mb = byte_size / (1024 * 1024)
    if size_mb >= 1:
        return f"{size_mb:.2f} MB"
    return f"{byte_size / 1024:.1f} KB"
