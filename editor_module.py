"""
Image Cropper Pro v1.2 - Editor Module
======================================
Crop dialog: interactive cropper, numeric fields, zoom and aspect lock
"""

import streamlit as st
from typing import Tuple
from PIL import Image, ImageOps
from streamlit_cropper import st_cropper
import config
import geometry
import utils
from crop_session import CropSessionController
from geometry import AspectLock
from logger import get_logger
from validators import CropError, ValidationError, validate_image_file

logger = get_logger(__name__)

FIELD_LABELS = (('x', 'lbl_x'), ('y', 'lbl_y'), ('width', 'lbl_w'), ('height', 'lbl_h'))

def create_proxy_image(img: Image.Image, zoom: float = 1.0) -> Tuple[Image.Image, float]:
    """
    Create proxy (downscaled) image for the cropper

    Zoom enlarges the proxy, up to the source size.

    Returns:
        Tuple of (proxy_image, scale_factor) with source = proxy * scale_factor
    """
    target_width = int(config.PROXY_IMAGE_WIDTH * zoom)
    w, h = img.size
    if w <= target_width:
        return img, 1.0

    new_h = max(1, int(h * target_width / w))
    proxy = img.resize((target_width, new_h), Image.Resampling.LANCZOS)
    scale = w / target_width
    logger.debug(f"Proxy created: {w}x{h} → {target_width}x{new_h} (scale: {scale:.2f})")
    return proxy, scale

def aspect_label_for(lock: AspectLock) -> str:
    for label, value in config.ASPECT_RATIOS.items():
        if AspectLock.from_setting(value) == lock:
            return label
    return next(iter(config.ASPECT_RATIOS))

def _apply(action, *args):
    """Run an edit against the controller, surfacing crop errors as a toast"""
    try:
        action(*args)
    except CropError as e:
        utils.notify(str(e), "warning")
        logger.warning(f"Edit rejected: {e}")

def _on_aspect_change(controller: CropSessionController, key: str):
    _apply(controller.set_aspect_lock, AspectLock.from_setting(config.ASPECT_RATIOS[st.session_state[key]]))
    utils.bump_reset()

def _on_zoom_change(controller: CropSessionController, key: str):
    _apply(controller.set_zoom, st.session_state[key])
    utils.bump_reset()

def _on_field_change(controller: CropSessionController, field_name: str, key: str):
    _apply(controller.set_field_value, field_name, st.session_state[key])
    utils.bump_reset()

def _on_max(controller: CropSessionController):
    _apply(controller.maximize_area)
    utils.bump_reset()

@st.dialog("✂️ Crop", width="large")
def open_editor_dialog(image_id: str, T: dict):
    """
    Crop dialog for an image whose session is already open

    Args:
        image_id: Store id of the image being edited
        T: Translation dictionary
    """
    controller: CropSessionController = st.session_state['controller']
    session = controller.session
    if session is None or session.target_image_id != image_id:
        st.info(T['msg_session_closed'])
        return

    entry = st.session_state['store'].get(image_id)
    dims = session.dimensions
    reset = st.session_state['reset_counter']

    try:
        validate_image_file(entry.source_handle)
        with Image.open(entry.source_handle) as img_temp:
            img_full = ImageOps.exif_transpose(img_temp).convert('RGB')
    except ValidationError as e:
        st.error(f"❌ {e}")
        return
    except Exception as e:
        st.error(f"❌ Error loading image: {e}")
        logger.error(f"Image load failed: {e}")
        return

    img_proxy, scale_factor = create_proxy_image(img_full, session.zoom)
    st.caption(f"📄 **{entry.display_name}** &nbsp;•&nbsp; 📏 **{dims.width}x{dims.height}** "
               f"&nbsp;•&nbsp; 💾 **{utils.format_size(entry.byte_size)}**")

    col_canvas, col_controls = st.columns([3, 1], gap="small")

    # === CANVAS ===
    with col_canvas:
        ratio = controller.engine.current_ratio()
        try:
            box = st_cropper(
                img_proxy,
                realtime_update=True,
                box_color='#FF0000',
                aspect_ratio=(ratio, 1.0) if ratio else None,
                should_resize_image=False,
                default_coords=geometry.to_coords(session.rectangle, scale_factor),
                return_type='box',
                key=f"crp_{image_id}_{reset}",
            )
        except Exception as e:
            st.error(f"Cropper error: {e}")
            logger.error(f"Cropper failed: {e}", exc_info=True)
            box = None

        # The cropper echoes its default box on mount; only real drags are reported
        if box and box != geometry.to_box(session.rectangle, scale_factor):
            _apply(controller.report_interactive_area, geometry.from_box(box, scale_factor))

    # === CONTROLS ===
    with col_controls:
        zoom_key = f"zoom_{image_id}_{reset}"
        st.slider(
            T['lbl_zoom'], config.MIN_ZOOM, config.MAX_ZOOM,
            value=float(session.zoom), step=config.ZOOM_STEP, format="%.1fx",
            key=zoom_key, on_change=_on_zoom_change, args=(controller, zoom_key),
        )

        aspect_key = f"asp_{image_id}_{reset}"
        labels = list(config.ASPECT_RATIOS.keys())
        st.selectbox(
            T['lbl_aspect'], labels,
            index=labels.index(aspect_label_for(session.aspect_lock)),
            key=aspect_key, on_change=_on_aspect_change, args=(controller, aspect_key),
        )
        st.button(T['btn_max'], use_container_width=True, help=T['help_max'],
                  key=f"max_{image_id}", on_click=_on_max, args=(controller,))

        st.divider()
        st.markdown(f"**{T['lbl_dims']}**")
        rect = controller.engine.current_rectangle()
        upper = {
            'x': dims.width - rect.width,
            'y': dims.height - rect.height,
            'width': dims.width,
            'height': dims.height,
        }
        # Keyed on the rectangle so drags on the canvas refresh the fields
        rect_sig = "_".join(str(int(round(v))) for v in (rect.x, rect.y, rect.width, rect.height))
        for field_name, label_key in FIELD_LABELS:
            field_key = f"fld_{field_name}_{image_id}_{reset}_{rect_sig}"
            lower = int(0 if field_name in ('x', 'y') else controller.engine.min_dimension)
            higher = max(lower, int(upper[field_name]))
            st.number_input(
                T[label_key],
                min_value=lower,
                max_value=higher,
                value=min(higher, max(lower, int(round(getattr(rect, field_name))))),
                step=1,
                key=field_key,
                on_change=_on_field_change,
                args=(controller, field_name, field_key),
            )

        st.caption(T['lbl_original'].format(dims.label()))
        st.caption(T['lbl_crop_size'].format(rect.label()))

        st.divider()
        c_cancel, c_save = st.columns(2)
        with c_cancel:
            if st.button(T['btn_cancel'], use_container_width=True, key=f"cancel_{image_id}"):
                controller.cancel(session)
                st.rerun()
        with c_save:
            if st.button(T['btn_save'], type="primary", use_container_width=True, key=f"save_{image_id}"):
                try:
                    record = controller.commit(session)
                    logger.info(f"Crop committed: {entry.display_name} {record.dimensions}")
                    st.rerun()
                except CropError as e:
                    st.error(f"❌ {e}")
                    logger.error(f"Commit failed: {e}")
