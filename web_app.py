"""
Image Cropper Pro v1.2 - Main Application
=========================================
Upload images, crop a region of each and download the result
"""

import streamlit as st

import config
import cropper_engine as engine
import editor_module as editor
import translations as T_DATA
import utils
from logger import get_logger
from validators import CropError, ImageNotReady, ImageUnreadable

logger = get_logger(__name__)

st.set_page_config(
    page_title=f"{config.APP_NAME} v{config.APP_VERSION}",
    page_icon="✂️",
    layout="wide",
    initial_sidebar_state="expanded"
)

utils.inject_css()
utils.init_session_state()

lang_code = st.session_state['lang_code']
T = T_DATA.TRANSLATIONS[lang_code]
store = st.session_state['store']
controller = st.session_state['controller']

def start_editing(image_id: str):
    # A dialog dismissed with the close button leaves its session open
    controller.cancel()
    try:
        controller.open_for_edit(image_id)
    except ImageNotReady:
        utils.notify(T['msg_not_ready'], "warning")
        return
    except ImageUnreadable:
        utils.notify(T['msg_unreadable'].format(store.get(image_id).display_name), "error")
        return
    except CropError as e:
        utils.notify(str(e), "error")
        logger.error(f"Open for edit failed: {e}")
        return
    editor.open_editor_dialog(image_id, T)

def delete_image(image_id: str):
    name = store.get(image_id).display_name
    controller.delete_image(image_id)
    utils.drop_download(image_id)
    utils.notify(T['toast_deleted'].format(name), "info")

# === SIDEBAR ===
with st.sidebar:
    st.header(T['sb_config'])
    st.selectbox(T['lbl_lang'], list(T_DATA.TRANSLATIONS.keys()), key='lang_code')
    st.caption(T['lbl_limit'].format(len(store), store.max_images))
    if st.button(T['btn_clear_workspace'], type="secondary", use_container_width=True):
        utils.cleanup_workspace()
        st.rerun()

# === MAIN ===
st.title(T['title'])
st.caption(T['subtitle'])

# Export workers finish after the commit rerun; poll for their results
@st.fragment(run_every=2)
def downloads_panel():
    utils.drain_events(T)
    downloads = st.session_state['downloads']
    if not downloads:
        return
    st.subheader(T['sec_exports'])
    dl_cols = st.columns(config.GRID_COLUMNS)
    for i, result in enumerate(reversed(downloads)):
        with dl_cols[i % config.GRID_COLUMNS]:
            st.download_button(
                T['btn_download'].format(result.filename),
                result.data,
                file_name=result.filename,
                mime=result.mime,
                use_container_width=True,
                key=f"dl_{result.image_id}_{len(result.data)}",
            )

downloads_panel()

with st.expander(T['expander_add_files'], expanded=len(store) == 0):
    uploaded = st.file_uploader(
        T['uploader_label'],
        type=[ext.lstrip('.') for ext in config.SUPPORTED_INPUT_FORMATS],
        accept_multiple_files=True,
        key=f"up_{st.session_state['uploader_key']}",
    )

if uploaded:
    utils.handle_uploads(uploaded, T)
    st.session_state['uploader_key'] += 1
    st.rerun()

entries = store.list()
if not entries:
    st.markdown(
        f'<div class="empty-placeholder">{T["empty_state"]}<br><small>{T["empty_hint"]}</small></div>',
        unsafe_allow_html=True,
    )

# Thumbnail grid
cols = st.columns(config.GRID_COLUMNS)
for i, entry in enumerate(entries):
    with cols[i % config.GRID_COLUMNS]:
        thumb = engine.get_thumbnail(entry.source_handle)
        if thumb: st.image(thumb, use_container_width=True)
        if entry.has_been_cropped:
            st.markdown(f'<span class="cropped-badge">{T["badge_cropped"]}</span>', unsafe_allow_html=True)
        if entry.load_error:
            st.markdown(f'<span class="unreadable-badge">{T["badge_unreadable"]}</span>', unsafe_allow_html=True)
        st.markdown(f"**{entry.display_name}**")
        st.caption(f"{entry.size_mb:.2f} MB")

        c_crop, c_hist, c_del = st.columns([2, 2, 1])
        with c_crop:
            if st.button(T['btn_crop'], key=f"crop_{entry.id}", help=T['help_crop'],
                         disabled=entry.load_error is not None, use_container_width=True):
                start_editing(entry.id)
        with c_hist:
            with st.popover(T['btn_history'], help=T['help_history'],
                            disabled=not entry.history, use_container_width=True):
                if entry.history:
                    for record in entry.history[-config.HISTORY_DISPLAY_LIMIT:]:
                        st.text(record.label())
                else:
                    st.text(T['no_history'])
        with c_del:
            st.button(T['btn_delete'], key=f"del_{entry.id}", help=T['help_delete'],
                      on_click=delete_image, args=(entry.id,))
