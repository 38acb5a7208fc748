"""
Image Cropper Pro v1.2 - Translations Module
============================================
UI text strings in multiple languages
"""

TRANSLATIONS = {
    "en": {
        "title": "✂️ Image Cropper",
        "subtitle": "Crop several images, one region at a time",

        # Sidebar
        "sb_config": "🛠 Settings",
        "lbl_lang": "Language",
        "btn_clear_workspace": "🗑️ Clear workspace",
        "lbl_limit": "{} of {} images loaded",

        # Upload
        "expander_add_files": "📥 Add images",
        "uploader_label": "Drag and drop images here or browse",
        "empty_state": "🖼️ Upload images to begin",
        "empty_hint": "(Drag and drop onto the uploader or use Browse files)",
        "toast_invalid_title": "Invalid files: only image files are accepted",
        "toast_too_many": "Too many files: you can only upload up to {} more images",
        "toast_duplicates": "Duplicate files detected: {} already uploaded.",
        "toast_added": "{} image(s) added",

        # Grid
        "badge_cropped": "✅ Cropped",
        "btn_crop": "✂️ Crop",
        "btn_history": "📜 History",
        "btn_delete": "🗑️",
        "help_crop": "Crop Image",
        "help_history": "Crop History",
        "help_delete": "Delete Image",
        "no_history": "No crop history",

        # Editor
        "lbl_zoom": "Zoom",
        "lbl_aspect": "Aspect Ratio",
        "lbl_dims": "Crop Dimensions",
        "lbl_x": "X Position",
        "lbl_y": "Y Position",
        "lbl_w": "Width",
        "lbl_h": "Height",
        "btn_max": "⛶ MAX",
        "help_max": "Largest crop for the selected ratio",
        "lbl_original": "Original Image: {}",
        "lbl_crop_size": "Crop Size: {}",
        "btn_cancel": "Cancel",
        "btn_save": "Crop & Download",
        "msg_not_ready": "⏳ Image is still loading, try again in a moment",
        "msg_unreadable": "❌ {} could not be read. Delete it and upload it again.",
        "toast_measure_failed": "Could not read {}: {}",
        "badge_unreadable": "⚠️ Unreadable",
        "msg_session_closed": "This crop session was closed. Open the image again.",

        # Export
        "sec_exports": "⬇️ Downloads",
        "btn_download": "⬇️ {}",
        "toast_crop_ok": "Image cropped successfully",
        "toast_export_failed": "Export failed for {}: {}",
        "toast_deleted": "{} deleted",
    },
    "ua": {
        "title": "✂️ Обрізка зображень",
        "subtitle": "Обрізайте кілька зображень по одній області",

        # Sidebar
        "sb_config": "🛠 Налаштування",
        "lbl_lang": "Мова",
        "btn_clear_workspace": "🗑️ Очистити робочу область",
        "lbl_limit": "Завантажено {} з {} зображень",

        # Upload
        "expander_add_files": "📥 Додати зображення",
        "uploader_label": "Перетягніть зображення сюди або оберіть файли",
        "empty_state": "🖼️ Завантажте зображення, щоб почати",
        "empty_hint": "(Перетягніть файли або натисніть Browse files)",
        "toast_invalid_title": "Невірні файли: приймаються лише зображення",
        "toast_too_many": "Забагато файлів: можна додати ще не більше {} зображень",
        "toast_duplicates": "Виявлено дублікати: {} вже завантажено.",
        "toast_added": "Додано зображень: {}",

        # Grid
        "badge_cropped": "✅ Обрізано",
        "btn_crop": "✂️ Обрізати",
        "btn_history": "📜 Історія",
        "btn_delete": "🗑️",
        "help_crop": "Обрізати зображення",
        "help_history": "Історія обрізки",
        "help_delete": "Видалити зображення",
        "no_history": "Історія порожня",

        # Editor
        "lbl_zoom": "Масштаб",
        "lbl_aspect": "Пропорції",
        "lbl_dims": "Розміри області",
        "lbl_x": "Позиція X",
        "lbl_y": "Позиція Y",
        "lbl_w": "Ширина",
        "lbl_h": "Висота",
        "btn_max": "⛶ MAX",
        "help_max": "Найбільша область для обраних пропорцій",
        "lbl_original": "Оригінал: {}",
        "lbl_crop_size": "Розмір області: {}",
        "btn_cancel": "Скасувати",
        "btn_save": "Обрізати та завантажити",
        "msg_not_ready": "⏳ Зображення ще завантажується, спробуйте за мить",
        "msg_unreadable": "❌ Не вдалося прочитати {}. Видаліть його та завантажте знову.",
        "toast_measure_failed": "Не вдалося прочитати {}: {}",
        "badge_unreadable": "⚠️ Пошкоджено",
        "msg_session_closed": "Сесію обрізки закрито. Відкрийте зображення знову.",

        # Export
        "sec_exports": "⬇️ Завантаження",
        "btn_download": "⬇️ {}",
        "toast_crop_ok": "Зображення успішно обрізано",
        "toast_export_failed": "Помилка експорту {}: {}",
        "toast_deleted": "{} видалено",
    },
}
