"""
Image Cropper Pro v1.2 - Logging Module
=======================================
One "cropper" logger with console and file output; modules log
through children of it named after the module
"""

import logging
import sys
from typing import Optional
import config

class CropperLogger:
    """
    Owner of the "cropper" logger

    Handlers live on the parent only. Child loggers such as
    "cropper.crop_engine" carry no handlers of their own and propagate up,
    so each record is written once whichever module emits it.
    """

    _instance: Optional[logging.Logger] = None

    @classmethod
    def get_logger(cls, name: str = "cropper") -> logging.Logger:
        """
        Configure the parent on first use, then hand out a logger for `name`

        Args:
            name: Module name, usually __name__; "cropper" returns the parent

        Returns:
            The parent logger or its child "cropper.<name>"
        """
        if cls._instance is None:
            cls._instance = cls._setup_logger("cropper")
        if name in ("cropper", cls._instance.name):
            return cls._instance
        return cls._instance.getChild(name)

    @classmethod
    def _setup_logger(cls, name: str) -> logging.Logger:
        """Attach console (LOG_LEVEL) and file (DEBUG) handlers to the parent"""
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers on Streamlit reruns
        if logger.handlers:
            return logger

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, config.LOG_LEVEL))
        console_formatter = logging.Formatter(
            '%(levelname)s - %(message)s'
        )
        console_handler.setFormatter(console_formatter)

        # File handler
        try:
            log_path = config.get_project_root() / config.LOG_FILE
            file_handler = logging.FileHandler(log_path, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(config.LOG_FORMAT)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}")

        logger.addHandler(console_handler)
        return logger

def get_logger(name: str = "cropper") -> logging.Logger:
    """Module-level shortcut: logger = get_logger(__name__)"""
    return CropperLogger.get_logger(name)
