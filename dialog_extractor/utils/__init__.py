"""
Utility functions and helper classes.

This module contains logging setup and text post-processing helpers.
"""

from .logger import setup_logger, get_logger
from .text_processor import join_dialog_lines, save_text

__all__ = ["setup_logger", "get_logger", "join_dialog_lines", "save_text"]
