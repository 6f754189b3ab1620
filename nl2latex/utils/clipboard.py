"""
System clipboard access.

Tries PyQt6 first, then the xclip / xsel command-line tools.
"""

import subprocess
from typing import Optional

from .logger import get_logger

log = get_logger("clipboard")


def get_clipboard_text() -> Optional[str]:
    """Get text from system clipboard."""
    try:
        from PyQt6.QtWidgets import QApplication

        app = QApplication.instance() or QApplication([])
        return app.clipboard().text()
    except ImportError:
        pass

    for command in (
        ["xclip", "-selection", "clipboard", "-o"],
        ["xsel", "--clipboard", "--output"],
    ):
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError:
            continue
        if result.returncode == 0:
            return result.stdout

    return None


def set_clipboard_text(text: str) -> bool:
    """
    Copy text to the system clipboard.

    Returns:
        True if some backend accepted the text
    """
    # Only a running Qt app keeps clipboard ownership after this call
    try:
        from PyQt6.QtWidgets import QApplication

        app = QApplication.instance()
        if app is not None:
            app.clipboard().setText(text)
            return True
    except ImportError:
        pass

    for command in (
        ["xclip", "-selection", "clipboard", "-i"],
        ["xsel", "--clipboard", "--input"],
    ):
        try:
            result = subprocess.run(command, input=text, capture_output=True, text=True)
        except FileNotFoundError:
            continue
        if result.returncode == 0:
            return True

    log.warning("No clipboard backend available")
    return False
