"""
KaTeX output widget for PyQt6.

Shows rendered LaTeX using KaTeX in QtWebEngine. Falls back to a QLabel
fed by matplotlib if WebEngine is not available.
"""

import base64
import html

# Try to import PyQt6 WebEngine
try:
    from PyQt6.QtWebEngineWidgets import QWebEngineView

    WEBENGINE_AVAILABLE = True
except ImportError:
    WEBENGINE_AVAILABLE = False
    QWebEngineView = None

from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtGui import QFont, QPixmap
from PyQt6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from ..utils.constants import DARK_THEME

# Lets the page's <link> to the CDN stylesheet load from a setHtml() document
BASE_URL = QUrl("https://localhost/")


class KatexWidget(QWidget):
    """
    Mount point widget for rendered LaTeX.

    Uses QWebEngineView if available, falls back to a label.
    Implements clear/set_text/set_html/set_image so it can be handed
    straight to RenderAdapter.
    """

    def __init__(self, parent=None, theme=None):
        super().__init__(parent)

        self.theme = theme or DARK_THEME
        self._use_webengine = WEBENGINE_AVAILABLE

        self._init_ui()

    def _init_ui(self):
        """Initialize the UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        if self._use_webengine:
            self.web_view = QWebEngineView()
            self.web_view.setMinimumHeight(120)
            layout.addWidget(self.web_view)
        else:
            # Fallback to scrollable label
            scroll = QScrollArea()
            scroll.setWidgetResizable(True)
            scroll.setFrameShape(QFrame.Shape.NoFrame)

            self.fallback_label = QLabel()
            self.fallback_label.setWordWrap(True)
            self.fallback_label.setFont(QFont("Monospace", 11))
            self.fallback_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self.fallback_label.setMinimumHeight(120)

            scroll.setWidget(self.fallback_label)
            layout.addWidget(scroll)

    def _message_page(self, text: str) -> str:
        """Minimal themed page showing a line of plain text."""
        return (
            f'<html><body style="background:{self.theme["panel_bg"]};'
            f'color:{self.theme["muted_color"]};font-family:monospace;font-size:13px;'
            'display:flex;align-items:center;justify-content:center;">'
            f"{html.escape(text)}</body></html>"
        )

    # === MountPoint ===

    def clear(self):
        """Clear the display."""
        if self._use_webengine:
            self.web_view.setHtml("")
        else:
            self.fallback_label.clear()

    def set_text(self, text: str):
        """Show plain text (placeholders, fallback marker)."""
        if self._use_webengine:
            self.web_view.setHtml(self._message_page(text))
        else:
            self.fallback_label.setTextFormat(Qt.TextFormat.PlainText)
            self.fallback_label.setText(text)

    def set_html(self, html_content: str):
        """Display a full HTML document."""
        if self._use_webengine:
            self.web_view.setHtml(html_content, BASE_URL)
        else:
            self.fallback_label.setTextFormat(Qt.TextFormat.RichText)
            self.fallback_label.setText(html_content)

    def set_image(self, png: bytes):
        """Display a PNG."""
        if self._use_webengine:
            data = base64.b64encode(png).decode("ascii")
            self.web_view.setHtml(
                f'<html><body style="background:{self.theme["panel_bg"]};text-align:center;">'
                f'<img src="data:image/png;base64,{data}"></body></html>'
            )
        else:
            pixmap = QPixmap()
            pixmap.loadFromData(png)
            self.fallback_label.setPixmap(pixmap)
