"""
Main application window for nl2latex.

PyQt6-based GUI: description input, example prompts, rendered output,
explanation and copyable LaTeX source.
"""

import sys
from functools import partial

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QApplication,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..models import ConversionState, ConversionStatus
from ..render import RenderAdapter
from ..utils.constants import DARK_THEME, EXAMPLE_PROMPTS
from ..utils.errors import AssetLoadError, format_error_for_dialog, format_error_for_user
from ..utils.logger import get_logger
from .bridge import ConversionBridge
from .katex_widget import KatexWidget

log = get_logger("gui")

COPIED_FEEDBACK_MS = 1500


class DescriptionEdit(QPlainTextEdit):
    """Multi-line input: Enter submits, Shift+Enter inserts a newline."""

    submitted = pyqtSignal()

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and not (
            event.modifiers() & Qt.KeyboardModifier.ShiftModifier
        ):
            self.submitted.emit()
            return
        super().keyPressEvent(event)


class MainWindow(QMainWindow):
    """
    Main application window for nl2latex.

    Layout:
    - Input Panel: description, Generate button, example prompts
    - Error line: generic failure message
    - Output Panel: rendered formula, explanation, LaTeX source + Copy
    - Status Bar: request and renderer status
    """

    def __init__(self, bridge: ConversionBridge, adapter: RenderAdapter):
        super().__init__()

        self.setWindowTitle("Natural Language → LaTeX")
        self.setGeometry(100, 100, 760, 720)
        self.setMinimumSize(560, 480)

        self.bridge = bridge
        self.adapter = adapter
        self.theme = DARK_THEME

        # Current state
        self._state = ConversionState.idle()

        # Setup UI
        self._init_ui()

        bridge.stateChanged.connect(self._on_state_changed)
        bridge.rendererReady.connect(self._on_renderer_ready)
        bridge.rendererFailed.connect(self._on_renderer_failed)

        self._refresh()
        self.statusBar().showMessage("Loading renderer...")

    def _init_ui(self):
        """Initialize the main UI layout."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        central_widget.setStyleSheet(
            f"background: {self.theme['bg_color']}; color: {self.theme['text_color']};"
        )

        main_layout = QVBoxLayout(central_widget)
        main_layout.setSpacing(12)
        main_layout.setContentsMargins(24, 24, 24, 24)

        title = QLabel("L<span style='color:%s'>a</span>TeX" % self.theme["accent_color"])
        title.setTextFormat(Qt.TextFormat.RichText)
        title.setFont(QFont("Georgia", 28))
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        main_layout.addWidget(title)

        main_layout.addWidget(self._create_input_panel())
        main_layout.addLayout(self._create_examples_row())

        self.error_label = QLabel("")
        self.error_label.setStyleSheet(
            f"color: {self.theme['error_color']}; font-family: monospace;"
        )
        self.error_label.setVisible(False)
        main_layout.addWidget(self.error_label)

        main_layout.addWidget(self._create_output_panel(), stretch=1)

    def _create_input_panel(self) -> QGroupBox:
        """Create the description input with Generate button."""
        group = QGroupBox()
        layout = QVBoxLayout(group)

        self.input_edit = DescriptionEdit()
        self.input_edit.setPlaceholderText("Describe any mathematical expression…")
        self.input_edit.setFont(QFont("Georgia", 12))
        self.input_edit.setFixedHeight(80)
        self.input_edit.submitted.connect(self._on_generate_clicked)
        self.input_edit.textChanged.connect(self._update_generate_button)
        layout.addWidget(self.input_edit)

        button_layout = QHBoxLayout()
        hint = QLabel("Enter ↵ to generate")
        hint.setStyleSheet(f"color: {self.theme['muted_color']}; font-size: 11px;")
        button_layout.addWidget(hint)
        button_layout.addStretch()

        self.generate_btn = QPushButton("GENERATE")
        self.generate_btn.clicked.connect(self._on_generate_clicked)
        self.generate_btn.setStyleSheet(
            f"font-weight: bold; padding: 5px 20px; background: {self.theme['accent_color']};"
            f" color: {self.theme['bg_color']};"
        )
        button_layout.addWidget(self.generate_btn)

        layout.addLayout(button_layout)
        return group

    def _create_examples_row(self) -> QHBoxLayout:
        """One button per example prompt."""
        layout = QHBoxLayout()
        layout.addStretch()
        for example in EXAMPLE_PROMPTS:
            btn = QPushButton(example)
            btn.setStyleSheet(
                f"border: 1px solid {self.theme['border_color']}; border-radius: 10px;"
                f" padding: 4px 10px; color: {self.theme['muted_color']};"
            )
            btn.clicked.connect(partial(self._on_example_clicked, example))
            layout.addWidget(btn)
        layout.addStretch()
        return layout

    def _create_output_panel(self) -> QGroupBox:
        """Rendered formula, explanation and LaTeX source."""
        group = QGroupBox()
        layout = QVBoxLayout(group)

        self.output_widget = KatexWidget(theme=self.theme)
        layout.addWidget(self.output_widget, stretch=1)

        self.explanation_label = QLabel("")
        self.explanation_label.setWordWrap(True)
        self.explanation_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.explanation_label.setStyleSheet(
            f"font-style: italic; color: {self.theme['muted_color']};"
        )
        layout.addWidget(self.explanation_label)

        source_header = QHBoxLayout()
        source_header.addWidget(QLabel("LATEX SOURCE"))
        source_header.addStretch()
        self.copy_btn = QPushButton("COPY")
        self.copy_btn.clicked.connect(self._on_copy_latex)
        source_header.addWidget(self.copy_btn)
        layout.addLayout(source_header)

        self.source_view = QPlainTextEdit()
        self.source_view.setReadOnly(True)
        self.source_view.setFont(QFont("Courier New", 11))
        self.source_view.setFixedHeight(70)
        self.source_view.setStyleSheet(f"color: {self.theme['accent_color']};")
        layout.addWidget(self.source_view)

        return group

    # === State ===

    def _on_state_changed(self, state: ConversionState):
        """Handle a new conversion state from the controller."""
        self._state = state

        if state.status is ConversionStatus.LOADING:
            self.statusBar().showMessage("Generating...")
        elif state.status is ConversionStatus.SUCCEEDED:
            self.statusBar().showMessage("Done")
        elif state.status is ConversionStatus.FAILED:
            self.statusBar().showMessage(state.message)

        self._refresh()

    def _on_renderer_ready(self):
        self.statusBar().showMessage("Renderer ready")
        self._refresh()

    def _on_renderer_failed(self, reason: str):
        log.error(f"Renderer unavailable: {reason}")
        self._show_error(AssetLoadError("KaTeX", reason), "loading renderer")

    def _refresh(self):
        """Bring every widget in line with the current state."""
        state = self._state
        loading = state.is_loading

        self.error_label.setText(state.message if state.status is ConversionStatus.FAILED else "")
        self.error_label.setVisible(state.status is ConversionStatus.FAILED)

        self.explanation_label.setText("" if loading else state.explanation)
        self.source_view.setPlainText("" if loading else state.latex)
        self.copy_btn.setEnabled(bool(state.latex) and not loading)
        self._update_generate_button()

        if loading:
            self.generate_btn.setText("generating…")
            self.output_widget.set_text("rendering…")
            return
        self.generate_btn.setText("GENERATE")

        if not state.latex:
            self.output_widget.clear()
        elif not self.adapter.can_render(state.latex):
            self.output_widget.set_text("Loading renderer…")
        else:
            self.adapter.render(state.latex, self.output_widget)

    def _update_generate_button(self):
        has_text = bool(self.input_edit.toPlainText().strip())
        self.generate_btn.setEnabled(has_text and not self._state.is_loading)

    # === Error Handling ===

    def _show_error(self, exc: Exception, context: str = "") -> None:
        """Show an error dialog with suggestions and a brief status message."""
        error_info = format_error_for_dialog(exc, context)

        msg_box = QMessageBox(self)
        msg_box.setWindowTitle(error_info["title"])
        msg_box.setText(error_info["text"])
        msg_box.setIcon(error_info["icon"])

        if error_info["detailed_text"]:
            msg_box.setDetailedText(error_info["detailed_text"])

        msg_box.exec()

        self.statusBar().showMessage(format_error_for_user(exc, context))

    # === Event Handlers ===

    def _on_generate_clicked(self):
        """Convert the typed description."""
        text = self.input_edit.toPlainText()
        if text.strip():
            self.bridge.trigger(text)

    def _on_example_clicked(self, example: str):
        """Fill in an example prompt and convert it."""
        self.input_edit.setPlainText(example)
        self.bridge.trigger_with_text(example)

    def _on_copy_latex(self):
        """Copy current LaTeX to clipboard."""
        if not self._state.latex:
            return
        QApplication.clipboard().setText(self._state.latex)
        self.copy_btn.setText("COPIED ✓")
        self.statusBar().showMessage("LaTeX copied to clipboard")
        QTimer.singleShot(COPIED_FEEDBACK_MS, lambda: self.copy_btn.setText("COPY"))


def build_components(dark_mode: bool = True):
    """Wire client, controller, loader and render adapter for the GUI."""
    from ..conversion import ConversionClient, ConversionController
    from ..render import AssetCache, KatexAssets, KatexEngine, KatexPage
    from ..render import MathtextEngine, MathtextHost, RendererLoader
    from ..utils.config import ConverterConfig, RendererConfig
    from .katex_widget import WEBENGINE_AVAILABLE

    renderer_config = RendererConfig.from_env()
    assets = KatexAssets.from_config(renderer_config)

    if WEBENGINE_AVAILABLE:
        cache = AssetCache(renderer_config.cache_dir / f"katex-{renderer_config.katex_version}")
        page = KatexPage(cache, dark_mode=dark_mode)
        loader = RendererLoader.shared(page, assets)
        engine = KatexEngine(page)
    else:
        log.warning("QtWebEngine not available, rendering with matplotlib")
        loader = RendererLoader.shared(MathtextHost(), assets)
        engine = MathtextEngine(text_color=DARK_THEME["text_color"], background=DARK_THEME["panel_bg"])

    controller = ConversionController(ConversionClient(ConverterConfig.from_env()))
    return controller, loader, RenderAdapter(loader, engine)


def run_app():
    """Run the nl2latex application."""
    app = QApplication(sys.argv)
    app.setApplicationName("nl2latex")

    controller, loader, adapter = build_components()
    bridge = ConversionBridge(controller, loader)
    app.aboutToQuit.connect(bridge.shutdown)

    window = MainWindow(bridge, adapter)
    window.show()
    bridge.start()

    sys.exit(app.exec())
