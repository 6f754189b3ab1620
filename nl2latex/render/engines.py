"""
Rendering engines.

Supports two backends:
- KaTeX: web-based, used by the GUI's QWebEngineView
- matplotlib mathtext: native PNG rendering, used by the CLI and as the
  GUI fallback when QtWebEngine is not installed
"""

import io
import json
from abc import ABC, abstractmethod

from ..utils.constants import RENDER_ERROR_MARKER
from ..utils.errors import RenderError
from .mount import MountPoint
from .page import KatexPage


class RenderEngine(ABC):
    """Draws one LaTeX string into a mount point."""

    name: str

    @abstractmethod
    def render(
        self,
        latex: str,
        target: MountPoint,
        *,
        display_mode: bool = True,
        throw_on_error: bool = False,
    ) -> None:
        """
        Render latex into target.

        Args:
            latex: Delimiter-free LaTeX
            target: Mount point to write into
            display_mode: Block (centered, standalone) rather than inline math
            throw_on_error: Raise on malformed LaTeX instead of showing it inline
        """
        pass


KATEX_MOUNT = """<div id="katex-mount" class="katex-output"></div>
<script>
(function () {{
    var el = document.getElementById("katex-mount");
    try {{
        katex.render({latex}, el, {{
            displayMode: {display_mode},
            throwOnError: {throw_on_error},
            output: "html"
        }});
    }} catch (e) {{
        el.className = "render-error";
        el.textContent = {marker};
    }}
}})();
</script>"""


def _js_literal(value) -> str:
    """JSON-encode for embedding inside an inline <script>."""
    return json.dumps(value).replace("</", "<\\/")


class KatexEngine(RenderEngine):
    """
    Writes a KaTeX page into the target.

    The page's own try/catch writes the fallback marker if KaTeX throws
    while the page runs in the browser.
    """

    name = "katex"

    def __init__(self, page: KatexPage):
        self.page = page

    def render(self, latex, target, *, display_mode=True, throw_on_error=False):
        if not self.page.has_engine():
            raise RenderError("KaTeX is not loaded into the page")

        body = KATEX_MOUNT.format(
            latex=_js_literal(latex),
            display_mode=_js_literal(display_mode),
            throw_on_error=_js_literal(throw_on_error),
            marker=_js_literal(RENDER_ERROR_MARKER),
        )
        target.set_html(self.page.document(body))


class MathtextEngine(RenderEngine):
    """
    Render LaTeX to PNG with matplotlib's mathtext.

    mathtext has no error-suppression mode: malformed input always raises
    ValueError, whatever throw_on_error says.
    """

    name = "mathtext"

    def __init__(
        self,
        fontsize: int = 14,
        dpi: int = 150,
        text_color: str = "black",
        background: str = "white",
    ):
        self.fontsize = fontsize
        self.dpi = dpi
        self.text_color = text_color
        self.background = background

    def render(self, latex, target, *, display_mode=True, throw_on_error=False):
        target.set_image(self.render_png(latex, display_mode=display_mode))

    def render_png(self, latex: str, display_mode: bool = True) -> bytes:
        """Render to PNG bytes. Raises ValueError on malformed LaTeX."""
        from matplotlib.figure import Figure

        fontsize = int(self.fontsize * 1.6) if display_mode else self.fontsize

        # Figure without pyplot: no GUI backend involved
        fig = Figure(figsize=(8, 1))
        fig.patch.set_facecolor(self.background)
        fig.text(
            0.5,
            0.5,
            f"${latex}$",
            fontsize=fontsize,
            color=self.text_color,
            ha="center",
            va="center",
        )

        buf = io.BytesIO()
        fig.savefig(
            buf,
            format="png",
            dpi=self.dpi,
            bbox_inches="tight",
            pad_inches=0.1,
            facecolor=self.background,
        )
        return buf.getvalue()
