"""
Environments the renderer can be loaded into.

An AssetHost receives the stylesheet and scripts from RendererLoader.
KatexPage is the HTML document shown by the GUI's web view; MathtextHost
stands for matplotlib's built-in mathtext, which needs nothing injected.
"""

import html
import importlib.util
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..utils.constants import DARK_THEME, LIGHT_THEME
from ..utils.errors import AssetLoadError
from .assets import AssetCache


class AssetHost(ABC):
    """Somewhere a stylesheet and scripts can be injected, in order."""

    @abstractmethod
    def has_engine(self) -> bool:
        """True if the rendering engine is already available here."""
        pass

    @abstractmethod
    async def add_stylesheet(self, url: str) -> None:
        pass

    @abstractmethod
    async def add_script(self, url: str) -> None:
        """Load a script; returns once it has finished loading."""
        pass


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    {head}
    <style>
        body {{
            font-family: Georgia, serif;
            margin: 0;
            padding: 24px;
            background: {bg_color};
            color: {text_color};
            display: flex;
            align-items: center;
            justify-content: center;
            min-height: 60px;
        }}
        .katex-output {{
            font-size: 1.6em;
            color: {text_color};
            text-align: center;
        }}
        .katex-output .katex-display {{
            margin: 0;
        }}
        .katex-error, .render-error {{
            color: {error_color};
            font-family: monospace;
            font-size: 13px;
        }}
    </style>
</head>
<body>
{body}
</body>
</html>
"""


class KatexPage(AssetHost):
    """
    HTML document that carries KaTeX.

    The stylesheet is linked (its fonts resolve relative to the CDN URL);
    scripts are fetched through the cache and inlined so the page works
    offline once the cache is warm.

    Usage:
        page = KatexPage(AssetCache(cache_dir))
        await RendererLoader(page, assets).ensure_loaded()
        view.setHtml(page.document('<div class="katex-output">...</div>'))
    """

    def __init__(self, cache: AssetCache, dark_mode: bool = True):
        self.cache = cache
        self.theme: Dict[str, str] = DARK_THEME if dark_mode else LIGHT_THEME
        self.head: List[str] = []
        self.stylesheets: List[str] = []
        self.scripts: List[str] = []
        self._core_script: Optional[str] = None

    def has_engine(self) -> bool:
        return self._core_script is not None

    async def add_stylesheet(self, url: str) -> None:
        self.stylesheets.append(url)
        self.head.append(f'<link rel="stylesheet" href="{html.escape(url)}">')

    async def add_script(self, url: str) -> None:
        source = await self.cache.fetch(url)
        if not source.strip():
            raise AssetLoadError(url, "empty script")

        # An inline </script> would end the tag early
        source = source.replace("</script", "<\\/script")
        self.scripts.append(url)
        self.head.append(f"<script>{source}</script>")
        if self._core_script is None:
            self._core_script = url

    def document(self, body: str) -> str:
        """Full HTML page with every injected asset in its head."""
        return PAGE_TEMPLATE.format(head="\n    ".join(self.head), body=body, **self.theme)


class MathtextHost(AssetHost):
    """
    matplotlib's mathtext: present whenever matplotlib is installed.

    Nothing can be injected; if matplotlib is missing the loader stays at
    LOADING and rendering is unavailable.
    """

    def has_engine(self) -> bool:
        return importlib.util.find_spec("matplotlib") is not None

    async def add_stylesheet(self, url: str) -> None:
        raise AssetLoadError(url, "matplotlib is not installed")

    async def add_script(self, url: str) -> None:
        raise AssetLoadError(url, "matplotlib is not installed")
