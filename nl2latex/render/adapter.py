"""
Render adapter: LaTeX string + ready renderer -> mount point.

Rendering failures stop here. They become a fallback marker in the mount
point and are never reported as conversion failures.
"""

from ..utils.constants import RENDER_ERROR_MARKER
from ..utils.errors import RenderError
from ..utils.logger import get_logger
from .engines import RenderEngine
from .loader import RendererLoader
from .mount import MountPoint

log = get_logger("render")


class RenderAdapter:
    """
    Renders in display mode, replacing whatever the mount point held.

    Usage:
        adapter = RenderAdapter(loader, MathtextEngine())
        if adapter.can_render(latex):
            adapter.render(latex, mount)
    """

    def __init__(self, loader: RendererLoader, engine: RenderEngine):
        self.loader = loader
        self.engine = engine

    def can_render(self, latex: str) -> bool:
        """Both preconditions of render(): renderer ready and latex non-empty."""
        return self.loader.is_ready and bool(latex)

    def render(self, latex: str, mount: MountPoint) -> bool:
        """
        Render latex into mount.

        Returns:
            True if the engine rendered, False if the fallback marker was written

        Raises:
            RenderError: called without checking can_render()
        """
        if not self.loader.is_ready:
            raise RenderError(f"Renderer is not ready ({self.loader.readiness.name})")
        if not latex:
            raise RenderError("Nothing to render")

        mount.clear()
        try:
            self.engine.render(latex, mount, display_mode=True, throw_on_error=False)
        except Exception as e:
            log.warning(f"{self.engine.name} could not render {latex!r}: {e}")
            mount.clear()
            mount.set_text(RENDER_ERROR_MARKER)
            return False
        return True
