"""
One-time loading of the rendering engine.

RendererLoader is a process-wide service: the first ensure_loaded() call
starts the stylesheet -> core script -> extension script sequence, every
later call gets the same task back.
"""

import asyncio
from typing import Callable, List, Optional

from ..models import RendererReadiness
from ..utils.logger import get_logger
from .assets import KatexAssets
from .page import AssetHost

log = get_logger("render")

ReadyCallback = Callable[[], None]


class RendererLoader:
    """
    Loads the renderer into an AssetHost exactly once.

    Readiness only moves forward: NOT_LOADED -> LOADING -> READY. If an
    asset fails to load, readiness stays at LOADING for the life of the
    process and nothing retries; treat anything but READY as "rendering
    unavailable".

    Usage:
        loader = RendererLoader.shared(page, assets)
        loader.add_ready_callback(lambda: print("renderer ready"))
        await loader.ensure_loaded()
    """

    _shared: Optional["RendererLoader"] = None

    def __init__(self, host: AssetHost, assets: KatexAssets):
        self.host = host
        self.assets = assets
        self._readiness = RendererReadiness.NOT_LOADED
        self._task: Optional[asyncio.Future] = None
        self._callbacks: List[ReadyCallback] = []

    @classmethod
    def shared(
        cls, host: Optional[AssetHost] = None, assets: Optional[KatexAssets] = None
    ) -> "RendererLoader":
        """
        The process-wide loader, created on first call.

        The first call must supply host and assets; later arguments are ignored.
        """
        if cls._shared is None:
            if host is None or assets is None:
                raise ValueError("First call to RendererLoader.shared() needs host and assets")
            cls._shared = cls(host, assets)
        return cls._shared

    @classmethod
    def reset_shared(cls) -> None:
        """Forget the process-wide loader (tests only)."""
        cls._shared = None

    @property
    def readiness(self) -> RendererReadiness:
        return self._readiness

    @property
    def is_ready(self) -> bool:
        return self._readiness is RendererReadiness.READY

    def add_ready_callback(self, callback: ReadyCallback) -> None:
        """
        Call back once the renderer is ready.

        Fires immediately if already READY; otherwise exactly once on the
        LOADING -> READY transition.
        """
        if self.is_ready:
            callback()
        else:
            self._callbacks.append(callback)

    def ensure_loaded(self) -> asyncio.Future:
        """
        Start loading if needed and return the (shared) completion handle.

        Must be called on the event loop thread. Safe to call any number
        of times, concurrently or not.
        """
        if self._task is not None:
            return self._task

        loop = asyncio.get_running_loop()
        if self.host.has_engine():
            log.debug("Renderer already present")
            self._task = loop.create_future()
            self._task.set_result(None)
            self._mark_ready()
            return self._task

        self._readiness = RendererReadiness.LOADING
        self._task = loop.create_task(self._load())
        self._task.add_done_callback(self._on_load_done)
        return self._task

    async def wait_ready(self) -> None:
        """Load if needed and wait for it. Raises if loading failed."""
        await self.ensure_loaded()

    async def _load(self) -> None:
        log.debug(f"Injecting stylesheet {self.assets.stylesheet_url}")
        await self.host.add_stylesheet(self.assets.stylesheet_url)

        log.debug(f"Loading core script {self.assets.core_script_url}")
        await self.host.add_script(self.assets.core_script_url)

        # Auto-render needs the core engine in place
        log.debug(f"Loading extension script {self.assets.extension_script_url}")
        await self.host.add_script(self.assets.extension_script_url)

        self._mark_ready()

    def _on_load_done(self, task: asyncio.Future) -> None:
        if task.cancelled():
            log.warning("Renderer loading was cancelled")
            return
        error = task.exception()
        if error is not None:
            log.error(f"Renderer failed to load, rendering unavailable: {error}")

    def _mark_ready(self) -> None:
        self._readiness = RendererReadiness.READY
        log.info("Renderer ready")

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                # Readiness is already READY; one bad listener must not fail the load
                log.opt(exception=e).error(f"Ready callback {callback!r} raised")
