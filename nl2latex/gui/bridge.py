"""
Qt <-> asyncio bridge.

The controller and renderer loader live on an asyncio loop running in its
own QThread. The GUI talks to them only through submit(); state changes
come back as Qt signals, which Qt delivers on the GUI thread.
"""

import asyncio

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from ..conversion import ConversionController
from ..render import RendererLoader
from ..utils.logger import get_logger

log = get_logger("gui")


class AsyncLoopThread(QThread):
    """Background thread running one asyncio event loop forever."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.loop = asyncio.new_event_loop()

    def run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(self, callback, *args):
        """Schedule a plain callable on the loop thread."""
        self.loop.call_soon_threadsafe(callback, *args)

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.wait()
        self.loop.close()


class ConversionBridge(QObject):
    """
    Exposes the controller and loader to widgets.

    Signals:
        stateChanged(ConversionState): every new conversion state
        rendererReady(): the renderer finished loading (emitted once)
        rendererFailed(str): the renderer could not be loaded
    """

    stateChanged = pyqtSignal(object)
    rendererReady = pyqtSignal()
    rendererFailed = pyqtSignal(str)

    def __init__(self, controller: ConversionController, loader: RendererLoader, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.loader = loader
        self._thread = AsyncLoopThread()

        # Both callbacks run on the loop thread; emit() queues to the GUI thread
        controller.add_listener(self.stateChanged.emit)
        loader.add_ready_callback(self.rendererReady.emit)

    def start(self):
        """Start the loop thread and begin loading the renderer."""
        self._thread.start()
        self._thread.submit(self._start_loading)

    def _start_loading(self):
        task = self.loader.ensure_loaded()
        task.add_done_callback(self._on_loading_done)

    def _on_loading_done(self, task):
        if not task.cancelled() and task.exception() is not None:
            self.rendererFailed.emit(str(task.exception()))

    def trigger(self, text: str):
        self._thread.submit(self.controller.trigger, text)

    def trigger_with_text(self, text: str):
        self._thread.submit(self.controller.trigger_with_text, text)

    def shutdown(self):
        """Close the model client and stop the loop thread."""
        future = asyncio.run_coroutine_threadsafe(self.controller.client.close(), self._thread.loop)
        try:
            future.result(timeout=5)
        except Exception as e:
            log.warning(f"Client did not close cleanly: {e}")
        self._thread.stop()
