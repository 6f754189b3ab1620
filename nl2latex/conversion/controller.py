"""
Conversion state machine.

Owns the single current ConversionState and sequences requests so the
visible state always belongs to the most recently issued request.
"""

import asyncio
from typing import Callable, List, Optional, Set

from ..models import ConversionState
from ..utils.constants import GENERIC_FAILURE_MESSAGE
from ..utils.errors import ConversionError, ErrorKind
from ..utils.logger import get_logger
from .client import ConversionClient

log = get_logger("convert")

StateListener = Callable[[ConversionState], None]


class ConversionController:
    """
    Idle -> Loading -> Succeeded | Failed, restarted by every trigger.

    All methods must run on the event loop thread. trigger() may be called
    at any time, including while a previous request is still in flight;
    the older reply is discarded when it arrives.

    Usage:
        controller = ConversionController(ConversionClient(config))
        controller.add_listener(print)
        task = controller.trigger("Bayes' theorem")
        await task
    """

    def __init__(self, client: ConversionClient):
        self.client = client
        self.input_text = ""
        self._state = ConversionState.idle()
        self._sequence = 0
        self._listeners: List[StateListener] = []
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def sequence(self) -> int:
        """Sequence number of the most recently issued request (0 = none yet)."""
        return self._sequence

    def add_listener(self, listener: StateListener) -> None:
        """Call listener with every new state."""
        self._listeners.append(listener)

    def _set_state(self, state: ConversionState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(state)

    def trigger(self, text: str) -> Optional[asyncio.Task]:
        """
        Start converting text.

        Blank text is a no-op: nothing is dispatched and the state is untouched.

        Returns:
            The dispatch task, or None if nothing was dispatched
        """
        text = (text or "").strip()
        if not text:
            log.debug("Ignoring blank input")
            return None

        self._sequence += 1
        sequence = self._sequence
        log.info(f"Dispatching request #{sequence}: {text!r}")
        self._set_state(ConversionState.loading())

        task = asyncio.get_running_loop().create_task(self._dispatch(sequence, text))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def trigger_with_text(self, text: str) -> Optional[asyncio.Task]:
        """Set the input text and trigger it (used for example prompts)."""
        self.input_text = text
        return self.trigger(text)

    def _is_current(self, sequence: int) -> bool:
        if sequence == self._sequence:
            return True
        log.debug(f"Discarding stale reply #{sequence} (latest is #{self._sequence})")
        return False

    async def _dispatch(self, sequence: int, text: str) -> None:
        try:
            result = await self.client.request(text)
        except ConversionError as e:
            if not self._is_current(sequence):
                return
            log.warning(f"Request #{sequence} failed ({e.kind.name})")
            log.debug(f"Request #{sequence} failure detail: {e.details}")
            self._set_state(ConversionState.failed(e.kind, GENERIC_FAILURE_MESSAGE, error=e))
        except Exception as e:
            if not self._is_current(sequence):
                return
            log.warning(f"Request #{sequence} failed ({ErrorKind.UNEXPECTED.name})")
            log.opt(exception=e).debug(f"Request #{sequence} crashed")
            self._set_state(
                ConversionState.failed(ErrorKind.UNEXPECTED, GENERIC_FAILURE_MESSAGE, error=e)
            )
        else:
            if not self._is_current(sequence):
                return
            log.info(f"Request #{sequence} succeeded: {result.latex!r}")
            self._set_state(ConversionState.succeeded(result))

    async def wait(self) -> None:
        """Wait until every in-flight request has resolved."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
