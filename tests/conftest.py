"""
Shared fakes and fixtures for nl2latex tests.

Nothing here touches the network: the Anthropic client, the renderer
asset host and the model client are all replaced by in-memory fakes.
"""

import asyncio
from types import SimpleNamespace

import pytest

from nl2latex.render import AssetHost, KatexAssets, RendererLoader
from nl2latex.utils.config import ConverterConfig, RendererConfig
from nl2latex.utils.errors import AssetLoadError

ASSETS = KatexAssets.from_config(RendererConfig())


def make_message(text):
    """Anthropic-shaped reply with one text block (or no blocks for None)."""
    if text is None:
        return SimpleNamespace(content=[])
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class FakeMessages:
    """Stands in for AsyncAnthropic().messages."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return make_message(self.reply)


class FakeAnthropic:
    def __init__(self, reply=None, error=None):
        self.messages = FakeMessages(reply, error)
        self.closed = False

    async def close(self):
        self.closed = True


class ScriptedClient:
    """
    ConversionClient stand-in whose replies are released by the test.

    After trigger(), yield once (await asyncio.sleep(0)) so the request
    registers, then resolve()/fail() it in any order.
    """

    def __init__(self):
        self.calls = []
        self._pending = {}

    async def request(self, text):
        self.calls.append(text)
        future = asyncio.get_running_loop().create_future()
        self._pending[text] = future
        return await future

    def resolve(self, text, result):
        self._pending[text].set_result(result)

    def fail(self, text, error):
        self._pending[text].set_exception(error)

    async def close(self):
        pass


class RecordingHost(AssetHost):
    """Asset host that records what was injected, in order."""

    def __init__(self, present=False, fail_on=None, delay=0.01):
        self.present = present
        self.fail_on = fail_on
        self.delay = delay
        self.events = []

    def has_engine(self):
        return self.present

    async def add_stylesheet(self, url):
        self.events.append(("stylesheet", url))

    async def add_script(self, url):
        self.events.append(("script-start", url))
        await asyncio.sleep(self.delay)
        if url == self.fail_on:
            raise AssetLoadError(url, "simulated network failure")
        self.events.append(("script-done", url))

    def count(self, kind):
        return sum(1 for event, _ in self.events if event == kind)


def make_ready_loader():
    """A loader that is already READY (engine present)."""
    loader = RendererLoader(RecordingHost(present=True), ASSETS)
    asyncio.run(loader.wait_ready())
    return loader


@pytest.fixture
def config():
    return ConverterConfig(api_key="test-key", model="test-model", max_tokens=1000)


@pytest.fixture
def ready_loader():
    return make_ready_loader()


@pytest.fixture(autouse=True)
def reset_shared_loader():
    """Each test starts without a process-wide loader."""
    RendererLoader.reset_shared()
    yield
    RendererLoader.reset_shared()
