"""
Mount points: where rendered output ends up.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class MountPoint(Protocol):
    """A display surface that holds one piece of content at a time."""

    def clear(self) -> None: ...

    def set_text(self, text: str) -> None: ...

    def set_html(self, html: str) -> None: ...

    def set_image(self, png: bytes) -> None: ...


class BufferMount:
    """
    In-memory mount point.

    Used by the CLI to write renders to disk, and by tests.
    """

    def __init__(self):
        self.text: Optional[str] = None
        self.html: Optional[str] = None
        self.image: Optional[bytes] = None

    def clear(self) -> None:
        self.text = None
        self.html = None
        self.image = None

    def set_text(self, text: str) -> None:
        self.text = text

    def set_html(self, html: str) -> None:
        self.html = html

    def set_image(self, png: bytes) -> None:
        self.image = png

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.html is None and self.image is None
