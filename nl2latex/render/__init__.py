"""Render layer: renderer loading, engines, mount points."""

from .adapter import RenderAdapter
from .assets import AssetCache, KatexAssets
from .engines import KatexEngine, MathtextEngine, RenderEngine
from .loader import RendererLoader
from .mount import BufferMount, MountPoint
from .page import AssetHost, KatexPage, MathtextHost

__all__ = [
    "RenderAdapter",
    "AssetCache",
    "KatexAssets",
    "KatexEngine",
    "MathtextEngine",
    "RenderEngine",
    "RendererLoader",
    "BufferMount",
    "MountPoint",
    "AssetHost",
    "KatexPage",
    "MathtextHost",
]
