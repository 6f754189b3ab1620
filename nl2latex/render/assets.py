"""
KaTeX asset locations and a download cache.

Scripts are downloaded once per machine and kept under the cache
directory, keyed by KaTeX version.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from ..utils.config import RendererConfig
from ..utils.constants import (
    KATEX_AUTO_RENDER_SCRIPT,
    KATEX_CORE_SCRIPT,
    KATEX_STYLESHEET,
)
from ..utils.errors import AssetLoadError
from ..utils.logger import get_logger

log = get_logger("render")


@dataclass(frozen=True)
class KatexAssets:
    """The stylesheet and the two scripts, in load order."""

    stylesheet_url: str
    core_script_url: str
    extension_script_url: str

    @classmethod
    def from_config(cls, config: RendererConfig) -> "KatexAssets":
        base = f"{config.cdn_base.rstrip('/')}/{config.katex_version}"
        return cls(
            stylesheet_url=f"{base}/{KATEX_STYLESHEET}",
            core_script_url=f"{base}/{KATEX_CORE_SCRIPT}",
            extension_script_url=f"{base}/{KATEX_AUTO_RENDER_SCRIPT}",
        )


class AssetCache:
    """
    Fetches text assets over HTTP, keeping a copy on disk.

    Usage:
        cache = AssetCache(Path("~/.cache/nl2latex/katex-0.16.9").expanduser())
        source = await cache.fetch("https://.../katex.min.js")
    """

    def __init__(
        self,
        cache_dir: Path,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            cache_dir: Directory for cached files (created on first write)
            client: HTTP client to use; a short-lived one is created per fetch if None
            timeout: Per-request timeout in seconds when creating clients
        """
        self.cache_dir = cache_dir
        self._client = client
        self._timeout = timeout

    def path_for(self, url: str) -> Path:
        """Cache path for a URL (its file name, e.g. katex.min.js)."""
        return self.cache_dir / url.rstrip("/").rsplit("/", 1)[-1]

    async def fetch(self, url: str) -> str:
        """
        Return the asset's text, downloading it if not cached.

        Raises:
            AssetLoadError: download failed or returned a non-2xx status
        """
        path = self.path_for(url)
        if path.is_file() and path.stat().st_size > 0:
            log.debug(f"Cache hit: {path}")
            return path.read_text(encoding="utf-8")

        log.info(f"Downloading {url}")
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AssetLoadError(url, f"{type(e).__name__}: {e}") from e

        self._store(path, response.text)
        return response.text

    def _store(self, path: Path, text: str) -> None:
        """Write via a temp file in the same directory, so readers never see half a file."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{path.name}.", suffix=".part")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
