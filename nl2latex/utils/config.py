"""
Runtime configuration.

Values come from the environment (and a local .env file when present);
everything has a default except the API key.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    ANTHROPIC_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    KATEX_CDN_BASE,
    KATEX_VERSION,
)

load_dotenv()

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "nl2latex"


@dataclass
class ConverterConfig:
    """Settings for the model request."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_url: str = ANTHROPIC_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, **overrides) -> "ConverterConfig":
        """
        Build config from environment variables.

        Keyword overrides that are not None win over the environment.
        """
        config = cls(
            api_key=os.getenv("ANTHROPIC_API_KEY"),
            model=os.getenv("NL2LATEX_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("NL2LATEX_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
            base_url=os.getenv("NL2LATEX_BASE_URL", ANTHROPIC_BASE_URL),
            timeout=float(os.getenv("NL2LATEX_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        return config


@dataclass
class RendererConfig:
    """Settings for the KaTeX renderer and its asset cache."""

    katex_version: str = KATEX_VERSION
    cdn_base: str = KATEX_CDN_BASE
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR)

    @classmethod
    def from_env(cls) -> "RendererConfig":
        cache_dir = os.getenv("NL2LATEX_CACHE_DIR")
        return cls(
            katex_version=os.getenv("NL2LATEX_KATEX_VERSION", KATEX_VERSION),
            cdn_base=os.getenv("NL2LATEX_KATEX_CDN", KATEX_CDN_BASE),
            cache_dir=Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR,
        )
