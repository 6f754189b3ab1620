"""Utilities: configuration, constants, errors, logging, clipboard."""

from .config import ConverterConfig, RendererConfig
from .errors import ErrorKind, Nl2LatexError
from .logger import get_logger, setup_logger

__all__ = [
    "ConverterConfig",
    "RendererConfig",
    "ErrorKind",
    "Nl2LatexError",
    "get_logger",
    "setup_logger",
]
