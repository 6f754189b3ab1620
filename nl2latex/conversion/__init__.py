"""Conversion layer: model client, reply parsing, state controller."""

from .client import ConversionClient, SYSTEM_PROMPT
from .controller import ConversionController
from .reply import parse_reply

__all__ = ["ConversionClient", "ConversionController", "SYSTEM_PROMPT", "parse_reply"]
