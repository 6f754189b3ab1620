"""
Model client for natural-language to LaTeX conversion.

One request, one network call, no retries.
"""

from typing import Any, Dict, Optional

import anthropic
import httpx

from ..models import ConversionRequest, ConversionResult
from ..utils.config import ConverterConfig
from ..utils.errors import TransportError
from ..utils.logger import get_logger
from .reply import parse_reply

log = get_logger("client")

SYSTEM_PROMPT = """\
You are a LaTeX expert. When given a natural language description of a mathematical \
expression, formula, or equation, respond with ONLY a JSON object in this exact format:
{"latex": "<the LaTeX code, suitable for display math mode, no surrounding delimiters>", \
"explanation": "<one sentence explaining what this is>"}
Do not include any other text. The latex field should contain only the raw LaTeX \
expression without $, $$, \\[, or \\] delimiters."""


def extract_reply_text(message: Any) -> str:
    """Return the first content block's text, or empty string if there is none."""
    content = getattr(message, "content", None) or []
    if not content:
        return ""
    return getattr(content[0], "text", None) or ""


class ConversionClient:
    """
    Sends one description to the model and parses the reply.

    Usage:
        client = ConversionClient(ConverterConfig.from_env())
        result = await client.request("Euler's identity")
        print(result.latex)
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        api: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Args:
            config: Model settings. Uses defaults if None.
            api: Preconfigured async client; built lazily from config if None.
        """
        self.config = config or ConverterConfig()
        self._api = api
        self._owns_api = api is None

    def _get_api(self) -> anthropic.AsyncAnthropic:
        """Lazy-create the Anthropic client."""
        if self._api is None:
            if not self.config.api_key:
                raise TransportError("ANTHROPIC_API_KEY is not set")
            self._api = anthropic.AsyncAnthropic(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._api

    def build_payload(self, text: str) -> Dict[str, Any]:
        """Request body: model, token ceiling, system instruction, one user message."""
        return {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": text}],
        }

    async def request(self, text: str) -> ConversionResult:
        """
        Convert one description.

        Args:
            text: Trimmed, non-empty description

        Returns:
            Parsed ConversionResult

        Raises:
            TransportError: network, timeout, auth or HTTP status failure
            ParseError: reply could not be parsed into a result
        """
        request = ConversionRequest.from_text(text)
        payload = self.build_payload(request.text)

        log.debug(f"POST {self.config.model}: {request.text!r}")
        try:
            message = await self._get_api().messages.create(**payload)
        except anthropic.APIStatusError as e:
            raise TransportError(
                f"HTTP {e.status_code}: {e.message}", status_code=e.status_code
            ) from e
        except (anthropic.APIError, httpx.HTTPError) as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        reply = extract_reply_text(message)
        log.debug(f"Reply ({len(reply)} chars): {reply[:200]!r}")
        return parse_reply(reply)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created one."""
        if self._owns_api and self._api is not None:
            await self._api.close()
            self._api = None
