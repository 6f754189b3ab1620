"""
Core data structures for nl2latex.

These dataclasses define the contract between the conversion layer,
the render layer and whatever displays the result.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from .utils.constants import GENERIC_FAILURE_MESSAGE
from .utils.errors import EmptyInputError, ErrorKind


@dataclass(frozen=True)
class ConversionRequest:
    """A trimmed, non-empty description of a mathematical object."""

    text: str

    @classmethod
    def from_text(cls, text: Optional[str]) -> "ConversionRequest":
        """Trim raw input; blank input raises EmptyInputError."""
        trimmed = (text or "").strip()
        if not trimmed:
            raise EmptyInputError()
        return cls(text=trimmed)


@dataclass(frozen=True)
class ConversionResult:
    """
    What the model produced for one request.

    `latex` is non-empty and carries no math-mode delimiters; display
    wrapping happens only at render time.
    """

    latex: str
    explanation: str


class ConversionStatus(Enum):
    """Tags for ConversionState."""

    IDLE = auto()
    LOADING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class ConversionState:
    """
    The controller's single current state.

    Always replaced wholesale through the constructors below, never mutated.
    """

    status: ConversionStatus
    result: Optional[ConversionResult] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    # Diagnostic only; kept out of equality so states compare by what users see
    error: Optional[Exception] = field(default=None, compare=False, repr=False)

    @classmethod
    def idle(cls) -> "ConversionState":
        return cls(ConversionStatus.IDLE)

    @classmethod
    def loading(cls) -> "ConversionState":
        return cls(ConversionStatus.LOADING)

    @classmethod
    def succeeded(cls, result: ConversionResult) -> "ConversionState":
        return cls(ConversionStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(
        cls,
        kind: ErrorKind,
        message: str = GENERIC_FAILURE_MESSAGE,
        error: Optional[Exception] = None,
    ) -> "ConversionState":
        return cls(ConversionStatus.FAILED, error_kind=kind, message=message, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status is ConversionStatus.LOADING

    @property
    def latex(self) -> str:
        """Current LaTeX, or empty string when there is no result."""
        return self.result.latex if self.result else ""

    @property
    def explanation(self) -> str:
        return self.result.explanation if self.result else ""


class RendererReadiness(Enum):
    """Loading progress of the rendering engine. Only ever moves forward."""

    NOT_LOADED = auto()
    LOADING = auto()
    READY = auto()
