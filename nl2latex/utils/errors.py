"""
Centralized error handling for nl2latex.

Provides a hierarchy of custom exceptions with user-friendly messages,
suggestions for fixes, and a diagnostic kind that survives the collapse
into one generic message at the user boundary.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, List

from .constants import GENERIC_FAILURE_MESSAGE


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    INFO = auto()  # Nothing happened, nothing to report
    WARNING = auto()  # Non-fatal, can continue with degraded functionality
    ERROR = auto()  # Operation failed, but can retry
    CRITICAL = auto()  # Unrecoverable error


class ErrorKind(Enum):
    """Why a conversion failed. Internal only, never shown verbatim."""

    TRANSPORT = auto()  # Network or HTTP failure
    PARSE = auto()  # Reply not usable as a ConversionResult
    UNEXPECTED = auto()  # Bug or unknown failure inside the client


@dataclass
class ErrorContext:
    """
    Rich context for error reporting.

    Provides user-friendly information beyond the raw exception.
    """

    title: str  # Short title for dialog/status bar
    message: str  # User-friendly message
    technical_details: Optional[str]  # Debug info (shown on expand)
    suggestions: List[str]  # Actionable suggestions
    severity: ErrorSeverity
    recoverable: bool = True  # Can user retry?

    @classmethod
    def from_exception(cls, exc: Exception, context: str = "") -> "ErrorContext":
        """Create ErrorContext from any exception."""
        if isinstance(exc, Nl2LatexError):
            return exc.to_context()

        exc_type = type(exc).__name__
        exc_msg = str(exc)

        # Generic fallback
        return cls(
            title="Error",
            message=GENERIC_FAILURE_MESSAGE,
            technical_details=f"{exc_type}: {exc_msg}\nContext: {context}",
            suggestions=["Try again"],
            severity=ErrorSeverity.ERROR,
        )


class Nl2LatexError(Exception):
    """
    Base exception for all nl2latex errors.

    Subclasses provide rich error context for user-friendly reporting.
    """

    default_title = "Error"
    default_suggestions: List[str] = []
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        *,
        suggestions: Optional[List[str]] = None,
        technical_details: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
    ):
        super().__init__(message)
        self.user_message = message
        self.suggestions = suggestions or self.default_suggestions.copy()
        self.technical_details = technical_details
        self.severity = severity or self.default_severity

    def to_context(self) -> ErrorContext:
        """Convert to ErrorContext for display."""
        return ErrorContext(
            title=self.default_title,
            message=self.user_message,
            technical_details=self.technical_details,
            suggestions=self.suggestions,
            severity=self.severity,
            recoverable=self.severity != ErrorSeverity.CRITICAL,
        )


# === Input Errors ===


class EmptyInputError(Nl2LatexError):
    """Raised when a request is blank after trimming. Never dispatched."""

    default_title = "Empty Input"
    default_severity = ErrorSeverity.INFO
    default_suggestions = ["Describe a formula, e.g. 'the quadratic formula'"]

    def __init__(self):
        super().__init__("Nothing to convert.")


# === Conversion Errors ===


class ConversionError(Nl2LatexError):
    """
    Raised when a conversion request fails.

    The user always sees the generic message; the specific cause lives in
    `kind` and `technical_details`.
    """

    default_title = "Conversion Failed"
    default_suggestions = ["Try again", "Rephrase the description"]
    kind = ErrorKind.UNEXPECTED

    def __init__(self, details: str, **kwargs):
        kwargs.setdefault("technical_details", details)
        super().__init__(GENERIC_FAILURE_MESSAGE, **kwargs)
        self.details = details

    def __str__(self) -> str:
        # user_message stays generic; str() is for logs and tracebacks
        return self.details


class TransportError(ConversionError):
    """Raised when the model endpoint cannot be reached or returns an HTTP error."""

    kind = ErrorKind.TRANSPORT
    default_suggestions = [
        "Check your network connection",
        "Check that ANTHROPIC_API_KEY is set",
        "Try again",
    ]

    def __init__(self, details: str, *, status_code: Optional[int] = None):
        super().__init__(details)
        self.status_code = status_code


class ParseError(ConversionError):
    """Raised when the model reply cannot be turned into a ConversionResult."""

    kind = ErrorKind.PARSE

    def __init__(self, details: str, *, reply: str = ""):
        super().__init__(details)
        self.reply = reply


class EmptyReplyError(ParseError):
    """Raised when the reply holds no text once code fences are removed."""


class MalformedReplyError(ParseError):
    """Raised when the reply text is not a JSON object."""


class SchemaError(ParseError):
    """Raised when the JSON object lacks usable latex/explanation fields."""


# === Render Errors ===


class RenderError(Nl2LatexError):
    """Raised when the rendering engine cannot produce output."""

    default_title = "Render Error"
    default_severity = ErrorSeverity.WARNING
    default_suggestions = ["Check the LaTeX source for unbalanced braces"]


class AssetLoadError(RenderError):
    """Raised when a renderer stylesheet or script cannot be loaded."""

    default_title = "Renderer Unavailable"
    default_suggestions = [
        "Check your network connection",
        "Restart the application to retry loading the renderer",
    ]

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Could not load renderer asset {url}",
            technical_details=reason,
        )
        self.url = url


# === Utility functions ===


def format_error_for_user(exc: Exception, context: str = "") -> str:
    """
    Format an exception into a user-friendly string.

    Returns a single string suitable for status bar or error label.
    Conversion failures always come out as the generic message.
    """
    if isinstance(exc, ConversionError):
        return GENERIC_FAILURE_MESSAGE

    ctx = ErrorContext.from_exception(exc, context)

    result = ctx.message
    if ctx.suggestions:
        result += f" Try: {ctx.suggestions[0]}"

    return result


def format_error_for_dialog(exc: Exception, context: str = "") -> dict:
    """
    Format an exception into a dict suitable for QMessageBox.

    Returns dict with 'title', 'text', 'detailed_text', 'icon' keys.
    """
    from PyQt6.QtWidgets import QMessageBox

    ctx = ErrorContext.from_exception(exc, context)

    # Build detailed text with suggestions
    detailed_parts = []
    if ctx.suggestions:
        detailed_parts.append("Suggestions:")
        for i, sugg in enumerate(ctx.suggestions, 1):
            detailed_parts.append(f"  {i}. {sugg}")
    if ctx.technical_details:
        detailed_parts.append("")
        detailed_parts.append("Technical details:")
        detailed_parts.append(ctx.technical_details)

    # Map severity to icon
    icon_map = {
        ErrorSeverity.INFO: QMessageBox.Icon.Information,
        ErrorSeverity.WARNING: QMessageBox.Icon.Warning,
        ErrorSeverity.ERROR: QMessageBox.Icon.Critical,
        ErrorSeverity.CRITICAL: QMessageBox.Icon.Critical,
    }

    return {
        "title": ctx.title,
        "text": ctx.message,
        "detailed_text": "\n".join(detailed_parts) if detailed_parts else None,
        "icon": icon_map.get(ctx.severity, QMessageBox.Icon.Warning),
    }
