"""
Fixed values shared across the converter.

Model request parameters, KaTeX asset locations, user-facing strings,
example prompts and display themes.
"""


# Model endpoint
ANTHROPIC_BASE_URL = "https://api.anthropic.com"
MESSAGES_ENDPOINT = f"{ANTHROPIC_BASE_URL}/v1/messages"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TIMEOUT_SECONDS = 60.0

# KaTeX assets (cdnjs layout: <base>/<version>/<file>)
KATEX_VERSION = "0.16.9"
KATEX_CDN_BASE = "https://cdnjs.cloudflare.com/ajax/libs/KaTeX"
KATEX_STYLESHEET = "katex.min.css"
KATEX_CORE_SCRIPT = "katex.min.js"
KATEX_AUTO_RENDER_SCRIPT = "contrib/auto-render.min.js"

# User-facing strings
GENERIC_FAILURE_MESSAGE = "Something went wrong. Try again."
RENDER_ERROR_MARKER = "Render error"

EXAMPLE_PROMPTS = [
    "The quadratic formula",
    "Euler's identity",
    "The Gaussian integral",
    "Maxwell's equations in differential form",
    "The Fourier transform",
    "Bayes' theorem",
]

# Color themes for rendered pages and widgets
DARK_THEME = {
    "bg_color": "#0a0a0f",
    "panel_bg": "#0f0f18",
    "text_color": "#f0e8d8",
    "muted_color": "#7a7a8a",
    "accent_color": "#c9a96e",
    "border_color": "#2a2a3a",
    "error_color": "#e07070",
}

LIGHT_THEME = {
    "bg_color": "#ffffff",
    "panel_bg": "#f8f9fa",
    "text_color": "#333333",
    "muted_color": "#6c757d",
    "accent_color": "#007bff",
    "border_color": "#dee2e6",
    "error_color": "#c0392b",
}
