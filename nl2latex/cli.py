#!/usr/bin/env python3
"""
nl2latex - natural language to LaTeX.

Entry point for the application with CLI support.

Usage:
    nl2latex                               # Launch GUI
    nl2latex "the quadratic formula"       # Convert and print LaTeX
    nl2latex -f json "Bayes' theorem"      # Print LaTeX + explanation as JSON
    nl2latex --png out.png "Euler's identity"
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .models import ConversionState, ConversionStatus
from .utils.constants import EXAMPLE_PROMPTS, RENDER_ERROR_MARKER


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nl2latex",
        description="Turn a plain-language description of a formula into LaTeX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nl2latex                                  Launch the GUI
  nl2latex "the quadratic formula"          Print the LaTeX source
  nl2latex -f json "Bayes' theorem"         LaTeX and explanation as JSON
  nl2latex --png euler.png "Euler's identity"
  nl2latex --html gauss.html "The Gaussian integral"
  nl2latex --from-clipboard --copy          Convert clipboard text, copy LaTeX back
        """,
    )

    # Positional: description to convert
    parser.add_argument(
        "description",
        nargs="?",
        help="Plain-language description of a mathematical object",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=["text", "latex", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--png",
        metavar="PATH",
        type=Path,
        help="Also render the result to a PNG with matplotlib",
    )

    parser.add_argument(
        "--html",
        metavar="PATH",
        type=Path,
        help="Also write a standalone KaTeX HTML page",
    )

    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the LaTeX to the clipboard",
    )

    parser.add_argument(
        "--from-clipboard",
        action="store_true",
        help="Read the description from the clipboard",
    )

    parser.add_argument(
        "--examples",
        action="store_true",
        help="List example descriptions",
    )

    parser.add_argument(
        "-m",
        "--model",
        help="Model identifier (default: from NL2LATEX_MODEL or built-in)",
    )

    parser.add_argument(
        "--gui",
        action="store_true",
        help="Launch GUI mode (default if no description given)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging on stderr",
    )

    parser.add_argument(
        "--log-dir",
        metavar="DIR",
        type=Path,
        help="Also write a full DEBUG log to DIR/nl2latex.log",
    )

    return parser


def format_state(state: ConversionState, description: str, output_format: str) -> str:
    """Format a settled state for stdout."""
    if output_format == "json":
        output = {"description": description, "status": state.status.name.lower()}
        if state.result:
            output["latex"] = state.result.latex
            output["explanation"] = state.result.explanation
        else:
            output["error"] = state.message
        return json.dumps(output, indent=2)

    if output_format == "latex":
        return state.latex

    lines = [f"Description: {description}", "", f"LaTeX: {state.latex}"]
    if state.explanation:
        lines.append(f"Explanation: {state.explanation}")
    return "\n".join(lines)


async def convert(description: str, model: Optional[str] = None) -> ConversionState:
    """Run one conversion through the controller and return the settled state."""
    from .conversion import ConversionClient, ConversionController
    from .utils.config import ConverterConfig

    client = ConversionClient(ConverterConfig.from_env(model=model))
    controller = ConversionController(client)
    try:
        controller.trigger_with_text(description)
        await controller.wait()
    finally:
        await client.close()
    return controller.state


async def render_png(latex: str, path: Path) -> bool:
    """Render with matplotlib mathtext. Returns False if the fallback marker was produced."""
    from .render import BufferMount, KatexAssets, MathtextEngine, MathtextHost
    from .render import RenderAdapter, RendererLoader
    from .utils.config import RendererConfig

    loader = RendererLoader(MathtextHost(), KatexAssets.from_config(RendererConfig()))
    await loader.wait_ready()

    mount = BufferMount()
    rendered = RenderAdapter(loader, MathtextEngine()).render(latex, mount)
    if rendered:
        path.write_bytes(mount.image)
    return rendered


async def render_html(latex: str, path: Path) -> bool:
    """Write a standalone KaTeX page (downloads KaTeX on first use)."""
    from .render import AssetCache, BufferMount, KatexAssets, KatexEngine, KatexPage
    from .render import RenderAdapter, RendererLoader
    from .utils.config import RendererConfig

    config = RendererConfig.from_env()
    cache = AssetCache(config.cache_dir / f"katex-{config.katex_version}")
    page = KatexPage(cache, dark_mode=False)
    loader = RendererLoader(page, KatexAssets.from_config(config))
    await loader.wait_ready()

    mount = BufferMount()
    rendered = RenderAdapter(loader, KatexEngine(page)).render(latex, mount)
    if rendered:
        path.write_text(mount.html, encoding="utf-8")
    return rendered


def list_examples() -> int:
    """Print the example descriptions."""
    for example in EXAMPLE_PROMPTS:
        print(f"  {example}")
    return 0


def convert_cli(
    description: str,
    output_format: str,
    model: Optional[str],
    png_path: Optional[Path],
    html_path: Optional[Path],
    copy: bool,
) -> int:
    """Convert a description and print the result."""
    from .utils.errors import format_error_for_user, Nl2LatexError

    state = asyncio.run(convert(description, model))

    if state.status is not ConversionStatus.SUCCEEDED:
        if output_format == "json":
            print(format_state(state, description, output_format))
        print(f"Error: {state.message}", file=sys.stderr)
        return 1

    print(format_state(state, description, output_format))

    for path, renderer in ((png_path, render_png), (html_path, render_html)):
        if path is None:
            continue
        try:
            if asyncio.run(renderer(state.latex, path)):
                print(f"Wrote {path}", file=sys.stderr)
            else:
                print(f"Warning: {RENDER_ERROR_MARKER}, {path} not written", file=sys.stderr)
        except Nl2LatexError as e:
            print(f"Warning: {format_error_for_user(e)}", file=sys.stderr)

    if copy:
        from .utils.clipboard import set_clipboard_text

        if set_clipboard_text(state.latex):
            print("LaTeX copied to clipboard", file=sys.stderr)
        else:
            print("Warning: Could not write to clipboard", file=sys.stderr)

    return 0


def main():
    """Main entry point."""
    from .utils.logger import setup_logger

    parser = create_parser()
    args = parser.parse_args()

    setup_logger(verbose=args.verbose, log_dir=args.log_dir)

    if args.examples:
        return list_examples()

    # Get description from clipboard if requested
    description = args.description
    if args.from_clipboard:
        from .utils.clipboard import get_clipboard_text

        description = get_clipboard_text()
        if description is None:
            print("Error: Could not read from clipboard", file=sys.stderr)
            return 1

    # No description and not explicitly GUI: launch GUI
    if description is None or args.gui:
        from .gui.main_window import run_app

        run_app()
        return 0

    description = description.strip()
    if not description:
        print("Error: Nothing to convert", file=sys.stderr)
        return 1

    return convert_cli(
        description=description,
        output_format=args.format,
        model=args.model,
        png_path=args.png,
        html_path=args.html,
        copy=args.copy,
    )


if __name__ == "__main__":
    sys.exit(main() or 0)
