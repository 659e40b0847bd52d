"""Command-line interface for markdown to mind-map conversion."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from PIL import ImageColor

from .raster import CONTAINER_MARGIN, Container, RasterSurface, render_to_surface
from .svg import export_svg
from .titles import format_outline, parse_markdown_titles

SUBCOMMANDS_HINT = "Use one of: svg, png, outline."


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="mdmindmap",
        description="Turn markdown headings into a mind-map SVG or PNG.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    svg_parser = subparsers.add_parser("svg", help="Export the mind map as SVG")
    svg_parser.add_argument("input", nargs="?", help="Input markdown file")
    svg_parser.add_argument("--text", help="Raw markdown source")
    svg_parser.add_argument("--stdout", action="store_true", help="Write SVG to stdout")
    svg_parser.add_argument("-o", "--output", help="Output .svg path")

    png_parser = subparsers.add_parser("png", help="Paint the mind map to a PNG")
    png_parser.add_argument("input", nargs="?", help="Input markdown file")
    png_parser.add_argument("--text", help="Raw markdown source")
    png_parser.add_argument("--stdout", action="store_true", help="Write PNG bytes to stdout")
    png_parser.add_argument("-o", "--output", help="Output .png path")
    png_parser.add_argument("--width", type=float, default=1240.0, help="Container width")
    png_parser.add_argument("--height", type=float, default=840.0, help="Container height")
    png_parser.add_argument("--margin", type=float, default=float(CONTAINER_MARGIN))
    png_parser.add_argument("--background", default="#ffffff")

    outline_parser = subparsers.add_parser("outline", help="Print the parsed heading tree")
    outline_parser.add_argument("input", nargs="?", help="Input markdown file")
    outline_parser.add_argument("--text", help="Raw markdown source")

    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> tuple[str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, None

    if path:
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(
                "E_IO_READ",
                f"input file not found: {input_path}",
                exit_code=2,
                file=str(input_path),
            )
        try:
            return input_path.read_text(encoding="utf-8"), input_path
        except (OSError, UnicodeDecodeError) as exc:
            raise CliError(
                "E_IO_READ",
                f"failed to read input file: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Use a subcommand with FILE, --text, or pipe stdin.",
            exit_code=2,
        )
    return sys.stdin.read(), None


def _write_output(path: Path, content: Union[str, bytes]) -> None:
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _check_output_flags(args: argparse.Namespace) -> None:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _handle_svg(args: argparse.Namespace) -> int:
    _check_output_flags(args)
    source, source_path = _read_input(args.input, args.text)
    svg_text = export_svg(parse_markdown_titles(source))

    if args.stdout or (source_path is None and not args.output):
        sys.stdout.write(svg_text)
        if not svg_text.endswith("\n"):
            sys.stdout.write("\n")
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".svg")
    _write_output(output_path, svg_text)
    print(f"Wrote {output_path}")
    return 0


def _handle_png(args: argparse.Namespace) -> int:
    _check_output_flags(args)
    if args.margin < 0:
        raise CliError(
            "E_ARGS",
            "--margin must be >= 0",
            hint="Use a non-negative margin like 40.",
            exit_code=2,
        )

    try:
        ImageColor.getrgb(args.background)
    except ValueError:
        raise CliError(
            "E_ARGS",
            f"invalid --background color: {args.background}",
            hint="Use a CSS color such as #ffffff or white.",
            exit_code=2,
        )

    source, source_path = _read_input(args.input, args.text)
    surface = RasterSurface(background=args.background)
    surface.resize_to_container(Container(args.width, args.height), args.margin)
    if surface.width == 0 or surface.height == 0:
        raise CliError(
            "E_ARGS",
            f"container {args.width:g}x{args.height:g} leaves no drawing area after a {args.margin:g} margin",
            hint="Increase --width/--height or lower --margin.",
            exit_code=2,
        )
    render_to_surface(surface, parse_markdown_titles(source))
    png_bytes = surface.to_png_bytes()

    if args.stdout or (source_path is None and not args.output):
        sys.stdout.buffer.write(png_bytes)
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".png")
    _write_output(output_path, png_bytes)
    print(f"Wrote {output_path}")
    return 0


def _handle_outline(args: argparse.Namespace) -> int:
    source, _source_path = _read_input(args.input, args.text)
    outline = format_outline(parse_markdown_titles(source))
    if outline:
        print(outline)
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    if not raw_argv:
        err = CliError("E_ARGS", "missing subcommand", hint=SUBCOMMANDS_HINT, exit_code=2)
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv("MDMINDMAP_DEBUG") == "1"
    if debug_enabled:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format

        if args.command == "svg":
            return _handle_svg(args)
        if args.command == "png":
            return _handle_png(args)
        if args.command == "outline":
            return _handle_outline(args)

        raise CliError("E_ARGS", "missing subcommand", hint=SUBCOMMANDS_HINT, exit_code=2)
    except UsageError as exc:
        err = CliError("E_ARGS", str(exc), hint=SUBCOMMANDS_HINT, exit_code=2)
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
