"""Command-line entry point: encode a test page, preview or rasterize a stream."""

from __future__ import annotations

import argparse
import base64
import binascii
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from thermal_docs.config import PAPER_COLUMNS
from thermal_docs.preview import preview_panel
from thermal_docs.raster import expand_bitmap_markers
from thermal_docs.receipts import test_page

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _read_stream(path: str) -> bytes:
    """Read a base64 document file; raises ``OSError`` or ``ValueError``."""
    text = Path(path).read_text(encoding="ascii").strip()
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"{path} is not a base64 document: {exc}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="thermal-docs", description="ESC/POS document encoder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--paper", type=int, default=80, choices=sorted(PAPER_COLUMNS), help="Paper width in mm")
    subparsers = parser.add_subparsers(dest="command", required=True)

    test = subparsers.add_parser("test-page", help="Encode a printer test page")
    test.add_argument("--printer", default="Impresora", help="Printer name printed on the page")
    test.add_argument("--branch", default="", help="Branch name under the logo")
    test.add_argument("-o", "--output", help="Write base64 here instead of stdout")
    test.add_argument("--preview", action="store_true", help="Show the page in the terminal")

    preview = subparsers.add_parser("preview", help="Render a base64 document in the terminal")
    preview.add_argument("file")

    raw = subparsers.add_parser("raw", help="Decode a base64 document and rasterize its bitmaps")
    raw.add_argument("file")
    raw.add_argument("-o", "--output", required=True, help="Printer-ready output file")
    return parser


def _run_test_page(args: argparse.Namespace, console: Console) -> int:
    encoded = test_page(args.printer, args.branch, args.paper)
    if args.preview:
        console.print(preview_panel(base64.b64decode(encoded), args.paper, title="Test page"))
    if args.output:
        Path(args.output).write_text(encoded + "\n", encoding="ascii")
        logger.info("Test page written to %s", args.output)
    elif not args.preview:
        console.print(encoded, soft_wrap=True, highlight=False)
    return 0


def _run_preview(args: argparse.Namespace, console: Console) -> int:
    try:
        data = _read_stream(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return 1
    console.print(preview_panel(data, args.paper, title=Path(args.file).name))
    return 0


def _run_raw(args: argparse.Namespace) -> int:
    try:
        data = _read_stream(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return 1
    expanded = expand_bitmap_markers(data, args.paper)
    Path(args.output).write_bytes(expanded)
    logger.info("Wrote %d bytes to %s", len(expanded), args.output)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    console = Console()
    if args.command == "test-page":
        return _run_test_page(args, console)
    if args.command == "preview":
        return _run_preview(args, console)
    if args.command == "raw":
        return _run_raw(args)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
