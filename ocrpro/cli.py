"""Command-line interface for local OCR runs and text file merging.

``extract`` sends one local document through the same dispatcher the API
uses; ``combine`` merges text files in the order given on the command line.
"""

import argparse
import json
import mimetypes
import sys
from pathlib import Path

from ocrpro.combine.combiner import CombineList, TextFile
from ocrpro.errors import OCRProError
from ocrpro.ocr.dispatcher import SubmissionDispatcher, Upload
from ocrpro.utils.config import load_config
from ocrpro.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _guess_media_type(path: Path) -> str | None:
    """Guess a media type from the file extension."""
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type


def extract_single(
    file_path: Path, dispatcher: SubmissionDispatcher | None = None
) -> dict[str, object]:
    """Extract text from one local document.

    Args:
        file_path: Path to a PDF, PNG, JPEG or text file.
        dispatcher: Dispatcher to use; built from configuration if omitted.

    Returns:
        Dictionary with filename, page count and text.
    """
    if dispatcher is None:
        dispatcher = SubmissionDispatcher(load_config().ocr)

    upload = Upload(
        data=file_path.read_bytes(),
        media_type=_guess_media_type(file_path),
        filename=file_path.name,
    )
    result = dispatcher.process(upload)
    return {"filename": result.filename, "pages": result.pages, "text": result.text}


def combine_files(paths: list[Path]) -> tuple[str, list[str]]:
    """Merge text files in the given order.

    Returns:
        The combined text and the warnings for skipped non-text files.
    """
    files = CombineList()
    warnings = files.add(TextFile.from_path(p) for p in paths)
    return files.combine(), warnings


def _write_or_print(text: str, output: Path | None) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(text)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="OCR Pro document tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", help="Extract text from a single document"
    )
    extract_parser.add_argument("file", type=Path, help="Document file to process")
    extract_parser.add_argument(
        "--json", action="store_true", help="Print filename, pages and text as JSON"
    )
    extract_parser.add_argument("-o", "--output", type=Path, help="Output file")

    combine_parser = subparsers.add_parser(
        "combine", help="Merge text files in the order given"
    )
    combine_parser.add_argument("files", type=Path, nargs="+", help="Text files")
    combine_parser.add_argument("-o", "--output", type=Path, help="Output file")

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file)
        except OCRProError as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            sys.exit(1)
        output = json.dumps(result, indent=2) if args.json else str(result["text"])
        _write_or_print(output, args.output)
    elif args.command == "combine":
        try:
            combined, warnings = combine_files(args.files)
        except OCRProError as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            sys.exit(1)
        for warning in warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        _write_or_print(combined, args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
