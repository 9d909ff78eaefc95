"""
Module: cli

Purpose:
    Command line host for the assembly engine. Reads input files, drives
    an AssemblySession, and writes the returned name+bytes pairs to disk.

Key Functions:
    - main(): Entry point for the `pdf-toolkit` command
    - parse_range_spec(): "3-5:Intro" to (start, end, name)

Dependencies:
    - argparse (std): Argument parsing
    - logging (std): Console output
    - engine.session: AssemblySession

Exit Codes:
    0 success, 1 engine error, 2 usage error
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pdf_toolkit import __version__
from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.errors import AssemblyError, user_message
from pdf_toolkit.core.models import CompositionResult
from pdf_toolkit.core.naming import format_file_size
from pdf_toolkit.engine.session import AssemblySession

logger = logging.getLogger("pdf_toolkit.cli")

EXIT_OK = 0
EXIT_ENGINE_ERROR = 1
EXIT_USAGE = 2


def parse_range_spec(spec: str) -> Tuple[str, str, Optional[str]]:
    """
    Split a range argument into raw start/end text and an optional name.

    Bounds stay as text; the RangeSet resolves them on commit.

    Example:
        >>> parse_range_spec("3-5:Intro")
        ('3', '5', 'Intro')
        >>> parse_range_spec("7")
        ('7', '7', None)
    """
    bounds, sep, name = spec.partition(":")
    start, dash, end = bounds.partition("-")
    if not dash:
        end = start
    return start.strip(), end.strip(), (name if sep else None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-toolkit",
        description="Merge PDF files or split one PDF into named parts.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    merge = sub.add_parser("merge", help="Merge PDFs in the given order")
    merge.add_argument("files", nargs="+", type=Path, help="Input PDFs, in merge order")
    merge.add_argument("--output", "-o", type=str, default=None, help="Output file (default: merged.pdf)")
    merge.add_argument("--separators", action="store_true", help="Insert a blank page between inputs")

    split = sub.add_parser("split", help="Split one PDF into parts")
    split.add_argument("file", type=Path, help="Input PDF")
    split.add_argument(
        "--range", "-r", dest="ranges", action="append", default=[], metavar="START-END[:NAME]",
        help="Page range, 1-based inclusive (repeatable; default: whole document)",
    )
    split.add_argument("--output-dir", "-o", type=Path, default=Path("."), help="Directory for the parts")

    info = sub.add_parser("info", help="Show size and page count of PDFs")
    info.add_argument("files", nargs="+", type=Path, help="Input PDFs")

    return parser


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        with AssemblySession(AssemblyConfig()) as session:
            if args.command == "merge":
                return _run_merge(session, args.files, args.output, args.separators)
            if args.command == "split":
                return _run_split(session, args.file, args.ranges, args.output_dir)
            return _run_info(session, args.files)
    except AssemblyError as e:
        logger.debug("Engine error", exc_info=True)
        print(user_message(e), file=sys.stderr)
        return EXIT_ENGINE_ERROR
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return EXIT_USAGE


def _run_merge(session: AssemblySession, files: List[Path], output: Optional[str], separators: bool) -> int:
    added = session.add_sources((path.name, path.read_bytes()) for path in files)
    for rejection in added.rejected:
        print(user_message(rejection), file=sys.stderr)
    if added.rejected:
        return EXIT_ENGINE_ERROR

    target = Path(output) if output else None
    result = asyncio.run(
        session.merge(insert_separators=separators, output_name=target.name if target else None)
    )
    destination = target.with_name(result.name) if target else Path(result.name)
    _write(result, destination)
    return EXIT_OK


def _run_split(session: AssemblySession, file: Path, specs: List[str], output_dir: Path) -> int:
    ranges = session.load_split_source(file.name, file.read_bytes())
    for position, spec in enumerate(specs):
        split_range = ranges.get(ranges.ids[0]) if position == 0 else ranges.add()
        start, end, name = parse_range_spec(spec)
        ranges.set_bounds(split_range.id, start, end)
        if name is not None:
            ranges.update(split_range.id, "name", name)

    report = asyncio.run(session.split())
    output_dir.mkdir(parents=True, exist_ok=True)
    for result in report:
        _write(result, output_dir / result.name)
    if report.skipped:
        print(f"Skipped {len(report.skipped)} invalid range(s) (pages 1-{ranges.total_pages} only)", file=sys.stderr)
    for failure in report.failures:
        print(user_message(failure), file=sys.stderr)
    return EXIT_OK if report.ok else EXIT_ENGINE_ERROR


def _run_info(session: AssemblySession, files: List[Path]) -> int:
    added = session.add_sources((path.name, path.read_bytes()) for path in files)
    status = EXIT_OK
    for source in added.added:
        try:
            pages = str(source.page_count)
        except AssemblyError as e:
            pages = user_message(e)
            status = EXIT_ENGINE_ERROR
        print(f"{source.name}\t{source.display_size}\t{pages}")
    for rejection in added.rejected:
        print(f"{rejection.name}\t-\t{user_message(rejection)}")
        status = EXIT_ENGINE_ERROR
    return status


def _write(result: CompositionResult, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(result.data)
    logger.info(f"Wrote {destination} ({result.page_count} pages, {format_file_size(result.size)})")


if __name__ == "__main__":
    raise SystemExit(main())
