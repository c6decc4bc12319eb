#!/usr/bin/env python3
"""
impose_pdf.py - Raster PDF transformation and N-up imposition CLI.

Every page is rasterized, optionally inverted or grayscaled, placed
several-per-sheet on A4 and written back as an image-only PDF.

Usage:
    python impose_pdf.py input.pdf -n 4
    python impose_pdf.py a.pdf b.pdf --merge -o handout.pdf
    python impose_pdf.py *.pdf --pipeline grayscale,layout,invert --output-dir ./out/
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List

# Add parent to path when running as script
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent))

from pdf_imposer.config import (
    MIN_SPACING_MM,
    SUPPORTED_PAGES_PER_SHEET,
    Flow,
    LayoutConfig,
    Orientation,
)
from pdf_imposer.errors import ImpositionError
from pdf_imposer.pipeline import BatchRun
from pdf_imposer.steps import default_pipeline, parse_pipeline

logger = logging.getLogger(__name__)

MERGED_NAME = "Merged_Imposed"
OUTPUT_SUFFIX = "_Imposed"


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def spacing_mm(value: str) -> float:
    """Parse spacing, clamping missing or too-small values to the minimum."""
    try:
        mm = float(value)
    except ValueError:
        mm = float("nan")
    if not mm >= MIN_SPACING_MM:
        logger.warning(f"Spacing '{value}' below {MIN_SPACING_MM} mm; using {MIN_SPACING_MM}")
        return MIN_SPACING_MM
    return mm


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Rasterize, recolor and impose PDFs N-up on A4.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python impose_pdf.py slides.pdf -n 6 --borders
  python impose_pdf.py a.pdf b.pdf --merge -n 4 -o handout.pdf
  python impose_pdf.py scan.pdf --pipeline invert,layout

Pipeline steps run in the given order. Steps before "layout" apply to
each page, steps after it apply to the finished sheet.

The output PDF will be:
  - Fully rasterized (no vectors, fonts, layers)
  - One JPEG image per A4 sheet
"""
    )

    parser.add_argument(
        "input",
        nargs="+",
        type=Path,
        help="Input PDF file(s), in output order"
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file (single input or --merge only)"
    )
    output.add_argument(
        "--output-dir",
        type=Path,
        help="Output directory (default: current directory)"
    )

    parser.add_argument(
        "-n", "--pages-per-sheet",
        type=int,
        choices=SUPPORTED_PAGES_PER_SHEET,
        default=1,
        help="Pages placed on each sheet (default: 1)"
    )

    parser.add_argument(
        "--orientation",
        choices=[o.value for o in Orientation],
        default=Orientation.SMART.value,
        help="Sheet orientation (default: smart)"
    )

    parser.add_argument(
        "--flow",
        choices=[f.value for f in Flow],
        default=Flow.ROW.value,
        help="Fill cells row by row or column by column (default: row)"
    )

    parser.add_argument(
        "--spacing",
        type=spacing_mm,
        default=7.0,
        help="Margin around each page in mm, minimum 1 (default: 7)"
    )

    parser.add_argument(
        "-b", "--borders",
        action="store_true",
        help="Outline each placed page"
    )

    parser.add_argument(
        "-m", "--merge",
        action="store_true",
        help="Combine all inputs into one output PDF"
    )

    parser.add_argument(
        "-p", "--pipeline",
        help="Comma-separated steps: invert, grayscale, layout (default: layout)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser.parse_args(argv)


def unique_path(path: Path, taken=()) -> Path:
    """Append _1, _2, ... to the stem until the path is unused."""
    candidate = path
    counter = 0
    while candidate.exists() or candidate in taken:
        counter += 1
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
    return candidate


def output_paths(inputs: List[Path], output_dir: Path, merge: bool) -> List[Path]:
    """Default output file for each result buffer."""
    if merge:
        return [unique_path(output_dir / f"{MERGED_NAME}.pdf")]

    paths = []
    for input_path in inputs:
        base = re.sub(r"\s+", "_", input_path.stem)
        # Inputs sharing a stem get distinct outputs
        paths.append(unique_path(output_dir / f"{base}{OUTPUT_SUFFIX}.pdf", taken=paths))
    return paths


def print_progress(current: int, total: int):
    """Print progress bar."""
    width = 40
    filled = int(width * current / total)
    bar = "=" * filled + "-" * (width - filled)
    pct = current / total * 100
    print(f"\r[{bar}] {current}/{total} ({pct:.0f}%)", end="", file=sys.stderr)
    if current == total:
        print(file=sys.stderr)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    # Validate inputs
    valid_inputs = []
    for p in args.input:
        if not p.exists():
            print(f"Error: File not found: {p}", file=sys.stderr)
            continue
        if p.suffix.lower() != ".pdf":
            print(f"Warning: Skipping non-PDF: {p}", file=sys.stderr)
            continue
        valid_inputs.append(p)

    if not valid_inputs:
        print("Error: No valid PDF files", file=sys.stderr)
        return 1

    if args.output and len(valid_inputs) > 1 and not args.merge:
        print("Error: Use --output-dir for multiple files without --merge", file=sys.stderr)
        return 1

    try:
        steps = parse_pipeline(args.pipeline) if args.pipeline else default_pipeline()
        layout = LayoutConfig(
            pages_per_sheet=args.pages_per_sheet,
            orientation=Orientation(args.orientation),
            flow=Flow(args.flow),
            show_borders=args.borders,
            spacing_mm=args.spacing,
            merge_files=args.merge,
        )
        run = BatchRun(steps, layout, progress_callback=print_progress)
        results = run.run([p.read_bytes() for p in valid_inputs])
    except ImpositionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        targets = [args.output]
    else:
        output_dir = args.output_dir or Path(".")
        output_dir.mkdir(parents=True, exist_ok=True)
        targets = output_paths(valid_inputs, output_dir, args.merge)

    for target, data in zip(targets, results):
        target.write_bytes(data)
        print(f"Wrote {target} ({len(data):,} bytes)")

    print(f"\n{run.stats.summary()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
