"""
app.py - umlseq command line entry point

Parses sequence diagram files and prints them back in canonical form,
as a tree outline, or as JSON.

Usage:
    python app.py diagram.uml                 # Canonical diagram text
    python app.py diagram.uml --format tree   # Indented token outline
    python app.py a.uml b.uml --check         # Only report parse errors
    python app.py diagram.uml -b includes/    # Base dir for a relative file

Defaults for --base-dir and the log level can be set in the environment
(or a .env file) as UMLSEQ_BASE_DIR and UMLSEQ_LOG_LEVEL.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from umlgrammar.errors import ParserError
from umlgrammar.includes import parse_uml_file
from umlgrammar.printer import dump_tree, render
from umlgrammar.tokens import Sequence, sequence_to_dict


OUTPUT_FORMATS = ("uml", "tree", "json")


class App:
    """
    umlseq application.

    Handles:
    - Parsing each input file (includes expanded)
    - Formatting the result
    - Reporting failures on stderr
    """

    def __init__(
        self,
        base_dir: Path = None,
        output_format: str = "uml",
        check_only: bool = False,
        out=None,
        err=None,
    ):
        """
        Initialize umlseq.

        Args:
            base_dir: Directory relative input paths resolve against (default: cwd)
            output_format: One of "uml", "tree", "json"
            check_only: Parse but print nothing on success
            out: Stream for results (default: stdout)
            err: Stream for errors (default: stderr)
        """
        self.base_dir = base_dir
        self.output_format = output_format
        self.check_only = check_only
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def format(self, sequence: Sequence) -> str:
        """Format a parsed diagram in the configured output format"""
        if self.output_format == "uml":
            return render(sequence)
        if self.output_format == "tree":
            return dump_tree(sequence)
        if self.output_format == "json":
            return json.dumps(sequence_to_dict(sequence), indent=2) + "\n"
        raise ValueError(f"Unknown output format: {self.output_format}")

    def process(self, file: Path) -> bool:
        """Parse and print one file. Returns False if it failed."""
        try:
            sequence = parse_uml_file(file, base_path=self.base_dir)
        except ParserError as e:
            print(f"ERROR: {file}: {e}", file=self.err)
            return False

        if not self.check_only:
            self.out.write(self.format(sequence))
        return True

    def run(self, files: List[Path]) -> int:
        """
        Process all files.

        Returns:
            Exit status: 0 if every file parsed, 1 otherwise
        """
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output_format}"
            )

        failures = 0
        for file in files:
            if not self.process(file):
                failures += 1

        if self.check_only and not failures:
            print(f"{len(files)} file(s) OK", file=self.out)

        return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    import argparse

    load_dotenv()

    env_base_dir = os.environ.get("UMLSEQ_BASE_DIR")

    parser = argparse.ArgumentParser(description="Parse and re-emit sequence diagrams")
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Diagram files to parse"
    )
    parser.add_argument(
        "--base-dir", "-b",
        type=Path,
        default=Path(env_base_dir) if env_base_dir else None,
        help="Directory relative file paths resolve against (default: $UMLSEQ_BASE_DIR or cwd)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default="uml",
        help="Output format (default: uml)"
    )
    parser.add_argument(
        "--check", "-c",
        action="store_true",
        help="Only check that the files parse"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log include resolution to stderr"
    )
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else os.environ.get("UMLSEQ_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        print(f"ERROR: UMLSEQ_LOG_LEVEL: unknown log level {level!r}", file=sys.stderr)
        return 1
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    app = App(
        base_dir=args.base_dir,
        output_format=args.format,
        check_only=args.check,
    )
    return app.run(args.files)


if __name__ == "__main__":
    sys.exit(main())
