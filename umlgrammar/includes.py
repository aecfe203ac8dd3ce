"""
!include resolution and file loading.

Relative paths resolve against an explicit base directory that is passed
down through every nested parse. An included file's own directory becomes
the base for the includes inside it. The process working directory is only
read (as the default base), never changed.

The reader collaborator turns a path into text. The default reads the file
and decodes it as UTF-8; tests and embedders can pass any callable with the
same contract.
"""

import logging
from pathlib import Path
from typing import Callable, Tuple, Union

from umlgrammar.errors import UMLEncodingError, UMLIncludeError, UMLReadError
from umlgrammar.parser import Parser
from umlgrammar.tokens import Include, Sequence


logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 16  # Maximum length of an include chain


def read_uml_text(path: Path) -> str:
    """Read a diagram file as UTF-8 text"""
    return path.read_bytes().decode('utf-8')


def resolve_path(file: Union[str, Path], base_path: Union[str, Path] = None) -> Path:
    """Absolute path of file, relative paths taken from base_path (default: cwd)"""
    path = Path(file)
    if not path.is_absolute():
        base = Path(base_path) if base_path is not None else Path.cwd()
        path = base / path
    return path.resolve()


class IncludeResolver:
    """
    Loads diagram files and parses them into Sequences.

    One resolver is shared by a parse and every file it includes.
    """

    def __init__(self, reader: Callable[[Path], str] = None):
        """
        Create a resolver.

        Args:
            reader: Returns the text of a file given its absolute path.
                OSError and UnicodeDecodeError raised by it are reported
                as UMLReadError and UMLEncodingError.
        """
        self.reader = reader or read_uml_text

    def read(self, path: Path) -> str:
        """Read path through the reader, with \\r characters stripped"""
        try:
            text = self.reader(path)
        except UnicodeDecodeError as e:
            raise UMLEncodingError(
                f"File is not valid UTF-8 ({e.reason})",
                position=e.start,
                source=str(path),
            ) from e
        except OSError as e:
            raise UMLReadError(
                f"Cannot read file: {e.strerror or e}",
                source=str(path),
            ) from e

        # Cope with DOS line endings
        return text.replace('\r', '')

    def load(
        self,
        file: Union[str, Path],
        base_path: Union[str, Path] = None,
        include_chain: Tuple[Path, ...] = (),
        depth: int = 0,
    ) -> Sequence:
        """
        Read and parse a diagram file.

        Args:
            file: Path of the file, absolute or relative to base_path
            base_path: Directory for relative paths (default: cwd)
            include_chain: Files currently being parsed, outermost first
            depth: Block nesting depth the file is parsed at

        Returns:
            Sequence parsed from the file
        """
        path = resolve_path(file, base_path)
        including = str(include_chain[-1]) if include_chain else None

        if path in include_chain:
            cycle = " -> ".join(str(p) for p in include_chain + (path,))
            raise UMLIncludeError(f"Include cycle: {cycle}", source=including)
        if len(include_chain) >= MAX_INCLUDE_DEPTH:
            raise UMLIncludeError(
                f"Include chain too long including {path}. Maximum is {MAX_INCLUDE_DEPTH}.",
                source=including,
            )

        text = self.read(path)

        logger.debug("Parsing %s", path)
        parser = Parser(
            text,
            base_path=path.parent,
            resolver=self,
            source=str(path),
            include_chain=include_chain + (path,),
            depth=depth,
        )
        sequence = parser.parse_document()
        logger.debug("Done parsing %s (%d tokens)", path, len(sequence))

        return sequence

    def resolve(
        self,
        file: str,
        base_path: Union[str, Path] = None,
        include_chain: Tuple[Path, ...] = (),
        depth: int = 0,
    ) -> Include:
        """Build the Include token for an !include <file> directive"""
        logger.debug("Including %s (base: %s)", file, base_path or Path.cwd())
        sequence = self.load(file, base_path, include_chain, depth)
        return Include(file=file, sequence=sequence)


def parse_uml_file(
    file: Union[str, Path],
    base_path: Union[str, Path] = None,
    reader: Callable[[Path], str] = None,
) -> Sequence:
    """
    Parse a diagram file.

    Args:
        file: Path of the file, absolute or relative to base_path
        base_path: Directory for a relative file (default: cwd)
        reader: Reads a file given its path (default: UTF-8 file read)

    Returns:
        Sequence parsed from the file, includes expanded

    Raises:
        UMLReadError: file missing or unreadable
        UMLEncodingError: file is not UTF-8
        UMLSyntaxError: file (or an included file) does not parse
        UMLIncludeError: include cycle or chain too long
    """
    return IncludeResolver(reader=reader).load(file, base_path)
