"""
Errors raised while reading and parsing sequence diagrams.

Every failure aborts the whole parse. Nothing is recovered locally and no
partial tree is returned.
"""

from typing import Optional


class ParserError(ValueError):
    """Base class for diagram errors with human-readable messages"""

    def __init__(
        self,
        message: str,
        position: int = None,
        line: int = None,
        column: int = None,
        source: str = None,
        snippet: str = None,
    ):
        self.reason = message
        self.position = position
        self.line = line
        self.column = column
        self.source = source
        self.snippet = snippet

        full_message = message
        location = self._location()
        if location:
            full_message += f" ({location})"
        if snippet:
            full_message += f"\n  Near: {snippet!r}"

        super().__init__(full_message)

    def _location(self) -> Optional[str]:
        parts = []
        if self.source:
            parts.append(f"in {self.source}")
        if self.line is not None:
            parts.append(f"at line {self.line}, column {self.column}")
        elif self.position is not None:
            parts.append(f"at position {self.position}")
        return ", ".join(parts) or None


class UMLSyntaxError(ParserError):
    """Input does not match the construct expected at the current position"""


class UMLReadError(ParserError):
    """A diagram file is missing or unreadable"""


class UMLEncodingError(UMLReadError):
    """A diagram file is not valid UTF-8"""


class UMLIncludeError(ParserError):
    """An !include directive cannot be followed (cycle or too deep)"""
