r"""
Sequence Diagram Parser

Recursive-descent parser for a small PlantUML-like sequence notation:

    @startuml
    participant "Web Server" as web
    actor user
    user -> web : GET /
    web <- db
    note left
      free text
    end note
    loop 3
      ...
    end loop
    alt ... else ... end
    par ... else ... end
    box label ... end box
    !include other.uml
    @enduml

Block constructs (loop, box, alt, par) parse their bodies by re-entering
parse_sequence(), which stops in front of an `else` or `end` line and
leaves it for the enclosing block to consume.
"""

from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from umlgrammar.errors import UMLSyntaxError
from umlgrammar.scanner import Scanner
from umlgrammar.tokens import (
    Activate, Alt, Box, Deactivate, Delay, Destroy, EndMarker, Include, Loop,
    Message, Note, Parallel, Participant, Sequence, StartMarker, Token,
    MAX_LOOP_COUNT,
)


# === Configuration ===

MAX_NESTING_DEPTH = 50      # Maximum block nesting, includes count as a level
TERMINATOR_KEYWORDS = ('else', 'end')
STATEMENT_KEYWORDS = (
    'participant', 'actor', 'note', 'loop', 'box', 'alt', 'par', 'delay',
    'activate', 'deactivate', 'destroy', '!include',
)
MARKERS = ('@startuml', '@enduml')
ARROWS = ('->', '<-')       # Order matters: earlier arrows win ties


class Parser:
    """
    Parser for one diagram source text.

    Handles:
    - Markers: @startuml, @enduml
    - Leaves: messages, participant/actor, activate, deactivate, destroy, delay
    - Blocks: note, loop, box, alt, par
    - Includes: !include <file>, resolved relative to base_path

    Each parse_* token method returns None when its leading keyword is not
    present and raises UMLSyntaxError when the keyword matched but the rest
    of the construct did not. parse_token() treats both as "try the next
    parser".
    """

    def __init__(
        self,
        text: str,
        base_path: Union[str, Path] = None,
        resolver=None,
        source: str = None,
        include_chain: Tuple[Path, ...] = (),
        depth: int = 0,
    ):
        self.scanner = Scanner(text)
        self.base_path = base_path
        self.resolver = resolver
        self.source = source
        self.include_chain = include_chain
        self.depth = depth

        # Priority order: message goes last, its grammar accepts almost anything
        self.token_parsers: List[Callable[[], Optional[Token]]] = [
            self.parse_start_marker,
            self.parse_end_marker,
            self.parse_include,
            self.parse_note,
            self.parse_participant,
            self.parse_parallel,
            self.parse_alt,
            self.parse_delay,
            self.parse_activate,
            self.parse_deactivate,
            self.parse_destroy,
            self.parse_box,
            self.parse_loop,
            self.parse_message,
        ]

    def error(self, message: str, position: int = None) -> UMLSyntaxError:
        """Create a UMLSyntaxError pointing at position (default: cursor)"""
        if position is None:
            position = self.scanner.pos
        line, column = self.scanner.line_and_column(position)
        return UMLSyntaxError(
            message,
            position=position,
            line=line,
            column=column,
            source=self.source,
            snippet=self.scanner.get_snippet(position),
        )

    # === Driver ===

    def parse_document(self) -> Sequence:
        """Parse the whole text. Blank input gives an empty Sequence."""
        scanner = self.scanner
        scanner.skip_blank()
        if scanner.at_end():
            return Sequence([])

        if self.at_terminator():
            raise self.error(f"Unexpected '{self._current_word()}' outside of a block")

        sequence = self.parse_sequence()

        scanner.skip_blank()
        if not scanner.at_end():
            raise self.error(f"Unexpected '{self._current_word()}' outside of a block")
        return sequence

    def parse_sequence(self, construct: str = 'diagram') -> Sequence:
        """
        Parse tokens until end of input or an `else`/`end` line.

        The terminator is not consumed. At least one token is required.
        """
        scanner = self.scanner
        tokens = []

        while True:
            scanner.skip_blank()
            if scanner.at_end() or self.at_terminator():
                break
            tokens.append(self.parse_token())

        if not tokens:
            raise self.error(f"Expected at least one statement in {construct}")
        return Sequence(tokens)

    def parse_token(self) -> Token:
        """
        Apply the first token parser that succeeds.

        A parser that fails after its keyword matched does not end the
        search: the cursor is reset and the next parser is tried, so
        `loop -> B` still reads as a message. When every parser fails the
        error that got furthest into the input is raised.
        """
        start = self.scanner.pos
        furthest = None
        for parse_fn in self.token_parsers:
            try:
                token = parse_fn()
            except UMLSyntaxError as e:
                # Errors inside an included file are final
                if e.source != self.source:
                    raise
                if furthest is None or (e.position or 0) > (furthest.position or 0):
                    furthest = e
                token = None
            if token is not None:
                return token
            self.scanner.pos = start

        if furthest is not None:
            raise furthest
        raise self.error(
            "Expected a diagram statement (message, participant, note, "
            "loop, box, alt, par, ...)"
        )

    def at_terminator(self) -> bool:
        return any(self.scanner.match_keyword(word) for word in TERMINATOR_KEYWORDS)

    def _current_word(self) -> str:
        rest = self.scanner.text[self.scanner.pos:].split(None, 1)
        return rest[0] if rest else ''

    # === Helpers ===

    def _expect_line_end(self, construct: str):
        scanner = self.scanner
        if scanner.line_ending() is None and not scanner.at_end():
            raise self.error(f"Expected end of line after {construct}")

    def _expect_terminator(self, keyword: str, construct: str):
        """Consume `<keyword> <anything>` closing a block"""
        scanner = self.scanner
        scanner.skip_blank()
        if scanner.keyword(keyword) is None:
            if scanner.at_end():
                raise self.error(f"Unterminated {construct}: expected '{keyword}' before end of input")
            raise self.error(f"Expected '{keyword}' to close {construct}")
        scanner.rest_of_line()
        self._expect_line_end(keyword)

    def _parse_body(self, construct: str) -> Sequence:
        if self.depth >= MAX_NESTING_DEPTH:
            raise self.error(
                f"{construct} nested too deep (depth {self.depth + 1}). "
                f"Maximum is {MAX_NESTING_DEPTH}."
            )
        self.depth += 1
        try:
            return self.parse_sequence(construct)
        finally:
            self.depth -= 1

    def _parse_keyword_line(self, keyword: str) -> Optional[str]:
        """Parse `<keyword> <text>` and return the trimmed text"""
        scanner = self.scanner
        scanner.skip_space()
        if scanner.keyword(keyword) is None:
            return None
        text = scanner.rest_of_line().strip()
        self._expect_line_end(keyword)
        return text

    # === Leaf tokens ===

    def _parse_marker(self, tag: str) -> bool:
        scanner = self.scanner
        scanner.skip_space()
        if scanner.tag(tag) is None:
            return False
        scanner.skip_space()
        self._expect_line_end(tag)
        return True

    def parse_start_marker(self) -> Optional[StartMarker]:
        return StartMarker() if self._parse_marker('@startuml') else None

    def parse_end_marker(self) -> Optional[EndMarker]:
        return EndMarker() if self._parse_marker('@enduml') else None

    def parse_participant(self) -> Optional[Participant]:
        """Parse: (participant|actor) <name> [as <alias>]"""
        scanner = self.scanner
        scanner.skip_space()
        if scanner.keyword('participant') is None and scanner.keyword('actor') is None:
            return None
        scanner.skip_space()

        name_start = scanner.pos
        name = scanner.take_until_or_line_end(' as ').strip()
        if not name:
            raise self.error("Expected a participant name", name_start)

        alias = None
        if scanner.tag(' as ') is not None:
            scanner.skip_space()
            alias_start = scanner.pos
            alias = scanner.rest_of_line().strip()
            if not alias:
                raise self.error("Expected an alias after 'as'", alias_start)

        self._expect_line_end('participant')

        if alias is None:
            return Participant(short_name=name)
        return Participant(short_name=alias, long_name=name)

    def parse_activate(self) -> Optional[Activate]:
        name = self._parse_keyword_line('activate')
        return None if name is None else Activate(name)

    def parse_deactivate(self) -> Optional[Deactivate]:
        name = self._parse_keyword_line('deactivate')
        return None if name is None else Deactivate(name)

    def parse_destroy(self) -> Optional[Destroy]:
        name = self._parse_keyword_line('destroy')
        return None if name is None else Destroy(name)

    def parse_delay(self) -> Optional[Delay]:
        text = self._parse_keyword_line('delay')
        return None if text is None else Delay(text)

    def parse_message(self) -> Optional[Message]:
        """Parse: <p1> (->|<-) <p2> [: <text>]

        The arrow is the earliest of -> and <- on the line, so names may
        contain the other spelling further along.
        """
        scanner = self.scanner
        scanner.skip_space()

        first = scanner.take_until_first_tag(ARROWS)
        if first is None:
            return None
        arrow = scanner.tag('->') or scanner.tag('<-')

        second = scanner.take_until_or_line_end(':')
        text = None
        if scanner.tag(':') is not None:
            text = scanner.rest_of_line().strip()

        self._expect_line_end('message')

        if arrow == '->':
            from_, to = first, second
        else:
            from_, to = second, first
        return Message(from_=from_.strip(), to=to.strip(), text=text)

    # === Block tokens ===

    def parse_note(self) -> Optional[Note]:
        """Parse: note <position> ... end note

        The body is free text, it is not parsed for tokens.
        """
        scanner = self.scanner
        scanner.skip_space()
        if scanner.keyword('note') is None:
            return None
        position = scanner.rest_of_line().strip()
        self._expect_line_end('note')

        body_start = scanner.pos
        text = scanner.take_until('end note')
        if text is None:
            raise self.error("Unterminated note: expected 'end note'", body_start)
        scanner.tag('end note')
        scanner.skip_space()
        scanner.line_ending()

        return Note(position=position, text=text.strip())

    def parse_loop(self) -> Optional[Loop]:
        """Parse: loop <count> ... end"""
        scanner = self.scanner
        scanner.skip_space()
        if scanner.keyword('loop') is None:
            return None
        scanner.skip_space()

        count_start = scanner.pos
        digits = scanner.digits()
        if digits is None:
            raise self.error("Loop count must be a decimal number", count_start)
        count = int(digits)
        if count > MAX_LOOP_COUNT:
            raise self.error(f"Loop count {count} is out of range (0-{MAX_LOOP_COUNT})", count_start)
        scanner.skip_space()
        self._expect_line_end('loop count')

        sequence = self._parse_body('loop')
        self._expect_terminator('end', 'loop')
        return Loop(sequence=sequence, count=count)

    def parse_box(self) -> Optional[Box]:
        """Parse: box <name> ... end box"""
        name = self._parse_keyword_line('box')
        if name is None:
            return None
        sequence = self._parse_body('box')
        self._expect_terminator('end box', 'box')
        return Box(name=name, sequence=sequence)

    def _parse_branches(self, keyword: str) -> Optional[List[Sequence]]:
        """Parse: <keyword> ... (else ...)* end"""
        if self._parse_keyword_line(keyword) is None:
            return None

        scanner = self.scanner
        branches = [self._parse_body(f'{keyword} branch')]
        while scanner.keyword('else') is not None:
            scanner.rest_of_line()
            self._expect_line_end('else')
            branches.append(self._parse_body(f'{keyword} branch'))

        self._expect_terminator('end', keyword)
        return branches

    def parse_alt(self) -> Optional[Alt]:
        sequences = self._parse_branches('alt')
        return None if sequences is None else Alt(sequences)

    def parse_parallel(self) -> Optional[Parallel]:
        sequences = self._parse_branches('par')
        return None if sequences is None else Parallel(sequences)

    def parse_include(self) -> Optional[Include]:
        """Parse: !include <file>, then parse that file in place"""
        scanner = self.scanner
        scanner.skip_space()
        if scanner.keyword('!include') is None:
            return None
        scanner.skip_space()

        file_start = scanner.pos
        file = scanner.rest_of_line().strip().strip('"')
        if not file:
            raise self.error("Expected a file name after !include", file_start)
        self._expect_line_end('!include')

        if self.depth >= MAX_NESTING_DEPTH:
            raise self.error(f"Includes nested too deep. Maximum depth is {MAX_NESTING_DEPTH}.", file_start)

        return self._get_resolver().resolve(
            file,
            base_path=self.base_path,
            include_chain=self.include_chain,
            depth=self.depth + 1,
        )

    def _get_resolver(self):
        if self.resolver is None:
            from umlgrammar.includes import IncludeResolver
            self.resolver = IncludeResolver()
        return self.resolver


def parse(
    text: str,
    base_path: Union[str, Path] = None,
    reader: Callable[[Path], str] = None,
    source: str = None,
) -> Sequence:
    r"""
    Parse sequence diagram source text.

    Args:
        text: Diagram source
        base_path: Directory that relative !include paths resolve against
            (default: the current working directory)
        reader: Reads an included file, given its path (default: UTF-8 file read)
        source: Name to report in error messages

    Returns:
        Sequence of parsed tokens

    Example:
        >>> parse("A -> B : hello\n")
        Sequence([Message(A -> B: hello)])
    """
    from umlgrammar.includes import IncludeResolver

    parser = Parser(
        text.replace('\r', ''),
        base_path=base_path,
        resolver=IncludeResolver(reader=reader),
        source=source,
    )
    return parser.parse_document()
