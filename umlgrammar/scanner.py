"""
Cursor over diagram source text.

Every primitive either consumes input and returns the consumed span, or
returns None and leaves the cursor where it was.
"""

from typing import Iterable, Optional, Tuple


SPACE_CHARS = ' \t'
LINE_END_CHARS = '\r\n'


def find_first_tag(text: str, candidates: Iterable[str]) -> Optional[Tuple[int, str]]:
    """
    Find the earliest occurrence of any candidate tag in text.

    When two candidates start at the same offset the one listed first wins.

    Returns:
        (offset, tag) of the match, or None if no candidate occurs

    Example:
        >>> find_first_tag("a <- b -> c", ["->", "<-"])
        (2, '<-')
    """
    best = None
    for tag in candidates:
        index = text.find(tag)
        if index == -1:
            continue
        if best is None or index < best[0]:
            best = (index, tag)
    return best


class Scanner:
    """Position-tracking cursor with the scanning primitives the grammar needs"""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos
        self.length = len(text)

    def at_end(self) -> bool:
        return self.pos >= self.length

    def peek(self, length: int = 1) -> str:
        """Look ahead without consuming"""
        return self.text[self.pos:self.pos + length]

    def consume(self, length: int = 1) -> str:
        """Consume and return characters"""
        result = self.text[self.pos:self.pos + length]
        self.pos += len(result)
        return result

    def _line_end_index(self) -> int:
        index = self.text.find('\n', self.pos)
        if index == -1:
            return self.length
        if index > self.pos and self.text[index - 1] == '\r':
            return index - 1
        return index

    # === Primitives ===

    def skip_space(self) -> str:
        """Consume a (possibly empty) run of spaces and tabs"""
        start = self.pos
        while self.pos < self.length and self.text[self.pos] in SPACE_CHARS:
            self.pos += 1
        return self.text[start:self.pos]

    def skip_blank(self) -> str:
        """Consume spaces, tabs and line endings, i.e. any blank lines"""
        start = self.pos
        while self.pos < self.length and self.text[self.pos] in SPACE_CHARS + LINE_END_CHARS:
            self.pos += 1
        return self.text[start:self.pos]

    def line_ending(self) -> Optional[str]:
        """Consume a single \\n or \\r\\n"""
        if self.peek() == '\n':
            return self.consume()
        if self.peek(2) == '\r\n':
            return self.consume(2)
        return None

    def at_line_end(self) -> bool:
        return self.at_end() or self.peek() == '\n' or self.peek(2) == '\r\n'

    def digits(self) -> Optional[str]:
        """Consume a run of decimal digits"""
        start = self.pos
        while self.pos < self.length and self.text[self.pos] in '0123456789':
            self.pos += 1
        if self.pos == start:
            return None
        return self.text[start:self.pos]

    def tag(self, literal: str) -> Optional[str]:
        """Consume an exact literal"""
        if not literal or self.peek(len(literal)) != literal:
            return None
        return self.consume(len(literal))

    def match_keyword(self, word: str) -> bool:
        """Check for a keyword followed by whitespace, a line end or end of input"""
        if self.peek(len(word)) != word:
            return False
        end = self.pos + len(word)
        return end >= self.length or self.text[end] in SPACE_CHARS + LINE_END_CHARS

    def keyword(self, word: str) -> Optional[str]:
        """Consume a keyword (see match_keyword)"""
        if not self.match_keyword(word):
            return None
        return self.consume(len(word))

    def rest_of_line(self) -> str:
        """Consume everything up to, but not including, the line ending"""
        end = self._line_end_index()
        result = self.text[self.pos:end]
        self.pos = end
        return result

    def take_until(self, literal: str) -> Optional[str]:
        """Consume up to the next occurrence of literal, across lines"""
        index = self.text.find(literal, self.pos)
        if index == -1:
            return None
        result = self.text[self.pos:index]
        self.pos = index
        return result

    def take_until_or_line_end(self, literal: str) -> str:
        """Consume up to literal, or to the line ending if literal is not on this line"""
        line = self.text[self.pos:self._line_end_index()]
        index = line.find(literal)
        if index == -1:
            index = len(line)
        return self.consume(index)

    def take_until_first_tag(self, candidates: Iterable[str]) -> Optional[str]:
        """
        Consume up to the earliest of several tags on the current line.

        The cursor is left on the matched tag. Returns None, without
        moving, if none of the candidates occurs before the line ends.
        """
        line = self.text[self.pos:self._line_end_index()]
        match = find_first_tag(line, candidates)
        if match is None:
            return None
        return self.consume(match[0])

    # === Error context ===

    def line_and_column(self, position: int = None) -> Tuple[int, int]:
        """1-based line and column of a position"""
        if position is None:
            position = self.pos
        position = min(position, self.length)
        line = self.text.count('\n', 0, position) + 1
        column = position - (self.text.rfind('\n', 0, position) + 1) + 1
        return line, column

    def get_snippet(self, position: int = None, context: int = 20) -> str:
        """Get the text following a position for error messages"""
        if position is None:
            position = self.pos
        snippet = self.text[position:position + context]
        if position + context < self.length:
            snippet += "..."
        return snippet
