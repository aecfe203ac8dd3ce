"""
Canonical text for a parsed diagram.

render() is the inverse of parse(): for any tree T returned by parse,
parse(render(T)) == T. Leaves print as one line, blocks print as
header / body / terminator. Includes are transparent, only the included
tokens are printed.
"""

from typing import List

from umlgrammar.parser import ARROWS, MARKERS, STATEMENT_KEYWORDS, TERMINATOR_KEYWORDS
from umlgrammar.scanner import find_first_tag
from umlgrammar.tokens import (
    Activate, Alt, Box, Deactivate, Delay, Destroy, EndMarker, Include, Loop,
    Message, Note, Parallel, Participant, Sequence, StartMarker, Token,
)


def render(sequence: Sequence) -> str:
    """Render a sequence as diagram source text"""
    return ''.join(render_token(token) for token in sequence)


def render_token(token: Token) -> str:
    """Render one token (and anything nested in it)"""
    if isinstance(token, StartMarker):
        return '@startuml\n'
    if isinstance(token, EndMarker):
        return '@enduml\n'
    if isinstance(token, Message):
        return render_message(token)
    if isinstance(token, Participant):
        if token.long_name is not None:
            return f'participant {token.long_name} as {token.short_name}\n'
        return f'participant {token.short_name}\n'
    if isinstance(token, Note):
        return f'note {token.position}\n{token.text}\nend note\n'
    if isinstance(token, Activate):
        return f'activate {token.name}\n'
    if isinstance(token, Deactivate):
        return f'deactivate {token.name}\n'
    if isinstance(token, Destroy):
        return f'destroy {token.name}\n'
    if isinstance(token, Delay):
        return f'delay {token.text}\n'
    if isinstance(token, Loop):
        return f'loop {token.count}\n{render(token.sequence)}end loop\n'
    if isinstance(token, Box):
        return f'box {token.name}\n{render(token.sequence)}end box\n'
    if isinstance(token, Alt):
        return _render_branches('alt', token.sequences)
    if isinstance(token, Parallel):
        return _render_branches('par', token.sequences)
    if isinstance(token, Include):
        return render(token.sequence)
    raise TypeError(f"Not a diagram token: {token!r}")


def render_message(message: Message) -> str:
    """
    Render a message line.

    Prints `from->to` unless that would read back differently, in which
    case the reversed `to<-from` form is used. A form reads back when its
    first name holds no arrow and does not start with a statement keyword,
    and its second name holds no ':' text separator.
    """
    if message.colour:
        line = f'{message.from_}-[#{message.colour}]>{message.to}'
    elif _reads_back(message.from_, message.to):
        line = f'{message.from_}->{message.to}'
    elif _reads_back(message.to, message.from_):
        line = f'{message.to}<-{message.from_}'
    elif find_first_tag(message.from_, ARROWS) is None and ':' not in message.to:
        line = f'{message.from_}->{message.to}'
    else:
        line = f'{message.to}<-{message.from_}'

    if message.text is not None:
        line += f':{message.text}'
    return line + '\n'


def _reads_back(first: str, second: str) -> bool:
    return (
        find_first_tag(first, ARROWS) is None
        and ':' not in second
        and not _starts_with_keyword(first)
    )


def _starts_with_keyword(name: str) -> bool:
    """True if a line starting with name could be claimed by another construct"""
    if name.startswith(MARKERS):
        return True
    words = name.split(None, 1)
    return len(words) == 2 and words[0] in TERMINATOR_KEYWORDS + STATEMENT_KEYWORDS


def _render_branches(keyword: str, sequences: List[Sequence]) -> str:
    body = 'else\n'.join(render(sequence) for sequence in sequences)
    return f'{keyword}\n{body}end {keyword}\n'


# === Tree outline ===

def dump_tree(sequence: Sequence, indent: str = '  ') -> str:
    """Indented outline of a tree, one node per line"""
    lines: List[str] = []
    _dump(sequence, 0, indent, lines)
    return ''.join(line + '\n' for line in lines)


def _dump(sequence: Sequence, depth: int, indent: str, lines: List[str]):
    pad = indent * depth
    for token in sequence:
        if isinstance(token, Loop):
            lines.append(f'{pad}Loop x{token.count}')
            _dump(token.sequence, depth + 1, indent, lines)
        elif isinstance(token, Box):
            lines.append(f'{pad}Box {token.name!r}')
            _dump(token.sequence, depth + 1, indent, lines)
        elif isinstance(token, (Alt, Parallel)):
            lines.append(f'{pad}{type(token).__name__}')
            for number, branch in enumerate(token.sequences, start=1):
                lines.append(f'{pad}{indent}branch {number}')
                _dump(branch, depth + 2, indent, lines)
        elif isinstance(token, Include):
            lines.append(f'{pad}Include {token.file!r}')
            _dump(token.sequence, depth + 1, indent, lines)
        else:
            lines.append(f'{pad}{token!r}')
