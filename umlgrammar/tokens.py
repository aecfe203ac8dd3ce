"""
Sequence diagram document tree.

A diagram parses to a Sequence: an ordered list of tokens. Block tokens
(Loop, Box, Alt, Parallel, Include) own nested Sequences, so the tree is
built bottom-up and never shares nodes between parents.

- StartMarker / EndMarker   @startuml / @enduml
- Message(from_, to)        A -> B : text
- Participant(short_name)   participant "Long" as short
- Note(position, text)      note left ... end note
- Activate / Deactivate / Destroy(name)
- Delay(text)
- Loop(sequence, count)     loop 5 ... end
- Box(name, sequence)       box label ... end box
- Alt(sequences)            alt ... else ... end
- Parallel(sequences)       par ... else ... end
- Include(file, sequence)   !include other.uml
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


# === Leaf tokens ===

@dataclass(frozen=True)
class StartMarker:
    """@startuml"""

    def __repr__(self):
        return 'StartMarker()'


@dataclass(frozen=True)
class EndMarker:
    """@enduml"""

    def __repr__(self):
        return 'EndMarker()'


@dataclass(frozen=True)
class Message:
    """Directed interaction: from_ -> to : text

    The arrow direction is resolved while parsing, so `A <- B` is stored
    as Message(from_="B", to="A").
    """
    from_: str
    to: str
    text: Optional[str] = None
    colour: Optional[str] = None  # only set by code that builds trees itself

    def __repr__(self):
        text = f': {self.text}' if self.text is not None else ''
        colour = f' [#{self.colour}]' if self.colour else ''
        return f'Message({self.from_} -> {self.to}{colour}{text})'


@dataclass(frozen=True)
class Participant:
    """participant <long_name> as <short_name>, or participant <short_name>"""
    short_name: str
    long_name: Optional[str] = None


@dataclass(frozen=True)
class Note:
    """note <position> ... end note"""
    position: str
    text: str


@dataclass(frozen=True)
class Activate:
    name: str


@dataclass(frozen=True)
class Deactivate:
    name: str


@dataclass(frozen=True)
class Destroy:
    name: str


@dataclass(frozen=True)
class Delay:
    text: str


# === Block tokens ===

@dataclass(frozen=True)
class Sequence:
    """Ordered body of a diagram or of a block. Order is document order."""
    tokens: List['Token'] = field(default_factory=list)

    def __iter__(self):
        return iter(self.tokens)

    def __len__(self):
        return len(self.tokens)

    def __getitem__(self, index):
        return self.tokens[index]

    def __repr__(self):
        return f'Sequence({self.tokens})'


MAX_LOOP_COUNT = 255  # loop counts are small unsigned integers


@dataclass(frozen=True)
class Loop:
    """loop <count> ... end"""
    sequence: Sequence
    count: int

    def __post_init__(self):
        if not 0 <= self.count <= MAX_LOOP_COUNT:
            raise ValueError(f"Loop count must be between 0 and {MAX_LOOP_COUNT}, got {self.count}")


@dataclass(frozen=True)
class Box:
    """box <name> ... end box"""
    name: str
    sequence: Sequence


@dataclass(frozen=True)
class Alt:
    """alt ... else ... end - mutually exclusive branches"""
    sequences: List[Sequence]

    def __post_init__(self):
        if not self.sequences:
            raise ValueError("Alt needs at least one branch")


@dataclass(frozen=True)
class Parallel:
    """par ... else ... end - concurrent branches"""
    sequences: List[Sequence]

    def __post_init__(self):
        if not self.sequences:
            raise ValueError("Parallel needs at least one branch")


@dataclass(frozen=True)
class Include:
    """!include <file> - the included document, spliced in place"""
    file: str
    sequence: Sequence


Token = Union[
    StartMarker, EndMarker, Message, Participant, Note,
    Activate, Deactivate, Destroy, Delay,
    Loop, Box, Alt, Parallel, Include,
]


# === Serialization ===

def token_to_dict(token: Token) -> Dict[str, Any]:
    """Serialize a token (and anything nested in it) to a JSON-ready dict"""
    data: Dict[str, Any] = {"type": type(token).__name__}

    if isinstance(token, Message):
        data.update({"from": token.from_, "to": token.to, "text": token.text, "colour": token.colour})
    elif isinstance(token, Participant):
        data.update({"short_name": token.short_name, "long_name": token.long_name})
    elif isinstance(token, Note):
        data.update({"position": token.position, "text": token.text})
    elif isinstance(token, (Activate, Deactivate, Destroy)):
        data["name"] = token.name
    elif isinstance(token, Delay):
        data["text"] = token.text
    elif isinstance(token, Loop):
        data.update({"count": token.count, "sequence": sequence_to_dict(token.sequence)})
    elif isinstance(token, Box):
        data.update({"name": token.name, "sequence": sequence_to_dict(token.sequence)})
    elif isinstance(token, (Alt, Parallel)):
        data["sequences"] = [sequence_to_dict(s) for s in token.sequences]
    elif isinstance(token, Include):
        data.update({"file": token.file, "sequence": sequence_to_dict(token.sequence)})

    return data


def sequence_to_dict(sequence: Sequence) -> List[Dict[str, Any]]:
    """Serialize a sequence to a list of token dicts"""
    return [token_to_dict(token) for token in sequence]
