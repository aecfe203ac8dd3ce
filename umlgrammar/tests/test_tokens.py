"""
Tests for the document tree classes and their serialization.
"""

import dataclasses
import pytest
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent.parent))

from umlgrammar.tokens import (
    Alt, Box, Include, Loop, Message, Note, Parallel, Participant, Sequence,
    StartMarker, sequence_to_dict, token_to_dict,
)


class TestTokenInvariants:
    """Constructors reject trees that could not come from a parse"""

    @pytest.mark.parametrize("cls", [Alt, Parallel])
    def test_branches_required(self, cls):
        with pytest.raises(ValueError, match="at least one branch"):
            cls([])

    @pytest.mark.parametrize("count", [-1, 256])
    def test_loop_count_range(self, count):
        with pytest.raises(ValueError, match="Loop count must be between 0 and 255"):
            Loop(Sequence([StartMarker()]), count)

    def test_tokens_are_immutable(self):
        message = Message("A", "B")
        with pytest.raises(dataclasses.FrozenInstanceError):
            message.to = "C"

    def test_participant_defaults(self):
        assert Participant("a").long_name is None


class TestSequence:
    """Sequence behaves like a read-only list of tokens"""

    def test_iteration_and_indexing(self):
        sequence = Sequence([StartMarker(), Message("A", "B")])
        assert len(sequence) == 2
        assert sequence[1] == Message("A", "B")
        assert list(sequence) == [StartMarker(), Message("A", "B")]

    def test_equality_is_structural(self):
        assert Sequence([Note("l", "t")]) == Sequence([Note("l", "t")])
        assert Sequence([Note("l", "t")]) != Sequence([Note("r", "t")])

    def test_message_repr(self):
        assert repr(Message("A", "B")) == "Message(A -> B)"
        assert repr(Message("A", "B", "hi", colour="red")) == "Message(A -> B [#red]: hi)"


class TestSerialization:
    """Test token_to_dict / sequence_to_dict"""

    def test_message(self):
        assert token_to_dict(Message("A", "B", "hi")) == {
            "type": "Message", "from": "A", "to": "B", "text": "hi", "colour": None,
        }

    def test_nested(self):
        tree = Sequence([
            Box("b", Sequence([
                Alt([Sequence([Participant("x", "X")]), Sequence([Note("left", "t")])]),
            ])),
            Include("f.uml", Sequence([])),
        ])
        assert sequence_to_dict(tree) == [
            {
                "type": "Box",
                "name": "b",
                "sequence": [{
                    "type": "Alt",
                    "sequences": [
                        [{"type": "Participant", "short_name": "x", "long_name": "X"}],
                        [{"type": "Note", "position": "left", "text": "t"}],
                    ],
                }],
            },
            {"type": "Include", "file": "f.uml", "sequence": []},
        ]

    def test_loop(self):
        data = token_to_dict(Loop(Sequence([StartMarker()]), 4))
        assert data == {"type": "Loop", "count": 4, "sequence": [{"type": "StartMarker"}]}
