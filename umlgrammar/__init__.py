"""
umlgrammar - parse and re-emit PlantUML-style sequence diagrams.

parse() / parse_uml_file() build a Sequence tree, render() turns it back
into canonical diagram text.
"""

from .errors import ParserError, UMLEncodingError, UMLIncludeError, UMLReadError, UMLSyntaxError
from .tokens import (
    Activate, Alt, Box, Deactivate, Delay, Destroy, EndMarker, Include, Loop,
    Message, Note, Parallel, Participant, Sequence, StartMarker, Token,
    sequence_to_dict, token_to_dict,
)
from .parser import Parser, parse
from .includes import IncludeResolver, parse_uml_file
from .printer import dump_tree, render, render_token

__all__ = [
    "ParserError", "UMLSyntaxError", "UMLReadError", "UMLEncodingError", "UMLIncludeError",
    "Sequence", "Token", "StartMarker", "EndMarker", "Message", "Participant", "Note",
    "Activate", "Deactivate", "Destroy", "Delay", "Loop", "Box", "Alt", "Parallel", "Include",
    "token_to_dict", "sequence_to_dict",
    "Parser", "parse", "IncludeResolver", "parse_uml_file",
    "render", "render_token", "dump_tree",
]
