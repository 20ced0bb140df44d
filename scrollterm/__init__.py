from .aliases import CommandAliasTable
from .api import Api, ScrollDirection
from .error import ConfigError, LockPoisonedError, NotConnectedError, ScrolltermError
from .keys import KeyEvent, KeyModifiers
from .lexer import (
    Chord, ClientCommandMarker, Identifier, MotionToken, MotionTokenizer,
    NumberLiteral, ServerCommandMarker, StringLiteral, Submit, tokenize
)
from .motion import MotionRecorder
from .scrollback import LogLine, Row, ScrollbackBuffer
from .text import Line, Span, display_width
from .wrap import line_height, wrap

__version__ = '0.1.0'
