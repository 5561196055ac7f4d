"""Raw terminal input decoding.

Turns a chunk of bytes read from a terminal in raw mode into logical key
tokens. Each token is the exact byte sequence it was decoded from, so
joining all tokens of a chunk gives back the chunk.

Control sequence format:
    1b (5b|4f|4e) [number] [; number]* (letter or ~)
"""
import codecs
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

ESCAPE = 0x1b
DELETE_CODE = 0x7f
C0_RANGE = (0x00, 0x1f)
C1_RANGE = (0x80, 0x9f)

# Bytes that open a parametrized sequence after ESC: '[', 'O', 'N'
SEQUENCE_INTRODUCERS = (0x5b, 0x4f, 0x4e)

CTRL_C = b'\x03'
UP = b'\x1b[A'
DOWN = b'\x1b[B'
RIGHT = b'\x1b[C'
LEFT = b'\x1b[D'
DELETE = b'\x7f'
BACKSPACE = b'\x08'
ENTER = b'\r'


def _is_sequence_terminator(code: int) -> bool:
    """Letters and ~ close a parametrized escape sequence."""
    return (
        0x41 <= code <= 0x5a
        or 0x61 <= code <= 0x7a
        or code == 0x7e
    )


def _is_control_code(code: int) -> bool:
    return C0_RANGE[0] <= code <= C0_RANGE[1] or C1_RANGE[0] <= code <= C1_RANGE[1]


class _EscapeSequence:
    """Accumulates one escape sequence, starting with the ESC byte."""

    def __init__(self):
        self.buffer = bytearray()
        self.state = 'start'

    def push(self, code: int) -> Optional[bytes]:
        """Feed one byte, returning the finished token if this byte closes it."""
        self.buffer.append(code)

        if self.state == 'start':
            self.state = 'escape-symbol'
            return None

        if self.state == 'escape-symbol':
            if code in SEQUENCE_INTRODUCERS:
                self.state = 'parameters'
                return None
            # Meta + key, e.g. 1b 7f or 1b 35
            return bytes(self.buffer)

        if _is_sequence_terminator(code):
            return bytes(self.buffer)
        return None

    def end(self) -> Optional[bytes]:
        return bytes(self.buffer) if self.buffer else None


class _Text:
    """Accumulates bytes of one UTF-8 codepoint."""

    def __init__(self):
        self.buffer = bytearray()
        self.decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')

    def push(self, code: int) -> Optional[bytes]:
        self.buffer.append(code)
        if self.decoder.decode(bytes([code])) != '':
            return bytes(self.buffer)
        return None

    def end(self) -> Optional[bytes]:
        return bytes(self.buffer) if self.buffer else None


def decode_keys(data: bytes) -> List[bytes]:
    """Split a raw input chunk into key tokens.

    A token is one of:
    - an escape sequence: ESC followed by '[', 'O' or 'N' runs up to and
      including the first letter or '~'; ESC followed by anything else is
      a two byte meta + key token
    - a single C0 or C1 control byte
    - one UTF-8 encoded character

    Decoding never waits for more input. A token cut off by the end of the
    chunk is returned as it is.

    Args:
        data: Bytes read from the terminal

    Returns:
        Key tokens in input order
    """
    keys: List[bytes] = []
    context = None

    for code in data:
        if context is None:
            if code == ESCAPE:
                context = _EscapeSequence()
            elif _is_control_code(code):
                keys.append(bytes([code]))
                continue
            else:
                context = _Text()

        key = context.push(code)

        if key is not None:
            keys.append(key)
            context = None

    # Flush whatever the last context could not finish
    if context is not None:
        rest = context.end()
        if rest is not None:
            keys.append(rest)

    logger.debug("Decoded %d key(s) from %r", len(keys), data)
    return keys


def is_escape_sequence(key: bytes) -> bool:
    return len(key) > 0 and key[0] == ESCAPE


def is_control_code(key: bytes) -> bool:
    """True for a token made of one C0 or C1 control byte."""
    return len(key) == 1 and _is_control_code(key[0])


def is_delete_key(key: bytes) -> bool:
    return key == DELETE


def is_special_key(key: bytes) -> bool:
    """Special keys drive navigation; everything else is typed text."""
    return is_escape_sequence(key) or is_control_code(key) or is_delete_key(key)


def is_meta_digit(key: bytes) -> bool:
    """True for Alt+0 .. Alt+9, sent as ESC followed by the digit."""
    return len(key) == 2 and key[0] == ESCAPE and 0x30 <= key[1] <= 0x39


def meta_digit(key: bytes) -> int:
    """Digit carried by a meta + digit token, e.g. 0x35 & 0x0f = 5."""
    return key[1] & 0x0f
