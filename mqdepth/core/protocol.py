"""
Wire format for the subset of the Redis protocol mqdepth speaks.

Protocol Specification:
- Commands: inline, space separated, terminated by CRLF
  (``AUTH <password>``, ``SELECT <db>``, ``LLEN <key>``)
- Replies: one line each
  - ``+<text>`` simple status
  - ``:<digits>`` integer
  - anything containing ``ERR`` is an error reply

Only the integer marker and the ``ERR`` keyword carry meaning for queue
lengths. Other reply shapes are tolerated: they produce a reply without a
length rather than an error, so one odd reply cannot stop a whole group.
"""

from __future__ import annotations

from dataclasses import dataclass

from mqdepth.datastructures.type_aliases import QueueLength

from .errors import ProtocolError

CRLF = b"\r\n"
STATUS_MARKER = "+"
INTEGER_MARKER = ":"
ERROR_KEYWORD = "ERR"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INLINE_SEPARATORS = frozenset(" \t\r\n")


@dataclass(frozen=True, slots=True)
class Reply:
    """Outcome of one LLEN round trip that was not an error."""

    length: QueueLength | None = None

    @property
    def has_length(self) -> bool:
        return self.length is not None


def encode_command(name: str, *args: str | int) -> bytes:
    """Frame an inline command.

    Raises:
        ProtocolError: If an argument is empty or contains whitespace, since
            inline commands cannot carry either.
    """
    parts = [name]
    for arg in args:
        text = str(arg)
        if not text or any(char in _INLINE_SEPARATORS for char in text):
            raise ProtocolError(f"{name} argument cannot be sent inline: {text!r}")
        parts.append(text)
    return " ".join(parts).encode("utf-8") + CRLF


def parse_int64(text: str) -> int | None:
    """Parse a base-10 signed 64-bit integer, or return None."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(text)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def parse_reply(line: str) -> Reply:
    """Classify one LLEN reply line.

    Raises:
        ProtocolError: If the line is empty or reports a server error.
    """
    text = line.strip()
    # The keyword check wins over the integer marker.
    if ERROR_KEYWORD in text:
        raise ProtocolError(f"server-reported error: {text}")
    if not text:
        raise ProtocolError("malformed reply: empty line")
    if text[0] == INTEGER_MARKER:
        return Reply(length=parse_int64(text[1:]))
    return Reply()


def parse_status(line: str) -> tuple[bool, str]:
    """Split a status reply into (ok, text after the marker)."""
    text = line.strip()
    if not text:
        return False, ""
    return text[0] == STATUS_MARKER, text[1:].strip()
