"""
Scripted input: a pre-declared queue of answers replayed instead of prompts.

A script is one delimited string::

    select:1,input:"hello, world",toggle:yes,confirm:more_info

Grammar:
    - Items are separated by commas; each item is ``kind:value``
    - Values may be wrapped in single or double quotes; quoted content may
      contain commas and is kept verbatim
    - A backslash escapes the next character, inside or outside quotes
    - Whitespace around unquoted keys/values is trimmed; empty items are ignored

Kinds (and accepted keywords):
    selection     ``select`` / ``selection``     integer index
    text          ``input`` / ``text``           string
    toggle        ``toggle``                     yes/true/on → True, else False
    confirmation  ``confirm`` / ``confirmation`` yes/y/true, no/n/false,
                                                 more/info/more_info/more-info/help

The whole script is parsed at construction. Anything malformed raises
:class:`~opchain.core.errors.ScriptParseError` right away; consumption never
discovers a bad entry. In ``lenient`` confirmation mode an unknown
confirmation value is coerced to "no" (with a warning) instead.

Consumption is strictly FIFO: :meth:`ScriptedInputQueue.get_next` only ever
looks at the head. Asking for a different kind than the head holds raises
:class:`~opchain.core.errors.InputKindMismatchError`; an empty queue returns
``None`` so the caller falls back to live input.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from opchain.core.errors import InputKindMismatchError, ScriptParseError
from opchain.logging.context import get_logger

log = get_logger(__name__)

ConfirmMode = Literal["strict", "lenient"]


class InputKind(str, Enum):
    """Kinds of user input a script can supply."""

    SELECTION = "selection"
    TEXT = "text"
    TOGGLE = "toggle"
    CONFIRMATION = "confirmation"

    @property
    def keyword(self) -> str:
        """Canonical script keyword for this kind."""
        return _CANONICAL_KEYWORDS[self]


class ConfirmationChoice(str, Enum):
    """Closed set of answers to a confirmation prompt."""

    AFFIRMATIVE = "yes"
    NEGATIVE = "no"
    MORE_INFO = "more_info"


KIND_KEYWORDS: dict[str, InputKind] = {
    "select": InputKind.SELECTION,
    "selection": InputKind.SELECTION,
    "input": InputKind.TEXT,
    "text": InputKind.TEXT,
    "toggle": InputKind.TOGGLE,
    "confirm": InputKind.CONFIRMATION,
    "confirmation": InputKind.CONFIRMATION,
}

_CANONICAL_KEYWORDS = {
    InputKind.SELECTION: "select",
    InputKind.TEXT: "input",
    InputKind.TOGGLE: "toggle",
    InputKind.CONFIRMATION: "confirm",
}

CONFIRMATION_WORDS: dict[str, ConfirmationChoice] = {
    "yes": ConfirmationChoice.AFFIRMATIVE,
    "y": ConfirmationChoice.AFFIRMATIVE,
    "true": ConfirmationChoice.AFFIRMATIVE,
    "no": ConfirmationChoice.NEGATIVE,
    "n": ConfirmationChoice.NEGATIVE,
    "false": ConfirmationChoice.NEGATIVE,
    "more": ConfirmationChoice.MORE_INFO,
    "info": ConfirmationChoice.MORE_INFO,
    "more_info": ConfirmationChoice.MORE_INFO,
    "more-info": ConfirmationChoice.MORE_INFO,
    "help": ConfirmationChoice.MORE_INFO,
}

TOGGLE_TRUE = frozenset({"yes", "true", "on"})

ScriptValue = int | str | bool | ConfirmationChoice


@dataclass(frozen=True, slots=True)
class ScriptedInput:
    """One parsed, immutable script entry."""

    kind: InputKind
    value: ScriptValue
    position: int = 0

    def to_script_item(self) -> str:
        """Serialise back to ``kind:value`` form."""
        match self.kind:
            case InputKind.TEXT:
                escaped = str(self.value).replace("\\", "\\\\").replace('"', '\\"')
                return f'{self.kind.keyword}:"{escaped}"'
            case InputKind.TOGGLE:
                return f"{self.kind.keyword}:{'yes' if self.value else 'no'}"
            case InputKind.CONFIRMATION:
                return f"{self.kind.keyword}:{ConfirmationChoice(self.value).value}"
            case _:
                return f"{self.kind.keyword}:{self.value}"

    def describe(self) -> str:
        """Human-readable form used in summaries."""
        match self.kind:
            case InputKind.SELECTION:
                return f"select option {self.value}"
            case InputKind.TEXT:
                return f"input '{self.value}'"
            case InputKind.TOGGLE:
                return f"toggle {'yes' if self.value else 'no'}"
            case _:
                return f"confirm {ConfirmationChoice(self.value).value}"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

# An item is a list of (text, quoted) chunks
_Chunk = tuple[str, bool]


def _split_items(script: str) -> list[list[_Chunk]]:
    items: list[list[_Chunk]] = []
    chunks: list[_Chunk] = []
    buf: list[str] = []
    quote: str | None = None

    def flush(quoted: bool) -> None:
        if buf or quoted:
            chunks.append(("".join(buf), quoted))
        buf.clear()

    chars = iter(script)
    for ch in chars:
        if ch == "\\":
            buf.append(next(chars, "\\"))
        elif quote is not None:
            if ch == quote:
                flush(quoted=True)
                quote = None
            else:
                buf.append(ch)
        elif ch in ("'", '"'):
            flush(quoted=False)
            quote = ch
        elif ch == ",":
            flush(quoted=False)
            items.append(chunks)
            chunks = []
        else:
            buf.append(ch)

    if quote is not None:
        # Blank items are skipped, so they take no position
        position = sum(not _is_blank(item) for item in items) + 1
        raise ScriptParseError(f"Unterminated {quote} quote", position=position)
    flush(quoted=False)
    items.append(chunks)
    return items


def _is_blank(chunks: list[_Chunk]) -> bool:
    return all(not quoted and not text.strip() for text, quoted in chunks)


def _raw_text(chunks: list[_Chunk]) -> str:
    return "".join(f'"{text}"' if quoted else text for text, quoted in chunks)


def _split_kind(chunks: list[_Chunk], position: int) -> tuple[str, list[_Chunk]]:
    for index, (text, quoted) in enumerate(chunks):
        if quoted:
            break
        if ":" in text:
            head, _, tail = text.partition(":")
            key = "".join(t for t, _ in chunks[:index]) + head
            rest = ([(tail, False)] if tail else []) + chunks[index + 1 :]
            return key.strip().lower(), rest
    raise ScriptParseError("Expected 'kind:value'", position=position, item=_raw_text(chunks))


def _join_value(chunks: list[_Chunk]) -> tuple[str, bool]:
    if not chunks:
        return "", False
    texts = [text for text, _ in chunks]
    if not chunks[0][1]:
        texts[0] = texts[0].lstrip()
    if not chunks[-1][1]:
        texts[-1] = texts[-1].rstrip()
    return "".join(texts), any(quoted for _, quoted in chunks)


def _parse_item(chunks: list[_Chunk], position: int, confirm_mode: ConfirmMode) -> ScriptedInput:
    keyword, value_chunks = _split_kind(chunks, position)
    kind = KIND_KEYWORDS.get(keyword)
    if kind is None:
        raise ScriptParseError(f"Unknown input kind '{keyword}'", position=position, item=_raw_text(chunks))

    raw, _quoted = _join_value(value_chunks)

    if kind is InputKind.SELECTION:
        try:
            return ScriptedInput(kind, int(raw), position)
        except ValueError:
            raise ScriptParseError(
                f"Selection index must be an integer, got {raw!r}", position=position, item=_raw_text(chunks)
            ) from None

    if kind is InputKind.TEXT:
        return ScriptedInput(kind, raw, position)

    if kind is InputKind.TOGGLE:
        return ScriptedInput(kind, raw.lower() in TOGGLE_TRUE, position)

    choice = CONFIRMATION_WORDS.get(raw.lower())
    if choice is None:
        if confirm_mode == "strict":
            raise ScriptParseError(
                f"Unknown confirmation value {raw!r} (expected yes, no or more_info)",
                position=position,
                item=_raw_text(chunks),
            )
        log.warning("scripted_input.confirmation_coerced", position=position, value=raw, coerced_to="no")
        choice = ConfirmationChoice.NEGATIVE
    return ScriptedInput(kind, choice, position)


def parse_script(script: str, *, confirm_mode: ConfirmMode = "strict") -> list[ScriptedInput]:
    """
    Parse a scripted-input string into entries.

    Raises:
        ScriptParseError: On the first malformed item
    """
    entries: list[ScriptedInput] = []
    position = 0
    for chunks in _split_items(script):
        if _is_blank(chunks):
            continue
        position += 1
        entries.append(_parse_item(chunks, position, confirm_mode))
    return entries


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


class ScriptedInputQueue:
    """
    FIFO queue of scripted inputs with type-checked consumption.

    Usage:
        queue = ScriptedInputQueue('select:1,input:"hello world"')
        queue.get_next(InputKind.SELECTION).value   # 1
        queue.get_next(InputKind.TEXT).value        # 'hello world'
        queue.get_next(InputKind.TEXT)              # None -> ask for real
    """

    def __init__(
        self,
        script: str | None = None,
        *,
        confirm_mode: ConfirmMode = "strict",
        entries: Iterable[ScriptedInput] | None = None,
    ) -> None:
        parsed = list(entries) if entries is not None else parse_script(script or "", confirm_mode=confirm_mode)
        self.script = script
        self.declared: tuple[ScriptedInput, ...] = tuple(parsed)
        self._pending: deque[ScriptedInput] = deque(parsed)
        self.consumed_count = 0
        self.interaction_count = 0
        if parsed:
            log.debug("scripted_input.parsed", count=len(parsed), summary=self.summary())

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"ScriptedInputQueue(pending={len(self._pending)}, consumed={self.consumed_count})"

    def get_next(self, kind: InputKind) -> ScriptedInput | None:
        """
        Remove and return the head entry.

        Returns:
            The head entry, or ``None`` if the queue is exhausted

        Raises:
            InputKindMismatchError: If the head entry is not of ``kind``
        """
        kind = InputKind(kind)
        self.interaction_count += 1
        if not self._pending:
            return None

        head = self._pending[0]
        if head.kind is not kind:
            raise InputKindMismatchError(kind.value, head.kind.value, head.value, head.position)

        self._pending.popleft()
        self.consumed_count += 1
        return head

    def peek(self) -> ScriptedInput | None:
        return self._pending[0] if self._pending else None

    def has_more(self) -> bool:
        return bool(self._pending)

    @property
    def remaining(self) -> tuple[ScriptedInput, ...]:
        return tuple(self._pending)

    def summary(self) -> str:
        """Human-readable listing of the declared script."""
        return ", ".join(entry.describe() for entry in self.declared)

    def to_script(self) -> str:
        """Canonical script string for the declared entries."""
        return ",".join(entry.to_script_item() for entry in self.declared)


__all__ = [
    "InputKind",
    "ConfirmationChoice",
    "ConfirmMode",
    "ScriptedInput",
    "ScriptedInputQueue",
    "parse_script",
    "KIND_KEYWORDS",
    "CONFIRMATION_WORDS",
]
