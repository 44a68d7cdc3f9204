"""Interactive selection state machine.

The session holds the query being typed, the candidates ranked against
it and the highlighted row. Key events go through apply_key(), which
returns a new QueryState; render() projects a state onto the lines to
draw. Neither touches the terminal, see tui.py for the curses driver.
"""

from dataclasses import dataclass, replace
from typing import List, Literal, Optional, Sequence, Tuple

from .core import match
from .models import Candidate, MatchMode, ScoredCandidate

QUERY_MAX_CHARS = 1000
PROMPT = ">>> "
MARK_SELECTED = "  * "
MARK_PLAIN = "    "

SessionStatus = Literal["editing", "accepted", "cancelled"]
KeyKind = Literal[
    "char",
    "backspace",
    "delete_word",
    "up",
    "down",
    "left",
    "right",
    "word_left",
    "word_right",
    "home",
    "end",
    "enter",
    "cancel",
]


@dataclass(frozen=True)
class KeyEvent:
    """A decoded key press."""

    kind: KeyKind
    char: str = ""  # only for kind == "char"


@dataclass(frozen=True)
class QueryState:
    """Everything the session knows at one point in time."""

    text: Tuple[str, ...]
    cursor: int
    ranked: Tuple[ScoredCandidate, ...]
    total: int
    highlight: int = 0
    status: SessionStatus = "editing"
    selected: Optional[Candidate] = None

    @property
    def query(self) -> str:
        return "".join(self.text)


@dataclass(frozen=True)
class Frame:
    """What to draw: the prompt line, candidate rows and a status line."""

    prompt: str
    cursor_col: int
    rows: Tuple[str, ...]
    highlight: Optional[int]
    status: str


def is_punctuation(ch: str) -> bool:
    """Word separator for cursor movement: whitespace or ASCII punctuation."""
    return (
        ch.isspace()
        or "!" <= ch <= "/"
        or ":" <= ch <= "@"
        or "[" <= ch <= "`"
        or "{" <= ch <= "~"
    )


def _next_word_offset(chars: Sequence[str]) -> Optional[int]:
    """Offset of the separator ending the word at the head of chars."""
    rest = list(enumerate(chars))[1:]
    if is_punctuation(chars[0]):
        i = 0
        while i < len(rest) and is_punctuation(rest[i][1]):
            i += 1
        rest = rest[i:]
    for offset, ch in rest:
        if is_punctuation(ch):
            return offset
    return None


def word_left(text: Sequence[str], cursor: int) -> int:
    if cursor <= 0:
        return 0
    offset = _next_word_offset(list(reversed(text[:cursor])))
    return 0 if offset is None else cursor - offset


def word_right(text: Sequence[str], cursor: int) -> int:
    if cursor >= len(text):
        return len(text)
    offset = _next_word_offset(list(text[cursor:]))
    return len(text) if offset is None else cursor + offset


def initial_state(
    candidates: Sequence[Candidate], query: str = "", mode: MatchMode = "fuzzy"
) -> QueryState:
    text = tuple(query[:QUERY_MAX_CHARS])
    return QueryState(
        text=text,
        cursor=len(text),
        ranked=tuple(match("".join(text), candidates, mode)),
        total=len(candidates),
    )


def visible_count(state: QueryState, max_items: int) -> int:
    return min(len(state.ranked), max_items)


def clamp_highlight(state: QueryState, max_items: int) -> QueryState:
    """Keep the highlight on a visible row after the row limit changes."""
    last = max(0, visible_count(state, max_items) - 1)
    if state.highlight <= last:
        return state
    return replace(state, highlight=last)


def _with_text(
    state: QueryState,
    text: Tuple[str, ...],
    cursor: int,
    candidates: Sequence[Candidate],
    mode: MatchMode,
) -> QueryState:
    return replace(
        state,
        text=text,
        cursor=cursor,
        ranked=tuple(match("".join(text), candidates, mode)),
        highlight=0,
    )


def apply_key(
    state: QueryState,
    event: KeyEvent,
    candidates: Sequence[Candidate],
    max_items: int,
    mode: MatchMode = "fuzzy",
) -> Tuple[QueryState, bool]:
    """Apply one key event.

    Returns the next state and whether anything visible changed. Events
    arriving after the session has ended are ignored.
    """
    if state.status != "editing":
        return state, False

    kind = event.kind
    text, cursor = state.text, state.cursor

    if kind == "char":
        if not event.char or len(text) + len(event.char) > QUERY_MAX_CHARS:
            return state, False
        new_text = text[:cursor] + tuple(event.char) + text[cursor:]
        return _with_text(state, new_text, cursor + len(event.char), candidates, mode), True

    if kind == "backspace":
        if cursor == 0:
            return state, False
        new_text = text[: cursor - 1] + text[cursor:]
        return _with_text(state, new_text, cursor - 1, candidates, mode), True

    if kind == "delete_word":
        start = word_left(text, cursor)
        if start == cursor:
            return state, False
        new_text = text[:start] + text[cursor:]
        return _with_text(state, new_text, start, candidates, mode), True

    if kind == "down":
        if state.highlight + 1 < visible_count(state, max_items):
            return replace(state, highlight=state.highlight + 1), True
        return state, False

    if kind == "up":
        if state.highlight > 0:
            return replace(state, highlight=state.highlight - 1), True
        return state, False

    if kind == "enter":
        if visible_count(state, max_items) == 0:
            return state, False
        chosen = state.ranked[state.highlight].candidate
        return replace(state, status="accepted", selected=chosen), True

    if kind == "cancel":
        return replace(state, status="cancelled", selected=None), True

    if kind == "left":
        new_cursor = max(0, cursor - 1)
    elif kind == "right":
        new_cursor = min(len(text), cursor + 1)
    elif kind == "home":
        new_cursor = 0
    elif kind == "end":
        new_cursor = len(text)
    elif kind == "word_left":
        new_cursor = word_left(text, cursor)
    elif kind == "word_right":
        new_cursor = word_right(text, cursor)
    else:
        return state, False
    if new_cursor == cursor:
        return state, False
    return replace(state, cursor=new_cursor), True


def render(state: QueryState, max_items: int) -> Frame:
    """Project a state onto a Frame. Pure: same state, same frame."""
    count = visible_count(state, max_items)
    rows = tuple(
        (MARK_SELECTED if i == state.highlight else MARK_PLAIN) + scored.text
        for i, scored in enumerate(state.ranked[:count])
    )
    if state.ranked:
        status = f"{len(state.ranked)}/{state.total}"
    else:
        status = "no matches"
    return Frame(
        prompt=PROMPT + state.query,
        cursor_col=len(PROMPT) + state.cursor,
        rows=rows,
        highlight=state.highlight if count else None,
        status=status,
    )


class SelectionSession:
    """Stateful wrapper around apply_key/render for a terminal driver."""

    def __init__(
        self,
        candidates: Sequence[Candidate],
        max_items: int,
        query: str = "",
        mode: MatchMode = "fuzzy",
    ):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.candidates: List[Candidate] = list(candidates)
        self.max_items = max_items
        self.mode = mode
        self.state = initial_state(self.candidates, query, mode)

    @property
    def done(self) -> bool:
        return self.state.status != "editing"

    @property
    def selected(self) -> Optional[Candidate]:
        return self.state.selected

    def handle(self, event: KeyEvent) -> bool:
        """Feed one key event; return True if a redraw is needed."""
        self.state, changed = apply_key(
            self.state, event, self.candidates, self.max_items, self.mode
        )
        return changed

    def resize(self, max_items: int) -> None:
        """Change the number of visible rows, e.g. after the terminal shrank."""
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.max_items = max_items
        self.state = clamp_highlight(self.state, max_items)

    def frame(self) -> Frame:
        return render(self.state, self.max_items)
