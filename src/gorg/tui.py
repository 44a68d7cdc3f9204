"""gorg curses-based project picker."""

import curses
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Union

from .errors import GorgError
from .models import Candidate, MatchMode
from .session import Frame, KeyEvent, SelectionSession

ESC = "\x1b"
ESC_DELAY_MS = 25

# Keys arriving as characters (get_wch returns str for these).
CHAR_KEYS = {
    "\n": KeyEvent("enter"),
    "\r": KeyEvent("enter"),
    "\x7f": KeyEvent("backspace"),
    "\b": KeyEvent("delete_word"),  # C-h
    "\x17": KeyEvent("delete_word"),  # C-w
    "\x10": KeyEvent("up"),  # C-p
    "\x0e": KeyEvent("down"),  # C-n
    "\x02": KeyEvent("left"),  # C-b
    "\x06": KeyEvent("right"),  # C-f
    "\x01": KeyEvent("home"),  # C-a
    "\x05": KeyEvent("end"),  # C-e
    "\x03": KeyEvent("cancel"),  # C-c
    "\x04": KeyEvent("cancel"),  # C-d
    ESC: KeyEvent("cancel"),
}

# Keys following ESC (Alt-<key>).
ALT_KEYS = {
    "b": KeyEvent("word_left"),
    "f": KeyEvent("word_right"),
    "\x7f": KeyEvent("delete_word"),
}

FUNCTION_KEYS = {
    curses.KEY_ENTER: KeyEvent("enter"),
    curses.KEY_BACKSPACE: KeyEvent("backspace"),
    curses.KEY_UP: KeyEvent("up"),
    curses.KEY_DOWN: KeyEvent("down"),
    curses.KEY_LEFT: KeyEvent("left"),
    curses.KEY_RIGHT: KeyEvent("right"),
    curses.KEY_HOME: KeyEvent("home"),
    curses.KEY_END: KeyEvent("end"),
}

# Modified arrows have no fixed codes; keypad() reports them under these
# terminfo names when the terminal description defines them (xterm does).
NAMED_KEYS = {
    "kLFT5": KeyEvent("word_left"),  # C-Left
    "kRIT5": KeyEvent("word_right"),  # C-Right
    "kLFT3": KeyEvent("word_left"),  # M-Left
    "kRIT3": KeyEvent("word_right"),  # M-Right
}


def key_name(code: int) -> str:
    try:
        return curses.keyname(code).decode("ascii", "replace")
    except (curses.error, ValueError, OverflowError):
        return ""


def translate_key(key: Union[str, int]) -> Optional[KeyEvent]:
    """Map a get_wch() result to a KeyEvent, or None if the key is unbound."""
    if isinstance(key, int):
        if key in FUNCTION_KEYS:
            return FUNCTION_KEYS[key]
        return NAMED_KEYS.get(key_name(key))
    if key in CHAR_KEYS:
        return CHAR_KEYS[key]
    if key.isprintable():
        return KeyEvent("char", key)
    return None


def read_event(stdscr) -> Union[KeyEvent, int, None]:
    """Block for the next key. Returns a KeyEvent, KEY_RESIZE, or None."""
    key = stdscr.get_wch()
    if key == curses.KEY_RESIZE:
        return curses.KEY_RESIZE
    if key == ESC:
        stdscr.nodelay(True)
        try:
            follow = stdscr.get_wch()
        except curses.error:
            follow = None
        finally:
            stdscr.nodelay(False)
        if isinstance(follow, str) and follow in ALT_KEYS:
            return ALT_KEYS[follow]
        return KeyEvent("cancel")
    return translate_key(key)


def draw(stdscr, frame: Frame) -> None:
    """Render prompt, candidate rows and status line."""
    stdscr.erase()
    height, width = stdscr.getmaxyx()

    stdscr.addnstr(0, 0, frame.prompt, width - 1, curses.A_BOLD)

    body_h = max(0, height - 2)
    for i, row in enumerate(frame.rows[:body_h]):
        attrs = curses.A_REVERSE if i == frame.highlight else curses.A_NORMAL
        stdscr.addnstr(1 + i, 0, row, width - 1, attrs)

    if height > 2:
        stdscr.addnstr(height - 1, 0, frame.status, width - 1, curses.A_DIM)

    stdscr.move(0, min(frame.cursor_col, width - 1))
    stdscr.refresh()


def fit_rows(stdscr, max_items: int) -> int:
    """Candidate rows that fit between the prompt and the status line."""
    height, _ = stdscr.getmaxyx()
    return max(1, min(max_items, height - 2))


def run_session(
    stdscr, session: SelectionSession, max_items: Optional[int] = None
) -> Optional[Candidate]:
    """Main event loop: feed keys to the session until it ends.

    max_items is the configured row limit; on resize the session is
    trimmed to whatever part of it still fits the terminal.
    """
    limit = session.max_items if max_items is None else max_items
    curses.raw()
    stdscr.keypad(True)
    try:
        curses.set_escdelay(ESC_DELAY_MS)
        curses.curs_set(1)
    except curses.error:
        pass

    draw(stdscr, session.frame())
    while not session.done:
        event = read_event(stdscr)
        if event == curses.KEY_RESIZE:
            session.resize(fit_rows(stdscr, limit))
            draw(stdscr, session.frame())
        elif isinstance(event, KeyEvent) and session.handle(event):
            draw(stdscr, session.frame())
    return session.selected


@contextmanager
def controlling_terminal() -> Iterator[None]:
    """Point stdin and stdout at /dev/tty while curses runs.

    Lets the caller's stdout stay a pipe, e.g. `cd "$(gorg find -f)"`.
    """
    sys.stdout.flush()
    try:
        tty_fd = os.open("/dev/tty", os.O_RDWR)
    except OSError as e:
        raise GorgError(f"Interactive find needs a terminal: {e}") from e
    saved = (os.dup(0), os.dup(1))
    try:
        os.dup2(tty_fd, 0)
        os.dup2(tty_fd, 1)
        yield
    finally:
        os.dup2(saved[0], 0)
        os.dup2(saved[1], 1)
        for fd in (*saved, tty_fd):
            os.close(fd)


def pick(
    candidates: Sequence[Candidate],
    query: str = "",
    mode: MatchMode = "fuzzy",
    max_items: int = 20,
) -> Optional[Candidate]:
    """Run an interactive selection; return the chosen candidate or None."""

    def _main(stdscr) -> Optional[Candidate]:
        session = SelectionSession(candidates, fit_rows(stdscr, max_items), query, mode)
        return run_session(stdscr, session, max_items)

    with controlling_terminal():
        return curses.wrapper(_main)
