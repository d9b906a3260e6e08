"""Terminal-independent key events and the curses decoder."""

import curses
from dataclasses import dataclass
from typing import Callable, Optional, Union

UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
ENTER = "enter"
ESC = "esc"
BACKSPACE = "backspace"


@dataclass(frozen=True)
class Key:
    """A key press.

    `code` is either a single printable character or one of the named
    keys above.
    """

    code: str
    shift: bool = False
    ctrl: bool = False

    @property
    def is_char(self) -> bool:
        return len(self.code) == 1


_CHARS = {
    "\n": Key(ENTER),
    "\r": Key(ENTER),
    "\x1b": Key(ESC),
    "\x7f": Key(BACKSPACE),
    "\x08": Key(BACKSPACE),
}

_SPECIAL = {
    curses.KEY_UP: Key(UP),
    curses.KEY_DOWN: Key(DOWN),
    curses.KEY_LEFT: Key(LEFT),
    curses.KEY_RIGHT: Key(RIGHT),
    curses.KEY_SR: Key(UP, shift=True),
    curses.KEY_SF: Key(DOWN, shift=True),
    curses.KEY_SLEFT: Key(LEFT, shift=True),
    curses.KEY_SRIGHT: Key(RIGHT, shift=True),
    curses.KEY_ENTER: Key(ENTER),
    curses.KEY_BACKSPACE: Key(BACKSPACE),
}

# xterm-style modified cursor keys have no curses constant; terminfo
# names them with a modifier suffix (2 = shift, 5 = ctrl).
_NAMED = {
    "kUP2": Key(UP, shift=True),
    "kDN2": Key(DOWN, shift=True),
    "kUP5": Key(UP, ctrl=True),
    "kDN5": Key(DOWN, ctrl=True),
    "kLFT5": Key(LEFT, ctrl=True),
    "kRIT5": Key(RIGHT, ctrl=True),
}


def _keyname(code: int) -> str:
    try:
        return curses.keyname(code).decode("ascii", "replace")
    except (curses.error, ValueError):
        return ""


def decode(ch: Union[str, int], keyname: Callable[[int], str] = _keyname) -> Optional[Key]:
    """Translate a get_wch() result into a Key, or None for keys we ignore."""
    if isinstance(ch, str):
        if ch in _CHARS:
            return _CHARS[ch]
        if len(ch) == 1 and ch.isprintable():
            return Key(ch)
        return None
    if ch in _SPECIAL:
        return _SPECIAL[ch]
    return _NAMED.get(keyname(ch))
