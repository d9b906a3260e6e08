"""pagetodo editing and navigation helpers (pure functions, no I/O)."""

from dataclasses import dataclass
from typing import List, TypeVar

T = TypeVar("T")


def next_index(index: int, length: int) -> int:
    """Cyclic step forward; length must be > 0."""
    return (index + 1) % length


def prev_index(index: int, length: int) -> int:
    """Cyclic step backward; length must be > 0."""
    return (index + length - 1) % length


def swap(items: List[T], i: int, j: int) -> None:
    items[i], items[j] = items[j], items[i]


def clamp_selection(index: int, length: int) -> int:
    """Valid selection for a list of the given length (0 when empty)."""
    if length == 0:
        return 0
    return min(max(index, 0), length - 1)


def prev_word_start(text: str, cursor: int) -> int:
    """Offset of the start of the word before cursor.

    Skips whitespace immediately before the cursor, then the run of
    non-whitespace before that.
    """
    pos = cursor
    while pos > 0 and text[pos - 1].isspace():
        pos -= 1
    while pos > 0 and not text[pos - 1].isspace():
        pos -= 1
    return pos


def next_word_start(text: str, cursor: int) -> int:
    """Offset of the first non-whitespace char after the current word, or len(text)."""
    pos = cursor
    end = len(text)
    while pos < end and not text[pos].isspace():
        pos += 1
    while pos < end and text[pos].isspace():
        pos += 1
    return pos


@dataclass
class EditBuffer:
    """Single-line text being typed, with a cursor offset into it."""

    text: str = ""
    cursor: int = 0

    def reset(self, text: str = "") -> None:
        """Replace the contents and put the cursor at the end."""
        self.text = text
        self.cursor = len(text)

    def insert(self, ch: str) -> None:
        self.text = self.text[: self.cursor] + ch + self.text[self.cursor :]
        self.cursor += len(ch)

    def backspace(self) -> None:
        if self.cursor > 0:
            self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
            self.cursor -= 1

    def move_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_right(self) -> None:
        if self.cursor < len(self.text):
            self.cursor += 1

    def word_left(self) -> None:
        self.cursor = prev_word_start(self.text, self.cursor)

    def word_right(self) -> None:
        self.cursor = next_word_start(self.text, self.cursor)
