"""pagetodo curses-based terminal user interface."""

import curses
import locale
import logging
import sys
from typing import List, Optional, Tuple

from . import keys
from .app import App, Mode
from .models import LOG_FILENAME, TICK_RATE_MS
from .storage import StorageError, context_prefix, home_dir, load, resolve_path

logger = logging.getLogger(__name__)

HELP_TEXT = (
    " new: [n] | rename: [r] | complete: [↵] | delete: [d] | nav: [↑↓→←],[hjkl]"
    " | move: [shift+nav] | new/rename page: [1-9] | quit: [q] "
)

INPUT_TITLES = {
    Mode.CREATING_TODO: " new todo - [↵]: save | [ESC]: cancel ",
    Mode.CREATING_PAGE: " new page - [↵]: save | [ESC]: cancel ",
    Mode.RENAMING_PAGE: " rename page - [↵]: save | {EMPTY}: delete page | [ESC]: cancel ",
    Mode.RENAMING_TODO: " rename todo - [↵]: save | {EMPTY}: delete todo | [ESC]: cancel ",
}

INPUT_PREFIX = "* "
SELECTED_MARK = ">> "
UNSELECTED_MARK = "   "
THUMB = "▐"
MARGIN = 1
INPUT_HEIGHT = 3
LIST_MIN_HEIGHT = 5

# Row kinds, mapped to attributes by the renderer.
ROW_DEFAULT = "default"
ROW_DONE = "done"
ROW_SELECTED = "selected"
ROW_PREVIEW = "preview"

Row = Tuple[str, str]


def todo_rows(app: App) -> List[Row]:
    """Lines of the todo list, including the new-todo preview row."""
    creating = app.mode is Mode.CREATING_TODO
    preview = (f"{SELECTED_MARK}[ ] {app.buffer.text}", ROW_PREVIEW)
    rows: List[Row] = []
    for i, todo in enumerate(app.current_todos):
        selected = i == app.selected_todo_index and not creating
        checkbox = "[X] " if todo.completed else "[ ] "
        marker = SELECTED_MARK if selected else UNSELECTED_MARK
        if selected:
            kind = ROW_SELECTED
        elif todo.completed:
            kind = ROW_DONE
        else:
            kind = ROW_DEFAULT
        rows.append((marker + checkbox + todo.name, kind))
        if creating and i == app.selected_todo_index:
            rows.append(preview)
    if creating and not app.current_todos:
        rows.append(preview)
    return rows


def page_tabs(app: App) -> List[Tuple[str, bool]]:
    """Tab labels for the title bar, flagged True for the current page."""
    return [(f" {i + 1}: {page.name} ", i == app.current_page_index) for i, page in enumerate(app.pages)]


def scroll_offset(offset: int, row: int, height: int) -> int:
    """Adjust the first visible row so that `row` stays in view."""
    if height <= 0:
        return 0
    if row < offset:
        return row
    if row >= offset + height:
        return row - height + 1
    return offset


def scrollbar_thumb(total: int, position: int, viewport: int) -> Optional[Tuple[int, int]]:
    """Return (start, length) of the scrollbar thumb on a track of `viewport` cells.

    None when everything fits and no scrollbar is drawn.
    """
    if total <= viewport or viewport <= 0:
        return None
    length = max(1, viewport * viewport // total)
    start = (viewport - length) * position // max(1, total - 1)
    return start, length


def input_view(text: str, cursor: int, width: int) -> Tuple[str, int]:
    """Visible slice of the input line and the cursor column inside it."""
    line = INPUT_PREFIX + text
    col = len(INPUT_PREFIX) + cursor
    if width <= 0:
        return "", 0
    start = max(0, col - width + 1)
    return line[start : start + width], col - start


class TUI:
    """Curses renderer and event loop around an App."""

    def __init__(self, stdscr, app: App):
        self.stdscr = stdscr
        self.app = app
        self.offset = 0
        self.height, self.width = self.stdscr.getmaxyx()
        self.stdscr.keypad(True)
        self.stdscr.timeout(TICK_RATE_MS)

        self.has_colors = curses.has_colors()
        if self.has_colors:
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            if curses.COLORS >= 256:
                neon, bright, dark, grey = 208, 214, 130, 244
            else:
                neon = bright = dark = curses.COLOR_YELLOW
                grey = curses.COLOR_WHITE
            curses.init_pair(1, neon, background)
            curses.init_pair(2, bright, background)
            curses.init_pair(3, dark, background)
            curses.init_pair(4, grey, background)
            curses.init_pair(5, curses.COLOR_WHITE, background)
            curses.init_pair(6, curses.COLOR_BLACK, neon)
            self.COL_BORDER = curses.color_pair(1)
            self.COL_DEFAULT = curses.color_pair(2)
            self.COL_DONE = curses.color_pair(3)
            self.COL_PREVIEW = curses.color_pair(4) | curses.A_DIM
            self.COL_SELECTED = curses.color_pair(5) | curses.A_BOLD
            self.COL_TAB_ACTIVE = curses.color_pair(6)
        else:
            self.COL_BORDER = curses.A_NORMAL
            self.COL_DEFAULT = curses.A_NORMAL
            self.COL_DONE = curses.A_DIM
            self.COL_PREVIEW = curses.A_DIM
            self.COL_SELECTED = curses.A_BOLD
            self.COL_TAB_ACTIVE = curses.A_REVERSE

    def _put(self, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        if y < 0 or x < 0 or y >= self.height or x >= self.width:
            return
        try:
            self.stdscr.addnstr(y, x, text, self.width - x, attr)
        except curses.error:
            # Writing the bottom-right cell moves the cursor off screen.
            pass

    def _box(self, y: int, x: int, h: int, w: int, attr: int) -> None:
        """Rounded border."""
        self._put(y, x, "╭" + "─" * (w - 2) + "╮", attr)
        for row in range(y + 1, y + h - 1):
            self._put(row, x, "│", attr)
            self._put(row, x + w - 1, "│", attr)
        self._put(y + h - 1, x, "╰" + "─" * (w - 2) + "╯", attr)

    def draw(self):
        """Render the input box, page list, help line and scrollbar."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()
        app = self.app

        top = MARGIN
        left = MARGIN
        width = self.width - 2 * MARGIN
        input_h = INPUT_HEIGHT if app.editing else 0
        list_h = self.height - 2 * MARGIN - input_h
        if width < 8 or list_h < LIST_MIN_HEIGHT:
            self._put(0, 0, "terminal too small", curses.A_BOLD)
            self._set_cursor(None)
            self.stdscr.refresh()
            return

        cursor_pos = None
        if app.editing:
            self._box(top, left, INPUT_HEIGHT, width, self.COL_BORDER)
            self._put(top, left + 1, INPUT_TITLES[app.mode][: width - 2], self.COL_BORDER)
            line, col = input_view(app.buffer.text, app.buffer.cursor, width - 2)
            self._put(top + 1, left + 1, line, self.COL_DEFAULT)
            cursor_pos = (top + 1, left + 1 + col)
            top += INPUT_HEIGHT

        self._box(top, left, list_h, width, self.COL_BORDER)
        limit = left + width - 1
        title = [(f" {app.context_prefix} ", self.COL_BORDER)]
        title += [(label, self.COL_TAB_ACTIVE if active else self.COL_DEFAULT) for label, active in page_tabs(app)]
        x = left + 1
        for label, attr in title:
            if x >= limit:
                break
            self._put(top, x, label[: limit - x], attr)
            x += len(label)
        self._put(top + list_h - 1, left + 1, HELP_TEXT[: width - 2], self.COL_BORDER)

        body_h = list_h - 2
        rows = todo_rows(app)
        focus = app.selected_todo_index
        if app.mode is Mode.CREATING_TODO and app.current_todos:
            focus += 1
        self.offset = scroll_offset(self.offset, min(focus, max(0, len(rows) - 1)), body_h)
        attrs = {
            ROW_DEFAULT: self.COL_DEFAULT,
            ROW_DONE: self.COL_DONE,
            ROW_SELECTED: self.COL_SELECTED,
            ROW_PREVIEW: self.COL_PREVIEW,
        }
        for i, (text, kind) in enumerate(rows[self.offset : self.offset + body_h]):
            self._put(top + 1 + i, left + 1, text[: width - 2], attrs[kind])

        thumb = scrollbar_thumb(len(app.current_todos), app.selected_todo_index, body_h)
        if app.current_todos and thumb is not None:
            start, length = thumb
            for i in range(start, start + length):
                self._put(top + 1 + i, left + width - 1, THUMB, self.COL_BORDER)

        self._set_cursor(cursor_pos)
        self.stdscr.refresh()

    def _set_cursor(self, pos: Optional[Tuple[int, int]]) -> None:
        try:
            curses.curs_set(1 if pos else 0)
        except curses.error:
            pass
        if pos:
            y, x = pos
            self.stdscr.move(y, min(x, self.width - 1))

    def poll(self) -> Optional[keys.Key]:
        """Wait up to one tick for a key press."""
        try:
            ch = self.stdscr.get_wch()
        except curses.error:
            return None
        if ch == curses.KEY_MOUSE:
            try:
                curses.getmouse()
            except curses.error:
                pass
            return None
        if ch == curses.KEY_RESIZE:
            return None
        return keys.decode(ch)

    def run(self):
        """Main event loop."""
        while True:
            self.draw()
            if self.app.should_quit:
                return
            key = self.poll()
            if key is not None:
                self.app.handle_key(key)


def start_curses(app: App) -> None:
    """Initialize curses and run TUI; the terminal is restored on every exit path."""

    def _main(stdscr):
        curses.raw()
        try:
            curses.set_escdelay(25)
        except AttributeError:
            pass
        mask = curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION
        _, old_mask = curses.mousemask(mask)
        try:
            TUI(stdscr, app).run()
        finally:
            curses.mousemask(old_mask)
            curses.noraw()

    curses.wrapper(_main)


def setup_logging(level: int = logging.WARNING) -> None:
    """Send log records to ~/.todo.log; the file is only created on first record."""
    home = home_dir()
    if home is None:
        return
    handler = logging.FileHandler(home / LOG_FILENAME, encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root = logging.getLogger("pagetodo")
    root.setLevel(level)
    root.addHandler(handler)


def open_app() -> App:
    """Resolve the data file and build the session state."""
    path = resolve_path()
    return App(load(path), path, context_prefix(path))


def main() -> None:
    """TUI entry point."""
    setup_logging()
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as exc:
        logger.warning("could not set locale: %s", exc)

    try:
        app = open_app()
    except StorageError as exc:
        logger.error("startup failed: %s", exc)
        print(f"error: {exc}")
        sys.exit(1)

    try:
        start_curses(app)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as exc:
        logger.exception("unexpected failure")
        print(f"error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
