"""pagetodo input modes and in-memory editing state."""

import enum
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from . import keys
from .core import EditBuffer, clamp_selection, next_index, prev_index, swap
from .keys import Key
from .models import DEFAULT_PAGE_NAME, Page, Todo
from .storage import StorageIoError, save

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    NORMAL = "normal"
    CREATING_TODO = "creating_todo"
    CREATING_PAGE = "creating_page"
    RENAMING_PAGE = "renaming_page"
    RENAMING_TODO = "renaming_todo"


class App:
    """Pages, selection and the active input mode for one session.

    Every mutating command goes through `_mutation()`, which writes the
    whole document to `path` once the change is applied.
    """

    def __init__(self, pages: List[Page], path: Path, context_prefix: str = ""):
        self.pages = pages or [Page(name=DEFAULT_PAGE_NAME)]
        self.path = path
        self.context_prefix = context_prefix
        self.current_page_index = 0
        self.selected_todo_index = 0
        self.mode = Mode.NORMAL
        self.buffer = EditBuffer()
        self.should_quit = False
        self.last_save_error: Optional[StorageIoError] = None

    @property
    def current_page(self) -> Page:
        return self.pages[self.current_page_index]

    @property
    def current_todos(self) -> List[Todo]:
        return self.current_page.todos

    @property
    def editing(self) -> bool:
        return self.mode is not Mode.NORMAL

    # -- persistence ----------------------------------------------------

    def persist(self) -> None:
        """Write all pages; failures are logged and remembered, not raised."""
        try:
            save(self.path, self.pages)
        except StorageIoError as exc:
            logger.warning("save failed: %s", exc)
            self.last_save_error = exc
        else:
            self.last_save_error = None

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        yield
        self.persist()

    # -- dispatch -------------------------------------------------------

    def handle_key(self, key: Key) -> None:
        if self.editing:
            self._handle_edit_key(key)
        else:
            self._handle_normal_key(key)

    def _enter_mode(self, mode: Mode, text: str = "") -> None:
        self.mode = mode
        self.buffer.reset(text)

    def _leave_mode(self) -> None:
        self.mode = Mode.NORMAL
        self.buffer.reset()

    def _handle_edit_key(self, key: Key) -> None:
        if key.code in (keys.UP, keys.DOWN) and not key.ctrl:
            # Only the new-todo preview follows the selection.
            if self.mode is Mode.CREATING_TODO:
                if key.code == keys.DOWN:
                    self.select_next()
                else:
                    self.select_prev()
            return

        buf = self.buffer
        if key.code == keys.ENTER:
            self._commit()
        elif key.code == keys.ESC:
            self._leave_mode()
        elif key.is_char:
            buf.insert(key.code)
        elif key.code == keys.BACKSPACE:
            buf.backspace()
        elif key.code == keys.LEFT and key.ctrl:
            buf.word_left()
        elif key.code == keys.LEFT:
            buf.move_left()
        elif key.code == keys.RIGHT and key.ctrl:
            buf.word_right()
        elif key.code == keys.RIGHT:
            buf.move_right()

    def _commit(self) -> None:
        text = self.buffer.text
        mode = self.mode
        self._leave_mode()
        if mode is Mode.CREATING_TODO:
            self.commit_new_todo(text)
        elif mode is Mode.CREATING_PAGE:
            self.commit_new_page(text)
        elif mode is Mode.RENAMING_PAGE:
            self.commit_rename_page(text)
        elif mode is Mode.RENAMING_TODO:
            self.commit_rename_todo(text)

    def _handle_normal_key(self, key: Key) -> None:
        code = key.code
        if code == "q":
            self.should_quit = True
        elif code == "n":
            self._enter_mode(Mode.CREATING_TODO)
        elif code == "r":
            if self.current_todos:
                self._enter_mode(Mode.RENAMING_TODO, self.current_todos[self.selected_todo_index].name)
        elif code == keys.ENTER:
            self.toggle_completed()
        elif code == "d":
            self.delete_todo()
        elif (code == keys.DOWN and key.shift) or code == "J":
            self.move_todo_down()
        elif (code == keys.UP and key.shift) or code == "K":
            self.move_todo_up()
        elif code in (keys.DOWN, "j"):
            self.select_next()
        elif code in (keys.UP, "k"):
            self.select_prev()
        elif (code == keys.RIGHT and key.shift) or code == "L":
            self.move_page_right()
        elif (code == keys.LEFT and key.shift) or code == "H":
            self.move_page_left()
        elif code in (keys.RIGHT, "l"):
            self.next_page()
        elif code in (keys.LEFT, "h"):
            self.prev_page()
        elif key.is_char and code in "123456789":
            self.press_page_digit(int(code))

    # -- todo selection and edits ---------------------------------------

    def select_next(self) -> None:
        if self.current_todos:
            self.selected_todo_index = next_index(self.selected_todo_index, len(self.current_todos))

    def select_prev(self) -> None:
        if self.current_todos:
            self.selected_todo_index = prev_index(self.selected_todo_index, len(self.current_todos))

    def move_todo_down(self) -> None:
        todos = self.current_todos
        if len(todos) < 2:
            return
        with self._mutation():
            target = next_index(self.selected_todo_index, len(todos))
            swap(todos, self.selected_todo_index, target)
            self.selected_todo_index = target

    def move_todo_up(self) -> None:
        todos = self.current_todos
        if len(todos) < 2:
            return
        with self._mutation():
            target = prev_index(self.selected_todo_index, len(todos))
            swap(todos, self.selected_todo_index, target)
            self.selected_todo_index = target

    def toggle_completed(self) -> None:
        if not self.current_todos:
            return
        with self._mutation():
            todo = self.current_todos[self.selected_todo_index]
            todo.completed = not todo.completed

    def delete_todo(self) -> None:
        if not self.current_todos:
            return
        with self._mutation():
            self._remove_selected_todo()

    def _remove_selected_todo(self) -> None:
        del self.current_todos[self.selected_todo_index]
        self.selected_todo_index = clamp_selection(self.selected_todo_index, len(self.current_todos))

    def commit_new_todo(self, name: str) -> None:
        if not name:
            return
        with self._mutation():
            self.current_todos.append(Todo(name=name))
            self.selected_todo_index = len(self.current_todos) - 1

    def commit_rename_todo(self, name: str) -> None:
        if not self.current_todos:
            return
        with self._mutation():
            if name:
                self.current_todos[self.selected_todo_index].name = name
            else:
                self._remove_selected_todo()

    # -- pages ----------------------------------------------------------

    def _switch_page(self, index: int) -> None:
        self.current_page_index = index
        self.selected_todo_index = 0

    def next_page(self) -> None:
        self._switch_page(next_index(self.current_page_index, len(self.pages)))

    def prev_page(self) -> None:
        self._switch_page(prev_index(self.current_page_index, len(self.pages)))

    def move_page_right(self) -> None:
        if len(self.pages) < 2:
            return
        with self._mutation():
            target = next_index(self.current_page_index, len(self.pages))
            swap(self.pages, self.current_page_index, target)
            self.current_page_index = target

    def move_page_left(self) -> None:
        if len(self.pages) < 2:
            return
        with self._mutation():
            target = prev_index(self.current_page_index, len(self.pages))
            swap(self.pages, self.current_page_index, target)
            self.current_page_index = target

    def press_page_digit(self, digit: int) -> None:
        """Select page N, rename it if already selected, or start a new page."""
        index = digit - 1
        if index >= len(self.pages):
            self._enter_mode(Mode.CREATING_PAGE)
        elif index == self.current_page_index:
            self._enter_mode(Mode.RENAMING_PAGE, self.current_page.name)
        else:
            self._switch_page(index)

    def commit_new_page(self, name: str) -> None:
        with self._mutation():
            self.pages.append(Page(name=name))
            self._switch_page(len(self.pages) - 1)

    def commit_rename_page(self, name: str) -> None:
        with self._mutation():
            if name:
                self.current_page.name = name
            elif len(self.pages) > 1:
                del self.pages[self.current_page_index]
                self._switch_page(min(self.current_page_index, len(self.pages) - 1))
