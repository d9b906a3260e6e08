"""
Tests for the input mode state machine.

The App is driven with Key values exactly as the curses loop would,
against a real data file under tmp_path.

Usage:
    python -m pytest tests/test_app.py -v
"""
import random

import pytest

from pagetodo import keys
from pagetodo.app import App, Mode
from pagetodo.keys import Key
from pagetodo.models import Page, Todo
from pagetodo.storage import load

ENTER = Key(keys.ENTER)
ESC = Key(keys.ESC)
BACKSPACE = Key(keys.BACKSPACE)
UP = Key(keys.UP)
DOWN = Key(keys.DOWN)
LEFT = Key(keys.LEFT)
RIGHT = Key(keys.RIGHT)
SHIFT_UP = Key(keys.UP, shift=True)
SHIFT_DOWN = Key(keys.DOWN, shift=True)
SHIFT_LEFT = Key(keys.LEFT, shift=True)
SHIFT_RIGHT = Key(keys.RIGHT, shift=True)
CTRL_LEFT = Key(keys.LEFT, ctrl=True)
CTRL_RIGHT = Key(keys.RIGHT, ctrl=True)


def press(app, *presses):
    for p in presses:
        app.handle_key(Key(p) if isinstance(p, str) else p)


def type_text(app, text):
    press(app, *text)


def names(todos):
    return [t.name for t in todos]


@pytest.fixture
def path(tmp_path):
    return tmp_path / "todo.json"


@pytest.fixture
def app(path):
    return App([], path)


def app_with_todos(path, *todo_names):
    return App([Page("main", [Todo(n) for n in todo_names])], path)


# ─────────────────────────────────────────────
#  Startup
# ─────────────────────────────────────────────

class TestStartup:
    def test_empty_document_gets_main_page(self, app, path):
        assert [p.name for p in app.pages] == ["main"]
        assert app.current_todos == []
        assert app.mode is Mode.NORMAL
        assert not path.exists()

    def test_quit(self, app):
        press(app, "q")
        assert app.should_quit


# ─────────────────────────────────────────────
#  Creating todos
# ─────────────────────────────────────────────

class TestCreateTodo:
    def test_new_todo_is_saved(self, app, path):
        press(app, "n")
        assert app.mode is Mode.CREATING_TODO
        type_text(app, "buy milk")
        press(app, ENTER)

        assert app.mode is Mode.NORMAL
        assert app.current_todos == [Todo("buy milk", False)]
        assert app.selected_todo_index == 0
        assert load(path) == [Page("main", [Todo("buy milk", False)])]

    def test_new_todo_is_appended_and_selected(self, path):
        app = app_with_todos(path, "a", "b")
        press(app, "n", "c", ENTER)
        assert names(app.current_todos) == ["a", "b", "c"]
        assert app.selected_todo_index == 2

    def test_empty_buffer_is_noop(self, app, path):
        press(app, "n", ENTER)
        assert app.current_todos == []
        assert app.mode is Mode.NORMAL
        assert not path.exists()

    def test_escape_discards(self, app, path):
        press(app, "n")
        type_text(app, "nope")
        press(app, ESC)
        assert app.mode is Mode.NORMAL
        assert app.buffer.text == ""
        assert app.current_todos == []
        press(app, "n")
        assert app.buffer.text == ""
        assert app.buffer.cursor == 0

    def test_normal_bindings_suppressed_while_typing(self, path):
        app = app_with_todos(path, "a")
        press(app, "n", "q", "d", "1", "j", ENTER)
        assert not app.should_quit
        assert names(app.current_todos) == ["a", "qd1j"]

    def test_up_down_move_selection_while_creating(self, path):
        app = app_with_todos(path, "a", "b", "c")
        press(app, "n", DOWN, DOWN)
        assert app.selected_todo_index == 2
        press(app, DOWN)
        assert app.selected_todo_index == 0
        press(app, UP)
        assert app.selected_todo_index == 2
        assert app.mode is Mode.CREATING_TODO

    def test_cursor_editing(self, app):
        press(app, "n")
        type_text(app, "by milk")
        press(app, CTRL_LEFT, CTRL_LEFT, RIGHT, "u")
        assert app.buffer.text == "buy milk"
        press(app, CTRL_RIGHT, BACKSPACE)
        assert app.buffer.text == "buymilk"
        assert app.buffer.cursor == 3

    def test_word_jump_in_buffer(self, app):
        press(app, "n")
        type_text(app, "hello   world")
        assert app.buffer.cursor == 13
        press(app, CTRL_LEFT)
        assert app.buffer.cursor == 8
        press(app, CTRL_LEFT)
        assert app.buffer.cursor == 0


# ─────────────────────────────────────────────
#  Todo navigation and edits
# ─────────────────────────────────────────────

class TestTodoCommands:
    def test_navigation_wraps(self, path):
        app = app_with_todos(path, "a", "b", "c")
        press(app, "k")
        assert app.selected_todo_index == 2
        press(app, "j")
        assert app.selected_todo_index == 0
        press(app, DOWN, DOWN)
        assert app.selected_todo_index == 2

    def test_navigation_on_empty_list(self, app):
        press(app, "j", "k", UP, DOWN)
        assert app.selected_todo_index == 0

    def test_toggle_twice_restores(self, path):
        app = app_with_todos(path, "a")
        press(app, ENTER)
        assert app.current_todos[0].completed
        assert load(path)[0].todos[0].completed
        press(app, ENTER)
        assert not app.current_todos[0].completed
        assert not load(path)[0].todos[0].completed

    def test_delete_clamps_selection(self, path):
        app = app_with_todos(path, "a", "b", "c")
        press(app, "k", "d")
        assert names(app.current_todos) == ["a", "b"]
        assert app.selected_todo_index == 1
        press(app, "d", "d")
        assert app.current_todos == []
        assert app.selected_todo_index == 0
        assert load(path) == [Page("main", [])]

    def test_delete_on_empty_list_does_not_save(self, app, path):
        press(app, "d")
        assert not path.exists()

    def test_shift_down_cycles(self, path):
        app = app_with_todos(path, "a", "b", "c")
        press(app, SHIFT_DOWN)
        assert names(app.current_todos) == ["b", "a", "c"]
        assert app.selected_todo_index == 1
        press(app, SHIFT_DOWN, SHIFT_DOWN)
        assert app.current_todos[0].name == "a"
        assert app.selected_todo_index == 0
        assert names(load(path)[0].todos) == names(app.current_todos)

    def test_shift_up_and_letter_aliases(self, path):
        app = app_with_todos(path, "a", "b", "c")
        press(app, SHIFT_UP)
        assert names(app.current_todos) == ["c", "b", "a"]
        assert app.selected_todo_index == 2
        press(app, "K")
        assert names(app.current_todos) == ["c", "a", "b"]
        press(app, "J")
        assert names(app.current_todos) == ["c", "b", "a"]
        assert app.selected_todo_index == 2

    def test_swap_needs_two_todos(self, path):
        app = app_with_todos(path, "a")
        press(app, SHIFT_DOWN, SHIFT_UP)
        assert names(app.current_todos) == ["a"]
        assert not path.exists()

    def test_rename_todo(self, path):
        app = app_with_todos(path, "a", "milk")
        press(app, "j", "r")
        assert app.mode is Mode.RENAMING_TODO
        assert app.buffer.text == "milk"
        assert app.buffer.cursor == 4
        type_text(app, "shake")
        press(app, ENTER)
        assert names(app.current_todos) == ["a", "milkshake"]
        assert names(load(path)[0].todos) == ["a", "milkshake"]

    def test_rename_todo_to_empty_deletes(self, path):
        app = app_with_todos(path, "a", "b")
        press(app, "j", "r", BACKSPACE, ENTER)
        assert names(app.current_todos) == ["a"]
        assert app.selected_todo_index == 0

    def test_rename_requires_todos(self, app):
        press(app, "r")
        assert app.mode is Mode.NORMAL

    def test_rename_todo_ignores_up_down(self, path):
        app = app_with_todos(path, "a", "b")
        press(app, "r", DOWN, "x", ENTER)
        assert names(app.current_todos) == ["ax", "b"]

    def test_rename_escape_keeps_name(self, path):
        app = app_with_todos(path, "a")
        press(app, "r", BACKSPACE, ESC)
        assert names(app.current_todos) == ["a"]
        assert app.mode is Mode.NORMAL


# ─────────────────────────────────────────────
#  Pages
# ─────────────────────────────────────────────

class TestPages:
    def two_pages(self, path):
        return App([Page("one", [Todo("a"), Todo("b")]), Page("two", [Todo("c")])], path)

    def test_digit_switches_then_renames(self, path):
        app = self.two_pages(path)
        press(app, "j")
        press(app, "2")
        assert app.current_page_index == 1
        assert app.selected_todo_index == 0
        assert app.mode is Mode.NORMAL
        press(app, "2")
        assert app.mode is Mode.RENAMING_PAGE
        assert app.buffer.text == "two"
        assert app.buffer.cursor == 3

    def test_digit_beyond_count_creates_page(self, path):
        app = self.two_pages(path)
        press(app, "5")
        assert app.mode is Mode.CREATING_PAGE
        assert app.buffer.text == ""
        type_text(app, "three")
        press(app, ENTER)
        assert [p.name for p in app.pages] == ["one", "two", "three"]
        assert app.current_page_index == 2
        assert app.selected_todo_index == 0
        assert [p.name for p in load(path)] == ["one", "two", "three"]

    def test_new_page_may_have_empty_name(self, app, path):
        press(app, "2", ENTER)
        assert [p.name for p in app.pages] == ["main", ""]
        assert app.current_page_index == 1

    def test_zero_is_ignored(self, app):
        press(app, "0")
        assert app.mode is Mode.NORMAL

    def test_rename_page(self, path):
        app = self.two_pages(path)
        press(app, "1", CTRL_LEFT, "m", "y", " ", ENTER)
        assert app.pages[0].name == "my one"
        assert load(path)[0].name == "my one"

    def test_renaming_only_page_to_empty_keeps_it(self, app, path):
        press(app, "1")
        press(app, *[BACKSPACE] * 4)
        assert app.buffer.text == ""
        press(app, ENTER)
        assert [p.name for p in app.pages] == ["main"]
        assert app.current_page_index == 0
        assert load(path) == [Page("main")]

    def test_renaming_last_page_to_empty_deletes_and_clamps(self, path):
        app = self.two_pages(path)
        press(app, "2", "2", BACKSPACE, BACKSPACE, BACKSPACE, ENTER)
        assert [p.name for p in app.pages] == ["one"]
        assert app.current_page_index == 0
        assert app.selected_todo_index == 0
        assert [p.name for p in load(path)] == ["one"]

    def test_renaming_first_page_to_empty(self, path):
        app = self.two_pages(path)
        press(app, "1", BACKSPACE, BACKSPACE, BACKSPACE, ENTER)
        assert [p.name for p in app.pages] == ["two"]
        assert app.current_page_index == 0

    def test_page_navigation_wraps(self, path):
        app = self.two_pages(path)
        press(app, "j", "l")
        assert app.current_page_index == 1
        assert app.selected_todo_index == 0
        press(app, RIGHT)
        assert app.current_page_index == 0
        press(app, "h")
        assert app.current_page_index == 1
        press(app, LEFT)
        assert app.current_page_index == 0

    def test_page_swap_follows_page(self, path):
        app = self.two_pages(path)
        press(app, SHIFT_RIGHT)
        assert [p.name for p in app.pages] == ["two", "one"]
        assert app.current_page_index == 1
        press(app, "H")
        assert [p.name for p in app.pages] == ["one", "two"]
        assert app.current_page_index == 0
        press(app, SHIFT_LEFT)
        assert [p.name for p in app.pages] == ["two", "one"]
        assert app.current_page_index == 1
        press(app, "L")
        assert [p.name for p in load(path)] == ["one", "two"]

    def test_page_swap_needs_two_pages(self, app, path):
        press(app, SHIFT_RIGHT, "H")
        assert not path.exists()

    def test_up_down_ignored_while_naming_page(self, path):
        app = self.two_pages(path)
        press(app, "9", DOWN)
        assert app.selected_todo_index == 0
        press(app, ESC, "1", DOWN, UP, UP)
        assert app.selected_todo_index == 0
        assert app.buffer.text == "one"
        press(app, ESC)
        assert len(app.pages) == 2


# ─────────────────────────────────────────────
#  Persistence failures
# ─────────────────────────────────────────────

class TestSaveFailure:
    def test_failure_is_not_raised(self, tmp_path):
        app = App([], tmp_path)
        press(app, "n", "x", ENTER)
        assert names(app.current_todos) == ["x"]
        assert app.last_save_error is not None

    def test_next_success_clears_error(self, tmp_path):
        app = App([], tmp_path)
        press(app, "n", "x", ENTER)
        app.path = tmp_path / "todo.json"
        press(app, ENTER)
        assert app.last_save_error is None
        assert load(app.path) == [Page("main", [Todo("x", True)])]


# ─────────────────────────────────────────────
#  Invariants under random key sequences
# ─────────────────────────────────────────────

RANDOM_KEYS = [
    "n", "r", "d", "j", "k", "J", "K", "h", "l", "H", "L", "1", "2", "3", "9",
    "a", "b", " ",
    ENTER, ENTER, ESC, BACKSPACE, BACKSPACE, UP, DOWN, LEFT, RIGHT,
    SHIFT_UP, SHIFT_DOWN, SHIFT_LEFT, SHIFT_RIGHT, CTRL_LEFT, CTRL_RIGHT,
]


@pytest.mark.parametrize("seed", range(20))
def test_indices_stay_valid(path, seed):
    rng = random.Random(seed)
    app = App([], path)
    for _ in range(400):
        press(app, rng.choice(RANDOM_KEYS))

        assert len(app.pages) >= 1
        assert 0 <= app.current_page_index < len(app.pages)
        todos = app.current_todos
        if todos:
            assert 0 <= app.selected_todo_index < len(todos)
        else:
            assert app.selected_todo_index == 0
        assert 0 <= app.buffer.cursor <= len(app.buffer.text)
        if app.mode is Mode.NORMAL:
            assert app.buffer.text == ""

    if path.exists():
        assert load(path) == app.pages
