"""Data models and constants for pagetodo."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

LOCAL_FILENAME = "todo.json"
GLOBAL_FILENAME = ".todo.json"
LOG_FILENAME = ".todo.log"
DEFAULT_PAGE_NAME = "main"
TICK_RATE_MS = 250


def _require(raw: Dict[str, Any], key: str, kind: type) -> Any:
    if key not in raw:
        raise ValueError(f"missing field {key!r}")
    value = raw[key]
    if not isinstance(value, kind):
        raise TypeError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class Todo:
    """A single task on a page."""

    name: str
    completed: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> "Todo":
        if not isinstance(raw, dict):
            raise TypeError("todo must be an object")
        return cls(name=_require(raw, "name", str), completed=_require(raw, "completed", bool))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "completed": self.completed}


@dataclass
class Page:
    """A named, ordered list of todos."""

    name: str
    todos: List[Todo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "Page":
        if not isinstance(raw, dict):
            raise TypeError("page must be an object")
        todos = _require(raw, "todos", list)
        return cls(name=_require(raw, "name", str), todos=[Todo.from_dict(t) for t in todos])

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "todos": [t.to_dict() for t in self.todos]}
