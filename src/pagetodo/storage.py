"""File I/O for pagetodo documents."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .models import GLOBAL_FILENAME, LOCAL_FILENAME, Page

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for data file failures."""


class NoHomeDirectory(StorageError):
    """No local todo.json and the home directory cannot be determined."""


class CorruptData(StorageError):
    """The data file exists but is not a valid page list."""


class StorageIoError(StorageError):
    """Reading or writing the data file failed."""


def home_dir() -> Optional[Path]:
    """Return the user's home directory, or None if it cannot be determined."""
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def global_path() -> Optional[Path]:
    home = home_dir()
    return home / GLOBAL_FILENAME if home is not None else None


def resolve_path(cwd: Optional[Path] = None) -> Path:
    """Return ./todo.json if it exists, otherwise ~/.todo.json."""
    local = (cwd if cwd is not None else Path.cwd()) / LOCAL_FILENAME
    if local.exists():
        return local
    path = global_path()
    if path is None:
        raise NoHomeDirectory("could not find home directory")
    return path


def context_prefix(path: Path, cwd: Optional[Path] = None) -> str:
    """Title-bar label telling whether the global or a local file is in use."""
    if path == global_path():
        return "[global]: "
    try:
        name = (cwd if cwd is not None else Path.cwd()).name
    except OSError:
        name = ""
    if name:
        return f"[{name}]:"
    return "[local]: "


def load(path: Path) -> List[Page]:
    """Load the page list.

    Returns an empty list if the file does not exist; the caller supplies
    the default page. Raises CorruptData if the file cannot be parsed.
    """
    if not path.exists():
        return []
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise StorageIoError(f"could not read {path}: {exc}") from exc
    try:
        raw = json.loads(data.decode("utf-8"))
        if not isinstance(raw, list):
            raise TypeError("top level must be an array of pages")
        return [Page.from_dict(p) for p in raw]
    except (ValueError, TypeError) as exc:
        raise CorruptData(f"could not parse {path}: {exc}") from exc


def save(path: Path, pages: List[Page]) -> None:
    """Rewrite the whole file from in-memory pages."""
    data = json.dumps([p.to_dict() for p in pages], indent=2, ensure_ascii=False)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(data)
    except OSError as exc:
        raise StorageIoError(f"could not write {path}: {exc}") from exc
    logger.debug("saved %d pages to %s", len(pages), path)
