"""pagetodo - a keyboard-driven terminal to-do list organized in pages."""

__version__ = "1.0.0"

from .models import Todo, Page, DEFAULT_PAGE_NAME
from .storage import (
    StorageError,
    NoHomeDirectory,
    CorruptData,
    StorageIoError,
    resolve_path,
    context_prefix,
    load,
    save,
)
from .app import App, Mode

__all__ = [
    "Todo",
    "Page",
    "DEFAULT_PAGE_NAME",
    "StorageError",
    "NoHomeDirectory",
    "CorruptData",
    "StorageIoError",
    "resolve_path",
    "context_prefix",
    "load",
    "save",
    "App",
    "Mode",
]
