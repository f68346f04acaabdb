# bizdocs/templating/store.py
from __future__ import annotations

import logging
import threading
from pathlib import Path

from bizdocs import settings
from bizdocs.errors import TemplateNotFound

log = logging.getLogger("bizdocs.templating")


class TemplateStore:
    """
    Loads `<directory>/<name>.html` once and keeps it for the life of the process.

    There is no invalidation: editing a template on disk needs a restart.
    """

    SUFFIX = ".html"

    def __init__(self, directory: Path | str | None = None):
        self.directory = Path(directory) if directory else settings.template_dir()
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def _path_for(self, name: str) -> Path:
        n = (name or "").strip()
        if not n or "/" in n or "\\" in n or ".." in n:
            raise TemplateNotFound(name)
        return self.directory / f"{n}{self.SUFFIX}"

    def load(self, name: str) -> str:
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self._path_for(name)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateNotFound(name, detail={"path": str(path)}) from e
        except IsADirectoryError as e:
            raise TemplateNotFound(name, detail={"path": str(path)}) from e

        # two first callers may both read the file; the first stored copy wins
        with self._lock:
            content = self._cache.setdefault(name, content)

        log.info("Loaded template %s (%d chars) from %s", name, len(content), path)
        return content

    def is_cached(self, name: str) -> bool:
        return name in self._cache


_store_singleton: TemplateStore | None = None
_store_lock = threading.Lock()


def get_template_store() -> TemplateStore:
    global _store_singleton
    if _store_singleton is None:
        with _store_lock:
            if _store_singleton is None:
                _store_singleton = TemplateStore()
    return _store_singleton
