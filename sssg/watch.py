"""Source watcher for sssg.

Rebuilds the site whenever a source document or template changes. Writes
of generated artifacts are ignored so a rebuild never triggers another one.
Build errors are logged and the watcher keeps running.

Key classes:
- SourceWatcher: Runs an initial build, then rebuilds on changes.
- _ChangeHandler: File system event handler that filters relevant paths.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import build_site
from .config import SiteConfig, load_config
from .errors import BuildError, BuildFailures
from .minifiers import MinifierRegistry
from .sources import is_source

logger = logging.getLogger(__name__)


class SourceWatcher:
    """Watches htdocs and templates and rebuilds on change.

    Attributes:
        project_root: Root directory of the project.
        config: Project configuration.
        minifiers: Optional minifier registry passed to every build.
    """

    def __init__(
        self,
        project_root: Path,
        config: SiteConfig | None = None,
        minifiers: MinifierRegistry | None = None,
    ):
        self.project_root = project_root
        self.config = config or load_config(project_root)
        self.minifiers = minifiers
        self._observer: Observer | None = None
        self._lock = threading.Lock()
        self._rebuilding = False
        self._pending = False
        self._last_signature: tuple | None = None

    def start(self) -> None:  # pragma: no cover - integration path
        self.rebuild(force=True)
        self._start_observer()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def _start_observer(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        for folder in (self.config.htdocs_path, self.config.templates_path):
            if folder.exists():
                observer.schedule(handler, str(folder), recursive=True)
        observer.start()
        self._observer = observer

    def is_relevant(self, path: Path) -> bool:
        """Check whether a change to ``path`` requires a rebuild."""
        if is_source(path):
            return True
        try:
            path.relative_to(self.config.templates_path)
        except ValueError:
            return False
        return True

    def rebuild(self, force: bool = False) -> bool:
        """Rebuild the site if sources or templates changed.

        A change reported while a build is running is not dropped: it marks
        the watcher pending, and the running call builds again once it
        finishes.

        Args:
            force: Build even if nothing changed since the last build.

        Returns:
            True if the last build this call ran succeeded.
        """
        with self._lock:
            if self._rebuilding:
                self._pending = True
                return False
            self._rebuilding = True
        try:
            built = self._build(force)
            while True:
                with self._lock:
                    if not self._pending:
                        self._rebuilding = False
                        break
                    self._pending = False
                built = self._build(force=False)
        finally:
            with self._lock:
                self._rebuilding = False
        return built

    def _build(self, force: bool) -> bool:
        signature = self._compute_signature()
        if not force and signature == self._last_signature:
            return False
        self._last_signature = signature
        try:
            result = build_site(
                self.project_root,
                config=self.config,
                minifiers=self.minifiers,
                keep_going=True,
            )
        except BuildFailures as exc:
            for error in exc.errors:
                logger.error("Error: %s", error)
            return False
        except BuildError as exc:
            logger.error("Error: %s", exc)
            return False
        logger.info("Built %d artifact(s)", len(result.artifacts))
        return True

    def _compute_signature(self) -> tuple:
        entries: list[tuple] = []
        for folder in (self.config.htdocs_path, self.config.templates_path):
            if not folder.exists():
                continue
            for path in sorted(folder.rglob("*")):
                if path.is_dir() or not self.is_relevant(path):
                    continue
                try:
                    stat = path.stat()
                except OSError:
                    continue
                entries.append((str(path), stat.st_mtime_ns, stat.st_size))
        return tuple(entries)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: SourceWatcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if not any(p and self.watcher.is_relevant(Path(p)) for p in paths):
            return
        logger.info("Change detected; rebuilding...")
        self.watcher.rebuild()
