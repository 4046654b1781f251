from __future__ import annotations

import os
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .build import full_build
from .graph import BuildGraph
from .schema import BuildContext, SiteConfig

REBUILD_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}


class Rebuilder(FileSystemEventHandler):
    """Runs a full build for every relevant change notification.

    Builds never overlap: a trigger that arrives while a build is running
    waits for it, then runs its own full build. ``graph`` always holds the
    graph of the last build that completed.
    """

    def __init__(
        self,
        ctx: BuildContext,
        build: Callable[[BuildContext], BuildGraph] = full_build,
        reload_config: Optional[Callable[[Path], SiteConfig]] = None,
        on_build: Optional[Callable[[BuildGraph, Optional[FileSystemEvent]], None]] = None,
    ) -> None:
        super().__init__()
        self.ctx = ctx
        self.build = build
        self.reload_config = reload_config
        self.on_build = on_build
        self.graph: Optional[BuildGraph] = None
        self.observer = None
        self._lock = threading.Lock()

    def source_dirs(self) -> list[Path]:
        dirs = [self.ctx.templates_dir, self.ctx.public_dir]
        if self.ctx.content_dir is not None:
            dirs.append(self.ctx.content_dir)
        for collection in self.ctx.config.collections.values():
            folder = self.ctx.root / collection.folder
            if not any(folder == known or folder.is_relative_to(known) for known in dirs):
                dirs.append(folder)
        return dirs

    def event_paths(self, event: FileSystemEvent) -> list[Path]:
        paths = [Path(os.fsdecode(event.src_path))]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(Path(os.fsdecode(dest_path)))
        return paths

    def touches_config(self, event: FileSystemEvent) -> bool:
        config_path = self.ctx.config_path
        return config_path is not None and config_path in self.event_paths(event)

    def is_relevant(self, event: FileSystemEvent) -> bool:
        if event.event_type not in REBUILD_EVENTS:
            return False
        if self.touches_config(event):
            return True
        dirs = self.source_dirs()
        for path in self.event_paths(event):
            if any(path == folder or path.is_relative_to(folder) for folder in dirs):
                return True
        return False

    def rebuild(self, event: Optional[FileSystemEvent] = None) -> BuildGraph:
        with self._lock:
            if event is not None and self.reload_config is not None and self.touches_config(event):
                self.ctx = replace(self.ctx, config=self.reload_config(self.ctx.config_path))
            graph = self.build(self.ctx)
            self.graph = graph
        if self.on_build is not None:
            self.on_build(graph, event)
        return graph

    def on_any_event(self, event: FileSystemEvent) -> None:
        if not self.is_relevant(event):
            return
        # An exception escaping here ends the observer thread and stops watching.
        try:
            self.rebuild(event)
        except Exception as exc:
            print(f"Rebuild failed: {exc.__class__.__name__}: {exc}", file=sys.stderr)

    def watch_targets(self) -> list[tuple[Path, bool]]:
        targets = [(folder, True) for folder in self.source_dirs()]
        if self.ctx.config_path is not None:
            targets.append((self.ctx.config_path.parent, False))
        return targets

    def start(self, observer: Optional[Observer] = None) -> Rebuilder:
        self.observer = observer if observer is not None else Observer()
        for path, recursive in self.watch_targets():
            if path.is_dir():
                self.observer.schedule(self, str(path), recursive=recursive)
        self.observer.start()
        return self

    def stop(self) -> None:
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join()
        self.observer = None


def watch_and_build(
    ctx: BuildContext,
    reload_config: Optional[Callable[[Path], SiteConfig]] = None,
    on_build: Optional[Callable[[BuildGraph, Optional[FileSystemEvent]], None]] = None,
    observer: Optional[Observer] = None,
) -> Rebuilder:
    """Build once, then rebuild on every change until ``stop()`` is called."""
    rebuilder = Rebuilder(ctx, reload_config=reload_config, on_build=on_build)
    rebuilder.rebuild()
    return rebuilder.start(observer)
