"""
Watch and Rebuild

Polls source files for modification and rebuilds on change. Rebuilds never
overlap: a change that arrives while a rebuild is running only sets a
pending flag, and at most one follow-up rebuild runs once the current one
finishes, however many changes arrived in between.
"""

import time
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from .errors import SlidesError

logger = logging.getLogger(__name__)


class RebuildScheduler:
    """Runs rebuilds one at a time, coalescing requests made during a run."""

    def __init__(self, rebuild: Callable[[Path], None]):
        self.rebuild = rebuild
        self.building = False
        self.pending: Optional[Path] = None
        self.runs = 0

    def request(self, path: Path) -> None:
        if self.building:
            # Later changes overwrite the pending request
            self.pending = path
            return

        self.building = True
        try:
            while path is not None:
                self.pending = None
                self.runs += 1
                try:
                    self.rebuild(path)
                except (SlidesError, OSError) as e:
                    logger.error("Rebuild of %s failed: %s", path, e)
                path = self.pending
        finally:
            self.building = False
            self.pending = None


def snapshot(paths: Iterable[Path]) -> Dict[Path, float]:
    """Map each existing path to its modification time."""
    result = {}
    for path in paths:
        try:
            result[path] = path.stat().st_mtime
        except FileNotFoundError:
            continue
    return result


def watch_files(
    resolve: Callable[[], Iterable[Path]],
    scheduler: RebuildScheduler,
    interval: float = 1.0,
    max_polls: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep
) -> None:
    """Poll the files returned by ``resolve`` and request rebuilds.

    New files and modified files both trigger a rebuild. Runs until
    interrupted, or for ``max_polls`` polls when given.
    """
    known: Dict[Path, float] = {}
    polls = 0

    while max_polls is None or polls < max_polls:
        current = snapshot(resolve())
        for path, mtime in current.items():
            if path not in known:
                print(f'Found: {path}')
                scheduler.request(path)
            elif mtime != known[path]:
                print(f'[{time.strftime("%H:%M:%S")}] Change detected: {path}')
                scheduler.request(path)
        known = current
        polls += 1
        if max_polls is None or polls < max_polls:
            sleep(interval)
