from __future__ import annotations

"""
Polling Watch Loop.

Recompiles whenever a file below the watched paths is added, removed or
modified. Change detection compares ``(mtime_ns, size)`` snapshots; only one
compile runs at a time and any number of changes made while it runs collapse
into a single follow-up compile.
"""

import logging
import os
import time
from typing import Callable, Dict, Iterable, Optional, Tuple

from nextexpress.domain.errors import CompilerError

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Tuple[int, int]]
SnapshotFn = Callable[[Iterable[str]], Snapshot]


# -----------------------------------------------------------------------------
# SNAPSHOTS
# -----------------------------------------------------------------------------

def take_snapshot(paths: Iterable[str]) -> Snapshot:
    """
    Record ``(mtime_ns, size)`` for every file below ``paths``.

    Files that vanish between listing and stat are simply left out.
    """
    snapshot: Snapshot = {}
    for root_path in paths:
        if os.path.isfile(root_path):
            _stat_into(snapshot, root_path)
            continue
        for dirpath, _dirnames, filenames in os.walk(root_path):
            for fname in filenames:
                _stat_into(snapshot, os.path.join(dirpath, fname))
    return snapshot


def _stat_into(snapshot: Snapshot, path: str) -> None:
    try:
        st = os.stat(path)
    except OSError:
        return
    snapshot[path] = (st.st_mtime_ns, st.st_size)


# -----------------------------------------------------------------------------
# LOOP
# -----------------------------------------------------------------------------

def watch(
        paths: Iterable[str],
        on_change: Callable[[], object],
        *,
        interval: float = 0.5,
        debounce: float = 0.1,
        max_cycles: Optional[int] = None,
        snapshot_fn: SnapshotFn = take_snapshot,
        sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run ``on_change`` once, then again after every detected change.

    Args:
        paths: Files or directories to watch.
        on_change: Callback doing the compile.
        interval: Seconds between polls.
        debounce: Quiet period after a change before compiling.
        max_cycles: Stop after this many polls (unbounded when None).
        snapshot_fn: Snapshot provider.
        sleep: Sleep function.

    Returns:
        int: Number of times ``on_change`` ran.
    """
    watched = list(paths)
    logger.info(f"Watching for changes in: {', '.join(watched)}")

    runs = 0
    cycles = 0
    try:
        last = snapshot_fn(watched)
        _run_once(on_change)
        runs += 1

        # Anything that changed during the first compile is caught by the
        # next poll because `last` predates it.
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            sleep(interval)
            current = snapshot_fn(watched)
            if current == last:
                continue

            if debounce > 0:
                sleep(debounce)
                current = snapshot_fn(watched)

            logger.info(f"Detected {_count_changes(last, current)} changed file(s); recompiling")
            last = current
            _run_once(on_change)
            runs += 1
    except KeyboardInterrupt:
        logger.info("Watch loop interrupted by user")

    return runs


def _run_once(on_change: Callable[[], object]) -> None:
    try:
        on_change()
    except CompilerError as e:
        logger.error(f"Compilation failed: {e}")
        logger.debug("Compilation failure details", exc_info=True)


def _count_changes(before: Snapshot, after: Snapshot) -> int:
    keys = set(before) | set(after)
    return sum(1 for k in keys if before.get(k) != after.get(k))
