"""Stale propagation: which files need re-validation after sources changed.

Direct stale files are either supplied by the caller or detected by comparing
each graph file's mtime against the graph's generation time. Staleness then
spreads through reverse import edges with a multi-source, leveled BFS: every
propagated file records the minimum level at which it is reachable and the
single file one hop closer to a root that first reached it.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from code_deps.analysis.impact import clamp_depth
from code_deps.analysis.test_map import TestMap
from code_deps.models import (
    DependencyGraph,
    DirectStale,
    PropagatedStale,
    StaleResult,
    StaleSummary,
)
from code_deps.paths import to_project_rel, unique_sorted

logger = logging.getLogger(__name__)

DEFAULT_STALE_DEPTH = 2
MAX_STALE_DEPTH = 25
MTIME_CONCURRENCY = 25


def propagate(
    graph: DependencyGraph,
    direct: Iterable[str],
    depth=DEFAULT_STALE_DEPTH,
) -> tuple[list[PropagatedStale], dict[int, int]]:
    """Leveled BFS over importedBy from all ``direct`` files at level 0."""
    max_depth = clamp_depth(depth, DEFAULT_STALE_DEPTH, MAX_STALE_DEPTH)

    level: dict[str, int] = {}
    cause: dict[str, str] = {}
    queue: deque[str] = deque()
    for file in unique_sorted(direct):
        level[file] = 0
        queue.append(file)

    while queue:
        file = queue.popleft()
        current = level[file]
        if current >= max_depth:
            continue
        for parent in sorted(graph.importers_of(file)):
            if parent in level:
                continue
            level[parent] = current + 1
            cause[parent] = file
            queue.append(parent)

    propagated = [
        PropagatedStale(file=file, level=lvl, source=cause[file])
        for file, lvl in level.items()
        if lvl > 0
    ]
    propagated.sort(key=lambda p: (p.level, p.file))

    counts: dict[int, int] = {}
    for p in propagated:
        counts[p.level] = counts.get(p.level, 0) + 1
    return propagated, counts


def file_mtime(path: Path) -> datetime | None:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None


def detect_direct_stale(
    graph: DependencyGraph,
    project_root: Path,
    concurrency: int = MTIME_CONCURRENCY,
) -> dict[str, datetime]:
    """Graph files modified after the graph was generated."""
    files = sorted(graph.files)
    with ThreadPoolExecutor(max_workers=max(1, concurrency)) as pool:
        mtimes = list(pool.map(lambda rel: file_mtime(project_root / rel), files))

    return {
        rel: mtime
        for rel, mtime in zip(files, mtimes)
        if mtime is not None and mtime > graph.generated_at
    }


def analyze_stale(
    graph: DependencyGraph,
    project_root: Path,
    changed: Iterable[str] | None = None,
    depth=DEFAULT_STALE_DEPTH,
    *,
    tests: bool = False,
    test_map: TestMap | None = None,
    concurrency: int = MTIME_CONCURRENCY,
) -> StaleResult:
    """Find direct stale files and propagate staleness to their dependents.

    When ``changed`` is empty or omitted, direct files are detected from
    mtimes. Changed files outside the graph are still reported as direct
    but cannot propagate.
    """
    max_depth = clamp_depth(depth, DEFAULT_STALE_DEPTH, MAX_STALE_DEPTH)

    explicit = unique_sorted(
        rel for rel in (to_project_rel(project_root, c) for c in (changed or [])) if rel
    )
    if explicit:
        direct_mtimes = {rel: file_mtime(project_root / rel) for rel in explicit}
    else:
        direct_mtimes = detect_direct_stale(graph, project_root, concurrency)

    direct_keys = sorted(direct_mtimes)
    in_graph = [rel for rel in direct_keys if rel in graph]
    ignored = [rel for rel in direct_keys if rel not in graph]
    for rel in ignored:
        logger.warning("Not in dependency graph: %s", rel)

    propagated, counts = propagate(graph, in_graph, max_depth)

    result = StaleResult(
        depth=max_depth,
        generated_at=graph.generated_at,
        direct_stale=[DirectStale(rel, direct_mtimes.get(rel)) for rel in direct_keys],
        propagated_stale=propagated,
        summary=StaleSummary(direct=len(direct_keys), propagated=len(propagated), by_level=counts),
        ignored_changed=ignored,
    )

    if tests:
        if test_map is None:
            logger.warning("No test map available; cannot translate stale files into tests")
            result.tests_to_run = []
        else:
            result.tests_to_run = test_map.tests_for(result.stale_files)

    return result
