"""Single-file dependency queries and graph health checks."""

from __future__ import annotations

from collections import deque
from typing import Callable

from code_deps.errors import UnresolvedReferenceError
from code_deps.models import ChainLink, DependencyGraph, DependencyQuery
from code_deps.paths import normalize_rel

DEFAULT_QUERY_DEPTH = 3


def find_files(graph: DependencyGraph, needle: str) -> list[str]:
    """Exact key first, then keys ending with or containing ``needle``."""
    key = normalize_rel(needle)
    if key in graph:
        return [key]
    matches = sorted(f for f in graph.files if f.endswith(key) or key in f)
    if not matches:
        raise UnresolvedReferenceError(needle)
    return matches


def _chain(
    start: str,
    neighbors: Callable[[str], frozenset[str]],
    max_depth: int,
) -> list[ChainLink]:
    visited: set[str] = {start}
    queue: deque[tuple[str, int]] = deque([(start, 0)])
    links: list[ChainLink] = []
    while queue:
        file, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for nxt in sorted(neighbors(file)):
            if nxt in visited:
                continue
            visited.add(nxt)
            links.append(ChainLink(file=nxt, depth=depth + 1, via=file))
            queue.append((nxt, depth + 1))
    return links


def query_dependencies(
    graph: DependencyGraph,
    file: str,
    max_depth: int = DEFAULT_QUERY_DEPTH,
) -> DependencyQuery:
    """What ``file`` depends on and what depends on it, up to ``max_depth`` hops."""
    key = normalize_rel(file)
    if key not in graph:
        raise UnresolvedReferenceError(file)
    return DependencyQuery(
        file=key,
        imports=sorted(graph.imports_of(key)),
        imports_chain=_chain(key, graph.imports_of, max_depth),
        imported_by=sorted(graph.importers_of(key)),
        imported_by_chain=_chain(key, graph.importers_of, max_depth),
    )


def list_orphans(graph: DependencyGraph) -> list[str]:
    """Files with neither imports nor importers."""
    return sorted(
        path for path, node in graph.files.items()
        if not node.imports and not node.imported_by
    )
