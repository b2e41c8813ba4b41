"""Impact analysis over reverse import edges (importedBy)."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from code_deps.analysis.test_map import TestMap
from code_deps.models import DependencyGraph, HighRiskFile, ImpactResult
from code_deps.paths import is_within_root, module_name, normalize_rel, unique_sorted

DEFAULT_IMPACT_DEPTH = 2
MAX_IMPACT_DEPTH = 2
DEFAULT_RISK_THRESHOLD = 50
DEFAULT_RISK_TOP = 10


def clamp_depth(value, default: int, maximum: int) -> int:
    """Parse ``value`` as an int and clamp it to ``[0, maximum]``."""
    try:
        depth = int(value)
    except (TypeError, ValueError):
        depth = default
    return max(0, min(maximum, depth))


def impact_layers(
    graph: DependencyGraph,
    changed: Iterable[str],
    depth=DEFAULT_IMPACT_DEPTH,
) -> tuple[int, set[str], set[str]]:
    """Bounded BFS from the changed set. Returns ``(depth, L1, L2)``."""
    clamped = clamp_depth(depth, DEFAULT_IMPACT_DEPTH, MAX_IMPACT_DEPTH)
    visited: set[str] = set(changed)
    frontier: set[str] = set(visited)
    layers: list[set[str]] = [set(), set()]

    for level in range(1, clamped + 1):
        next_frontier: set[str] = set()
        for file in frontier:
            for parent in graph.importers_of(file):
                if parent in visited:
                    continue
                visited.add(parent)
                next_frontier.add(parent)
                layers[level - 1].add(parent)
        frontier = next_frontier
        if not frontier:
            break

    return clamped, layers[0], layers[1]


def count_all_affected(graph: DependencyGraph, start: str) -> int:
    """Number of distinct files reachable from ``start`` via importedBy (unbounded)."""
    if start not in graph:
        return 0
    visited: set[str] = {start}
    queue: deque[str] = deque([start])
    while queue:
        file = queue.popleft()
        for parent in graph.importers_of(file):
            if parent not in visited:
                visited.add(parent)
                queue.append(parent)
    return len(visited) - 1


def high_risk_files(
    graph: DependencyGraph,
    changed: Iterable[str],
    threshold: int = DEFAULT_RISK_THRESHOLD,
    top: int = DEFAULT_RISK_TOP,
) -> list[HighRiskFile]:
    scored = [HighRiskFile(file, count_all_affected(graph, file)) for file in changed]
    risky = [h for h in scored if h.affected_count >= threshold]
    risky.sort(key=lambda h: (-h.affected_count, h.file))
    return risky[:top]


def module_breakdown(files: Iterable[str]) -> dict[str, int]:
    out: dict[str, int] = {}
    for file in files:
        mod = module_name(file)
        out[mod] = out.get(mod, 0) + 1
    return dict(sorted(out.items(), key=lambda kv: (-kv[1], kv[0])))


def analyze_impact(
    graph: DependencyGraph,
    changed: Iterable[str],
    depth=DEFAULT_IMPACT_DEPTH,
    *,
    risk_threshold: int = DEFAULT_RISK_THRESHOLD,
    risk_top: int = DEFAULT_RISK_TOP,
    test_map: TestMap | None = None,
) -> ImpactResult:
    """What does changing these files affect, and how risky is the change."""
    changed_files = unique_sorted(
        rel for rel in (normalize_rel(c) for c in changed) if is_within_root(rel)
    )

    clamped, l1, l2 = impact_layers(graph, changed_files, depth)
    affected = l1 | l2

    result = ImpactResult(
        changed=changed_files,
        depth=clamped,
        l1=l1,
        l2=l2,
        affected=affected,
        high_risk=high_risk_files(graph, changed_files, risk_threshold, risk_top),
        module_breakdown=module_breakdown(affected),
    )

    if test_map is not None:
        result.test_files = test_map.tests_for(set(changed_files) | affected)

    if len(changed_files) == 1 and changed_files[0] in graph:
        result.direct_dependents = len(graph.importers_of(changed_files[0]))

    return result
