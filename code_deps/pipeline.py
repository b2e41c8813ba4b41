"""Per-command orchestration: config -> fresh graph snapshot -> one analyzer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from code_deps.analysis.dependency_graph import BuildResult, DependencyGraphBuilder
from code_deps.analysis.impact import DEFAULT_IMPACT_DEPTH, analyze_impact
from code_deps.analysis.prioritize import prioritize_fixes
from code_deps.analysis.query import (
    DEFAULT_QUERY_DEPTH,
    find_files,
    list_orphans,
    query_dependencies,
)
from code_deps.analysis.stale import DEFAULT_STALE_DEPTH, MTIME_CONCURRENCY, analyze_stale
from code_deps.analysis.test_map import TestMap
from code_deps.config import ProjectConfig
from code_deps.models import (
    Cycle,
    DependencyGraph,
    DependencyQuery,
    ImpactResult,
    PriorityResult,
    StaleResult,
)
from code_deps.paths import to_project_rel, unique_sorted
from code_deps.scanner import DEFAULT_SKIP_DIRS
from code_deps.storage import (
    load_failing_tests,
    load_graph,
    load_test_map,
    save_graph,
    save_report,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class CheckReport:
    cycles: list[Cycle] = field(default_factory=list)
    orphans: list[str] | None = None
    file: DependencyQuery | None = None

    def to_dict(self) -> dict:
        data: dict = {"cycles": [list(c.files) for c in self.cycles]}
        if self.orphans is not None:
            data["orphans"] = list(self.orphans)
        if self.file is not None:
            data["file"] = self.file.to_dict()
        return data


def load_snapshot(config: ProjectConfig) -> DependencyGraph:
    """Load a fresh graph from the cache dir. Raises ArtifactMissingError."""
    return load_graph(config.graph_path)


def _test_map(config: ProjectConfig) -> TestMap | None:
    return load_test_map(config.test_map_path)


def _project_paths(config: ProjectConfig, files: Iterable[str]) -> list[str]:
    return unique_sorted(
        rel for rel in (to_project_rel(config.root, f) for f in files) if rel
    )


def run_build(config: ProjectConfig, progress: ProgressCallback | None = None) -> BuildResult:
    """Scan, extract, resolve and persist the dependency graph."""
    config.validate_for_build()

    if progress:
        progress("Building", 0, 1)
    skip_dirs = list(DEFAULT_SKIP_DIRS)
    if config.cache_dir.name not in skip_dirs:
        skip_dirs.append(config.cache_dir.name)

    builder = DependencyGraphBuilder(config.language, concurrency=config.concurrency)
    result = builder.build_project(
        config.root,
        config.src.dirs,
        pattern=config.src.pattern,
        ignore=config.src.ignore,
        skip_dirs=skip_dirs,
    )
    if progress:
        progress("Building", 1, 1)

    if progress:
        progress("Saving", 0, 1)
    save_graph(result.graph, config.graph_path)
    if progress:
        progress("Saving", 1, 1)
    return result


def run_impact(
    config: ProjectConfig,
    changed: Iterable[str],
    depth=DEFAULT_IMPACT_DEPTH,
) -> ImpactResult:
    graph = load_snapshot(config)
    return analyze_impact(
        graph,
        _project_paths(config, changed),
        depth,
        test_map=_test_map(config),
    )


def run_stale(
    config: ProjectConfig,
    changed: Iterable[str] | None = None,
    depth=DEFAULT_STALE_DEPTH,
    tests: bool = False,
) -> StaleResult:
    graph = load_snapshot(config)
    return analyze_stale(
        graph,
        config.root,
        changed,
        depth,
        tests=tests,
        test_map=_test_map(config) if tests else None,
        concurrency=max(config.concurrency, MTIME_CONCURRENCY),
    )


def run_prioritize(
    config: ProjectConfig,
    failing_tests: Iterable[str] | None = None,
    save: bool = True,
) -> PriorityResult:
    """Rank failing source files. Without explicit tests, reads the test-result artifact."""
    graph = load_snapshot(config)
    tests = list(failing_tests or [])
    if not tests:
        tests = load_failing_tests(config.test_result_path)

    test_map = _test_map(config)
    if test_map is None:
        logger.warning("No test map at %s; every failing test is unmapped", config.test_map_path)
        test_map = TestMap()

    result = prioritize_fixes(graph, tests, test_map, config.directory_rules)
    if save:
        save_report(result.to_dict(), config.fix_plan_path)
    return result


def run_query(
    config: ProjectConfig,
    needle: str,
    max_depth: int = DEFAULT_QUERY_DEPTH,
) -> list[DependencyQuery]:
    """Query every graph file matching ``needle``."""
    graph = load_snapshot(config)
    return [query_dependencies(graph, f, max_depth) for f in find_files(graph, needle)]


def run_check(
    config: ProjectConfig,
    orphans: bool = False,
    file: str | None = None,
) -> CheckReport:
    graph = load_snapshot(config)
    report = CheckReport(cycles=list(graph.cycles))
    if orphans:
        report.orphans = list_orphans(graph)
    if file:
        report.file = query_dependencies(graph, find_files(graph, file)[0], max_depth=1)
    return report
