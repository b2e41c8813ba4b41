"""Fix prioritizer: rank failing source files so cascading fixes come first."""

from __future__ import annotations

from typing import Iterable

from code_deps.analysis.test_map import TestMap
from code_deps.config import DirectoryRule, match_directory_rule
from code_deps.models import DependencyGraph, FixBatch, FixPriority, PriorityResult
from code_deps.paths import normalize_rel, unique_sorted

ROOT_CAUSE_LIMIT = 10
BATCH_SIZE = 5
SUGGESTED_ORDER_LIMIT = 20


def group_failures(
    failing_tests: Iterable[str],
    test_map: TestMap,
) -> tuple[dict[str, list[str]], list[str]]:
    """Map failing tests to their source file. Returns ``(by_source, unmapped)``."""
    by_source: dict[str, list[str]] = {}
    unmapped: list[str] = []
    for test in unique_sorted(normalize_rel(t) for t in failing_tests):
        source = test_map.source_for(test)
        if source is None:
            unmapped.append(test)
            continue
        by_source.setdefault(source, []).append(test)
    return by_source, unmapped


def rank_failures(
    graph: DependencyGraph,
    failures: dict[str, list[str]],
    directory_rules: dict[str, DirectoryRule] | None = None,
) -> list[FixPriority]:
    """Score each failing source file and sort into remediation order."""
    ranked: list[FixPriority] = []
    for file, tests in failures.items():
        importers = graph.importers_of(file)
        potential = sum(len(failures[dep]) for dep in importers if dep in failures)
        rule = match_directory_rule(file, directory_rules) if directory_rules else None
        ranked.append(FixPriority(
            file=file,
            dependents=len(importers),
            failing_tests=tuple(tests),
            potential_fixes=potential,
            directory_rule=rule.path if rule else None,
            priority=rule.priority if rule else None,
            test_focus=rule.test_focus if rule else None,
        ))

    ranked.sort(key=lambda p: (-p.dependents, -p.potential_fixes, -p.failure_count, p.file))
    return ranked


def prioritize_fixes(
    graph: DependencyGraph,
    failing_tests: Iterable[str],
    test_map: TestMap,
    directory_rules: dict[str, DirectoryRule] | None = None,
) -> PriorityResult:
    """Build the fix plan.

    Root causes (files other files import) come first, capped to the top 10.
    Files nobody imports are listed as leaf nodes and also grouped into
    batches of five for parallel remediation.
    """
    tests = unique_sorted(normalize_rel(t) for t in failing_tests)
    failures, unmapped = group_failures(tests, test_map)
    ranked = rank_failures(graph, failures, directory_rules)

    leaves = [p for p in ranked if p.dependents == 0]
    batches = [
        FixBatch(
            files=tuple(p.file for p in chunk),
            tests=sum(p.failure_count for p in chunk),
        )
        for chunk in (leaves[i:i + BATCH_SIZE] for i in range(0, len(leaves), BATCH_SIZE))
    ]

    return PriorityResult(
        total_failing=len(tests),
        source_files=len(failures),
        root_causes=[p for p in ranked if p.dependents > 0][:ROOT_CAUSE_LIMIT],
        independent=batches,
        leaf_nodes=leaves,
        suggested_order=[p.file for p in ranked[:SUGGESTED_ORDER_LIMIT]],
        unmapped_tests=unmapped,
    )
