"""Data models for the dependency graph and the reports built on it."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping


class Language(enum.Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    GO = "go"
    RUST = "rust"


# ── Graph snapshot ───────────────────────────────────────────


@dataclass(frozen=True)
class FileNode:
    path: str
    imports: frozenset[str] = frozenset()
    imported_by: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Cycle:
    """One elementary cycle, in DFS discovery order."""
    files: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class GraphStats:
    total_files: int = 0
    total_edges: int = 0
    cycle_count: int = 0


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable file-level dependency snapshot.

    Every edge a -> b has b in ``files`` and a in ``files[b].imported_by``.
    ``files`` is stored as a read-only mapping.
    """
    generated_at: datetime
    root_path: str
    target_language: Language
    files: Mapping[str, FileNode] = field(default_factory=dict)
    cycles: tuple[Cycle, ...] = ()
    stats: GraphStats = field(default_factory=GraphStats)
    version: int = 1

    def __post_init__(self):
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def node(self, path: str) -> FileNode | None:
        return self.files.get(path)

    def imports_of(self, path: str) -> frozenset[str]:
        node = self.files.get(path)
        return node.imports if node else frozenset()

    def importers_of(self, path: str) -> frozenset[str]:
        node = self.files.get(path)
        return node.imported_by if node else frozenset()


# ── Impact ───────────────────────────────────────────────────


@dataclass(frozen=True)
class HighRiskFile:
    file: str
    affected_count: int


@dataclass
class ImpactResult:
    changed: list[str]
    depth: int
    l1: set[str] = field(default_factory=set)
    l2: set[str] = field(default_factory=set)
    affected: set[str] = field(default_factory=set)
    high_risk: list[HighRiskFile] = field(default_factory=list)
    module_breakdown: dict[str, int] = field(default_factory=dict)
    test_files: list[str] | None = None
    direct_dependents: int | None = None

    def to_dict(self) -> dict:
        data: dict = {"changed": list(self.changed), "depth": self.depth}
        if len(self.changed) == 1:
            data["file"] = self.changed[0]
            if self.direct_dependents is not None:
                data["directDependents"] = self.direct_dependents
        data["impact"] = {
            "L1": sorted(self.l1),
            "L2": sorted(self.l2),
            "total": len(self.affected),
        }
        data["highRisk"] = [
            {"file": h.file, "affectedCount": h.affected_count} for h in self.high_risk
        ]
        data["moduleBreakdown"] = dict(self.module_breakdown)
        if self.test_files is not None:
            data["testFiles"] = list(self.test_files)
        data["totalAffected"] = len(self.affected)
        data["affected"] = sorted(self.affected)
        return data


# ── Stale propagation ────────────────────────────────────────


@dataclass(frozen=True)
class DirectStale:
    file: str
    mtime: datetime | None = None


@dataclass(frozen=True)
class PropagatedStale:
    file: str
    level: int
    source: str


@dataclass
class StaleSummary:
    direct: int = 0
    propagated: int = 0
    by_level: dict[int, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.direct + self.propagated


@dataclass
class StaleResult:
    depth: int
    generated_at: datetime
    direct_stale: list[DirectStale] = field(default_factory=list)
    propagated_stale: list[PropagatedStale] = field(default_factory=list)
    summary: StaleSummary = field(default_factory=StaleSummary)
    tests_to_run: list[str] | None = None
    ignored_changed: list[str] = field(default_factory=list)

    @property
    def stale_files(self) -> list[str]:
        files = {d.file for d in self.direct_stale}
        files.update(p.file for p in self.propagated_stale)
        return sorted(files)

    def to_dict(self) -> dict:
        summary: dict = {
            "direct": self.summary.direct,
            "propagated": self.summary.propagated,
            "total": self.summary.total,
        }
        for level in range(1, self.depth + 1):
            summary[f"L{level}"] = self.summary.by_level.get(level, 0)

        data: dict = {
            "depth": self.depth,
            "generatedAt": self.generated_at.isoformat(),
            "directStale": [
                {"file": d.file, "mtime": d.mtime.isoformat() if d.mtime else None}
                for d in self.direct_stale
            ],
            "propagatedStale": [
                {"file": p.file, "level": p.level, "source": p.source}
                for p in self.propagated_stale
            ],
            "summary": summary,
            "staleFiles": self.stale_files,
            "totalStale": len(self.stale_files),
        }
        if self.tests_to_run is not None:
            data["testsToRun"] = list(self.tests_to_run)
        if self.ignored_changed:
            data["ignoredChanged"] = list(self.ignored_changed)
        return data


# ── Fix prioritization ───────────────────────────────────────


@dataclass(frozen=True)
class FixPriority:
    file: str
    dependents: int
    failing_tests: tuple[str, ...]
    potential_fixes: int
    directory_rule: str | None = None
    priority: str | None = None
    test_focus: tuple[str, ...] | None = None

    @property
    def failure_count(self) -> int:
        return len(self.failing_tests)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "dependents": self.dependents,
            "failingTests": list(self.failing_tests),
            "potentialFixes": self.potential_fixes,
            "directoryRule": self.directory_rule,
            "priority": self.priority,
            "testFocus": list(self.test_focus) if self.test_focus is not None else None,
        }


@dataclass(frozen=True)
class FixBatch:
    files: tuple[str, ...]
    tests: int


@dataclass
class PriorityResult:
    total_failing: int
    source_files: int
    root_causes: list[FixPriority] = field(default_factory=list)
    independent: list[FixBatch] = field(default_factory=list)
    leaf_nodes: list[FixPriority] = field(default_factory=list)
    suggested_order: list[str] = field(default_factory=list)
    unmapped_tests: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalFailing": self.total_failing,
            "sourceFiles": self.source_files,
            "rootCauses": [p.to_dict() for p in self.root_causes],
            "independentBatches": [
                {"files": list(b.files), "tests": b.tests} for b in self.independent
            ],
            "leafNodes": [
                {
                    "file": p.file,
                    "tests": p.failure_count,
                    "directoryRule": p.directory_rule,
                    "testFocus": list(p.test_focus) if p.test_focus is not None else None,
                }
                for p in self.leaf_nodes
            ],
            "suggestedOrder": list(self.suggested_order),
            "unmappedTests": list(self.unmapped_tests),
        }


# ── Query ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ChainLink:
    file: str
    depth: int
    via: str


@dataclass
class DependencyQuery:
    file: str
    imports: list[str] = field(default_factory=list)
    imports_chain: list[ChainLink] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)
    imported_by_chain: list[ChainLink] = field(default_factory=list)

    def to_dict(self) -> dict:
        def chain(links: list[ChainLink]) -> list[dict]:
            return [{"file": c.file, "depth": c.depth, "via": c.via} for c in links]

        return {
            "file": self.file,
            "imports": {
                "direct": list(self.imports),
                "chain": chain(self.imports_chain),
                "totalUnique": len({c.file for c in self.imports_chain}),
            },
            "importedBy": {
                "direct": list(self.imported_by),
                "chain": chain(self.imported_by_chain),
                "totalUnique": len({c.file for c in self.imported_by_chain}),
            },
        }
